"""Per-query answer analysis and composite visibility scoring.

  1. Response Analyzer — answer the query, classify the answer for the brand
  2. Score Aggregator — reduce verdicts into the composite score
"""
