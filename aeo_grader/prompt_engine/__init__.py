"""Query generation for answer-engine visibility checks."""
