"""AEO Grader — brand visibility scoring for AI answer engines."""

__version__ = "1.0.0"
