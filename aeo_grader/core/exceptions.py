"""Error taxonomy shared by the gateway, generator, analyzer and API layer."""

from __future__ import annotations


class GraderError(Exception):
    """Base class for all grader failures surfaced to callers."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ConfigError(GraderError):
    """A required setting (the answer-engine credential) is missing."""


class TransportError(GraderError):
    """The answer engine could not be reached or returned a non-2xx status.

    ``status_code`` is 0 when no HTTP response was received at all
    (timeout, connection refused).
    """

    def __init__(self, message: str, status_code: int = 0, body: str = ""):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class MalformedResponseError(GraderError):
    """The answer engine answered 2xx but the payload shape was unexpected."""


class ParseError(GraderError):
    """Model output is not valid JSON after fence stripping."""


class ValidationError(GraderError):
    """Parsed model output has the wrong shape (e.g. object instead of array)."""
