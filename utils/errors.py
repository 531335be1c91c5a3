"""
Defines custom exception classes for the application.

Every exception carries the pipeline ``stage`` it belongs to so that an
aborted review can say which step failed.
"""
from typing import Optional


class AIReviewException(Exception):
    """Base exception class for aireview application."""
    stage = "unknown"

    def __init__(self, message: str, stage: Optional[str] = None):
        super().__init__(message)
        if stage is not None:
            self.stage = stage


class ConfigError(AIReviewException):
    """Raised when there is a configuration error."""
    stage = "config"


class CollectorError(AIReviewException):
    """Raised when an error occurs during context collection."""
    stage = "collect"


class CommitNotFound(CollectorError):
    """Raised when the commit reference cannot be resolved."""
    stage = "commit"


class DiffTooLarge(CollectorError):
    """Raised when a commit diff exceeds the configured ceiling."""
    stage = "commit"

    def __init__(self, size: int, limit: int):
        super().__init__(f"Diff exceeds the {limit} byte limit (stopped reading at {size} bytes).")
        self.size = size
        self.limit = limit


class FileReadFailure(CollectorError):
    """
    Raised when a single file cannot be read.

    Never leaves the collector that reads the file: it is turned into
    sentinel content or a skipped candidate.
    """
    stage = "changeset"

    def __init__(self, path: str, reason: str, detail: str = ""):
        message = f"Could not read '{path}': {reason}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)
        self.path = path
        self.reason = reason


class PayloadAssemblyError(AIReviewException):
    """Raised when the assembled payload would violate one of its invariants."""
    stage = "assemble"


class ProviderError(AIReviewException):
    """Raised when an error occurs with an LLM provider."""
    stage = "review"


class ReviewTimeout(ProviderError):
    """Raised when the review call does not finish within the timeout."""
    pass


class FormatterError(AIReviewException):
    """Raised when an error occurs while rendering a prompt or report."""
    stage = "format"


class ReportError(AIReviewException):
    """Raised when the review report cannot be written."""
    stage = "report"
