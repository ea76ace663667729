"""Exceptions raised by the report comparison pipeline."""

from typing import Optional


class ReportDeltaError(Exception):
    """Base class for every error the comparison pipeline raises."""


class InputError(ReportDeltaError):
    """A required field is missing or blank, or a value cannot be decoded."""


class DocumentFormatError(ReportDeltaError):
    """The supplied bytes are not a readable Word or PDF document."""


class InternalError(ReportDeltaError):
    """
    Unexpected failure while comparing.

    Carries the pipeline stage that failed so callers can report it without
    exposing the original traceback.
    """

    def __init__(self, stage: str, message: str, cause: Optional[BaseException] = None):
        super().__init__(f"{stage}: {message}")
        self.stage = stage
        self.message = message
        self.cause = cause
