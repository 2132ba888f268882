"""Error taxonomy shared by the gate, parser, cache and orchestrator."""
from enum import Enum


class ExamTutorError(Exception):
    pass


class ValidationReason(Enum):
    NOT_AN_IMAGE = "not_an_image"
    TOO_LARGE = "too_large"


class ValidationError(ExamTutorError):
    """Candidate image rejected before entering the pipeline."""

    def __init__(self, reason: ValidationReason, message: str) -> None:
        super().__init__(message)
        self.reason = reason
        self.message = message


class MalformedResponse(ExamTutorError):
    """Model output could not be decoded into an analysis result."""

    def __init__(self, message: str, raw_text: str) -> None:
        super().__init__(message)
        self.raw_text = raw_text


class TransportError(ExamTutorError):
    """Any failure raised by the analysis backend."""


class StorageError(ExamTutorError):
    """Persistent write rejected for lack of capacity."""
