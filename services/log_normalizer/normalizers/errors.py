"""Exception hierarchy for the normalisation engine."""
from dataclasses import dataclass


class NormalizerError(Exception):
    """Base class for every per-record failure."""


class UnrecognizedFormatError(NormalizerError):
    def __init__(self, message: str = "unrecognized log format"):
        super().__init__(message)


class MalformedRecordError(NormalizerError):
    """The record looked like a known format but its grammar did not match."""

    def __init__(self, fmt: str, message: str = ""):
        self.format = fmt
        super().__init__(message or f"malformed {fmt} record")


class DocumentDecodeError(MalformedRecordError):
    def __init__(self, message: str):
        super().__init__("xml", f"xml decode failed: {message}")


class UnparsableTimestampError(ValueError):
    """Raised by the timestamp helpers; parsers fall back to processing time."""


@dataclass(frozen=True)
class RecordError:
    """A failed batch record with its 1-based position in the input."""

    line_number: int
    cause: Exception

    def __str__(self) -> str:
        return f"line {self.line_number}: {self.cause}"
