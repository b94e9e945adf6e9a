"""Exception hierarchy for split planning."""

from __future__ import annotations


class WorkSplitError(Exception):
    """Base class for every error raised by worksplit."""


class NoInputError(WorkSplitError):
    """Raised when planning is asked to run without any references."""


class NotFoundError(WorkSplitError, FileNotFoundError):
    """Raised when a referenced location does not exist in storage."""


class MissingLocalityDataError(WorkSplitError):
    """A descriptor carries no source file path, so it has no locality."""


class DescriptorFormatError(WorkSplitError):
    """Raised when a descriptor file cannot be parsed."""


class CorruptRecordError(WorkSplitError, ValueError):
    """Raised when an encoded split record is structurally invalid."""


class ReaderStateError(WorkSplitError):
    """Raised when a reader is queried outside of a positioned state."""
