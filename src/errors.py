"""
Stitchbook error taxonomy.
All errors are recovered locally and surfaced as a user-visible message;
none of them is retried automatically.
"""


class StitchbookError(Exception):
    """Base class for all domain errors."""


class ValidationError(StitchbookError):
    """A required field is missing or a value is out of policy."""

    def __init__(self, message: str, field: str = ""):
        super().__init__(message)
        self.field = field


class LookupMiss(StitchbookError):
    """No design matches a design number. A no-op branch, not a failure."""

    def __init__(self, design_number: str):
        super().__init__(f"Design number '{design_number}' not found")
        self.design_number = design_number


class RecognitionError(StitchbookError):
    """OCR call failed, timed out, or found no design number."""


class ExportError(StitchbookError):
    """Rendering or writing an exported bill failed."""


class AuthorizationError(StitchbookError):
    """Passphrase rejected or admin session required."""


class StorageError(StitchbookError):
    """A persisted document cannot be read by this version."""
