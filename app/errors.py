"""
app/errors.py

Error taxonomy for price-list ingestion.

Per-row problems are never raised; they travel as ``RejectedRow`` values
inside the validation outcome. Everything here aborts the whole upload.
"""

from __future__ import annotations

from typing import Any


class IngestionError(RuntimeError):
    """
    Base class for upload-level ingestion failures.
    """

    code = "ingestion_error"
    retryable = False

    def __init__(self, message: str, *, context: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "code": self.code,
            "message": self.message,
            "retryable": self.retryable,
        }
        if self.context:
            payload["context"] = self.context
        return payload


class UnsupportedFileType(IngestionError):
    """
    Raised when the batch extension is not one of the accepted spreadsheet types.
    """

    code = "unsupported_file_type"


class TargetNotOwned(IngestionError):
    """
    Raised when an explicit target id is unknown or owned by someone else.
    """

    code = "target_not_owned"


class TargetResolutionFailed(IngestionError):
    """
    Raised when the storage layer fails while locating or creating the target.
    """

    code = "target_resolution_failed"


class PersistenceFailed(IngestionError):
    """
    Raised when the replace-and-insert transaction cannot be committed.

    Prior records of the target are left intact, so the upload may be retried.
    """

    code = "persistence_failed"
    retryable = True
