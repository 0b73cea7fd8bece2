"""
app/domain package marker.
"""

from app.domain.price_batch import (
    CandidateRecord,
    CanonicalRecord,
    DecodedText,
    IngestionReport,
    MappedRow,
    MappingDiagnostic,
    RawBatch,
    RejectedRow,
    TabularRow,
    TargetHint,
    ValidationOutcome,
)

__all__ = [
    "CandidateRecord",
    "CanonicalRecord",
    "DecodedText",
    "IngestionReport",
    "MappedRow",
    "MappingDiagnostic",
    "RawBatch",
    "RejectedRow",
    "TabularRow",
    "TargetHint",
    "ValidationOutcome",
]
