"""
app/mappers package marker.
"""

from app.mappers.dialects import DIALECTS, DIALECTS_BY_NAME, GENERIC, INPRO, MINISTERIAL, Dialect
from app.mappers.field_mapper import ColumnResolution, FieldMapper, normalize_header
from app.mappers.format_classifier import Classification, FormatClassifier

__all__ = [
    "Classification",
    "ColumnResolution",
    "DIALECTS",
    "DIALECTS_BY_NAME",
    "Dialect",
    "FieldMapper",
    "FormatClassifier",
    "GENERIC",
    "INPRO",
    "MINISTERIAL",
    "normalize_header",
]
