"""
app/validators package marker.
"""

from app.validators.record_validator import RecordValidator, parse_date

__all__ = [
    "RecordValidator",
    "parse_date",
]
