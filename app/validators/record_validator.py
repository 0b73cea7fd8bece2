"""
app/validators/record_validator.py

Row-level validation of candidate property records.
"""

from __future__ import annotations

import itertools
import logging
import threading
import time
from dataclasses import dataclass, fields
from datetime import date, datetime
from decimal import Decimal
from typing import Iterable

from sqlalchemy import Integer, Numeric, String, Table

from app.domain.price_batch import (
    CandidateRecord,
    CanonicalRecord,
    MappedRow,
    RejectReason,
    RejectedRow,
    ValidationOutcome,
)
from db.models.property_record import PropertyRecord

logger = logging.getLogger(__name__)

DATE_FORMATS: tuple[str, ...] = (
    "%Y-%m-%d",
    "%Y/%m/%d",
    "%d.%m.%Y",
    "%d-%m-%Y",
    "%d/%m/%Y",
    "%Y-%m-%d %H:%M:%S",
    "%d.%m.%Y %H:%M:%S",
)

NON_NEGATIVE_FIELDS: tuple[str, ...] = (
    "usable_area",
    "price_per_m2",
    "base_price",
    "final_price",
    "parking_price",
    "storage_price",
    "necessary_rights_price",
    "other_services_price",
    "rooms",
)

_REQUIRED_DATES: tuple[str, ...] = (
    "price_valid_from",
    "base_price_valid_from",
    "final_price_valid_from",
)

_OPTIONAL_DATES: tuple[str, ...] = (
    "parking_date",
    "storage_date",
    "necessary_rights_date",
)

_CANONICAL_FIELD_NAMES = frozenset(item.name for item in fields(CanonicalRecord))

# 32-bit signed INTEGER range.
_INTEGER_MAX = 2**31 - 1


@dataclass(frozen=True)
class ColumnLimits:
    """
    Storage bounds of the record table, keyed by canonical field name.

    ``text_lengths`` maps string fields to their maximum length and
    ``integer_digits`` maps numeric fields to the digits allowed before the
    decimal point.
    """

    text_lengths: dict[str, int]
    integer_digits: dict[str, int]
    integer_fields: frozenset[str]

    @classmethod
    def from_table(cls, table: Table) -> "ColumnLimits":
        text_lengths: dict[str, int] = {}
        integer_digits: dict[str, int] = {}
        integer_fields: set[str] = set()
        for column in table.columns:
            if column.name not in _CANONICAL_FIELD_NAMES:
                continue
            column_type = column.type
            if isinstance(column_type, String) and column_type.length:
                text_lengths[column.name] = column_type.length
            elif isinstance(column_type, Numeric) and column_type.precision is not None:
                integer_digits[column.name] = column_type.precision - (column_type.scale or 0)
            elif isinstance(column_type, Integer):
                integer_fields.add(column.name)
        return cls(
            text_lengths=text_lengths,
            integer_digits=integer_digits,
            integer_fields=frozenset(integer_fields),
        )

    def violations(self, candidate: CandidateRecord) -> list[str]:
        """
        Names of the candidate fields that would not fit their columns.
        """

        violated: list[str] = []
        for name, length in self.text_lengths.items():
            value = getattr(candidate, name, None)
            if isinstance(value, str) and len(value) > length:
                violated.append(name)
        for name, digits in self.integer_digits.items():
            value = getattr(candidate, name, None)
            if value is not None and abs(value) >= Decimal(10) ** digits:
                violated.append(name)
        for name in self.integer_fields:
            value = getattr(candidate, name, None)
            if value is not None and abs(value) > _INTEGER_MAX:
                violated.append(name)
        return violated


PROPERTY_RECORD_LIMITS = ColumnLimits.from_table(PropertyRecord.__table__)


def parse_date(value: str) -> date | None:
    """
    Parse one date cell; returns None when no accepted format matches.
    """

    raw = value.strip()
    normalized = raw[:-1] + "+00:00" if raw.endswith("Z") else raw
    try:
        return datetime.fromisoformat(normalized).date()
    except ValueError:
        pass

    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(raw, fmt).date()
        except ValueError:
            continue
    return None


class RecordValidator:
    """
    Splits mapped rows into canonical records and rejections.

    Unit identifiers missing from the source are synthesized as
    ``Property-<epoch ms>-<seq>``; the sequence is shared by every call on
    one validator instance, so placeholders never repeat within it.
    """

    def __init__(
        self,
        *,
        log_rejected_rows: bool = True,
        column_limits: ColumnLimits = PROPERTY_RECORD_LIMITS,
    ) -> None:
        self._log_rejected_rows = log_rejected_rows
        self._column_limits = column_limits
        self._sequence = itertools.count(1)
        self._sequence_lock = threading.Lock()

    def validate(self, mapped_rows: Iterable[MappedRow], as_of: date) -> ValidationOutcome:
        """
        Validate every mapped row; every input row ends up accepted or rejected.
        """

        accepted: list[CanonicalRecord] = []
        rejected: list[RejectedRow] = []
        for mapped_row in mapped_rows:
            record, reasons = self.validate_one(mapped_row, as_of)
            if record is not None:
                accepted.append(record)
            else:
                rejected.append(RejectedRow(row_index=mapped_row.row_index, reasons=reasons))
        return ValidationOutcome(accepted=accepted, rejected=rejected)

    def validate_one(
        self,
        mapped_row: MappedRow,
        as_of: date,
    ) -> tuple[CanonicalRecord | None, tuple[str, ...]]:
        """
        Validate one mapped row. Returns (record, ()) or (None, reasons).
        """

        candidate = mapped_row.candidate
        if candidate is None:
            carried = mapped_row.reasons or (RejectReason.EMPTY_OR_UNMAPPABLE,)
            self._log_rejection(mapped_row.row_index, carried)
            return None, carried

        reasons: list[str] = []
        if not (candidate.region and candidate.county and candidate.municipality):
            reasons.append(RejectReason.MISSING_LOCATION_FIELDS)

        if any(_is_negative(getattr(candidate, name)) for name in NON_NEGATIVE_FIELDS):
            reasons.append(RejectReason.NEGATIVE_NUMERIC_FIELD)

        parsed_dates: dict[str, date | None] = {}
        malformed = False
        for name in (*_REQUIRED_DATES, *_OPTIONAL_DATES):
            raw_value = getattr(candidate, name)
            if raw_value is None:
                parsed_dates[name] = as_of if name in _REQUIRED_DATES else None
                continue
            parsed = parse_date(raw_value)
            if parsed is None:
                malformed = True
            parsed_dates[name] = parsed
        if malformed:
            reasons.append(RejectReason.MALFORMED_DATE)

        oversized = self._column_limits.violations(candidate)
        if oversized:
            logger.debug("Row %s exceeds column limits: %s", mapped_row.row_index, ",".join(oversized))
            reasons.append(RejectReason.VALUE_EXCEEDS_COLUMN_LIMIT)

        if reasons:
            result = tuple(reasons)
            self._log_rejection(mapped_row.row_index, result)
            return None, result

        values = {
            name: getattr(candidate, name)
            for name in _CANONICAL_FIELD_NAMES
            if hasattr(candidate, name)
        }
        values.update(parsed_dates)
        values["row_index"] = mapped_row.row_index
        values["unit_identifier"] = candidate.unit_identifier or self._placeholder_identifier()
        return CanonicalRecord(**values), ()

    def _placeholder_identifier(self) -> str:
        with self._sequence_lock:
            sequence = next(self._sequence)
        return f"Property-{int(time.time() * 1000)}-{sequence}"

    def _log_rejection(self, row_index: int, reasons: tuple[str, ...]) -> None:
        if self._log_rejected_rows:
            logger.warning("Row rejected row=%s reasons=%s", row_index, ",".join(reasons))


def _is_negative(value: Decimal | int | None) -> bool:
    return value is not None and value < 0

