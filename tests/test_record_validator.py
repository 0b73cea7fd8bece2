"""
tests/test_record_validator.py

Pytest unit tests for RecordValidator.

Coverage
--------
- Accepted records carry parsed dates and defaults
- Rejection reasons (location, negative numbers, malformed dates)
- Mapper rejections carried through
- Column length and precision limits
- Placeholder unit identifiers
- Every input row accounted for
"""

from __future__ import annotations

import re
from dataclasses import replace
from datetime import date
from decimal import Decimal

import pytest

from app.domain.price_batch import CandidateRecord, MappedRow, RejectReason
from app.validators.record_validator import PROPERTY_RECORD_LIMITS, RecordValidator, parse_date

AS_OF = date(2026, 10, 18)


def _candidate(**overrides: object) -> CandidateRecord:
    base = CandidateRecord(
        region="mazowieckie",
        county="Warszawa",
        municipality="Warszawa",
        unit_identifier="A1",
        usable_area=Decimal("50"),
        price_per_m2=Decimal("10000"),
        base_price=Decimal("500000"),
        final_price=Decimal("500000"),
        property_type="apartment",
        status="available",
    )
    return replace(base, **overrides)


def _mapped(candidate: CandidateRecord | None, row_index: int = 2, reasons: tuple[str, ...] = ()) -> MappedRow:
    return MappedRow(row_index=row_index, candidate=candidate, reasons=reasons)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def validator() -> RecordValidator:
    return RecordValidator(log_rejected_rows=False)


# ---------------------------------------------------------------------------
# Dates
# ---------------------------------------------------------------------------


class TestParseDate:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("2024-03-15", date(2024, 3, 15)),
            ("15.03.2024", date(2024, 3, 15)),
            ("15/03/2024", date(2024, 3, 15)),
            ("2024/03/15", date(2024, 3, 15)),
            ("2024-03-15 10:30:00", date(2024, 3, 15)),
            ("2024-03-15T10:30:00Z", date(2024, 3, 15)),
        ],
    )
    def test_accepted_formats(self, raw: str, expected: date) -> None:
        assert parse_date(raw) == expected

    @pytest.mark.parametrize("raw", ["not-a-date", "2024-13-01", "31.02.2024"])
    def test_malformed_dates(self, raw: str) -> None:
        assert parse_date(raw) is None


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


class TestRecordValidator:
    def test_valid_candidate_is_accepted_with_default_dates(self, validator: RecordValidator) -> None:
        record, reasons = validator.validate_one(_mapped(_candidate()), AS_OF)

        assert reasons == ()
        assert record is not None
        assert record.row_index == 2
        assert record.unit_identifier == "A1"
        assert record.price_valid_from == AS_OF
        assert record.base_price_valid_from == AS_OF
        assert record.final_price_valid_from == AS_OF
        assert record.parking_date is None

    def test_source_dates_are_parsed(self, validator: RecordValidator) -> None:
        candidate = _candidate(price_valid_from="01.02.2026", parking_date="2026-02-03")

        record, _ = validator.validate_one(_mapped(candidate), AS_OF)

        assert record is not None
        assert record.price_valid_from == date(2026, 2, 1)
        assert record.parking_date == date(2026, 2, 3)

    def test_missing_location_is_rejected(self, validator: RecordValidator) -> None:
        record, reasons = validator.validate_one(_mapped(_candidate(county=None)), AS_OF)

        assert record is None
        assert reasons == (RejectReason.MISSING_LOCATION_FIELDS,)

    def test_negative_amount_is_rejected(self, validator: RecordValidator) -> None:
        record, reasons = validator.validate_one(_mapped(_candidate(final_price=Decimal("-1"))), AS_OF)

        assert record is None
        assert reasons == (RejectReason.NEGATIVE_NUMERIC_FIELD,)

    def test_negative_floor_is_allowed(self, validator: RecordValidator) -> None:
        record, _ = validator.validate_one(_mapped(_candidate(floor=-1)), AS_OF)

        assert record is not None
        assert record.floor == -1

    def test_malformed_optional_date_is_rejected(self, validator: RecordValidator) -> None:
        record, reasons = validator.validate_one(_mapped(_candidate(storage_date="soon")), AS_OF)

        assert record is None
        assert reasons == (RejectReason.MALFORMED_DATE,)

    def test_all_reasons_are_collected(self, validator: RecordValidator) -> None:
        candidate = _candidate(region=None, rooms=-2, price_valid_from="??")

        _, reasons = validator.validate_one(_mapped(candidate), AS_OF)

        assert reasons == (
            RejectReason.MISSING_LOCATION_FIELDS,
            RejectReason.NEGATIVE_NUMERIC_FIELD,
            RejectReason.MALFORMED_DATE,
        )

    def test_text_longer_than_its_column_is_rejected(self, validator: RecordValidator) -> None:
        record, reasons = validator.validate_one(_mapped(_candidate(region="m" * 150)), AS_OF)

        assert record is None
        assert reasons == (RejectReason.VALUE_EXCEEDS_COLUMN_LIMIT,)

    def test_amount_with_too_many_integer_digits_is_rejected(self, validator: RecordValidator) -> None:
        candidate = _candidate(base_price=Decimal("123456789012345"))

        record, reasons = validator.validate_one(_mapped(candidate), AS_OF)

        assert record is None
        assert reasons == (RejectReason.VALUE_EXCEEDS_COLUMN_LIMIT,)

    def test_values_at_the_column_limits_are_accepted(self, validator: RecordValidator) -> None:
        candidate = _candidate(
            region="m" * 100,
            unit_identifier="u" * 255,
            final_price=Decimal("999999999999.99"),
        )

        record, reasons = validator.validate_one(_mapped(candidate), AS_OF)

        assert reasons == ()
        assert record is not None

    def test_limits_are_read_from_the_record_table(self) -> None:
        assert PROPERTY_RECORD_LIMITS.text_lengths["region"] == 100
        assert PROPERTY_RECORD_LIMITS.text_lengths["unit_identifier"] == 255
        assert PROPERTY_RECORD_LIMITS.integer_digits["base_price"] == 12
        assert PROPERTY_RECORD_LIMITS.integer_digits["usable_area"] == 10
        assert "rooms" in PROPERTY_RECORD_LIMITS.integer_fields

    def test_oversized_row_does_not_affect_its_neighbours(self, validator: RecordValidator) -> None:
        mapped_rows = [
            _mapped(_candidate(), row_index=2),
            _mapped(_candidate(region="m" * 150, final_price=Decimal("1" * 15)), row_index=3),
            _mapped(_candidate(unit_identifier="A3"), row_index=4),
        ]

        outcome = validator.validate(mapped_rows, AS_OF)

        assert [record.row_index for record in outcome.accepted] == [2, 4]
        assert outcome.rejected[0].reasons == (RejectReason.VALUE_EXCEEDS_COLUMN_LIMIT,)

    def test_mapper_rejection_is_carried_through(self, validator: RecordValidator) -> None:
        mapped = _mapped(None, reasons=(RejectReason.INSUFFICIENT_COLUMNS,))

        record, reasons = validator.validate_one(mapped, AS_OF)

        assert record is None
        assert reasons == (RejectReason.INSUFFICIENT_COLUMNS,)

    def test_missing_unit_identifier_gets_unique_placeholder(self, validator: RecordValidator) -> None:
        first, _ = validator.validate_one(_mapped(_candidate(unit_identifier=None)), AS_OF)
        second, _ = validator.validate_one(_mapped(_candidate(unit_identifier=None), row_index=3), AS_OF)

        assert first is not None and second is not None
        assert re.fullmatch(r"Property-\d+-\d+", first.unit_identifier)
        assert first.unit_identifier != second.unit_identifier

    def test_every_row_is_accepted_or_rejected(self, validator: RecordValidator) -> None:
        mapped_rows = [
            _mapped(_candidate(), row_index=2),
            _mapped(_candidate(region=None), row_index=3),
            _mapped(None, row_index=4, reasons=(RejectReason.EMPTY_OR_UNMAPPABLE,)),
            _mapped(_candidate(unit_identifier="A4"), row_index=5),
        ]

        outcome = validator.validate(mapped_rows, AS_OF)

        assert len(outcome.accepted) == 2
        assert [row.row_index for row in outcome.rejected] == [3, 4]
        assert outcome.total == len(mapped_rows)
