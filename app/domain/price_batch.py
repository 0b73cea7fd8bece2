"""
app/domain/price_batch.py

Domain models used by the price-list ingestion flow.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from pathlib import PurePath


class Encoding:
    UTF8_BOM = "utf-8-bom"
    UTF8 = "utf-8"
    WINDOWS_1250 = "windows-1250"
    ISO_8859_2 = "iso-8859-2"
    UTF8_FALLBACK = "utf-8-fallback"


class Confidence:
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class PropertyType:
    APARTMENT = "apartment"
    HOUSE = "house"


class PropertyStatus:
    AVAILABLE = "available"
    RESERVED = "reserved"
    SOLD = "sold"


class RejectReason:
    EMPTY_OR_UNMAPPABLE = "empty-or-unmappable"
    INSUFFICIENT_COLUMNS = "insufficient-columns"
    MISSING_LOCATION_FIELDS = "missing-location-fields"
    NEGATIVE_NUMERIC_FIELD = "negative-numeric-field"
    MALFORMED_DATE = "malformed-date"
    VALUE_EXCEEDS_COLUMN_LIMIT = "value-exceeds-column-limit"


@dataclass(frozen=True)
class RawBatch:
    """
    One uploaded file as received.
    """

    content: bytes
    file_name: str

    @property
    def extension(self) -> str:
        return PurePath(self.file_name or "").suffix.lower().lstrip(".")


@dataclass(frozen=True)
class DecodedText:
    """
    Text produced by the byte decoder plus how it was obtained.
    """

    content: str
    encoding: str
    confidence: str
    has_extended_chars: bool


@dataclass(frozen=True)
class TabularRow:
    """
    One data row keyed by the header cells of the sheet.

    ``row_index`` is the 1-based line of the row in the sheet (header is 1).
    ``column_count`` is the number of cells the row actually carried.
    """

    row_index: int
    cells: dict[str, str]
    column_count: int


@dataclass(frozen=True)
class TargetHint:
    """
    Caller-supplied hints for target resolution.
    """

    target_id: str | None = None
    name_hint: str | None = None


@dataclass(frozen=True)
class MappingDiagnostic:
    """
    Note about how one canonical field was filled in.
    """

    field_name: str
    kind: str
    detail: str | None = None


@dataclass(frozen=True)
class CandidateRecord:
    """
    Mapper output: amounts coerced and defaulted, dates still raw strings.
    """

    region: str | None
    county: str | None
    municipality: str | None
    unit_identifier: str | None
    usable_area: Decimal
    price_per_m2: Decimal
    base_price: Decimal
    final_price: Decimal
    property_type: str
    status: str
    price_valid_from: str | None = None
    base_price_valid_from: str | None = None
    final_price_valid_from: str | None = None
    locality: str | None = None
    street: str | None = None
    building_number: str | None = None
    postal_code: str | None = None
    parking_type: str | None = None
    parking_designation: str | None = None
    parking_price: Decimal | None = None
    parking_date: str | None = None
    storage_type: str | None = None
    storage_designation: str | None = None
    storage_price: Decimal | None = None
    storage_date: str | None = None
    necessary_rights_type: str | None = None
    necessary_rights_description: str | None = None
    necessary_rights_price: Decimal | None = None
    necessary_rights_date: str | None = None
    other_services_type: str | None = None
    other_services_price: Decimal | None = None
    prospectus_url: str | None = None
    rooms: int | None = None
    floor: int | None = None
    project_name: str | None = None


@dataclass(frozen=True)
class MappedRow:
    """
    Result of mapping one tabular row.

    ``candidate`` is None when the row was rejected by the mapper; the
    reasons are then listed in ``reasons``.
    """

    row_index: int
    candidate: CandidateRecord | None
    reasons: tuple[str, ...] = ()
    diagnostics: tuple[MappingDiagnostic, ...] = ()


@dataclass(frozen=True)
class CanonicalRecord:
    """
    Validated property price record ready for persistence.
    """

    row_index: int
    region: str
    county: str
    municipality: str
    unit_identifier: str
    usable_area: Decimal
    price_per_m2: Decimal
    price_valid_from: date
    base_price: Decimal
    base_price_valid_from: date
    final_price: Decimal
    final_price_valid_from: date
    property_type: str
    status: str
    locality: str | None = None
    street: str | None = None
    building_number: str | None = None
    postal_code: str | None = None
    parking_type: str | None = None
    parking_designation: str | None = None
    parking_price: Decimal | None = None
    parking_date: date | None = None
    storage_type: str | None = None
    storage_designation: str | None = None
    storage_price: Decimal | None = None
    storage_date: date | None = None
    necessary_rights_type: str | None = None
    necessary_rights_description: str | None = None
    necessary_rights_price: Decimal | None = None
    necessary_rights_date: date | None = None
    other_services_type: str | None = None
    other_services_price: Decimal | None = None
    prospectus_url: str | None = None
    rooms: int | None = None
    floor: int | None = None


@dataclass(frozen=True)
class RejectedRow:
    """
    One input row that did not make it into the accepted set.
    """

    row_index: int
    reasons: tuple[str, ...]


@dataclass(frozen=True)
class ValidationOutcome:
    """
    Partition of mapped rows into accepted records and rejections.
    """

    accepted: list[CanonicalRecord] = field(default_factory=list)
    rejected: list[RejectedRow] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.accepted) + len(self.rejected)


@dataclass(frozen=True)
class IngestionReport:
    """
    End-of-run ingestion report.

    ``target_id`` is None when nothing was accepted and no matching project
    existed, so none was created.
    """

    target_id: str | None
    target_name: str
    target_slug: str
    target_created: bool
    replaced_records: int
    accepted_count: int
    total_rows: int
    rejected_rows: list[RejectedRow]
    preview: list[CanonicalRecord]
    detected_format: str
    format_confidence: float
    encoding: str | None
    encoding_confidence: str | None
    mapped_columns: dict[str, str] = field(default_factory=dict)
