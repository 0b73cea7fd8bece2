"""
app/mappers/field_mapper.py

Maps dialect-specific rows onto candidate property records.

Header resolution happens once per batch (``resolve``); ``map_row`` then
coerces one row: decimals parsed, sentinels dropped, fallback chains and
placeholders applied, enums translated. Dates are passed through as raw
strings and parsed by the record validator.
"""

from __future__ import annotations

import logging
import re
import unicodedata
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from difflib import SequenceMatcher
from typing import Mapping, Sequence

from app.domain.price_batch import (
    CandidateRecord,
    MappedRow,
    MappingDiagnostic,
    PropertyStatus,
    PropertyType,
    RejectReason,
    TabularRow,
)
from app.mappers.dialects import SOURCE_FIELDS, Dialect

logger = logging.getLogger(__name__)

ABSENT_MARKERS = frozenset({"X", "#VALUE!"})
SOLD_MARKERS = frozenset({"X", "x"})
PLACEHOLDER_AMOUNT = Decimal("1")
MIN_COLUMN_SHARE = 0.5

_WHITESPACE = re.compile(r"\s+")
_NON_NUMERIC = re.compile(r"[^0-9.\-]")
_CENTS = Decimal("0.01")
_WORD = re.compile(r"\w+")
_SOLD_WORD_PREFIXES = ("sprzedan",)
_SOLD_WORDS = frozenset({"sold"})
_RESERVED_WORD_PREFIXES = ("rezerw", "reserv")

PLACEHOLDER_APPLIED = "placeholder_applied"
DERIVED_VALUE = "derived_value"
UNPARSABLE_VALUE = "unparsable_value"
REJECTED = "rejected"


def normalize_header(header: str) -> str:
    """
    Normalize a column name for flexible matching.

    Case, punctuation, whitespace and Polish diacritics are ignored, so
    ``"Cena za m²"`` and ``"cena_za_m2"`` compare equal.
    """

    folded = unicodedata.normalize("NFKD", header.strip().lower().replace("ł", "l"))
    return "".join(ch for ch in folded if ch.isalnum())


def is_absent(value: str | None) -> bool:
    """
    True for missing cells and the spreadsheet sentinels standing in for them.
    """

    if value is None:
        return True
    stripped = value.strip()
    return not stripped or stripped.upper() in ABSENT_MARKERS


def parse_decimal(value: str | None) -> Decimal | None:
    """
    Parse a price or area cell; returns None for sentinels and garbage.
    """

    if is_absent(value):
        return None

    text = _WHITESPACE.sub("", str(value))
    if "," in text and "." in text:
        if text.rfind(",") > text.rfind("."):
            text = text.replace(".", "").replace(",", ".")
        else:
            text = text.replace(",", "")
    elif text.count(",") > 1:
        text = text.replace(",", "")
    else:
        text = text.replace(",", ".")
    if text.count(".") > 1:
        text = text.replace(".", "")

    text = _NON_NUMERIC.sub("", text)
    if not text or text in {"-", "."}:
        return None
    try:
        parsed = Decimal(text)
    except InvalidOperation:
        return None
    if not parsed.is_finite():
        return None
    return parsed


def parse_integer(value: str | None) -> int | None:
    parsed = parse_decimal(value)
    if parsed is None:
        return None
    return int(parsed)


@dataclass(frozen=True)
class ColumnResolution:
    """
    Source field -> header mapping resolved once for a batch.
    """

    dialect_name: str
    field_to_header: dict[str, str]
    source_headers: tuple[str, ...]
    match_strategies: dict[str, str]
    header_count: int


class FieldMapper:
    """
    Resolves headers and converts rows into candidate records.
    """

    def __init__(self, *, fuzzy_threshold: float = 0.84) -> None:
        self._fuzzy_threshold = max(0.0, min(1.0, fuzzy_threshold))

    def resolve(self, headers: Sequence[str], dialect: Dialect) -> ColumnResolution:
        """
        Resolve source fields to headers for one dialect.

        Exact alias matches are taken for every field before any fuzzy
        matching runs, so a fuzzy guess never steals a header that an exact
        alias claims.
        """

        source_headers = tuple(header for header in headers if header and header.strip())
        normalized_header_lookup: dict[str, str] = {}
        for header in source_headers:
            normalized = normalize_header(header)
            if normalized:
                normalized_header_lookup.setdefault(normalized, header)

        resolved: dict[str, str] = {}
        strategies: dict[str, str] = {}
        used_headers: set[str] = set()

        for source_field in SOURCE_FIELDS:
            exact = self._find_exact_or_alias_match(
                candidates=dialect.aliases_for(source_field),
                normalized_header_lookup=normalized_header_lookup,
            )
            if exact is not None and exact not in used_headers:
                resolved[source_field] = exact
                strategies[source_field] = "exact_or_alias"
                used_headers.add(exact)

        if dialect.fuzzy_matching:
            for source_field in SOURCE_FIELDS:
                if source_field in resolved:
                    continue
                fuzzy_match = self._find_best_fuzzy_match(
                    candidates=dialect.aliases_for(source_field),
                    normalized_header_lookup=normalized_header_lookup,
                    used_headers=used_headers,
                )
                if fuzzy_match is not None:
                    resolved[source_field] = fuzzy_match
                    strategies[source_field] = "fuzzy"
                    used_headers.add(fuzzy_match)

        logger.debug(
            "Resolved %d/%d fields for dialect=%s",
            len(resolved),
            len(SOURCE_FIELDS),
            dialect.name,
        )
        return ColumnResolution(
            dialect_name=dialect.name,
            field_to_header=resolved,
            source_headers=source_headers,
            match_strategies=strategies,
            header_count=len(headers),
        )

    def map_row(
        self,
        row: TabularRow,
        dialect: Dialect,
        resolution: ColumnResolution | None = None,
    ) -> tuple[CandidateRecord | None, list[MappingDiagnostic]]:
        """
        Map one row. Returns (None, diagnostics) when the row cannot be used.
        """

        if resolution is None:
            resolution = self.resolve(tuple(row.cells.keys()), dialect)

        if all(not value.strip() for value in row.cells.values()):
            return None, [_rejection(RejectReason.EMPTY_OR_UNMAPPABLE)]
        if resolution.header_count and row.column_count < resolution.header_count * MIN_COLUMN_SHARE:
            return None, [
                _rejection(
                    RejectReason.INSUFFICIENT_COLUMNS,
                    f"{row.column_count} of {resolution.header_count} columns",
                )
            ]

        raw = {
            source_field: row.cells.get(header)
            for source_field, header in resolution.field_to_header.items()
        }
        if all(is_absent(value) for value in raw.values()):
            return None, [_rejection(RejectReason.EMPTY_OR_UNMAPPABLE)]

        diagnostics: list[MappingDiagnostic] = []
        amounts = {
            source_field: self._decimal_field(raw, source_field, diagnostics)
            for source_field in ("usable_area", "price_per_m2", "total_price", "base_price", "final_price")
        }

        price_per_m2 = self._first_present(
            "price_per_m2",
            (
                ("price_per_m2", amounts["price_per_m2"]),
                ("final_price", amounts["final_price"]),
            ),
            diagnostics,
        )
        base_price = self._first_present(
            "base_price",
            (
                ("base_price", amounts["base_price"]),
                ("total_price", amounts["total_price"]),
                ("final_price", amounts["final_price"]),
            ),
            diagnostics,
        )
        final_price = self._first_present(
            "final_price",
            (
                ("final_price", amounts["final_price"]),
                ("total_price", amounts["total_price"]),
            ),
            diagnostics,
        )
        usable_area = self._first_present(
            "usable_area",
            (
                ("usable_area", amounts["usable_area"]),
                ("total_price / price_per_m2", _derive_area(amounts["total_price"], amounts["price_per_m2"])),
            ),
            diagnostics,
        )

        price_valid_from = _text(raw.get("price_valid_from"), sentinels=True)
        candidate = CandidateRecord(
            region=_text(raw.get("region")),
            county=_text(raw.get("county")),
            municipality=_text(raw.get("municipality")),
            unit_identifier=_text(raw.get("unit_identifier")),
            usable_area=usable_area,
            price_per_m2=price_per_m2,
            base_price=base_price,
            final_price=final_price,
            property_type=_property_type(raw.get("property_type")),
            status=self._status(raw, dialect),
            price_valid_from=price_valid_from,
            base_price_valid_from=_text(raw.get("base_price_valid_from"), sentinels=True) or price_valid_from,
            final_price_valid_from=_text(raw.get("final_price_valid_from"), sentinels=True) or price_valid_from,
            locality=_text(raw.get("locality")),
            street=_text(raw.get("street")),
            building_number=_text(raw.get("building_number")),
            postal_code=_text(raw.get("postal_code")),
            parking_type=_text(raw.get("parking_type")),
            parking_designation=_text(raw.get("parking_designation")),
            parking_price=self._decimal_field(raw, "parking_price", diagnostics),
            parking_date=_text(raw.get("parking_date"), sentinels=True),
            storage_type=_text(raw.get("storage_type")),
            storage_designation=_text(raw.get("storage_designation")),
            storage_price=self._decimal_field(raw, "storage_price", diagnostics),
            storage_date=_text(raw.get("storage_date"), sentinels=True),
            necessary_rights_type=_text(raw.get("necessary_rights_type")),
            necessary_rights_description=_text(raw.get("necessary_rights_description")),
            necessary_rights_price=self._decimal_field(raw, "necessary_rights_price", diagnostics),
            necessary_rights_date=_text(raw.get("necessary_rights_date"), sentinels=True),
            other_services_type=_text(raw.get("other_services_type")),
            other_services_price=self._decimal_field(raw, "other_services_price", diagnostics),
            prospectus_url=_text(raw.get("prospectus_url")),
            rooms=parse_integer(raw.get("rooms")),
            floor=parse_integer(raw.get("floor")),
            project_name=_text(raw.get("project_name")),
        )
        return candidate, diagnostics

    def map_to_row(
        self,
        row: TabularRow,
        dialect: Dialect,
        resolution: ColumnResolution | None = None,
    ) -> MappedRow:
        """
        Same as ``map_row`` but packaged with the row index and reasons.
        """

        candidate, diagnostics = self.map_row(row, dialect, resolution)
        reasons = tuple(
            diagnostic.field_name
            for diagnostic in diagnostics
            if diagnostic.kind == REJECTED
        )
        return MappedRow(
            row_index=row.row_index,
            candidate=candidate,
            reasons=reasons,
            diagnostics=tuple(diagnostic for diagnostic in diagnostics if diagnostic.kind != REJECTED),
        )

    # ------------------------------------------------------------------
    # Coercion helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _decimal_field(
        raw: Mapping[str, str | None],
        source_field: str,
        diagnostics: list[MappingDiagnostic],
    ) -> Decimal | None:
        value = raw.get(source_field)
        parsed = parse_decimal(value)
        if parsed is None and not is_absent(value):
            diagnostics.append(
                MappingDiagnostic(field_name=source_field, kind=UNPARSABLE_VALUE, detail=str(value).strip())
            )
        return parsed

    @staticmethod
    def _first_present(
        target_field: str,
        chain: Sequence[tuple[str, Decimal | None]],
        diagnostics: list[MappingDiagnostic],
    ) -> Decimal:
        for position, (source, value) in enumerate(chain):
            if value is None:
                continue
            if position > 0:
                diagnostics.append(MappingDiagnostic(field_name=target_field, kind=DERIVED_VALUE, detail=source))
            return value
        diagnostics.append(
            MappingDiagnostic(field_name=target_field, kind=PLACEHOLDER_APPLIED, detail=str(PLACEHOLDER_AMOUNT))
        )
        return PLACEHOLDER_AMOUNT

    @staticmethod
    def _status(raw: Mapping[str, str | None], dialect: Dialect) -> str:
        value = raw.get("status")
        if value is not None and value.strip():
            stripped = value.strip()
            if stripped in SOLD_MARKERS:
                return PropertyStatus.SOLD
            words = _WORD.findall(stripped.lower())
            # "W sprzedaży" means on sale; only "sprzedan-" forms mean sold.
            if any(word in _SOLD_WORDS or word.startswith(_SOLD_WORD_PREFIXES) for word in words):
                return PropertyStatus.SOLD
            if any(word.startswith(_RESERVED_WORD_PREFIXES) for word in words):
                return PropertyStatus.RESERVED
            return PropertyStatus.AVAILABLE

        for source_field in dialect.sold_marker_fields:
            marker = raw.get(source_field)
            if marker is not None and marker.strip() in SOLD_MARKERS:
                return PropertyStatus.SOLD
        return PropertyStatus.AVAILABLE

    # ------------------------------------------------------------------
    # Header matching
    # ------------------------------------------------------------------

    @staticmethod
    def _find_exact_or_alias_match(
        *,
        candidates: Sequence[str],
        normalized_header_lookup: Mapping[str, str],
    ) -> str | None:
        for candidate in candidates:
            match = normalized_header_lookup.get(normalize_header(candidate))
            if match:
                return match
        return None

    def _find_best_fuzzy_match(
        self,
        *,
        candidates: Sequence[str],
        normalized_header_lookup: Mapping[str, str],
        used_headers: set[str],
    ) -> str | None:
        normalized_candidates = [normalize_header(item) for item in candidates if normalize_header(item)]
        if not normalized_candidates:
            return None

        best_header: str | None = None
        best_score = 0.0
        for header_norm, header_raw in normalized_header_lookup.items():
            if header_raw in used_headers:
                continue
            for candidate in normalized_candidates:
                score = SequenceMatcher(None, header_norm, candidate).ratio()
                # Very short aliases ("nr", "ul") would be contained in almost anything.
                if len(candidate) >= 4 and (header_norm in candidate or candidate in header_norm):
                    score = max(score, 0.9)
                if score > best_score:
                    best_score = score
                    best_header = header_raw

        if best_header is not None and best_score >= self._fuzzy_threshold:
            return best_header
        return None


def _rejection(reason: str, detail: str | None = None) -> MappingDiagnostic:
    return MappingDiagnostic(field_name=reason, kind=REJECTED, detail=detail)


def _text(value: str | None, *, sentinels: bool = False) -> str | None:
    if value is None:
        return None
    if sentinels and is_absent(value):
        return None
    stripped = value.strip()
    return stripped or None


def _property_type(value: str | None) -> str:
    if value is not None and value.strip().lower() == "dom jednorodzinny":
        return PropertyType.HOUSE
    return PropertyType.APARTMENT


def _derive_area(total_price: Decimal | None, price_per_m2: Decimal | None) -> Decimal | None:
    if total_price is None or price_per_m2 is None or price_per_m2 == 0:
        return None
    return (total_price / price_per_m2).quantize(_CENTS, rounding=ROUND_HALF_UP)
