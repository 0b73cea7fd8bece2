"""
app/mappers/format_classifier.py

Detects which column-naming dialect a price list uses.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

from app.domain.price_batch import TabularRow
from app.logging_utils import log_event
from app.mappers.dialects import DIALECTS, GENERIC, Dialect
from app.mappers.field_mapper import normalize_header

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Classification:
    """
    Detected dialect with a 0-100 confidence score.
    """

    dialect: Dialect
    format_confidence: float
    matched_columns: tuple[str, ...] = ()


class FormatClassifier:
    """
    Scores every known dialect by the share of its signature columns present.
    """

    def __init__(
        self,
        *,
        dialects: Sequence[Dialect] = DIALECTS,
        fallback: Dialect = GENERIC,
        min_confidence: float = 25.0,
    ) -> None:
        self._dialects = tuple(dialects)
        self._fallback = fallback
        self._min_confidence = max(0.0, min(100.0, min_confidence))

    def classify(
        self,
        rows: Sequence[TabularRow],
        *,
        headers: Sequence[str] | None = None,
    ) -> Classification:
        """
        Pick the best-matching dialect for a batch.

        Observed headers come from ``headers`` when given, otherwise from the
        first row. An empty row set always yields the fallback with 0.
        """

        if not rows:
            return Classification(dialect=self._fallback, format_confidence=0.0)

        observed = headers if headers is not None else tuple(rows[0].cells.keys())
        normalized_observed = {normalize_header(header) for header in observed if header}
        normalized_observed.discard("")

        best: Classification | None = None
        scores: dict[str, float] = {}
        for dialect in self._dialects:
            candidate = self._score(dialect, normalized_observed)
            scores[dialect.name] = candidate.format_confidence
            if best is None or candidate.format_confidence > best.format_confidence:
                best = candidate

        if best is None or (
            best.dialect is not self._fallback
            and (best.format_confidence <= 0.0 or best.format_confidence < self._min_confidence)
        ):
            best = self._score(self._fallback, normalized_observed)

        log_event(
            logger,
            logging.INFO,
            "format_classified",
            dialect=best.dialect.name,
            format_confidence=best.format_confidence,
            scores=scores,
        )
        return best

    @staticmethod
    def _score(dialect: Dialect, normalized_observed: set[str]) -> Classification:
        signatures = dialect.signature_columns
        if not signatures:
            return Classification(dialect=dialect, format_confidence=0.0)

        matched = tuple(
            signature
            for signature in signatures
            if normalize_header(signature) in normalized_observed
        )
        confidence = round(len(matched) / len(signatures) * 100.0, 2)
        return Classification(
            dialect=dialect,
            format_confidence=confidence,
            matched_columns=matched,
        )
