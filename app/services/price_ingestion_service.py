"""
app/services/price_ingestion_service.py

Service layer for price-list ingestion workflow orchestration.

One call runs the whole pipeline for one uploaded file:

    1. read        - extension check, byte decoding, tabular parse
    2. classify    - dialect detection and header resolution (once per batch)
    3. map         - per-row coercion, chunked over a thread pool for big files
    4. validate    - accepted records vs rejected rows
    5. resolve     - find or create the target project for the owner; a batch
                     with no accepted rows never creates one
    6. replace     - delete the target's records and insert the accepted set,
                     in one transaction, serialized per target

Per-row problems never abort the run; they are returned in the report.
"""

from __future__ import annotations

import logging
import time
import uuid
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import date
from functools import lru_cache
from typing import Callable, Sequence

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.config import IngestionSettings, get_ingestion_settings
from app.domain.price_batch import (
    CanonicalRecord,
    IngestionReport,
    MappedRow,
    RawBatch,
    TabularRow,
    TargetHint,
    ValidationOutcome,
)
from app.errors import PersistenceFailed, TargetNotOwned, TargetResolutionFailed, UnsupportedFileType
from app.logging_utils import log_event
from app.mappers.dialects import Dialect
from app.mappers.field_mapper import ColumnResolution, FieldMapper
from app.mappers.format_classifier import FormatClassifier
from app.parsing.tabular_reader import SUPPORTED_EXTENSIONS, read_batch
from app.repositories.project_repository import ProjectRepository
from app.repositories.property_repository import PropertyRecordRepository
from app.services.target_locks import TargetLockRegistry
from app.services.target_naming import DEFAULT_SLUG, choose_project_name, slugify
from app.validators.record_validator import RecordValidator
from db.models.project import Project
from db.session import SessionLocal

logger = logging.getLogger(__name__)

_DESCRIPTION_MAX_LENGTH: int = Project.__table__.c.description.type.length


@dataclass(frozen=True)
class ResolvedTarget:
    """
    Detached snapshot of the project an upload is written into.

    ``id`` is None when a batch without accepted rows named a project that
    does not exist yet; such a batch creates nothing.
    """

    id: uuid.UUID | None
    name: str
    slug: str
    created: bool


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


class PriceIngestionService:
    """
    Coordinates decoding, classification, mapping, validation, and persistence.
    """

    def __init__(
        self,
        *,
        session_factory: Callable[[], Session],
        settings: IngestionSettings | None = None,
        classifier: FormatClassifier | None = None,
        mapper: FieldMapper | None = None,
        validator: RecordValidator | None = None,
        lock_registry: TargetLockRegistry | None = None,
        clock: Callable[[], date] = date.today,
    ) -> None:
        self._session_factory = session_factory
        self._settings = settings or IngestionSettings()
        self._classifier = classifier or FormatClassifier(
            min_confidence=self._settings.dialect_min_confidence,
        )
        self._mapper = mapper or FieldMapper()
        self._validator = validator or RecordValidator(
            log_rejected_rows=self._settings.log_rejected_rows,
        )
        self._locks = lock_registry or TargetLockRegistry()
        self._clock = clock

    def ingest(
        self,
        *,
        owner_id: str,
        batch: RawBatch,
        target_hint: TargetHint | None = None,
    ) -> IngestionReport:
        """
        Ingest one uploaded price list for ``owner_id``.

        Raises:
            UnsupportedFileType: extension is not csv/xlsx/xls (nothing is read).
            TargetNotOwned: ``target_hint.target_id`` is unknown or not the owner's.
            TargetResolutionFailed: storage failed while finding/creating the target.
            PersistenceFailed: the replace transaction failed; prior records survive.
        """

        started = time.monotonic()
        hint = target_hint or TargetHint()
        if batch.extension not in SUPPORTED_EXTENSIONS:
            raise UnsupportedFileType(
                f"Unsupported file type '{batch.extension or batch.file_name}'. "
                f"Allowed: {list(SUPPORTED_EXTENSIONS)}.",
                context={"file_name": batch.file_name},
            )

        log_event(
            logger,
            logging.INFO,
            "ingestion_started",
            owner_id=owner_id,
            file_name=batch.file_name,
            size_bytes=len(batch.content),
        )

        sheet = read_batch(batch)
        classification = self._classifier.classify(sheet.rows, headers=sheet.headers)
        resolution = self._mapper.resolve(sheet.headers, classification.dialect)
        mapped_rows = self._map_rows(sheet.rows, classification.dialect, resolution)
        outcome = self._validator.validate(mapped_rows, self._clock())

        target = self._resolve_target(
            owner_id=owner_id,
            file_name=batch.file_name,
            hint=hint,
            batch_name=_first_project_name(mapped_rows),
            create=bool(outcome.accepted),
        )
        replaced = 0
        if target.id is not None:
            replaced = self._replace_records(
                target_id=target.id,
                owner_id=owner_id,
                records=outcome.accepted,
            )

        report = self._build_report(
            target=target,
            replaced=replaced,
            outcome=outcome,
            classification_name=classification.dialect.name,
            format_confidence=classification.format_confidence,
            encoding=sheet.decoded.encoding if sheet.decoded else None,
            encoding_confidence=sheet.decoded.confidence if sheet.decoded else None,
            resolution=resolution,
        )
        log_event(
            logger,
            logging.INFO,
            "ingestion_completed",
            owner_id=owner_id,
            target_id=_id_text(target.id),
            target_created=target.created,
            dialect=report.detected_format,
            encoding=report.encoding,
            total_rows=report.total_rows,
            accepted=report.accepted_count,
            rejected=len(report.rejected_rows),
            replaced=replaced,
            duration_ms=round((time.monotonic() - started) * 1000, 1),
        )
        return report

    # ------------------------------------------------------------------
    # Mapping
    # ------------------------------------------------------------------

    def _map_rows(
        self,
        rows: Sequence[TabularRow],
        dialect: Dialect,
        resolution: ColumnResolution,
    ) -> list[MappedRow]:
        workers = self._settings.max_workers
        if workers <= 1 or len(rows) < self._settings.parallel_row_threshold:
            return self._map_chunk(rows, dialect, resolution)

        chunk_size = max(1, -(-len(rows) // workers))
        chunks = [rows[start : start + chunk_size] for start in range(0, len(rows), chunk_size)]
        logger.debug("Mapping %d rows in %d chunks", len(rows), len(chunks))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="price-map") as executor:
            futures = [
                executor.submit(self._map_chunk, chunk, dialect, resolution)
                for chunk in chunks
            ]
            mapped: list[MappedRow] = []
            for future in futures:
                mapped.extend(future.result())
        return mapped

    def _map_chunk(
        self,
        rows: Sequence[TabularRow],
        dialect: Dialect,
        resolution: ColumnResolution,
    ) -> list[MappedRow]:
        return [self._mapper.map_to_row(row, dialect, resolution) for row in rows]

    # ------------------------------------------------------------------
    # Target resolution
    # ------------------------------------------------------------------

    def _resolve_target(
        self,
        *,
        owner_id: str,
        file_name: str,
        hint: TargetHint,
        batch_name: str | None,
        create: bool = True,
    ) -> ResolvedTarget:
        if hint.target_id:
            return self._resolve_explicit_target(owner_id=owner_id, target_id=hint.target_id)

        name = choose_project_name(
            name_hint=hint.name_hint,
            batch_name=batch_name,
            file_name=file_name,
            today=self._clock(),
        )
        slug = slugify(name) or DEFAULT_SLUG
        try:
            with self._session_factory() as session:
                with session.begin():
                    repository = ProjectRepository(session)
                    existing = repository.get_by_owner_and_slug(owner_id=owner_id, slug=slug)
                    if existing is not None:
                        return _snapshot(existing, created=False)
                    if not create:
                        logger.info("No accepted rows; project owner=%s slug=%s not created", owner_id, slug)
                        return ResolvedTarget(id=None, name=name, slug=slug, created=False)
                    project = repository.create(
                        owner_id=owner_id,
                        name=name,
                        slug=slug,
                        description=f"Created from upload: {file_name}"[:_DESCRIPTION_MAX_LENGTH],
                    )
                    target = _snapshot(project, created=True)
            logger.info("Created project id=%s owner=%s slug=%s", target.id, owner_id, slug)
            return target
        except IntegrityError:
            # Another upload created the same (owner, slug) first.
            logger.info("Project create raced owner=%s slug=%s; re-reading", owner_id, slug)
            return self._reread_target(owner_id=owner_id, slug=slug)
        except SQLAlchemyError as exc:
            logger.error("Target lookup/create failed owner=%s slug=%s: %s", owner_id, slug, exc)
            raise TargetResolutionFailed(
                "Failed to look up or create the target project.",
                context={"slug": slug},
            ) from exc

    def _resolve_explicit_target(self, *, owner_id: str, target_id: str) -> ResolvedTarget:
        try:
            project_id = uuid.UUID(str(target_id))
        except ValueError as exc:
            raise TargetNotOwned(
                "Target project does not exist or belongs to another owner.",
                context={"target_id": target_id},
            ) from exc

        try:
            with self._session_factory() as session:
                project = ProjectRepository(session).get_by_id(project_id)
                if project is None or project.owner_id != owner_id:
                    raise TargetNotOwned(
                        "Target project does not exist or belongs to another owner.",
                        context={"target_id": target_id},
                    )
                return _snapshot(project, created=False)
        except SQLAlchemyError as exc:
            logger.error("Target load failed id=%s: %s", target_id, exc)
            raise TargetResolutionFailed(
                "Failed to load the target project.",
                context={"target_id": target_id},
            ) from exc

    def _reread_target(self, *, owner_id: str, slug: str) -> ResolvedTarget:
        try:
            with self._session_factory() as session:
                existing = ProjectRepository(session).get_by_owner_and_slug(owner_id=owner_id, slug=slug)
                if existing is None:
                    raise TargetResolutionFailed(
                        "Target project could not be created or found.",
                        context={"slug": slug},
                    )
                return _snapshot(existing, created=False)
        except SQLAlchemyError as exc:
            logger.error("Target re-read failed owner=%s slug=%s: %s", owner_id, slug, exc)
            raise TargetResolutionFailed(
                "Failed to look up the target project.",
                context={"slug": slug},
            ) from exc

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def _replace_records(
        self,
        *,
        target_id: uuid.UUID,
        owner_id: str,
        records: Sequence[CanonicalRecord],
    ) -> int:
        """
        Swap the target's records for ``records`` atomically; returns rows removed.
        """

        if not records:
            logger.info("No accepted rows for target=%s; existing records left untouched", target_id)
            return 0

        with self._locks.hold(str(target_id)):
            try:
                with self._session_factory() as session:
                    with session.begin():
                        project = ProjectRepository(session).get_by_id(target_id, for_update=True)
                        if project is None:
                            raise TargetResolutionFailed(
                                "Target project disappeared before records were written.",
                                context={"target_id": str(target_id)},
                            )
                        repository = PropertyRecordRepository(session)
                        removed = repository.delete_for_project(target_id)
                        inserted = repository.bulk_insert(
                            project_id=target_id,
                            owner_id=owner_id,
                            records=records,
                            batch_size=self._settings.insert_batch_size,
                        )
            except SQLAlchemyError as exc:
                logger.error("Replace failed for target=%s: %s", target_id, exc)
                raise PersistenceFailed(
                    "Failed to persist property records; previous records were kept.",
                    context={"target_id": str(target_id)},
                ) from exc

        logger.info("Replaced records target=%s removed=%d inserted=%d", target_id, removed, inserted)
        return removed

    def _build_report(
        self,
        *,
        target: ResolvedTarget,
        replaced: int,
        outcome: ValidationOutcome,
        classification_name: str,
        format_confidence: float,
        encoding: str | None,
        encoding_confidence: str | None,
        resolution: ColumnResolution,
    ) -> IngestionReport:
        return IngestionReport(
            target_id=_id_text(target.id),
            target_name=target.name,
            target_slug=target.slug,
            target_created=target.created,
            replaced_records=replaced,
            accepted_count=len(outcome.accepted),
            total_rows=outcome.total,
            rejected_rows=list(outcome.rejected),
            preview=list(outcome.accepted[: self._settings.preview_size]),
            detected_format=classification_name,
            format_confidence=format_confidence,
            encoding=encoding,
            encoding_confidence=encoding_confidence,
            mapped_columns=dict(resolution.field_to_header),
        )


# ---------------------------------------------------------------------------
# Module-level helpers
# ---------------------------------------------------------------------------


def _snapshot(project: Project, *, created: bool) -> ResolvedTarget:
    return ResolvedTarget(id=project.id, name=project.name, slug=project.slug, created=created)


def _id_text(value: uuid.UUID | None) -> str | None:
    return str(value) if value is not None else None


def _first_project_name(mapped_rows: Sequence[MappedRow]) -> str | None:
    for mapped_row in mapped_rows:
        if mapped_row.candidate is not None and mapped_row.candidate.project_name:
            return mapped_row.candidate.project_name
    return None


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------


@lru_cache(maxsize=1)
def get_price_ingestion_service() -> PriceIngestionService:
    """
    Build and cache the ingestion service with env-driven settings.
    """
    return PriceIngestionService(
        session_factory=SessionLocal,
        settings=get_ingestion_settings(),
    )
