"""
app/api/routers/price_upload.py

Price-list upload HTTP endpoint.
"""

from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter, Depends, HTTPException, Query, UploadFile, status

from app.api.dependencies import get_price_upload, read_raw_batch, require_upload_identity
from app.domain.price_batch import IngestionReport, TargetHint
from app.errors import PersistenceFailed, TargetNotOwned, TargetResolutionFailed, UnsupportedFileType
from app.schemas.price_upload import PriceUploadResponse, PropertyPreviewResponse, RejectedRowResponse
from app.services.price_ingestion_service import PriceIngestionService, get_price_ingestion_service

router = APIRouter(tags=["ingestion"])


@router.post("/upload", response_model=PriceUploadResponse)
def upload_price_list(
    owner_id: str = Depends(require_upload_identity),
    file: UploadFile = Depends(get_price_upload),
    target_id: str | None = Query(default=None, description="Existing project to replace records of"),
    project_name: str | None = Query(default=None, description="Name for a new project"),
    ingestion_service: PriceIngestionService = Depends(get_price_ingestion_service),
) -> PriceUploadResponse:
    """
    Ingest one price list (csv/xlsx/xls) into the owner's project.
    """

    try:
        batch = read_raw_batch(file)
        report = ingestion_service.ingest(
            owner_id=owner_id,
            batch=batch,
            target_hint=TargetHint(target_id=target_id, name_hint=project_name),
        )
    except UnsupportedFileType as exc:
        raise HTTPException(
            status_code=status.HTTP_415_UNSUPPORTED_MEDIA_TYPE,
            detail=exc.to_dict(),
        ) from exc
    except TargetNotOwned as exc:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=exc.to_dict(),
        ) from exc
    except TargetResolutionFailed as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=exc.to_dict(),
        ) from exc
    except PersistenceFailed as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=exc.to_dict(),
        ) from exc
    finally:
        file.file.close()

    return _to_response(report)


def _to_response(report: IngestionReport) -> PriceUploadResponse:
    return PriceUploadResponse(
        target_id=report.target_id,
        target_name=report.target_name,
        target_slug=report.target_slug,
        target_created=report.target_created,
        replaced_records=report.replaced_records,
        accepted_count=report.accepted_count,
        total_rows=report.total_rows,
        rejected_rows=[
            RejectedRowResponse(row_index=row.row_index, reasons=list(row.reasons))
            for row in report.rejected_rows
        ],
        preview=[PropertyPreviewResponse(**asdict(record)) for record in report.preview],
        detected_format=report.detected_format,
        format_confidence=report.format_confidence,
        encoding=report.encoding,
        encoding_confidence=report.encoding_confidence,
        mapped_columns=report.mapped_columns,
    )
