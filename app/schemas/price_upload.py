"""
app/schemas/price_upload.py

Response schemas for the price-list upload endpoint.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from pydantic import BaseModel, Field


class RejectedRowResponse(BaseModel):
    """
    API response model for one rejected input row.
    """

    row_index: int = Field(..., ge=1)
    reasons: list[str] = Field(default_factory=list)


class PropertyPreviewResponse(BaseModel):
    """
    API response model for one accepted record shown in the preview.
    """

    row_index: int = Field(..., ge=1)
    region: str
    county: str
    municipality: str
    locality: str | None = None
    street: str | None = None
    building_number: str | None = None
    postal_code: str | None = None
    unit_identifier: str
    property_type: str
    status: str
    usable_area: Decimal
    rooms: int | None = None
    floor: int | None = None
    price_per_m2: Decimal
    price_valid_from: date
    base_price: Decimal
    base_price_valid_from: date
    final_price: Decimal
    final_price_valid_from: date
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


class PriceUploadResponse(BaseModel):
    """
    API response model for a completed price-list upload.
    """

    target_id: str | None = None
    target_name: str
    target_slug: str
    target_created: bool
    replaced_records: int = Field(..., ge=0)
    accepted_count: int = Field(..., ge=0)
    total_rows: int = Field(..., ge=0)
    rejected_rows: list[RejectedRowResponse] = Field(default_factory=list)
    preview: list[PropertyPreviewResponse] = Field(default_factory=list)
    detected_format: str
    format_confidence: float = Field(..., ge=0, le=100)
    encoding: str | None = None
    encoding_confidence: str | None = None
    mapped_columns: dict[str, str] = Field(default_factory=dict)
