"""
app/repositories/property_repository.py

Persistence layer for canonical property records.
"""

from __future__ import annotations

import uuid
from collections.abc import Sequence
from typing import Any

from sqlalchemy import delete, func, insert, select
from sqlalchemy.orm import Session

from app.domain.price_batch import CanonicalRecord
from db.models.property_record import PropertyRecord

_DEFAULT_BATCH_SIZE = 1000


class PropertyRecordRepository:
    """
    Repository for replacing and reading the property records of a project.

    Methods never commit; the caller owns the transaction.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    def delete_for_project(self, project_id: uuid.UUID) -> int:
        """
        Delete every record of a project; returns the number of rows removed.
        """

        result = self._session.execute(
            delete(PropertyRecord).where(PropertyRecord.project_id == project_id)
        )
        return int(result.rowcount or 0)

    def bulk_insert(
        self,
        *,
        project_id: uuid.UUID,
        owner_id: str,
        records: Sequence[CanonicalRecord],
        batch_size: int = _DEFAULT_BATCH_SIZE,
    ) -> int:
        """
        Insert canonical records in chunks, tagged with project and owner.
        """

        if not records:
            return 0

        payloads = [
            self._to_payload(record, project_id=project_id, owner_id=owner_id)
            for record in records
        ]
        size = max(1, batch_size)
        inserted = 0
        for start in range(0, len(payloads), size):
            chunk = payloads[start : start + size]
            self._session.execute(insert(PropertyRecord), chunk)
            inserted += len(chunk)
        return inserted

    def count_for_project(self, project_id: uuid.UUID) -> int:
        stmt = select(func.count()).select_from(PropertyRecord).where(PropertyRecord.project_id == project_id)
        return int(self._session.execute(stmt).scalar_one())

    def list_for_project(self, project_id: uuid.UUID) -> list[PropertyRecord]:
        stmt = (
            select(PropertyRecord)
            .where(PropertyRecord.project_id == project_id)
            .order_by(PropertyRecord.source_row.asc())
        )
        return list(self._session.execute(stmt).scalars().all())

    @staticmethod
    def _to_payload(record: CanonicalRecord, *, project_id: uuid.UUID, owner_id: str) -> dict[str, Any]:
        return {
            "id": uuid.uuid4(),
            "project_id": project_id,
            "owner_id": owner_id,
            "source_row": record.row_index,
            "region": record.region,
            "county": record.county,
            "municipality": record.municipality,
            "locality": record.locality,
            "street": record.street,
            "building_number": record.building_number,
            "postal_code": record.postal_code,
            "property_type": record.property_type,
            "unit_identifier": record.unit_identifier,
            "usable_area": record.usable_area,
            "rooms": record.rooms,
            "floor": record.floor,
            "status": record.status,
            "price_per_m2": record.price_per_m2,
            "price_valid_from": record.price_valid_from,
            "base_price": record.base_price,
            "base_price_valid_from": record.base_price_valid_from,
            "final_price": record.final_price,
            "final_price_valid_from": record.final_price_valid_from,
            "parking_type": record.parking_type,
            "parking_designation": record.parking_designation,
            "parking_price": record.parking_price,
            "parking_date": record.parking_date,
            "storage_type": record.storage_type,
            "storage_designation": record.storage_designation,
            "storage_price": record.storage_price,
            "storage_date": record.storage_date,
            "necessary_rights_type": record.necessary_rights_type,
            "necessary_rights_description": record.necessary_rights_description,
            "necessary_rights_price": record.necessary_rights_price,
            "necessary_rights_date": record.necessary_rights_date,
            "other_services_type": record.other_services_type,
            "other_services_price": record.other_services_price,
            "prospectus_url": record.prospectus_url,
        }
