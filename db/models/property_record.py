"""
db/models/property_record.py

One published price entry for a residential unit, in the layout required by
the ministerial price-disclosure schema.
"""

import uuid
from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import Date, ForeignKey, Index, Integer, Numeric, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from db.base import Base, TimestampMixin

if TYPE_CHECKING:
    from db.models.project import Project


class PropertyRecord(Base, TimestampMixin):
    """
    Canonical property price record.

    Amount and date columns are never NULL for the required fields; when the
    source lacked a value they carry the placeholders 1 and the upload date.
    """

    __tablename__ = "property_records"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )

    project_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
    )

    owner_id: Mapped[str] = mapped_column(String(64), nullable=False)
    source_row: Mapped[int | None] = mapped_column(
        Integer,
        nullable=True,
        comment="Line of the row in the uploaded sheet",
    )

    # ── Location ───────────────────────────────────────────────────────────────

    region: Mapped[str] = mapped_column(String(100), nullable=False, comment="Województwo")
    county: Mapped[str] = mapped_column(String(100), nullable=False, comment="Powiat")
    municipality: Mapped[str] = mapped_column(String(100), nullable=False, comment="Gmina")
    locality: Mapped[str | None] = mapped_column(String(100), nullable=True)
    street: Mapped[str | None] = mapped_column(String(255), nullable=True)
    building_number: Mapped[str | None] = mapped_column(String(50), nullable=True)
    postal_code: Mapped[str | None] = mapped_column(String(20), nullable=True)

    # ── Unit ───────────────────────────────────────────────────────────────────

    property_type: Mapped[str] = mapped_column(String(20), nullable=False, comment="apartment, house")
    unit_identifier: Mapped[str] = mapped_column(String(255), nullable=False)
    usable_area: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    rooms: Mapped[int | None] = mapped_column(Integer, nullable=True)
    floor: Mapped[int | None] = mapped_column(Integer, nullable=True)
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default="available",
        comment="available, reserved, sold",
    )

    # ── Prices ─────────────────────────────────────────────────────────────────

    price_per_m2: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    price_valid_from: Mapped[date] = mapped_column(Date, nullable=False)
    base_price: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    base_price_valid_from: Mapped[date] = mapped_column(Date, nullable=False)
    final_price: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    final_price_valid_from: Mapped[date] = mapped_column(Date, nullable=False)

    # ── Parking, storage and other components ──────────────────────────────────

    parking_type: Mapped[str | None] = mapped_column(String(100), nullable=True)
    parking_designation: Mapped[str | None] = mapped_column(String(255), nullable=True)
    parking_price: Mapped[Decimal | None] = mapped_column(Numeric(14, 2), nullable=True)
    parking_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    storage_type: Mapped[str | None] = mapped_column(String(100), nullable=True)
    storage_designation: Mapped[str | None] = mapped_column(String(255), nullable=True)
    storage_price: Mapped[Decimal | None] = mapped_column(Numeric(14, 2), nullable=True)
    storage_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    necessary_rights_type: Mapped[str | None] = mapped_column(String(255), nullable=True)
    necessary_rights_description: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    necessary_rights_price: Mapped[Decimal | None] = mapped_column(Numeric(14, 2), nullable=True)
    necessary_rights_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    other_services_type: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    other_services_price: Mapped[Decimal | None] = mapped_column(Numeric(14, 2), nullable=True)
    prospectus_url: Mapped[str | None] = mapped_column(String(1000), nullable=True)

    # ── Relationships ──────────────────────────────────────────────────────────

    project: Mapped["Project"] = relationship("Project", back_populates="properties")

    # ── Indexes ────────────────────────────────────────────────────────────────

    __table_args__ = (
        Index("ix_property_records_project_id", "project_id"),
        Index("ix_property_records_owner_id", "owner_id"),
        Index("ix_property_records_project_status", "project_id", "status"),
    )

    def __repr__(self) -> str:
        return (
            f"<PropertyRecord id={self.id} project_id={self.project_id} "
            f"unit={self.unit_identifier!r} status={self.status!r}>"
        )
