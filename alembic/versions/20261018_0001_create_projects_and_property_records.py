"""create projects and property_records tables

Revision ID: 20261018_0001
Revises:
Create Date: 2026-10-18 09:00:00
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "20261018_0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "projects",
        sa.Column("id", sa.Uuid(as_uuid=True), nullable=False),
        sa.Column("owner_id", sa.String(length=64), nullable=False, comment="Developer account that owns the project"),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("slug", sa.String(length=255), nullable=False, comment="URL-safe name; unique per owner"),
        sa.Column("description", sa.String(length=500), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("owner_id", "slug", name="uq_projects_owner_id_slug"),
    )
    op.create_index("ix_projects_owner_id", "projects", ["owner_id"], unique=False)

    op.create_table(
        "property_records",
        sa.Column("id", sa.Uuid(as_uuid=True), nullable=False),
        sa.Column("project_id", sa.Uuid(as_uuid=True), nullable=False),
        sa.Column("owner_id", sa.String(length=64), nullable=False),
        sa.Column("source_row", sa.Integer(), nullable=True, comment="Line of the row in the uploaded sheet"),
        sa.Column("region", sa.String(length=100), nullable=False, comment="Województwo"),
        sa.Column("county", sa.String(length=100), nullable=False, comment="Powiat"),
        sa.Column("municipality", sa.String(length=100), nullable=False, comment="Gmina"),
        sa.Column("locality", sa.String(length=100), nullable=True),
        sa.Column("street", sa.String(length=255), nullable=True),
        sa.Column("building_number", sa.String(length=50), nullable=True),
        sa.Column("postal_code", sa.String(length=20), nullable=True),
        sa.Column("property_type", sa.String(length=20), nullable=False, comment="apartment, house"),
        sa.Column("unit_identifier", sa.String(length=255), nullable=False),
        sa.Column("usable_area", sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column("rooms", sa.Integer(), nullable=True),
        sa.Column("floor", sa.Integer(), nullable=True),
        sa.Column("status", sa.String(length=20), nullable=False, comment="available, reserved, sold"),
        sa.Column("price_per_m2", sa.Numeric(precision=14, scale=2), nullable=False),
        sa.Column("price_valid_from", sa.Date(), nullable=False),
        sa.Column("base_price", sa.Numeric(precision=14, scale=2), nullable=False),
        sa.Column("base_price_valid_from", sa.Date(), nullable=False),
        sa.Column("final_price", sa.Numeric(precision=14, scale=2), nullable=False),
        sa.Column("final_price_valid_from", sa.Date(), nullable=False),
        sa.Column("parking_type", sa.String(length=100), nullable=True),
        sa.Column("parking_designation", sa.String(length=255), nullable=True),
        sa.Column("parking_price", sa.Numeric(precision=14, scale=2), nullable=True),
        sa.Column("parking_date", sa.Date(), nullable=True),
        sa.Column("storage_type", sa.String(length=100), nullable=True),
        sa.Column("storage_designation", sa.String(length=255), nullable=True),
        sa.Column("storage_price", sa.Numeric(precision=14, scale=2), nullable=True),
        sa.Column("storage_date", sa.Date(), nullable=True),
        sa.Column("necessary_rights_type", sa.String(length=255), nullable=True),
        sa.Column("necessary_rights_description", sa.String(length=1000), nullable=True),
        sa.Column("necessary_rights_price", sa.Numeric(precision=14, scale=2), nullable=True),
        sa.Column("necessary_rights_date", sa.Date(), nullable=True),
        sa.Column("other_services_type", sa.String(length=1000), nullable=True),
        sa.Column("other_services_price", sa.Numeric(precision=14, scale=2), nullable=True),
        sa.Column("prospectus_url", sa.String(length=1000), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.ForeignKeyConstraint(["project_id"], ["projects.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_property_records_project_id", "property_records", ["project_id"], unique=False)
    op.create_index("ix_property_records_owner_id", "property_records", ["owner_id"], unique=False)
    op.create_index(
        "ix_property_records_project_status",
        "property_records",
        ["project_id", "status"],
        unique=False,
    )


def downgrade() -> None:
    op.drop_index("ix_property_records_project_status", table_name="property_records")
    op.drop_index("ix_property_records_owner_id", table_name="property_records")
    op.drop_index("ix_property_records_project_id", table_name="property_records")
    op.drop_table("property_records")
    op.drop_index("ix_projects_owner_id", table_name="projects")
    op.drop_table("projects")
