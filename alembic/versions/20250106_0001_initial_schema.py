"""Initial schema for the corridor backend

Revision ID: 0001
Revises:
Create Date: 2025-01-06

Creates all tables for:
- Directory (corridors, landlords, students)
- Listings (units, structural_checklists, operational_checklists, unit_media)
- Occupancy (occupancies, occupants)
- Trust (complaints, audit_logs)
"""
from typing import Sequence, Union

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

UNIT_STATUS = sa.Enum(
    "DRAFT",
    "SUBMITTED",
    "ADMIN_REVIEW",
    "APPROVED",
    "REJECTED",
    "SUSPENDED",
    "ARCHIVED",
    name="unitstatus",
)
MEDIA_TYPE = sa.Enum("PHOTO", "DOCUMENT", "WALKTHROUGH_360", name="mediatype")
INCIDENT_TYPE = sa.Enum(
    "SAFETY",
    "INJURY",
    "FIRE",
    "HARASSMENT",
    "WATER",
    "COMMON_AREA",
    "OTHER",
    name="incidenttype",
)
AUDIT_TRIGGER_TYPE = sa.Enum(
    "COMPLAINT_DENSITY",
    "SLA_BREACH",
    "INCIDENT",
    "CAPACITY_VIOLATION",
    "MISREPRESENTATION",
    "RANDOM_SAMPLE",
    "MANUAL",
    name="audittriggertype",
)


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    ]


def upgrade() -> None:
    """Create all tables."""

    # =====================
    # DIRECTORY
    # =====================

    op.create_table(
        "corridors",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(120), nullable=False),
        sa.Column("city_code", sa.Integer(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name"),
    )

    op.create_table(
        "landlords",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id"),
    )

    op.create_table(
        "students",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("intake", sa.String(50), nullable=True),
        sa.Column("corridor_id", sa.Integer(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id"),
        sa.ForeignKeyConstraint(["corridor_id"], ["corridors.id"]),
    )
    op.create_index("ix_students_corridor_id", "students", ["corridor_id"])

    # =====================
    # LISTINGS
    # =====================

    op.create_table(
        "units",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("corridor_id", sa.Integer(), nullable=False),
        sa.Column("landlord_id", sa.Integer(), nullable=False),
        sa.Column("rent", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("distance_km", sa.Float(), nullable=False, server_default="0"),
        sa.Column("ac", sa.Boolean(), nullable=False, server_default="0"),
        sa.Column("occupancy_type", sa.String(50), nullable=False, server_default="unknown"),
        sa.Column("capacity", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("status", UNIT_STATUS, nullable=False, server_default="DRAFT"),
        sa.Column("structural_approved", sa.Boolean(), nullable=False, server_default="0"),
        sa.Column("operational_baseline_approved", sa.Boolean(), nullable=False, server_default="0"),
        sa.Column("trust_score", sa.Integer(), nullable=False, server_default="75"),
        sa.Column("audit_required", sa.Boolean(), nullable=False, server_default="0"),
        sa.Column("false_declaration_count", sa.Integer(), nullable=False, server_default="0"),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["corridor_id"], ["corridors.id"]),
        sa.ForeignKeyConstraint(["landlord_id"], ["landlords.id"]),
    )
    op.create_index("ix_units_corridor_id", "units", ["corridor_id"])
    op.create_index("ix_units_landlord_id", "units", ["landlord_id"])
    op.create_index("ix_units_status", "units", ["status"])

    op.create_table(
        "structural_checklists",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("unit_id", sa.Integer(), nullable=False),
        sa.Column("fire_exit", sa.Boolean(), nullable=False, server_default="0"),
        sa.Column("wiring_safe", sa.Boolean(), nullable=False, server_default="0"),
        sa.Column("plumbing_safe", sa.Boolean(), nullable=False, server_default="0"),
        sa.Column("occupancy_compliant", sa.Boolean(), nullable=False, server_default="0"),
        sa.Column("approved", sa.Boolean(), nullable=False, server_default="0"),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("unit_id"),
        sa.ForeignKeyConstraint(["unit_id"], ["units.id"], ondelete="CASCADE"),
    )

    op.create_table(
        "operational_checklists",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("unit_id", sa.Integer(), nullable=False),
        sa.Column("bed_available", sa.Boolean(), nullable=False, server_default="0"),
        sa.Column("water_available", sa.Boolean(), nullable=False, server_default="0"),
        sa.Column("toilets_available", sa.Boolean(), nullable=False, server_default="0"),
        sa.Column("ventilation_good", sa.Boolean(), nullable=False, server_default="0"),
        sa.Column("self_declaration", sa.Text(), nullable=True),
        sa.Column("approved", sa.Boolean(), nullable=False, server_default="0"),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("unit_id"),
        sa.ForeignKeyConstraint(["unit_id"], ["units.id"], ondelete="CASCADE"),
    )

    op.create_table(
        "unit_media",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("unit_id", sa.Integer(), nullable=False),
        sa.Column("type", MEDIA_TYPE, nullable=False),
        sa.Column("storage_key", sa.String(512), nullable=False),
        sa.Column("public_url", sa.String(1024), nullable=False, server_default=""),
        sa.Column("file_name", sa.String(255), nullable=False),
        sa.Column("mime_type", sa.String(120), nullable=False),
        sa.Column("size_in_bytes", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("uploaded_by", sa.Integer(), nullable=False),
        sa.Column("locked", sa.Boolean(), nullable=False, server_default="0"),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["unit_id"], ["units.id"], ondelete="CASCADE"),
    )
    op.create_index("ix_unit_media_unit_id", "unit_media", ["unit_id"])

    # =====================
    # OCCUPANCY
    # =====================

    op.create_table(
        "occupancies",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("unit_id", sa.Integer(), nullable=False),
        sa.Column("student_id", sa.Integer(), nullable=False),
        sa.Column("start_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_date", sa.DateTime(timezone=True), nullable=True),
        # student_id while active, NULL once checked out
        sa.Column("active_student_id", sa.Integer(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("active_student_id"),
        sa.ForeignKeyConstraint(["unit_id"], ["units.id"]),
        sa.ForeignKeyConstraint(["student_id"], ["students.id"]),
    )
    op.create_index("ix_occupancies_unit_id", "occupancies", ["unit_id"])
    op.create_index("ix_occupancies_student_id", "occupancies", ["student_id"])

    op.create_table(
        "occupants",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("public_id", sa.String(12), nullable=False),
        # public_id while active, NULL once retired
        sa.Column("active_public_id", sa.String(12), nullable=True),
        sa.Column("city_code", sa.Integer(), nullable=False),
        sa.Column("corridor_code", sa.Integer(), nullable=False),
        sa.Column("hostel_code", sa.Integer(), nullable=False),
        sa.Column("room_number", sa.Integer(), nullable=False),
        sa.Column("occupant_index", sa.Integer(), nullable=False),
        sa.Column("unit_id", sa.Integer(), nullable=False),
        sa.Column("student_id", sa.Integer(), nullable=False),
        sa.Column("occupancy_id", sa.Integer(), nullable=False),
        sa.Column("active", sa.Boolean(), nullable=False, server_default="1"),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("active_public_id"),
        sa.ForeignKeyConstraint(["unit_id"], ["units.id"]),
        sa.ForeignKeyConstraint(["student_id"], ["students.id"]),
        sa.ForeignKeyConstraint(["occupancy_id"], ["occupancies.id"]),
    )
    op.create_index("ix_occupants_public_id", "occupants", ["public_id"])
    op.create_index("ix_occupants_unit_id", "occupants", ["unit_id"])
    op.create_index("ix_occupants_student_id", "occupants", ["student_id"])
    op.create_index("ix_occupants_occupancy_id", "occupants", ["occupancy_id"])

    # =====================
    # TRUST
    # =====================

    op.create_table(
        "complaints",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("unit_id", sa.Integer(), nullable=False),
        sa.Column("student_id", sa.Integer(), nullable=False),
        sa.Column("occupant_id", sa.Integer(), nullable=True),
        sa.Column("severity", sa.Integer(), nullable=False),
        sa.Column("incident_type", INCIDENT_TYPE, nullable=True),
        sa.Column("incident_flag", sa.Boolean(), nullable=False, server_default="0"),
        sa.Column("message", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("sla_deadline", sa.DateTime(timezone=True), nullable=False),
        sa.Column("resolved", sa.Boolean(), nullable=False, server_default="0"),
        sa.Column("resolved_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["unit_id"], ["units.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["student_id"], ["students.id"]),
        sa.ForeignKeyConstraint(["occupant_id"], ["occupants.id"]),
    )
    op.create_index("ix_complaints_unit_id", "complaints", ["unit_id"])
    op.create_index("ix_complaints_student_id", "complaints", ["student_id"])
    op.create_index("ix_complaints_created_at", "complaints", ["created_at"])

    op.create_table(
        "audit_logs",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("unit_id", sa.Integer(), nullable=False),
        sa.Column("trigger_type", AUDIT_TRIGGER_TYPE, nullable=False),
        sa.Column("reason", sa.Text(), nullable=False),
        sa.Column("corrective_action", sa.Text(), nullable=True),
        sa.Column("corrective_deadline", sa.DateTime(timezone=True), nullable=True),
        sa.Column("resolved", sa.Boolean(), nullable=False, server_default="0"),
        sa.Column("resolved_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("verification_notes", sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["unit_id"], ["units.id"], ondelete="CASCADE"),
    )
    op.create_index("ix_audit_logs_unit_id", "audit_logs", ["unit_id"])


def downgrade() -> None:
    """Drop all tables in reverse order."""

    # Drop trust tables
    op.drop_table("audit_logs")
    op.drop_table("complaints")

    # Drop occupancy tables
    op.drop_table("occupants")
    op.drop_table("occupancies")

    # Drop listing tables
    op.drop_table("unit_media")
    op.drop_table("operational_checklists")
    op.drop_table("structural_checklists")
    op.drop_table("units")

    # Drop directory tables
    op.drop_table("students")
    op.drop_table("landlords")
    op.drop_table("corridors")
