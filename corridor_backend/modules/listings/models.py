"""Listing models: units, their baseline checklists and listing media.

A unit's ``status`` is only ever assigned through
:class:`~corridor_backend.modules.listings.governance.GovernanceStateMachine`.
"""

import enum

from sqlalchemy import Boolean, Enum, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from ...database import Base, IdMixin, TimestampMixin


class UnitStatus(str, enum.Enum):
    """Listing lifecycle states."""

    DRAFT = "draft"
    SUBMITTED = "submitted"
    ADMIN_REVIEW = "admin_review"
    APPROVED = "approved"
    REJECTED = "rejected"
    SUSPENDED = "suspended"
    ARCHIVED = "archived"


class MediaType(str, enum.Enum):
    """Media categories required before submission."""

    PHOTO = "photo"
    DOCUMENT = "document"
    WALKTHROUGH_360 = "walkthrough360"


class ChecklistKind(str, enum.Enum):
    STRUCTURAL = "structural"
    OPERATIONAL = "operational"


class Unit(IdMixin, TimestampMixin, Base):
    """Shared rental unit listed by a landlord within a corridor."""

    __tablename__ = "units"

    corridor_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("corridors.id"), nullable=False, index=True
    )
    landlord_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("landlords.id"), nullable=False, index=True
    )
    rent: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    distance_km: Mapped[float] = mapped_column(Float, default=0, nullable=False)
    ac: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    occupancy_type: Mapped[str] = mapped_column(
        String(50), default="unknown", nullable=False
    )
    capacity: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    status: Mapped[UnitStatus] = mapped_column(
        Enum(UnitStatus), nullable=False, default=UnitStatus.DRAFT, index=True
    )
    structural_approved: Mapped[bool] = mapped_column(
        Boolean, default=False, nullable=False
    )
    operational_baseline_approved: Mapped[bool] = mapped_column(
        Boolean, default=False, nullable=False
    )
    trust_score: Mapped[int] = mapped_column(Integer, default=75, nullable=False)
    audit_required: Mapped[bool] = mapped_column(
        Boolean, default=False, nullable=False
    )
    false_declaration_count: Mapped[int] = mapped_column(
        Integer, default=0, nullable=False
    )

    def __repr__(self) -> str:
        return f"<Unit(id={self.id}, status={self.status}, trust={self.trust_score})>"


class StructuralChecklist(IdMixin, TimestampMixin, Base):
    __tablename__ = "structural_checklists"

    ITEMS = ("fire_exit", "wiring_safe", "plumbing_safe", "occupancy_compliant")

    unit_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("units.id", ondelete="CASCADE"), unique=True, nullable=False
    )
    fire_exit: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    wiring_safe: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    plumbing_safe: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    occupancy_compliant: Mapped[bool] = mapped_column(
        Boolean, default=False, nullable=False
    )
    approved: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    def all_items_true(self) -> bool:
        return all(getattr(self, item) for item in self.ITEMS)


class OperationalChecklist(IdMixin, TimestampMixin, Base):
    __tablename__ = "operational_checklists"

    ITEMS = ("bed_available", "water_available", "toilets_available", "ventilation_good")

    unit_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("units.id", ondelete="CASCADE"), unique=True, nullable=False
    )
    bed_available: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    water_available: Mapped[bool] = mapped_column(
        Boolean, default=False, nullable=False
    )
    toilets_available: Mapped[bool] = mapped_column(
        Boolean, default=False, nullable=False
    )
    ventilation_good: Mapped[bool] = mapped_column(
        Boolean, default=False, nullable=False
    )
    self_declaration: Mapped[str | None] = mapped_column(Text, nullable=True)
    approved: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    def all_items_true(self) -> bool:
        return all(getattr(self, item) for item in self.ITEMS)


class UnitMedia(IdMixin, TimestampMixin, Base):
    """Metadata for a media file held by the external blob store."""

    __tablename__ = "unit_media"

    unit_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("units.id", ondelete="CASCADE"), nullable=False, index=True
    )
    type: Mapped[MediaType] = mapped_column(Enum(MediaType), nullable=False)
    storage_key: Mapped[str] = mapped_column(String(512), nullable=False)
    public_url: Mapped[str] = mapped_column(String(1024), default="", nullable=False)
    file_name: Mapped[str] = mapped_column(String(255), nullable=False)
    mime_type: Mapped[str] = mapped_column(String(120), nullable=False)
    size_in_bytes: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    uploaded_by: Mapped[int] = mapped_column(Integer, nullable=False)
    locked: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
