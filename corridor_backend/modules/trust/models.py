"""Trust models: the complaint ledger and unit audit logs.

Both are append-only apart from their resolution fields.
"""

import enum
from datetime import datetime

from sqlalchemy import Boolean, DateTime, Enum, ForeignKey, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from ...core.utils import utc_now
from ...database import Base, IdMixin, TimestampMixin


class IncidentType(str, enum.Enum):
    """Complaint categories; everything except OTHER is a severe incident."""

    SAFETY = "safety"
    INJURY = "injury"
    FIRE = "fire"
    HARASSMENT = "harassment"
    WATER = "water"
    COMMON_AREA = "common_area"
    OTHER = "other"

    @property
    def is_severe(self) -> bool:
        return self != IncidentType.OTHER


class AuditTriggerType(str, enum.Enum):
    COMPLAINT_DENSITY = "complaint_density"
    SLA_BREACH = "sla_breach"
    INCIDENT = "incident"
    CAPACITY_VIOLATION = "capacity_violation"
    MISREPRESENTATION = "misrepresentation"
    RANDOM_SAMPLE = "random_sample"
    MANUAL = "manual"


class Complaint(IdMixin, Base):
    __tablename__ = "complaints"

    unit_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("units.id", ondelete="CASCADE"), nullable=False, index=True
    )
    student_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("students.id"), nullable=False, index=True
    )
    occupant_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("occupants.id"), nullable=True
    )
    severity: Mapped[int] = mapped_column(Integer, nullable=False)
    incident_type: Mapped[IncidentType | None] = mapped_column(
        Enum(IncidentType), nullable=True
    )
    incident_flag: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    message: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now, index=True
    )
    sla_deadline: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )
    resolved: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    resolved_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    def __repr__(self) -> str:
        return (
            f"<Complaint(id={self.id}, unit_id={self.unit_id}, "
            f"severity={self.severity}, resolved={self.resolved})>"
        )


class AuditLog(IdMixin, TimestampMixin, Base):
    """Escalation record requiring corrective action before re-approval."""

    __tablename__ = "audit_logs"

    unit_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("units.id", ondelete="CASCADE"), nullable=False, index=True
    )
    trigger_type: Mapped[AuditTriggerType] = mapped_column(
        Enum(AuditTriggerType), nullable=False, default=AuditTriggerType.MANUAL
    )
    reason: Mapped[str] = mapped_column(Text, nullable=False)
    corrective_action: Mapped[str | None] = mapped_column(Text, nullable=True)
    corrective_deadline: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    resolved: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    resolved_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    verification_notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    def __repr__(self) -> str:
        return (
            f"<AuditLog(id={self.id}, unit_id={self.unit_id}, "
            f"trigger={self.trigger_type}, resolved={self.resolved})>"
        )
