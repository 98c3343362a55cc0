"""CRUD operations for the trust module."""

from datetime import datetime

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..listings.models import Unit
from .models import AuditLog, AuditTriggerType, Complaint, IncidentType

# ----- Complaint CRUD -----


async def get_complaint_by_id(db: AsyncSession, complaint_id: int) -> Complaint | None:
    result = await db.execute(select(Complaint).where(Complaint.id == complaint_id))
    return result.scalar_one_or_none()


async def get_complaints_for_unit(db: AsyncSession, unit_id: int) -> list[Complaint]:
    """All complaints of a unit, newest first."""
    result = await db.execute(
        select(Complaint)
        .where(Complaint.unit_id == unit_id)
        .order_by(Complaint.created_at.desc(), Complaint.id.desc())
    )
    return list(result.scalars().all())


async def get_complaints_for_student(
    db: AsyncSession, student_id: int
) -> list[Complaint]:
    result = await db.execute(
        select(Complaint)
        .where(Complaint.student_id == student_id)
        .order_by(Complaint.created_at.desc(), Complaint.id.desc())
    )
    return list(result.scalars().all())


async def get_complaints_for_landlord(
    db: AsyncSession,
    landlord_id: int,
    unit_id: int | None = None,
    incident_type: IncidentType | None = None,
) -> list[Complaint]:
    """Complaints against a landlord's units."""
    query = (
        select(Complaint)
        .join(Unit, Unit.id == Complaint.unit_id)
        .where(Unit.landlord_id == landlord_id)
    )
    if unit_id is not None:
        query = query.where(Complaint.unit_id == unit_id)
    if incident_type is not None:
        query = query.where(Complaint.incident_type == incident_type)
    result = await db.execute(
        query.order_by(Complaint.created_at.desc(), Complaint.id.desc())
    )
    return list(result.scalars().all())


async def create_complaint(
    db: AsyncSession,
    unit_id: int,
    student_id: int,
    severity: int,
    created_at: datetime,
    sla_deadline: datetime,
    occupant_id: int | None = None,
    incident_type: IncidentType | None = None,
    incident_flag: bool = False,
    message: str | None = None,
) -> Complaint:
    """Append a complaint to the ledger."""
    complaint = Complaint(
        unit_id=unit_id,
        student_id=student_id,
        occupant_id=occupant_id,
        severity=severity,
        incident_type=incident_type,
        incident_flag=incident_flag,
        message=message,
        created_at=created_at,
        sla_deadline=sla_deadline,
        resolved=False,
    )
    db.add(complaint)
    await db.flush()
    return complaint


# ----- Audit Log CRUD -----


async def get_audit_log_by_id(db: AsyncSession, audit_log_id: int) -> AuditLog | None:
    result = await db.execute(select(AuditLog).where(AuditLog.id == audit_log_id))
    return result.scalar_one_or_none()


async def get_audit_logs_for_unit(db: AsyncSession, unit_id: int) -> list[AuditLog]:
    result = await db.execute(
        select(AuditLog)
        .where(AuditLog.unit_id == unit_id)
        .order_by(AuditLog.created_at.desc(), AuditLog.id.desc())
    )
    return list(result.scalars().all())


async def count_unresolved_audit_logs(db: AsyncSession, unit_id: int) -> int:
    result = await db.execute(
        select(func.count(AuditLog.id)).where(
            AuditLog.unit_id == unit_id, AuditLog.resolved == False  # noqa: E712
        )
    )
    return result.scalar_one()


async def create_audit_log(
    db: AsyncSession,
    unit_id: int,
    trigger_type: AuditTriggerType,
    reason: str,
) -> AuditLog:
    """Create an unresolved audit log."""
    log = AuditLog(
        unit_id=unit_id,
        trigger_type=trigger_type,
        reason=reason,
        resolved=False,
    )
    db.add(log)
    await db.flush()
    return log
