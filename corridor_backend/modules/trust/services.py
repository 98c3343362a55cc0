"""Trust business logic: complaint ledger, trust recomputation and audits."""

import random
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from ...core.exceptions import NotFoundError, PermissionError, ValidationError
from ...core.logging import get_logger
from ...core.utils import as_utc, utc_now
from ..auth.schemas import ActorRole, AuthenticatedUser
from ..directory import crud as directory_crud
from ..listings import crud as listings_crud
from ..listings.governance import (
    PRIORITY_TRUST_THRESHOLD,
    GovernanceStateMachine,
    trust_band,
    visibility_reasons,
)
from ..listings.models import Unit
from ..listings.schemas import UnitExplanation
from ..listings.services import get_unit_or_404
from ..occupancy import crud as occupancy_crud
from ..occupancy.occupant_id import decode_occupant_id
from . import crud
from .models import AuditLog, AuditTriggerType, Complaint, IncidentType
from .schemas import (
    AuditSample,
    ComplaintListItem,
    ComplaintMetrics,
    ComplaintResponse,
    LandlordComplaints,
    SampledUnit,
)
from .scoring import (
    RECURRENCE_WINDOW_DAYS,
    calculate_trust_score,
    complaint_trust_impact,
    created_within,
)
from .sla import SlaStatus, sla_deadline_for, sla_meta
from .triggers import evaluate_audit_triggers

logger = get_logger("trust")

MAX_MESSAGE_LENGTH = 1200
DEFAULT_PENALTY_POINTS = 8
DEFAULT_AUDIT_SAMPLE = 3
MAX_AUDIT_SAMPLE = 20

CAPACITY_VIOLATION_REASON = (
    "Capacity breach attempt: landlord tried to check in beyond approved unit capacity"
)


# ----- Trust recomputation -----


async def recalc_trust_and_audit(
    db: AsyncSession, unit_id: int, now: datetime | None = None
) -> int:
    """Recompute a unit's trust score and evaluate the audit triggers.

    The stored score is overwritten with the formula result. A new escalation
    sets ``audit_required``, suspends the unit unless archived and writes one
    audit log. Score, flag, status and log are committed together.

    Args:
        db: Database session
        unit_id: Unit to recompute
        now: Evaluation time, defaults to the current time

    Returns:
        The new trust score

    Raises:
        NotFoundError: If the unit does not exist
    """
    now = now or utc_now()
    unit = await get_unit_or_404(db, unit_id)
    complaints = await crud.get_complaints_for_unit(db, unit_id)

    trust_score = calculate_trust_score(complaints, now)
    decision = evaluate_audit_triggers(complaints, now, unit.audit_required)

    previous_score = unit.trust_score
    unit.trust_score = trust_score
    unit.audit_required = decision.audit_required

    machine = GovernanceStateMachine(unit)
    if decision.newly_triggered:
        machine.force_suspend(decision.reason)
        await crud.create_audit_log(
            db, unit_id, decision.trigger_type, decision.reason
        )
        logger.warning(
            "Audit triggered",
            extra={
                "unit_id": unit_id,
                "trigger_type": decision.trigger_type.value,
                "trust_score": trust_score,
            },
        )
    else:
        machine.demote_if_unapprovable("trust score below approval threshold")

    await db.commit()
    logger.info(
        "Trust score recalculated",
        extra={
            "unit_id": unit_id,
            "previous_score": previous_score,
            "trust_score": trust_score,
            "audit_required": decision.audit_required,
        },
    )
    return trust_score


# ----- Complaints -----


def _normalize_incident_type(value: str | IncidentType | None) -> IncidentType | None:
    if value is None:
        return None
    normalized = str(getattr(value, "value", value)).strip().lower()
    if not normalized:
        return None
    try:
        return IncidentType(normalized)
    except ValueError:
        allowed = ", ".join(t.value for t in IncidentType)
        raise ValidationError(
            f"incident_type must be one of {allowed}",
            field="incident_type",
            value=value,
        )


async def _resolve_occupant(db: AsyncSession, public_id: str, student) -> tuple[int, int]:
    """Map an occupant public ID to ``(unit_id, occupant_id)`` for the student."""
    public_id = public_id.strip()
    try:
        parts = decode_occupant_id(public_id)
    except ValidationError:
        raise ValidationError("Invalid occupant ID") from None
    if parts.corridor_code != student.corridor_id:
        raise ValidationError("Invalid occupant ID")

    occupant = await occupancy_crud.get_active_occupant_by_public_id(db, public_id)
    if occupant is None or occupant.student_id != student.id:
        raise ValidationError("Invalid occupant ID")

    unit = await listings_crud.get_unit_by_id(db, occupant.unit_id)
    if unit is None or unit.corridor_id != student.corridor_id:
        raise ValidationError("Invalid occupant ID")
    return occupant.unit_id, occupant.id


async def record_complaint(
    db: AsyncSession,
    user_id: int,
    severity: int,
    unit_id: int | None = None,
    occupant_public_id: str | None = None,
    student_id: int | None = None,
    incident_type: str | IncidentType | None = None,
    message: str | None = None,
    now: datetime | None = None,
) -> tuple[Complaint, int]:
    """File a complaint for the calling student and recompute the unit's trust.

    The complaint targets either a unit directly or the unit behind one of the
    student's active occupant IDs. The unit must be in the student's corridor.

    Args:
        db: Database session
        user_id: Calling user's ID
        severity: Integer from 1 to 5
        unit_id: Target unit, when no occupant ID is given
        occupant_public_id: 12-digit occupant ID held by the student
        student_id: Optional explicit student ID; must be the caller's own
        incident_type: Incident category
        message: Free text, at most 1200 characters
        now: Filing time, defaults to the current time

    Returns:
        Tuple of (complaint, new trust score)

    Raises:
        ValidationError: On invalid input or occupant ID
        PermissionError: If filing for another student or outside the corridor
        NotFoundError: If the student profile or unit does not exist
    """
    if isinstance(severity, bool) or not isinstance(severity, int) or not 1 <= severity <= 5:
        raise ValidationError(
            "severity must be an integer from 1 to 5", field="severity", value=severity
        )
    incident = _normalize_incident_type(incident_type)
    message = message.strip() if message else None
    if message and len(message) > MAX_MESSAGE_LENGTH:
        raise ValidationError(
            f"message must be at most {MAX_MESSAGE_LENGTH} characters", field="message"
        )

    student = await directory_crud.get_student_by_user_id(db, user_id)
    if student is None:
        raise NotFoundError("Student profile not found")
    if student_id is not None and student_id != student.id:
        raise PermissionError("file complaints as", "another student")

    occupant_id = None
    if occupant_public_id and occupant_public_id.strip():
        unit_id, occupant_id = await _resolve_occupant(db, occupant_public_id, student)
    if unit_id is None:
        raise ValidationError("Unit could not be resolved")

    unit = await get_unit_or_404(db, unit_id)
    if unit.corridor_id != student.corridor_id:
        raise PermissionError("file complaints outside", "your corridor")

    created_at = now or utc_now()
    complaint = await crud.create_complaint(
        db,
        unit_id=unit_id,
        student_id=student.id,
        occupant_id=occupant_id,
        severity=severity,
        incident_type=incident,
        incident_flag=bool(incident and incident.is_severe),
        message=message or None,
        created_at=created_at,
        sla_deadline=sla_deadline_for(created_at),
    )
    await db.commit()
    logger.info(
        "Complaint recorded",
        extra={
            "complaint_id": complaint.id,
            "unit_id": unit_id,
            "severity": severity,
            "incident_flag": complaint.incident_flag,
        },
    )

    trust_score = await recalc_trust_and_audit(db, unit_id, now=now)
    return complaint, trust_score


async def resolve_complaint(
    db: AsyncSession,
    complaint_id: int,
    actor: AuthenticatedUser,
    now: datetime | None = None,
) -> tuple[Complaint, int]:
    """Resolve a complaint and recompute the unit's trust.

    Landlords may only resolve complaints on their own units.

    Raises:
        NotFoundError: If the complaint does not exist
        PermissionError: If a landlord does not own the unit
        ValidationError: If the complaint is already resolved
    """
    complaint = await crud.get_complaint_by_id(db, complaint_id)
    if complaint is None:
        raise NotFoundError(f"Complaint with ID {complaint_id} not found")

    if actor.role == ActorRole.LANDLORD:
        landlord = await directory_crud.get_landlord_by_user_id(db, actor.id)
        unit = await listings_crud.get_unit_by_id(db, complaint.unit_id)
        if landlord is None or unit is None or unit.landlord_id != landlord.id:
            raise PermissionError("resolve complaints for", "another landlord's unit")
    elif actor.role != ActorRole.ADMIN:
        raise PermissionError("resolve", "complaints")

    if complaint.resolved:
        raise ValidationError("Complaint already resolved")

    complaint.resolved = True
    complaint.resolved_at = now or utc_now()
    await db.commit()

    trust_score = await recalc_trust_and_audit(db, complaint.unit_id, now=now)
    return complaint, trust_score


def to_list_item(complaint: Complaint, now: datetime) -> ComplaintListItem:
    sla = sla_meta(complaint, now)
    return ComplaintListItem(
        **ComplaintResponse.model_validate(complaint).model_dump(),
        sla_status=sla.status,
        sla_countdown_seconds=sla.countdown_seconds,
        trust_impact_hint=-complaint_trust_impact(complaint),
    )


def complaint_metrics(complaints: list[Complaint], now: datetime) -> ComplaintMetrics:
    """Summary figures over a set of complaints."""
    statuses = [sla_meta(c, now).status for c in complaints]
    resolved = [c for c in complaints if c.resolved]
    late = statuses.count(SlaStatus.LATE)

    compliance = None
    if resolved:
        compliance = round((len(resolved) - late) / len(resolved) * 100, 2)

    hours = [
        (as_utc(c.resolved_at) - as_utc(c.created_at)).total_seconds() / 3600
        for c in resolved
        if c.resolved_at is not None
    ]
    average = round(sum(hours) / len(hours), 2) if hours else None

    return ComplaintMetrics(
        open_complaints=len(complaints) - len(resolved),
        late_complaints=late,
        complaints_last_30_days=sum(1 for c in complaints if created_within(c, now, 30)),
        complaints_last_60_days=sum(1 for c in complaints if created_within(c, now, 60)),
        sla_compliance_percent=compliance,
        average_resolution_hours=average,
    )


async def list_student_complaints(
    db: AsyncSession, user_id: int, now: datetime | None = None
) -> list[ComplaintListItem]:
    now = now or utc_now()
    student = await directory_crud.get_student_by_user_id(db, user_id)
    if student is None:
        raise NotFoundError("Student profile not found")
    complaints = await crud.get_complaints_for_student(db, student.id)
    return [to_list_item(c, now) for c in complaints]


async def list_landlord_complaints(
    db: AsyncSession,
    user_id: int,
    unit_id: int | None = None,
    incident_type: str | None = None,
    status: SlaStatus | None = None,
    now: datetime | None = None,
) -> LandlordComplaints:
    """Complaints on a landlord's units with SLA metrics.

    Raises:
        NotFoundError: If the landlord profile does not exist
        ValidationError: On an unknown incident type
    """
    now = now or utc_now()
    landlord = await directory_crud.get_landlord_by_user_id(db, user_id)
    if landlord is None:
        raise NotFoundError("Landlord profile not found")

    complaints = await crud.get_complaints_for_landlord(
        db,
        landlord.id,
        unit_id=unit_id,
        incident_type=_normalize_incident_type(incident_type),
    )
    if status is not None:
        complaints = [c for c in complaints if sla_meta(c, now).status == status]

    return LandlordComplaints(
        total=len(complaints),
        metrics=complaint_metrics(complaints, now),
        complaints=[to_list_item(c, now) for c in complaints],
    )


async def list_unit_complaints(
    db: AsyncSession, unit_id: int, now: datetime | None = None
) -> list[ComplaintListItem]:
    now = now or utc_now()
    await get_unit_or_404(db, unit_id)
    complaints = await crud.get_complaints_for_unit(db, unit_id)
    return [to_list_item(c, now) for c in complaints]


async def explain_unit(
    db: AsyncSession, unit_id: int, now: datetime | None = None
) -> UnitExplanation:
    """Explain a unit's visibility to students.

    Raises:
        NotFoundError: If the unit does not exist
    """
    now = now or utc_now()
    unit = await get_unit_or_404(db, unit_id)
    complaints = await crud.get_complaints_for_unit(db, unit_id)
    reasons = visibility_reasons(unit)

    return UnitExplanation(
        unit_id=unit.id,
        status=unit.status,
        structural_approved=unit.structural_approved,
        operational_baseline_approved=unit.operational_baseline_approved,
        trust_score=unit.trust_score,
        trust_band=trust_band(unit.trust_score),
        active_complaints=sum(1 for c in complaints if not c.resolved),
        complaints_last_30_days=sum(
            1 for c in complaints if created_within(c, now, RECURRENCE_WINDOW_DAYS)
        ),
        audit_required=unit.audit_required,
        visible_to_students=not reasons,
        visibility_reasons=reasons,
    )


# ----- Audits -----


def _escalate(unit: Unit, reason: str) -> None:
    unit.audit_required = True
    GovernanceStateMachine(unit).force_suspend(reason)


async def create_audit_log(
    db: AsyncSession,
    unit_id: int,
    reason: str,
    trigger_type: AuditTriggerType = AuditTriggerType.MANUAL,
) -> AuditLog:
    """Open an audit on a unit by hand.

    Sets ``audit_required`` and suspends the unit unless archived.

    Raises:
        NotFoundError: If the unit does not exist
        ValidationError: If the reason is empty or the trigger type is automatic
    """
    reason = (reason or "").strip()
    if not reason:
        raise ValidationError("reason is required", field="reason")
    if trigger_type not in (AuditTriggerType.MANUAL, AuditTriggerType.RANDOM_SAMPLE):
        raise ValidationError(
            "Only manual or random_sample audits can be created by hand",
            field="trigger_type",
            value=trigger_type.value,
        )

    unit = await get_unit_or_404(db, unit_id)
    log = await crud.create_audit_log(db, unit_id, trigger_type, reason)
    _escalate(unit, reason)
    await db.commit()
    logger.warning(
        "Audit opened",
        extra={"unit_id": unit_id, "trigger_type": trigger_type.value},
    )
    return log


async def penalize_misrepresentation(
    db: AsyncSession,
    unit_id: int,
    reason: str,
    penalty_points: int = DEFAULT_PENALTY_POINTS,
) -> Unit:
    """Penalize a false self-declaration.

    The trust score drops by ``penalty_points`` (floored at 0). The next
    recomputation overwrites it with the formula result.

    Raises:
        NotFoundError: If the unit does not exist
        ValidationError: If the points are not positive or the reason is empty
    """
    if penalty_points <= 0:
        raise ValidationError(
            "penalty_points must be a positive number",
            field="penalty_points",
            value=penalty_points,
        )
    reason = (reason or "").strip()
    if not reason:
        raise ValidationError("reason is required", field="reason")

    unit = await get_unit_or_404(db, unit_id)
    full_reason = f"Self-declaration misrepresentation: {reason}"
    await crud.create_audit_log(
        db, unit_id, AuditTriggerType.MISREPRESENTATION, full_reason
    )
    unit.trust_score = max(unit.trust_score - penalty_points, 0)
    unit.false_declaration_count += 1
    _escalate(unit, full_reason)
    await db.commit()
    logger.warning(
        "Misrepresentation penalty applied",
        extra={
            "unit_id": unit_id,
            "penalty_points": penalty_points,
            "trust_score": unit.trust_score,
        },
    )
    return unit


async def record_capacity_violation(db: AsyncSession, unit_id: int) -> AuditLog:
    """Punish an attempted check-in beyond capacity.

    Revokes the structural approval, sets ``audit_required`` and suspends the
    unit unless archived.
    """
    unit = await get_unit_or_404(db, unit_id)
    log = await crud.create_audit_log(
        db, unit_id, AuditTriggerType.CAPACITY_VIOLATION, CAPACITY_VIOLATION_REASON
    )
    unit.structural_approved = False
    _escalate(unit, CAPACITY_VIOLATION_REASON)
    await db.commit()
    logger.warning(
        "Capacity violation recorded",
        extra={"unit_id": unit_id, "capacity": unit.capacity},
    )
    return log


async def sample_units_for_audit(
    db: AsyncSession,
    corridor_id: int,
    count: int = DEFAULT_AUDIT_SAMPLE,
    rng: random.Random | None = None,
) -> AuditSample:
    """Draw a random sample of approved, priority-band units in a corridor.

    Raises:
        ValidationError: If ``count`` is outside 1-20
    """
    if not 1 <= count <= MAX_AUDIT_SAMPLE:
        raise ValidationError(
            f"count must be an integer from 1 to {MAX_AUDIT_SAMPLE}",
            field="count",
            value=count,
        )
    rng = rng or random.SystemRandom()
    candidates = await listings_crud.get_audit_sample_candidates(
        db, corridor_id, PRIORITY_TRUST_THRESHOLD
    )
    selected = rng.sample(candidates, min(count, len(candidates)))

    return AuditSample(
        corridor_id=corridor_id,
        candidate_count=len(candidates),
        sampled_count=len(selected),
        sampled_units=[
            SampledUnit(
                id=u.id,
                trust_score=u.trust_score,
                trust_band=trust_band(u.trust_score),
                status=u.status,
            )
            for u in selected
        ],
    )


async def get_audit_log_or_404(db: AsyncSession, audit_log_id: int) -> AuditLog:
    log = await crud.get_audit_log_by_id(db, audit_log_id)
    if log is None:
        raise NotFoundError(f"Audit log with ID {audit_log_id} not found")
    return log


async def set_corrective_plan(
    db: AsyncSession,
    audit_log_id: int,
    corrective_action: str,
    corrective_deadline: datetime | None = None,
) -> AuditLog:
    """Attach a corrective action and optional deadline to an audit log.

    Raises:
        NotFoundError: If the audit log does not exist
        ValidationError: If the action is empty
    """
    corrective_action = (corrective_action or "").strip()
    if not corrective_action:
        raise ValidationError("corrective_action is required", field="corrective_action")

    log = await get_audit_log_or_404(db, audit_log_id)
    log.corrective_action = corrective_action
    log.corrective_deadline = corrective_deadline
    await db.commit()
    return log


async def resolve_audit_log(
    db: AsyncSession,
    audit_log_id: int,
    verification_notes: str | None = None,
    reopen_unit: bool = True,
) -> tuple[AuditLog, Unit, int]:
    """Resolve an audit log and clear the unit's audit flag when none remain.

    With ``reopen_unit`` the unit returns to approved once its last audit is
    resolved, provided both baselines are approved and trust is at least 50.

    Returns:
        Tuple of (audit log, unit, unresolved audit log count)

    Raises:
        NotFoundError: If the audit log does not exist
        ValidationError: If it is already resolved
    """
    log = await get_audit_log_or_404(db, audit_log_id)
    if log.resolved:
        raise ValidationError("Audit log already resolved")

    log.resolved = True
    log.resolved_at = utc_now()
    log.verification_notes = (verification_notes or "").strip() or None
    await db.flush()

    unresolved = await crud.count_unresolved_audit_logs(db, log.unit_id)
    unit = await get_unit_or_404(db, log.unit_id)
    unit.audit_required = unresolved > 0
    if reopen_unit and unresolved == 0:
        GovernanceStateMachine(unit).reopen_after_audit()

    await db.commit()
    logger.info(
        "Audit log resolved",
        extra={
            "audit_log_id": audit_log_id,
            "unit_id": unit.id,
            "unresolved_audit_logs": unresolved,
            "status": unit.status.value,
        },
    )
    return log, unit, unresolved


async def list_unit_audit_logs(db: AsyncSession, unit_id: int) -> list[AuditLog]:
    await get_unit_or_404(db, unit_id)
    return await crud.get_audit_logs_for_unit(db, unit_id)


async def list_units_requiring_audit(db: AsyncSession, corridor_id: int) -> list[Unit]:
    return await listings_crud.get_units_requiring_audit(db, corridor_id)
