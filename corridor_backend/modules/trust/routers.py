"""Trust API routes: complaints, trust explanations and audits."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ...database import get_db
from ..auth.dependencies import (
    AdminUser,
    CurrentUser,
    LandlordOrAdminUser,
    LandlordUser,
    StudentUser,
)
from ..commons import BaseResponse
from ..listings.schemas import UnitExplanation, UnitResponse
from . import services
from .schemas import (
    AuditLogCreate,
    AuditLogResolve,
    AuditLogResponse,
    AuditResolution,
    AuditSample,
    ComplaintCreate,
    ComplaintListItem,
    ComplaintRecorded,
    ComplaintResponse,
    CorrectivePlan,
    LandlordComplaints,
    MisrepresentationPenalty,
    PenaltyResult,
    TrustRecalculation,
)
from .sla import SlaStatus

complaints_router = APIRouter(prefix="/complaints", tags=["Complaints"])
trust_router = APIRouter(prefix="/units", tags=["Trust"])
audits_router = APIRouter(prefix="/admin/audits", tags=["Audits"])


# ----- Complaints -----


@complaints_router.post(
    "", response_model=BaseResponse[ComplaintRecorded], status_code=201
)
async def record_complaint(
    data: ComplaintCreate,
    current_user: StudentUser,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """File a complaint against a unit or an active occupancy."""
    complaint, trust_score = await services.record_complaint(
        db,
        user_id=current_user.id,
        severity=data.severity,
        unit_id=data.unit_id,
        occupant_public_id=data.occupant_id,
        student_id=data.student_id,
        incident_type=data.incident_type,
        message=data.message,
    )
    return BaseResponse(
        success=True,
        message="Complaint recorded",
        data=ComplaintRecorded(
            complaint=ComplaintResponse.model_validate(complaint),
            trust_score=trust_score,
        ),
    )


@complaints_router.patch(
    "/{complaint_id}/resolve", response_model=BaseResponse[ComplaintRecorded]
)
async def resolve_complaint(
    complaint_id: int,
    current_user: LandlordOrAdminUser,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    complaint, trust_score = await services.resolve_complaint(
        db, complaint_id, current_user
    )
    return BaseResponse(
        success=True,
        message="Complaint resolved",
        data=ComplaintRecorded(
            complaint=ComplaintResponse.model_validate(complaint),
            trust_score=trust_score,
        ),
    )


@complaints_router.get("/mine", response_model=BaseResponse[list[ComplaintListItem]])
async def list_my_complaints(
    current_user: StudentUser,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    items = await services.list_student_complaints(db, current_user.id)
    return BaseResponse(success=True, data=items)


@complaints_router.get("/landlord", response_model=BaseResponse[LandlordComplaints])
async def list_landlord_complaints(
    current_user: LandlordUser,
    db: Annotated[AsyncSession, Depends(get_db)],
    unit_id: int | None = Query(None),
    incident_type: str | None = Query(None),
    status: SlaStatus | None = Query(None),
):
    """Complaints on the caller's units with SLA metrics."""
    result = await services.list_landlord_complaints(
        db,
        current_user.id,
        unit_id=unit_id,
        incident_type=incident_type,
        status=status,
    )
    return BaseResponse(success=True, data=result)


@complaints_router.get(
    "/unit/{unit_id}", response_model=BaseResponse[list[ComplaintListItem]]
)
async def list_unit_complaints(
    unit_id: int,
    current_user: AdminUser,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    items = await services.list_unit_complaints(db, unit_id)
    return BaseResponse(success=True, data=items)


# ----- Trust -----


@trust_router.get("/{unit_id}/explain", response_model=BaseResponse[UnitExplanation])
async def explain_unit(
    unit_id: int,
    current_user: CurrentUser,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Explain why a unit is or is not visible to students."""
    explanation = await services.explain_unit(db, unit_id)
    return BaseResponse(success=True, data=explanation)


@trust_router.post(
    "/{unit_id}/recalculate", response_model=BaseResponse[TrustRecalculation]
)
async def recalculate_trust(
    unit_id: int,
    current_user: AdminUser,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    trust_score = await services.recalc_trust_and_audit(db, unit_id)
    return BaseResponse(
        success=True,
        data=TrustRecalculation(unit_id=unit_id, trust_score=trust_score),
    )


# ----- Audits -----


@audits_router.post(
    "/units/{unit_id}", response_model=BaseResponse[AuditLogResponse], status_code=201
)
async def create_audit_log(
    unit_id: int,
    data: AuditLogCreate,
    current_user: AdminUser,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Open a manual or random-sample audit; suspends the unit."""
    log = await services.create_audit_log(
        db, unit_id, data.reason, trigger_type=data.trigger_type
    )
    return BaseResponse(
        success=True,
        message="Audit log created",
        data=AuditLogResponse.model_validate(log),
    )


@audits_router.get(
    "/units/{unit_id}", response_model=BaseResponse[list[AuditLogResponse]]
)
async def list_unit_audit_logs(
    unit_id: int,
    current_user: AdminUser,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    logs = await services.list_unit_audit_logs(db, unit_id)
    return BaseResponse(
        success=True,
        data=[AuditLogResponse.model_validate(log) for log in logs],
    )


@audits_router.post(
    "/units/{unit_id}/misrepresentation", response_model=BaseResponse[PenaltyResult]
)
async def penalize_misrepresentation(
    unit_id: int,
    data: MisrepresentationPenalty,
    current_user: AdminUser,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    unit = await services.penalize_misrepresentation(
        db, unit_id, data.reason, penalty_points=data.penalty_points
    )
    return BaseResponse(
        success=True,
        message="Misrepresentation penalty applied",
        data=PenaltyResult(
            unit_id=unit.id,
            penalty_points=data.penalty_points,
            trust_score=unit.trust_score,
        ),
    )


@audits_router.get(
    "/corridors/{corridor_id}", response_model=BaseResponse[list[UnitResponse]]
)
async def list_units_requiring_audit(
    corridor_id: int,
    current_user: AdminUser,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Units under audit in a corridor, lowest trust first."""
    units = await services.list_units_requiring_audit(db, corridor_id)
    return BaseResponse(
        success=True,
        data=[UnitResponse.model_validate(u) for u in units],
    )


@audits_router.get(
    "/corridors/{corridor_id}/sample", response_model=BaseResponse[AuditSample]
)
async def sample_units_for_audit(
    corridor_id: int,
    current_user: AdminUser,
    db: Annotated[AsyncSession, Depends(get_db)],
    count: int = Query(services.DEFAULT_AUDIT_SAMPLE),
):
    sample = await services.sample_units_for_audit(db, corridor_id, count)
    return BaseResponse(success=True, data=sample)


@audits_router.patch(
    "/{audit_log_id}/corrective-plan", response_model=BaseResponse[AuditLogResponse]
)
async def set_corrective_plan(
    audit_log_id: int,
    data: CorrectivePlan,
    current_user: AdminUser,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    log = await services.set_corrective_plan(
        db, audit_log_id, data.corrective_action, data.corrective_deadline
    )
    return BaseResponse(success=True, data=AuditLogResponse.model_validate(log))


@audits_router.patch(
    "/{audit_log_id}/resolve", response_model=BaseResponse[AuditResolution]
)
async def resolve_audit_log(
    audit_log_id: int,
    data: AuditLogResolve,
    current_user: AdminUser,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Resolve an audit log, reopening the unit when it was the last one."""
    log, unit, unresolved = await services.resolve_audit_log(
        db,
        audit_log_id,
        verification_notes=data.verification_notes,
        reopen_unit=data.reopen_unit,
    )
    return BaseResponse(
        success=True,
        message="Audit log resolved",
        data=AuditResolution(
            audit_log=AuditLogResponse.model_validate(log),
            unit=UnitResponse.model_validate(unit),
            unresolved_audit_logs=unresolved,
        ),
    )
