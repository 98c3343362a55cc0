"""Trust schemas: complaints, audit logs and visibility explanations."""

from datetime import datetime

from pydantic import BaseModel, Field, model_validator

from ..listings.models import UnitStatus
from ..listings.schemas import UnitResponse
from .models import AuditTriggerType, IncidentType
from .sla import SlaStatus

# ----- Complaint Schemas -----


class ComplaintCreate(BaseModel):
    """A complaint filed by a student against a unit or an occupancy."""

    unit_id: int | None = None
    occupant_id: str | None = Field(None, description="12-digit occupant public ID")
    student_id: int | None = None
    severity: int = Field(..., ge=1, le=5)
    incident_type: str | None = None
    message: str | None = Field(None, max_length=1200)

    @model_validator(mode="after")
    def require_target(self):
        if self.unit_id is None and not (self.occupant_id or "").strip():
            raise ValueError("Provide occupant_id or unit_id")
        return self


class ComplaintResponse(BaseModel):
    id: int
    unit_id: int
    student_id: int
    occupant_id: int | None = None
    severity: int
    incident_type: IncidentType | None = None
    incident_flag: bool
    message: str | None = None
    created_at: datetime
    sla_deadline: datetime
    resolved: bool
    resolved_at: datetime | None = None

    class Config:
        from_attributes = True


class ComplaintListItem(ComplaintResponse):
    """Complaint with its SLA state and score impact."""

    sla_status: SlaStatus
    sla_countdown_seconds: int | None = None
    trust_impact_hint: int


class ComplaintRecorded(BaseModel):
    complaint: ComplaintResponse
    trust_score: int


class ComplaintMetrics(BaseModel):
    open_complaints: int
    late_complaints: int
    complaints_last_30_days: int
    complaints_last_60_days: int
    sla_compliance_percent: float | None = None
    average_resolution_hours: float | None = None


class LandlordComplaints(BaseModel):
    total: int
    metrics: ComplaintMetrics
    complaints: list[ComplaintListItem]


# ----- Audit Schemas -----


class AuditLogCreate(BaseModel):
    reason: str = Field(..., min_length=1)
    trigger_type: AuditTriggerType = AuditTriggerType.MANUAL


class MisrepresentationPenalty(BaseModel):
    reason: str = Field(..., min_length=1)
    penalty_points: int = Field(default=8, gt=0)


class PenaltyResult(BaseModel):
    unit_id: int
    penalty_points: int
    trust_score: int


class CorrectivePlan(BaseModel):
    corrective_action: str = Field(..., min_length=1)
    corrective_deadline: datetime | None = None


class AuditLogResolve(BaseModel):
    verification_notes: str | None = None
    reopen_unit: bool = True


class AuditLogResponse(BaseModel):
    id: int
    unit_id: int
    trigger_type: AuditTriggerType
    reason: str
    corrective_action: str | None = None
    corrective_deadline: datetime | None = None
    resolved: bool
    resolved_at: datetime | None = None
    verification_notes: str | None = None
    created_at: datetime

    class Config:
        from_attributes = True


class AuditResolution(BaseModel):
    audit_log: AuditLogResponse
    unit: UnitResponse
    unresolved_audit_logs: int


class SampledUnit(BaseModel):
    id: int
    trust_score: int
    trust_band: str
    status: UnitStatus


class AuditSample(BaseModel):
    corridor_id: int
    candidate_count: int
    sampled_count: int
    sampled_units: list[SampledUnit]


class TrustRecalculation(BaseModel):
    unit_id: int
    trust_score: int
