"""Trust module: complaint ledger, trust scoring and audit escalation."""

from .models import AuditLog, AuditTriggerType, Complaint, IncidentType
from .routers import audits_router, complaints_router, trust_router
from .scoring import calculate_trust_score
from .triggers import AuditTriggerDecision, evaluate_audit_triggers

__all__ = [
    "Complaint",
    "AuditLog",
    "IncidentType",
    "AuditTriggerType",
    "calculate_trust_score",
    "evaluate_audit_triggers",
    "AuditTriggerDecision",
    "complaints_router",
    "trust_router",
    "audits_router",
]
