"""Automatic audit triggers evaluated after each trust recomputation."""

from collections.abc import Iterable
from datetime import datetime, timedelta

from pydantic import BaseModel

from ...core.utils import as_utc
from .models import AuditTriggerType
from .scoring import created_within, is_resolved_late

AUDIT_WINDOW_DAYS = 60
DENSITY_THRESHOLD = 5
SLA_BREACH_THRESHOLD = 3
INCIDENT_THRESHOLD = 1

TRIGGER_REASONS = {
    AuditTriggerType.COMPLAINT_DENSITY: (
        f"Auto-triggered: complaint density threshold reached "
        f"({DENSITY_THRESHOLD} complaints in {AUDIT_WINDOW_DAYS} days)"
    ),
    AuditTriggerType.INCIDENT: "Auto-triggered: severe incident complaint raised",
    AuditTriggerType.SLA_BREACH: (
        f"Auto-triggered: repeated SLA breaches detected in {AUDIT_WINDOW_DAYS} days"
    ),
}


class AuditTriggerDecision(BaseModel):
    """Outcome of evaluating the audit thresholds for one unit."""

    density_triggered: bool = False
    sla_breach_triggered: bool = False
    incident_triggered: bool = False
    audit_required: bool = False
    newly_triggered: bool = False

    @property
    def any_triggered(self) -> bool:
        return (
            self.density_triggered
            or self.sla_breach_triggered
            or self.incident_triggered
        )

    @property
    def trigger_type(self) -> AuditTriggerType | None:
        """Highest-priority trigger: density, then incident, then SLA breach."""
        if self.density_triggered:
            return AuditTriggerType.COMPLAINT_DENSITY
        if self.incident_triggered:
            return AuditTriggerType.INCIDENT
        if self.sla_breach_triggered:
            return AuditTriggerType.SLA_BREACH
        return None

    @property
    def reason(self) -> str | None:
        trigger = self.trigger_type
        return TRIGGER_REASONS[trigger] if trigger else None


def evaluate_audit_triggers(
    complaints: Iterable, now: datetime, audit_required: bool
) -> AuditTriggerDecision:
    """
    Evaluate the density, SLA-breach and incident thresholds over the audit window.

    ``audit_required`` is sticky: once set it stays set here, and only a new
    escalation (flag previously clear) counts as newly triggered.

    Args:
        complaints: The unit's complaints
        now: Evaluation time
        audit_required: The unit's current audit flag

    Returns:
        AuditTriggerDecision
    """
    complaints = list(complaints)
    window_start = as_utc(now) - timedelta(days=AUDIT_WINDOW_DAYS)

    in_window = sum(1 for c in complaints if created_within(c, now, AUDIT_WINDOW_DAYS))
    late_in_window = sum(
        1
        for c in complaints
        if is_resolved_late(c) and as_utc(c.resolved_at) >= window_start
    )
    incidents = sum(
        1
        for c in complaints
        if c.incident_flag and created_within(c, now, AUDIT_WINDOW_DAYS)
    )

    decision = AuditTriggerDecision(
        density_triggered=in_window >= DENSITY_THRESHOLD,
        sla_breach_triggered=late_in_window >= SLA_BREACH_THRESHOLD,
        incident_triggered=incidents >= INCIDENT_THRESHOLD,
    )
    decision.audit_required = audit_required or decision.any_triggered
    decision.newly_triggered = not audit_required and decision.any_triggered
    return decision
