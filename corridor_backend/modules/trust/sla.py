"""SLA evaluation for complaints.

Breaches are computed when asked; nothing runs on a timer.
"""

import enum
from datetime import datetime, timedelta

from pydantic import BaseModel

from ...core.utils import as_utc
from .scoring import is_resolved_late

SLA_HOURS = 48


class SlaStatus(str, enum.Enum):
    OPEN = "open"
    SLA_BREACHED = "sla_breached"
    RESOLVED = "resolved"
    LATE = "late"


class SlaMeta(BaseModel):
    status: SlaStatus
    countdown_seconds: int | None = None


def sla_deadline_for(created_at: datetime) -> datetime:
    return created_at + timedelta(hours=SLA_HOURS)


def sla_meta(complaint, now: datetime) -> SlaMeta:
    """SLA status of a complaint at ``now``, with a countdown while open."""
    if complaint.resolved:
        status = SlaStatus.LATE if is_resolved_late(complaint) else SlaStatus.RESOLVED
        return SlaMeta(status=status)

    remaining = as_utc(complaint.sla_deadline) - as_utc(now)
    status = SlaStatus.SLA_BREACHED if remaining.total_seconds() < 0 else SlaStatus.OPEN
    return SlaMeta(status=status, countdown_seconds=int(remaining.total_seconds()))
