"""Trust score calculation over a unit's complaint history.

Pure functions: the same complaints and evaluation time always give the same
score.
"""

from collections.abc import Iterable
from datetime import datetime, timedelta

from ...core.utils import as_utc

BASE_TRUST = 75
SEVERITY_WEIGHT = 2
UNRESOLVED_PENALTY = 5
LATE_RESOLUTION_PENALTY = 3
RECURRENCE_WINDOW_DAYS = 30
RECURRENCE_THRESHOLD = 3
RECURRENCE_PENALTY = 5
MIN_TRUST = 0
MAX_TRUST = 100


def is_resolved_late(complaint) -> bool:
    """True when the complaint was resolved after its SLA deadline."""
    if not complaint.resolved or complaint.resolved_at is None:
        return False
    if complaint.sla_deadline is None:
        return False
    return as_utc(complaint.resolved_at) > as_utc(complaint.sla_deadline)


def created_within(complaint, now: datetime, days: int) -> bool:
    if complaint.created_at is None:
        return False
    return as_utc(complaint.created_at) >= as_utc(now) - timedelta(days=days)


def complaint_trust_impact(complaint) -> int:
    """Points a single complaint takes off the score, before recurrence."""
    impact = complaint.severity * SEVERITY_WEIGHT
    if not complaint.resolved:
        impact += UNRESOLVED_PENALTY
    elif is_resolved_late(complaint):
        impact += LATE_RESOLUTION_PENALTY
    return impact


def recurrence_penalty(complaints: Iterable, now: datetime) -> int:
    recent = sum(
        1 for c in complaints if created_within(c, now, RECURRENCE_WINDOW_DAYS)
    )
    return max(0, recent - RECURRENCE_THRESHOLD) * RECURRENCE_PENALTY


def calculate_trust_score(complaints: Iterable, now: datetime) -> int:
    """
    Compute a unit's trust score.

    Starts from the base score, subtracts each complaint's impact and the
    recurrence penalty for complaints filed in the last 30 days, then clamps
    to the 0-100 range.

    Args:
        complaints: The unit's complaints (objects with ``severity``,
            ``resolved``, ``resolved_at``, ``sla_deadline`` and ``created_at``)
        now: Evaluation time

    Returns:
        Integer trust score
    """
    complaints = list(complaints)
    score = BASE_TRUST
    score -= sum(complaint_trust_impact(c) for c in complaints)
    score -= recurrence_penalty(complaints, now)
    return max(MIN_TRUST, min(MAX_TRUST, score))
