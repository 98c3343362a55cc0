from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

from corridor_backend.modules.trust.scoring import (
    BASE_TRUST,
    calculate_trust_score,
    complaint_trust_impact,
    recurrence_penalty,
)
from corridor_backend.modules.trust.sla import SlaStatus, sla_deadline_for, sla_meta

NOW = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)


def complaint(severity=1, age_days=1, resolved_after_hours=None):
    created_at = NOW - timedelta(days=age_days)
    resolved_at = (
        created_at + timedelta(hours=resolved_after_hours)
        if resolved_after_hours is not None
        else None
    )
    return SimpleNamespace(
        severity=severity,
        created_at=created_at,
        sla_deadline=sla_deadline_for(created_at),
        resolved=resolved_at is not None,
        resolved_at=resolved_at,
        incident_flag=False,
    )


def test_no_complaints_gives_base_score():
    assert calculate_trust_score([], NOW) == BASE_TRUST


def test_unresolved_and_on_time_complaints():
    complaints = [complaint(severity=3), complaint(severity=2, resolved_after_hours=10)]

    assert calculate_trust_score(complaints, NOW) == 60


def test_late_resolution_costs_three_points():
    on_time = complaint(severity=2, resolved_after_hours=47)
    late = complaint(severity=2, resolved_after_hours=49, age_days=5)

    assert complaint_trust_impact(on_time) == 4
    assert complaint_trust_impact(late) == 7


def test_recurrence_penalty_after_three_recent_complaints():
    recent = [complaint(severity=1, resolved_after_hours=1) for _ in range(4)]

    assert recurrence_penalty(recent, NOW) == 5
    assert calculate_trust_score(recent, NOW) == BASE_TRUST - 4 * 2 - 5


def test_old_complaints_do_not_count_towards_recurrence():
    old = [complaint(severity=1, age_days=45, resolved_after_hours=1) for _ in range(5)]

    assert recurrence_penalty(old, NOW) == 0


def test_score_is_clamped_to_zero():
    complaints = [complaint(severity=5) for _ in range(10)]

    assert calculate_trust_score(complaints, NOW) == 0


def test_score_is_deterministic():
    complaints = [complaint(severity=4), complaint(severity=1, resolved_after_hours=60)]

    assert calculate_trust_score(complaints, NOW) == calculate_trust_score(
        complaints, NOW
    )


def test_resolving_never_lowers_the_score():
    pending = complaint(severity=3, age_days=10)
    before = calculate_trust_score([pending], NOW)

    pending.resolved = True
    pending.resolved_at = NOW
    after = calculate_trust_score([pending], NOW)

    assert after >= before


def test_sla_status_progression():
    fresh = complaint(age_days=1)
    overdue = complaint(age_days=3)
    late = complaint(age_days=5, resolved_after_hours=72)
    done = complaint(age_days=5, resolved_after_hours=2)

    assert sla_meta(fresh, NOW).status == SlaStatus.OPEN
    assert sla_meta(fresh, NOW).countdown_seconds == 24 * 3600
    assert sla_meta(overdue, NOW).status == SlaStatus.SLA_BREACHED
    assert sla_meta(late, NOW).status == SlaStatus.LATE
    assert sla_meta(done, NOW).status == SlaStatus.RESOLVED
    assert sla_meta(done, NOW).countdown_seconds is None
