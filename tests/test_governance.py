import pytest

from corridor_backend.core.exceptions import ValidationError
from corridor_backend.modules.listings.governance import (
    GovernanceStateMachine,
    is_visible_to_students,
    trust_band,
    visibility_reasons,
)
from corridor_backend.modules.listings.models import Unit, UnitStatus


def make_unit(status=UnitStatus.DRAFT, approved=False, trust_score=75, audit=False):
    return Unit(
        id=1,
        corridor_id=1,
        landlord_id=1,
        capacity=2,
        status=status,
        structural_approved=approved,
        operational_baseline_approved=approved,
        trust_score=trust_score,
        audit_required=audit,
        false_declaration_count=0,
    )


def test_trust_bands():
    assert trust_band(49) == "hidden"
    assert trust_band(50) == "standard"
    assert trust_band(79) == "standard"
    assert trust_band(80) == "priority"


def test_submit_only_from_draft():
    unit = make_unit()
    GovernanceStateMachine(unit).submit()
    assert unit.status == UnitStatus.SUBMITTED

    with pytest.raises(ValidationError):
        GovernanceStateMachine(unit).submit()


def test_archived_is_terminal():
    unit = make_unit(status=UnitStatus.ARCHIVED)
    machine = GovernanceStateMachine(unit)

    with pytest.raises(ValidationError):
        machine.set_manual_status(UnitStatus.DRAFT)
    assert not machine.force_suspend("audit")
    assert unit.status == UnitStatus.ARCHIVED


def test_submitted_cannot_be_set_manually():
    unit = make_unit(status=UnitStatus.ADMIN_REVIEW)

    with pytest.raises(ValidationError, match="submitting"):
        GovernanceStateMachine(unit).set_manual_status(UnitStatus.SUBMITTED)


def test_approval_requires_both_baselines():
    unit = make_unit(status=UnitStatus.ADMIN_REVIEW)

    with pytest.raises(ValidationError, match="baselines"):
        GovernanceStateMachine(unit).set_manual_status(UnitStatus.APPROVED)
    assert unit.status == UnitStatus.ADMIN_REVIEW


def test_approval_blocked_by_low_trust_and_audit():
    unit = make_unit(status=UnitStatus.ADMIN_REVIEW, approved=True, trust_score=40)
    unit.audit_required = True

    blockers = GovernanceStateMachine(unit).approval_blockers()

    assert len(blockers) == 2
    with pytest.raises(ValidationError):
        GovernanceStateMachine(unit).set_manual_status(UnitStatus.APPROVED)


def test_same_status_is_a_no_op():
    unit = make_unit(status=UnitStatus.ADMIN_REVIEW)

    assert GovernanceStateMachine(unit).transition(UnitStatus.ADMIN_REVIEW) is False


def test_review_promotes_when_both_flags_set():
    unit = make_unit(status=UnitStatus.SUBMITTED)

    GovernanceStateMachine(unit).apply_review(
        structural_approved=True, operational_approved=True
    )

    assert unit.status == UnitStatus.APPROVED


def test_review_moves_submitted_unit_to_admin_review():
    unit = make_unit(status=UnitStatus.SUBMITTED)

    GovernanceStateMachine(unit).apply_review(structural_approved=True)

    assert unit.status == UnitStatus.ADMIN_REVIEW
    assert unit.structural_approved
    assert not unit.operational_baseline_approved


def test_review_with_illegal_status_writes_nothing():
    unit = make_unit(status=UnitStatus.ADMIN_REVIEW)

    with pytest.raises(ValidationError):
        GovernanceStateMachine(unit).apply_review(
            structural_approved=True, status=UnitStatus.APPROVED
        )

    assert not unit.structural_approved
    assert unit.status == UnitStatus.ADMIN_REVIEW


def test_empty_review_is_rejected():
    with pytest.raises(ValidationError, match="No review updates"):
        GovernanceStateMachine(make_unit()).apply_review()


def test_rejection_clears_flags():
    unit = make_unit(status=UnitStatus.APPROVED, approved=True)

    GovernanceStateMachine(unit).set_manual_status(UnitStatus.REJECTED)

    assert unit.status == UnitStatus.REJECTED
    assert not unit.structural_approved
    assert not unit.operational_baseline_approved


def test_demotion_when_trust_drops():
    unit = make_unit(status=UnitStatus.APPROVED, approved=True, trust_score=45)

    assert GovernanceStateMachine(unit).demote_if_unapprovable("trust")
    assert unit.status == UnitStatus.ADMIN_REVIEW


def test_force_suspend_and_reopen():
    unit = make_unit(status=UnitStatus.APPROVED, approved=True, audit=True)
    machine = GovernanceStateMachine(unit)

    assert machine.force_suspend("incident")
    assert unit.status == UnitStatus.SUSPENDED
    assert not machine.reopen_after_audit()

    unit.audit_required = False
    assert machine.reopen_after_audit()
    assert unit.status == UnitStatus.APPROVED


def test_visibility_reasons():
    visible = make_unit(status=UnitStatus.APPROVED, approved=True)
    hidden = make_unit(status=UnitStatus.SUSPENDED, trust_score=30)

    assert is_visible_to_students(visible)
    assert visibility_reasons(visible) == []
    assert len(visibility_reasons(hidden)) == 4
