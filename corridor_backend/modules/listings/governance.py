"""Governance state machine for unit listings.

Every status change goes through :class:`GovernanceStateMachine`, which checks
the transition table and the approval gate before touching the unit.
"""

from ...core.exceptions import ValidationError
from ...core.logging import get_logger
from .models import Unit, UnitStatus

logger = get_logger("listings.governance")

# Minimum trust score for approval and student visibility
VISIBILITY_TRUST_THRESHOLD = 50
PRIORITY_TRUST_THRESHOLD = 80

ALLOWED_TRANSITIONS: dict[UnitStatus, frozenset[UnitStatus]] = {
    UnitStatus.DRAFT: frozenset(
        {
            UnitStatus.SUBMITTED,
            UnitStatus.REJECTED,
            UnitStatus.SUSPENDED,
            UnitStatus.ARCHIVED,
        }
    ),
    UnitStatus.SUBMITTED: frozenset(
        {
            UnitStatus.ADMIN_REVIEW,
            UnitStatus.APPROVED,
            UnitStatus.REJECTED,
            UnitStatus.SUSPENDED,
            UnitStatus.ARCHIVED,
        }
    ),
    UnitStatus.ADMIN_REVIEW: frozenset(
        {
            UnitStatus.APPROVED,
            UnitStatus.REJECTED,
            UnitStatus.SUSPENDED,
            UnitStatus.ARCHIVED,
        }
    ),
    UnitStatus.APPROVED: frozenset(
        {
            UnitStatus.ADMIN_REVIEW,
            UnitStatus.REJECTED,
            UnitStatus.SUSPENDED,
            UnitStatus.ARCHIVED,
        }
    ),
    UnitStatus.REJECTED: frozenset(
        {
            UnitStatus.DRAFT,
            UnitStatus.ADMIN_REVIEW,
            UnitStatus.SUSPENDED,
            UnitStatus.ARCHIVED,
        }
    ),
    UnitStatus.SUSPENDED: frozenset(
        {
            UnitStatus.ADMIN_REVIEW,
            UnitStatus.APPROVED,
            UnitStatus.REJECTED,
            UnitStatus.ARCHIVED,
        }
    ),
    UnitStatus.ARCHIVED: frozenset(),
}

# Statuses only reachable through a dedicated operation
_MANUAL_FORBIDDEN = frozenset({UnitStatus.SUBMITTED})


def trust_band(trust_score: int) -> str:
    """Map a trust score to its band: hidden, standard or priority."""
    if trust_score < VISIBILITY_TRUST_THRESHOLD:
        return "hidden"
    if trust_score < PRIORITY_TRUST_THRESHOLD:
        return "standard"
    return "priority"


def visibility_reasons(unit: Unit) -> list[str]:
    """Reasons a unit is hidden from students; empty when visible."""
    reasons = []
    if unit.status != UnitStatus.APPROVED:
        reasons.append(f"status is {UnitStatus(unit.status).value}")
    if not unit.structural_approved:
        reasons.append("structural baseline not approved")
    if not unit.operational_baseline_approved:
        reasons.append("operational baseline not approved")
    if unit.trust_score < VISIBILITY_TRUST_THRESHOLD:
        reasons.append(
            f"trust score below visibility threshold ({VISIBILITY_TRUST_THRESHOLD})"
        )
    return reasons


def is_visible_to_students(unit: Unit) -> bool:
    return not visibility_reasons(unit)


class GovernanceStateMachine:
    """Owns the status of a single unit.

    Methods mutate the unit in place; callers own the commit.
    """

    def __init__(self, unit: Unit):
        self.unit = unit

    @property
    def status(self) -> UnitStatus:
        return UnitStatus(self.unit.status)

    def can_transition(self, target: UnitStatus) -> bool:
        return target == self.status or target in ALLOWED_TRANSITIONS[self.status]

    def approval_blockers(
        self,
        structural_approved: bool | None = None,
        operational_approved: bool | None = None,
    ) -> list[str]:
        """Reasons the unit cannot be approved, using overrides where given."""
        if structural_approved is None:
            structural_approved = self.unit.structural_approved
        if operational_approved is None:
            operational_approved = self.unit.operational_baseline_approved

        blockers = []
        if not structural_approved or not operational_approved:
            blockers.append(
                "Cannot set status to approved: both structural and operational "
                "baselines must be approved"
            )
        if self.unit.trust_score < VISIBILITY_TRUST_THRESHOLD:
            blockers.append(
                "Cannot set status to approved: trust score must be at least "
                f"{VISIBILITY_TRUST_THRESHOLD}"
            )
        if self.unit.audit_required:
            blockers.append("Cannot set status to approved while auditRequired is true")
        return blockers

    def check_transition(
        self,
        target: UnitStatus,
        structural_approved: bool | None = None,
        operational_approved: bool | None = None,
    ) -> None:
        """Validate a transition without applying it.

        Raises:
            ValidationError: If the table or the approval gate forbids it
        """
        if not self.can_transition(target):
            raise ValidationError(
                f"Cannot change status from {self.status.value} to {target.value}",
                field="status",
                value=target.value,
            )
        if target == UnitStatus.APPROVED:
            blockers = self.approval_blockers(structural_approved, operational_approved)
            if blockers:
                raise ValidationError(blockers[0], details={"blockers": blockers})

    def transition(self, target: UnitStatus, reason: str | None = None) -> bool:
        """Apply a validated transition. Returns False for a same-status no-op."""
        self.check_transition(target)
        if target == self.status:
            return False
        previous = self.status
        self.unit.status = target
        logger.info(
            "Unit status changed",
            extra={
                "unit_id": self.unit.id,
                "from_status": previous.value,
                "to_status": target.value,
                "reason": reason,
            },
        )
        return True

    def set_manual_status(self, target: UnitStatus) -> bool:
        """Admin status change. Rejection also clears both approval flags."""
        if target in _MANUAL_FORBIDDEN and target != self.status:
            raise ValidationError(
                f"Status {target.value} can only be reached by submitting the unit",
                field="status",
                value=target.value,
            )
        if target == UnitStatus.REJECTED:
            return self.reject()
        return self.transition(target, reason="manual")

    def reject(self) -> bool:
        self.check_transition(UnitStatus.REJECTED)
        self.unit.structural_approved = False
        self.unit.operational_baseline_approved = False
        return self.transition(UnitStatus.REJECTED, reason="rejected")

    def force_suspend(self, reason: str) -> bool:
        """Suspend the unit unless it is archived."""
        if self.status == UnitStatus.ARCHIVED:
            return False
        if self.status == UnitStatus.SUSPENDED:
            return False
        previous = self.status
        self.unit.status = UnitStatus.SUSPENDED
        logger.warning(
            "Unit suspended",
            extra={
                "unit_id": self.unit.id,
                "from_status": previous.value,
                "reason": reason,
            },
        )
        return True

    def submit(self) -> bool:
        if self.status != UnitStatus.DRAFT:
            raise ValidationError(
                f"Only draft units can be submitted (status is {self.status.value})"
            )
        return self.transition(UnitStatus.SUBMITTED, reason="submitted")

    def apply_review(
        self,
        structural_approved: bool | None = None,
        operational_approved: bool | None = None,
        status: UnitStatus | None = None,
    ) -> None:
        """Apply an admin review patch.

        Explicit status changes are validated against the effective flags before
        anything is written. Without a status, setting both flags true promotes
        the unit when the approval gate allows it, and a submitted unit moves to
        admin review.

        Raises:
            ValidationError: If the patch is empty or the status is not allowed
        """
        if structural_approved is None and operational_approved is None and status is None:
            raise ValidationError("No review updates provided")

        if status is not None:
            if status in _MANUAL_FORBIDDEN and status != self.status:
                raise ValidationError(
                    f"Status {status.value} can only be reached by submitting the unit",
                    field="status",
                    value=status.value,
                )
            self.check_transition(status, structural_approved, operational_approved)

        if structural_approved is not None:
            self.unit.structural_approved = structural_approved
        if operational_approved is not None:
            self.unit.operational_baseline_approved = operational_approved

        if status is not None:
            if status == UnitStatus.REJECTED:
                self.reject()
            else:
                self.transition(status, reason="review")
        elif (
            structural_approved
            and operational_approved
            and not self.approval_blockers()
            and self.can_transition(UnitStatus.APPROVED)
        ):
            self.transition(UnitStatus.APPROVED, reason="auto-promoted by review")
        elif self.status == UnitStatus.SUBMITTED:
            self.transition(UnitStatus.ADMIN_REVIEW, reason="review started")

        self.demote_if_unapprovable("review")

    def demote_if_unapprovable(self, reason: str) -> bool:
        """Move an approved unit back to admin review when the gate no longer holds."""
        if self.status != UnitStatus.APPROVED:
            return False
        if not self.approval_blockers():
            return False
        return self.transition(UnitStatus.ADMIN_REVIEW, reason=reason)

    def reopen_after_audit(self) -> bool:
        """Return the unit to approved once its last audit log is resolved."""
        if self.status in (UnitStatus.ARCHIVED, UnitStatus.APPROVED):
            return False
        if self.approval_blockers() or not self.can_transition(UnitStatus.APPROVED):
            return False
        return self.transition(UnitStatus.APPROVED, reason="audit resolved")
