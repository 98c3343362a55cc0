"""Listing business logic services."""

from sqlalchemy.ext.asyncio import AsyncSession

from ...core.exceptions import NotFoundError, PermissionError, ValidationError
from ...core.logging import get_logger
from ..directory import crud as directory_crud
from . import crud
from .governance import GovernanceStateMachine
from .models import (
    ChecklistKind,
    MediaType,
    OperationalChecklist,
    StructuralChecklist,
    Unit,
    UnitMedia,
    UnitStatus,
)
from .schemas import (
    OperationalChecklistPatch,
    OperationalChecklistPut,
    StructuralChecklistPatch,
    StructuralChecklistPut,
    UnitCreate,
    UnitMediaCreate,
)

logger = get_logger("listings")

REQUIRED_MEDIA_TYPES = (MediaType.PHOTO, MediaType.DOCUMENT, MediaType.WALKTHROUGH_360)

_DOCUMENT_MIME_TYPES = {
    "application/pdf",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
}
_WALKTHROUGH_MIME_TYPES = {
    "text/html",
    "application/zip",
    "application/x-zip-compressed",
    "application/json",
}


def is_allowed_mime_type(media_type: MediaType, mime_type: str) -> bool:
    """Check a MIME type against the media category it is uploaded as."""
    normalized = mime_type.strip().lower()
    if media_type == MediaType.PHOTO:
        return normalized.startswith("image/")
    if media_type == MediaType.DOCUMENT:
        return (
            normalized in _DOCUMENT_MIME_TYPES
            or normalized.startswith("text/")
            or normalized.startswith("image/")
        )
    if media_type == MediaType.WALKTHROUGH_360:
        return (
            normalized in _WALKTHROUGH_MIME_TYPES
            or normalized.startswith("video/")
            or normalized.startswith("image/")
        )
    return False


async def get_unit_or_404(
    db: AsyncSession, unit_id: int, for_update: bool = False
) -> Unit:
    """Load a unit.

    Raises:
        NotFoundError: If the unit does not exist
    """
    unit = await crud.get_unit_by_id(db, unit_id, for_update=for_update)
    if not unit:
        raise NotFoundError(f"Unit with ID {unit_id} not found")
    return unit


async def get_owned_unit(db: AsyncSession, unit_id: int, landlord_id: int) -> Unit:
    """Load a unit owned by the landlord.

    Raises:
        NotFoundError: If the unit does not exist
        PermissionError: If another landlord owns it
    """
    unit = await get_unit_or_404(db, unit_id)
    if unit.landlord_id != landlord_id:
        raise PermissionError("manage", "another landlord's unit")
    return unit


async def create_unit(db: AsyncSession, landlord_id: int, data: UnitCreate) -> Unit:
    """Create a draft unit for a landlord.

    Raises:
        NotFoundError: If the corridor does not exist
    """
    if not await directory_crud.get_corridor_by_id(db, data.corridor_id):
        raise NotFoundError(f"Corridor with ID {data.corridor_id} not found")

    unit = await crud.create_unit(db, landlord_id=landlord_id, **data.model_dump())
    await db.commit()
    logger.info(
        "Unit created",
        extra={"unit_id": unit.id, "landlord_id": landlord_id},
    )
    return unit


# ----- Checklists -----


async def declare_structural_checklist(
    db: AsyncSession, unit_id: int, landlord_id: int, data: StructuralChecklistPut
) -> StructuralChecklist:
    """Landlord replaces the structural checklist.

    A landlord edit can revoke the structural approval but never grant it.
    """
    unit = await get_owned_unit(db, unit_id, landlord_id)
    checklist = await crud.upsert_structural_checklist(db, unit_id, **data.model_dump())
    if not checklist.all_items_true():
        _apply_checklist_approval(unit, ChecklistKind.STRUCTURAL, checklist, False)
    await db.commit()
    return checklist


async def declare_operational_checklist(
    db: AsyncSession, unit_id: int, landlord_id: int, data: OperationalChecklistPut
) -> OperationalChecklist:
    """Landlord replaces the operational checklist and self-declaration.

    A landlord edit can revoke the operational approval but never grant it.
    """
    unit = await get_owned_unit(db, unit_id, landlord_id)
    checklist = await crud.upsert_operational_checklist(
        db, unit_id, **data.model_dump()
    )
    if not checklist.all_items_true():
        _apply_checklist_approval(unit, ChecklistKind.OPERATIONAL, checklist, False)
    await db.commit()
    return checklist


async def set_checklist(
    db: AsyncSession,
    unit_id: int,
    kind: ChecklistKind,
    data: StructuralChecklistPatch | OperationalChecklistPatch,
) -> StructuralChecklist | OperationalChecklist:
    """Admin patch of a checklist.

    Provided items are merged over the stored ones, the approval flag is
    recomputed from the merged items and copied onto the unit, and an approved
    unit that loses the flag moves back to admin review.

    Args:
        db: Database session
        unit_id: Unit to update
        kind: Which checklist to patch
        data: Items to change

    Returns:
        The updated checklist

    Raises:
        NotFoundError: If the unit does not exist
        ValidationError: If no field is provided
    """
    fields = data.model_dump(exclude_unset=True)
    if not fields:
        raise ValidationError(f"At least one {kind.value} checklist field is required")

    unit = await get_unit_or_404(db, unit_id)
    if kind == ChecklistKind.STRUCTURAL:
        checklist = await crud.upsert_structural_checklist(db, unit_id, **fields)
    else:
        checklist = await crud.upsert_operational_checklist(db, unit_id, **fields)

    _apply_checklist_approval(unit, kind, checklist, checklist.all_items_true())
    await db.commit()
    return checklist


def _apply_checklist_approval(
    unit: Unit,
    kind: ChecklistKind,
    checklist: StructuralChecklist | OperationalChecklist,
    approved: bool,
) -> None:
    checklist.approved = approved
    if kind == ChecklistKind.STRUCTURAL:
        unit.structural_approved = approved
    else:
        unit.operational_baseline_approved = approved
    if not approved:
        GovernanceStateMachine(unit).demote_if_unapprovable(
            f"{kind.value} checklist no longer approved"
        )


# ----- Media & submission -----


async def add_media(
    db: AsyncSession,
    unit_id: int,
    landlord_id: int,
    uploaded_by: int,
    data: UnitMediaCreate,
) -> UnitMedia:
    """Register media for a draft unit.

    Raises:
        NotFoundError: If the unit does not exist
        PermissionError: If another landlord owns it
        ValidationError: If the unit is not a draft, media is locked, or the
            MIME type does not fit the media type
    """
    unit = await get_owned_unit(db, unit_id, landlord_id)
    if unit.status != UnitStatus.DRAFT:
        raise ValidationError("Media can only be uploaded while unit status is draft")
    if await crud.count_locked_media(db, unit_id) > 0:
        raise ValidationError("Media is locked for this unit")
    if not is_allowed_mime_type(data.type, data.mime_type):
        raise ValidationError(
            f"Invalid file type for {data.type.value}",
            field="mime_type",
            value=data.mime_type,
        )

    media = await crud.create_media(
        db, unit_id, uploaded_by=uploaded_by, **data.model_dump()
    )
    if not media.public_url:
        media.public_url = f"/media/{media.id}"
    await db.commit()
    return media


async def submit_unit(db: AsyncSession, unit_id: int, landlord_id: int) -> Unit:
    """Submit a draft unit for review and lock its media.

    Raises:
        NotFoundError: If the unit does not exist
        PermissionError: If another landlord owns it
        ValidationError: If a checklist or required media type is missing
    """
    unit = await get_owned_unit(db, unit_id, landlord_id)
    if unit.status != UnitStatus.DRAFT:
        raise ValidationError(
            f"Only draft units can be submitted (status is {unit.status.value})"
        )

    structural = await crud.get_structural_checklist(db, unit_id)
    operational = await crud.get_operational_checklist(db, unit_id)
    present = await crud.get_media_types_for_unit(db, unit_id)
    missing = [t.value for t in REQUIRED_MEDIA_TYPES if t not in present]

    if not structural or not operational or missing:
        raise ValidationError(
            "Checklist and required media must be provided before submission",
            details={
                "missing_media_types": missing,
                "structural_checklist": structural is not None,
                "operational_checklist": operational is not None,
            },
        )

    GovernanceStateMachine(unit).submit()
    await crud.lock_media_for_unit(db, unit_id)
    await db.commit()
    return unit


# ----- Admin review -----


async def review_unit(
    db: AsyncSession,
    unit_id: int,
    structural_approved: bool | None = None,
    operational_approved: bool | None = None,
    status: UnitStatus | None = None,
) -> Unit:
    """Apply an admin review to a unit.

    Setting an approval flag true requires every item of the matching checklist
    to be true. The checklist's own ``approved`` field follows the flag.

    Raises:
        NotFoundError: If the unit does not exist
        ValidationError: On an incomplete checklist, an empty patch or a
            status the state machine refuses
    """
    unit = await get_unit_or_404(db, unit_id)
    structural = await crud.get_structural_checklist(db, unit_id)
    operational = await crud.get_operational_checklist(db, unit_id)

    if structural_approved and not (structural and structural.all_items_true()):
        raise ValidationError(
            "Cannot approve structural baseline: all structural checklist items "
            "must be true"
        )
    if operational_approved and not (operational and operational.all_items_true()):
        raise ValidationError(
            "Cannot approve operational baseline: all operational checklist items "
            "must be true"
        )

    GovernanceStateMachine(unit).apply_review(
        structural_approved=structural_approved,
        operational_approved=operational_approved,
        status=status,
    )

    if structural is not None:
        structural.approved = unit.structural_approved
    if operational is not None:
        operational.approved = unit.operational_baseline_approved

    await db.commit()
    return unit


async def set_unit_status(db: AsyncSession, unit_id: int, status: UnitStatus) -> Unit:
    """Admin status change through the state machine.

    Raises:
        NotFoundError: If the unit does not exist
        ValidationError: If the transition or approval gate refuses it
    """
    unit = await get_unit_or_404(db, unit_id)
    GovernanceStateMachine(unit).set_manual_status(status)

    if status == UnitStatus.REJECTED:
        for checklist in (
            await crud.get_structural_checklist(db, unit_id),
            await crud.get_operational_checklist(db, unit_id),
        ):
            if checklist is not None:
                checklist.approved = False

    await db.commit()
    return unit
