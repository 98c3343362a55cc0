import pytest

from corridor_backend.core.exceptions import (
    NotFoundError,
    PermissionError,
    ValidationError,
)
from corridor_backend.modules.listings import crud, services
from corridor_backend.modules.listings.models import ChecklistKind, MediaType, UnitStatus
from corridor_backend.modules.listings.schemas import (
    OperationalChecklistPatch,
    OperationalChecklistPut,
    StructuralChecklistPatch,
    StructuralChecklistPut,
    UnitCreate,
    UnitMediaCreate,
)

pytestmark = pytest.mark.anyio

ALL_STRUCTURAL = StructuralChecklistPut(
    fire_exit=True, wiring_safe=True, plumbing_safe=True, occupancy_compliant=True
)
ALL_OPERATIONAL = OperationalChecklistPut(
    bed_available=True,
    water_available=True,
    toilets_available=True,
    ventilation_good=True,
    self_declaration="Beds and water verified by owner",
)


def media(media_type: str, mime_type: str) -> UnitMediaCreate:
    return UnitMediaCreate(
        type=media_type,
        storage_key=f"units/{media_type}",
        file_name=f"{media_type}.bin",
        mime_type=mime_type,
        size_in_bytes=1024,
    )


async def prepare_submission(db, unit, landlord):
    await services.declare_structural_checklist(db, unit.id, landlord.id, ALL_STRUCTURAL)
    await services.declare_operational_checklist(
        db, unit.id, landlord.id, ALL_OPERATIONAL
    )
    await services.add_media(db, unit.id, landlord.id, 100, media("photo", "image/jpeg"))
    await services.add_media(
        db, unit.id, landlord.id, 100, media("document", "application/pdf")
    )
    await services.add_media(db, unit.id, landlord.id, 100, media("360", "video/mp4"))


async def test_create_unit_starts_as_draft(db, corridor, landlord):
    unit = await services.create_unit(
        db, landlord.id, UnitCreate(corridor_id=corridor.id, capacity=3, rent=9000)
    )

    assert unit.status == UnitStatus.DRAFT
    assert unit.trust_score == 75
    assert unit.capacity == 3


async def test_create_unit_requires_corridor(db, landlord):
    with pytest.raises(NotFoundError):
        await services.create_unit(db, landlord.id, UnitCreate(corridor_id=999))


async def test_other_landlord_cannot_edit_checklist(db, unit, other_landlord):
    with pytest.raises(PermissionError):
        await services.declare_structural_checklist(
            db, unit.id, other_landlord.id, ALL_STRUCTURAL
        )


async def test_landlord_checklist_never_grants_approval(db, unit, landlord):
    checklist = await services.declare_structural_checklist(
        db, unit.id, landlord.id, ALL_STRUCTURAL
    )

    assert checklist.all_items_true()
    assert not checklist.approved
    assert not unit.structural_approved


async def test_landlord_checklist_revokes_approval(db, approved_unit, landlord):
    revoked = StructuralChecklistPut(
        fire_exit=False, wiring_safe=True, plumbing_safe=True, occupancy_compliant=True
    )

    await services.declare_structural_checklist(db, approved_unit.id, landlord.id, revoked)

    assert not approved_unit.structural_approved
    assert approved_unit.status == UnitStatus.ADMIN_REVIEW


async def test_admin_patch_recomputes_approval(db, unit):
    await crud.upsert_structural_checklist(
        db,
        unit.id,
        fire_exit=True,
        wiring_safe=True,
        plumbing_safe=True,
        occupancy_compliant=False,
    )
    await db.commit()

    checklist = await services.set_checklist(
        db,
        unit.id,
        ChecklistKind.STRUCTURAL,
        StructuralChecklistPatch(occupancy_compliant=True),
    )

    assert checklist.approved
    assert unit.structural_approved


async def test_admin_patch_failing_item_demotes_approved_unit(db, approved_unit):
    unit_id = approved_unit.id

    checklist = await services.set_checklist(
        db,
        unit_id,
        ChecklistKind.STRUCTURAL,
        StructuralChecklistPatch(fire_exit=False),
    )

    refreshed = await crud.get_unit_by_id(db, unit_id)
    assert not checklist.approved
    assert not refreshed.structural_approved
    assert refreshed.operational_baseline_approved
    assert refreshed.status == UnitStatus.ADMIN_REVIEW


async def test_admin_patch_requires_a_field(db, unit):
    with pytest.raises(ValidationError):
        await services.set_checklist(
            db, unit.id, ChecklistKind.OPERATIONAL, OperationalChecklistPatch()
        )


async def test_media_mime_type_must_match(db, unit, landlord):
    with pytest.raises(ValidationError):
        await services.add_media(
            db, unit.id, landlord.id, 100, media("photo", "application/pdf")
        )


async def test_360_alias_normalizes():
    assert media("360", "video/mp4").type == MediaType.WALKTHROUGH_360


async def test_submit_lists_missing_media(db, unit, landlord):
    await services.declare_structural_checklist(db, unit.id, landlord.id, ALL_STRUCTURAL)
    await services.declare_operational_checklist(
        db, unit.id, landlord.id, ALL_OPERATIONAL
    )
    await services.add_media(db, unit.id, landlord.id, 100, media("photo", "image/png"))

    with pytest.raises(ValidationError) as exc_info:
        await services.submit_unit(db, unit.id, landlord.id)

    assert exc_info.value.details["missing_media_types"] == [
        "document",
        "walkthrough360",
    ]


async def test_submit_locks_media(db, unit, landlord):
    await prepare_submission(db, unit, landlord)

    submitted = await services.submit_unit(db, unit.id, landlord.id)

    assert submitted.status == UnitStatus.SUBMITTED
    assert await crud.count_locked_media(db, unit.id) == 3
    with pytest.raises(ValidationError):
        await services.add_media(
            db, unit.id, landlord.id, 100, media("photo", "image/png")
        )


async def test_review_grants_approval_for_complete_checklists(db, unit, landlord):
    await prepare_submission(db, unit, landlord)
    await services.submit_unit(db, unit.id, landlord.id)

    reviewed = await services.review_unit(
        db, unit.id, structural_approved=True, operational_approved=True
    )

    assert reviewed.status == UnitStatus.APPROVED
    structural = await crud.get_structural_checklist(db, unit.id)
    assert structural.approved


async def test_review_refuses_incomplete_checklist(db, unit, landlord):
    incomplete = StructuralChecklistPut(
        fire_exit=True, wiring_safe=False, plumbing_safe=True, occupancy_compliant=True
    )
    await services.declare_structural_checklist(db, unit.id, landlord.id, incomplete)

    with pytest.raises(ValidationError, match="structural"):
        await services.review_unit(db, unit.id, structural_approved=True)


async def test_set_unit_status_reject_clears_checklist_approval(db, approved_unit):
    await services.set_unit_status(db, approved_unit.id, UnitStatus.REJECTED)

    structural = await crud.get_structural_checklist(db, approved_unit.id)
    assert approved_unit.status == UnitStatus.REJECTED
    assert not structural.approved


async def test_visible_units_filter(db, make_unit):
    visible = await make_unit(approved=True)
    await make_unit()

    units = await crud.get_visible_units(db, visible.corridor_id)

    assert [u.id for u in units] == [visible.id]
