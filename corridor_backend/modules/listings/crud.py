"""CRUD operations for the listings module."""

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from .models import (
    MediaType,
    OperationalChecklist,
    StructuralChecklist,
    Unit,
    UnitMedia,
    UnitStatus,
)
from .governance import VISIBILITY_TRUST_THRESHOLD

# ----- Unit CRUD -----


async def get_unit_by_id(
    db: AsyncSession, unit_id: int, for_update: bool = False
) -> Unit | None:
    """Get a unit by ID, optionally taking a row lock and reloading its columns."""
    query = select(Unit).where(Unit.id == unit_id)
    if for_update:
        query = query.with_for_update().execution_options(populate_existing=True)
    result = await db.execute(query)
    return result.scalar_one_or_none()


async def get_units_by_landlord(db: AsyncSession, landlord_id: int) -> list[Unit]:
    result = await db.execute(
        select(Unit).where(Unit.landlord_id == landlord_id).order_by(Unit.id.desc())
    )
    return list(result.scalars().all())


async def get_visible_units(db: AsyncSession, corridor_id: int) -> list[Unit]:
    """Units a student may see in a corridor, best trust first."""
    result = await db.execute(
        select(Unit)
        .where(
            Unit.corridor_id == corridor_id,
            Unit.status == UnitStatus.APPROVED,
            Unit.structural_approved == True,  # noqa: E712
            Unit.operational_baseline_approved == True,  # noqa: E712
            Unit.trust_score >= VISIBILITY_TRUST_THRESHOLD,
        )
        .order_by(Unit.trust_score.desc(), Unit.id)
    )
    return list(result.scalars().all())


async def get_units_requiring_audit(db: AsyncSession, corridor_id: int) -> list[Unit]:
    result = await db.execute(
        select(Unit)
        .where(Unit.corridor_id == corridor_id, Unit.audit_required == True)  # noqa: E712
        .order_by(Unit.trust_score.asc())
    )
    return list(result.scalars().all())


async def get_audit_sample_candidates(
    db: AsyncSession, corridor_id: int, min_trust: int
) -> list[Unit]:
    """Approved units in a corridor with at least ``min_trust``."""
    result = await db.execute(
        select(Unit).where(
            Unit.corridor_id == corridor_id,
            Unit.status == UnitStatus.APPROVED,
            Unit.trust_score >= min_trust,
        )
    )
    return list(result.scalars().all())


async def create_unit(db: AsyncSession, landlord_id: int, **fields) -> Unit:
    """Create a new draft unit."""
    unit = Unit(
        landlord_id=landlord_id,
        status=UnitStatus.DRAFT,
        structural_approved=False,
        operational_baseline_approved=False,
        trust_score=75,
        audit_required=False,
        false_declaration_count=0,
        **fields,
    )
    db.add(unit)
    await db.flush()
    return unit


# ----- Checklist CRUD -----


async def get_structural_checklist(
    db: AsyncSession, unit_id: int
) -> StructuralChecklist | None:
    result = await db.execute(
        select(StructuralChecklist).where(StructuralChecklist.unit_id == unit_id)
    )
    return result.scalar_one_or_none()


async def get_operational_checklist(
    db: AsyncSession, unit_id: int
) -> OperationalChecklist | None:
    result = await db.execute(
        select(OperationalChecklist).where(OperationalChecklist.unit_id == unit_id)
    )
    return result.scalar_one_or_none()


async def upsert_structural_checklist(
    db: AsyncSession, unit_id: int, **fields
) -> StructuralChecklist:
    """Create or update the structural checklist of a unit."""
    checklist = await get_structural_checklist(db, unit_id)
    if checklist is None:
        checklist = StructuralChecklist(
            unit_id=unit_id,
            approved=False,
            **dict.fromkeys(StructuralChecklist.ITEMS, False),
        )
        db.add(checklist)
    for key, value in fields.items():
        setattr(checklist, key, value)
    await db.flush()
    return checklist


async def upsert_operational_checklist(
    db: AsyncSession, unit_id: int, **fields
) -> OperationalChecklist:
    """Create or update the operational checklist of a unit."""
    checklist = await get_operational_checklist(db, unit_id)
    if checklist is None:
        checklist = OperationalChecklist(
            unit_id=unit_id,
            approved=False,
            **dict.fromkeys(OperationalChecklist.ITEMS, False),
        )
        db.add(checklist)
    for key, value in fields.items():
        setattr(checklist, key, value)
    await db.flush()
    return checklist


# ----- Media CRUD -----


async def get_media_for_unit(db: AsyncSession, unit_id: int) -> list[UnitMedia]:
    result = await db.execute(
        select(UnitMedia).where(UnitMedia.unit_id == unit_id).order_by(UnitMedia.id)
    )
    return list(result.scalars().all())


async def count_locked_media(db: AsyncSession, unit_id: int) -> int:
    result = await db.execute(
        select(func.count(UnitMedia.id)).where(
            UnitMedia.unit_id == unit_id, UnitMedia.locked == True  # noqa: E712
        )
    )
    return result.scalar_one()


async def get_media_types_for_unit(db: AsyncSession, unit_id: int) -> set[MediaType]:
    result = await db.execute(
        select(UnitMedia.type).where(UnitMedia.unit_id == unit_id).distinct()
    )
    return {MediaType(t) for t in result.scalars().all()}


async def create_media(db: AsyncSession, unit_id: int, **fields) -> UnitMedia:
    media = UnitMedia(unit_id=unit_id, locked=False, **fields)
    db.add(media)
    await db.flush()
    return media


async def lock_media_for_unit(db: AsyncSession, unit_id: int) -> None:
    """Permanently lock all media of a unit."""
    await db.execute(
        update(UnitMedia).where(UnitMedia.unit_id == unit_id).values(locked=True)
    )
