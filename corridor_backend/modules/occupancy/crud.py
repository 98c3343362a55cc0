"""CRUD operations for the occupancy module."""

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from .models import Occupancy, Occupant
from .occupant_id import OccupantIdParts

# ----- Occupancy CRUD -----


async def get_occupancy_by_id(db: AsyncSession, occupancy_id: int) -> Occupancy | None:
    result = await db.execute(select(Occupancy).where(Occupancy.id == occupancy_id))
    return result.scalar_one_or_none()


async def get_active_occupancy_for_student(
    db: AsyncSession, student_id: int
) -> Occupancy | None:
    result = await db.execute(
        select(Occupancy).where(
            Occupancy.student_id == student_id,
            Occupancy.end_date.is_(None),
        )
    )
    return result.scalars().first()


async def count_active_occupancies(db: AsyncSession, unit_id: int) -> int:
    result = await db.execute(
        select(func.count(Occupancy.id)).where(
            Occupancy.unit_id == unit_id,
            Occupancy.end_date.is_(None),
        )
    )
    return result.scalar_one()


async def create_occupancy(
    db: AsyncSession, unit_id: int, student_id: int, start_date
) -> Occupancy:
    """Create an active occupancy."""
    occupancy = Occupancy(
        unit_id=unit_id,
        student_id=student_id,
        start_date=start_date,
        active_student_id=student_id,
    )
    db.add(occupancy)
    await db.flush()
    return occupancy


# ----- Occupant CRUD -----


async def get_active_occupant_by_public_id(
    db: AsyncSession, public_id: str
) -> Occupant | None:
    result = await db.execute(
        select(Occupant).where(
            Occupant.public_id == public_id,
            Occupant.active == True,  # noqa: E712
        )
    )
    return result.scalars().first()


async def count_active_occupants(
    db: AsyncSession, unit_id: int, room_number: int
) -> int:
    """Active occupants in a unit's room."""
    result = await db.execute(
        select(func.count(Occupant.id)).where(
            Occupant.unit_id == unit_id,
            Occupant.room_number == room_number,
            Occupant.active == True,  # noqa: E712
        )
    )
    return result.scalar_one()


async def get_active_indices(
    db: AsyncSession, unit_id: int, room_number: int
) -> set[int]:
    result = await db.execute(
        select(Occupant.occupant_index).where(
            Occupant.unit_id == unit_id,
            Occupant.room_number == room_number,
            Occupant.active == True,  # noqa: E712
        )
    )
    return set(result.scalars().all())


async def get_occupants_for_occupancy(
    db: AsyncSession, occupancy_id: int
) -> list[Occupant]:
    result = await db.execute(
        select(Occupant)
        .where(Occupant.occupancy_id == occupancy_id)
        .order_by(Occupant.id)
    )
    return list(result.scalars().all())


async def get_active_occupants(
    db: AsyncSession, unit_id: int, student_id: int
) -> list[Occupant]:
    """Active occupant records of a student in a unit."""
    result = await db.execute(
        select(Occupant).where(
            Occupant.unit_id == unit_id,
            Occupant.student_id == student_id,
            Occupant.active == True,  # noqa: E712
        )
    )
    return list(result.scalars().all())


async def create_occupant(
    db: AsyncSession,
    public_id: str,
    parts: OccupantIdParts,
    unit_id: int,
    student_id: int,
    occupancy_id: int,
) -> Occupant:
    """Issue an active occupant ID."""
    occupant = Occupant(
        public_id=public_id,
        active_public_id=public_id,
        unit_id=unit_id,
        student_id=student_id,
        occupancy_id=occupancy_id,
        active=True,
        **parts._asdict(),
    )
    db.add(occupant)
    await db.flush()
    return occupant
