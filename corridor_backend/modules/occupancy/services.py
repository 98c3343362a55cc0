"""Occupancy allocation: check-in and check-out under a per-unit lock."""

from datetime import datetime

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ...core.exceptions import (
    AlreadyCheckedOutError,
    CapacityReachedError,
    CheckInConflictError,
    CorridorException,
    InvalidCapacityError,
    NoSlotAvailableError,
    NotFoundError,
    PermissionError,
    StudentAlreadyActiveError,
)
from ...core.locks import unit_locks
from ...core.logging import get_logger
from ...core.utils import utc_now
from ..directory import crud as directory_crud
from ..listings import crud as listings_crud
from ..listings.models import Unit
from ..listings.services import get_unit_or_404
from ..trust import services as trust_services
from . import crud
from .models import Occupancy, Occupant
from .occupant_id import (
    MAX_OCCUPANT_INDEX,
    OccupantIdParts,
    encode_occupant_id,
    validate_parts,
)

logger = get_logger("occupancy")

MAX_CHECK_IN_ATTEMPTS = 3


async def _check_landlord_owns(
    db: AsyncSession, unit: Unit, landlord_user_id: int | None, action: str
) -> None:
    if landlord_user_id is None:
        return
    landlord = await directory_crud.get_landlord_by_user_id(db, landlord_user_id)
    if landlord is None or unit.landlord_id != landlord.id:
        raise PermissionError(action, "another landlord's unit")


def _location_parts(city_code: int, unit: Unit) -> tuple[int, int, int, int]:
    """City, corridor, hostel and room codes of a unit."""
    return city_code, unit.corridor_id, unit.id, unit.id


async def check_in(
    db: AsyncSession,
    unit_id: int,
    student_id: int,
    landlord_user_id: int | None = None,
    now: datetime | None = None,
) -> tuple[Occupancy, Occupant]:
    """Check a student into a unit and issue an occupant ID.

    The allocation runs under the unit's lock: the unit row is locked, the
    student's other occupancies and the room's free slots are checked, and the
    occupancy and occupant rows are written in one commit. A uniqueness
    violation at write time retries the whole allocation.

    A full unit is a capacity violation: the check-in fails and the unit is
    escalated for audit in a separate commit.

    Args:
        db: Database session
        unit_id: Unit to check into
        student_id: Student profile ID
        landlord_user_id: Calling landlord's user ID; None for admins
        now: Check-in time, defaults to the current time

    Returns:
        Tuple of (occupancy, occupant)

    Raises:
        NotFoundError: If the unit, corridor or student does not exist
        PermissionError: If the landlord does not own the unit
        ValidationError: If the location codes are out of range
        StudentAlreadyActiveError: If the student is checked in elsewhere
        InvalidCapacityError: If the unit capacity is not positive
        CapacityReachedError: If every slot is taken
        NoSlotAvailableError: If no occupant index is free
        CheckInConflictError: If every attempt hit a uniqueness violation
    """
    unit = await get_unit_or_404(db, unit_id)
    await _check_landlord_owns(db, unit, landlord_user_id, "check students into")

    if await directory_crud.get_student_by_id(db, student_id) is None:
        raise NotFoundError(f"Student with ID {student_id} not found")
    corridor = await directory_crud.get_corridor_by_id(db, unit.corridor_id)
    if corridor is None:
        raise NotFoundError(f"Corridor with ID {unit.corridor_id} not found")

    location = _location_parts(corridor.city_code, unit)
    validate_parts(*location)
    # Allocation reads start on a fresh transaction
    await db.commit()

    async with unit_locks.get(unit_id):
        for attempt in range(1, MAX_CHECK_IN_ATTEMPTS + 1):
            try:
                occupancy, occupant = await _allocate(
                    db, unit_id, student_id, location, now or utc_now()
                )
                await db.commit()
            except IntegrityError:
                await db.rollback()
                logger.warning(
                    "Check-in collided on a unique key, retrying",
                    extra={
                        "unit_id": unit_id,
                        "student_id": student_id,
                        "attempt": attempt,
                    },
                )
                continue
            except CapacityReachedError as e:
                await db.rollback()
                logger.warning(
                    "Check-in refused, unit at capacity",
                    extra={"unit_id": unit_id, "capacity": e.capacity},
                )
                await trust_services.record_capacity_violation(db, unit_id)
                raise
            except CorridorException:
                await db.rollback()
                raise

            logger.info(
                "Student checked in",
                extra={
                    "unit_id": unit_id,
                    "student_id": student_id,
                    "occupancy_id": occupancy.id,
                    "occupant_id": occupant.public_id,
                },
            )
            return occupancy, occupant

    logger.error(
        "Check-in failed after retries",
        extra={"unit_id": unit_id, "attempts": MAX_CHECK_IN_ATTEMPTS},
    )
    raise CheckInConflictError(unit_id, MAX_CHECK_IN_ATTEMPTS)


async def _allocate(
    db: AsyncSession,
    unit_id: int,
    student_id: int,
    location: tuple[int, int, int, int],
    now: datetime,
) -> tuple[Occupancy, Occupant]:
    unit = await listings_crud.get_unit_by_id(db, unit_id, for_update=True)
    if unit is None:
        raise NotFoundError(f"Unit with ID {unit_id} not found")

    if await crud.get_active_occupancy_for_student(db, student_id) is not None:
        raise StudentAlreadyActiveError(student_id)

    max_capacity = min(unit.capacity, MAX_OCCUPANT_INDEX)
    if max_capacity <= 0:
        raise InvalidCapacityError(unit_id, unit.capacity)

    room_number = location[3]
    if await crud.count_active_occupants(db, unit_id, room_number) >= max_capacity:
        raise CapacityReachedError(unit_id, max_capacity)

    taken = await crud.get_active_indices(db, unit_id, room_number)
    index = next((i for i in range(1, max_capacity + 1) if i not in taken), None)
    if index is None:
        raise NoSlotAvailableError(unit_id)

    parts = OccupantIdParts(*location, index)
    public_id = encode_occupant_id(*parts)

    occupancy = await crud.create_occupancy(db, unit_id, student_id, start_date=now)
    occupant = await crud.create_occupant(
        db,
        public_id,
        parts,
        unit_id=unit_id,
        student_id=student_id,
        occupancy_id=occupancy.id,
    )
    return occupancy, occupant


async def check_out(
    db: AsyncSession,
    occupancy_id: int,
    landlord_user_id: int | None = None,
    now: datetime | None = None,
) -> tuple[Occupancy, list[Occupant]]:
    """End an occupancy and retire the student's occupant IDs in the unit.

    Raises:
        NotFoundError: If the occupancy does not exist
        PermissionError: If the landlord does not own the unit
        AlreadyCheckedOutError: If the occupancy already ended
    """
    occupancy = await crud.get_occupancy_by_id(db, occupancy_id)
    if occupancy is None:
        raise NotFoundError(f"Occupancy with ID {occupancy_id} not found")

    unit = await get_unit_or_404(db, occupancy.unit_id)
    await _check_landlord_owns(db, unit, landlord_user_id, "check students out of")

    async with unit_locks.get(occupancy.unit_id):
        await db.refresh(occupancy)
        if not occupancy.is_active:
            raise AlreadyCheckedOutError(occupancy_id)

        occupancy.end_date = now or utc_now()
        occupancy.active_student_id = None
        occupants = await crud.get_active_occupants(
            db, occupancy.unit_id, occupancy.student_id
        )
        for occupant in occupants:
            occupant.active = False
            occupant.active_public_id = None
        await db.commit()

    logger.info(
        "Student checked out",
        extra={
            "occupancy_id": occupancy_id,
            "unit_id": occupancy.unit_id,
            "retired_occupants": len(occupants),
        },
    )
    return occupancy, occupants


async def get_occupancy(
    db: AsyncSession, occupancy_id: int
) -> tuple[Occupancy, list[Occupant]]:
    occupancy = await crud.get_occupancy_by_id(db, occupancy_id)
    if occupancy is None:
        raise NotFoundError(f"Occupancy with ID {occupancy_id} not found")
    return occupancy, await crud.get_occupants_for_occupancy(db, occupancy_id)
