"""Directory business logic services."""

from sqlalchemy.ext.asyncio import AsyncSession

from ...core.exceptions import NotFoundError, ValidationError
from . import crud
from .models import Corridor, Landlord, Student
from .schemas import CorridorCreate, LandlordCreate, StudentCreate


async def create_corridor(db: AsyncSession, data: CorridorCreate) -> Corridor:
    """Create a corridor with a unique name.

    Raises:
        ValidationError: If the name is taken
    """
    if await crud.get_corridor_by_name(db, data.name):
        raise ValidationError(f"Corridor '{data.name}' already exists")

    corridor = await crud.create_corridor(db, name=data.name, city_code=data.city_code)
    await db.commit()
    return corridor


async def create_landlord_profile(
    db: AsyncSession, user_id: int, data: LandlordCreate
) -> Landlord:
    """Create the landlord profile for a user.

    Raises:
        ValidationError: If the user already has one
    """
    if await crud.get_landlord_by_user_id(db, user_id):
        raise ValidationError("Landlord profile already exists")

    landlord = await crud.create_landlord(db, user_id=user_id, name=data.name)
    await db.commit()
    return landlord


async def create_student_profile(
    db: AsyncSession, user_id: int, data: StudentCreate
) -> Student:
    """Create the student profile for a user.

    Raises:
        NotFoundError: If the corridor does not exist
        ValidationError: If the user already has a profile
    """
    if await crud.get_student_by_user_id(db, user_id):
        raise ValidationError("Student profile already exists")
    if not await crud.get_corridor_by_id(db, data.corridor_id):
        raise NotFoundError(f"Corridor with ID {data.corridor_id} not found")

    student = await crud.create_student(
        db,
        user_id=user_id,
        name=data.name,
        corridor_id=data.corridor_id,
        intake=data.intake,
    )
    await db.commit()
    return student


async def require_landlord(db: AsyncSession, user_id: int) -> Landlord:
    """Resolve the caller's landlord profile.

    Raises:
        NotFoundError: If the user has no landlord profile
    """
    landlord = await crud.get_landlord_by_user_id(db, user_id)
    if not landlord:
        raise NotFoundError("Landlord profile not found")
    return landlord


async def require_student(db: AsyncSession, user_id: int) -> Student:
    """Resolve the caller's student profile.

    Raises:
        NotFoundError: If the user has no student profile
    """
    student = await crud.get_student_by_user_id(db, user_id)
    if not student:
        raise NotFoundError("Student profile not found")
    return student
