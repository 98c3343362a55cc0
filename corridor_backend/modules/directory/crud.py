"""CRUD operations for the directory module."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from .models import Corridor, Landlord, Student

# ----- Corridor CRUD -----


async def get_corridor_by_id(db: AsyncSession, corridor_id: int) -> Corridor | None:
    """Get a corridor by ID."""
    result = await db.execute(select(Corridor).where(Corridor.id == corridor_id))
    return result.scalar_one_or_none()


async def get_corridor_by_name(db: AsyncSession, name: str) -> Corridor | None:
    result = await db.execute(select(Corridor).where(Corridor.name == name))
    return result.scalar_one_or_none()


async def get_all_corridors(db: AsyncSession) -> list[Corridor]:
    result = await db.execute(select(Corridor).order_by(Corridor.name))
    return list(result.scalars().all())


async def create_corridor(db: AsyncSession, name: str, city_code: int) -> Corridor:
    """Create a new corridor."""
    corridor = Corridor(name=name, city_code=city_code)
    db.add(corridor)
    await db.flush()
    return corridor


# ----- Landlord CRUD -----


async def get_landlord_by_id(db: AsyncSession, landlord_id: int) -> Landlord | None:
    result = await db.execute(select(Landlord).where(Landlord.id == landlord_id))
    return result.scalar_one_or_none()


async def get_landlord_by_user_id(db: AsyncSession, user_id: int) -> Landlord | None:
    """Get the landlord profile of a user."""
    result = await db.execute(select(Landlord).where(Landlord.user_id == user_id))
    return result.scalar_one_or_none()


async def create_landlord(db: AsyncSession, user_id: int, name: str) -> Landlord:
    landlord = Landlord(user_id=user_id, name=name)
    db.add(landlord)
    await db.flush()
    return landlord


# ----- Student CRUD -----


async def get_student_by_id(db: AsyncSession, student_id: int) -> Student | None:
    result = await db.execute(select(Student).where(Student.id == student_id))
    return result.scalar_one_or_none()


async def get_student_by_user_id(db: AsyncSession, user_id: int) -> Student | None:
    """Get the student profile of a user."""
    result = await db.execute(select(Student).where(Student.user_id == user_id))
    return result.scalar_one_or_none()


async def create_student(
    db: AsyncSession,
    user_id: int,
    name: str,
    corridor_id: int,
    intake: str | None = None,
) -> Student:
    student = Student(
        user_id=user_id, name=name, corridor_id=corridor_id, intake=intake
    )
    db.add(student)
    await db.flush()
    return student
