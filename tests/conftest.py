"""Shared fixtures: a fresh SQLite database per test and directory records."""

import os
from pathlib import Path

os.environ.setdefault(
    "CONFIG",
    str(Path(__file__).resolve().parent.parent / "resources" / "config" / "test.yaml"),
)

import pytest  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from corridor_backend.database import init_db  # noqa: E402
from corridor_backend.modules.directory import crud as directory_crud  # noqa: E402
from corridor_backend.modules.listings import crud as listings_crud  # noqa: E402
from corridor_backend.modules.listings.models import UnitStatus  # noqa: E402


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'corridor.db'}")
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
async def corridor(db):
    corridor = await directory_crud.create_corridor(db, name="North Loop", city_code=12)
    await db.commit()
    return corridor


@pytest.fixture
async def landlord(db):
    landlord = await directory_crud.create_landlord(db, user_id=100, name="Asha")
    await db.commit()
    return landlord


@pytest.fixture
async def other_landlord(db):
    landlord = await directory_crud.create_landlord(db, user_id=101, name="Bilal")
    await db.commit()
    return landlord


@pytest.fixture
def make_student(db, corridor):
    async def _make(user_id: int, corridor_id: int | None = None):
        student = await directory_crud.create_student(
            db,
            user_id=user_id,
            name=f"Student {user_id}",
            corridor_id=corridor_id or corridor.id,
            intake="2025",
        )
        await db.commit()
        return student

    return _make


@pytest.fixture
async def student(make_student):
    return await make_student(200)


@pytest.fixture
def make_unit(db, corridor, landlord):
    async def _make(approved: bool = False, **fields):
        fields.setdefault("corridor_id", corridor.id)
        fields.setdefault("capacity", 2)
        unit = await listings_crud.create_unit(db, landlord_id=landlord.id, **fields)
        if approved:
            await listings_crud.upsert_structural_checklist(
                db,
                unit.id,
                fire_exit=True,
                wiring_safe=True,
                plumbing_safe=True,
                occupancy_compliant=True,
                approved=True,
            )
            await listings_crud.upsert_operational_checklist(
                db,
                unit.id,
                bed_available=True,
                water_available=True,
                toilets_available=True,
                ventilation_good=True,
                approved=True,
            )
            unit.structural_approved = True
            unit.operational_baseline_approved = True
            unit.status = UnitStatus.APPROVED
        await db.commit()
        return unit

    return _make


@pytest.fixture
async def unit(make_unit):
    return await make_unit()


@pytest.fixture
async def approved_unit(make_unit):
    return await make_unit(approved=True)
