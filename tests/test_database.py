import pytest
from sqlalchemy import inspect
from sqlalchemy.ext.asyncio import create_async_engine

from corridor_backend.database import init_db

pytestmark = pytest.mark.anyio


async def test_init_db_creates_every_module_table(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'schema.db'}")
    try:
        await init_db(engine)
        async with engine.connect() as conn:
            tables = await conn.run_sync(
                lambda sync_conn: inspect(sync_conn).get_table_names()
            )
    finally:
        await engine.dispose()

    assert {
        "corridors",
        "landlords",
        "students",
        "units",
        "complaints",
        "audit_logs",
        "occupancies",
        "occupants",
    } <= set(tables)
