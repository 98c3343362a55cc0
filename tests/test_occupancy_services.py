import asyncio

import pytest
from sqlalchemy.exc import IntegrityError

from corridor_backend.core.exceptions import (
    AlreadyCheckedOutError,
    CapacityReachedError,
    CheckInConflictError,
    InvalidCapacityError,
    NotFoundError,
    PermissionError,
    StudentAlreadyActiveError,
    ValidationError,
)
from corridor_backend.core.locks import UnitLockRegistry
from corridor_backend.modules.listings import crud as listings_crud
from corridor_backend.modules.listings.models import UnitStatus
from corridor_backend.modules.occupancy import crud, services
from corridor_backend.modules.trust import crud as trust_crud
from corridor_backend.modules.trust.models import AuditTriggerType

pytestmark = pytest.mark.anyio


async def test_check_in_issues_occupant_id(db, corridor, unit, student):
    occupancy, occupant = await services.check_in(db, unit.id, student.id)

    expected = f"12{corridor.id:03d}{unit.id:03d}{unit.id:03d}1"
    assert occupant.public_id == expected
    assert occupant.active_public_id == expected
    assert occupant.occupant_index == 1
    assert occupancy.end_date is None
    assert occupancy.active_student_id == student.id


async def test_indices_fill_lowest_first(db, unit, make_student):
    first = await make_student(210)
    second = await make_student(211)

    _, a = await services.check_in(db, unit.id, first.id)
    _, b = await services.check_in(db, unit.id, second.id)

    assert (a.occupant_index, b.occupant_index) == (1, 2)


async def test_freed_slot_is_reused(db, unit, make_student):
    first = await make_student(210)
    second = await make_student(211)
    third = await make_student(212)

    occupancy, original = await services.check_in(db, unit.id, first.id)
    await services.check_in(db, unit.id, second.id)
    await services.check_out(db, occupancy.id)
    _, reused = await services.check_in(db, unit.id, third.id)

    assert reused.occupant_index == 1
    assert reused.public_id == original.public_id
    assert not original.active


async def test_student_cannot_hold_two_occupancies(db, make_unit, student):
    first_unit = await make_unit()
    second_unit = await make_unit()
    second_unit_id, student_id = second_unit.id, student.id
    await services.check_in(db, first_unit.id, student_id)

    with pytest.raises(StudentAlreadyActiveError):
        await services.check_in(db, second_unit_id, student_id)


async def test_full_unit_is_suspended_for_capacity_violation(db, make_unit, make_student):
    unit = await make_unit(approved=True, capacity=1)
    first = await make_student(210)
    second = await make_student(211)
    unit_id, second_id = unit.id, second.id
    await services.check_in(db, unit_id, first.id)

    with pytest.raises(CapacityReachedError) as exc_info:
        await services.check_in(db, unit_id, second_id)

    assert exc_info.value.capacity == 1
    refreshed = await listings_crud.get_unit_by_id(db, unit_id)
    logs = await trust_crud.get_audit_logs_for_unit(db, unit_id)
    assert refreshed.status == UnitStatus.SUSPENDED
    assert refreshed.audit_required
    assert not refreshed.structural_approved
    assert [log.trigger_type for log in logs] == [AuditTriggerType.CAPACITY_VIOLATION]
    assert await crud.count_active_occupancies(db, unit_id) == 1


async def test_concurrent_check_ins_respect_capacity(
    session_factory, make_unit, make_student
):
    unit = await make_unit(capacity=1)
    first = await make_student(210)
    second = await make_student(211)
    unit_id = unit.id

    async def attempt(student_id):
        async with session_factory() as session:
            try:
                await services.check_in(session, unit_id, student_id)
            except CapacityReachedError:
                return "capacity"
            return "ok"

    results = await asyncio.gather(attempt(first.id), attempt(second.id))

    assert sorted(results) == ["capacity", "ok"]
    async with session_factory() as session:
        assert await crud.count_active_occupancies(session, unit_id) == 1


async def test_concurrent_check_ins_issue_distinct_ids(
    session_factory, make_unit, make_student
):
    unit = await make_unit(approved=True, capacity=3)
    students = [await make_student(300 + i) for i in range(6)]
    unit_id = unit.id
    student_ids = [s.id for s in students]

    async def attempt(student_id):
        async with session_factory() as session:
            try:
                _, occupant = await services.check_in(session, unit_id, student_id)
            except CapacityReachedError:
                return None
            return occupant.public_id

    results = await asyncio.gather(*(attempt(sid) for sid in student_ids))
    issued = [public_id for public_id in results if public_id is not None]

    assert len(issued) == 3
    assert len(set(issued)) == 3
    async with session_factory() as session:
        assert await crud.count_active_occupancies(session, unit_id) == 3
        assert await crud.get_active_indices(session, unit_id, unit_id) == {1, 2, 3}


async def test_capacity_is_capped_at_nine_slots(db, make_unit, make_student):
    unit = await make_unit(approved=True, capacity=12)
    students = [await make_student(400 + i) for i in range(10)]
    unit_id = unit.id
    student_ids = [s.id for s in students]

    indices = []
    for student_id in student_ids[:9]:
        _, occupant = await services.check_in(db, unit_id, student_id)
        indices.append(occupant.occupant_index)

    with pytest.raises(CapacityReachedError) as exc_info:
        await services.check_in(db, unit_id, student_ids[9])

    assert indices == list(range(1, 10))
    assert exc_info.value.capacity == 9
    assert await crud.count_active_occupancies(db, unit_id) == 9
    refreshed = await listings_crud.get_unit_by_id(db, unit_id)
    assert refreshed.status == UnitStatus.SUSPENDED


async def test_out_of_range_location_is_rejected_before_writing(
    db, make_unit, student
):
    unit = await make_unit(approved=True, id=1000)
    student_id = student.id

    with pytest.raises(ValidationError, match="hostel_code"):
        await services.check_in(db, 1000, student_id)

    assert await crud.count_active_occupancies(db, 1000) == 0
    assert await crud.get_active_occupancy_for_student(db, student_id) is None
    assert await trust_crud.get_audit_logs_for_unit(db, 1000) == []
    assert unit.status == UnitStatus.APPROVED


async def test_zero_capacity_is_invalid(db, make_unit, student):
    unit = await make_unit(capacity=0)
    unit_id, student_id = unit.id, student.id

    with pytest.raises(InvalidCapacityError):
        await services.check_in(db, unit_id, student_id)


async def test_other_landlord_cannot_check_in(db, unit, student, other_landlord):
    with pytest.raises(PermissionError):
        await services.check_in(
            db, unit.id, student.id, landlord_user_id=other_landlord.user_id
        )


async def test_unknown_student(db, unit):
    with pytest.raises(NotFoundError):
        await services.check_in(db, unit.id, 999)


async def test_retries_on_unique_collision(db, unit, student, monkeypatch):
    real_allocate = services._allocate
    calls = []

    async def collide_once(*args, **kwargs):
        calls.append(1)
        if len(calls) == 1:
            raise IntegrityError("INSERT INTO occupants", {}, Exception("duplicate"))
        return await real_allocate(*args, **kwargs)

    monkeypatch.setattr(services, "_allocate", collide_once)
    unit_id, student_id = unit.id, student.id

    _, occupant = await services.check_in(db, unit_id, student_id)

    assert len(calls) == 2
    assert occupant.occupant_index == 1


async def test_conflict_after_three_collisions(db, unit, student, monkeypatch):
    calls = []

    async def always_collide(*args, **kwargs):
        calls.append(1)
        raise IntegrityError("INSERT INTO occupants", {}, Exception("duplicate"))

    monkeypatch.setattr(services, "_allocate", always_collide)
    unit_id, student_id = unit.id, student.id

    with pytest.raises(CheckInConflictError):
        await services.check_in(db, unit_id, student_id)
    assert len(calls) == services.MAX_CHECK_IN_ATTEMPTS


async def test_check_out_retires_occupant(db, unit, student):
    occupancy, occupant = await services.check_in(db, unit.id, student.id)

    ended, retired = await services.check_out(db, occupancy.id)

    assert ended.end_date is not None
    assert ended.active_student_id is None
    assert [o.id for o in retired] == [occupant.id]
    assert not occupant.active
    assert occupant.active_public_id is None
    assert await crud.get_active_occupant_by_public_id(db, occupant.public_id) is None


async def test_check_out_twice_fails(db, unit, student):
    occupancy, _ = await services.check_in(db, unit.id, student.id)
    await services.check_out(db, occupancy.id)

    with pytest.raises(AlreadyCheckedOutError):
        await services.check_out(db, occupancy.id)


async def test_check_out_unknown_occupancy(db):
    with pytest.raises(NotFoundError):
        await services.check_out(db, 404)


async def test_other_landlord_cannot_check_out(db, unit, student, other_landlord):
    occupancy, _ = await services.check_in(db, unit.id, student.id)

    with pytest.raises(PermissionError):
        await services.check_out(
            db, occupancy.id, landlord_user_id=other_landlord.user_id
        )


async def test_lock_registry_hands_out_one_lock_per_unit():
    registry = UnitLockRegistry()

    lock = registry.get(1)

    assert registry.get(1) is lock
    assert registry.get(2) is not lock
