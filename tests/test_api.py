import pytest
from httpx import ASGITransport, AsyncClient

from corridor_backend.database import get_db
from corridor_backend.main import app
from corridor_backend.modules.auth.jwt_service import create_access_token
from corridor_backend.modules.auth.schemas import ActorRole

pytestmark = pytest.mark.anyio

ADMIN_ID = 1
LANDLORD_ID = 100
STUDENT_ID = 200


def auth(user_id: int, role: ActorRole) -> dict:
    token = create_access_token(user_id, role.value)
    return {"Authorization": f"Bearer {token}"}


ADMIN = auth(ADMIN_ID, ActorRole.ADMIN)
LANDLORD = auth(LANDLORD_ID, ActorRole.LANDLORD)
STUDENT = auth(STUDENT_ID, ActorRole.STUDENT)


@pytest.fixture
async def client(session_factory):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as client:
        yield client
    app.dependency_overrides.clear()


async def setup_directory(client) -> int:
    response = await client.post(
        "/api/corridors", json={"name": "North Loop", "city_code": 12}, headers=ADMIN
    )
    corridor_id = response.json()["data"]["id"]
    await client.post("/api/profiles/landlord", json={"name": "Asha"}, headers=LANDLORD)
    await client.post(
        "/api/profiles/student",
        json={"name": "Ravi", "corridor_id": corridor_id},
        headers=STUDENT,
    )
    return corridor_id


async def approved_unit(client, corridor_id: int, capacity: int = 2) -> int:
    response = await client.post(
        "/api/units",
        json={"corridor_id": corridor_id, "capacity": capacity, "rent": 8000},
        headers=LANDLORD,
    )
    assert response.status_code == 201
    unit_id = response.json()["data"]["id"]

    await client.put(
        f"/api/units/{unit_id}/structural-checklist",
        json={
            "fire_exit": True,
            "wiring_safe": True,
            "plumbing_safe": True,
            "occupancy_compliant": True,
        },
        headers=LANDLORD,
    )
    await client.put(
        f"/api/units/{unit_id}/operational-checklist",
        json={
            "bed_available": True,
            "water_available": True,
            "toilets_available": True,
            "ventilation_good": True,
        },
        headers=LANDLORD,
    )
    for media_type, mime in (
        ("photo", "image/jpeg"),
        ("document", "application/pdf"),
        ("360", "video/mp4"),
    ):
        response = await client.post(
            f"/api/units/{unit_id}/media",
            json={
                "type": media_type,
                "storage_key": f"units/{unit_id}/{media_type}",
                "file_name": f"{media_type}.bin",
                "mime_type": mime,
            },
            headers=LANDLORD,
        )
        assert response.status_code == 201

    response = await client.post(f"/api/units/{unit_id}/submit", headers=LANDLORD)
    assert response.json()["data"]["status"] == "submitted"

    response = await client.patch(
        f"/api/admin/units/{unit_id}/review",
        json={"structural_approved": True, "operational_baseline_approved": True},
        headers=ADMIN,
    )
    assert response.json()["data"]["status"] == "approved"
    return unit_id


async def test_health(client):
    response = await client.get("/api/health", headers={"x-transaction-id": "req-42"})

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
    assert response.headers["x-transaction-id"] == "req-42"


async def test_missing_token_is_rejected(client):
    response = await client.get("/api/corridors")

    assert response.status_code in (401, 403)


async def test_student_cannot_use_admin_routes(client):
    response = await client.post(
        "/api/corridors", json={"name": "X", "city_code": 1}, headers=STUDENT
    )

    assert response.status_code == 403


async def test_listing_lifecycle_and_visibility(client):
    corridor_id = await setup_directory(client)
    unit_id = await approved_unit(client, corridor_id)

    response = await client.get(f"/api/units/corridor/{corridor_id}", headers=STUDENT)
    page = response.json()["data"]
    assert page["total"] == 1
    assert page["items"][0]["id"] == unit_id

    response = await client.get(f"/api/units/{unit_id}/explain", headers=STUDENT)
    explanation = response.json()["data"]
    assert explanation["visible_to_students"] is True
    assert explanation["trust_band"] == "standard"


async def test_domain_errors_use_the_envelope(client):
    corridor_id = await setup_directory(client)
    response = await client.post(
        "/api/units", json={"corridor_id": corridor_id}, headers=LANDLORD
    )
    unit_id = response.json()["data"]["id"]

    response = await client.post(f"/api/units/{unit_id}/submit", headers=LANDLORD)

    body = response.json()
    assert response.status_code == 400
    assert body["success"] is False
    assert body["data"]["missing_media_types"] == ["photo", "document", "walkthrough360"]


async def test_unknown_unit_is_404(client):
    response = await client.get("/api/units/999/explain", headers=STUDENT)

    assert response.status_code == 404
    assert response.json()["success"] is False


async def test_complaint_and_occupancy_flow(client):
    corridor_id = await setup_directory(client)
    unit_id = await approved_unit(client, corridor_id, capacity=1)

    response = await client.post(
        "/api/occupancy/check-in",
        json={"unit_id": unit_id, "student_id": 1},
        headers=LANDLORD,
    )
    assert response.status_code == 201
    checked_in = response.json()["data"]
    public_id = checked_in["public_occupant_id"]
    assert len(public_id) == 12
    assert public_id.endswith("1")

    response = await client.post(
        "/api/complaints",
        json={"occupant_id": public_id, "severity": 2, "incident_type": "water"},
        headers=STUDENT,
    )
    assert response.status_code == 201
    recorded = response.json()["data"]
    assert recorded["complaint"]["unit_id"] == unit_id
    assert recorded["complaint"]["incident_flag"] is True
    assert recorded["trust_score"] == 66

    response = await client.get("/api/complaints/mine", headers=STUDENT)
    assert [c["sla_status"] for c in response.json()["data"]] == ["open"]

    response = await client.get("/api/complaints/landlord", headers=LANDLORD)
    assert response.json()["data"]["metrics"]["open_complaints"] == 1

    response = await client.get(f"/api/admin/audits/units/{unit_id}", headers=ADMIN)
    assert [log["trigger_type"] for log in response.json()["data"]] == ["incident"]

    response = await client.post(
        f"/api/occupancy/{checked_in['occupancy_id']}/check-out", headers=LANDLORD
    )
    assert response.status_code == 200
    assert response.json()["data"]["occupants"][0]["active"] is False


async def test_complaint_needs_a_target(client):
    await setup_directory(client)

    response = await client.post(
        "/api/complaints", json={"severity": 2}, headers=STUDENT
    )

    assert response.status_code == 422


async def test_capacity_breach_returns_conflict(client):
    corridor_id = await setup_directory(client)
    unit_id = await approved_unit(client, corridor_id, capacity=1)
    await client.post(
        "/api/profiles/student",
        json={"name": "Meera", "corridor_id": corridor_id},
        headers=auth(201, ActorRole.STUDENT),
    )
    await client.post(
        "/api/occupancy/check-in",
        json={"unit_id": unit_id, "student_id": 1},
        headers=LANDLORD,
    )

    response = await client.post(
        "/api/occupancy/check-in",
        json={"unit_id": unit_id, "student_id": 2},
        headers=LANDLORD,
    )

    assert response.status_code == 409
    assert response.json()["message"] == "Unit capacity reached"

    response = await client.get(f"/api/units/{unit_id}/explain", headers=ADMIN)
    assert response.json()["data"]["status"] == "suspended"


async def test_admin_audit_resolution_reopens_unit(client):
    corridor_id = await setup_directory(client)
    unit_id = await approved_unit(client, corridor_id)

    response = await client.post(
        f"/api/admin/audits/units/{unit_id}",
        json={"reason": "Random visit"},
        headers=ADMIN,
    )
    assert response.status_code == 201
    log_id = response.json()["data"]["id"]

    response = await client.patch(
        f"/api/admin/audits/{log_id}/corrective-plan",
        json={"corrective_action": "Fix the fire exit signage"},
        headers=ADMIN,
    )
    assert response.json()["data"]["corrective_action"] == "Fix the fire exit signage"

    response = await client.patch(
        f"/api/admin/audits/{log_id}/resolve",
        json={"verification_notes": "Verified on site"},
        headers=ADMIN,
    )
    resolution = response.json()["data"]
    assert resolution["unresolved_audit_logs"] == 0
    assert resolution["unit"]["status"] == "approved"
