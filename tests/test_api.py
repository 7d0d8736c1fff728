"""HTTP-level tests: routing, camelCase envelopes and error mapping."""
import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.exc import OperationalError

from pipevault.db.base import get_db
from pipevault.domain import RequestStatus
from pipevault.main import create_app
from pipevault.repositories.company import CompanyRepository

ADMIN = {"X-Admin-Id": "admin-1"}


@pytest.fixture()
async def client(session_factory):
    app = create_app()

    async def _get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = _get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client


@pytest.fixture()
async def pending(seed):
    await seed.admin("admin-1")
    company = await seed.company("Bravo Oil")
    request = await seed.request(company, RequestStatus.PENDING, reference_id="BRAVO-001")
    await seed.rack("A-A1-01", name="A1-01", capacity=100, occupied=80)
    await seed.rack("A-A1-02", name="A1-02", capacity=100, occupied=0)
    return request


async def test_health(client):
    r = await client.get("/health")
    assert r.status_code == 200
    assert r.json()["status"] == "ok"
    assert r.json()["database"] == "ok"


async def test_company_summaries_use_camel_case(client, pending):
    r = await client.get("/api/v1/companies/summaries")

    assert r.status_code == 200
    [summary] = r.json()["data"]
    assert summary["name"] == "Bravo Oil"
    assert summary["totalRequests"] == 1
    assert summary["pendingRequests"] == 1
    assert summary["inStorageItems"] == 0
    assert "latestActivity" in summary


async def test_company_detail_and_projects(client, pending):
    r = await client.get(f"/api/v1/companies/{pending.company_id}")
    assert r.status_code == 200
    detail = r.json()["data"]
    assert detail["company"]["name"] == "Bravo Oil"
    assert detail["projects"][0]["referenceId"] == "BRAVO-001"
    assert detail["projects"][0]["workflow"]["state"] == "Pending Approval"
    assert detail["projects"][0]["requiresAdminAction"] is True

    r = await client.get("/api/v1/companies/projects")
    assert r.status_code == 200
    assert [t["company"]["name"] for t in r.json()["data"]] == ["Bravo Oil"]


async def test_unknown_company_is_404(client):
    r = await client.get("/api/v1/companies/missing")
    assert r.status_code == 404
    error = r.json()["error"]
    assert error["code"] == "NOT_FOUND"
    assert error["entityType"] == "Company"
    assert error["retryable"] is False


async def test_approve_request(client, pending):
    r = await client.post(
        f"/api/v1/requests/{pending.id}/approve",
        json={"allocations": [{"rackId": "A-A1-02", "joints": 30}], "notes": "Bay 2"},
        headers=ADMIN,
    )

    assert r.status_code == 200
    data = r.json()["data"]
    assert data["success"] is True
    assert data["status"] == "APPROVED"
    assert data["assignedRacks"] == ["A1-02"]
    assert data["notificationQueued"] is True
    assert data["allocations"][0]["available"] == 70


async def test_approve_with_rack_ids_splits_evenly(client, pending):
    r = await client.post(
        f"/api/v1/requests/{pending.id}/approve",
        json={"assignedRackIds": ["A-A1-01", "A-A1-02"], "requiredJoints": 21},
        headers=ADMIN,
    )

    assert r.status_code == 200
    allocations = r.json()["data"]["allocations"]
    assert [(a["rackId"], a["joints"]) for a in allocations] == [("A-A1-01", 11), ("A-A1-02", 10)]


async def test_approve_without_admin_header_is_forbidden(client, pending):
    r = await client.post(
        f"/api/v1/requests/{pending.id}/approve",
        json={"allocations": [{"rackId": "A-A1-02", "joints": 30}]},
    )
    assert r.status_code == 403
    assert r.json()["error"]["code"] == "FORBIDDEN"


async def test_approve_over_capacity_is_409(client, pending):
    r = await client.post(
        f"/api/v1/requests/{pending.id}/approve",
        json={"allocations": [{"rackId": "A-A1-01", "joints": 25}]},
        headers=ADMIN,
    )

    assert r.status_code == 409
    error = r.json()["error"]
    assert error["code"] == "CAPACITY_EXCEEDED"
    assert error["entityId"] == "A-A1-01"
    assert error["details"] == {"requested": 25, "available": 20}


async def test_second_decision_is_a_conflict(client, pending):
    url = f"/api/v1/requests/{pending.id}"
    r = await client.post(f"{url}/reject", json={"reason": "Wrong grade"}, headers=ADMIN)
    assert r.status_code == 200
    assert r.json()["data"]["status"] == "REJECTED"

    r = await client.post(
        f"{url}/approve",
        json={"allocations": [{"rackId": "A-A1-02", "joints": 5}]},
        headers=ADMIN,
    )
    assert r.status_code == 409
    assert r.json()["error"]["code"] == "STATE_CONFLICT"


async def test_approve_body_needs_an_allocation_form(client, pending):
    r = await client.post(
        f"/api/v1/requests/{pending.id}/approve", json={"notes": "no racks"}, headers=ADMIN
    )
    assert r.status_code == 422


async def test_racks_and_adjustment(client, pending):
    r = await client.get("/api/v1/racks")
    assert r.status_code == 200
    assert [rack["available"] for rack in r.json()["data"]] == [20, 100]

    r = await client.post(
        "/api/v1/racks/A-A1-01/adjust",
        json={"occupied": 60, "reason": "Recount after pickup"},
        headers=ADMIN,
    )
    assert r.status_code == 200
    assert r.json()["data"]["newOccupied"] == 60


async def test_audit_log_and_notification_queue(client, pending):
    await client.post(
        f"/api/v1/requests/{pending.id}/approve",
        json={"allocations": [{"rackId": "A-A1-02", "joints": 10}]},
        headers=ADMIN,
    )

    r = await client.get("/api/v1/audit-log", params={"entityId": pending.id})
    assert r.status_code == 200
    body = r.json()
    assert body["meta"]["total"] == 1
    assert body["data"][0]["action"] == "APPROVE_REQUEST"

    r = await client.get("/api/v1/notifications/pending")
    [task] = r.json()["data"]
    assert task["type"] == "storage_request_approved"

    r = await client.post(f"/api/v1/notifications/{task['id']}/failed", json={"error": "SMTP down"})
    assert r.status_code == 200
    assert r.json()["data"]["status"] == "pending"
    assert r.json()["data"]["attempts"] == 1

    r = await client.post(f"/api/v1/notifications/{task['id']}/sent")
    assert r.status_code == 200
    assert r.json()["data"]["status"] == "sent"

    r = await client.get("/api/v1/notifications/pending")
    assert r.json()["data"] == []


async def test_store_outage_is_503_and_retryable(client, pending, monkeypatch):
    async def _unreachable(self):
        raise OperationalError("SELECT", {}, Exception("unable to open database file"))

    monkeypatch.setattr(CompanyRepository, "list_summary_rows", _unreachable)

    r = await client.get("/api/v1/companies/summaries")

    assert r.status_code == 503
    error = r.json()["error"]
    assert error["code"] == "DATA_ACCESS_ERROR"
    assert error["retryable"] is True
    assert error["details"] == {"operation": "list_company_summaries"}
