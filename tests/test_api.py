"""HTTP surface: auth, role checks, task workflow through the routers."""
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from cleanops.main import create_app
from cleanops.models.account import Account
from cleanops.models.booking import Booking
from cleanops.models.property import Property
from cleanops.models.user import AdminUser, UserType, Worker
from cleanops.services.auth import create_access_token, get_password_hash
from cleanops.services.task_derivation import derive_task

UTC = timezone.utc


@pytest.fixture
def client(settings):
    app = create_app(settings)
    with TestClient(app) as c:
        yield c


@pytest.fixture
def seeded(client):
    """One admin, two workers, one account/property/booking with its pending task."""
    db = client.app.state.session_factory()
    try:
        admin = AdminUser(name="Admin User", email="admin@cleanops.app", password_hash=get_password_hash("Admin123!"))
        w1 = Worker(name="Sara Ahmad", email="sara@cleanops.app", phone="+962781234567",
                    password_hash=get_password_hash("Worker123!"))
        w2 = Worker(name="Fatima Ali", email="fatima@cleanops.app", phone="+962791234568",
                    password_hash=get_password_hash("Worker123!"))
        account = Account(name="Main", hostaway_account_id="1001", api_key="k")
        db.add_all([admin, w1, w2, account])
        db.flush()
        prop = Property(account_id=account.id, hostaway_listing_id="501", name="Sea View", address="1 Beach Rd")
        db.add(prop)
        db.flush()
        check_out = datetime.now(UTC).replace(microsecond=0) + timedelta(days=5)
        booking = Booking(
            account_id=account.id, property_id=prop.id, hostaway_booking_id="R1", guest_name="Jane",
            check_in=check_out - timedelta(days=3), check_out=check_out, booking_status="new",
        )
        db.add(booking)
        db.flush()
        task, _ = derive_task(db, booking)
        db.commit()
        settings = client.app.state.settings
        return {
            "task_id": task.id,
            "worker_id": w1.id,
            "other_worker_id": w2.id,
            "admin": {"Authorization": f"Bearer {create_access_token(settings, admin.id, UserType.admin, 'admin')}"},
            "worker": {"Authorization": f"Bearer {create_access_token(settings, w1.id, UserType.worker)}"},
            "other": {"Authorization": f"Bearer {create_access_token(settings, w2.id, UserType.worker)}"},
        }
    finally:
        db.close()


def test_health(client):
    assert client.get("/health").json() == {"status": "healthy"}


def test_tasks_require_token(client):
    assert client.get("/tasks").status_code == 401
    assert client.get("/tasks", headers={"Authorization": "Bearer not-a-jwt"}).status_code == 401


def test_admin_login(client, seeded):
    r = client.post("/auth/admin/login", json={"email": "admin@cleanops.app", "password": "Admin123!"})
    assert r.status_code == 200
    body = r.json()
    assert body["user_type"] == "admin"
    assert body["access_token"]

    bad = client.post("/auth/admin/login", json={"email": "admin@cleanops.app", "password": "wrong"})
    assert bad.status_code == 401


def test_worker_login_token_works(client, seeded):
    r = client.post("/auth/worker/login", json={"email": "sara@cleanops.app", "password": "Worker123!"})
    assert r.status_code == 200
    token = r.json()["access_token"]
    me = client.get("/workers/me", headers={"Authorization": f"Bearer {token}"})
    assert me.json()["email"] == "sara@cleanops.app"


def test_worker_cannot_use_admin_routes(client, seeded):
    assert client.get("/accounts", headers=seeded["worker"]).status_code == 403
    r = client.post(f"/tasks/{seeded['task_id']}/assign", json={"worker_id": seeded["worker_id"]}, headers=seeded["worker"])
    assert r.status_code == 403


def test_task_workflow(client, seeded):
    task_id = seeded["task_id"]

    r = client.post(f"/tasks/{task_id}/assign", json={"worker_id": seeded["worker_id"]}, headers=seeded["admin"])
    assert r.status_code == 200
    assert r.json()["status"] == "assigned"

    notes = client.get("/notifications", headers=seeded["worker"]).json()
    assert notes[0]["type"] == "task_assigned"
    assert notes[0]["data"]["taskId"] == task_id

    item_id = r.json()["checklist"][0]["id"]
    r = client.patch(f"/tasks/{task_id}/checklist/{item_id}", json={"completed": True}, headers=seeded["worker"])
    assert r.json()["completed"] is True

    assert client.post(f"/tasks/{task_id}/start", headers=seeded["worker"]).json()["status"] == "in_progress"
    r = client.post(f"/tasks/{task_id}/complete", json={"worker_notes": "All good"}, headers=seeded["worker"])
    assert r.json()["status"] == "completed"
    assert r.json()["worker_notes"] == "All good"

    me = client.get("/workers/me", headers=seeded["worker"]).json()
    assert me["completed_tasks"] == 1
    assert me["active_tasks"] == 0

    history = client.get(f"/tasks/{task_id}/history", headers=seeded["admin"]).json()
    assert [h["status"] for h in history] == ["assigned", "in_progress", "completed"]


def test_other_worker_gets_403_and_task_is_unchanged(client, seeded):
    task_id = seeded["task_id"]
    client.post(f"/tasks/{task_id}/assign", json={"worker_id": seeded["worker_id"]}, headers=seeded["admin"])

    r = client.post(f"/tasks/{task_id}/start", headers=seeded["other"])
    assert r.status_code == 403
    assert "not assigned" in r.json()["detail"]
    assert client.get(f"/tasks/{task_id}", headers=seeded["admin"]).json()["status"] == "assigned"


def test_invalid_transition_is_409(client, seeded):
    task_id = seeded["task_id"]
    client.post(f"/tasks/{task_id}/cancel", json={"reason": "Owner blocked dates"}, headers=seeded["admin"])
    r = client.post(f"/tasks/{task_id}/assign", json={"worker_id": seeded["worker_id"]}, headers=seeded["admin"])
    assert r.status_code == 409


def test_unknown_task_is_404(client, seeded):
    assert client.get("/tasks/9999", headers=seeded["admin"]).status_code == 404


def test_worker_only_sees_own_tasks(client, seeded):
    task_id = seeded["task_id"]
    assert client.get("/tasks", headers=seeded["worker"]).json() == []
    assert client.get(f"/tasks/{task_id}", headers=seeded["worker"]).status_code == 404

    client.post(f"/tasks/{task_id}/assign", json={"worker_id": seeded["worker_id"]}, headers=seeded["admin"])
    detail = client.get(f"/tasks/{task_id}", headers=seeded["worker"]).json()
    assert detail["property_name"] == "Sea View"
    assert detail["worker_name"] == "Sara Ahmad"


def test_bookings_include_task(client, seeded):
    rows = client.get("/bookings", headers=seeded["admin"]).json()
    assert len(rows) == 1
    assert rows[0]["task_id"] == seeded["task_id"]
    assert rows[0]["task_status"] == "pending"
    assert rows[0]["property_name"] == "Sea View"


def test_accounts_and_overview(client, seeded):
    accounts = client.get("/accounts", headers=seeded["admin"]).json()
    assert accounts[0]["properties_count"] == 1
    assert accounts[0]["upcoming_bookings"] == 1

    overview = client.get("/analytics/overview", headers=seeded["admin"]).json()
    assert overview["total_accounts"] == 1
    assert overview["pending_tasks"] == 1
    assert overview["available_workers"] == 2


def test_manual_sync_without_accounts(client, seeded, monkeypatch):
    monkeypatch.delenv("HOSTAWAY_ACCOUNT_1_ID", raising=False)
    r = client.post("/accounts/sync", headers=seeded["admin"])
    assert r.status_code == 400


def test_register_worker(client):
    payload = {
        "name": "Mahmoud Khaled",
        "email": "mahmoud@cleanops.app",
        "phone": "+962 77 123 4567",
        "password": "secret1",
    }
    r = client.post("/auth/register/worker", json=payload)
    assert r.status_code == 201
    body = r.json()
    assert body["user_type"] == "worker"

    me = client.get("/workers/me", headers={"Authorization": f"Bearer {body['access_token']}"}).json()
    assert me["phone"] == "+962771234567"
    assert me["language"] == "ar"
    assert me["completed_tasks"] == 0

    login = client.post("/auth/worker/login", json={"email": payload["email"], "password": "secret1"})
    assert login.status_code == 200


def test_register_worker_duplicate_email(client, seeded):
    r = client.post(
        "/auth/register/worker",
        json={"name": "Sara Again", "email": "sara@cleanops.app", "phone": "+962781234599", "password": "secret1"},
    )
    assert r.status_code == 400
    assert r.json()["detail"] == "Email already registered"


@pytest.mark.parametrize(
    "override",
    [{"phone": "0791234567"}, {"password": "123"}, {"name": " A "}, {"language": "fr"}],
)
def test_register_worker_validation(client, override):
    payload = {"name": "New Worker", "email": "new@cleanops.app", "phone": "+962791112223", "password": "secret1"}
    payload.update(override)
    assert client.post("/auth/register/worker", json=payload).status_code == 422
