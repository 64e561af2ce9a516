"""Authentication, the response envelope and account provisioning."""

from sqlalchemy import select

from rentora_backend.config import settings
from rentora_backend.modules.auth.models import User, UserRole
from rentora_backend.modules.auth.password_service import hash_password, verify_password
from rentora_backend.modules.auth.seed import seed_initial_admin

from helpers import DEFAULT_PASSWORD, auth_headers


def test_password_hash_round_trip():
    stored = hash_password("correct horse")

    assert stored != "correct horse"
    assert verify_password("correct horse", stored)
    assert not verify_password("wrong horse", stored)
    assert not verify_password("correct horse", "not-a-hash")


async def test_health(client):
    response = await client.get("/api/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
    assert response.headers["x-request-id"]


async def test_request_id_is_echoed(client):
    response = await client.get("/api/health", headers={"x-request-id": "trace-42"})

    assert response.headers["x-request-id"] == "trace-42"


async def test_register_creates_a_seeker(client):
    response = await client.post(
        "/api/auth/register",
        json={
            "email": "Visitor@Example.com",
            "password": "long-enough-pw",
            "first_name": "Visitor",
            "role": "admin",
        },
    )

    assert response.status_code == 201
    body = response.json()
    assert body["status"] == "success"
    assert body["data"]["user"]["role"] == "seeker"
    assert body["data"]["user"]["email"] == "visitor@example.com"
    assert body["data"]["access_token"]


async def test_register_duplicate_email(client, seeker):
    response = await client.post(
        "/api/auth/register",
        json={"email": seeker.email, "password": "long-enough-pw", "first_name": "Dup"},
    )

    assert response.status_code == 409
    body = response.json()
    assert body == {
        "status": "error",
        "message": "A user with this email already exists",
        "error": "conflict",
        "data": None,
    }


async def test_login(client, agent):
    response = await client.post(
        "/api/auth/login", json={"email": agent.email, "password": DEFAULT_PASSWORD}
    )

    assert response.status_code == 200
    assert response.json()["data"]["user"]["id"] == agent.id


async def test_login_with_wrong_password(client, agent):
    response = await client.post(
        "/api/auth/login", json={"email": agent.email, "password": "nope-nope"}
    )

    assert response.status_code == 401
    assert response.json()["error"] == "authentication_error"


async def test_missing_token_is_401(client):
    response = await client.get("/api/tenants")

    assert response.status_code == 401
    assert response.json()["status"] == "error"


async def test_garbage_token_is_401(client):
    response = await client.get(
        "/api/tenants", headers={"Authorization": "Bearer not-a-token"}
    )

    assert response.status_code == 401


async def test_deactivated_account_token_is_401(client, db, agent):
    agent.is_active = False
    await db.commit()

    response = await client.get("/api/tenants", headers=auth_headers(agent))

    assert response.status_code == 401


async def test_pending_password_change_locks_regular_endpoints(client, make_user):
    user = await make_user(UserRole.AGENT, must_change_password=True)

    blocked = await client.get("/api/tenants", headers=auth_headers(user))
    profile = await client.get("/api/auth/me", headers=auth_headers(user))

    assert blocked.status_code == 403
    assert blocked.json()["message"] == "Password change required"
    assert profile.status_code == 200


async def test_change_password_clears_the_lock(client, make_user):
    user = await make_user(UserRole.AGENT, must_change_password=True)

    response = await client.post(
        "/api/auth/change-password",
        json={"current_password": DEFAULT_PASSWORD, "new_password": "brand-new-pw"},
        headers=auth_headers(user),
    )

    assert response.status_code == 200
    assert response.json()["data"]["must_change_password"] is False
    unlocked = await client.get("/api/tenants", headers=auth_headers(user))
    assert unlocked.status_code == 200


async def test_change_password_checks_the_current_one(client, agent):
    response = await client.post(
        "/api/auth/change-password",
        json={"current_password": "wrong-one", "new_password": "brand-new-pw"},
        headers=auth_headers(agent),
    )

    assert response.status_code == 400
    assert response.json()["details"] == {"field": "current_password"}


async def test_malformed_body_is_400(client):
    response = await client.post("/api/auth/login", json={"email": "not-an-email"})

    assert response.status_code == 400
    body = response.json()
    assert body["error"] == "validation_error"
    assert body["details"]["errors"]


# ----- Provisioning -----


async def test_admin_creates_agent_with_temporary_password(client, admin, notifier):
    response = await client.post(
        "/api/users/agents",
        json={"email": "newagent@example.com", "first_name": "Nia", "role": "agent"},
        headers=auth_headers(admin),
    )

    assert response.status_code == 201
    data = response.json()["data"]
    assert data["user"]["role"] == "agent"
    assert data["user"]["must_change_password"] is True
    assert data["user"]["created_by_id"] == admin.id
    assert notifier.credentials == [("newagent@example.com", data["temporary_password"])]


async def test_only_admin_creates_agents(client, agent):
    response = await client.post(
        "/api/users/agents",
        json={"email": "sneaky@example.com", "first_name": "Sneaky", "role": "agent"},
        headers=auth_headers(agent),
    )

    assert response.status_code == 403


async def test_agent_creates_employee(client, session_factory, agent):
    response = await client.post(
        "/api/users/employees",
        json={
            "email": "helper@example.com",
            "first_name": "Helper",
            "permissions": {"can_create_tenants": True},
        },
        headers=auth_headers(agent),
    )

    assert response.status_code == 201
    user = response.json()["data"]["user"]
    assert user["role"] == "employee"
    assert user["created_by_id"] == agent.id
    assert user["parent_user_id"] == agent.id
    assert user["permissions"]["can_create_tenants"] is True
    assert user["permissions"]["can_view_reports"] is False

    mine = await client.get("/api/users/my-employees", headers=auth_headers(agent))
    assert [u["email"] for u in mine.json()["data"]] == ["helper@example.com"]


async def test_agent_updates_own_employee_permissions(client, agent, employee):
    response = await client.patch(
        f"/api/users/employees/{employee.id}/permissions",
        json={"can_view_reports": True},
        headers=auth_headers(agent),
    )

    assert response.status_code == 200
    assert response.json()["data"]["permissions"]["can_view_reports"] is True


async def test_other_agent_cannot_update_permissions(client, other_agent, employee):
    response = await client.patch(
        f"/api/users/employees/{employee.id}/permissions",
        json={"can_view_reports": True},
        headers=auth_headers(other_agent),
    )

    assert response.status_code == 403


async def test_admin_lists_users_by_role(client, admin, agent, other_agent, seeker):
    response = await client.get(
        "/api/users", params={"role": "agent"}, headers=auth_headers(admin)
    )

    page = response.json()["data"]
    assert page["total"] == 2
    assert {u["id"] for u in page["items"]} == {agent.id, other_agent.id}


async def test_admin_deactivates_user(client, admin, agent):
    response = await client.patch(
        f"/api/users/{agent.id}/status",
        json={"is_active": False},
        headers=auth_headers(admin),
    )

    assert response.status_code == 200
    assert response.json()["data"]["is_active"] is False
    login = await client.post(
        "/api/auth/login", json={"email": agent.email, "password": DEFAULT_PASSWORD}
    )
    assert login.status_code == 401


async def test_admin_cannot_deactivate_itself(client, admin):
    response = await client.patch(
        f"/api/users/{admin.id}/status",
        json={"is_active": False},
        headers=auth_headers(admin),
    )

    assert response.status_code == 400


# ----- Seeding -----


async def test_seed_initial_admin_runs_once(db, monkeypatch):
    monkeypatch.setattr(settings, "init_admin_email", "root@example.com")
    monkeypatch.setattr(settings, "init_admin_password", "root-password")

    first = await seed_initial_admin(db)
    second = await seed_initial_admin(db)

    assert first is not None
    assert first.role == UserRole.ADMIN
    assert second is None
    admins = (
        await db.execute(select(User).where(User.role == UserRole.ADMIN))
    ).scalars().all()
    assert len(admins) == 1


async def test_seed_is_skipped_without_configuration(db, monkeypatch):
    monkeypatch.setattr(settings, "init_admin_email", None)

    assert await seed_initial_admin(db) is None
