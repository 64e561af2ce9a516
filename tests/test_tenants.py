"""Tenant onboarding, termination and lease expiry."""

from datetime import date

import pytest
from sqlalchemy import select

from rentora_backend.modules.auth.models import User, UserRole
from rentora_backend.modules.property_management.models import Property
from rentora_backend.modules.tenant_management import jobs, services
from rentora_backend.modules.tenant_management.models import Lease, TenancyStatus, Tenant

from helpers import auth_headers, lease_window, money, property_payload, unit_payload

API = "/api/tenants"


async def create_listing(client, agent, **overrides) -> dict:
    response = await client.post(
        "/api/properties", json=property_payload(**overrides), headers=auth_headers(agent)
    )
    assert response.status_code == 201, response.text
    return response.json()["data"]


def tenancy(property_id: int, user_id: int | None = None, user_data=None, **extra) -> dict:
    start, end = lease_window()
    body = {
        "property_id": property_id,
        "lease_start_date": start.isoformat(),
        "lease_end_date": end.isoformat(),
        "deposit_amount": "1200.00",
        "payment_due_day": 5,
    }
    if user_id is not None:
        body["user_id"] = user_id
    if user_data is not None:
        body["user_data"] = user_data
    body.update(extra)
    return body


async def onboard(client, agent, body) -> dict:
    response = await client.post(API, json=body, headers=auth_headers(agent))
    assert response.status_code == 201, response.text
    return response.json()["data"]


async def load(session_factory, model, **criteria):
    async with session_factory() as session:
        result = await session.execute(select(model).filter_by(**criteria))
        return result.scalars().all()


async def test_onboarding_promotes_seeker_and_fills_the_property(
    client, session_factory, agent, seeker, notifier
):
    listing = await create_listing(client, agent)

    data = await onboard(client, agent, tenancy(listing["id"], seeker.id))

    assert data["status"] == "active"
    assert data["user"]["role"] == "tenant"
    assert data["agent_id"] == agent.id
    assert data["created_by_id"] == agent.id
    assert data["monthly_rent"] == 1200.0
    assert data["rent_due_day"] == 5
    assert data["temporary_password"] is None
    assert data["lease"]["status"] == "active"
    assert data["lease"]["notice_period_days"] == 30
    assert data["lease"]["grace_period_days"] == 3

    (prop,) = await load(session_factory, Property, id=listing["id"])
    assert prop.current_occupancy == 1
    assert prop.availability.value == "occupied"
    assert notifier.notifications[-1]["user_id"] == seeker.id
    assert notifier.credentials == []


async def test_promotion_is_idempotent(client, session_factory, agent, seeker):
    first = await create_listing(client, agent, title="First apartment listing")
    second = await create_listing(client, agent, title="Second apartment listing")

    await onboard(client, agent, tenancy(first["id"], seeker.id))
    data = await onboard(client, agent, tenancy(second["id"], seeker.id))

    assert data["user"]["role"] == "tenant"
    (user,) = await load(session_factory, User, id=seeker.id)
    assert user.role == UserRole.TENANT
    assert len(await load(session_factory, Tenant, user_id=seeker.id)) == 2


async def test_occupied_property_is_not_available(client, make_user, agent, seeker):
    listing = await create_listing(client, agent)
    await onboard(client, agent, tenancy(listing["id"], seeker.id))
    latecomer = await make_user(UserRole.SEEKER)

    response = await client.post(
        API, json=tenancy(listing["id"], latecomer.id), headers=auth_headers(agent)
    )

    assert response.status_code == 409
    assert response.json()["message"] == "Property is not available"


async def test_failed_onboarding_rolls_back_new_account(
    client, session_factory, agent, seeker, notifier
):
    listing = await create_listing(client, agent)
    await onboard(client, agent, tenancy(listing["id"], seeker.id))

    response = await client.post(
        API,
        json=tenancy(
            listing["id"],
            user_data={"email": "newcomer@example.com", "first_name": "New"},
        ),
        headers=auth_headers(agent),
    )

    assert response.status_code == 409
    assert await load(session_factory, User, email="newcomer@example.com") == []
    assert notifier.credentials == []


async def test_onboarding_a_new_account(client, session_factory, agent, notifier):
    listing = await create_listing(client, agent)

    data = await onboard(
        client,
        agent,
        tenancy(
            listing["id"],
            user_data={
                "email": "Fresh.Tenant@Example.com",
                "first_name": "Fresh",
                "last_name": "Tenant",
            },
        ),
    )

    assert data["temporary_password"]
    (user,) = await load(session_factory, User, id=data["user_id"])
    assert user.email == "fresh.tenant@example.com"
    assert user.role == UserRole.TENANT
    assert user.must_change_password is True
    assert user.created_by_id == agent.id
    assert user.parent_user_id == agent.id
    assert notifier.credentials == [(user.email, data["temporary_password"])]


async def test_existing_email_is_a_conflict(client, agent, seeker):
    listing = await create_listing(client, agent)

    response = await client.post(
        API,
        json=tenancy(
            listing["id"], user_data={"email": seeker.email, "first_name": "Copy"}
        ),
        headers=auth_headers(agent),
    )

    assert response.status_code == 409
    assert response.json()["message"] == "A user with this email already exists"


async def test_user_id_and_user_data_are_exclusive(client, agent, seeker):
    listing = await create_listing(client, agent)

    response = await client.post(
        API,
        json=tenancy(
            listing["id"],
            seeker.id,
            user_data={"email": "both@example.com", "first_name": "Both"},
        ),
        headers=auth_headers(agent),
    )

    assert response.status_code == 400
    assert response.json()["error"] == "validation_error"


async def test_staff_accounts_cannot_become_tenants(client, agent, employee):
    listing = await create_listing(client, agent)

    response = await client.post(
        API, json=tenancy(listing["id"], employee.id), headers=auth_headers(agent)
    )

    assert response.status_code == 400


async def test_duplicate_active_tenancy_is_a_conflict(client, agent, seeker):
    listing = await create_listing(client, agent, max_occupancy=3)
    await onboard(client, agent, tenancy(listing["id"], seeker.id))

    response = await client.post(
        API, json=tenancy(listing["id"], seeker.id), headers=auth_headers(agent)
    )

    assert response.status_code == 409
    assert response.json()["message"] == (
        "Tenant already has an active lease for this property"
    )


async def test_unit_tenancy_takes_the_units_rent(client, agent, seeker):
    block = await create_listing(
        client,
        agent,
        title="Riverside apartment block",
        rent=None,
        units=[unit_payload("A1", rent="750.00"), unit_payload("A2")],
    )
    unit_id = block["units"][0]["id"]

    data = await onboard(client, agent, tenancy(block["id"], seeker.id, unit_id=unit_id))

    assert data["unit_id"] == unit_id
    assert data["monthly_rent"] == 750.0
    detail = await client.get(
        f"/api/properties/{block['id']}", headers=auth_headers(agent)
    )
    unit = detail.json()["data"]["units"][0]
    assert unit["availability"] == "occupied"
    assert unit["tenant_id"] == seeker.id


async def test_multi_unit_property_requires_a_unit(client, agent, seeker):
    block = await create_listing(
        client, agent, title="Riverside apartment block", rent=None,
        units=[unit_payload("A1")],
    )

    response = await client.post(
        API, json=tenancy(block["id"], seeker.id), headers=auth_headers(agent)
    )

    assert response.status_code == 400


async def test_single_property_rejects_a_unit(client, agent, seeker):
    listing = await create_listing(client, agent)

    response = await client.post(
        API, json=tenancy(listing["id"], seeker.id, unit_id=1), headers=auth_headers(agent)
    )

    assert response.status_code == 400
    assert response.json()["message"] == "Property has no units"


async def test_outsider_cannot_onboard(client, agent, other_agent, seeker):
    listing = await create_listing(client, agent)

    response = await client.post(
        API, json=tenancy(listing["id"], seeker.id), headers=auth_headers(other_agent)
    )

    assert response.status_code == 403


async def test_termination_frees_the_slot(client, session_factory, agent, seeker, notifier):
    listing = await create_listing(client, agent)
    created = await onboard(client, agent, tenancy(listing["id"], seeker.id))

    response = await client.request(
        "DELETE",
        f"{API}/{created['id']}",
        json={"reason": "Moved out"},
        headers=auth_headers(agent),
    )

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["status"] == "terminated"
    assert data["terminated_by_id"] == agent.id
    assert data["termination_reason"] == "Moved out"
    assert data["lease"]["status"] == "terminated"

    (prop,) = await load(session_factory, Property, id=listing["id"])
    assert prop.current_occupancy == 0
    assert prop.availability.value == "available"
    assert notifier.notifications[-1]["title"] == "Tenancy ended"


async def test_termination_without_body(client, agent, seeker):
    listing = await create_listing(client, agent)
    created = await onboard(client, agent, tenancy(listing["id"], seeker.id))

    response = await client.delete(f"{API}/{created['id']}", headers=auth_headers(agent))

    assert response.status_code == 200
    assert response.json()["data"]["termination_reason"] is None


async def test_terminating_twice_is_a_conflict(client, agent, seeker):
    listing = await create_listing(client, agent)
    created = await onboard(client, agent, tenancy(listing["id"], seeker.id))
    await client.delete(f"{API}/{created['id']}", headers=auth_headers(agent))

    response = await client.delete(f"{API}/{created['id']}", headers=auth_headers(agent))

    assert response.status_code == 409


async def test_termination_frees_the_unit(client, agent, seeker):
    block = await create_listing(
        client, agent, title="Riverside apartment block", rent=None,
        units=[unit_payload("A1")],
    )
    unit_id = block["units"][0]["id"]
    created = await onboard(
        client, agent, tenancy(block["id"], seeker.id, unit_id=unit_id)
    )

    await client.delete(f"{API}/{created['id']}", headers=auth_headers(agent))

    detail = await client.get(
        f"/api/properties/{block['id']}", headers=auth_headers(agent)
    )
    unit = detail.json()["data"]["units"][0]
    assert unit["availability"] == "available"
    assert unit["tenant_id"] is None
    assert detail.json()["data"]["availability"] == "available"


async def test_property_with_active_tenancy_cannot_be_deleted(client, agent, seeker):
    block = await create_listing(
        client, agent, title="Riverside apartment block", rent=None,
        units=[unit_payload("A1"), unit_payload("A2")],
    )
    unit_id = block["units"][0]["id"]
    created = await onboard(
        client, agent, tenancy(block["id"], seeker.id, unit_id=unit_id)
    )
    vacated = await client.patch(
        f"/api/properties/{block['id']}/units/{unit_id}/vacate",
        headers=auth_headers(agent),
    )
    assert vacated.status_code == 200

    response = await client.delete(
        f"/api/properties/{block['id']}", headers=auth_headers(agent)
    )

    assert response.status_code == 409
    assert response.json()["message"] == "Cannot delete a property with active tenants"
    still_there = await client.get(f"{API}/{created['id']}", headers=auth_headers(agent))
    assert still_there.json()["data"]["status"] == "active"


async def test_full_multi_unit_property_is_not_available(
    client, make_user, agent, seeker
):
    block = await create_listing(
        client, agent, title="Riverside apartment block", rent=None,
        units=[unit_payload("A1")],
    )
    unit_id = block["units"][0]["id"]
    await onboard(client, agent, tenancy(block["id"], seeker.id, unit_id=unit_id))
    latecomer = await make_user(UserRole.SEEKER)

    response = await client.post(
        API,
        json=tenancy(block["id"], latecomer.id, unit_id=unit_id),
        headers=auth_headers(agent),
    )

    assert response.status_code == 409
    assert response.json()["message"] == "Property is not available"


async def test_employee_cannot_terminate(client, agent, employee, seeker):
    listing = await create_listing(client, agent)
    created = await onboard(client, agent, tenancy(listing["id"], seeker.id))

    response = await client.delete(
        f"{API}/{created['id']}", headers=auth_headers(employee)
    )

    assert response.status_code == 403


async def test_listing_is_hierarchy_scoped(client, agent, other_agent, employee, seeker):
    own = await create_listing(client, employee, title="Employee entered listing")
    await client.patch(f"/api/properties/{own['id']}/approve", headers=auth_headers(agent))
    created = await onboard(client, employee, tenancy(own["id"], seeker.id))

    for user, expected in ((agent, 1), (employee, 1), (other_agent, 0)):
        response = await client.get(API, headers=auth_headers(user))
        assert response.json()["data"]["total"] == expected

    mine = await client.get(API, headers=auth_headers(seeker))
    assert [t["id"] for t in mine.json()["data"]["items"]] == [created["id"]]


async def test_tenant_reads_only_its_own_record(client, make_user, agent, seeker):
    listing = await create_listing(client, agent, max_occupancy=2)
    created = await onboard(client, agent, tenancy(listing["id"], seeker.id))
    stranger = await make_user(UserRole.TENANT)

    assert (
        await client.get(f"{API}/{created['id']}", headers=auth_headers(seeker))
    ).status_code == 200
    assert (
        await client.get(f"{API}/{created['id']}", headers=auth_headers(stranger))
    ).status_code == 403


async def test_update_syncs_the_lease_due_day(client, agent, seeker):
    listing = await create_listing(client, agent)
    created = await onboard(client, agent, tenancy(listing["id"], seeker.id))

    response = await client.patch(
        f"{API}/{created['id']}",
        json={"rent_due_day": 10, "emergency_contact_name": "Jane"},
        headers=auth_headers(agent),
    )

    data = response.json()["data"]
    assert data["rent_due_day"] == 10
    assert data["lease"]["payment_due_day"] == 10
    assert data["emergency_contact_name"] == "Jane"


async def test_terminated_tenancy_cannot_be_edited(client, agent, seeker):
    listing = await create_listing(client, agent)
    created = await onboard(client, agent, tenancy(listing["id"], seeker.id))
    await client.delete(f"{API}/{created['id']}", headers=auth_headers(agent))

    response = await client.patch(
        f"{API}/{created['id']}", json={"notes": "late"}, headers=auth_headers(agent)
    )

    assert response.status_code == 409


async def test_stats(client, make_user, agent, seeker):
    listing = await create_listing(client, agent, max_occupancy=3)
    await onboard(client, agent, tenancy(listing["id"], seeker.id))
    other = await make_user(UserRole.SEEKER)
    second = await onboard(
        client, agent, tenancy(listing["id"], other.id, rent_amount="1000.00")
    )
    await client.delete(f"{API}/{second['id']}", headers=auth_headers(agent))

    response = await client.get(f"{API}/stats", headers=auth_headers(agent))

    stats = response.json()["data"]
    assert stats["total"] == 2
    assert stats["active"] == 1
    assert stats["terminated"] == 1
    assert stats["monthly_rent_active"] == 1200.0


# ----- Lease expiry -----


async def test_expiry_closes_overdue_leases_and_frees_capacity(
    client, db, session_factory, agent, seeker
):
    listing = await create_listing(client, agent)
    created = await onboard(client, agent, tenancy(listing["id"], seeker.id))
    _, lease_end = lease_window()

    assert await services.expire_overdue_leases(db, lease_end) == 0
    assert await services.expire_overdue_leases(db, date(2027, 6, 1)) == 1
    assert await services.expire_overdue_leases(db, date(2027, 6, 1)) == 0

    (tenant,) = await load(session_factory, Tenant, id=created["id"])
    (lease,) = await load(session_factory, Lease, id=created["lease_id"])
    (prop,) = await load(session_factory, Property, id=listing["id"])
    assert tenant.status == TenancyStatus.EXPIRED
    assert lease.status == TenancyStatus.EXPIRED
    assert tenant.terminated_at is None
    assert prop.current_occupancy == 0


async def test_expired_tenancy_can_still_be_terminated(client, db, agent, seeker):
    listing = await create_listing(client, agent)
    created = await onboard(client, agent, tenancy(listing["id"], seeker.id))
    await services.expire_overdue_leases(db, date(2027, 6, 1))

    response = await client.delete(f"{API}/{created['id']}", headers=auth_headers(agent))

    assert response.status_code == 200
    detail = await client.get(
        f"/api/properties/{listing['id']}", headers=auth_headers(agent)
    )
    # Capacity was already returned by the expiry
    assert detail.json()["data"]["current_occupancy"] == 0


async def test_expiry_job_uses_its_own_session(
    client, session_factory, monkeypatch, agent, seeker
):
    listing = await create_listing(client, agent)
    await onboard(client, agent, tenancy(listing["id"], seeker.id))
    monkeypatch.setattr(jobs, "AsyncSessionLocal", session_factory)
    monkeypatch.setattr(jobs, "utc_today", lambda: date(2027, 6, 1))

    assert await jobs.run_lease_expiry() == 1
    assert await jobs.run_lease_expiry() == 0


async def test_deposit_is_stored_as_money(client, session_factory, agent, seeker):
    listing = await create_listing(client, agent)
    created = await onboard(client, agent, tenancy(listing["id"], seeker.id))

    (lease,) = await load(session_factory, Lease, id=created["lease_id"])
    assert money(lease.deposit_amount) == money("1200.00")
    assert money(lease.late_fee_percentage) == money("5.0")


@pytest.mark.parametrize("due_day", [0, 32])
async def test_payment_due_day_bounds(client, agent, seeker, due_day):
    listing = await create_listing(client, agent)

    response = await client.post(
        API,
        json=tenancy(listing["id"], seeker.id, payment_due_day=due_day),
        headers=auth_headers(agent),
    )

    assert response.status_code == 400
