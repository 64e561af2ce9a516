"""Hierarchy reports and platform billing."""

from datetime import date
from decimal import Decimal

import pytest

from rentora_backend.modules.auth.models import UserRole
from rentora_backend.modules.reporting.models import (
    Payment,
    PaymentMethod,
    PaymentStatus,
    PaymentType,
)
from rentora_backend.modules.reporting.services import (
    default_billing_period,
    platform_fee,
)

from helpers import auth_headers, lease_window, property_payload

API = "/api/hierarchy"
PERIOD = {"start": "2026-03-01", "end": "2026-03-31"}


@pytest.fixture
async def tenancy(client, agent, employee, seeker):
    """An employee-entered, approved listing with one tenant onboarded by the employee."""
    listing = (
        await client.post(
            "/api/properties", json=property_payload(), headers=auth_headers(employee)
        )
    ).json()["data"]
    await client.patch(
        f"/api/properties/{listing['id']}/approve", headers=auth_headers(agent)
    )
    start, end = lease_window()
    response = await client.post(
        "/api/tenants",
        json={
            "user_id": seeker.id,
            "property_id": listing["id"],
            "lease_start_date": start.isoformat(),
            "lease_end_date": end.isoformat(),
        },
        headers=auth_headers(employee),
    )
    assert response.status_code == 201, response.text
    return response.json()["data"]


@pytest.fixture
async def payments(db, tenancy, agent, employee):
    def payment(amount, status, paid_date, recorded_by=None):
        return Payment(
            tenant_id=tenancy["id"],
            property_id=tenancy["property_id"],
            agent_id=agent.id,
            recorded_by_id=recorded_by,
            amount=Decimal(amount),
            payment_type=PaymentType.RENT,
            payment_method=PaymentMethod.MPESA,
            status=status,
            due_date=date(2026, 3, 5),
            paid_date=paid_date,
        )

    db.add_all(
        [
            payment("1000.00", PaymentStatus.PAID, date(2026, 3, 4), employee.id),
            payment("500.10", PaymentStatus.PAID, date(2026, 3, 31), employee.id),
            payment("700.00", PaymentStatus.PENDING, None),
            payment("900.00", PaymentStatus.PAID, date(2026, 4, 1)),
        ]
    )
    await db.commit()


def test_platform_fee_rounds_half_up():
    assert platform_fee(Decimal("1500.10"), Decimal("0.05")) == Decimal("75.01")
    assert platform_fee(Decimal("0.10"), Decimal("0.05")) == Decimal("0.01")
    assert platform_fee(Decimal("0"), Decimal("0.05")) == Decimal("0.00")


def test_default_billing_period_is_the_calendar_month():
    assert default_billing_period(date(2026, 2, 14)) == (
        date(2026, 2, 1),
        date(2026, 2, 28),
    )


async def test_admin_billing_has_a_row_per_agent(
    client, payments, admin, agent, other_agent
):
    response = await client.get(
        f"{API}/billing", params=PERIOD, headers=auth_headers(admin)
    )

    assert response.status_code == 200
    summary = response.json()["data"]
    assert summary["total_agents"] == 2
    assert summary["commission_rate"] == 0.05
    rows = {row["agent"]["id"]: row for row in summary["rows"]}
    assert rows[agent.id]["total_collected"] == 1500.10
    assert rows[agent.id]["platform_fee"] == 75.01
    assert rows[agent.id]["employees"] == 1
    assert rows[agent.id]["properties"] == 1
    assert rows[agent.id]["tenants"] == 1
    assert rows[other_agent.id]["total_collected"] == 0.0
    assert summary["total_platform_fee"] == 75.01


async def test_agent_billing_has_only_its_own_row(client, payments, agent):
    response = await client.get(
        f"{API}/billing", params=PERIOD, headers=auth_headers(agent)
    )

    summary = response.json()["data"]
    assert [row["agent"]["id"] for row in summary["rows"]] == [agent.id]


async def test_billing_rejects_inverted_range(client, admin):
    response = await client.get(
        f"{API}/billing",
        params={"start": "2026-04-01", "end": "2026-03-01"},
        headers=auth_headers(admin),
    )

    assert response.status_code == 400
    assert response.json()["message"] == "Start date must not be after end date"


async def test_billing_defaults_to_current_month(client, admin):
    response = await client.get(f"{API}/billing", headers=auth_headers(admin))

    summary = response.json()["data"]
    assert summary["start"].endswith("-01")
    assert summary["rows"] == []


async def test_employee_cannot_view_billing(client, employee):
    response = await client.get(
        f"{API}/billing", params=PERIOD, headers=auth_headers(employee)
    )

    assert response.status_code == 403


async def test_agent_hierarchy_rollup(client, payments, admin, agent, employee):
    response = await client.get(f"{API}/agents", headers=auth_headers(admin))

    assert response.status_code == 200
    hierarchy = response.json()["data"]
    (entry,) = [e for e in hierarchy["agents"] if e["agent"]["id"] == agent.id]
    assert entry["stats"]["total_employees"] == 1
    assert entry["stats"]["total_properties"] == 1
    assert entry["stats"]["total_tenants"] == 1
    assert entry["stats"]["total_payments"] == 3
    assert entry["stats"]["total_revenue"] == 2400.10
    assert entry["employees"][0]["employee"]["id"] == employee.id
    assert entry["employees"][0]["tenants_created"] == 1
    assert entry["employees"][0]["payments_recorded"] == 2
    assert hierarchy["summary"]["total_agents"] == 1


async def test_agent_hierarchy_is_admin_only(client, agent):
    response = await client.get(f"{API}/agents", headers=auth_headers(agent))

    assert response.status_code == 403


async def test_agent_details_for_self(client, tenancy, agent, employee):
    response = await client.get(f"{API}/agent/{agent.id}", headers=auth_headers(agent))

    assert response.status_code == 200
    details = response.json()["data"]
    assert [e["id"] for e in details["employees"]] == [employee.id]
    assert details["stats"]["total_tenants"] == 1
    assert details["stats"]["occupancy_rate"] == 100.0


async def test_agent_details_of_another_agent_is_forbidden(client, agent, other_agent):
    response = await client.get(
        f"{API}/agent/{agent.id}", headers=auth_headers(other_agent)
    )

    assert response.status_code == 403


async def test_agent_details_for_unknown_agent(client, admin, seeker):
    response = await client.get(f"{API}/agent/{seeker.id}", headers=auth_headers(admin))

    assert response.status_code == 404


async def test_employee_stats(client, payments, agent, employee):
    response = await client.get(
        f"{API}/employee/{employee.id}", headers=auth_headers(agent)
    )

    stats = response.json()["data"]
    assert stats["tenants_created"] == 1
    assert stats["payments_recorded"] == 2
    assert stats["total_payments_amount"] == 1500.10


async def test_employee_stats_outside_company(client, make_user, other_agent, employee):
    response = await client.get(
        f"{API}/employee/{employee.id}", headers=auth_headers(other_agent)
    )

    assert response.status_code == 403


async def test_landlord_billing(client, make_user, admin):
    landlord = await make_user(UserRole.LANDLORD, created_by=admin)

    response = await client.get(
        f"{API}/billing", params=PERIOD, headers=auth_headers(landlord)
    )

    assert response.status_code == 200
    assert response.json()["data"]["rows"][0]["agent"]["role"] == "landlord"


async def test_counts_follow_the_company_after_reassignment(
    client, tenancy, admin, agent, other_agent
):
    await client.patch(
        f"/api/properties/{tenancy['property_id']}",
        json={"agent_id": other_agent.id},
        headers=auth_headers(admin),
    )

    response = await client.get(
        f"{API}/billing", params=PERIOD, headers=auth_headers(admin)
    )

    rows = {row["agent"]["id"]: row for row in response.json()["data"]["rows"]}
    # Entered by the agent's employee, now owned by another agent
    assert rows[agent.id]["properties"] == 1
    assert rows[agent.id]["tenants"] == 1
    assert rows[other_agent.id]["properties"] == 1
