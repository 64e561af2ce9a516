"""Units of multi-unit properties and their occupancy."""

from rentora_backend.modules.auth.models import UserRole

from helpers import auth_headers, lease_window, property_payload, unit_payload

API = "/api/properties"


async def create_block(client, agent, *numbers) -> dict:
    payload = property_payload(
        title="Riverside apartment block",
        rent=None,
        units=[unit_payload(n) for n in numbers],
    )
    response = await client.post(API, json=payload, headers=auth_headers(agent))
    assert response.status_code == 201, response.text
    return response.json()["data"]


def occupy_body(tenant_id: int) -> dict:
    start, end = lease_window()
    return {
        "tenant_id": tenant_id,
        "lease_start": start.isoformat(),
        "lease_end": end.isoformat(),
    }


async def test_initial_units_switch_on_multi_unit_mode(client, agent):
    block = await create_block(client, agent, "A1", "A2")

    assert block["has_units"] is True
    assert [u["unit_number"] for u in block["units"]] == ["A1", "A2"]
    assert block["max_occupancy"] == 2
    assert block["current_occupancy"] == 0
    assert block["availability"] == "available"


async def test_add_units_rejects_duplicate_numbers(client, agent):
    block = await create_block(client, agent, "A1")

    response = await client.post(
        f"{API}/{block['id']}/units",
        json={"units": [unit_payload("A1")]},
        headers=auth_headers(agent),
    )

    assert response.status_code == 400
    assert "already exists" in response.json()["message"]


async def test_add_units_to_single_property(client, agent):
    listing = (
        await client.post(API, json=property_payload(), headers=auth_headers(agent))
    ).json()["data"]

    response = await client.post(
        f"{API}/{listing['id']}/units",
        json={"units": [unit_payload("1"), unit_payload("2", rent="950.00")]},
        headers=auth_headers(agent),
    )

    assert response.status_code == 201
    data = response.json()["data"]
    assert data["has_units"] is True
    assert len(data["units"]) == 2


async def test_land_cannot_have_units(client, agent):
    payload = property_payload(
        title="Two acre farming plot", property_type="plot", rent=None, price="50000"
    )
    listing = (
        await client.post(API, json=payload, headers=auth_headers(agent))
    ).json()["data"]

    response = await client.post(
        f"{API}/{listing['id']}/units",
        json={"units": [unit_payload("1")]},
        headers=auth_headers(agent),
    )

    assert response.status_code == 400


async def test_occupying_an_occupied_unit_conflicts_then_vacate_resets(
    client, agent, seeker, make_user
):
    block = await create_block(client, agent, "A1", "A2")
    unit_id = block["units"][0]["id"]
    other = await make_user(UserRole.TENANT)

    first = await client.patch(
        f"{API}/{block['id']}/units/{unit_id}/occupy",
        json=occupy_body(seeker.id),
        headers=auth_headers(agent),
    )
    assert first.status_code == 200
    occupied = first.json()["data"]["units"][0]
    assert occupied["availability"] == "occupied"
    assert occupied["tenant_id"] == seeker.id

    second = await client.patch(
        f"{API}/{block['id']}/units/{unit_id}/occupy",
        json=occupy_body(other.id),
        headers=auth_headers(agent),
    )
    assert second.status_code == 409
    assert second.json()["message"] == "Unit is not available"

    vacated = await client.patch(
        f"{API}/{block['id']}/units/{unit_id}/vacate", headers=auth_headers(agent)
    )
    assert vacated.status_code == 200
    unit = vacated.json()["data"]["units"][0]
    assert unit["availability"] == "available"
    assert unit["tenant_id"] is None
    assert unit["lease_start"] is None
    assert unit["lease_end"] is None


async def test_occupy_then_vacate_round_trip(client, agent, seeker):
    block = await create_block(client, agent, "B1")
    unit_id = block["units"][0]["id"]
    before = block["units"][0]

    await client.patch(
        f"{API}/{block['id']}/units/{unit_id}/occupy",
        json=occupy_body(seeker.id),
        headers=auth_headers(agent),
    )
    response = await client.patch(
        f"{API}/{block['id']}/units/{unit_id}/vacate", headers=auth_headers(agent)
    )

    after = response.json()["data"]["units"][0]
    assert after == before


async def test_vacate_is_idempotent(client, agent):
    block = await create_block(client, agent, "C1")
    unit_id = block["units"][0]["id"]

    for _ in range(2):
        response = await client.patch(
            f"{API}/{block['id']}/units/{unit_id}/vacate", headers=auth_headers(agent)
        )
        assert response.status_code == 200
        assert response.json()["data"]["units"][0]["availability"] == "available"


async def test_full_block_becomes_occupied(client, agent, seeker):
    block = await create_block(client, agent, "D1")
    unit_id = block["units"][0]["id"]

    response = await client.patch(
        f"{API}/{block['id']}/units/{unit_id}/occupy",
        json=occupy_body(seeker.id),
        headers=auth_headers(agent),
    )

    data = response.json()["data"]
    assert data["availability"] == "occupied"
    assert data["current_occupancy"] == 1


async def test_units_keep_occupied_iff_tenant(client, agent, seeker):
    block = await create_block(client, agent, "E1", "E2", "E3")
    await client.patch(
        f"{API}/{block['id']}/units/{block['units'][1]['id']}/occupy",
        json=occupy_body(seeker.id),
        headers=auth_headers(agent),
    )
    await client.patch(
        f"{API}/{block['id']}/units/{block['units'][2]['id']}",
        json={"availability": "maintenance"},
        headers=auth_headers(agent),
    )

    response = await client.get(f"{API}/{block['id']}", headers=auth_headers(agent))

    for unit in response.json()["data"]["units"]:
        assert (unit["availability"] == "occupied") == (unit["tenant_id"] is not None)


async def test_update_unit_cannot_occupy_directly(client, agent):
    block = await create_block(client, agent, "F1")

    response = await client.patch(
        f"{API}/{block['id']}/units/{block['units'][0]['id']}",
        json={"availability": "occupied"},
        headers=auth_headers(agent),
    )

    assert response.status_code == 400


async def test_occupied_unit_availability_is_locked(client, agent, seeker):
    block = await create_block(client, agent, "G1")
    unit_id = block["units"][0]["id"]
    await client.patch(
        f"{API}/{block['id']}/units/{unit_id}/occupy",
        json=occupy_body(seeker.id),
        headers=auth_headers(agent),
    )

    response = await client.patch(
        f"{API}/{block['id']}/units/{unit_id}",
        json={"availability": "maintenance"},
        headers=auth_headers(agent),
    )

    assert response.status_code == 409


async def test_deleting_an_occupied_unit_is_a_conflict(client, agent, seeker):
    block = await create_block(client, agent, "H1", "H2")
    unit_id = block["units"][0]["id"]
    await client.patch(
        f"{API}/{block['id']}/units/{unit_id}/occupy",
        json=occupy_body(seeker.id),
        headers=auth_headers(agent),
    )

    response = await client.delete(
        f"{API}/{block['id']}/units/{unit_id}", headers=auth_headers(agent)
    )

    assert response.status_code == 409
    assert response.json()["message"] == "Cannot delete an occupied unit"


async def test_delete_vacant_unit(client, agent):
    block = await create_block(client, agent, "J1", "J2")

    response = await client.delete(
        f"{API}/{block['id']}/units/{block['units'][1]['id']}",
        headers=auth_headers(agent),
    )

    assert response.status_code == 200
    data = response.json()["data"]
    assert [u["unit_number"] for u in data["units"]] == ["J1"]
    assert data["max_occupancy"] == 1


async def test_occupy_rejects_empty_lease_window(client, agent, seeker):
    block = await create_block(client, agent, "K1")
    start, _ = lease_window()

    response = await client.patch(
        f"{API}/{block['id']}/units/{block['units'][0]['id']}/occupy",
        json={
            "tenant_id": seeker.id,
            "lease_start": start.isoformat(),
            "lease_end": start.isoformat(),
        },
        headers=auth_headers(agent),
    )

    assert response.status_code == 400


async def test_outsider_cannot_manage_units(client, agent, other_agent, seeker):
    block = await create_block(client, agent, "L1")

    response = await client.patch(
        f"{API}/{block['id']}/units/{block['units'][0]['id']}/occupy",
        json=occupy_body(seeker.id),
        headers=auth_headers(other_agent),
    )

    assert response.status_code == 403


async def test_unit_stats(client, agent, seeker):
    block = await create_block(client, agent, "M1", "M2")
    await client.patch(
        f"{API}/{block['id']}/units/{block['units'][0]['id']}/occupy",
        json=occupy_body(seeker.id),
        headers=auth_headers(agent),
    )

    response = await client.get(
        f"{API}/{block['id']}/units/stats", headers=auth_headers(agent)
    )

    stats = response.json()["data"]
    assert stats["total_units"] == 2
    assert stats["occupied"] == 1
    assert stats["available"] == 1
    assert stats["occupancy_rate"] == 50.0
    assert stats["monthly_rent_collected"] == 800.0
    assert stats["potential_monthly_rent"] == 1600.0


async def test_occupied_plus_maintenance_block_stays_available(client, agent, seeker):
    block = await create_block(client, agent, "N1", "N2")
    await client.patch(
        f"{API}/{block['id']}/units/{block['units'][0]['id']}/occupy",
        json=occupy_body(seeker.id),
        headers=auth_headers(agent),
    )

    response = await client.patch(
        f"{API}/{block['id']}/units/{block['units'][1]['id']}",
        json={"availability": "maintenance"},
        headers=auth_headers(agent),
    )

    data = response.json()["data"]
    assert data["availability"] == "available"
    assert data["current_occupancy"] == 1


async def test_block_entirely_in_maintenance(client, agent):
    block = await create_block(client, agent, "P1")

    response = await client.patch(
        f"{API}/{block['id']}/units/{block['units'][0]['id']}",
        json={"availability": "maintenance"},
        headers=auth_headers(agent),
    )

    assert response.json()["data"]["availability"] == "maintenance"
