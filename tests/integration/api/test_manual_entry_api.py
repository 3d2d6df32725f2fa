import pytest
from httpx import AsyncClient
from uuid import UUID

from sqlmodel import select

from src.domain.entities import AccessLogEntry


@pytest.mark.asyncio
async def test_guard_records_manual_entry(client: AsyncClient, db_session, community, test_data):
    """Guard lets a delivery through by hand; the ledger has no invitation"""
    payload = test_data.get_copy("manual_entry")

    response = await client.post(
        "/access/manual-entry", json=payload, headers=community["headers"]["guard1"]
    )

    assert response.status_code == 201
    data = response.json()
    assert data["unit_id"] == str(community["units"]["a101"].id)
    assert data["accessed_at"].endswith("Z")

    entry = (
        await db_session.exec(select(AccessLogEntry).where(AccessLogEntry.id == UUID(data["log_id"])))
    ).one()
    assert entry.invitation_id is None
    assert entry.method.value == "manual_entry"
    assert entry.visitor_name == "Delivery driver"
    assert entry.vehicle_plate == "XYZ-987"
    assert entry.authorized_by == community["members"]["guard1"].user_id


@pytest.mark.asyncio
async def test_unit_reference_is_case_insensitive(client: AsyncClient, community, test_data):
    payload = test_data.get_copy("manual_entry", unit_reference="c-202")

    response = await client.post(
        "/access/manual-entry", json=payload, headers=community["headers"]["guard1"]
    )

    assert response.status_code == 201
    assert response.json()["unit_id"] == str(community["units"]["c202"].id)


@pytest.mark.asyncio
@pytest.mark.parametrize("reference", ["101", "Z-999", "303"])
async def test_unresolved_unit_reference(client: AsyncClient, community, test_data, reference):
    """Unknown units and numbers shared by two buildings are not resolved"""
    payload = test_data.get_copy("manual_entry", unit_reference=reference)

    response = await client.post(
        "/access/manual-entry", json=payload, headers=community["headers"]["guard1"]
    )

    assert response.status_code == 404
    assert response.json()["error"]["code"] == "UNIT_NOT_FOUND"


@pytest.mark.asyncio
async def test_blank_visitor_name(client: AsyncClient, community, test_data):
    payload = test_data.get_copy("manual_entry", visitor_name="  ")

    response = await client.post(
        "/access/manual-entry", json=payload, headers=community["headers"]["guard1"]
    )

    assert response.status_code == 422
    assert response.json()["error"]["code"] == "VISITOR_NAME_REQUIRED"


@pytest.mark.asyncio
async def test_resident_cannot_record_manual_entry(client: AsyncClient, community, test_data):
    response = await client.post(
        "/access/manual-entry",
        json=test_data.get_copy("manual_entry"),
        headers=community["headers"]["resident"],
    )

    assert response.status_code == 403
