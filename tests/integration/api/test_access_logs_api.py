import pytest
from httpx import AsyncClient


async def _manual_entry(client: AsyncClient, headers: dict, test_data, name: str, unit_reference: str):
    payload = test_data.get_copy("manual_entry", visitor_name=name, unit_reference=unit_reference)
    response = await client.post("/access/manual-entry", json=payload, headers=headers)
    assert response.status_code == 201
    return response.json()


@pytest.mark.asyncio
async def test_access_logs_newest_first_with_cursor(client: AsyncClient, community, test_data):
    headers = community["headers"]["guard1"]
    for name in ("First", "Second", "Third"):
        await _manual_entry(client, headers, test_data, name, "A-101")

    response = await client.get("/access-logs", params={"limit": 2}, headers=headers)

    assert response.status_code == 200
    page = response.json()
    assert [e["visitor_name"] for e in page["entries"]] == ["Third", "Second"]
    assert page["next_cursor"] is not None

    response = await client.get(
        "/access-logs",
        params={"limit": 2, "cursor": page["next_cursor"]},
        headers=headers,
    )

    page = response.json()
    assert [e["visitor_name"] for e in page["entries"]] == ["First"]
    assert page["next_cursor"] is None


@pytest.mark.asyncio
async def test_resident_sees_only_own_unit(client: AsyncClient, community, test_data):
    guard = community["headers"]["guard1"]
    await _manual_entry(client, guard, test_data, "For A", "A-101")
    await _manual_entry(client, guard, test_data, "For C", "C-202")

    response = await client.get("/access-logs", headers=community["headers"]["resident"])

    assert response.status_code == 200
    assert [e["visitor_name"] for e in response.json()["entries"]] == ["For A"]


@pytest.mark.asyncio
async def test_filter_by_unit(client: AsyncClient, community, test_data):
    guard = community["headers"]["guard1"]
    await _manual_entry(client, guard, test_data, "For A", "A-101")
    await _manual_entry(client, guard, test_data, "For C", "C-202")

    response = await client.get(
        "/access-logs",
        params={"unit_id": str(community["units"]["c202"].id)},
        headers=guard,
    )

    assert [e["visitor_name"] for e in response.json()["entries"]] == ["For C"]


@pytest.mark.asyncio
async def test_limit_bounds(client: AsyncClient, community):
    response = await client.get(
        "/access-logs", params={"limit": 0}, headers=community["headers"]["guard1"]
    )
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_invalid_cursor_is_bad_request(client: AsyncClient, community):
    response = await client.get(
        "/access-logs",
        params={"cursor": "not-a-cursor"},
        headers=community["headers"]["guard1"],
    )

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "INVALID_CURSOR"
