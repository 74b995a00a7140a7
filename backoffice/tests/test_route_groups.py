"""
Integration tests for route groups and the routes inside them.
"""

import pytest

from conftest import ROUTE_GROUPS_URL


def route_payload(route_id="r1", **overrides):
    payload = {
        "id": route_id,
        "name": f"Route {route_id}",
        "code": route_id.upper(),
        "truck": {"id": "truck-1", "plate": "AB-1234"},
        "truckType": {"id": "tt-1", "name": "Van"},
        "stops": [
            {"sequence": 2, "address": {"id": "addr-2", "street": "Calle 5"}},
            {"sequence": 1, "address": {"id": "addr-1", "street": "Av. Principal 100"}, "notes": "Back door"},
        ],
    }
    payload.update(overrides)
    return payload


@pytest.mark.asyncio
async def test_route_group_lifecycle(client):
    group = {"id": "rg1", "name": "North"}

    created = await client.post("/api/route-groups", json=group)
    duplicate = await client.post("/api/route-groups", json=group)
    fetched = await client.get("/api/route-groups/rg1")
    deleted = await client.delete("/api/route-groups/rg1")
    gone = await client.get("/api/route-groups/rg1")

    assert created.status_code == 201
    assert duplicate.status_code == 409
    assert fetched.status_code == 200
    assert fetched.json()["source"] == "local"
    assert fetched.json()["data"]["name"] == "North"
    assert deleted.status_code == 200
    assert gone.status_code == 404


@pytest.mark.asyncio
async def test_create_group_with_nested_routes(client, drivers):
    payload = {
        "id": "rg1",
        "name": "North",
        "businessSegmentId": "seg-1",
        "routes": [route_payload("r1", driverId=1), route_payload("r2")],
    }

    response = await client.post("/api/route-groups", json=payload)

    assert response.status_code == 201
    data = response.json()["data"]
    assert data["businessSegmentId"] == "seg-1"
    assert [r["id"] for r in data["routes"]] == ["r1", "r2"]
    first = data["routes"][0]
    assert first["driver"] == {"id": 1, "name": "Carlos Mendoza"}
    assert first["truck"]["plate"] == "AB-1234"
    assert [s["sequence"] for s in first["stops"]] == [1, 2]
    assert first["stops"][0]["notes"] == "Back door"


@pytest.mark.asyncio
async def test_list_route_groups(client):
    await client.post("/api/route-groups", json={"id": "rg2", "name": "South"})
    await client.post("/api/route-groups", json={"id": "rg1", "name": "North"})

    response = await client.get("/api/route-groups")

    assert [g["id"] for g in response.json()["data"]] == ["rg1", "rg2"]


@pytest.mark.asyncio
async def test_update_route_group(client):
    await client.post("/api/route-groups", json={"id": "rg1", "name": "North", "description": "old"})

    response = await client.put("/api/route-groups/rg1", json={"description": "new"})
    missing = await client.put("/api/route-groups/rg9", json={"name": "X"})

    assert response.status_code == 200
    assert response.json()["data"]["description"] == "new"
    assert response.json()["data"]["name"] == "North"
    assert missing.status_code == 404


@pytest.mark.asyncio
async def test_delete_group_removes_routes(client):
    await client.post("/api/route-groups", json={"id": "rg1", "name": "North", "routes": [route_payload()]})

    await client.delete("/api/route-groups/rg1")
    response = await client.get("/api/route-groups/rg1/routes/r1")

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_route_group_from_external_service(client, upstream):
    upstream.add(f"{ROUTE_GROUPS_URL}/rg-ext", json={"id": "rg-ext", "name": "Remote"})

    response = await client.get("/api/route-groups/rg-ext")

    assert response.status_code == 200
    assert response.json()["source"] == "external"
    assert response.json()["data"]["name"] == "Remote"


@pytest.mark.asyncio
async def test_route_crud_within_group(client, drivers):
    await client.post("/api/route-groups", json={"id": "rg1", "name": "North"})

    created = await client.post("/api/route-groups/rg1/routes", json=route_payload())
    duplicate = await client.post("/api/route-groups/rg1/routes", json=route_payload())
    listed = await client.get("/api/route-groups/rg1/routes")
    fetched = await client.get("/api/route-groups/rg1/routes/r1")

    assert created.status_code == 201
    assert created.json()["data"]["routeGroupId"] == "rg1"
    assert duplicate.status_code == 409
    assert [r["id"] for r in listed.json()["data"]] == ["r1"]
    assert fetched.json()["source"] == "local"

    updated = await client.put(
        "/api/route-groups/rg1/routes/r1",
        json={"driverId": 2, "stops": [{"sequence": 1, "address": {"id": "addr-3", "street": "Plaza 9"}}]},
    )
    assert updated.status_code == 200
    data = updated.json()["data"]
    assert data["driver"]["id"] == 2
    assert [s["address"]["id"] for s in data["stops"]] == ["addr-3"]
    assert data["name"] == "Route r1"

    deleted = await client.delete("/api/route-groups/rg1/routes/r1")
    assert deleted.status_code == 200
    assert (await client.get("/api/route-groups/rg1/routes/r1")).status_code == 404


@pytest.mark.asyncio
async def test_route_requires_local_group(client):
    response = await client.post("/api/route-groups/missing/routes", json=route_payload())

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_route_with_unknown_driver(client):
    await client.post("/api/route-groups", json={"id": "rg1", "name": "North"})

    response = await client.post("/api/route-groups/rg1/routes", json=route_payload(driverId=99))

    assert response.status_code == 404
    assert "Driver" in response.json()["message"]


@pytest.mark.asyncio
async def test_route_from_external_service(client, upstream):
    upstream.add(f"{ROUTE_GROUPS_URL}/rg1/routes/r7", json={"id": "r7", "stops": []})

    response = await client.get("/api/route-groups/rg1/routes/r7")

    assert response.status_code == 200
    assert response.json()["source"] == "external"
    assert response.json()["data"] == {"id": "r7", "stops": []}
