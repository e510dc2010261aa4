import pytest


@pytest.mark.asyncio
async def test_create_applies_defaults(client, auth_headers):
    response = await client.post("/api/services", json={"name": "Backup job"}, headers=auth_headers)
    assert response.status_code == 201
    body = response.json()
    assert body["message"] == "Service created successfully"
    service = body["service"]
    assert service["type"] == "general"
    assert service["status"] == "active"
    assert service["priority"] == "medium"
    assert service["config"] == {}
    assert service["metadata"] == {}
    assert service["tags"] == []
    assert service["id"]


@pytest.mark.asyncio
async def test_create_requires_name(client, auth_headers):
    response = await client.post("/api/services", json={"description": "x"}, headers=auth_headers)
    assert response.status_code == 400
    assert response.json()["error"] == "Validation failed"


@pytest.mark.asyncio
async def test_create_rejects_unknown_status(client, auth_headers):
    response = await client.post(
        "/api/services", json={"name": "x", "status": "sleeping"}, headers=auth_headers
    )
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_get_is_stable(client, auth_headers, create_service):
    created = await create_service(auth_headers, config={"url": "https://example.com"})

    first = await client.get(f"/api/services/{created['id']}", headers=auth_headers)
    second = await client.get(f"/api/services/{created['id']}", headers=auth_headers)
    assert first.status_code == 200
    assert first.json()["id"] == second.json()["id"] == created["id"]
    assert first.json()["created_at"] == second.json()["created_at"]
    assert first.json()["config"] == {"url": "https://example.com"}


@pytest.mark.asyncio
async def test_list_is_newest_first(client, auth_headers, create_service):
    await create_service(auth_headers, name="first")
    await create_service(auth_headers, name="second")

    response = await client.get("/api/services", headers=auth_headers)
    assert [s["name"] for s in response.json()] == ["second", "first"]


@pytest.mark.asyncio
async def test_partial_update_keeps_other_fields(client, auth_headers, create_service):
    created = await create_service(
        auth_headers, description="primary", priority="high", tags=["prod"]
    )

    response = await client.put(
        f"/api/services/{created['id']}", json={"status": "error"}, headers=auth_headers
    )
    assert response.status_code == 200
    updated = response.json()["service"]
    assert updated["status"] == "error"
    assert updated["description"] == "primary"
    assert updated["priority"] == "high"
    assert updated["tags"] == ["prod"]
    assert updated["name"] == created["name"]


@pytest.mark.asyncio
async def test_description_can_be_cleared(client, auth_headers, create_service):
    created = await create_service(auth_headers, description="temp")
    response = await client.put(
        f"/api/services/{created['id']}", json={"description": None}, headers=auth_headers
    )
    assert response.json()["service"]["description"] is None


@pytest.mark.asyncio
async def test_delete(client, auth_headers, create_service):
    created = await create_service(auth_headers)
    response = await client.delete(f"/api/services/{created['id']}", headers=auth_headers)
    assert response.status_code == 200
    assert response.json() == {"message": "Service deleted successfully"}

    response = await client.get(f"/api/services/{created['id']}", headers=auth_headers)
    assert response.status_code == 404
    assert response.json() == {"error": "Service not found"}


@pytest.mark.asyncio
async def test_other_user_cannot_touch_service(client, auth_headers, other_headers, create_service):
    created = await create_service(auth_headers)
    url = f"/api/services/{created['id']}"

    assert (await client.get(url, headers=other_headers)).status_code == 404
    assert (await client.put(url, json={"name": "stolen"}, headers=other_headers)).status_code == 404
    assert (await client.delete(url, headers=other_headers)).status_code == 404
    assert (await client.get(f"{url}/logs", headers=other_headers)).status_code == 404
    assert (await client.get("/api/services", headers=other_headers)).json() == []

    response = await client.get(url, headers=auth_headers)
    assert response.json()["name"] == created["name"]


@pytest.mark.asyncio
async def test_search_without_criteria_returns_everything(client, auth_headers, create_service):
    await create_service(auth_headers, name="one")
    await create_service(auth_headers, name="two")

    listed = await client.get("/api/services", headers=auth_headers)
    searched = await client.get("/api/services/search", headers=auth_headers)
    assert searched.status_code == 200
    assert searched.json() == listed.json()


@pytest.mark.asyncio
async def test_search_filters(client, auth_headers, create_service):
    await create_service(auth_headers, name="Web frontend", type="http", tags=["prod", "web"])
    await create_service(auth_headers, name="Nightly backup", description="Runs the WEB export", type="script")
    await create_service(auth_headers, name="Queue worker", type="process", status="inactive", tags=["prod"])

    response = await client.get("/api/services/search", params={"q": "web"}, headers=auth_headers)
    assert sorted(s["name"] for s in response.json()) == ["Nightly backup", "Web frontend"]

    response = await client.get("/api/services/search", params={"type": "process"}, headers=auth_headers)
    assert [s["name"] for s in response.json()] == ["Queue worker"]

    response = await client.get("/api/services/search", params={"tags": "prod,web"}, headers=auth_headers)
    assert [s["name"] for s in response.json()] == ["Web frontend"]

    response = await client.get(
        "/api/services/search", params={"tags": "prod", "status": "inactive"}, headers=auth_headers
    )
    assert [s["name"] for s in response.json()] == ["Queue worker"]


@pytest.mark.asyncio
async def test_stats_counts_real_breakdowns(client, auth_headers, other_headers, create_service):
    await create_service(auth_headers, type="http", priority="high")
    await create_service(auth_headers, type="http", status="error", priority="low")
    await create_service(auth_headers, type="script", status="completed")
    await create_service(other_headers, type="tcp")

    response = await client.get("/api/services/stats", headers=auth_headers)
    assert response.status_code == 200
    assert response.json() == {
        "total": 3,
        "active": 1,
        "inactive": 0,
        "completed": 1,
        "error": 1,
        "high_priority": 1,
        "medium_priority": 1,
        "low_priority": 1,
        "by_type": {"http": 2, "script": 1},
    }


@pytest.mark.asyncio
async def test_monitoring_logs_window(client, auth_headers, create_service):
    service = await create_service(auth_headers)
    url = f"/api/services/{service['id']}/logs"

    for response_time in (10, 20, 30, 40):
        response = await client.post(
            url, json={"status": "success", "response_time": response_time}, headers=auth_headers
        )
        assert response.status_code == 201
        assert response.json()["log"]["service_id"] == service["id"]

    response = await client.get(url, headers=auth_headers)
    assert [log["response_time"] for log in response.json()] == [40, 30, 20, 10]

    response = await client.get(url, params={"limit": 2, "offset": 1}, headers=auth_headers)
    assert [log["response_time"] for log in response.json()] == [30, 20]


@pytest.mark.asyncio
async def test_monitoring_log_rejects_bad_status(client, auth_headers, create_service):
    service = await create_service(auth_headers)
    response = await client.post(
        f"/api/services/{service['id']}/logs", json={"status": "ok"}, headers=auth_headers
    )
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_deleting_service_removes_logs_and_notifications(client, auth_headers, create_service):
    service = await create_service(auth_headers)
    await client.post(f"/api/services/{service['id']}/logs", json={"status": "failed"}, headers=auth_headers)
    await client.post(
        "/api/notifications",
        json={"service_id": service["id"], "title": "t", "message": "m"},
        headers=auth_headers,
    )

    await client.delete(f"/api/services/{service['id']}", headers=auth_headers)

    response = await client.get("/api/notifications", headers=auth_headers)
    assert response.json() == []
