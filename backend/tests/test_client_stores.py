import httpx
import pytest
import pytest_asyncio
import respx

from service_manager.client import ApiError, NotificationsStore, ServiceManagerAPI, ServicesStore
from service_manager.main import app


@pytest_asyncio.fixture
async def make_api(client):
    # client fixture installs the database override
    apis = []

    def _make(token):
        api = ServiceManagerAPI("http://test/api", token=token, transport=httpx.ASGITransport(app=app))
        apis.append(api)
        return api

    yield _make

    for api in apis:
        await api.aclose()


async def _token(register, **kwargs):
    headers, _ = await register(**kwargs)
    return headers["Authorization"].split(" ", 1)[1]


@pytest.mark.asyncio
async def test_missing_token():
    async with ServiceManagerAPI("http://test/api", transport=httpx.ASGITransport(app=app)) as api:
        store = ServicesStore(api)
        with pytest.raises(ApiError) as exc_info:
            await store.fetch_services()
    assert exc_info.value.status_code is None
    assert store.error == "No authentication token found"
    assert store.loading is False


@pytest.mark.asyncio
async def test_services_store_tracks_server_stats(make_api, register):
    api = make_api(await _token(register))
    store = ServicesStore(api)

    await store.fetch_services()
    assert store.services == []
    assert store.stats["total"] == 0

    web = await store.create_service({"name": "Web", "type": "http", "tags": ["prod"]})
    await store.create_service({"name": "Cron", "type": "script", "status": "inactive"})
    assert store.total_services == 2
    assert store.stats["total"] == 2
    assert store.stats["inactive"] == 1
    assert store.services_by_type == {"http": 1, "script": 1}

    await store.update_service(web["id"], {"status": "error"})
    assert store.stats["error"] == 1
    assert store.stats["active"] == 0
    assert store.services_by_status == {"active": 0, "inactive": 1, "completed": 0, "error": 1}
    assert store.active_services == 0

    await store.delete_service(web["id"])
    assert [s["name"] for s in store.services] == ["Cron"]
    assert store.stats["total"] == 1



@pytest.mark.asyncio
async def test_services_store_search_matches_server(make_api, register):
    api = make_api(await _token(register))
    store = ServicesStore(api)
    await store.create_service({"name": "Web", "tags": ["prod", "web"]})
    await store.create_service({"name": "Worker", "description": "web jobs", "tags": ["prod"]})

    assert len(store.search_services()) == 2
    assert {s["name"] for s in store.search_services("WEB")} == {"Web", "Worker"}
    assert [s["name"] for s in store.search_services(tags=["prod", "web"])] == ["Web"]

    server = await api.get("/services/search", params={"tags": "prod,web"})
    assert [s["id"] for s in server] == [s["id"] for s in store.search_services(tags=["prod", "web"])]

    # surrounding whitespace is part of the query on both sides
    server = await api.get("/services/search", params={"q": " web"})
    assert server == []
    assert store.search_services(" web") == []



@pytest.mark.asyncio
async def test_services_store_error_is_recorded(make_api, register):
    api = make_api(await _token(register))
    store = ServicesStore(api)

    with pytest.raises(ApiError) as exc_info:
        await store.update_service("missing", {"name": "x"})
    assert exc_info.value.status_code == 404
    assert store.error == "Service not found"
    assert store.loading is False

    store.clear_error()
    assert store.error is None


@pytest.mark.asyncio
async def test_add_monitoring_log(make_api, register):
    api = make_api(await _token(register))
    store = ServicesStore(api)
    service = await store.create_service({"name": "Web"})
    log = await store.add_monitoring_log(service["id"], {"status": "timeout"})
    assert log["status"] == "timeout"


@pytest.mark.asyncio
async def test_notifications_store(make_api, register):
    api = make_api(await _token(register))
    services = ServicesStore(api)
    store = NotificationsStore(api)
    web = await services.create_service({"name": "Web"})

    created = await store.create_notification(
        {"service_id": web["id"], "title": "Disk", "message": "Disk almost full", "priority": "critical"}
    )
    assert store.stats["total"] == 1
    assert store.stats["pending"] == 1
    assert [n["id"] for n in store.high_priority_notifications] == [created["id"]]

    await store.update_notification(created["id"], {"status": "unread"})
    assert store.has_unread
    assert len(store.unread_notifications) == 1

    updated = await store.mark_all_as_read()
    assert updated == 1
    assert store.stats["unread"] == 0
    assert store.stats["read"] == 1
    assert store.notifications[0]["status"] == "read"
    assert not store.has_unread

    assert store.filter_notifications(search="almost") == store.notifications
    assert store.filter_notifications(priority="low") == []
    assert store.notifications_by_service(web["id"]) == store.notifications

    await store.delete_notification(created["id"])
    assert store.notifications == []
    assert store.stats["total"] == 0



@pytest.mark.asyncio
async def test_notifications_store_send_failure_is_data(make_api, register):
    api = make_api(await _token(register))
    services = ServicesStore(api)
    store = NotificationsStore(api)
    web = await services.create_service({"name": "Web"})

    with respx.mock(assert_all_called=False) as relay:
        relay.post("https://ntfy.sh/test-topic").mock(side_effect=httpx.ConnectError("offline"))
        notification = await store.send_notification(
            {"service_id": web["id"], "title": "t", "message": "m"}
        )

    assert notification["status"] == "failed"
    assert store.error is None
    assert store.has_failed
    assert store.failed_notifications == [notification]



@pytest.mark.asyncio
async def test_notifications_store_ntfy_config(make_api, register):
    api = make_api(await _token(register))
    store = NotificationsStore(api)

    config = await store.fetch_ntfy_config()
    assert config["topic"] == "test-topic"

    config = await store.update_ntfy_config({"topic": "mine", "rateLimit": 10})
    assert store.ntfy_config["topic"] == "mine"
    assert config["rateLimit"] == 10



@pytest.mark.asyncio
async def test_mark_as_read(make_api, register):
    api = make_api(await _token(register))
    store = NotificationsStore(api)
    web = await ServicesStore(api).create_service({"name": "Web"})
    created = await store.create_notification({"service_id": web["id"], "title": "t", "message": "m"})

    read = await store.mark_as_read(created["id"])
    assert read["status"] == "read"
    assert store.notifications[0]["status"] == "read"
    assert store.stats["read"] == 1

