"""
Tests for the HTTP service clients against a local aiohttp test server.
"""

import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer

from conftest import FakeTaskStore
from taskchat.app import TaskChatApp
from taskchat.core.exceptions import ClassifierException, TaskStoreException, WeatherException
from taskchat.core.models import Intent, SessionMode, Task, TaskDraft
from taskchat.services.intent_classifier import IntentClassifierClient
from taskchat.services.task_store import TaskStoreClient
from taskchat.services.weather import WeatherClient


async def start_server(routes):
    app = web.Application()
    app.add_routes(routes)
    server = TestServer(app)
    await server.start_server()
    return server


def base_url(server):
    return str(server.make_url("/"))


# -----------------------------------------------------------------------------
# Task Store
# -----------------------------------------------------------------------------
@pytest.mark.asyncio
async def test_list_tasks_sends_bearer_and_parses_dates():
    seen = {}

    async def tasks(request):
        seen["auth"] = request.headers.get("Authorization")
        return web.json_response({"tasks": [{
            "id": 7, "title": "Pay rent", "description": "Rent", "category": "Bills",
            "deadline": "2025-11-01T00:00:00.000Z", "priority": "High",
            "reminder": None, "completed": False, "points": 20,
        }]})

    server = await start_server([web.get("/Tasks", tasks)])
    client = TaskStoreClient(base_url(server))
    try:
        result = await client.list_tasks("secret")
    finally:
        await client.close()
        await server.close()

    assert seen["auth"] == "Bearer secret"
    assert result == [Task(7, "Pay rent", "Rent", "Bills", "2025-11-01", "High", None, False, 20)]


@pytest.mark.asyncio
async def test_list_tasks_accepts_bare_array():
    async def tasks(request):
        return web.json_response([{"taskId": 3, "title": "Buy milk", "deadline": "2025-02-01"}])

    server = await start_server([web.get("/Tasks", tasks)])
    client = TaskStoreClient(base_url(server))
    try:
        result = await client.list_tasks("tok")
    finally:
        await client.close()
        await server.close()

    assert [(t.id, t.title) for t in result] == [(3, "Buy milk")]


@pytest.mark.asyncio
async def test_create_update_delete_payloads():
    received = []

    async def add(request):
        body = await request.json()
        received.append(("POST", body))
        return web.json_response(dict(body, id=11, points=10))

    async def edit(request):
        received.append(("PUT", await request.json()))
        return web.json_response({"message": "updated"})

    async def delete(request):
        received.append(("DELETE", await request.json()))
        return web.Response(text="deleted")

    server = await start_server([
        web.post("/AddTask", add),
        web.put("/EditTask", edit),
        web.delete("/DeleteTask", delete),
    ])
    client = TaskStoreClient(base_url(server))
    draft = TaskDraft("Pay rent", "Rent", "Bills", "2025-02-01", "High", "2025-01-25")
    try:
        created = await client.create_task("tok", draft)
        edited = await client.update_task("tok", Task(11, "Pay rent", "Rent", "Bills", "2025-02-02", "Low"))
        await client.delete_task("tok", 11)
    finally:
        await client.close()
        await server.close()

    assert created.id == 11 and created.points == 10 and created.reminder == "2025-01-25"
    assert received[0] == ("POST", draft.to_dict())
    assert received[1][1]["id"] == 11 and received[1][1]["priority"] == "Low"
    assert edited.deadline == "2025-02-02"
    assert received[2] == ("DELETE", {"taskId": 11})


@pytest.mark.asyncio
async def test_error_status_raises_task_store_exception():
    async def tasks(request):
        return web.Response(status=401, text="invalid token")

    server = await start_server([web.get("/Tasks", tasks)])
    client = TaskStoreClient(base_url(server))
    try:
        with pytest.raises(TaskStoreException) as exc_info:
            await client.list_tasks("bad")
    finally:
        await client.close()
        await server.close()

    assert exc_info.value.status == 401
    assert "invalid token" in str(exc_info.value)


@pytest.mark.asyncio
async def test_unreachable_store_raises_task_store_exception():
    server = await start_server([])
    url = base_url(server)
    await server.close()

    client = TaskStoreClient(url, timeout=2)
    try:
        with pytest.raises(TaskStoreException):
            await client.list_tasks("tok")
    finally:
        await client.close()


# -----------------------------------------------------------------------------
# Intent Classifier
# -----------------------------------------------------------------------------
@pytest.mark.asyncio
async def test_classifier_forwards_input_and_model():
    received = {}

    async def startchat(request):
        received["body"] = await request.json()
        received["auth"] = request.headers.get("Authorization")
        return web.json_response({"response": "Sure!", "type": "Weather", "API_Key": "abc123"})

    server = await start_server([web.post("/startchat", startchat)])
    client = IntentClassifierClient(base_url(server))
    try:
        result = await client.classify("tok", "what's the weather")
    finally:
        await client.close()
        await server.close()

    assert received["body"] == {"input": "what's the weather", "model": "model.tflearn"}
    assert received["auth"] == "Bearer tok"
    assert result.response == "Sure!"
    assert result.intent is Intent.WEATHER
    assert result.api_key == "abc123"


@pytest.mark.asyncio
async def test_classifier_maps_unknown_label_to_none():
    async def startchat(request):
        return web.json_response({"response": "Hmm?", "type": "Greeting"})

    server = await start_server([web.post("/startchat", startchat)])
    client = IntentClassifierClient(base_url(server))
    try:
        result = await client.classify("tok", "hello")
    finally:
        await client.close()
        await server.close()

    assert result.intent is Intent.NONE
    assert result.api_key is None


@pytest.mark.asyncio
async def test_classifier_error_status_raises():
    async def startchat(request):
        return web.Response(status=500, text="model not loaded")

    server = await start_server([web.post("/startchat", startchat)])
    client = IntentClassifierClient(base_url(server))
    try:
        with pytest.raises(ClassifierException):
            await client.classify("tok", "hello")
    finally:
        await client.close()
        await server.close()


# -----------------------------------------------------------------------------
# Weather
# -----------------------------------------------------------------------------
@pytest.mark.asyncio
async def test_current_weather_describes_conditions():
    received = {}

    async def weather(request):
        received.update(request.query)
        return web.json_response({"weather": [{"description": "light rain"}], "main": {"temp": 12.6}, "name": "Oslo"})

    server = await start_server([web.get("/weather", weather)])
    client = WeatherClient(59.9, 10.7, base_url=str(server.make_url("/weather")))
    try:
        text = await client.current_weather("key")
    finally:
        await client.close()
        await server.close()

    assert text == "It is currently light rain in Oslo with a temperature of 13°C."
    assert received["appid"] == "key"
    assert received["units"] == "metric"


@pytest.mark.asyncio
async def test_current_weather_requires_key():
    client = WeatherClient(0.0, 0.0)
    with pytest.raises(WeatherException):
        await client.current_weather("")


@pytest.mark.asyncio
async def test_current_weather_rejects_unexpected_payload():
    async def weather(request):
        return web.json_response({"cod": 200})

    server = await start_server([web.get("/weather", weather)])
    client = WeatherClient(0.0, 0.0, base_url=str(server.make_url("/weather")))
    try:
        with pytest.raises(WeatherException):
            await client.current_weather("key")
    finally:
        await client.close()
        await server.close()


# -----------------------------------------------------------------------------
# Malformed JSON bodies
# -----------------------------------------------------------------------------
async def broken_json(request):
    return web.Response(text="{not json", content_type="application/json")


@pytest.mark.asyncio
async def test_malformed_task_store_body_raises():
    server = await start_server([web.get("/Tasks", broken_json)])
    client = TaskStoreClient(base_url(server))
    try:
        with pytest.raises(TaskStoreException):
            await client.list_tasks("tok")
    finally:
        await client.close()
        await server.close()


@pytest.mark.asyncio
async def test_malformed_classifier_body_raises():
    server = await start_server([web.post("/startchat", broken_json)])
    client = IntentClassifierClient(base_url(server))
    try:
        with pytest.raises(ClassifierException):
            await client.classify("tok", "hello")
    finally:
        await client.close()
        await server.close()


@pytest.mark.asyncio
async def test_malformed_classifier_body_is_contained_in_the_turn(clock):
    server = await start_server([web.post("/startchat", broken_json)])
    classifier = IntentClassifierClient(base_url(server))
    app = TaskChatApp({}, repository=FakeTaskStore(), classifier=classifier, sleep=clock.sleep)
    try:
        await app.handle_message("u1", "#login tok")
        replies = await app.handle_message("u1", "hello")
    finally:
        await app.close()
        await server.close()

    assert replies == ["Sorry, I can't reach my brain right now. Please try again later."]
    assert app.session_manager.get_session("u1").mode is SessionMode.IDLE


@pytest.mark.asyncio
async def test_malformed_weather_body_raises():
    server = await start_server([web.get("/weather", broken_json)])
    client = WeatherClient(0.0, 0.0, base_url=str(server.make_url("/weather")))
    try:
        with pytest.raises(WeatherException):
            await client.current_weather("key")
    finally:
        await client.close()
        await server.close()
