"""Tests for the WebSocket connection registry."""
import json

import pytest
from conftest import FakeWebSocket
from services.websocket_manager import dataset_channel, encode_event


def test_encode_event_envelope():
    assert json.loads(encode_event("data:new", {"value": 1})) == {"event": "data:new", "data": {"value": 1}}


@pytest.mark.asyncio
async def test_broadcast_reaches_connected_only(manager):
    connected, gone = FakeWebSocket(), FakeWebSocket()
    manager.connect(connected)
    manager.connect(gone)
    manager.disconnect(gone)

    delivered = await manager.broadcast_new_point({"datasetId": "A"})

    assert delivered == 1
    assert len(connected.sent) == 1
    assert gone.sent == []


@pytest.mark.asyncio
async def test_broadcast_ignores_subscriptions(manager):
    subscriber, bystander = FakeWebSocket(), FakeWebSocket()
    manager.connect(subscriber)
    manager.connect(bystander)
    manager.subscribe(subscriber, dataset_channel("B"))

    await manager.broadcast_new_point({"datasetId": "A"})

    assert len(subscriber.sent) == 1
    assert len(bystander.sent) == 1


@pytest.mark.asyncio
async def test_failed_send_drops_connection(manager):
    healthy, broken = FakeWebSocket(), FakeWebSocket(fail=True)
    manager.connect(healthy)
    manager.connect(broken)
    manager.subscribe(broken, dataset_channel("A"))

    delivered = await manager.broadcast("data:new", {})

    assert delivered == 1
    assert manager.get_connection_count() == 1
    assert manager.channel_members(dataset_channel("A")) == set()


def test_subscriptions_accumulate(manager):
    ws = FakeWebSocket()
    manager.connect(ws)

    manager.subscribe(ws, dataset_channel("A"))
    manager.subscribe(ws, dataset_channel("B"))

    assert ws in manager.channel_members(dataset_channel("A"))
    assert ws in manager.channel_members(dataset_channel("B"))


def test_disconnect_releases_channels(manager):
    leaving, staying = FakeWebSocket(), FakeWebSocket()
    manager.connect(leaving)
    manager.connect(staying)
    manager.subscribe(leaving, dataset_channel("A"))
    manager.subscribe(staying, dataset_channel("A"))
    manager.subscribe(leaving, dataset_channel("B"))

    manager.disconnect(leaving)

    assert manager.channel_members(dataset_channel("A")) == {staying}
    assert dataset_channel("B") not in manager.channels
    assert manager.get_connection_count() == 1


def test_subscribe_requires_registered_connection(manager):
    manager.subscribe(FakeWebSocket(), dataset_channel("A"))

    assert manager.channels == {}


def test_connection_ids_are_unique(manager):
    ids = {manager.connect(FakeWebSocket()) for _ in range(3)}

    assert len(ids) == 3
