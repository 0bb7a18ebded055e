"""Tests for the realtime WebSocket channel."""


def test_welcome_event(client):
    with client.websocket_connect("/ws") as ws:
        message = ws.receive_json()

    assert message["event"] == "connected"
    assert message["data"]["id"]


def test_new_point_is_broadcast_to_every_client(client, sample_point):
    with client.websocket_connect("/ws") as first, client.websocket_connect("/ws") as second:
        first.receive_json()
        second.receive_json()

        stored = client.post("/api/analytics/data", json=sample_point).json()

        for ws in (first, second):
            message = ws.receive_json()
            assert message["event"] == "data:new"
            assert message["data"] == stored


def test_stream_request_for_empty_dataset(client):
    with client.websocket_connect("/ws") as ws:
        ws.receive_json()
        ws.send_json({"event": "data:stream", "data": "empty"})

        message = ws.receive_json()

    assert message == {"event": "data:stream:response", "data": []}


def test_stream_request_returns_recent_points(client):
    for value in (1, 2, 3):
        client.post("/api/analytics/data", json={"datasetId": "A", "value": value, "category": "c"})
    client.post("/api/analytics/data", json={"datasetId": "B", "value": 7, "category": "c"})

    with client.websocket_connect("/ws") as ws:
        ws.receive_json()
        ws.send_json({"event": "data:stream", "data": "A"})

        message = ws.receive_json()

    assert message["event"] == "data:stream:response"
    assert [p["value"] for p in message["data"]] == [3, 2, 1]


def test_subscribe_sends_no_acknowledgment(client):
    with client.websocket_connect("/ws") as ws:
        ws.receive_json()
        ws.send_json({"event": "subscribe:dataset", "data": "A"})
        ws.send_json({"event": "data:stream", "data": "A"})

        message = ws.receive_json()

    assert message["event"] == "data:stream:response"


def test_bad_messages_produce_error_events(client):
    with client.websocket_connect("/ws") as ws:
        ws.receive_json()

        ws.send_text("not json")
        assert ws.receive_json()["event"] == "error"

        ws.send_json({"event": "data:unknown", "data": "A"})
        unknown = ws.receive_json()
        assert unknown == {"event": "error", "data": "Unknown event: data:unknown"}

        ws.send_json({"event": "data:stream", "data": 5})
        assert ws.receive_json()["event"] == "error"

        # the connection survives errors
        ws.send_json({"event": "data:stream", "data": "A"})
        assert ws.receive_json()["event"] == "data:stream:response"


def test_health_counts_open_connections(client):
    with client.websocket_connect("/ws") as ws:
        ws.receive_json()
        assert client.get("/health").json()["active_connections"] == 1


def test_stream_request_store_failure_sends_error(client):
    with client.websocket_connect("/ws") as ws:
        ws.receive_json()
        client.portal.call(client.app.state.store.close)

        ws.send_json({"event": "data:stream", "data": "A"})
        assert ws.receive_json() == {"event": "error", "data": "Document store is not open"}

        # the connection stays usable
        ws.send_json({"event": "data:unknown", "data": "A"})
        assert ws.receive_json()["event"] == "error"


def test_binary_frame_produces_error_event(client):
    with client.websocket_connect("/ws") as ws:
        ws.receive_json()

        ws.send_bytes(b"\x00\x01")
        assert ws.receive_json() == {"event": "error", "data": "Only text frames are accepted"}

        ws.send_json({"event": "data:stream", "data": "A"})
        assert ws.receive_json() == {"event": "data:stream:response", "data": []}
