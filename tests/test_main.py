"""
End-to-end tests for the /ws endpoint and lobby routes
======================================================
"""

import pytest
from fastapi.testclient import TestClient

from main import create_app


@pytest.fixture
def client():
    with TestClient(create_app()) as client:
        yield client


def send(ws, event, data):
    ws.send_json({"event": event, "data": data})


class TestSignalingSocket:
    """Two browsers negotiating through /ws"""

    def test_pair_and_relay(self, client):
        with client.websocket_connect("/ws") as x, client.websocket_connect("/ws") as y:
            send(x, "join", "room1")
            assert x.receive_json() == {"event": "room_status", "data": {"size": 1, "isRoomFull": False}}

            send(y, "join", "room1")
            assert y.receive_json() == {"event": "room_status", "data": {"size": 2, "isRoomFull": True}}
            assert y.receive_json() == {"event": "room_closed", "data": {"roomId": "room1"}}
            assert x.receive_json() == {"event": "room_status", "data": {"size": 2, "isRoomFull": True}}
            assert x.receive_json() == {"event": "room_closed", "data": {"roomId": "room1"}}

            send(x, "offer", {"roomId": "room1", "sdp": "v=0", "type": "offer"})
            assert y.receive_json() == {"event": "offer", "data": {"sdp": "v=0", "type": "offer"}}

            send(y, "answer", {"roomId": "room1", "sdp": "v=0", "type": "answer"})
            assert x.receive_json() == {"event": "answer", "data": {"sdp": "v=0", "type": "answer"}}

    def test_room_full_and_departures(self, client):
        with client.websocket_connect("/ws") as x:
            send(x, "join", "room1")
            x.receive_json()
            with client.websocket_connect("/ws") as y:
                send(y, "join", "room1")
                y.receive_json()
                y.receive_json()
                x.receive_json()
                x.receive_json()

                with client.websocket_connect("/ws") as z:
                    send(z, "join", "room1")
                    assert z.receive_json() == {"event": "room_full", "data": {"roomId": "room1"}}
                    assert client.get("/rooms").json() == {"rooms": {"room1": 2}}

            assert x.receive_json() == {"event": "room_status", "data": {"size": 1, "isRoomFull": False}}

            with client.websocket_connect("/ws") as lobby:
                send(lobby, "join", "hall")
                lobby.receive_json()
                x.close()
                assert lobby.receive_json() == {"event": "room_available", "data": {"roomId": "room1"}}
                assert client.get("/rooms").json() == {"rooms": {"hall": 1}}

    def test_malformed_input_keeps_socket_open(self, client):
        with client.websocket_connect("/ws") as x:
            x.send_text("not json")
            x.send_bytes(b"\x00\x01")
            send(x, "nonsense", {})
            send(x, "join", "room1")
            assert x.receive_json() == {"event": "room_status", "data": {"size": 1, "isRoomFull": False}}


class TestLobbyRoutes:
    """HTTP views of the session table"""

    def test_health(self, client):
        assert client.get("/health").json() == {"status": "ok", "participants": 0, "rooms": 0}

    def test_room_status(self, client):
        with client.websocket_connect("/ws") as lobby:
            send(lobby, "join", "hall")
            lobby.receive_json()
            with client.websocket_connect("/ws") as x:
                send(x, "join", "room1")
                x.receive_json()
                assert client.get("/rooms/room1").json() == {"roomId": "room1", "size": 1, "isRoomFull": False}
            assert lobby.receive_json() == {"event": "room_available", "data": {"roomId": "room1"}}
            assert client.get("/rooms/room1").json() == {"roomId": "room1", "size": 0, "isRoomFull": False}
