import json
from unittest import mock

import pytest
import requests
import websocket

from ethnode.messages import new_request
from ethnode.transports import (
    Connection,
    HttpConnection,
    WebsocketConnection,
    dial_http_connection,
    dial_websocket_connection,
)


class FakeResponse:
    def __init__(self, payload):
        self.payload = payload
        self.closed = False

    def json(self):
        if isinstance(self.payload, Exception):
            raise self.payload
        return self.payload

    def close(self):
        self.closed = True


class FakeSession:
    def __init__(self, payload):
        self.payload = payload
        self.calls = []

    def post(self, url, data=None, headers=None):
        self.calls.append((url, data, headers))
        if isinstance(self.payload, requests.RequestException):
            raise self.payload
        return FakeResponse(self.payload)


class FakeSocket:
    def __init__(self, frames):
        self.frames = list(frames)
        self.sent = []
        self.closed = False

    def send(self, text):
        self.sent.append(text)

    def recv(self):
        frame = self.frames.pop(0)
        if isinstance(frame, Exception):
            raise frame
        return frame

    def close(self):
        self.closed = True


def test_connection_is_abstract():
    with pytest.raises(TypeError):
        Connection()


def test_http_write_then_read():
    session = FakeSession({"jsonrpc": "2.0", "id": 5, "result": "0x1"})
    connection = HttpConnection("http://localhost:8545", session=session)
    request = new_request("eth_blockNumber")
    connection.write(request)
    message = connection.read()
    assert message.result == "0x1"
    url, body, headers = session.calls[0]
    assert url == "http://localhost:8545"
    assert json.loads(body) == request.to_dict()
    assert headers["Content-Type"] == "application/json"


def test_http_read_after_close_is_eof():
    connection = HttpConnection("http://localhost:8545", session=FakeSession({}))
    connection.close()
    connection.close()
    with pytest.raises(EOFError):
        connection.read()


def test_http_send_failure():
    connection = HttpConnection(
        "http://localhost:8545", session=FakeSession(requests.ConnectionError("refused"))
    )
    with pytest.raises(ConnectionError, match="write request send"):
        connection.write(new_request("eth_blockNumber"))


def test_http_bad_body():
    connection = HttpConnection("http://localhost:8545", session=FakeSession(ValueError("bad json")))
    with pytest.raises(ConnectionError, match="write request read"):
        connection.write(new_request("eth_blockNumber"))


def test_dial_http_pings():
    response = FakeResponse({"jsonrpc": "2.0", "id": 1, "result": "pong"})
    with mock.patch.object(requests.Session, "post", return_value=response) as post:
        connection = dial_http_connection("http://localhost:8545")
    assert connection.addr == "http://localhost:8545"
    assert json.loads(post.call_args.kwargs["data"])["method"] == "ping"
    assert response.closed


def test_dial_http_failure():
    with mock.patch.object(requests.Session, "post", side_effect=requests.ConnectionError("refused")):
        with pytest.raises(ConnectionError, match="connect via http"):
            dial_http_connection("http://localhost:8545")


def test_websocket_write_and_read():
    ws = FakeSocket([json.dumps({"jsonrpc": "2.0", "id": 2, "result": "0x2a"})])
    connection = WebsocketConnection(ws)
    request = new_request("eth_blockNumber")
    connection.write(request)
    assert json.loads(ws.sent[0]) == request.to_dict()
    assert connection.read().result == "0x2a"


def test_websocket_closed_is_eof():
    ws = FakeSocket([websocket.WebSocketConnectionClosedException("gone")])
    with pytest.raises(EOFError):
        WebsocketConnection(ws).read()


def test_websocket_read_errors():
    ws = FakeSocket([websocket.WebSocketTimeoutException("slow"), "not json"])
    connection = WebsocketConnection(ws)
    with pytest.raises(ConnectionError, match="read websocket"):
        connection.read()
    with pytest.raises(ConnectionError, match="read websocket"):
        connection.read()


def test_websocket_close():
    ws = FakeSocket([])
    WebsocketConnection(ws).close()
    assert ws.closed


def test_dial_websocket_failure():
    with mock.patch("websocket.create_connection", side_effect=OSError("refused")):
        with pytest.raises(ConnectionError, match="open websocket connection"):
            dial_websocket_connection("ws://localhost:8546")