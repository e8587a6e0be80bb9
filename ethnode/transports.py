"""Connections that carry JSON-RPC requests to a node over HTTP or WebSocket."""

from __future__ import annotations

import json
import queue
import threading
from abc import ABC, abstractmethod
from typing import Any

import requests
import websocket

from .messages import Message, Request

_CLOSED = object()


class Connection(ABC):
    """A two-way channel of JSON-RPC traffic."""

    @abstractmethod
    def write(self, request: Request) -> None:
        """Send a request."""

    @abstractmethod
    def read(self) -> Message:
        """Block for the next message; raise EOFError once the channel is closed."""

    @abstractmethod
    def close(self) -> None:
        """Close the channel."""


class HttpConnection(Connection):
    """Posts each request and queues the response for the next read."""

    def __init__(self, addr: str, session: Any = None) -> None:
        self.addr = addr
        self._session = session if session is not None else requests.Session()
        self._responses: queue.Queue[Any] = queue.Queue(maxsize=256)
        self._closed = threading.Event()
        self._close_lock = threading.Lock()

    def write(self, request: Request) -> None:
        body = json.dumps(request.to_dict())
        try:
            response = self._session.post(
                self.addr,
                data=body,
                headers={"Content-Type": "application/json", "Accept": "application/json"},
            )
        except requests.RequestException as exc:
            raise ConnectionError(f"write request send: {exc}") from exc
        try:
            message = Message.from_dict(response.json())
        except (ValueError, TypeError) as exc:
            raise ConnectionError(f"write request read: {exc}") from exc
        self._responses.put(message)
        try:
            response.close()
        except Exception as exc:
            raise ConnectionError(f"write request cleanup: {exc}") from exc

    def read(self) -> Message:
        if self._closed.is_set():
            raise EOFError("connection closed")
        item = self._responses.get()
        if item is _CLOSED:
            raise EOFError("connection closed")
        return item

    def close(self) -> None:
        with self._close_lock:
            if self._closed.is_set():
                return
            self._closed.set()
            try:
                self._responses.put_nowait(_CLOSED)
            except queue.Full:
                pass


class WebsocketConnection(Connection):
    """Exchanges JSON text frames over an open WebSocket."""

    def __init__(self, ws: Any) -> None:
        self._ws = ws

    def write(self, request: Request) -> None:
        try:
            self._ws.send(json.dumps(request.to_dict()))
        except Exception as exc:
            raise ConnectionError(f"write websocket: {exc}") from exc

    def read(self) -> Message:
        try:
            frame = self._ws.recv()
        except websocket.WebSocketConnectionClosedException as exc:
            raise EOFError("websocket closed") from exc
        except Exception as exc:
            raise ConnectionError(f"read websocket: {exc}") from exc
        try:
            return Message.from_dict(json.loads(frame))
        except (ValueError, TypeError) as exc:
            raise ConnectionError(f"read websocket: {exc}") from exc

    def close(self) -> None:
        self._ws.close()


def dial_http_connection(addr: str) -> HttpConnection:
    """Open an HTTP connection and check it with a ping request."""
    from .messages import new_request

    connection = HttpConnection(addr)
    try:
        connection.write(new_request("ping"))
        connection.read()
    except (ConnectionError, EOFError) as exc:
        raise ConnectionError(f"connect via http: {exc}") from exc
    return connection


def dial_websocket_connection(addr: str) -> WebsocketConnection:
    """Open a WebSocket connection to the address."""
    try:
        ws = websocket.create_connection(addr)
    except Exception as exc:
        raise ConnectionError(f"open websocket connection: {exc}") from exc
    return WebsocketConnection(ws)