"""A JSON-RPC client that matches responses to requests and fans out notifications."""

from __future__ import annotations

import logging
import queue
import threading
from typing import Any

from .messages import Message, Request, new_request
from .transports import Connection, dial_http_connection, dial_websocket_connection

log = logging.getLogger(__name__)

_KNOWN_PROTOCOLS = ("wss", "https", "ws", "http")


class RpcError(Exception):
    """A JSON-RPC call or connection failed."""


class Client:
    """Sends requests over a connection and routes incoming messages.

    A background thread reads the connection: responses go to the waiting
    caller, notifications (id 0) to every subscription queue.
    """

    def __init__(self, connection: Connection, timeout: float = 30.0) -> None:
        self._connection = connection
        self.timeout = timeout
        self._lock = threading.Lock()
        self._flying: dict[int, queue.Queue[Message]] = {}
        self._subscribers: dict[str, queue.Queue[Message | None]] = {}
        self._listener = threading.Thread(target=self._listen, daemon=True)
        self._listener.start()

    def call(self, method: str, *args: Any) -> Any:
        """Call a method and return its result."""
        return self.call_request(new_request(method, *args))

    def call_request(self, request: Request) -> Any:
        """Send a prepared request and return its result."""
        message = self.send_raw_request(request)
        if message.error is not None:
            raise RpcError(f"request failed: [ {message.error.code} ] {message.error.message}")
        if not message.has_result:
            raise RpcError("read result: missing result")
        if message.result is None:
            raise RpcError("resource not found")
        return message.result

    def send_raw_request(self, request: Request) -> Message:
        """Send a request and wait for the matching response message."""
        slot: queue.Queue[Message] = queue.Queue(maxsize=1)
        with self._lock:
            self._flying[request.id] = slot
        try:
            try:
                self._connection.write(request)
            except Exception as exc:
                raise RpcError(f"write message to socket: {exc}") from exc
            try:
                return slot.get(timeout=self.timeout)
            except queue.Empty:
                raise RpcError("request timed out") from None
        finally:
            with self._lock:
                self._flying.pop(request.id, None)

    def subscribe(self, subscription_id: str) -> queue.Queue:
        """Register a subscription; notifications arrive on the returned queue."""
        with self._lock:
            if subscription_id in self._subscribers:
                raise RpcError(f"subscription {subscription_id} already exists")
            channel: queue.Queue[Message | None] = queue.Queue(maxsize=256)
            self._subscribers[subscription_id] = channel
        return channel

    def unsubscribe(self, subscription_id: str) -> None:
        """Remove a subscription; its queue then receives None to mark the end."""
        with self._lock:
            channel = self._subscribers.pop(subscription_id, None)
        if channel is None:
            raise RpcError(f"subscription {subscription_id} does not exist")
        channel.put(None)

    def process_message(self, message: Message) -> None:
        """Route one incoming message."""
        if message.id == 0:
            with self._lock:
                channels = list(self._subscribers.values())
            for channel in channels:
                channel.put(message)
            return
        with self._lock:
            slot = self._flying.get(message.id)
        if slot is None:
            log.info("dropped message: %d", message.id)
            return
        try:
            slot.put_nowait(message)
        except queue.Full:
            log.info("dropped message: %d", message.id)

    def close(self) -> None:
        """Close the underlying connection."""
        self._connection.close()

    def _listen(self) -> None:
        while True:
            try:
                message = self._connection.read()
            except EOFError:
                break
            except Exception as exc:
                log.critical("failed reading message from connection: %s", exc)
                break
            self.process_message(message)


def dial(addr: str) -> Client:
    """Connect to a full address such as ws://host:port or http://host:port."""
    try:
        if addr.startswith("ws"):
            connection: Connection = dial_websocket_connection(addr)
        elif addr.startswith("http"):
            connection = dial_http_connection(addr)
        else:
            raise RpcError("unrecognized protocol")
    except RpcError as exc:
        raise RpcError(f"dial connection: {exc}") from exc
    except Exception as exc:
        raise RpcError(f"dial connection: {exc}") from exc
    return Client(connection)


def discover_and_dial(target: str, protocol: str) -> Client:
    """Connect with the given protocol, or try wss, https, ws and http in turn."""
    protocols = (protocol,) if protocol in _KNOWN_PROTOCOLS else _KNOWN_PROTOCOLS
    for candidate in protocols:
        try:
            return dial(f"{candidate}://{target}")
        except RpcError:
            continue
    raise RpcError("could not determine protocol")