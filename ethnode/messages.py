"""JSON-RPC 2.0 request and message objects."""

from __future__ import annotations

import itertools
import threading
from dataclasses import dataclass, field
from typing import Any

_ids = itertools.count(1)
_ids_lock = threading.Lock()


def _next_id() -> int:
    with _ids_lock:
        return next(_ids)


@dataclass
class Request:
    """An outgoing JSON-RPC request."""

    id: int
    method: str
    params: list[Any] = field(default_factory=list)
    version: str = "2.0"

    def to_dict(self) -> dict[str, Any]:
        """Return the wire form; a zero id and empty params are left out."""
        body: dict[str, Any] = {}
        if self.id:
            body["id"] = self.id
        body["jsonrpc"] = self.version
        body["method"] = self.method
        if self.params:
            body["params"] = list(self.params)
        return body


def new_request(method: str, *args: Any) -> Request:
    """Build a request with the next process-wide id."""
    return Request(id=_next_id(), method=method, params=list(args))


@dataclass
class ErrorObject:
    """The error member of a JSON-RPC response."""

    code: int
    message: str
    data: Any = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ErrorObject":
        if not isinstance(data, dict):
            raise TypeError("error object must be a JSON object")
        return cls(
            code=int(data.get("code", 0)),
            message=str(data.get("message", "")),
            data=data.get("data"),
        )


@dataclass
class Message:
    """An incoming JSON-RPC response or notification."""

    id: int = 0
    version: str = "2.0"
    method: str = ""
    params: Any = None
    result: Any = None
    has_result: bool = False
    error: ErrorObject | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Message":
        if not isinstance(data, dict):
            raise TypeError("message must be a JSON object")
        error = data.get("error")
        return cls(
            id=int(data.get("id") or 0),
            version=data.get("jsonrpc", ""),
            method=data.get("method") or "",
            params=data.get("params"),
            result=data.get("result"),
            has_result="result" in data,
            error=ErrorObject.from_dict(error) if error is not None else None,
        )

    def to_dict(self) -> dict[str, Any]:
        """Return the wire form, leaving out empty members."""
        body: dict[str, Any] = {}
        if self.id:
            body["id"] = self.id
        body["jsonrpc"] = self.version
        if self.method:
            body["method"] = self.method
        if self.params is not None:
            body["params"] = self.params
        if self.has_result:
            body["result"] = self.result
        if self.error is not None:
            error: dict[str, Any] = {"code": self.error.code, "message": self.error.message}
            if self.error.data is not None:
                error["data"] = self.error.data
            body["error"] = error
        return body

    def reset(self) -> None:
        """Clear every member back to an empty 2.0 message."""
        self.id = 0
        self.version = "2.0"
        self.method = ""
        self.params = None
        self.result = None
        self.has_result = False
        self.error = None