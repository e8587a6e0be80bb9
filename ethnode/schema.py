"""Interfaces for building node-specific JSON-RPC calls."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable

from .messages import Request, new_request
from .types import Hash


def _identity(value: Any) -> Any:
    return value


@dataclass
class RpcCall:
    """A request paired with the function that turns its result into a value."""

    request: Request
    decoder: Callable[[Any], Any] = _identity

    def decode(self, result: Any) -> Any:
        """Convert a raw JSON result."""
        return self.decoder(result)


class EthSchema(ABC):
    """Calls in the eth namespace."""

    @abstractmethod
    def block_number(self) -> RpcCall: ...

    @abstractmethod
    def get_block_by_number(self, number: int) -> RpcCall: ...

    @abstractmethod
    def get_block_by_hash(self, block_hash: str) -> RpcCall: ...

    @abstractmethod
    def get_transaction(self, tx_hash: str) -> RpcCall: ...

    @abstractmethod
    def get_transaction_receipt(self, tx_hash: str) -> RpcCall: ...

    @abstractmethod
    def get_balance(self, address: str, block: int | None) -> RpcCall: ...

    @abstractmethod
    def get_code(self, address: str, block: int | None) -> RpcCall: ...

    @abstractmethod
    def get_nonce(self, address: str, block: int | None) -> RpcCall: ...

    @abstractmethod
    def get_storage(self, address: str, offset: Hash, block: int | None) -> RpcCall: ...


class NetSchema(ABC):
    """Calls in the net namespace."""

    @abstractmethod
    def version(self) -> RpcCall: ...


class TraceSchema(ABC):
    """Transaction tracing calls."""

    @abstractmethod
    def vm_trace(self, tx_hash: str) -> RpcCall: ...

    @abstractmethod
    def call_trace(self, tx_hash: str) -> RpcCall: ...


class PubSubSchema:
    """Subscription calls for new block headers."""

    def subscribe(self) -> RpcCall:
        return RpcCall(new_request("eth_subscribe", "newHeads"), str)

    def unsubscribe(self, subscription_id: str) -> RpcCall:
        return RpcCall(new_request("eth_unsubscribe", str(subscription_id)), bool)


@dataclass
class Schema:
    """The set of call builders for one kind of node."""

    eth: EthSchema
    net: NetSchema
    trace: TraceSchema
    pubsub: PubSubSchema