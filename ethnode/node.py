"""A node client that hides the differences between geth and parity."""

from __future__ import annotations

import logging
import queue
import time
from typing import Any, Iterator

from .geth_schema import GethSchema
from .geth_types import SubscriptionResult
from .messages import Message, new_request
from .parity_schema import ParitySchema
from .rpcclient import RpcError, discover_and_dial
from .schema import RpcCall, Schema
from .types import Hash

log = logging.getLogger(__name__)


class NodeError(Exception):
    """A call to the node failed."""


class NodeClient:
    """Calls an Ethereum node through a JSON-RPC client and a node-specific schema."""

    def __init__(
        self,
        rpc: Any,
        schema: Schema,
        poll_interval: float = 0.2,
        retry_interval: float = 1.0,
    ) -> None:
        self._rpc = rpc
        self.schema = schema
        self.poll_interval = poll_interval
        self.retry_interval = retry_interval

    def __enter__(self) -> "NodeClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _execute(self, call: RpcCall, context: str) -> Any:
        try:
            return call.decode(self._rpc.call_request(call.request))
        except Exception as exc:
            raise NodeError(f"{context}: {exc}") from exc

    def call(self, message: Message) -> None:
        """Forward a raw message to the node and store the answer in it."""
        params = message.params
        if params is None:
            params = []
        elif not isinstance(params, list):
            raise NodeError("message params must be a JSON array")
        request = new_request(message.method, *params)
        try:
            response = self._rpc.send_raw_request(request)
        except Exception as exc:
            raise NodeError(
                f"proxy calling failed method: [{request.method}], "
                f"parameters [{request.params}], error: {exc}"
            ) from exc
        message.result = response.result
        message.has_result = response.has_result
        message.error = response.error

    def current_block_number(self) -> int:
        return self._execute(self.schema.eth.block_number(), "current block number")

    def get_block(self, number: int) -> Any:
        return self._execute(
            self.schema.eth.get_block_by_number(number), f"get block by number [{number}]"
        )

    def get_block_by_hash(self, block_hash: str) -> Any:
        return self._execute(
            self.schema.eth.get_block_by_hash(block_hash), f"get block by hash [{block_hash}]"
        )

    def get_transaction(self, tx_hash: str) -> Any:
        return self._execute(
            self.schema.eth.get_transaction(tx_hash), f"get transaction [{tx_hash}]"
        )

    def get_transaction_receipt(self, tx_hash: str) -> Any:
        return self._execute(
            self.schema.eth.get_transaction_receipt(tx_hash),
            f"get transaction receipt [{tx_hash}]",
        )

    def get_network_id(self) -> str:
        return self._execute(self.schema.net.version(), "get network ID")

    def get_transaction_vm_trace(self, tx_hash: str) -> Any:
        trace = self._execute(
            self.schema.trace.vm_trace(tx_hash), f"get transaction trace [{tx_hash}]"
        )
        trace.process_trace()
        return trace

    def get_transaction_call_trace(self, tx_hash: str) -> Any:
        return self._execute(
            self.schema.trace.call_trace(tx_hash), f"get transaction pretty trace [{tx_hash}]"
        )

    def get_balance(self, address: str, block: int | None) -> int:
        return self._execute(self.schema.eth.get_balance(address, block), f"get balance [{address}]")

    def get_code(self, address: str, block: int | None) -> str:
        return self._execute(self.schema.eth.get_code(address, block), f"get code [{address}]")

    def get_nonce(self, address: str, block: int | None) -> int:
        return self._execute(self.schema.eth.get_nonce(address, block), f"get nonce [{address}]")

    def get_storage_at(self, address: str, offset: Hash, block: int | None) -> Hash:
        value = self._execute(
            self.schema.eth.get_storage(address, offset, block), f"get storage at [{address}]"
        )
        try:
            return Hash.from_hex(value)
        except ValueError as exc:
            raise NodeError(f"get storage at [{address}]: {exc}") from exc

    def subscribe(self, force_poll: bool) -> Iterator[int]:
        """Return an iterator of new block numbers, by subscription or by polling."""
        if force_poll:
            log.info("Forcing polling subscription...")
            return self._poll()
        call = self.schema.pubsub.subscribe()
        try:
            subscription_id = call.decode(self._rpc.call_request(call.request))
        except Exception:
            log.info("Subscription not supported, falling back to polling")
            return self._poll()
        try:
            channel = self._rpc.subscribe(str(subscription_id))
        except RpcError as exc:
            raise NodeError(f"listen for subscriptions: {exc}") from exc
        return self._notifications(channel)

    def _poll(self) -> Iterator[int]:
        last_block = 0
        while True:
            try:
                block_number = self.current_block_number()
            except NodeError as exc:
                log.warning("failed pollig for last block number: %s", exc)
                time.sleep(self.retry_interval)
                continue
            if last_block == 0:
                last_block = block_number
                continue
            while last_block < block_number:
                yield block_number
                last_block += 1
            time.sleep(self.poll_interval)

    @staticmethod
    def _notifications(channel: queue.Queue) -> Iterator[int]:
        while True:
            message = channel.get()
            if message is None:
                return
            try:
                result = SubscriptionResult.from_dict(message.params)
            except (TypeError, ValueError, AttributeError) as exc:
                log.warning("failed reading notification: %s", exc)
                continue
            if result.result.number is None:
                log.warning("failed reading notification: missing block number")
                continue
            yield result.result.number

    def close(self) -> None:
        self._rpc.close()


def _detect_schema(rpc: Any) -> Schema:
    """Probe the node: parity answers parity_versionInfo, anything else is treated as geth."""
    probe = ParitySchema().parity.version_info()
    try:
        probe.decode(rpc.call_request(probe.request))
    except Exception:
        return GethSchema()
    return ParitySchema()


def connect(target: str, protocol: str) -> NodeClient:
    """Dial a node and pick the schema that matches its implementation."""
    try:
        rpc = discover_and_dial(target, protocol)
    except RpcError as exc:
        raise NodeError(f"dial ethereum rpc: {exc}") from exc
    return NodeClient(rpc, _detect_schema(rpc))