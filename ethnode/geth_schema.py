"""JSON-RPC call builders for geth nodes."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any

from .geth_types import Block, BlockHeader, CallTrace, TraceResult, Transaction, TransactionReceipt
from .messages import new_request
from .schema import EthSchema, NetSchema, PubSubSchema, RpcCall, Schema, TraceSchema
from .types import Hash, encode_quantity, parse_number, parse_quantity

_SLOT_PATTERN = re.compile(r"^(0x)0*([0-9a-fA-F]+)$")
_UINT64_LIMIT = 2**64


def _block_param(block: int | None) -> str:
    if block is None:
        return "latest"
    return "0x" + format(block, "x")


def _string(value: Any) -> str:
    if not isinstance(value, str):
        raise TypeError("expected a JSON string")
    return value


def _uint64(value: Any) -> int:
    number = parse_quantity(value)
    if number >= _UINT64_LIMIT:
        raise ValueError("hex number > 64 bits")
    return number


class GethEthSchema(EthSchema):
    """eth namespace calls as geth answers them."""

    def block_number(self) -> RpcCall:
        return RpcCall(new_request("eth_blockNumber"), parse_number)

    def get_block_by_number(self, number: int) -> RpcCall:
        return RpcCall(
            new_request("eth_getBlockByNumber", encode_quantity(number), True), Block.from_dict
        )

    def get_block_by_hash(self, block_hash: str) -> RpcCall:
        return RpcCall(new_request("eth_getBlockByHash", block_hash, False), BlockHeader.from_dict)

    def get_transaction(self, tx_hash: str) -> RpcCall:
        return RpcCall(new_request("eth_getTransactionByHash", tx_hash), Transaction.from_dict)

    def get_transaction_receipt(self, tx_hash: str) -> RpcCall:
        return RpcCall(
            new_request("eth_getTransactionReceipt", tx_hash), TransactionReceipt.from_dict
        )

    def get_balance(self, address: str, block: int | None) -> RpcCall:
        return RpcCall(
            new_request("eth_getBalance", address, _block_param(block)), parse_quantity
        )

    def get_code(self, address: str, block: int | None) -> RpcCall:
        return RpcCall(new_request("eth_getCode", address, _block_param(block)), _string)

    def get_nonce(self, address: str, block: int | None) -> RpcCall:
        return RpcCall(
            new_request("eth_getTransactionCount", address, _block_param(block)), _uint64
        )

    def get_storage(self, address: str, offset: Hash, block: int | None) -> RpcCall:
        slot = _SLOT_PATTERN.sub(r"\1\2", offset.hex())
        return RpcCall(
            new_request("eth_getStorageAt", address, slot, _block_param(block)), _string
        )


class GethNetSchema(NetSchema):
    """net namespace calls."""

    def version(self) -> RpcCall:
        return RpcCall(new_request("net_version"), _string)


class GethTraceSchema(TraceSchema):
    """Tracing through debug_traceTransaction."""

    def vm_trace(self, tx_hash: str) -> RpcCall:
        return RpcCall(new_request("debug_traceTransaction", tx_hash, {}), TraceResult.from_dict)

    def call_trace(self, tx_hash: str) -> RpcCall:
        return RpcCall(
            new_request("debug_traceTransaction", tx_hash, {"tracer": "callTracer"}),
            CallTrace.from_dict,
        )


@dataclass
class GethSchema(Schema):
    """The call builders for a geth node."""

    eth: EthSchema = field(default_factory=GethEthSchema)
    net: NetSchema = field(default_factory=GethNetSchema)
    trace: TraceSchema = field(default_factory=GethTraceSchema)
    pubsub: PubSubSchema = field(default_factory=PubSubSchema)


DEFAULT_SCHEMA = GethSchema()