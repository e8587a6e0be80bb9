"""JSON-RPC call builders for parity nodes."""

from __future__ import annotations

from dataclasses import dataclass, field

from .geth_schema import GethEthSchema, GethNetSchema
from .messages import new_request
from .parity_types import Block, BlockHeader, TraceResult, VersionInfo
from .schema import EthSchema, NetSchema, PubSubSchema, RpcCall, Schema, TraceSchema
from .types import encode_quantity


def _code(value: object) -> str:
    if not isinstance(value, str):
        raise TypeError("expected a JSON string")
    return value


class ParityEthSchema(GethEthSchema):
    """eth namespace calls, decoding blocks into parity records."""

    def get_block_by_number(self, number: int) -> RpcCall:
        return RpcCall(
            new_request("eth_getBlockByNumber", encode_quantity(number), True), Block.from_dict
        )

    def get_block_by_hash(self, block_hash: str) -> RpcCall:
        return RpcCall(new_request("eth_getBlockByHash", block_hash, False), BlockHeader.from_dict)


class ParityNetSchema(GethNetSchema):
    """net namespace calls."""


class ParityTraceSchema(TraceSchema):
    """Tracing through trace_replayTransaction."""

    def vm_trace(self, tx_hash: str) -> RpcCall:
        return RpcCall(
            new_request("trace_replayTransaction", tx_hash, ["vmTrace"]), TraceResult.from_dict
        )

    def call_trace(self, tx_hash: str) -> RpcCall:
        return RpcCall(
            new_request("trace_replayTransaction", tx_hash, ["traceSchema"]),
            TraceResult.from_dict,
        )


class CodeSchema:
    """Fetching contract code at the latest block."""

    def get_code(self, address: str) -> RpcCall:
        return RpcCall(new_request("eth_getCode", address, "latest"), _code)


class ParityInfoSchema:
    """Calls in the parity namespace."""

    def version_info(self) -> RpcCall:
        return RpcCall(new_request("parity_versionInfo"), VersionInfo.from_dict)


@dataclass
class ParitySchema(Schema):
    """The call builders for a parity node."""

    eth: EthSchema = field(default_factory=ParityEthSchema)
    net: NetSchema = field(default_factory=ParityNetSchema)
    trace: TraceSchema = field(default_factory=ParityTraceSchema)
    pubsub: PubSubSchema = field(default_factory=PubSubSchema)
    parity: ParityInfoSchema = field(default_factory=ParityInfoSchema)


DEFAULT_SCHEMA = ParitySchema()