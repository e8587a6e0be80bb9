"""Block, transaction, receipt and trace records as returned by a geth node."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Iterator

from .types import Address, Hash, decode_hex, parse_number, parse_quantity

_UINT64_LIMIT = 2**64


def _text(value: Any) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        raise TypeError("expected a JSON string")
    return value


def _fixed(value: Any, size: int) -> bytes:
    if not isinstance(value, str):
        raise TypeError("expected a hex string")
    raw = decode_hex(value)
    if len(raw) != size:
        raise ValueError(f"hex string has length {len(raw) * 2}, want {size * 2}")
    return raw


def _hash(value: Any) -> Hash:
    return Hash() if value is None else Hash(_fixed(value, 32))


def _optional_hash(value: Any) -> Hash | None:
    return None if value is None else _hash(value)


def _address(value: Any) -> Address:
    return Address() if value is None else Address(_fixed(value, 20))


def _optional_address(value: Any) -> Address | None:
    return None if value is None else _address(value)


def _big(value: Any) -> int | None:
    return None if value is None else parse_quantity(value)


def _uint64(value: Any) -> int:
    number = parse_quantity(value)
    if number >= _UINT64_LIMIT:
        raise ValueError("hex number > 64 bits")
    return number


def _optional_uint64(value: Any) -> int | None:
    return None if value is None else _uint64(value)


def _bytes(value: Any) -> bytes:
    return b"" if value is None else decode_hex(value)


def _number(value: Any) -> int:
    return 0 if value is None else parse_number(value)


def _unix(seconds: int | None) -> datetime:
    if seconds is None:
        raise ValueError("missing timestamp")
    return datetime.fromtimestamp(seconds, tz=timezone.utc)


@dataclass
class Header:
    """The part of a new-head notification that carries the block number."""

    number: int | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Header":
        value = data.get("number")
        return cls(number=None if value is None else parse_number(value))


@dataclass
class AccessTuple:
    """An address and the storage keys a transaction declares it will touch."""

    address: Address = field(default_factory=Address)
    storage_keys: list[Hash] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AccessTuple":
        return cls(
            address=_address(data.get("address")),
            storage_keys=[_hash(key) for key in data.get("storageKeys") or []],
        )


@dataclass
class Transaction:
    """A transaction as reported by eth_getTransactionByHash."""

    hash: Hash = field(default_factory=Hash)
    from_address: Address = field(default_factory=Address)
    to: Address | None = None
    input: bytes = b""
    value: int | None = None
    gas: int | None = None
    gas_tip_cap: int | None = None
    gas_fee_cap: int | None = None
    gas_price: int | None = None
    block_number: int | None = None
    block_hash: Hash | None = None
    nonce: int | None = None
    v: int | None = None
    r: int | None = None
    s: int | None = None
    access_list: list[AccessTuple] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Transaction":
        return cls(
            hash=_hash(data.get("hash")),
            from_address=_address(data.get("from")),
            to=_optional_address(data.get("to")),
            input=_bytes(data.get("input")),
            value=_big(data.get("value")),
            gas=_big(data.get("gas")),
            gas_tip_cap=_big(data.get("maxPriorityFeePerGas")),
            gas_fee_cap=_big(data.get("maxFeePerGas")),
            gas_price=_big(data.get("gasPrice")),
            block_number=_big(data.get("blockNumber")),
            block_hash=_optional_hash(data.get("blockHash")),
            nonce=_big(data.get("nonce")),
            v=_big(data.get("v")),
            r=_big(data.get("r")),
            s=_big(data.get("s")),
            access_list=[AccessTuple.from_dict(item) for item in data.get("accessList") or []],
        )


@dataclass
class Block:
    """A block with its full transactions."""

    number: int = 0
    hash: Hash = field(default_factory=Hash)
    parent_hash: Hash = field(default_factory=Hash)
    time: int | None = None
    difficulty: int | None = None
    gas_limit: int | None = None
    transactions: list[Transaction] = field(default_factory=list)
    base_fee_per_gas: int | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Block":
        return cls(
            number=_number(data.get("number")),
            hash=_hash(data.get("hash")),
            parent_hash=_hash(data.get("parentHash")),
            time=_big(data.get("timestamp")),
            difficulty=_big(data.get("difficulty")),
            gas_limit=_big(data.get("gasLimit")),
            transactions=[Transaction.from_dict(tx) for tx in data.get("transactions") or []],
            base_fee_per_gas=_big(data.get("baseFeePerGas")),
        )

    @property
    def timestamp(self) -> datetime:
        """The block time as a UTC datetime."""
        return _unix(self.time)


@dataclass
class BlockHeader:
    """A block header as reported by eth_getBlockByHash without transactions."""

    number: int = 0
    hash: Hash = field(default_factory=Hash)
    state_root: Hash = field(default_factory=Hash)
    parent_hash: Hash = field(default_factory=Hash)
    uncle_hash: Hash = field(default_factory=Hash)
    tx_hash: Hash = field(default_factory=Hash)
    receipt_hash: Hash = field(default_factory=Hash)
    logs_bloom: bytes = b""
    time: int | None = None
    difficulty: int | None = None
    gas_limit: int | None = None
    gas_used: int | None = None
    coinbase: Address = field(default_factory=Address)
    extra_data: bytes = b""
    mix_digest: Hash = field(default_factory=Hash)
    raw_nonce: bytes = b""
    base_fee_per_gas: int | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "BlockHeader":
        return cls(
            number=_number(data.get("number")),
            hash=_hash(data.get("hash")),
            state_root=_hash(data.get("stateRoot")),
            parent_hash=_hash(data.get("parentHash")),
            uncle_hash=_hash(data.get("sha3Uncles")),
            tx_hash=_hash(data.get("transactionsRoot")),
            receipt_hash=_hash(data.get("receiptsRoot")),
            logs_bloom=_bytes(data.get("logsBloom")),
            time=_big(data.get("timestamp")),
            difficulty=_big(data.get("difficulty")),
            gas_limit=_big(data.get("gasLimit")),
            gas_used=_big(data.get("gasUsed")),
            coinbase=_address(data.get("miner")),
            extra_data=_bytes(data.get("extraData")),
            mix_digest=_hash(data.get("mixDigest")),
            raw_nonce=_bytes(data.get("nonce")),
            base_fee_per_gas=_big(data.get("baseFeePerGas")),
        )

    @property
    def bloom(self) -> bytes:
        """The first 256 bytes of the logs bloom."""
        if len(self.logs_bloom) < 256:
            raise ValueError("logs bloom shorter than 256 bytes")
        return bytes(self.logs_bloom[:256])

    @property
    def nonce(self) -> bytes:
        """The first 8 bytes of the block nonce."""
        if len(self.raw_nonce) < 8:
            raise ValueError("block nonce shorter than 8 bytes")
        return bytes(self.raw_nonce[:8])

    @property
    def timestamp(self) -> datetime:
        """The block time as a UTC datetime."""
        return _unix(self.time)


@dataclass
class Log:
    """An event log entry of a receipt."""

    address: str = ""
    block_hash: str = ""
    block_number: str = ""
    data: str = ""
    log_index: str = ""
    removed: bool = False
    topics: list[str] = field(default_factory=list)
    transaction_hash: str = ""
    transaction_index: str = ""
    transaction_log_index: str = ""
    type: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Log":
        return cls(
            address=_text(data.get("address")),
            block_hash=_text(data.get("blockHash")),
            block_number=_text(data.get("blockNumber")),
            data=_text(data.get("data")),
            log_index=_text(data.get("logIndex")),
            removed=bool(data.get("removed", False)),
            topics=[_text(topic) for topic in data.get("topics") or []],
            transaction_hash=_text(data.get("transactionHash")),
            transaction_index=_text(data.get("transactionIndex")),
            transaction_log_index=_text(data.get("transactionLogIndex")),
            type=_text(data.get("type")),
        )


@dataclass
class TransactionReceipt:
    """A transaction receipt as reported by eth_getTransactionReceipt."""

    transaction_hash: str = ""
    transaction_index: int = 0
    block_hash: Hash = field(default_factory=Hash)
    block_number: int = 0
    from_address: Address = field(default_factory=Address)
    to: Address | None = None
    gas_used: int | None = None
    cumulative_gas_used: int | None = None
    effective_gas_price: int = 0
    contract_address: Address | None = None
    status: str = ""
    logs: list[Log] = field(default_factory=list)
    logs_bloom: bytes = b""
    root: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TransactionReceipt":
        price = data.get("effectiveGasPrice")
        root = data.get("root")
        return cls(
            transaction_hash=_text(data.get("transactionHash")),
            transaction_index=_number(data.get("transactionIndex")),
            block_hash=_hash(data.get("blockHash")),
            block_number=_number(data.get("blockNumber")),
            from_address=_address(data.get("from")),
            to=_optional_address(data.get("to")),
            gas_used=_big(data.get("gasUsed")),
            cumulative_gas_used=_big(data.get("cumulativeGasUsed")),
            effective_gas_price=0 if price is None else _uint64(price),
            contract_address=_optional_address(data.get("contractAddress")),
            status=_text(data.get("status")),
            logs=[Log.from_dict(item) for item in data.get("logs") or []],
            logs_bloom=_bytes(data.get("logsBloom")),
            root=None if root is None else _text(root),
        )

    def set_status(self, trace: str) -> None:
        """Mark the receipt as failed with the given trace."""
        self.status = "0x0 " + trace


@dataclass
class EvmState:
    """One step of a struct-log trace."""

    pc: int = 0
    op: str = ""
    gas: int = 0
    gas_cost: int = 0
    depth: int = 0
    error: Any = None
    stack: list[str] | None = None
    memory: list[str] | None = None
    storage: dict[str, str] | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "EvmState":
        return cls(
            pc=int(data.get("pc") or 0),
            op=_text(data.get("op")),
            gas=int(data.get("gas") or 0),
            gas_cost=int(data.get("gasCost") or 0),
            depth=int(data.get("depth") or 0),
            error=data.get("error"),
            stack=None if data.get("stack") is None else list(data["stack"]),
            memory=None if data.get("memory") is None else list(data["memory"]),
            storage=None if data.get("storage") is None else dict(data["storage"]),
        )


@dataclass
class TraceResult:
    """The result of debug_traceTransaction with the default tracer."""

    gas: int = 0
    failed: bool = False
    return_value: str = ""
    struct_logs: list[EvmState] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TraceResult":
        return cls(
            gas=int(data.get("gas") or 0),
            failed=bool(data.get("failed", False)),
            return_value=_text(data.get("returnValue")),
            struct_logs=[EvmState.from_dict(item) for item in data.get("structLogs") or []],
        )

    def states(self) -> list[EvmState]:
        """Return the trace steps in order."""
        return list(self.struct_logs)

    def process_trace(self) -> None:
        """Struct-log traces need no post-processing."""


@dataclass
class CallTrace:
    """A call frame from the callTracer, with its nested calls."""

    hash: Hash | None = None
    parent_hash: Hash | None = None
    transaction_hash: Hash | None = None
    type: str = ""
    from_address: Address = field(default_factory=Address)
    to: Address = field(default_factory=Address)
    input: bytes = b""
    output: bytes = b""
    gas: int | None = None
    gas_used: int | None = None
    value: int | None = None
    error: str = ""
    calls: list["CallTrace"] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CallTrace":
        return cls(
            hash=_optional_hash(data.get("hash")),
            parent_hash=_optional_hash(data.get("parentHash")),
            transaction_hash=_optional_hash(data.get("transactionHash")),
            type=_text(data.get("type")),
            from_address=_address(data.get("from")),
            to=_address(data.get("to")),
            input=_bytes(data.get("input")),
            output=_bytes(data.get("output")),
            gas=_optional_uint64(data.get("gas")),
            gas_used=_optional_uint64(data.get("gasUsed")),
            value=_big(data.get("value")),
            error=_text(data.get("error")),
            calls=[CallTrace.from_dict(item) for item in data.get("calls") or []],
        )

    def traces(self) -> list["CallTrace"]:
        """Return this frame and every nested frame, depth first."""
        return list(walk(self))


def walk(call_trace: CallTrace | None) -> Iterator[CallTrace]:
    """Yield a call frame and its nested frames in depth-first order."""
    if call_trace is None:
        return
    yield call_trace
    for child in call_trace.calls:
        yield from walk(child)


@dataclass
class SubscriptionResult:
    """The params of a newHeads notification."""

    subscription: str = ""
    result: Header = field(default_factory=Header)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SubscriptionResult":
        return cls(
            subscription=_text(data.get("subscription")),
            result=Header.from_dict(data.get("result") or {}),
        )