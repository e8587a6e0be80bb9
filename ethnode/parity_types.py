"""Block and trace records as returned by a parity node."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Any

from . import geth_types
from .geth_types import AccessTuple, Header, Log, SubscriptionResult, Transaction, TransactionReceipt
from .opcodes import opcode_name
from .types import Address, Hash, decode_hex, parse_quantity

__all__ = [
    "AccessTuple",
    "Action",
    "Block",
    "BlockHeader",
    "Ex",
    "Header",
    "Log",
    "Mem",
    "Result",
    "SubscriptionResult",
    "Trace",
    "TraceResult",
    "Transaction",
    "TransactionReceipt",
    "Version",
    "VersionInfo",
    "VmState",
    "VmTrace",
    "walk",
]

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


def _optional_hash(value: Any) -> Hash | None:
    return None if value is None else Hash(_fixed(value, 32))


def _address(value: Any) -> Address:
    return Address() if value is None else Address(_fixed(value, 20))


def _bytes(value: Any) -> bytes:
    return b"" if value is None else decode_hex(value)


def _big(value: Any) -> int | None:
    return None if value is None else parse_quantity(value)


def _optional_uint64(value: Any) -> int | None:
    if value is None:
        return None
    number = parse_quantity(value)
    if number >= _UINT64_LIMIT:
        raise ValueError("hex number > 64 bits")
    return number


def _rebuild(cls, base):
    if isinstance(base, cls):
        return base
    return cls(**{item.name: getattr(base, item.name) for item in fields(base) if item.init})


class Block(geth_types.Block):
    """A block with its full transactions."""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Block":
        return _rebuild(cls, super().from_dict(data))


class BlockHeader(geth_types.BlockHeader):
    """A block header; an absent nonce reads as eight zero bytes."""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "BlockHeader":
        return _rebuild(cls, super().from_dict(data))

    @property
    def nonce(self) -> bytes:
        if not self.raw_nonce:
            return bytes(8)
        if len(self.raw_nonce) < 8:
            raise ValueError("block nonce shorter than 8 bytes")
        return bytes(self.raw_nonce[:8])


@dataclass
class Version:
    """A semantic node version."""

    major: int = 0
    minor: int = 0
    patch: int = 0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Version":
        return cls(
            major=int(data.get("major") or 0),
            minor=int(data.get("minor") or 0),
            patch=int(data.get("patch") or 0),
        )


@dataclass
class VersionInfo:
    """The answer of parity_versionInfo."""

    hash: str = ""
    track: str = ""
    version: Version = field(default_factory=Version)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "VersionInfo":
        return cls(
            hash=_text(data.get("hash")),
            track=_text(data.get("track")),
            version=Version.from_dict(data.get("version") or {}),
        )


@dataclass
class Mem:
    """A memory write made by one instruction."""

    data: bytes = b""
    off: int = 0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Mem":
        return cls(data=_bytes(data.get("data")), off=int(data.get("off") or 0))


@dataclass
class Ex:
    """The effects of executing one instruction."""

    mem: Mem = field(default_factory=Mem)
    push: list[str] = field(default_factory=list)
    used: int = 0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Ex":
        mem = data.get("mem")
        return cls(
            mem=Mem.from_dict(mem) if mem is not None else Mem(),
            push=[_text(item) for item in data.get("push") or []],
            used=int(data.get("used") or 0),
        )


@dataclass
class VmState:
    """One instruction of a VM trace."""

    pc: int = 0
    opcode: str = ""
    ex: Ex = field(default_factory=Ex)
    sub: "VmTrace | None" = None
    gas: int = 0
    gas_cost: int = 0
    call_depth: int = 0
    error: Any = None
    stack: list[str] | None = None
    memory: list[str] | None = None
    storage: dict[str, str] | None = None
    terminating: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "VmState":
        ex = data.get("ex")
        sub = data.get("sub")
        return cls(
            pc=int(data.get("pc") or 0),
            opcode=_text(data.get("op")),
            ex=Ex.from_dict(ex) if ex is not None else Ex(),
            sub=VmTrace.from_dict(sub) if sub is not None else None,
            gas=int(data.get("gas") or 0),
            gas_cost=int(data.get("cost") or 0),
            call_depth=int(data.get("depth") or 0),
            error=data.get("error"),
            stack=None if data.get("stack") is None else list(data["stack"]),
            memory=None if data.get("memory") is None else list(data["memory"]),
            storage=None if data.get("storage") is None else dict(data["storage"]),
        )

    @property
    def depth(self) -> int:
        """The one-based call depth."""
        return self.call_depth + 1

    @property
    def op(self) -> str:
        """Parity states do not report an operation name here."""
        return "Not implemented"


@dataclass
class VmTrace:
    """The instructions executed in one code frame."""

    logs: list[VmState] = field(default_factory=list)
    code: bytes = b""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "VmTrace":
        return cls(
            logs=[VmState.from_dict(item) for item in data.get("ops") or []],
            code=_bytes(data.get("code")),
        )


@dataclass
class Action:
    """The call a trace entry describes."""

    call_type: str = ""
    hash: Hash | None = None
    parent_hash: Hash | None = None
    transaction_hash: Hash | None = None
    from_address: Address = field(default_factory=Address)
    to: Address = field(default_factory=Address)
    input: bytes = b""
    gas: int | None = None
    value: int | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Action":
        return cls(
            call_type=_text(data.get("callType")),
            hash=_optional_hash(data.get("hash")),
            parent_hash=_optional_hash(data.get("parentHash")),
            transaction_hash=_optional_hash(data.get("transactionHash")),
            from_address=_address(data.get("from")),
            to=_address(data.get("to")),
            input=_bytes(data.get("input")),
            gas=_optional_uint64(data.get("gas")),
            value=_big(data.get("value")),
        )


@dataclass
class Result:
    """The outcome of a traced call."""

    gas_used: int | None = None
    output: bytes = b""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Result":
        return cls(
            gas_used=_optional_uint64(data.get("gasUsed")),
            output=_bytes(data.get("output")),
        )


@dataclass
class Trace:
    """One call of a parity call trace."""

    action: Action = field(default_factory=Action)
    result: Result = field(default_factory=Result)
    logs: list[Log] = field(default_factory=list)
    subtraces: int = 0
    error: str = ""
    trace_address: list[int] = field(default_factory=list)
    type: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Trace":
        action = data.get("action")
        result = data.get("result")
        return cls(
            action=Action.from_dict(action) if action is not None else Action(),
            result=Result.from_dict(result) if result is not None else Result(),
            logs=[Log.from_dict(item) for item in data.get("logs") or []],
            subtraces=int(data.get("subtraces") or 0),
            error=_text(data.get("error")),
            trace_address=[int(item) for item in data.get("traceAddress") or []],
            type=_text(data.get("type")),
        )

    @property
    def hash(self) -> Hash | None:
        return self.action.hash

    @property
    def parent_hash(self) -> Hash | None:
        return self.action.parent_hash

    @property
    def transaction_hash(self) -> Hash | None:
        return self.action.transaction_hash

    @property
    def from_address(self) -> Address:
        return self.action.from_address

    @property
    def to(self) -> Address:
        return self.action.to

    @property
    def input(self) -> bytes:
        return self.action.input

    @property
    def output(self) -> bytes:
        return self.result.output

    @property
    def gas(self) -> int | None:
        return self.action.gas

    @property
    def gas_used(self) -> int | None:
        return self.result.gas_used

    @property
    def value(self) -> int | None:
        return self.action.value


@dataclass
class TraceResult:
    """The result of trace_replayTransaction."""

    vm_trace: VmTrace | None = None
    call_trace: list[Trace] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TraceResult":
        vm_trace = data.get("vmTrace")
        return cls(
            vm_trace=VmTrace.from_dict(vm_trace) if vm_trace is not None else None,
            call_trace=[Trace.from_dict(item) for item in data.get("traceSchema") or []],
        )

    def states(self) -> list[VmState]:
        """Return the VM steps in order, or nothing without a VM trace."""
        if self.vm_trace is None:
            return []
        return list(self.vm_trace.logs)

    def traces(self) -> list[Trace]:
        """Return the call traces, or nothing without a VM trace."""
        if self.vm_trace is None:
            return []
        return list(self.call_trace)

    def process_trace(self) -> None:
        """Flatten nested frames and fill in operations and stacks."""
        if self.vm_trace is None:
            return
        self.vm_trace.logs = walk(self.vm_trace)


def _pad_push(value: str) -> str:
    return ("0" * 24 + value[2:]).rjust(64, "0")


def walk(vm_trace: VmTrace) -> list[VmState]:
    """Flatten a VM trace with its sub-frames, naming each operation and carrying stacks forward.

    The last state of every frame is marked as terminating.
    """
    logs = vm_trace.logs
    if not logs:
        raise ValueError("vm trace has no operations")
    code = vm_trace.code
    logs[0].opcode = opcode_name(code[logs[0].pc])

    flattened: list[VmState] = []
    for index, state in enumerate(logs):
        if index > 0:
            previous = logs[index - 1]
            state.stack = None if previous.opcode == "CALL" else previous.stack

        if index < len(logs) - 1:
            following = logs[index + 1]
            following.opcode = opcode_name(code[following.pc])
            if following.opcode == "EXTCODESIZE":
                state.ex.push = [_pad_push(item) for item in state.ex.push]
                state.stack = list(state.ex.push)

        flattened.append(state)
        if state.sub is not None:
            sub_states = walk(state.sub)
            sub_states[-1].terminating = True
            flattened.extend(sub_states)

    flattened[-1].terminating = True
    return flattened