import pytest

from ethnode.parity_types import (
    Block,
    BlockHeader,
    Ex,
    Trace,
    TraceResult,
    Version,
    VersionInfo,
    VmState,
    VmTrace,
    walk,
)
from ethnode.types import Address, Hash

ADDRESS_A = "0x" + "11" * 20
ADDRESS_B = "0x" + "22" * 20
HASH_A = "0x" + "33" * 32


def _trace(code, pcs):
    return VmTrace(logs=[VmState(pc=pc) for pc in pcs], code=bytes(code))


def test_walk_names_operations_from_code():
    trace = _trace([0xF1, 0x00], [0, 1])
    states = walk(trace)
    assert [state.opcode for state in states] == ["CALL", "STOP"]


def test_walk_extcodesize_pads_pushes_into_stack():
    trace = _trace([0x60, 0x00, 0x3B, 0x00], [0, 2, 3])
    trace.logs[0].ex = Ex(push=["0xabc"])
    states = walk(trace)
    first_stack = states[0].stack
    assert len(first_stack) == 1
    assert len(first_stack[0]) == 64
    assert first_stack[0].endswith("abc")
    assert first_stack[0].lstrip("0") == "abc"
    assert states[1].stack == first_stack
    assert states[2].stack == first_stack


def test_walk_clears_stack_after_call():
    trace = _trace([0xF1, 0x00], [0, 1])
    trace.logs[0].stack = ["1"]
    states = walk(trace)
    assert states[0].stack == ["1"]
    assert states[1].stack is None


def test_walk_marks_only_frame_ends_terminating():
    trace = _trace([0x00, 0x00, 0x00], [0, 1, 2])
    states = walk(trace)
    assert [state.terminating for state in states] == [False, False, True]


def test_walk_flattens_sub_frames_in_order():
    sub = _trace([0x00, 0x00], [0, 1])
    outer = _trace([0xF1, 0x00], [0, 1])
    outer.logs[0].sub = sub
    sub_first, sub_last = sub.logs
    states = walk(outer)
    assert states == [outer.logs[0], sub_first, sub_last, outer.logs[1]]
    assert sub_last.terminating
    assert not sub_first.terminating
    assert states[-1].terminating


def test_walk_rejects_empty_trace():
    with pytest.raises(ValueError):
        walk(VmTrace())


def test_vm_state_depth_and_op():
    state = VmState.from_dict({"pc": 4, "cost": 3, "depth": 2, "ex": None})
    assert state.depth == 3
    assert state.op == "Not implemented"
    assert state.pc == 4
    assert state.gas_cost == 3


def test_trace_result_without_vm_trace_is_empty():
    result = TraceResult.from_dict({"vmTrace": None, "traceSchema": [{"type": "call"}]})
    result.process_trace()
    assert result.vm_trace is None
    assert result.states() == []
    assert result.traces() == []


def test_trace_result_parses_and_processes():
    data = {
        "vmTrace": {
            "code": "0xf100",
            "ops": [
                {"pc": 0, "cost": 1, "ex": {"mem": None, "push": ["0x1"], "used": 5}, "sub": None},
                {"pc": 1, "cost": 0, "ex": {"mem": {"data": "0x0102", "off": 7}, "push": [], "used": 4}},
            ],
        },
        "traceSchema": [
            {
                "action": {"callType": "call", "from": ADDRESS_A, "to": ADDRESS_B, "gas": "0x10", "input": "0x"},
                "result": {"gasUsed": "0x8", "output": "0xff"},
                "subtraces": 0,
                "traceAddress": [],
                "type": "call",
            }
        ],
    }
    result = TraceResult.from_dict(data)
    assert result.vm_trace.logs[1].ex.mem.data == b"\x01\x02"
    assert result.vm_trace.logs[1].ex.mem.off == 7
    result.process_trace()
    assert [state.opcode for state in result.states()] == ["CALL", "STOP"]
    traces = result.traces()
    assert len(traces) == 1
    assert traces[0].from_address == Address.from_hex(ADDRESS_A)
    assert traces[0].to == Address.from_hex(ADDRESS_B)
    assert traces[0].gas == 0x10
    assert traces[0].gas_used == 0x8
    assert traces[0].output == b"\xff"


def test_trace_properties_follow_action():
    trace = Trace.from_dict({"action": {"hash": HASH_A, "value": "0x5"}, "error": "Reverted"})
    assert trace.hash == Hash.from_hex(HASH_A)
    assert trace.value == 5
    assert trace.parent_hash is None
    assert trace.error == "Reverted"


def test_block_header_missing_nonce_is_zero_bytes():
    header = BlockHeader.from_dict({"number": "0x1"})
    assert header.nonce == bytes(8)


def test_block_header_nonce_bytes():
    header = BlockHeader.from_dict({"nonce": "0x0102030405060708"})
    assert header.nonce == bytes([1, 2, 3, 4, 5, 6, 7, 8])


def test_block_without_transactions():
    block = Block.from_dict({"number": "0x2", "transactions": None})
    assert block.transactions == []
    assert block.number == 2
    assert type(block) is Block


def test_version_info():
    info = VersionInfo.from_dict(
        {"hash": HASH_A, "track": "stable", "version": {"major": 2, "minor": 5, "patch": 13}}
    )
    assert info.track == "stable"
    assert info.version == Version(major=2, minor=5, patch=13)
    assert info.hash == HASH_A