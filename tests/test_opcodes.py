import pytest

from ethnode.opcodes import opcode_name


def test_call_and_extcodesize_names():
    assert opcode_name(0xF1) == "CALL"
    assert opcode_name(0x3B) == "EXTCODESIZE"


def test_stop_is_zero():
    assert opcode_name(0x00) == "STOP"


def test_push_range_is_numbered_in_order():
    names = [opcode_name(code) for code in range(0x60, 0x80)]
    assert names == [f"PUSH{n}" for n in range(1, 33)]


def test_dup_and_swap_ranges_are_numbered_in_order():
    assert [opcode_name(code) for code in range(0x80, 0x90)] == [f"DUP{n}" for n in range(1, 17)]
    assert [opcode_name(code) for code in range(0x90, 0xA0)] == [f"SWAP{n}" for n in range(1, 17)]


def test_undefined_opcode_message():
    assert opcode_name(0x0C) == "opcode 0xc not defined"


def test_defined_names_are_unique():
    defined = [opcode_name(code) for code in range(256)]
    known = [name for name in defined if not name.startswith("opcode ")]
    assert len(known) == len(set(known))


@pytest.mark.parametrize("code", [-1, 256])
def test_out_of_range_raises(code):
    with pytest.raises(ValueError):
        opcode_name(code)