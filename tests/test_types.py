import pytest

from ethnode.types import (
    Address,
    Hash,
    decode_hex,
    encode_hex,
    encode_quantity,
    parse_number,
    parse_quantity,
)


def test_hash_from_hex_pads_left():
    h = Hash.from_hex("0x01")
    assert h.value == b"\x00" * 31 + b"\x01"
    assert h.hex() == "0x" + "00" * 31 + "01"


def test_hash_crops_to_last_bytes():
    h = Hash.from_hex("0x" + "cd" + "ab" * 32)
    assert h.value == bytes.fromhex("ab" * 32)


def test_hash_odd_length_and_no_prefix():
    assert Hash.from_hex("1") == Hash.from_hex("0x01")
    assert Hash.from_hex("abc").value[-2:] == b"\x0a\xbc"


def test_hash_default_is_zero():
    assert Hash() == Hash(b"\x00" * 32)
    assert len(Hash().value) == 32


def test_hash_round_trip():
    text = "0x" + "0123456789abcdef" * 4
    assert Hash.from_hex(text).hex() == text
    assert str(Hash.from_hex(text)) == text


def test_hash_invalid_digits():
    with pytest.raises(ValueError):
        Hash.from_hex("0xzz")


def test_address_checksum_vector():
    address = Address.from_hex("0x5aaeb6053f3e94c9b9a09f33669435e7ef1beaed")
    assert address.hex() == "0x5aAeb6053F3E94C9b9A09f33669435E7Ef1BeAed"


def test_address_checksum_round_trip_is_case_insensitive():
    address = Address.from_hex("0x" + "fb6916095ca1df60bb79ce92ce3ea74c37c5d359")
    assert Address.from_hex(address.hex()) == address
    assert address.hex().lower() == "0x" + "fb6916095ca1df60bb79ce92ce3ea74c37c5d359"
    assert len(bytes(address)) == 20


def test_parse_number_bases():
    assert parse_number("10") == 10
    assert parse_number("0x1f") == 0x1F
    assert parse_number("0b101") == 0b101
    assert parse_number("0o17") == 0o17
    assert parse_number("017") == 0o17
    assert parse_number("-0x10") == -0x10


def test_parse_number_errors():
    with pytest.raises(ValueError):
        parse_number("abc")
    with pytest.raises(ValueError):
        parse_number("0x")
    with pytest.raises(ValueError):
        parse_number("0x8000000000000000")
    with pytest.raises(ValueError):
        parse_number(" 12")
    with pytest.raises(TypeError):
        parse_number(12)


def test_parse_number_round_trips_encode():
    for value in (0, 1, 255, 2**63 - 1, -(2**63)):
        assert parse_number(encode_quantity(value)) == value


def test_quantity_round_trip():
    for value in (0, 1, 0xDEADBEEF, 2**256 - 1):
        assert parse_quantity(encode_quantity(value)) == value


def test_encode_quantity_zero_and_negative():
    assert encode_quantity(0) == "0x0"
    assert encode_quantity(-5) == "-0x5"


@pytest.mark.parametrize("bad", ["10", "0x", "0x01", "0xzz", "0x" + "f" * 65])
def test_parse_quantity_rejects(bad):
    with pytest.raises(ValueError):
        parse_quantity(bad)


def test_parse_quantity_requires_string():
    with pytest.raises(TypeError):
        parse_quantity(None)


def test_decode_hex_round_trip():
    data = bytes(range(20))
    assert decode_hex(encode_hex(data)) == data
    assert decode_hex("0x") == b""


@pytest.mark.parametrize("bad", ["", "00", "0x1", "0xgg", "0x 1"])
def test_decode_hex_rejects(bad):
    with pytest.raises(ValueError):
        decode_hex(bad)