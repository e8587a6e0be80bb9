"""Core value types and hex encoding helpers for the Ethereum JSON-RPC interface."""

from __future__ import annotations

import string
from dataclasses import dataclass
from typing import ClassVar

from Crypto.Hash import keccak

_HEX_DIGITS = frozenset(string.hexdigits)
_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1


def _check_hex_digits(body: str) -> None:
    if not all(char in _HEX_DIGITS for char in body):
        raise ValueError("invalid hex string")


def _loose_hex_bytes(value: str) -> bytes:
    text = value[2:] if value.startswith(("0x", "0X")) else value
    if len(text) % 2:
        text = "0" + text
    _check_hex_digits(text)
    return bytes.fromhex(text)


def decode_hex(value: str) -> bytes:
    """Decode a 0x-prefixed hex string with an even number of digits."""
    if not isinstance(value, str):
        raise TypeError("hex value must be a string")
    if value == "":
        raise ValueError("empty hex string")
    if not value.startswith(("0x", "0X")):
        raise ValueError("hex string without 0x prefix")
    body = value[2:]
    if len(body) % 2:
        raise ValueError("hex string of odd length")
    _check_hex_digits(body)
    return bytes.fromhex(body)


def encode_hex(data: bytes) -> str:
    """Encode bytes as a 0x-prefixed lower-case hex string."""
    return "0x" + bytes(data).hex()


def parse_quantity(value: str) -> int:
    """Decode a JSON-RPC quantity: 0x-prefixed hex without leading zeros, at most 256 bits."""
    if not isinstance(value, str):
        raise TypeError("quantity must be a string")
    if not value.startswith(("0x", "0X")):
        raise ValueError("hex string without 0x prefix")
    body = value[2:]
    if not body:
        raise ValueError('hex string "0x"')
    if len(body) > 1 and body[0] == "0":
        raise ValueError("hex number with leading zero digits")
    if len(body) > 64:
        raise ValueError("hex number > 256 bits")
    _check_hex_digits(body)
    return int(body, 16)


def encode_quantity(value: int) -> str:
    """Encode an integer as a JSON-RPC quantity."""
    if value < 0:
        return f"-0x{-value:x}"
    return f"0x{value:x}"


def parse_number(value: str) -> int:
    """Parse a 64-bit signed block number string, honouring 0x, 0o, 0b and leading-0 octal prefixes."""
    if not isinstance(value, str):
        raise TypeError("number must be a JSON string")
    sign = 1
    body = value
    if body[:1] in ("+", "-"):
        sign = -1 if body[0] == "-" else 1
        body = body[1:]
    lowered = body.lower()
    if lowered.startswith("0x"):
        base, digits = 16, body[2:]
    elif lowered.startswith("0b"):
        base, digits = 2, body[2:]
    elif lowered.startswith("0o"):
        base, digits = 8, body[2:]
    elif body.startswith("0") and len(body) > 1:
        base, digits = 8, body[1:]
    else:
        base, digits = 10, body
    if not digits or not all(char.isalnum() or char == "_" for char in digits):
        raise ValueError(f'invalid number "{value}"')
    try:
        number = sign * int(digits, base)
    except ValueError:
        raise ValueError(f'invalid number "{value}"') from None
    if not _INT64_MIN <= number <= _INT64_MAX:
        raise ValueError(f'number "{value}" out of range')
    return number


@dataclass(frozen=True)
class _FixedBytes:
    value: bytes = b""
    _size: ClassVar[int] = 0

    def __post_init__(self) -> None:
        raw = bytes(self.value)[-self._size:] if self.value else b""
        object.__setattr__(self, "value", raw.rjust(self._size, b"\x00"))

    def __str__(self) -> str:
        return self.hex()  # type: ignore[attr-defined]

    def __bytes__(self) -> bytes:
        return self.value


@dataclass(frozen=True)
class Hash(_FixedBytes):
    """A 32-byte hash; longer input keeps its last 32 bytes, shorter is left-padded."""

    _size: ClassVar[int] = 32

    @classmethod
    def from_hex(cls, value: str) -> "Hash":
        """Build from hex text; a 0x prefix is optional and odd lengths are left-padded."""
        return cls(_loose_hex_bytes(value))

    def hex(self) -> str:
        """Return the 0x-prefixed hex form."""
        return encode_hex(self.value)


@dataclass(frozen=True)
class Address(_FixedBytes):
    """A 20-byte account address."""

    _size: ClassVar[int] = 20

    @classmethod
    def from_hex(cls, value: str) -> "Address":
        """Build from hex text; a 0x prefix is optional and odd lengths are left-padded."""
        return cls(_loose_hex_bytes(value))

    def hex(self) -> str:
        """Return the mixed-case checksummed hex form."""
        lower = self.value.hex()
        digest = keccak.new(digest_bits=256, data=lower.encode("ascii")).hexdigest()
        return "0x" + "".join(
            char.upper() if char.isalpha() and int(nibble, 16) >= 8 else char
            for char, nibble in zip(lower, digest)
        )