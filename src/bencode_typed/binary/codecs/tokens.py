from __future__ import annotations
from typing import Optional
from .cursor import Cursor
from bencode_typed.binary.errors import BencodeError, ErrorKind

# Wire tokens (byte values, as memoryview indexing yields ints)
TOKEN_INTEGER = ord("i")
TOKEN_LIST = ord("l")
TOKEN_DICT = ord("d")
TOKEN_END = ord("e")
TOKEN_COLON = ord(":")
TOKEN_MINUS = ord("-")
DIGIT_0 = ord("0")
DIGIT_9 = ord("9")


def is_digit(b: int) -> bool:
    return DIGIT_0 <= b <= DIGIT_9


def check_width(value: int, bits: Optional[int], offset: int) -> int:
    """Reject values outside the signed `bits`-wide range. `bits=None` means unbounded."""
    if bits is None:
        return value
    limit = 1 << (bits - 1)
    if not (-limit <= value < limit):
        raise BencodeError(ErrorKind.INTEGER_OVERFLOW, offset, f"integer {value} does not fit in i{bits}")
    return value


def parse_unsigned(cur: Cursor, *, strict: bool = False) -> int:
    """
    Maximal run of ASCII digits (at least one). With `strict`, a leading zero
    is only accepted for the literal 0.
    """
    start = cur.tell()
    first = cur.advance()
    if not is_digit(first):
        raise BencodeError(ErrorKind.EXPECTED_INTEGER, start)
    value = first - DIGIT_0
    while not cur.at_end() and is_digit(cur.peek()):
        if strict and value == 0:
            raise BencodeError(ErrorKind.LEADING_ZERO, start)
        value = value * 10 + (cur.advance() - DIGIT_0)
    return value


def parse_signed(cur: Cursor, *, strict: bool = False) -> int:
    start = cur.tell()
    negative = cur.peek() == TOKEN_MINUS
    if negative:
        cur.advance()
    value = parse_unsigned(cur, strict=strict)
    if negative:
        if strict and value == 0:
            raise BencodeError(ErrorKind.NEGATIVE_ZERO, start)
        value = -value
    return value


def parse_integer_token(cur: Cursor, *, strict: bool = False, int_bits: Optional[int] = 64) -> int:
    """`i<signed>e`"""
    start = cur.tell()
    if cur.advance() != TOKEN_INTEGER:
        raise BencodeError(ErrorKind.EXPECTED_I, start)
    value = parse_signed(cur, strict=strict)
    end = cur.tell()
    if cur.advance() != TOKEN_END:
        raise BencodeError(ErrorKind.EXPECTED_E, end)
    return check_width(value, int_bits, start)


def parse_byte_string(cur: Cursor, *, strict: bool = False) -> memoryview:
    """
    `<len>:<bytes>`. Returns a slice of the cursor's buffer (no copy).
    The length is checked against the remaining input before slicing.
    """
    start = cur.tell()
    length = parse_unsigned(cur, strict=strict)
    colon = cur.tell()
    if cur.advance() != TOKEN_COLON:
        raise BencodeError(ErrorKind.EXPECTED_COLON, colon)
    if length > cur.remaining():
        raise BencodeError(
            ErrorKind.LENGTH_OUT_OF_BOUNDS,
            start,
            f"byte string length {length} exceeds remaining {cur.remaining()} bytes",
        )
    return cur.take(length)
