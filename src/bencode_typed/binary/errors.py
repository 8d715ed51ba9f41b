from __future__ import annotations
from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    MESSAGE = "message"

    # integer
    NEGATIVE_ZERO = "negative_zero"
    NON_ASCII = "non_ascii"
    EXPECTED_INTEGER = "expected_integer"
    EXPECTED_I = "expected_i"
    EXPECTED_E = "expected_e"
    INTEGER_OVERFLOW = "integer_overflow"
    LEADING_ZERO = "leading_zero"

    # bytes
    ZERO_LENGTH = "zero_length"
    NEGATIVE_LENGTH = "negative_length"
    EXPECTED_COLON = "expected_colon"
    LENGTH_OUT_OF_BOUNDS = "length_out_of_bounds"

    # dictionary
    NON_LEXICOGRAPHICAL = "non_lexicographical"
    EXPECTED_DICT = "expected_dict"
    EXPECTED_DICT_END = "expected_dict_end"

    # list
    EXPECTED_LIST = "expected_list"
    EXPECTED_LIST_END = "expected_list_end"

    DEPTH_EXCEEDED = "depth_exceeded"
    TRAILING_CHARACTERS = "trailing_characters"
    EOF = "eof"
    SYNTAX = "syntax"


# NON_ASCII, ZERO_LENGTH and NEGATIVE_LENGTH are declared for future policy; nothing raises them yet.
_MESSAGES = {
    ErrorKind.NEGATIVE_ZERO: "disallowed negative zero",
    ErrorKind.NON_ASCII: "disallowed non-ascii character",
    ErrorKind.EXPECTED_INTEGER: "expected an integer",
    ErrorKind.EXPECTED_I: "expected 'i' at start of integer",
    ErrorKind.EXPECTED_E: "expected 'e' at end of integer",
    ErrorKind.INTEGER_OVERFLOW: "integer does not fit the configured width",
    ErrorKind.LEADING_ZERO: "disallowed leading zero",
    ErrorKind.ZERO_LENGTH: "disallowed zero-length byte string",
    ErrorKind.NEGATIVE_LENGTH: "disallowed negative length byte string",
    ErrorKind.EXPECTED_COLON: "expected a colon between length and string",
    ErrorKind.LENGTH_OUT_OF_BOUNDS: "byte string length exceeds remaining input",
    ErrorKind.NON_LEXICOGRAPHICAL: "keys not lexicographically sorted",
    ErrorKind.EXPECTED_DICT: "expected 'd' at start of dictionary",
    ErrorKind.EXPECTED_DICT_END: "expected 'e' at end of dictionary",
    ErrorKind.EXPECTED_LIST: "expected 'l' at start of list",
    ErrorKind.EXPECTED_LIST_END: "expected 'e' at end of list",
    ErrorKind.DEPTH_EXCEEDED: "nesting depth limit exceeded",
    ErrorKind.TRAILING_CHARACTERS: "unexpected trailing characters",
    ErrorKind.EOF: "unexpected end of input",
    ErrorKind.SYNTAX: "invalid bencode prefix byte",
}


class BencodeError(ValueError):
    """Decode failure. `kind` says what went wrong, `offset` where (when known)."""

    def __init__(self, kind: ErrorKind, offset: Optional[int] = None, detail: str | None = None):
        self.kind = kind
        self.offset = offset
        self.detail = detail
        super().__init__(self._render())

    def _render(self) -> str:
        msg = self.detail or _MESSAGES.get(self.kind, self.kind.value)
        if self.offset is not None:
            return f"{msg} (at byte {self.offset})"
        return msg

    @classmethod
    def custom(cls, msg: object) -> "MessageError":
        return MessageError(str(msg))


class MessageError(BencodeError):
    """Semantic failure reported by a visitor (schema mismatch, missing field, ...)."""

    def __init__(self, msg: str, offset: Optional[int] = None):
        super().__init__(ErrorKind.MESSAGE, offset, msg)
