from __future__ import annotations

import logging
from typing import Any, Iterator, Optional, Tuple, Union

from .codecs.cursor import Cursor
from .codecs.tokens import (
    TOKEN_DICT,
    TOKEN_END,
    TOKEN_INTEGER,
    TOKEN_LIST,
    is_digit,
    parse_byte_string,
    parse_integer_token,
)
from .errors import BencodeError, ErrorKind
from .options import DEFAULT_OPTIONS, DecodeOptions
from .visitor import EXHAUSTED, AnyVisitor, Visitor

log = logging.getLogger(__name__)

BytesLike = Union[bytes, bytearray, memoryview]


class Decoder:
    """
    Single-pass, type-directed bencode decoder.

    The parse path is picked from the next wire byte, never from what the
    visitor would like to receive: 'i' integer, digit byte string, 'l' list,
    'd' dictionary. Lists and dictionaries hand the visitor a reader whose
    pulls re-enter decode_any; that mutual recursion is the only stack.
    """

    __slots__ = ("cur", "options", "depth")

    def __init__(self, data: BytesLike, options: Optional[DecodeOptions] = None):
        self.cur = Cursor(data)
        self.options = options or DEFAULT_OPTIONS
        self.depth = 0

    # -----------------------------
    # Dispatch
    # -----------------------------

    def decode_any(self, visitor: Visitor) -> Any:
        b = self.cur.peek()
        if b == TOKEN_INTEGER:
            return self.decode_int(visitor)
        if is_digit(b):
            return self.decode_bytes(visitor)
        if b == TOKEN_LIST:
            return self.decode_list(visitor)
        if b == TOKEN_DICT:
            return self.decode_dict(visitor)
        raise BencodeError(ErrorKind.SYNTAX, self.cur.tell(), f"invalid bencode prefix byte {bytes([b])!r}")

    def decode_int(self, visitor: Visitor) -> Any:
        opts = self.options
        return visitor.visit_int(parse_integer_token(self.cur, strict=opts.strict, int_bits=opts.int_bits))

    def decode_bytes(self, visitor: Visitor) -> Any:
        return visitor.visit_bytes(parse_byte_string(self.cur, strict=self.options.strict))

    def decode_list(self, visitor: Visitor) -> Any:
        start = self.cur.tell()
        if self.cur.advance() != TOKEN_LIST:
            raise BencodeError(ErrorKind.EXPECTED_LIST, start)
        self._enter(start)
        try:
            value = visitor.visit_seq(SeqReader(self))
        finally:
            self.depth -= 1
        end = self.cur.tell()
        if self.cur.advance() != TOKEN_END:
            raise BencodeError(ErrorKind.EXPECTED_LIST_END, end)
        return value

    def decode_dict(self, visitor: Visitor) -> Any:
        start = self.cur.tell()
        if self.cur.advance() != TOKEN_DICT:
            raise BencodeError(ErrorKind.EXPECTED_DICT, start)
        self._enter(start)
        try:
            value = visitor.visit_map(MapReader(self))
        finally:
            self.depth -= 1
        end = self.cur.tell()
        if self.cur.advance() != TOKEN_END:
            raise BencodeError(ErrorKind.EXPECTED_DICT_END, end)
        return value

    def end(self) -> None:
        """Top-level check: exactly one value, nothing after it."""
        if not self.cur.at_end():
            raise BencodeError(
                ErrorKind.TRAILING_CHARACTERS,
                self.cur.tell(),
                f"unexpected trailing characters: {self.cur.remaining()} bytes",
            )

    def _enter(self, offset: int) -> None:
        if self.depth >= self.options.max_depth:
            raise BencodeError(
                ErrorKind.DEPTH_EXCEEDED, offset, f"nesting deeper than {self.options.max_depth} levels"
            )
        self.depth += 1


# -----------------------------
# Pull-based drivers
# -----------------------------

class SeqReader:
    """Hands list elements to a visitor one pull at a time."""

    __slots__ = ("de",)

    def __init__(self, de: Decoder):
        self.de = de

    def next_element(self, visitor: Visitor) -> Any:
        """Decode the next element with `visitor`, or return EXHAUSTED (the 'e' is left for the decoder)."""
        if self.de.cur.peek() == TOKEN_END:
            return EXHAUSTED
        return self.de.decode_any(visitor)

    def elements(self, visitor: Visitor) -> Iterator[Any]:
        while True:
            item = self.next_element(visitor)
            if item is EXHAUSTED:
                return
            yield item


class MapReader:
    """
    Hands dictionary entries to a visitor: next_key, then exactly one
    next_value for that key. In strict mode every key must be a byte string
    sorting strictly after the previous one.
    """

    __slots__ = ("de", "_pending", "_last_key")

    def __init__(self, de: Decoder):
        self.de = de
        self._pending = False
        self._last_key: Optional[bytes] = None

    def next_key(self, visitor: Visitor) -> Any:
        cur = self.de.cur
        if self._pending:
            raise BencodeError.custom("next_key called before the previous key's value was read")
        if cur.peek() == TOKEN_END:
            return EXHAUSTED
        if self.de.options.strict:
            self._check_key_order()
        key = self.de.decode_any(visitor)
        self._pending = True
        return key

    def next_value(self, visitor: Visitor) -> Any:
        if not self._pending:
            raise BencodeError.custom("next_value called without a pending key")
        self._pending = False
        return self.de.decode_any(visitor)

    def entries(self, key_visitor: Visitor, value_visitor: Visitor) -> Iterator[Tuple[Any, Any]]:
        while True:
            key = self.next_key(key_visitor)
            if key is EXHAUSTED:
                return
            yield key, self.next_value(value_visitor)

    def _check_key_order(self) -> None:
        # Look ahead at the raw key, then rewind so the visitor sees it normally.
        cur = self.de.cur
        start = cur.tell()
        if not is_digit(cur.peek()):
            raise BencodeError(ErrorKind.SYNTAX, start, "dictionary key must be a byte string")
        raw = parse_byte_string(cur, strict=True).tobytes()
        cur.seek(start)
        if self._last_key is not None and raw <= self._last_key:
            raise BencodeError(
                ErrorKind.NON_LEXICOGRAPHICAL, start, f"key {raw!r} does not sort after {self._last_key!r}"
            )
        self._last_key = raw


# -----------------------------
# Entry point
# -----------------------------

def from_bytes(data: BytesLike, visitor: Optional[Visitor] = None, *, options: Optional[DecodeOptions] = None) -> Any:
    """
    Decode exactly one bencoded value filling all of `data`.
    `visitor` decides what gets built; the default builds plain Python values.
    """
    de = Decoder(data, options)
    log.debug("decoding %d bytes", len(de.cur.buf))
    try:
        value = de.decode_any(visitor if visitor is not None else AnyVisitor())
        de.end()
    except BencodeError as e:
        log.debug("decode failed: %s", e)
        raise
    log.debug("decoded %s", type(value).__name__)
    return value
