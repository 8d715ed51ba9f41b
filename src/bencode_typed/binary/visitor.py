from __future__ import annotations
from typing import TYPE_CHECKING, Any, Dict, List
from .errors import BencodeError

if TYPE_CHECKING:
    from .decoder import MapReader, SeqReader


class _Exhausted:
    __slots__ = ()

    def __repr__(self) -> str:
        return "EXHAUSTED"

    def __bool__(self) -> bool:
        return False


# Returned by SeqReader.next_element / MapReader.next_key once the terminating 'e' is next.
EXHAUSTED = _Exhausted()


class Visitor:
    """
    Builds one target value from decode events. The decoder calls exactly one
    visit_* method per node. Containers arrive as pull-based readers: the
    visitor must drain them (or stop early and let the decoder reject what is left).
    """

    expecting = "a bencode value"

    def visit_int(self, value: int) -> Any:
        raise self._invalid("integer")

    def visit_bytes(self, value: memoryview) -> Any:
        raise self._invalid("byte string")

    def visit_seq(self, seq: "SeqReader") -> Any:
        raise self._invalid("list")

    def visit_map(self, m: "MapReader") -> Any:
        raise self._invalid("dictionary")

    def _invalid(self, got: str) -> BencodeError:
        return BencodeError.custom(f"invalid type: {got}, expected {self.expecting}")


class AnyVisitor(Visitor):
    """Generic values: int, bytes, list, dict with bytes keys."""

    def __init__(self, *, borrow: bool = False):
        self.borrow = borrow

    def visit_int(self, value: int) -> int:
        return value

    def visit_bytes(self, value: memoryview) -> bytes | memoryview:
        return value if self.borrow else value.tobytes()

    def visit_seq(self, seq: "SeqReader") -> List[Any]:
        return list(seq.elements(self))

    def visit_map(self, m: "MapReader") -> Dict[bytes, Any]:
        out: Dict[bytes, Any] = {}
        for key, value in m.entries(BYTE_KEY, self):
            out[key] = value
        return out


class BytesVisitor(Visitor):
    """Byte strings only, copied out of the input buffer. Also the dictionary key visitor."""

    expecting = "a byte string"

    def visit_bytes(self, value: memoryview) -> bytes:
        return value.tobytes()


BYTE_KEY = BytesVisitor()


class IgnoredAny(Visitor):
    """Consumes one value of any shape and discards it."""

    def visit_int(self, value: int) -> None:
        return None

    def visit_bytes(self, value: memoryview) -> None:
        return None

    def visit_seq(self, seq: "SeqReader") -> None:
        for _ in seq.elements(self):
            pass

    def visit_map(self, m: "MapReader") -> None:
        for _ in m.entries(self, self):
            pass


IGNORED = IgnoredAny()
