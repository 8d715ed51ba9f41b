from __future__ import annotations
from bencode_typed.binary.errors import BencodeError, ErrorKind

class Cursor:
    """
    Read-only window over the undecoded suffix of a buffer. Contiguous input
    is never copied; a strided view is flattened into bytes once up front.
    """

    __slots__ = ("buf", "pos")

    def __init__(self, data: bytes | bytearray | memoryview):
        view = memoryview(data)
        if not view.c_contiguous:
            view = memoryview(view.tobytes())
        if view.format != "B" or view.ndim != 1:
            view = view.cast("B")
        self.buf = view.toreadonly()
        self.pos = 0

    def remaining(self) -> int: return len(self.buf) - self.pos
    def tell(self) -> int: return self.pos
    def at_end(self) -> bool: return self.pos >= len(self.buf)

    def seek(self, pos: int) -> None:
        if not (0 <= pos <= len(self.buf)): raise ValueError("seek out of bounds")
        self.pos = pos

    def peek(self) -> int:
        if self.pos >= len(self.buf): raise BencodeError(ErrorKind.EOF, self.pos)
        return self.buf[self.pos]

    def advance(self) -> int:
        b = self.peek()
        self.pos += 1
        return b

    def take(self, n: int) -> memoryview:
        end = self.pos + n
        if n < 0 or end > len(self.buf): raise BencodeError(ErrorKind.EOF, self.pos)
        out = self.buf[self.pos:end]
        self.pos = end
        return out
