from __future__ import annotations
from pydantic import BaseModel, ConfigDict
from bencode_typed.binary.options import DecodeOptions

class BencodeModel(BaseModel):
    # memoryview fields keep borrowed views into the decoded buffer
    model_config = ConfigDict(arbitrary_types_allowed=True)

    @classmethod
    def from_bencode(cls, data: bytes | bytearray | memoryview, *, options: DecodeOptions | None = None):
        from .adapter import decode
        return decode(data, cls, options=options)
