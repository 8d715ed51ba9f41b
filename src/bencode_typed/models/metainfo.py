from __future__ import annotations
from pydantic import Field, field_validator, model_validator
from typing import List
from .common import BencodeModel

SHA1_LEN = 20

class FileEntry(BencodeModel):
    length: int = Field(..., ge=0)
    path: List[str] = Field(..., min_length=1)
    md5sum: str | None = None

class Info(BencodeModel):
    name: str
    piece_length: int = Field(..., alias="piece length", gt=0)
    pieces: bytes
    length: int | None = Field(None, ge=0)     # single-file mode
    files: List[FileEntry] | None = None       # multi-file mode
    private: int | None = None
    md5sum: str | None = None

    @field_validator("pieces")
    @classmethod
    def _whole_hashes(cls, v: bytes) -> bytes:
        if len(v) % SHA1_LEN:
            raise ValueError(f"pieces length {len(v)} is not a multiple of {SHA1_LEN}")
        return v

    @model_validator(mode="after")
    def _one_layout(self) -> "Info":
        if (self.length is None) == (self.files is None):
            raise ValueError("exactly one of 'length' or 'files' must be present")
        return self

    @property
    def is_multi_file(self) -> bool:
        return self.files is not None

    @property
    def num_pieces(self) -> int:
        return len(self.pieces) // SHA1_LEN

    @property
    def total_length(self) -> int:
        if self.files is not None:
            return sum(f.length for f in self.files)
        return self.length or 0

    def piece_hash(self, index: int) -> bytes:
        if not (0 <= index < self.num_pieces):
            raise IndexError(f"piece {index} out of range (0..{self.num_pieces - 1})")
        return self.pieces[index * SHA1_LEN:(index + 1) * SHA1_LEN]

class Metainfo(BencodeModel):
    """Top-level dictionary of a .torrent file."""
    announce: str | None = None
    announce_list: List[List[str]] | None = Field(None, alias="announce-list")
    comment: str | None = None
    created_by: str | None = Field(None, alias="created by")
    creation_date: int | None = Field(None, alias="creation date")
    encoding: str | None = None
    url_list: str | List[str] | None = Field(None, alias="url-list")  # one URL or several
    info: Info

    @property
    def trackers(self) -> List[str]:
        """announce-list tiers flattened in order, else the single announce URL."""
        if self.announce_list:
            return [url for tier in self.announce_list for url in tier]
        return [self.announce] if self.announce else []

    @property
    def web_seeds(self) -> List[str]:
        if self.url_list is None:
            return []
        if isinstance(self.url_list, str):
            return [self.url_list]
        return list(self.url_list)
