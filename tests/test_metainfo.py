import pytest

from bencode_typed.binary.errors import MessageError
from bencode_typed.binary.options import DecodeOptions
from bencode_typed.models.metainfo import Metainfo

def bs(s: bytes) -> bytes:
    return str(len(s)).encode("ascii") + b":" + s

def bi(n: int) -> bytes:
    return b"i%de" % n

ANNOUNCE = b"http://tracker.example.org/announce"
PIECES = b"\x01" * 20 + b"\x02" * 20

def single_file_torrent(pieces: bytes = PIECES, extra_info: bytes = b"") -> bytes:
    info = (
        b"d"
        + bs(b"length") + bi(1048576)
        + bs(b"name") + bs(b"file.iso")
        + bs(b"piece length") + bi(524288)
        + bs(b"pieces") + bs(pieces)
        + extra_info
        + b"e"
    )
    return (
        b"d"
        + bs(b"announce") + bs(ANNOUNCE)
        + bs(b"created by") + bs(b"mktorrent 1.1")
        + bs(b"creation date") + bi(1700000000)
        + bs(b"info") + info
        + bs(b"url-list") + bs(b"http://mirror.example/")
        + b"e"
    )

def multi_file_torrent() -> bytes:
    files = (
        b"l"
        + b"d" + bs(b"length") + bi(3) + bs(b"path") + b"l" + bs(b"a") + bs(b"b.txt") + b"e" + b"e"
        + b"d" + bs(b"length") + bi(4) + bs(b"path") + b"l" + bs(b"c.bin") + b"e" + b"e"
        + b"e"
    )
    info = (
        b"d"
        + bs(b"files") + files
        + bs(b"name") + bs(b"bundle")
        + bs(b"piece length") + bi(16384)
        + bs(b"pieces") + bs(b"\x03" * 20)
        + bs(b"private") + bi(1)
        + b"e"
    )
    tiers = b"l" + b"l" + bs(b"udp://a.example:80") + b"e" + b"l" + bs(b"http://b.example/ann") + b"e" + b"e"
    return (
        b"d"
        + bs(b"announce") + bs(ANNOUNCE)
        + bs(b"announce-list") + tiers
        + bs(b"info") + info
        + bs(b"url-list") + b"l" + bs(b"http://m1.example/") + bs(b"http://m2.example/") + b"e"
        + b"e"
    )


def test_single_file_torrent():
    m = Metainfo.from_bencode(single_file_torrent())
    assert m.announce == ANNOUNCE.decode()
    assert m.created_by == "mktorrent 1.1"
    assert m.creation_date == 1700000000
    assert m.comment is None
    assert m.info.name == "file.iso"
    assert m.info.piece_length == 524288
    assert not m.info.is_multi_file
    assert m.info.total_length == 1048576
    assert m.info.num_pieces == 2
    assert m.info.piece_hash(1) == b"\x02" * 20
    assert m.trackers == [ANNOUNCE.decode()]
    assert m.web_seeds == ["http://mirror.example/"]

def test_canonical_torrent_passes_strict_mode():
    m = Metainfo.from_bencode(single_file_torrent(), options=DecodeOptions(strict=True))
    assert m.info.num_pieces == 2

def test_multi_file_torrent():
    m = Metainfo.from_bencode(multi_file_torrent())
    assert m.info.is_multi_file
    assert [f.path for f in m.info.files] == [["a", "b.txt"], ["c.bin"]]
    assert m.info.total_length == 7
    assert m.info.private == 1
    assert m.trackers == ["udp://a.example:80", "http://b.example/ann"]
    assert m.web_seeds == ["http://m1.example/", "http://m2.example/"]

def test_piece_hash_out_of_range():
    m = Metainfo.from_bencode(single_file_torrent())
    with pytest.raises(IndexError):
        m.info.piece_hash(2)

def test_truncated_pieces_rejected():
    with pytest.raises(MessageError) as ei:
        Metainfo.from_bencode(single_file_torrent(pieces=b"\x00" * 19))
    assert "multiple of 20" in str(ei.value)

def test_length_and_files_are_exclusive():
    extra = bs(b"files") + b"le"
    # keys stay unsorted here on purpose; the lenient decoder accepts them
    with pytest.raises(MessageError) as ei:
        Metainfo.from_bencode(single_file_torrent(extra_info=extra))
    assert "exactly one of" in str(ei.value)

def test_missing_info():
    with pytest.raises(MessageError):
        Metainfo.from_bencode(b"d" + bs(b"announce") + bs(ANNOUNCE) + b"e")
