from __future__ import annotations

import collections.abc
import types
from enum import Enum
from typing import Annotated, Any, Dict, List, Optional, Tuple, Union, get_args, get_origin

from pydantic import AliasChoices, BaseModel, ValidationError
from pydantic.fields import FieldInfo

from bencode_typed.binary.decoder import BytesLike, MapReader, SeqReader, from_bytes
from bencode_typed.binary.errors import BencodeError
from bencode_typed.binary.options import DecodeOptions
from bencode_typed.binary.visitor import BYTE_KEY, EXHAUSTED, IGNORED, AnyVisitor, BytesVisitor, Visitor

_SEQUENCES = (list, collections.abc.Sequence, collections.abc.MutableSequence)
_MAPPINGS = (dict, collections.abc.Mapping, collections.abc.MutableMapping)


class IntVisitor(Visitor):
    expecting = "an integer"

    def visit_int(self, value: int) -> int:
        return value


class BorrowedBytesVisitor(Visitor):
    """Keeps the view into the input buffer instead of copying."""

    expecting = "a byte string"

    def visit_bytes(self, value: memoryview) -> memoryview:
        return value


class StrVisitor(Visitor):
    expecting = "a utf-8 string"

    def visit_bytes(self, value: memoryview) -> str:
        try:
            return str(value, "utf-8")
        except UnicodeDecodeError as e:
            raise BencodeError.custom(f"invalid utf-8 in byte string: {e.reason}") from e


class ListVisitor(Visitor):
    expecting = "a list"

    def __init__(self, item: Visitor, *, factory=list):
        self.item = item
        self.factory = factory

    def visit_seq(self, seq: SeqReader):
        return self.factory(seq.elements(self.item))


class TupleVisitor(Visitor):
    """Fixed-size heterogeneous list. Extra elements are left for the decoder to reject."""

    def __init__(self, items: List[Visitor]):
        self.items = items
        self.expecting = f"a tuple of size {len(items)}"

    def visit_seq(self, seq: SeqReader) -> tuple:
        out = []
        for i, v in enumerate(self.items):
            x = seq.next_element(v)
            if x is EXHAUSTED:
                raise BencodeError.custom(f"invalid length {i}, expected {self.expecting}")
            out.append(x)
        return tuple(out)


class DictVisitor(Visitor):
    expecting = "a dictionary"

    def __init__(self, key: Visitor, value: Visitor):
        self.key = key
        self.value = value

    def visit_map(self, m: MapReader) -> dict:
        out = {}
        for key, value in m.entries(self.key, self.value):
            try:
                out[key] = value
            except TypeError as e:
                raise BencodeError.custom(f"unusable dictionary key {key!r}: {e}") from e
        return out


class UnionVisitor(Visitor):
    """Routes each event to the first member that accepts that kind of node."""

    def __init__(self, members: List[Visitor]):
        self.members = members
        self.expecting = " or ".join(m.expecting for m in members)

    def _pick(self, method: str) -> Optional[Visitor]:
        for m in self.members:
            if getattr(type(m), method) is not getattr(Visitor, method):
                return m
        return None

    def visit_int(self, value):
        m = self._pick("visit_int")
        return m.visit_int(value) if m else super().visit_int(value)

    def visit_bytes(self, value):
        m = self._pick("visit_bytes")
        return m.visit_bytes(value) if m else super().visit_bytes(value)

    def visit_seq(self, seq):
        m = self._pick("visit_seq")
        return m.visit_seq(seq) if m else super().visit_seq(seq)

    def visit_map(self, m):
        v = self._pick("visit_map")
        return v.visit_map(m) if v else super().visit_map(m)


class ModelVisitor(Visitor):
    """
    Builds a pydantic model from a dictionary. Keys are matched against field
    aliases (or names); unknown keys are skipped, repeated keys rejected, and
    the collected values go through model_validate so defaults, constraints
    and validators all apply.
    """

    def __init__(self, model: type[BaseModel]):
        self.model = model
        self.expecting = f"a dictionary for {model.__name__}"
        self._fields: Optional[Dict[str, Tuple[str, Visitor]]] = None

    @property
    def fields(self) -> Dict[str, Tuple[str, Visitor]]:
        """Wire key -> (field name, visitor). Several keys may map to one field."""
        # built lazily so self-referencing models don't recurse forever
        if self._fields is None:
            by_name = _accepts_field_names(self.model)
            fields: Dict[str, Tuple[str, Visitor]] = {}
            for name, info in self.model.model_fields.items():
                entry = (name, visitor_for(info.annotation))
                for key in _wire_keys(name, info, by_name):
                    fields.setdefault(key, entry)
            self._fields = fields
        return self._fields

    def visit_map(self, m: MapReader) -> BaseModel:
        fields = self.fields
        values: Dict[str, Any] = {}
        seen: Dict[str, str] = {}
        while True:
            raw = m.next_key(BYTE_KEY)
            if raw is EXHAUSTED:
                break
            try:
                key = raw.decode("utf-8")
            except UnicodeDecodeError:
                key = None
            entry = fields.get(key) if key is not None else None
            if entry is None:
                m.next_value(IGNORED)
                continue
            name, fv = entry
            if name in seen:
                raise BencodeError.custom(f"duplicate field `{key}` (already set by `{seen[name]}`)")
            seen[name] = key
            values[key] = m.next_value(fv)

        try:
            return self.model.model_validate(values)
        except ValidationError as e:
            raise BencodeError.custom(f"invalid {self.model.__name__}: {e}") from e


def _accepts_field_names(model: type[BaseModel]) -> bool:
    cfg = model.model_config
    return bool(cfg.get("populate_by_name") or cfg.get("validate_by_name"))


def _wire_keys(name: str, info: FieldInfo, by_name: bool) -> List[str]:
    """Dictionary keys model_validate will accept for one field, preferred first."""
    va = info.validation_alias
    if isinstance(va, str):
        keys = [va]
    elif isinstance(va, AliasChoices):
        # AliasPath choices address nested data and have no single wire key
        keys = [c for c in va.choices if isinstance(c, str)]
    else:
        keys = [info.alias or name]
    if by_name and name not in keys:
        keys.append(name)
    return keys


def visitor_for(tp: Any) -> Visitor:
    """Visitor that decodes a value of type `tp`."""
    if tp is Any or tp is object:
        return AnyVisitor()
    if tp is bool:
        raise TypeError("bencode has no boolean type")
    if tp is int:
        return IntVisitor()
    if tp is bytes:
        return BytesVisitor()
    if tp is memoryview:
        return BorrowedBytesVisitor()
    if tp is str:
        return StrVisitor()
    if tp in (list, tuple):
        return ListVisitor(AnyVisitor(), factory=tp)
    if tp is dict:
        return DictVisitor(BytesVisitor(), AnyVisitor())
    if isinstance(tp, type):
        if issubclass(tp, Enum):
            # bencode has no tagged-union convention to map variants onto
            raise TypeError(f"enum decoding is not supported: {tp.__name__}")
        if issubclass(tp, BaseModel):
            return ModelVisitor(tp)

    origin = get_origin(tp)
    args = get_args(tp)

    if origin is Annotated:
        return visitor_for(args[0])
    if origin in _SEQUENCES:
        return ListVisitor(visitor_for(args[0]) if args else AnyVisitor())
    if origin is tuple:
        if len(args) == 2 and args[1] is Ellipsis:
            return ListVisitor(visitor_for(args[0]), factory=tuple)
        return TupleVisitor([visitor_for(a) for a in args])
    if origin in _MAPPINGS:
        if not args:
            return DictVisitor(BYTE_KEY, AnyVisitor())
        key = BYTE_KEY if args[0] is Any else visitor_for(args[0])
        return DictVisitor(key, visitor_for(args[1]))
    if origin is Union or origin is types.UnionType:
        members = [a for a in args if a is not type(None)]
        if len(members) == 1:
            return visitor_for(members[0])
        return UnionVisitor([visitor_for(a) for a in members])

    raise TypeError(f"unsupported target type: {tp!r}")


def decode(data: BytesLike, target: Any = Any, *, options: DecodeOptions | None = None) -> Any:
    """Decode `data` into an instance of `target` (a type annotation or pydantic model)."""
    return from_bytes(data, visitor_for(target), options=options)
