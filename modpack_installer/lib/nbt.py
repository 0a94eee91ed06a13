"""Minimal NBT (Named Binary Tag) codec.

Writes the uncompressed, big-endian form the game client reads for files such
as ``servers.dat``. Strings use Java's modified UTF-8, so NUL and characters
outside the BMP round-trip the same way the client encodes them.

A tree is built from :class:`Tag` nodes. Compound values are mappings of
name -> Tag (insertion order is kept on disk). List values are sequences of
Tag nodes of one kind; when ``element_kind`` is declared, raw payload values
are accepted too and checked against that kind.
"""

from __future__ import annotations

import enum
import numbers
import struct
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from ..errors import EncodingError


class TagType(enum.IntEnum):
    END = 0
    BYTE = 1
    SHORT = 2
    INT = 3
    LONG = 4
    FLOAT = 5
    DOUBLE = 6
    BYTE_ARRAY = 7
    STRING = 8
    LIST = 9
    COMPOUND = 10
    INT_ARRAY = 11
    LONG_ARRAY = 12


_SCALAR_FORMATS = {
    TagType.BYTE: ">b",
    TagType.SHORT: ">h",
    TagType.INT: ">i",
    TagType.LONG: ">q",
    TagType.FLOAT: ">f",
    TagType.DOUBLE: ">d",
}

_ARRAY_FORMATS = {
    TagType.BYTE_ARRAY: ">b",
    TagType.INT_ARRAY: ">i",
    TagType.LONG_ARRAY: ">q",
}

_MAX_STRING_BYTES = 0xFFFF


@dataclass(frozen=True)
class Tag:
    kind: TagType
    value: Any
    element_kind: Optional[TagType] = None


def string_tag(value: str) -> Tag:
    return Tag(TagType.STRING, value)


def compound_tag(children: Mapping[str, Tag]) -> Tag:
    return Tag(TagType.COMPOUND, dict(children))


def list_tag(items: Sequence[Any], element_kind: Optional[TagType] = None) -> Tag:
    return Tag(TagType.LIST, list(items), element_kind)


# -------- modified UTF-8 --------

def _encode_mutf8(text: str) -> bytes:
    out = bytearray()
    data = text.encode("utf-16-be", "surrogatepass")
    for i in range(0, len(data), 2):
        c = (data[i] << 8) | data[i + 1]
        if 0 < c < 0x80:
            out.append(c)
        elif c < 0x800:
            out += bytes((0xC0 | (c >> 6), 0x80 | (c & 0x3F)))
        else:
            out += bytes((0xE0 | (c >> 12), 0x80 | ((c >> 6) & 0x3F), 0x80 | (c & 0x3F)))
    return bytes(out)


def _decode_mutf8(data: bytes) -> str:
    units: List[int] = []
    i = 0
    try:
        while i < len(data):
            b = data[i]
            if b < 0x80:
                units.append(b)
                i += 1
            elif b & 0xE0 == 0xC0:
                units.append(((b & 0x1F) << 6) | (data[i + 1] & 0x3F))
                i += 2
            elif b & 0xF0 == 0xE0:
                units.append(((b & 0x0F) << 12) | ((data[i + 1] & 0x3F) << 6) | (data[i + 2] & 0x3F))
                i += 3
            else:
                raise EncodingError(f"Invalid modified UTF-8 lead byte 0x{b:02x}")
    except IndexError:
        raise EncodingError("Truncated modified UTF-8 sequence") from None
    raw = b"".join(struct.pack(">H", u) for u in units)
    return raw.decode("utf-16-be", "surrogatepass")


# -------- encoding --------

def _pack(fmt: str, value: Any, kind: TagType) -> bytes:
    try:
        return struct.pack(fmt, value)
    except (struct.error, OverflowError) as e:
        raise EncodingError(f"{kind.name} value {value!r} is out of range") from e


def _check_int(value: Any, kind: TagType) -> int:
    if isinstance(value, bool) and kind is TagType.BYTE:
        return int(value)
    if not isinstance(value, int) or isinstance(value, bool):
        raise EncodingError(f"{kind.name} tag expects an integer, got {type(value).__name__}")
    return value


def _write_string(buf: bytearray, text: Any) -> None:
    if not isinstance(text, str):
        raise EncodingError(f"STRING tag expects str, got {type(text).__name__}")
    raw = _encode_mutf8(text)
    if len(raw) > _MAX_STRING_BYTES:
        raise EncodingError(f"String of {len(raw)} bytes exceeds the NBT limit")
    buf += struct.pack(">H", len(raw))
    buf += raw


def _write_list(buf: bytearray, tag: Tag) -> None:
    if not isinstance(tag.value, (list, tuple)):
        raise EncodingError(f"LIST tag expects a sequence, got {type(tag.value).__name__}")

    kind = tag.element_kind
    if kind is None:
        first = tag.value[0] if tag.value else None
        kind = first.kind if isinstance(first, Tag) else TagType.END
    if kind is TagType.END and tag.value:
        raise EncodingError("LIST with elements needs an element kind")

    elements: List[Tag] = []
    for item in tag.value:
        if isinstance(item, Tag):
            if item.kind is not kind:
                raise EncodingError(f"LIST of {kind.name} cannot hold a {item.kind.name} element")
            elements.append(item)
        else:
            elements.append(Tag(kind, item))

    buf.append(int(kind))
    buf += struct.pack(">i", len(elements))
    for el in elements:
        _write_payload(buf, el)


def _write_compound(buf: bytearray, tag: Tag) -> None:
    if not isinstance(tag.value, Mapping):
        raise EncodingError(f"COMPOUND tag expects a mapping, got {type(tag.value).__name__}")
    for name, child in tag.value.items():
        if not isinstance(child, Tag):
            raise EncodingError(f"Compound child {name!r} is not a Tag")
        _write_named(buf, name, child)
    buf.append(int(TagType.END))


def _write_payload(buf: bytearray, tag: Tag) -> None:
    kind = tag.kind
    value = tag.value

    if kind in (TagType.BYTE, TagType.SHORT, TagType.INT, TagType.LONG):
        buf += _pack(_SCALAR_FORMATS[kind], _check_int(value, kind), kind)
    elif kind in (TagType.FLOAT, TagType.DOUBLE):
        if not isinstance(value, numbers.Real) or isinstance(value, bool):
            raise EncodingError(f"{kind.name} tag expects a number, got {type(value).__name__}")
        buf += _pack(_SCALAR_FORMATS[kind], float(value), kind)
    elif kind is TagType.STRING:
        _write_string(buf, value)
    elif kind is TagType.LIST:
        _write_list(buf, tag)
    elif kind is TagType.COMPOUND:
        _write_compound(buf, tag)
    elif kind in _ARRAY_FORMATS:
        if kind is TagType.BYTE_ARRAY and isinstance(value, (bytes, bytearray)):
            buf += struct.pack(">i", len(value))
            buf += value
            return
        if not isinstance(value, (list, tuple)):
            raise EncodingError(f"{kind.name} tag expects a sequence, got {type(value).__name__}")
        buf += struct.pack(">i", len(value))
        fmt = _ARRAY_FORMATS[kind]
        for v in value:
            buf += _pack(fmt, _check_int(v, kind), kind)
    else:
        raise EncodingError(f"{kind!r} cannot be used as a value")


def _write_named(buf: bytearray, name: str, tag: Tag) -> None:
    if not isinstance(tag.kind, TagType) or tag.kind is TagType.END:
        raise EncodingError(f"Tag {name!r} has no usable kind")
    buf.append(int(tag.kind))
    _write_string(buf, name)
    _write_payload(buf, tag)


def encode(name: str, root: Tag) -> bytes:
    """Encode a named root tag to uncompressed NBT bytes."""

    buf = bytearray()
    _write_named(buf, name, root)
    return bytes(buf)


# -------- decoding --------

class _Reader:
    def __init__(self, data: bytes):
        self.data = data
        self.pos = 0

    def unpack(self, fmt: str) -> Any:
        try:
            (v,) = struct.unpack_from(fmt, self.data, self.pos)
        except struct.error as e:
            raise EncodingError(f"Truncated NBT data at offset {self.pos}") from e
        self.pos += struct.calcsize(fmt)
        return v

    def take(self, n: int) -> bytes:
        if n < 0 or self.pos + n > len(self.data):
            raise EncodingError(f"Truncated NBT data at offset {self.pos}")
        chunk = self.data[self.pos:self.pos + n]
        self.pos += n
        return chunk

    def kind(self) -> TagType:
        raw = self.unpack(">B")
        try:
            return TagType(raw)
        except ValueError:
            raise EncodingError(f"Unknown tag id {raw} at offset {self.pos - 1}") from None

    def string(self) -> str:
        return _decode_mutf8(self.take(self.unpack(">H")))

    def payload(self, kind: TagType) -> Tag:
        if kind in _SCALAR_FORMATS:
            return Tag(kind, self.unpack(_SCALAR_FORMATS[kind]))
        if kind is TagType.STRING:
            return Tag(kind, self.string())
        if kind is TagType.BYTE_ARRAY:
            return Tag(kind, self.take(self.unpack(">i")))
        if kind in _ARRAY_FORMATS:
            count = self.unpack(">i")
            return Tag(kind, [self.unpack(_ARRAY_FORMATS[kind]) for _ in range(count)])
        if kind is TagType.LIST:
            element_kind = self.kind()
            count = self.unpack(">i")
            if element_kind is TagType.END and count > 0:
                raise EncodingError("LIST of END with elements")
            return Tag(kind, [self.payload(element_kind) for _ in range(count)], element_kind)
        if kind is TagType.COMPOUND:
            children: Dict[str, Tag] = {}
            while True:
                child_kind = self.kind()
                if child_kind is TagType.END:
                    break
                child_name = self.string()
                children[child_name] = self.payload(child_kind)
            return Tag(kind, children)
        raise EncodingError(f"{kind.name} cannot be used as a value")


def decode(data: bytes) -> Tuple[str, Tag]:
    """Decode uncompressed NBT bytes into ``(root_name, root_tag)``."""

    reader = _Reader(bytes(data))
    kind = reader.kind()
    if kind is TagType.END:
        raise EncodingError("NBT data starts with an END tag")
    name = reader.string()
    root = reader.payload(kind)
    if reader.pos != len(reader.data):
        raise EncodingError(f"{len(reader.data) - reader.pos} trailing bytes after root tag")
    return name, root


def to_python(tag: Tag) -> Any:
    """Strip tag kinds, returning plain dicts/lists/scalars."""

    if tag.kind is TagType.COMPOUND:
        return {k: to_python(v) for k, v in tag.value.items()}
    if tag.kind is TagType.LIST:
        return [to_python(v) if isinstance(v, Tag) else v for v in tag.value]
    return tag.value
