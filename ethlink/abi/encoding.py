"""Encoding and decoding of values in the contract ABI binary format."""

from __future__ import annotations

import dataclasses
from typing import Any, Type as PyType, TypeVar

from ..types import Address
from .abitype import Kind, Type, type_size

__all__ = ["encode", "decode", "decode_struct"]

_WORD = 32
_MASK_256 = (1 << 256) - 1
_MAX_INT64_BITS = 63
_FIXED_INT_SIZES = (8, 16, 32, 64)

T = TypeVar("T")


# ---------------------------------------------------------------------------
# encoding
# ---------------------------------------------------------------------------


def encode(value: Any, typ: Type) -> bytes:
    """Encode ``value`` as the ABI type ``typ``.

    Integers are Python ints, addresses and byte strings are bytes-like,
    arrays and slices are lists or tuples, and tuple types take a sequence
    (by position), a mapping (by element name, or index as a string for
    unnamed elements) or a dataclass instance (by lower-cased field name).
    """
    return _encode(value, typ)


def _encode(value: Any, typ: Type) -> bytes:
    kind = typ.kind
    if kind in (Kind.SLICE, Kind.ARRAY):
        return _encode_sequence(value, typ)
    if kind is Kind.TUPLE:
        return _encode_tuple(value, typ)
    if kind is Kind.STRING:
        return _encode_string(value)
    if kind is Kind.BOOL:
        return _encode_bool(value)
    if kind is Kind.ADDRESS:
        return _left_pad(_as_bytes(value, "address"), _WORD)
    if kind in (Kind.INT, Kind.UINT):
        return _encode_num(value)
    if kind is Kind.BYTES:
        raw = _as_bytes(value, "bytes")
        return _pack_bytes(raw)
    if kind in (Kind.FIXED_BYTES, Kind.FUNCTION):
        return _right_pad(_as_bytes(value, "fixed bytes"), _WORD)
    raise ValueError(f"encoding not available for type '{kind}'")


def _encode_error(value: Any, what: str) -> TypeError:
    return TypeError(f"failed to encode {type(value).__name__} as {what}")


def _encode_sequence(value: Any, typ: Type) -> bytes:
    if not isinstance(value, (list, tuple)):
        raise _encode_error(value, str(typ.kind))
    if typ.kind is Kind.ARRAY and typ.size != len(value):
        raise ValueError("array len incompatible")

    head = bytearray()
    tail = bytearray()
    if typ.is_variable_input():
        head += _pack_num(len(value))

    dynamic = typ.elem.is_dynamic()
    offset = type_size(typ.elem) * len(value) if dynamic else 0
    for item in value:
        encoded = _encode(item, typ.elem)
        if dynamic:
            head += _pack_num(offset)
            offset += len(encoded)
            tail += encoded
        else:
            head += encoded
    return bytes(head + tail)


def _struct_to_dict(value: Any) -> dict[str, Any]:
    result: dict[str, Any] = {}
    for fld in dataclasses.fields(value):
        tag = fld.metadata.get("abi", "")
        if tag == "-" or fld.name.startswith("_"):
            continue
        name = (tag or fld.name).lower()
        result.setdefault(name, getattr(value, fld.name))
    return result


def _encode_tuple(value: Any, typ: Type) -> bytes:
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        value = _struct_to_dict(value)

    if isinstance(value, (list, tuple)):
        by_position = True
    elif isinstance(value, dict):
        by_position = False
    else:
        raise _encode_error(value, "tuple")

    if len(value) < len(typ.tuple_elems):
        raise ValueError("expected at least the same length")

    offset = sum(type_size(item.elem) for item in typ.tuple_elems)
    head = bytearray()
    tail = bytearray()
    for index, item in enumerate(typ.tuple_elems):
        if by_position:
            member = value[index]
        else:
            key = item.name or str(index)
            if key not in value:
                raise ValueError(f"cannot get key {item.name}")
            member = value[key]

        encoded = _encode(member, item.elem)
        if item.elem.is_dynamic():
            head += _pack_num(offset)
            tail += encoded
            offset += len(encoded)
        else:
            head += encoded
    return bytes(head + tail)


def _as_bytes(value: Any, what: str) -> bytes:
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)
    raise _encode_error(value, what)


def _encode_string(value: Any) -> bytes:
    if not isinstance(value, str):
        raise _encode_error(value, "string")
    return _pack_bytes(value.encode("utf-8"))


def _pack_bytes(raw: bytes) -> bytes:
    padded_len = (len(raw) + _WORD - 1) // _WORD * _WORD
    return _pack_num(len(raw)) + _right_pad(raw, padded_len)


def _encode_num(value: Any) -> bytes:
    if isinstance(value, bool) or not isinstance(value, int):
        raise _encode_error(value, "number")
    return _to_u256(value)


def _pack_num(value: int) -> bytes:
    return _to_u256(value)


def _encode_bool(value: Any) -> bytes:
    if not isinstance(value, bool):
        raise _encode_error(value, "bool")
    return _to_u256(1 if value else 0)


def _to_u256(value: int) -> bytes:
    return (value & _MASK_256).to_bytes(_WORD, "big")


def _pad(raw: bytes, size: int, left: bool) -> bytes:
    if len(raw) == size:
        return raw
    if len(raw) > size:
        return raw[len(raw) - size:]
    fill = bytes(size - len(raw))
    return fill + raw if left else raw + fill


def _left_pad(raw: bytes, size: int) -> bytes:
    return _pad(raw, size, left=True)


def _right_pad(raw: bytes, size: int) -> bytes:
    return _pad(raw, size, left=False)


# ---------------------------------------------------------------------------
# decoding
# ---------------------------------------------------------------------------


def decode(typ: Type, data: bytes) -> Any:
    """Decode ``data`` as the ABI type ``typ``.

    Tuples decode to dicts keyed by element name (or index as a string),
    arrays and slices to lists, integers to ints, addresses to
    :class:`Address` and fixed byte types to bytes.
    """
    value, _ = _decode(typ, bytes(data))
    return value


def decode_struct(typ: Type, data: bytes, cls: PyType[T]) -> T:
    """Decode a tuple and build an instance of the dataclass ``cls``.

    Members are matched to the dataclass fields of ``cls`` without regard
    to case; unmatched members are ignored.
    """
    if not (dataclasses.is_dataclass(cls) and isinstance(cls, type)):
        raise TypeError(f"cannot decode into {cls!r}: a dataclass is required")
    decoded = decode(typ, data)
    if not isinstance(decoded, dict):
        raise TypeError(f"cannot decode {typ.raw} into {cls.__name__}")
    lowered: dict[str, Any] = {}
    for key, val in decoded.items():
        lowered.setdefault(key.lower(), val)

    kwargs: dict[str, Any] = {}
    for fld in dataclasses.fields(cls):
        if not fld.init:
            continue
        tag = fld.metadata.get("abi", "")
        if tag == "-":
            continue
        key = (tag or fld.name).lower()
        if key in lowered:
            kwargs[fld.name] = lowered[key]
    return cls(**kwargs)


def _decode(typ: Type, data: bytes) -> tuple[Any, bytes]:
    kind = typ.kind
    length = 0
    if typ.is_variable_input():
        length = _read_length(data)

    if kind is Kind.TUPLE:
        return _decode_tuple(typ, data)
    if kind is Kind.SLICE:
        return _decode_sequence(typ, data[_WORD:], length)
    if kind is Kind.ARRAY:
        return _decode_sequence(typ, data, typ.size)

    tail = data[_WORD:]
    if kind is Kind.STRING:
        return _payload(data, length).decode("utf-8"), tail
    if kind is Kind.BYTES:
        return _payload(data, length), tail

    word = _word(data)
    if kind is Kind.BOOL:
        return _decode_bool(word), tail
    if kind in (Kind.INT, Kind.UINT):
        return _read_integer(typ, word), tail
    if kind is Kind.ADDRESS:
        return Address(word[12:]), tail
    if kind is Kind.FIXED_BYTES:
        return word[: typ.size], tail
    if kind is Kind.FUNCTION:
        if any(word[24:]):
            raise ValueError(
                "function type expects the last 8 bytes to be empty but found: "
                + word[24:].hex()
            )
        return word[:24], tail
    raise ValueError(f"decoding not available for type '{kind}'")


def _word(data: bytes) -> bytes:
    if len(data) < _WORD:
        raise ValueError(f"input too short: expected {_WORD} bytes, found {len(data)}")
    return data[:_WORD]


def _payload(data: bytes, length: int) -> bytes:
    if _WORD + length > len(data):
        raise ValueError(f"length insufficient {len(data) - _WORD} require {length}")
    return data[_WORD:_WORD + length]


def _read_integer(typ: Type, word: bytes) -> int:
    signed = typ.kind is Kind.INT
    if typ.size in _FIXED_INT_SIZES:
        return int.from_bytes(word[-(typ.size // 8):], "big", signed=signed)
    return int.from_bytes(word, "big", signed=signed)


def _decode_bool(word: bytes) -> bool:
    last = word[31]
    if last == 0:
        return False
    if last == 1:
        return True
    raise ValueError("bad boolean")


def _decode_tuple(typ: Type, data: bytes) -> tuple[dict[str, Any], bytes]:
    result: dict[str, Any] = {}
    orig = data
    for index, item in enumerate(typ.tuple_elems):
        dynamic = item.elem.is_dynamic()
        entry = orig[_read_offset(data, len(orig)):] if dynamic else data

        value, tail = _decode(item.elem, entry)
        data = data[_WORD:] if dynamic else tail

        name = item.name or str(index)
        if name in result:
            raise ValueError("tuple with repeated values")
        result[name] = value
    return result, data


def _decode_sequence(typ: Type, data: bytes, size: int) -> tuple[list[Any], bytes]:
    if size < 0:
        raise ValueError("size is lower than zero")
    if _WORD * size > len(data):
        raise ValueError("size is too big")

    items: list[Any] = []
    orig = data
    dynamic = typ.elem.is_dynamic()
    for _ in range(size):
        entry = orig[_read_offset(data, len(orig)):] if dynamic else data
        value, tail = _decode(typ.elem, entry)
        data = data[_WORD:] if dynamic else tail
        items.append(value)
    return items, data


def _read_offset(data: bytes, limit: int) -> int:
    offset = int.from_bytes(_word(data), "big")
    if offset.bit_length() > _MAX_INT64_BITS:
        raise ValueError("offset larger than int64")
    if offset > limit:
        raise ValueError(f"offset insufficient {limit} require {offset}")
    return offset


def _read_length(data: bytes) -> int:
    length = int.from_bytes(_word(data), "big")
    if length.bit_length() > _MAX_INT64_BITS:
        raise ValueError("length larger than int64")
    if length > len(data):
        raise ValueError(f"length insufficient {len(data)} require {length}")
    return length