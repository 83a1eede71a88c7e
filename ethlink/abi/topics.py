"""Encoding and parsing of indexed event arguments stored in log topics."""

from __future__ import annotations

from typing import Any, Sequence

from ..types import Hash, Log
from .abitype import Kind, TupleElem, Type
from .encoding import decode, encode

__all__ = ["parse_log", "parse_topics", "parse_topic", "encode_topic"]

_TOPIC_TRUE = Hash(bytes(31) + b"\x01")
_TOPIC_FALSE = Hash(bytes(32))


def parse_log(typ: Type, log: Log) -> dict[str, Any]:
    """Decode the arguments of an event from a log.

    Indexed arguments come from the topics after the signature topic, the
    rest from the log data. The result is keyed by argument name.
    """
    indexed: list[TupleElem] = []
    non_indexed: list[TupleElem] = []
    for arg in typ.tuple_elems:
        (indexed if arg.indexed else non_indexed).append(arg)

    indexed_values = parse_topics(
        Type(kind=Kind.TUPLE, tuple_elems=tuple(indexed)), log.topics[1:]
    )

    non_indexed_values: dict[str, Any] = {}
    if non_indexed:
        decoded = decode(Type(kind=Kind.TUPLE, tuple_elems=tuple(non_indexed)), log.data)
        if not isinstance(decoded, dict):
            raise ValueError("bad decoding")
        non_indexed_values = decoded

    pending = iter(indexed_values)
    result: dict[str, Any] = {}
    for arg in typ.tuple_elems:
        if arg.indexed:
            result[arg.name] = next(pending)
        else:
            result[arg.name] = non_indexed_values.get(arg.name)
    return result


def parse_topics(typ: Type, topics: Sequence[Hash]) -> list[Any]:
    """Parse one topic for each element of the tuple type ``typ``."""
    if typ.kind is not Kind.TUPLE:
        raise ValueError("expected a tuple type")
    if len(typ.tuple_elems) != len(topics):
        raise ValueError("bad length")
    return [parse_topic(arg.elem, topic) for arg, topic in zip(typ.tuple_elems, topics)]


def parse_topic(typ: Type, topic: bytes) -> Any:
    """Parse a single topic holding a value of a bool, integer or address type."""
    topic = bytes(topic)
    if typ.kind is Kind.BOOL:
        if topic == _TOPIC_TRUE:
            return True
        if topic == _TOPIC_FALSE:
            return False
        raise ValueError("is not a boolean")
    if typ.kind in (Kind.INT, Kind.UINT, Kind.ADDRESS):
        if len(topic) != 32:
            raise ValueError("len is not correct")
        return decode(typ, topic)
    raise ValueError(f"Topic parsing for type {typ} not supported")


def encode_topic(typ: Type, value: Any) -> Hash:
    """Encode a bool, integer or address value as a topic."""
    if typ.kind is Kind.BOOL:
        if not isinstance(value, bool):
            raise TypeError(f"failed to encode {type(value).__name__} as bool")
        return _TOPIC_TRUE if value else _TOPIC_FALSE
    if typ.kind in (Kind.INT, Kind.UINT, Kind.ADDRESS):
        return Hash(encode(value, typ))
    raise ValueError("not found")