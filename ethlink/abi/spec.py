"""Contract ABI descriptions: methods, events and the JSON format they come in."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Optional, TextIO

from ..types import Hash, Log, keccak256
from .abitype import ArgumentStr, Kind, TupleElem, Type, new_type, new_type_from_argument
from .topics import parse_log

__all__ = [
    "ABI",
    "Method",
    "Event",
    "new_abi",
    "new_abi_from_stream",
    "new_event",
    "new_event_from_type",
]


def _build_signature(name: str, typ: Type) -> str:
    return f"{name}({','.join(item.elem.raw for item in typ.tuple_elems)})"


@dataclass
class Method:
    """A callable function of a contract."""

    name: str = ""
    const: bool = False
    inputs: Optional[Type] = None
    outputs: Optional[Type] = None

    def sig(self) -> str:
        """Return the canonical signature, e.g. ``transfer(address,uint256)``."""
        return _build_signature(self.name, self.inputs)

    def id(self) -> bytes:
        """Return the four-byte selector of the method."""
        return keccak256(self.sig().encode())[:4]


@dataclass
class Event:
    """An event a contract emits as a log."""

    name: str = ""
    anonymous: bool = False
    inputs: Optional[Type] = None

    def sig(self) -> str:
        """Return the canonical signature of the event."""
        return _build_signature(self.name, self.inputs)

    def id(self) -> Hash:
        """Return the topic that identifies the event in logs."""
        return Hash(keccak256(self.sig().encode()))

    def match(self, log: Log) -> bool:
        """Whether the log was emitted by this event."""
        return bool(log.topics) and bytes(log.topics[0]) == self.id()

    def parse_log(self, log: Log) -> dict[str, Any]:
        """Decode the event arguments carried by ``log``."""
        if not self.match(log):
            raise ValueError("log does not match this event")
        return parse_log(self.inputs, log)


@dataclass
class ABI:
    """A parsed contract ABI."""

    constructor: Optional[Method] = None
    methods: dict[str, Method] = field(default_factory=dict)
    events: dict[str, Event] = field(default_factory=dict)


def _lookup(obj: dict[str, Any], key: str, default: Any = None) -> Any:
    if key in obj:
        return obj[key]
    lowered = key.lower()
    for name, value in obj.items():
        if name.lower() == lowered:
            return value
    return default


def _typed(obj: dict[str, Any], key: str, kind: type, default: Any) -> Any:
    value = _lookup(obj, key)
    if value is None:
        return default
    if not isinstance(value, kind):
        raise ValueError(f"field '{key}' has the wrong type: {value!r}")
    return value


def _argument_str(obj: Any) -> ArgumentStr:
    if not isinstance(obj, dict):
        raise ValueError(f"argument json err: expected an object, found {obj!r}")
    components = _typed(obj, "components", list, [])
    return ArgumentStr(
        name=_typed(obj, "name", str, ""),
        type=_typed(obj, "type", str, ""),
        indexed=_typed(obj, "indexed", bool, False),
        components=[_argument_str(item) for item in components],
    )


def _arguments_type(items: list[Any]) -> Type:
    elems = []
    for item in items:
        arg = _argument_str(item)
        elems.append(
            TupleElem(name=arg.name, elem=new_type_from_argument(arg), indexed=arg.indexed)
        )
    return Type(kind=Kind.TUPLE, raw="tuple", tuple_elems=tuple(elems))


def _abi_from_obj(fields: Any) -> ABI:
    if not isinstance(fields, list):
        raise ValueError("abi must be a JSON array")

    abi = ABI()
    for entry in fields:
        if not isinstance(entry, dict):
            raise ValueError(f"abi entry must be an object, found {entry!r}")
        kind = _typed(entry, "type", str, "")
        name = _typed(entry, "name", str, "")
        inputs = _typed(entry, "inputs", list, [])
        outputs = _typed(entry, "outputs", list, [])

        if kind == "constructor":
            if abi.constructor is not None:
                raise ValueError("multiple constructor declaration")
            abi.constructor = Method(inputs=_arguments_type(inputs))
        elif kind in ("function", ""):
            const = _typed(entry, "constant", bool, False)
            if _typed(entry, "stateMutability", str, "") in ("view", "pure"):
                const = True
            abi.methods[name] = Method(
                name=name,
                const=const,
                inputs=_arguments_type(inputs),
                outputs=_arguments_type(outputs),
            )
        elif kind == "event":
            abi.events[name] = Event(
                name=name,
                anonymous=_typed(entry, "anonymous", bool, False),
                inputs=_arguments_type(inputs),
            )
        elif kind in ("fallback", "receive"):
            continue
        else:
            raise ValueError(f"unknown field type '{kind}'")
    return abi


def new_abi(text: str) -> ABI:
    """Parse an ABI from its JSON text."""
    return _abi_from_obj(json.loads(text))


def new_abi_from_stream(stream: TextIO) -> ABI:
    """Parse an ABI from a readable text stream."""
    return new_abi(stream.read())


def new_event(signature: str) -> Event:
    """Create an event from a signature such as ``Transfer(address indexed a)``."""
    if not signature.endswith(")"):
        raise ValueError("failed to parse input, expected 'name(types)'")
    index = signature.find("(")
    if index == -1:
        raise ValueError("failed to parse input, expected 'name(types)'")
    typ = new_type("tuple" + signature[index:])
    return new_event_from_type(signature[:index], typ)


def new_event_from_type(name: str, typ: Type) -> Event:
    """Create an event from its name and argument tuple type."""
    return Event(name=name, inputs=typ)