"""JSON-RPC message objects and hex helpers."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Any, Optional

__all__ = [
    "Request",
    "Response",
    "ErrorObject",
    "Subscription",
    "encode_uint_to_hex",
    "parse_big_int",
    "parse_uint64_or_hex",
    "encode_to_hex",
    "parse_hex_bytes",
]

_UINT64_MAX = 2**64 - 1
_DEC_RE = re.compile(r"[0-9]+")
_HEX_RE = re.compile(r"[0-9a-fA-F]+")
_SIGNED_HEX_RE = re.compile(r"[+-]?[0-9a-fA-F]+")
_HEX_BYTES_RE = re.compile(r"(?:[0-9a-fA-F]{2})*")


def _dump(obj: Any) -> str:
    return json.dumps(obj, separators=(",", ":"))


def _load_object(text: str | bytes) -> dict[str, Any]:
    obj = json.loads(text)
    if not isinstance(obj, dict):
        raise ValueError("expected a JSON object")
    return obj


class ErrorObject(Exception):
    """An error returned by a JSON-RPC server."""

    def __init__(self, code: int = 0, message: str = "", data: Any = None):
        super().__init__(code, message, data)
        self.code = code
        self.message = message
        self.data = data

    def _as_dict(self) -> dict[str, Any]:
        obj: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.data is not None:
            obj["data"] = self.data
        return obj

    def __str__(self) -> str:
        return _dump(self._as_dict())


@dataclass
class Request:
    """A JSON-RPC request; ``params`` holds the decoded parameter list."""

    method: str
    id: int = 0
    params: Any = None

    def to_json(self) -> str:
        return _dump({"id": self.id, "method": self.method, "params": self.params})


@dataclass
class Response:
    """A JSON-RPC response."""

    id: int = 0
    result: Any = None
    error: Optional[ErrorObject] = None

    @classmethod
    def from_json(cls, text: str | bytes) -> "Response":
        obj = _load_object(text)
        raw_id = obj.get("id")
        if raw_id is None:
            ident = 0
        elif isinstance(raw_id, int) and not isinstance(raw_id, bool) and raw_id >= 0:
            ident = raw_id
        else:
            raise ValueError(f"invalid response id: {raw_id!r}")

        error = None
        raw_error = obj.get("error")
        if raw_error is not None:
            if not isinstance(raw_error, dict):
                raise ValueError("invalid error object")
            error = ErrorObject(
                code=raw_error.get("code", 0),
                message=raw_error.get("message", ""),
                data=raw_error.get("data"),
            )
        return cls(id=ident, result=obj.get("result"), error=error)


@dataclass
class Subscription:
    """A notification delivered for a subscription."""

    id: str = ""
    result: Any = None

    @classmethod
    def from_json(cls, text: str | bytes) -> "Subscription":
        obj = _load_object(text)
        ident = obj.get("subscription", "")
        if not isinstance(ident, str):
            raise ValueError(f"invalid subscription id: {ident!r}")
        return cls(id=ident, result=obj.get("result"))


def encode_uint_to_hex(value: int) -> str:
    """Format an integer as 0x-prefixed lower-case hex."""
    return f"0x{value:x}"


def parse_big_int(text: str) -> int:
    """Parse a hex number, with an optional 0x prefix, of any size."""
    raw = text[2:] if text.startswith("0x") else text
    if not _SIGNED_HEX_RE.fullmatch(raw):
        raise ValueError(f"invalid hex number: {text!r}")
    return int(raw, 16)


def parse_uint64_or_hex(text: str) -> int:
    """Parse an unsigned 64-bit number written in decimal or 0x-prefixed hex."""
    if text.startswith("0x"):
        raw, pattern, base = text[2:], _HEX_RE, 16
    else:
        raw, pattern, base = text, _DEC_RE, 10
    if not pattern.fullmatch(raw):
        raise ValueError(f"invalid number: {text!r}")
    value = int(raw, base)
    if value > _UINT64_MAX:
        raise ValueError(f"value out of range: {text!r}")
    return value


def encode_to_hex(data: bytes) -> str:
    """Encode bytes as 0x-prefixed hex."""
    return "0x" + bytes(data).hex()


def parse_hex_bytes(text: str) -> bytes:
    """Decode a 0x-prefixed hex string into bytes."""
    if not text.startswith("0x"):
        raise ValueError("it does not have 0x prefix")
    raw = text[2:]
    if not _HEX_BYTES_RE.fullmatch(raw):
        raise ValueError(f"invalid hex bytes: {text!r}")
    return bytes.fromhex(raw)