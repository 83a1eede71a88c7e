"""ABI type descriptions and the parser for their textual form."""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass, field
from typing import Iterator, Optional

__all__ = [
    "Kind",
    "TupleElem",
    "Type",
    "ArgumentStr",
    "new_type",
    "new_type_from_argument",
    "type_size",
]


class Kind(enum.Enum):
    """The kind of an ABI type."""

    BOOL = "Bool"
    UINT = "Uint"
    INT = "Int"
    STRING = "String"
    ARRAY = "Array"
    SLICE = "Slice"
    ADDRESS = "Address"
    BYTES = "Bytes"
    FIXED_BYTES = "FixedBytes"
    FIXED_POINT = "FixedPoint"
    TUPLE = "Tuple"
    FUNCTION = "Function"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class TupleElem:
    """One named element of a tuple type."""

    name: str
    elem: "Type"
    indexed: bool = False


@dataclass(frozen=True)
class Type:
    """An ABI type.

    ``size`` is the bit width of integers, the byte width of fixed bytes and
    the length of fixed arrays; ``elem`` is the element type of arrays and
    slices; ``tuple_elems`` holds the members of a tuple.
    """

    kind: Kind
    size: int = 0
    elem: Optional["Type"] = None
    raw: str = ""
    tuple_elems: tuple[TupleElem, ...] = ()

    def __str__(self) -> str:
        return self.raw

    def is_variable_input(self) -> bool:
        """Whether the encoding starts with a length word."""
        return self.kind in (Kind.SLICE, Kind.BYTES, Kind.STRING)

    def is_dynamic(self) -> bool:
        """Whether the encoding of this type has a variable size."""
        if self.kind is Kind.TUPLE:
            return any(item.elem.is_dynamic() for item in self.tuple_elems)
        if self.kind in (Kind.STRING, Kind.BYTES, Kind.SLICE):
            return True
        return self.kind is Kind.ARRAY and self.elem is not None and self.elem.is_dynamic()


@dataclass
class ArgumentStr:
    """An argument as written in a JSON ABI description."""

    name: str = ""
    type: str = ""
    indexed: bool = False
    components: list["ArgumentStr"] = field(default_factory=list)


def type_size(typ: Type) -> int:
    """Return the number of bytes the type occupies in the head of an encoding."""
    if typ.kind is Kind.ARRAY and not typ.elem.is_dynamic():
        if typ.elem.kind in (Kind.ARRAY, Kind.TUPLE):
            return typ.size * type_size(typ.elem)
        return typ.size * 32
    if typ.kind is Kind.TUPLE and not typ.is_dynamic():
        return sum(type_size(item.elem) for item in typ.tuple_elems)
    return 32


def _argument_to_str(arg: ArgumentStr) -> str:
    if not arg.type.startswith("tuple"):
        return arg.type
    if not arg.components:
        raise ValueError("tuple type expects components but none found")
    parts = []
    for component in arg.components:
        inner = _argument_to_str(component)
        if component.indexed:
            parts.append(f"{inner} indexed {component.name}")
        else:
            parts.append(f"{inner} {component.name}")
    return f"tuple({','.join(parts)}){arg.type[len('tuple'):]}"


def new_type_from_argument(arg: ArgumentStr) -> Type:
    """Build a type from a JSON ABI argument description."""
    return new_type(_argument_to_str(arg))


def new_type(text: str) -> Type:
    """Parse a type written in its textual form, e.g. ``tuple(uint8 a)[2]``."""
    lexer = _Lexer(text)
    lexer.advance()
    return _read_type(lexer)


class _Tok(enum.Enum):
    EOF = "eof"
    STR = "string"
    NUMBER = "number"
    TUPLE = "tuple"
    LPAREN = "("
    RPAREN = ")"
    LBRACKET = "["
    RBRACKET = "]"
    COMMA = ","
    INDEXED = "indexed"
    INVALID = "<invalid>"


@dataclass(frozen=True)
class _Token:
    type: _Tok
    literal: str = ""


_PUNCT = {
    ",": _Tok.COMMA,
    "(": _Tok.LPAREN,
    ")": _Tok.RPAREN,
    "[": _Tok.LBRACKET,
    "]": _Tok.RBRACKET,
}
_WHITESPACE = " \t\n\r"
_LETTERS = frozenset("abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ_")
_DIGITS = frozenset("0123456789")


def _scan(text: str) -> Iterator[_Token]:
    pos, end = 0, len(text)
    while True:
        while pos < end and text[pos] in _WHITESPACE:
            pos += 1
        if pos >= end:
            yield _Token(_Tok.EOF)
            continue
        ch = text[pos]
        if ch in _PUNCT:
            yield _Token(_PUNCT[ch])
            pos += 1
        elif ch == "\0":
            yield _Token(_Tok.EOF)
            pos += 1
        elif ch in _LETTERS:
            start = pos
            while pos < end and (text[pos] in _LETTERS or text[pos] in _DIGITS):
                pos += 1
            literal = text[start:pos]
            if literal == "tuple":
                yield _Token(_Tok.TUPLE, literal)
            elif literal == "indexed":
                yield _Token(_Tok.INDEXED, literal)
            else:
                yield _Token(_Tok.STR, literal)
        elif ch in _DIGITS:
            start = pos
            while pos < end and text[pos] in _DIGITS:
                pos += 1
            yield _Token(_Tok.NUMBER, text[start:pos])
        else:
            yield _Token(_Tok.INVALID)
            pos += 1


class _Lexer:
    def __init__(self, text: str):
        self._tokens = _scan(text)
        self.current = _Token(_Tok.EOF)
        self.peek = _Token(_Tok.EOF)

    def advance(self) -> _Token:
        self.current = self.peek
        self.peek = next(self._tokens)
        return self.current


def _expected(tok: _Tok) -> ValueError:
    return ValueError(f"expected token {tok.value}")


def _not_expected(tok: _Tok) -> ValueError:
    return ValueError(f"token '{tok.value}' not expected")


def _read_tuple(lexer: _Lexer) -> Type:
    if lexer.advance().type is not _Tok.LPAREN:
        raise _expected(_Tok.LPAREN)
    elems: list[TupleElem] = []
    while True:
        try:
            elem = _read_type(lexer)
        except ValueError as exc:
            raise ValueError(f"failed to decode type: {exc}") from exc

        name = ""
        indexed = False
        if lexer.peek.type is _Tok.STR:
            name = lexer.advance().literal
        elif lexer.peek.type is _Tok.INDEXED:
            lexer.advance()
            indexed = True
            if lexer.peek.type is _Tok.STR:
                name = lexer.advance().literal
        elems.append(TupleElem(name=name, elem=elem, indexed=indexed))

        following = lexer.advance()
        if following.type is _Tok.COMMA:
            continue
        if following.type is _Tok.RPAREN:
            break
        raise _not_expected(following.type)

    raw = "(" + ",".join(item.elem.raw for item in elems) + ")"
    return Type(kind=Kind.TUPLE, raw=raw, tuple_elems=tuple(elems))


def _read_type(lexer: _Lexer) -> Type:
    tok = lexer.advance()
    if tok.type is _Tok.TUPLE:
        result = _read_tuple(lexer)
    elif tok.type is not _Tok.STR:
        raise _expected(_Tok.STR)
    else:
        result = _simple_type(tok.literal)

    while lexer.peek.type is _Tok.LBRACKET:
        lexer.advance()
        size_tok = lexer.advance()
        if size_tok.type is _Tok.RBRACKET:
            result = Type(kind=Kind.SLICE, elem=result, raw=f"{result.raw}[]")
        elif size_tok.type is _Tok.NUMBER:
            size = int(size_tok.literal)
            if size > 2**32 - 1:
                raise ValueError(
                    f"failed to read array size '{size_tok.literal}': value out of range"
                )
            if lexer.advance().type is not _Tok.RBRACKET:
                raise _expected(_Tok.RBRACKET)
            result = Type(
                kind=Kind.ARRAY, elem=result, raw=f"{result.raw}[{size}]", size=size
            )
        else:
            raise _not_expected(size_tok.type)
    return result


_SIMPLE_RE = re.compile(r"([A-Za-z]+)([0-9]*)")


def _simple_type(text: str) -> Type:
    match = _SIMPLE_RE.fullmatch(text)
    if match is None:
        raise ValueError(
            f"type format is incorrect. Expected 'type''bytes' but found '{text}'"
        )
    name, digits = match.groups()
    has_size = digits != ""
    size = int(digits) if has_size else 0

    if name in ("int", "uint"):
        if not has_size:
            raise ValueError("int and uint expect bytes")
    elif name != "bytes" and has_size:
        raise ValueError(f"type {name} does not expect bytes")

    if name in ("int", "uint"):
        if size % 8 != 0:
            raise ValueError("number of bytes has to be M mod 8")
        kind = Kind.UINT if name == "uint" else Kind.INT
        return Type(kind=kind, size=size, raw=f"{name}{size}")
    if name in ("byte", "bytes"):
        if name == "byte":
            size = 1
        if size == 0:
            return Type(kind=Kind.BYTES, raw="bytes")
        return Type(kind=Kind.FIXED_BYTES, size=size, raw=f"bytes{size}")
    if name == "string":
        return Type(kind=Kind.STRING, raw="string")
    if name == "bool":
        return Type(kind=Kind.BOOL, raw="bool")
    if name == "address":
        return Type(kind=Kind.ADDRESS, raw="address")
    if name == "function":
        return Type(kind=Kind.FUNCTION, size=24, raw="function")
    raise ValueError(f"unknown type '{name}'")