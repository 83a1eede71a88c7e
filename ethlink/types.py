"""Core Ethereum value types and their JSON-RPC encodings."""

from __future__ import annotations

import enum
import json
import re
from dataclasses import dataclass, field
from typing import Any, Optional

from Crypto.Hash import keccak

__all__ = [
    "Network",
    "Address",
    "Hash",
    "BlockNumber",
    "Block",
    "Transaction",
    "CallMsg",
    "LogFilter",
    "Receipt",
    "Log",
    "LATEST",
    "EARLIEST",
    "PENDING",
    "hex_to_address",
    "hex_to_hash",
    "encode_block",
    "keccak256",
]

_HEX_RE = re.compile(r"[0-9a-fA-F]*")


def keccak256(data: bytes) -> bytes:
    """Return the legacy Keccak-256 digest of ``data``."""
    digest = keccak.new(digest_bits=256)
    digest.update(bytes(data))
    return digest.digest()


class Network(enum.IntEnum):
    """Chain identifiers of the public networks."""

    MAINNET = 1
    ROPSTEN = 3
    RINKEBY = 4
    GOERLI = 5


class _FixedBytes(bytes):
    """Immutable byte string of a fixed length, printed as 0x-prefixed hex."""

    SIZE = 0

    def __new__(cls, data: bytes = b""):
        data = bytes(data)
        if not data:
            data = bytes(cls.SIZE)
        if len(data) != cls.SIZE:
            raise ValueError(
                f"{cls.__name__} expects {cls.SIZE} bytes but got {len(data)}"
            )
        return super().__new__(cls, data)

    @classmethod
    def from_hex(cls, text: str):
        """Parse a hex string, with or without the 0x prefix."""
        raw = text[2:] if text[:2] in ("0x", "0X") else text
        if len(raw) != 2 * cls.SIZE or not _HEX_RE.fullmatch(raw):
            raise ValueError(f"invalid {cls.__name__.lower()} hex string: {text!r}")
        return cls(bytes.fromhex(raw))

    def __str__(self) -> str:
        return "0x" + self.hex()

    def __repr__(self) -> str:
        return f"{type(self).__name__}('{self}')"


class Address(_FixedBytes):
    """A 20-byte Ethereum address."""

    SIZE = 20


class Hash(_FixedBytes):
    """A 32-byte Ethereum hash."""

    SIZE = 32


def hex_to_address(text: str) -> Address:
    """Convert a hex string into an :class:`Address`."""
    return Address.from_hex(text)


def hex_to_hash(text: str) -> Hash:
    """Convert a hex string into a :class:`Hash`."""
    return Hash.from_hex(text)


_BLOCK_TAGS = {-1: "latest", -2: "earliest", -3: "pending"}


class BlockNumber(int):
    """A block height, or one of the tags latest, earliest and pending."""

    LATEST: "BlockNumber"
    EARLIEST: "BlockNumber"
    PENDING: "BlockNumber"

    def __new__(cls, value: int):
        number = int.__new__(cls, value)
        if number < -3:
            raise ValueError("block number is negative")
        return number

    def __str__(self) -> str:
        tag = _BLOCK_TAGS.get(int(self))
        if tag is not None:
            return tag
        return f"0x{int(self):x}"

    def __repr__(self) -> str:
        return f"BlockNumber({int(self)})"


BlockNumber.LATEST = BlockNumber(-1)
BlockNumber.EARLIEST = BlockNumber(-2)
BlockNumber.PENDING = BlockNumber(-3)

LATEST = BlockNumber.LATEST
EARLIEST = BlockNumber.EARLIEST
PENDING = BlockNumber.PENDING


def encode_block(*args: int) -> BlockNumber:
    """Return the single block given, or the latest block otherwise."""
    if len(args) != 1:
        return BlockNumber.LATEST
    return BlockNumber(args[0])


def _hex(value: int) -> str:
    return f"0x{value:x}"


def _hex_bytes(data: bytes) -> str:
    return "0x" + bytes(data).hex()


def _dump(obj: dict[str, Any]) -> str:
    return json.dumps(obj, separators=(",", ":"))


@dataclass
class Transaction:
    hash: Hash = Hash()
    from_: Address = Address()
    to: str = ""
    input: bytes = b""
    gas_price: int = 0
    gas: int = 0
    value: Optional[int] = None

    def to_json(self) -> str:
        """Encode the transaction as a JSON-RPC object."""
        obj: dict[str, Any] = {"from": str(self.from_)}
        if self.to:
            obj["to"] = self.to
        if self.input:
            obj["input"] = _hex_bytes(self.input)
        obj["gasPrice"] = _hex(self.gas_price)
        obj["gas"] = _hex(self.gas)
        if self.value is not None:
            obj["value"] = _hex(self.value)
        return _dump(obj)


@dataclass
class Block:
    number: int = 0
    hash: Hash = Hash()
    parent_hash: Hash = Hash()
    sha3_uncles: Hash = Hash()
    transactions_root: Hash = Hash()
    state_root: Hash = Hash()
    receipts_root: Hash = Hash()
    miner: Address = Address()
    difficulty: int = 0
    extra_data: bytes = b""
    gas_limit: int = 0
    gas_used: int = 0
    timestamp: int = 0
    transactions: list[Transaction] = field(default_factory=list)
    transactions_hashes: list[Hash] = field(default_factory=list)
    uncles: list[Hash] = field(default_factory=list)

    def to_json(self) -> str:
        """Encode the block header as a JSON-RPC object."""
        return _dump(
            {
                "number": _hex(self.number),
                "hash": str(self.hash),
                "parentHash": str(self.parent_hash),
                "sha3Uncles": str(self.sha3_uncles),
                "transactionsRoot": str(self.transactions_root),
                "stateRoot": str(self.state_root),
                "receiptsRoot": str(self.receipts_root),
                "miner": str(self.miner),
                "gasLimit": _hex(self.gas_limit),
                "gasUsed": _hex(self.gas_used),
                "timestamp": _hex(self.timestamp),
                "difficulty": _hex(self.difficulty),
                "extraData": _hex_bytes(self.extra_data),
            }
        )


@dataclass
class CallMsg:
    from_: Address = Address()
    to: Address = Address()
    data: bytes = b""
    gas_price: int = 0
    value: Optional[int] = None

    def to_json(self) -> str:
        """Encode the call message as a JSON-RPC object."""
        obj: dict[str, Any] = {"from": str(self.from_), "to": str(self.to)}
        if self.data:
            obj["data"] = _hex_bytes(self.data)
        if self.gas_price:
            obj["gasPrice"] = _hex(self.gas_price)
        if self.value is not None:
            obj["value"] = _hex(self.value)
        return _dump(obj)


@dataclass
class LogFilter:
    address: list[Address] = field(default_factory=list)
    topics: list[Optional[Hash]] = field(default_factory=list)
    block_hash: Optional[Hash] = None
    from_block: Optional[BlockNumber] = None
    to_block: Optional[BlockNumber] = None

    def set_from(self, num: int) -> None:
        """Set the first block of the range."""
        self.from_block = BlockNumber(num)

    def set_to(self, num: int) -> None:
        """Set the last block of the range."""
        self.to_block = BlockNumber(num)

    def to_json(self) -> str:
        """Encode the filter as a JSON-RPC object."""
        obj: dict[str, Any] = {}
        if len(self.address) == 1:
            obj["address"] = str(self.address[0])
        elif self.address:
            obj["address"] = [str(addr) for addr in self.address]
        obj["topics"] = [None if topic is None else str(topic) for topic in self.topics]
        if self.block_hash is not None:
            obj["blockhash"] = str(self.block_hash)
        if self.from_block is not None:
            obj["fromBlock"] = str(self.from_block)
        if self.to_block is not None:
            obj["toBlock"] = str(self.to_block)
        return _dump(obj)


@dataclass
class Log:
    removed: bool = False
    log_index: int = 0
    transaction_index: int = 0
    transaction_hash: Hash = Hash()
    block_hash: Hash = Hash()
    block_number: int = 0
    address: Address = Address()
    topics: list[Hash] = field(default_factory=list)
    data: bytes = b""

    def to_json(self) -> str:
        """Encode the log as a JSON-RPC object."""
        return _dump(
            {
                "removed": self.removed,
                "logIndex": _hex(self.log_index),
                "transactionIndex": _hex(self.transaction_index),
                "transactionHash": str(self.transaction_hash),
                "blockHash": str(self.block_hash),
                "blockNumber": _hex(self.block_number),
                "address": str(self.address),
                "data": _hex_bytes(self.data),
                "topics": [str(topic) for topic in self.topics],
            }
        )


@dataclass
class Receipt:
    transaction_hash: Hash = Hash()
    transaction_index: int = 0
    contract_address: Address = Address()
    block_hash: Hash = Hash()
    from_: Address = Address()
    block_number: int = 0
    gas_used: int = 0
    cumulative_gas_used: int = 0
    logs_bloom: bytes = b""
    logs: list[Log] = field(default_factory=list)