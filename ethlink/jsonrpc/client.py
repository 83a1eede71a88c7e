"""JSON-RPC client with the eth, net and web3 namespaces."""

from __future__ import annotations

from typing import Any, Callable, Union

from ..codec import encode_to_hex, parse_big_int, parse_hex_bytes, parse_uint64_or_hex
from ..types import Address, BlockNumber, CallMsg, Hash, Transaction, hex_to_address, hex_to_hash
from .transport import Transport, new_transport

__all__ = ["Client", "Eth", "Net", "Web3"]


def _expect_str(value: Any, method: str) -> str:
    if not isinstance(value, str):
        raise ValueError(f"{method}: expected a string result, found {value!r}")
    return value


class Client:
    """A JSON-RPC client over an address (HTTP URL, websocket URL or IPC path)."""

    def __init__(self, addr: Union[str, Transport]):
        self._transport = new_transport(addr) if isinstance(addr, str) else addr
        self.eth = Eth(self)
        self.net = Net(self)
        self.web3 = Web3(self)

    def call(self, method: str, *args: Any) -> Any:
        """Make a raw JSON-RPC call and return its decoded result."""
        return self._transport.call(method, *args)

    def close(self) -> None:
        """Close the transport."""
        self._transport.close()

    def __enter__(self) -> "Client":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def subscription_enabled(self) -> bool:
        """Whether the transport supports subscriptions."""
        return callable(getattr(self._transport, "subscribe", None))

    def subscribe(self, method: str, callback: Callable[[Any], Any]) -> Callable[[], None]:
        """Start a subscription; return a function that cancels it."""
        subscribe = getattr(self._transport, "subscribe", None)
        if not callable(subscribe):
            raise TypeError("Transport does not support the subscribe method")
        return subscribe(method, callback)


class Eth:
    """The eth namespace."""

    def __init__(self, client: Client):
        self._client = client

    def _uint(self, method: str, *args: Any) -> int:
        return parse_uint64_or_hex(_expect_str(self._client.call(method, *args), method))

    def accounts(self) -> list[Address]:
        """Return the addresses owned by the client."""
        result = self._client.call("eth_accounts")
        if not isinstance(result, list):
            raise ValueError(f"eth_accounts: expected a list, found {result!r}")
        return [hex_to_address(_expect_str(item, "eth_accounts")) for item in result]

    def block_number(self) -> int:
        """Return the number of the most recent block."""
        return self._uint("eth_blockNumber")

    def send_transaction(self, txn: Transaction) -> Hash:
        """Send a message call or contract creation; return the transaction hash."""
        result = self._client.call("eth_sendTransaction", txn)
        return hex_to_hash(_expect_str(result, "eth_sendTransaction"))

    def get_nonce(self, addr: Address, block_number: BlockNumber) -> int:
        """Return the nonce of the account at the given block."""
        return self._uint("eth_getTransactionCount", addr, str(BlockNumber(block_number)))

    def get_balance(self, addr: Address, block_number: BlockNumber) -> int:
        """Return the balance in wei of the account at the given block."""
        result = self._client.call("eth_getBalance", addr, str(BlockNumber(block_number)))
        text = _expect_str(result, "eth_getBalance")
        try:
            return parse_big_int(text[2:])
        except ValueError:
            raise ValueError("failed to convert to big.int") from None

    def gas_price(self) -> int:
        """Return the current price per gas in wei."""
        return self._uint("eth_gasPrice")

    def call(self, msg: CallMsg, block: BlockNumber) -> str:
        """Execute a message call without a transaction; return the raw hex output."""
        result = self._client.call("eth_call", msg, str(BlockNumber(block)))
        return _expect_str(result, "eth_call")

    def estimate_gas_contract(self, bin: bytes) -> int:
        """Estimate the gas needed to deploy contract code."""
        return self._uint("eth_estimateGas", {"data": encode_to_hex(bin)})

    def estimate_gas(self, msg: CallMsg) -> int:
        """Estimate the gas the message call needs to complete."""
        return self._uint("eth_estimateGas", msg)

    def chain_id(self) -> int:
        """Return the id of the chain."""
        return parse_big_int(_expect_str(self._client.call("eth_chainId"), "eth_chainId"))


class Net:
    """The net namespace."""

    def __init__(self, client: Client):
        self._client = client

    def version(self) -> int:
        """Return the current network id."""
        return parse_uint64_or_hex(_expect_str(self._client.call("net_version"), "net_version"))

    def listening(self) -> bool:
        """Whether the client is listening for network connections."""
        result = self._client.call("net_listening")
        if not isinstance(result, bool):
            raise ValueError(f"net_listening: expected a boolean, found {result!r}")
        return result

    def peer_count(self) -> int:
        """Return the number of connected peers."""
        return parse_uint64_or_hex(
            _expect_str(self._client.call("net_peerCount"), "net_peerCount")
        )


class Web3:
    """The web3 namespace."""

    def __init__(self, client: Client):
        self._client = client

    def client_version(self) -> str:
        """Return the node's client version string."""
        return _expect_str(self._client.call("web3_clientVersion"), "web3_clientVersion")

    def sha3(self, data: bytes) -> bytes:
        """Return the Keccak-256 of ``data`` as computed by the node."""
        result = self._client.call("web3_sha3", encode_to_hex(data))
        return parse_hex_bytes(_expect_str(result, "web3_sha3"))