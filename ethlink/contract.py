"""Contract bindings: read-only calls, transactions and deployments through a client."""

from __future__ import annotations

from typing import Any, Optional, Sequence

from .abi.encoding import decode, encode
from .abi.spec import ABI, Event, Method
from .abi.topics import parse_log
from .codec import parse_hex_bytes
from .types import Address, BlockNumber, CallMsg, Hash, Log, Transaction

__all__ = ["Contract", "Txn", "ContractEvent", "deploy_contract"]


class Txn:
    """A transaction that calls a contract method or deploys a contract.

    The transaction is built lazily: the call data is encoded on
    :meth:`validate`, gas price and limit are filled in on :meth:`do` when
    they were not set beforehand.
    """

    def __init__(
        self,
        provider: Any,
        sender: Address,
        method: Optional[Method] = None,
        args: Sequence[Any] = (),
        addr: Optional[Address] = None,
        bin: Optional[bytes] = None,
    ):
        self.provider = provider
        self.sender = sender
        self.method = method
        self.args = tuple(args)
        self.addr = addr
        self.bin = None if bin is None else bytes(bin)
        self.data: Optional[bytes] = None
        self.gas_limit = 0
        self.gas_price = 0
        self.value: Optional[int] = None
        self.hash: Optional[Hash] = None

    @property
    def is_deployment(self) -> bool:
        """Whether this transaction creates a contract."""
        return self.bin is not None

    def set_value(self, value: int) -> "Txn":
        """Set the amount of wei sent with the transaction."""
        self.value = int(value)
        return self

    def set_gas_price(self, gas_price: int) -> "Txn":
        """Set the gas price; zero means it is asked from the node."""
        self.gas_price = int(gas_price)
        return self

    def set_gas_limit(self, gas_limit: int) -> "Txn":
        """Set the gas limit; zero means it is estimated by the node."""
        self.gas_limit = int(gas_limit)
        return self

    def validate(self) -> None:
        """Encode the call data from the method and its arguments, once."""
        if self.data is not None:
            return
        data = self.bin if self.is_deployment else None
        if self.method is not None:
            try:
                encoded = encode(list(self.args), self.method.inputs)
            except (TypeError, ValueError) as exc:
                raise ValueError(f"failed to encode arguments: {exc}") from exc
            if self.is_deployment:
                data = data + encoded
            else:
                data = self.method.id() + encoded
        self.data = data

    def estimate_gas(self) -> int:
        """Estimate the gas the transaction needs."""
        self.validate()
        return self._estimate_gas()

    def _estimate_gas(self) -> int:
        data = self.data or b""
        if self.is_deployment:
            return self.provider.eth.estimate_gas_contract(data)
        msg = CallMsg(from_=self.sender, to=self.addr, data=data, value=self.value)
        return self.provider.eth.estimate_gas(msg)

    def do(self) -> Hash:
        """Send the transaction to the network and return its hash."""
        self.validate()
        if self.gas_price == 0:
            self.gas_price = self.provider.eth.gas_price()
        if self.gas_limit == 0:
            self.gas_limit = self._estimate_gas()

        txn = Transaction(
            from_=self.sender,
            input=self.data or b"",
            gas_price=self.gas_price,
            gas=self.gas_limit,
            value=self.value,
        )
        if self.addr is not None:
            txn.to = str(self.addr)
        self.hash = self.provider.eth.send_transaction(txn)
        return self.hash


class ContractEvent:
    """An event of a contract."""

    def __init__(self, event: Event):
        self.event = event

    def encode(self) -> Hash:
        """Return the topic that identifies the event."""
        return self.event.id()

    def parse_log(self, log: Log) -> dict[str, Any]:
        """Decode the event arguments carried by ``log``."""
        return parse_log(self.event.inputs, log)


class Contract:
    """A deployed contract reached through a JSON-RPC client."""

    def __init__(self, addr: Address, abi: ABI, provider: Any):
        self.addr = Address(addr)
        self.abi = abi
        self.provider = provider
        self.sender: Optional[Address] = None

    def set_from(self, addr: Address) -> None:
        """Set the account the calls and transactions originate from."""
        self.sender = Address(addr)

    def _method(self, name: str) -> Method:
        method = self.abi.methods.get(name)
        if method is None:
            raise ValueError(f"method {name} not found")
        return method

    def estimate_gas(self, method: str, *args: Any) -> int:
        """Estimate the gas of a transaction calling ``method``."""
        return self.txn(method, *args).estimate_gas()

    def call(self, method: str, block: BlockNumber, *args: Any) -> dict[str, Any]:
        """Call a method without a transaction and return its decoded outputs."""
        m = self._method(method)
        data = m.id() + encode(list(args), m.inputs)
        msg = CallMsg(to=self.addr, data=data)
        if self.sender is not None:
            msg.from_ = self.sender
        raw = self.provider.eth.call(msg, block)
        result = decode(m.outputs, parse_hex_bytes(raw))
        if not isinstance(result, dict):
            raise ValueError("bad decoding")
        return result

    def txn(self, method: str, *args: Any) -> Txn:
        """Build a transaction calling ``method`` with ``args``."""
        m = self._method(method)
        if self.sender is None:
            raise ValueError("sender address not set")
        return Txn(self.provider, self.sender, method=m, args=args, addr=self.addr)

    def event(self, name: str) -> Optional[ContractEvent]:
        """Return the named event, or None when the ABI has no such event."""
        event = self.abi.events.get(name)
        if event is None:
            return None
        return ContractEvent(event)


def deploy_contract(provider: Any, sender: Address, abi: ABI, bin: bytes, *args: Any) -> Txn:
    """Build a transaction that deploys ``bin`` with the constructor ``args``."""
    return Txn(
        provider,
        Address(sender),
        method=abi.constructor,
        args=args,
        bin=bytes(bin),
    )