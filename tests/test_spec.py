import io
import json

import pytest

from ethlink.abi.abitype import Kind, Type, new_type
from ethlink.abi.encoding import encode
from ethlink.abi.spec import (
    ABI,
    Event,
    Method,
    new_abi,
    new_abi_from_stream,
    new_event,
    new_event_from_type,
)
from ethlink.abi.topics import encode_topic
from ethlink.types import Address, Hash, Log

EMPTY_TUPLE = Type(kind=Kind.TUPLE, raw="tuple", tuple_elems=())

ERC20_ABI = json.dumps(
    [
        {
            "type": "function",
            "name": "transfer",
            "inputs": [
                {"name": "to", "type": "address"},
                {"name": "value", "type": "uint256"},
            ],
            "outputs": [{"name": "", "type": "bool"}],
        },
        {
            "type": "function",
            "name": "balanceOf",
            "stateMutability": "view",
            "inputs": [{"name": "owner", "type": "address"}],
            "outputs": [{"name": "balance", "type": "uint256"}],
        },
        {
            "type": "event",
            "name": "Transfer",
            "inputs": [
                {"name": "from", "type": "address", "indexed": True},
                {"name": "to", "type": "address", "indexed": True},
                {"name": "value", "type": "uint256", "indexed": False},
            ],
        },
        {"type": "fallback"},
        {"type": "receive"},
    ]
)


def test_abi_simple_function():
    abi = new_abi('[{"name": "abc", "type": "function"}]')
    assert abi == ABI(
        methods={"abc": Method(name="abc", inputs=EMPTY_TUPLE, outputs=EMPTY_TUPLE)},
        events={},
    )


def test_abi_methods_and_events():
    abi = new_abi(ERC20_ABI)
    assert set(abi.methods) == {"transfer", "balanceOf"}
    assert abi.methods["transfer"].const is False
    assert abi.methods["balanceOf"].const is True
    assert abi.methods["transfer"].sig() == "transfer(address,uint256)"
    assert set(abi.events) == {"Transfer"}
    assert abi.constructor is None


def test_method_selectors():
    abi = new_abi(ERC20_ABI)
    assert abi.methods["transfer"].id().hex() == "a9059cbb"
    assert abi.methods["balanceOf"].id().hex() == "70a08231"


def test_event_id():
    abi = new_abi(ERC20_ABI)
    event = abi.events["Transfer"]
    assert event.sig() == "Transfer(address,address,uint256)"
    assert str(event.id()) == (
        "0xddf252ad1be2c89b69c2b068fc378daa952ba7f163c4a11628f55a4df523b3ef"
    )


def test_constant_flag():
    abi = new_abi('[{"type": "function", "name": "f", "constant": true}]')
    assert abi.methods["f"].const is True


def test_constructor():
    abi = new_abi('[{"type": "constructor", "inputs": [{"name": "a", "type": "uint8"}]}]')
    assert abi.constructor.inputs.tuple_elems[0].elem == new_type("uint8")
    assert abi.constructor.name == ""


def test_multiple_constructors():
    with pytest.raises(ValueError, match="multiple constructor"):
        new_abi('[{"type": "constructor"}, {"type": "constructor"}]')


def test_unknown_field_type():
    with pytest.raises(ValueError, match="unknown field type"):
        new_abi('[{"type": "other"}]')


def test_bad_argument_type():
    with pytest.raises(ValueError):
        new_abi('[{"type": "function", "name": "f", "inputs": [{"type": "int"}]}]')


def test_tuple_argument_components():
    text = json.dumps(
        [
            {
                "type": "function",
                "name": "f",
                "inputs": [
                    {
                        "name": "s",
                        "type": "tuple[]",
                        "components": [{"name": "x", "type": "uint8"}],
                    }
                ],
            }
        ]
    )
    method = new_abi(text).methods["f"]
    assert method.sig() == "f((uint8)[])"


def test_abi_from_stream():
    abi = new_abi_from_stream(io.StringIO(ERC20_ABI))
    assert abi.methods["transfer"].sig() == "transfer(address,uint256)"


def test_new_event():
    event = new_event("Transfer(address indexed from, address indexed to, uint256 value)")
    assert event.name == "Transfer"
    assert event.sig() == "Transfer(address,address,uint256)"
    assert [item.indexed for item in event.inputs.tuple_elems] == [True, True, False]


@pytest.mark.parametrize("signature", ["Transfer", "Transfer address)", "T(int)"])
def test_new_event_errors(signature):
    with pytest.raises(ValueError):
        new_event(signature)


def test_new_event_from_type():
    typ = new_type("tuple(uint8 a)")
    event = new_event_from_type("E", typ)
    assert event == Event(name="E", inputs=typ)
    assert event.sig() == "E(uint8)"


def test_event_match_and_parse_log():
    event = new_abi(ERC20_ABI).events["Transfer"]
    sender = Address(b"\x01" * 20)
    receiver = Address(b"\x02" * 20)
    log = Log(
        topics=[
            event.id(),
            encode_topic(new_type("address"), sender),
            encode_topic(new_type("address"), receiver),
        ],
        data=encode([1000], new_type("tuple(uint256 value)")),
    )
    assert event.match(log) is True
    assert event.parse_log(log) == {"from": sender, "to": receiver, "value": 1000}


def test_event_does_not_match():
    event = new_event("A(uint8 a)")
    assert event.match(Log()) is False
    other = Log(topics=[Hash(b"\x01" * 32)])
    assert event.match(other) is False
    with pytest.raises(ValueError, match="does not match"):
        event.parse_log(other)