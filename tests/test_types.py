import json

import pytest

from ethlink.types import (
    Address,
    Block,
    BlockNumber,
    CallMsg,
    Hash,
    Log,
    LogFilter,
    Network,
    Transaction,
    encode_block,
    hex_to_address,
    hex_to_hash,
    keccak256,
)

ADDR0 = "0x0000000000000000000000000000000000000000"


def clean(text):
    for ch in (" ", "\n", "\t"):
        text = text.replace(ch, "")
    return text


def first_byte_address(value):
    return Address(bytes([value]) + bytes(19))


@pytest.mark.parametrize(
    "txn, expected",
    [
        (
            Transaction(),
            """{
                "from": "%s",
                "gasPrice": "0x0",
                "gas": "0x0"
            }"""
            % ADDR0,
        ),
        (
            Transaction(gas_price=100, gas=50, value=100),
            """{
                "from": "%s",
                "gasPrice": "0x64",
                "gas": "0x32",
                "value": "0x64"
            }"""
            % ADDR0,
        ),
    ],
)
def test_transaction_marshal(txn, expected):
    assert txn.to_json() == clean(expected)


def test_transaction_optional_fields():
    txn = Transaction(to="0x015f68893a39b3ba0681584387670ff8b00f4db2", input=b"\x01\x02")
    obj = json.loads(txn.to_json())
    assert obj["to"] == "0x015f68893a39b3ba0681584387670ff8b00f4db2"
    assert obj["input"] == "0x0102"
    assert "value" not in obj


def test_address_hex_round_trip():
    text = "0x314159265dd8dbb310642f98f50c066173c1259b"
    addr = hex_to_address(text)
    assert str(addr) == text
    assert len(addr) == 20
    assert hex_to_address("0x314159265dD8dbb310642f98f50C066173C1259b") == addr


def test_hash_hex_round_trip():
    text = "0x93cdeb708b7545dc668eb9280176169d1c33cfd8ed6f04690a0bcc88a93fc4ae"
    assert str(hex_to_hash(text)) == text
    assert str(hex_to_hash(text[2:])) == text


def test_default_values_are_zero():
    assert str(Address()) == ADDR0
    assert bytes(Hash()) == bytes(32)


@pytest.mark.parametrize("bad", ["0x1234", "0x" + "zz" * 20, "0x" + "00" * 21])
def test_address_bad_hex(bad):
    with pytest.raises(ValueError):
        hex_to_address(bad)


def test_address_wrong_length():
    with pytest.raises(ValueError):
        Address(b"\x01\x02")


@pytest.mark.parametrize(
    "number, expected",
    [
        (BlockNumber.LATEST, "latest"),
        (BlockNumber.EARLIEST, "earliest"),
        (BlockNumber.PENDING, "pending"),
        (BlockNumber(0), "0x0"),
        (BlockNumber(100), "0x64"),
    ],
)
def test_block_number_string(number, expected):
    assert str(number) == expected


def test_block_number_negative():
    with pytest.raises(ValueError):
        BlockNumber(-4)


def test_encode_block():
    assert encode_block() == BlockNumber.LATEST
    assert encode_block(5) == 5
    assert str(encode_block(1, 2)) == "latest"


def test_network_ids():
    assert Network.MAINNET == 1
    assert Network(4) is Network.RINKEBY


def test_keccak_empty():
    assert keccak256(b"").hex() == (
        "c5d2460186f7233c927e7db2dcc703c0e500b653ca82273b7bfad8045d85a470"
    )


def test_call_msg_marshal():
    msg = CallMsg(to=first_byte_address(1), data=b"\xab", value=100)
    obj = json.loads(msg.to_json())
    assert obj == {
        "from": ADDR0,
        "to": str(first_byte_address(1)),
        "data": "0xab",
        "value": "0x64",
    }


def test_call_msg_omits_empty():
    obj = json.loads(CallMsg().to_json())
    assert set(obj) == {"from", "to"}


def test_log_filter_marshal():
    flt = LogFilter(address=[first_byte_address(1)], topics=[None, Hash()])
    flt.set_from(1)
    flt.set_to(BlockNumber.LATEST)
    obj = json.loads(flt.to_json())
    assert obj["address"] == str(first_byte_address(1))
    assert obj["topics"] == [None, str(Hash())]
    assert obj["fromBlock"] == "0x1"
    assert obj["toBlock"] == "latest"
    assert "blockhash" not in obj


def test_log_filter_block_hash():
    flt = LogFilter(block_hash=Hash())
    obj = json.loads(flt.to_json())
    assert obj == {"topics": [], "blockhash": str(Hash())}


def test_log_marshal():
    log = Log(removed=True, log_index=2, block_number=16, data=b"\x01", topics=[Hash()])
    obj = json.loads(log.to_json())
    assert obj["removed"] is True
    assert obj["logIndex"] == "0x2"
    assert obj["blockNumber"] == "0x10"
    assert obj["data"] == "0x01"
    assert obj["topics"] == [str(Hash())]


def test_block_marshal():
    block = Block(number=1, difficulty=100, extra_data=b"\xff")
    obj = json.loads(block.to_json())
    assert obj["number"] == "0x1"
    assert obj["difficulty"] == "0x64"
    assert obj["extraData"] == "0xff"
    assert obj["miner"] == ADDR0