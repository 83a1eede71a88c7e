# ethlink

A Python library for working with Ethereum nodes and contracts:

- **Core types** (`ethlink.types`) – `Address`, `Hash`, `BlockNumber` with
  the `LATEST`, `EARLIEST` and `PENDING` tags, and the `Block`,
  `Transaction`, `CallMsg`, `LogFilter`, `Log` and `Receipt` records, most
  of which render themselves as JSON-RPC objects with `to_json()`.
- **ABI types** (`ethlink.abi.abitype`) – parse type strings such as
  `uint256`, `bytes32[]` or `tuple(address a, uint256 b)[2]`.
- **ABI encoding** (`ethlink.abi.encoding`) – encode and decode values
  with those types.
- **Contract descriptions** (`ethlink.abi.spec`, `ethlink.abi.topics`) –
  load a contract's JSON ABI, compute method selectors and event
  identifiers, and decode event logs.
- **JSON-RPC client** (`ethlink.jsonrpc.client`) – query a node over HTTP,
  WebSocket or an IPC socket, with subscriptions on the streaming
  transports.
- **Contracts** (`ethlink.contract`) – call constant methods, build,
  estimate and send transactions, and deploy new contracts.
- **ENS** (`ethlink.ens`) – compute the name hash of an ENS name.
- **Compilers** (`ethlink.compiler`) – run `solc` or `vyper` and collect
  their artifacts.

## Installation

```
pip install ethlink
```

To run the test suite:

```
pip install "ethlink[test]"
pytest
```

## ABI encoding

```python
from ethlink.abi.abitype import new_type
from ethlink.abi.encoding import encode, decode
from ethlink.types import hex_to_address

typ = new_type("tuple(address a, uint256 b)")
owner = hex_to_address("0x0000000000000000000000000000000000000001")

data = encode({"a": owner, "b": 1000}, typ)
values = decode(typ, data)   # {"a": owner, "b": 1000}
```

Integers are plain Python ints, addresses and byte strings are bytes-like,
arrays and slices are lists or tuples. Tuple values may be given as
mappings keyed by element name (unnamed elements use their position as a
string, `"0"`, `"1"`, ...), as sequences in order, or as dataclass
instances matched by lower-cased field name. Tuples decode to dicts,
arrays and slices to lists. `decode_struct(typ, data, cls)` decodes a
tuple straight into an instance of the dataclass `cls`.

## Contract ABIs and events

```python
from ethlink.abi.spec import new_abi, new_event

abi = new_abi(abi_json_text)
transfer = abi.methods["transfer"]
selector = transfer.id()        # first four bytes of the keccak of the signature

event = new_event("Transfer(address indexed from, address indexed to, uint256 value)")
if event.match(log):
    fields = event.parse_log(log)
```

`ethlink.abi.topics` holds the lower-level `encode_topic`, `parse_topic`,
`parse_topics` and `parse_log` for indexed bool, integer and address
arguments.

## Talking to a node

`Client` picks its transport from the address it is given: `ws://` and
`wss://` open a WebSocket, an existing filesystem path opens an IPC socket,
anything else is treated as an HTTP endpoint. Its `eth`, `net` and `web3`
attributes wrap common calls:

- `eth`: `accounts`, `block_number`, `send_transaction`, `get_nonce`,
  `get_balance`, `gas_price`, `call`, `estimate_gas`,
  `estimate_gas_contract`, `chain_id`
- `net`: `version`, `listening`, `peer_count`
- `web3`: `client_version`, `sha3`

`Client.call` sends any other method by name and returns the decoded
result; errors from the node are raised as `ethlink.codec.ErrorObject`.
On the WebSocket and IPC transports `Client.subscribe(method, callback)`
starts a subscription, passes each notification's result to `callback`
and returns a function that cancels it; requests there time out with
`RequestTimeout` after five seconds.

```python
from ethlink.jsonrpc.client import Client

with Client("http://localhost:8545") as client:
    height = client.eth.block_number()
```

## Contracts

`Contract(addr, abi, client)` binds an ABI to an address. `call` runs a
method without a transaction and returns its decoded outputs; after
`set_from`, `txn` builds a `Txn` whose gas price, gas limit and value can
be set before `do()` sends it and returns the transaction hash. Unset gas
price and limit are asked from the node. `deploy_contract` builds the
transaction that deploys compiled bytecode with constructor arguments, and
`Contract.event` gives a `ContractEvent` for decoding logs.

## ENS

```python
from ethlink.ens import name_hash

node = name_hash("foo.eth")
# 0xde9b09fd7c5f901e23a3f19fecc54828e9c848539801e86591bd9801b019f84f
```

## Compilers

`new_compiler("solidity", "solc")` and `new_compiler("vyper", "vyper")`
return wrappers that run the given compiler binary and return an
`Artifact` (ABI, bytecode and runtime bytecode) per contract.
`Solidity.compile_code` compiles source passed as a string, and
`download_solidity` fetches a static `solc` release into a directory.

## What it does not do

- The client has no calls for fetching blocks, logs or transaction
  receipts, so there is no waiting for a transaction to be mined; use
  `Client.call` with the method name for those.
- There is no client for block-explorer web APIs.
- There is no command-line tool and no generator of contract bindings;
  everything is used as a library.