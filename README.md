# ethnode

A small library for talking to Ethereum nodes over JSON-RPC 2.0. It works with
geth and parity nodes, over HTTP(S) or WebSocket, and decodes the answers into
plain dataclasses: blocks, headers, transactions, receipts and traces.

## Installation

```
pip install ethnode
```

## Connecting to a node

`ethnode.node.connect(target, protocol)` dials a node and picks the schema
that matches it. If `protocol` is not one of `wss`, `https`, `ws` or `http`,
those four are tried in that order. The node is then asked for
`parity_versionInfo`; if it answers, `ParitySchema` is used, otherwise
`GethSchema`.

```python
from ethnode.node import connect

with connect("localhost:8545", "http") as client:
    print(client.current_block_number())
    print(client.get_network_id())

    block = client.get_block(12)                  # with full transactions
    header = client.get_block_by_hash(block.hash.hex())
    receipt = client.get_transaction_receipt("0x...")
    balance = client.get_balance("0x...", None)   # None means "latest"
    nonce = client.get_nonce("0x...", 12)
    code = client.get_code("0x...", None)
```

`get_storage_at(address, offset, block)` takes the slot as an
`ethnode.types.Hash` and returns a `Hash`. Every failure is raised as
`ethnode.node.NodeError`, with the call and the address or hash in the message.

`NodeClient.call(message)` forwards an `ethnode.messages.Message` unchanged to
the node and stores the node's result and error back in the message.

### Traces

```python
trace = client.get_transaction_vm_trace(tx_hash)
for state in trace.states():
    print(state.pc, state.op, state.depth)

calls = client.get_transaction_call_trace(tx_hash).traces()
```

geth is asked through `debug_traceTransaction` (the default tracer for VM
steps, `callTracer` for calls; call frames are listed depth first). parity is
asked through `trace_replayTransaction`; its VM trace is flattened so that
nested frames follow the instruction that opened them, each step is given its
opcode name (see `ethnode.opcodes.opcode_name`) and the last step of every
frame is marked `terminating`.

### New blocks

```python
for number in client.subscribe(force_poll=False):
    print("new block", number)
```

An `eth_subscribe` to `newHeads` is used where the node accepts it; otherwise,
or with `force_poll=True`, the node is polled for its latest block number.

## Lower-level JSON-RPC

`ethnode.rpcclient` holds the plain client. A background thread reads the
connection, hands each response to the caller waiting for its id and copies
notifications to every subscription queue.

```python
from ethnode.rpcclient import discover_and_dial

rpc = discover_and_dial("localhost:8545", "ws")
print(rpc.call("eth_blockNumber"))
rpc.close()
```

A call raises `ethnode.rpcclient.RpcError` on an error answer, on a `null`
result ("resource not found") and after 30 seconds without an answer.
Requests are built with `ethnode.messages.new_request`; the calls of each node
kind are described by `ethnode.geth_schema.GethSchema` and
`ethnode.parity_schema.ParitySchema`, each of which returns an `RpcCall`
holding the request and the decoder for its result.

## Other helpers

- `ethnode.types`: `Hash` and `Address` (checksummed `hex()`), and
  `parse_quantity`, `encode_quantity`, `parse_number`, `decode_hex`,
  `encode_hex`.
- `ethnode.access_list.AccessList`: the EIP-2929 set of accessed addresses and
  storage slots, with additions that can be undone in reverse order.

## What it does not do

There is no account state database here: no journal of state changes, no
snapshots and reverts of account balances, nonces, code or storage, and no
re-execution of transactions. The package reads from a node; it keeps no
state of its own beyond the `AccessList`.

## Running the tests

```
pip install -e .[test]
pytest
```