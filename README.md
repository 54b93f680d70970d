# labkit

Building blocks for writing and testing small fault-tolerant services in
Python.

It contains:

- **`labkit.labgob`** – an encoder/decoder for values sent over RPC or
  persisted as state. It reports and counts suspicious values: dataclass
  fields whose names do not start with an upper-case letter, and decoding
  into an object whose fields already hold non-default values.
- **`labkit.porcupine`** – a linearizability checker for histories of
  operations (`labkit.porcupine.model.Operation`) or events
  (`labkit.porcupine.model.Event`), with partitioning and optional timeouts.
- **`labkit.models`** – a key/value model for the checker, `KV_MODEL`, with
  get, put, append, and append returning the old value.
- **`labkit.kvsrv.common`** – the argument and reply dataclasses of a
  key/value service's Get, Put and Append calls.
- **`labkit.mr.worker`** and **`labkit.mrapps`** – MapReduce key/value
  pairs, the partitioning hash `ihash`, and a set of map/reduce applications
  (word count, indexer, and several that crash, stall, count task runs or
  measure parallelism).

## Installation

```
pip install .
```

For running the tests:

```
pip install ".[test]"
pytest
```

## Checked serialisation

```python
import io

from labkit import labgob
from labkit.kvsrv.common import GetArgs

buffer = io.BytesIO()
labgob.LabEncoder(buffer).encode(GetArgs(Key="k", ReqID=1, ClientID=7))

buffer.seek(0)
args = labgob.LabDecoder(buffer).decode(GetArgs)
print(args.Key)              # "k"
print(labgob.error_count())  # problems reported so far
```

`decode` takes either a type the value must match or a dataclass instance
whose fields are overwritten in place, and returns the decoded value. It
raises `EOFError` at the end of the stream.

## Linearizability checking

```python
from labkit.models import KV_MODEL, KvInput, KvOutput
from labkit.porcupine.checker import check_operations
from labkit.porcupine.model import Operation

history = [
    Operation(input=KvInput(1, "x", "a"), call=0, output=KvOutput(), return_=10),
    Operation(input=KvInput(0, "x"), call=20, output=KvOutput("a"), return_=30),
]
print(check_operations(KV_MODEL, history))  # True
```

`check_operations_timeout` and `check_events_timeout` take a limit in
seconds (or a `timedelta`) and return a `CheckResult`: `OK`, `ILLEGAL`, or
`UNKNOWN` if the limit ran out. The `*_verbose` variants also return a
`LinearizationInfo` holding the longest linearizable prefixes found.

## MapReduce applications

Each application in `labkit.mrapps` provides `map_function` and
`reduce_function`:

```python
from labkit.mr.worker import ihash
from labkit.mrapps import wc

pairs = wc.map_function("doc.txt", "the cat and the hat")
print(wc.reduce_function("the", ["1", "1"]))  # "2"
print(ihash("the") % 10)                       # reduce task for this key
```

The applications are `wc`, `indexer`, `crash`, `nocrash`, `early_exit`,
`jobcount`, `mtiming` and `rtiming`. `crash` exits the process a third of
the time; `jobcount`, `mtiming` and `rtiming` write marker files in the
working directory.

## What the package does not do

- It has no simulated network or RPC layer: nothing here delivers calls
  between clients and servers.
- It has no key/value server or client; `labkit.kvsrv` holds only the
  message types.
- It has no MapReduce coordinator, worker loop or command-line runner; the
  applications are plain functions for you to call.