# bchlight

Storage components for a light Bitcoin Cash client. It uses only the
standard library and keeps its indexes in SQLite.

## What is inside

- `bchlight.blockheader`: the 80-byte `BlockHeader` (a frozen dataclass with
  `version`, `prev_block`, `merkle_root`, `timestamp` as a `datetime`, `bits`
  and `nonce`), with `serialize()`, `from_bytes()` and `block_hash()`. Also
  `double_sha256`, and `hash_from_str` / `hash_to_str` for the usual
  byte-reversed hex form of a hash.
- `bchlight.headerindex`: `HeaderIndex`, an SQLite table that maps header
  hashes to heights and keeps a separate tip for each `HeaderType`
  (`BLOCK`, `REGULAR_FILTER`). It raises `HashNotFoundError` and
  `HeightNotFoundError`.
- `bchlight.flatfile`: `HeaderFile`, an append-only file of fixed-size raw
  headers addressed by height (80 bytes for block headers, 32 for filter
  headers). It reads single headers or ranges and truncates the last header.
  Missing headers raise `HeaderNotFoundError`.
- `bchlight.blockstore`: `BlockHeaderStore` puts a `HeaderFile` and a
  `HeaderIndex` together. It offers the chain tip, lookup by height or hash,
  ancestor ranges, block locators, `rollback_last_block()` which returns a
  `BlockStamp`, and `check_connectivity()`. Headers are written as
  `HeightHeader` values. When an existing store is reopened, headers that
  reached the file but not the index are truncated away.
  `calc_past_median_time` gives the consensus median time of a set of
  headers.
- `bchlight.filterstore`: `FilterHeaderStore`, the same for regular
  compact-filter headers, written as `FilterHeader` values. An optional
  `FilterHeader` state assertion discards the on-disk state and rebuilds it
  from genesis when the stored header at that height differs.
- `bchlight.filterdb`: `FilterStore`, persistent storage of serialized
  filters by block hash and `FilterType`. It raises `FilterNotFoundError`.
- `bchlight.filtercontrol`: `control_cf_header` checks a filter header against
  the built-in mainnet and testnet3 checkpoints, or against a mapping you
  pass in, and raises `CheckpointMismatchError` on a mismatch.
- `bchlight.notifications`: the `Connected` and `Disconnected` block
  notifications, both `BlockNotification`s with `header`, `height` and
  `chain_tip()`.
- `bchlight.lru`: `LRUCache`, a thread-safe least-recently-used cache bounded
  by the summed `size()` of its values, with `CacheableBlock`,
  `CacheableFilter` and `FilterCacheKey`. A missing key raises
  `ElementNotFoundError`.
- `bchlight.headerlist`: `BoundedMemoryChain`, a ring that holds the last N
  header `Node`s and can be walked backwards through `Node.prev`.
- `bchlight.progress`: `HeaderProgressLogger`, which writes sync progress
  messages through a logger at most once every ten seconds.

## What it does not do

The package stores and checks data. It does not talk to peers or sync a
chain. It has no queue or subscription manager to deliver block
notifications to clients: `Connected` and `Disconnected` are plain values,
and you deliver them yourself. It has no command-line program.

## Installing

```
pip install .
```

## Example

```python
import sqlite3
import tempfile
from datetime import datetime, timezone

from bchlight.blockheader import BlockHeader
from bchlight.blockstore import BlockHeaderStore, HeightHeader

genesis = BlockHeader(
    version=1,
    timestamp=datetime.fromtimestamp(1296688602, timezone.utc),
    bits=0x207FFFFF,
    nonce=2,
)

directory = tempfile.mkdtemp()
conn = sqlite3.connect(f"{directory}/index.db")

with BlockHeaderStore(directory, conn, genesis) as store:
    child = BlockHeader(
        version=1,
        prev_block=genesis.block_hash(),
        timestamp=datetime.fromtimestamp(1296688662, timezone.utc),
        bits=0x207FFFFF,
        nonce=7,
    )
    store.write_headers(HeightHeader(child, 1))

    header, height = store.chain_tip()
    assert height == 1 and header == child
    store.check_connectivity()
```

The LRU cache takes any value with a `size()` method:

```python
from dataclasses import dataclass

from bchlight.lru import ElementNotFoundError, LRUCache


@dataclass
class Item:
    value: int
    weight: int

    def size(self) -> int:
        return self.weight


cache = LRUCache(capacity=2)
cache.put("a", Item(1, 1))
cache.put("b", Item(2, 1))
evicted = cache.put("c", Item(3, 1))   # True: "a" was least recently used
try:
    cache.get("a")
except ElementNotFoundError:
    pass
```

## Running the tests

```
pip install .[test]
pytest
```