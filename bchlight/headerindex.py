"""An SQLite-backed index mapping header hashes to heights."""

import sqlite3
from dataclasses import dataclass
from enum import IntEnum
from typing import Iterable, Tuple

_TABLE = "header_index"


class HeaderType(IntEnum):
    """Kinds of headers kept in the index."""

    BLOCK = 0
    REGULAR_FILTER = 1


_TIP_KEYS = {
    HeaderType.BLOCK: b"bitcoin",
    HeaderType.REGULAR_FILTER: b"regular",
}


class HeightNotFoundError(LookupError):
    """A height is not in the index."""

    def __init__(self, message: str = "target height not found in index") -> None:
        super().__init__(message)


class HashNotFoundError(LookupError):
    """A block hash is not in the index."""

    def __init__(self, message: str = "target hash not found in index") -> None:
        super().__init__(message)


@dataclass(frozen=True)
class HeaderEntry:
    """A (hash, height) pair to be stored in the index."""

    hash: bytes
    height: int


def _encode_height(height: int) -> bytes:
    return height.to_bytes(4, "big")


class HeaderIndex:
    """Maps header hashes to heights and tracks the tip of one header chain.

    Indexes of different header types may share a connection: they share
    the hash entries but keep separate tips.
    """

    def __init__(self, conn: sqlite3.Connection, index_type: HeaderType) -> None:
        self.conn = conn
        self.index_type = HeaderType(index_type)
        self._tip_key = _TIP_KEYS[self.index_type]
        with self.conn:
            self.conn.execute(
                f"CREATE TABLE IF NOT EXISTS {_TABLE} "
                "(key BLOB PRIMARY KEY, value BLOB NOT NULL)"
            )

    def _get(self, key: bytes):
        row = self.conn.execute(
            f"SELECT value FROM {_TABLE} WHERE key = ?", (key,)
        ).fetchone()
        return None if row is None else bytes(row[0])

    def _put(self, key: bytes, value: bytes) -> None:
        self.conn.execute(
            f"INSERT OR REPLACE INTO {_TABLE} (key, value) VALUES (?, ?)",
            (key, value),
        )

    def add_headers(self, batch: Iterable[HeaderEntry]) -> None:
        """Write a batch of entries and move the tip to the highest one."""
        entries = sorted(batch, key=lambda entry: bytes(entry.hash))
        if not entries:
            return

        tip_hash = bytes(32)
        tip_height = 0
        with self.conn:
            for entry in entries:
                self._put(bytes(entry.hash), _encode_height(entry.height))
                if entry.height >= tip_height:
                    tip_hash = bytes(entry.hash)
                    tip_height = entry.height
            self._put(self._tip_key, tip_hash)

    def put_height(self, block_hash: bytes, height: int) -> None:
        """Record the height of a hash without touching the tip."""
        with self.conn:
            self._put(bytes(block_hash), _encode_height(height))

    def height_from_hash(self, block_hash: bytes) -> int:
        """Return the height stored for ``block_hash``."""
        value = self._get(bytes(block_hash))
        if value is None:
            raise HashNotFoundError()
        return int.from_bytes(value, "big")

    def chain_tip(self) -> Tuple[bytes, int]:
        """Return the hash and height of the tip of this index."""
        tip_hash = self._get(self._tip_key)
        height_bytes = None if tip_hash is None else self._get(tip_hash)
        if height_bytes is None or len(height_bytes) != 4:
            raise HeightNotFoundError()
        if len(tip_hash) != 32:
            raise ValueError(f"invalid tip hash length {len(tip_hash)}")
        return tip_hash, int.from_bytes(height_bytes, "big")

    def truncate_index(self, new_tip: bytes, delete: bool) -> None:
        """Point the tip at ``new_tip``, deleting the old tip entry if asked."""
        with self.conn:
            if delete:
                prev_tip = self._get(self._tip_key)
                if prev_tip is not None:
                    self.conn.execute(
                        f"DELETE FROM {_TABLE} WHERE key = ?", (prev_tip,)
                    )
            self._put(self._tip_key, bytes(new_tip))