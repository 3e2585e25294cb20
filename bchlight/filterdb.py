"""Persistent storage of compact filters keyed by block hash."""

import sqlite3
from enum import IntEnum
from typing import Optional

_TABLE = "filter_store"


class FilterType(IntEnum):
    """Kinds of filters kept in the store."""

    REGULAR = 0


class FilterNotFoundError(LookupError):
    """No filter is stored for the requested block hash."""

    def __init__(self, message: str = "unable to find filter") -> None:
        super().__init__(message)


def _filter_type(value: int) -> FilterType:
    try:
        return FilterType(value)
    except ValueError:
        raise ValueError(f"unknown filter type: {value}") from None


class FilterStore:
    """Stores serialized filters in an SQLite database.

    When the store is created for the first time the genesis filter is
    written; an existing store is left as it is.
    """

    def __init__(
        self,
        conn: sqlite3.Connection,
        genesis_hash: bytes,
        genesis_filter: Optional[bytes],
    ) -> None:
        self.conn = conn
        exists = self.conn.execute(
            "SELECT 1 FROM sqlite_master WHERE type = 'table' AND name = ?",
            (_TABLE,),
        ).fetchone()
        if exists:
            return
        with self.conn:
            self.conn.execute(
                f"CREATE TABLE {_TABLE} ("
                "filter_type INTEGER NOT NULL, "
                "block_hash BLOB NOT NULL, "
                "data BLOB NOT NULL, "
                "PRIMARY KEY (filter_type, block_hash))"
            )
            self._put(FilterType.REGULAR, genesis_hash, genesis_filter)

    def _put(
        self, filter_type: FilterType, block_hash: bytes, data: Optional[bytes]
    ) -> None:
        self.conn.execute(
            f"INSERT OR REPLACE INTO {_TABLE} (filter_type, block_hash, data) "
            "VALUES (?, ?, ?)",
            (int(filter_type), bytes(block_hash), bytes(data or b"")),
        )

    def put_filter(
        self, block_hash: bytes, filter_bytes: Optional[bytes], filter_type: int
    ) -> None:
        """Store a filter; ``None`` records that the block has an empty filter."""
        ftype = _filter_type(filter_type)
        with self.conn:
            self._put(ftype, block_hash, filter_bytes)

    def fetch_filter(self, block_hash: bytes, filter_type: int) -> Optional[bytes]:
        """Return the stored filter, or ``None`` if it was stored as empty."""
        ftype = _filter_type(filter_type)
        row = self.conn.execute(
            f"SELECT data FROM {_TABLE} WHERE filter_type = ? AND block_hash = ?",
            (int(ftype), bytes(block_hash)),
        ).fetchone()
        if row is None:
            raise FilterNotFoundError()
        data = bytes(row[0])
        return data or None