"""A filter header store: a flat file of filter headers plus an index tip."""

import sqlite3
import threading
from dataclasses import dataclass
from os import PathLike
from typing import List, Optional, Tuple, Union

from bchlight.blockstore import BlockStamp
from bchlight.flatfile import HeaderFile, HeaderNotFoundError
from bchlight.headerindex import HeaderIndex, HeaderType


@dataclass(frozen=True)
class FilterHeader:
    """A filter header together with the hash and height of its block."""

    header_hash: bytes
    filter_hash: bytes
    height: int


class FilterHeaderStore:
    """Stores regular filter headers on disk, indexed through block hashes.

    The hash-to-height entries are expected to be written by the block
    header store sharing the same connection; this store only moves its own
    tip. A new store is initialised with the genesis filter header. If
    ``header_state_assertion`` is given and the stored header at its height
    differs, the on-disk state is discarded and rebuilt from genesis.
    """

    def __init__(
        self,
        directory: Union[str, PathLike],
        conn: sqlite3.Connection,
        genesis_hash: bytes,
        genesis_filter_hash: bytes,
        header_state_assertion: Optional[FilterHeader] = None,
    ) -> None:
        self._lock = threading.RLock()
        self._directory = directory
        self._conn = conn
        self._genesis = FilterHeader(bytes(genesis_hash), bytes(genesis_filter_hash), 0)
        self._open(header_state_assertion)

    def _open(self, header_state_assertion: Optional[FilterHeader]) -> None:
        self._file = HeaderFile(self._directory, HeaderType.REGULAR_FILTER)
        self._index = HeaderIndex(self._conn, HeaderType.REGULAR_FILTER)

        if len(self._file) == 0:
            self.write_headers(self._genesis)
            return

        if header_state_assertion is not None:
            if self._maybe_reset_header_state(header_state_assertion):
                self._open(None)
                return

        tip_hash, tip_height = self._index.chain_tip()
        file_height = len(self._file) - 1
        latest = self._file.read_raw(file_height)
        if latest == tip_hash:
            return

        while file_height > tip_height:
            self._file.truncate_one()
            file_height -= 1

    def _maybe_reset_header_state(self, assertion: FilterHeader) -> bool:
        try:
            asserted = self.fetch_header_by_height(assertion.height)
        except HeaderNotFoundError:
            return False
        if asserted != bytes(assertion.filter_hash):
            self._file.remove()
            return True
        return False

    def __enter__(self) -> "FilterHeaderStore":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def fetch_header(self, block_hash: bytes) -> bytes:
        """Return the filter header of the block with ``block_hash``."""
        with self._lock:
            height = self._index.height_from_hash(block_hash)
            return self._file.read_raw(height)

    def fetch_header_by_height(self, height: int) -> bytes:
        """Return the filter header at ``height``."""
        with self._lock:
            return self._file.read_raw(height)

    def fetch_header_ancestors(
        self, num_headers: int, stop_hash: bytes
    ) -> Tuple[List[bytes], int]:
        """Return ``num_headers`` ancestor filter headers of ``stop_hash`` plus its own.

        The height of the first header returned is given alongside.
        """
        with self._lock:
            end_height = self._index.height_from_hash(stop_hash)
            start_height = end_height - num_headers
            return self._file.read_range(start_height, end_height), start_height

    def write_headers(self, *args: FilterHeader) -> None:
        """Append filter headers and move the tip to the last one."""
        headers = args
        if not headers:
            return
        with self._lock:
            self._file.append_raw(b"".join(bytes(h.filter_hash) for h in headers))
            self._index.truncate_index(headers[-1].header_hash, False)

    def chain_tip(self) -> Tuple[bytes, int]:
        """Return the latest filter header and its height."""
        with self._lock:
            _, tip_height = self._index.chain_tip()
            return self._file.read_raw(tip_height), tip_height

    def rollback_last_block(self, new_tip: bytes) -> BlockStamp:
        """Remove the tip filter header, pointing the tip at block ``new_tip``."""
        with self._lock:
            _, tip_height = self._index.chain_tip()
            new_height = tip_height - 1
            new_header = self._file.read_raw(new_height)

            self._file.truncate_one()
            self._index.truncate_index(new_tip, False)

            return BlockStamp(new_height, new_header)

    def truncate_index(self, new_tip: bytes, delete: bool) -> None:
        """Move the index tip to ``new_tip``, optionally deleting the old entry."""
        with self._lock:
            self._index.truncate_index(new_tip, delete)

    def close(self) -> None:
        """Close the header file."""
        self._file.close()