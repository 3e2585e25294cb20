"""A block header store: a flat file of headers plus a hash-to-height index."""

import sqlite3
import threading
from dataclasses import dataclass
from datetime import datetime, timezone
from os import PathLike
from typing import Iterable, List, Optional, Tuple, Union

from bchlight.blockheader import BlockHeader, hash_to_str
from bchlight.flatfile import HeaderFile
from bchlight.headerindex import HashNotFoundError, HeaderEntry, HeaderIndex, HeaderType

MEDIAN_TIME_BLOCKS = 11
MAX_BLOCK_LOCATORS_PER_MSG = 500


@dataclass(frozen=True)
class BlockStamp:
    """A height and hash, with the block time where it is known."""

    height: int
    hash: bytes
    timestamp: Optional[datetime] = None


@dataclass(frozen=True)
class HeightHeader:
    """A block header together with its height in the main chain."""

    header: BlockHeader
    height: int

    def block_hash(self) -> bytes:
        """Hash of the wrapped header."""
        return self.header.block_hash()


def calc_past_median_time(headers: Iterable[BlockHeader]) -> datetime:
    """Median timestamp of ``headers``, following the consensus rule.

    For an even number of headers the upper middle element is taken,
    as consensus does, rather than the average of the two middle ones.
    """
    timestamps = sorted(int(header.timestamp.timestamp()) for header in headers)
    if not timestamps:
        raise ValueError("cannot compute the median time of no headers")
    return datetime.fromtimestamp(timestamps[len(timestamps) // 2], timezone.utc)


class BlockHeaderStore:
    """Stores block headers on disk and indexes them by hash.

    A new store is initialised with ``genesis_header`` at height 0. When an
    existing store is reopened, headers written to the file after the last
    index update are truncated away.
    """

    def __init__(
        self,
        directory: Union[str, PathLike],
        conn: sqlite3.Connection,
        genesis_header: BlockHeader,
    ) -> None:
        self._lock = threading.RLock()
        self._file = HeaderFile(directory, HeaderType.BLOCK)
        self._index = HeaderIndex(conn, HeaderType.BLOCK)

        if len(self._file) == 0:
            self.write_headers(HeightHeader(genesis_header, 0))
            return

        tip_hash, tip_height = self._index.chain_tip()
        file_height = len(self._file) - 1
        latest = self._read_header(file_height)
        if latest.block_hash() == tip_hash:
            return

        while file_height > tip_height:
            self._file.truncate_one()
            file_height -= 1

    def __enter__(self) -> "BlockHeaderStore":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _read_header(self, height: int) -> BlockHeader:
        return BlockHeader.from_bytes(self._file.read_raw(height))

    def chain_tip(self) -> Tuple[BlockHeader, int]:
        """Return the best known header and its height."""
        with self._lock:
            _, tip_height = self._index.chain_tip()
            return self._read_header(tip_height), tip_height

    def latest_block_locator(self) -> List[bytes]:
        """Block locator rooted at the current chain tip."""
        with self._lock:
            tip_hash, _ = self._index.chain_tip()
            return self.block_locator_from_hash(tip_hash)

    def block_locator_from_hash(self, block_hash: bytes) -> List[bytes]:
        """Block locator rooted at ``block_hash``.

        Steps back one block at a time for the first ten entries, then
        doubles the step until the genesis block is reached.
        """
        with self._lock:
            locator = [bytes(block_hash)]
            try:
                height = self._index.height_from_hash(block_hash)
            except HashNotFoundError:
                return locator
            if height == 0:
                return locator

            decrement = 1
            while height > 0 and len(locator) < MAX_BLOCK_LOCATORS_PER_MSG:
                if len(locator) > 10:
                    decrement *= 2
                height = 0 if decrement > height else height - decrement
                locator.append(self._read_header(height).block_hash())
            return locator

    def fetch_header_by_height(self, height: int) -> BlockHeader:
        """Return the header at ``height``."""
        with self._lock:
            return self._read_header(height)

    def fetch_header_ancestors(
        self, num_headers: int, stop_hash: bytes
    ) -> Tuple[List[BlockHeader], int]:
        """Return ``num_headers`` ancestors of ``stop_hash`` plus that header.

        The height of the first header returned is given alongside.
        """
        with self._lock:
            end_height = self._index.height_from_hash(stop_hash)
            start_height = end_height - num_headers
            raw = self._file.read_range(start_height, end_height)
            return [BlockHeader.from_bytes(item) for item in raw], start_height

    def height_from_hash(self, block_hash: bytes) -> int:
        """Return the height of the header with ``block_hash``."""
        return self._index.height_from_hash(block_hash)

    def fetch_header(self, block_hash: bytes) -> Tuple[BlockHeader, int]:
        """Return the header with ``block_hash`` and its height."""
        with self._lock:
            height = self._index.height_from_hash(block_hash)
            return self._read_header(height), height

    def write_headers(self, *args: HeightHeader) -> None:
        """Append headers to the file, then add them to the index."""
        headers = args
        with self._lock:
            self._file.append_raw(b"".join(h.header.serialize() for h in headers))
            self._index.add_headers(
                HeaderEntry(h.block_hash(), h.height) for h in headers
            )

    def rollback_last_block(self) -> BlockStamp:
        """Remove the tip header and return a stamp of the new tip."""
        with self._lock:
            _, tip_height = self._index.chain_tip()
            prev_header = self._read_header(tip_height - 1)
            prev_hash = prev_header.block_hash()

            self._file.truncate_one()
            self._index.truncate_index(prev_hash, True)

            return BlockStamp(tip_height - 1, prev_hash, prev_header.timestamp)

    def calc_past_median_time(self, headers: Iterable[BlockHeader]) -> datetime:
        """Median timestamp of ``headers``; see :func:`calc_past_median_time`."""
        return calc_past_median_time(headers)

    def check_connectivity(self) -> None:
        """Verify that stored headers link up and agree with the index.

        Raises ``ValueError`` describing the first inconsistency found.
        """
        with self._lock:
            _, tip_height = self._index.chain_tip()
            header = self._read_header(tip_height)

            for height in range(tip_height - 1, 0, -1):
                try:
                    new_header = self._read_header(height)
                except LookupError as exc:
                    raise ValueError(
                        f"couldn't retrieve header {hash_to_str(header.prev_block)}: {exc}"
                    ) from exc
                new_hash = new_header.block_hash()

                try:
                    index_height = self._index.height_from_hash(new_hash)
                except HashNotFoundError:
                    raise ValueError(
                        f"index and on-disk file out of sync at height: {height}"
                    ) from None
                if index_height != height:
                    raise ValueError("index height isn't monotonically increasing")

                if new_hash != header.prev_block:
                    raise ValueError(
                        f"block {hash_to_str(new_hash)} doesn't match block "
                        f"{hash_to_str(header.block_hash())}'s prev block "
                        f"({hash_to_str(header.prev_block)})"
                    )
                header = new_header

    def truncate_index(self, new_tip: bytes, delete: bool) -> None:
        """Move the index tip to ``new_tip``, optionally deleting the old entry."""
        with self._lock:
            self._index.truncate_index(new_tip, delete)

    def close(self) -> None:
        """Close the header file."""
        self._file.close()