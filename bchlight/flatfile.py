"""Flat files holding fixed-size headers, one after another, by height."""

import os
import threading
from pathlib import Path
from typing import List, Union

from bchlight.headerindex import HeaderType

_FILE_NAMES = {
    HeaderType.BLOCK: "block_headers.bin",
    HeaderType.REGULAR_FILTER: "reg_filter_headers.bin",
}

_HEADER_SIZES = {
    HeaderType.BLOCK: 80,
    HeaderType.REGULAR_FILTER: 32,
}


class HeaderNotFoundError(LookupError):
    """A header could not be read from the flat file."""


def _header_type(value: int) -> HeaderType:
    try:
        return HeaderType(value)
    except ValueError:
        raise ValueError(f"unknown index type: {value}") from None


def header_size(header_type: int) -> int:
    """Size in bytes of one header of the given type."""
    return _HEADER_SIZES[_header_type(header_type)]


class HeaderFile:
    """An append-only file of raw headers, addressed by height.

    The header at height ``h`` starts at byte ``h * header_size``.
    """

    def __init__(self, directory: Union[str, os.PathLike], header_type: int) -> None:
        self.header_type = _header_type(header_type)
        self.header_size = _HEADER_SIZES[self.header_type]
        self.path = Path(directory) / _FILE_NAMES[self.header_type]
        self._lock = threading.Lock()
        # Append mode makes every write land at the end of the file.
        self._file = open(self.path, "a+b", buffering=0)

    def __enter__(self) -> "HeaderFile":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _size(self) -> int:
        return os.fstat(self._file.fileno()).st_size

    def _read_at(self, offset: int, length: int) -> bytes:
        with self._lock:
            self._file.seek(offset)
            chunks = []
            remaining = length
            while remaining:
                chunk = self._file.read(remaining)
                if not chunk:
                    break
                chunks.append(chunk)
                remaining -= len(chunk)
        return b"".join(chunks)

    def append_raw(self, data: bytes) -> None:
        """Append raw header bytes to the end of the file."""
        with self._lock:
            view = memoryview(bytes(data))
            while view:
                written = self._file.write(view)
                view = view[written:]

    def read_raw(self, height: int) -> bytes:
        """Read the raw header stored at ``height``."""
        if height < 0:
            raise HeaderNotFoundError(f"invalid height: {height}")
        raw = self._read_at(height * self.header_size, self.header_size)
        if len(raw) != self.header_size:
            raise HeaderNotFoundError(f"no header at height {height}: EOF")
        return raw

    def read_range(self, start_height: int, end_height: int) -> List[bytes]:
        """Read the raw headers from ``start_height`` to ``end_height`` inclusive."""
        if start_height < 0 or end_height < start_height:
            raise ValueError(
                f"invalid header range: {start_height} to {end_height}"
            )
        count = end_height - start_height + 1
        length = count * self.header_size
        raw = self._read_at(start_height * self.header_size, length)
        if len(raw) != length:
            raise HeaderNotFoundError(
                f"headers {start_height} to {end_height} not found: EOF"
            )
        size = self.header_size
        return [raw[offset:offset + size] for offset in range(0, length, size)]

    def truncate_one(self) -> None:
        """Remove the last header from the end of the file."""
        with self._lock:
            new_size = self._size() - self.header_size
            if new_size < 0:
                raise ValueError("cannot truncate an empty header file")
            self._file.truncate(new_size)

    def __len__(self) -> int:
        return self._size() // self.header_size

    def close(self) -> None:
        """Close the underlying file."""
        with self._lock:
            self._file.close()

    def remove(self) -> None:
        """Close the file and delete it from disk."""
        self.close()
        os.remove(self.path)