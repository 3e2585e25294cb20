"""Block headers and the hashing helpers used to identify them."""

import hashlib
import struct
from dataclasses import dataclass
from datetime import datetime, timezone

HASH_SIZE = 32
BLOCK_HEADER_SIZE = 80

_HEADER_LAYOUT = struct.Struct("<i32s32sIII")
_ZERO_HASH = bytes(HASH_SIZE)
_EPOCH = datetime.fromtimestamp(0, timezone.utc)


def double_sha256(data: bytes) -> bytes:
    """Return SHA-256 applied twice to ``data``."""
    return hashlib.sha256(hashlib.sha256(data).digest()).digest()


def hash_from_str(text: str) -> bytes:
    """Parse a hash shown in its usual byte-reversed hex form.

    Strings shorter than 64 characters are taken as having leading zeros.
    """
    if len(text) > HASH_SIZE * 2:
        raise ValueError(
            f"max hash string length is {HASH_SIZE * 2} bytes, got {len(text)}"
        )
    if len(text) % 2:
        text = "0" + text
    try:
        raw = bytes.fromhex(text)
    except ValueError as exc:
        raise ValueError(f"invalid hash string {text!r}") from exc
    return raw[::-1].ljust(HASH_SIZE, b"\x00")


def hash_to_str(digest: bytes) -> str:
    """Render a hash in its usual byte-reversed hex form."""
    return bytes(digest)[::-1].hex()


@dataclass(frozen=True)
class BlockHeader:
    """An 80-byte block header."""

    version: int = 0
    prev_block: bytes = _ZERO_HASH
    merkle_root: bytes = _ZERO_HASH
    timestamp: datetime = _EPOCH
    bits: int = 0
    nonce: int = 0

    def __post_init__(self) -> None:
        for name in ("prev_block", "merkle_root"):
            value = getattr(self, name)
            if len(value) != HASH_SIZE:
                raise ValueError(
                    f"{name} must be {HASH_SIZE} bytes, got {len(value)}"
                )

    def serialize(self) -> bytes:
        """Encode the header in its 80-byte wire form."""
        try:
            return _HEADER_LAYOUT.pack(
                self.version,
                bytes(self.prev_block),
                bytes(self.merkle_root),
                int(self.timestamp.timestamp()),
                self.bits,
                self.nonce,
            )
        except struct.error as exc:
            raise ValueError(f"header field out of range: {exc}") from exc

    def __bytes__(self) -> bytes:
        return self.serialize()

    @classmethod
    def from_bytes(cls, data: bytes) -> "BlockHeader":
        """Decode a header from its 80-byte wire form."""
        if len(data) != BLOCK_HEADER_SIZE:
            raise ValueError(
                f"block header must be {BLOCK_HEADER_SIZE} bytes, got {len(data)}"
            )
        version, prev, merkle, ts, bits, nonce = _HEADER_LAYOUT.unpack(bytes(data))
        return cls(
            version=version,
            prev_block=prev,
            merkle_root=merkle,
            timestamp=datetime.fromtimestamp(ts, timezone.utc),
            bits=bits,
            nonce=nonce,
        )

    def block_hash(self) -> bytes:
        """Return the double SHA-256 of the serialized header."""
        return double_sha256(self.serialize())