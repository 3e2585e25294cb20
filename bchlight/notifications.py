"""Notifications about blocks connected to or disconnected from the chain."""

from abc import ABC, abstractmethod

from bchlight.blockheader import BlockHeader, hash_to_str


class BlockNotification(ABC):
    """A notification about a block at the tip of the chain."""

    @property
    @abstractmethod
    def header(self) -> BlockHeader:
        """Header of the block this notification is for."""

    @property
    @abstractmethod
    def height(self) -> int:
        """Height of the block this notification is for."""

    @abstractmethod
    def chain_tip(self) -> BlockHeader:
        """Header of the chain tip after processing the block."""


class Connected(BlockNotification):
    """A new block extends the chain."""

    def __init__(self, header: BlockHeader, height: int) -> None:
        self._header = header
        self._height = height

    @property
    def header(self) -> BlockHeader:
        return self._header

    @property
    def height(self) -> int:
        return self._height

    def chain_tip(self) -> BlockHeader:
        """The connected block is the new tip."""
        return self._header

    def __str__(self) -> str:
        return (
            f"block connected (height={self._height}, "
            f"hash={hash_to_str(self._header.block_hash())})"
        )

    def __repr__(self) -> str:
        return f"Connected(height={self._height!r})"


class Disconnected(BlockNotification):
    """A block was removed from the tip of the chain by a reorg."""

    def __init__(
        self,
        header_disconnected: BlockHeader,
        height_disconnected: int,
        chain_tip: BlockHeader,
    ) -> None:
        self._header = header_disconnected
        self._height = height_disconnected
        self._chain_tip = chain_tip

    @property
    def header(self) -> BlockHeader:
        return self._header

    @property
    def height(self) -> int:
        return self._height

    def chain_tip(self) -> BlockHeader:
        """The tip of the chain once the block is removed."""
        return self._chain_tip

    def __str__(self) -> str:
        return (
            f"block disconnected (height={self._height}, "
            f"hash={hash_to_str(self._header.block_hash())})"
        )

    def __repr__(self) -> str:
        return f"Disconnected(height={self._height!r})"