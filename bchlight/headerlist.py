"""An in-memory, size-bounded chain of block headers."""

from dataclasses import dataclass, field, replace
from typing import List, Optional

from bchlight.blockheader import BlockHeader

INITIAL_INDEX_CACHE_SIZE = 1000


@dataclass(eq=True)
class Node:
    """A header in the main chain together with its height.

    ``prev`` links to the node before it, or is ``None`` at the start of
    the chain.
    """

    height: int = 0
    header: BlockHeader = field(default_factory=BlockHeader)
    prev: Optional["Node"] = field(default=None, compare=False, repr=False)


class BoundedMemoryChain:
    """A chain holding at most ``max_nodes`` of the latest nodes.

    Pushing past the limit drops the node at the front of the chain.
    """

    def __init__(self, max_nodes: int) -> None:
        if max_nodes < 1:
            raise ValueError(f"max nodes must be at least 1, got {max_nodes}")
        self.max_size = max_nodes
        self._slots: List[Optional[Node]] = [None] * max_nodes
        self._head = -1
        self._tail = -1
        self._len = 0

    def reset_header_state(self, node: Node, store=None) -> None:
        """Empty the chain and refill it ending with ``node``.

        With a header store, up to the last 1000 headers leading to
        ``node`` are loaded from it; otherwise only ``node`` is kept.
        """
        self._slots = [None] * self.max_size
        self._head = -1
        self._tail = -1
        self._len = 0

        if node.height == 0 or store is None:
            self.push_back(node)
            return

        num_headers = min(INITIAL_INDEX_CACHE_SIZE, node.height)
        headers, start_height = store.fetch_header_ancestors(
            num_headers, node.header.block_hash()
        )
        for height, header in enumerate(headers, start=start_height):
            self.push_back(Node(height=height, header=header))

    def back(self) -> Optional[Node]:
        """The last node of the chain, or ``None`` if it is empty."""
        if self._tail == -1 and self._head == -1:
            return None
        return self._slots[self._tail]

    def front(self) -> Optional[Node]:
        """The first node of the chain, or ``None`` if it is empty."""
        if self._tail == -1 and self._head == -1:
            return None
        return self._slots[self._head]

    def push_back(self, node: Node) -> Node:
        """Append a copy of ``node`` to the chain and return the stored node."""
        prev_elem = self._slots[self._tail] if self._tail != -1 else None

        self._tail = (self._tail + 1) % self.max_size

        if self._tail <= self._head or self._head == -1:
            self._head = (self._head + 1) % self.max_size
            new_head = self._slots[self._head]
            if new_head is not None:
                new_head.prev = None

        if self._tail == self._head and self._len > 0:
            # Only one slot: the new node is also the front of the chain.
            prev_elem = None

        stored = replace(node, prev=prev_elem)
        self._slots[self._tail] = stored
        self._len = min(self._len + 1, self.max_size)
        return stored

    def fetch_header_ancestors(self, node: Node, num_nodes: int) -> List[BlockHeader]:
        """Return the headers of ``node`` and its ancestors, ``num_nodes`` in all."""
        headers: List[BlockHeader] = []
        current: Optional[Node] = node
        for _ in range(num_nodes):
            if current is None:
                raise LookupError(
                    f"chain holds fewer than {num_nodes} ancestors"
                )
            headers.append(current.header)
            current = current.prev
        return headers

    def __len__(self) -> int:
        return self._len