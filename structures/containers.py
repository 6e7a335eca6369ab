"""Sequential, priority and graph containers.

These are small, problem-agnostic building blocks for the seat allocator:
- `Queue`: FIFO used for the students of one section
- `MaxPriorityQueue`: binary heap used to pick the session with the most
  students left
- `Graph`: undirected adjacency list used for seat neighbourhoods

Empty containers never raise: `dequeue`, `pop` and `peek` return `None`.
"""

from __future__ import annotations

from typing import Callable, Dict, Generic, Hashable, Iterator, List, Optional, Set, TypeVar


T = TypeVar("T")

# Compact the backing list once this many items have been consumed
# (and they make up more than half of it).
_COMPACT_THRESHOLD = 50


class Queue(Generic[T]):
    """FIFO queue with amortized O(1) enqueue/dequeue."""

    def __init__(self) -> None:
        self._items: List[T] = []
        self._head = 0

    def enqueue(self, value: T) -> None:
        self._items.append(value)

    def dequeue(self) -> Optional[T]:
        if self.is_empty():
            return None
        value = self._items[self._head]
        self._head += 1
        if self._head > _COMPACT_THRESHOLD and self._head * 2 > len(self._items):
            self._items = self._items[self._head:]
            self._head = 0
        return value

    def peek(self) -> Optional[T]:
        return None if self.is_empty() else self._items[self._head]

    def is_empty(self) -> bool:
        return self.size() == 0

    def size(self) -> int:
        return len(self._items) - self._head

    def __len__(self) -> int:
        return self.size()

    def __iter__(self) -> Iterator[T]:
        return iter(self._items[self._head:])


def _default_compare(a, b) -> float:
    return a - b


class MaxPriorityQueue(Generic[T]):
    """Binary max-heap ordered by a comparator.

    `compare(a, b)` must return a positive number when `a` has strictly higher
    priority than `b`. Equal priorities keep whatever order the sift steps
    leave them in, which is deterministic for a fixed push/pop sequence.
    """

    def __init__(self, compare: Optional[Callable[[T, T], float]] = None) -> None:
        self._heap: List[T] = []
        self._compare = compare or _default_compare

    @staticmethod
    def _parent(index: int) -> int:
        return (index - 1) // 2

    def _swap(self, i: int, j: int) -> None:
        self._heap[i], self._heap[j] = self._heap[j], self._heap[i]

    def _sift_up(self, index: int) -> None:
        i = index
        while i > 0:
            p = self._parent(i)
            if self._compare(self._heap[i], self._heap[p]) <= 0:
                break
            self._swap(i, p)
            i = p

    def _sift_down(self, index: int) -> None:
        i = index
        n = len(self._heap)
        while True:
            left = 2 * i + 1
            right = 2 * i + 2
            largest = i

            if left < n and self._compare(self._heap[left], self._heap[largest]) > 0:
                largest = left
            if right < n and self._compare(self._heap[right], self._heap[largest]) > 0:
                largest = right
            if largest == i:
                break
            self._swap(i, largest)
            i = largest

    def push(self, value: T) -> None:
        self._heap.append(value)
        self._sift_up(len(self._heap) - 1)

    def pop(self) -> Optional[T]:
        if self.is_empty():
            return None
        root = self._heap[0]
        last = self._heap.pop()
        if self._heap:
            self._heap[0] = last
            self._sift_down(0)
        return root

    def peek(self) -> Optional[T]:
        return None if self.is_empty() else self._heap[0]

    def is_empty(self) -> bool:
        return not self._heap

    def size(self) -> int:
        return len(self._heap)

    def __len__(self) -> int:
        return len(self._heap)

    def __iter__(self) -> Iterator[T]:
        # Heap-array order, not priority order.
        return iter(list(self._heap))


class Graph:
    """Undirected graph stored as an adjacency list."""

    def __init__(self) -> None:
        self._adj: Dict[Hashable, Set[Hashable]] = {}

    def add_node(self, node: Hashable) -> None:
        self._adj.setdefault(node, set())

    def add_edge(self, a: Optional[Hashable], b: Optional[Hashable]) -> None:
        if a is None or b is None:
            return
        self.add_node(a)
        self.add_node(b)
        self._adj[a].add(b)
        self._adj[b].add(a)

    def neighbors(self, node: Hashable) -> Set[Hashable]:
        return self._adj.get(node, set())

    def __contains__(self, node: Hashable) -> bool:
        return node in self._adj

    def __len__(self) -> int:
        return len(self._adj)
