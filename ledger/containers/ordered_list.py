"""
Ordered Record List

A generic doubly-linked list used as the backing collection for every
store in the ledger.

DESIGN DECISION: Nodes hold a strong reference to their successor and a
weak reference to their predecessor (the same arrangement as the
pure-Python OrderedDict). The list owns the head; each following node is
owned by the one before it. No reference cycles are ever created.

Positional access is O(i) from the head. Indexes are never wrapped:
negative or past-the-end positions raise IndexError.
"""

import weakref
from typing import Any, Callable, Generic, Iterator, Optional, TypeVar


T = TypeVar("T")


class _Node(Generic[T]):
    """One link of the list."""

    __slots__ = ("value", "next", "_prev", "__weakref__")

    def __init__(self, value: T):
        self.value = value
        self.next: Optional["_Node[T]"] = None
        self._prev: Optional[weakref.ref] = None

    @property
    def prev(self) -> Optional["_Node[T]"]:
        return self._prev() if self._prev is not None else None

    @prev.setter
    def prev(self, node: Optional["_Node[T]"]) -> None:
        self._prev = weakref.ref(node) if node is not None else None


class OrderedRecordList(Generic[T]):
    """
    Unbounded doubly-linked ordered container.

    Invariants:
    - len(self) equals the number of nodes reachable from head
    - head.prev and tail.next are always None
    - a one-element list has head is tail
    - an empty list has head and tail None
    """

    def __init__(self, values: Optional[Iterator[T]] = None):
        self._head: Optional[_Node[T]] = None
        self._tail: Optional[_Node[T]] = None
        self._count = 0
        if values is not None:
            for value in values:
                self.add_to_tail(value)

    # -------------------------------------------------------------------------
    # Size
    # -------------------------------------------------------------------------

    def size(self) -> int:
        return self._count

    def empty(self) -> bool:
        return self._count == 0

    def __len__(self) -> int:
        return self._count

    def __bool__(self) -> bool:
        return self._count > 0

    # -------------------------------------------------------------------------
    # Insertion
    # -------------------------------------------------------------------------

    def add_to_head(self, value: T) -> None:
        """Insert a value before the current head."""
        node = _Node(value)
        if self._head is None:
            self._head = self._tail = node
        else:
            node.next = self._head
            self._head.prev = node
            self._head = node
        self._count += 1

    def add_to_tail(self, value: T) -> None:
        """Append a value after the current tail."""
        node = _Node(value)
        if self._tail is None:
            self._head = self._tail = node
        else:
            node.prev = self._tail
            self._tail.next = node
            self._tail = node
        self._count += 1

    # -------------------------------------------------------------------------
    # Positional access
    # -------------------------------------------------------------------------

    def _node_at(self, index: int) -> _Node[T]:
        if not isinstance(index, int) or not 0 <= index < self._count:
            raise IndexError(
                f"index {index!r} out of range for list of size {self._count}"
            )
        node = self._head
        for _ in range(index):
            node = node.next
        return node

    def get(self, index: int) -> T:
        return self._node_at(index).value

    def set(self, index: int, value: T) -> None:
        self._node_at(index).value = value

    # -------------------------------------------------------------------------
    # Removal
    # -------------------------------------------------------------------------

    def remove_head(self) -> Optional[T]:
        """Remove and return the head value. Returns None if the list is empty."""
        if self._head is None:
            return None
        node = self._head
        self._head = node.next
        if self._head is None:
            self._tail = None
        else:
            self._head.prev = None
        node.next = None
        self._count -= 1
        return node.value

    def remove_tail(self) -> Optional[T]:
        """Remove and return the tail value. Returns None if the list is empty."""
        if self._tail is None:
            return None
        node = self._tail
        self._tail = node.prev
        if self._tail is None:
            self._head = None
        else:
            self._tail.next = None
        node.prev = None
        self._count -= 1
        return node.value

    def remove(self, index: int) -> T:
        """Remove and return the value at index."""
        node = self._node_at(index)
        if node is self._head:
            return self.remove_head()
        if node is self._tail:
            return self.remove_tail()
        self._unlink(node)
        return node.value

    def clear(self) -> None:
        # Unlink iteratively so long lists never recurse on teardown
        while self._head is not None:
            self.remove_head()

    def _unlink(self, node: _Node[T]) -> None:
        """Detach an interior or edge node, fixing head/tail and count."""
        prev, nxt = node.prev, node.next
        if prev is None:
            self._head = nxt
        else:
            prev.next = nxt
        if nxt is None:
            self._tail = prev
        else:
            nxt.prev = prev
        node.next = None
        node.prev = None
        self._count -= 1

    def _link_after(self, anchor: Optional[_Node[T]], node: _Node[T]) -> None:
        """Insert a detached node after anchor, or at the head if anchor is None."""
        if anchor is None:
            node.next = self._head
            if self._head is not None:
                self._head.prev = node
            self._head = node
        else:
            node.next = anchor.next
            node.prev = anchor
            if anchor.next is not None:
                anchor.next.prev = node
            anchor.next = node
        if node.next is None:
            self._tail = node
        self._count += 1

    # -------------------------------------------------------------------------
    # Ordering
    # -------------------------------------------------------------------------

    def selection_sort(
        self,
        key: Callable[[T], Any],
        descending: bool = False,
    ) -> None:
        """
        Sort in place with selection sort.

        Each pass scans the unsorted suffix for the FIRST node holding the
        extreme key and moves that node to the end of the sorted prefix.
        Nodes are relinked rather than having their values swapped, so
        values with equal keys keep their original relative order.

        Keys are computed for every value before any node moves; if key()
        raises, the list is left unchanged.
        """
        keys = {id(node): key(node.value) for node in self._nodes()}

        def better(a, b) -> bool:
            return a > b if descending else a < b

        sorted_tail: Optional[_Node[T]] = None
        start = self._head
        while start is not None:
            best = start
            probe = start.next
            while probe is not None:
                if better(keys[id(probe)], keys[id(best)]):
                    best = probe
                probe = probe.next

            if best is start:
                sorted_tail = start
                start = start.next
                continue

            self._unlink(best)
            self._link_after(sorted_tail, best)
            sorted_tail = best
            start = best.next

    # -------------------------------------------------------------------------
    # Iteration
    # -------------------------------------------------------------------------

    def _nodes(self) -> Iterator[_Node[T]]:
        node = self._head
        while node is not None:
            yield node
            node = node.next

    def __iter__(self) -> Iterator[T]:
        for node in self._nodes():
            yield node.value

    def __reversed__(self) -> Iterator[T]:
        node = self._tail
        while node is not None:
            yield node.value
            node = node.prev

    def __repr__(self) -> str:
        return f"{type(self).__name__}({list(self)!r})"
