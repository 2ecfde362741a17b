"""
Recency List
访问顺序链表

Doubly linked list used by the disk cache to keep entries in recency order.
Front is the most recently used entry, back is the least recently used one.

All mutating operations are O(1); callers keep the node returned by
``push_front`` and pass it back to ``remove`` / ``move_to_front``.
"""

from typing import Any, Iterator, Optional


class ListNode:
    """A single list node holding one value."""

    __slots__ = ("value", "prev", "next")

    def __init__(self, value: Any):
        self.value = value
        self.prev: Optional["ListNode"] = None
        self.next: Optional["ListNode"] = None

    def __repr__(self) -> str:
        return f"ListNode({self.value!r})"


class RecencyList:
    """
    Doubly linked list with O(1) push, remove and move-to-front.

    Not thread-safe: the owner is expected to serialize access.
    """

    def __init__(self):
        self._front: Optional[ListNode] = None
        self._back: Optional[ListNode] = None
        self._len = 0

    def __len__(self) -> int:
        return self._len

    def __iter__(self) -> Iterator[Any]:
        node = self._front
        while node is not None:
            yield node.value
            node = node.next

    def front(self) -> Optional[ListNode]:
        return self._front

    def back(self) -> Optional[ListNode]:
        return self._back

    def push_front(self, value: Any) -> ListNode:
        """Insert ``value`` as the most recently used entry."""
        node = ListNode(value)
        node.next = self._front
        if self._front is not None:
            self._front.prev = node
        self._front = node
        if self._back is None:
            self._back = node
        self._len += 1
        return node

    def push_back(self, value: Any) -> ListNode:
        """Insert ``value`` as the least recently used entry."""
        node = ListNode(value)
        node.prev = self._back
        if self._back is not None:
            self._back.next = node
        self._back = node
        if self._front is None:
            self._front = node
        self._len += 1
        return node

    def remove(self, node: ListNode) -> None:
        """
        Unlink ``node`` from the list.

        Works for the head, the tail and interior nodes. The removed node's
        links are cleared so it can't be used to walk back into the list.
        """
        if node.prev is None:
            self._front = node.next
        else:
            node.prev.next = node.next

        if node.next is None:
            self._back = node.prev
        else:
            node.next.prev = node.prev

        node.prev = None
        node.next = None
        self._len -= 1

    def move_to_front(self, node: ListNode) -> None:
        """Promote ``node`` to most recently used. No-op for the front node."""
        if node is self._front:
            return

        # Detach (node.prev is not None here)
        node.prev.next = node.next
        if node.next is None:
            self._back = node.prev
        else:
            node.next.prev = node.prev

        # Re-attach at the front
        node.prev = None
        node.next = self._front
        self._front.prev = node
        self._front = node
