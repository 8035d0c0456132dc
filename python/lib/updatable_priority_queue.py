#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
updatable_priority_queue.py
---------------------------

A binary min-heap priority queue whose elements can be looked up, updated
and deleted by key, not just popped from the top.

Features
~~~~~~~~
* O(log n) add, poll, replace_top, update_element and delete_element.
* O(1) peek, size and key membership.
* Elements are opaque: two injected callables pick them apart.
  ``identity(element)`` gives the lookup key, ``priority(element)`` gives
  the value the heap is ordered by.  Both default to the identity
  function, so plain comparable values work out of the box.
* Max-heap behaviour is obtained by supplying an inverted priority
  function (e.g. ``lambda e: -e.cost``); there is no separate code path.
* O(n) bulk construction via ``heapify``.
* Empty reads return ``None`` instead of raising.

Typical usage
~~~~~~~~~~~~~
>>> from updatable_priority_queue import UpdatablePriorityQueue
>>> q = UpdatablePriorityQueue()
>>> for v in (1, 0, 5, 4, 3):
...     q.add(v)
>>> q.peek()
0
>>> [q.poll() for _ in range(len(q))]
[0, 1, 3, 4, 5]

>>> tasks = UpdatablePriorityQueue(identity=lambda t: t[0],
...                                priority=lambda t: t[1])
>>> tasks.add(("build", 5))
>>> tasks.add(("test", 7))
>>> tasks.update_element("test", ("test", 2))
('test', 7)
>>> tasks.poll()
('test', 2)
>>> tasks.delete_element("build")
('build', 5)
>>> tasks.is_empty()
True
"""

from __future__ import annotations

import logging
from typing import (
    Any,
    Callable,
    Dict,
    Generic,
    Hashable,
    Iterable,
    Iterator,
    List,
    Optional,
    TypeVar,
)

logger = logging.getLogger(__name__)

# ----------------------------------------------------------------------
#  Generic type variables
# ----------------------------------------------------------------------
T = TypeVar("T")                     # type of the stored element
K = TypeVar("K", bound=Hashable)     # type of the lookup key


def default_identity(value: Any) -> Any:
    """Use the element itself as its key."""
    return value


def default_priority(value: Any) -> Any:
    """Use the element itself as its priority."""
    return value


# ----------------------------------------------------------------------
#  Core class
# ----------------------------------------------------------------------
class UpdatablePriorityQueue(Generic[T, K]):
    """
    A min-priority queue with keyed access to every queued element.

    Next to the heap array the queue keeps a dict ``_lookup`` mapping each
    element's key to its current index in the array.  Every element move
    inside the sift primitives rewrites that mapping, which is what makes
    ``update_element`` and ``delete_element`` logarithmic.

    Parameters
    ----------
    identity : Callable[[T], K], optional
        Extracts the lookup key of an element.  Keys must be hashable and
        unique among the elements present at the same time; a collision
        corrupts the lookup index and is not detected.
    priority : Callable[[T], Any], optional
        Extracts the value compared with ``<`` to order the heap.
    iterable : Iterable[T], optional
        Initial elements, loaded with :meth:`heapify`.

    ``identity`` and ``priority`` are given together or not at all; passing
    only one of them raises ``TypeError``.

    The backing list may hold more slots than there are live elements
    (``poll`` does not shrink it).  Call :meth:`trim` to give that memory
    back in long-running queues.
    """

    __slots__ = ("_array", "_lookup", "_size", "_identity", "_priority")

    def __init__(
        self,
        identity: Optional[Callable[[T], K]] = None,
        priority: Optional[Callable[[T], Any]] = None,
        *,
        iterable: Optional[Iterable[T]] = None,
    ) -> None:
        if (identity is None) != (priority is None):
            raise TypeError(
                "identity and priority must be supplied together or not at all"
            )

        self._array: List[T] = []
        self._lookup: Dict[K, int] = {}
        self._size: int = 0
        self._identity: Callable[[T], K] = identity or default_identity
        self._priority: Callable[[T], Any] = priority or default_priority

        if iterable is not None:
            self.heapify(iterable)

    # ------------------------------------------------------------------
    #   Core public API
    # ------------------------------------------------------------------
    @property
    def size(self) -> int:
        """Number of elements currently in the queue."""
        return self._size

    def add(self, value: T) -> None:
        """
        Insert *value*.

        The caller must make sure no element with the same key is already
        queued.
        """
        if self._size < len(self._array):
            self._array[self._size] = value
        else:
            self._array.append(value)
        self._size += 1
        self._sift_up(self._size - 1)

    def peek(self) -> Optional[T]:
        """Return a smallest element without removing it, or ``None``."""
        if self._size == 0:
            return None
        return self._array[0]

    def poll(self) -> Optional[T]:
        """Remove and return a smallest element, or ``None`` if empty."""
        if self._size == 0:
            return None
        array = self._array
        top = array[0]
        self._lookup.pop(self._identity(top), None)
        self._size -= 1
        if self._size > 0:
            array[0] = array[self._size]
            self._sift_down(0)
        return top

    def replace_top(self, value: T) -> Optional[T]:
        """
        Remove and return the top element while inserting *value*.

        Cheaper than ``poll`` followed by ``add``; the size is unchanged.
        Returns ``None`` (and inserts nothing) when the queue is empty.
        """
        if self._size == 0:
            return None
        top = self._array[0]
        self._lookup.pop(self._identity(top), None)
        self._array[0] = value
        self._sift_down(0)
        return top

    def get_element(self, key: K) -> Any:
        """
        Return the priority of the element queued under *key*.
        Raises ``KeyError`` if the key is not present.
        """
        return self._priority(self._array[self._index_of(key)])

    def update_element(self, key: K, value: T) -> T:
        """
        Replace the element queued under *key* with *value* and return the
        old element.  ``identity(value)`` becomes the key at that position,
        it does not have to equal *key*.
        Raises ``KeyError`` if the key is not present.
        """
        idx = self._index_of(key)
        old = self._array[idx]
        del self._lookup[key]
        self._array[idx] = value

        # The new priority may be larger or smaller, go the matching way.
        if self._less(value, old):
            self._sift_up(idx)
        else:
            self._sift_down(idx)
        return old

    def delete_element(self, key: K) -> Optional[T]:
        """
        Remove and return the element queued under *key*, or ``None`` if
        no such element exists.  Reserved capacity is released as well.
        """
        if key not in self._lookup:
            return None
        idx = self._lookup.pop(key)
        array = self._array
        removed = array[idx]

        # Move the last live element into the hole, then cut the array.
        self._size -= 1
        last = array[self._size]
        del array[self._size:]
        logger.debug("deleted key %r at index %d, %d left", key, idx, self._size)

        if idx < self._size:
            array[idx] = last
            self._sift_up(idx)
            self._sift_down(idx)
        return removed

    def is_empty(self) -> bool:
        return self._size == 0

    def trim(self) -> None:
        """Drop reserved slots so the backing list holds live elements only."""
        released = len(self._array) - self._size
        if released:
            del self._array[self._size:]
            logger.debug("trim released %d slots", released)

    def heapify(self, iterable: Iterable[T]) -> None:
        """
        Replace the whole content of the queue with the elements of
        *iterable* and restore the heap property in O(n).
        """
        self._array = list(iterable)
        self._size = len(self._array)
        identity = self._identity
        self._lookup = {identity(value): i for i, value in enumerate(self._array)}
        for i in reversed(range(self._size // 2)):
            self._sift_down(i)
        logger.debug("heapified %d elements", self._size)

    # ------------------------------------------------------------------
    #   Python protocol support
    # ------------------------------------------------------------------
    def __len__(self) -> int:
        return self._size

    def __bool__(self) -> bool:
        return self._size > 0

    def __contains__(self, key: Any) -> bool:
        """O(1) key membership test."""
        return key in self._lookup

    def __iter__(self) -> Iterator[T]:
        """
        Iterate over the live elements in heap order (not sorted).
        Drain with ``poll`` for sorted output.
        """
        array = self._array
        return (array[i] for i in range(self._size))

    def __repr__(self) -> str:
        return f"{type(self).__name__}(size={self._size}, top={self.peek()!r})"

    # ------------------------------------------------------------------
    #   Internal heap-maintenance helpers
    # ------------------------------------------------------------------
    def _less(self, a: T, b: T) -> bool:
        return self._priority(a) < self._priority(b)

    def _index_of(self, key: K) -> int:
        try:
            return self._lookup[key]
        except KeyError:
            raise KeyError(f"Key {key!r} not found in queue") from None

    def _sift_up(self, idx: int) -> None:
        """
        Move the element at *idx* towards the root until its parent is not
        larger.  Parents are shifted down into the hole instead of swapped.
        """
        array = self._array
        lookup = self._lookup
        identity = self._identity
        value = array[idx]
        while idx > 0:
            parent = (idx - 1) // 2
            above = array[parent]
            if not self._less(value, above):
                break
            array[idx] = above
            lookup[identity(above)] = idx
            idx = parent
        array[idx] = value
        lookup[identity(value)] = idx

    def _sift_down(self, idx: int) -> None:
        """
        Move the element at *idx* towards the leaves until no child is
        smaller.  The smaller child is shifted up into the hole.
        """
        array = self._array
        lookup = self._lookup
        identity = self._identity
        size = self._size
        half = size // 2            # first leaf
        value = array[idx]
        while idx < half:
            child = 2 * idx + 1
            best = array[child]
            right = child + 1
            if right < size and self._less(array[right], best):
                child = right
                best = array[right]
            if not self._less(best, value):
                break
            array[idx] = best
            lookup[identity(best)] = idx
            idx = child
        array[idx] = value
        lookup[identity(value)] = idx

    # ------------------------------------------------------------------
    #   Debug/validation helpers
    # ------------------------------------------------------------------
    def _is_valid(self) -> bool:
        """Check heap order and lookup consistency; useful while debugging."""
        if len(self._lookup) != self._size:
            return False
        for i in range(self._size):
            value = self._array[i]
            if self._lookup.get(self._identity(value)) != i:
                return False
            for child in (2 * i + 1, 2 * i + 2):
                if child < self._size and self._less(self._array[child], value):
                    return False
        return True


def main() -> None:
    """Small illustration: poll a handful of integers back in order."""
    q: UpdatablePriorityQueue[int, int] = UpdatablePriorityQueue()
    for v in (1, 0, 5, 4, 3):
        q.add(v)
    while not q.is_empty():
        print(q.poll())


if __name__ == "__main__":
    main()
