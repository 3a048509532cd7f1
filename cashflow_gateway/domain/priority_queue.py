"""Binary max-heap keyed by settlement magnitude"""

from typing import List, Optional

from cashflow_gateway.domain.models import QueueEntry


class MaxPriorityQueue:
    """
    Max-ordered priority queue of QueueEntry items.

    Ordering is by `magnitude` only. Among equal magnitudes pop order follows
    the heap layout: sift-down prefers the left child on ties, so results are
    reproducible for a given push order but not stable.
    """

    def __init__(self) -> None:
        self._heap: List[QueueEntry] = []

    def push(self, entry: QueueEntry) -> None:
        self._heap.append(entry)
        self._sift_up(len(self._heap) - 1)

    def pop(self) -> Optional[QueueEntry]:
        """Remove and return the largest entry, or None when empty"""
        if not self._heap:
            return None
        last = self._heap.pop()
        if not self._heap:
            return last
        root = self._heap[0]
        self._heap[0] = last
        self._sift_down(0)
        return root

    def peek(self) -> Optional[QueueEntry]:
        return self._heap[0] if self._heap else None

    def size(self) -> int:
        return len(self._heap)

    def __len__(self) -> int:
        return len(self._heap)

    def drain(self) -> List[QueueEntry]:
        """Empty the queue, returning entries in pop order"""
        drained = []
        while self._heap:
            drained.append(self.pop())
        return drained

    def _sift_up(self, index: int) -> None:
        heap = self._heap
        while index > 0:
            parent = (index - 1) // 2
            if heap[index].magnitude <= heap[parent].magnitude:
                break
            heap[index], heap[parent] = heap[parent], heap[index]
            index = parent

    def _sift_down(self, index: int) -> None:
        heap = self._heap
        size = len(heap)
        while True:
            largest = index
            left = 2 * index + 1
            right = left + 1

            # Strict comparisons: left child wins ties
            if left < size and heap[left].magnitude > heap[largest].magnitude:
                largest = left
            if right < size and heap[right].magnitude > heap[largest].magnitude:
                largest = right

            if largest == index:
                return
            heap[index], heap[largest] = heap[largest], heap[index]
            index = largest
