from __future__ import annotations

from dataclasses import replace

from support_router.application.repositories.waiting_queue import QueuePredicate
from support_router.domain.entities.queue_entry import QueueEntry


class InMemoryWaitingQueue:
    """Process-wide FIFO of waiting customers.

    The first mutation after a commit takes a checkpoint, so a rolled-back
    transaction leaves the queue exactly as it was. Callers serialize access
    through the matching engine's lock.
    """

    def __init__(self) -> None:
        self._entries: list[QueueEntry] = []
        self._checkpoint: list[QueueEntry] | None = None

    def _touch(self) -> None:
        if self._checkpoint is None:
            self._checkpoint = list(self._entries)

    def _index_of(self, customer_id: int) -> int | None:
        for i, entry in enumerate(self._entries):
            if entry.customer_id == customer_id:
                return i
        return None

    async def enqueue(self, entry: QueueEntry) -> bool:
        idx = self._index_of(entry.customer_id)
        if idx is not None:
            if self._entries[idx].language != entry.language:
                self._touch()
                self._entries[idx] = replace(self._entries[idx], language=entry.language)
            return False
        self._touch()
        self._entries.append(entry)
        return True

    async def dequeue_first_matching(self, predicate: QueuePredicate) -> QueueEntry | None:
        for i, entry in enumerate(self._entries):
            if predicate(entry):
                self._touch()
                return self._entries.pop(i)
        return None

    async def remove(self, customer_id: int) -> bool:
        idx = self._index_of(customer_id)
        if idx is None:
            return False
        self._touch()
        del self._entries[idx]
        return True

    async def peek_first(self) -> QueueEntry | None:
        return self._entries[0] if self._entries else None

    async def position_of(self, customer_id: int) -> int | None:
        idx = self._index_of(customer_id)
        return idx + 1 if idx is not None else None

    async def list_entries(self) -> list[QueueEntry]:
        return list(self._entries)

    def commit(self) -> None:
        self._checkpoint = None

    def rollback(self) -> None:
        if self._checkpoint is not None:
            self._entries = self._checkpoint
            self._checkpoint = None

    def __len__(self) -> int:
        return len(self._entries)
