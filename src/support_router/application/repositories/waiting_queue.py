from __future__ import annotations

from typing import Callable, Protocol

from support_router.domain.entities.queue_entry import QueueEntry

QueuePredicate = Callable[[QueueEntry], bool]


class WaitingQueue(Protocol):
    async def enqueue(self, entry: QueueEntry) -> bool:
        """Append to the tail. Returns False if the customer was already queued.

        An already-queued customer keeps its position; only the language is refreshed.
        """
        ...

    async def dequeue_first_matching(self, predicate: QueuePredicate) -> QueueEntry | None:
        """Remove and return the earliest entry satisfying predicate."""
        ...

    async def remove(self, customer_id: int) -> bool: ...

    async def peek_first(self) -> QueueEntry | None: ...

    async def position_of(self, customer_id: int) -> int | None:
        """1-based position, or None when not queued."""
        ...

    async def list_entries(self) -> list[QueueEntry]: ...

    def commit(self) -> None: ...

    def rollback(self) -> None: ...
