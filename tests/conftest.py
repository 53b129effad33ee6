"""Shared test fixtures."""
from __future__ import annotations

import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta, timezone
from typing import Any
from uuid import UUID

import pytest

from support_router.application.repositories.outbox import OutboxRecord
from support_router.domain.entities.participant import Participant
from support_router.domain.entities.session import SupportSession
from support_router.domain.value_objects.enums import (
    Availability,
    ParticipantRole,
    SessionStatus,
)
from support_router.infrastructure.queue.memory import InMemoryWaitingQueue
from support_router.services.matching_engine import MatchingEngine
from support_router.services.routing_facade import RoutingFacade

EPOCH = datetime(2024, 1, 1, tzinfo=timezone.utc)


class FakeClock:
    """Advances one second per call so creation order is strict."""

    def __init__(self, start: datetime = EPOCH) -> None:
        self._current = start

    def __call__(self) -> datetime:
        self._current += timedelta(seconds=1)
        return self._current


def make_participant(
    participant_id: int,
    *,
    name: str | None = None,
    role: ParticipantRole = ParticipantRole.CUSTOMER,
    availability: Availability = Availability.AVAILABLE,
    languages: set[str] | None = None,
    selected_language: str | None = None,
    created_at: datetime | None = None,
) -> Participant:
    return Participant(
        id=participant_id,
        display_name=name if name is not None else f"user-{participant_id}",
        role=role,
        availability=availability,
        created_at=created_at or EPOCH + timedelta(minutes=participant_id),
        supported_languages=frozenset(languages or ()),
        selected_language=selected_language,
    )


def make_operator(
    participant_id: int,
    languages: set[str],
    *,
    availability: Availability = Availability.AVAILABLE,
    created_at: datetime | None = None,
) -> Participant:
    return make_participant(
        participant_id,
        role=ParticipantRole.OPERATOR,
        availability=availability,
        languages=languages,
        created_at=created_at,
    )


def make_session(
    customer_id: int,
    operator_id: int,
    *,
    status: SessionStatus = SessionStatus.ACTIVE,
    created_at: datetime | None = None,
) -> SupportSession:
    return SupportSession(
        id=uuid.uuid4(),
        customer_id=customer_id,
        operator_id=operator_id,
        status=status,
        created_at=created_at or EPOCH,
    )


@dataclass
class FakeParticipantReader:
    _store: dict[int, Participant] = field(default_factory=dict)

    async def get_by_id(self, participant_id: int) -> Participant | None:
        return self._store.get(participant_id)

    async def list_operators_by_status_and_language(
        self, status: Availability, language: str,
    ) -> list[Participant]:
        matches = [
            p for p in self._store.values()
            if p.is_operator and p.availability == status and language in p.supported_languages
        ]
        return sorted(matches, key=lambda p: (p.created_at, p.id))

    def add(self, *participants: Participant) -> None:
        for p in participants:
            self._store[p.id] = p


@dataclass
class FakeParticipantWriter:
    _reader: FakeParticipantReader

    async def save(self, participant: Participant) -> Participant:
        self._reader._store[participant.id] = participant
        return participant


@dataclass
class FakeSessionReader:
    _store: dict[UUID, SupportSession] = field(default_factory=dict)

    async def get_by_id(self, session_id: UUID) -> SupportSession | None:
        return self._store.get(session_id)

    async def find_by_participant_role_and_status(
        self,
        participant_id: int,
        role: ParticipantRole,
        status: SessionStatus,
    ) -> list[SupportSession]:
        attr = "customer_id" if role == ParticipantRole.CUSTOMER else "operator_id"
        matches = [
            s for s in self._store.values()
            if getattr(s, attr) == participant_id and s.status == status
        ]
        return sorted(matches, key=lambda s: s.created_at)

    def add(self, *sessions: SupportSession) -> None:
        for s in sessions:
            self._store[s.id] = s

    def active(self) -> list[SupportSession]:
        return [s for s in self._store.values() if s.is_active]


@dataclass
class FakeSessionWriter:
    _reader: FakeSessionReader

    async def create(self, session: SupportSession) -> SupportSession:
        self._reader._store[session.id] = session
        return session

    async def close(self, session_id: UUID, closed_at: datetime) -> None:
        session = self._reader._store[session_id]
        if session.is_active:
            self._reader._store[session_id] = replace(
                session, status=SessionStatus.CLOSED, closed_at=closed_at,
            )


@dataclass
class FakeOutboxWriter:
    _records: list[dict[str, Any]] = field(default_factory=list)
    _sent: list[int] = field(default_factory=list)
    _failed: list[int] = field(default_factory=list)
    _dead: list[int] = field(default_factory=list)

    async def add(self, event_type: str, payload: dict[str, Any]) -> None:
        self._records.append({"event_type": event_type, "payload": payload})

    async def fetch_pending(self, batch_size: int) -> list[OutboxRecord]:
        return [
            OutboxRecord(
                id=i,
                event_type=r["event_type"],
                payload=r["payload"],
                attempts=r.get("attempts", 0),
            )
            for i, r in enumerate(self._records[:batch_size], start=1)
        ]

    async def mark_sent(self, ids: list[int]) -> None:
        self._sent.extend(ids)

    async def mark_dead(self, ids: list[int]) -> None:
        self._dead.extend(ids)

    async def mark_failed(self, record_id: int, next_retry_at: datetime) -> None:
        self._failed.append(record_id)

    def event_types(self) -> list[str]:
        return [r["event_type"] for r in self._records]


@dataclass
class FakeUoW:
    """In-memory UoW for unit tests."""
    participants: FakeParticipantReader = field(default_factory=FakeParticipantReader)
    participants_w: FakeParticipantWriter | None = None
    sessions: FakeSessionReader = field(default_factory=FakeSessionReader)
    sessions_w: FakeSessionWriter | None = None
    queue: InMemoryWaitingQueue = field(default_factory=InMemoryWaitingQueue)
    outbox: FakeOutboxWriter = field(default_factory=FakeOutboxWriter)
    _committed: bool = False
    _rolled_back: bool = False
    _began: int = 0

    def __post_init__(self) -> None:
        if self.participants_w is None:
            self.participants_w = FakeParticipantWriter(self.participants)
        if self.sessions_w is None:
            self.sessions_w = FakeSessionWriter(self.sessions)

    async def begin(self) -> None:
        self._began += 1

    async def flush(self) -> None:
        pass

    async def commit(self) -> None:
        self._committed = True
        self.queue.commit()

    async def rollback(self) -> None:
        self._rolled_back = True
        self.queue.rollback()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def engine(clock: FakeClock) -> MatchingEngine:
    return MatchingEngine(clock=clock)


@pytest.fixture
def facade(engine: MatchingEngine) -> RoutingFacade:
    return RoutingFacade(engine)


@pytest.fixture
def uow() -> FakeUoW:
    return FakeUoW()
