from __future__ import annotations

import asyncio
from dataclasses import dataclass

import pytest

from support_router.application.exceptions import (
    ConflictError,
    InvalidArgumentError,
    InvalidOperationError,
    StorageError,
)
from support_router.domain.value_objects.enums import Availability, SessionStatus
from support_router.services import directory_service
from support_router.services.matching_engine import MatchingEngine
from support_router.services.routing_facade import RoutingFacade
from tests.conftest import (
    FakeClock,
    FakeOutboxWriter,
    FakeParticipantReader,
    FakeUoW,
    make_operator,
    make_participant,
    make_session,
)


def _assert_single_active_session_per_participant(uow: FakeUoW) -> None:
    seen: list[int] = []
    for session in uow.sessions.active():
        seen.extend([session.customer_id, session.operator_id])
    assert len(seen) == len(set(seen))


@pytest.mark.asyncio
async def test_select_language_pairs_with_available_operator(engine, uow):
    uow.participants.add(make_participant(1), make_operator(10, {"ru", "en"}))

    async with engine.transaction(uow):
        operator = await engine.select_language(await uow.participants.get_by_id(1), "RU", uow)

    assert operator is not None and operator.id == 10
    assert uow.participants._store[10].availability == Availability.BUSY
    assert uow.participants._store[1].selected_language == "ru"
    [session] = uow.sessions.active()
    assert (session.customer_id, session.operator_id) == (1, 10)
    assert uow._committed is True


@pytest.mark.asyncio
async def test_earliest_registered_operator_wins(engine, uow):
    uow.participants.add(
        make_participant(1),
        make_operator(30, {"ru"}),
        make_operator(20, {"ru"}),
        make_operator(5, {"en"}),
    )

    async with engine.transaction(uow):
        operator = await engine.select_language(uow.participants._store[1], "ru", uow)

    assert operator is not None and operator.id == 20


@pytest.mark.asyncio
async def test_busy_operator_is_skipped(engine, uow):
    uow.participants.add(
        make_participant(1),
        make_operator(10, {"ru"}, availability=Availability.BUSY),
        make_operator(11, {"ru"}),
    )

    async with engine.transaction(uow):
        operator = await engine.select_language(uow.participants._store[1], "ru", uow)

    assert operator is not None and operator.id == 11


@pytest.mark.asyncio
async def test_no_operator_queues_customer_once(engine, uow):
    uow.participants.add(make_participant(1), make_operator(10, {"ru"}))

    for _ in range(3):
        async with engine.transaction(uow):
            result = await engine.select_language(uow.participants._store[1], "uz", uow)
        assert result is None

    assert [e.customer_id for e in await uow.queue.list_entries()] == [1]
    assert uow.sessions.active() == []
    assert uow.outbox.event_types().count("routing.customer_queued") == 1


@pytest.mark.asyncio
async def test_operator_cannot_select_language(engine, uow):
    uow.participants.add(make_operator(10, {"ru"}))

    with pytest.raises(InvalidOperationError):
        async with engine.transaction(uow):
            await engine.select_language(uow.participants._store[10], "ru", uow)

    assert uow._rolled_back is True


@pytest.mark.asyncio
async def test_customer_in_session_cannot_be_matched_again(engine, uow):
    uow.participants.add(
        make_participant(1),
        make_operator(10, {"ru"}, availability=Availability.BUSY),
        make_operator(11, {"ru"}),
    )
    uow.sessions.add(make_session(1, 10))

    with pytest.raises(ConflictError):
        async with engine.transaction(uow):
            await engine.select_language(uow.participants._store[1], "ru", uow)

    _assert_single_active_session_per_participant(uow)


@pytest.mark.asyncio
async def test_assign_without_language_returns_none(engine, uow):
    uow.participants.add(make_participant(1), make_operator(10, {"ru"}))

    async with engine.transaction(uow):
        assert await engine.assign(uow.participants._store[1], uow) is None

    assert len(uow.queue) == 0


@pytest.mark.asyncio
async def test_calls_outside_transaction_are_rejected(engine, uow):
    uow.participants.add(make_participant(1))

    with pytest.raises(RuntimeError):
        await engine.select_language(uow.participants._store[1], "ru", uow)


@pytest.mark.asyncio
async def test_end_session_hands_operator_next_queued_customer(engine, uow):
    uow.participants.add(make_participant(1), make_participant(2), make_operator(10, {"ru", "en"}))

    async with engine.transaction(uow):
        await engine.select_language(uow.participants._store[1], "ru", uow)
    async with engine.transaction(uow):
        assert await engine.select_language(uow.participants._store[2], "ru", uow) is None
    first = uow.sessions.active()[0]

    async with engine.transaction(uow):
        follow_up = await engine.end_session(first, uow)

    assert uow.sessions._store[first.id].status == SessionStatus.CLOSED
    assert follow_up is not None
    assert (follow_up.customer_id, follow_up.operator_id) == (2, 10)
    assert uow.participants._store[10].availability == Availability.BUSY
    assert len(uow.queue) == 0
    _assert_single_active_session_per_participant(uow)


@pytest.mark.asyncio
async def test_end_closed_session_is_noop(engine, uow):
    uow.participants.add(make_participant(1), make_operator(10, {"ru"}, availability=Availability.BUSY))
    session = make_session(1, 10, status=SessionStatus.CLOSED)
    uow.sessions.add(session)

    async with engine.transaction(uow):
        assert await engine.end_session(session, uow) is None

    assert uow.participants._store[10].availability == Availability.BUSY
    assert uow.outbox._records == []


@pytest.mark.asyncio
async def test_free_and_advance_takes_earliest_matching_customer(engine, uow):
    operator = make_operator(10, {"ru"}, availability=Availability.BUSY)
    uow.participants.add(
        make_participant(1, selected_language="en"),
        make_participant(2, selected_language="ru"),
        make_participant(3, selected_language="ru"),
        operator,
    )
    async with engine.transaction(uow):
        for cid in (1, 2, 3):
            await engine.assign(uow.participants._store[cid], uow)

    async with engine.transaction(uow):
        session = await engine.free_and_advance(operator, uow)

    assert session is not None and session.customer_id == 2
    assert [e.customer_id for e in await uow.queue.list_entries()] == [1, 3]


@pytest.mark.asyncio
async def test_free_and_advance_without_match_leaves_operator_available(engine, uow):
    operator = make_operator(10, {"uz"}, availability=Availability.BUSY)
    uow.participants.add(make_participant(1, selected_language="ru"), operator)
    async with engine.transaction(uow):
        await engine.assign(uow.participants._store[1], uow)

    async with engine.transaction(uow):
        assert await engine.free_and_advance(operator, uow) is None

    assert uow.participants._store[10].availability == Availability.AVAILABLE
    assert [e.customer_id for e in await uow.queue.list_entries()] == [1]


@pytest.mark.asyncio
async def test_failed_transaction_restores_queue(engine, uow):
    uow.participants.add(make_participant(1, selected_language="ru"))
    async with engine.transaction(uow):
        await engine.assign(uow.participants._store[1], uow)
    uow.participants.add(make_operator(10, {"ru"}, availability=Availability.BUSY))

    with pytest.raises(RuntimeError):
        async with engine.transaction(uow):
            await uow.queue.dequeue_first_matching(lambda e: True)
            raise RuntimeError("storage went away")

    assert [e.customer_id for e in await uow.queue.list_entries()] == [1]


@pytest.mark.asyncio
async def test_sticky_language_by_default(engine, uow):
    uow.participants.add(make_participant(1), make_operator(10, {"ru"}))
    async with engine.transaction(uow):
        await engine.select_language(uow.participants._store[1], "ru", uow)

    async with engine.transaction(uow):
        await engine.end_session(uow.sessions.active()[0], uow)

    assert uow.participants._store[1].selected_language == "ru"


@pytest.mark.asyncio
async def test_language_cleared_on_session_end_when_configured(uow):
    engine = MatchingEngine(clear_language_on_session_end=True, clock=FakeClock())
    uow.participants.add(make_participant(1), make_operator(10, {"ru"}))
    async with engine.transaction(uow):
        await engine.select_language(uow.participants._store[1], "ru", uow)

    async with engine.transaction(uow):
        await engine.end_session(uow.sessions.active()[0], uow)

    assert uow.participants._store[1].selected_language is None


@pytest.mark.asyncio
async def test_support_scenario_operator_is_rematched_not_left_idle(engine, uow):
    # operator 1 serves ru/en; customer 2 takes it, customer 3 queues and is picked up next
    uow.participants.add(make_participant(2, name="B"), make_participant(3, name="C"))
    uow.participants.add(make_participant(1, name="A"))
    async with engine.transaction(uow):
        await directory_service.register_operator(uow.participants._store[1], "ru, en", uow)

    async with engine.transaction(uow):
        assert (await engine.select_language(uow.participants._store[2], "ru", uow)).id == 1
    assert uow.participants._store[1].availability == Availability.BUSY

    async with engine.transaction(uow):
        assert await engine.select_language(uow.participants._store[3], "ru", uow) is None
    assert await uow.queue.position_of(3) == 1

    async with engine.transaction(uow):
        follow_up = await engine.end_session(uow.sessions.active()[0], uow)

    assert follow_up is not None and follow_up.customer_id == 3 and follow_up.operator_id == 1
    assert uow.participants._store[1].availability == Availability.BUSY
    assert len(uow.queue) == 0
    _assert_single_active_session_per_participant(uow)


@dataclass
class YieldingParticipantReader(FakeParticipantReader):
    """Gives other tasks a chance to run on every read."""

    async def get_by_id(self, participant_id: int):
        await asyncio.sleep(0)
        return await super().get_by_id(participant_id)

    async def list_operators_by_status_and_language(self, status, language):
        await asyncio.sleep(0)
        return await super().list_operators_by_status_and_language(status, language)


class FailingOutboxWriter(FakeOutboxWriter):
    async def add(self, event_type, payload) -> None:
        raise StorageError("outbox insert failed")


@pytest.mark.asyncio
async def test_transaction_begins_unit_of_work_under_lock(engine, uow):
    seen: list[bool] = []

    async def _begin() -> None:
        seen.append(engine._lock.locked())

    uow.begin = _begin
    async with engine.transaction(uow):
        pass

    assert seen == [True]


@pytest.mark.asyncio
async def test_blank_language_is_rejected(engine, uow):
    uow.participants.add(make_participant(1))

    with pytest.raises(InvalidArgumentError):
        async with engine.transaction(uow):
            await engine.select_language(uow.participants._store[1], "   ", uow)

    assert uow.participants._store[1].selected_language is None
    assert len(uow.queue) == 0


@pytest.mark.asyncio
async def test_concurrent_customers_never_share_an_operator():
    uow = FakeUoW(participants=YieldingParticipantReader())
    uow.participants.add(make_participant(1), make_participant(2), make_operator(10, {"ru"}))
    facade = RoutingFacade(MatchingEngine(clock=FakeClock()))

    results = await asyncio.gather(
        facade.on_select_language(uow.participants._store[1], "ru", uow),
        facade.on_select_language(uow.participants._store[2], "ru", uow),
    )

    assert [r.id if r else None for r in results] == [10, None]
    assert len(uow.sessions.active()) == 1
    assert [e.customer_id for e in await uow.queue.list_entries()] == [2]
    _assert_single_active_session_per_participant(uow)


@pytest.mark.asyncio
async def test_queued_customer_is_dequeued_once_under_concurrent_release():
    uow = FakeUoW(participants=YieldingParticipantReader())
    uow.participants.add(
        make_participant(1),
        make_participant(2, selected_language="ru"),
        make_operator(10, {"ru"}, availability=Availability.BUSY),
    )
    uow.sessions.add(make_session(1, 10))
    facade = RoutingFacade(MatchingEngine(clock=FakeClock()))
    async with facade.engine.transaction(uow):
        await facade.engine.assign(uow.participants._store[2], uow)

    stopped, freed = await asyncio.gather(
        facade.on_stop(uow.participants._store[1], uow),
        facade.on_set_availability(uow.participants._store[10], Availability.AVAILABLE, uow),
        return_exceptions=True,
    )

    assert stopped.follow_up is not None and stopped.follow_up.customer_id == 2
    assert isinstance(freed, ConflictError)
    [session] = uow.sessions.active()
    assert (session.customer_id, session.operator_id) == (2, 10)
    assert len(uow.queue) == 0
    assert uow.outbox.event_types().count("routing.session_started") == 1


@pytest.mark.asyncio
async def test_storage_failure_propagates_and_restores_queue(engine):
    uow = FakeUoW(outbox=FailingOutboxWriter())
    uow.participants.add(make_participant(1))

    with pytest.raises(StorageError):
        async with engine.transaction(uow):
            await engine.select_language(uow.participants._store[1], "uz", uow)

    assert uow._rolled_back is True
    assert len(uow.queue) == 0
