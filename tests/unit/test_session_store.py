'''
Unit tests for the in-memory session store and its cleanup task.
'''

from __future__ import annotations

import asyncio
from datetime import timedelta

import pytest

from sourceauth.auth import SessionStore
from sourceauth.core import generate_session_id
from sourceauth.models import AuthType, BasicSessionData, Session


def _session(clock, source_id: str = 'src-1', ttl: float = 60) -> Session:
    now = clock()
    return Session(
        session_id=generate_session_id(),
        source_id=source_id,
        auth_type=AuthType.BASIC,
        data=BasicSessionData(token='dTpw'),
        created_at=now,
        expires_at=now + timedelta(seconds=ttl),
    )


class TestSessionStore:
    '''
    Test store operations and lazy expiry.
    '''

    def test_put_and_get(self, store: SessionStore, clock) -> None:
        session = _session(clock)
        store.put(session)

        assert store.get(session.session_id) == session
        assert session.session_id in store
        assert len(store) == 1

    def test_get_missing_returns_none(self, store: SessionStore) -> None:
        assert store.get('nope') is None

    def test_expired_session_is_absent_and_removed(self, store: SessionStore, clock) -> None:
        session = _session(clock, ttl=10)
        store.put(session)

        clock.advance(10)

        assert store.get(session.session_id) is None
        assert session.session_id not in store

    def test_delete_is_idempotent(self, store: SessionStore, clock) -> None:
        session = _session(clock)
        store.put(session)

        assert store.delete(session.session_id) is True
        assert store.delete(session.session_id) is False
        assert store.delete('never-existed') is False

    def test_replace_if_present(self, store: SessionStore, clock) -> None:
        session = _session(clock)
        store.put(session)
        updated = session.model_copy(update={'data': BasicSessionData(token='bmV3')})

        assert store.replace_if_present(updated) is True
        assert store.get(session.session_id) == updated

    def test_replace_does_not_resurrect_deleted(self, store: SessionStore, clock) -> None:
        session = _session(clock)
        store.put(session)
        store.delete(session.session_id)

        assert store.replace_if_present(session) is False
        assert session.session_id not in store

    def test_replace_does_not_revive_expired(self, store: SessionStore, clock) -> None:
        session = _session(clock, ttl=10)
        store.put(session)
        clock.advance(10)
        renewed = session.model_copy(update={'expires_at': clock() + timedelta(seconds=60)})

        assert store.replace_if_present(renewed) is False
        assert session.session_id not in store

    def test_sweep_removes_exactly_expired(self, store: SessionStore, clock) -> None:
        short = [_session(clock, ttl=5) for _ in range(3)]
        long = [_session(clock, ttl=500) for _ in range(2)]
        for session in short + long:
            store.put(session)

        clock.advance(6)

        assert store.sweep() == 3
        assert len(store) == 2
        for session in long:
            assert store.get(session.session_id) == session
        assert store.sweep() == 0

    def test_source_scoped_operations(self, store: SessionStore, clock) -> None:
        store.put(_session(clock, source_id='a'))
        store.put(_session(clock, source_id='a'))
        store.put(_session(clock, source_id='b'))

        assert len(store.sessions_for_source('a')) == 2
        assert store.delete_for_source('a') == 2
        assert store.sessions_for_source('a') == []
        assert len(store) == 1

    def test_stats(self, store: SessionStore, clock) -> None:
        store.put(_session(clock, source_id='a', ttl=5))
        store.put(_session(clock, source_id='b', ttl=500))
        clock.advance(6)

        stats = store.stats()

        assert stats['total_sessions'] == 2
        assert stats['active_sessions'] == 1
        assert stats['expired_sessions'] == 1
        assert stats['unique_sources'] == 1
        assert stats['by_auth_type'] == {'basic': 1}

    def test_session_ids_are_unguessable(self) -> None:
        ids = {generate_session_id() for _ in range(100)}

        assert len(ids) == 100
        # 32 random bytes, URL-safe base64 without padding
        assert all(len(session_id) >= 43 for session_id in ids)


class TestCleanupTask:
    '''
    Test the periodic sweep handle.
    '''

    async def test_sweeps_periodically_until_stopped(self, store: SessionStore, clock) -> None:
        store.put(_session(clock, ttl=1))
        clock.advance(2)

        handle = store.start_cleanup(0.01)
        try:
            for _ in range(100):
                if len(store) == 0:
                    break
                await asyncio.sleep(0.01)
            assert len(store) == 0
            assert handle.running
        finally:
            await handle.stop()

        assert not handle.running

    async def test_context_manager_stops_task(self, store: SessionStore) -> None:
        async with store.start_cleanup(10) as handle:
            assert handle.running

        assert not handle.running

    async def test_sweep_errors_do_not_kill_the_task(self, store: SessionStore, monkeypatch) -> None:
        calls = []

        def broken_sweep() -> int:
            calls.append(1)
            raise RuntimeError('boom')

        monkeypatch.setattr(store, 'sweep', broken_sweep)

        handle = store.start_cleanup(0.01)
        try:
            for _ in range(100):
                if len(calls) >= 2:
                    break
                await asyncio.sleep(0.01)
            assert len(calls) >= 2
            assert handle.running
        finally:
            await handle.stop()

    def test_rejects_non_positive_interval(self, store: SessionStore) -> None:
        with pytest.raises(ValueError):
            store.start_cleanup(0)
