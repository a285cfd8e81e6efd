"""Shared fixtures: a frozen clock, a policy bound to it, and a wired app."""

from datetime import datetime, timedelta, timezone

import pytest
from fastapi import FastAPI

from lobby_reveal.api.lobby import create_lobby_router
from lobby_reveal.api.ws_reveal import create_reveal_ws_router
from lobby_reveal.core.policy import RevealPolicy
from lobby_reveal.foundation.clock import FrozenClock
from lobby_reveal.scheduler.refresh import RevealScheduler
from lobby_reveal.store.trip_store import TripStore

DEPARTURE = datetime(2026, 1, 15, 14, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock(DEPARTURE - timedelta(hours=5))


@pytest.fixture
def policy(clock: FrozenClock) -> RevealPolicy:
    return RevealPolicy(clock=clock)


@pytest.fixture
def store() -> TripStore:
    return TripStore()


@pytest.fixture
def app(store: TripStore, policy: RevealPolicy) -> FastAPI:
    """App with slow timers so WebSocket tests only see pushes they trigger."""
    scheduler = RevealScheduler(
        policy,
        reveal_interval=timedelta(hours=1),
        countdown_interval=timedelta(hours=1),
    )
    app = FastAPI()
    app.include_router(create_lobby_router(store, policy, scheduler))
    app.include_router(create_reveal_ws_router(store, scheduler))
    app.state.scheduler = scheduler
    return app
