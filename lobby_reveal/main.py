"""lobby-reveal — timed information reveal for group trip lobbies.

This is the application entry point.  It wires the TripStore,
RevealPolicy, RevealScheduler and the HTTP/WebSocket endpoints together.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from lobby_reveal.api.lobby import create_lobby_router
from lobby_reveal.api.ws_reveal import create_reveal_ws_router
from lobby_reveal.config import settings
from lobby_reveal.core.policy import RevealPolicy
from lobby_reveal.scheduler.refresh import RevealScheduler
from lobby_reveal.store.trip_store import TripStore

# ── Logging ──────────────────────────────────────────────────────────────────

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)

# ── Reveal engine ────────────────────────────────────────────────────────────

policy = RevealPolicy(thresholds=settings.thresholds())

scheduler = RevealScheduler(
    policy,
    reveal_interval=settings.reveal_interval,
    countdown_interval=settings.countdown_interval,
)

# ── State ────────────────────────────────────────────────────────────────────

store = TripStore()

# ── App ──────────────────────────────────────────────────────────────────────


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    await scheduler.close()


app = FastAPI(
    title=settings.app_name,
    description="Timed ticket, destination and activity reveal for trip lobbies",
    version="0.1.0",
    debug=settings.debug,
    lifespan=lifespan,
)

# ── Routes ───────────────────────────────────────────────────────────────────

app.include_router(create_lobby_router(store, policy, scheduler, soon_window=settings.soon_window))
app.include_router(create_reveal_ws_router(store, scheduler))


# ── Health ───────────────────────────────────────────────────────────────────

@app.get("/health")
async def health() -> dict:
    thresholds = policy.thresholds
    return {
        "status": "ok",
        "active_subscriptions": scheduler.active_count,
        "thresholds_minutes": {
            "qr_only": thresholds.qr_only_before.total_seconds() / 60,
            "full": thresholds.full_before.total_seconds() / 60,
            "activity": thresholds.activity_before.total_seconds() / 60,
        },
    }
