"""Application configuration loaded from environment variables."""

from __future__ import annotations

from datetime import timedelta

from pydantic_settings import BaseSettings

from lobby_reveal.domain.thresholds import RevealThresholds


class Settings(BaseSettings):
    app_name: str = "lobby-reveal"
    debug: bool = False
    log_level: str = "INFO"

    # Reveal thresholds, minutes before the target time
    qr_only_threshold_minutes: int = 180
    full_threshold_minutes: int = 60
    activity_threshold_minutes: int = 60

    # Live refresh cadence
    activity_refresh_seconds: float = 60.0
    countdown_refresh_seconds: float = 1.0

    # Trip cards show "soon" inside this window
    soon_window_hours: int = 24

    model_config = {"env_prefix": "LOBBY_REVEAL_"}

    def thresholds(self) -> RevealThresholds:
        return RevealThresholds.from_minutes(
            qr_only=self.qr_only_threshold_minutes,
            full=self.full_threshold_minutes,
            activity=self.activity_threshold_minutes,
        )

    @property
    def reveal_interval(self) -> timedelta:
        return timedelta(seconds=self.activity_refresh_seconds)

    @property
    def countdown_interval(self) -> timedelta:
        return timedelta(seconds=self.countdown_refresh_seconds)

    @property
    def soon_window(self) -> timedelta:
        return timedelta(hours=self.soon_window_hours)


settings = Settings()
