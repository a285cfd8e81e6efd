"""RevealDecision — an immutable point-in-time visibility observation.

Decisions are derived, never stored.  A new one is produced every time the
policy is asked, which is what keeps them free of staleness concerns.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from lobby_reveal.domain.enums import RevealKind, RevealState, ViewerRole


class RevealDecision(BaseModel):
    """What a viewer may see of one target at one instant."""

    kind: RevealKind
    state: RevealState
    viewer_role: ViewerRole
    target_time: datetime | None = Field(None, description="Departure or activity start (None if unset)")
    evaluated_at: datetime = Field(..., description="The 'now' the decision was computed for")
    next_state: RevealState | None = Field(None, description="State after the next transition")
    next_threshold_at: datetime | None = Field(None, description="When the next transition happens")
    countdown: str | None = Field(None, description="Time until next transition, e.g. '2h 5m 0s' or 'Now!'")

    model_config = {"frozen": True}

    @property
    def is_unknown(self) -> bool:
        return self.state == RevealState.UNKNOWN

    def to_dict(self) -> dict:
        return self.model_dump(mode="json")
