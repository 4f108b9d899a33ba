"""Stage timeline events recorded by job orchestrators."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any


@dataclass(frozen=True)
class StageEvent:
    """One structured stage transition.

    Attributes:
        stage: Stage name, for example ``readiness`` or ``signin``.
        status: Stage status marker (``started``, ``completed``, ``skipped``).
        at_utc: ISO-8601 UTC timestamp.
        details: Optional structured details.
    """

    stage: str
    status: str
    at_utc: str
    details: dict[str, Any] = field(default_factory=dict)

    def stage_event_as_dict(self) -> dict[str, object]:
        """Render the event as a plain mapping for log output."""

        payload: dict[str, object] = {"stage": self.stage, "status": self.status, "at_utc": self.at_utc}
        if self.details:
            payload["details"] = dict(self.details)
        return payload


def domain_build_stage_event(
    stage: str,
    status: str,
    details: dict[str, Any] | None = None,
) -> StageEvent:
    """Build one stage event stamped with the current UTC time.

    Args:
        stage: Stage name.
        status: Stage status marker.
        details: Optional structured details object.

    Returns:
        StageEvent: Immutable timeline event.
    """

    return StageEvent(
        stage=stage,
        status=status,
        at_utc=datetime.now(timezone.utc).isoformat(),
        details=dict(details or {}),
    )
