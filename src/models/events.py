"""
Lifecycle event model

Wraps the JSON payload returned by the Extensions API /event/next call in a
tagged value the event loop can dispatch on. Unrecognised tags are kept as
UNKNOWN (with the raw tag preserved for logging) instead of raising.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict

from models.enums import LifecycleEventType


@dataclass(frozen=True)
class LifecycleEvent:
    """One event pulled from the lifecycle API."""
    type: LifecycleEventType
    raw_type: str
    payload: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_payload(cls, payload: Any) -> "LifecycleEvent":
        """
        Build an event from a decoded JSON body.

        Non-object bodies and missing/non-string `eventType` values become
        UNKNOWN events with an empty or stringified raw tag.
        """
        if not isinstance(payload, dict):
            return cls(LifecycleEventType.UNKNOWN, str(payload), {})

        raw = payload.get("eventType")
        raw_type = raw if isinstance(raw, str) else ("" if raw is None else str(raw))

        try:
            event_type = LifecycleEventType[raw_type]
        except KeyError:
            event_type = LifecycleEventType.UNKNOWN

        return cls(event_type, raw_type, payload)

    @property
    def shutdown_reason(self) -> str:
        """Host-supplied reason on SHUTDOWN events ("spindown", "timeout", "failure")."""
        return str(self.payload.get("shutdownReason") or "SHUTDOWN event")
