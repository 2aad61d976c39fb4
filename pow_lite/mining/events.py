"""
Structured search events and sinks for them.

The search loop reports progress through an optional callback
`(event_name, payload)`. These helpers bridge that callback to the
standard logging module or record events for later inspection.
"""

import logging
from typing import Any, Callable, Dict, List, Optional, Tuple

EventLog = Callable[[str, Dict[str, Any]], None]

NONCE_OFFSET = "nonce_offset"
SHARE_FOUND = "pow_share_found"
PROGRESS = "pow_progress"
TIME_BUDGET = "pow_time_budget"
SHARE_EXHAUSTED = "pow_share_exhausted"

TERMINAL_EVENTS = frozenset({SHARE_FOUND, TIME_BUDGET, SHARE_EXHAUSTED})

_LEVELS = {
    NONCE_OFFSET: logging.DEBUG,
    PROGRESS: logging.DEBUG,
    SHARE_FOUND: logging.INFO,
    TIME_BUDGET: logging.INFO,
    SHARE_EXHAUSTED: logging.INFO,
}


def logging_event_log(logger: Optional[logging.Logger] = None) -> EventLog:
    """
    Build an event callback that writes every event to `logger`.

    Per-attempt events go to DEBUG, outcome events to INFO.
    """
    log = logger or logging.getLogger("pow_lite.events")

    def _emit(event: str, payload: Dict[str, Any]) -> None:
        level = _LEVELS.get(event, logging.INFO)
        if not log.isEnabledFor(level):
            return
        fields = " ".join(f"{k}={v}" for k, v in payload.items())
        log.log(level, f"{event} {fields}")

    return _emit


class RecordingEventLog:
    """Event callback that keeps every event in order."""

    def __init__(self):
        self.events: List[Tuple[str, Dict[str, Any]]] = []

    def __call__(self, event: str, payload: Dict[str, Any]) -> None:
        self.events.append((event, dict(payload)))

    def names(self) -> List[str]:
        return [name for name, _ in self.events]

    def terminal(self) -> List[Tuple[str, Dict[str, Any]]]:
        """Outcome events (found, time budget, exhausted)."""
        return [e for e in self.events if e[0] in TERMINAL_EVENTS]

    def of(self, event: str) -> List[Dict[str, Any]]:
        return [payload for name, payload in self.events if name == event]
