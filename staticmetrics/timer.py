"""A coarse millisecond clock, optionally refreshed by a background thread."""

from __future__ import annotations

import threading
import time
from datetime import timedelta

CHECK_UPDATE_INTERVAL = 0.2
"""Seconds between two refreshes made by the background updater."""

_ANCHOR = time.monotonic()
_recent = 0
_recent_lock = threading.Lock()

_updater_lock = threading.Lock()
_updater_running = False


def duration_to_millis(dur: timedelta | float | int) -> int:
    """Return the whole number of milliseconds in ``dur``.

    ``dur`` is a ``timedelta`` or a number of seconds; sub-millisecond parts
    are truncated. Negative durations are rejected.
    """
    if not isinstance(dur, timedelta):
        dur = timedelta(seconds=dur)
    if dur < timedelta(0):
        raise ValueError(f"negative duration: {dur}")
    whole_seconds = dur.days * 86_400 + dur.seconds
    return whole_seconds * 1000 + dur.microseconds // 1000


def now_millis() -> int:
    """Return milliseconds since a fixed anchor, never going backwards."""
    global _recent
    elapsed = max(0.0, time.monotonic() - _ANCHOR)
    current = duration_to_millis(elapsed)
    with _recent_lock:
        if _recent > current:
            return _recent
        _recent = current
        return current


def recent_millis() -> int:
    """Return the value most recently produced by :func:`now_millis`."""
    with _recent_lock:
        return _recent


def _update_forever() -> None:
    while True:
        time.sleep(CHECK_UPDATE_INTERVAL)
        now_millis()


def ensure_updater() -> None:
    """Start the background thread that refreshes the clock, once."""
    global _updater_running
    with _updater_lock:
        if _updater_running:
            return
        _updater_running = True
    thread = threading.Thread(target=_update_forever, name="time updater", daemon=True)
    thread.start()