"""Background scheduler for running the simulation tick loop."""
from __future__ import annotations

import asyncio
import logging
import threading
from typing import Optional

from . import config
from .game_state import get_game_session


logger = logging.getLogger(__name__)

_loop_thread: Optional[threading.Thread] = None
_loop_lock = threading.Lock()
_stop_event: Optional[threading.Event] = None


async def _run_tick_loop(interval: float, stop_event: threading.Event) -> None:
    session = get_game_session()
    while not stop_event.is_set():
        # True once the loop has been stopped.
        if await asyncio.to_thread(stop_event.wait, interval):
            break
        if not session.started:
            continue
        try:
            session.tick()
        except Exception:
            # Keep the loop alive; the next tick works from the last good state.
            logger.exception("Tick failed")


def ensure_tick_loop(interval: float = config.TICK_INTERVAL_SEC) -> None:
    """Start the asynchronous tick loop if it is not already running."""

    global _loop_thread, _stop_event
    with _loop_lock:
        if _loop_thread and _loop_thread.is_alive():
            return

        stop_event = threading.Event()

        def runner() -> None:
            asyncio.run(_run_tick_loop(interval, stop_event))

        thread = threading.Thread(target=runner, name="realm-tick-loop", daemon=True)
        thread.start()
        _loop_thread = thread
        _stop_event = stop_event
        logger.info("Tick loop started interval=%.2fs", interval)


def stop_tick_loop(timeout: float | None = None) -> None:
    """Signal the tick loop to stop and wait for its thread to finish."""

    global _loop_thread, _stop_event
    with _loop_lock:
        thread = _loop_thread
        if _stop_event is not None:
            _stop_event.set()
        _loop_thread = None
        _stop_event = None
    if thread is not None:
        thread.join(timeout)
        logger.info("Tick loop stopped")


def is_running() -> bool:
    with _loop_lock:
        return bool(_loop_thread and _loop_thread.is_alive())
