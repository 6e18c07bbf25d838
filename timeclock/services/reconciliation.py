"""Local view of the user's work sessions, reconciled against the server.

Three sources of truth meet here:

*What:* the optimistic local ``current_session``, a time-bounded cache of the
session list, and whatever the server reports.
*When:* every start/end/pause goes through the engine; screens read the view.
*How:* any mutation is followed by a forced refresh, and anything ambiguous
(a conflict, a failed end) is resolved by pulling the full server state
instead of patching single fields.

Only one operation runs at a time. The ``pending`` transition doubles as the
``loading`` flag: while it is set, new start/end/pause/refresh calls are
rejected at the call site rather than queued.
"""

from __future__ import annotations

import asyncio
import logging
import time
from contextlib import contextmanager
from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum
from typing import Awaitable, Callable, Iterator, List, Optional, Tuple

from pydantic import ValidationError

from ..core.errors import SessionAlreadyOpenError, TimeclockError
from ..schemas.session import SessionStats, TimeRecord, WorkSession
from . import timecalc
from .sessions import SessionGateway

logger = logging.getLogger(__name__)

CACHE_WINDOW_SECONDS = 30.0


class EngineState(str, Enum):
    NO_SESSION = "NO_SESSION"
    OPEN = "OPEN"
    TRANSITIONING = "TRANSITIONING"


class Transition(str, Enum):
    REFRESHING = "REFRESHING"
    STARTING = "STARTING"
    ENDING = "ENDING"
    PAUSING = "PAUSING"
    RESUMING = "RESUMING"


@dataclass(frozen=True)
class SessionView:
    current_session: Optional[WorkSession] = None
    sessions: Tuple[WorkSession, ...] = ()
    last_refresh: Optional[float] = None


class SessionEngine:
    def __init__(
        self,
        gateway: SessionGateway,
        *,
        cache_window: float = CACHE_WINDOW_SECONDS,
        clock: Callable[[], float] = time.monotonic,
        tz: str | None = None,
    ) -> None:
        self.gateway = gateway
        self.cache_window = cache_window
        self.clock = clock
        self.tz = tz
        self._view = SessionView()
        self._pending: Transition | None = None
        # Bumped whenever the view is dropped locally; stale fetches are discarded.
        self._generation = 0

    # ---- observable state

    @property
    def view(self) -> SessionView:
        return self._view

    @property
    def current_session(self) -> WorkSession | None:
        return self._view.current_session

    @property
    def sessions(self) -> List[WorkSession]:
        return list(self._view.sessions)

    @property
    def last_refresh(self) -> float | None:
        return self._view.last_refresh

    @property
    def pending(self) -> Transition | None:
        return self._pending

    @property
    def loading(self) -> bool:
        return self._pending is not None

    @property
    def state(self) -> EngineState:
        if self._pending is not None:
            return EngineState.TRANSITIONING
        if self._view.current_session is not None:
            return EngineState.OPEN
        return EngineState.NO_SESSION

    @property
    def is_paused(self) -> bool:
        session = self._view.current_session
        return session is not None and timecalc.is_paused(session.time_records)

    @contextmanager
    def _transition(self, transition: Transition) -> Iterator[None]:
        self._pending = transition
        try:
            yield
        finally:
            self._pending = None

    def _busy(self, operation: str) -> bool:
        if self._pending is None:
            return False
        logger.warning("Rejected %s while %s is in flight", operation, self._pending.value)
        return True

    # ---- refresh

    async def refresh(self, force: bool = False) -> None:
        if self._busy("refresh"):
            return
        with self._transition(Transition.REFRESHING):
            await self._refresh(force)

    async def _refresh(self, force: bool) -> None:
        started_at = self.clock()
        generation = self._generation
        last = self._view.last_refresh
        if not force and last is not None and started_at - last < self.cache_window:
            logger.debug("Session cache still fresh, skipping refresh")
            return

        results = await asyncio.gather(
            self.gateway.list_mine(),
            self.gateway.current(),
            return_exceptions=True,
        )
        if generation != self._generation:
            logger.info("View was reset while refreshing, discarding fetched sessions")
            return

        failures = [result for result in results if isinstance(result, BaseException)]
        if failures:
            error = failures[0]
            if not isinstance(error, (TimeclockError, ValidationError)):
                raise error
            # An empty view is preferred over a possibly wrong cached one.
            logger.error("Session refresh failed, resetting view: %s", error)
            self._view = SessionView(last_refresh=started_at)
            return

        sessions, current = results
        self._view = SessionView(
            current_session=current,
            sessions=tuple(sessions),
            last_refresh=started_at,
        )
        logger.info(
            "Sessions refreshed",
            extra={
                "extra_data": {
                    "session_count": len(sessions),
                    "current_session_id": current.id if current else None,
                }
            },
        )

    # ---- transitions

    async def start_session(self) -> bool:
        if self._busy("start_session"):
            return False
        if self._view.current_session is not None:
            logger.info("Session %s already open locally, not starting another", self._view.current_session.id)
            return False

        with self._transition(Transition.STARTING):
            try:
                await self.gateway.start()
            except SessionAlreadyOpenError:
                # Our cache was behind the server; pull the real open session in.
                logger.info("Server already holds an open session, resynchronizing")
                await self._refresh(True)
                return False
            except (TimeclockError, ValidationError) as exc:
                logger.error("Failed to start session: %s", exc)
                return False
            await self._refresh(True)
            return True

    async def end_session(self) -> bool:
        if self._busy("end_session"):
            return False
        session = self._view.current_session
        if session is None:
            logger.info("No open session to end")
            return False

        with self._transition(Transition.ENDING):
            try:
                await self.gateway.end(session.id)
            except (TimeclockError, ValidationError) as exc:
                # The end may have landed server-side even though the response was lost.
                logger.error("Failed to end session %s: %s", session.id, exc)
                await self._refresh(True)
                return False
            self._view = replace(self._view, current_session=None)
            await self._refresh(True)
            return True

    async def start_pause(self) -> bool:
        if self._busy("start_pause"):
            return False
        session = self._view.current_session
        if session is None or timecalc.is_paused(session.time_records):
            logger.info("Cannot start a pause: no open session or already paused")
            return False
        with self._transition(Transition.PAUSING):
            return await self._pause_call(self.gateway.start_pause, session.id)

    async def end_pause(self) -> bool:
        if self._busy("end_pause"):
            return False
        session = self._view.current_session
        if session is None or not timecalc.is_paused(session.time_records):
            logger.info("Cannot end a pause: no open session or not paused")
            return False
        with self._transition(Transition.RESUMING):
            return await self._pause_call(self.gateway.end_pause, session.id)

    async def _pause_call(self, call: Callable[[int], Awaitable[TimeRecord]], session_id: int) -> bool:
        try:
            await call(session_id)
        except (TimeclockError, ValidationError) as exc:
            logger.error("Pause update on session %s failed: %s", session_id, exc)
            await self._refresh(True)
            return False
        await self._refresh(True)
        return True

    # ---- local-only operations

    def clear_current_session(self) -> None:
        self._generation += 1
        self._view = replace(self._view, current_session=None)

    def reset(self) -> None:
        """Drop the whole view, including the cache timestamp."""
        self._generation += 1
        self._view = SessionView()

    def get_today_records(self) -> List[TimeRecord]:
        day = timecalc.today(self.tz)
        records: List[TimeRecord] = []
        for session in self._view.sessions:
            if timecalc.local_date(session.start_time, self.tz) == day:
                records.extend(session.time_records)
        return sorted(records, key=timecalc.sort_key)

    def worked_seconds_today(self, now: datetime | None = None) -> float:
        day = timecalc.today(self.tz)
        return sum(
            timecalc.worked_seconds(session, now)
            for session in self._view.sessions
            if timecalc.local_date(session.start_time, self.tz) == day
        )

    async def stats(self) -> SessionStats:
        return await self.gateway.stats()
