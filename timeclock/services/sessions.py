from __future__ import annotations

import logging
from typing import List, Optional

from ..core.errors import ApiError, TimeclockError
from ..schemas.session import CurrentSession, SessionStats, TimeRecord, WorkSession
from .http import ApiClient, unwrap

logger = logging.getLogger(__name__)


class SessionGateway:
    """Remote work-session operations.

    Stateless: every method is one request against the service. Errors are
    raised as typed ``TimeclockError`` subclasses; deciding what they mean is
    left to the reconciliation engine.
    """

    def __init__(self, api: ApiClient) -> None:
        self.api = api

    async def list_mine(self) -> List[WorkSession]:
        response = await self.api.get("/sessions/my")
        payload = unwrap(response.data)
        if payload is None:
            payload = []
        if not isinstance(payload, list):
            raise ApiError(
                status_code=response.status,
                message="Expected a list of sessions",
                details=response.data,
            )
        sessions = [WorkSession.model_validate(item) for item in payload]
        logger.debug("Fetched %d sessions", len(sessions))
        return sessions

    async def current(self) -> Optional[WorkSession]:
        response = await self.api.get("/sessions/current")
        current = CurrentSession.model_validate(response.data)
        if current.has_open_session and current.session is not None:
            logger.debug("Open session %s reported by server", current.session.id)
            return current.session
        return None

    async def start(self) -> WorkSession:
        response = await self.api.post("/sessions/start")
        session = WorkSession.model_validate(unwrap(response.data))
        logger.info("Session %s started", session.id)
        return session

    async def end(self, session_id: int) -> WorkSession:
        response = await self.api.post(f"/sessions/{session_id}/end")
        session = WorkSession.model_validate(unwrap(response.data))
        logger.info("Session %s ended", session_id)
        return session

    async def start_pause(self, session_id: int) -> TimeRecord:
        response = await self.api.post(f"/sessions/{session_id}/pause/start")
        record = TimeRecord.model_validate(unwrap(response.data))
        logger.info("Pause started on session %s", session_id)
        return record

    async def end_pause(self, session_id: int) -> TimeRecord:
        response = await self.api.post(f"/sessions/{session_id}/pause/end")
        record = TimeRecord.model_validate(unwrap(response.data))
        logger.info("Pause ended on session %s", session_id)
        return record

    async def stats(self) -> SessionStats:
        try:
            response = await self.api.get("/sessions/stats")
        except TimeclockError as exc:
            logger.warning("Session stats unavailable: %s", exc)
            return SessionStats()
        return SessionStats.model_validate(unwrap(response.data))
