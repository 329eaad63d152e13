import logging
import uuid
from collections import OrderedDict

from fastapi import Depends, HTTPException, Request

from pricecompass.config import settings
from pricecompass.services.price_compass import PriceCompassService
from pricecompass.viewmodels.search_vm import SearchSession

logger = logging.getLogger(__name__)


class SessionStore:
    """Search sessions handed out by POST /api/sessions, least recently used evicted first."""

    def __init__(self, max_sessions: int):
        self.max_sessions = max_sessions
        self._sessions: OrderedDict[str, SearchSession] = OrderedDict()

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, sid: str) -> bool:
        return sid in self._sessions

    def issue(self, session: SearchSession) -> str:
        sid = new_session_id()
        self._sessions[sid] = session
        while len(self._sessions) > self.max_sessions:
            evicted, _ = self._sessions.popitem(last=False)
            logger.debug("Evicted idle search session %s", evicted)
        return sid

    def get(self, sid: str) -> SearchSession | None:
        session = self._sessions.get(sid)
        if session is not None:
            self._sessions.move_to_end(sid)
        return session

    def clear(self) -> None:
        self._sessions.clear()


def get_price_compass(request: Request) -> PriceCompassService:
    return request.app.state.price_compass


def get_sessions(request: Request) -> SessionStore:
    if not hasattr(request.app.state, "sessions"):
        request.app.state.sessions = SessionStore(settings.max_sessions)
    return request.app.state.sessions


def get_search_session(
    sid: str | None = None,
    service: PriceCompassService = Depends(get_price_compass),
    sessions: SessionStore = Depends(get_sessions),
) -> SearchSession:
    """Session for an issued sid; requests without one get a throwaway session."""
    if not sid:
        return SearchSession(service, settings.default_currency.value, debounce=0)
    session = sessions.get(sid)
    if session is None:
        raise HTTPException(status_code=404, detail="Unknown or expired session")
    return session


def new_session_id() -> str:
    return uuid.uuid4().hex
