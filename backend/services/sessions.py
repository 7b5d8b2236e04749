import uuid
from contextlib import contextmanager
from typing import Iterator, Literal, Optional

from errors import RequestInProgress, SessionNotFound
from logger import get_logger
from models import ChatMessage, RawInput, Session, StudyMaterials
from prompts import TUTOR_GREETING

log = get_logger(__name__)

Family = Literal["generation", "tutor"]
_FLAG_FOR_FAMILY = {"generation": "generating", "tutor": "answering"}


class SessionStore:
    """
    Ordered, append-only list of sessions plus a pointer to the current one.

    Sessions are immutable snapshots: every change swaps the element at its
    index for an updated copy, so a reader never sees a half-written session.
    """

    def __init__(self):
        self._sessions: list[Session] = []
        self._current: Optional[int] = None

    # ── reads ──

    def all(self) -> list[Session]:
        return list(self._sessions)

    @property
    def current_id(self) -> Optional[str]:
        return None if self._current is None else self._sessions[self._current].id

    def current(self) -> Session:
        if self._current is None:
            return self.create()
        return self._sessions[self._current]

    def get(self, session_id: str) -> Session:
        return self._sessions[self._index(session_id)]

    def _index(self, session_id: str) -> int:
        for idx, session in enumerate(self._sessions):
            if session.id == session_id:
                return idx
        raise SessionNotFound(session_id)

    # ── writes ──

    def create(self) -> Session:
        session = Session(
            id=uuid.uuid4().hex,
            chat_history=[ChatMessage(role="ai", content=TUTOR_GREETING)],
        )
        self._sessions.append(session)
        self._current = len(self._sessions) - 1
        log.info("Created session %s (%d total)", session.id, len(self._sessions))
        return session

    def switch(self, session_id: str) -> Session:
        self._current = self._index(session_id)
        return self._sessions[self._current]

    def _replace(self, session_id: str, **changes) -> Session:
        idx = self._index(session_id)
        updated = self._sessions[idx].model_copy(update=changes)
        self._sessions[idx] = updated
        return updated

    def set_input(self, session_id: str, raw_input: RawInput) -> Session:
        """Record what the user handed in, whether or not generation from it succeeds."""
        return self._replace(session_id, raw_input=raw_input)

    def replace_materials(self, session_id: str, materials: StudyMaterials) -> Session:
        return self._replace(session_id, materials=materials)

    def append_message(self, session_id: str, message: ChatMessage) -> Session:
        history = [*self.get(session_id).chat_history, message]
        return self._replace(session_id, chat_history=history)

    @contextmanager
    def in_flight(self, session_id: str, family: Family) -> Iterator[Session]:
        """
        Mark a generation or tutor call as running for one session.

        A second call of the same family for the same session is rejected with
        RequestInProgress while the first one is still running.
        """
        flag = _FLAG_FOR_FAMILY[family]
        session = self.get(session_id)
        if getattr(session, flag):
            log.info("Rejecting concurrent %s request for session %s", family, session_id)
            raise RequestInProgress(session_id, family)

        self._replace(session_id, **{flag: True})
        try:
            yield self.get(session_id)
        finally:
            self._replace(session_id, **{flag: False})


_store = SessionStore()


def get_store() -> SessionStore:
    return _store
