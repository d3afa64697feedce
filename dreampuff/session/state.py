import logging
from dataclasses import dataclass
from typing import Callable, List, Optional

from dreampuff.exceptions import AuthenticationError
from dreampuff.models.session_record import Position

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionInfo:
    """Who is working in the current session."""
    name: str
    position: Position

    def snapshot(self) -> dict:
        """Denormalized form stored alongside history entries."""
        return {"name": self.name, "position": self.position.value}


Listener = Callable[[Optional[SessionInfo]], None]


class WorkSessionScope:
    """
    Work-session state for one client (one browser tab or terminal).

    The scope is created when the identity provider signs a user in, passed
    explicitly to every consumer that needs "who is working", and torn down
    with ``clear()`` on sign-out. Listeners are called with the new info (or
    None) after every change.
    """

    def __init__(self):
        self._info: Optional[SessionInfo] = None
        self._listeners: List[Listener] = []

    @property
    def active(self) -> bool:
        return self._info is not None

    @property
    def info(self) -> Optional[SessionInfo]:
        return self._info

    def activate(self, info: SessionInfo) -> None:
        self._info = info
        self._emit()

    def clear(self) -> None:
        if self._info is None:
            return
        self._info = None
        self._emit()

    def require_active(self) -> SessionInfo:
        """Current session info, or AuthenticationError when no session is active."""
        if self._info is None:
            raise AuthenticationError("No active work session")
        return self._info

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener; returns the matching unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _emit(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self._info)
            except Exception:
                logger.exception("Work session listener failed")
