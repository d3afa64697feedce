"""
Work-session lifecycle for a signed-in client.

The identity provider decides *who* is signed in; this controller decides
whether that sign-in still belongs to today's shop day and whether the user
has declared a work session (name + position). Starting a session is
optimistic: local state becomes active immediately and the session record is
written remotely by a background task whose failure only produces a warning.
"""
import asyncio
import enum
import logging
from datetime import datetime
from typing import Any, Callable, Optional, Protocol, Set

from dreampuff.exceptions import AuthenticationError, RemoteSyncError, ValidationError
from dreampuff.models.session_record import Position
from dreampuff.session.state import SessionInfo, WorkSessionScope
from dreampuff.session.stores import SessionStartStore
from dreampuff.session.sync import SessionRecordWriter
from dreampuff.session.timeframe import is_session_valid
from dreampuff.utils.time_utils import local_tz

logger = logging.getLogger(__name__)

ENTRY_POINT = "/"


class LifecycleState(str, enum.Enum):
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATING = "authenticating"
    SESSION_CHECK_PENDING = "session_check_pending"
    SESSION_EXPIRED = "session_expired"
    AWAITING_SESSION_START = "awaiting_session_start"
    SESSION_ACTIVE = "session_active"


class IdentityProvider(Protocol):
    async def sign_out(self) -> None: ...


class Notifier(Protocol):
    def toast(self, title: str, description: str, variant: str = "default") -> None: ...

    def notify(self, title: str, body: str) -> None: ...


class Navigator(Protocol):
    def redirect(self, path: str) -> None: ...


def _local_now() -> datetime:
    return datetime.now(local_tz())


class SessionLifecycleController:
    """
    Drives one client through sign-in, session start and daily expiry.

    Args:
        scope: Work-session state shared with the client's consumers
        identity: Identity provider used for forced sign-out
        start_store: Where the last sign-in time is recorded
        record_writer: Async callable persisting a session record remotely
        notifier: Toasts and best-effort local notifications
        navigator: Redirects the client
        clock: Returns "now"; injected so expiry is testable
        reset_hour: Daily boundary hour, defaults to the configured one
    """

    def __init__(
        self,
        scope: WorkSessionScope,
        identity: IdentityProvider,
        start_store: SessionStartStore,
        record_writer: SessionRecordWriter,
        notifier: Notifier,
        navigator: Navigator,
        clock: Callable[[], datetime] = _local_now,
        reset_hour: Optional[int] = None,
    ):
        self.scope = scope
        self.identity = identity
        self.start_store = start_store
        self.record_writer = record_writer
        self.notifier = notifier
        self.navigator = navigator
        self.clock = clock
        self.reset_hour = reset_hour

        self.state = LifecycleState.UNAUTHENTICATED
        self.user: Any = None
        self.prompt_open = False
        self._background: Set[asyncio.Task] = set()
        self._unsubscribe = scope.subscribe(self._on_scope_changed)

    # ------------------------------------------------------------------
    # Identity provider events
    # ------------------------------------------------------------------

    def on_sign_in(self, now: Optional[datetime] = None) -> None:
        """Record the sign-in time after the identity provider accepted the user."""
        self.start_store.set(now or self.clock())
        self.state = LifecycleState.AUTHENTICATING

    async def on_auth_state_changed(self, user: Any, now: Optional[datetime] = None) -> LifecycleState:
        """Handle an identity-provider event; ``user`` is None when signed out."""
        if user is None:
            self.user = None
            self.prompt_open = False
            self.scope.clear()
            self.state = LifecycleState.UNAUTHENTICATED
            self.navigator.redirect(ENTRY_POINT)
            return self.state

        self.state = LifecycleState.SESSION_CHECK_PENDING
        last_start = self.start_store.get()

        if last_start is None:
            await self._expire(
                "Sesi Tidak Valid",
                "Silakan masuk kembali untuk memulai sesi baru.",
            )
            return self.state

        if not is_session_valid(last_start, now or self.clock(), self.reset_hour):
            await self._expire(
                "Sesi Berakhir",
                "Sesi kerja harian Anda telah berakhir. Silakan masuk kembali.",
            )
            return self.state

        self.user = user
        self._refresh()
        return self.state

    async def _expire(self, title: str, description: str) -> None:
        self.state = LifecycleState.SESSION_EXPIRED
        self.user = None
        self.prompt_open = False
        self.scope.clear()

        try:
            await self.identity.sign_out()
        except Exception as e:
            logger.error(f"Forced sign-out failed: {e}")
            return

        self.start_store.clear()
        self.notifier.toast(title, description, variant="destructive")
        self.navigator.redirect(ENTRY_POINT)

    # ------------------------------------------------------------------
    # Session start
    # ------------------------------------------------------------------

    async def submit_session(self, name: str, position: Any) -> SessionInfo:
        """
        Start the work session.

        Local state is activated before this coroutine yields; the remote
        record is written by a background task tracked in ``pending_syncs``.
        """
        if self.user is None:
            raise AuthenticationError("Cannot start a work session without a signed-in user")

        name = (name or "").strip()
        if not name:
            raise ValidationError("Nama harus diisi.")
        try:
            position = Position(position)
        except ValueError:
            raise ValidationError("Posisi harus dipilih.")

        info = SessionInfo(name=name, position=position)
        self.scope.activate(info)

        self.notifier.toast(f"Selamat Bekerja, {name}!", "Sesi Anda telah dimulai.")
        try:
            self.notifier.notify("Sesi Baru Dimulai", f"{name} telah memulai sesi kerja.")
        except Exception as e:
            logger.warning(f"Local notification failed: {e}")

        task = asyncio.get_running_loop().create_task(self._sync_record(info))
        self._background.add(task)
        task.add_done_callback(self._background.discard)
        return info

    async def _sync_record(self, info: SessionInfo) -> None:
        try:
            await self.record_writer(info)
        except Exception as e:
            error = e if isinstance(e, RemoteSyncError) else RemoteSyncError(str(e))
            logger.error(f"Session creation failed to sync with server: {error}")
            self.notifier.toast(
                "Gagal Sinkronisasi Sesi",
                "Gagal terhubung ke server. Sesi Anda tetap aktif secara lokal.",
                variant="destructive",
            )

    @property
    def pending_syncs(self) -> Set[asyncio.Task]:
        return set(self._background)

    async def drain(self) -> None:
        """Wait for outstanding background syncs (e.g. on client shutdown)."""
        if self._background:
            await asyncio.gather(*self._background, return_exceptions=True)

    # ------------------------------------------------------------------
    # Sign-out
    # ------------------------------------------------------------------

    async def sign_out(self) -> None:
        """User-initiated logout. Failures are logged and leave state untouched."""
        try:
            await self.identity.sign_out()
        except Exception as e:
            logger.error(f"Logout error: {e}")
            return

        self.start_store.clear()
        self.user = None
        self.prompt_open = False
        self.scope.clear()
        self.state = LifecycleState.UNAUTHENTICATED
        self.navigator.redirect(ENTRY_POINT)

    def close(self) -> None:
        """Detach from the scope when the client is torn down."""
        self._unsubscribe()

    def _on_scope_changed(self, info: Optional[SessionInfo]) -> None:
        self._refresh()

    def _refresh(self) -> None:
        if self.user is None:
            return
        if self.scope.active:
            self.prompt_open = False
            self.state = LifecycleState.SESSION_ACTIVE
        else:
            self.prompt_open = True
            self.state = LifecycleState.AWAITING_SESSION_START
