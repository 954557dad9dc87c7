"""Client-side auth state: user, session, profile and idle sign-out."""
import asyncio
import logging
from collections.abc import Awaitable, Callable, Coroutine
from typing import Any

import httpx

from namsan_portal.client.monitor import (DEFAULT_TIMEOUT_SECONDS,
                                          ActivityEventBus, InactivityMonitor)
from namsan_portal.client.scheduler import Scheduler
from namsan_portal.db import DataStore, Profile
from namsan_portal.providers import (AuthEvent, AuthSessionData, AuthUser,
                                     IdentityError, IdentityProvider)
from namsan_portal.providers.identity import SignUpResult

logger = logging.getLogger(__name__)

ProfileLoader = Callable[[str], Awaitable[Profile | None]]
UserListener = Callable[[AuthUser | None], None]


def store_profile_loader(store: DataStore) -> ProfileLoader:
    """Load a user's profile row from the data store off the event loop."""

    async def load(user_id: str) -> Profile | None:
        query = store.table(Profile).eq("user_id", user_id)
        return await asyncio.to_thread(query.maybe_single)

    return load


class AuthSession:
    """Holds the signed-in user for one client and keeps it consistent.

    The profile is fetched after every session change and may lag behind the
    user. Each session change bumps a generation counter; a profile fetch
    that completes after the generation moved on (for example a sign-out
    raced it) is discarded.

    Listeners registered with `subscribe` are told whenever the user id
    changes (sign-in, sign-out, account switch).
    """

    def __init__(
        self,
        identity: IdentityProvider,
        *,
        profile_loader: ProfileLoader | None = None,
        store: DataStore | None = None,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        scheduler: Scheduler | None = None,
        activity_bus: ActivityEventBus | None = None,
        email_redirect_to: str | None = None,
    ) -> None:
        if profile_loader is None:
            if store is None:
                raise ValueError("AuthSession needs a profile_loader or a store")
            profile_loader = store_profile_loader(store)
        self._identity = identity
        self._load = profile_loader
        self._redirect_to = email_redirect_to
        self._monitor = InactivityMonitor(
            self._on_idle, timeout_seconds=timeout_seconds, scheduler=scheduler
        )
        if activity_bus is not None:
            self._monitor.attach(activity_bus)

        self._user: AuthUser | None = None
        self._session: AuthSessionData | None = None
        self._profile: Profile | None = None
        self._loading = True
        self._generation = 0
        self._listeners: list[UserListener] = []
        self._tasks: set[asyncio.Task] = set()
        self._unsubscribe_identity: Callable[[], None] | None = None

    # ---- State ----

    @property
    def user(self) -> AuthUser | None:
        return self._user

    @property
    def session(self) -> AuthSessionData | None:
        return self._session

    @property
    def profile(self) -> Profile | None:
        return self._profile

    @property
    def loading(self) -> bool:
        return self._loading

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def monitor(self) -> InactivityMonitor:
        return self._monitor

    def subscribe(self, listener: UserListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # ---- Lifecycle ----

    async def start(self) -> None:
        """Listen for auth changes, then restore any existing session and its profile."""
        self._unsubscribe_identity = self._identity.on_auth_state_change(self._on_auth_event)
        session = await self._identity.get_session()
        self._apply(session, fetch_profile=False)
        if session is not None:
            await self._load_profile(self._generation, session.user.id)
        self._loading = False

    async def settle(self) -> None:
        """Wait for in-flight profile fetches and sign-outs."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def close(self) -> None:
        """Stop listening, drop the idle timer and cancel pending work."""
        self._monitor.close()
        if self._unsubscribe_identity is not None:
            self._unsubscribe_identity()
            self._unsubscribe_identity = None
        for task in list(self._tasks):
            task.cancel()
        await asyncio.gather(*list(self._tasks), return_exceptions=True)

    # ---- Credentials ----

    async def sign_in(self, email: str, password: str) -> AuthSessionData:
        """Sign in; state updates arrive through the identity provider's SIGNED_IN event.

        Raises:
            IdentityError: wrong credentials or unconfirmed account.
        """
        return await self._identity.sign_in_with_password(email, password)

    async def sign_up(self, email: str, password: str, full_name: str) -> SignUpResult:
        return await self._identity.sign_up(
            email,
            password,
            data={"full_name": full_name},
            redirect_to=self._redirect_to,
        )

    async def sign_out(self) -> None:
        """User-initiated sign-out. The idle timer is canceled before anything else."""
        self._monitor.stop()
        try:
            await self._identity.sign_out()
        finally:
            self._clear()

    # ---- Internals ----

    def _on_auth_event(self, event: AuthEvent, session: AuthSessionData | None) -> None:
        logger.debug("Auth event %s", event.value)
        self._apply(session)
        self._loading = False

    def _apply(self, session: AuthSessionData | None, *, fetch_profile: bool = True) -> None:
        previous_id = self._user.id if self._user else None
        self._generation += 1
        self._session = session
        self._user = session.user if session else None
        current_id = self._user.id if self._user else None
        if current_id != previous_id:
            self._profile = None

        if session is None:
            self._monitor.stop()
        else:
            self._monitor.start()
            if fetch_profile:
                self._spawn(self._load_profile(self._generation, session.user.id))

        if current_id != previous_id:
            self._notify()

    def _clear(self) -> None:
        had_user = self._user is not None
        self._generation += 1
        self._session = None
        self._user = None
        self._profile = None
        self._monitor.stop()
        if had_user:
            self._notify()

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self._user)

    async def _load_profile(self, generation: int, user_id: str) -> None:
        try:
            profile = await self._load(user_id)
        except Exception as exc:  # pylint: disable=broad-except
            logger.warning("Profile fetch for %s failed: %s", user_id, exc)
            return
        if generation != self._generation:
            logger.debug("Discarding stale profile fetch for %s", user_id)
            return
        self._profile = profile

    def _on_idle(self) -> None:
        self._spawn(self._force_sign_out())

    async def _force_sign_out(self) -> None:
        self._clear()
        try:
            await self._identity.sign_out()
        except (httpx.HTTPError, IdentityError) as exc:
            logger.warning("Sign-out after inactivity failed upstream: %s", exc)

    def _spawn(self, coro: Coroutine[Any, Any, None]) -> None:
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
