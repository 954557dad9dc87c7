"""Switch the display language when the user signs in or out."""
from collections.abc import Callable
from typing import Protocol

from namsan_portal.providers import AuthUser

AUTHENTICATED_LANGUAGE = "ko"
ANONYMOUS_LANGUAGE = "en"

LanguageListener = Callable[[str], None]


class LanguagePreference:
    """Process-wide display language with change notification."""

    def __init__(self, language: str = ANONYMOUS_LANGUAGE) -> None:
        self._language = language
        self._listeners: list[LanguageListener] = []

    @property
    def language(self) -> str:
        return self._language

    def set(self, language: str) -> None:
        if language == self._language:
            return
        self._language = language
        for listener in list(self._listeners):
            listener(language)

    def subscribe(self, listener: LanguageListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe


class UserSource(Protocol):
    @property
    def user(self) -> AuthUser | None:
        ...

    def subscribe(self, listener: Callable[[AuthUser | None], None]) -> Callable[[], None]:
        ...


class AuthLanguageSync:
    """Korean after sign-in, English after sign-out.

    Only transitions between "no user" and "some user" count. Seeing the same
    user again, or a different user with no sign-out in between, leaves the
    language alone.
    """

    def __init__(self, preference: LanguagePreference) -> None:
        self._preference = preference
        self._previous: str | None = None

    def observe(self, user_id: str | None) -> None:
        if user_id and not self._previous:
            self._preference.set(AUTHENTICATED_LANGUAGE)
        elif not user_id and self._previous:
            self._preference.set(ANONYMOUS_LANGUAGE)
        self._previous = user_id

    def bind(self, source: UserSource) -> Callable[[], None]:
        """Observe `source`'s current user now and on every change; returns unbind."""
        self.observe(source.user.id if source.user else None)
        return source.subscribe(lambda user: self.observe(user.id if user else None))
