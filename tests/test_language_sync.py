"""Tests for switching the display language on sign-in and sign-out."""
from namsan_portal.client import (ANONYMOUS_LANGUAGE, AUTHENTICATED_LANGUAGE,
                                  AuthLanguageSync, LanguagePreference)
from namsan_portal.providers import AuthUser


class UserSourceStub:
    def __init__(self, user=None):
        self.user = user
        self._listeners = []

    def subscribe(self, listener):
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    def change(self, user):
        self.user = user
        for listener in list(self._listeners):
            listener(user)


def test_sign_in_switches_to_korean_and_sign_out_back_to_english():
    preference = LanguagePreference()
    sync = AuthLanguageSync(preference)

    sync.observe(None)
    assert preference.language == ANONYMOUS_LANGUAGE

    sync.observe("user-a")
    assert preference.language == AUTHENTICATED_LANGUAGE

    sync.observe(None)
    assert preference.language == ANONYMOUS_LANGUAGE


def test_same_user_again_keeps_a_manual_choice():
    preference = LanguagePreference()
    sync = AuthLanguageSync(preference)
    sync.observe("user-a")
    preference.set("en")

    sync.observe("user-a")

    assert preference.language == "en"


def test_switching_accounts_without_sign_out_is_a_no_op():
    preference = LanguagePreference()
    sync = AuthLanguageSync(preference)
    sync.observe("user-a")
    preference.set("en")

    sync.observe("user-b")

    assert preference.language == "en"


def test_listeners_are_only_told_about_real_changes():
    preference = LanguagePreference()
    heard = []
    unsubscribe = preference.subscribe(heard.append)

    preference.set("en")
    preference.set("ko")
    preference.set("ko")
    unsubscribe()
    preference.set("en")

    assert heard == ["ko"]


def test_bind_follows_the_user_source():
    preference = LanguagePreference()
    source = UserSourceStub(AuthUser(id="user-a"))
    unbind = AuthLanguageSync(preference).bind(source)
    assert preference.language == "ko"

    source.change(None)
    assert preference.language == "en"

    unbind()
    source.change(AuthUser(id="user-b"))
    assert preference.language == "en"
