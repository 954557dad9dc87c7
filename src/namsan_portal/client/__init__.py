"""Session-lifecycle helpers that run in the client's event loop."""
from namsan_portal.client.auth_session import (AuthSession,
                                               store_profile_loader)
from namsan_portal.client.language_sync import (ANONYMOUS_LANGUAGE,
                                                AUTHENTICATED_LANGUAGE,
                                                AuthLanguageSync,
                                                LanguagePreference)
from namsan_portal.client.monitor import (ActivityEventBus, ActivitySignal,
                                          InactivityMonitor, MonitorState)
from namsan_portal.client.route_guard import RouteDecision, resolve_route
from namsan_portal.client.scheduler import LoopScheduler, Scheduler

__all__ = [
    "ANONYMOUS_LANGUAGE",
    "AUTHENTICATED_LANGUAGE",
    "ActivityEventBus",
    "ActivitySignal",
    "AuthLanguageSync",
    "AuthSession",
    "InactivityMonitor",
    "LanguagePreference",
    "LoopScheduler",
    "MonitorState",
    "RouteDecision",
    "Scheduler",
    "resolve_route",
    "store_profile_loader",
]
