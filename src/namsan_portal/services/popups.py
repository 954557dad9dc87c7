"""Promotional popup selection and once-per-day dismissal.

Two different notions of "today" are used on purpose:

* the date-range check compares the UTC calendar date, as an ISO string,
  against the authored `start_date`/`end_date` strings;
* the dismissal check compares calendar days in the viewer's time zone, so
  a dismissal lasts until the viewer's local midnight.
"""
import logging
from collections.abc import Callable
from datetime import datetime, timezone, tzinfo

from sqlalchemy.exc import SQLAlchemyError

from namsan_portal.db import DataStore, PopupAd, PopupDismissal
from namsan_portal.schemas import PopupView
from namsan_portal.utils import local_date, utcnow

logger = logging.getLogger(__name__)

DEFAULT_BUTTON_TEXT = {"ko": "자세히 보기", "en": "Learn More"}


def in_date_range(popup: PopupAd, today: str) -> bool:
    """Inclusive range check on ISO date strings; a missing bound is open."""
    if popup.start_date and today < popup.start_date:
        return False
    if popup.end_date and today > popup.end_date:
        return False
    return True


def localize(popup: PopupAd, language: str) -> PopupView:
    """Pick the Korean or English texts, with default button labels."""
    korean = language == "ko"
    button_text = popup.button_text_ko if korean else popup.button_text_en
    return PopupView(
        id=popup.id,
        title=popup.title_ko if korean else popup.title_en,
        description=popup.description_ko if korean else popup.description_en,
        image_url=popup.image_url,
        button_text=button_text or DEFAULT_BUTTON_TEXT["ko" if korean else "en"],
        button_link=popup.button_link,
    )


class PopupGate:
    """Decides which popup, if any, a signed-in user sees on this page load.

    Lookup failures are logged and treated as "no popup"; popups never block
    navigation.
    """

    CANDIDATE_LIMIT = 10

    def __init__(
        self,
        store: DataStore,
        *,
        clock: Callable[[], datetime] = utcnow,
        tz: tzinfo | None = None,
    ) -> None:
        """Initialize the gate.

        Args:
            store: Table access for popups and dismissals.
            clock: Current time (aware).
            tz: Viewer's zone for the dismissal day; None means the process zone.
        """
        self._store = store
        self._clock = clock
        self._tz = tz

    def candidates(self) -> list[PopupAd]:
        return (
            self._store.table(PopupAd)
            .eq("is_active", True)
            .order("display_order")
            .order("id")
            .limit(self.CANDIDATE_LIMIT)
            .execute()
        )

    def get_popup(self, popup_id: str) -> PopupAd | None:
        return self._store.table(PopupAd).eq("id", popup_id).maybe_single()

    def select_popup(self, user_id: str, *, tz: tzinfo | None = None) -> PopupAd | None:
        """First in-range popup by display order, unless dismissed today."""
        try:
            return self._select(user_id, tz or self._tz)
        except (SQLAlchemyError, ValueError) as e:
            logger.warning("Popup lookup failed for user %s: %s", user_id, e)
            return None

    def _select(self, user_id: str, tz: tzinfo | None) -> PopupAd | None:
        now = self._clock()
        today = now.astimezone(timezone.utc).date().isoformat()
        popup = next((p for p in self.candidates() if in_date_range(p, today)), None)
        if popup is None:
            return None

        dismissal = (
            self._store.table(PopupDismissal)
            .eq("user_id", user_id)
            .eq("popup_id", popup.id)
            .maybe_single()
        )
        if dismissal is not None and local_date(dismissal.dismissed_at, tz) == local_date(now, tz):
            return None
        return popup

    def record_dismissal(self, user_id: str, popup_id: str) -> PopupDismissal | None:
        """Upsert the (user, popup) dismissal with the current time.

        Used for both closing the popup and following its button.
        """
        try:
            return self._store.table(PopupDismissal).upsert(
                {"user_id": user_id, "popup_id": popup_id, "dismissed_at": self._clock()},
                on_conflict=("user_id", "popup_id"),
            )
        except SQLAlchemyError as e:
            logger.warning("Could not record dismissal of %s by %s: %s", popup_id, user_id, e)
            return None
