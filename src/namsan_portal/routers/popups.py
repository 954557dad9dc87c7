"""Promotional popup routes for the signed-in dashboard."""
from typing import Literal
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from fastapi import APIRouter, Query

from namsan_portal.deps import PopupGateDep, VerifiedClaims
from namsan_portal.errors import BadRequest, NotFound
from namsan_portal.schemas import (CurrentPopupResponse, ErrorResponse,
                                   PopupActionResponse)
from namsan_portal.services.popups import localize

router = APIRouter(
    prefix="/popups",
    tags=["popups"],
    responses={401: {"model": ErrorResponse}},
)


def _zone(name: str | None) -> ZoneInfo | None:
    if not name:
        return None
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise BadRequest(f"Unknown time zone: {name}") from e


@router.get("/current", response_model=CurrentPopupResponse)
def current_popup(
    claims: VerifiedClaims,
    gate: PopupGateDep,
    language: Literal["ko", "en"] = "ko",
    tz: str | None = Query(default=None, description="Viewer's IANA time zone, e.g. Asia/Seoul"),
) -> CurrentPopupResponse:
    """The popup to show on this page load, or `popup: null`."""
    popup = gate.select_popup(claims.sub, tz=_zone(tz))
    return CurrentPopupResponse(popup=localize(popup, language) if popup else None)


@router.post(
    "/{popup_id}/dismiss",
    response_model=PopupActionResponse,
    responses={404: {"model": ErrorResponse}},
)
def dismiss_popup(
    popup_id: str, claims: VerifiedClaims, gate: PopupGateDep
) -> PopupActionResponse:
    """Hide the popup for the rest of the viewer's day."""
    popup = gate.get_popup(popup_id)
    if popup is None:
        raise NotFound("Popup not found")
    recorded = gate.record_dismissal(claims.sub, popup.id)
    return PopupActionResponse(success=recorded is not None)


@router.post(
    "/{popup_id}/action",
    response_model=PopupActionResponse,
    responses={404: {"model": ErrorResponse}},
)
def popup_action(
    popup_id: str, claims: VerifiedClaims, gate: PopupGateDep
) -> PopupActionResponse:
    """Follow the popup's button: counts as a dismissal and returns the link."""
    popup = gate.get_popup(popup_id)
    if popup is None:
        raise NotFound("Popup not found")
    recorded = gate.record_dismissal(claims.sub, popup.id)
    return PopupActionResponse(success=recorded is not None, button_link=popup.button_link)
