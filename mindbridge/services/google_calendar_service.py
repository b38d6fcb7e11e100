"""
Google Calendar Service
Free/busy lookups plus event creation, updates, and deletion on a provider's calendar
"""
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

import httpx
from sqlalchemy.orm import Session

from ..config import GOOGLE_API_TIMEOUT, GOOGLE_CLIENT_ID, GOOGLE_CLIENT_SECRET
from ..domain.scheduling.schemas import BusyInterval
from ..errors import ExternalServiceError
from ..models import Doctor
from ..models_google_calendar import GoogleCalendarIntegration
from ..security_utils import decrypt_token, encrypt_token
from ..shared.validators import ensure_utc, parse_iso_datetime

logger = logging.getLogger(__name__)

GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"  # noqa: S105 - OAuth endpoint URL
GOOGLE_CALENDAR_API = "https://www.googleapis.com/calendar/v3"

# Refresh access tokens that expire within this window
TOKEN_REFRESH_MARGIN = timedelta(minutes=5)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _json_body(response: httpx.Response) -> dict[str, Any]:
    """Decode a JSON object body; anything else is a provider failure"""
    try:
        body = response.json()
    except ValueError as e:
        logger.error(f"Google returned a non-JSON body ({response.status_code}): {response.text[:200]}")
        raise ExternalServiceError("Calendar returned an invalid response") from e
    if not isinstance(body, dict):
        raise ExternalServiceError("Calendar returned an invalid response")
    return body


async def get_valid_access_token(
    integration: GoogleCalendarIntegration,
    db: Session,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> str:
    """
    Get a valid access token, refreshing if necessary.
    Raises ExternalServiceError if the stored tokens are unusable or refresh fails.
    """
    if integration.token_expires_at > _utcnow() + TOKEN_REFRESH_MARGIN:
        access_token = decrypt_token(integration.access_token)
        if not access_token:
            raise ExternalServiceError("Calendar unavailable: stored access token is invalid")
        return access_token

    logger.info(f"Google Calendar token for user {integration.user_id} expired, refreshing...")

    refresh_token = decrypt_token(integration.refresh_token)
    if not refresh_token:
        raise ExternalServiceError("Calendar unavailable: stored refresh token is invalid")

    try:
        async with httpx.AsyncClient(timeout=GOOGLE_API_TIMEOUT, transport=transport) as client:
            response = await client.post(
                GOOGLE_TOKEN_URL,
                data={
                    "client_id": GOOGLE_CLIENT_ID,
                    "client_secret": GOOGLE_CLIENT_SECRET,
                    "refresh_token": refresh_token,
                    "grant_type": "refresh_token",
                },
            )
    except httpx.HTTPError as e:
        logger.error(f"Token refresh request failed: {e}")
        raise ExternalServiceError("Calendar unavailable: token refresh failed") from e

    if response.status_code != 200:
        logger.error(f"Token refresh failed: {response.text}")
        raise ExternalServiceError("Calendar unavailable: token refresh failed")

    tokens = _json_body(response)
    new_access_token = tokens.get("access_token")
    expires_in = tokens.get("expires_in", 3600)

    if not new_access_token:
        logger.error("No access token in refresh response")
        raise ExternalServiceError("Calendar unavailable: token refresh failed")

    # Encrypt and save new access token
    integration.access_token = encrypt_token(new_access_token)
    integration.token_expires_at = _utcnow() + timedelta(seconds=expires_in)
    db.commit()

    logger.info("Google Calendar token refreshed successfully")
    return new_access_token


def build_event_body(
    summary: str,
    description: str,
    start: datetime,
    end: datetime,
    attendees: Optional[list[str]] = None,
) -> dict[str, Any]:
    """Build a Google Calendar event resource for a one-off appointment"""
    event: dict[str, Any] = {
        "summary": summary,
        "description": description,
        "start": {"dateTime": ensure_utc(start).isoformat(), "timeZone": "UTC"},
        "end": {"dateTime": ensure_utc(end).isoformat(), "timeZone": "UTC"},
        "reminders": {
            "useDefault": False,
            "overrides": [
                {"method": "email", "minutes": 24 * 60},  # 1 day before
                {"method": "popup", "minutes": 60},  # 1 hour before
            ],
        },
    }
    if attendees:
        event["attendees"] = [{"email": email} for email in attendees if email]
    return event


class GoogleCalendarClient:
    """Calendar provider backed by one user's Google Calendar integration"""

    def __init__(
        self,
        integration: GoogleCalendarIntegration,
        db: Session,
        timeout: float = GOOGLE_API_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.integration = integration
        self.db = db
        self.timeout = timeout
        self.transport = transport

    @property
    def calendar_id(self) -> str:
        return self.integration.google_calendar_id or "primary"

    async def _request(
        self, method: str, path: str, expected: tuple[int, ...] = (200,), **kwargs
    ) -> httpx.Response:
        access_token = await get_valid_access_token(self.integration, self.db, self.transport)
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.request(
                    method,
                    f"{GOOGLE_CALENDAR_API}{path}",
                    headers={"Authorization": f"Bearer {access_token}"},
                    **kwargs,
                )
        except httpx.TimeoutException as e:
            logger.error(f"Google Calendar {method} {path} timed out")
            raise ExternalServiceError("Calendar request timed out") from e
        except httpx.HTTPError as e:
            logger.error(f"Google Calendar {method} {path} failed: {e}")
            raise ExternalServiceError(f"Calendar request failed: {e}") from e

        if response.status_code not in expected:
            logger.error(f"Google Calendar {method} {path} returned {response.status_code}: {response.text}")
            raise ExternalServiceError(f"Calendar request failed with status {response.status_code}")
        return response

    async def query_busy(self, start: datetime, end: datetime) -> list[BusyInterval]:
        """Return busy intervals on the calendar between start and end"""
        response = await self._request(
            "POST",
            "/freeBusy",
            json={
                "timeMin": ensure_utc(start).isoformat(),
                "timeMax": ensure_utc(end).isoformat(),
                "items": [{"id": self.calendar_id}],
            },
        )
        calendars = _json_body(response).get("calendars") or {}
        if not isinstance(calendars, dict):
            raise ExternalServiceError("Calendar returned an invalid response")
        calendar = calendars.get(self.calendar_id)
        if calendar is None and len(calendars) == 1:
            # "primary" comes back keyed by the calendar's real id
            calendar = next(iter(calendars.values()))
        if not isinstance(calendar, dict):
            raise ExternalServiceError("Calendar missing from free/busy response")
        if calendar.get("errors"):
            logger.error(f"Free/busy errors for {self.calendar_id}: {calendar['errors']}")
            raise ExternalServiceError("Calendar free/busy lookup failed")

        try:
            return [
                BusyInterval(start=parse_iso_datetime(busy["start"]), end=parse_iso_datetime(busy["end"]))
                for busy in calendar.get("busy") or []
            ]
        except (KeyError, TypeError, ValueError) as e:
            # ValidationError is a ValueError: covers end before start and unparseable times
            logger.error(f"Malformed free/busy entry for {self.calendar_id}: {e}")
            raise ExternalServiceError("Calendar returned malformed busy intervals") from e

    async def create_event(self, event: dict[str, Any]) -> str:
        response = await self._request(
            "POST",
            f"/calendars/{self.calendar_id}/events",
            expected=(200, 201),
            params={"sendUpdates": "all"},
            json=event,
        )
        event_id = _json_body(response).get("id")
        if not event_id:
            raise ExternalServiceError("Calendar did not return an event id")
        logger.info(f"Google Calendar event created: {event_id}")
        return event_id

    async def update_event(self, event_id: str, event: dict[str, Any]) -> str:
        response = await self._request(
            "PUT",
            f"/calendars/{self.calendar_id}/events/{event_id}",
            params={"sendUpdates": "all"},
            json=event,
        )
        logger.info(f"Google Calendar event updated: {event_id}")
        return _json_body(response).get("id") or event_id

    async def delete_event(self, event_id: str) -> None:
        # 410 Gone means the event was already deleted
        await self._request(
            "DELETE",
            f"/calendars/{self.calendar_id}/events/{event_id}",
            expected=(200, 204, 410),
            params={"sendUpdates": "all"},
        )
        logger.info(f"Google Calendar event deleted: {event_id}")


def get_doctor_calendar(doctor: Doctor, db: Session) -> GoogleCalendarClient:
    """
    Resolve the calendar client for a doctor's connected Google Calendar.
    Raises ExternalServiceError when the doctor has no usable integration.
    """
    integration = None
    if doctor.user_id is not None:
        integration = (
            db.query(GoogleCalendarIntegration)
            .filter(GoogleCalendarIntegration.user_id == doctor.user_id)
            .first()
        )
    if not integration:
        raise ExternalServiceError(f"Calendar unavailable: doctor {doctor.id} has no connected calendar")
    return GoogleCalendarClient(integration, db)
