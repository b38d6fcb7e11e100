"""
Google Calendar Integration Routes
Handles OAuth connection so a doctor's calendar can drive availability and receive appointments
"""

import logging
from datetime import datetime, timedelta, timezone
from urllib.parse import urlencode

import httpx
from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..auth import get_current_user
from ..config import GOOGLE_API_TIMEOUT, GOOGLE_CLIENT_ID, GOOGLE_CLIENT_SECRET, GOOGLE_REDIRECT_URI
from ..database import get_db
from ..models import User
from ..models_google_calendar import GoogleCalendarIntegration
from ..security_utils import decrypt_token, encrypt_token

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/google-calendar", tags=["google-calendar"])

# Google OAuth URLs
GOOGLE_AUTH_URL = "https://accounts.google.com/o/oauth2/v2/auth"
GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"  # noqa: S105 - OAuth endpoint URL
GOOGLE_REVOKE_URL = "https://oauth2.googleapis.com/revoke"
GOOGLE_USERINFO_URL = "https://www.googleapis.com/oauth2/v2/userinfo"
GOOGLE_PRIMARY_CALENDAR_URL = "https://www.googleapis.com/calendar/v3/users/me/calendarList/primary"
GOOGLE_CALENDAR_SCOPES = [
    "https://www.googleapis.com/auth/calendar",
    "https://www.googleapis.com/auth/calendar.events",
    "https://www.googleapis.com/auth/userinfo.email",
]


class OAuthCallback(BaseModel):
    code: str


def _get_integration(db: Session, user: User):
    return db.query(GoogleCalendarIntegration).filter(GoogleCalendarIntegration.user_id == user.id).first()


@router.get("/status")
async def get_google_calendar_status(
    current_user: User = Depends(get_current_user), db: Session = Depends(get_db)
):
    """Get Google Calendar connection status"""
    integration = _get_integration(db, current_user)

    if not integration:
        return {
            "connected": False,
            "user_email": None,
            "calendar_id": None,
            "auto_sync_enabled": None,
        }

    return {
        "connected": True,
        "user_email": integration.google_user_email,
        "calendar_id": integration.google_calendar_id,
        "auto_sync_enabled": integration.auto_sync_enabled,
    }


@router.get("/connect")
async def initiate_google_calendar_oauth(current_user: User = Depends(get_current_user)):
    """Initiate Google Calendar OAuth flow"""
    if not GOOGLE_CLIENT_ID or not GOOGLE_CLIENT_SECRET:
        raise HTTPException(status_code=500, detail="Google Calendar not configured")

    params = {
        "client_id": GOOGLE_CLIENT_ID,
        "redirect_uri": GOOGLE_REDIRECT_URI,
        "response_type": "code",
        "scope": " ".join(GOOGLE_CALENDAR_SCOPES),
        "access_type": "offline",
        "prompt": "consent",  # Force Google to return a refresh token
        "state": str(current_user.id),
    }

    logger.info(f"Google Calendar OAuth initiated for user: {current_user.email}")

    return {"authorization_url": f"{GOOGLE_AUTH_URL}?{urlencode(params)}"}


@router.post("/callback")
async def handle_google_calendar_callback(
    data: OAuthCallback,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Handle Google Calendar OAuth callback"""
    if not data.code:
        raise HTTPException(status_code=400, detail="No authorization code provided")

    try:
        async with httpx.AsyncClient(timeout=GOOGLE_API_TIMEOUT) as client:
            token_response = await client.post(
                GOOGLE_TOKEN_URL,
                data={
                    "code": data.code,
                    "client_id": GOOGLE_CLIENT_ID,
                    "client_secret": GOOGLE_CLIENT_SECRET,
                    "redirect_uri": GOOGLE_REDIRECT_URI,
                    "grant_type": "authorization_code",
                },
            )

            if token_response.status_code != 200:
                logger.error(f"Token exchange failed: {token_response.text}")
                raise HTTPException(status_code=400, detail="Failed to exchange authorization code")

            tokens = token_response.json()
            access_token = tokens.get("access_token")
            refresh_token = tokens.get("refresh_token")
            expires_in = tokens.get("expires_in", 3600)

            if not access_token or not refresh_token:
                raise HTTPException(status_code=400, detail="Invalid token response")

            user_info_response = await client.get(
                GOOGLE_USERINFO_URL, headers={"Authorization": f"Bearer {access_token}"}
            )
            if user_info_response.status_code != 200:
                logger.error(f"Failed to get user info: {user_info_response.text}")
                raise HTTPException(status_code=400, detail="Failed to get user info")

            google_email = user_info_response.json().get("email")

            calendar_response = await client.get(
                GOOGLE_PRIMARY_CALENDAR_URL, headers={"Authorization": f"Bearer {access_token}"}
            )
            calendar_id = "primary"
            if calendar_response.status_code == 200:
                calendar_id = calendar_response.json().get("id", "primary")
    except httpx.HTTPError as e:
        logger.error(f"Google Calendar callback request failed: {e}")
        raise HTTPException(status_code=502, detail="Failed to reach Google") from e

    token_expires_at = datetime.now(timezone.utc).replace(tzinfo=None) + timedelta(seconds=expires_in)

    try:
        integration = _get_integration(db, current_user)
        if integration:
            integration.access_token = encrypt_token(access_token)
            integration.refresh_token = encrypt_token(refresh_token)
            integration.token_expires_at = token_expires_at
            integration.google_user_email = google_email
            integration.google_calendar_id = calendar_id
        else:
            integration = GoogleCalendarIntegration(
                user_id=current_user.id,
                access_token=encrypt_token(access_token),
                refresh_token=encrypt_token(refresh_token),
                token_expires_at=token_expires_at,
                google_user_email=google_email,
                google_calendar_id=calendar_id,
                auto_sync_enabled=True,
            )
            db.add(integration)
        db.commit()
    except SQLAlchemyError as e:
        logger.error(f"Failed to save Google Calendar integration: {e}")
        db.rollback()
        raise HTTPException(status_code=500, detail="Failed to connect Google Calendar") from e

    logger.info(f"Google Calendar connected for user: {current_user.email}")

    return {
        "success": True,
        "message": "Google Calendar connected successfully",
        "user_email": google_email,
    }


@router.post("/disconnect")
async def disconnect_google_calendar(
    current_user: User = Depends(get_current_user), db: Session = Depends(get_db)
):
    """Disconnect Google Calendar integration"""
    integration = _get_integration(db, current_user)

    if not integration:
        raise HTTPException(status_code=404, detail="Google Calendar not connected")

    # Revoking is best-effort; the local integration is removed either way
    access_token = decrypt_token(integration.access_token)
    if access_token:
        try:
            async with httpx.AsyncClient(timeout=GOOGLE_API_TIMEOUT) as client:
                await client.post(GOOGLE_REVOKE_URL, params={"token": access_token})
        except httpx.HTTPError as e:
            logger.warning(f"Failed to revoke Google tokens: {str(e)}")

    db.delete(integration)
    db.commit()

    logger.info(f"Google Calendar disconnected for user: {current_user.email}")

    return {"success": True, "message": "Google Calendar disconnected"}
