import logging
from typing import Any

from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import ExpiredSignatureError, JWTError
from jose import jwt as jose_jwt
from sqlalchemy.orm import Session

from .config import JWT_ALGORITHM, JWT_SECRET
from .database import get_db
from .domain.doctors.repository import DoctorRepository
from .models import Doctor, User

logger = logging.getLogger(__name__)

security = HTTPBearer()


def verify_session_token(token: str) -> dict[str, Any]:
    """
    Verify a session JWT issued by the auth service.
    Raises 401 for malformed, tampered, or expired tokens.
    """
    try:
        return jose_jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALGORITHM])
    except ExpiredSignatureError as e:
        raise HTTPException(
            status_code=401,
            detail="Token has expired. Please refresh your session.",
            headers={"X-Token-Expired": "true"},
        ) from e
    except JWTError as e:
        logger.warning(f"Token verification failed: {e}")
        raise HTTPException(status_code=401, detail="Token verification failed") from e


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db),
) -> User:
    """Get current user from the Bearer session token"""

    if not credentials:
        raise HTTPException(
            status_code=401,
            detail="Not authenticated. Please provide a valid Bearer token in the Authorization header.",
        )

    token = credentials.credentials
    if len(token.split(".")) != 3:
        logger.warning(f"Malformed token received, length: {len(token)}")
        raise HTTPException(status_code=401, detail="Invalid token format. Expected a valid JWT token.")

    claims = verify_session_token(token)

    user_id = claims.get("id") or claims.get("sub")
    try:
        user_id = int(user_id)
    except (TypeError, ValueError):
        logger.error(f"Token missing user ID claim. Available claims: {list(claims.keys())}")
        raise HTTPException(status_code=401, detail="Invalid token claims") from None

    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        logger.warning(f"Token references unknown user {user_id}")
        raise HTTPException(status_code=401, detail="User not found")

    return user


async def get_current_doctor(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> Doctor:
    """Require a doctor account and return its doctor profile"""
    if current_user.role != "doctor":
        raise HTTPException(status_code=403, detail="Access denied. Doctor role required.")

    doctor = DoctorRepository.get_by_user_id(db, current_user.id)
    if not doctor:
        raise HTTPException(status_code=403, detail="Doctor profile not found")
    return doctor


async def get_current_admin(current_user: User = Depends(get_current_user)) -> User:
    """Require an admin account"""
    if current_user.role != "admin":
        raise HTTPException(status_code=403, detail="Unauthorized. Admin access required.")
    return current_user
