"""
Encryption helpers
OAuth tokens are stored encrypted at rest with a Fernet key derived from SECRET_KEY.
Health record fields (mood notes, assessment answers) use a per-user key derived
from SECRET_KEY and the owner's id.
"""

import base64
import hashlib
import logging
from typing import Optional

from cryptography.fernet import Fernet, InvalidToken

from .config import SECRET_KEY
from .errors import StorageError

logger = logging.getLogger(__name__)


def get_fernet_key(secret: str = SECRET_KEY) -> bytes:
    key = hashlib.sha256(secret.encode()).digest()
    return base64.urlsafe_b64encode(key)


cipher_suite = Fernet(get_fernet_key())


def encrypt_token(value: str) -> str:
    """Encrypt a token for storage"""
    return cipher_suite.encrypt(value.encode()).decode()


def decrypt_token(value: str) -> Optional[str]:
    """Decrypt a stored token, returning None if it was tampered with or the key rotated"""
    try:
        return cipher_suite.decrypt(value.encode()).decode()
    except InvalidToken:
        logger.error("Failed to decrypt stored token (invalid token or key changed)")
        return None


def get_user_cipher(user_id: int) -> Fernet:
    return Fernet(get_fernet_key(f"{SECRET_KEY}:user:{user_id}"))


def encrypt_field(user_id: int, value: Optional[str]) -> Optional[str]:
    """Encrypt a health record field under its owner's key"""
    if value is None:
        return None
    return get_user_cipher(user_id).encrypt(value.encode()).decode()


def decrypt_field(user_id: int, value: Optional[str]) -> Optional[str]:
    """
    Decrypt a health record field.
    Unlike tokens, a record that cannot be decrypted is an error rather than a reconnect.
    """
    if value is None:
        return None
    try:
        return get_user_cipher(user_id).decrypt(value.encode()).decode()
    except InvalidToken:
        logger.error(f"Failed to decrypt health record field for user {user_id}")
        raise StorageError("Failed to decrypt stored record") from None
