"""
Persisted session store.

Typed access to the session keys kept in a KeyValueStore. Every value is
stored as a string; the profile is stored as JSON text. Public operations
never raise: failures are logged and reported through the return value.
"""

import json
from typing import Any, Dict, Optional

from ..api.client import Credentials
from ..models.session import Session
from ..storage.kv_store import KeyValueStore
from ..utils.logger import get_logger

logger = get_logger(__name__)


class StorageKeys:
    USER_TOKEN = "userToken"
    USER_ID = "userId"
    USER_NAME = "userName"
    USER_MOBILE = "userMobile"
    USER_DATA = "userData"
    WALLET_STATUS = "walletStatus"
    USER_BALANCE = "userBalance"
    BA_CODE = "baCode"
    IS_LOGGED_IN = "isLoggedIn"

    @classmethod
    def all(cls):
        return [
            cls.USER_TOKEN,
            cls.USER_ID,
            cls.USER_NAME,
            cls.USER_MOBILE,
            cls.USER_DATA,
            cls.WALLET_STATUS,
            cls.USER_BALANCE,
            cls.BA_CODE,
            cls.IS_LOGGED_IN,
        ]


def sanitize_to_string(value: Any) -> str:
    """None becomes "", strings pass through, anything else is str()'d"""
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return str(value)


def profile_fields_from_payload(payload: Dict[str, Any]) -> Dict[str, str]:
    """Keys written both at login and on every refresh"""
    return {
        StorageKeys.USER_ID: sanitize_to_string(payload.get("userId")),
        StorageKeys.USER_NAME: sanitize_to_string(payload.get("name")),
        StorageKeys.USER_DATA: json.dumps(
            payload.get("user_data") if payload.get("user_data") is not None else {}
        ),
        StorageKeys.WALLET_STATUS: sanitize_to_string(payload.get("wallets_status")),
        StorageKeys.USER_BALANCE: sanitize_to_string(payload.get("balance")),
        StorageKeys.BA_CODE: sanitize_to_string(payload.get("ba_code")),
    }


class SessionStore:
    """Session repository over a key-value store"""

    def __init__(self, kv: KeyValueStore):
        self.kv = kv

    def store(self, session_payload: Dict[str, Any], mobile: Any) -> bool:
        """
        Persist a fresh session after successful OTP verification.

        Args:
            session_payload: verify_otp response body (token, userId, name,
                user_data, wallets_status, balance, ba_code)
            mobile: Mobile number the OTP was sent to

        Returns:
            True on success, False if anything could not be written
        """
        try:
            payload = session_payload or {}
            to_store = {
                StorageKeys.USER_TOKEN: sanitize_to_string(payload.get("token")),
                StorageKeys.USER_MOBILE: sanitize_to_string(mobile),
                StorageKeys.IS_LOGGED_IN: "true",
            }
            to_store.update(profile_fields_from_payload(payload))
            self.kv.set_items(to_store)
            logger.info("User data stored successfully", user_id=to_store[StorageKeys.USER_ID])
            return True
        except Exception as e:
            logger.error("Error storing user data", error=str(e))
            return False

    def get(self) -> Optional[Session]:
        """
        Read the whole session.

        Missing keys come back as empty strings. Returns None only when the
        storage read fails or the stored profile is not valid JSON.
        """
        try:
            raw = self.kv.get_items(StorageKeys.all())
            profile_text = raw.get(StorageKeys.USER_DATA)
            profile = json.loads(profile_text) if profile_text else {}
            if not isinstance(profile, dict):
                profile = {}
            return Session(
                token=raw.get(StorageKeys.USER_TOKEN) or "",
                user_id=raw.get(StorageKeys.USER_ID) or "",
                user_name=raw.get(StorageKeys.USER_NAME) or "",
                user_mobile=raw.get(StorageKeys.USER_MOBILE) or "",
                profile=profile,
                wallet_status=raw.get(StorageKeys.WALLET_STATUS) or "",
                balance=raw.get(StorageKeys.USER_BALANCE) or "",
                ba_code=raw.get(StorageKeys.BA_CODE) or "",
                is_logged_in=raw.get(StorageKeys.IS_LOGGED_IN) == "true",
            )
        except Exception as e:
            logger.error("Error getting user data", error=str(e))
            return None

    def is_logged_in(self) -> bool:
        """Login flag only; does not check that credentials are present"""
        try:
            return self.kv.get_item(StorageKeys.IS_LOGGED_IN) == "true"
        except Exception as e:
            logger.error("Error checking login status", error=str(e))
            return False

    def clear(self) -> bool:
        """Remove every session key. Safe to call repeatedly."""
        try:
            self.kv.remove_items(StorageKeys.all())
            logger.info("User data cleared successfully")
            return True
        except Exception as e:
            logger.error("Error clearing user data", error=str(e))
            return False

    def get_field(self, key: str) -> Optional[str]:
        try:
            return self.kv.get_item(key)
        except Exception as e:
            logger.error("Error getting user field", field=key, error=str(e))
            return None

    def update(self, fields: Dict[str, str]) -> None:
        """Overwrite a set of keys in one write. Raises StorageError on failure."""
        self.kv.set_items(fields)

    def credentials(self) -> Optional[Credentials]:
        """Token and user id, or None when either is missing"""
        token = self.get_field(StorageKeys.USER_TOKEN)
        user_id = self.get_field(StorageKeys.USER_ID)
        if not token or not user_id:
            return None
        return Credentials(token=token, user_id=user_id)
