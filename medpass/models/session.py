"""Session data models"""

from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

from ..utils.numbers import to_number


class WalletStatus(str, Enum):
    """Known wallet readiness codes. The server may send others."""
    READY = "0"
    REGISTRATION_REQUIRED = "2"
    OTP_PENDING = "20"


def describe_wallet_status(code: Optional[str]) -> Optional[WalletStatus]:
    """Map a raw status code to WalletStatus, or None when unknown"""
    if code is None:
        return None
    try:
        return WalletStatus(str(code).strip())
    except ValueError:
        return None


class Session(BaseModel):
    """Locally persisted login session. Every scalar is kept as a string."""
    token: str = ""
    user_id: str = ""
    user_name: str = ""
    user_mobile: str = ""
    profile: Dict[str, Any] = Field(default_factory=dict)  # server user_data, opaque
    wallet_status: str = ""
    balance: str = ""
    ba_code: str = ""
    is_logged_in: bool = False

    @property
    def is_usable(self) -> bool:
        """True only when both credentials are present, whatever is_logged_in says"""
        return bool(self.token) and bool(self.user_id)

    @property
    def balance_amount(self) -> Optional[float]:
        return to_number(self.balance) if self.balance else None
