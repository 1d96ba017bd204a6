"""Client-side services over the session store and API client"""

from .session_store import SessionStore, StorageKeys
from .session_refresh import SessionRefreshClient
from .wallet_status import WalletStatusClient
from .auth_service import AuthService
from .pin_service import PinPreferenceStore, PinService
from .wallet_service import WalletService
from .payment_service import PaymentService
from .kyc_service import KycService
from .merchant_directory import MerchantDirectory

__all__ = [
    "SessionStore",
    "StorageKeys",
    "SessionRefreshClient",
    "WalletStatusClient",
    "AuthService",
    "PinPreferenceStore",
    "PinService",
    "WalletService",
    "PaymentService",
    "KycService",
    "MerchantDirectory",
]
