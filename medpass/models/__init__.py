"""Data models"""

from .session import Session, WalletStatus, describe_wallet_status
from .results import ActionResult, FailureReason, RefreshResult, WalletStatusResult
from .merchant import Merchant, MerchantDetail, ServiceDetail

__all__ = [
    "Session",
    "WalletStatus",
    "describe_wallet_status",
    "ActionResult",
    "FailureReason",
    "RefreshResult",
    "WalletStatusResult",
    "Merchant",
    "MerchantDetail",
    "ServiceDetail",
]
