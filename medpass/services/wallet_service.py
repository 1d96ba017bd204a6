"""Wallet activation OTP, transactions, cashback and add-money orders"""

from typing import Any, Dict, List, Optional

from ..api.client import MediImpactClient
from ..core.verification_flow import VerificationFlow
from ..models.results import NETWORK_ERROR_MESSAGE, ActionResult, FailureReason
from ..utils.exceptions import BadStatusError, MedpassError
from ..utils.logger import get_logger
from ..utils.numbers import to_number
from .session_refresh import SessionRefreshClient
from .session_store import SessionStore
from .wallet_status import WalletStatusClient

logger = get_logger(__name__)

WALLET_OTP_LENGTH = 5


class WalletService:
    def __init__(
        self,
        store: SessionStore,
        client: MediImpactClient,
        refresher: Optional[SessionRefreshClient] = None,
        status_client: Optional[WalletStatusClient] = None,
        otp_length: int = WALLET_OTP_LENGTH,
        resend_cooldown_seconds: float = 30,
        code_ttl_seconds: Optional[float] = 300,
    ):
        self.store = store
        self.client = client
        self.refresher = refresher or SessionRefreshClient(store, client)
        self.status_client = status_client or WalletStatusClient(store, client)
        self.otp_length = otp_length
        self.resend_cooldown_seconds = resend_cooldown_seconds
        self.code_ttl_seconds = code_ttl_seconds

    def effective_wallet_status(self) -> Optional[str]:
        """
        Wallet status to act on: the dedicated status call first, the cached
        snapshot only when that call fails. None when neither is available.
        """
        result = self.status_client.fetch_status()
        if result.ok:
            self.status_client.apply(result)
            return result.wallet_status
        logger.info("Falling back to cached wallet status", reason=result.reason)
        session = self.store.get()
        if session and session.wallet_status:
            return session.wallet_status
        return None

    def resend_wallet_otp(self) -> ActionResult:
        credentials = self.store.credentials()
        if credentials is None:
            return ActionResult.failure(FailureReason.MISSING_CREDENTIALS, "Please login again.")
        try:
            self.client.resend_wallet_otp(credentials)
        except BadStatusError as e:
            return ActionResult.failure(FailureReason.BAD_STATUS, e.server_message or "Failed to resend OTP", data=e.payload)
        except MedpassError as e:
            logger.error("Resend wallet OTP error", error=str(e))
            return ActionResult.failure(FailureReason.EXCEPTION, NETWORK_ERROR_MESSAGE)
        return ActionResult.success(message="We have sent an OTP to your registered mobile number.")

    def verify_wallet_otp(self, otp: str) -> ActionResult:
        """Validate the activation OTP, then resync the session and the wallet status"""
        credentials = self.store.credentials()
        if credentials is None:
            return ActionResult.failure(FailureReason.MISSING_CREDENTIALS, "Please login again.")
        try:
            self.client.validate_wallet_otp(credentials, otp)
        except BadStatusError as e:
            return ActionResult.failure(FailureReason.BAD_STATUS, e.server_message or "OTP verification failed", data=e.payload)
        except MedpassError as e:
            logger.error("Verify wallet OTP error", error=str(e))
            return ActionResult.failure(FailureReason.EXCEPTION, NETWORK_ERROR_MESSAGE)

        refreshed = self.refresher.refresh()
        if not refreshed.ok:
            logger.warning("Session refresh after wallet OTP failed", reason=refreshed.reason)
        status = self.status_client.fetch_status()
        if status.ok:
            self.status_client.apply(status)
        return ActionResult.success(
            data={"wallet_status": status.wallet_status if status.ok else None},
            message="Wallet OTP verified successfully.",
        )

    def wallet_otp_flow(self) -> VerificationFlow:
        return VerificationFlow(
            send=self.resend_wallet_otp,
            verify=self.verify_wallet_otp,
            code_length=self.otp_length,
            resend_cooldown_seconds=self.resend_cooldown_seconds,
            code_ttl_seconds=self.code_ttl_seconds,
            name="wallet-otp",
        )

    def transactions(self) -> List[Dict[str, Any]]:
        """Transaction history; empty on any failure"""
        credentials = self.store.credentials()
        if credentials is None:
            return []
        try:
            data = self.client.transaction_report(credentials)
        except MedpassError as e:
            logger.error("Fetch transactions error", error=str(e))
            return []
        rows = data.get("tr_data")
        return rows if isinstance(rows, list) else []

    def cashback(self) -> Optional[float]:
        credentials = self.store.credentials()
        if credentials is None:
            return None
        try:
            data = self.client.user_info_summary(credentials)
        except MedpassError as e:
            logger.warning("Cashback lookup failed", error=str(e))
            return None
        value = data.get("cashback")
        if value is None and isinstance(data.get("user_data"), dict):
            value = data["user_data"].get("cashback")
        return to_number(value)

    def create_add_money_order(self, amount: Any) -> ActionResult:
        """
        Create the server-side order that a payment sheet then completes.
        Amount is in rupees; the paise amount is returned for the sheet.
        """
        numeric = to_number(amount)
        if numeric is None or numeric <= 0:
            return ActionResult.failure(FailureReason.INVALID_INPUT, "Enter a valid amount")
        credentials = self.store.credentials()
        if credentials is None:
            return ActionResult.failure(FailureReason.MISSING_CREDENTIALS, "Please login again.")

        try:
            data = self.client.create_order(credentials, numeric)
        except BadStatusError as e:
            logger.warning("Add money order rejected", http_status=e.http_status)
            return ActionResult.failure(FailureReason.BAD_STATUS, e.server_message or "Could not create order", data=e.payload)
        except MedpassError as e:
            logger.error("Add money order error", error=str(e))
            return ActionResult.failure(FailureReason.EXCEPTION, NETWORK_ERROR_MESSAGE)

        order_id = data.get("order_id")
        if not order_id:
            logger.warning("Add money order response without order_id")
            return ActionResult.failure(FailureReason.BAD_STATUS, "Could not create order", data=data)

        logger.info("Add money order created", order_id=order_id, amount=numeric)
        return ActionResult.success(data={"order_id": order_id, "amount_paise": int(round(numeric * 100))})
