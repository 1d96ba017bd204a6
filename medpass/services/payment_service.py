"""Wallet payments to a merchant service"""

from typing import Any, Optional

from ..api.client import MediImpactClient
from ..models.results import NETWORK_ERROR_MESSAGE, ActionResult, FailureReason
from ..utils.exceptions import BadStatusError, MedpassError
from ..utils.logger import get_logger
from ..utils.numbers import to_number
from .pin_service import PinService
from .session_store import SessionStore

logger = get_logger(__name__)

MIN_PAYMENT_AMOUNT = 1
PIN_PAYMENT_DESCRIPTION = "Consultation payment"


class PaymentService:
    def __init__(
        self,
        store: SessionStore,
        client: MediImpactClient,
        pin_service: Optional[PinService] = None,
    ):
        self.store = store
        self.client = client
        self.pin_service = pin_service or PinService(store, client)

    def pay(
        self,
        service_id: Any,
        amount: Any,
        prn: str = "",
        desc: str = "",
        pin: Optional[str] = None,
    ) -> ActionResult:
        """
        Pay a service from the wallet balance.

        When the transaction PIN is enabled the call returns pin-required
        until it is given a PIN, which is checked with the server before the
        transaction is made.
        """
        numeric = to_number(amount)
        if numeric is None or numeric < MIN_PAYMENT_AMOUNT:
            return ActionResult.failure(FailureReason.INVALID_INPUT, "Enter a valid amount")

        session = self.store.get()
        if session is None or not session.is_usable or not service_id:
            return ActionResult.failure(FailureReason.MISSING_CREDENTIALS, "Please login again.")

        # An empty balance counts as zero; a non-numeric one skips the check
        balance = session.balance_amount if session.balance else 0.0
        if balance is not None and numeric > balance:
            return ActionResult.failure(FailureReason.INSUFFICIENT_BALANCE, "Insufficient wallet balance")

        if self.pin_service.is_pin_enabled(session):
            if pin is None:
                return ActionResult.failure(FailureReason.PIN_REQUIRED, "Enter your transaction PIN")
            verified = self.pin_service.verify_pin(pin, enabled=True)
            if not verified.ok:
                return verified
            desc = desc or PIN_PAYMENT_DESCRIPTION

        credentials = self.store.credentials()
        try:
            data = self.client.make_transaction(
                credentials,
                service_id=str(service_id),
                amount=numeric,
                prn=str(prn) if prn else "",
                desc=str(desc) if desc else "",
            )
        except BadStatusError as e:
            logger.warning("Payment rejected", service_id=str(service_id), http_status=e.http_status)
            return ActionResult.failure(FailureReason.BAD_STATUS, e.server_message or "Payment failed", data=e.payload)
        except MedpassError as e:
            logger.error("Payment error", service_id=str(service_id), error=str(e))
            return ActionResult.failure(FailureReason.EXCEPTION, NETWORK_ERROR_MESSAGE)

        logger.info("Payment completed", service_id=str(service_id), amount=numeric)
        return ActionResult.success(data={"amount": numeric, "response": data})
