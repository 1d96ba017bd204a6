"""Dedicated wallet readiness lookup"""

from ..api.client import Credentials, MediImpactClient
from ..models.results import FailureReason, WalletStatusResult
from ..utils.exceptions import BadStatusError, MedpassError
from ..utils.logger import get_logger
from .session_store import SessionStore, StorageKeys, sanitize_to_string

logger = get_logger(__name__)


class WalletStatusClient:
    """
    Asks /Wallet/MobileValidate for the wallet status.

    This status is computed server-side separately from the profile
    snapshot and can disagree with it; callers should prefer it. The
    client does not persist anything unless apply() is called.
    """

    def __init__(self, store: SessionStore, client: MediImpactClient):
        self.store = store
        self.client = client

    def fetch_status(self) -> WalletStatusResult:
        token = self.store.get_field(StorageKeys.USER_TOKEN)
        user_id = self.store.get_field(StorageKeys.USER_ID)
        mobile = self.store.get_field(StorageKeys.USER_MOBILE)
        if not token or not user_id or not mobile:
            return WalletStatusResult(ok=False, reason=FailureReason.MISSING_CREDENTIALS)

        try:
            data = self.client.mobile_validate(Credentials(token=token, user_id=user_id), mobile)
        except BadStatusError as e:
            return WalletStatusResult(ok=False, reason=FailureReason.BAD_STATUS, data=e.payload, error=str(e))
        except MedpassError as e:
            logger.error("Wallet status fetch error", error=str(e))
            return WalletStatusResult(ok=False, reason=FailureReason.EXCEPTION, error=str(e))

        return WalletStatusResult(ok=True, wallet_status=sanitize_to_string(data.get("wallet_status")), data=data)

    def apply(self, result: WalletStatusResult) -> bool:
        """Persist a successful result into the session. Returns False otherwise."""
        if not result.ok or result.wallet_status is None:
            return False
        try:
            self.store.update({StorageKeys.WALLET_STATUS: result.wallet_status})
        except MedpassError as e:
            logger.error("Failed to persist wallet status", error=str(e))
            return False
        return True
