"""Session refresh against the whoami endpoint"""

from ..api.client import MediImpactClient
from ..models.results import FailureReason, RefreshResult
from ..utils.exceptions import BadStatusError, MedpassError
from ..utils.logger import get_logger
from .session_store import SessionStore, profile_fields_from_payload

logger = get_logger(__name__)


class SessionRefreshClient:
    """Rewrites the cached profile, wallet status and balance from the server"""

    def __init__(self, store: SessionStore, client: MediImpactClient):
        self.store = store
        self.client = client

    def refresh(self) -> RefreshResult:
        """
        One attempt, no retry. The cache is only written after a fully
        successful response, so failures leave it exactly as it was.
        """
        credentials = self.store.credentials()
        if credentials is None:
            logger.warning("Session refresh: missing token or userId")
            return RefreshResult(ok=False, reason=FailureReason.MISSING_CREDENTIALS)

        try:
            data = self.client.user_info(credentials)
        except BadStatusError as e:
            logger.warning("Session refresh: non-200", http_status=e.http_status, status=e.payload.get("status"))
            return RefreshResult(ok=False, reason=FailureReason.BAD_STATUS, data=e.payload, error=str(e))
        except MedpassError as e:
            logger.error("Session refresh error", error=str(e))
            return RefreshResult(ok=False, reason=FailureReason.EXCEPTION, error=str(e))

        try:
            updated = profile_fields_from_payload(data)
            self.store.update(updated)
        except (MedpassError, TypeError, ValueError) as e:
            logger.error("Session refresh: failed to persist", error=str(e))
            return RefreshResult(ok=False, reason=FailureReason.EXCEPTION, error=str(e))

        logger.info(
            "Session refreshed",
            user_id=updated["userId"],
            wallet_status=updated["walletStatus"],
        )
        return RefreshResult(ok=True, data=data)
