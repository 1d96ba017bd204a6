"""KYC registration and upgrade"""

from typing import Any, Dict, List, Optional

from ..api.client import FileTuple, MediImpactClient
from ..models.results import NETWORK_ERROR_MESSAGE, ActionResult, FailureReason
from ..utils.exceptions import BadStatusError, MedpassError
from ..utils.logger import get_logger
from .session_refresh import SessionRefreshClient
from .session_store import SessionStore

logger = get_logger(__name__)

REQUIRED_FIELDS = [
    "firstname",
    "lastname",
    "dob",
    "email",
    "mobile",
    "state",
    "city",
    "address",
    "pincode",
    "id_proof_no",
    "gender",
]
AADHAAR_PROOF_TYPES = ("AadhaarCard", "Aadhar")
UPGRADE_FIELDS = [
    "add_proof_type",
    "add_proof_no",
    "id_proof_type",
    "id_proof_no",
    "middlename",
    "mothers_maiden_name",
    "email",
]


class KycService:
    def __init__(
        self,
        store: SessionStore,
        client: MediImpactClient,
        refresher: Optional[SessionRefreshClient] = None,
    ):
        self.store = store
        self.client = client
        self.refresher = refresher or SessionRefreshClient(store, client)

    def _cached_address_proof_no(self) -> str:
        session = self.store.get()
        if session is None:
            return ""
        value = session.profile.get("add_proof_no")
        return str(value) if value else ""

    def _resolve_address_proof_no(self, fields: Dict[str, Any], any_proof_type: bool = False) -> str:
        """
        Aadhaar numbers are masked in the profile form, so a blank entry means
        "keep the number on file". Upgrades keep the number on file for every
        proof type.
        """
        entered = fields.get("add_proof_no")
        if entered:
            return str(entered)
        if any_proof_type or fields.get("add_proof_type") in AADHAAR_PROOF_TYPES:
            return self._cached_address_proof_no()
        return ""

    def missing_fields(self, fields: Dict[str, Any]) -> List[str]:
        missing = [name for name in REQUIRED_FIELDS if not fields.get(name)]
        if not self._resolve_address_proof_no(fields):
            missing.append("add_proof_no")
        return missing

    def register(self, fields: Dict[str, Any]) -> ActionResult:
        """Submit the full KYC profile, then refresh the cached session"""
        missing = self.missing_fields(fields)
        if missing:
            return ActionResult.failure(
                FailureReason.INVALID_INPUT,
                f"Please fill in all required fields: {', '.join(missing)}",
                data={"missing": missing},
            )
        credentials = self.store.credentials()
        if credentials is None:
            return ActionResult.failure(
                FailureReason.MISSING_CREDENTIALS,
                "Authentication credentials not found. Please login again.",
            )

        payload = dict(fields)
        payload["add_proof_no"] = self._resolve_address_proof_no(fields)
        payload["KYCFLAG"] = "1"

        try:
            data = self.client.register_user(credentials, payload)
        except BadStatusError as e:
            return ActionResult.failure(FailureReason.BAD_STATUS, e.server_message or "Failed to update profile", data=e.payload)
        except MedpassError as e:
            logger.error("KYC registration error", error=str(e))
            return ActionResult.failure(FailureReason.EXCEPTION, NETWORK_ERROR_MESSAGE)

        logger.info("KYC profile submitted")
        refreshed = self.refresher.refresh()
        if not refreshed.ok:
            logger.warning("Session refresh after KYC registration failed", reason=refreshed.reason)
        return ActionResult.success(data=data, message=data.get("message") or "Profile updated successfully")

    def upgrade(
        self,
        fields: Dict[str, Any],
        address_proof: Optional[FileTuple] = None,
        id_proof: Optional[FileTuple] = None,
    ) -> ActionResult:
        """Upload proof documents for a full KYC upgrade"""
        if address_proof is None and id_proof is None:
            return ActionResult.failure(
                FailureReason.INVALID_INPUT,
                "Please select at least one document to upload.",
            )
        credentials = self.store.credentials()
        if credentials is None:
            return ActionResult.failure(
                FailureReason.MISSING_CREDENTIALS,
                "Authentication credentials not found. Please login again.",
            )

        form = {name: fields.get(name) or "" for name in UPGRADE_FIELDS}
        form["add_proof_no"] = self._resolve_address_proof_no(fields, any_proof_type=True)
        files: Dict[str, FileTuple] = {}
        if address_proof is not None:
            files["address_proof"] = address_proof
        if id_proof is not None:
            files["id_proof_file"] = id_proof

        try:
            data = self.client.upgrade_kyc(credentials, form, files=files)
        except BadStatusError as e:
            return ActionResult.failure(FailureReason.BAD_STATUS, e.server_message or "KYC upgrade failed", data=e.payload)
        except MedpassError as e:
            logger.error("KYC upgrade error", error=str(e))
            return ActionResult.failure(FailureReason.EXCEPTION, NETWORK_ERROR_MESSAGE)

        logger.info("KYC upgrade submitted", documents=sorted(files))
        return ActionResult.success(data=data, message=data.get("message") or "KYC documents submitted")
