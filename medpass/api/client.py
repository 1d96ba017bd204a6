"""MediImpact REST API client"""

from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple
from urllib.parse import urlparse, urlunparse

import requests
from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
)

from ..utils.logger import get_logger
from ..utils.exceptions import BadStatusError, TransportError

logger = get_logger(__name__)

DEFAULT_BASE_URL = "https://api.mediimpact.in/index.php"
DEFAULT_APP_VERSION = "10007"
SUCCESS_STATUS = 200

# (filename, content, mimetype)
FileTuple = Tuple[str, bytes, str]


@dataclass(frozen=True)
class Credentials:
    """Token and user id pair sent as headers on authenticated calls"""
    token: str
    user_id: str

    def headers(self, app_version: str = DEFAULT_APP_VERSION) -> Dict[str, str]:
        return {
            "token": self.token,
            "User-ID": self.user_id,
            "version": app_version,
        }


def _enforce_https(base_url: str) -> str:
    """Upgrade an http:// base URL to https://"""
    parsed = urlparse(base_url)
    if parsed.scheme == "https":
        return base_url.rstrip("/")
    if parsed.scheme == "http":
        logger.warning("Upgrading API base URL to https", base_url=base_url)
        return urlunparse(parsed._replace(scheme="https")).rstrip("/")
    raise ValueError(f"Unsupported API base URL: {base_url}")


class MediImpactClient:
    """
    Client for the MediImpact backend.

    One base URL, always https. Authenticated calls carry token, User-ID and
    version headers. Every response is JSON with an application-level
    "status" field; 200 means success.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        app_version: str = DEFAULT_APP_VERSION,
        timeout: Tuple[float, float] = (10.0, 30.0),
        session: Optional[requests.Session] = None,
    ):
        self.base_url = _enforce_https(base_url)
        self.app_version = app_version
        self.timeout = timeout
        self.session = session or requests.Session()

    @classmethod
    def from_settings(cls, api_settings: Any, session: Optional[requests.Session] = None) -> "MediImpactClient":
        return cls(
            base_url=api_settings.base_url,
            app_version=api_settings.app_version,
            timeout=api_settings.timeout,
            session=session,
        )

    def _make_request(
        self,
        method: str,
        endpoint: str,
        credentials: Optional[Credentials] = None,
        params: Optional[Dict[str, Any]] = None,
        data: Optional[Dict[str, Any]] = None,
        files: Optional[Dict[str, FileTuple]] = None,
        multipart: bool = False,
        check_status: bool = True,
        allow_empty_body: bool = False,
    ) -> Dict[str, Any]:
        """
        Make an HTTP request to the MediImpact API

        Args:
            method: HTTP method (GET, POST)
            endpoint: API path below the base URL
            credentials: Adds auth headers when given
            params: Query parameters
            data: Form fields
            files: File parts, forces a multipart body
            multipart: Send form fields as multipart/form-data instead of urlencoded
            check_status: Require body status == 200
            allow_empty_body: Treat a non-JSON body on an HTTP 2xx response as {}

        Returns:
            Parsed JSON body

        Raises:
            BadStatusError: HTTP error or non-200 application status
            TransportError: Network failure or non-JSON body
        """
        url = f"{self.base_url}/{endpoint.lstrip('/')}"
        headers: Dict[str, str] = {}
        if credentials is not None:
            headers.update(credentials.headers(self.app_version))

        body: Optional[Dict[str, Any]] = None
        parts: Optional[Dict[str, Any]] = None
        if multipart or files:
            # (None, value) tuples make requests emit plain form-data fields
            parts = {key: (None, "" if value is None else str(value)) for key, value in (data or {}).items()}
            parts.update(files or {})
        elif data is not None:
            body = {key: "" if value is None else str(value) for key, value in data.items()}

        logger.info(
            "Making MediImpact API request",
            method=method,
            endpoint=endpoint,
            authenticated=credentials is not None,
            multipart=parts is not None,
        )
        try:
            response = self.session.request(
                method=method,
                url=url,
                params=params,
                data=body,
                files=parts,
                headers=headers,
                timeout=self.timeout,
            )
        except requests.exceptions.Timeout as e:
            logger.error("Request timeout", endpoint=endpoint, timeout=self.timeout, error=str(e))
            raise TransportError(f"Request timeout after {self.timeout} seconds: {e}")
        except requests.exceptions.RequestException as e:
            logger.error("Request failed", endpoint=endpoint, error=str(e))
            raise TransportError(f"Request failed: {e}")

        logger.info(
            "Received response from MediImpact API",
            method=method,
            endpoint=endpoint,
            status_code=response.status_code,
        )

        try:
            result = response.json()
        except ValueError as e:
            if allow_empty_body and response.ok:
                logger.info("Response is not JSON, treating as empty", endpoint=endpoint)
                return {}
            logger.error("Response is not JSON", endpoint=endpoint, status_code=response.status_code)
            raise TransportError(f"Invalid JSON from {endpoint}: {e}")

        if not isinstance(result, dict):
            raise TransportError(f"Unexpected response shape from {endpoint}")

        if not response.ok:
            raise BadStatusError(
                result.get("message") or f"HTTP {response.status_code}",
                payload=result,
                http_status=response.status_code,
            )

        if check_status and result.get("status") != SUCCESS_STATUS:
            logger.warning(
                "Non-success application status",
                endpoint=endpoint,
                status=result.get("status"),
            )
            raise BadStatusError(
                result.get("message") or f"Unexpected status {result.get('status')}",
                payload=result,
                http_status=response.status_code,
            )

        return result

    # Auth

    def request_otp(self, mobile: str) -> Dict[str, Any]:
        """Ask the server to send a login OTP. The status field is not checked."""
        return self._make_request(
            "POST",
            "User/UserReg",
            data={"mobile": mobile, "otpstatus": "1"},
            multipart=True,
            check_status=False,
        )

    def verify_otp(self, mobile: str, otp: str) -> Dict[str, Any]:
        return self._make_request(
            "POST",
            "User/verify_otp",
            data={"mobile": mobile, "otp": otp, "username": ""},
            multipart=True,
        )

    # Profile and wallet

    def user_info(self, credentials: Credentials) -> Dict[str, Any]:
        """Full session snapshot: profile, wallet status, balance"""
        return self._make_request("GET", "User/User_Info_new", credentials=credentials)

    def user_info_summary(self, credentials: Credentials) -> Dict[str, Any]:
        """Legacy user info call; carries cashback"""
        return self._make_request(
            "POST",
            "User/User_info",
            credentials=credentials,
            data={},
            check_status=False,
        )

    def mobile_validate(self, credentials: Credentials, mobile: str) -> Dict[str, Any]:
        return self._make_request(
            "POST",
            "Wallet/MobileValidate",
            credentials=credentials,
            data={"mobile": mobile},
        )

    def resend_wallet_otp(self, credentials: Credentials) -> Dict[str, Any]:
        return self._make_request(
            "POST",
            "Wallet/resendUserRegOTP",
            credentials=credentials,
            data={"otp": "", "transaction_id": ""},
            check_status=False,
        )

    def validate_wallet_otp(self, credentials: Credentials, otp: str) -> Dict[str, Any]:
        result = self._make_request(
            "POST",
            "Wallet/otp_validation",
            credentials=credentials,
            data={"otp": otp},
            check_status=False,
            allow_empty_body=True,
        )
        # Only a status that is present and not 200 counts as a rejection here
        if result.get("status") and result.get("status") != SUCCESS_STATUS:
            raise BadStatusError(
                result.get("message") or "OTP verification failed",
                payload=result,
            )
        return result

    def transaction_report(self, credentials: Credentials) -> Dict[str, Any]:
        return self._make_request("GET", "Wallet/transactionReport", credentials=credentials)

    def create_order(self, credentials: Credentials, amount: float) -> Dict[str, Any]:
        """Create an add-money order; the payment sheet is completed elsewhere"""
        return self._make_request(
            "POST",
            "Home/pay",
            credentials=credentials,
            data={"amount": _format_amount(amount)},
        )

    def make_transaction(
        self,
        credentials: Credentials,
        service_id: str,
        amount: float,
        prn: str = "",
        desc: str = "",
    ) -> Dict[str, Any]:
        return self._make_request(
            "POST",
            "Wallet/makeTransaction",
            credentials=credentials,
            data={
                "service_id": service_id,
                "amount": _format_amount(amount),
                "prn": prn,
                "ba_code": "",
                "desc": desc,
                "partycode": "",
            },
        )

    # KYC

    def register_user(self, credentials: Credentials, fields: Dict[str, Any]) -> Dict[str, Any]:
        return self._make_request(
            "POST",
            "Wallet/registerUser",
            credentials=credentials,
            data=fields,
            multipart=True,
        )

    def upgrade_kyc(
        self,
        credentials: Credentials,
        fields: Dict[str, Any],
        files: Optional[Dict[str, FileTuple]] = None,
    ) -> Dict[str, Any]:
        return self._make_request(
            "POST",
            "Wallet/UpgradeKYC",
            credentials=credentials,
            data=fields,
            files=files,
            multipart=True,
        )

    # PIN

    def set_pin(self, credentials: Credentials, pin: str, enabled: bool) -> Dict[str, Any]:
        return self._make_request(
            "POST",
            "User/setPin",
            credentials=credentials,
            data={"pin": pin, "pin_status": "1" if enabled else "0"},
        )

    def check_pin(self, credentials: Credentials, pin: str) -> Dict[str, Any]:
        return self._make_request(
            "POST",
            "User/checkPin",
            credentials=credentials,
            data={"pin": pin},
        )

    # Merchant directory (public, read-only)

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        retry=retry_if_exception_type(TransportError),
        reraise=True,
    )
    def get_merchants(
        self,
        latitude: float,
        longitude: float,
        service_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        params: Dict[str, Any] = {"lat": latitude, "lng": longitude}
        if service_id is not None:
            params = {"id": service_id, **params}
        return self._make_request("GET", "user/get_merchants", params=params, check_status=False)

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        retry=retry_if_exception_type(TransportError),
        reraise=True,
    )
    def get_single_merchant(self, merchant_id: str) -> Dict[str, Any]:
        return self._make_request("GET", f"user/get_single_merchant/{merchant_id}")

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        retry=retry_if_exception_type(TransportError),
        reraise=True,
    )
    def get_services(self, service_id: str) -> Dict[str, Any]:
        return self._make_request("GET", f"user/get_services/{service_id}", check_status=False)


def _format_amount(amount: float) -> str:
    """Render 100.0 as "100" and 99.5 as "99.5", matching what the server expects"""
    value = float(amount)
    if value.is_integer():
        return str(int(value))
    return str(value)
