"""Merchant and service directory lookups"""

from typing import Any, Dict, List, Optional

from ..api.client import MediImpactClient
from ..models.merchant import Merchant, MerchantDetail, ServiceDetail
from ..utils.exceptions import BadStatusError, DirectoryError, MedpassError
from ..utils.logger import get_logger
from ..utils.numbers import to_number

logger = get_logger(__name__)

DEFAULT_LATITUDE = 11.587825
DEFAULT_LONGITUDE = 76.026344
DEFAULT_LOGO_BASE_URL = "https://mediimpact.in/assets/img/logo/"


def _first(raw: Dict[str, Any], *keys: str) -> str:
    for key in keys:
        value = raw.get(key)
        if value:
            return str(value)
    return ""


def normalize_merchant(raw: Dict[str, Any], logo_base_url: str = DEFAULT_LOGO_BASE_URL) -> Merchant:
    """Map a raw merchant record onto Merchant, applying the field fallbacks"""
    logo = raw.get("logo")
    return Merchant(
        id=str(raw.get("id", "")),
        name=_first(raw, "provider_display_name", "name"),
        phone=_first(raw, "phone_no", "notification_mobile", "merchant_mobile", "phone"),
        address=_first(raw, "address"),
        category=_first(raw, "med_type"),
        distance_km=to_number(raw.get("kms")),
        max_discount=to_number(raw.get("max_discount")) if raw.get("max_discount") else None,
        logo_url=f"{logo_base_url}{logo}" if logo else None,
        latitude=to_number(raw.get("latitude")) if raw.get("latitude") else None,
        longitude=to_number(raw.get("longitude")) if raw.get("longitude") else None,
        website=_first(raw, "merchant_website", "website"),
    )


class MerchantDirectory:
    """Public merchant search; no session needed"""

    def __init__(
        self,
        client: MediImpactClient,
        default_latitude: float = DEFAULT_LATITUDE,
        default_longitude: float = DEFAULT_LONGITUDE,
        logo_base_url: str = DEFAULT_LOGO_BASE_URL,
    ):
        self.client = client
        self.default_latitude = default_latitude
        self.default_longitude = default_longitude
        self.logo_base_url = logo_base_url

    def nearby(
        self,
        latitude: Optional[float] = None,
        longitude: Optional[float] = None,
        service_id: Optional[str] = None,
    ) -> List[Merchant]:
        """Merchants around a location, falling back to the default location"""
        if latitude is None or longitude is None:
            latitude, longitude = self.default_latitude, self.default_longitude
        try:
            data = self.client.get_merchants(latitude, longitude, service_id=service_id)
        except MedpassError as e:
            logger.error("Merchant search failed", service_id=service_id, error=str(e))
            raise DirectoryError("Unable to load services at the moment.") from e

        rows = data.get("merchant_data")
        if not isinstance(rows, list):
            return []
        merchants = []
        for row in rows:
            if not isinstance(row, dict):
                continue
            merchants.append(normalize_merchant(row, self.logo_base_url))
        return merchants

    def merchant_detail(self, merchant_id: str) -> MerchantDetail:
        try:
            data = self.client.get_single_merchant(merchant_id)
        except BadStatusError as e:
            raise DirectoryError(e.server_message or "Unable to load details") from e
        except MedpassError as e:
            logger.error("Merchant detail failed", merchant_id=merchant_id, error=str(e))
            raise DirectoryError("Unable to load details") from e

        raw = data.get("merchant_data")
        if not isinstance(raw, dict) or not raw:
            raise DirectoryError(data.get("message") or "Unable to load details")
        services = data.get("service_data")
        return MerchantDetail(
            merchant=normalize_merchant(raw, self.logo_base_url),
            raw=raw,
            services=services if isinstance(services, list) else [],
        )

    def service_detail(self, service_id: str) -> ServiceDetail:
        try:
            data = self.client.get_services(service_id)
        except MedpassError as e:
            logger.error("Service detail failed", service_id=service_id, error=str(e))
            raise DirectoryError("Unable to load service details") from e

        sub_services = data.get("merchant_data")
        working_hours = data.get("work_data")
        address = data.get("address_data")
        return ServiceDetail(
            service_id=str(service_id),
            sub_services=sub_services if isinstance(sub_services, list) else [],
            address=address if isinstance(address, dict) else None,
            working_hours=working_hours if isinstance(working_hours, list) else [],
        )

