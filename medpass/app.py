"""Application wiring: builds every service from configuration"""

from pathlib import Path
from typing import Optional

import requests

from .api.client import MediImpactClient
from .services.auth_service import AuthService
from .services.kyc_service import KycService
from .services.merchant_directory import MerchantDirectory
from .services.payment_service import PaymentService
from .services.pin_service import PinPreferenceStore, PinService
from .services.session_refresh import SessionRefreshClient
from .services.session_store import SessionStore
from .services.wallet_service import WalletService
from .services.wallet_status import WalletStatusClient
from .storage.kv_store import JsonFileStore, KeyValueStore
from .utils.config import Settings, config_manager
from .utils.logger import get_logger, setup_logger

logger = get_logger(__name__)


class MedpassApp:
    """Holds one session store and the services that share it"""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        kv: Optional[KeyValueStore] = None,
        http_session: Optional[requests.Session] = None,
        configure_logging: bool = False,
    ):
        self.settings = settings or config_manager.settings

        if configure_logging:
            log = self.settings.logging
            setup_logger(
                log_level=log.level,
                log_format=log.format,
                file_path=log.file_path,
                max_bytes=log.max_bytes,
                backup_count=log.backup_count,
            )

        if kv is None:
            kv = JsonFileStore(Path(config_manager.data_dir) / self.settings.storage.session_file)
        self.kv = kv

        self.client = MediImpactClient.from_settings(self.settings.api, session=http_session)
        self.session_store = SessionStore(kv)
        self.pin_preferences = PinPreferenceStore(kv)
        self.refresher = SessionRefreshClient(self.session_store, self.client)
        self.wallet_status = WalletStatusClient(self.session_store, self.client)

        verification = self.settings.verification
        self.auth = AuthService(
            self.session_store,
            self.client,
            pin_preferences=self.pin_preferences,
            otp_length=verification.otp_length,
            resend_cooldown_seconds=verification.resend_cooldown_seconds,
            code_ttl_seconds=verification.code_ttl_seconds,
        )
        self.pin = PinService(self.session_store, self.client, preferences=self.pin_preferences)
        self.wallet = WalletService(
            self.session_store,
            self.client,
            refresher=self.refresher,
            status_client=self.wallet_status,
            otp_length=verification.otp_length,
            resend_cooldown_seconds=verification.resend_cooldown_seconds,
            code_ttl_seconds=verification.code_ttl_seconds,
        )
        self.payments = PaymentService(self.session_store, self.client, pin_service=self.pin)
        self.kyc = KycService(self.session_store, self.client, refresher=self.refresher)

        directory = self.settings.directory
        self.directory = MerchantDirectory(
            self.client,
            default_latitude=directory.default_latitude,
            default_longitude=directory.default_longitude,
            logo_base_url=directory.logo_base_url,
        )

        logger.info(
            "Medpass client initialized",
            app_name=self.settings.app.name,
            version=self.settings.app.version,
            environment=self.settings.app.environment,
            api_base_url=self.client.base_url,
        )
