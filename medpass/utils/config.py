"""
Configuration management with schema validation.
Single source of truth for Medpass client configuration.
"""

import os
from pathlib import Path
from typing import Any, Optional, Tuple

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError

from .exceptions import ConfigError
from .logger import get_logger

logger = get_logger(__name__)

# Load environment variables
load_dotenv()

# Data directory can be overridden in tests via MEDPASS_DATA_DIR
DATA_DIR = Path(os.getenv("MEDPASS_DATA_DIR", "data"))
SETTINGS_FILE = DATA_DIR / "settings.yaml"


class AppSettings(BaseModel):
    name: str = "Medpass"
    version: str = "1.0.0"
    environment: str = "production"


class ApiSettings(BaseModel):
    base_url: str = "https://api.mediimpact.in/index.php"
    app_version: str = "10007"  # sent as the "version" header
    connect_timeout: float = 10.0
    read_timeout: float = 30.0

    @property
    def timeout(self) -> Tuple[float, float]:
        return (self.connect_timeout, self.read_timeout)


class StorageSettings(BaseModel):
    session_file: str = "session.json"


class LoggingSettings(BaseModel):
    level: str = "INFO"
    format: str = "json"
    file_path: Optional[str] = "logs/medpass.log"
    max_bytes: int = 10485760
    backup_count: int = 5


class VerificationSettings(BaseModel):
    otp_length: int = 5
    resend_cooldown_seconds: int = 30
    code_ttl_seconds: int = 300


class DirectorySettings(BaseModel):
    default_latitude: float = 11.587825
    default_longitude: float = 76.026344
    logo_base_url: str = "https://mediimpact.in/assets/img/logo/"


class Settings(BaseModel):
    app: AppSettings = Field(default_factory=AppSettings)
    api: ApiSettings = Field(default_factory=ApiSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    verification: VerificationSettings = Field(default_factory=VerificationSettings)
    directory: DirectorySettings = Field(default_factory=DirectorySettings)


class ConfigManager:
    """Singleton configuration manager"""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super(ConfigManager, cls).__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        if self._initialized:
            return

        self.data_dir = DATA_DIR
        self.settings_path = SETTINGS_FILE
        self._settings: Optional[Settings] = None

        self._initialized = True

    def _substitute_env_vars(self, value: Any) -> Any:
        """Recursively substitute ${VAR} and ${VAR:default} references"""
        if isinstance(value, str):
            if value.startswith("${") and value.endswith("}"):
                var_expr = value[2:-1]
                if ":" in var_expr:
                    var_name, default = var_expr.split(":", 1)
                    return os.getenv(var_name.strip(), default.strip())
                else:
                    return os.getenv(var_expr, value)
        elif isinstance(value, dict):
            return {k: self._substitute_env_vars(v) for k, v in value.items()}
        elif isinstance(value, list):
            return [self._substitute_env_vars(item) for item in value]
        return value

    def load_settings(self, path: Optional[Path] = None) -> Settings:
        """
        Load and validate settings.yaml.

        A missing default settings file yields built-in defaults. An
        explicitly requested file that does not exist is an error.
        """
        settings_path = Path(path) if path is not None else self.settings_path
        if not settings_path.exists():
            if path is not None:
                raise ConfigError(f"Settings file not found: {settings_path}")
            logger.info("No settings file, using defaults", path=str(settings_path))
            self._settings = Settings()
            return self._settings

        try:
            with open(settings_path, "r", encoding="utf-8") as f:
                raw_data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"Failed to read settings from {settings_path}: {e}")

        processed_data = self._substitute_env_vars(raw_data)
        try:
            self._settings = Settings(**processed_data)
        except ValidationError as e:
            raise ConfigError(f"Invalid settings in {settings_path}: {e}")
        return self._settings

    @property
    def settings(self) -> Settings:
        if self._settings is None:
            return self.load_settings()
        return self._settings


config_manager = ConfigManager()
