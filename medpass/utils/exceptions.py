"""Custom exceptions for the Medpass client"""

from typing import Any, Dict, Optional


class MedpassError(Exception):
    """Base exception for Medpass"""
    pass


class MediImpactAPIError(MedpassError):
    """Error talking to the MediImpact REST API"""
    pass


class BadStatusError(MediImpactAPIError):
    """Server reachable but answered with a non-success HTTP or application status"""

    def __init__(
        self,
        message: str,
        payload: Optional[Dict[str, Any]] = None,
        http_status: Optional[int] = None,
    ):
        self.payload = payload or {}
        self.http_status = http_status
        super().__init__(message)

    @property
    def server_message(self) -> Optional[str]:
        """Message the server attached to the payload, if any"""
        msg = self.payload.get("message") if isinstance(self.payload, dict) else None
        return str(msg) if msg else None


class TransportError(MediImpactAPIError):
    """Network failure or unparseable response body"""
    pass


class StorageError(MedpassError):
    """Local key-value storage failure"""
    pass


class DirectoryError(MedpassError):
    """Merchant directory lookup failed. Message is safe to show to the user."""
    pass


class ConfigError(MedpassError):
    """Configuration error"""
    pass
