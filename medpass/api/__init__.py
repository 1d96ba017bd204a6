"""MediImpact API access"""

from .client import Credentials, MediImpactClient

__all__ = [
    "Credentials",
    "MediImpactClient",
]
