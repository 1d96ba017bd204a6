"""Merchant directory models"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class Merchant(BaseModel):
    """Normalized merchant entry as shown in directory listings"""
    id: str
    name: str = ""
    phone: str = ""
    address: str = ""
    category: str = ""
    distance_km: Optional[float] = None
    max_discount: Optional[float] = None
    logo_url: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    website: str = ""


class MerchantDetail(BaseModel):
    merchant: Merchant
    raw: Dict[str, Any] = Field(default_factory=dict)
    services: List[Dict[str, Any]] = Field(default_factory=list)


class ServiceDetail(BaseModel):
    service_id: str
    sub_services: List[Dict[str, Any]] = Field(default_factory=list)
    address: Optional[Dict[str, Any]] = None
    working_hours: List[Dict[str, Any]] = Field(default_factory=list)
