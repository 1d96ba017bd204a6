"""Tests for merchant directory lookups"""

import pytest

from medpass.services.merchant_directory import MerchantDirectory, normalize_merchant
from medpass.utils.exceptions import DirectoryError


def test_normalize_merchant_fallbacks():
    merchant = normalize_merchant({
        "id": 5,
        "name": "City Clinic",
        "notification_mobile": "9000000001",
        "kms": "2.345",
        "max_discount": "15",
        "med_type": 3,
        "logo": "city.png",
        "latitude": "11.6",
        "longitude": "76.1",
        "website": "https://cityclinic.example",
    })

    assert merchant.id == "5"
    assert merchant.name == "City Clinic"
    assert merchant.phone == "9000000001"
    assert merchant.distance_km == pytest.approx(2.345)
    assert merchant.max_discount == 15.0
    assert merchant.category == "3"
    assert merchant.logo_url == "https://mediimpact.in/assets/img/logo/city.png"
    assert merchant.latitude == 11.6
    assert merchant.website == "https://cityclinic.example"


def test_normalize_prefers_display_name_and_handles_blanks():
    merchant = normalize_merchant({"id": "9", "provider_display_name": "Dr. Rao", "name": "rao", "kms": None})

    assert merchant.name == "Dr. Rao"
    assert merchant.distance_km is None
    assert merchant.logo_url is None
    assert merchant.phone == ""


def test_nearby_uses_default_location(http, client, make_response):
    http.request.return_value = make_response({"merchant_data": [{"id": 1, "name": "A"}, "junk"]})

    merchants = MerchantDirectory(client).nearby()

    assert [m.name for m in merchants] == ["A"]
    kwargs = http.request.call_args.kwargs
    assert kwargs["params"] == {"lat": 11.587825, "lng": 76.026344}
    assert "token" not in kwargs["headers"]


def test_nearby_by_service(http, client, make_response):
    http.request.return_value = make_response({"merchant_data": None})

    assert MerchantDirectory(client).nearby(12.0, 77.0, service_id="3") == []
    assert http.request.call_args.kwargs["params"] == {"id": "3", "lat": 12.0, "lng": 77.0}


def test_merchant_detail(http, client, make_response):
    http.request.return_value = make_response({
        "status": 200,
        "merchant_data": {"id": 7, "provider_display_name": "Lab 7"},
        "service_data": [{"id": 70, "name": "Blood test"}],
    })

    detail = MerchantDirectory(client).merchant_detail("7")

    assert detail.merchant.name == "Lab 7"
    assert detail.services == [{"id": 70, "name": "Blood test"}]
    assert http.request.call_args.kwargs["url"].endswith("/user/get_single_merchant/7")


def test_merchant_detail_without_data(http, client, make_response):
    http.request.return_value = make_response({"status": 200, "merchant_data": None, "message": "Merchant inactive"})

    with pytest.raises(DirectoryError, match="Merchant inactive"):
        MerchantDirectory(client).merchant_detail("7")


def test_merchant_detail_bad_status(http, client, make_response):
    http.request.return_value = make_response({"status": 404})

    with pytest.raises(DirectoryError, match="Unable to load details"):
        MerchantDirectory(client).merchant_detail("8")


def test_service_detail_defaults(http, client, make_response):
    http.request.return_value = make_response({
        "merchant_data": [{"id": 1}],
        "address_data": {"city": "Kalpetta"},
    })

    detail = MerchantDirectory(client).service_detail("4")

    assert detail.sub_services == [{"id": 1}]
    assert detail.address == {"city": "Kalpetta"}
    assert detail.working_hours == []
