"""Tests for the MediImpact API client"""

import pytest
import requests
from tenacity import wait_none

from medpass.api.client import Credentials, MediImpactClient, _format_amount
from medpass.utils.exceptions import BadStatusError, TransportError

CREDS = Credentials(token="abc", user_id="1")


@pytest.fixture
def no_retry_wait(monkeypatch):
    for method in (
        MediImpactClient.get_merchants,
        MediImpactClient.get_single_merchant,
        MediImpactClient.get_services,
    ):
        monkeypatch.setattr(method.retry, "wait", wait_none())


def test_http_base_url_is_upgraded_to_https():
    client = MediImpactClient(base_url="http://api.mediimpact.in/index.php/")
    assert client.base_url == "https://api.mediimpact.in/index.php"


def test_unsupported_scheme_rejected():
    with pytest.raises(ValueError):
        MediImpactClient(base_url="ftp://api.mediimpact.in")


def test_auth_headers_and_form_body(http, client, make_response):
    http.request.return_value = make_response({"status": 200})

    client.set_pin(CREDS, "1234", enabled=True)

    kwargs = http.request.call_args.kwargs
    assert kwargs["url"] == "https://api.mediimpact.in/index.php/User/setPin"
    assert kwargs["headers"] == {"token": "abc", "User-ID": "1", "version": "10007"}
    assert kwargs["data"] == {"pin": "1234", "pin_status": "1"}
    assert kwargs["files"] is None
    assert kwargs["timeout"] == (10.0, 30.0)


def test_multipart_fields_are_sent_as_parts(http, client, make_response):
    http.request.return_value = make_response({"status": 200, "token": "t"})

    client.verify_otp("9876543210", "12345")

    kwargs = http.request.call_args.kwargs
    assert kwargs["data"] is None
    assert kwargs["files"] == {
        "mobile": (None, "9876543210"),
        "otp": (None, "12345"),
        "username": (None, ""),
    }
    assert kwargs["headers"] == {}


def test_upgrade_kyc_mixes_fields_and_files(http, client, make_response):
    http.request.return_value = make_response({"status": 200})
    proof = ("proof.jpg", b"\xff\xd8", "image/jpeg")

    client.upgrade_kyc(CREDS, {"add_proof_type": "AadhaarCard"}, files={"address_proof": proof})

    files = http.request.call_args.kwargs["files"]
    assert files["add_proof_type"] == (None, "AadhaarCard")
    assert files["address_proof"] == proof


def test_non_200_application_status_raises(http, client, make_response):
    http.request.return_value = make_response({"status": 201, "message": "Invalid PIN"})

    with pytest.raises(BadStatusError) as exc_info:
        client.check_pin(CREDS, "0000")

    assert exc_info.value.server_message == "Invalid PIN"
    assert exc_info.value.payload["status"] == 201


def test_http_error_raises_bad_status(http, client, make_response):
    http.request.return_value = make_response({"message": "Forbidden"}, status_code=403)

    with pytest.raises(BadStatusError) as exc_info:
        client.transaction_report(CREDS)

    assert exc_info.value.http_status == 403


def test_status_not_checked_for_otp_request(http, client, make_response):
    http.request.return_value = make_response({"status": 409, "message": "already registered"})
    assert client.request_otp("9876543210")["status"] == 409


def test_non_json_body_raises_transport_error(http, client, make_response):
    http.request.return_value = make_response(json_error=True)
    with pytest.raises(TransportError):
        client.user_info(CREDS)


def test_timeout_raises_transport_error(http, client):
    http.request.side_effect = requests.exceptions.ReadTimeout("slow")
    with pytest.raises(TransportError):
        client.user_info(CREDS)


def test_wallet_otp_validation_accepts_missing_status(http, client, make_response):
    http.request.return_value = make_response({"message": "ok"})
    assert client.validate_wallet_otp(CREDS, "12345") == {"message": "ok"}

    http.request.return_value = make_response({"status": 400, "message": "Wrong OTP"})
    with pytest.raises(BadStatusError, match="Wrong OTP"):
        client.validate_wallet_otp(CREDS, "12345")


def test_wallet_otp_validation_accepts_empty_body(http, client, make_response):
    http.request.return_value = make_response(json_error=True)
    assert client.validate_wallet_otp(CREDS, "12345") == {}

    http.request.return_value = make_response(status_code=500, json_error=True)
    with pytest.raises(TransportError):
        client.validate_wallet_otp(CREDS, "12345")


def test_directory_call_retries_transport_errors(http, client, make_response, no_retry_wait):
    http.request.side_effect = [
        requests.exceptions.ConnectionError("reset"),
        make_response({"merchant_data": []}),
    ]

    assert client.get_merchants(11.5, 76.0, service_id="4") == {"merchant_data": []}
    assert http.request.call_count == 2
    assert http.request.call_args.kwargs["params"] == {"id": "4", "lat": 11.5, "lng": 76.0}


def test_directory_call_gives_up_after_three_attempts(http, client, no_retry_wait):
    http.request.side_effect = requests.exceptions.ConnectionError("down")

    with pytest.raises(TransportError):
        client.get_services("9")
    assert http.request.call_count == 3


def test_directory_call_does_not_retry_bad_status(http, client, make_response, no_retry_wait):
    http.request.return_value = make_response({"status": 404, "message": "Not found"})

    with pytest.raises(BadStatusError):
        client.get_single_merchant("77")
    assert http.request.call_count == 1


def test_session_calls_are_single_attempt(http, client):
    http.request.side_effect = requests.exceptions.ConnectionError("down")
    with pytest.raises(TransportError):
        client.mobile_validate(CREDS, "9876543210")
    assert http.request.call_count == 1


def test_format_amount():
    assert _format_amount(100.0) == "100"
    assert _format_amount(99.5) == "99.5"
    assert _format_amount("250") == "250"
