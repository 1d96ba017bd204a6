"""Tests for KYC registration and upgrade"""

from medpass.models.results import FailureReason
from medpass.services.kyc_service import KycService

FULL_PROFILE = {
    "firstname": "Asha",
    "lastname": "K",
    "dob": "1990-04-01",
    "email": "asha@example.com",
    "mobile": "9876543210",
    "state": "Kerala",
    "city": "Kalpetta",
    "address": "Main Road",
    "pincode": "673121",
    "id_proof_no": "ABCDE1234F",
    "gender": "F",
    "add_proof_type": "VoterID",
    "add_proof_no": "KL/01/123",
}


def test_missing_fields_are_listed(http, client, logged_in_store):
    fields = dict(FULL_PROFILE, city="", add_proof_no="")

    result = KycService(logged_in_store, client).register(fields)

    assert result.reason == FailureReason.INVALID_INPUT
    assert result.data == {"missing": ["city", "add_proof_no"]}
    http.request.assert_not_called()


def test_aadhaar_number_falls_back_to_cached_profile(store, client, login_payload):
    login_payload["user_data"]["add_proof_no"] = "XXXX-XXXX-4321"
    store.store(login_payload, "9876543210")
    service = KycService(store, client)
    fields = dict(FULL_PROFILE, add_proof_type="AadhaarCard", add_proof_no="")

    assert service.missing_fields(fields) == []
    assert service._resolve_address_proof_no(fields) == "XXXX-XXXX-4321"


def test_aadhaar_without_cached_number_is_missing(client, logged_in_store):
    fields = dict(FULL_PROFILE, add_proof_type="Aadhar", add_proof_no="")
    assert KycService(logged_in_store, client).missing_fields(fields) == ["add_proof_no"]


def test_register_posts_kyc_flag_and_refreshes(http, client, logged_in_store, make_response):
    http.request.side_effect = [
        make_response({"status": 200, "message": "Registered"}),
        make_response({"status": 200, "userId": "1", "name": "Asha K", "wallets_status": "20"}),
    ]

    result = KycService(logged_in_store, client).register(FULL_PROFILE)

    assert result.ok is True
    assert result.message == "Registered"
    first = http.request.call_args_list[0].kwargs
    assert first["url"].endswith("/Wallet/registerUser")
    assert first["files"]["KYCFLAG"] == (None, "1")
    assert first["files"]["add_proof_no"] == (None, "KL/01/123")
    assert logged_in_store.get().wallet_status == "20"


def test_register_requires_login(http, client, store):
    result = KycService(store, client).register(FULL_PROFILE)
    assert result.reason == FailureReason.MISSING_CREDENTIALS
    http.request.assert_not_called()


def test_upgrade_sends_documents(http, client, logged_in_store, make_response):
    http.request.return_value = make_response({"status": 200})
    id_proof = ("pan.jpg", b"jpegbytes", "image/jpeg")

    result = KycService(logged_in_store, client).upgrade(
        {"id_proof_type": "PAN", "id_proof_no": "ABCDE1234F", "add_proof_no": "KL/01/123"},
        id_proof=id_proof,
    )

    assert result.ok is True
    files = http.request.call_args.kwargs["files"]
    assert files["id_proof_file"] == id_proof
    assert "address_proof" not in files
    assert files["middlename"] == (None, "")
    assert files["id_proof_type"] == (None, "PAN")


def test_upgrade_failure_surfaces_message(http, client, logged_in_store, make_response):
    http.request.return_value = make_response({"status": 422, "message": "Image unreadable"})

    result = KycService(logged_in_store, client).upgrade({}, address_proof=("bill.pdf", b"%PDF", "application/pdf"))

    assert result.reason == FailureReason.BAD_STATUS
    assert result.message == "Image unreadable"


def test_upgrade_requires_a_document(http, client, logged_in_store):
    result = KycService(logged_in_store, client).upgrade({"email": "a@b.c"})

    assert result.reason == FailureReason.INVALID_INPUT
    assert result.message == "Please select at least one document to upload."
    http.request.assert_not_called()


def test_upgrade_keeps_address_number_on_file_for_any_proof_type(
    http, client, store, login_payload, make_response
):
    login_payload["user_data"]["add_proof_no"] = "KL/01/123"
    store.store(login_payload, "9876543210")
    http.request.return_value = make_response({"status": 200})

    result = KycService(store, client).upgrade(
        {"add_proof_type": "VoterID", "add_proof_no": ""},
        address_proof=("voter.jpg", b"jpegbytes", "image/jpeg"),
    )

    assert result.ok is True
    assert http.request.call_args.kwargs["files"]["add_proof_no"] == (None, "KL/01/123")
