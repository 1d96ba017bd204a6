"""Tests for application wiring"""

from medpass.app import MedpassApp
from medpass.storage.kv_store import JsonFileStore
from medpass.utils.config import Settings, config_manager


def test_services_share_one_session(http, kv, make_response, login_payload):
    settings = Settings(api={"base_url": "http://api.example.test/index.php"})
    app = MedpassApp(settings=settings, kv=kv, http_session=http)

    assert app.client.base_url == "https://api.example.test/index.php"

    http.request.return_value = make_response(login_payload)
    assert app.auth.verify_login_otp("9876543210", "12345").ok

    assert app.wallet.store is app.payments.store is app.session_store
    assert app.pin.preferences is app.auth.pin_preferences
    assert app.session_store.is_logged_in()


def test_verification_settings_reach_flows(http, kv):
    settings = Settings(verification={"otp_length": 6, "resend_cooldown_seconds": 10})
    app = MedpassApp(settings=settings, kv=kv, http_session=http)

    flow = app.wallet.wallet_otp_flow()

    assert flow.code_length == 6
    assert flow.resend_cooldown_seconds == 10


def test_default_store_lives_in_data_dir(http, tmp_path, monkeypatch):
    monkeypatch.setattr(config_manager, "data_dir", tmp_path)

    app = MedpassApp(settings=Settings(), http_session=http)

    assert isinstance(app.kv, JsonFileStore)
    assert app.kv.path == tmp_path / "session.json"
