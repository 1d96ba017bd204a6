"""Shared fixtures: in-memory session storage and a mocked HTTP session"""

import copy
from unittest.mock import MagicMock, Mock

import pytest
import requests

from medpass.api.client import MediImpactClient
from medpass.services.session_store import SessionStore
from medpass.storage.kv_store import InMemoryStore

MOBILE = "9876543210"

LOGIN_PAYLOAD = {
    "status": 200,
    "token": "abc",
    "userId": 1,
    "name": "Asha",
    "user_data": {
        "firstname": "Asha",
        "city": "Kalpetta",
        "pin_status": "0",
        "monthly_limit": 10000,
    },
    "wallets_status": "0",
    "balance": 500.5,
    "ba_code": None,
}


def _response(body=None, status_code=200, json_error=False):
    response = Mock()
    response.status_code = status_code
    response.ok = status_code < 400
    if json_error:
        response.json.side_effect = ValueError("Expecting value")
    else:
        response.json.return_value = body if body is not None else {}
    return response


@pytest.fixture
def make_response():
    return _response


@pytest.fixture
def http():
    return MagicMock(spec=requests.Session)


@pytest.fixture
def client(http):
    return MediImpactClient(session=http)


@pytest.fixture
def kv():
    return InMemoryStore()


@pytest.fixture
def store(kv):
    return SessionStore(kv)


@pytest.fixture
def logged_in_store(store):
    assert store.store(LOGIN_PAYLOAD, MOBILE)
    return store


@pytest.fixture
def login_payload():
    return copy.deepcopy(LOGIN_PAYLOAD)
