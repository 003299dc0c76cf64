"""Shared test fixtures for the LicenseChain SDK."""

import json
from unittest.mock import MagicMock

import pytest
from httpx import ASGITransport, AsyncClient


API_KEY = "test-api-key-for-unit-tests"
WEBHOOK_SECRET = "topsecret"
APP_NAME = "TestGame"
APP_VERSION = "1.0.0"
HARDWARE_ID = "hw-0123456789abcdef"


@pytest.fixture
def api_key():
    return API_KEY


@pytest.fixture
def webhook_secret():
    return WEBHOOK_SECRET


def mock_response(data, status_code: int = 200) -> MagicMock:
    resp = MagicMock()
    resp.status_code = status_code
    resp.content = json.dumps(data).encode() if data is not None else b""
    resp.json.return_value = data
    return resp


@pytest.fixture
def sdk_client():
    """Client with a mocked HTTP layer and no retry backoff."""
    from licensechain.client import LicenseChainClient

    client = LicenseChainClient(
        api_key=API_KEY,
        app_name=APP_NAME,
        version=APP_VERSION,
        hardware_id=HARDWARE_ID,
        retry_backoff_base=0,
        webhook_secret=WEBHOOK_SECRET,
    )
    client._http = MagicMock()
    yield client
    client.close()


@pytest.fixture
def connected_client(sdk_client):
    sdk_client.is_connected = True
    return sdk_client


@pytest.fixture
def session_client(connected_client):
    connected_client.session_id = "sess-1"
    return connected_client


@pytest.fixture
def verifier():
    from licensechain.webhooks.verifier import WebhookVerifier

    return WebhookVerifier(WEBHOOK_SECRET)


@pytest.fixture
def app(verifier):
    from licensechain.webhooks.router import create_webhook_app

    return create_webhook_app(verifier)


@pytest.fixture
async def client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
