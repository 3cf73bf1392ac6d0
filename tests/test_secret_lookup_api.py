"""
Lookup service HTTP surface: GET /secret/{name} against a scripted backend.
"""

import base64

import httpx
import pytest
import pytest_asyncio
from botocore.exceptions import ClientError, EndpointConnectionError

from api.dependencies import set_secret_service
from api.main import create_app
from services.secret_service import SecretService


def _client_error(code: str, message: str = "") -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": message}}, "GetSecretValue")


class ScriptedBackend:
    """GetSecretValue double: values are response dicts or exceptions to raise."""

    def __init__(self, responses):
        self.responses = responses
        self.calls = []

    def get_secret_value(self, secret_name):
        self.calls.append(secret_name)
        response = self.responses[secret_name]
        if isinstance(response, Exception):
            raise response
        return response


@pytest.fixture
def backend():
    return ScriptedBackend({
        "db/password": {"Name": "db/password", "SecretString": '{"user": "app", "pass": "p@ss w0rd"}'},
        "tls-key": {"Name": "tls-key", "SecretBinary": b"\x00\x01binary\xff"},
        "empty": {"Name": "empty"},
        "deleted": _client_error("ResourceNotFoundException", "Secrets Manager can't find the specified secret."),
        "forbidden": _client_error("AccessDeniedException", "not authorized"),
        "offline": EndpointConnectionError(endpoint_url="https://secretsmanager.local"),
        "with space": {"SecretString": "spaced"},
    })


@pytest_asyncio.fixture
async def client(backend):
    set_secret_service(SecretService(backend))
    transport = httpx.ASGITransport(app=create_app())
    async with httpx.AsyncClient(transport=transport, base_url="http://lookup.test") as client:
        yield client
    set_secret_service(None)


@pytest.mark.asyncio
async def test_string_secret_is_returned_unmodified(client, backend):
    response = await client.get("/secret/db/password")

    assert response.status_code == 200
    assert response.json() == {"secret": '{"user": "app", "pass": "p@ss w0rd"}'}
    assert backend.calls == ["db/password"]


@pytest.mark.asyncio
async def test_every_request_queries_backend(client, backend):
    for _ in range(3):
        response = await client.get("/secret/db/password")
        assert response.status_code == 200

    assert backend.calls == ["db/password"] * 3


@pytest.mark.asyncio
async def test_binary_secret_is_base64_encoded(client):
    response = await client.get("/secret/tls-key")

    assert response.status_code == 200
    assert base64.b64decode(response.json()["secret"]) == b"\x00\x01binary\xff"


@pytest.mark.asyncio
async def test_secret_without_payload_is_null(client):
    response = await client.get("/secret/empty")

    assert response.status_code == 200
    assert response.json() == {"secret": None}


@pytest.mark.asyncio
async def test_missing_secret_is_null(client, backend):
    response = await client.get("/secret/deleted")

    assert response.status_code == 200
    assert response.json() == {"secret": None}
    assert backend.calls == ["deleted"]


@pytest.mark.asyncio
async def test_rejected_lookup_is_request_level_error(client):
    response = await client.get("/secret/forbidden")

    assert response.status_code == 502
    body = response.json()
    assert body["error"]["code"] == "SECRET_BACKEND_ERROR"
    assert body["error"]["details"] == {"secret_name": "forbidden", "backend_code": "AccessDeniedException"}
    assert body["request_id"]

    # Subsequent requests are unaffected
    response = await client.get("/secret/db/password")
    assert response.status_code == 200


@pytest.mark.asyncio
async def test_backend_transport_failure_is_request_level_error(client):
    response = await client.get("/secret/offline")

    assert response.status_code == 502
    assert response.json()["error"]["details"]["backend_code"] is None


@pytest.mark.asyncio
async def test_identifier_is_url_decoded(client, backend):
    response = await client.get("/secret/with%20space")

    assert response.status_code == 200
    assert response.json() == {"secret": "spaced"}
    assert backend.calls == ["with space"]


@pytest.mark.asyncio
async def test_lookup_unavailable_before_service_is_set():
    set_secret_service(None)
    transport = httpx.ASGITransport(app=create_app())
    async with httpx.AsyncClient(transport=transport, base_url="http://lookup.test") as client:
        response = await client.get("/secret/anything")

    assert response.status_code == 503


@pytest.mark.asyncio
async def test_health(client):
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
