"""Unit tests for ZohoCrmClient."""

import json

import httpx
import pytest

from lead_dispatch.adapters.outbound.crm.zoho_crm_client import ZohoCrmClient
from lead_dispatch.application.ports.crm_client import CrmClient
from lead_dispatch.application.ports.token_provider import TokenProvider
from lead_dispatch.domain.errors import AuthError, UpstreamError

BASE_URL = "https://crm.test/crm/v2"


class StubTokenProvider(TokenProvider):
    """Token provider handing out numbered tokens and counting refreshes."""

    def __init__(self, fail_refresh: bool = False) -> None:
        self.refreshes = 0
        self.fail_refresh = fail_refresh

    async def get(self, force: bool = False) -> str:
        if force:
            if self.fail_refresh:
                raise AuthError("Failed to refresh Zoho access token", status=400)
            self.refreshes += 1
        return f"token-{self.refreshes}"


class ScriptedCrm:
    """Answers requests from a list of prepared responses."""

    def __init__(self, *responses: httpx.Response) -> None:
        self.responses = list(responses)
        self.requests: list[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.responses.pop(0)


def make_client(crm: ScriptedCrm, token_provider=None) -> ZohoCrmClient:
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(crm.handler))
    return ZohoCrmClient(http_client, BASE_URL, token_provider or StubTokenProvider())


INVALID_TOKEN = {"code": "INVALID_TOKEN", "message": "invalid oauth token", "status": "error"}


def test_client_implements_crm_client_port():
    """Test that ZohoCrmClient implements CrmClient port."""
    assert isinstance(make_client(ScriptedCrm()), CrmClient)


@pytest.mark.asyncio
async def test_request_signs_and_returns_json():
    """Test request attaches the Zoho auth header and returns the parsed body."""
    crm = ScriptedCrm(httpx.Response(200, json={"data": [{"id": "1"}]}))
    client = make_client(crm)

    body = await client.request("Leads/search", params={"phone": "+919876543210"})

    assert body == {"data": [{"id": "1"}]}
    request = crm.requests[0]
    assert request.headers["Authorization"] == "Zoho-oauthtoken token-0"
    assert request.url.path == "/crm/v2/Leads/search"
    assert request.url.params["phone"] == "+919876543210"


@pytest.mark.asyncio
async def test_request_sends_json_body():
    """Test POST bodies are sent as JSON."""
    crm = ScriptedCrm(httpx.Response(201, json={"data": [{"code": "SUCCESS"}]}))
    client = make_client(crm)

    await client.request("Leads", method="POST", body={"data": [{"Last_Name": "X"}]})

    assert crm.requests[0].method == "POST"
    assert json.loads(crm.requests[0].content) == {"data": [{"Last_Name": "X"}]}


@pytest.mark.asyncio
async def test_no_content_returns_none():
    """Test a 204 answer yields None."""
    client = make_client(ScriptedCrm(httpx.Response(204)))

    assert await client.request("Leads/search", params={"phone": "1"}) is None


@pytest.mark.asyncio
async def test_401_refreshes_once_and_retries():
    """Test an expired token causes exactly one refresh and one retry."""
    tokens = StubTokenProvider()
    crm = ScriptedCrm(
        httpx.Response(401, json=INVALID_TOKEN),
        httpx.Response(200, json={"data": [{"id": "7"}]}),
    )
    client = make_client(crm, tokens)

    body = await client.request("Leads/search", params={"phone": "1"})

    assert body == {"data": [{"id": "7"}]}
    assert tokens.refreshes == 1
    assert len(crm.requests) == 2
    assert crm.requests[1].headers["Authorization"] == "Zoho-oauthtoken token-1"


@pytest.mark.asyncio
async def test_invalid_token_body_triggers_retry():
    """Test an invalid-token error body is treated like a 401."""
    tokens = StubTokenProvider()
    crm = ScriptedCrm(
        httpx.Response(400, json={"code": "AUTHENTICATION_FAILURE", "message": "auth failed"}),
        httpx.Response(200, json={"data": []}),
    )
    client = make_client(crm, tokens)

    await client.request("Leads/search", params={"phone": "1"})

    assert tokens.refreshes == 1


@pytest.mark.asyncio
async def test_second_credential_failure_is_surfaced_without_second_refresh():
    """Test a retry that also fails is raised as-is."""
    tokens = StubTokenProvider()
    crm = ScriptedCrm(
        httpx.Response(401, json=INVALID_TOKEN),
        httpx.Response(401, json=INVALID_TOKEN),
    )
    client = make_client(crm, tokens)

    with pytest.raises(UpstreamError) as exc_info:
        await client.request("Leads/search", params={"phone": "1"})

    assert exc_info.value.status == 401
    assert exc_info.value.body == INVALID_TOKEN
    assert tokens.refreshes == 1
    assert len(crm.requests) == 2


@pytest.mark.asyncio
async def test_refresh_failure_propagates_auth_error():
    """Test a failed forced refresh aborts without retrying the request."""
    crm = ScriptedCrm(httpx.Response(401, json=INVALID_TOKEN))
    client = make_client(crm, StubTokenProvider(fail_refresh=True))

    with pytest.raises(AuthError):
        await client.request("Leads", method="POST", body={"data": [{}]})

    assert len(crm.requests) == 1


@pytest.mark.asyncio
async def test_non_2xx_raises_upstream_error_with_verbatim_body():
    """Test other failures keep status and body."""
    error_body = {"data": [{"code": "INVALID_DATA", "details": {"api_name": "Who_Id"}}]}
    tokens = StubTokenProvider()
    client = make_client(ScriptedCrm(httpx.Response(400, json=error_body)), tokens)

    with pytest.raises(UpstreamError) as exc_info:
        await client.request("Tasks", method="POST", body={"data": [{}]})

    assert exc_info.value.status == 400
    assert exc_info.value.status_code == 400
    assert exc_info.value.body == error_body
    assert tokens.refreshes == 0


@pytest.mark.asyncio
async def test_non_json_error_body_kept_as_text():
    """Test a non-JSON error body is preserved as text."""
    client = make_client(ScriptedCrm(httpx.Response(503, text="Service Unavailable")))

    with pytest.raises(UpstreamError) as exc_info:
        await client.request("Leads")

    assert exc_info.value.body == "Service Unavailable"


@pytest.mark.asyncio
async def test_timeout_becomes_gateway_timeout():
    """Test transport timeouts are raised as UpstreamError 504."""

    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    client = ZohoCrmClient(http_client, BASE_URL, StubTokenProvider())

    with pytest.raises(UpstreamError) as exc_info:
        await client.request("Leads")

    assert exc_info.value.status_code == 504
