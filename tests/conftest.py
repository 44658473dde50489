"""Shared fixtures: an in-memory fake of the CRM, token endpoint and voice provider."""

import json
import re
from typing import Any, Optional

import httpx
import pytest

from lead_dispatch.infrastructure.config.settings import Settings

CRM_BASE_URL = "https://crm.test/crm/v2"
TOKEN_URL = "https://accounts.test/oauth/v2/token"
VOICE_BASE_URL = "https://voice.test"

_CRITERIA_ID = re.compile(r"equals:([^)]+)\)")


class FakeZoho:
    """
    Fake CRM backing store answering the subset of the REST API the service uses.

    Records are kept per module. Searches are answered against stored records,
    so idempotency can be checked by counting what was created.
    """

    def __init__(self) -> None:
        """Initialize empty fake."""
        self.records: dict[str, list[dict[str, Any]]] = {"Leads": [], "Tasks": [], "Calls": []}
        self.requests: list[httpx.Request] = []
        self.token_requests = 0
        self.valid_tokens: set[str] = set()
        self.token_status = 200
        # Module -> relationship fields rejected with details.api_name
        self.rejected_fields: dict[str, set[str]] = {}
        # Module -> relationship fields rejected only through the message text
        self.rejected_by_message: dict[str, set[str]] = {}
        # Modules where What_Id is only accepted together with $se_module
        self.require_module_hint: set[str] = set()
        self.fail_writes: dict[str, int] = {}
        # Module -> status answered to every write, as during an outage
        self.write_status: dict[str, int] = {}
        # Modules whose writes are stored but whose answer never arrives
        self.timeout_after_write: set[str] = set()
        self.search_status: Optional[int] = None
        self.voice_status = 200
        self.voice_payloads: list[dict[str, Any]] = []
        self._next_id = 1000

    # Helpers for assertions

    def crm_requests(self, method: Optional[str] = None, path: Optional[str] = None) -> list:
        """CRM requests, optionally filtered by method and path suffix."""
        return [
            request
            for request in self.requests
            if request.url.host == "crm.test"
            and (method is None or request.method == method)
            and (path is None or request.url.path.endswith(path))
        ]

    def invalidate_tokens(self) -> None:
        """Make every issued token stale, as if it expired upstream."""
        self.valid_tokens.clear()

    # Transport

    def handler(self, request: httpx.Request) -> httpx.Response:
        """httpx.MockTransport handler."""
        self.requests.append(request)

        if str(request.url) == TOKEN_URL:
            return self._token(request)
        if request.url.host == "voice.test":
            return self._voice(request)
        if request.url.host == "crm.test":
            return self._crm(request)
        return httpx.Response(404, json={"message": "unknown host"})

    def _token(self, request: httpx.Request) -> httpx.Response:
        self.token_requests += 1
        if self.token_status != 200:
            return httpx.Response(self.token_status, json={"error": "invalid_code"})
        token = f"token-{self.token_requests}"
        self.valid_tokens.add(token)
        return httpx.Response(200, json={"access_token": token, "expires_in": 3600})

    def _voice(self, request: httpx.Request) -> httpx.Response:
        payload = json.loads(request.content)
        self.voice_payloads.append(payload)
        if self.voice_status != 200:
            return httpx.Response(self.voice_status, json={"error": "agent unavailable"})
        return httpx.Response(200, json={"call_id": f"call-{len(self.voice_payloads)}"})

    def _crm(self, request: httpx.Request) -> httpx.Response:
        token = request.headers.get("Authorization", "").removeprefix("Zoho-oauthtoken ")
        if token not in self.valid_tokens:
            return httpx.Response(
                401,
                json={"code": "INVALID_TOKEN", "message": "invalid oauth token", "status": "error"},
            )

        path = request.url.path.removeprefix("/crm/v2/")
        module, _, action = path.partition("/")

        if request.method == "GET" and action == "search":
            return self._search(module, request)
        if request.method == "POST" and not action:
            return self._create(module, json.loads(request.content)["data"][0], request)
        return httpx.Response(404, json={"code": "INVALID_URL_PATTERN"})

    def _search(self, module: str, request: httpx.Request) -> httpx.Response:
        if self.search_status is not None:
            return httpx.Response(self.search_status, json={"code": "INTERNAL_ERROR"})

        if module == "Leads":
            phone = request.url.params.get("phone")
            matches = [lead for lead in self.records["Leads"] if lead["Phone"] == phone]
        else:
            found = _CRITERIA_ID.search(request.url.params.get("criteria", ""))
            lead_id = found.group(1) if found else None
            matches = [
                record
                for record in self.records[module]
                if (record.get("Who_Id") or {}).get("id") == lead_id
                or (record.get("What_Id") or {}).get("id") == lead_id
            ]

        if not matches:
            return httpx.Response(204)
        return httpx.Response(200, json={"data": matches})

    def _create(
        self, module: str, record: dict[str, Any], request: httpx.Request
    ) -> httpx.Response:
        if module in self.write_status:
            return httpx.Response(self.write_status[module], text="Service Unavailable")
        for field in self.rejected_fields.get(module, set()):
            if field in record:
                return _record_error(400, "INVALID_DATA", "invalid data", {"api_name": field})
        for field in self.rejected_by_message.get(module, set()):
            if field in record:
                return _record_error(202, "INVALID_DATA", f"the {field} lookup rejected this id")
        if module in self.require_module_hint and "What_Id" in record:
            if "$se_module" not in record:
                return _record_error(202, "INVALID_DATA", "Related To needs the record module")
        if self.fail_writes.get(module):
            self.fail_writes[module] -= 1
            return _record_error(
                202, "MANDATORY_NOT_FOUND", "required field not found", {"api_name": "Subject"}
            )

        self._next_id += 1
        record_id = str(self._next_id)
        self.records[module].append({**record, "id": record_id})
        if module in self.timeout_after_write:
            raise httpx.ReadTimeout("read timed out", request=request)
        return httpx.Response(
            201,
            json={
                "data": [
                    {
                        "code": "SUCCESS",
                        "details": {"id": record_id},
                        "message": "record added",
                        "status": "success",
                    }
                ]
            },
        )


def _record_error(
    status_code: int, code: str, message: str, details: Optional[dict[str, Any]] = None
) -> httpx.Response:
    """Per-record failure inside the usual data envelope."""
    return httpx.Response(
        status_code,
        json={
            "data": [
                {"code": code, "details": details or {}, "message": message, "status": "error"}
            ]
        },
    )


@pytest.fixture
def fake_zoho() -> FakeZoho:
    """Fresh fake CRM per test."""
    return FakeZoho()


@pytest.fixture
def http_client(fake_zoho) -> httpx.AsyncClient:
    """HTTP client wired to the fake CRM."""
    return httpx.AsyncClient(transport=httpx.MockTransport(fake_zoho.handler))


@pytest.fixture
def test_settings() -> Settings:
    """Settings pointing every external API at the fake."""
    return Settings(
        _env_file=None,
        zoho_crm_base_url=CRM_BASE_URL,
        zoho_token_url=TOKEN_URL,
        zoho_client_id="client-id",
        zoho_client_secret="client-secret",
        zoho_refresh_token="refresh-token",
        voice_api_base_url=VOICE_BASE_URL,
        voice_api_path="/v1/calls",
        voice_api_key="voice-key",
        voice_agent_id="agent-7",
        call_on_create=True,
        default_country_code="91",
        timezone="Asia/Kolkata",
        token_store="in_memory",
        cors_allowed_origins="",
    )
