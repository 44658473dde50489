"""Dependency injection factory functions."""

from datetime import datetime
from functools import lru_cache
from typing import Callable, Optional
from zoneinfo import ZoneInfo

import httpx

from lead_dispatch.adapters.outbound.auth.oauth_token_provider import OAuthTokenProvider
from lead_dispatch.adapters.outbound.credential_store import (
    InMemoryCredentialStore,
    RedisCredentialStore,
)
from lead_dispatch.adapters.outbound.crm.zoho_crm_client import ZohoCrmClient
from lead_dispatch.adapters.outbound.voice import HttpVoiceCallClient, NoOpVoiceCallClient
from lead_dispatch.application.ports.credential_store import CredentialStore
from lead_dispatch.application.ports.crm_client import CrmClient
from lead_dispatch.application.ports.token_provider import TokenProvider
from lead_dispatch.application.ports.voice_call_client import VoiceCallClient
from lead_dispatch.application.use_cases.create_follow_up_task import CreateFollowUpTask
from lead_dispatch.application.use_cases.dispatch_call_use_case import DispatchCallUseCase
from lead_dispatch.application.use_cases.find_or_create_lead import FindOrCreateLead
from lead_dispatch.application.use_cases.log_call_activity import LogCallActivity
from lead_dispatch.application.use_cases.start_outbound_call import StartOutboundCall
from lead_dispatch.infrastructure.config.settings import Settings, settings
from lead_dispatch.infrastructure.logging.logger import log_event

_http_client: Optional[httpx.AsyncClient] = None
_credential_store: Optional[CredentialStore] = None


def create_clock(timezone_name: str) -> Callable[[], datetime]:
    """
    Factory function to create the local clock used for due dates and call times.

    Args:
        timezone_name: IANA timezone name, or empty for system local time

    Returns:
        Callable returning the current aware datetime
    """
    if timezone_name:
        zone = ZoneInfo(timezone_name)
        return lambda: datetime.now(zone)
    return lambda: datetime.now().astimezone()


def get_http_client(config: Settings = settings) -> httpx.AsyncClient:
    """
    Get or create the shared outbound HTTP client.

    Returns:
        httpx.AsyncClient with the configured per-request timeout
    """
    global _http_client
    if _http_client is None:
        _http_client = httpx.AsyncClient(timeout=config.http_timeout_seconds)
    return _http_client


async def close_outbound_clients() -> None:
    """Close the shared outbound HTTP client and credential store."""
    global _http_client, _credential_store
    if _http_client is not None:
        await _http_client.aclose()
        _http_client = None
    if _credential_store is not None:
        await _credential_store.close()
        _credential_store = None
    get_dispatch_call_use_case.cache_clear()
    get_start_outbound_call.cache_clear()


def create_credential_store(config: Settings = settings) -> CredentialStore:
    """
    Factory function to create credential store.

    Returns:
        CredentialStore instance (Redis or in-memory)
    """
    if config.token_store == "redis":
        if not config.redis_url:
            raise ValueError("REDIS_URL is required when TOKEN_STORE=redis")
        return RedisCredentialStore(config.redis_url)
    return InMemoryCredentialStore()


def get_credential_store(config: Settings = settings) -> CredentialStore:
    """
    Get or create the process-wide credential store.

    Returns:
        CredentialStore shared by every request
    """
    global _credential_store
    if _credential_store is None:
        _credential_store = create_credential_store(config)
    return _credential_store


def create_token_provider(
    http_client: httpx.AsyncClient,
    config: Settings = settings,
    credential_store: Optional[CredentialStore] = None,
) -> TokenProvider:
    """
    Factory function to create the OAuth token provider.

    Returns:
        TokenProvider instance
    """
    if credential_store is None:
        credential_store = create_credential_store(config)
    return OAuthTokenProvider(
        http_client,
        token_url=config.zoho_token_url,
        client_id=config.zoho_client_id,
        client_secret=config.zoho_client_secret,
        refresh_token=config.zoho_refresh_token,
        store=credential_store,
        skew_seconds=config.token_refresh_skew_seconds,
    )


def create_crm_client(
    http_client: httpx.AsyncClient,
    config: Settings = settings,
    credential_store: Optional[CredentialStore] = None,
) -> CrmClient:
    """
    Factory function to create CRM client.

    Returns:
        CrmClient instance
    """
    return ZohoCrmClient(
        http_client,
        base_url=config.zoho_crm_base_url,
        token_provider=create_token_provider(http_client, config, credential_store),
    )


def create_voice_call_client(
    http_client: httpx.AsyncClient, config: Settings = settings
) -> VoiceCallClient:
    """
    Factory function to create voice call client.

    Returns:
        VoiceCallClient instance (HTTP provider or no-op when not configured)
    """
    if not config.voice_configured:
        return NoOpVoiceCallClient()
    return HttpVoiceCallClient(
        http_client,
        base_url=config.voice_api_base_url,
        path=config.voice_api_path,
        api_key=config.voice_api_key,
        agent_id=config.voice_agent_id,
    )


def create_dispatch_call_use_case(
    http_client: httpx.AsyncClient,
    config: Settings = settings,
    credential_store: Optional[CredentialStore] = None,
) -> DispatchCallUseCase:
    """
    Factory function to create DispatchCallUseCase with dependencies.

    Returns:
        DispatchCallUseCase instance
    """
    crm_client = create_crm_client(http_client, config, credential_store)
    clock = create_clock(config.timezone)

    call_logger = None
    if config.log_calls_enabled:
        call_logger = LogCallActivity(crm_client, clock=clock, logger=log_event)

    return DispatchCallUseCase(
        lead_resolver=FindOrCreateLead(
            crm_client,
            product_line_field=config.zoho_product_line_field,
            logger=log_event,
        ),
        task_linker=CreateFollowUpTask(
            crm_client,
            due_hours=config.task_due_hours,
            dedupe=config.task_dedupe_enabled,
            clock=clock,
            logger=log_event,
        ),
        voice_client=create_voice_call_client(http_client, config),
        call_logger=call_logger,
        call_on_create=config.call_on_create,
        default_country_code=config.default_country_code,
        logger=log_event,
    )


def create_start_outbound_call(
    http_client: httpx.AsyncClient, config: Settings = settings
) -> StartOutboundCall:
    """
    Factory function to create StartOutboundCall with dependencies.

    Returns:
        StartOutboundCall instance
    """
    return StartOutboundCall(
        create_voice_call_client(http_client, config),
        default_country_code=config.default_country_code,
        logger=log_event,
    )


@lru_cache
def get_dispatch_call_use_case() -> DispatchCallUseCase:
    """FastAPI dependency returning the process-wide dispatch use case."""
    return create_dispatch_call_use_case(
        get_http_client(), credential_store=get_credential_store()
    )


@lru_cache
def get_start_outbound_call() -> StartOutboundCall:
    """FastAPI dependency returning the process-wide call-now use case."""
    return create_start_outbound_call(get_http_client())
