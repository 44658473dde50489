"""Application settings."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration settings."""

    # Zoho CRM and OAuth
    zoho_crm_base_url: str = "https://www.zohoapis.in/crm/v2"
    zoho_token_url: str = "https://accounts.zoho.in/oauth/v2/token"
    zoho_client_id: str = ""
    zoho_client_secret: str = ""
    zoho_refresh_token: str = ""
    zoho_product_line_field: str = "Product_Line"
    token_refresh_skew_seconds: int = 60
    token_store: str = "in_memory"  # in_memory or redis
    redis_url: str = "redis://localhost:6379/0"

    # Workflow
    task_due_hours: int = 24
    task_dedupe_enabled: bool = True
    log_calls_enabled: bool = True
    default_country_code: str = "91"  # Prefix for local 10-digit numbers; empty disables
    timezone: str = ""  # IANA name for due dates and call times; empty uses system local

    # Voice-agent provider
    voice_api_base_url: str = ""
    voice_api_path: str = "/v1/calls"
    voice_api_key: str = ""
    voice_agent_id: str = ""
    call_on_create: bool = False

    # HTTP
    cors_allowed_origins: str = ""  # Comma-separated list
    http_timeout_seconds: float = 10.0
    port: int = 3000

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        env_prefix="",
        extra="ignore",
    )

    @property
    def cors_origins(self) -> list[str]:
        """Allowed CORS origins as a list."""
        return [origin.strip() for origin in self.cors_allowed_origins.split(",") if origin.strip()]

    @property
    def voice_configured(self) -> bool:
        """True if the voice-agent provider can be called."""
        return bool(self.voice_api_base_url and self.voice_api_key and self.voice_agent_id)


settings = Settings()
