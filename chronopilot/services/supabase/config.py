"""Configuration loader for the Supabase client."""

from __future__ import annotations

from dataclasses import dataclass, field

from chronopilot.services.http import RetryConfig, load_timeout, require_env

URL_ENV = "SUPABASE_URL"
SERVICE_KEY_ENV = "SUPABASE_SERVICE_KEY"


@dataclass(slots=True)
class SupabaseConfig:
    """Resolved connection settings for a Supabase project."""

    url: str
    service_key: str
    timeout_sec: float = 30.0
    retries: RetryConfig = field(default_factory=RetryConfig)


def resolve_config() -> SupabaseConfig:
    """Build the configuration from ``SUPABASE_URL``/``SUPABASE_SERVICE_KEY`` and overrides."""

    return SupabaseConfig(
        url=require_env(URL_ENV),
        service_key=require_env(SERVICE_KEY_ENV),
        timeout_sec=load_timeout(),
        retries=RetryConfig.from_env(),
    )


__all__ = ["SupabaseConfig", "resolve_config", "URL_ENV", "SERVICE_KEY_ENV"]
