"""Supabase REST, RPC and storage integration."""

from .client import SupabaseClient
from .config import SupabaseConfig, resolve_config

__all__ = [
    "SupabaseClient",
    "SupabaseConfig",
    "resolve_config",
]
