"""Dataset sources: remote Supabase tables or local files."""

from .base import IDataSource, current_month_suffix, source_from_config

__all__ = ["IDataSource", "current_month_suffix", "source_from_config"]
