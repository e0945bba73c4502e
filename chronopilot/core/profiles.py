from __future__ import annotations

import os
import re
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from chronopilot.config import DEFAULT_PROFILES_PATH

from .errors import ConfigError


load_dotenv(override=False)

_ENV_PLACEHOLDER = re.compile(r"\$\{([^}]+)\}")


class SourceSettings(BaseModel):
    """Where dataset rows come from."""

    model_config = ConfigDict(extra="allow")

    type: str = "supabase"
    page_size: int = Field(default=1000, gt=0)
    directory: Optional[str] = None


class DynamicTableSettings(BaseModel):
    """Discovery of per-month tables through an RPC listing."""

    model_config = ConfigDict(extra="allow")

    rpc: str = "get_dynamic_tables"
    name_field: str = "table_name"
    current_month_only: bool = True


class RenderSettings(BaseModel):
    model_config = ConfigDict(extra="allow")

    legacy_row_metrics: bool = False
    workers: int = Field(default=1, ge=1)
    output_dir: str = "out"
    keep_local: bool = False
    font: Optional[str] = None
    font_bold: Optional[str] = None


class MailSettings(BaseModel):
    model_config = ConfigDict(extra="allow")

    type: str = "sendgrid"
    enabled: bool = True
    subject: str = "ChronoPilot - Monatliche Berichte"
    body: str = ""
    to: str = "${EMAIL_TO}"
    sender: str = "${EMAIL_FROM}"


class StorageSettings(BaseModel):
    model_config = ConfigDict(extra="allow")

    type: str = "supabase_bucket"
    enabled: bool = True
    bucket: str = "${BUCKET_NAME}"
    directory: Optional[str] = None


class Profile(BaseModel):
    """A single report workflow with its configuration.

    Attributes:
        name: Profile key.
        display_name: Human readable name.
        source: Data source configuration.
        static_tables: Tables rendered on every run.
        dynamic_tables: Optional RPC-based discovery of monthly tables.
        render: Rendering options.
        mail: Email delivery configuration.
        storage: Storage configuration for the finished documents.
        post_run_rpcs: RPCs called after all documents were delivered.
    """

    model_config = ConfigDict(extra="allow")

    name: str
    display_name: str
    source: SourceSettings = Field(default_factory=SourceSettings)
    static_tables: List[str] = Field(default_factory=list)
    dynamic_tables: Optional[DynamicTableSettings] = None
    render: RenderSettings = Field(default_factory=RenderSettings)
    mail: MailSettings = Field(default_factory=MailSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)
    post_run_rpcs: List[str] = Field(default_factory=list)


def _is_frozen() -> bool:
    return getattr(sys, "frozen", False) and hasattr(sys, "_MEIPASS")


def _project_root() -> Path:
    env = os.getenv("CHRONOPILOT_ROOT")
    if env:
        return Path(env)
    if _is_frozen():
        return Path(getattr(sys, "_MEIPASS"))  # type: ignore[arg-type]
    # In source layout, this file is under <root>/chronopilot/core
    return Path(__file__).resolve().parents[2]


def _profiles_path() -> Path:
    if os.getenv("CHRONOPILOT_ROOT"):
        return _project_root() / "chronopilot" / "config" / "profiles.yaml"
    return DEFAULT_PROFILES_PATH


def _work_dir() -> Path:
    if _is_frozen():
        return Path(sys.executable).resolve().parent / "chronopilot" / "work"
    return _project_root() / "chronopilot" / "work"


def ensure_work_dirs() -> dict[str, Path]:
    base = _work_dir()
    out = base / "out"
    logs = base / "logs"
    for p in (out, logs):
        p.mkdir(parents=True, exist_ok=True)
    return {"out": out, "logs": logs}


def resolve_work_path(path: str | Path) -> Path:
    """Resolve ``path`` relative to the work directory unless absolute."""

    p = Path(path).expanduser()
    if p.is_absolute():
        return p
    return _work_dir() / p


def expand_env(value: str) -> str:
    """Expand ``${VAR}`` placeholders, failing when a variable is unset."""

    missing = [name for name in _ENV_PLACEHOLDER.findall(value) if not os.getenv(name)]
    if missing:
        raise ConfigError(f"Environment variable not set: {', '.join(missing)}")
    return _ENV_PLACEHOLDER.sub(lambda match: os.environ[match.group(1)], value)


def load_profiles(path: str | Path | None = None) -> dict[str, Profile]:
    """Load workflow profiles from config/profiles.yaml.

    Returns a dict of profile-key -> Profile.
    """
    cfg_path = Path(path) if path else _profiles_path()
    if not cfg_path.exists():
        raise ConfigError(f"profiles.yaml not found: {cfg_path}")
    with cfg_path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    profiles_raw = data.get("profiles", {}) if isinstance(data, dict) else {}
    if not profiles_raw:
        raise ConfigError("profiles.yaml defines no profiles")
    profiles: dict[str, Profile] = {}
    for key, p in profiles_raw.items():
        payload: Dict[str, Any] = dict(p or {})
        payload.setdefault("display_name", key)
        try:
            profiles[key] = Profile(name=key, **payload)
        except ValidationError as e:
            raise ConfigError(f"Invalid profile {key}: {e}") from e
        except TypeError as e:
            raise ConfigError(f"Invalid profile {key}: {e}") from e
    return profiles


def get_profile(name: str, path: str | Path | None = None) -> Profile:
    profiles = load_profiles(path)
    try:
        return profiles[name]
    except KeyError as e:
        known = ", ".join(sorted(profiles))
        raise ConfigError(f"Unknown profile {name!r} (known: {known})") from e
