from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Sequence

from chronopilot.core.errors import ConfigError
from chronopilot.core.profiles import MailSettings, StorageSettings, expand_env, resolve_work_path
from chronopilot_pdf import RenderedDocument


class IMailer(ABC):
    """Interface for sending documents as attachments of one message."""

    @abstractmethod
    def send(self, subject: str, body: str, documents: Sequence[RenderedDocument]) -> None:
        """Send one message carrying every document in ``documents``."""


class IStorage(ABC):
    """Interface for document storage targets."""

    @abstractmethod
    def store(self, document: RenderedDocument) -> str:
        """Store ``document``, overwriting an existing object, and return its location."""


def mailer_from_config(cfg: MailSettings) -> IMailer:
    mtype = (cfg.type or "sendgrid").lower()
    if mtype == "sendgrid":
        from .sendgrid import SendGridMailer, resolve_api_key

        recipients = [item.strip() for item in expand_env(cfg.to).split(",") if item.strip()]
        if not recipients:
            raise ConfigError("mail.to resolved to no recipients")
        return SendGridMailer(resolve_api_key(), sender=expand_env(cfg.sender), recipients=recipients)
    raise ConfigError(f"Unknown mail transport: {mtype}")


def storage_from_config(cfg: StorageSettings) -> IStorage:
    stype = (cfg.type or "supabase_bucket").lower()
    if stype in {"supabase_bucket", "supabase"}:
        from chronopilot.services.supabase import SupabaseClient, resolve_config

        from .storage import SupabaseBucketStorage

        return SupabaseBucketStorage(SupabaseClient(resolve_config()), expand_env(cfg.bucket))
    if stype in {"local", "directory"}:
        from .storage import LocalDirectoryStorage

        if not cfg.directory:
            raise ConfigError("storage.directory is required for local storage")
        return LocalDirectoryStorage(resolve_work_path(expand_env(cfg.directory)))
    raise ConfigError(f"Unknown storage target: {stype}")
