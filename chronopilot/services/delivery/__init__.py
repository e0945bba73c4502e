"""Delivery of finished documents by mail and to document storage."""

from .base import IMailer, IStorage, mailer_from_config, storage_from_config

__all__ = ["IMailer", "IStorage", "mailer_from_config", "storage_from_config"]
