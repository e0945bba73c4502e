from __future__ import annotations

from pathlib import Path

from chronopilot.core.errors import StorageError
from chronopilot.core.logger import get_logger
from chronopilot.services.http import ServiceError
from chronopilot.services.supabase import SupabaseClient
from chronopilot_pdf import RenderedDocument

from .base import IStorage

LOGGER = get_logger()


class SupabaseBucketStorage(IStorage):
    """Upload documents into a Supabase storage bucket, replacing same-named objects."""

    def __init__(self, client: SupabaseClient, bucket: str) -> None:
        self.client = client
        self.bucket = bucket

    def store(self, document: RenderedDocument) -> str:
        try:
            key = self.client.upload_object(
                self.bucket, document.filename, document.content, content_type=document.media_type, upsert=True
            )
        except ServiceError as exc:
            raise StorageError(f"Upload of {document.filename} failed: {exc}") from exc
        LOGGER.info("Uploaded %s to bucket %s", document.filename, self.bucket)
        return key


class LocalDirectoryStorage(IStorage):
    """Copy documents into an archive directory."""

    def __init__(self, directory: Path) -> None:
        self.directory = Path(directory)

    def store(self, document: RenderedDocument) -> str:
        try:
            path = document.write_to(self.directory)
        except OSError as exc:
            raise StorageError(f"Archiving {document.filename} failed: {exc}") from exc
        return str(path)
