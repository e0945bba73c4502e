"""Primary client implementation for Supabase (PostgREST + Storage)."""

from __future__ import annotations

import logging
from typing import Any, Mapping
from urllib.parse import quote

import requests

from chronopilot.core.logger import get_logger
from chronopilot.services.http import HttpClient, ServiceRequestError, safe_json

from .config import SupabaseConfig

LOGGER = get_logger()

RANGE_NOT_SATISFIABLE = 416


class SupabaseClient:
    """Thin client for table selects, RPC calls and storage uploads."""

    def __init__(
        self,
        config: SupabaseConfig,
        *,
        http_client: HttpClient | None = None,
        session: requests.Session | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._config = config
        self._logger = logger or LOGGER
        self._http = http_client or HttpClient(
            config.url,
            headers={
                "apikey": config.service_key,
                "Authorization": f"Bearer {config.service_key}",
            },
            session=session,
            retries=config.retries,
            timeout=config.timeout_sec,
            service="supabase",
            logger=self._logger,
        )

    def close(self) -> None:
        self._http.close()

    def select_all(self, table: str, *, columns: str = "*", page_size: int = 1000) -> list[dict[str, Any]]:
        """Return every row of ``table``, paging with PostgREST ``Range`` headers.

        Row dictionaries keep the column order of the JSON response.
        """

        if page_size <= 0:
            raise ValueError("page_size must be positive")
        rows: list[dict[str, Any]] = []
        start = 0
        while True:
            end = start + page_size - 1
            response = self._http.request(
                "GET",
                f"/rest/v1/{quote(table, safe='')}",
                headers={"Range-Unit": "items", "Range": f"{start}-{end}"},
                params={"select": columns},
                expected_status=(200, 206, RANGE_NOT_SATISFIABLE),
            )
            if response.status_code == RANGE_NOT_SATISFIABLE:
                break
            batch = response.json()
            if not isinstance(batch, list):
                raise ServiceRequestError(
                    f"Unexpected payload for table {table}", status_code=response.status_code, payload=batch
                )
            rows.extend(batch)
            if len(batch) < page_size:
                break
            start += page_size
        self._logger.debug("supabase.select table=%s rows=%d", table, len(rows))
        return rows

    def rpc(self, name: str, params: Mapping[str, Any] | None = None) -> Any:
        """Call a Postgres function exposed through ``/rest/v1/rpc``."""

        response = self._http.request(
            "POST",
            f"/rest/v1/rpc/{quote(name, safe='')}",
            json_body=dict(params or {}),
            expected_status=(200, 204),
        )
        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    def upload_object(
        self,
        bucket: str,
        object_name: str,
        data: bytes,
        *,
        content_type: str = "application/octet-stream",
        upsert: bool = True,
    ) -> str:
        """Upload ``data`` to ``bucket/object_name`` and return the object key."""

        response = self._http.request(
            "POST",
            f"/storage/v1/object/{quote(bucket, safe='')}/{quote(object_name)}",
            headers={
                "Content-Type": content_type,
                "x-upsert": "true" if upsert else "false",
            },
            data=data,
            expected_status=(200, 201),
        )
        payload = safe_json(response)
        key = payload.get("Key") if isinstance(payload, dict) else None
        return str(key or f"{bucket}/{object_name}")


__all__ = ["SupabaseClient"]
