"""Fake ``requests`` objects shared by the service tests."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any


@dataclass
class MockResponse:
    status_code: int = 200
    json_data: Any = None
    text_data: str | None = None
    headers: dict[str, str] | None = None

    def json(self) -> Any:
        if self.json_data is None:
            raise ValueError("JSON body not set")
        return self.json_data

    @property
    def content(self) -> bytes:
        if self.json_data is not None:
            return json.dumps(self.json_data).encode("utf-8")
        if self.text_data is not None:
            return self.text_data.encode("utf-8")
        return b""

    @property
    def text(self) -> str:
        if self.text_data is not None:
            return self.text_data
        if self.json_data is not None:
            return json.dumps(self.json_data)
        return ""

    def __post_init__(self) -> None:
        if self.headers is None:
            self.headers = {}


class FakeSession:
    def __init__(self, responses: list[MockResponse | Exception]) -> None:
        self._responses = responses
        self.headers: dict[str, str] = {}
        self.calls: list[tuple[str, str]] = []
        self.call_kwargs: list[dict[str, Any]] = []
        self.closed = False

    def request(self, method: str, url: str, **kwargs: Any) -> MockResponse:
        if not self._responses:
            raise AssertionError("No more responses queued")
        self.calls.append((method, url))
        self.call_kwargs.append(kwargs)
        response = self._responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    def close(self) -> None:
        self.closed = True
