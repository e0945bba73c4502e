"""SendGrid v3 mail transport."""

from __future__ import annotations

import base64
import logging
from typing import Sequence

import requests

from chronopilot.core.errors import DeliveryError
from chronopilot.core.logger import get_logger
from chronopilot.services.http import HttpClient, RetryConfig, ServiceError, load_timeout, require_env
from chronopilot_pdf import RenderedDocument

from .base import IMailer

LOGGER = get_logger()

SENDGRID_BASE_URL = "https://api.sendgrid.com"
SEND_PATH = "/v3/mail/send"
API_KEY_ENV = "SENDGRID_API_KEY"


def resolve_api_key() -> str:
    return require_env(API_KEY_ENV)


def build_message(
    subject: str,
    body: str,
    documents: Sequence[RenderedDocument],
    *,
    sender: str,
    recipients: Sequence[str],
) -> dict:
    """Return the v3 ``mail/send`` payload with every document attached."""

    return {
        "personalizations": [{"to": [{"email": address} for address in recipients]}],
        "from": {"email": sender},
        "subject": subject,
        "content": [{"type": "text/plain", "value": body or " "}],
        "attachments": [
            {
                "content": base64.b64encode(doc.content).decode("ascii"),
                "filename": doc.filename,
                "type": doc.media_type,
                "disposition": "attachment",
            }
            for doc in documents
        ],
    }


class SendGridMailer(IMailer):
    def __init__(
        self,
        api_key: str,
        *,
        sender: str,
        recipients: Sequence[str],
        session: requests.Session | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.sender = sender
        self.recipients = list(recipients)
        self._logger = logger or LOGGER
        # A 5xx after SendGrid accepted the message would duplicate it, so no retries.
        self._http = HttpClient(
            SENDGRID_BASE_URL,
            headers={"Authorization": f"Bearer {api_key}"},
            session=session,
            retries=RetryConfig(max_attempts=1),
            timeout=load_timeout(),
            service="sendgrid",
            logger=self._logger,
        )

    def send(self, subject: str, body: str, documents: Sequence[RenderedDocument]) -> None:
        if not documents:
            self._logger.info("sendgrid.send skipped: no documents")
            return
        message = build_message(subject, body, documents, sender=self.sender, recipients=self.recipients)
        try:
            self._http.request("POST", SEND_PATH, json_body=message, expected_status=(202,), allow_retry=False)
        except ServiceError as exc:
            raise DeliveryError(f"SendGrid rejected the message: {exc} {exc.payload}") from exc
        self._logger.info(
            "sendgrid.send ok recipients=%d attachments=%d", len(self.recipients), len(documents)
        )
