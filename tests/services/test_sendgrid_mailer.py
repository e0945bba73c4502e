from __future__ import annotations

import base64

import pytest

from chronopilot.core.errors import DeliveryError
from chronopilot.services.delivery.sendgrid import SendGridMailer
from chronopilot_pdf import RenderedDocument

from fakes import FakeSession, MockResponse


def _document(name: str) -> RenderedDocument:
    return RenderedDocument(name=name, content=b"%PDF-1.4 " + name.encode(), page_count=1, row_count=3)


def _mailer(responses: list) -> tuple[SendGridMailer, FakeSession]:
    session = FakeSession(responses)
    mailer = SendGridMailer(
        "sg-key",
        sender="reports@chronopilot.example",
        recipients=["chef@firma.example", "buero@firma.example"],
        session=session,
    )
    return mailer, session


def test_send_attaches_every_document() -> None:
    mailer, session = _mailer([MockResponse(status_code=202)])
    documents = [_document("raw_data"), _document("gesamtzeiten")]

    mailer.send("ChronoPilot - Monatliche Berichte", "Guten Tag", documents)

    assert session.calls == [("POST", "https://api.sendgrid.com/v3/mail/send")]
    kwargs = session.call_kwargs[0]
    assert kwargs["headers"]["Authorization"] == "Bearer sg-key"
    message = kwargs["json"]
    assert message["from"] == {"email": "reports@chronopilot.example"}
    assert message["personalizations"][0]["to"] == [
        {"email": "chef@firma.example"},
        {"email": "buero@firma.example"},
    ]
    attachments = message["attachments"]
    assert [item["filename"] for item in attachments] == ["raw_data.pdf", "gesamtzeiten.pdf"]
    assert base64.b64decode(attachments[0]["content"]) == documents[0].content
    assert {item["type"] for item in attachments} == {"application/pdf"}
    assert {item["disposition"] for item in attachments} == {"attachment"}


@pytest.mark.parametrize("status", [400, 500])
def test_rejected_message_raises_without_retry(status: int) -> None:
    mailer, session = _mailer([MockResponse(status_code=status, json_data={"errors": [{"message": "bad"}]})])

    with pytest.raises(DeliveryError):
        mailer.send("Betreff", "Text", [_document("raw_data")])
    assert len(session.calls) == 1


def test_nothing_to_send() -> None:
    mailer, session = _mailer([])
    mailer.send("Betreff", "Text", [])
    assert session.calls == []
