"""Tests for EmailService: provider success, provider failure, and dev mode."""
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from services.email_service import EmailService


def _db():
    db = MagicMock()
    db.message_logs.insert_one = AsyncMock()
    return db


@pytest.mark.asyncio
async def test_send_through_postmark_records_message():
    service = EmailService()
    service.client = MagicMock()
    service.client.emails.send.return_value = {"MessageID": "pm-123"}
    db = _db()

    with patch("services.email_service.database.get_db", return_value=db), \
         patch("services.email_service.create_audit_log", new_callable=AsyncMock) as audit:
        log = await service.send("owner@agencydesk.io", "Renewal reminder", "Line one\nLine <two>", owner_id="owner-1")

    assert log.status == "sent"
    assert log.postmark_message_id == "pm-123"
    kwargs = service.client.emails.send.call_args.kwargs
    assert kwargs["To"] == "owner@agencydesk.io"
    assert kwargs["TextBody"] == "Line one\nLine <two>"
    assert "Line &lt;two&gt;" in kwargs["HtmlBody"]
    db.message_logs.insert_one.assert_awaited_once()
    assert audit.call_args.kwargs["action"].value == "EMAIL_SENT"


@pytest.mark.asyncio
async def test_provider_failure_is_reported_not_raised():
    service = EmailService()
    service.client = MagicMock()
    service.client.emails.send.side_effect = RuntimeError("422 inactive recipient")

    with patch("services.email_service.database.get_db", return_value=_db()), \
         patch("services.email_service.create_audit_log", new_callable=AsyncMock) as audit:
        log = await service.send("owner@agencydesk.io", "Renewal reminder", "body")

    assert log.status == "failed"
    assert log.error_message == "422 inactive recipient"
    assert log.provider_error_type == "RuntimeError"
    assert audit.call_args.kwargs["action"].value == "EMAIL_FAILED"


@pytest.mark.asyncio
async def test_dev_mode_logs_instead_of_sending():
    service = EmailService()
    service.client = None

    with patch("services.email_service.database.get_db", return_value=_db()), \
         patch("services.email_service.create_audit_log", new_callable=AsyncMock):
        log = await service.send("owner@agencydesk.io", "Renewal reminder", "body")

    assert log.status == "sent"
    assert log.postmark_message_id is None
