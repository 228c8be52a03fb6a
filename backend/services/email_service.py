from postmarker.core import PostmarkClient
from database import database
from models import MessageLog, AuditAction
from utils.audit import create_audit_log
from datetime import datetime, timezone
from html import escape
import os
import logging
from typing import Optional

logger = logging.getLogger(__name__)

DEFAULT_SENDER = os.getenv("EMAIL_SENDER", "reminders@agency-desk.local")
MESSAGE_STREAM = os.getenv("POSTMARK_MESSAGE_STREAM", "outbound")

class EmailService:
    def __init__(self):
        postmark_token = os.getenv("POSTMARK_SERVER_TOKEN")
        if not postmark_token:
            logger.warning("POSTMARK_SERVER_TOKEN not set - emails will be logged but not sent")
            self.client = None
        else:
            self.client = PostmarkClient(server_token=postmark_token)
            logger.info("Postmark email client initialized")

    async def send(
        self,
        recipient: str,
        subject: str,
        body: str,
        owner_id: Optional[str] = None,
        tag: str = "renewal-reminder"
    ) -> MessageLog:
        """Send a plain-text email (with a simple HTML rendering).

        Never raises for provider failures: the returned MessageLog has
        status "sent" or "failed" and is stored in message_logs either way.
        Failed sends are not retried.
        """
        message_log = MessageLog(
            owner_id=owner_id,
            recipient=recipient,
            subject=subject,
            status="queued"
        )

        try:
            if self.client:
                response = self.client.emails.send(
                    From=DEFAULT_SENDER,
                    To=recipient,
                    Subject=subject,
                    HtmlBody=self._build_html_body(subject, body),
                    TextBody=body,
                    Tag=tag,
                    MessageStream=MESSAGE_STREAM
                )
                message_log.postmark_message_id = response["MessageID"]
                message_log.status = "sent"
                message_log.sent_at = datetime.now(timezone.utc)
                logger.info(f"Email sent to {recipient}: {response['MessageID']}")
            else:
                # Dev mode - just log
                message_log.status = "sent"
                message_log.sent_at = datetime.now(timezone.utc)
                logger.info(f"[DEV MODE] Email logged (not sent) to {recipient}")
                logger.info(f"[DEV MODE] Subject: {subject}")
                logger.info(f"[DEV MODE] Message: {body}")
        except Exception as e:
            message_log.status = "failed"
            message_log.error_message = str(e)
            message_log.provider_error_type = type(e).__name__
            logger.error(f"Failed to send email to {recipient}: {e}")

        try:
            db = database.get_db()
            await db.message_logs.insert_one(message_log.model_dump(mode="json"))
        except Exception as e:
            logger.error(f"Failed to store message log {message_log.message_id}: {e}")

        await create_audit_log(
            action=AuditAction.EMAIL_SENT if message_log.status == "sent" else AuditAction.EMAIL_FAILED,
            owner_id=owner_id,
            resource_type="message",
            resource_id=message_log.message_id,
            metadata={
                "tag": tag,
                "status": message_log.status,
                "postmark_id": message_log.postmark_message_id,
                "error": message_log.error_message,
                "provider_error_type": message_log.provider_error_type,
            }
        )

        return message_log

    def _build_html_body(self, subject: str, body: str) -> str:
        paragraphs = "".join(
            f'<p style="margin: 0 0 12px 0;">{escape(line)}</p>'
            for line in body.split("\n") if line.strip()
        )
        return f"""
        <html>
        <body style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px;">
            <div style="background-color: #0B1D3A; padding: 20px; border-radius: 8px 8px 0 0;">
                <h1 style="color: #ffffff; font-size: 20px; margin: 0;">{escape(subject)}</h1>
            </div>
            <div style="padding: 20px; border: 1px solid #e2e8f0; border-top: none; border-radius: 0 0 8px 8px;">
                {paragraphs}
            </div>
        </body>
        </html>
        """

email_service = EmailService()
