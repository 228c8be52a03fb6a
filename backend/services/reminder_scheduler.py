"""Reminder scheduler - decides whether an expiring item gets an email today, and sends it.

A reminder fires only on the exact day matching an enabled lead time
(30, 14, 3 or 0 days before expiry), unlike the aggregator's inclusive
lookahead window.
"""
from models import (
    DispatchOutcome, DispatchStatus, ExpiringItem, LEAD_TIME_DAYS, ReminderSettings,
    SkipReason, SourceType, AuditAction, URGENCY_LABELS
)
from services.email_service import email_service
from services.record_store import OwnerMissingFailure
from utils.audit import create_audit_log
from datetime import date
from typing import Optional, Tuple
import logging

logger = logging.getLogger(__name__)

SOURCE_LABELS = {
    SourceType.SITE: "Site",
    SourceType.HOSTING: "Hosting account",
    SourceType.MOBILE_APP: "Mobile app",
}


def is_reminder_due(days_until_expiry: int, settings: ReminderSettings) -> bool:
    for lead_time in settings.enabled_lead_times():
        if LEAD_TIME_DAYS[lead_time] == days_until_expiry:
            return True
    return False


def render_reminder(item: ExpiringItem) -> Tuple[str, str]:
    """Subject and plain-text body for one expiring item."""
    days = item.days_until_expiry
    if days == 0:
        when = "today"
    elif days == 1:
        when = "in 1 day"
    else:
        when = f"in {days} days"

    kind = SOURCE_LABELS[item.source_type]
    expiry = date.fromisoformat(item.expiry_date).strftime("%d %B %Y")
    subject = f"Renewal reminder: {item.display_name} expires {when}"
    body = "\n".join([
        "Hello,",
        f"{kind} \"{item.display_name}\" is due for renewal on {expiry}.",
        f"Status: {URGENCY_LABELS.get(item.urgency, 'Upcoming renewal')}",
        "Renew it before it lapses to avoid any interruption.",
    ])
    return subject, body


async def dispatch(item: ExpiringItem, settings: ReminderSettings, owner: Optional[dict]) -> DispatchOutcome:
    """Send the reminder for ``item`` if the owner's settings call for one today.

    Email failures are logged and reported in the outcome; they are never
    retried and never raised.
    """
    if not owner or not owner.get("user_id"):
        raise OwnerMissingFailure("Reminder dispatch requires an owner")

    if not settings.email_enabled:
        return DispatchOutcome(
            item_id=item.id,
            source_type=item.source_type,
            status=DispatchStatus.SKIPPED,
            reason=SkipReason.DISABLED,
        )

    if not is_reminder_due(item.days_until_expiry, settings):
        return DispatchOutcome(
            item_id=item.id,
            source_type=item.source_type,
            status=DispatchStatus.SKIPPED,
            reason=SkipReason.NOT_DUE,
        )

    subject, body = render_reminder(item)
    message_log = await email_service.send(
        recipient=owner["email"],
        subject=subject,
        body=body,
        owner_id=owner["user_id"],
    )

    if message_log.status == "sent":
        outcome = DispatchOutcome(
            item_id=item.id,
            source_type=item.source_type,
            status=DispatchStatus.SENT,
            message_id=message_log.message_id,
        )
    else:
        logger.warning(
            f"Reminder for {item.source_type.value} {item.id} not delivered to {owner['email']}: "
            f"{message_log.error_message}"
        )
        outcome = DispatchOutcome(
            item_id=item.id,
            source_type=item.source_type,
            status=DispatchStatus.FAILED,
            message_id=message_log.message_id,
            error=message_log.error_message,
        )

    await create_audit_log(
        action=AuditAction.REMINDER_SENT if outcome.status == DispatchStatus.SENT else AuditAction.REMINDER_FAILED,
        owner_id=owner["user_id"],
        resource_type=item.source_type.value,
        resource_id=item.id,
        metadata={
            "days_until_expiry": item.days_until_expiry,
            "expiry_date": item.expiry_date,
            "message_id": message_log.message_id,
        }
    )
    return outcome
