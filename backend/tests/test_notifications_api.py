"""Tests for /api/notifications: expiring overview, settings, on-demand dispatch."""
from unittest.mock import AsyncMock, MagicMock, patch

from models import (
    DispatchOutcome, DispatchStatus, ExpiringItem, ReminderSettings, SkipReason, SourceType, UrgencyTier
)
from services.record_store import EXPIRY_SOURCE_STORES, FetchFailed, WriteFailed


def _item():
    return ExpiringItem(
        id="h1",
        owner_id="owner-1",
        source_type=SourceType.HOSTING,
        display_name="Hostinger",
        expiry_date="2026-03-03",
        days_until_expiry=2,
        urgency=UrgencyTier.CRITICAL,
    )


def test_expiring_requires_authentication(client):
    response = client.get("/api/notifications/expiring")

    assert response.status_code == 401


def test_expiring_returns_items_with_labels(client, owner_headers):
    with patch("routes.notifications.collect_expiring_items", new_callable=AsyncMock, return_value=[_item()]) as collect:
        response = client.get("/api/notifications/expiring", headers=owner_headers)

    assert response.status_code == 200
    data = response.json()
    assert data["error"] is None
    assert data["items"][0]["id"] == "h1"
    assert data["items"][0]["source_type"] == "hosting"
    assert data["items"][0]["urgency"] == "CRITICAL"
    assert data["items"][0]["urgency_label"] == "Expiring in 3 days or less"
    assert collect.call_args.args[0] == "owner-1"


def test_expiring_fetch_failure_degrades_to_empty_list(client, owner_headers):
    with patch("routes.notifications.collect_expiring_items", new_callable=AsyncMock, side_effect=FetchFailed("boom")):
        response = client.get("/api/notifications/expiring", headers=owner_headers)

    assert response.status_code == 200
    assert response.json() == {
        "items": [],
        "error": "Failed to fetch sites. Please try again later.",
    }


def test_get_settings_returns_defaults(client, owner_headers):
    settings = ReminderSettings(owner_id="owner-1")

    with patch("routes.notifications.get_or_create_settings", new_callable=AsyncMock, return_value=settings):
        response = client.get("/api/notifications/settings", headers=owner_headers)

    assert response.status_code == 200
    data = response.json()
    assert data["email_enabled"] is True
    assert data["lead_times"] == {
        "one_month": True,
        "two_weeks": True,
        "three_days": True,
        "on_expiry_day": True,
    }


def test_put_settings_passes_partial_update(client, owner_headers):
    settings = ReminderSettings(owner_id="owner-1", email_enabled=False)

    with patch("routes.notifications.update_settings", new_callable=AsyncMock, return_value=settings) as update:
        response = client.put(
            "/api/notifications/settings",
            headers=owner_headers,
            json={"email_enabled": False, "lead_times": {"three_days": False}},
        )

    assert response.status_code == 200
    assert response.json()["settings"]["email_enabled"] is False
    kwargs = update.call_args.kwargs
    assert kwargs["email_enabled"] is False
    assert kwargs["lead_times"]["three_days"] is False
    assert kwargs["lead_times"]["one_month"] is None


def test_put_settings_write_failure_is_500(client, owner_headers):
    with patch("routes.notifications.update_settings", new_callable=AsyncMock, side_effect=WriteFailed("boom")):
        response = client.put("/api/notifications/settings", headers=owner_headers, json={"email_enabled": True})

    assert response.status_code == 500
    assert response.json()["detail"] == "Failed to update notification settings"


def test_dispatch_runs_reminder_pass_for_current_owner(client, owner_headers):
    db = MagicMock()
    db.users.find_one = AsyncMock(return_value={"user_id": "owner-1", "email": "owner@agencydesk.io"})
    outcomes = [
        DispatchOutcome(item_id="h1", source_type=SourceType.HOSTING, status=DispatchStatus.SENT, message_id="m1"),
        DispatchOutcome(item_id="s1", source_type=SourceType.SITE, status=DispatchStatus.SKIPPED, reason=SkipReason.NOT_DUE),
    ]

    with patch("routes.notifications.database.get_db", return_value=db), \
         patch("routes.notifications.run_owner_reminders", new_callable=AsyncMock, return_value=outcomes) as run:
        response = client.post("/api/notifications/dispatch", headers=owner_headers)

    assert response.status_code == 200
    data = response.json()["outcomes"]
    assert [o["status"] for o in data] == ["sent", "skipped"]
    assert data[1]["reason"] == "not-due"
    assert run.call_args.args[0]["email"] == "owner@agencydesk.io"


def test_expiring_skips_unreadable_stored_dates(client, owner_headers):
    records = {
        SourceType.SITE: [
            {"site_id": "s1", "name": "bad.com", "expiration_date": "01/04/2024"},
            {"site_id": "s2", "name": "acme.com", "expiration_date": "2020-01-01"},
        ],
        SourceType.HOSTING: [],
        SourceType.MOBILE_APP: [],
    }
    patches = [
        patch.object(store, "list_expiring", AsyncMock(return_value=records[source_type]))
        for source_type, store in EXPIRY_SOURCE_STORES.items()
    ]
    for p in patches:
        p.start()
    try:
        response = client.get("/api/notifications/expiring", headers=owner_headers)
    finally:
        for p in patches:
            p.stop()

    assert response.status_code == 200
    data = response.json()
    assert data["error"] is None
    assert [i["id"] for i in data["items"]] == ["s2"]
    assert data["items"][0]["urgency"] == "EXPIRED"
