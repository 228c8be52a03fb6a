"""Tests for the record CRUD routes and their error mapping."""
from unittest.mock import AsyncMock, patch

from services.record_store import FetchFailed, InvalidReference, WriteFailed


def test_list_sites_requires_authentication(client):
    assert client.get("/api/sites").status_code == 401


def test_list_sites_returns_owner_records(client, owner_headers):
    sites = [{"site_id": "s1", "name": "acme.com", "owner_id": "owner-1"}]

    with patch("routes.sites.sites_store.list_for_owner", new_callable=AsyncMock, return_value=sites) as list_for_owner:
        response = client.get("/api/sites", headers=owner_headers)

    assert response.status_code == 200
    assert response.json() == {"sites": sites}
    list_for_owner.assert_awaited_once_with("owner-1")


def test_list_sites_fetch_failure_is_500_with_message(client, owner_headers):
    with patch("routes.sites.sites_store.list_for_owner", new_callable=AsyncMock, side_effect=FetchFailed("down")):
        response = client.get("/api/sites", headers=owner_headers)

    assert response.status_code == 500
    assert response.json()["detail"] == "Failed to fetch sites. Please try again later."


def test_add_site_with_unknown_host_is_400(client, owner_headers):
    with patch("routes.sites.create_site", new_callable=AsyncMock, side_effect=InvalidReference("Selected host not found")):
        response = client.post("/api/sites", headers=owner_headers, json={"name": "acme.com", "host_id": "nope"})

    assert response.status_code == 400
    assert response.json()["detail"] == "Selected host not found"


def test_add_site_requires_host(client, owner_headers):
    response = client.post("/api/sites", headers=owner_headers, json={"name": "acme.com"})

    assert response.status_code == 422
    assert "request_id" in response.json()


def test_update_unknown_site_is_404(client, owner_headers):
    with patch("routes.sites.update_site", new_callable=AsyncMock, return_value=None):
        response = client.put("/api/sites/missing", headers=owner_headers, json={"name": "x"})

    assert response.status_code == 404


def test_update_site_sends_only_given_fields(client, owner_headers):
    with patch("routes.sites.update_site", new_callable=AsyncMock, return_value={"site_id": "s1"}) as update:
        response = client.put("/api/sites/s1", headers=owner_headers, json={"expiration_date": "2026-05-01"})

    assert response.status_code == 200
    assert update.call_args.args == ("owner-1", "s1", {"expiration_date": "2026-05-01"})


def test_delete_client_write_failure_is_500(client, owner_headers):
    with patch("routes.clients.delete_record", new_callable=AsyncMock, side_effect=WriteFailed("down")):
        response = client.delete("/api/clients/c1", headers=owner_headers)

    assert response.status_code == 500
    assert response.json()["detail"] == "Failed to delete client. Please try again."


def test_delete_unknown_client_is_404(client, owner_headers):
    with patch("routes.clients.delete_record", new_callable=AsyncMock, return_value=False):
        response = client.delete("/api/clients/missing", headers=owner_headers)

    assert response.status_code == 404


def test_quick_host_creates_provider_only_account(client, owner_headers):
    account = {"hosting_account_id": "h1", "provider": "Hostinger"}

    with patch("routes.hosting.create_quick_host", new_callable=AsyncMock, return_value=account) as create:
        response = client.post("/api/hosting/quick", headers=owner_headers, json={"provider": "  Hostinger "})

    assert response.status_code == 200
    assert response.json()["hosting_account"] == account
    create.assert_awaited_once_with("owner-1", "Hostinger")


def test_quick_host_rejects_blank_provider(client, owner_headers):
    response = client.post("/api/hosting/quick", headers=owner_headers, json={"provider": "  "})

    assert response.status_code == 400


def test_add_mobile_app_with_unknown_client_is_400(client, owner_headers):
    with patch("routes.mobile_apps.create_mobile_app", new_callable=AsyncMock,
               side_effect=InvalidReference("Selected client not found")):
        response = client.post(
            "/api/mobile-apps",
            headers=owner_headers,
            json={"app_name": "Acme Shop", "client_id": "nope", "platform": "Android"},
        )

    assert response.status_code == 400
    assert response.json()["detail"] == "Selected client not found"


def test_developer_accounts_list_carries_app_counts(client, owner_headers):
    accounts = [{"developer_account_id": "d1", "account_type": "apple", "mobile_apps_count": 2}]

    with patch("routes.developer_accounts.list_developer_accounts", new_callable=AsyncMock, return_value=accounts):
        response = client.get("/api/developer-accounts", headers=owner_headers)

    assert response.status_code == 200
    assert response.json()["developer_accounts"][0]["mobile_apps_count"] == 2


def test_dashboard_summary_counts(client, owner_headers):
    from models import ExpiringItem, SourceType, UrgencyTier

    items = [
        ExpiringItem(id="s1", source_type=SourceType.SITE, display_name="a", expiry_date="2026-03-01",
                     days_until_expiry=-1, urgency=UrgencyTier.EXPIRED),
        ExpiringItem(id="a1", source_type=SourceType.MOBILE_APP, display_name="b", expiry_date="2026-03-20",
                     days_until_expiry=19, urgency=UrgencyTier.NOTICE),
    ]

    with patch("services.record_store.RecordStore.count_for_owner", new_callable=AsyncMock, return_value=3), \
         patch("routes.dashboard.collect_expiring_items", new_callable=AsyncMock, return_value=items):
        response = client.get("/api/dashboard/summary", headers=owner_headers)

    assert response.status_code == 200
    data = response.json()
    assert data["counts"]["sites"] == 3
    assert data["expiring_total"] == 2
    assert data["expiring_by_urgency"] == {"EXPIRED": 1, "CRITICAL": 0, "WARNING": 0, "NOTICE": 1}


def test_health(client):
    response = client.get("/api/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_add_hosting_rejects_non_iso_expiration_date(client, owner_headers):
    with patch("routes.hosting.create_hosting_account", new_callable=AsyncMock) as create:
        response = client.post(
            "/api/hosting", headers=owner_headers, json={"provider": "Bluehost", "expiration_date": "01/04/2024"}
        )

    assert response.status_code == 422
    create.assert_not_called()


def test_add_hosting_passes_iso_expiration_date(client, owner_headers):
    with patch("routes.hosting.create_hosting_account", new_callable=AsyncMock, return_value={"hosting_account_id": "h1"}) as create:
        response = client.post(
            "/api/hosting", headers=owner_headers, json={"provider": "Bluehost", "expiration_date": "2026-04-01"}
        )

    assert response.status_code == 200
    assert create.call_args.args[1]["expiration_date"] == "2026-04-01"


def test_update_mobile_app_rejects_non_iso_renewal_date(client, owner_headers):
    with patch("routes.mobile_apps.update_mobile_app", new_callable=AsyncMock) as update:
        response = client.put("/api/mobile-apps/a1", headers=owner_headers, json={"renewal_date": "1/4/2026"})

    assert response.status_code == 422
    update.assert_not_called()
