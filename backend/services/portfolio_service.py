"""Agency portfolio records: clients, sites, hosting accounts, mobile apps and developer accounts.

Write paths keep the denormalized display copies in step (a site's
host_name, a mobile app's client_name) and record an audit entry.
"""
from models import (
    AppPlatform, AuditAction, Client, DeveloperAccount, DeveloperAccountType,
    HostingAccount, MobileApp, Site
)
from services.expiration_aggregator import days_until_expiry, parse_expiry_date
from services.record_store import (
    RecordStore, InvalidReference, clients_store, sites_store, hosting_store,
    mobile_apps_store, developer_accounts_store
)
from utils.audit import create_audit_log
from datetime import date
from typing import Optional, Dict, Any, List
import logging

logger = logging.getLogger(__name__)

EXPIRING_SOON_DAYS = 30

MOBILE_APP_SITE_TYPE = "Mobile App"

RESOURCE_TYPES = {
    "clients": "client",
    "sites": "site",
    "hosting_accounts": "hosting_account",
    "mobile_apps": "mobile_app",
    "developer_accounts": "developer_account",
}

# ============================================================================
# Generic write helpers
# ============================================================================

async def create_record(store: RecordStore, model_cls, owner_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
    record = model_cls(owner_id=owner_id, **data)
    doc = await store.insert(owner_id, record.model_dump(mode="json"))

    await create_audit_log(
        action=AuditAction.RECORD_CREATED,
        actor_id=owner_id,
        owner_id=owner_id,
        resource_type=RESOURCE_TYPES[store.collection_name],
        resource_id=doc[store.id_field],
        after_state=doc
    )
    logger.info(f"{RESOURCE_TYPES[store.collection_name]} created by owner {owner_id}: {doc[store.id_field]}")
    return doc


async def update_record(store: RecordStore, owner_id: str, record_id: str, changes: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    before = await store.get_by_id(owner_id, record_id)
    if not before:
        return None

    updated = await store.update_by_id(owner_id, record_id, changes)

    await create_audit_log(
        action=AuditAction.RECORD_UPDATED,
        actor_id=owner_id,
        owner_id=owner_id,
        resource_type=RESOURCE_TYPES[store.collection_name],
        resource_id=record_id,
        before_state=before,
        after_state=updated
    )
    return updated


async def delete_record(store: RecordStore, owner_id: str, record_id: str) -> bool:
    deleted = await store.delete_by_id(owner_id, record_id)
    if deleted:
        await create_audit_log(
            action=AuditAction.RECORD_DELETED,
            actor_id=owner_id,
            owner_id=owner_id,
            resource_type=RESOURCE_TYPES[store.collection_name],
            resource_id=record_id
        )
    return deleted

# ============================================================================
# Clients
# ============================================================================

async def create_client(owner_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
    return await create_record(clients_store, Client, owner_id, data)

# ============================================================================
# Hosting accounts
# ============================================================================

async def create_hosting_account(owner_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
    return await create_record(hosting_store, HostingAccount, owner_id, data)


async def create_quick_host(owner_id: str, provider: str) -> Dict[str, Any]:
    """Provider-only hosting account, added from the site form."""
    return await create_record(hosting_store, HostingAccount, owner_id, {"provider": provider})


def is_expiring_soon(expiration_date: Optional[str], as_of: date) -> bool:
    try:
        expiry = parse_expiry_date(expiration_date)
    except ValueError:
        logger.warning(f"Unreadable hosting expiration_date: {expiration_date!r}")
        return False
    if expiry is None:
        return False
    return days_until_expiry(expiry, as_of) <= EXPIRING_SOON_DAYS


async def list_hosting_accounts(owner_id: str, as_of: date) -> List[Dict[str, Any]]:
    accounts = await hosting_store.list_for_owner(owner_id)
    for account in accounts:
        account["expiring_soon"] = is_expiring_soon(account.get("expiration_date"), as_of)
    return accounts

# ============================================================================
# Sites
# ============================================================================

async def _host_name(owner_id: str, host_id: Optional[str]) -> str:
    host = await hosting_store.get_by_id(owner_id, host_id) if host_id else None
    if not host:
        raise InvalidReference("Selected host not found")
    return host["provider"]


async def create_site(owner_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
    data = {**data, "host_name": await _host_name(owner_id, data.get("host_id"))}
    return await create_record(sites_store, Site, owner_id, data)


async def update_site(owner_id: str, site_id: str, changes: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    current = await sites_store.get_by_id(owner_id, site_id)
    if not current:
        return None
    host_id = changes.get("host_id", current.get("host_id"))
    changes = {**changes, "host_name": await _host_name(owner_id, host_id)}
    return await update_record(sites_store, owner_id, site_id, changes)

# ============================================================================
# Mobile apps
# ============================================================================

async def _client_name(owner_id: str, client_id: Optional[str]) -> str:
    client = await clients_store.get_by_id(owner_id, client_id) if client_id else None
    if not client:
        raise InvalidReference("Selected client not found")
    return client["name"]


def _platform_developer_accounts(data: Dict[str, Any], platform: str) -> Dict[str, Any]:
    """Drop developer-account links and store URLs that do not apply to the app's platform."""
    data = dict(data)
    if platform not in (AppPlatform.IOS.value, AppPlatform.BOTH.value):
        data["ios_developer_account_id"] = None
        data["apple_live_url"] = None
    if platform not in (AppPlatform.ANDROID.value, AppPlatform.BOTH.value):
        data["google_developer_account_id"] = None
        data["google_live_url"] = None
    return data


async def create_mobile_app(owner_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
    data = {**data, "client_name": await _client_name(owner_id, data.get("client_id"))}
    platform = data.get("platform") or AppPlatform.BOTH.value
    app = await create_record(mobile_apps_store, MobileApp, owner_id, _platform_developer_accounts(data, platform))

    # The app's domain is tracked alongside the agency's other sites
    if app.get("app_domain"):
        site = Site(owner_id=owner_id, name=app["app_name"], url=app["app_domain"], type=MOBILE_APP_SITE_TYPE)
        await sites_store.insert(owner_id, site.model_dump(mode="json"))

    return app


async def update_mobile_app(owner_id: str, app_id: str, changes: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    current = await mobile_apps_store.get_by_id(owner_id, app_id)
    if not current:
        return None
    client_id = changes.get("client_id", current.get("client_id"))
    changes = {**changes, "client_name": await _client_name(owner_id, client_id)}
    platform = changes.get("platform") or current.get("platform") or AppPlatform.BOTH.value
    changes = _platform_developer_accounts(changes, platform)
    return await update_record(mobile_apps_store, owner_id, app_id, changes)

# ============================================================================
# Developer accounts
# ============================================================================

async def create_developer_account(owner_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
    return await create_record(developer_accounts_store, DeveloperAccount, owner_id, data)


def count_linked_apps(account: Dict[str, Any], apps: List[Dict[str, Any]]) -> int:
    link_field = (
        "ios_developer_account_id"
        if account.get("account_type") == DeveloperAccountType.APPLE.value
        else "google_developer_account_id"
    )
    return sum(1 for app in apps if app.get(link_field) == account["developer_account_id"])


async def list_developer_accounts(owner_id: str) -> List[Dict[str, Any]]:
    accounts = await developer_accounts_store.list_for_owner(owner_id)
    apps = await mobile_apps_store.list_for_owner(owner_id)
    for account in accounts:
        account["mobile_apps_count"] = count_linked_apps(account, apps)
    return accounts
