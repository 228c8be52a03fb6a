from pydantic import BaseModel, EmailStr, Field, ConfigDict
from typing import Optional, Dict, Any, Set
from datetime import date, datetime, timezone
from enum import Enum
import uuid

# ============================================================================
# ENUMS (System Constants)
# ============================================================================

class UserStatus(str, Enum):
    ACTIVE = "ACTIVE"
    DISABLED = "DISABLED"

class SourceType(str, Enum):
    """Record kinds that carry an expiry date and feed the renewal monitor."""
    SITE = "site"
    HOSTING = "hosting"
    MOBILE_APP = "mobile-app"

class UrgencyTier(str, Enum):
    EXPIRED = "EXPIRED"
    CRITICAL = "CRITICAL"  # 3 days or less
    WARNING = "WARNING"  # 2 weeks or less
    NOTICE = "NOTICE"  # 1 month or less

URGENCY_LABELS = {
    UrgencyTier.EXPIRED: "Expired",
    UrgencyTier.CRITICAL: "Expiring in 3 days or less",
    UrgencyTier.WARNING: "Expiring in 2 weeks or less",
    UrgencyTier.NOTICE: "Expiring in 1 month or less",
}

class LeadTime(str, Enum):
    ONE_MONTH = "one_month"
    TWO_WEEKS = "two_weeks"
    THREE_DAYS = "three_days"
    ON_EXPIRY_DAY = "on_expiry_day"

# Days before expiry on which each lead time fires
LEAD_TIME_DAYS = {
    LeadTime.ONE_MONTH: 30,
    LeadTime.TWO_WEEKS: 14,
    LeadTime.THREE_DAYS: 3,
    LeadTime.ON_EXPIRY_DAY: 0,
}

class DispatchStatus(str, Enum):
    SENT = "sent"
    SKIPPED = "skipped"
    FAILED = "failed"

class SkipReason(str, Enum):
    DISABLED = "disabled"
    NOT_DUE = "not-due"

class HostType(str, Enum):
    SHARED = "shared"
    RESELLER = "reseller"
    VPS = "vps"
    DEDICATED = "dedicated"

class HostingStatus(str, Enum):
    ACTIVE = "active"
    SUSPENDED = "suspended"
    REPORTED = "reported"
    EXPIRED = "expired"
    OTHER = "other"
    NEEDS_RENEWAL = "needs renewal"

class AppPlatform(str, Enum):
    IOS = "iOS"
    ANDROID = "Android"
    BOTH = "Both"

class DeveloperAccountType(str, Enum):
    APPLE = "apple"
    GOOGLE = "google"

class AuditAction(str, Enum):
    # Auth
    USER_REGISTERED = "USER_REGISTERED"
    USER_LOGIN_SUCCESS = "USER_LOGIN_SUCCESS"
    USER_LOGIN_FAILED = "USER_LOGIN_FAILED"

    # Records
    RECORD_CREATED = "RECORD_CREATED"
    RECORD_UPDATED = "RECORD_UPDATED"
    RECORD_DELETED = "RECORD_DELETED"

    # Notification settings
    SETTINGS_CREATED = "SETTINGS_CREATED"
    SETTINGS_UPDATED = "SETTINGS_UPDATED"

    # Email
    EMAIL_SENT = "EMAIL_SENT"
    EMAIL_FAILED = "EMAIL_FAILED"
    REMINDER_SENT = "REMINDER_SENT"
    REMINDER_FAILED = "REMINDER_FAILED"


def _now() -> datetime:
    return datetime.now(timezone.utc)

# ============================================================================
# AUTH
# ============================================================================

class RegisterRequest(BaseModel):
    email: EmailStr
    password: str
    full_name: Optional[str] = None

class LoginRequest(BaseModel):
    email: EmailStr
    password: str

class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: Dict[str, Any]

class User(BaseModel):
    model_config = ConfigDict(extra="ignore")

    user_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    email: EmailStr
    full_name: Optional[str] = None
    password_hash: str
    status: UserStatus = UserStatus.ACTIVE
    last_login: Optional[datetime] = None
    created_at: datetime = Field(default_factory=_now)

# ============================================================================
# AGENCY RECORDS
# ============================================================================

class Client(BaseModel):
    model_config = ConfigDict(extra="ignore")

    client_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    owner_id: str
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    created_at: datetime = Field(default_factory=_now)
    updated_at: datetime = Field(default_factory=_now)

class HostingAccount(BaseModel):
    model_config = ConfigDict(extra="ignore")

    hosting_account_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    owner_id: str
    provider: str
    server_login_url: Optional[str] = None
    host_type: HostType = HostType.SHARED
    username: Optional[str] = None
    email: Optional[str] = None
    password_hint: Optional[str] = None
    expiration_date: Optional[date] = None
    status: HostingStatus = HostingStatus.ACTIVE
    created_at: datetime = Field(default_factory=_now)
    updated_at: datetime = Field(default_factory=_now)

class Site(BaseModel):
    model_config = ConfigDict(extra="ignore")

    site_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    owner_id: str
    name: str
    type: Optional[str] = None
    url: Optional[str] = None
    host_id: Optional[str] = None
    host_name: Optional[str] = None  # Copied from the hosting account at write time
    domain_purchased_from: Optional[str] = None
    expiration_date: Optional[date] = None
    name_changed: bool = False
    old_domain_name: Optional[str] = None
    old_domain_expiration_date: Optional[date] = None
    amount_paid: float = 0
    amount_used_for_creation: float = 0
    created_at: datetime = Field(default_factory=_now)
    updated_at: datetime = Field(default_factory=_now)

class MobileApp(BaseModel):
    model_config = ConfigDict(extra="ignore")

    app_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    owner_id: str
    app_name: str
    platform: AppPlatform = AppPlatform.BOTH
    client_id: str
    client_name: Optional[str] = None  # Copied from the client at write time
    app_domain: Optional[str] = None
    date_created: Optional[str] = None
    renewal_date: Optional[date] = None
    ios_developer_account_id: Optional[str] = None
    google_developer_account_id: Optional[str] = None
    apple_live_url: Optional[str] = None
    google_live_url: Optional[str] = None
    app_cost: float = 0
    amount_spent: float = 0
    status: Optional[str] = None
    version: Optional[str] = None
    created_at: datetime = Field(default_factory=_now)
    updated_at: datetime = Field(default_factory=_now)

class DeveloperAccount(BaseModel):
    model_config = ConfigDict(extra="ignore")

    developer_account_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    owner_id: str
    account_type: DeveloperAccountType = DeveloperAccountType.APPLE
    email: str
    mobile_number: Optional[str] = None
    expiry_date: Optional[date] = None
    duns: Optional[str] = None
    company_name: Optional[str] = None
    date_created: Optional[str] = None
    status: str = "pending approval"
    created_at: datetime = Field(default_factory=_now)
    updated_at: datetime = Field(default_factory=_now)

# ============================================================================
# RENEWAL MONITOR
# ============================================================================

class LeadTimes(BaseModel):
    model_config = ConfigDict(extra="ignore")

    one_month: bool = True
    two_weeks: bool = True
    three_days: bool = True
    on_expiry_day: bool = True

class ReminderSettings(BaseModel):
    """Per-owner reminder settings (exactly one document per owner_id)."""
    model_config = ConfigDict(extra="ignore")

    settings_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    owner_id: str
    email_enabled: bool = True
    lead_times: LeadTimes = Field(default_factory=LeadTimes)
    created_at: datetime = Field(default_factory=_now)
    updated_at: datetime = Field(default_factory=_now)

    def enabled_lead_times(self) -> Set[LeadTime]:
        return {lt for lt in LeadTime if getattr(self.lead_times, lt.value)}

class ExpiringItem(BaseModel):
    """Derived on every aggregation pass; never persisted."""
    id: str
    owner_id: Optional[str] = None
    source_type: SourceType
    display_name: str
    expiry_date: str
    days_until_expiry: int
    urgency: Optional[UrgencyTier] = None

    @property
    def urgency_label(self) -> Optional[str]:
        return URGENCY_LABELS.get(self.urgency) if self.urgency else None

class DispatchOutcome(BaseModel):
    item_id: str
    source_type: SourceType
    status: DispatchStatus
    reason: Optional[SkipReason] = None
    message_id: Optional[str] = None
    error: Optional[str] = None

# ============================================================================
# LOGS
# ============================================================================

class AuditLog(BaseModel):
    model_config = ConfigDict(extra="ignore")

    audit_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    action: AuditAction
    actor_id: Optional[str] = None
    owner_id: Optional[str] = None
    resource_type: Optional[str] = None
    resource_id: Optional[str] = None
    before_state: Optional[Dict[str, Any]] = None
    after_state: Optional[Dict[str, Any]] = None
    metadata: Optional[Dict[str, Any]] = None
    timestamp: datetime = Field(default_factory=_now)

class MessageLog(BaseModel):
    model_config = ConfigDict(extra="ignore")

    message_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    postmark_message_id: Optional[str] = None
    owner_id: Optional[str] = None
    recipient: str
    subject: str
    status: str = "queued"
    sent_at: Optional[datetime] = None
    error_message: Optional[str] = None
    provider_error_type: Optional[str] = None
    created_at: datetime = Field(default_factory=_now)

class DashboardSummary(BaseModel):
    counts: Dict[str, int]
    expiring_by_urgency: Dict[str, int]
    expiring_total: int
