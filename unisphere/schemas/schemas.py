"""
Pydantic Schemas - Records and API Response Validation

All record and response schemas in one file for simplicity.

Records (StudentRecord, JobRecord, ...) are the canonical shapes the
document-store rows are normalized into. Responses are the dashboard
view model the admin frontend renders.
"""

from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime
from enum import Enum


# ============================================================
# ENUMS
# ============================================================

class UserRole(str, Enum):
    student = "student"
    admin = "admin"


class JobStatus(str, Enum):
    active = "Active"
    pending = "Pending"
    expired = "Expired"


class ActivityKind(str, Enum):
    application = "application"
    event_registration = "event_registration"


class ActivityTier(str, Enum):
    """Declared from most to least engaged; see TIER_ORDER."""
    highly_active = "highly_active"
    active = "active"
    low_activity = "low_activity"
    inactive = "inactive"


TIER_ORDER = list(ActivityTier)

TIER_LABELS = {
    ActivityTier.highly_active: "Highly Active",
    ActivityTier.active: "Active",
    ActivityTier.low_activity: "Low Activity",
    ActivityTier.inactive: "Inactive",
}


# ============================================================
# SOURCE RECORDS (normalized at the ingestion boundary)
# ============================================================

class StudentRecord(BaseModel):
    id: str
    display_name: Optional[str] = None
    email: str = ""
    created_at: Optional[datetime] = None

class JobRecord(BaseModel):
    id: str
    title: str = ""
    company: str = ""
    status: Optional[JobStatus] = None
    posted_at: Optional[datetime] = None

class ApplicationRecord(BaseModel):
    id: str
    job_id: Optional[str] = None
    student_id: Optional[str] = None
    applied_at: Optional[datetime] = None

class EventRegistrationRecord(BaseModel):
    id: str
    student_id: Optional[str] = None
    registered_at: Optional[datetime] = None
    event_id: Optional[str] = None
    event_name: Optional[str] = None


# ============================================================
# DERIVED RECORDS
# ============================================================

class ActivityEvent(BaseModel):
    student_id: str
    occurred_at: datetime
    kind: ActivityKind
    label: Optional[str] = None   # job title or event name

class ActivityClassification(BaseModel):
    student_id: str
    tier: ActivityTier
    last_activity_at: Optional[datetime] = None
    activity_count: int = Field(0, ge=0)
    last_activity_kind: Optional[ActivityKind] = None
    last_activity_label: Optional[str] = None


# ============================================================
# DASHBOARD SCHEMAS
# ============================================================

class TierCounts(BaseModel):
    highly_active: int = 0
    active: int = 0
    low_activity: int = 0
    inactive: int = 0

class NeedsAttentionEntry(BaseModel):
    student_id: str
    display_name: Optional[str] = None
    email: str = ""
    tier: ActivityTier
    activity_count: int
    last_activity_at: Optional[datetime] = None
    last_activity_kind: Optional[ActivityKind] = None
    last_activity_label: Optional[str] = None

class TierSlice(BaseModel):
    tier: ActivityTier
    label: str
    count: int

class ActivitySummary(BaseModel):
    total_students: int
    tier_counts: TierCounts
    needs_attention: List[NeedsAttentionEntry] = []
    distribution: List[TierSlice] = []

class CompanyRollup(BaseModel):
    company_name: str
    application_count: int

class JobRollup(BaseModel):
    job_id: str
    title: str
    company_name: str
    application_count: int

class PlatformTotals(BaseModel):
    total_students: int = 0
    total_jobs: int = 0
    total_companies: int = 0

class MonthlyCount(BaseModel):
    month: str   # YYYY-MM
    count: int

class MonthlyActivity(BaseModel):
    """Students with any standing activity vs. none, as of the month's end."""
    month: str
    active: int
    inactive: int

class DashboardResponse(BaseModel):
    generated_at: datetime
    totals: PlatformTotals
    activity: ActivitySummary
    top_companies: List[CompanyRollup] = []
    top_jobs: List[JobRollup] = []
    job_postings_trend: List[MonthlyCount] = []
    activity_trend: List[MonthlyActivity] = []

class StudentActivityResponse(BaseModel):
    student_id: str
    display_name: Optional[str] = None
    email: str = ""
    tier: ActivityTier
    activity_count: int
    last_activity_at: Optional[datetime] = None
    last_activity_kind: Optional[ActivityKind] = None
    last_activity_label: Optional[str] = None

class StudentActivityListResponse(BaseModel):
    students: List[StudentActivityResponse]
    total: int


# ============================================================
# SESSION SCHEMAS
# ============================================================

class SessionResponse(BaseModel):
    user_id: str
    role: UserRole
    email: Optional[str] = None


# ============================================================
# SNAPSHOT (the four source collections as currently held)
# ============================================================

class DashboardSnapshot(BaseModel):
    students: List[StudentRecord] = []
    jobs: List[JobRecord] = []
    applications: List[ApplicationRecord] = []
    registrations: List[EventRegistrationRecord] = []
