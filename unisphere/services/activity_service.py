"""
Student Activity Service - engagement tiers and admin dashboard aggregates.

PURPOSE:
Tell career-services staff which students are engaging (applying to jobs,
registering for events) and which ones need outreach.

HOW IT WORKS:
1. Group dated applications + event registrations by student (records.py)
2. Classify each student into a tier by recency, upgraded by volume
3. Fold classifications into tier counts, a needs-attention list and
   chart slices
4. Independently, roll applications up per company and per job
5. Monthly series: job postings, and active vs. inactive students replayed
   as of each month's end

Everything here is a pure function of the snapshot and "now". Nothing is
cached: every dashboard request or collection update recomputes from scratch.
"""

from datetime import datetime, timedelta, timezone
from typing import Dict, Iterable, List, Optional

from pydantic import BaseModel, ConfigDict

from unisphere.core.config import Settings, get_settings
from unisphere.schemas.schemas import (
    ActivityClassification,
    ActivityEvent,
    ActivitySummary,
    ActivityTier,
    ApplicationRecord,
    CompanyRollup,
    DashboardResponse,
    DashboardSnapshot,
    EventRegistrationRecord,
    JobRecord,
    JobRollup,
    MonthlyActivity,
    MonthlyCount,
    NeedsAttentionEntry,
    PlatformTotals,
    StudentActivityListResponse,
    StudentActivityResponse,
    StudentRecord,
    TierCounts,
    TierSlice,
    TIER_LABELS,
    TIER_ORDER,
)
from unisphere.services.records import as_utc, group_activity_events


# ============================================================
# POLICY
# ============================================================

class ActivityPolicy(BaseModel):
    """Thresholds and page sizes for the engagement dashboard."""

    model_config = ConfigDict(frozen=True)

    highly_active_window: timedelta = timedelta(days=30)
    low_activity_window: timedelta = timedelta(days=60)
    highly_active_min_count: int = 3
    needs_attention_limit: int = 8
    top_companies_limit: int = 5
    top_jobs_limit: int = 5
    trend_months: int = 6

    @classmethod
    def from_settings(cls, settings: Settings) -> "ActivityPolicy":
        return cls(
            highly_active_window=timedelta(days=settings.highly_active_window_days),
            low_activity_window=timedelta(days=settings.low_activity_window_days),
            highly_active_min_count=settings.highly_active_min_count,
            needs_attention_limit=settings.needs_attention_limit,
            top_companies_limit=settings.top_companies_limit,
            top_jobs_limit=settings.top_jobs_limit,
            trend_months=settings.trend_months,
        )


DEFAULT_POLICY = ActivityPolicy()


def get_activity_policy() -> ActivityPolicy:
    """FastAPI dependency - policy from the current settings."""
    return ActivityPolicy.from_settings(get_settings())


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


# ============================================================
# RECENCY CLASSIFIER
# ============================================================

def classify_activity(
    last_activity_at: Optional[datetime],
    activity_count: int,
    now: datetime,
    policy: ActivityPolicy = DEFAULT_POLICY
) -> ActivityTier:
    """
    Assign an engagement tier. First match wins:

    1. no activity at all                        -> inactive
    2. within the recent window, count >= min    -> highly_active
    3. within the recent window                  -> active
    4. within the low-activity window            -> low_activity
    5. older                                     -> inactive

    Both windows are inclusive. Volume only upgrades a recent student; it
    never rescues a stale one. Naive datetimes are read as UTC.
    """
    if last_activity_at is None:
        return ActivityTier.inactive

    age = as_utc(now) - as_utc(last_activity_at)

    if age <= policy.highly_active_window:
        if activity_count >= policy.highly_active_min_count:
            return ActivityTier.highly_active
        return ActivityTier.active

    if age <= policy.low_activity_window:
        return ActivityTier.low_activity

    return ActivityTier.inactive


def classify_student(
    student_id: str,
    events: List[ActivityEvent],
    now: datetime,
    policy: ActivityPolicy = DEFAULT_POLICY
) -> ActivityClassification:
    """Classify one student from their activity events; the latest one is reported."""
    latest = max(events, key=lambda event: as_utc(event.occurred_at)) if events else None
    return ActivityClassification(
        student_id=student_id,
        tier=classify_activity(latest.occurred_at if latest else None, len(events), now, policy),
        last_activity_at=latest.occurred_at if latest else None,
        activity_count=len(events),
        last_activity_kind=latest.kind if latest else None,
        last_activity_label=latest.label if latest else None,
    )


def _job_titles(jobs: Iterable[JobRecord]) -> Dict[str, str]:
    titles: Dict[str, str] = {}
    for job in jobs:
        titles.setdefault(job.id, job.title)
    return titles


def classify_students(
    students: Iterable[StudentRecord],
    applications: Iterable[ApplicationRecord],
    registrations: Iterable[EventRegistrationRecord],
    now: datetime,
    policy: ActivityPolicy = DEFAULT_POLICY,
    jobs: Iterable[JobRecord] = ()
) -> List[ActivityClassification]:
    """
    Classify every student, in the order the students were given.

    `jobs` only supplies titles for labelling the last activity.
    """
    events_by_student = group_activity_events(applications, registrations, _job_titles(jobs))
    return [
        classify_student(student.id, events_by_student.get(student.id, []), now, policy)
        for student in students
    ]


# ============================================================
# AGGREGATE BUILDER
# ============================================================

# Outreach priority: inactive students come before low-activity ones
NEEDS_ATTENTION_RANK = {
    ActivityTier.inactive: 0,
    ActivityTier.low_activity: 1,
}


def count_tiers(classifications: Iterable[ActivityClassification]) -> TierCounts:
    counts = {tier.value: 0 for tier in TIER_ORDER}
    for item in classifications:
        counts[item.tier.value] += 1
    return TierCounts(**counts)


def tier_distribution(tier_counts: TierCounts) -> List[TierSlice]:
    """Chart slices in tier order; empty tiers are left out."""
    slices = []
    for tier in TIER_ORDER:
        count = getattr(tier_counts, tier.value)
        if count > 0:
            slices.append(TierSlice(tier=tier, label=TIER_LABELS[tier], count=count))
    return slices


def needs_attention(
    students: Iterable[StudentRecord],
    classifications: Iterable[ActivityClassification],
    limit: int
) -> List[NeedsAttentionEntry]:
    """
    Low-activity and inactive students, inactive first, then fewest
    activities first. The sort is stable, so equal keys keep input order.
    """
    students_by_id: Dict[str, StudentRecord] = {s.id: s for s in students}
    flagged = [c for c in classifications if c.tier in NEEDS_ATTENTION_RANK]
    flagged.sort(key=lambda c: (NEEDS_ATTENTION_RANK[c.tier], c.activity_count))

    entries = []
    for item in flagged[:limit]:
        student = students_by_id.get(item.student_id)
        entries.append(NeedsAttentionEntry(
            student_id=item.student_id,
            display_name=student.display_name if student else None,
            email=student.email if student else "",
            tier=item.tier,
            activity_count=item.activity_count,
            last_activity_at=item.last_activity_at,
            last_activity_kind=item.last_activity_kind,
            last_activity_label=item.last_activity_label,
        ))
    return entries


def build_activity_summary(
    students: List[StudentRecord],
    classifications: List[ActivityClassification],
    policy: ActivityPolicy = DEFAULT_POLICY
) -> ActivitySummary:
    tier_counts = count_tiers(classifications)
    return ActivitySummary(
        total_students=len(classifications),
        tier_counts=tier_counts,
        needs_attention=needs_attention(students, classifications, policy.needs_attention_limit),
        distribution=tier_distribution(tier_counts),
    )


def build_platform_totals(students: List[StudentRecord], jobs: List[JobRecord]) -> PlatformTotals:
    """Headline counts. Jobs are counted once per id; companies by distinct name."""
    job_ids = {job.id for job in jobs}
    companies = {job.company for job in jobs if job.company}
    return PlatformTotals(
        total_students=len(students),
        total_jobs=len(job_ids),
        total_companies=len(companies),
    )


# ============================================================
# COMPANY / JOB ROLLUPS
# ============================================================

def _applications_per_job(applications: Iterable[ApplicationRecord]) -> Dict[str, int]:
    counts: Dict[str, int] = {}
    for app in applications:
        if app.job_id:
            counts[app.job_id] = counts.get(app.job_id, 0) + 1
    return counts


def _unique_jobs(jobs: Iterable[JobRecord]) -> Dict[str, JobRecord]:
    """First record per job id, in encounter order."""
    unique: Dict[str, JobRecord] = {}
    for job in jobs:
        unique.setdefault(job.id, job)
    return unique


def build_company_rollup(
    jobs: Iterable[JobRecord],
    applications: Iterable[ApplicationRecord],
    limit: int = 5
) -> List[CompanyRollup]:
    """
    Applications per company, most applied-to first, top `limit`.

    Companies are encountered in job order; ties keep that order.
    Applications pointing at unknown jobs are ignored, and companies whose
    jobs received nothing never appear.
    """
    per_job = _applications_per_job(applications)

    per_company: Dict[str, int] = {}
    for job_id, job in _unique_jobs(jobs).items():
        count = per_job.get(job_id, 0)
        if count:
            per_company[job.company] = per_company.get(job.company, 0) + count

    ranked = sorted(per_company.items(), key=lambda item: item[1], reverse=True)
    return [
        CompanyRollup(company_name=name, application_count=count)
        for name, count in ranked[:limit]
    ]


def build_job_rollup(
    jobs: Iterable[JobRecord],
    applications: Iterable[ApplicationRecord],
    limit: int = 5
) -> List[JobRollup]:
    """Same rules as build_company_rollup, one row per job."""
    per_job = _applications_per_job(applications)

    rows = [
        JobRollup(
            job_id=job_id,
            title=job.title,
            company_name=job.company,
            application_count=per_job[job_id],
        )
        for job_id, job in _unique_jobs(jobs).items()
        if per_job.get(job_id)
    ]
    rows.sort(key=lambda row: row.application_count, reverse=True)
    return rows[:limit]


# ============================================================
# MONTHLY TRENDS
# ============================================================

def _month_key(moment: datetime) -> str:
    return f"{moment.year:04d}-{moment.month:02d}"


def month_starts(now: datetime, months: int) -> List[datetime]:
    """First instant of each of the last `months` months, oldest first, ending with now's month."""
    now = now.astimezone(timezone.utc)
    year, month = now.year, now.month
    starts = []
    for _ in range(months):
        starts.append(datetime(year, month, 1, tzinfo=timezone.utc))
        year, month = (year - 1, 12) if month == 1 else (year, month - 1)
    return starts[::-1]


def _next_month(start: datetime) -> datetime:
    if start.month == 12:
        return start.replace(year=start.year + 1, month=1)
    return start.replace(month=start.month + 1)


def build_job_postings_trend(
    jobs: Iterable[JobRecord],
    now: datetime,
    months: int = 6
) -> List[MonthlyCount]:
    """Jobs posted per calendar month (UTC). Undated jobs are left out; empty months are kept."""
    counts = {_month_key(start): 0 for start in month_starts(now, months)}
    for job in _unique_jobs(jobs).values():
        if job.posted_at is None:
            continue
        key = _month_key(as_utc(job.posted_at))
        if key in counts:
            counts[key] += 1
    return [MonthlyCount(month=key, count=count) for key, count in counts.items()]


def build_activity_trend(
    students: List[StudentRecord],
    applications: List[ApplicationRecord],
    registrations: List[EventRegistrationRecord],
    now: datetime,
    policy: ActivityPolicy = DEFAULT_POLICY
) -> List[MonthlyActivity]:
    """
    Active vs. inactive students at the end of each recent month.

    Each point replays the classifier as of min(month end, now), using only
    activity up to that moment. Students created after that moment are not
    counted yet. "Active" is any tier other than inactive.
    """
    events_by_student = group_activity_events(applications, registrations)

    trend = []
    for start in month_starts(now, policy.trend_months):
        as_of = min(_next_month(start) - timedelta(microseconds=1), now)
        active = inactive = 0
        for student in students:
            if student.created_at and as_utc(student.created_at) > as_of:
                continue
            seen = [
                event for event in events_by_student.get(student.id, [])
                if as_utc(event.occurred_at) <= as_of
            ]
            tier = classify_student(student.id, seen, as_of, policy).tier
            if tier == ActivityTier.inactive:
                inactive += 1
            else:
                active += 1
        trend.append(MonthlyActivity(month=_month_key(start), active=active, inactive=inactive))
    return trend


# ============================================================
# DASHBOARD
# ============================================================

def build_dashboard(
    snapshot: DashboardSnapshot,
    now: Optional[datetime] = None,
    policy: ActivityPolicy = DEFAULT_POLICY
) -> DashboardResponse:
    """
    Full admin dashboard view model from whatever snapshot is held.

    The four collections may come from different points in time; no attempt
    is made to reconcile them.
    """
    now = as_utc(now or utc_now())

    classifications = classify_students(
        snapshot.students, snapshot.applications, snapshot.registrations, now, policy,
        jobs=snapshot.jobs,
    )

    return DashboardResponse(
        generated_at=now,
        totals=build_platform_totals(snapshot.students, snapshot.jobs),
        activity=build_activity_summary(snapshot.students, classifications, policy),
        top_companies=build_company_rollup(
            snapshot.jobs, snapshot.applications, policy.top_companies_limit
        ),
        top_jobs=build_job_rollup(
            snapshot.jobs, snapshot.applications, policy.top_jobs_limit
        ),
        job_postings_trend=build_job_postings_trend(snapshot.jobs, now, policy.trend_months),
        activity_trend=build_activity_trend(
            snapshot.students, snapshot.applications, snapshot.registrations, now, policy
        ),
    )


def list_student_activity(
    snapshot: DashboardSnapshot,
    now: Optional[datetime] = None,
    policy: ActivityPolicy = DEFAULT_POLICY,
    tier: Optional[ActivityTier] = None
) -> StudentActivityListResponse:
    """Every student's classification, optionally filtered to one tier."""
    now = as_utc(now or utc_now())

    classifications = classify_students(
        snapshot.students, snapshot.applications, snapshot.registrations, now, policy,
        jobs=snapshot.jobs,
    )

    students = []
    for student, item in zip(snapshot.students, classifications):
        if tier is not None and item.tier != tier:
            continue
        students.append(StudentActivityResponse(
            student_id=student.id,
            display_name=student.display_name,
            email=student.email,
            tier=item.tier,
            activity_count=item.activity_count,
            last_activity_at=item.last_activity_at,
            last_activity_kind=item.last_activity_kind,
            last_activity_label=item.last_activity_label,
        ))

    return StudentActivityListResponse(students=students, total=len(students))
