"""
Admin Dashboard Routes

GET /admin/dashboard - Engagement tiers, needs-attention list, top companies/jobs
GET /admin/students/activity - Every student's activity tier
GET /admin/companies/top - Applications per company
GET /admin/jobs/top - Applications per job
"""

from fastapi import APIRouter, Depends, Query
from typing import List, Optional

from unisphere.core.auth import Session, require_admin
from unisphere.schemas.schemas import (
    ActivityTier, CompanyRollup, DashboardResponse, DashboardSnapshot, JobRollup,
    StudentActivityListResponse
)
from unisphere.services.activity_service import (
    ActivityPolicy, build_company_rollup, build_dashboard, build_job_rollup, get_activity_policy,
    list_student_activity
)
from unisphere.services.dashboard_feed import get_dashboard_snapshot

router = APIRouter(prefix="/admin", tags=["Admin Dashboard"])


@router.get("/dashboard", response_model=DashboardResponse)
def get_dashboard(
    admin: Session = Depends(require_admin),
    snapshot: DashboardSnapshot = Depends(get_dashboard_snapshot),
    policy: ActivityPolicy = Depends(get_activity_policy)
):
    """Student engagement overview plus company and job rollups."""
    return build_dashboard(snapshot, policy=policy)


@router.get("/students/activity", response_model=StudentActivityListResponse)
def get_student_activity(
    tier: Optional[ActivityTier] = Query(None, description="Only students in this tier"),
    admin: Session = Depends(require_admin),
    snapshot: DashboardSnapshot = Depends(get_dashboard_snapshot),
    policy: ActivityPolicy = Depends(get_activity_policy)
):
    """Activity tier, count and last activity for every student."""
    return list_student_activity(snapshot, policy=policy, tier=tier)


@router.get("/companies/top", response_model=List[CompanyRollup])
def get_top_companies(
    limit: Optional[int] = Query(None, ge=1, le=20),
    admin: Session = Depends(require_admin),
    snapshot: DashboardSnapshot = Depends(get_dashboard_snapshot),
    policy: ActivityPolicy = Depends(get_activity_policy)
):
    """Companies ranked by applications received. Companies with none are left out."""
    return build_company_rollup(
        snapshot.jobs, snapshot.applications, limit or policy.top_companies_limit
    )


@router.get("/jobs/top", response_model=List[JobRollup])
def get_top_jobs(
    limit: Optional[int] = Query(None, ge=1, le=20),
    admin: Session = Depends(require_admin),
    snapshot: DashboardSnapshot = Depends(get_dashboard_snapshot),
    policy: ActivityPolicy = Depends(get_activity_policy)
):
    """Job postings ranked by applications received."""
    return build_job_rollup(
        snapshot.jobs, snapshot.applications, limit or policy.top_jobs_limit
    )
