"""Shared fixtures: record builders, fake Mongo collections, API client."""

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from unisphere.core.auth import Session, create_session_token
from unisphere.main import app
from unisphere.schemas.schemas import (
    ApplicationRecord,
    DashboardSnapshot,
    EventRegistrationRecord,
    JobRecord,
    StudentRecord,
    UserRole,
)
from unisphere.services.dashboard_feed import get_dashboard_snapshot

NOW = datetime(2025, 6, 30, 12, 0, tzinfo=timezone.utc)


def days_ago(days, now=NOW):
    return now - timedelta(days=days)


def student(student_id, name=None):
    return StudentRecord(
        id=student_id,
        display_name=name or student_id.upper(),
        email=f"{student_id}@student.edu",
    )


def application(app_id, student_id, applied_at, job_id="job-1"):
    return ApplicationRecord(id=app_id, job_id=job_id, student_id=student_id, applied_at=applied_at)


def registration(reg_id, student_id, registered_at, event_name=None):
    return EventRegistrationRecord(
        id=reg_id, student_id=student_id, registered_at=registered_at, event_name=event_name
    )


def job(job_id, company, title=None, posted_at=None):
    return JobRecord(
        id=job_id, title=title or f"Role {job_id}", company=company, status="Active", posted_at=posted_at
    )


class FakeStream:
    """Stands in for a pymongo ChangeStream."""

    def __init__(self, events):
        self.events = list(events)
        self.closed = False

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()
        return False

    def __iter__(self):
        return iter(self.events)

    def close(self):
        self.closed = True


class FakeCollection:
    """Just enough of pymongo's Collection for find() and watch()."""

    def __init__(self, docs=None, changes=None):
        self.docs = list(docs or [])
        self.changes = list(changes or [])
        self.streams = []

    def find(self):
        return iter([dict(doc) for doc in self.docs])

    def watch(self):
        stream = FakeStream(self.changes)
        self.streams.append(stream)
        return stream


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def scenario_snapshot():
    """
    S1: 3 applications, latest 5 days ago     -> highly active
    S2: 1 registration 45 days ago            -> low activity
    S3: nothing                               -> inactive
    """
    return DashboardSnapshot(
        students=[student("s1"), student("s2"), student("s3")],
        jobs=[job("job-1", "TechCorp"), job("job-2", "Analytics Pro")],
        applications=[
            application("a1", "s1", days_ago(5), "job-1"),
            application("a2", "s1", days_ago(12), "job-1"),
            application("a3", "s1", days_ago(20), "job-2"),
        ],
        registrations=[registration("r1", "s2", days_ago(45))],
    )


@pytest.fixture
def fake_collections():
    return {
        "users": FakeCollection([
            {"_id": "u1", "displayName": "Ahmad Rahman", "email": "ahmad@student.edu", "role": "student"},
            {"_id": "u2", "name": "Siti Nurhaliza", "email": "siti@student.edu"},
            {"_id": "admin-1", "email": "admin@unisphere.edu", "role": "admin"},
        ]),
        "jobs": FakeCollection([
            {"_id": "j1", "title": "Software Engineer Intern", "company": "TechCorp Malaysia", "status": "Active"},
            {"_id": "j2", "title": "Data Analyst", "company": "Analytics Pro", "status": "Active"},
        ]),
        "applications": FakeCollection([
            {"_id": "a1", "jobId": "j1", "studentId": "u1", "appliedAt": NOW - timedelta(days=2)},
        ]),
        "event_registrations": FakeCollection([
            {"_id": "r1", "userId": "u2", "registeredAt": {"seconds": int((NOW - timedelta(days=50)).timestamp()), "nanoseconds": 0}},
        ]),
    }


def bearer(role, user_id="user-1"):
    token = create_session_token(Session(user_id=user_id, role=role, email=f"{user_id}@unisphere.edu"))
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_headers():
    return bearer(UserRole.admin, "admin-1")


@pytest.fixture
def student_headers():
    return bearer(UserRole.student, "s1")


@pytest.fixture
def live_snapshot():
    """Scenario data relative to the real clock, for the HTTP layer."""
    real_now = datetime.now(timezone.utc)
    return DashboardSnapshot(
        students=[student("s1"), student("s2"), student("s3")],
        jobs=[job("job-1", "TechCorp"), job("job-2", "Analytics Pro"), job("job-3", "Brand Masters")],
        applications=[
            application("a1", "s1", days_ago(5, real_now), "job-1"),
            application("a2", "s1", days_ago(12, real_now), "job-1"),
            application("a3", "s1", days_ago(20, real_now), "job-2"),
        ],
        registrations=[registration("r1", "s2", days_ago(45, real_now))],
    )


@pytest.fixture
def client(live_snapshot):
    app.dependency_overrides[get_dashboard_snapshot] = lambda: live_snapshot
    yield TestClient(app)
    app.dependency_overrides.clear()
