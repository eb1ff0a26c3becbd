"""
Record Normalizer - raw documents -> canonical records.

The document store holds rows written by several generations of the
frontend, so the same logical field shows up in different shapes:

- Timestamps: datetime (pymongo), Firestore {"seconds", "nanoseconds"} maps,
  ISO-8601 strings, epoch milliseconds, or missing entirely
- Student foreign key: "studentId" on current rows, "userId" on rows
  written before the field was renamed

Everything is normalized HERE, once, so the activity service only ever sees
one canonical `student_id` and timezone-aware UTC datetimes. Anything that
cannot be read is dropped to None; nothing in this module raises on bad data.
"""

import logging
from collections import defaultdict
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from unisphere.schemas.schemas import (
    ActivityEvent,
    ActivityKind,
    ApplicationRecord,
    EventRegistrationRecord,
    JobRecord,
    JobStatus,
    StudentRecord,
    UserRole,
)

logger = logging.getLogger(__name__)


# ============================================================
# FIELD HELPERS
# ============================================================

def as_utc(value: datetime) -> datetime:
    """Naive datetimes are taken to be UTC already."""
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


def to_datetime(value: Any) -> Optional[datetime]:
    """
    Coerce a stored timestamp to an aware UTC datetime.

    Returns None for missing or unreadable values.
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, datetime):
        # pymongo hands back naive datetimes that are already UTC
        return as_utc(value)

    if isinstance(value, (int, float)):
        return _from_epoch(value / 1000)

    if isinstance(value, dict):
        seconds = value.get("seconds", value.get("_seconds"))
        nanos = value.get("nanoseconds", value.get("_nanoseconds", 0)) or 0
        if _is_number(seconds) and _is_number(nanos):
            return _from_epoch(seconds + nanos / 1_000_000_000)
        return None

    if isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
        return as_utc(parsed)

    return None


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _from_epoch(seconds: float) -> Optional[datetime]:
    try:
        return datetime.fromtimestamp(seconds, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        return None


def _doc_id(doc: dict) -> Optional[str]:
    """Document id as a string; prefers the app-level "id" over Mongo's _id."""
    value = doc.get("id") or doc.get("_id")
    return str(value) if value else None


def _optional_str(value: Any) -> Optional[str]:
    return str(value) if value else None


def _job_status(value: Any) -> Optional[JobStatus]:
    try:
        return JobStatus(str(value).strip().capitalize()) if value else None
    except ValueError:
        logger.debug("Unknown job status %r", value)
        return None


def resolve_student_id(doc: dict) -> Optional[str]:
    """
    Canonical student foreign key for an application or registration.

    "studentId" wins; "userId" is the pre-rename field.
    """
    student_id = doc.get("studentId")
    if student_id:
        return str(student_id)

    legacy_id = doc.get("userId")
    if legacy_id:
        logger.debug("Document %s uses legacy userId field", _doc_id(doc))
        return str(legacy_id)

    return None


# ============================================================
# DOCUMENT -> RECORD
# ============================================================

def to_student_record(doc: dict) -> Optional[StudentRecord]:
    """Normalize a `users` document. Admin accounts are not students."""
    doc_id = _doc_id(doc)
    if doc_id is None:
        logger.debug("Skipping user document without id")
        return None

    role = doc.get("role")
    if role and role != UserRole.student.value:
        return None

    return StudentRecord(
        id=doc_id,
        display_name=_optional_str(doc.get("displayName") or doc.get("name")),
        email=str(doc.get("email") or ""),
        created_at=to_datetime(doc.get("createdAt")),
    )


def to_job_record(doc: dict) -> Optional[JobRecord]:
    doc_id = _doc_id(doc)
    if doc_id is None:
        logger.debug("Skipping job document without id")
        return None

    return JobRecord(
        id=doc_id,
        title=str(doc.get("title") or ""),
        company=str(doc.get("company") or ""),
        status=_job_status(doc.get("status")),
        posted_at=to_datetime(doc.get("postedDate") or doc.get("createdAt")),
    )


def to_application_record(doc: dict) -> Optional[ApplicationRecord]:
    doc_id = _doc_id(doc)
    if doc_id is None:
        logger.debug("Skipping application document without id")
        return None

    return ApplicationRecord(
        id=doc_id,
        job_id=_optional_str(doc.get("jobId")),
        student_id=resolve_student_id(doc),
        applied_at=to_datetime(doc.get("appliedAt")),
    )


def to_registration_record(doc: dict) -> Optional[EventRegistrationRecord]:
    doc_id = _doc_id(doc)
    if doc_id is None:
        logger.debug("Skipping registration document without id")
        return None

    return EventRegistrationRecord(
        id=doc_id,
        student_id=resolve_student_id(doc),
        registered_at=to_datetime(doc.get("registeredAt")),
        event_id=_optional_str(doc.get("eventId")),
        event_name=_optional_str(doc.get("eventName") or doc.get("eventTitle")),
    )


NORMALIZERS = {
    "users": to_student_record,
    "jobs": to_job_record,
    "applications": to_application_record,
    "event_registrations": to_registration_record,
}


def normalize_documents(collection: str, docs: Iterable[dict]) -> list:
    """Normalize every document of one source collection, dropping unreadable ones."""
    normalizer = NORMALIZERS[collection]
    records = []
    for doc in docs:
        record = normalizer(doc)
        if record is not None:
            records.append(record)
    return records


# ============================================================
# ACTIVITY EXTRACTION
# ============================================================

def iter_activity_events(
    applications: Iterable[ApplicationRecord],
    registrations: Iterable[EventRegistrationRecord],
    job_titles: Optional[Dict[str, str]] = None
) -> Iterable[ActivityEvent]:
    """
    Every dated, attributed application and registration as an ActivityEvent.

    Applications are labelled with their job's title when `job_titles`
    knows the job; registrations with the event name stored on them.
    """
    job_titles = job_titles or {}

    for app in applications:
        if app.student_id and app.applied_at:
            yield ActivityEvent(
                student_id=app.student_id,
                occurred_at=app.applied_at,
                kind=ActivityKind.application,
                label=job_titles.get(app.job_id) or None,
            )

    for reg in registrations:
        if reg.student_id and reg.registered_at:
            yield ActivityEvent(
                student_id=reg.student_id,
                occurred_at=reg.registered_at,
                kind=ActivityKind.event_registration,
                label=reg.event_name,
            )


def collect_activity_dates(
    student_id: str,
    applications: Iterable[ApplicationRecord],
    registrations: Iterable[EventRegistrationRecord]
) -> List[datetime]:
    """
    Activity moments attributable to one student.

    Undated records are skipped. Identical instants are all kept: an
    application and a registration at the same moment count twice.
    """
    return [
        event.occurred_at
        for event in iter_activity_events(applications, registrations)
        if event.student_id == student_id
    ]


def group_activity_events(
    applications: Iterable[ApplicationRecord],
    registrations: Iterable[EventRegistrationRecord],
    job_titles: Optional[Dict[str, str]] = None
) -> Dict[str, List[ActivityEvent]]:
    grouped: Dict[str, List[ActivityEvent]] = defaultdict(list)
    for event in iter_activity_events(applications, registrations, job_titles):
        grouped[event.student_id].append(event)
    return dict(grouped)


def group_activity_dates(
    applications: Iterable[ApplicationRecord],
    registrations: Iterable[EventRegistrationRecord]
) -> Dict[str, List[datetime]]:
    """collect_activity_dates for every student in a single pass."""
    return {
        student_id: [event.occurred_at for event in events]
        for student_id, events in group_activity_events(applications, registrations).items()
    }
