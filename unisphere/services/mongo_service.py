"""
MongoDB Service - reads the dashboard's source collections.

Source collections (all READ-ONLY from here):
1. users              - student accounts (admins are filtered out)
2. jobs               - job postings with their company name
3. applications       - student -> job applications
4. eventRegistrations - student -> event sign-ups

Documents are normalized into canonical records on the way in
(see records.py), so nothing downstream touches raw Mongo documents.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, Optional

from pymongo.collection import Collection

from unisphere.core.config import get_settings
from unisphere.db.mongodb import get_collection, COLLECTIONS, DASHBOARD_SOURCES
from unisphere.schemas.schemas import DashboardSnapshot
from unisphere.services.records import normalize_documents

logger = logging.getLogger(__name__)

# Snapshot field for each source collection key
SNAPSHOT_FIELDS = {
    "users": "students",
    "jobs": "jobs",
    "applications": "applications",
    "event_registrations": "registrations",
}


def get_source_collections() -> Dict[str, Collection]:
    """The four dashboard source collections, keyed like DASHBOARD_SOURCES."""
    return {key: get_collection(COLLECTIONS[key]) for key in DASHBOARD_SOURCES}


def fetch_records(key: str, collection: Collection) -> list:
    """Read a whole source collection and normalize it."""
    records = normalize_documents(key, collection.find())
    logger.debug("Loaded %d %s records", len(records), key)
    return records


def load_snapshot(
    collections: Optional[Dict[str, Collection]] = None,
    max_workers: Optional[int] = None
) -> DashboardSnapshot:
    """
    Fetch the four source collections in parallel.

    Each collection is read independently; they are not a consistent
    point-in-time view of each other.
    """
    collections = collections or get_source_collections()
    max_workers = max_workers or get_settings().snapshot_workers

    with ThreadPoolExecutor(max_workers=max_workers) as pool:
        futures = {
            key: pool.submit(fetch_records, key, collections[key])
            for key in DASHBOARD_SOURCES
        }
        slices = {SNAPSHOT_FIELDS[key]: future.result() for key, future in futures.items()}

    return DashboardSnapshot(**slices)
