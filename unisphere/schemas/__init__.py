"""
Schemas module - Record and Request/Response schemas.

- Records: canonical shapes of the document-store rows
- Responses: the dashboard view model the admin frontend renders
"""

from unisphere.schemas.schemas import (
    ActivityTier,
    ActivityClassification,
    StudentRecord,
    JobRecord,
    ApplicationRecord,
    EventRegistrationRecord,
    UserRole,
)

__all__ = [
    "ActivityTier",
    "ActivityClassification",
    "StudentRecord",
    "JobRecord",
    "ApplicationRecord",
    "EventRegistrationRecord",
    "UserRole",
]
