"""
UniSphere Career Services - Admin Engagement Analytics
Backend for the career-services admin dashboard.

Architecture:
- MongoDB: Source collections (users, jobs, applications, eventRegistrations)
- Activity service: Classifies student engagement, builds dashboard view model
- Dashboard feed: Keeps per-collection snapshots and recomputes on change
"""

__version__ = "1.0.0"
__author__ = "UniSphere Team"
