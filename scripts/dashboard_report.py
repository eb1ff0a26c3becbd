#!/usr/bin/env python3
"""
Dashboard Report Script

Prints the admin dashboard computed from the live database:
1. Platform totals and student activity tiers
2. Students needing attention
3. Top companies and jobs by applications
4. Monthly job postings and active/inactive students

Run: python scripts/dashboard_report.py
"""
import sys
sys.path.insert(0, '.')

from unisphere.core.config import get_settings
from unisphere.db.mongodb import test_mongo_connection
from unisphere.schemas.schemas import TIER_LABELS, TIER_ORDER
from unisphere.services.activity_service import ActivityPolicy, build_dashboard
from unisphere.services.mongo_service import load_snapshot


def main():
    settings = get_settings()

    if not test_mongo_connection():
        print("❌ MongoDB connection failed!")
        return

    snapshot = load_snapshot()
    dashboard = build_dashboard(snapshot, policy=ActivityPolicy.from_settings(settings))
    activity = dashboard.activity

    print("=" * 60)
    print(f"ADMIN DASHBOARD ({dashboard.generated_at:%Y-%m-%d %H:%M} UTC)")
    totals = dashboard.totals
    print(f"   {totals.total_students} students, {totals.total_jobs} jobs, {totals.total_companies} companies")
    print("=" * 60)

    print(f"\n📊 Student activity ({activity.total_students} students)")
    for tier in TIER_ORDER:
        print(f"   {TIER_LABELS[tier]:<14} {getattr(activity.tier_counts, tier.value)}")

    print("\n⚠️  Needs attention")
    if not activity.needs_attention:
        print("   Nobody")
    for entry in activity.needs_attention:
        last = f"{entry.last_activity_at:%Y-%m-%d}" if entry.last_activity_at else "never"
        name = entry.display_name or entry.email or entry.student_id
        what = f" ({entry.last_activity_label or entry.last_activity_kind.value})" if entry.last_activity_kind else ""
        print(f"   {name:<30} {TIER_LABELS[entry.tier]:<14} {entry.activity_count} actions, last {last}{what}")

    print("\n🏢 Top companies")
    for row in dashboard.top_companies:
        print(f"   {row.company_name:<30} {row.application_count}")

    print("\n💼 Top jobs")
    for row in dashboard.top_jobs:
        print(f"   {row.title:<30} {row.company_name:<20} {row.application_count}")

    print("\n📈 Monthly trend (postings / active / inactive)")
    for postings, activity_point in zip(dashboard.job_postings_trend, dashboard.activity_trend):
        print(f"   {postings.month}   {postings.count:>4}   {activity_point.active:>5}   {activity_point.inactive:>5}")


if __name__ == "__main__":
    main()
