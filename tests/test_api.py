"""HTTP tests for the admin dashboard and session routes."""

from datetime import timedelta

from unisphere.core.auth import Session, create_session_token
from unisphere.schemas.schemas import UserRole


class TestAuthentication:

    def test_missing_token(self, client):
        response = client.get("/api/admin/dashboard")
        assert response.status_code == 401

    def test_garbage_token(self, client):
        response = client.get("/api/admin/dashboard", headers={"Authorization": "Bearer not-a-jwt"})
        assert response.status_code == 401

    def test_expired_token(self, client):
        token = create_session_token(
            Session(user_id="admin-1", role=UserRole.admin), expires_delta=timedelta(minutes=-5)
        )
        response = client.get("/api/admin/dashboard", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401

    def test_students_cannot_see_admin_dashboard(self, client, student_headers):
        response = client.get("/api/admin/dashboard", headers=student_headers)
        assert response.status_code == 403
        assert response.json()["detail"] == "Admins only"

    def test_me_returns_session(self, client, student_headers):
        response = client.get("/api/auth/me", headers=student_headers)
        assert response.status_code == 200
        assert response.json() == {"user_id": "s1", "role": "student", "email": "s1@unisphere.edu"}


class TestAdminDashboard:

    def test_dashboard(self, client, admin_headers):
        response = client.get("/api/admin/dashboard", headers=admin_headers)
        assert response.status_code == 200

        body = response.json()
        assert body["activity"]["tier_counts"] == {
            "highly_active": 1, "active": 0, "low_activity": 1, "inactive": 1,
        }
        assert [e["student_id"] for e in body["activity"]["needs_attention"]] == ["s3", "s2"]
        assert [s["tier"] for s in body["activity"]["distribution"]] == [
            "highly_active", "low_activity", "inactive",
        ]
        assert body["top_companies"] == [
            {"company_name": "TechCorp", "application_count": 2},
            {"company_name": "Analytics Pro", "application_count": 1},
        ]
        assert [j["job_id"] for j in body["top_jobs"]] == ["job-1", "job-2"]
        assert body["totals"] == {"total_students": 3, "total_jobs": 3, "total_companies": 3}
        assert len(body["job_postings_trend"]) == 6
        assert body["activity_trend"][-1]["inactive"] == 1

    def test_student_activity(self, client, admin_headers):
        response = client.get("/api/admin/students/activity", headers=admin_headers)
        assert response.status_code == 200
        body = response.json()
        assert body["total"] == 3
        assert {s["student_id"]: s["activity_count"] for s in body["students"]} == {"s1": 3, "s2": 1, "s3": 0}

    def test_student_activity_tier_filter(self, client, admin_headers):
        response = client.get(
            "/api/admin/students/activity", params={"tier": "low_activity"}, headers=admin_headers
        )
        assert response.status_code == 200
        assert [s["student_id"] for s in response.json()["students"]] == ["s2"]

    def test_student_activity_rejects_unknown_tier(self, client, admin_headers):
        response = client.get(
            "/api/admin/students/activity", params={"tier": "dormant"}, headers=admin_headers
        )
        assert response.status_code == 422

    def test_top_companies_limit(self, client, admin_headers):
        response = client.get("/api/admin/companies/top", params={"limit": 1}, headers=admin_headers)
        assert response.status_code == 200
        assert response.json() == [{"company_name": "TechCorp", "application_count": 2}]

    def test_top_companies_excludes_companies_without_applications(self, client, admin_headers):
        response = client.get("/api/admin/companies/top", headers=admin_headers)
        assert "Brand Masters" not in [row["company_name"] for row in response.json()]

    def test_top_companies_limit_bounds(self, client, admin_headers):
        response = client.get("/api/admin/companies/top", params={"limit": 0}, headers=admin_headers)
        assert response.status_code == 422

    def test_top_jobs(self, client, admin_headers):
        response = client.get("/api/admin/jobs/top", params={"limit": 1}, headers=admin_headers)
        assert response.status_code == 200
        assert [(row["job_id"], row["application_count"]) for row in response.json()] == [("job-1", 2)]

    def test_top_jobs_requires_admin(self, client, student_headers):
        response = client.get("/api/admin/jobs/top", headers=student_headers)
        assert response.status_code == 403


def test_root(client):
    response = client.get("/")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
