"""
RBAC tests for the fee API.
- Fee mutations and reports are admin-only
- Teachers are blocked from finance data
- Students see only their own bills; parents only their children's
"""
from django.test import TestCase
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import AccessToken

from accounts.models import User
from core.models import Organization
from students.models import ParentChild


class FeeRBACTests(TestCase):
    def setUp(self):
        self.org = Organization.objects.create(name="Test Org", slug="test-org")
        self.client = APIClient()

        self.teacher = User.objects.create_user(
            email="teacher@test.com",
            password="pass123",
            full_name="Teacher",
            role="teacher",
            organization=self.org,
        )
        self.student = User.objects.create_user(
            email="student@test.com",
            password="pass123",
            full_name="Student",
            role="student",
            organization=self.org,
        )
        self.student_profile = self.student.student_profile

        self.other_student = User.objects.create_user(
            email="other@test.com",
            password="pass123",
            full_name="Other Student",
            role="student",
            organization=self.org,
        )
        self.other_profile = self.other_student.student_profile

        self.parent = User.objects.create_user(
            email="parent@test.com",
            password="pass123",
            full_name="Parent",
            role="parent",
            organization=self.org,
        )
        ParentChild.objects.create(parent=self.parent, student=self.student)

    def _auth_header(self, user: User) -> dict:
        token = str(AccessToken.for_user(user))
        return {"HTTP_AUTHORIZATION": f"Bearer {token}"}

    def test_anonymous_gets_401(self):
        res = self.client.get(f"/api/fees/dues/student/{self.student_profile.id}")
        self.assertEqual(res.status_code, 401)
        self.assertEqual(res.data["code"], "not_authenticated")

    def test_student_cannot_create_structure(self):
        self.client.credentials(**self._auth_header(self.student))
        res = self.client.post("/api/fees/structures", {}, format="json")
        self.assertEqual(res.status_code, 403)
        self.assertEqual(res.data["code"], "permission_denied")

    def test_student_cannot_pay_or_read_reports(self):
        self.client.credentials(**self._auth_header(self.student))
        self.assertEqual(self.client.post("/api/fees/pay", {}, format="json").status_code, 403)
        self.assertEqual(self.client.get("/api/fees/reports/daily").status_code, 403)

    def test_teacher_blocked_from_finance_reads(self):
        self.client.credentials(**self._auth_header(self.teacher))
        res = self.client.get(f"/api/fees/dues/student/{self.student_profile.id}")
        self.assertEqual(res.status_code, 403)
        res = self.client.get(f"/api/fees/wallet/{self.student_profile.id}")
        self.assertEqual(res.status_code, 403)

    def test_student_reads_own_dues_only(self):
        self.client.credentials(**self._auth_header(self.student))
        res = self.client.get(f"/api/fees/dues/student/{self.student_profile.id}")
        self.assertEqual(res.status_code, 200)
        res = self.client.get(f"/api/fees/dues/student/{self.other_profile.id}")
        self.assertEqual(res.status_code, 403)

    def test_parent_reads_child_only(self):
        self.client.credentials(**self._auth_header(self.parent))
        res = self.client.get(f"/api/fees/history/{self.student_profile.id}")
        self.assertEqual(res.status_code, 200)
        res = self.client.get(f"/api/fees/history/{self.other_profile.id}")
        self.assertEqual(res.status_code, 403)

    def test_unknown_student_returns_404(self):
        self.client.credentials(**self._auth_header(self.parent))
        res = self.client.get("/api/fees/wallet/999999")
        self.assertEqual(res.status_code, 404)
