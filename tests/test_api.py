"""
HTTP layer: request/response shapes, status codes and the {detail, code} error format.
"""
from decimal import Decimal

from django.test import TestCase
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import AccessToken

from classes.models import SchoolClass
from core.models import Organization
from fees.models import FeeStructure, StudentFee
from payments.models import FeeTransaction
from tests.base import LedgerFixturesMixin


class FeeApiTests(LedgerFixturesMixin, TestCase):
    def setUp(self):
        super().setUp()
        self.client = APIClient()
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {AccessToken.for_user(self.admin)}")
        self.student = self.make_student(full_name="Ali Veli")

    def _create_and_assign(self, amount="500.00"):
        res = self.client.post("/api/fees/structures", {
            "classId": self.school_class.pk,
            "categoryId": self.category.pk,
            "amount": amount,
            "dueDate": self.future.isoformat(),
        }, format="json")
        self.assertEqual(res.status_code, 201, res.data)
        structure_id = res.data["id"]
        res = self.client.post("/api/fees/assign/bulk", {
            "classId": self.school_class.pk,
            "feeStructureId": structure_id,
        }, format="json")
        self.assertEqual(res.status_code, 201, res.data)
        return structure_id, res.data["fees"][0]["id"]

    def test_login_and_me(self):
        client = APIClient()
        res = client.post("/api/auth/login", {"email": "admin@test.com", "password": "pass123"}, format="json")
        self.assertEqual(res.status_code, 200)
        self.assertIn("accessToken", res.data)

        client.credentials(HTTP_AUTHORIZATION=f"Bearer {res.data['accessToken']}")
        me = client.get("/api/auth/me")
        self.assertEqual(me.data["role"], "admin")

    def test_bad_login_returns_401(self):
        res = APIClient().post("/api/auth/login", {"email": "admin@test.com", "password": "nope"}, format="json")
        self.assertEqual(res.status_code, 401)
        self.assertEqual(res.data["code"], "invalid_credentials")

    def test_health_needs_no_auth(self):
        self.assertEqual(APIClient().get("/api/health/").status_code, 200)

    def test_category_crud(self):
        res = self.client.post("/api/fees/categories", {"name": "library"}, format="json")
        self.assertEqual(res.status_code, 201)
        self.assertEqual(res.data["name"], "LIBRARY")
        category_id = res.data["id"]

        dup = self.client.post("/api/fees/categories", {"name": "Library"}, format="json")
        self.assertEqual(dup.status_code, 409)
        self.assertEqual(dup.data["code"], "conflict")

        res = self.client.patch(f"/api/fees/categories/{category_id}", {"description": "Books"}, format="json")
        self.assertEqual(res.data["description"], "Books")

        names = [c["name"] for c in self.client.get("/api/fees/categories").data]
        self.assertEqual(names, ["LIBRARY", "TUITION"])

        self.assertEqual(self.client.delete(f"/api/fees/categories/{category_id}").status_code, 204)

    def test_structure_validation_errors(self):
        res = self.client.post("/api/fees/structures", {
            "classId": self.school_class.pk,
            "categoryId": self.category.pk,
            "amount": "-5",
            "dueDate": self.future.isoformat(),
        }, format="json")
        self.assertEqual(res.status_code, 400)
        self.assertEqual(res.data["code"], "invalid_input")

        res = self.client.post("/api/fees/structures", {"classId": self.school_class.pk}, format="json")
        self.assertEqual(res.status_code, 400)
        self.assertEqual(res.data["code"], "validation_error")
        self.assertIn("categoryId", res.data["errors"])

        res = self.client.patch("/api/fees/structures/999999", {"amount": "10"}, format="json")
        self.assertEqual(res.status_code, 404)
        self.assertEqual(res.data["code"], "not_found")

    def test_full_flow(self):
        structure_id, fee_id = self._create_and_assign("500.00")

        res = self.client.get(f"/api/fees/structures/class/{self.school_class.pk}")
        self.assertEqual([s["id"] for s in res.data], [structure_id])
        self.assertEqual(res.data[0]["amount"], 500.0)

        res = self.client.patch(f"/api/fees/dues/adjust/{fee_id}", {
            "discountAmount": "50", "fineAmount": "20",
        }, format="json")
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["totalPayable"], 470.0)

        res = self.client.post("/api/fees/pay", {
            "studentFeeId": fee_id, "amount": "470.00", "paymentMethod": "cash",
        }, format="json")
        self.assertEqual(res.status_code, 201, res.data)
        self.assertEqual(res.data["fee"]["status"], "paid")
        receipt_no = res.data["transaction"]["transactionId"]

        res = self.client.patch(f"/api/fees/structures/{structure_id}", {"amount": "400.00"}, format="json")
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["propagation"]["totalCredited"], 100.0)

        res = self.client.get(f"/api/fees/wallet/{self.student.pk}")
        self.assertEqual(res.data["balance"], 100.0)
        self.assertEqual(res.data["entries"][0]["reason"], "FEE_REDUCED")

        res = self.client.get(f"/api/fees/dues/student/{self.student.pk}")
        self.assertEqual(res.data["fees"][0]["paidAmount"], 370.0)
        self.assertEqual(res.data["totalDue"], 0.0)
        self.assertEqual(res.data["student"]["fullName"], "Ali Veli")
        self.assertEqual(res.data["student"]["walletBalance"], 100.0)

        res = self.client.get(f"/api/fees/receipt/{receipt_no}")
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["studentName"], "Ali Veli")

        res = self.client.get(f"/api/fees/history/{self.student.pk}")
        self.assertEqual(len(res.data), 1)

        res = self.client.delete(f"/api/fees/structures/{structure_id}")
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["totalRefunded"], 370.0)
        self.assertFalse(FeeStructure.objects.filter(pk=structure_id).exists())

        res = self.client.get(f"/api/fees/receipt/{receipt_no}")
        self.assertIsNone(res.data["studentFeeId"])

    def test_pay_with_idempotency_header(self):
        _, fee_id = self._create_and_assign("300.00")
        body = {"studentFeeId": fee_id, "amount": "100.00", "paymentMethod": "card"}

        first = self.client.post("/api/fees/pay", body, format="json", HTTP_IDEMPOTENCY_KEY="abc-1")
        second = self.client.post("/api/fees/pay", body, format="json", HTTP_IDEMPOTENCY_KEY="abc-1")

        self.assertEqual(first.status_code, 201)
        self.assertEqual(second.status_code, 200)
        self.assertTrue(second.data["replayed"])
        self.assertEqual(FeeTransaction.objects.count(), 1)

        clash = self.client.post("/api/fees/pay", dict(body, amount="150.00"), format="json",
                                 HTTP_IDEMPOTENCY_KEY="abc-1")
        self.assertEqual(clash.status_code, 409)

    def test_pay_settled_fee_returns_already_settled(self):
        _, fee_id = self._create_and_assign("100.00")
        body = {"studentFeeId": fee_id, "amount": "150.00", "paymentMethod": "cash"}
        res = self.client.post("/api/fees/pay", body, format="json")
        self.assertEqual(res.data["walletCredit"], 50.0)

        res = self.client.post("/api/fees/pay", body, format="json")
        self.assertEqual(res.status_code, 400)
        self.assertEqual(res.data["code"], "already_settled")

    def test_unassign_and_class_dues(self):
        _, fee_id = self._create_and_assign("100.00")
        res = self.client.get(f"/api/fees/dues/class/{self.school_class.pk}")
        self.assertEqual([f["id"] for f in res.data], [fee_id])

        res = self.client.delete(f"/api/fees/assign/{fee_id}")
        self.assertEqual(res.status_code, 200)
        self.assertFalse(StudentFee.objects.filter(pk=fee_id).exists())

    def test_reports(self):
        _, fee_id = self._create_and_assign("100.00")
        self.client.post("/api/fees/pay", {
            "studentFeeId": fee_id, "amount": "40.00", "paymentMethod": "upi",
        }, format="json")

        daily = self.client.get("/api/fees/reports/daily")
        self.assertEqual(daily.status_code, 200)
        self.assertEqual(daily.data["byMethod"]["upi"], {"total": 40.0, "count": 1})

        bad = self.client.get("/api/fees/reports/daily?date=yesterday")
        self.assertEqual(bad.status_code, 400)

        pending = self.client.get(f"/api/fees/reports/pending?classId={self.school_class.pk}")
        self.assertEqual(pending.data["totalDue"], 60.0)
        self.assertEqual(pending.data["byClass"][0]["className"], "Grade 5 A")

    def test_amounts_rendered_as_numbers(self):
        _, fee_id = self._create_and_assign("99.99")
        res = self.client.get(f"/api/fees/dues/student/{self.student.pk}")
        self.assertIsInstance(res.data["fees"][0]["baseAmount"], float)
        self.assertEqual(Decimal(str(res.data["fees"][0]["dueAmount"])), Decimal("99.99"))

    def test_other_organization_class_hidden_in_multi_tenant_mode(self):
        other_org = Organization.objects.create(name="Other School", slug="other-school")
        foreign = SchoolClass.objects.create(organization=other_org, name="Grade 1", year="2025-2026")

        with self.settings(SINGLE_TENANT=False):
            res = self.client.get(f"/api/fees/dues/class/{foreign.pk}")
            self.assertEqual(res.status_code, 404)
            res = self.client.get(f"/api/fees/dues/class/{self.school_class.pk}")
            self.assertEqual(res.status_code, 200)

        self.assertEqual(self.client.get(f"/api/fees/dues/class/{foreign.pk}").status_code, 200)
