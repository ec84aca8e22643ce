"""
Integration tests for the front-desk API.

These exercise authentication, role checks, the cash shift lifecycle,
admissions, payments/refunds and the session-cash reports through
Django REST Framework's APIClient.

To run the tests:

```
pytest -q frontdesk/tests
```
"""
from decimal import Decimal

from rest_framework import status
from rest_framework.test import APIClient, APITestCase

from frontdesk.models import (
    ActivityLog,
    Admission,
    CashMovement,
    Department,
    Patient,
    PatientAccount,
    Payment,
    PaymentAllocation,
    ServiceCharge,
    Shift,
    Staff,
    User,
    UserSession,
)

PASSWORD = "Front-desk-pass1"


class FrontDeskAPITestCase(APITestCase):
    def setUp(self) -> None:
        self.surgery = Department.objects.create(name="Surgery")
        self.medicine = Department.objects.create(name="Medicine")
        self.doctor = Staff.objects.create(first_name="Kamal", last_name="Hossain", role="Doctor",
                                           department=self.surgery, specialization="General Surgery")

        self.receptionist = self.make_user("reception1", User.ROLE_RECEPTIONIST, "Ratna", "Akther")
        self.admin = self.make_user("admin1", User.ROLE_ADMIN, "Clinic", "Admin")
        self.pharmacist = self.make_user("pharmacy1", User.ROLE_PHARMACIST, "Zayed", "Islam")

        patient = Patient.objects.create(first_name="Rahima", last_name="Khatun", full_name="Rahima Khatun",
                                         phone_number="01700000000")
        self.account = PatientAccount.objects.create(
            patient=patient, total_charges=Decimal("700"), total_due=Decimal("700"),
        )
        self.surgery_charge = ServiceCharge.objects.create(
            patient_account=self.account, service_name="Appendectomy", department=self.surgery,
            original_amount=Decimal("500"), final_amount=Decimal("500"),
        )
        self.medicine_charge = ServiceCharge.objects.create(
            patient_account=self.account, service_name="Consultation", department=self.medicine,
            original_amount=Decimal("200"), final_amount=Decimal("200"),
        )

    def make_user(self, username: str, role: str, first: str, last: str) -> User:
        staff = Staff.objects.create(first_name=first, last_name=last, role=role)
        return User.objects.create_user(username=username, password=PASSWORD, role=role, staff=staff)

    def authenticate(self, user: User) -> APIClient:
        """Return an authenticated APIClient for the given user."""
        client = APIClient()
        client.force_authenticate(user=user)
        return client

    def open_shift(self, user: User, opening: str = "1000") -> Shift:
        return Shift.objects.create(staff=user.staff, opening_cash=Decimal(opening), system_cash=Decimal(opening))


class AuthTests(FrontDeskAPITestCase):
    def login(self, client: APIClient, username="reception1", password=PASSWORD):
        return client.post("/api/auth/login", {"username": username, "password": password}, format="json")

    def test_login_sets_httponly_cookie_and_records_session(self):
        client = APIClient()
        response = self.login(client)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["data"]["user"]["role"], User.ROLE_RECEPTIONIST)
        self.assertEqual(response.data["data"]["user"]["fullName"], "Ratna Akther")
        self.assertTrue(response.data["data"]["csrfToken"])

        cookie = response.cookies["session"]
        self.assertTrue(cookie["httponly"])
        self.assertEqual(cookie["samesite"], "Lax")
        self.assertEqual(UserSession.objects.filter(user=self.receptionist).count(), 1)
        self.assertTrue(ActivityLog.objects.filter(user=self.receptionist, action="LOGIN").exists())

        verify = client.get("/api/auth/verify-session")
        self.assertEqual(verify.status_code, status.HTTP_200_OK)
        self.assertEqual(verify.data["data"]["user"]["username"], "reception1")

    def test_wrong_password_is_401(self):
        response = self.login(APIClient(), password="nope")
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(response.data["code"], "unauthorized")
        self.assertFalse(response.data["success"])

    def test_logout_revokes_the_session(self):
        client = APIClient()
        token = self.login(client).cookies["session"].value

        response = client.post("/api/auth/logout")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(UserSession.objects.exists())

        # replaying the old cookie no longer works
        client.cookies["session"] = token
        self.assertEqual(client.get("/api/auth/verify-session").status_code, status.HTTP_401_UNAUTHORIZED)

    def test_no_cookie_is_401(self):
        response = APIClient().get("/api/dashboard")
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(response.data["code"], "unauthorized")

    def test_write_without_csrf_token_is_rejected(self):
        client = APIClient(enforce_csrf_checks=True)
        self.login(client)

        response = client.post("/api/shifts/start", {"openingCash": "500"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertFalse(Shift.objects.exists())

        response = client.post("/api/shifts/start", {"openingCash": "500"}, format="json",
                               HTTP_X_CSRFTOKEN=client.cookies["csrftoken"].value)
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)


class RoleTests(FrontDeskAPITestCase):
    def test_pharmacist_cannot_see_front_desk_endpoints(self):
        client = self.authenticate(self.pharmacist)
        for url in ("/api/dashboard", "/api/dashboard/session-cash", "/api/shifts/current", "/api/admissions"):
            self.assertEqual(client.get(url).status_code, status.HTTP_403_FORBIDDEN, url)

    def test_admin_shifts_requires_admin_role(self):
        response = self.authenticate(self.receptionist).get("/api/admin/shifts")
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data["code"], "forbidden")


class ShiftTests(FrontDeskAPITestCase):
    def test_start_then_duplicate_start_conflicts(self):
        client = self.authenticate(self.receptionist)
        response = client.post("/api/shifts/start", {"openingCash": "1000", "notes": "<b>morning</b>"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data["data"]["systemCash"], Decimal("1000"))
        self.assertEqual(response.data["data"]["notes"], "morning")
        self.assertTrue(CashMovement.objects.filter(movement_type=CashMovement.TYPE_OPENING).exists())

        again = client.post("/api/shifts/start", {"openingCash": "50"}, format="json")
        self.assertEqual(again.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(again.data["code"], "shift_state")

    def test_negative_opening_cash_is_400(self):
        response = self.authenticate(self.receptionist).post("/api/shifts/start", {"openingCash": "-1"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("openingCash", response.data["details"])

    def test_end_shift_records_variance(self):
        shift = self.open_shift(self.receptionist)
        client = self.authenticate(self.receptionist)

        response = client.post("/api/shifts/end", {"closingCash": "900"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        shift.refresh_from_db()
        self.assertFalse(shift.is_active)
        self.assertEqual(shift.variance, Decimal("-100"))
        self.assertIsNotNone(shift.end_time)

        self.assertIsNone(client.get("/api/shifts/current").data["data"])
        self.assertEqual(
            client.post("/api/shifts/end", {"closingCash": "0"}, format="json").status_code,
            status.HTTP_409_CONFLICT,
        )

    def test_admin_shifts_overview(self):
        self.open_shift(self.receptionist)
        closed = self.open_shift(self.admin, "200")
        closed.is_active = False
        closed.total_collected = Decimal("300")
        closed.save()

        response = self.authenticate(self.admin).get("/api/admin/shifts", {"status": "all"})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        data = response.data["data"]
        self.assertEqual(len(data["shifts"]), 2)
        self.assertEqual(data["summary"]["activeShiftsCount"], 1)
        self.assertEqual(data["summary"]["totalCollected"], Decimal("300"))
        self.assertEqual(data["periodLabel"], "Today")

        active_only = self.authenticate(self.admin).get("/api/admin/shifts", {"status": "active", "search": "Ratna"})
        self.assertEqual([s["staffName"] for s in active_only.data["data"]["shifts"]], ["Ratna Akther"])


class PaymentTests(FrontDeskAPITestCase):
    def test_payment_requires_open_shift(self):
        response = self.authenticate(self.receptionist).post(
            "/api/payments", {"patientAccountId": self.account.id, "amount": "100"}, format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)

    def test_allocations_must_add_up(self):
        self.open_shift(self.receptionist)
        response = self.authenticate(self.receptionist).post("/api/payments", {
            "patientAccountId": self.account.id,
            "amount": "700",
            "allocations": [{"serviceChargeId": self.surgery_charge.id, "amount": "500"}],
        }, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(Payment.objects.exists())

    def test_split_payment_updates_shift_and_account(self):
        shift = self.open_shift(self.receptionist)
        response = self.authenticate(self.receptionist).post("/api/payments", {
            "patientAccountId": self.account.id,
            "amount": "700",
            "paymentMethod": "bKash",
            "allocations": [
                {"serviceChargeId": self.surgery_charge.id, "amount": "500"},
                {"serviceChargeId": self.medicine_charge.id, "amount": "200"},
            ],
        }, format="json")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(response.data["data"]["receiptNumber"].startswith("RCP-"))

        shift.refresh_from_db()
        self.account.refresh_from_db()
        self.assertEqual(shift.total_collected, Decimal("700"))
        self.assertEqual(shift.system_cash, Decimal("1700"))
        self.assertEqual(self.account.total_due, Decimal("0"))
        self.assertEqual(PaymentAllocation.objects.count(), 2)

    def test_unknown_service_charge_is_404(self):
        self.open_shift(self.receptionist)
        response = self.authenticate(self.receptionist).post("/api/payments", {
            "patientAccountId": self.account.id,
            "amount": "10",
            "allocations": [{"serviceChargeId": 99999, "amount": "10"}],
        }, format="json")
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data["code"], "not_found")

    def test_refund_cannot_exceed_drawer(self):
        shift = self.open_shift(self.receptionist)
        client = self.authenticate(self.receptionist)

        too_much = client.post("/api/payments/refund", {"amount": "1500"}, format="json")
        self.assertEqual(too_much.status_code, status.HTTP_400_BAD_REQUEST)

        ok = client.post("/api/payments/refund", {"amount": "200", "reason": "Overcharged"}, format="json")
        self.assertEqual(ok.status_code, status.HTTP_201_CREATED)
        shift.refresh_from_db()
        self.assertEqual(shift.system_cash, Decimal("800"))
        self.assertEqual(shift.total_refunded, Decimal("200"))

    def test_repeated_refunds_cannot_exceed_the_payment(self):
        shift = self.open_shift(self.receptionist, opening="2000")
        payment = Payment.objects.create(
            patient_account=self.account, shift=shift, collected_by=self.receptionist.staff,
            amount=Decimal("500"), receipt_number="R-500",
        )
        client = self.authenticate(self.receptionist)

        first = client.post("/api/payments/refund", {"amount": "500", "paymentId": payment.id}, format="json")
        self.assertEqual(first.status_code, status.HTTP_201_CREATED)

        second = client.post("/api/payments/refund", {"amount": "500", "paymentId": payment.id}, format="json")
        self.assertEqual(second.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(second.data["code"], "validation")
        self.assertEqual(Decimal(second.data["details"]["alreadyRefunded"]), Decimal("500"))

        shift.refresh_from_db()
        self.assertEqual(shift.total_refunded, Decimal("500"))
        self.assertEqual(shift.system_cash, Decimal("1500"))

    def test_partial_refunds_add_up_to_the_payment(self):
        shift = self.open_shift(self.receptionist, opening="2000")
        payment = Payment.objects.create(
            patient_account=self.account, shift=shift, collected_by=self.receptionist.staff,
            amount=Decimal("500"), receipt_number="R-500",
        )
        client = self.authenticate(self.receptionist)

        for amount in ("300", "200"):
            response = client.post("/api/payments/refund", {"amount": amount, "paymentId": payment.id}, format="json")
            self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        extra = client.post("/api/payments/refund", {"amount": "1", "paymentId": payment.id}, format="json")
        self.assertEqual(extra.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(
            CashMovement.objects.filter(payment=payment, movement_type=CashMovement.TYPE_REFUND).count(), 2,
        )


class SessionCashTests(FrontDeskAPITestCase):
    def setUp(self) -> None:
        super().setUp()
        self.shift = self.open_shift(self.receptionist)
        allocated = Payment.objects.create(
            patient_account=self.account, shift=self.shift, collected_by=self.receptionist.staff,
            amount=Decimal("500"), receipt_number="R-1",
        )
        PaymentAllocation.objects.create(payment=allocated, service_charge=self.surgery_charge,
                                         allocated_amount=Decimal("500"))
        Payment.objects.create(
            patient_account=self.account, shift=self.shift, collected_by=self.receptionist.staff,
            amount=Decimal("300"), receipt_number="R-2",
        )
        self.client = self.authenticate(self.receptionist)

    def test_today_report(self):
        response = self.client.get("/api/dashboard/session-cash")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        data = response.data["data"]
        self.assertEqual(data["totalCollected"], Decimal("800"))
        self.assertEqual(data["transactionCount"], 2)
        self.assertEqual(data["departmentBreakdown"], [{
            "departmentId": self.surgery.id,
            "departmentName": "Surgery",
            "totalCollected": Decimal("500"),
            "transactionCount": 1,
        }])
        self.assertEqual(data["shifts"][0]["shiftId"], self.shift.id)
        self.assertTrue(data["shifts"][0]["isActive"])

    def test_department_filter(self):
        data = self.client.get("/api/dashboard/session-cash", {"departmentId": self.surgery.id}).data["data"]
        self.assertEqual(data["totalCollected"], Decimal("500"))
        self.assertEqual(data["transactionCount"], 1)

        empty = self.client.get("/api/dashboard/session-cash", {"departmentId": self.medicine.id}).data["data"]
        self.assertEqual(empty["shifts"], [])
        self.assertEqual(empty["shiftsCount"], 0)

    def test_bad_department_id_is_400(self):
        response = self.client.get("/api/dashboard/session-cash", {"departmentId": "surgery"})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["code"], "validation")

    def test_reversed_custom_range_is_400(self):
        response = self.client.get("/api/dashboard/session-cash", {
            "datePreset": "custom", "startDate": "2024-03-05", "endDate": "2024-03-01",
        })
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_past_custom_range_has_no_shifts(self):
        data = self.client.get("/api/dashboard/session-cash", {
            "datePreset": "custom", "startDate": "2020-01-01", "endDate": "2020-01-31",
        }).data["data"]
        self.assertEqual(data["totalCollected"], Decimal("0"))
        self.assertEqual(data["periodLabel"], "1/1/2020 - 31/1/2020")
        self.assertEqual(data["startDate"], "2019-12-31T18:00:00Z")

    def test_detailed_report(self):
        response = self.client.get("/api/dashboard/session-cash/detailed")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        data = response.data["data"]
        self.assertEqual(len(data["payments"]), 2)
        self.assertEqual(
            sorted(r["departmentName"] for r in data["payments"]), ["Surgery", "Unallocated"],
        )
        self.assertEqual(data["payments"][0]["patientName"], "Rahima Khatun")
        self.assertIn("shiftDate", data["shifts"][0])

    def test_dashboard_includes_open_cash_session(self):
        response = self.client.get("/api/dashboard", {"recentLimit": "500"})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        data = response.data["data"]
        self.assertEqual(data["cashSession"]["shiftId"], self.shift.id)
        self.assertEqual(data["cashSession"]["paymentsCount"], 2)
        self.assertIn("occupancyRate", data["stats"])


class AdmissionTests(FrontDeskAPITestCase):
    def payload(self, **extra):
        body = {
            "patient": {"firstName": "Amena", "lastName": "Begum", "gender": "Female",
                        "phoneNumber": "01811111111"},
            "hospital": {"name": "Dhaka Medical"},
            "departmentId": self.surgery.id,
            "doctorId": self.doctor.id,
            "ward": "B",
            "seatNumber": "12",
        }
        body.update(extra)
        return body

    def test_admission_with_open_shift_collects_fee(self):
        shift = self.open_shift(self.receptionist)
        response = self.authenticate(self.receptionist).post("/api/admissions", self.payload(), format="json")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        data = response.data["data"]
        self.assertTrue(data["admissionNumber"].startswith("ADM-"))
        self.assertEqual(data["paidAmount"], Decimal("300"))
        self.assertEqual(data["dueAmount"], Decimal("0"))
        self.assertEqual(data["hospitalName"], "Dhaka Medical")

        shift.refresh_from_db()
        self.assertEqual(shift.total_collected, Decimal("300"))
        payment = Payment.objects.get(shift=shift)
        self.assertEqual(payment.allocations.get().service_charge.department, self.surgery)
        self.assertTrue(ActivityLog.objects.filter(action="CREATE", entity_type="Admission").exists())

    def test_admission_without_shift_leaves_fee_due(self):
        response = self.authenticate(self.receptionist).post("/api/admissions", self.payload(), format="json")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data["data"]["paidAmount"], Decimal("0"))
        self.assertEqual(response.data["data"]["dueAmount"], Decimal("300"))
        self.assertFalse(Payment.objects.exists())

    def test_short_first_name_is_400(self):
        body = self.payload()
        body["patient"]["firstName"] = "A"
        response = self.authenticate(self.receptionist).post("/api/admissions", body, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_inactive_department_is_400(self):
        self.medicine.is_active = False
        self.medicine.save()
        response = self.authenticate(self.receptionist).post(
            "/api/admissions", self.payload(departmentId=self.medicine.id), format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(Admission.objects.exists())

    def test_list_and_search(self):
        client = self.authenticate(self.receptionist)
        client.post("/api/admissions", self.payload(), format="json")

        listed = client.get("/api/admissions", {"search": "Amena"})
        self.assertEqual(listed.status_code, status.HTTP_200_OK)
        self.assertEqual(len(listed.data["data"]), 1)
        self.assertEqual(listed.data["data"][0]["departmentName"], "Surgery")
        self.assertEqual(client.get("/api/admissions", {"search": "nobody"}).data["data"], [])

    def test_list_is_paginated(self):
        client = self.authenticate(self.receptionist)
        for _ in range(3):
            client.post("/api/admissions", self.payload(), format="json")

        second_page = client.get("/api/admissions", {"limit": 2, "page": 2})
        self.assertEqual(second_page.status_code, status.HTTP_200_OK)
        self.assertEqual(len(second_page.data["data"]), 1)
        self.assertEqual(second_page.data["pagination"], {"total": 3, "page": 2, "limit": 2, "totalPages": 2})

        capped = client.get("/api/admissions", {"limit": 500})
        self.assertEqual(capped.data["pagination"]["limit"], 100)
        self.assertEqual(len(capped.data["data"]), 3)

    def admit(self, client, with_shift: bool = True):
        if with_shift:
            self.open_shift(self.receptionist)
        response = client.post("/api/admissions", self.payload(), format="json")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        return response.data["data"]

    def test_discharge_moves_dashboard_counters(self):
        client = self.authenticate(self.receptionist)
        admission = self.admit(client)

        response = client.patch(f"/api/admissions/{admission['id']}", {"isDischarged": True}, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data["data"]["status"], Admission.STATUS_DISCHARGED)
        self.assertTrue(response.data["data"]["dateDischarged"])
        self.assertTrue(ActivityLog.objects.filter(
            action="UPDATE", entity_type="Admission", entity_id=admission["id"],
        ).exists())

        stats = client.get("/api/dashboard").data["data"]["stats"]
        self.assertEqual(stats["dischargedToday"], 1)
        self.assertEqual(stats["dischargedAllTime"], 1)

    def test_cancel_then_restore(self):
        client = self.authenticate(self.receptionist)
        admission = self.admit(client)
        url = f"/api/admissions/{admission['id']}"

        canceled = client.patch(url, {"status": "Canceled"}, format="json").data["data"]
        self.assertEqual(canceled["grandTotal"], Decimal("0"))
        self.assertTrue(canceled["remarks"].startswith("[CANCELED]"))
        account = PatientAccount.objects.get(patient_id=admission["patientId"])
        self.assertEqual(account.total_charges, Decimal("0"))
        self.assertEqual(account.total_paid, Decimal("300"))

        discharge = client.patch(url, {"isDischarged": True}, format="json")
        self.assertEqual(discharge.status_code, status.HTTP_400_BAD_REQUEST)

        restored = client.patch(url, {"status": "Admitted"}, format="json").data["data"]
        self.assertEqual(restored["status"], Admission.STATUS_ADMITTED)
        self.assertEqual(restored["grandTotal"], Decimal("300"))
        account.refresh_from_db()
        self.assertEqual(account.total_charges, Decimal("300"))
        self.assertEqual(account.total_due, Decimal("0"))

    def test_raising_paid_amount_collects_on_the_open_shift(self):
        client = self.authenticate(self.receptionist)
        admission = self.admit(client, with_shift=False)
        url = f"/api/admissions/{admission['id']}"

        no_shift = client.patch(url, {"paidAmount": "300"}, format="json")
        self.assertEqual(no_shift.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(no_shift.data["code"], "shift_state")

        shift = self.open_shift(self.receptionist)
        response = client.patch(url, {"paidAmount": "300"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data["data"]["dueAmount"], Decimal("0"))
        shift.refresh_from_db()
        self.assertEqual(shift.total_collected, Decimal("300"))
        account = PatientAccount.objects.get(patient_id=admission["patientId"])
        self.assertEqual(account.total_due, Decimal("0"))

    def test_lowering_paid_amount_is_400(self):
        client = self.authenticate(self.receptionist)
        admission = self.admit(client)
        response = client.patch(f"/api/admissions/{admission['id']}", {"paidAmount": "100"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(Admission.objects.get(id=admission["id"]).paid_amount, Decimal("300"))

    def test_detail_edge_cases(self):
        client = self.authenticate(self.receptionist)
        self.assertEqual(client.get("/api/admissions/99999").status_code, status.HTTP_404_NOT_FOUND)

        admission = self.admit(client)
        fetched = client.get(f"/api/admissions/{admission['id']}")
        self.assertEqual(fetched.data["data"]["admissionNumber"], admission["admissionNumber"])

        empty = client.patch(f"/api/admissions/{admission['id']}", {}, format="json")
        self.assertEqual(empty.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(empty.data["code"], "validation")


class DepartmentTests(FrontDeskAPITestCase):
    def test_lists_active_departments(self):
        self.medicine.is_active = False
        self.medicine.save()
        response = self.authenticate(self.receptionist).get("/api/departments")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["data"], [{"id": self.surgery.id, "name": "Surgery"}])


class PathologyTests(FrontDeskAPITestCase):
    def payload(self, **extra):
        body = {
            "patient": {"firstName": "Nasrin", "lastName": "Sultana", "gender": "Female",
                        "phoneNumber": "01922222222"},
            "testNames": ["CBC", "Lipid profile"],
            "totalAmount": "1200",
            "discountAmount": "200",
            "paidAmount": "600",
        }
        body.update(extra)
        return body

    def test_registration_bills_account_and_collects_on_shift(self):
        shift = self.open_shift(self.receptionist)
        response = self.authenticate(self.receptionist).post("/api/pathology-patients", self.payload(), format="json")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        data = response.data["data"]
        self.assertTrue(data["testNumber"].startswith("PATH-"))
        self.assertEqual(data["testCategory"], "Multiple Tests")
        self.assertEqual(data["testNames"], ["CBC", "Lipid profile"])
        self.assertEqual(data["grandTotal"], Decimal("1000"))
        self.assertEqual(data["dueAmount"], Decimal("400"))

        charge = ServiceCharge.objects.get(service_type=ServiceCharge.TYPE_PATHOLOGY)
        self.assertEqual(charge.department.name, "Pathology")
        self.assertEqual(charge.final_amount, Decimal("1000"))
        account = charge.patient_account
        self.assertEqual(account.total_charges, Decimal("1000"))
        self.assertEqual(account.total_due, Decimal("400"))

        shift.refresh_from_db()
        self.assertEqual(shift.total_collected, Decimal("600"))
        self.assertEqual(Payment.objects.get(shift=shift).allocations.get().service_charge, charge)
        self.assertTrue(ActivityLog.objects.filter(action="CREATE", entity_type="PathologyTest").exists())

    def test_payment_without_shift_is_409(self):
        client = self.authenticate(self.receptionist)
        response = client.post("/api/pathology-patients", self.payload(), format="json")
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data["code"], "shift_state")
        self.assertFalse(ServiceCharge.objects.filter(service_type=ServiceCharge.TYPE_PATHOLOGY).exists())

        unpaid = client.post("/api/pathology-patients", self.payload(paidAmount="0"), format="json")
        self.assertEqual(unpaid.status_code, status.HTTP_201_CREATED)
        self.assertEqual(unpaid.data["data"]["dueAmount"], Decimal("1000"))

    def test_overpayment_is_400(self):
        self.open_shift(self.receptionist)
        response = self.authenticate(self.receptionist).post(
            "/api/pathology-patients", self.payload(paidAmount="1100"), format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_new_department_shows_up_in_lookup(self):
        client = self.authenticate(self.receptionist)
        self.assertEqual(len(client.get("/api/departments").data["data"]), 2)
        client.post("/api/pathology-patients", self.payload(paidAmount="0"), format="json")
        names = [d["name"] for d in client.get("/api/departments").data["data"]]
        self.assertIn("Pathology", names)

    def test_list_filters_and_pagination(self):
        client = self.authenticate(self.receptionist)
        for _ in range(2):
            client.post("/api/pathology-patients", self.payload(paidAmount="0"), format="json")

        listed = client.get("/api/pathology-patients")
        self.assertEqual(listed.status_code, status.HTTP_200_OK)
        self.assertEqual(listed.data["pagination"]["limit"], 15)
        self.assertEqual(listed.data["pagination"]["total"], 2)
        self.assertEqual(client.get("/api/pathology-patients", {"isCompleted": "true"}).data["data"], [])
        self.assertEqual(len(client.get("/api/pathology-patients", {"search": "Nasrin"}).data["data"]), 2)

    def test_completing_a_test_counts_on_dashboard(self):
        client = self.authenticate(self.receptionist)
        test_id = client.post("/api/pathology-patients", self.payload(paidAmount="0"), format="json").data["data"]["id"]

        response = client.patch(f"/api/pathology-patients/{test_id}", {"isCompleted": True}, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertTrue(response.data["data"]["reportDate"])

        stats = client.get("/api/dashboard").data["data"]["stats"]
        self.assertEqual(stats["pathologyDoneToday"], 1)
        self.assertEqual(client.get("/api/pathology-patients/99999").status_code, status.HTTP_404_NOT_FOUND)


class HospitalTests(FrontDeskAPITestCase):
    def test_create_then_duplicate_conflicts(self):
        client = self.authenticate(self.receptionist)
        response = client.post("/api/hospitals", {"name": "Square Hospital", "address": "Panthapath"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data["message"], "Hospital created successfully")

        again = client.post("/api/hospitals", {"name": "square hospital"}, format="json")
        self.assertEqual(again.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(again.data["code"], "conflict")

        missing = client.post("/api/hospitals", {"address": "Dhanmondi"}, format="json")
        self.assertEqual(missing.status_code, status.HTTP_400_BAD_REQUEST)

    def test_search_orders_by_name_and_caps_limit(self):
        client = self.authenticate(self.receptionist)
        for name, address in (("United Hospital", "Gulshan"), ("Labaid", "Dhanmondi"), ("Apollo", "Bashundhara")):
            client.post("/api/hospitals", {"name": name, "address": address}, format="json")

        names = [h["name"] for h in client.get("/api/hospitals", {"limit": 500}).data["data"]]
        self.assertEqual(names, ["Apollo", "Labaid", "United Hospital"])
        found = client.get("/api/hospitals", {"search": "dhanm"}).data["data"]
        self.assertEqual([h["name"] for h in found], ["Labaid"])
        self.assertEqual(len(client.get("/api/hospitals", {"limit": 1}).data["data"]), 1)

    def test_pharmacist_is_forbidden(self):
        self.assertEqual(self.authenticate(self.pharmacist).get("/api/hospitals").status_code,
                         status.HTTP_403_FORBIDDEN)


class ActivityLogTests(FrontDeskAPITestCase):
    def setUp(self) -> None:
        super().setUp()
        ActivityLog.objects.create(user=self.receptionist, action="LOGIN", description="Signed in",
                                   ip_address="10.0.0.7")
        ActivityLog.objects.create(user=self.receptionist, action="PAYMENT", description="Collected BDT 300")
        ActivityLog.objects.create(user=self.admin, action="LOGIN", description="Signed in")

    def test_admin_only(self):
        response = self.authenticate(self.receptionist).get("/api/admin/activity-logs")
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_filters_and_page_size(self):
        client = self.authenticate(self.admin)
        everything = client.get("/api/admin/activity-logs", {"pageSize": 500})
        self.assertEqual(everything.status_code, status.HTTP_200_OK)
        self.assertEqual(everything.data["total"], 3)
        self.assertEqual(everything.data["pageSize"], 100)

        logins = client.get("/api/admin/activity-logs", {"activityTypes": "LOGIN"}).data
        self.assertEqual(logins["total"], 2)
        self.assertEqual({r["action"] for r in logins["data"]}, {"LOGIN"})

        by_user = client.get("/api/admin/activity-logs", {"searchQuery": "admin1"}).data
        self.assertEqual(by_user["total"], 1)
        self.assertEqual(by_user["data"][0]["username"], "admin1")

        paged = client.get("/api/admin/activity-logs", {"pageSize": 2, "page": 2}).data
        self.assertEqual(len(paged["data"]), 1)
        self.assertEqual(paged["currentPage"], 2)
        self.assertEqual(paged["totalPages"], 2)

    def test_unknown_activity_type_is_400(self):
        response = self.authenticate(self.admin).get("/api/admin/activity-logs", {"activityTypes": "LOGIN,NAP"})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
