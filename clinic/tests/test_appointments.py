"""
Appointment booking and lifecycle.

An appointment only moves forward, one step per action:
pending_payment -> paid -> scheduled -> in_progress -> completed.
"""
import uuid

import pytest
from rest_framework import status
from rest_framework.test import APIClient, APITestCase

from clinic.exceptions import BadRequest, InvalidTransition
from clinic.models import Appointment, AppointmentTransition, TransactionLog, User
from clinic.services.appointments import filter_seed, next_status


class AppointmentLifecycleTests(APITestCase):
    def setUp(self) -> None:
        self.receptionist = User.objects.create_user(
            username="recep@clinic.test", email="recep@clinic.test", password="Secret-pass-1",
            role="receptionist", name="Mary Reception",
        )
        self.accountant = User.objects.create_user(
            username="acc@clinic.test", email="acc@clinic.test", password="Secret-pass-1",
            role="accountant", name="Tom Accountant",
        )

    def authenticate(self, user: User) -> APIClient:
        client = APIClient()
        client.force_authenticate(user=user)
        return client

    def book(self, **extra):
        body = {"patientName": "James Okello", "phone": "0700100200", "preferredDoctor": "Dr. Becks"}
        body.update(extra)
        response = self.authenticate(self.receptionist).post("/api/appointments", body, format="json")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        return response.data

    def act(self, apt_id, action, **extra):
        return self.authenticate(self.accountant).patch(
            f"/api/appointments/{apt_id}", {"action": action, **extra}, format="json"
        )

    def test_booking_defaults(self):
        apt = self.book()
        self.assertEqual(apt["status"], "pending_payment")
        self.assertEqual(apt["appointmentFee"], 50000.0)
        self.assertEqual(apt["bookedBy"], "receptionist")
        self.assertIsNone(apt["paidAt"])

    def test_booking_requires_patient_name(self):
        client = self.authenticate(self.receptionist)
        for body in ({}, {"patientName": "   "}):
            response = client.post("/api/appointments", body, format="json")
            self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
            self.assertEqual(response.data["error"]["message"], "Patient name is required")

    def test_full_lifecycle(self):
        apt = self.book()
        response = self.act(apt["id"], "record_payment")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["status"], "paid")
        self.assertIsNotNone(response.data["paidAt"])
        self.assertTrue(TransactionLog.objects.filter(trans_id=apt["id"], step="appointment_fee").exists())

        response = self.act(apt["id"], "allocate", allocatedDate="2025-04-02", allocatedTime="09:30")
        self.assertEqual(response.data["status"], "scheduled")
        # doctor falls back to the preferred doctor
        self.assertEqual(response.data["allocatedDoctor"], "Dr. Becks")
        self.assertEqual(response.data["allocatedDate"], "2025-04-02")

        self.assertEqual(self.act(apt["id"], "start").data["status"], "in_progress")
        self.assertEqual(self.act(apt["id"], "finish").data["status"], "completed")

        history = self.authenticate(self.accountant).get(f"/api/appointments/{apt['id']}/transitions")
        self.assertEqual(
            [(t["from"], t["to"]) for t in history.data["transitions"]],
            [("pending_payment", "paid"), ("paid", "scheduled"), ("scheduled", "in_progress"),
             ("in_progress", "completed")],
        )
        self.assertEqual(history.data["transitions"][0]["operator"], "Tom Accountant")

    def test_steps_cannot_be_skipped(self):
        apt = self.book()
        response = self.act(apt["id"], "start")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["error"]["code"], "invalid_transition")
        self.assertEqual(response.data["error"]["message"], "Only scheduled appointments can be started")
        self.assertEqual(Appointment.objects.get(id=apt["id"]).status, "pending_payment")
        self.assertFalse(AppointmentTransition.objects.exists())

    def test_allocate_checks_status_before_fields(self):
        apt = self.book()
        response = self.act(apt["id"], "allocate")
        self.assertEqual(response.data["error"]["message"], "Appointment must be paid before allocating date")

        self.act(apt["id"], "record_payment")
        response = self.act(apt["id"], "allocate", allocatedDate="2025-04-02")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["error"]["message"], "allocatedDate and allocatedTime are required")
        self.assertEqual(Appointment.objects.get(id=apt["id"]).status, "paid")

    def test_allocate_rejects_impossible_date(self):
        apt = self.book()
        self.act(apt["id"], "record_payment")
        response = self.act(apt["id"], "allocate", allocatedDate="2025-02-30", allocatedTime="09:00")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["error"]["message"], "allocatedDate is not a valid date")
        self.assertEqual(Appointment.objects.get(id=apt["id"]).status, "paid")
        self.assertEqual(AppointmentTransition.objects.filter(to_status="scheduled").count(), 0)

    def test_payment_is_recorded_once(self):
        apt = self.book()
        self.act(apt["id"], "record_payment")
        response = self.act(apt["id"], "record_payment")
        self.assertEqual(response.data["error"]["message"], "Appointment is not pending payment")

    def test_unknown_or_missing_action(self):
        apt = self.book()
        for action in ("cancel", ""):
            response = self.act(apt["id"], action)
            self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
            self.assertEqual(response.data["error"]["message"], "Unknown action")

    def test_bad_and_unknown_ids(self):
        client = self.authenticate(self.accountant)
        response = client.get("/api/appointments/not-a-uuid")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["error"]["message"], "Invalid appointment id")
        response = client.patch(f"/api/appointments/{uuid.uuid4()}", {"action": "start"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data["error"]["message"], "Appointment not found")

    def test_day_schedule_is_ordered_by_slot(self):
        for name, slot in (("Late", "15:00"), ("Early", "08:00")):
            apt = self.book(patientName=name)
            self.act(apt["id"], "record_payment")
            self.act(apt["id"], "allocate", allocatedDate="2025-04-02", allocatedTime=slot,
                     allocatedDoctor="Dr. Achieng")
        self.book(patientName="Unpaid")

        client = self.authenticate(self.receptionist)
        rows = client.get("/api/appointments", {"allocated_date": "2025-04-02"}).data["appointments"]
        self.assertEqual([r["patientName"] for r in rows], ["Early", "Late"])

        rows = client.get("/api/appointments", {"status": "pending_payment"}).data["appointments"]
        self.assertEqual([r["patientName"] for r in rows], ["Unpaid"])

        # an unknown status is ignored
        rows = client.get("/api/appointments", {"status": "bogus"}).data["appointments"]
        self.assertEqual(len(rows), 3)

        rows = client.get("/api/appointments", {"allocated_doctor": "Dr. Nobody"}).data["appointments"]
        self.assertEqual(rows, [])


def test_next_status_table():
    assert next_status("pending_payment", "record_payment") == "paid"
    assert next_status("paid", "allocate") == "scheduled"
    assert next_status("scheduled", "start") == "in_progress"
    assert next_status("in_progress", "finish") == "completed"
    with pytest.raises(InvalidTransition):
        next_status("completed", "finish")
    with pytest.raises(BadRequest):
        next_status("paid", "refund")


def test_filter_seed_matches_query_semantics():
    rows = [
        {"id": "a", "status": "scheduled", "allocatedDate": "2025-04-02", "allocatedTime": "10:00",
         "allocatedDoctor": "Dr. A"},
        {"id": "b", "status": "completed", "allocatedDate": "2025-04-02", "allocatedTime": "08:00",
         "allocatedDoctor": "Dr. B"},
        {"id": "c", "status": "paid", "allocatedDate": "2025-04-02", "allocatedTime": "07:00"},
    ]
    assert [r["id"] for r in filter_seed(rows, allocated_date="2025-04-02")] == ["b", "a"]
    assert [r["id"] for r in filter_seed(rows, status="paid")] == ["c"]
    assert [r["id"] for r in filter_seed(rows, allocated_doctor="Dr. A")] == ["a"]
    assert len(filter_seed(rows, limit=1)) == 1


@pytest.mark.django_db
def test_list_falls_back_to_seed_data(client_for, database_down, monkeypatch):
    monkeypatch.setattr("clinic.views.appointments.Appointment", database_down)
    client = client_for("receptionist")
    r = client.get("/api/appointments")
    assert r.status_code == 200
    assert [a["id"] for a in r.data["appointments"]] == ["apt-seed-1", "apt-seed-2"]
    r = client.get("/api/appointments", {"status": "paid"})
    assert [a["patientName"] for a in r.data["appointments"]] == ["Mary Akinyi"]
