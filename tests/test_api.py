"""End-to-end tests of the HTTP API with a fake calendar provider"""

from datetime import datetime

import pytest

from mindbridge.models import Doctor
from mindbridge.models_google_calendar import GoogleCalendarIntegration
from mindbridge.security_utils import encrypt_token
from mindbridge.shared.validators import parse_iso_datetime

from .conftest import auth_headers, busy, utc


def book(client, user, doctor, when="2024-06-01T10:00:00Z", **extra):
    return client.post(
        "/appointments",
        json={"doctorId": doctor.id, "dateTime": when, **extra},
        headers=auth_headers(user),
    )


class TestAppointmentsAPI:
    def test_create_and_fetch(self, client, patient, doctor):
        response = book(client, patient, doctor, notes="Intro call")

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Appointment created successfully"
        assert body["calendarSynced"] is None
        appointment = body["appointment"]
        assert appointment["status"] == "confirmed"
        assert appointment["doctorName"] == "Jordan Lee"
        assert parse_iso_datetime(appointment["dateTime"]) == utc(2024, 6, 1, 10)

        detail = client.get(f"/appointments/{appointment['id']}", headers=auth_headers(patient))
        assert detail.status_code == 200
        assert detail.json()["doctor"]["specialty"] == "Psychiatrist"

    def test_double_booking_returns_409(self, client, patient, other_patient, doctor):
        assert book(client, patient, doctor).status_code == 200

        response = book(client, other_patient, doctor)

        assert response.status_code == 409
        assert response.json() == {"detail": "There is already an appointment at this time"}

    def test_busy_slot_returns_400(self, client, calendar, patient, doctor):
        calendar.busy = [busy(utc(2024, 6, 1, 10), utc(2024, 6, 1, 11))]

        response = book(client, patient, doctor)

        assert response.status_code == 400
        assert response.json() == {"detail": "The selected time slot is not available"}

    def test_missing_fields_returns_400(self, client, patient):
        response = client.post("/appointments", json={"notes": "hi"}, headers=auth_headers(patient))
        assert response.status_code == 400
        assert response.json() == {"detail": "Doctor ID and date/time are required"}

    def test_unknown_doctor_returns_404(self, client, patient, doctor):
        response = client.post(
            "/appointments",
            json={"doctorId": doctor.id + 100, "dateTime": "2024-06-01T10:00:00Z"},
            headers=auth_headers(patient),
        )
        assert response.status_code == 404

    def test_calendar_outage_returns_502(self, client, calendar, patient, doctor):
        calendar.fail_busy = True
        assert book(client, patient, doctor).status_code == 502

    def test_malformed_body_returns_422(self, client, patient):
        response = client.post(
            "/appointments", json={"doctorId": "abc", "dateTime": "soon"}, headers=auth_headers(patient)
        )
        assert response.status_code == 422

    def test_mirror_failure_reported_but_booked(self, client, calendar, patient, doctor):
        calendar.fail_events = True

        response = book(client, patient, doctor, useGoogleCalendar=True)

        assert response.status_code == 200
        assert response.json()["calendarSynced"] is False
        assert response.json()["appointment"]["status"] == "confirmed"

    def test_list_is_scoped_to_user(self, client, patient, other_patient, doctor):
        book(client, patient, doctor, "2024-06-01T09:00:00Z")
        book(client, patient, doctor, "2024-06-01T11:00:00Z")
        book(client, other_patient, doctor, "2024-06-01T13:00:00Z")

        response = client.get("/appointments", headers=auth_headers(patient))

        assert response.status_code == 200
        times = [parse_iso_datetime(a["dateTime"]).hour for a in response.json()]
        assert times == [11, 9]

    def test_cancel_then_cancel_again(self, client, patient, doctor):
        appointment_id = book(client, patient, doctor).json()["appointment"]["id"]

        first = client.delete(f"/appointments/{appointment_id}", headers=auth_headers(patient))
        second = client.delete(f"/appointments/{appointment_id}", headers=auth_headers(patient))

        assert first.status_code == 200
        assert first.json()["message"] == "Appointment cancelled successfully"
        assert second.status_code == 400
        assert second.json() == {"detail": "Appointment is already cancelled"}

        detail = client.get(f"/appointments/{appointment_id}", headers=auth_headers(patient))
        assert detail.json()["status"] == "cancelled"

    def test_reschedule(self, client, patient, doctor):
        appointment_id = book(client, patient, doctor).json()["appointment"]["id"]

        response = client.put(
            f"/appointments/{appointment_id}",
            json={"dateTime": "2024-06-01T16:00:00Z"},
            headers=auth_headers(patient),
        )

        assert response.status_code == 200
        assert parse_iso_datetime(response.json()["appointment"]["dateTime"]) == utc(2024, 6, 1, 16)

    def test_invalid_status_returns_422(self, client, patient, doctor):
        appointment_id = book(client, patient, doctor).json()["appointment"]["id"]
        response = client.put(
            f"/appointments/{appointment_id}", json={"status": "finished"}, headers=auth_headers(patient)
        )
        assert response.status_code == 422

    def test_pending_status_returns_422(self, client, patient, doctor):
        appointment_id = book(client, patient, doctor).json()["appointment"]["id"]
        response = client.put(
            f"/appointments/{appointment_id}", json={"status": "pending"}, headers=auth_headers(patient)
        )
        assert response.status_code == 422

    def test_sync(self, client, calendar, patient, doctor):
        book(client, patient, doctor)

        response = client.post("/appointments/sync", headers=auth_headers(patient))

        assert response.status_code == 200
        assert response.json()["counts"] == {"created": 1}
        assert len(calendar.events) == 1

    def test_requires_authentication(self, client):
        assert client.get("/appointments").status_code in (401, 403)


class TestDoctorsAPI:
    def test_slots_for_day(self, client, calendar, patient, doctor):
        calendar.busy = [busy(utc(2024, 6, 1, 10), utc(2024, 6, 1, 11, 30))]

        response = client.get(f"/doctors/{doctor.id}/slots", params={"date": "2024-06-01"}, headers=auth_headers(patient))

        assert response.status_code == 200
        hours = [parse_iso_datetime(s["start"]).hour for s in response.json()["slots"]]
        assert hours == [9, 12, 13, 14, 15, 16]

    def test_invalid_date_returns_400(self, client, patient, doctor):
        response = client.get(f"/doctors/{doctor.id}/slots", params={"date": "June 1st"}, headers=auth_headers(patient))
        assert response.status_code == 400
        assert response.json() == {"detail": "Invalid date format"}

    @pytest.mark.parametrize("value", ["", "   "])
    def test_blank_date_returns_400(self, client, patient, doctor, value):
        response = client.get(f"/doctors/{doctor.id}/slots", params={"date": value}, headers=auth_headers(patient))
        assert response.status_code == 400
        assert response.json() == {"detail": "Invalid date format"}

    def test_blank_date_on_listing_skips_availability(self, client, calendar, patient, doctor):
        response = client.get("/doctors?date=", headers=auth_headers(patient))
        assert response.status_code == 200
        assert response.json()["doctors"][0]["availableSlots"] is None
        assert calendar.busy_calls == 0

    def test_list_with_availability(self, client, patient, doctor):
        response = client.get("/doctors", params={"date": "2024-06-01"}, headers=auth_headers(patient))

        assert response.status_code == 200
        [listed] = response.json()["doctors"]
        assert listed["name"] == "Jordan Lee"
        assert len(listed["availableSlots"]) == 8
        assert listed["availabilityError"] is None

    def test_list_with_calendar_outage(self, client, calendar, patient, doctor):
        calendar.fail_busy = True

        response = client.get("/doctors", params={"date": "2024-06-01"}, headers=auth_headers(patient))

        assert response.status_code == 200
        [listed] = response.json()["doctors"]
        assert listed["availableSlots"] == []
        assert listed["availabilityError"] == "Failed to get availability"

    def test_list_filters_by_specialty(self, client, db, patient, doctor):
        db.add(Doctor(name="Casey Park", specialty="Neurologist", verified=True))
        db.commit()

        response = client.get("/doctors", params={"specialty": "Neurologist"}, headers=auth_headers(patient))

        assert [d["name"] for d in response.json()["doctors"]] == ["Casey Park"]

    def test_unknown_doctor_returns_404(self, client, patient):
        assert client.get("/doctors/999", headers=auth_headers(patient)).status_code == 404


class TestDoctorDashboardAPI:
    def test_patient_is_forbidden(self, client, patient, doctor):
        response = client.get("/doctor/appointments", headers=auth_headers(patient))
        assert response.status_code == 403

    def test_doctor_sees_past_bookings(self, client, patient, doctor_user, doctor):
        book(client, patient, doctor)

        response = client.get("/doctor/appointments", params={"past": "true"}, headers=auth_headers(doctor_user))

        assert response.status_code == 200
        [appointment] = response.json()
        assert appointment["patientName"] == "Sam Patient"
        assert appointment["status"] == "confirmed"


class TestRecommendationsAPI:
    def test_recommends_specialist_with_doctors(self, client, patient, doctor):
        response = client.post(
            "/recommendations/symptoms",
            json={"message": "I've been dealing with anxiety at work"},
            headers=auth_headers(patient),
        )

        assert response.status_code == 200
        body = response.json()
        assert body["recommendation"]["specialist"] == "Psychiatrist"
        assert [d["name"] for d in body["doctors"]] == ["Jordan Lee"]

    def test_empty_message_is_rejected(self, client, patient):
        response = client.post("/recommendations/symptoms", json={"message": "   "}, headers=auth_headers(patient))
        assert response.status_code == 422


def test_health(client):
    assert client.get("/health").json() == {"status": "healthy"}


class TestGoogleCalendarAPI:
    def test_status_when_not_connected(self, client, doctor_user):
        response = client.get("/google-calendar/status", headers=auth_headers(doctor_user))
        assert response.status_code == 200
        assert response.json()["connected"] is False

    def test_status_when_connected(self, client, db, doctor_user):
        db.add(
            GoogleCalendarIntegration(
                user_id=doctor_user.id,
                access_token=encrypt_token("access"),
                refresh_token=encrypt_token("refresh"),
                token_expires_at=datetime(2030, 1, 1),
                google_user_email="dr.lee@example.com",
                google_calendar_id="primary",
            )
        )
        db.commit()
        db.refresh(doctor_user)
        assert doctor_user.calendar_integration.google_calendar_id == "primary"

        response = client.get("/google-calendar/status", headers=auth_headers(doctor_user))

        assert response.json()["connected"] is True
        assert response.json()["user_email"] == "dr.lee@example.com"

    def test_disconnect_without_integration_returns_404(self, client, doctor_user):
        response = client.post("/google-calendar/disconnect", headers=auth_headers(doctor_user))
        assert response.status_code == 404
