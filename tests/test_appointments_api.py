from datetime import datetime, timezone

from app.models import Appointment, NotificationLog
from app.models.appointment import AppointmentStatus


def create(client, patient_id, doctor_id=None, date="2025-03-01T10:00:00Z", **extra):
    payload = {"patientId": patient_id, "date": date, **extra}
    if doctor_id is not None:
        payload["doctorId"] = doctor_id
    return client.post("/api/appointments", json=payload)


def test_requires_a_session(anonymous_client):
    response = anonymous_client.get("/api/appointments")
    assert response.status_code == 401
    assert response.json() == {"message": "Not authenticated"}


def test_create_returns_scheduled_appointment(client, make_patient, make_doctor):
    patient = make_patient()
    make_doctor(name="First Doctor")
    doctor = make_doctor(name="Second Doctor")
    assert (patient.id, doctor.id) == (1, 2)

    response = create(client, 1, 2, notes="Follow-up")

    assert response.status_code == 201, response.text
    body = response.json()
    assert body["id"] > 0
    assert body["status"] == "scheduled"
    assert body["date"] == "2025-03-01T10:00:00Z"
    assert body["patientId"] == 1
    assert body["doctorId"] == 2
    assert body["patient"]["name"] == "Jane Doe"
    assert body["doctor"]["name"] == "Second Doctor"
    assert "confirm" in body["availableActions"]


def test_created_appointment_is_listed(client, make_patient, make_doctor):
    patient = make_patient()
    doctor = make_doctor()
    created = create(client, patient.id, doctor.id, date="2025-03-01T10:00:00Z").json()

    listed = client.get("/api/appointments").json()

    assert len(listed) == 1
    record = listed[0]
    assert record["id"] == created["id"]
    assert record["patientId"] == patient.id
    assert record["doctorId"] == doctor.id
    assert record["date"] == "2025-03-01T10:00:00Z"
    assert record["status"] == "scheduled"


def test_create_sends_notifications_in_background(client, make_patient, db):
    patient = make_patient(email="jane@example.com")

    response = create(client, patient.id)

    assert response.status_code == 201
    log = db.query(NotificationLog).one()
    assert log.recipient == "jane@example.com"
    assert log.appointment_id == response.json()["id"]


def test_create_with_unknown_patient_is_404(client):
    response = create(client, 42)
    assert response.status_code == 404
    assert "message" in response.json()


def test_create_with_unknown_doctor_is_404(client, make_patient):
    response = create(client, make_patient().id, doctor_id=42)
    assert response.status_code == 404


def test_create_validates_payload(client, make_patient):
    patient = make_patient()

    assert create(client, patient.id, date="not-a-date").status_code == 422
    missing = client.post("/api/appointments", json={"patientId": patient.id})
    assert missing.status_code == 422
    assert missing.json()["message"]


def test_list_filters(client, make_patient, make_doctor, make_appointment):
    jane = make_patient()
    john = make_patient(name="John Roe")
    doctor = make_doctor()
    make_appointment(jane, doctor, scheduled_at=datetime(2030, 1, 7, 9, tzinfo=timezone.utc))
    make_appointment(john, scheduled_at=datetime(2030, 2, 7, 9, tzinfo=timezone.utc))
    make_appointment(john, doctor, scheduled_at=datetime(2030, 3, 7, 9, tzinfo=timezone.utc), status=AppointmentStatus.CANCELLED)

    by_doctor = client.get("/api/appointments", params={"doctorId": doctor.id}).json()
    by_patient = client.get("/api/appointments", params={"patientId": john.id}).json()
    cancelled = client.get("/api/appointments", params={"status": "cancelled"}).json()
    in_window = client.get(
        "/api/appointments", params={"from": "2030-02-01T00:00:00Z", "to": "2030-02-28T00:00:00Z"}
    ).json()

    assert len(by_doctor) == 2
    assert {a["patientId"] for a in by_patient} == {john.id}
    assert [a["status"] for a in cancelled] == ["cancelled"]
    assert [a["date"] for a in in_window] == ["2030-02-07T09:00:00Z"]


def test_list_rejects_unknown_status(client):
    response = client.get("/api/appointments", params={"status": "done"})
    assert response.status_code == 400


def test_get_missing_appointment_is_404(client):
    assert client.get("/api/appointments/999").status_code == 404


def test_status_update_is_idempotent(client, make_patient, make_appointment):
    appointment = make_appointment(make_patient())

    first = client.put(f"/api/appointments/{appointment.id}/status", json={"status": "confirmed"})
    second = client.put(f"/api/appointments/{appointment.id}/status", json={"status": "confirmed"})

    assert first.status_code == 200
    assert second.status_code == 200
    assert second.json()["status"] == "confirmed"


def test_status_update_rejects_unknown_values(client, make_patient, make_appointment):
    appointment = make_appointment(make_patient())

    for value in ("done", "rescheduled"):
        response = client.put(f"/api/appointments/{appointment.id}/status", json={"status": value})
        assert response.status_code == 400
        assert "Invalid status" in response.json()["message"]


def test_cancelled_is_final_for_status_updates(client, make_patient, make_appointment):
    appointment = make_appointment(make_patient(), status=AppointmentStatus.CANCELLED)

    response = client.put(f"/api/appointments/{appointment.id}/status", json={"status": "scheduled"})

    assert response.status_code == 409
    assert client.get(f"/api/appointments/{appointment.id}").json()["availableActions"] == []


def test_reinstate_requires_admin(client, admin_client, make_patient, make_appointment):
    appointment = make_appointment(make_patient(), status=AppointmentStatus.CANCELLED)

    forbidden = client.post(f"/api/appointments/{appointment.id}/reinstate")
    allowed = admin_client.post(f"/api/appointments/{appointment.id}/reinstate")

    assert forbidden.status_code == 403
    assert forbidden.json() == {"message": "Administrator privileges required."}
    assert allowed.status_code == 200
    assert allowed.json()["status"] == "scheduled"


def test_reinstate_only_applies_to_cancelled(admin_client, make_patient, make_appointment):
    appointment = make_appointment(make_patient())
    assert admin_client.post(f"/api/appointments/{appointment.id}/reinstate").status_code == 409


def test_start_consultation_once(client, make_patient, make_appointment):
    appointment = make_appointment(make_patient())

    first = client.post(f"/api/appointments/{appointment.id}/start")
    second = client.post(f"/api/appointments/{appointment.id}/start")

    assert first.status_code == 200
    assert first.json()["actualStartTime"] is not None
    assert second.status_code == 409


def test_reschedule_moves_date_and_records_reason(client, make_patient, make_appointment):
    appointment = make_appointment(make_patient(), notes="Bring scans", status=AppointmentStatus.CONFIRMED)

    response = client.post(
        f"/api/appointments/{appointment.id}/reschedule",
        json={"date": "2030-01-09T14:30:00Z", "reason": "Doctor on leave"},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["date"] == "2030-01-09T14:30:00Z"
    assert body["status"] == "scheduled"
    assert body["notes"] == "Bring scans\nRescheduled: Doctor on leave"


def test_reschedule_cancelled_is_409(client, make_patient, make_appointment):
    appointment = make_appointment(make_patient(), status=AppointmentStatus.CANCELLED)
    response = client.post(f"/api/appointments/{appointment.id}/reschedule", json={"date": "2030-01-09T14:30:00Z"})
    assert response.status_code == 409


def test_update_fields(client, make_patient, make_doctor, make_appointment):
    appointment = make_appointment(make_patient())
    doctor = make_doctor()

    response = client.put(
        f"/api/appointments/{appointment.id}",
        json={"doctorId": doctor.id, "notes": "Moved to Dr. House", "isTeleconsultation": True},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["doctorId"] == doctor.id
    assert body["isTeleconsultation"] is True
    assert body["date"] == "2030-01-07T10:00:00Z"


def test_update_cannot_clear_patient(client, make_patient, make_appointment):
    appointment = make_appointment(make_patient())
    response = client.put(f"/api/appointments/{appointment.id}", json={"patientId": None})
    assert response.status_code == 400


def test_delete(client, make_patient, make_appointment, db):
    appointment = make_appointment(make_patient())

    assert client.delete(f"/api/appointments/{appointment.id}").status_code == 204
    assert client.delete(f"/api/appointments/{appointment.id}").status_code == 404
    db.expire_all()
    assert db.query(Appointment).count() == 0
