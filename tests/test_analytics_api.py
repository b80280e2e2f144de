from datetime import date, datetime, timedelta, timezone

from app.models.appointment import AppointmentStatus


def test_dashboard_uses_camel_case_keys(client, make_patient, make_appointment):
    patient = make_patient(gender="Female", region="North", health_conditions=["Asthma"])
    now = datetime.now(timezone.utc)
    make_appointment(patient, scheduled_at=now - timedelta(days=1), status=AppointmentStatus.CONFIRMED)
    make_appointment(patient, scheduled_at=now - timedelta(days=2), status=AppointmentStatus.CANCELLED)

    response = client.get("/api/analytics/dashboard", params={"range": "monthly", "months": 3})

    assert response.status_code == 200, response.text
    body = response.json()
    assert body["totalAppointments"] == 2
    assert body["totalPatients"] == 1
    assert body["completionRate"] == 50
    assert body["cancellationRate"] == 50
    assert body["statusDistribution"] == {"scheduled": 0, "confirmed": 1, "cancelled": 1}
    assert len(body["appointmentTrend"]) == 4
    assert body["genderDistribution"] == {"Female": 1}
    assert body["healthConditions"] == [{"condition": "Asthma", "count": 1}]
    assert body["retentionRate"] == 100


def test_dashboard_on_empty_database(client):
    body = client.get("/api/analytics/dashboard").json()

    assert body["totalAppointments"] == 0
    assert body["completionRate"] == 0
    assert body["visitFrequency"] == []


def test_dashboard_rejects_unknown_range(client):
    assert client.get("/api/analytics/dashboard", params={"range": "hourly"}).status_code == 422


def test_slot_recommendations(client, make_doctor):
    doctor = make_doctor(available_days=["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"])
    target = (date.today() + timedelta(days=7)).isoformat()

    response = client.get(
        "/api/appointments/analytics/slots",
        params={"doctorId": doctor.id, "date": target, "duration": 60},
    )

    assert response.status_code == 200, response.text
    body = response.json()
    assert body["date"] == target
    assert len(body["suggestedTimeSlots"]) == 8
    assert set(body["suggestedTimeSlots"][0]) >= {"startTime", "endTime", "expectedWaitTime", "probability"}
    assert body["alternativeSlots"] == []


def test_slot_recommendations_for_day_off(client, make_doctor):
    doctor = make_doctor(available_days=["Monday"])
    # 2030-01-08 is a Tuesday
    response = client.get(
        "/api/appointments/analytics/slots",
        params={"doctorId": doctor.id, "date": "2030-01-08"},
    )

    assert response.status_code == 200
    assert response.json()["unavailableReason"] == "Doctor is not available on Tuesday"
    assert response.json()["suggestedTimeSlots"] == []


def test_slot_recommendations_reject_bad_input(client, make_doctor):
    doctor = make_doctor()
    bad_duration = client.get(
        "/api/appointments/analytics/slots", params={"doctorId": doctor.id, "date": "2030-01-07", "duration": 20}
    )
    unknown_doctor = client.get("/api/appointments/analytics/slots", params={"doctorId": 999, "date": "2030-01-07"})

    assert bad_duration.status_code == 400
    assert unknown_doctor.status_code == 404


def test_wait_time_prediction(client, make_patient, make_doctor, make_appointment):
    doctor = make_doctor()
    patient = make_patient()
    started = datetime(2030, 1, 7, 10, 20, tzinfo=timezone.utc)
    make_appointment(
        patient,
        doctor,
        scheduled_at=datetime(2030, 1, 7, 10, tzinfo=timezone.utc),
        status=AppointmentStatus.CONFIRMED,
        actual_start_time=started,
    )

    response = client.get(
        "/api/appointments/analytics/wait-time",
        params={"doctorId": doctor.id, "scheduledTime": "2030-01-14T10:00:00Z"},
    )

    assert response.status_code == 200, response.text
    assert response.json() == {"predictedWaitTime": 20, "confidence": 0.12, "sampleSize": 1}


def test_wait_time_for_unknown_doctor(client):
    response = client.get(
        "/api/appointments/analytics/wait-time",
        params={"doctorId": 999, "scheduledTime": "2030-01-14T10:00:00Z"},
    )
    assert response.status_code == 404
