from datetime import date, timedelta

from app.models import Appointment, Doctor


def test_patient_crud(client):
    created = client.post(
        "/api/patients",
        json={
            "name": "  Jane Doe ",
            "email": "jane@example.com",
            "phone": "+1 (555) 010-2030",
            "dateOfBirth": "1990-05-01",
            "healthConditions": [" Asthma ", "Diabetes"],
        },
    )
    assert created.status_code == 201, created.text
    patient = created.json()
    assert patient["name"] == "Jane Doe"
    assert patient["phone"] == "+15550102030"
    assert patient["healthConditions"] == ["Asthma", "Diabetes"]
    assert patient["medications"] == []
    assert patient["smokingStatus"] == "never"

    updated = client.put(f"/api/patients/{patient['id']}", json={"city": "Springfield", "allergies": None})
    assert updated.status_code == 200
    assert updated.json()["city"] == "Springfield"
    assert updated.json()["allergies"] == []
    assert updated.json()["name"] == "Jane Doe"

    assert [p["id"] for p in client.get("/api/patients").json()] == [patient["id"]]
    assert client.get(f"/api/patients/{patient['id']}").json()["email"] == "jane@example.com"


def test_patient_validation(client):
    assert client.post("/api/patients", json={"name": "   "}).status_code == 422
    assert client.post("/api/patients", json={"name": "Jane", "email": "not-an-email"}).status_code == 422
    future = (date.today() + timedelta(days=2)).isoformat()
    assert client.post("/api/patients", json={"name": "Jane", "dateOfBirth": future}).status_code == 422
    assert client.post("/api/patients", json={"name": "Jane", "allergies": ["Latex", " "]}).status_code == 422
    assert client.post("/api/patients", json={"name": "Jane", "allergies": [3]}).status_code == 422


def test_patient_update_cannot_clear_name(client, make_patient):
    patient = make_patient()
    assert client.put(f"/api/patients/{patient.id}", json={"name": None}).status_code == 400


def test_missing_patient_is_404(client):
    assert client.get("/api/patients/404").status_code == 404
    assert client.put("/api/patients/404", json={"city": "Nowhere"}).status_code == 404
    assert client.delete("/api/patients/404").status_code == 404


def test_deleting_patient_removes_their_appointments(client, make_patient, make_appointment, db):
    jane = make_patient()
    john = make_patient(name="John Roe")
    make_appointment(jane)
    make_appointment(jane)
    kept_id = make_appointment(john).id
    jane_id = jane.id

    assert client.delete(f"/api/patients/{jane_id}").status_code == 204

    db.expire_all()
    assert [a.id for a in db.query(Appointment).all()] == [kept_id]
    assert client.get(f"/api/patients/{jane_id}").status_code == 404


def test_patient_appointments(client, make_patient, make_appointment):
    jane = make_patient()
    appointment = make_appointment(jane)
    make_appointment(make_patient(name="John Roe"))

    response = client.get(f"/api/patients/{jane.id}/appointments")

    assert response.status_code == 200
    assert [a["id"] for a in response.json()] == [appointment.id]


def test_specialties(client):
    created = client.post("/api/specialties", json={"name": "Cardiology", "description": "Heart"})
    duplicate = client.post("/api/specialties", json={"name": "Cardiology"})

    assert created.status_code == 201
    assert duplicate.status_code == 409
    assert [s["name"] for s in client.get("/api/specialties").json()] == ["Cardiology"]


def test_doctor_crud(client):
    specialty = client.post("/api/specialties", json={"name": "Dermatology"}).json()

    created = client.post(
        "/api/doctors",
        json={
            "name": "Amelia Hart",
            "specialtyId": specialty["id"],
            "experience": 12,
            "availableDays": ["monday", "Wednesday", "MONDAY"],
        },
    )
    assert created.status_code == 201, created.text
    doctor = created.json()
    assert doctor["availableDays"] == ["Monday", "Wednesday"]
    assert doctor["specialty"]["name"] == "Dermatology"

    updated = client.put(f"/api/doctors/{doctor['id']}", json={"availableDays": None, "qualification": "MD"})
    assert updated.status_code == 200
    assert updated.json()["availableDays"] == []
    assert updated.json()["qualification"] == "MD"

    assert [d["name"] for d in client.get("/api/doctors").json()] == ["Amelia Hart"]


def test_doctor_validation(client):
    assert client.post("/api/doctors", json={"name": "Al"}).status_code == 422
    assert client.post("/api/doctors", json={"name": "Amelia Hart", "experience": -1}).status_code == 422
    assert client.post("/api/doctors", json={"name": "Amelia Hart", "availableDays": ["Funday"]}).status_code == 422


def test_doctor_with_unknown_specialty_is_404(client):
    assert client.post("/api/doctors", json={"name": "Amelia Hart", "specialtyId": 99}).status_code == 404


def test_deleting_doctor_keeps_appointments(client, make_patient, make_doctor, make_appointment, db):
    doctor = make_doctor()
    appointment = make_appointment(make_patient(), doctor)

    assert client.delete(f"/api/doctors/{doctor.id}").status_code == 204

    db.expire_all()
    assert db.query(Doctor).count() == 0
    assert db.get(Appointment, appointment.id).doctor_id is None
    assert client.get(f"/api/appointments/{appointment.id}").json()["doctorId"] is None
