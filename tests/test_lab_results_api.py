from app.models import LabResult


def _glucose(**overrides):
    body = {
        "testName": " Fasting glucose ",
        "testDate": "2025-03-01T08:30:00Z",
        "value": 5.4,
        "unit": "mmol/L",
        "referenceMin": 3.9,
        "referenceMax": 5.6,
    }
    body.update(overrides)
    return body


def test_lab_results_require_a_session(anonymous_client, make_patient):
    patient = make_patient()
    assert anonymous_client.get(f"/api/patients/{patient.id}/lab-results").status_code == 401


def test_record_and_list_lab_results(client, make_patient):
    patient = make_patient()

    created = client.post(f"/api/patients/{patient.id}/lab-results", json=_glucose())
    assert created.status_code == 201, created.text
    result = created.json()
    assert result["patientId"] == patient.id
    assert result["testName"] == "Fasting glucose"
    assert result["value"] == 5.4
    assert result["unit"] == "mmol/L"
    assert result["testDate"] == "2025-03-01T08:30:00Z"
    assert result["isAbnormal"] is False

    later = client.post(
        f"/api/patients/{patient.id}/lab-results",
        json=_glucose(testDate="2025-03-20T08:30:00Z", value=7.1),
    ).json()
    assert later["isAbnormal"] is True

    listed = client.get(f"/api/patients/{patient.id}/lab-results")
    assert listed.status_code == 200
    assert [r["id"] for r in listed.json()] == [later["id"], result["id"]]


def test_lab_results_are_per_patient(client, make_patient):
    jane = make_patient()
    john = make_patient(name="John Roe")
    client.post(f"/api/patients/{john.id}/lab-results", json=_glucose())

    assert client.get(f"/api/patients/{jane.id}/lab-results").json() == []


def test_abnormal_flag_uses_only_recorded_bounds(client, make_patient):
    patient = make_patient()

    low = client.post(
        f"/api/patients/{patient.id}/lab-results",
        json=_glucose(value=2.0, referenceMax=None),
    ).json()
    unbounded = client.post(
        f"/api/patients/{patient.id}/lab-results",
        json=_glucose(value=99.0, referenceMin=None, referenceMax=None),
    ).json()

    assert low["isAbnormal"] is True
    assert unbounded["isAbnormal"] is False


def test_lab_result_validation(client, make_patient):
    url = f"/api/patients/{make_patient().id}/lab-results"

    assert client.post(url, json=_glucose(testName="   ")).status_code == 422
    assert client.post(url, json=_glucose(value="high")).status_code == 422
    assert client.post(url, json=_glucose(referenceMin=6.0, referenceMax=4.0)).status_code == 422

    missing_date = _glucose()
    del missing_date["testDate"]
    assert client.post(url, json=missing_date).status_code == 422


def test_lab_results_for_missing_patient_is_404(client):
    assert client.get("/api/patients/404/lab-results").status_code == 404
    assert client.post("/api/patients/404/lab-results", json=_glucose()).status_code == 404


def test_deleting_patient_removes_their_lab_results(client, make_patient, db):
    jane = make_patient()
    john = make_patient(name="John Roe")
    jane_id = jane.id
    client.post(f"/api/patients/{jane_id}/lab-results", json=_glucose())
    kept_id = client.post(f"/api/patients/{john.id}/lab-results", json=_glucose()).json()["id"]

    assert client.delete(f"/api/patients/{jane_id}").status_code == 204

    db.expire_all()
    assert [r.id for r in db.query(LabResult).all()] == [kept_id]
