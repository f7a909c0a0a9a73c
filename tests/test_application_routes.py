"""End-to-end tests for the applicant-facing REST surface."""

from __future__ import annotations

from io import BytesIO

import pytest
from flask.testing import FlaskClient


def _upload(client: FlaskClient, headers: dict, document_id: str, name: str = "scan.pdf", content: bytes = b"%PDF-1.4"):
    return client.post(
        f"/api/applications/documents/{document_id}",
        data={"document": (BytesIO(content), name)},
        content_type="multipart/form-data",
        headers=headers,
    )


def _create(client: FlaskClient, headers: dict, visa_type: str = "VITEM_XI"):
    return client.post("/api/applications", json={"visaType": visa_type}, headers=headers)


def test_full_application_journey(client: FlaskClient, applicant_id, admin_id, auth_headers):
    applicant = auth_headers(applicant_id)
    admin = auth_headers(admin_id)

    created = _create(client, applicant)
    assert created.status_code == 201
    application = created.get_json()
    assert application["status"] == "PENDING_DOCUMENTS"
    assert application["visaType"] == "VITEM_XI"
    assert len(application["documents"]) == 5
    assert application["documents"][-1]["type"] == "Proof of Family Ties (VITEM XI)"

    for document in application["documents"]:
        response = _upload(client, applicant, document["id"])
        assert response.status_code == 200
    assert response.get_json()["applicationStatus"] == "IN_REVIEW"

    for document in application["documents"]:
        response = client.put(
            f"/api/admin/applications/{application['id']}/documents/{document['id']}",
            json={"status": "VERIFIED"},
            headers=admin,
        )
        assert response.status_code == 200

    decision = client.put(
        f"/api/admin/applications/{application['id']}/status",
        json={"status": "APPROVED"},
        headers=admin,
    )
    assert decision.status_code == 200
    assert decision.get_json()["application"]["status"] == "APPROVED"
    assert decision.get_json()["emailSent"] is False

    booked = client.post(
        "/api/applications/appointment",
        json={
            "date": "2030-01-15",
            "time": "9:30",
            "personalInfo": {
                "dateOfBirth": "1990-05-17",
                "passportNumber": "HT1234567",
                "nationality": "Haitian",
            },
        },
        headers=applicant,
    )
    assert booked.status_code == 201
    assert booked.get_json()["confirmationGenerated"] is True

    current = client.get("/api/applications", headers=applicant).get_json()
    assert current["status"] == "APPOINTMENT_SCHEDULED"
    assert current["appointment"]["status"] == "CONFIRMED"
    assert current["appointment"]["time"] == "09:30"
    assert current["appointment"]["date"] == "2030-01-15"

    deleted = client.delete(f"/api/applications/{application['id']}", headers=applicant)
    assert deleted.status_code == 403
    assert deleted.get_json()["error"] == "Forbidden"


def test_latest_application_404_when_none(client, applicant_id, auth_headers):
    response = client.get("/api/applications", headers=auth_headers(applicant_id))

    assert response.status_code == 404
    assert response.get_json()["message"] == "Application not found."


def test_create_application_validation(client, applicant_id, auth_headers):
    headers = auth_headers(applicant_id)

    assert client.post("/api/applications", json={}, headers=headers).status_code == 400
    response = _create(client, headers, "TOURIST")
    assert response.status_code == 400
    assert "visaType must be one of" in response.get_json()["message"]


def test_create_application_quota_is_409(client, applicant_id, auth_headers):
    headers = auth_headers(applicant_id)
    for _ in range(5):
        assert _create(client, headers, "VITEM_III").status_code == 201

    response = _create(client, headers, "VITEM_III")

    assert response.status_code == 409
    assert "Maximum number of applications" in response.get_json()["message"]


def test_list_and_get_applications_are_owner_scoped(client, applicant_id, create_user, auth_headers):
    headers = auth_headers(applicant_id)
    first = _create(client, headers, "VITEM_III").get_json()
    _create(client, headers, "VITEM_XI")

    listing = client.get("/api/applications/all", headers=headers)
    assert listing.status_code == 200
    assert len(listing.get_json()) == 2

    assert client.get(f"/api/applications/{first['id']}", headers=headers).status_code == 200

    stranger = auth_headers(create_user("stranger@example.com"))
    assert client.get(f"/api/applications/{first['id']}", headers=stranger).status_code == 404
    assert client.get("/api/applications/all", headers=stranger).get_json() == []


def test_edit_application_endpoint(client, applicant_id, auth_headers):
    headers = auth_headers(applicant_id)
    application = _create(client, headers, "VITEM_III").get_json()

    unchanged = client.put(
        f"/api/applications/{application['id']}", json={"visaType": "VITEM_III"}, headers=headers
    )
    assert unchanged.get_json() == {"message": "No changes needed"}

    changed = client.put(
        f"/api/applications/{application['id']}", json={"visaType": "VITEM_XI"}, headers=headers
    )
    assert changed.status_code == 200
    body = changed.get_json()
    assert body["application"]["visaType"] == "VITEM_XI"
    assert body["application"]["documents"][-1]["type"] == "Proof of Family Ties (VITEM XI)"


def test_delete_application_endpoint(client, applicant_id, auth_headers):
    headers = auth_headers(applicant_id)
    application = _create(client, headers, "VITEM_III").get_json()

    response = client.delete(f"/api/applications/{application['id']}", headers=headers)

    assert response.status_code == 200
    assert client.get(f"/api/applications/{application['id']}", headers=headers).status_code == 404


@pytest.mark.parametrize(
    "name, content, message",
    [
        ("notes.txt", b"hello", "Invalid file type"),
        ("huge.pdf", b"x" * (10 * 1024 * 1024 + 1), "maximum upload size"),
    ],
)
def test_upload_validation(client, applicant_id, auth_headers, name, content, message):
    headers = auth_headers(applicant_id)
    application = _create(client, headers, "VITEM_III").get_json()

    response = _upload(client, headers, application["documents"][0]["id"], name, content)

    assert response.status_code == 400
    assert message in response.get_json()["message"]


def test_upload_without_file(client, applicant_id, auth_headers):
    headers = auth_headers(applicant_id)
    application = _create(client, headers, "VITEM_III").get_json()

    response = client.post(
        f"/api/applications/documents/{application['documents'][0]['id']}",
        data={},
        content_type="multipart/form-data",
        headers=headers,
    )

    assert response.status_code == 400
    assert response.get_json()["message"] == "No file uploaded."


def test_upload_unknown_document(client, applicant_id, auth_headers):
    response = _upload(client, auth_headers(applicant_id), "missing-id")

    assert response.status_code == 404


def test_schedule_before_approval_is_forbidden(client, applicant_id, auth_headers):
    headers = auth_headers(applicant_id)
    _create(client, headers, "VITEM_III")

    response = client.post(
        "/api/applications/appointment",
        json={"date": "2030-01-15", "time": "09:30"},
        headers=headers,
    )

    assert response.status_code == 403
    assert response.get_json()["message"] == "Application must be approved before scheduling."


@pytest.mark.parametrize(
    "payload",
    [
        {"date": "15/01/2030", "time": "09:30"},
        {"date": "2030-01-15", "time": "25:00"},
        {"date": "2030-01-15", "time": "09:30", "personalInfo": {"dateOfBirth": "1990-01-01"}},
        {"date": "2030-01-15", "time": "09:30", "personalInfo": {
            "dateOfBirth": "1990-01-01", "passportNumber": "123", "nationality": "Haitian"}},
    ],
)
def test_schedule_validation(client, applicant_id, auth_headers, payload):
    response = client.post(
        "/api/applications/appointment", json=payload, headers=auth_headers(applicant_id)
    )

    assert response.status_code == 400


def test_availability_endpoint(client, applicant_id, auth_headers):
    headers = auth_headers(applicant_id)

    response = client.get(
        "/api/applications/appointments/availability?month=3&year=2030", headers=headers
    )
    assert response.status_code == 200
    assert response.get_json() == {}

    bad = client.get(
        "/api/applications/appointments/availability?month=13&year=2030", headers=headers
    )
    assert bad.status_code == 400
    assert bad.get_json()["message"] == "Invalid month or year."


def test_availability_for_last_representable_month(client, applicant_id, auth_headers):
    response = client.get(
        "/api/applications/appointments/availability?month=12&year=9999",
        headers=auth_headers(applicant_id),
    )

    assert response.status_code == 200
    assert response.get_json() == {}
