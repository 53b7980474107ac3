import pytest
from fastapi.testclient import TestClient

from examcore.core.constants import RoleLevelEnum


@pytest.fixture
def certified(client: TestClient, make_user, make_survey, auth_headers, questions_of):
    """An enumerator with a passed result and its certificate."""
    admin = make_user(RoleLevelEnum.ADMIN)
    enumerator = make_user(RoleLevelEnum.ENUMERATOR, parent=admin)
    survey = make_survey(sections=1, per_section=4, code="CRT")
    headers = auth_headers(enumerator)

    session = client.post("/sessions/", headers=headers, json={"survey_id": survey.id}).json()["data"]
    for question, correct, _ in questions_of(survey):
        client.post(
            f"/sessions/{session['id']}/answers",
            headers=headers,
            json={"question_id": question.id, "selected_option_ids": [correct]},
        )
    result = client.post(f"/sessions/{session['id']}/complete", headers=headers).json()["data"]
    return {"admin": admin, "enumerator": enumerator, "result": result}


def test_list_and_verify(client: TestClient, certified, auth_headers, make_user):
    r = client.get("/certificates/", headers=auth_headers(certified["enumerator"]))
    assert r.status_code == 200
    certificates = r.json()["data"]
    assert len(certificates) == 1
    number = certificates[0]["certificate_number"]
    assert number == "CRT-2025-000001"

    r = client.get(f"/certificates/verify/{number}")
    assert r.status_code == 200
    assert r.json()["data"]["status"] == "active"

    r = client.get("/certificates/verify/CRT-2025-424242")
    assert r.status_code == 404
    assert r.json()["error"]["code"] == "CERTIFICATE_NOT_FOUND"

    stranger = make_user(RoleLevelEnum.ENUMERATOR)
    assert client.get("/certificates/", headers=auth_headers(stranger)).json()["data"] == []


def test_download_counts(client: TestClient, certified, auth_headers, make_user):
    certificate_id = certified["result"]["certificate_id"]
    headers = auth_headers(certified["enumerator"])

    client.post(f"/certificates/{certificate_id}/download", headers=headers)
    r = client.post(f"/certificates/{certificate_id}/download", headers=headers)
    assert r.json()["data"]["download_count"] == 2

    stranger = make_user(RoleLevelEnum.ENUMERATOR)
    r = client.post(f"/certificates/{certificate_id}/download", headers=auth_headers(stranger))
    assert r.status_code == 403


def test_revoke_requires_admin(client: TestClient, certified, auth_headers):
    certificate_id = certified["result"]["certificate_id"]

    r = client.post(
        f"/certificates/{certificate_id}/revoke",
        headers=auth_headers(certified["enumerator"]),
        json={"reason": "self-revoke"},
    )
    assert r.status_code == 403

    r = client.post(
        f"/certificates/{certificate_id}/revoke",
        headers=auth_headers(certified["admin"]),
        json={"reason": "Answers shared with another candidate"},
    )
    assert r.status_code == 200
    data = r.json()["data"]
    assert data["status"] == "revoked"
    assert data["revoked_by"] == certified["admin"].id


def test_admin_issue_returns_existing_certificate(client: TestClient, certified, auth_headers):
    result = certified["result"]
    r = client.post(f"/certificates/results/{result['id']}", headers=auth_headers(certified["admin"]))
    assert r.status_code == 201
    assert r.json()["data"]["id"] == result["certificate_id"]
