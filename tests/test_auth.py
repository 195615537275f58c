"""Actor resolution from bearer tokens."""

from tests.conftest import DOCTOR_1, NURSE, PATIENT_1, make_token


def test_missing_token_is_401(client) -> None:
    response = client.get("/appointments")
    assert response.status_code == 401
    assert response.json()["code"] == "unauthenticated"


def test_garbage_token_is_401(client) -> None:
    response = client.get("/appointments", headers={"Authorization": "Bearer not.a.jwt"})
    assert response.status_code == 401


def test_expired_token_is_401(client) -> None:
    token = make_token(DOCTOR_1, expires_in=-60)
    response = client.get("/appointments", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401
    assert "expired" in response.json()["error"]


def test_wrong_audience_is_401(client) -> None:
    token = make_token(DOCTOR_1, aud="someone-else")
    response = client.get("/appointments", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401


def test_token_for_unknown_user_is_401(client) -> None:
    token = make_token("no-such-user")
    response = client.get("/appointments", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401


def test_unknown_role_fails_closed(client) -> None:
    token = make_token(NURSE)
    headers = {"Authorization": f"Bearer {token}"}
    assert client.get("/appointments", headers=headers).status_code == 403
    response = client.post(
        "/appointments",
        json={"doctorId": DOCTOR_1, "patientId": PATIENT_1, "startsAt": "2024-01-01T10:00:00Z"},
        headers=headers,
    )
    assert response.status_code == 403


def test_health_needs_no_token(client) -> None:
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}
