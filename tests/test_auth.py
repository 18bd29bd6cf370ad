from business_directory_api.app.core.security import (
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)
from business_directory_api.app.services.user_service import split_name

from .conftest import API, auth


def _signup_payload(**overrides):
    payload = {
        "email": "new@example.com",
        "password": "secret123",
        "confirm_password": "secret123",
        "accept_terms": True,
        "user_type": "customer",
        "name": "Asha Rao",
        "phone": "9999999999",
    }
    payload.update(overrides)
    return payload


def test_password_mismatch_is_rejected_before_any_write(client):
    resp = client.post(f"{API}/auth/signup", json=_signup_payload(confirm_password="different"))
    assert resp.status_code == 422
    assert "Passwords do not match" in resp.text

    resp = client.post(f"{API}/auth/signin", json={"email": "new@example.com", "password": "secret123"})
    assert resp.status_code == 401


def test_terms_must_be_accepted(client):
    resp = client.post(f"{API}/auth/signup", json=_signup_payload(accept_terms=False))
    assert resp.status_code == 422
    assert "terms and conditions" in resp.text


def test_duplicate_email_conflicts(client):
    assert client.post(f"{API}/auth/signup", json=_signup_payload()).status_code == 201
    resp = client.post(f"{API}/auth/signup", json=_signup_payload(email="NEW@example.com"))
    assert resp.status_code == 409


def test_sign_in_and_session_info(client):
    client.post(f"{API}/auth/signup", json=_signup_payload(user_type="business"))

    assert client.post(
        f"{API}/auth/signin", json={"email": "new@example.com", "password": "wrong"}
    ).status_code == 401

    resp = client.post(f"{API}/auth/signin", json={"email": "new@example.com", "password": "secret123"})
    assert resp.status_code == 200
    session = resp.json()
    assert session["token_type"] == "bearer"
    assert session["user"]["user_type"] == "business"

    info = client.get(f"{API}/auth/session", headers=auth(session["access_token"])).json()
    assert info["user"]["email"] == "new@example.com"
    assert info["is_admin"] is False
    assert info["profile"]["first_name"] == "Asha"
    assert info["profile"]["last_name"] == "Rao"
    assert info["profile"]["is_business_owner"] is True


def test_sign_out_revokes_the_token(client):
    token = client.post(f"{API}/auth/signup", json=_signup_payload()).json()["access_token"]
    headers = auth(token)
    assert client.get(f"{API}/auth/session", headers=headers).status_code == 200

    assert client.post(f"{API}/auth/signout", headers=headers).status_code == 204

    resp = client.get(f"{API}/auth/session", headers=headers)
    assert resp.status_code == 401
    assert resp.json()["detail"] == "Session has ended"


def test_sign_out_only_ends_that_session(client):
    first = client.post(f"{API}/auth/signup", json=_signup_payload()).json()["access_token"]
    second = client.post(
        f"{API}/auth/signin", json={"email": "new@example.com", "password": "secret123"}
    ).json()["access_token"]

    client.post(f"{API}/auth/signout", headers=auth(first))
    assert client.get(f"{API}/auth/session", headers=auth(second)).status_code == 200


def test_missing_or_forged_token(client):
    assert client.get(f"{API}/auth/session").status_code == 401
    resp = client.get(f"{API}/auth/session", headers=auth("not.a.token"))
    assert resp.status_code == 401


def test_admin_flag_follows_allow_list(client, admin_headers):
    info = client.get(f"{API}/auth/session", headers=admin_headers).json()
    assert info["is_admin"] is True


def test_sign_up_and_sign_in_report_admin_flag(client):
    signed_up = client.post(f"{API}/auth/signup", json=_signup_payload(email="admin@example.com")).json()
    assert signed_up["is_admin"] is True

    signed_in = client.post(
        f"{API}/auth/signin", json={"email": "admin@example.com", "password": "secret123"}
    ).json()
    assert signed_in["is_admin"] is True

    regular = client.post(f"{API}/auth/signup", json=_signup_payload()).json()
    assert regular["is_admin"] is False


def test_profile_read_and_update(client, sign_up, admin_headers):
    me = sign_up("me@example.com", name="Ravi")
    other = sign_up("other@example.com")

    resp = client.put(f"{API}/profiles/me", json={"bio": "<b>hi</b>", "last_name": "Kumar"}, headers=me)
    assert resp.status_code == 200
    profile = resp.json()
    assert profile["first_name"] == "Ravi"
    assert profile["last_name"] == "Kumar"
    assert profile["bio"] == "<b>hi</b>"

    my_id = profile["id"]
    assert client.get(f"{API}/profiles/{my_id}", headers=other).status_code == 403
    assert client.get(f"{API}/profiles/{my_id}", headers=admin_headers).status_code == 200
    assert client.get(f"{API}/profiles/{my_id}", headers=me).json()["last_name"] == "Kumar"


def test_bio_survives_read_and_save(client, sign_up):
    me = sign_up("cook@example.com")
    client.put(f"{API}/profiles/me", json={"bio": "Salt & Pepper"}, headers=me)

    read = client.get(f"{API}/profiles/me", headers=me).json()
    client.put(f"{API}/profiles/me", json={"bio": read["bio"]}, headers=me)
    assert client.get(f"{API}/profiles/me", headers=me).json()["bio"] == "Salt & Pepper"


def test_token_round_trip_and_expiry():
    token = create_access_token({"sub": "a@example.com", "uid": 1, "sid": "abc"})
    payload = decode_access_token(token)
    assert payload["uid"] == 1
    assert payload["sid"] == "abc"

    expired = create_access_token({"sub": "a@example.com"}, expires_in=-10)
    assert decode_access_token(expired) is None

    header, body, _ = token.split(".")
    assert decode_access_token(f"{header}.{body}.AAAA") is None


def test_password_hashing():
    hashed = hash_password("secret123")
    assert verify_password("secret123", hashed)
    assert not verify_password("secret124", hashed)
    assert not verify_password("secret123", "garbage")


def test_split_name():
    assert split_name("Asha Rao") == ("Asha", "Rao")
    assert split_name("Mononym") == ("Mononym", None)
    assert split_name("Anna Maria de la Cruz") == ("Anna", "Maria de la Cruz")
