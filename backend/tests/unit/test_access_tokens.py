from datetime import timedelta

import jwt
import pytest

from app.auth import create_access_token, decode_access_token


def test_round_trip_keeps_subject():
    token = create_access_token({"sub": "01HXYZ"})
    payload = decode_access_token(token)

    assert payload["sub"] == "01HXYZ"
    assert "exp" in payload


def test_expired_token_is_rejected():
    token = create_access_token({"sub": "01HXYZ"}, expires_delta=timedelta(seconds=-5))

    with pytest.raises(jwt.ExpiredSignatureError):
        decode_access_token(token)


def test_token_signed_with_other_key_is_rejected():
    token = jwt.encode({"sub": "01HXYZ"}, "someone-elses-key", algorithm="HS256")

    with pytest.raises(jwt.InvalidSignatureError):
        decode_access_token(token)


def test_expired_token_is_401_over_http(client):
    token = create_access_token({"sub": "01HXYZ"}, expires_delta=timedelta(seconds=-5))

    response = client.get("/api/v1/users/me", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 401
    assert response.headers["www-authenticate"] == "Bearer"


def test_token_for_unknown_user_is_401(client):
    token = create_access_token({"sub": "01HNOTAUSER000000000000000"})

    response = client.get("/api/v1/users/me", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 401
