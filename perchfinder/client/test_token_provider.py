# perchfinder/client/test_token_provider.py
from unittest.mock import MagicMock

import jwt
import pytest
import requests

from perchfinder.client.token_provider import FirebaseUserSession, decode_claims
from perchfinder.core.errors import Unauthenticated

NOW = 1_700_000_000


def _token(exp, uid="user-1", verified=True):
    return jwt.encode({"user_id": uid, "sub": uid, "exp": exp, "email_verified": verified},
                      "test-signing-key-not-used-for-verification", algorithm="HS256")


def _response(json_data=None, error=None):
    response = MagicMock()
    response.json.return_value = json_data
    if error:
        response.raise_for_status.side_effect = error
    return response


def test_claims_are_read_without_verification():
    claims = decode_claims(_token(NOW + 3600))
    assert claims["user_id"] == "user-1"


def test_malformed_token_is_unauthenticated():
    with pytest.raises(Unauthenticated):
        decode_claims("not-a-jwt")


def test_fresh_token_is_returned_without_refresh():
    session = MagicMock()
    user = FirebaseUserSession("api-key", _token(NOW + 3600), "refresh-1", session=session, clock=lambda: NOW)

    assert user.get_id_token() == user.id_token
    assert user.uid == "user-1"
    assert user.email_verified
    session.post.assert_not_called()


def test_token_close_to_expiry_is_refreshed():
    new_token = _token(NOW + 3600, verified=False)
    session = MagicMock()
    session.post.return_value = _response({"id_token": new_token, "refresh_token": "refresh-2"})
    user = FirebaseUserSession("api-key", _token(NOW + 60), "refresh-1", session=session, clock=lambda: NOW)

    assert user.get_id_token() == new_token
    assert user.refresh_token == "refresh-2"
    assert not user.email_verified
    _, kwargs = session.post.call_args
    assert kwargs["data"] == {"grant_type": "refresh_token", "refresh_token": "refresh-1"}
    assert kwargs["params"] == {"key": "api-key"}


def test_failed_refresh_is_unauthenticated():
    session = MagicMock()
    session.post.return_value = _response(error=requests.HTTPError("400 TOKEN_EXPIRED"))
    user = FirebaseUserSession("api-key", _token(NOW - 10), "refresh-1", session=session, clock=lambda: NOW)

    with pytest.raises(Unauthenticated):
        user.get_id_token()


def test_refresh_without_id_token_is_unauthenticated():
    old_token = _token(NOW - 10)
    session = MagicMock()
    session.post.return_value = _response({"refresh_token": "refresh-2"})
    user = FirebaseUserSession("api-key", old_token, "refresh-1", session=session, clock=lambda: NOW)

    with pytest.raises(Unauthenticated):
        user.get_id_token()
    assert user.id_token == old_token
    assert user.refresh_token == "refresh-1"


def test_sign_in_with_password():
    session = MagicMock()
    session.post.return_value = _response({"idToken": _token(NOW + 3600, uid="user-9"), "refreshToken": "r"})

    user = FirebaseUserSession.sign_in_with_password("api-key", "anna@example.se", "hemligt", session=session)

    assert user.uid == "user-9"
    _, kwargs = session.post.call_args
    assert kwargs["json"]["returnSecureToken"] is True


def test_sign_in_without_tokens_is_unauthenticated():
    session = MagicMock()
    session.post.return_value = _response({"localId": "user-9"})

    with pytest.raises(Unauthenticated):
        FirebaseUserSession.sign_in_with_password("api-key", "anna@example.se", "hemligt", session=session)
