# tests/test_auth.py
from datetime import timedelta

import pytest
from jose import JWTError

from resume_insights.services.auth import create_access_token, decode_access_token


def test_token_round_trip():
    token = create_access_token("owner-42", secret_key="s3cret")
    assert decode_access_token(token, secret_key="s3cret").sub == "owner-42"


def test_wrong_key_and_expiry_are_rejected():
    token = create_access_token("owner-42", secret_key="s3cret")
    with pytest.raises(JWTError):
        decode_access_token(token, secret_key="other")

    expired = create_access_token("owner-42", expires_delta=timedelta(seconds=-1), secret_key="s3cret")
    with pytest.raises(JWTError):
        decode_access_token(expired, secret_key="s3cret")
