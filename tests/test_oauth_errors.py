import json

import pytest

from workspace_mcp.oauth_errors import (
    AudienceMismatchError,
    JwtError,
    JwtSignError,
    JwtVerifyError,
    OAuthErrorBody,
    oauth_err,
)


def test_oauth_err_with_description():
    body = oauth_err("invalid_request", "missing code")
    assert body.to_dict() == {
        "error": "invalid_request",
        "error_description": "missing code",
    }


def test_oauth_err_without_description_omits_key():
    body = oauth_err("server_error")
    assert body.error_description is None
    assert body.to_dict() == {"error": "server_error"}


def test_oauth_err_matches_direct_construction():
    assert oauth_err("invalid_grant", "PKCE verification failed") == OAuthErrorBody(
        error="invalid_grant", error_description="PKCE verification failed"
    )


def test_to_dict_serializes_as_json():
    body = oauth_err("invalid_client", "unknown client_id")
    assert json.loads(json.dumps(body.to_dict())) == body.to_dict()


def test_audience_mismatch_message():
    assert str(AudienceMismatchError()) == "audience mismatch"


def test_sign_error_message_and_detail():
    err = JwtSignError("bad key")
    assert str(err).startswith("sign: ")
    assert err.detail == "bad key"


def test_verify_error_message():
    assert str(JwtVerifyError("expired")) == "verify: expired"


@pytest.mark.parametrize(
    "err, prefix",
    [
        (JwtSignError("a"), "sign: "),
        (JwtVerifyError("b"), "verify: "),
        (AudienceMismatchError(), "audience mismatch"),
    ],
)
def test_errors_are_jwt_errors(err, prefix):
    assert isinstance(err, JwtError)
    assert str(err).startswith(prefix)