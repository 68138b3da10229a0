from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest
from jose import jwt

from aidreams.api.core.constants import JWT_ALGORITHM
from aidreams.modules.user.tokens import (
    InvalidTokenError,
    decode_access_token,
    issue_access_token,
)
from aidreams.utils.settings.auth import AuthSettings


def test_issued_token_round_trips_claims():
    user_id = uuid4()

    claims = decode_access_token(issue_access_token(user_id, "dreamer@example.com"))

    assert claims.user_id == user_id
    assert claims.email == "dreamer@example.com"


def test_token_signed_with_other_secret_rejected():
    token = issue_access_token(uuid4(), "a@example.com", AuthSettings(JWT_SECRET="other"))

    with pytest.raises(InvalidTokenError):
        decode_access_token(token)


def test_expired_token_rejected():
    settings = AuthSettings()
    token = jwt.encode(
        {
            "userId": str(uuid4()),
            "exp": datetime.now(timezone.utc) - timedelta(minutes=1),
        },
        settings.JWT_SECRET,
        algorithm=JWT_ALGORITHM,
    )

    with pytest.raises(InvalidTokenError):
        decode_access_token(token)


@pytest.mark.parametrize(
    "payload",
    [{"email": "missing-user@example.com"}, {"userId": "not-a-uuid"}],
)
def test_token_with_bad_user_claim_rejected(payload):
    token = jwt.encode(payload, AuthSettings().JWT_SECRET, algorithm=JWT_ALGORITHM)

    with pytest.raises(InvalidTokenError):
        decode_access_token(token)


def test_missing_secret_is_a_configuration_error():
    with pytest.raises(RuntimeError):
        issue_access_token(uuid4(), "a@example.com", AuthSettings(JWT_SECRET=""))
