"""Bearer token issuance and verification for API callers."""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from uuid import UUID

from jose import JWTError, jwt

from aidreams.api.core.constants import JWT_ALGORITHM
from aidreams.utils.settings.auth import AuthSettings


class InvalidTokenError(Exception):
    pass


@dataclass(frozen=True)
class TokenClaims:
    user_id: UUID
    email: str


def _secret(settings: AuthSettings) -> str:
    if not settings.JWT_SECRET:
        raise RuntimeError("JWT_SECRET is not configured")
    return settings.JWT_SECRET


def issue_access_token(
    user_id: UUID, email: str, settings: AuthSettings | None = None
) -> str:
    settings = settings or AuthSettings()
    payload = {
        "userId": str(user_id),
        "email": email,
        "exp": datetime.now(timezone.utc) + timedelta(days=settings.JWT_EXPIRE_DAYS),
    }
    return jwt.encode(payload, _secret(settings), algorithm=JWT_ALGORITHM)


def decode_access_token(token: str, settings: AuthSettings | None = None) -> TokenClaims:
    """Verify signature and expiry and return the caller's claims."""
    settings = settings or AuthSettings()
    try:
        payload = jwt.decode(token, _secret(settings), algorithms=[JWT_ALGORITHM])
        return TokenClaims(
            user_id=UUID(payload["userId"]), email=payload.get("email", "")
        )
    except (JWTError, KeyError, ValueError, TypeError) as e:
        raise InvalidTokenError(str(e)) from e
