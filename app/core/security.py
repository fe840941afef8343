"""Password hashing and the JWT codec used for access and refresh tokens."""

from datetime import UTC, datetime, timedelta
from typing import Any

import bcrypt
import jwt

# Bcrypt cost (rounds); 12 is a good default for security vs speed.
BCRYPT_ROUNDS = 12

# Accepted password lengths for new accounts.
PASSWORD_MIN_LEN = 8
PASSWORD_MAX_LEN = 128


class InvalidToken(Exception):
    """Token is malformed or its signature does not match."""


class ExpiredToken(InvalidToken):
    """Token signature is valid but its exp claim is in the past."""


def hash_password(plain_password: str) -> str:
    """Hash a plain-text password for storage. Do not store plain passwords."""
    # bcrypt has a 72-byte limit; truncate to avoid errors (validation already limits length).
    pw_bytes = plain_password.encode("utf-8")[:72]
    return bcrypt.hashpw(pw_bytes, bcrypt.gensalt(rounds=BCRYPT_ROUNDS)).decode("utf-8")


def verify_password(plain_password: str, hashed: str) -> bool:
    """Verify a plain password against a stored hash."""
    pw_bytes = plain_password.encode("utf-8")[:72]
    try:
        return bcrypt.checkpw(pw_bytes, hashed.encode("utf-8"))
    except (ValueError, TypeError):
        return False


class TokenCodec:
    """
    Signs and verifies compact JWTs.

    Access and refresh tokens share one codec; they differ only in payload
    shape and TTL. Expiry is compared against wall-clock time with no leeway.
    """

    def __init__(self, secret: str, algorithm: str = "HS256") -> None:
        if not secret:
            raise ValueError("Token secret must be non-empty")
        self._secret = secret
        self._algorithm = algorithm

    def issue(
        self,
        payload: dict[str, Any],
        ttl: int,
        now: datetime | None = None,
    ) -> str:
        """Return a signed token carrying payload plus iat and exp = iat + ttl seconds."""
        issued_at = now or datetime.now(UTC)
        claims = dict(payload)
        claims["iat"] = issued_at
        claims["exp"] = issued_at + timedelta(seconds=ttl)
        return jwt.encode(claims, self._secret, algorithm=self._algorithm)

    def verify(self, token: str, allow_expired: bool = False) -> dict[str, Any]:
        """
        Decode token and return its claims.
        Raises ExpiredToken past exp, InvalidToken for anything else.
        allow_expired still checks the signature but skips the exp comparison.
        """
        try:
            return jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={"require": ["exp", "iat"], "verify_exp": not allow_expired},
            )
        except jwt.ExpiredSignatureError as e:
            raise ExpiredToken("Token has expired") from e
        except jwt.PyJWTError as e:
            raise InvalidToken("Token is invalid") from e
