"""JWT token creation and verification.

Tokens are stateless: nothing is stored server-side and there is no
revocation list, so expiry is the only way a token stops working.
Rotating ``JWT_SECRET`` invalidates every outstanding token at once.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import jwt

from blog_api.errors import InvalidTokenError

logger = logging.getLogger(__name__)

DEFAULT_ISSUER = "blog-backend"
_REQUIRED_CLAIMS = ["sub", "iat", "nbf", "exp", "iss"]


@dataclass(frozen=True)
class TokenClaims:
    user_id: int
    issued_at: datetime
    not_before: datetime
    expires_at: datetime
    issuer: str


class TokenService:
    """Mints and verifies HS256-signed bearer tokens for a user id."""

    def __init__(
        self,
        secret: str,
        ttl: timedelta,
        issuer: str = DEFAULT_ISSUER,
        algorithm: str = "HS256",
    ) -> None:
        if not secret:
            raise ValueError("token secret must not be empty")
        if ttl <= timedelta(0):
            raise ValueError("token ttl must be positive")
        self._secret = secret
        self.ttl = ttl
        self.issuer = issuer
        self.algorithm = algorithm

    @classmethod
    def from_settings(cls, settings) -> "TokenService":
        return cls(
            secret=settings.JWT_SECRET,
            ttl=settings.JWT_EXPIRATION,
            issuer=settings.JWT_ISSUER,
            algorithm=settings.JWT_ALGORITHM,
        )

    def issue(self, user_id: int, now: datetime | None = None) -> str:
        """Return a signed token asserting that the bearer acts as *user_id*."""
        now = now or datetime.now(timezone.utc)
        payload = {
            "sub": str(user_id),
            "iat": now,
            "nbf": now,
            "exp": now + self.ttl,
            "iss": self.issuer,
        }
        return jwt.encode(payload, self._secret, algorithm=self.algorithm)

    def verify(self, token: str) -> TokenClaims:
        """
        Decode *token* and return its claims.

        Every failure raises the same ``InvalidTokenError``; the reason is
        only logged, so callers cannot tell an expired token from a forged
        one.
        """
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self.algorithm],
                issuer=self.issuer,
                options={"require": _REQUIRED_CLAIMS},
            )
            user_id = int(payload["sub"])
        except (jwt.InvalidTokenError, ValueError, TypeError) as exc:
            logger.debug("Token rejected: %s", exc)
            raise InvalidTokenError() from None

        return TokenClaims(
            user_id=user_id,
            issued_at=datetime.fromtimestamp(payload["iat"], timezone.utc),
            not_before=datetime.fromtimestamp(payload["nbf"], timezone.utc),
            expires_at=datetime.fromtimestamp(payload["exp"], timezone.utc),
            issuer=payload["iss"],
        )
