"""
Password hashing (bcrypt) and JWT token issuing / verification.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Any

from fastapi.concurrency import run_in_threadpool
from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext

from bizdesk.core.config import Settings, settings
from bizdesk.core.exceptions import AuthError, AuthErrorKind, PasswordHashingError

logger = logging.getLogger(__name__)

REQUIRED_CLAIMS = ("id", "email", "role")


# ── Passwords ───────────────────────────────────────────────────────
class PasswordHasher:
    """Salted bcrypt hashing with a fixed cost factor."""

    def __init__(self, rounds: int = 12) -> None:
        self._context = CryptContext(
            schemes=["bcrypt"],
            deprecated="auto",
            bcrypt__rounds=rounds,
        )

    def hash(self, plain: str) -> str:
        try:
            return self._context.hash(plain)
        except (TypeError, ValueError) as exc:
            raise PasswordHashingError() from exc

    def verify(self, plain: str, hashed: str | None) -> bool:
        if not hashed:
            return False
        try:
            return self._context.verify(plain, hashed)
        except (TypeError, ValueError):
            # unknown or corrupt digest
            logger.warning("Stored password digest could not be parsed")
            return False

    def is_hash(self, value: str | None) -> bool:
        """True if *value* is a digest this hasher produced."""
        return bool(value) and self._context.identify(value) is not None

    # bcrypt is slow on purpose; keep it off the event loop
    async def hash_async(self, plain: str) -> str:
        return await run_in_threadpool(self.hash, plain)

    async def verify_async(self, plain: str, hashed: str | None) -> bool:
        return await run_in_threadpool(self.verify, plain, hashed)


password_hasher = PasswordHasher(rounds=settings.BCRYPT_ROUNDS)


# ── JWT tokens ──────────────────────────────────────────────────────
class TokenService:
    """Signs and validates bearer tokens.

    One instance is built from settings when the application is created and
    lives on ``app.state.token_service``; the signing key never changes
    while the process runs. Tokens are stateless: there is no revocation
    list, so a token stays valid until ``exp`` even after logout.
    """

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        expires: timedelta = timedelta(days=7),
    ) -> None:
        if not secret:
            raise ValueError("Token signing secret must not be empty")
        self._secret = secret
        self._algorithm = algorithm
        self.expires = expires

    @classmethod
    def from_settings(cls, cfg: Settings) -> "TokenService":
        return cls(cfg.SECRET_KEY, cfg.ALGORITHM, cfg.jwt_expires)

    def issue(
        self,
        principal_id: str,
        email: str,
        role: str,
        extra_claims: dict[str, Any] | None = None,
        expires_delta: timedelta | None = None,
        now: datetime | None = None,
    ) -> str:
        issued_at = now or datetime.now(timezone.utc)
        claims: dict[str, Any] = dict(extra_claims or {})
        claims.update(
            {
                "id": str(principal_id),
                "email": email,
                "role": role,
                "iat": issued_at,
                "exp": issued_at + (expires_delta or self.expires),
            }
        )
        return jwt.encode(claims, self._secret, algorithm=self._algorithm)

    def verify(self, token: str) -> dict[str, Any]:
        """Return the claims of a valid token or raise ``AuthError``."""
        try:
            claims = jwt.decode(token, self._secret, algorithms=[self._algorithm])
        except ExpiredSignatureError as exc:
            raise AuthError(AuthErrorKind.EXPIRED) from exc
        except JWTError as exc:
            raise AuthError(AuthErrorKind.MALFORMED) from exc
        if any(not claims.get(name) for name in REQUIRED_CLAIMS):
            raise AuthError(AuthErrorKind.MALFORMED)
        return claims
