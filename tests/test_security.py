"""Tests for password hashing and token issuing / verification."""

from datetime import timedelta

import pytest

from bizdesk.core.exceptions import AuthError, AuthErrorKind, PasswordHashingError
from bizdesk.core.lockout import utcnow
from bizdesk.core.security import PasswordHasher, TokenService

hasher = PasswordHasher(rounds=4)


def test_hash_is_salted_and_verifies():
    """Two hashes of one password differ and both verify."""
    first = hasher.hash("Secret1!")
    second = hasher.hash("Secret1!")
    assert first != second
    assert first != "Secret1!"
    assert hasher.verify("Secret1!", first)
    assert hasher.verify("Secret1!", second)
    assert not hasher.verify("Secret2!", first)


def test_verify_rejects_garbage_digest():
    assert hasher.verify("Secret1!", "not-a-bcrypt-digest") is False
    assert hasher.verify("Secret1!", None) is False


def test_is_hash_only_accepts_digests():
    assert hasher.is_hash(hasher.hash("Secret1!"))
    assert not hasher.is_hash("Secret1!")
    assert not hasher.is_hash("")


def test_hash_rejects_non_string():
    with pytest.raises(PasswordHashingError):
        hasher.hash(None)  # type: ignore[arg-type]


@pytest.mark.asyncio
async def test_async_wrappers_match_sync():
    digest = await hasher.hash_async("Secret1!")
    assert await hasher.verify_async("Secret1!", digest)
    assert not await hasher.verify_async("nope", digest)


# ── Tokens ──────────────────────────────────────────────────────────
tokens = TokenService("unit-test-secret", expires=timedelta(days=7))


def test_issue_and_verify_round_trip_claims():
    token = tokens.issue("abc-123", "ann@example.com", "employee")
    claims = tokens.verify(token)
    assert claims["id"] == "abc-123"
    assert claims["email"] == "ann@example.com"
    assert claims["role"] == "employee"
    assert claims["exp"] - claims["iat"] == 7 * 24 * 3600


def test_extra_claims_are_signed():
    token = tokens.issue("abc-123", "ann@example.com", "admin", extra_claims={"level": "manager"})
    assert tokens.verify(token)["level"] == "manager"


def test_expired_token_rejected():
    """A token valid for one second, checked two seconds later, is expired."""
    token = tokens.issue(
        "abc-123",
        "ann@example.com",
        "user",
        expires_delta=timedelta(seconds=1),
        now=utcnow() - timedelta(seconds=2),
    )
    with pytest.raises(AuthError) as exc:
        tokens.verify(token)
    assert exc.value.kind is AuthErrorKind.EXPIRED
    assert exc.value.message == "Token has expired"


def test_wrong_signature_is_malformed():
    other = TokenService("another-secret")
    token = other.issue("abc-123", "ann@example.com", "user")
    with pytest.raises(AuthError) as exc:
        tokens.verify(token)
    assert exc.value.kind is AuthErrorKind.MALFORMED


def test_garbage_token_is_malformed():
    with pytest.raises(AuthError) as exc:
        tokens.verify("not.a.jwt")
    assert exc.value.kind is AuthErrorKind.MALFORMED
    assert exc.value.status_code == 401


def test_token_without_role_is_malformed():
    token = tokens.issue("abc-123", "ann@example.com", "")
    with pytest.raises(AuthError) as exc:
        tokens.verify(token)
    assert exc.value.kind is AuthErrorKind.MALFORMED


def test_empty_secret_refused():
    with pytest.raises(ValueError):
        TokenService("")
