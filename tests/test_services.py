from __future__ import annotations

import asyncio
from typing import Callable, Dict

import pytest
from fastapi.testclient import TestClient

from notekeeper.api.schemas.note import NoteUpdate
from notekeeper.core import rate_limit
from notekeeper.core.async_utils import with_timeout
from notekeeper.core.config import Settings, settings
from notekeeper.core.exceptions import (
    ConflictError,
    ExpiredTokenError,
    InvalidTokenError,
    OperationTimeoutError,
    UnauthenticatedError,
)
from notekeeper.main import app
from notekeeper.services import auth_service, note_service
from notekeeper.services.auth_validator import authorize, extract_bearer
from notekeeper.services.token_service import create_access_token, verify_access_token

Signup = Callable[..., Dict[str, str]]


def test_concurrent_registrations_with_same_email_leave_one_user(fake_db) -> None:
    async def race():
        return await asyncio.gather(
            *(auth_service.register_user(full_name=f"U{i}", email="dup@x.com", password="pw123456") for i in range(3)),
            return_exceptions=True,
        )

    results = asyncio.run(race())

    conflicts = [r for r in results if isinstance(r, ConflictError)]
    created = [r for r in results if isinstance(r, dict)]
    assert len(created) == 1
    assert len(conflicts) == 2
    assert len(fake_db["user"].docs) == 1


def test_duplicate_email_conflicts_even_without_unique_index(fake_db, monkeypatch) -> None:
    monkeypatch.setattr(fake_db["user"], "_unique", [])
    asyncio.run(auth_service.register_user(full_name="A", email="a@x.com", password="pw123456"))

    with pytest.raises(ConflictError):
        asyncio.run(auth_service.register_user(full_name="B", email="a@x.com", password="other"))
    assert [u["email"] for u in fake_db["user"].docs] == ["a@x.com"]


def test_bootstrap_declares_unique_email_index(fake_db) -> None:
    assert fake_db["user"].indexes["uniq_email"]["unique"] is True
    assert "ix_owner_pinned" in fake_db["note"].indexes
    assert set(fake_db.validators) == {"user", "note"}


@pytest.mark.parametrize(
    "header, expected",
    [
        (None, None),
        ("", None),
        ("Bearer", None),
        ("Bearer   ", None),
        ("Basic abc", None),
        ("Bearer abc", "abc"),
        ("bearer abc", "abc"),
    ],
)
def test_extract_bearer(header, expected) -> None:
    assert extract_bearer(header) == expected


def test_verify_distinguishes_expired_from_invalid() -> None:
    user = {"_id": "64b000000000000000000000"}
    expired = create_access_token(user=user, expires_in_minutes=-1)

    with pytest.raises(ExpiredTokenError):
        verify_access_token(expired)
    with pytest.raises(InvalidTokenError):
        verify_access_token(create_access_token(user=user) + "x")
    assert issubclass(ExpiredTokenError, InvalidTokenError)


def test_token_claim_carries_user_and_version() -> None:
    token = create_access_token(user={"_id": "64b000000000000000000000", "token_version": 3})

    claims = verify_access_token(token)

    assert claims["sub"] == "64b000000000000000000000"
    assert claims["token_version"] == 3
    assert claims["exp"] - claims["iat"] == settings.access_token_expire_minutes * 60


def test_authorize_collapses_verification_failures(fake_db) -> None:
    user = asyncio.run(auth_service.register_user(full_name="A", email="a@x.com", password="pw123456"))
    good = create_access_token(user=user)
    expired = create_access_token(user=user, expires_in_minutes=-1)

    identity = asyncio.run(authorize(f"Bearer {good}"))
    assert identity.user_id == str(user["_id"])

    for header in (None, "Bearer junk", f"Bearer {expired}"):
        with pytest.raises(UnauthenticatedError) as exc:
            asyncio.run(authorize(header))
        assert exc.value.message == "Unauthenticated"


def test_note_update_tracks_which_fields_were_sent() -> None:
    patch = NoteUpdate.model_validate({"title": "", "isPinned": False}).to_patch()

    assert patch.has("title")
    assert patch.has("is_pinned")
    assert not patch.has("content")
    assert not patch.has("tags")


def test_with_timeout_raises_operation_timeout() -> None:
    with pytest.raises(OperationTimeoutError):
        asyncio.run(with_timeout(asyncio.sleep(1), seconds=0.01))


def test_slow_store_surfaces_as_timeout(client: TestClient, signup: Signup, fake_db, monkeypatch) -> None:
    headers = signup()

    class SlowCursor:
        def sort(self, *args, **kwargs):
            return self

        async def to_list(self, length=None):
            await asyncio.sleep(1)
            return []

    monkeypatch.setattr(fake_db["note"], "find", lambda *a, **kw: SlowCursor())
    monkeypatch.setattr(settings, "operation_timeout_seconds", 0.05)

    resp = client.get("/get-all-notes", headers=headers)

    assert resp.status_code == 504
    assert resp.json()["message"] == "Operation timed out."


def test_unexpected_errors_are_reported_generically(signup: Signup, monkeypatch) -> None:
    headers = signup()

    async def boom(owner):
        raise RuntimeError("driver exploded: secret detail")

    monkeypatch.setattr(note_service, "list_notes", boom)
    client = TestClient(app, raise_server_exceptions=False)

    resp = client.get("/get-all-notes", headers=headers)

    assert resp.status_code == 500
    assert resp.json()["error"] is True
    assert resp.json()["message"] == "Server error."
    assert "secret detail" not in resp.text


def test_rate_limit_drops_keys_outside_the_window(monkeypatch) -> None:
    clock = [1000.0]
    monkeypatch.setattr(rate_limit, "time", lambda: clock[0])
    rate_limit.reset()

    for i in range(50):
        assert rate_limit.allow((f"10.0.0.{i}", "/login"), limit=5, window_seconds=60)
    assert len(rate_limit.BUCKET) == 50

    clock[0] += 61
    assert rate_limit.allow(("10.0.1.1", "/login"), limit=5, window_seconds=60)

    assert list(rate_limit.BUCKET) == [("10.0.1.1", "/login")]


def test_rate_limit_still_blocks_within_the_window(monkeypatch) -> None:
    clock = [1000.0]
    monkeypatch.setattr(rate_limit, "time", lambda: clock[0])
    rate_limit.reset()
    key = ("10.0.0.1", "/login")

    assert all(rate_limit.allow(key, limit=2, window_seconds=60) for _ in range(2))
    clock[0] += 30
    assert rate_limit.allow(key, limit=2, window_seconds=60) is False
    clock[0] += 31
    assert rate_limit.allow(key, limit=2, window_seconds=60) is True


@pytest.mark.parametrize("raw, expected", [("", ""), ("/", ""), ("api", "/api"), ("/api/", "/api")])
def test_api_prefix_normalization(raw: str, expected: str) -> None:
    assert Settings(api_prefix=raw).api_prefix_normalized == expected
