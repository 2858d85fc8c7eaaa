"""Tests for the user store, passwords and session tokens."""

import tempfile
from datetime import timedelta
from pathlib import Path

import pytest

from devhub.auth.models import Role
from devhub.auth.passwords import hash_password, password_problems, verify_password
from devhub.auth.permissions import has_permission, require_role
from devhub.auth.store import UserStore
from devhub.auth.tokens import create_access_token, decode_access_token
from devhub.errors import Conflict, Forbidden, Unauthorized, ValidationFailed

SECRET = "test-secret"


def _store(tmpdir, **kwargs) -> UserStore:
    return UserStore(Path(tmpdir), token_secret=SECRET, **kwargs)


def test_password_hashing():
    hashed = hash_password("Secret1!")
    assert hashed != "Secret1!"
    assert verify_password("Secret1!", hashed)
    assert not verify_password("secret1!", hashed)
    assert not verify_password("Secret1!", "")
    assert not verify_password("Secret1!", "not-a-hash")


def test_password_problems():
    assert password_problems("Abcde1!") == []
    assert len(password_problems("abc")) == 2
    assert len(password_problems("abcdefgh")) == 1


def test_token_round_trip_and_tamper():
    token, jti, _ = create_access_token("u1", SECRET, timedelta(minutes=5))
    claims = decode_access_token(token, SECRET)
    assert claims["sub"] == "u1"
    assert claims["jti"] == jti
    with pytest.raises(Unauthorized):
        decode_access_token(token, "other-secret")
    expired, _, _ = create_access_token("u1", SECRET, timedelta(seconds=-1))
    with pytest.raises(Unauthorized):
        decode_access_token(expired, SECRET)


def test_create_normalizes_email_and_rejects_duplicates():
    with tempfile.TemporaryDirectory() as tmpdir:
        users = _store(tmpdir)
        alice = users.create("alice", "Alice@X.com", "pw")
        assert alice.email == "alice@x.com"
        assert alice.role == Role.member

        with pytest.raises(Conflict):
            users.create("alice2", "alice@x.com", "pw")
        with pytest.raises(Conflict):
            users.create("alice", "other@x.com", "pw")


def test_admin_emails_grant_admin():
    with tempfile.TemporaryDirectory() as tmpdir:
        users = _store(tmpdir, admin_emails=["Boss@X.com"])
        assert users.create("boss", "boss@x.com", "pw").is_admin


def test_authenticate_by_email_or_username():
    with tempfile.TemporaryDirectory() as tmpdir:
        users = _store(tmpdir)
        users.create("alice", "alice@x.com", "pw")

        assert users.authenticate("alice@x.com", "pw").username == "alice"
        assert users.authenticate("ALICE@x.com", "pw").username == "alice"
        user = users.authenticate("alice", "pw")
        assert user.last_login
        assert users.get_user(user.id).last_login == user.last_login

        with pytest.raises(Unauthorized):
            users.authenticate("alice@x.com", "wrong")
        with pytest.raises(Unauthorized):
            users.authenticate("nobody", "pw")


def test_sessions_validate_and_revoke():
    with tempfile.TemporaryDirectory() as tmpdir:
        users = _store(tmpdir)
        alice = users.create("alice", "alice@x.com", "pw")
        _, token = users.create_session(alice.id)

        assert users.validate_session(token).id == alice.id
        assert users.delete_session(token)
        assert users.validate_session(token) is None
        assert users.validate_session("garbage") is None


def test_expired_sessions_are_purged():
    with tempfile.TemporaryDirectory() as tmpdir:
        users = _store(tmpdir, token_ttl=timedelta(seconds=-1))
        alice = users.create("alice", "alice@x.com", "pw")
        _, token = users.create_session(alice.id)
        assert users.validate_session(token) is None
        assert users.purge_expired_sessions() == 1


def test_deactivate_blocks_login_and_sessions():
    with tempfile.TemporaryDirectory() as tmpdir:
        users = _store(tmpdir)
        alice = users.create("alice", "alice@x.com", "pw")
        _, token = users.create_session(alice.id)

        users.deactivate(alice.id)
        assert users.validate_session(token) is None
        with pytest.raises(Unauthorized):
            users.authenticate("alice", "pw")
        assert users.get_user(alice.id).is_active is False


def test_update_profile_and_credential():
    with tempfile.TemporaryDirectory() as tmpdir:
        users = _store(tmpdir)
        alice = users.create("alice", "alice@x.com", "Old1pw!")

        updated = users.update_profile(alice.id, bio="Hello")
        assert updated.bio == "Hello"
        assert updated.avatar_url == ""

        with pytest.raises(ValidationFailed) as exc_info:
            users.update_credential(alice.id, "wrong", "New1pw!")
        assert exc_info.value.errors[0]["field"] == "currentPassword"

        users.update_credential(alice.id, "Old1pw!", "New1pw!")
        assert users.authenticate("alice", "New1pw!").id == alice.id


def test_role_checks():
    with tempfile.TemporaryDirectory() as tmpdir:
        users = _store(tmpdir)
        alice = users.create("alice", "alice@x.com", "pw")
        assert not has_permission(alice, Role.admin)
        with pytest.raises(Forbidden):
            require_role(alice, Role.admin)

        promoted = users.set_role(alice.id, Role.admin)
        assert has_permission(promoted, Role.admin)
        require_role(promoted, Role.member)
