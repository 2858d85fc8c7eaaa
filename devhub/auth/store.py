"""File-based JSON storage for users and sessions (the identity directory).

Provides a DB-ready interface backed by JSON files under ``<data_dir>/auth/``:
- ``users.json`` -- list of user dicts (including the password hash)
- ``sessions.json`` -- list of issued, unrevoked session dicts
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Iterable, Optional

from devhub.auth.models import Role, Session, User, utcnow_iso
from devhub.auth.passwords import hash_password, verify_password
from devhub.auth.tokens import create_access_token, decode_access_token
from devhub.errors import Conflict, NotFound, Unauthorized, ValidationFailed
from devhub.storage import Collection

logger = logging.getLogger(__name__)


class UserStore:
    """Users, credentials and session tokens."""

    def __init__(
        self,
        base_dir: Path,
        token_secret: str,
        token_ttl: timedelta = timedelta(days=7),
        admin_emails: Iterable[str] = (),
    ) -> None:
        self._base = Path(base_dir)
        self._users = Collection(self._base, "users")
        self._sessions = Collection(self._base, "sessions")
        self._secret = token_secret
        self._token_ttl = token_ttl
        self._admin_emails = {e.lower() for e in admin_emails}

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _user_from_dict(d: dict) -> User:
        role_val = d.get("role", "member")
        try:
            role_val = Role(role_val)
        except ValueError:
            role_val = Role.member
        return User(
            id=d["id"],
            username=d["username"],
            email=d["email"],
            password_hash=d.get("password_hash", ""),
            avatar_url=d.get("avatar_url", ""),
            bio=d.get("bio", ""),
            role=role_val,
            is_active=d.get("is_active", True),
            created_at=d.get("created_at", ""),
            last_login=d.get("last_login", ""),
        )

    @staticmethod
    def _user_to_dict(u: User) -> dict:
        return {
            "id": u.id,
            "username": u.username,
            "email": u.email,
            "password_hash": u.password_hash,
            "avatar_url": u.avatar_url,
            "bio": u.bio,
            "role": u.role.value,
            "is_active": u.is_active,
            "created_at": u.created_at,
            "last_login": u.last_login,
        }

    def _require(self, user_id: str) -> dict:
        d = self._users.get(user_id)
        if d is None:
            raise NotFound("User not found")
        return d

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def get_user(self, user_id: str) -> Optional[User]:
        d = self._users.get(user_id)
        return self._user_from_dict(d) if d else None

    def get_user_by_email(self, email: str) -> Optional[User]:
        email = email.lower()
        d = self._users.find_one(lambda u: u.get("email", "").lower() == email)
        return self._user_from_dict(d) if d else None

    def get_user_by_username(self, username: str) -> Optional[User]:
        d = self._users.find_one(lambda u: u.get("username") == username)
        return self._user_from_dict(d) if d else None

    def find_by_email_or_username(self, identifier: str) -> Optional[User]:
        """Match ``identifier`` against the (case-normalized) email or the exact username."""
        identifier = identifier.strip()
        lowered = identifier.lower()
        d = self._users.find_one(
            lambda u: u.get("email", "").lower() == lowered or u.get("username") == identifier
        )
        return self._user_from_dict(d) if d else None

    # ------------------------------------------------------------------
    # Account lifecycle
    # ------------------------------------------------------------------

    def create(self, username: str, email: str, password: str) -> User:
        """Register a new account. Raises ``Conflict`` on duplicate username or email."""
        email = email.strip().lower()
        with self._users.lock:
            if self._users.find_one(lambda u: u.get("email", "").lower() == email):
                raise Conflict("User already exists. Please sign in.")
            if self._users.find_one(lambda u: u.get("username") == username):
                raise Conflict("User already exists. Please sign in.")
            user = User(
                id=uuid.uuid4().hex,
                username=username,
                email=email,
                password_hash=hash_password(password),
                role=Role.admin if email in self._admin_emails else Role.member,
            )
            self._users.insert(self._user_to_dict(user))
        logger.info("Registered user %s (%s)", user.username, user.id)
        return user

    def verify_credential(self, user: User, plaintext: str) -> bool:
        return verify_password(plaintext, user.password_hash)

    def authenticate(self, identifier: str, password: str) -> User:
        """Resolve and verify a login. Raises ``Unauthorized`` with a uniform message."""
        user = self.find_by_email_or_username(identifier)
        if user is None or not user.is_active:
            raise Unauthorized("Invalid credentials")
        if not self.verify_credential(user, password):
            raise Unauthorized("Invalid credentials")

        now = utcnow_iso()
        self._users.update(user.id, lambda d: d.update(last_login=now))
        user.last_login = now
        return user

    def update_profile(
        self,
        user_id: str,
        bio: Optional[str] = None,
        avatar_url: Optional[str] = None,
    ) -> User:
        """Update the optional profile fields that were supplied."""
        self._require(user_id)

        def _apply(d: dict) -> None:
            if bio is not None:
                d["bio"] = bio
            if avatar_url is not None:
                d["avatar_url"] = avatar_url

        return self._user_from_dict(self._users.update(user_id, _apply))

    def update_credential(self, user_id: str, current_password: str, new_password: str) -> None:
        """Replace the password after verifying the current one."""
        user = self._user_from_dict(self._require(user_id))
        if not self.verify_credential(user, current_password):
            raise ValidationFailed.for_field("currentPassword", "Current password is incorrect")
        new_hash = hash_password(new_password)
        self._users.update(user_id, lambda d: d.update(password_hash=new_hash))

    def deactivate(self, user_id: str) -> User:
        """Soft-delete: the account stays referenced by its content but can no longer sign in."""
        self._require(user_id)
        d = self._users.update(user_id, lambda d: d.update(is_active=False))
        revoked = self.revoke_user_sessions(user_id)
        logger.info("Deactivated user %s (revoked %d sessions)", user_id, revoked)
        return self._user_from_dict(d)

    def set_role(self, user_id: str, role: Role) -> User:
        self._require(user_id)
        d = self._users.update(user_id, lambda d: d.update(role=role.value))
        return self._user_from_dict(d)

    # ------------------------------------------------------------------
    # Sessions
    # ------------------------------------------------------------------

    def create_session(self, user_id: str) -> tuple[Session, str]:
        """Issue a signed token for ``user_id``. Returns ``(Session, token)``."""
        token, jti, expires = create_access_token(user_id, self._secret, self._token_ttl)
        session = Session(id=jti, user_id=user_id, expires_at=expires.isoformat())
        self._sessions.insert({
            "id": session.id,
            "user_id": session.user_id,
            "created_at": session.created_at,
            "expires_at": session.expires_at,
        })
        return session, token

    def validate_session(self, token: str) -> Optional[User]:
        """Return the active user behind ``token``, or None if it is invalid or revoked."""
        try:
            claims = decode_access_token(token, self._secret)
        except Unauthorized:
            return None
        if self._sessions.get(claims["jti"]) is None:
            return None
        user = self.get_user(claims["sub"])
        if user is None or not user.is_active:
            return None
        return user

    def delete_session(self, token: str) -> bool:
        try:
            claims = decode_access_token(token, self._secret)
        except Unauthorized:
            return False
        return self._sessions.delete(claims["jti"])

    def revoke_user_sessions(self, user_id: str) -> int:
        return self._sessions.delete_where(lambda s: s.get("user_id") == user_id)

    def purge_expired_sessions(self) -> int:
        now = datetime.now(timezone.utc).isoformat()
        return self._sessions.delete_where(lambda s: s.get("expires_at", "") < now)
