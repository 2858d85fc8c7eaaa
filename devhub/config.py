"""Process configuration.

A single :class:`Settings` instance is built at start-up (from the
environment or a YAML file) and handed to every component that needs it.
"""

from __future__ import annotations

import os
import secrets
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Optional

import yaml

_ENV_PREFIX = "DEVHUB_"


def _split_list(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return [str(v).strip() for v in value if str(v).strip()]
    return [part.strip() for part in str(value).split(",") if part.strip()]


@dataclass
class Settings:
    """Runtime settings for the API, the stores and the mailer."""

    data_dir: Path = field(default_factory=lambda: Path.home() / ".devhub")
    jwt_secret: str = ""
    token_ttl_days: int = 7
    admin_emails: list[str] = field(default_factory=list)

    smtp_host: str = ""
    smtp_port: int = 587
    smtp_user: str = ""
    smtp_password: str = ""
    smtp_starttls: bool = True
    mail_from: str = "Web Dev Hub <noreply@devhub.local>"
    admin_mail: str = ""

    notify_workers: int = 4
    cors_origins: list[str] = field(default_factory=lambda: ["*"])

    def __post_init__(self) -> None:
        self.data_dir = Path(self.data_dir).expanduser()
        self.admin_emails = [e.lower() for e in _split_list(self.admin_emails)]
        self.cors_origins = _split_list(self.cors_origins) or ["*"]
        self.token_ttl_days = int(self.token_ttl_days)
        self.smtp_port = int(self.smtp_port)
        self.notify_workers = max(1, int(self.notify_workers))
        if isinstance(self.smtp_starttls, str):
            self.smtp_starttls = self.smtp_starttls.lower() in ("1", "true", "yes")
        if not self.jwt_secret:
            # Tokens will not survive a restart without a configured secret.
            self.jwt_secret = secrets.token_hex(32)

    @property
    def mail_enabled(self) -> bool:
        """True when an SMTP relay is configured; otherwise mail is only logged."""
        return bool(self.smtp_host)

    @property
    def admin_recipient(self) -> str:
        return self.admin_mail or self.smtp_user or (self.admin_emails[0] if self.admin_emails else "")

    @classmethod
    def from_mapping(cls, data: dict[str, Any]) -> "Settings":
        """Build settings from a plain dict, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known and v is not None})

    @classmethod
    def from_env(cls, environ: Optional[dict[str, str]] = None) -> "Settings":
        """Read ``DEVHUB_*`` variables, e.g. ``DEVHUB_DATA_DIR``, ``DEVHUB_SMTP_HOST``."""
        env = os.environ if environ is None else environ
        data = {}
        for f in fields(cls):
            key = _ENV_PREFIX + f.name.upper()
            if key in env:
                data[f.name] = env[key]
        return cls.from_mapping(data)

    @classmethod
    def from_file(cls, path: str | Path) -> "Settings":
        """Load settings from a YAML file with the same keys as the dataclass."""
        with open(path) as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ValueError(f"Settings file {path} must contain a mapping")
        return cls.from_mapping(data)
