"""Tests for Settings construction."""

from pathlib import Path

from devhub.config import Settings


def test_from_env_reads_prefixed_variables(tmp_path):
    settings = Settings.from_env({
        "DEVHUB_DATA_DIR": str(tmp_path),
        "DEVHUB_JWT_SECRET": "s3cret",
        "DEVHUB_TOKEN_TTL_DAYS": "2",
        "DEVHUB_ADMIN_EMAILS": "Boss@DevHub.io, ops@devhub.io",
        "DEVHUB_SMTP_PORT": "2525",
        "DEVHUB_SMTP_STARTTLS": "false",
        "UNRELATED": "x",
    })
    assert settings.data_dir == tmp_path
    assert settings.jwt_secret == "s3cret"
    assert settings.token_ttl_days == 2
    assert settings.admin_emails == ["boss@devhub.io", "ops@devhub.io"]
    assert settings.smtp_port == 2525
    assert settings.smtp_starttls is False


def test_defaults():
    settings = Settings.from_env({})
    assert settings.data_dir == Path.home() / ".devhub"
    assert settings.jwt_secret
    assert settings.cors_origins == ["*"]
    assert not settings.mail_enabled


def test_from_file(tmp_path):
    path = tmp_path / "devhub.yaml"
    path.write_text(
        "data_dir: {}\n"
        "smtp_host: mail.devhub.io\n"
        "admin_mail: inbox@devhub.io\n"
        "notify_workers: 0\n"
        "cors_origins: [https://devhub.io]\n"
        "unknown_key: ignored\n".format(tmp_path / "data")
    )
    settings = Settings.from_file(path)
    assert settings.data_dir == tmp_path / "data"
    assert settings.mail_enabled
    assert settings.admin_recipient == "inbox@devhub.io"
    assert settings.notify_workers == 1
    assert settings.cors_origins == ["https://devhub.io"]


def test_admin_recipient_fallbacks():
    assert Settings(smtp_user="relay@devhub.io").admin_recipient == "relay@devhub.io"
    assert Settings(admin_emails=["a@devhub.io"]).admin_recipient == "a@devhub.io"
    assert Settings().admin_recipient == ""
