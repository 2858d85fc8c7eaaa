"""Tests for seed loading and the devhub command line."""

from pathlib import Path

from click.testing import CliRunner

from devhub.auth.models import Role
from devhub.cli import main
from devhub.config import Settings
from devhub.pagination import PageRequest
from devhub.seed import apply_seed, load_seed
from devhub.services import Services

EXAMPLE_SEED = Path(__file__).resolve().parents[1] / "seed.example.yaml"

SEED = """
users:
  - username: alex
    email: alex@devhub.io
    password: Password123!
posts:
  - author: alex
    title: First post
    content: Hello
    tags: [intro]
  - author: ghost
    title: Orphan
    content: nobody wrote this
threads:
  - author: alex
    title: Welcome
    content: Say hi
"""


def test_apply_seed_is_idempotent(tmp_path):
    seed_file = tmp_path / "seed.yaml"
    seed_file.write_text(SEED)
    services = Services.build(Settings(data_dir=tmp_path / "data"))
    try:
        first = apply_seed(services, load_seed(seed_file))
        second = apply_seed(services, load_seed(seed_file))
        assert (first.users_created, first.posts_created, first.threads_created, first.skipped) == (1, 1, 1, 1)
        assert (second.users_created, second.users_existing, second.posts_created) == (0, 1, 0)
        assert services.threads.categories() == ["General"]
    finally:
        services.close()


def test_example_seed_loads(tmp_path):
    services = Services.build(Settings(data_dir=tmp_path))
    try:
        report = apply_seed(services, load_seed(EXAMPLE_SEED))
        assert report.users_created == 2
        assert report.skipped == 0
        sarah = services.users.get_user_by_username("py_sarah")
        # the unpublished draft is stored but not listed
        assert services.posts.list_by_author(sarah.id, PageRequest()).total == 1
        assert services.posts.has_title(sarah.id, "Notes on async mail delivery")
    finally:
        services.close()


def test_cli_seed_create_admin_and_stats(tmp_path):
    seed_file = tmp_path / "seed.yaml"
    seed_file.write_text(SEED)
    runner = CliRunner()
    env = {"DEVHUB_DATA_DIR": str(tmp_path / "data")}

    result = runner.invoke(main, ["seed", str(seed_file)], env=env)
    assert result.exit_code == 0, result.output
    assert "Users created" in result.output

    result = runner.invoke(main, ["create-admin", "alex@devhub.io"], env=env)
    assert result.exit_code == 0, result.output
    services = Services.build(Settings(data_dir=tmp_path / "data"))
    try:
        assert services.users.get_user_by_username("alex").role == Role.admin
    finally:
        services.close()

    result = runner.invoke(main, ["create-admin", "nobody@devhub.io"], env=env)
    assert result.exit_code == 1

    result = runner.invoke(main, ["stats"], env=env)
    assert result.exit_code == 0, result.output
    assert "Pending" in result.output
