import pytest
from click.testing import CliRunner

from clone_api.cli import cli
from clone_api.config.settings import get_settings


@pytest.fixture
def local_env(tmp_path, monkeypatch):
    monkeypatch.setenv("DEPLOYMENT_MODE", "local-dev")
    monkeypatch.setenv("STORAGE_DIR", str(tmp_path / "storage"))
    monkeypatch.setenv("BOT_PUBLIC_BASE", "https://bot.example.com")
    monkeypatch.setenv("PUBLIC_ORIGINS", "https://a.com,https://b.com")
    get_settings.cache_clear()
    yield tmp_path / "storage"
    get_settings.cache_clear()


def test_show_config(local_env):
    result = CliRunner().invoke(cli, ["show-config"])

    assert result.exit_code == 0, result.output
    assert "Deployment Mode: local-dev" in result.output
    assert "Bot Public Base: https://bot.example.com" in result.output
    assert "CORS Allow-Origin: https://a.com,https://b.com" in result.output


def test_bootstrap_local(local_env):
    result = CliRunner().invoke(cli, ["bootstrap"])

    assert result.exit_code == 0, result.output
    assert "Resources ready for local-dev mode" in result.output
    assert (local_env / "blobs").is_dir()
    assert (local_env / "queue_data").is_dir()
    assert (local_env / "status.db").is_file()
