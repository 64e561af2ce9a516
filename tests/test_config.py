"""Settings loading."""

from decimal import Decimal
from pathlib import Path

import pytest

from rentora_backend.config import Settings, load_settings


def test_yaml_keys_are_case_insensitive(tmp_path):
    config_file = tmp_path / "settings.yaml"
    config_file.write_text(
        "JWT_SECRET_KEY: from-file\n"
        "log_level: debug\n"
        "PLATFORM_COMMISSION_RATE: '0.10'\n"
        "UNKNOWN_KEY: ignored\n"
    )

    loaded = Settings.from_yaml(str(config_file))

    assert loaded.jwt_secret_key == "from-file"
    assert loaded.log_level == "debug"
    assert loaded.platform_commission_rate == Decimal("0.10")
    assert loaded.api_prefix == "/api"


def test_commission_rate_must_be_a_fraction(tmp_path):
    config_file = tmp_path / "settings.yaml"
    config_file.write_text("JWT_SECRET_KEY: x\nPLATFORM_COMMISSION_RATE: 5\n")

    with pytest.raises(ValueError):
        Settings.from_yaml(str(config_file))


def test_config_variable_is_required(monkeypatch):
    monkeypatch.delenv("CONFIG", raising=False)

    with pytest.raises(RuntimeError):
        load_settings()


def test_missing_settings_file(monkeypatch, tmp_path):
    monkeypatch.setenv("CONFIG", str(tmp_path / "absent.yaml"))

    with pytest.raises(FileNotFoundError):
        load_settings()


@pytest.mark.parametrize(
    "relative_path", ["tests/resources/test.yaml", "resources/config/local.yaml"]
)
def test_bundled_settings_files_load(relative_path):
    root = Path(__file__).resolve().parent.parent

    loaded = Settings.from_yaml(str(root / relative_path))

    assert "://" in loaded.database_url
    assert not loaded.database_url.endswith(":")


def test_test_settings_use_in_memory_sqlite():
    path = Path(__file__).resolve().parent / "resources" / "test.yaml"

    assert Settings.from_yaml(str(path)).database_url == "sqlite+aiosqlite:///:memory:"
