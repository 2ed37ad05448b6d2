import configparser
import os

import pytest

from services.config import ConfigService


@pytest.fixture
def config_service(tmp_path) -> ConfigService:
    return ConfigService(str(tmp_path / "config" / "config.txt"))


def _read_file(path: str) -> configparser.ConfigParser:
    parser = configparser.ConfigParser()
    parser.read(path, encoding="utf-8")
    return parser


def test_default_config_file_is_generated(config_service, tmp_path) -> None:
    assert os.path.isfile(config_service.config_file)
    parser = _read_file(config_service.config_file)
    assert set(parser.sections()) >= {"qbittorrent", "torrent_monitor", "compression", "database"}
    assert parser.get("torrent_monitor", "intake_path") == str(tmp_path / "intake")


def test_typed_settings_use_defaults(config_service, tmp_path) -> None:
    settings = config_service.get_torrent_settings()

    assert settings.base_url == "http://qbittorrent:8080"
    assert settings.username == "admin"
    assert settings.category == "phono"
    assert settings.downloads_path == "/downloads"
    assert settings.incoming_path == str(tmp_path / "incoming")
    assert settings.poll_seconds == 10
    assert settings.stall_timeout_seconds == 30 * 60
    assert settings.timeout == 15.0
    assert settings.verify_cert is True


def test_environment_overrides_file_values(config_service, monkeypatch) -> None:
    parser = _read_file(config_service.config_file)
    parser.set("qbittorrent", "category", "music")
    with open(config_service.config_file, "w", encoding="utf-8") as handle:
        parser.write(handle)
    assert config_service.get_torrent_settings().category == "music"

    monkeypatch.setenv("PHONO_QBITTORRENT_CATEGORY", "override")
    monkeypatch.setenv("PHONO_TORRENT_MONITOR_STALL_MINUTES", "45")
    monkeypatch.setenv("PHONO_COMPRESSION_ENABLED", "no")

    assert config_service.get_torrent_settings().category == "override"
    assert config_service.get_torrent_settings().stall_minutes == 45
    assert config_service.get_compression_settings().enabled is False


def test_missing_option_falls_back_to_defaults(tmp_path) -> None:
    config_file = tmp_path / "partial.txt"
    config_file.write_text("[qbittorrent]\nbase_url = http://qbit.local:8080\n", encoding="utf-8")

    service = ConfigService(str(config_file))

    assert service.get_torrent_settings().base_url == "http://qbit.local:8080"
    assert service.get_torrent_settings().password == "adminadmin"
    assert service.get_compression_settings().bitrate == "192k"


def test_invalid_numbers_fall_back(config_service, monkeypatch) -> None:
    monkeypatch.setenv("PHONO_TORRENT_MONITOR_POLL_SECONDS", "often")
    assert config_service.get_torrent_settings().poll_seconds == 10


def test_duplicate_sections_are_tolerated(tmp_path) -> None:
    config_file = tmp_path / "dupes.txt"
    config_file.write_text(
        "[qbittorrent]\ncategory = first\n[qbittorrent]\ncategory = second\n",
        encoding="utf-8",
    )
    service = ConfigService(str(config_file))
    assert service.get_torrent_settings().category == "second"


def test_validation_reports_problems(config_service, monkeypatch) -> None:
    assert config_service.validate_config() == []

    monkeypatch.setenv("PHONO_QBITTORRENT_BASE_URL", "qbittorrent:8080")
    monkeypatch.setenv("PHONO_TORRENT_MONITOR_POLL_SECONDS", "0")
    monkeypatch.setenv("PHONO_TORRENT_MONITOR_INTAKE_PATH", "relative/intake")

    problems = config_service.validate_config()

    assert any("base_url" in problem for problem in problems)
    assert any("poll_seconds" in problem for problem in problems)
    assert any("intake_path" in problem for problem in problems)


def test_database_path_defaults_into_data_dir(config_service, tmp_path) -> None:
    assert config_service.get_database_path() == str(tmp_path / "data" / "phono.db")
