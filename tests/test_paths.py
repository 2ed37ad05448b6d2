import os

import pytest

from utils.path_resolver import PROJECT_ROOT, get_path_resolver, reset_path_resolver
from utils.paths import resolve_database_file, resolve_setting_dir


def test_environment_override_is_created(tmp_path) -> None:
    intake = get_path_resolver().get_intake_dir()

    assert intake == str(tmp_path / "intake")
    assert os.path.isdir(intake)


def test_relative_override_is_taken_from_project_root(monkeypatch) -> None:
    monkeypatch.setenv("PHONO_LOGS_DIR", "var/test-logs")
    reset_path_resolver()

    path = get_path_resolver().resolve("logs", create_if_missing=False)

    assert path == os.path.join(PROJECT_ROOT, "var", "test-logs")


def test_unknown_directory_name_is_rejected() -> None:
    with pytest.raises(ValueError, match="Unknown directory name"):
        get_path_resolver().resolve("music")


def test_database_file_lives_in_data_dir(tmp_path) -> None:
    assert resolve_database_file() == str(tmp_path / "data" / "phono.db")


def test_blank_setting_falls_back_to_resolver(tmp_path) -> None:
    assert resolve_setting_dir("  ", "incoming") == str(tmp_path / "incoming")
    assert resolve_setting_dir("/srv/intake", "intake") == "/srv/intake"
