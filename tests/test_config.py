from pathlib import Path

import pytest

from y2m.config import CONFIG_TEMPLATE, Settings, parse_favorites
from y2m.exceptions import ConfigError


def test_missing_config_file_is_created_from_template(tmp_path):
    """Test the first run writes a commented template and has no favorites."""
    config_file = tmp_path / "home" / ".y2m"

    settings = Settings.load(config_file=config_file, cache_dir=tmp_path / "cache", work_dir=tmp_path)

    assert config_file.read_text() == CONFIG_TEMPLATE
    assert settings.favorites == []


def test_favorites_loaded_from_shell_style_file(tmp_path):
    config_file = tmp_path / ".y2m"
    config_file.write_text('# my modules\nY2MFAV="core network  storage-ng"\n')

    settings = Settings.load(config_file=config_file, cache_dir=tmp_path / "cache", work_dir=tmp_path)

    assert settings.favorites == ["core", "network", "storage-ng"]


def test_existing_config_file_is_not_overwritten(tmp_path):
    config_file = tmp_path / ".y2m"
    config_file.write_text("Y2MFAV='core'\n")

    Settings.load(config_file=config_file, cache_dir=tmp_path / "cache", work_dir=tmp_path)

    assert config_file.read_text() == "Y2MFAV='core'\n"


def test_paths_and_token(tmp_path, monkeypatch):
    monkeypatch.setenv("GITHUB_TOKEN", "ghp_test")
    config_file = tmp_path / ".y2m"

    settings = Settings.load(config_file=config_file, cache_dir=tmp_path / "cache", work_dir=tmp_path / "src")

    assert settings.config_file == config_file
    assert settings.cache_dir == tmp_path / "cache"
    assert settings.work_dir == tmp_path / "src"
    assert settings.github_token == "ghp_test"
    assert [org.name for org in settings.organizations] == ["yast", "libyui"]


def test_defaults(tmp_path, monkeypatch):
    monkeypatch.delenv("GITHUB_TOKEN", raising=False)
    monkeypatch.chdir(tmp_path)

    settings = Settings.load(config_file=tmp_path / ".y2m")

    assert settings.work_dir == Path.cwd()
    assert settings.cache_dir.name == "y2m"
    assert settings.github_token is None


def test_unwritable_config_location(tmp_path):
    blocker = tmp_path / "file"
    blocker.write_text("")

    with pytest.raises(ConfigError):
        Settings.load(config_file=blocker / ".y2m", cache_dir=tmp_path / "cache", work_dir=tmp_path)


@pytest.mark.parametrize("value, expected", [
    (None, []),
    ("", []),
    ("core", ["core"]),
    (" core\tnetwork\ncore ", ["core", "network"]),
])
def test_parse_favorites(value, expected):
    assert parse_favorites(value) == expected
