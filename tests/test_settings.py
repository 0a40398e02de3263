import json
from pathlib import Path

import pytest

from zephyr_mcp.modules.core import settings


def test_no_default_configured(settings_file: Path) -> None:
    assert settings.get_default_workspace() is None
    assert settings.effective_workspace(None) is None
    assert settings.effective_workspace("/explicit") == "/explicit"


def test_set_and_get_default(settings_file: Path, west_workspace: Path) -> None:
    stored = settings.set_default_workspace(west_workspace)

    assert stored == str(west_workspace.resolve())
    assert settings.get_default_workspace() == stored
    assert json.loads(settings_file.read_text()) == {"workspacePath": stored}
    assert settings.effective_workspace(None) == stored


def test_set_rejects_missing_path(settings_file: Path, tmp_path: Path) -> None:
    with pytest.raises(ValueError, match="Path does not exist"):
        settings.set_default_workspace(tmp_path / "missing")
    assert not settings_file.exists()


def test_set_rejects_non_west_directory(settings_file: Path, tmp_path: Path) -> None:
    with pytest.raises(ValueError, match="Missing .west/config"):
        settings.set_default_workspace(tmp_path)


def test_unreadable_settings_are_ignored(settings_file: Path) -> None:
    settings_file.parent.mkdir(parents=True)
    settings_file.write_text("{broken")

    assert settings.get_default_workspace() is None


def test_other_keys_are_preserved(settings_file: Path, west_workspace: Path) -> None:
    settings_file.parent.mkdir(parents=True)
    settings_file.write_text(json.dumps({"other": 1}))

    settings.set_default_workspace(west_workspace)

    assert json.loads(settings_file.read_text())["other"] == 1
