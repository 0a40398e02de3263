import json
from pathlib import Path

import pytest

from zephyr_mcp.modules.core.errors import WorkspaceRootInvalid
from zephyr_mcp.modules.core.workspace import (
    CONFIG_FILENAME,
    DEFAULT_PRIORITY_DIRS,
    ScanConfig,
    load_scan_config,
    resolve_workspace,
)


class TestLoadScanConfig:
    def test_defaults_without_file(self, tmp_path: Path) -> None:
        config = load_scan_config(tmp_path)

        assert config == ScanConfig()
        assert config.priority_dirs == DEFAULT_PRIORITY_DIRS
        assert config.index_depth == 4
        assert config.deep_depth == 6

    def test_overrides(self, tmp_path: Path) -> None:
        (tmp_path / CONFIG_FILENAME).write_text(json.dumps({
            "priorityDirs": ["{zephyr}", "vendor"],
            "excludeNames": ["out"],
            "deepDepth": 3,
            "deepTimeBudget": 2.5,
            "subsystemRoots": {"NET_": "NETWORKING"},
        }))

        config = load_scan_config(tmp_path)

        assert config.priority_dirs == ["{zephyr}", "vendor"]
        assert config.exclude_names == ["out"]
        assert config.deep_depth == 3
        assert config.deep_time_budget == 2.5
        assert config.subsystem_roots == {"NET_": "NETWORKING"}
        assert config.index_depth == 4

    def test_wrong_types_are_ignored(self, tmp_path: Path) -> None:
        (tmp_path / CONFIG_FILENAME).write_text(json.dumps({
            "indexDepth": "deep",
            "deepDepth": True,
            "excludeNames": "build",
        }))

        config = load_scan_config(tmp_path)

        assert config.index_depth == 4
        assert config.deep_depth == 6
        assert config.exclude_names == ScanConfig().exclude_names

    def test_invalid_json_falls_back_to_defaults(self, tmp_path: Path) -> None:
        (tmp_path / CONFIG_FILENAME).write_text("{not json")

        assert load_scan_config(tmp_path) == ScanConfig()

    def test_non_object_falls_back_to_defaults(self, tmp_path: Path) -> None:
        (tmp_path / CONFIG_FILENAME).write_text("[1, 2]")

        assert load_scan_config(tmp_path) == ScanConfig()

    def test_defaults_are_not_shared(self) -> None:
        first = ScanConfig()
        first.exclude_names.append("extra")

        assert "extra" not in ScanConfig().exclude_names


class TestResolveWorkspace:
    def test_missing_root(self, tmp_path: Path) -> None:
        with pytest.raises(WorkspaceRootInvalid) as exc:
            resolve_workspace(tmp_path / "nope")
        assert "does not exist" in str(exc.value)

    def test_root_is_a_file(self, tmp_path: Path) -> None:
        path = tmp_path / "file.txt"
        path.write_text("")

        with pytest.raises(ValueError):
            resolve_workspace(path)

    def test_empty_root(self) -> None:
        with pytest.raises(WorkspaceRootInvalid):
            resolve_workspace("")

    def test_zephyr_base_from_west_config(self, tmp_path: Path) -> None:
        (tmp_path / ".west").mkdir()
        (tmp_path / ".west" / "config").write_text("[zephyr]\nbase = zephyr-src\n")
        (tmp_path / "zephyr-src").mkdir()
        (tmp_path / "nrf").mkdir()

        handle = resolve_workspace(tmp_path)

        assert handle.zephyr_base == tmp_path.resolve() / "zephyr-src"
        assert handle.expand("{zephyr}/doc") == tmp_path.resolve() / "zephyr-src" / "doc"
        dirs = handle.priority_dirs(ScanConfig())
        assert [d.name for d in dirs] == ["zephyr-src", "nrf"]

    def test_zephyr_base_defaults_without_west_config(self, tmp_path: Path) -> None:
        handle = resolve_workspace(tmp_path)

        assert handle.zephyr_base == tmp_path.resolve() / "zephyr"
        assert handle.west_config == {}

    def test_custom_west_path(self, tmp_path: Path) -> None:
        west_dir = tmp_path / "elsewhere"
        west_dir.mkdir()
        (west_dir / "config").write_text("[zephyr]\nbase = rtos\n")

        handle = resolve_workspace(tmp_path, west_path=west_dir)

        assert handle.zephyr_dir_name == "rtos"

    def test_relative_paths_are_posix(self, tmp_path: Path) -> None:
        handle = resolve_workspace(tmp_path)

        assert handle.relative(tmp_path.resolve() / "zephyr" / "Kconfig") == "zephyr/Kconfig"
