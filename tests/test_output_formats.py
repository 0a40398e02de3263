from zephyr_mcp.modules.core.cascade import VerificationResult
from zephyr_mcp.modules.core.output_formats import (
    format_board_list,
    format_build_info,
    format_manifest_info,
    format_module_list,
    format_verification_json,
    format_verification_report,
    format_workspace_summary,
)


def _available(name: str, deps: list[str]) -> VerificationResult:
    return VerificationResult(
        name=name,
        available=True,
        source="zephyr/subsys/bluetooth/Kconfig",
        description="Enables scanning.",
        dependencies=deps,
        confidence="high",
        search_method="indexed",
    )


def test_all_available_lists_required_dependencies() -> None:
    report = format_verification_report([
        _available("BT_SCAN", ["BT", "BT_OBSERVER"]),
        _available("BT_OBSERVER", ["BT"]),
    ])

    assert "- ✅ Available: 2" in report
    assert "- ❌ Missing: 0" in report
    assert "### CONFIG_BT_SCAN" in report
    assert "- **Source**: zephyr/subsys/bluetooth/Kconfig" in report
    assert "All requested Kconfigs are available" in report
    assert report.count("- CONFIG_BT=y") == 1
    assert "- CONFIG_BT_OBSERVER=y" in report
    assert "## ⚠️ Warnings" not in report


def test_missing_symbols_with_warning() -> None:
    missing = VerificationResult(
        name="BT_HRS",
        suggestions=["Ensure CONFIG_BT=y is enabled"],
        alternatives=["BT_BAS"],
        warning="Heart Rate Service not available as built-in Kconfig",
        search_method="not-found",
    )

    report = format_verification_report([_available("BT_SCAN", []), missing])

    assert "## ❌ Missing Kconfigs" in report
    assert "- **Suggestions**: Ensure CONFIG_BT=y is enabled" in report
    assert "- **Alternatives**: BT_BAS" in report
    assert "1 Kconfig(s) are missing" in report
    assert "- **CONFIG_BT_HRS**: Heart Rate Service not available as built-in Kconfig" in report
    assert "Required Dependencies" not in report


def test_verification_json() -> None:
    text = format_verification_json([_available("BT_SCAN", ["BT"])], indent=None)

    assert '"search_method": "indexed"' in text
    assert '"dependencies": ["BT"]' in text


def test_workspace_summary() -> None:
    summary = format_workspace_summary({
        "is_valid": True,
        "west_config": {"manifest": {"path": "nrf", "file": "west.yml"}, "zephyr": {"base": "zephyr"}},
        "zephyr_version": {"full": "3.5.99", "major": "3", "minor": "5", "patch": "99"},
        "sdk_version": {"ncs": "2.6.0", "type": "nRF Connect SDK"},
        "projects": [{"name": f"p{i}", "revision": None} for i in range(12)],
        "modules": [{"name": "nordic", "category": "hal"}, {"name": "mcuboot"}],
        "boards": [{"name": f"b{i}", "arch": "arm"} for i in range(7)],
        "kconfig": {"files": ["a", "b"]},
        "cmake": {"modules": ["m"], "toolchains": [], "package_config": "x"},
    })

    assert "- Manifest Path: nrf/west.yml" in summary
    assert "- Version: 3.5.99" in summary
    assert "- nRF Connect SDK: v2.6.0" in summary
    assert "- p0 (no-revision)" in summary
    assert "... and 2 more" in summary
    assert "- hal: nordic" in summary
    assert "- other: mcuboot" in summary
    assert "- arm: b0, b1, b2, b3, b4 ... (7 total)" in summary
    assert "- Kconfig files: 2 found" in summary
    assert "Toolchains" not in summary
    assert "- Zephyr package config: Available" in summary


def test_invalid_workspace_summary() -> None:
    assert "Not a valid West workspace" in format_workspace_summary({"is_valid": False})


def test_listings() -> None:
    assert format_module_list([]) == "No modules found in workspace"
    modules = format_module_list([
        {"name": "nordic", "category": "hal", "path": "modules/hal/nordic", "has_cmake": True, "has_kconfig": False},
        {"name": "mcuboot", "path": "bootloader/mcuboot", "from_manifest": True, "revision": "v2.0.0"},
    ])
    assert "Found 2 modules:" in modules
    assert "- mcuboot (manifest)" in modules
    assert "✓ CMake support" in modules
    assert "✓ Kconfig support" not in modules
    assert "Revision: v2.0.0" in modules

    assert format_board_list([]) == "No boards found in workspace"
    boards = format_board_list([
        {"name": "nrf52840dk", "arch": "arm", "path": "boards/arm/nrf52840dk"},
        {"name": "thingy91", "vendor": "nordic", "path": "nrf/boards/thingy91"},
    ])
    assert "## arm (1)" in boards
    assert "## nordic (1)" in boards


def test_manifest_info() -> None:
    assert format_manifest_info(None, []) == "No manifest found in workspace"

    text = format_manifest_info(
        {"manifest": {
            "version": "0.13",
            "remotes": [{"name": "ncs", "url-base": "https://github.com/nrfconnect"}],
            "defaults": {"remote": "ncs", "revision": "main"},
        }},
        [{"name": "zephyr", "path": "zephyr", "revision": None, "repo_path": "sdk-zephyr"}],
    )

    assert "Version: 0.13" in text
    assert "- ncs: https://github.com/nrfconnect" in text
    assert "- Revision: main" in text
    assert "  Revision: default" in text
    assert "  Repo: sdk-zephyr" in text


def test_build_info() -> None:
    empty = format_build_info([], {})
    assert "No Kconfig files found" in empty
    assert "No CMake modules found" in empty
    assert "No toolchain configurations found" in empty

    text = format_build_info(
        ["/ws/zephyr/Kconfig"],
        {"modules": [f"cmake/modules/m{i}.cmake" for i in range(22)], "toolchains": ["cmake/t"], "package_config": "p"},
    )
    assert "- /ws/zephyr/Kconfig" in text
    assert "... and 2 more" in text
    assert "- Config: p" in text
