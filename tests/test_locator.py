from pathlib import Path

import pytest

from zephyr_mcp.modules.core.errors import MalformedDefinitionFile
from zephyr_mcp.modules.core.locator import (
    DefinitionFile,
    extract_definition_section,
    locate_symbol,
)


# ----------------------------------------------------------------------
# Declaration matching
# ----------------------------------------------------------------------


def test_help_and_depends_on() -> None:
    text = "config BT_SCAN\n\thelp\n\t  Enables scanning.\n\tdepends on BT"

    result = locate_symbol(text, "BT_SCAN")

    assert result.found
    assert result.description == "Enables scanning."
    assert result.dependencies == ["BT"]
    assert result.declaration_kind == "config"
    assert result.line == 1


def test_not_found_carries_nothing() -> None:
    result = locate_symbol("config OTHER\n\tbool\n", "BT_SCAN")

    assert not result.found
    assert result.description is None
    assert result.dependencies == []
    assert result.context_snippet is None


def test_prefix_of_longer_name_is_not_a_declaration() -> None:
    result = locate_symbol("config BT_SCAN_WITH_IDENTITY\n\tbool\n", "BT_SCAN")

    assert not result.found


def test_menuconfig_kind_and_line() -> None:
    text = 'mainmenu "x"\n\nmenuconfig NET\n\tbool "Networking"\n'

    result = locate_symbol(text, "NET")

    assert result.declaration_kind == "menuconfig"
    assert result.line == 3


def test_named_choice() -> None:
    text = 'choice LIBC_IMPLEMENTATION\n\tprompt "C Library"\n\nconfig MINIMAL_LIBC\n\tbool\nendchoice\n'

    result = locate_symbol(text, "LIBC_IMPLEMENTATION")

    assert result.found
    assert result.declaration_kind == "choice"
    assert "MINIMAL_LIBC" not in (result.context_snippet or "")


def test_case_insensitive_fallback() -> None:
    result = locate_symbol("Config Legacy_Opt\n\tbool\n", "LEGACY_OPT")

    assert result.found
    assert result.declaration_kind == "config"


def test_indented_declaration_inside_if_block() -> None:
    text = "if BT\n    config BT_EXT_ADV\n        bool\n        depends on BT_BROADCASTER\nendif\n"

    result = locate_symbol(text, "BT_EXT_ADV")

    assert result.found
    assert result.dependencies == ["BT_BROADCASTER"]


# ----------------------------------------------------------------------
# Definition sections
# ----------------------------------------------------------------------


def test_section_stops_at_next_declaration() -> None:
    text = (
        "config FIRST\n"
        "\tbool\n"
        "\thelp\n"
        "\t  First option.\n"
        "config SECOND\n"
        "\tdepends on SECRET_DEP\n"
        "\tselect OTHER\n"
    )

    result = locate_symbol(text, "FIRST")

    assert result.description == "First option."
    assert result.dependencies == []
    assert "SECOND" not in extract_definition_section(text, 0)


def test_section_ignores_keywords_inside_help_prose() -> None:
    text = (
        "config FEATURE\n"
        "\thelp\n"
        "\t  config FEATURE_X is related and\n"
        "\t  menu entries are listed elsewhere.\n"
        "\tdepends on BASE\n"
        "config NEXT\n"
    )

    section = extract_definition_section(text, 0)

    assert "menu entries" in section
    assert "config NEXT" not in section
    result = locate_symbol(text, "FEATURE")
    assert result.description == "config FEATURE_X is related and menu entries are listed elsewhere."
    assert result.dependencies == ["BASE"]


@pytest.mark.parametrize(
    "boundary",
    ["endchoice", "endmenu", 'menu "Drivers"', "choice", "menuconfig OTHER"],
)
def test_section_boundaries(boundary: str) -> None:
    text = f"config A\n\tbool\n\tdepends on B\n{boundary}\n\tdepends on LEAKED\n"

    result = locate_symbol(text, "A")

    assert result.dependencies == ["B"]


def test_first_help_paragraph_only() -> None:
    text = "config A\n\thelp\n\t  One\n\t  two.\n\n\t  Second paragraph.\n"

    assert locate_symbol(text, "A").description == "One two."


def test_legacy_help_marker() -> None:
    text = "config A\n\tbool\n\t---help---\n\t  Old style help.\n"

    assert locate_symbol(text, "A").description == "Old style help."


def test_context_snippet_is_truncated() -> None:
    text = "config A\n\thelp\n" + "\t  " + "word " * 100 + "\n"

    snippet = locate_symbol(text, "A").context_snippet

    assert snippet.endswith("...")
    assert len(snippet) == 203


# ----------------------------------------------------------------------
# Dependencies
# ----------------------------------------------------------------------


def test_dependency_expressions_are_split_and_cleaned() -> None:
    text = (
        "config A\n"
        "\tdepends on !BT_LE && (X || Y) # trailing comment\n"
        "\tdepends on X && Z\n"
        "\tselect Y\n"
        "\tselect W if Z\n"
    )

    assert locate_symbol(text, "A").dependencies == ["BT_LE", "X", "Y", "Z", "W"]


def test_depends_on_inside_help_is_ignored() -> None:
    text = "config A\n\tdepends on B\n\thelp\n\t  depends on NOT_A_DEP\n"

    assert locate_symbol(text, "A").dependencies == ["B"]


# ----------------------------------------------------------------------
# DefinitionFile
# ----------------------------------------------------------------------


class TestDefinitionFile:
    def test_reads_text_once(self, tmp_path: Path) -> None:
        path = tmp_path / "Kconfig"
        path.write_text("config A\n")
        definition = DefinitionFile(path)

        assert definition.read() == "config A\n"
        path.write_text("config B\n")
        assert definition.read() == "config A\n"

    def test_binary_content_is_malformed(self, tmp_path: Path) -> None:
        path = tmp_path / "Kconfig.bin"
        path.write_bytes(b"config A\x00\x01")
        definition = DefinitionFile(path)

        with pytest.raises(MalformedDefinitionFile):
            definition.read()
        assert definition.read_or_none() is None

    def test_missing_file_is_none(self, tmp_path: Path) -> None:
        assert DefinitionFile(tmp_path / "gone").read_or_none() is None

    def test_identity_is_path(self, tmp_path: Path) -> None:
        assert DefinitionFile(tmp_path / "Kconfig") == DefinitionFile(str(tmp_path / "Kconfig"))
        assert len({DefinitionFile(tmp_path / "Kconfig"), DefinitionFile(tmp_path / "Kconfig")}) == 1
