from pathlib import Path

import pytest

BLUETOOTH_KCONFIG = """\
menuconfig BT
\tbool "Bluetooth"
\thelp
\t  Enable Bluetooth support.

if BT

config BT_SCAN
\tbool "Scanning"
\tdepends on BT && (BT_OBSERVER || BT_CENTRAL)
\tselect NET_BUF
\thelp
\t  Enables scanning.
\t  Second line.

\t  Later paragraph.

config BT_OBSERVER
\tbool "Observer"
\thelp
\t  Observer role.

endif # BT
"""

NRF_KCONFIG = """\
config NRF_MODEM_LIB_EXT
\tbool "Modem library extension"
"""

MANIFEST = """\
manifest:
  version: "0.13"
  remotes:
    - name: ncs
      url-base: https://github.com/nrfconnect
  defaults:
    remote: ncs
    revision: main
  projects:
    - name: zephyr
      repo-path: sdk-zephyr
      revision: v3.5.99-ncs1
      import: true
    - name: mcuboot
      path: bootloader/mcuboot
      revision: v2.0.0
  self:
    path: nrf
"""

ZEPHYR_VERSION = """\
VERSION_MAJOR = 3
VERSION_MINOR = 5
PATCHLEVEL = 99
VERSION_TWEAK = 0
EXTRAVERSION =
"""


def write_tree(root: Path, files: dict[str, str | bytes]) -> Path:
    """Create files (and parent directories) under root."""
    for rel, content in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            path.write_bytes(content)
        else:
            path.write_text(content)
    return root


@pytest.fixture
def west_workspace(tmp_path: Path) -> Path:
    """A miniature nRF Connect SDK West workspace."""
    root = tmp_path / "ncs"
    return write_tree(
        root,
        {
            ".west/config": "[manifest]\npath = nrf\nfile = west.yml\n\n[zephyr]\nbase = zephyr\n",
            "nrf/west.yml": MANIFEST,
            "nrf/VERSION": "2.6.0\n",
            "nrf/Kconfig": NRF_KCONFIG,
            "zephyr/VERSION": ZEPHYR_VERSION,
            "zephyr/Kconfig": 'mainmenu "Zephyr Kernel Configuration"\n',
            "zephyr/subsys/bluetooth/Kconfig": BLUETOOTH_KCONFIG,
        },
    )


@pytest.fixture
def settings_file(tmp_path: Path, monkeypatch) -> Path:
    """Point the persisted settings at a temporary file."""
    path = tmp_path / "settings" / "config.json"
    monkeypatch.setenv("ZEPHYR_MCP_CONFIG", str(path))
    return path
