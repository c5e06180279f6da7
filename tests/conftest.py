from __future__ import annotations

from pathlib import Path

import pytest

from Mods.descriptor import ModDescriptor, write_descriptor
from Mods.mod_manager import ModManager
from Mods.registry import Registry
from Utils.app_log import LaunchLog

ENGINE_INI = """\
[Core.System]
Paths=..\\..\\Engine\\EngineMaterials

[Engine.ScriptPackages]
+NonNativePackages=REDGameContent
+NativePackages=REDGame

[Engine.Engine]
bSmoothFrameRate=TRUE
"""


def make_mod(mods_dir: Path, name: str, scripts: list[str] | None = None,
             files: dict[str, str] | None = None, **fields) -> Path:
    """Create mods_dir/name with a mod.ini and optional payload files."""
    mod_dir = mods_dir / name
    write_descriptor(ModDescriptor(name=name, path=mod_dir, scripts=list(scripts or []),
                                   **fields))
    for rel, text in (files or {}).items():
        target = mod_dir / rel
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(text, encoding="utf-8")
    return mod_dir


def write_registry(path: Path, pairs: list[tuple[str, str]]) -> None:
    body = "".join(f"{name}={value}\n" for name, value in pairs)
    path.write_text("[General]\nConsoleVisible=True\n\n[Mods]\n" + body, encoding="utf-8")


def make_game(root: Path, engine_ini: str = ENGINE_INI) -> Path:
    """Minimal game install with DefaultEngine.ini."""
    config = root / "REDGame" / "Config"
    config.mkdir(parents=True)
    (config / "DefaultEngine.ini").write_text(engine_ini, encoding="utf-8")
    (root / "REDGame" / "CookedPCConsole").mkdir(parents=True)
    return root


@pytest.fixture
def log():
    return LaunchLog()


@pytest.fixture
def data_dir(tmp_path):
    d = tmp_path / "data"
    (d / "Mods").mkdir(parents=True)
    return d


@pytest.fixture
def mods_dir(data_dir):
    return data_dir / "Mods"


@pytest.fixture
def registry_path(data_dir):
    return data_dir / "config.ini"


@pytest.fixture
def make_manager(mods_dir, registry_path, log):
    def _make() -> ModManager:
        manager = ModManager(Registry.load(registry_path, log), mods_dir, log)
        manager.reconcile()
        return manager
    return _make
