"""
engine_config.py
Register mod script packages in the game's DefaultEngine.ini.

  [Engine.ScriptPackages]
  +NativePackages=REDGame        <- bootstrap entry, always first
  +NativePackages=SomeModScripts <- one per package required by enabled mods

Each deploy first resets the +NativePackages list to the bootstrap entry,
then ensures every enabled mod's packages are present exactly once.  Lines
outside +NativePackages, and every other section, are left untouched.
"""

from __future__ import annotations

from pathlib import Path

from Mods.errors import ConfigReadFailed, ConfigSectionMissing, ConfigWriteFailed
from Utils.ini_file import IniDocument, IniParseError, IniSection

SCRIPT_PACKAGES_SECTION = "Engine.ScriptPackages"
NATIVE_PACKAGES_KEY = "+NativePackages"
BOOTSTRAP_PACKAGE = "REDGame"


def _load(ini_path: Path) -> tuple[IniDocument, IniSection]:
    try:
        doc = IniDocument.load(ini_path)
    except (OSError, UnicodeDecodeError, IniParseError) as exc:
        raise ConfigReadFailed(
            f"Could not read {ini_path.name}! {exc}", path=ini_path) from exc
    section = doc.section(SCRIPT_PACKAGES_SECTION)
    if section is None:
        raise ConfigSectionMissing(
            f"Could not find {SCRIPT_PACKAGES_SECTION} in {ini_path.name}! "
            "Your game installation may be broken.",
            path=ini_path,
        )
    return doc, section


def _save(doc: IniDocument, ini_path: Path) -> None:
    try:
        doc.write(ini_path)
    except OSError as exc:
        raise ConfigWriteFailed(
            f"Could not write to {ini_path.name}! {exc}", path=ini_path) from exc


def native_packages(ini_path: Path) -> list[str]:
    """Current +NativePackages values in file order."""
    _, section = _load(Path(ini_path))
    return section.get_all(NATIVE_PACKAGES_KEY)


def reset_native_packages(ini_path: Path, bootstrap: str = BOOTSTRAP_PACKAGE) -> list[str]:
    """
    Remove every +NativePackages entry and add back only bootstrap.
    Returns the values that were removed.
    """
    ini_path = Path(ini_path)
    doc, section = _load(ini_path)
    removed = section.remove_all(NATIVE_PACKAGES_KEY)
    section.append(NATIVE_PACKAGES_KEY, bootstrap)
    _save(doc, ini_path)
    return removed


def ensure_packages(ini_path: Path, packages: list[str]) -> list[str]:
    """
    Append each package that is not already listed (exact match), in order.

    The file is read once and written only if something was added.
    Returns the packages that were added.
    """
    ini_path = Path(ini_path)
    doc, section = _load(ini_path)
    present = set(section.get_all(NATIVE_PACKAGES_KEY))
    added: list[str] = []
    for package in packages:
        if package in present:
            continue
        section.append(NATIVE_PACKAGES_KEY, package)
        present.add(package)
        added.append(package)
    if added:
        _save(doc, ini_path)
    return added


def ensure_package(ini_path: Path, package: str) -> bool:
    """Add package to +NativePackages unless already present.  True if added."""
    return bool(ensure_packages(ini_path, [package]))
