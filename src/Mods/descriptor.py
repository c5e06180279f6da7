"""
descriptor.py
Read and write a mod's mod.ini descriptor.

Format:
  [Description]
  Name=Example Mod          (mandatory, non-empty)
  Author=...
  Version=...
  Category=...
  Description=...
  Page=https://...

  [Scripts]
  ScriptPackage=ExampleScripts   (repeatable, order preserved)

Missing optional keys default to "" and a missing [Scripts] section to [].
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from Mods.errors import (
    DescriptorMissingName,
    DescriptorMissingSection,
    DescriptorParseError,
    DescriptorWriteFailed,
    InvalidModName,
)
from Utils.ini_file import IniDocument, IniParseError

DESCRIPTOR_FILE = "mod.ini"

_DESCRIPTION_SECTION = "Description"
_SCRIPTS_SECTION = "Scripts"
_SCRIPT_KEY = "ScriptPackage"

# INI key -> ModDescriptor attribute, in write order
_SCALAR_FIELDS = (
    ("Name", "name"),
    ("Author", "author"),
    ("Version", "version"),
    ("Category", "category"),
    ("Description", "description"),
    ("Page", "page"),
)


@dataclass
class ModDescriptor:
    name: str
    author: str = ""
    version: str = ""
    category: str = ""
    description: str = ""
    page: str = ""
    # Script packages in declaration order; duplicates are kept here and
    # only collapsed when merged into DefaultEngine.ini.
    scripts: list[str] = field(default_factory=list)
    # Directory holding mod.ini
    path: Path = field(default_factory=Path)


def descriptor_path(mod_dir: Path) -> Path:
    """Result: <mod_dir>/mod.ini"""
    return Path(mod_dir) / DESCRIPTOR_FILE


def _single_line(value: str) -> str:
    return " ".join(value.splitlines()).strip()


def validate_mod_name(name: str) -> str:
    """Return name stripped, or raise InvalidModName if it cannot be used.

    The name doubles as the mod's folder name and as a key in config.ini,
    so path separators, '=' and line breaks are rejected, as are names INI
    would read as a header or comment.
    """
    stripped = name.strip()
    if not stripped:
        raise InvalidModName("You must give your mod a name!", name=name)
    if stripped in (".", ".."):
        raise InvalidModName(f"'{stripped}' is not a valid mod name!", name=name)
    bad = [c for c in ("/", "\\", "=", "\n", "\r", "\0") if c in stripped]
    if bad:
        raise InvalidModName(
            f"Mod name '{stripped}' contains an invalid character {bad[0]!r}!",
            name=name,
        )
    if stripped.startswith(("[", ";", "#")):
        raise InvalidModName(
            f"Mod name '{stripped}' may not start with {stripped[0]!r}!",
            name=name,
        )
    return stripped


def read_descriptor(mod_dir: Path) -> ModDescriptor:
    """
    Parse <mod_dir>/mod.ini and return a ModDescriptor whose path is mod_dir.

    Raises DescriptorParseError if the file is missing, unreadable or not
    valid INI, DescriptorMissingSection without [Description] and
    DescriptorMissingName when Name is absent or empty.
    """
    mod_dir = Path(mod_dir)
    ini_path = descriptor_path(mod_dir)
    try:
        doc = IniDocument.load(ini_path)
    except (OSError, UnicodeDecodeError, IniParseError) as exc:
        raise DescriptorParseError(
            f"Could not read {ini_path}: {exc}", path=ini_path) from exc

    desc = doc.section(_DESCRIPTION_SECTION)
    if desc is None:
        raise DescriptorMissingSection(
            f"The mod ini at path {ini_path} doesn't have a description section!",
            path=ini_path,
        )

    name = desc.get("Name", "") or ""
    if not name:
        raise DescriptorMissingName(
            f"The mod ini at path {ini_path} doesn't have a name in the description section!",
            path=ini_path,
        )

    data = ModDescriptor(name=name, path=mod_dir)
    for ini_key, attr in _SCALAR_FIELDS[1:]:
        setattr(data, attr, desc.get(ini_key, "") or "")

    scripts = doc.section(_SCRIPTS_SECTION)
    if scripts is not None:
        data.scripts = scripts.get_all(_SCRIPT_KEY)
    return data


def write_descriptor(data: ModDescriptor) -> None:
    """
    Write data to <data.path>/mod.ini, creating the directory if needed.

    Always a full overwrite: [Description] first, then one ScriptPackage
    line per script in list order ([Scripts] is omitted when empty).
    Raises DescriptorWriteFailed on any OS error.
    """
    doc = IniDocument()
    doc.replace_section(_DESCRIPTION_SECTION, [
        (ini_key, _single_line(getattr(data, attr)))
        for ini_key, attr in _SCALAR_FIELDS
    ])
    if data.scripts:
        doc.replace_section(_SCRIPTS_SECTION, [
            (_SCRIPT_KEY, _single_line(script)) for script in data.scripts
        ])

    ini_path = descriptor_path(data.path)
    try:
        Path(data.path).mkdir(parents=True, exist_ok=True)
        doc.write(ini_path)
    except OSError as exc:
        raise DescriptorWriteFailed(
            f"Could not write {ini_path}: {exc}", path=ini_path, name=data.name,
        ) from exc
