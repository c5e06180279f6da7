"""
registry.py
Persisted mod registry stored in config.ini.

Format:
  [General]
  ConsoleVisible=True
  GamePath=/path/to/GUILTY GEAR Xrd -REVELATOR-

  [Mods]
  TopMod=True        <- first line = highest priority
  OtherMod=False
  BottomMod=True     <- last line = lowest priority

Position in [Mods] is the only source of priority; there is no numeric
order field.  The registry is modelled as an ordered list of unique
(name, value) pairs and [Mods] is always rewritten wholesale.  Other
sections are preserved verbatim.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from Mods.errors import RegistryWriteFailed
from Utils.app_log import LogFn, LogType, null_log
from Utils.ini_file import IniDocument, IniParseError

MODS_SECTION = "Mods"
GENERAL_SECTION = "General"

_TRUE = "True"
_FALSE = "False"


@dataclass
class RegistryEntry:
    name: str
    # Raw stored value; only the exact string "True" means enabled.
    value: str = _TRUE

    @property
    def enabled(self) -> bool:
        return self.value == _TRUE


def enabled_str(enabled: bool) -> str:
    return _TRUE if enabled else _FALSE


class Registry:
    """
    Ordered, key-unique view of config.ini.

    Parameters
    ----------
    path : Path
        Location of config.ini.
    log_fn : callable(message, level) | None
        Where load problems are reported.
    """

    def __init__(self, path: Path, log_fn: LogFn | None = None):
        self.path = Path(path)
        self._log = log_fn or null_log
        self._doc = IniDocument()
        self._entries: list[RegistryEntry] = []
        # Set when the loaded file had to be normalised (duplicate keys).
        self.dirty = False

    # -- Loading ------------------------------------------------------------

    @classmethod
    def load(cls, path: Path, log_fn: LogFn | None = None) -> Registry:
        """Read config.ini.  A missing file is an empty registry; an
        unreadable one is logged and also treated as empty."""
        reg = cls(path, log_fn)
        if not reg.path.is_file():
            reg._log("No mods found in the config ini! You probably need to install a mod.",
                     LogType.WARN)
            return reg
        try:
            reg._doc = IniDocument.load(reg.path)
        except (OSError, UnicodeDecodeError, IniParseError) as exc:
            reg._log(f"Could not read {reg.path.name}! {exc} Starting with an empty mod list.",
                     LogType.ERROR)
            reg._doc = IniDocument()
            reg.dirty = True
            return reg

        section = reg._doc.section(MODS_SECTION)
        if section is None:
            reg._log("No mods found in the config ini! You probably need to install a mod.",
                     LogType.WARN)
            return reg
        seen: set[str] = set()
        for name, value in section.items():
            if name in seen:
                reg._log(f"Duplicate registry entry {name} ignored.", LogType.WARN)
                reg.dirty = True
                continue
            seen.add(name)
            reg._entries.append(RegistryEntry(name=name, value=value))
        return reg

    # -- Entries ------------------------------------------------------------

    def entries(self) -> list[RegistryEntry]:
        """Entries in priority order (index 0 = highest)."""
        return list(self._entries)

    def names(self) -> list[str]:
        return [e.name for e in self._entries]

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, name: str) -> bool:
        return any(e.name == name for e in self._entries)

    def get(self, name: str) -> RegistryEntry | None:
        for e in self._entries:
            if e.name == name:
                return e
        return None

    def remove(self, name: str) -> bool:
        before = len(self._entries)
        self._entries = [e for e in self._entries if e.name != name]
        return len(self._entries) != before

    def replace_all(self, pairs: list[tuple[str, bool]]) -> None:
        """Replace every entry; later duplicates of a name are dropped."""
        entries: list[RegistryEntry] = []
        seen: set[str] = set()
        for name, enabled in pairs:
            if name in seen:
                continue
            seen.add(name)
            entries.append(RegistryEntry(name, enabled_str(enabled)))
        self._entries = entries

    # -- General settings ---------------------------------------------------

    def get_setting(self, key: str, default: str = "") -> str:
        section = self._doc.section(GENERAL_SECTION)
        if section is None:
            return default
        value = section.get(key)
        return default if value is None else value

    def set_setting(self, key: str, value: str) -> None:
        self._doc.add_section(GENERAL_SECTION).set(key, value)

    # -- Persisting ---------------------------------------------------------

    def save(self) -> None:
        """Write config.ini with [Mods] rebuilt from the current entries.

        Raises RegistryWriteFailed if the file cannot be written.
        """
        self._doc.replace_section(
            MODS_SECTION, [(e.name, e.value) for e in self._entries])
        try:
            self._doc.write(self.path)
        except OSError as exc:
            raise RegistryWriteFailed(
                f"Could not write {self.path.name}! {exc}", path=self.path,
            ) from exc
        self.dirty = False

    def rewrite(self, pairs: list[tuple[str, bool]]) -> None:
        """replace_all(pairs) then save()."""
        self.replace_all(pairs)
        self.save()
