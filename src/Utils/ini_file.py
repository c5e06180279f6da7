"""
ini_file.py
Line-preserving reader/writer for INI-style files with repeated keys.

Used for mod.ini descriptors, the config.ini registry and the game's
DefaultEngine.ini.  Unreal's config files rely on repeated keys
(+NativePackages=..., ScriptPackage=...) which configparser collapses, and
the engine file must be written back without disturbing the parts we do not
own, so every section keeps its raw lines and edits touch only the lines of
the keys being changed.

Syntax:
  ; comment            # comment
  [Section]
  Key=Value            (split on the first '='; key and value are stripped)

Lines before the first header belong to an unnamed leading section.
"""

from __future__ import annotations

from pathlib import Path

_COMMENT_PREFIXES = (";", "#")
_BOM = "\ufeff"


class IniParseError(ValueError):
    """Raised when a line is not blank, a comment, a header or a key=value pair."""
    def __init__(self, line_no: int, line: str, reason: str = ""):
        msg = f"line {line_no}: {reason or 'invalid syntax'}: {line.strip()!r}"
        super().__init__(msg)
        self.line_no = line_no
        self.line = line


def _parse_entry(line: str) -> tuple[str, str] | None:
    """Return (key, value) for a key=value line, None for blanks and comments."""
    stripped = line.strip()
    if not stripped or stripped.startswith(_COMMENT_PREFIXES):
        return None
    key, sep, value = stripped.partition("=")
    if not sep:
        return None
    return key.strip(), value.strip()


# ---------------------------------------------------------------------------
# Section
# ---------------------------------------------------------------------------

class IniSection:
    """One [Section] and its raw body lines (header excluded)."""

    def __init__(self, name: str | None, lines: list[str] | None = None):
        self.name = name
        self.lines: list[str] = lines if lines is not None else []

    def __repr__(self) -> str:
        return f"IniSection({self.name!r}, {len(self.lines)} lines)"

    def _entries(self) -> list[tuple[int, str, str]]:
        out = []
        for idx, line in enumerate(self.lines):
            entry = _parse_entry(line)
            if entry is not None:
                out.append((idx, entry[0], entry[1]))
        return out

    def items(self) -> list[tuple[str, str]]:
        """All (key, value) pairs in file order, repeated keys included."""
        return [(k, v) for _, k, v in self._entries()]

    def keys(self) -> list[str]:
        return [k for _, k, _ in self._entries()]

    def __contains__(self, key: str) -> bool:
        return any(k == key for _, k, _ in self._entries())

    def get(self, key: str, default: str | None = None) -> str | None:
        """Value of the first occurrence of key."""
        for _, k, v in self._entries():
            if k == key:
                return v
        return default

    def get_all(self, key: str) -> list[str]:
        """Values of every occurrence of key, in file order."""
        return [v for _, k, v in self._entries() if k == key]

    def _insert_index(self) -> int:
        # New entries go after the last non-blank line so trailing spacing
        # between this section and the next one is kept.
        idx = len(self.lines)
        while idx > 0 and not self.lines[idx - 1].strip():
            idx -= 1
        return idx

    def append(self, key: str, value: str) -> None:
        """Add key=value after the section's last entry, even if key exists."""
        self.lines.insert(self._insert_index(), f"{key}={value}")

    def set(self, key: str, value: str) -> None:
        """Replace the first occurrence of key, dropping any later ones."""
        positions = [idx for idx, k, _ in self._entries() if k == key]
        if not positions:
            self.append(key, value)
            return
        self.lines[positions[0]] = f"{key}={value}"
        for idx in reversed(positions[1:]):
            del self.lines[idx]

    def remove_all(self, key: str) -> list[str]:
        """Delete every occurrence of key; return the removed values."""
        removed: list[str] = []
        keep: list[str] = []
        for line in self.lines:
            entry = _parse_entry(line)
            if entry is not None and entry[0] == key:
                removed.append(entry[1])
            else:
                keep.append(line)
        self.lines = keep
        return removed


# ---------------------------------------------------------------------------
# Document
# ---------------------------------------------------------------------------

class IniDocument:
    """An INI file as an ordered list of sections."""

    def __init__(self):
        self._sections: list[IniSection] = [IniSection(None)]
        self.newline = "\n"
        self.bom = False

    @classmethod
    def loads(cls, text: str) -> IniDocument:
        doc = cls()
        if text.startswith(_BOM):
            doc.bom = True
            text = text[1:]
        if "\r\n" in text:
            doc.newline = "\r\n"
        current = doc._sections[0]
        for line_no, line in enumerate(text.splitlines(), 1):
            stripped = line.strip()
            if stripped.startswith("["):
                if not stripped.endswith("]"):
                    raise IniParseError(line_no, line, "unterminated section header")
                current = IniSection(stripped[1:-1].strip())
                doc._sections.append(current)
                continue
            if (stripped and not stripped.startswith(_COMMENT_PREFIXES)
                    and "=" not in stripped):
                raise IniParseError(line_no, line, "expected key=value")
            current.lines.append(line)
        return doc

    @classmethod
    def load(cls, path: Path) -> IniDocument:
        """Read path as UTF-8.  OSError, UnicodeDecodeError and IniParseError propagate."""
        with open(path, "r", encoding="utf-8", newline="") as fh:
            return cls.loads(fh.read())

    def dumps(self) -> str:
        lines: list[str] = list(self._sections[0].lines)
        for section in self._sections[1:]:
            lines.append(f"[{section.name}]")
            lines.extend(section.lines)
        if not lines:
            return ""
        text = self.newline.join(lines) + self.newline
        return (_BOM + text) if self.bom else text

    def write(self, path: Path) -> None:
        """Write the document to path, creating parent directories."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8", newline="") as fh:
            fh.write(self.dumps())

    # -- Sections -----------------------------------------------------------

    def sections(self) -> list[str]:
        """Names of the named sections, in file order."""
        return [s.name for s in self._sections[1:]]

    def section(self, name: str) -> IniSection | None:
        for s in self._sections[1:]:
            if s.name == name:
                return s
        return None

    def add_section(self, name: str) -> IniSection:
        """Return section name, creating it at the end of the file if absent."""
        existing = self.section(name)
        if existing is not None:
            return existing
        prev = self._sections[-1]
        if prev.lines and prev.lines[-1].strip():
            prev.lines.append("")
        section = IniSection(name)
        self._sections.append(section)
        return section

    def remove_section(self, name: str) -> bool:
        """Remove every section called name.  Returns True if any existed."""
        before = len(self._sections)
        self._sections = [self._sections[0]] + [
            s for s in self._sections[1:] if s.name != name
        ]
        return len(self._sections) != before

    def replace_section(self, name: str,
                        items: list[tuple[str, str]]) -> IniSection:
        """Replace the body of section name with items, keeping its position.

        The section is created at the end of the file if it does not exist.
        A blank line is kept after the entries when another section follows.
        """
        section = self.add_section(name)
        section.lines = [f"{k}={v}" for k, v in items]
        if section is not self._sections[-1]:
            section.lines.append("")
        return section
