"""
slots.py
Slot folder names for deployed mods.

The game loader enumerates CookedPCConsole/Mods/<slot>/ in ascending name
order.  Slots are allocated starting at "a"; while the candidate already
exists on disk every character is bumped by one code point independently
(no carry, no growth), so "a" -> "b" -> "c" ... and "az" -> "b{".

A character whose successor is not a valid code point (the surrogate block
U+D800-U+DFFF, or past U+10FFFF) stays as it is.  When bumping changes
nothing the namespace is exhausted.  From "a" that leaves the single
characters "a".."\\ud7ff", fewer slots than the folder-name length would
suggest; this limit is kept as-is for compatibility with existing installs.
"""

from __future__ import annotations

from pathlib import Path

from Mods.errors import SlotsExhausted

FIRST_SLOT = "a"

_MAX_CODE_POINT = 0x10FFFF
_SURROGATES = range(0xD800, 0xE000)


def next_char(c: str) -> str:
    """c + 1, or c unchanged when that is not a valid code point."""
    nxt = ord(c) + 1
    if nxt > _MAX_CODE_POINT or nxt in _SURROGATES:
        return c
    return chr(nxt)


def next_slot_name(name: str) -> str:
    """Bump every character of name by one, without carrying."""
    return "".join(next_char(c) for c in name)


def allocate_slot(deploy_dir: Path, first: str = FIRST_SLOT) -> str:
    """
    Return the first slot name, starting at first, with no existing
    entry under deploy_dir.  Nothing is created on disk.

    Raises SlotsExhausted when the next candidate equals the current one.
    """
    candidate = first
    while (deploy_dir / candidate).exists():
        nxt = next_slot_name(candidate)
        if nxt == candidate:
            raise SlotsExhausted(
                f"No free slot left in {deploy_dir} (last tried {candidate!r})",
                path=deploy_dir,
            )
        candidate = nxt
    return candidate
