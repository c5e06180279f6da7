"""
install.py
Install a mod from an archive, a folder or a URL.

install_from_path / install_from_url never raise for install problems: they
log the failure and return None, or return the installed LiveModRecord.
install_source() does the same work but raises InstallError, for callers
that want the reason.

Flow for an archive:
  1. Extract into a temporary folder.
  2. If the archive's root has no mod.ini but holds exactly one folder,
     use that folder as the mod root (authors often wrap their files).
  3. Name = the descriptor's Name if valid, else the archive stem.
  4. Name already installed -> no-op.  Otherwise copy the mod root to
     Mods/<name>/ and hand over to ModManager.install_directory().
"""

from __future__ import annotations

import shutil
import tempfile
from pathlib import Path
from typing import Callable

from Mods.archive import archive_stem, extract_archive
from Mods.descriptor import descriptor_path, read_descriptor, validate_mod_name
from Mods.download import Downloader, download_mod
from Mods.errors import (
    DescriptorError,
    DirectoryMissing,
    InstallError,
    InvalidModName,
    RegistryWriteFailed,
)
from Mods.mod_manager import LiveModRecord, ModManager
from Utils.app_log import LogFn, LogType, null_log

# Callback signature: (archive_path, dest_dir, log_fn)
Extractor = Callable[[Path, Path, LogFn], None]

_IGNORED_TOP_LEVEL = {"__MACOSX"}


def find_mod_root(extract_dir: Path) -> Path:
    """The folder inside extract_dir that should become Mods/<name>/."""
    if descriptor_path(extract_dir).is_file():
        return extract_dir
    children = [c for c in extract_dir.iterdir() if c.name not in _IGNORED_TOP_LEVEL]
    if len(children) == 1 and children[0].is_dir():
        return children[0]
    return extract_dir


def _choose_name(mod_root: Path, fallback: str) -> str:
    try:
        return validate_mod_name(read_descriptor(mod_root).name)
    except (DescriptorError, InvalidModName):
        pass
    try:
        return validate_mod_name(fallback)
    except InvalidModName as exc:
        raise InstallError(f"Cannot derive a mod name from {fallback!r}! {exc}") from exc


def _install_tree(manager: ModManager, mod_root: Path, name: str,
                  _log: LogFn) -> LiveModRecord:
    existing = manager.get(name)
    if existing is not None:
        _log(f"{name} is already installed.", LogType.WARN)
        return existing

    dest = manager.mods_dir / name
    if dest.resolve() != mod_root.resolve():
        try:
            shutil.copytree(mod_root, dest, dirs_exist_ok=True)
        except OSError as exc:
            raise InstallError(f"Could not copy {name} into {manager.mods_dir}! {exc}",
                               path=mod_root, name=name) from exc
    try:
        return manager.install_directory(name)
    except RegistryWriteFailed:
        # Already logged; the mod is in the list and will be written next time.
        return manager.get(name)
    except (DirectoryMissing, DescriptorError, InvalidModName) as exc:
        raise InstallError(f"Could not install {name}! {exc}", path=dest, name=name) from exc


def install_source(
    manager: ModManager,
    source: Path,
    log_fn: LogFn | None = None,
    extract_fn: Extractor = extract_archive,
) -> LiveModRecord:
    """Install from an archive file or a mod folder; raises InstallError."""
    _log = log_fn or null_log
    source = Path(source)

    if source.is_dir():
        mod_root = find_mod_root(source)
        if mod_root.parent.resolve() == manager.mods_dir.resolve():
            # Already under Mods/: the folder name is the mod name.
            name = mod_root.name
        else:
            name = _choose_name(mod_root, source.name)
        return _install_tree(manager, mod_root, name, _log)

    extract_dir = Path(tempfile.mkdtemp(prefix="xrdmodman_"))
    try:
        extract_fn(source, extract_dir, _log)
        mod_root = find_mod_root(extract_dir)
        name = _choose_name(mod_root, archive_stem(source))
        return _install_tree(manager, mod_root, name, _log)
    finally:
        shutil.rmtree(extract_dir, ignore_errors=True)


def install_from_path(
    manager: ModManager,
    source: Path,
    log_fn: LogFn | None = None,
    extract_fn: Extractor = extract_archive,
) -> LiveModRecord | None:
    """Install from an archive or folder; failures are logged, not raised."""
    _log = log_fn or null_log
    try:
        return install_source(manager, source, _log, extract_fn)
    except InstallError as exc:
        _log(str(exc), LogType.ERROR)
        return None


def install_from_url(
    manager: ModManager,
    url: str,
    downloader: Downloader = download_mod,
    log_fn: LogFn | None = None,
    extract_fn: Extractor = extract_archive,
) -> LiveModRecord | None:
    """Download url to a temporary folder and install it like install_from_path."""
    _log = log_fn or null_log
    tmp_dir = Path(tempfile.mkdtemp(prefix="xrdmodman"))
    try:
        try:
            archive = downloader(url, tmp_dir)
        except (InstallError, OSError) as exc:
            _log(str(exc), LogType.ERROR)
            return None
        _log(f"Downloaded {archive.name}.")
        return install_from_path(manager, archive, _log, extract_fn)
    finally:
        shutil.rmtree(tmp_dir, ignore_errors=True)
