"""
archive.py
Extract a mod archive into a directory.

Supported: .zip (zipfile), .7z (py7zr, libarchive fallback),
.rar (rarfile, libarchive fallback), .tar / .tar.gz / .tar.bz2 / .tar.xz.
Every failure is raised as ArchiveExtractFailed.
"""

from __future__ import annotations

import os
import shutil
import tarfile
import zipfile
from pathlib import Path

import py7zr

from Mods.errors import ArchiveExtractFailed
from Utils.app_log import LogFn, LogType, null_log

SUPPORTED_EXTENSIONS = (".zip", ".7z", ".rar", ".tar", ".tar.gz", ".tar.bz2", ".tar.xz")

_TAR_SUFFIXES = (".tar.gz", ".tar.bz2", ".tar.xz", ".tar")


def archive_stem(archive_path: Path) -> str:
    """File name without its archive extension ("Foo.tar.gz" -> "Foo")."""
    name = Path(archive_path).name
    lower = name.lower()
    for ext in sorted(SUPPORTED_EXTENSIONS, key=len, reverse=True):
        if lower.endswith(ext):
            return name[: -len(ext)]
    return Path(name).stem


def is_supported(archive_path: Path) -> bool:
    return str(archive_path).lower().endswith(SUPPORTED_EXTENSIONS)


def _reset_dir(directory: Path) -> None:
    shutil.rmtree(directory, ignore_errors=True)
    directory.mkdir(parents=True, exist_ok=True)


def _extract_with_libarchive(archive_path: Path, dest_dir: Path) -> None:
    import libarchive

    with libarchive.file_reader(str(archive_path)) as arc:
        for entry in arc:
            target = dest_dir / entry.pathname.lstrip("/")
            if not target.resolve().is_relative_to(dest_dir.resolve()):
                raise ArchiveExtractFailed(
                    f"Archive member escapes destination: {entry.pathname}",
                    path=archive_path)
            if entry.isdir:
                target.mkdir(parents=True, exist_ok=True)
                continue
            target.parent.mkdir(parents=True, exist_ok=True)
            with open(target, "wb") as fh:
                for block in entry.get_blocks():
                    fh.write(block)


def _extract_7z(archive_path: Path, dest_dir: Path, _log: LogFn) -> None:
    try:
        with py7zr.SevenZipFile(archive_path, "r") as z:
            z.extractall(dest_dir)
    except Exception as exc:
        _log(f"py7zr failed ({exc}), retrying with libarchive…", LogType.WARN)
        _reset_dir(dest_dir)
        _extract_with_libarchive(archive_path, dest_dir)


def _extract_rar(archive_path: Path, dest_dir: Path, _log: LogFn) -> None:
    try:
        import rarfile
        with rarfile.RarFile(archive_path, "r") as r:
            r.extractall(dest_dir)
    except Exception as exc:
        _log(f"rarfile failed ({exc}), trying libarchive…", LogType.WARN)
        _reset_dir(dest_dir)
        _extract_with_libarchive(archive_path, dest_dir)


def extract_archive(archive_path: Path, dest_dir: Path,
                    log_fn: LogFn | None = None) -> None:
    """
    Extract archive_path into dest_dir (created if needed).

    Raises ArchiveExtractFailed for unsupported formats or any error while
    reading the archive.
    """
    _log = log_fn or null_log
    archive_path = Path(archive_path)
    dest_dir = Path(dest_dir)
    lower = archive_path.name.lower()

    if not archive_path.is_file():
        raise ArchiveExtractFailed(
            f"Could not read archive! {archive_path} does not exist.", path=archive_path)
    if not is_supported(archive_path):
        raise ArchiveExtractFailed(
            f"Invalid file extension! Supported formats: {', '.join(SUPPORTED_EXTENSIONS)}",
            path=archive_path)

    os.makedirs(dest_dir, exist_ok=True)
    try:
        if lower.endswith(".zip"):
            with zipfile.ZipFile(archive_path, "r") as z:
                z.extractall(dest_dir)
        elif lower.endswith(".7z"):
            _extract_7z(archive_path, dest_dir, _log)
        elif lower.endswith(".rar"):
            _extract_rar(archive_path, dest_dir, _log)
        elif lower.endswith(_TAR_SUFFIXES):
            with tarfile.open(archive_path, "r:*") as t:
                t.extractall(dest_dir, filter="data")
    except ArchiveExtractFailed:
        raise
    except Exception as exc:
        raise ArchiveExtractFailed(
            f"Could not extract archive! {exc}", path=archive_path) from exc
