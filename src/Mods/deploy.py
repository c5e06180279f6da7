"""
deploy.py
Copy enabled mods into the game's asset tree and register their scripts.

Deploy workflow (deploy_mods):
  1. Delete <game>/REDGame/CookedPCConsole/Mods entirely (absent is fine).
  2. Walk the enabled mods from the BOTTOM of the list to the top.  Each one
     gets the next free slot ("a", "b", ...) and its folder is copied to
     Mods/<slot>/<mod name>/.
  3. Reset +NativePackages in DefaultEngine.ini to the bootstrap entry, then
     add each deployed mod's script packages, in the same bottom-to-top order.

The loader applies folders in ascending name order and the last one wins,
so the top of the list (highest priority) lands in the latest slot and
overrides everything below it.  That loader behaviour is inferred from how
the game treats CookedPCConsole/Mods and has not been verified.

A mod that cannot get a slot or cannot be copied is logged and skipped; the
rest still deploy.  An engine config problem aborts only the script merge.
"""

from __future__ import annotations

import shutil
import webbrowser
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable

from Mods.engine_config import BOOTSTRAP_PACKAGE, ensure_packages, reset_native_packages
from Mods.errors import CopyFailed, EngineConfigError, SlotsExhausted
from Mods.mod_manager import LiveModRecord
from Mods.slots import FIRST_SLOT, allocate_slot
from Utils.app_log import LogFn, LogType, null_log
from Utils.config_paths import STEAM_APP_ID, get_engine_ini_path, get_game_mods_dir


@dataclass
class DeploymentContext:
    """Where and how one deploy writes into a game install."""
    game_path: Path
    first_slot: str = FIRST_SLOT
    bootstrap_package: str = BOOTSTRAP_PACKAGE

    @property
    def deploy_dir(self) -> Path:
        return get_game_mods_dir(self.game_path)

    @property
    def engine_ini(self) -> Path:
        return get_engine_ini_path(self.game_path)


@dataclass
class DeployResult:
    # (mod name, slot) in allocation order, i.e. lowest priority first
    deployed: list[tuple[str, str]] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    packages_added: list[str] = field(default_factory=list)
    config_merged: bool = False

    def slot_of(self, name: str) -> str | None:
        for mod_name, slot in self.deployed:
            if mod_name == name:
                return slot
        return None


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def clear_deploy_dir(deploy_dir: Path, log_fn: LogFn | None = None) -> None:
    """Delete deploy_dir and everything in it.  Missing is not an error."""
    _log = log_fn or null_log
    if not deploy_dir.exists():
        return
    try:
        shutil.rmtree(deploy_dir)
    except OSError as exc:
        _log(f"Could not clear {deploy_dir}! {exc}", LogType.WARN)


def copy_mod(source: Path, destination: Path) -> None:
    """Recursively copy source into destination (created with parents)."""
    try:
        shutil.copytree(source, destination)
    except OSError as exc:
        raise CopyFailed(f"{exc}", path=source) from exc


def merge_script_packages(
    ini_path: Path,
    records: list[LiveModRecord],
    bootstrap: str = BOOTSTRAP_PACKAGE,
    log_fn: LogFn | None = None,
) -> tuple[list[str], bool]:
    """Reset +NativePackages, then ensure each record's scripts in order.

    Returns (packages added, True if the merge completed).
    """
    _log = log_fn or null_log
    try:
        reset_native_packages(ini_path, bootstrap)
    except EngineConfigError as exc:
        _log(str(exc), LogType.ERROR)
        return [], False

    added: list[str] = []
    for record in records:
        if not record.scripts:
            continue
        try:
            new = ensure_packages(ini_path, record.scripts)
        except EngineConfigError as exc:
            _log(str(exc), LogType.ERROR)
            return added, False
        for package in new:
            _log(f"Added script package {package}!")
        added.extend(new)
    return added, True


# ---------------------------------------------------------------------------
# Deploy
# ---------------------------------------------------------------------------

def deploy_mods(
    mods: list[LiveModRecord],
    context: DeploymentContext,
    log_fn: LogFn | None = None,
    progress_fn: Callable[[int, int], None] | None = None,
) -> DeployResult:
    """
    Deploy the enabled entries of mods (priority order, index 0 = highest).

    progress_fn: optional callable(done, total) called after each mod.

    Raises CopyFailed only if the deployment folder itself cannot be created.
    """
    _log = log_fn or null_log
    result = DeployResult()
    deploy_dir = context.deploy_dir

    clear_deploy_dir(deploy_dir, _log)
    try:
        deploy_dir.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise CopyFailed(f"Could not create {deploy_dir}! {exc}", path=deploy_dir) from exc

    queue = [m for m in reversed(mods) if m.enabled]
    copied: list[LiveModRecord] = []
    for done, record in enumerate(queue, 1):
        try:
            slot = allocate_slot(deploy_dir, context.first_slot)
        except SlotsExhausted:
            _log(f"Could not copy mod {record.name}! Too many mods installed.", LogType.ERROR)
            result.skipped.append(record.name)
            continue
        try:
            copy_mod(record.path, deploy_dir / slot / record.name)
        except CopyFailed as exc:
            _log(f"Could not copy mod {record.name}! {exc}", LogType.ERROR)
            shutil.rmtree(deploy_dir / slot, ignore_errors=True)
            result.skipped.append(record.name)
            continue
        result.deployed.append((record.name, slot))
        copied.append(record)
        if progress_fn:
            progress_fn(done, len(queue))

    result.packages_added, result.config_merged = merge_script_packages(
        context.engine_ini, copied, context.bootstrap_package, _log)
    _log("Mods copied to game directory!")
    return result


def launch_game(
    mods: list[LiveModRecord],
    context: DeploymentContext,
    log_fn: LogFn | None = None,
    open_fn: Callable[[str], bool] = webbrowser.open,
) -> DeployResult:
    """Deploy, then ask Steam to start the game."""
    _log = log_fn or null_log
    result = deploy_mods(mods, context, _log)
    url = f"steam://run/{STEAM_APP_ID}"
    try:
        opened = open_fn(url)
    except (webbrowser.Error, OSError) as exc:
        _log(f"Could not launch Guilty Gear Xrd Rev 2! {exc}", LogType.ERROR)
        return result
    if opened:
        _log("Launching Guilty Gear Xrd Rev 2...")
    else:
        _log("Could not launch Guilty Gear Xrd Rev 2! No handler for steam:// links.",
             LogType.ERROR)
    return result
