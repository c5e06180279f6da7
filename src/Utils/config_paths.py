"""
config_paths.py
Central helpers for resolving the user-writable data directory.

Follows the XDG Base Directory Specification:
  Data lives in $XDG_CONFIG_HOME/XrdModManager  (default: ~/.config/XrdModManager)

$XRD_MOD_MANAGER_HOME overrides the location entirely (portable installs,
tests).  Layout inside the data directory:

  Mods/        one sub-folder per installed mod, each holding a mod.ini
  config.ini   mod registry ([Mods]) and general settings ([General])
  Launch.log   append-only application log
"""

import os
from pathlib import Path

APP_NAME = "XrdModManager"

MODS_DIR_NAME = "Mods"
REGISTRY_FILE_NAME = "config.ini"
LOG_FILE_NAME = "Launch.log"


def get_data_dir(override: Path | None = None) -> Path:
    """Return the app data directory, creating it if it doesn't exist.

    Precedence: override argument, $XRD_MOD_MANAGER_HOME, then
    $XDG_CONFIG_HOME/XrdModManager, then ~/.config/XrdModManager.
    """
    if override is not None:
        data_dir = Path(override)
    else:
        env = os.environ.get("XRD_MOD_MANAGER_HOME")
        if env:
            data_dir = Path(env)
        else:
            xdg = os.environ.get("XDG_CONFIG_HOME")
            base = Path(xdg) if xdg else Path.home() / ".config"
            data_dir = base / APP_NAME
    data_dir.mkdir(parents=True, exist_ok=True)
    return data_dir


def get_mods_dir(data_dir: Path) -> Path:
    """Return the mods root, creating it if needed.

    Result: <data_dir>/Mods/
    """
    d = data_dir / MODS_DIR_NAME
    d.mkdir(parents=True, exist_ok=True)
    return d


def get_registry_path(data_dir: Path) -> Path:
    """Result: <data_dir>/config.ini"""
    return data_dir / REGISTRY_FILE_NAME


def get_log_path(data_dir: Path) -> Path:
    """Result: <data_dir>/Launch.log"""
    return data_dir / LOG_FILE_NAME


# ---------------------------------------------------------------------------
# Game install layout (GUILTY GEAR Xrd Rev 2)
# ---------------------------------------------------------------------------

STEAM_APP_ID = 520440


def get_game_mods_dir(game_path: Path) -> Path:
    """Deployment target the game loader enumerates.

    Result: <game_path>/REDGame/CookedPCConsole/Mods
    """
    return Path(game_path) / "REDGame" / "CookedPCConsole" / "Mods"


def get_engine_ini_path(game_path: Path) -> Path:
    """Result: <game_path>/REDGame/Config/DefaultEngine.ini"""
    return Path(game_path) / "REDGame" / "Config" / "DefaultEngine.ini"
