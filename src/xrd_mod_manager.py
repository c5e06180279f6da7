"""
Command-line front end for the GUILTY GEAR Xrd mod manager.

  xrd-mod-manager list
  xrd-mod-manager install path/to/Mod.zip | https://example.com/Mod.7z
  xrd-mod-manager create "My Mod" --author me --script MyModScripts
  xrd-mod-manager edit "My Mod" --name "My Mod 2" --version 1.1
  xrd-mod-manager enable|disable|toggle|remove NAME
  xrd-mod-manager move NAME INDEX        (0 = top = highest priority)
  xrd-mod-manager set-game-path "/path/to/GUILTY GEAR Xrd -REVELATOR-"
  xrd-mod-manager deploy | launch

Every run logs to <data dir>/Launch.log, reconciles the mod list against
the Mods/ folder and then runs the command.  Only one instance should
write to a data directory at a time.
"""

from __future__ import annotations

import argparse
import sys
from dataclasses import replace
from pathlib import Path

from Mods.deploy import DeploymentContext, deploy_mods, launch_game
from Mods.descriptor import ModDescriptor
from Mods.errors import ModManagerError
from Mods.install import install_from_path, install_from_url
from Mods.mod_manager import ModManager
from Mods.registry import Registry
from Utils.app_log import LaunchLog, LogType
from Utils.config_paths import get_data_dir, get_log_path, get_mods_dir, get_registry_path
from version import __version__

_GAME_PATH_KEY = "GamePath"
_CONSOLE_KEY = "ConsoleVisible"

_DESCRIPTOR_OPTIONS = ("author", "version", "category", "description", "page")


def _is_url(source: str) -> bool:
    return source.lower().startswith(("http://", "https://"))


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

def _cmd_list(manager: ModManager, args, log: LaunchLog) -> int:
    if not manager.mods:
        print("No mods installed.")
        return 0
    for record in manager:
        mark = "x" if record.enabled else " "
        version = f" {record.descriptor.version}" if record.descriptor.version else ""
        print(f"{record.order:>3} [{mark}] {record.name}{version}")
    return 0


def _cmd_install(manager: ModManager, args, log: LaunchLog) -> int:
    if _is_url(args.source):
        record = install_from_url(manager, args.source, log_fn=log)
    else:
        record = install_from_path(manager, Path(args.source), log_fn=log)
    if record is None:
        return 1
    # Re-read from disk so the list reflects anything the install touched.
    manager.reconcile()
    return 0


def _descriptor_from_args(args, base: ModDescriptor) -> ModDescriptor:
    data = replace(base, scripts=list(base.scripts))
    for attr in _DESCRIPTOR_OPTIONS:
        value = getattr(args, attr, None)
        if value is not None:
            setattr(data, attr, value)
    if args.script is not None:
        data.scripts = list(args.script)
    return data


def _cmd_create(manager: ModManager, args, log: LaunchLog) -> int:
    data = _descriptor_from_args(args, ModDescriptor(name=args.name))
    manager.create_mod(data)
    return 0


def _cmd_edit(manager: ModManager, args, log: LaunchLog) -> int:
    record = manager.mods[manager.index_of(args.name)]
    data = _descriptor_from_args(args, record.descriptor)
    if args.new_name is not None:
        data.name = args.new_name
    manager.edit_mod(args.name, data)
    return 0


def _cmd_remove(manager: ModManager, args, log: LaunchLog) -> int:
    return 0 if manager.remove(args.name) else 1


def _cmd_enable(manager: ModManager, args, log: LaunchLog) -> int:
    manager.set_enabled(args.name, True)
    return 0


def _cmd_disable(manager: ModManager, args, log: LaunchLog) -> int:
    manager.set_enabled(args.name, False)
    return 0


def _cmd_toggle(manager: ModManager, args, log: LaunchLog) -> int:
    state = manager.toggle_enabled(args.name)
    print(f"{args.name}: {'enabled' if state else 'disabled'}")
    return 0


def _cmd_move(manager: ModManager, args, log: LaunchLog) -> int:
    try:
        manager.move(args.name, args.index)
    except IndexError as exc:
        log(str(exc), LogType.ERROR)
        return 1
    return 0


def _cmd_set_game_path(manager: ModManager, args, log: LaunchLog) -> int:
    game_path = Path(args.path).expanduser()
    if not game_path.is_dir():
        log(f"Path {game_path} does not exist!", LogType.ERROR)
        return 1
    manager.registry.set_setting(_GAME_PATH_KEY, str(game_path))
    manager.rewrite_registry()
    log(f"Guilty Gear Xrd Rev 2 located at {game_path}.")
    return 0


def _deployment_context(manager: ModManager, args, log: LaunchLog) -> DeploymentContext | None:
    raw = args.game_path or manager.registry.get_setting(_GAME_PATH_KEY)
    if not raw:
        log("Could not locate Guilty Gear Xrd Rev 2! Use set-game-path first.", LogType.ERROR)
        return None
    game_path = Path(raw).expanduser()
    if not game_path.is_dir():
        log(f"Game path {game_path} does not exist!", LogType.ERROR)
        return None
    return DeploymentContext(game_path=game_path)


def _cmd_deploy(manager: ModManager, args, log: LaunchLog) -> int:
    context = _deployment_context(manager, args, log)
    if context is None:
        return 1
    result = deploy_mods(manager.mods, context, log)
    return 0 if not result.skipped and result.config_merged else 1


def _cmd_launch(manager: ModManager, args, log: LaunchLog) -> int:
    context = _deployment_context(manager, args, log)
    if context is None:
        return 1
    launch_game(manager.mods, context, log)
    return 0


# ---------------------------------------------------------------------------
# Argument parsing
# ---------------------------------------------------------------------------

def _add_descriptor_options(parser: argparse.ArgumentParser) -> None:
    for attr in _DESCRIPTOR_OPTIONS:
        parser.add_argument(f"--{attr}", default=None)
    parser.add_argument("--script", action="append", default=None, metavar="PACKAGE",
                        help="UnrealScript package (repeat for several)")


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="xrd-mod-manager",
        description="Manage, order and deploy GUILTY GEAR Xrd Rev 2 mods.",
    )
    ap.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    ap.add_argument("--home", type=Path, default=None,
                    help="Data directory (default: $XRD_MOD_MANAGER_HOME or ~/.config/XrdModManager)")
    ap.add_argument("--game-path", default=None, help="Game install folder for deploy/launch")
    ap.add_argument("--quiet", "-q", action="store_true", help="Do not echo the log to stderr")
    sub = ap.add_subparsers(dest="command", required=True)

    sub.add_parser("list", help="Show the mod list in priority order").set_defaults(func=_cmd_list)

    p = sub.add_parser("install", help="Install from an archive, a folder or an http(s) URL")
    p.add_argument("source")
    p.set_defaults(func=_cmd_install)

    p = sub.add_parser("create", help="Create an empty mod with a descriptor")
    p.add_argument("name")
    _add_descriptor_options(p)
    p.set_defaults(func=_cmd_create)

    p = sub.add_parser("edit", help="Edit (and optionally rename) a mod")
    p.add_argument("name")
    p.add_argument("--name", dest="new_name", default=None)
    _add_descriptor_options(p)
    p.set_defaults(func=_cmd_edit)

    for cmd, func, text in (
        ("remove", _cmd_remove, "Delete a mod and its folder"),
        ("enable", _cmd_enable, "Enable a mod"),
        ("disable", _cmd_disable, "Disable a mod"),
        ("toggle", _cmd_toggle, "Flip a mod's enabled state"),
    ):
        p = sub.add_parser(cmd, help=text)
        p.add_argument("name")
        p.set_defaults(func=func)

    p = sub.add_parser("move", help="Move a mod to a new position (0 = top)")
    p.add_argument("name")
    p.add_argument("index", type=int)
    p.set_defaults(func=_cmd_move)

    p = sub.add_parser("set-game-path", help="Remember the game install folder")
    p.add_argument("path")
    p.set_defaults(func=_cmd_set_game_path)

    sub.add_parser("deploy", help="Copy enabled mods into the game").set_defaults(func=_cmd_deploy)
    sub.add_parser("launch", help="Deploy, then start the game via Steam").set_defaults(func=_cmd_launch)
    return ap


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    data_dir = get_data_dir(args.home)
    log = LaunchLog(get_log_path(data_dir))
    echo = lambda line: print(line, file=sys.stderr)  # noqa: E731
    if not args.quiet:
        log.add_listener(echo)
    log("Launched GUILTY GEAR Xrd Mod Manager")

    try:
        registry = Registry.load(get_registry_path(data_dir), log)
        if args.quiet is False and registry.get_setting(_CONSOLE_KEY, "True") != "True":
            log.remove_listener(echo)
        manager = ModManager(registry, get_mods_dir(data_dir), log)
        manager.reconcile()
        return args.func(manager, args, log)
    except ModManagerError as exc:
        log(str(exc), LogType.ERROR)
        return 1
    finally:
        log.close()


if __name__ == "__main__":
    sys.exit(main())
