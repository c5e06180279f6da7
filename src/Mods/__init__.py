"""
Mod registry and deployment engine.

Tracks which mods are known, enabled and in what priority order, keeps that
state consistent with the Mods/ folder, and deploys the enabled mods into
the game's CookedPCConsole/Mods tree.
"""

from .descriptor import ModDescriptor, read_descriptor, write_descriptor
from .registry import Registry, RegistryEntry
from .mod_manager import LiveModRecord, ModManager
from .slots import allocate_slot, next_slot_name
from .engine_config import ensure_package, reset_native_packages
from .deploy import DeploymentContext, DeployResult, deploy_mods, launch_game
from .install import install_from_path, install_from_url

__all__ = ["ModDescriptor", "read_descriptor", "write_descriptor",
           "Registry", "RegistryEntry", "LiveModRecord", "ModManager",
           "allocate_slot", "next_slot_name", "ensure_package",
           "reset_native_packages", "DeploymentContext", "DeployResult",
           "deploy_mods", "launch_game", "install_from_path", "install_from_url"]
