"""
mod_manager.py
The authoritative, ordered mod list and every operation that mutates it.

ModManager.reconcile() rebuilds the list from config.ini ([Mods], in
priority order) and the Mods/ folder, healing drift:
  - registry entry whose folder or mod.ini is gone      -> logged, dropped
  - registry entry whose mod.ini is corrupt / nameless  -> logged, dropped
  - folder with a valid mod.ini but no registry entry   -> appended, enabled
Any of these forces config.ini to be rewritten from the surviving list.

Mutations (install, create, edit, remove, toggle, reorder) update the
in-memory list first and then rewrite config.ini, so list position and
[Mods] order never stay out of step.  A failed registry write is logged and
re-raised as RegistryWriteFailed; the in-memory list stays authoritative.
"""

from __future__ import annotations

import os
import shutil
from dataclasses import dataclass, replace
from pathlib import Path

from Mods.descriptor import (
    ModDescriptor,
    descriptor_path,
    read_descriptor,
    validate_mod_name,
    write_descriptor,
)
from Mods.errors import (
    DescriptorError,
    DescriptorWriteFailed,
    DirectoryMissing,
    InvalidModName,
    ModNotFound,
    RegistryWriteFailed,
    RenameFailed,
)
from Mods.registry import Registry, RegistryEntry
from Utils.app_log import LogFn, LogType, null_log


@dataclass
class LiveModRecord:
    """A mod that currently has a valid descriptor on disk."""
    descriptor: ModDescriptor
    enabled: bool = True
    # Position in ModManager.mods; recomputed on every rebuild/reorder.
    order: int = 0

    @property
    def name(self) -> str:
        return self.descriptor.name

    @property
    def path(self) -> Path:
        return self.descriptor.path

    @property
    def scripts(self) -> list[str]:
        return self.descriptor.scripts


class ModManager:
    """
    Owns the in-memory mod list for one mods root and its registry.

    Parameters
    ----------
    registry : Registry
        Loaded config.ini.
    mods_dir : Path
        Folder containing one sub-folder per mod.
    log_fn : callable(message, level) | None
        Sink for every warning and error.
    """

    def __init__(self, registry: Registry, mods_dir: Path,
                 log_fn: LogFn | None = None):
        self.registry = registry
        self.mods_dir = Path(mods_dir)
        self._log = log_fn or null_log
        self.mods: list[LiveModRecord] = []

    # -- Lookup -------------------------------------------------------------

    def __iter__(self):
        return iter(self.mods)

    def __len__(self) -> int:
        return len(self.mods)

    def get(self, name: str) -> LiveModRecord | None:
        for record in self.mods:
            if record.name == name:
                return record
        return None

    def index_of(self, name: str) -> int:
        for idx, record in enumerate(self.mods):
            if record.name == name:
                return idx
        raise ModNotFound(f"No mod named {name}!", name=name)

    # -- Registry sync ------------------------------------------------------

    def _renumber(self) -> None:
        for idx, record in enumerate(self.mods):
            record.order = idx

    def rewrite_registry(self) -> None:
        """Rewrite [Mods] from the current list order."""
        self._renumber()
        try:
            self.registry.rewrite([(m.name, m.enabled) for m in self.mods])
        except RegistryWriteFailed as exc:
            self._log(str(exc), LogType.ERROR)
            raise

    # -- Reconciliation -----------------------------------------------------

    def _adopt_folder_name(self, data: ModDescriptor, folder: str) -> ModDescriptor:
        # The folder name is the registry key; a differing Name= would make
        # the next reconcile look for a folder that does not exist.
        if data.name != folder:
            self._log(
                f"The mod ini in {data.path} names the mod '{data.name}' but its "
                f"folder is '{folder}'. Using the folder name.", LogType.WARN)
            data = replace(data, name=folder)
        return data

    def _load_entry(self, entry: RegistryEntry) -> LiveModRecord | None:
        try:
            validate_mod_name(entry.name)
        except InvalidModName:
            self._log(f"Registry entry '{entry.name}' is not a valid mod name! Ignoring mod.",
                      LogType.ERROR)
            return None
        mod_dir = self.mods_dir / entry.name
        ini_path = descriptor_path(mod_dir)
        if not ini_path.is_file():
            self._log(f"Path {ini_path} does not exist! Ignoring mod.", LogType.ERROR)
            return None
        try:
            data = read_descriptor(mod_dir)
        except DescriptorError as exc:
            self._log(f"{exc} Ignoring mod.", LogType.ERROR)
            return None
        data = self._adopt_folder_name(data, entry.name)
        return LiveModRecord(data, enabled=entry.enabled)

    def _discover(self, known: set[str]) -> list[LiveModRecord]:
        """Valid mod folders under mods_dir that the registry does not list."""
        if not self.mods_dir.is_dir():
            return []
        found: list[LiveModRecord] = []
        for child in sorted(self.mods_dir.iterdir(), key=lambda p: p.name):
            if not child.is_dir() or child.name in known or child.name.startswith("."):
                continue
            try:
                name = validate_mod_name(child.name)
            except InvalidModName as exc:
                self._log(f"{exc} Ignoring folder {child}.", LogType.WARN)
                continue
            if name != child.name:
                # config.ini strips keys, so "Pad " would come back as "Pad".
                self._log(f"Folder '{child.name}' starts or ends with whitespace! "
                          "Rename it to add it to the mod list.", LogType.WARN)
                continue
            if not descriptor_path(child).is_file():
                self._log(f"Folder {child} has no mod.ini! Install it to add it to the mod list.",
                          LogType.WARN)
                continue
            try:
                data = read_descriptor(child)
            except DescriptorError as exc:
                self._log(f"{exc} Ignoring folder.", LogType.WARN)
                continue
            data = self._adopt_folder_name(data, child.name)
            self._log(f"Found new mod {data.name}.")
            found.append(LiveModRecord(data, enabled=True))
        return found

    def reconcile(self, discover: bool = True) -> list[LiveModRecord]:
        """
        Rebuild self.mods from the registry (in stored order) and the disk.

        Entries without a readable, named mod.ini are logged and dropped.
        With discover=True, unregistered mod folders are appended enabled.
        config.ini is rewritten only if anything drifted; a failed write
        raises RegistryWriteFailed after self.mods has been replaced.
        """
        needs_rewrite = self.registry.dirty
        records: list[LiveModRecord] = []
        known: set[str] = set()
        for entry in self.registry.entries():
            known.add(entry.name)
            record = self._load_entry(entry)
            if record is None:
                needs_rewrite = True
                continue
            record.order = len(records)
            records.append(record)

        if discover:
            for record in self._discover(known):
                record.order = len(records)
                records.append(record)
                needs_rewrite = True

        self.mods = records
        if needs_rewrite:
            self.rewrite_registry()
        return self.mods

    # -- Installation -------------------------------------------------------

    def install_directory(self, name: str) -> LiveModRecord:
        """
        Add the existing folder Mods/<name> to the bottom of the list, enabled.

        A missing or invalid mod.ini is replaced by a fresh one named after
        the folder.  Installing a name already in the list is a no-op that
        returns the existing record.  Raises DirectoryMissing if the folder
        does not exist.
        """
        name = validate_mod_name(name)
        existing = self.get(name)
        if existing is not None:
            self._log(f"{name} is already installed.", LogType.WARN)
            return existing

        mod_dir = self.mods_dir / name
        if not mod_dir.is_dir():
            self._log(f"Path {mod_dir} does not exist! Ignoring mod.", LogType.WARN)
            raise DirectoryMissing(f"Path {mod_dir} does not exist!", path=mod_dir, name=name)

        try:
            data = self._adopt_folder_name(read_descriptor(mod_dir), name)
        except DescriptorError as exc:
            data = ModDescriptor(name=name, path=mod_dir)
            try:
                write_descriptor(data)
            except DescriptorWriteFailed as write_exc:
                self._log(f"Could not create a mod ini for {name}! {write_exc}", LogType.ERROR)
                raise
            self._log(f"{exc} Created one automatically.", LogType.WARN)

        record = LiveModRecord(data, enabled=True, order=len(self.mods))
        self.mods.append(record)
        self._log(f"Installed mod {name}!")
        self.rewrite_registry()
        return record

    def create_mod(self, data: ModDescriptor) -> LiveModRecord:
        """Write a new mod.ini under Mods/<data.name> and append the mod."""
        name = validate_mod_name(data.name)
        if self.get(name) is not None:
            raise InvalidModName("A mod with that name already exists!", name=name)
        mod_dir = self.mods_dir / name
        if mod_dir.exists():
            raise InvalidModName(
                f"Folder {mod_dir} already exists! Install it instead.", path=mod_dir, name=name)

        data = replace(data, name=name, path=mod_dir, scripts=list(data.scripts))
        try:
            write_descriptor(data)
        except DescriptorWriteFailed as exc:
            self._log(f"Could not create mod! {exc}", LogType.ERROR)
            raise
        record = LiveModRecord(data, enabled=True, order=len(self.mods))
        self.mods.append(record)
        self._log(f"Created mod {name}!")
        self.rewrite_registry()
        return record

    # -- Editing ------------------------------------------------------------

    def edit_mod(self, name: str, data: ModDescriptor) -> LiveModRecord:
        """
        Replace the descriptor of mod name with data, keeping its position
        and enabled state.

        A changed name renames the folder first; if that fails RenameFailed
        is raised and nothing is committed.  If writing mod.ini fails the
        folder rename is undone and DescriptorWriteFailed is raised.
        """
        idx = self.index_of(name)
        old = self.mods[idx]
        new_name = validate_mod_name(data.name)
        new_dir = self.mods_dir / new_name
        renamed = new_name != name
        if renamed:
            if self.get(new_name) is not None:
                raise InvalidModName("A mod with that name already exists!", name=new_name)
            if new_dir.exists():
                raise InvalidModName(f"Folder {new_dir} already exists!",
                                     path=new_dir, name=new_name)
            try:
                os.rename(old.path, new_dir)
            except OSError as exc:
                self._log(f"Could not rename directory for edited mod! {exc}", LogType.ERROR)
                raise RenameFailed(f"Could not rename {old.path} to {new_dir}: {exc}",
                                   path=old.path, name=name) from exc

        new_data = replace(data, name=new_name, path=new_dir, scripts=list(data.scripts))
        try:
            write_descriptor(new_data)
        except DescriptorWriteFailed as exc:
            self._log(f"Could not edit mod! {exc}", LogType.ERROR)
            if renamed:
                try:
                    os.rename(new_dir, old.path)
                except OSError as undo_exc:
                    self._log(f"Could not move {new_dir} back to {old.path}! {undo_exc}",
                              LogType.ERROR)
            raise

        self.mods[idx] = LiveModRecord(new_data, enabled=old.enabled, order=idx)
        if renamed:
            self.registry.remove(name)
        self._log("Mod updated!")
        self.rewrite_registry()
        return self.mods[idx]

    def remove(self, name: str) -> bool:
        """
        Delete the mod's folder and drop it from the list.

        Returns False (mod kept, error logged) if the folder cannot be
        deleted.  An already-missing folder is not an error.
        """
        record = self.mods[self.index_of(name)]
        if record.path.exists():
            try:
                shutil.rmtree(record.path)
            except OSError as exc:
                self._log(f"Could not remove mod! {exc}", LogType.ERROR)
                return False
        self.mods = [m for m in self.mods if m.name != name]
        self.registry.remove(name)
        self._log(f"Removed mod {name}.")
        self.rewrite_registry()
        return True

    def set_enabled(self, name: str, enabled: bool) -> LiveModRecord:
        record = self.mods[self.index_of(name)]
        record.enabled = enabled
        self.rewrite_registry()
        return record

    def toggle_enabled(self, name: str) -> bool:
        """Flip the mod's enabled flag; return the new value."""
        record = self.mods[self.index_of(name)]
        return self.set_enabled(name, not record.enabled).enabled

    def reorder(self, from_index: int, to_index: int) -> None:
        """Move the record at from_index so it ends up at to_index."""
        count = len(self.mods)
        if not 0 <= from_index < count or not 0 <= to_index < count:
            raise IndexError(
                f"Cannot move mod {from_index} -> {to_index}: list has {count} mods")
        record = self.mods.pop(from_index)
        self.mods.insert(to_index, record)
        self.rewrite_registry()

    def move(self, name: str, to_index: int) -> None:
        self.reorder(self.index_of(name), to_index)
