"""
errors.py
Exception hierarchy for the mod registry and deployment engine.

Per-item failures (one bad descriptor, one failed copy) are caught by the
batch operation, logged and skipped.  Only RegistryWriteFailed and
RenameFailed are meant to reach the caller of a mutation.
"""

from __future__ import annotations

from pathlib import Path


class ModManagerError(Exception):
    """Base class for every error raised by the Mods package."""
    def __init__(self, message: str, path: Path | None = None, name: str = ""):
        super().__init__(message)
        self.path = path
        self.name = name


# ---------------------------------------------------------------------------
# Descriptor (mod.ini)
# ---------------------------------------------------------------------------

class DescriptorError(ModManagerError):
    """mod.ini could not be turned into a ModDescriptor."""


class DescriptorMissingSection(DescriptorError):
    """mod.ini has no [Description] section."""


class DescriptorMissingName(DescriptorError):
    """[Description] has no Name, or it is empty."""


class DescriptorParseError(DescriptorError):
    """mod.ini is missing, unreadable or not valid INI."""


class DescriptorWriteFailed(DescriptorError):
    """mod.ini (or the mod directory) could not be written."""


# ---------------------------------------------------------------------------
# Registry / mod list
# ---------------------------------------------------------------------------

class DirectoryMissing(ModManagerError):
    """A mod directory expected under the mods root does not exist."""


class RegistryWriteFailed(ModManagerError):
    """config.ini could not be written; the on-disk registry may be stale."""


class RenameFailed(ModManagerError):
    """A mod directory could not be renamed; the edit was not committed."""


class ModNotFound(ModManagerError):
    """No mod with the given name is in the mod list."""


class InvalidModName(ModManagerError):
    """Name is empty, already taken, or cannot be used as a folder/INI key."""


# ---------------------------------------------------------------------------
# Deployment
# ---------------------------------------------------------------------------

class SlotsExhausted(ModManagerError):
    """No free slot folder name is left under the deployment root."""


class CopyFailed(ModManagerError):
    """Copying a mod into its slot failed."""


class EngineConfigError(ModManagerError):
    """DefaultEngine.ini could not be merged."""


class ConfigReadFailed(EngineConfigError):
    """DefaultEngine.ini is missing, unreadable or malformed."""


class ConfigSectionMissing(EngineConfigError):
    """DefaultEngine.ini has no [Engine.ScriptPackages] section."""


class ConfigWriteFailed(EngineConfigError):
    """DefaultEngine.ini could not be written back."""


# ---------------------------------------------------------------------------
# Installation
# ---------------------------------------------------------------------------

class InstallError(ModManagerError):
    """A mod could not be installed."""


class ArchiveExtractFailed(InstallError):
    """The archive format is unsupported or extraction failed."""


class DownloadFailed(InstallError):
    """The mod archive could not be downloaded."""
