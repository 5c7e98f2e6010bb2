"""Exceptions raised at the package boundaries.

Gameplay operations never raise for unmet preconditions; they return ``False``,
``None`` or an empty list. These types cover lookups and decoding, where
silently substituting a default would hide bad data.
"""

from __future__ import annotations


class ChimeraError(RuntimeError):
    """Base class for all chimera_progression errors."""


class UnknownVariantError(ChimeraError):
    """Raised when a stored enum or union tag does not match any known variant."""

    def __init__(self, type_name: str, raw: object) -> None:
        super().__init__(f"Unknown {type_name} variant: {raw!r}")
        self.type_name = type_name
        self.raw = raw


class IncompatibleBackupVersionError(ChimeraError):
    """Raised when importing a backup written by an unsupported format version."""

    def __init__(self, version: str) -> None:
        super().__init__(f"Backup version {version} is not compatible with this release")
        self.version = version


class UnknownChestError(ChimeraError, KeyError):
    """Raised when a chest id is not in the catalog."""


class UnknownQuestError(ChimeraError, KeyError):
    """Raised when a quest id does not belong to the player."""


class CorruptStateError(ChimeraError):
    """Raised when stored state parses but does not have the expected shape."""
