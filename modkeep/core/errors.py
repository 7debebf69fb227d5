"""Module: errors.py

Author: Michael Economou
Date: 2026-02-11

Exception hierarchy raised by collaborators and core components.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from modkeep.models.content_item import Platform


class ModkeepError(Exception):
    """Base class for all modkeep errors."""


class InventoryError(ModkeepError):
    """Scanning the profile's content directory failed."""


class RegistryError(ModkeepError):
    """A registry request failed (network, HTTP status, malformed payload)."""

    def __init__(self, message: str, platform: Platform | None = None) -> None:
        super().__init__(message)
        self.platform = platform
        self.message = message


class ContentOperationError(ModkeepError):
    """A file mutation (toggle, delete, install) failed for one item."""

    def __init__(self, filename: str, operation: str, message: str) -> None:
        super().__init__(f"{operation} failed for {filename}: {message}")
        self.filename = filename
        self.operation = operation
        self.message = message


class VersionSwitchError(ModkeepError):
    """A version switch could not be carried out."""

    def __init__(self, filename: str, message: str) -> None:
        super().__init__(f"Cannot switch version of {filename}: {message}")
        self.filename = filename
        self.message = message
