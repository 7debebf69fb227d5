"""Module: __init__.py

Author: Michael Economou
Date: 2026-02-11

Core reconciliation components: update index, version switching and batch
operations.
"""

from modkeep.core.batch_coordinator import BatchOperationCoordinator, BatchResult, ItemBusyState
from modkeep.core.errors import (
    ContentOperationError,
    InventoryError,
    ModkeepError,
    RegistryError,
    VersionSwitchError,
)
from modkeep.core.update_index import UpdateCheckResult, UpdateIndexBuilder
from modkeep.core.version_switch import DropdownState, VersionDropdown, VersionSwitcher

__all__ = [
    "BatchOperationCoordinator",
    "BatchResult",
    "ContentOperationError",
    "DropdownState",
    "InventoryError",
    "ItemBusyState",
    "ModkeepError",
    "RegistryError",
    "UpdateCheckResult",
    "UpdateIndexBuilder",
    "VersionDropdown",
    "VersionSwitchError",
    "VersionSwitcher",
]
