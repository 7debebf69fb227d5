"""Module: __init__.py

Author: Michael Economou
Date: 2026-02-11

Collaborator protocols and the reference implementations shipped with modkeep.
"""

from modkeep.services.interfaces import (
    ContentStoreProtocol,
    FolderOpenerProtocol,
    HashServiceProtocol,
    InventoryScannerProtocol,
    MetadataServiceProtocol,
    PlatformRegistryClientProtocol,
    RegistryClientProtocol,
)
from modkeep.services.local_content_store import LocalContentStore
from modkeep.services.modrinth_client import ModrinthClient
from modkeep.services.registry_router import RegistryRouter

__all__ = [
    "ContentStoreProtocol",
    "FolderOpenerProtocol",
    "HashServiceProtocol",
    "InventoryScannerProtocol",
    "LocalContentStore",
    "MetadataServiceProtocol",
    "ModrinthClient",
    "PlatformRegistryClientProtocol",
    "RegistryClientProtocol",
    "RegistryRouter",
]
