"""Module: __init__.py

Author: Michael Economou
Date: 2026-02-10

Data model for installed content and remote registry versions.
"""

from modkeep.models.content_item import (
    ContentItem,
    ContentType,
    CurseForgeInfo,
    ModrinthInfo,
    Platform,
    PlatformInfo,
    Profile,
)
from modkeep.models.remote_version import RemoteVersion, RemoteVersionFile

__all__ = [
    "ContentItem",
    "ContentType",
    "CurseForgeInfo",
    "ModrinthInfo",
    "Platform",
    "PlatformInfo",
    "Profile",
    "RemoteVersion",
    "RemoteVersionFile",
]
