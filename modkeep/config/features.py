"""Module: modkeep.config.features

Author: Michael Economou
Date: 2026-02-10

Content layout, hashing and registry limits.
"""

# =====================================
# CONTENT LAYOUT
# =====================================

# Marker appended to a filename to disable the content without deleting it
DISABLED_SUFFIX = ".disabled"

# Folder (relative to the profile content root) per content type value
CONTENT_DIRECTORIES = {
    "Mod": "mods",
    "ResourcePack": "resourcepacks",
    "ShaderPack": "shaderpacks",
    "DataPack": "datapacks",
    "NoRiskMod": "mods",
}

# Extensions picked up by the scanner (directories are always accepted
# for resource/shader/data packs)
CONTENT_EXTENSIONS = {
    "Mod": {".jar"},
    "ResourcePack": {".zip"},
    "ShaderPack": {".zip"},
    "DataPack": {".zip"},
    "NoRiskMod": {".jar"},
}

# =====================================
# HASH CALCULATION
# =====================================

HASH_CHUNK_SIZE = 64 * 1024  # 64KB chunks
HASH_ALGORITHM = "sha1"

# =====================================
# REGISTRY ACCESS
# =====================================

MODRINTH_API_URL = "https://api.modrinth.com/v2"
USER_AGENT = "modkeep/0.4.0 (content inventory)"
REGISTRY_TIMEOUT_SECONDS = 20.0
REGISTRY_MAX_CONCURRENT_REQUESTS = 8

# Download chunk size used when installing remote files
DOWNLOAD_CHUNK_SIZE = 256 * 1024
