"""Module: modkeep.config

Author: Michael Economou
Date: 2026-02-10

Configuration package for modkeep.

This package organizes configuration into logical modules:
- app: Application info, logging
- features: Content layout, hashing, registry limits

All settings are re-exported from this module:
    from modkeep.config import DISABLED_SUFFIX, LOG_LEVEL
"""

from modkeep.config.app import *  # noqa: F401, F403
from modkeep.config.features import *  # noqa: F401, F403
