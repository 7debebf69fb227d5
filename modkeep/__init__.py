"""modkeep - local add-on content inventory and update reconciliation.

Author: Michael Economou
Date: 2026-02-10
"""

from modkeep.config.app import APP_NAME, APP_VERSION

__version__ = APP_VERSION

__all__ = ["APP_NAME", "APP_VERSION", "__version__"]
