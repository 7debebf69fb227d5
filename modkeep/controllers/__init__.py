"""Module: __init__.py

Author: Michael Economou
Date: 2026-02-14

Controllers: the inventory state holder. The Qt bridge lives in
modkeep.controllers.state_coordinator and is imported only by PyQt5 front ends.
"""

from modkeep.controllers.inventory_controller import ContentInventoryController, Notification

__all__ = ["ContentInventoryController", "Notification"]
