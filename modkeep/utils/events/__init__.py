"""Module: __init__.py

Author: Michael Economou
Date: 2026-02-10

Pure Python event/signal implementation for decoupling observers from state changes.
"""

from modkeep.utils.events.observable import Observable, Signal, SignalInstance

__all__ = ["Observable", "Signal", "SignalInstance"]
