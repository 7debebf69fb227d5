"""Utility packages for modkeep (logging, events)."""
