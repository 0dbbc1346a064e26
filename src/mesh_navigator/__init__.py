"""Meshtastic Navigator - page through content over mesh radio."""

__version__ = "0.1.0"
