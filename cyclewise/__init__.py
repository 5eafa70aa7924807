"""Cyclewise: cycle-aware energy scoring and calendar planning."""

__version__ = "0.1.0"
