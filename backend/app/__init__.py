"""Tube Journey Planner backend."""

__version__ = "0.1.0"
