"""Draco sports-league API: contextual role-based authorization engine."""

__all__ = ["__version__"]

__version__ = "0.1.0"
