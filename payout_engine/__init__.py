"""Compensation and bonus distribution engine."""

__version__ = "1.0.0"
