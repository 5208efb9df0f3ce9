"""Tabular query and view-configuration engine."""
__version__ = "1.0.0"
