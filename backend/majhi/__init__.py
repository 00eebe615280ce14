"""Majhi Costing - restaurant back-office recipe costing."""

__version__ = "1.0.0"
