"""Substrate account balance change notifier."""

__version__ = "0.1.0"
