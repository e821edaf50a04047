"""Changelog and documentation sync from GitHub into Notion."""

__version__ = "0.1.0"
