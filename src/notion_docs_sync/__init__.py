"""Synchronise a tree of markdown documents into Notion pages."""

__version__ = "0.3.0"
