"""Synchronize forum templates between a database and a local folder."""

__version__ = "0.1.0"
