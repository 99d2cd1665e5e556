"""
Folio — Document & Folder Management Core
Version: 1.0

Documents grouped into derived folders, renamed, searched, flagged and
hidden, with cascading folder deletion, on top of any store that supports
filtered queries and atomic row updates.
"""

__version__ = "1.0.0"
__all__ = ["engine", "db", "documents"]
