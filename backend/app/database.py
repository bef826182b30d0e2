"""
Database session access for the web app.

Re-exports from the unified core.db module:
    from core.db import db, get_db, Base

Database initialization is handled explicitly in main.py startup,
NOT at import time.
"""

from core.db import Base, db, get_db

__all__ = ["Base", "db", "get_db"]
