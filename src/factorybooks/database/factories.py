"""Database factory functions for creating database instances."""

import os
from pathlib import Path
from typing import Optional

from factorybooks.database.sqlalchemy_db import DEFAULT_TENANT, SQLAlchemyDatabase

DB_PATH_ENV = "FACTORYBOOKS_DB_PATH"
TENANT_ENV = "FACTORYBOOKS_TENANT"


def create_sqlite_database(
    database_path: Optional[str] = None, tenant_id: Optional[str] = None
) -> SQLAlchemyDatabase:
    """Create a SQLite database instance.

    Args:
        database_path: Path to SQLite database file, or ":memory:". If None,
            checks FACTORYBOOKS_DB_PATH environment variable, then defaults to
            ~/.factorybooks/factorybooks.db
        tenant_id: Tenant whose books to open. If None, checks
            FACTORYBOOKS_TENANT, then defaults to "default"

    Returns:
        SQLAlchemyDatabase instance configured for SQLite
    """
    if database_path is None:
        # Check environment variable
        database_path = os.environ.get(DB_PATH_ENV)

    if database_path is None:
        # Default to ~/.factorybooks/factorybooks.db
        home = Path.home()
        db_dir = home / ".factorybooks"
        db_dir.mkdir(exist_ok=True)
        database_path = str(db_dir / "factorybooks.db")

    if tenant_id is None:
        tenant_id = os.environ.get(TENANT_ENV, DEFAULT_TENANT)

    if database_path == ":memory:":
        database_url = "sqlite://"
    else:
        database_url = f"sqlite:///{database_path}"
    return SQLAlchemyDatabase(database_url, tenant_id=tenant_id)
