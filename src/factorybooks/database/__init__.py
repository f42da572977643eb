"""Database layer for factorybooks."""

from factorybooks.database.base import Database
from factorybooks.database.batch import MAX_BATCH_OPERATIONS, WriteBatch
from factorybooks.database.factories import create_sqlite_database

__all__ = ["Database", "WriteBatch", "MAX_BATCH_OPERATIONS", "create_sqlite_database"]
