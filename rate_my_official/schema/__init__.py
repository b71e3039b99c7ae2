"""Database schema, connections and migrations."""

from rate_my_official.schema.connection import get_db_connection, init_database, transaction

__all__ = ["get_db_connection", "init_database", "transaction"]
