"""PostgreSQL connection pool and schema migrations."""

from warden.db.pool import PostgresPool

__all__ = ["PostgresPool"]
