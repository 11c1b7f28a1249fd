"""
Database connection and query utilities.

Provides a simple interface for executing queries with psycopg,
returning results as dictionaries, plus the relational read interface
(find_one_where / find_all_where) that the repositories are built on.

For testing, use set_connection_override() to inject a connection
that will be used instead of creating new ones. This enables
transaction rollback between tests.
"""

from collections.abc import Mapping, Sequence
from contextlib import contextmanager
from typing import Any

import psycopg
from psycopg import sql
from psycopg.rows import dict_row

from crispr_studio.config import config

Query = str | sql.Composable

# =============================================================================
# Connection Override (for testing)
# =============================================================================

_connection_override: psycopg.Connection | None = None


def set_connection_override(conn: psycopg.Connection) -> None:
    """
    Set a connection to use instead of creating new ones.

    Used by test fixtures to ensure all database operations run
    within a single transaction that can be rolled back.

    Args:
        conn: The connection to use for all subsequent operations
    """
    global _connection_override
    _connection_override = conn


def clear_connection_override() -> None:
    """Clear the connection override, restoring normal behavior."""
    global _connection_override
    _connection_override = None


# =============================================================================
# Connection Management
# =============================================================================


@contextmanager
def get_connection():
    """
    Context manager for database connections.

    In normal operation:
        - Opens a new connection
        - Commits on successful exit
        - Rolls back on exception
        - Closes connection when done

    With override set (testing):
        - Returns the override connection
        - Does NOT commit, rollback, or close
        - Caller (test fixture) manages the transaction

    Every call opens its own connection, so loads dispatched from
    different worker threads never share a cursor.

    Usage:
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute("SELECT ...")
    """
    if _connection_override is not None:
        yield _connection_override
        return

    conn = psycopg.connect(config.database_url)
    try:
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


# =============================================================================
# Query Helpers
# =============================================================================


def fetch_one(query: Query, params: tuple = None) -> dict[str, Any] | None:
    """
    Execute a query and return a single row as dict.

    Args:
        query: SQL query with %s placeholders
        params: Tuple of parameter values

    Returns:
        Dict of column names to values, or None if no row found
    """
    with get_connection() as conn:
        with conn.cursor(row_factory=dict_row) as cur:
            cur.execute(query, params)
            return cur.fetchone()


def fetch_all(query: Query, params: tuple = None) -> list[dict[str, Any]]:
    """
    Execute a query and return all rows as list of dicts.

    Args:
        query: SQL query with %s placeholders
        params: Tuple of parameter values

    Returns:
        List of dicts, empty list if no rows found
    """
    with get_connection() as conn:
        with conn.cursor(row_factory=dict_row) as cur:
            cur.execute(query, params)
            return cur.fetchall()


# =============================================================================
# Relational Read Interface
# =============================================================================

_DIRECTIONS = {
    "asc": sql.SQL("ASC NULLS LAST"),
    "desc": sql.SQL("DESC NULLS LAST"),
}


def _where_clause(where: Mapping[str, Any]) -> tuple[sql.Composable, tuple]:
    """Render an equality predicate (AND-ed) and its bound parameters."""
    if not where:
        return sql.SQL(""), ()
    conditions = [sql.SQL("{} = %s").format(sql.Identifier(column)) for column in where]
    return sql.SQL(" WHERE ") + sql.SQL(" AND ").join(conditions), tuple(where.values())


def _order_clause(order_by: Sequence[tuple[str, str]]) -> sql.Composable:
    terms = []
    for column, direction in order_by:
        keyword = _DIRECTIONS.get(direction.lower())
        if keyword is None:
            raise ValueError(f"Unknown sort direction: {direction}. Valid: {list(_DIRECTIONS)}")
        terms.append(sql.SQL("{} {}").format(sql.Identifier(column), keyword))
    if not terms:
        return sql.SQL("")
    return sql.SQL(" ORDER BY ") + sql.SQL(", ").join(terms)


def check_limit(limit: int | None) -> None:
    """Raise ValueError unless limit is None or a positive integer."""
    if limit is None:
        return
    if isinstance(limit, bool) or not isinstance(limit, int) or limit < 1:
        raise ValueError(f"limit must be a positive integer, got {limit!r}")


def find_one_where(table: str, where: Mapping[str, Any]) -> dict[str, Any] | None:
    """
    Return the first row of `table` matching every column = value pair
    in `where`, or None when nothing matches.
    """
    where_sql, params = _where_clause(where)
    query = (
        sql.SQL("SELECT * FROM {}").format(sql.Identifier(table))
        + where_sql
        + sql.SQL(" LIMIT 1")
    )
    return fetch_one(query, params)


def find_all_where(
    table: str,
    where: Mapping[str, Any],
    order_by: Sequence[tuple[str, str]],
    limit: int | None = None,
) -> list[dict[str, Any]]:
    """
    Return all rows of `table` matching `where`, ordered by `order_by`.

    Args:
        table: Table name
        where: Mapping of column to value, combined with AND
        order_by: Sequence of (column, "asc" | "desc") pairs; NULLs sort last
        limit: Optional positive row cap

    Returns:
        List of dicts, empty list if no rows match
    """
    check_limit(limit)
    where_sql, params = _where_clause(where)
    query = (
        sql.SQL("SELECT * FROM {}").format(sql.Identifier(table))
        + where_sql
        + _order_clause(order_by)
    )
    if limit is not None:
        query += sql.SQL(" LIMIT %s")
        params += (limit,)
    return fetch_all(query, params)
