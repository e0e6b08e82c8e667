"""Database utility functions for recipe reconciliation databases."""

import contextlib
import json
import logging
import pathlib
import sqlite3
from typing import Generator, Union

import pandas as pd

logger = logging.getLogger(__name__)


MEMORY_DB = ":memory:"


def get_connection(db_path: Union[str, pathlib.Path]) -> sqlite3.Connection:
    """Open a walk-in database, creating its directory if needed.

    Cascading deletes (recipe rows to ingredient and issue rows, menu links)
    rely on SQLite foreign key enforcement, which is switched on here for
    every connection.

    Args:
        db_path: Database file, or ":memory:"

    Returns:
        Open SQLite connection
    """
    if str(db_path) != MEMORY_DB:
        pathlib.Path(db_path).parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(db_path)
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


@contextlib.contextmanager
def transaction(conn: sqlite3.Connection) -> Generator[sqlite3.Cursor, None, None]:
    """Run a block of writes as one unit.

    Everything executed on the yielded cursor commits together when the block
    exits normally. If the block raises, the writes are rolled back and the
    exception propagates unchanged.

    Example:
        with transaction(conn) as cur:
            cur.execute("DELETE FROM recipe WHERE id = ?", ("recipe_1",))
    """
    cur = conn.cursor()
    try:
        yield cur
    except Exception:
        conn.rollback()
        raise
    else:
        conn.commit()
    finally:
        cur.close()


def get_recipe_issue_data(db_path: Union[str, pathlib.Path]) -> pd.DataFrame:
    """Get every recipe's open issues as a table.

    Args:
        db_path: Path to the SQLite database

    Returns:
        DataFrame with columns: recipe_id, recipe_name, status, confidence,
        kind, message, ingredient_name, suggested_fix, duplicate_indices.
        Recipes without issues are not listed.
    """
    conn = get_connection(db_path)

    query = """
    SELECT
        r.id as recipe_id,
        r.name as recipe_name,
        r.status,
        r.confidence,
        ri.kind,
        ri.message,
        ri.ingredient_name,
        ri.suggested_fix,
        ri.duplicate_indices
    FROM recipe r
    JOIN recipe_issue ri ON r.id = ri.recipe_id
    ORDER BY r.name, ri.position
    """

    try:
        df = pd.read_sql_query(query, conn)
    finally:
        conn.close()

    df["duplicate_indices"] = df["duplicate_indices"].apply(
        lambda value: json.loads(value) if isinstance(value, str) else None
    )
    logger.info(
        f"Found {len(df)} issues across {df['recipe_id'].nunique()} recipes"
    )
    return df
