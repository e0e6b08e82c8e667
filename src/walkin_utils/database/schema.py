"""Database schema definitions for recipe reconciliation databases."""

import sqlite3

DDL = """
CREATE TABLE IF NOT EXISTS inventory_item(
    id        TEXT PRIMARY KEY,
    name      TEXT NOT NULL,
    unit      TEXT NOT NULL,
    is_active INTEGER NOT NULL DEFAULT 1
);

CREATE TABLE IF NOT EXISTS inventory_alias(
    item_id TEXT NOT NULL,
    alias   TEXT NOT NULL,
    PRIMARY KEY(item_id, alias),
    FOREIGN KEY(item_id) REFERENCES inventory_item(id) ON DELETE CASCADE
);

CREATE TABLE IF NOT EXISTS inventory_unit(
    item_id TEXT NOT NULL,
    unit    TEXT NOT NULL,
    PRIMARY KEY(item_id, unit),
    FOREIGN KEY(item_id) REFERENCES inventory_item(id) ON DELETE CASCADE
);

CREATE TABLE IF NOT EXISTS recipe(
    id                      TEXT PRIMARY KEY,
    name                    TEXT NOT NULL,
    status                  TEXT NOT NULL CHECK(status IN
                                ('ready_to_import', 'needs_review', 'import_failed', 'draft')),
    confidence              TEXT NOT NULL CHECK(confidence IN ('high', 'medium', 'low')),
    source_type             TEXT NOT NULL,
    source_uri              TEXT,
    source_content          TEXT,
    source_file_name        TEXT,
    acknowledged_duplicates TEXT,
    created_at              TEXT NOT NULL,
    last_updated            TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS recipe_ingredient(
    id            TEXT PRIMARY KEY,
    recipe_id     TEXT NOT NULL,
    position      INTEGER NOT NULL,
    name          TEXT NOT NULL,
    quantity      REAL NOT NULL,
    unit          TEXT NOT NULL,
    original_unit TEXT,
    unit_unclear  INTEGER NOT NULL DEFAULT 0,
    inventory_ref TEXT,
    is_new        INTEGER NOT NULL DEFAULT 1,
    confidence    TEXT CHECK(confidence IN ('high', 'medium', 'low')),
    FOREIGN KEY(recipe_id) REFERENCES recipe(id) ON DELETE CASCADE
);

CREATE TABLE IF NOT EXISTS recipe_issue(
    recipe_id         TEXT NOT NULL,
    position          INTEGER NOT NULL,
    kind              TEXT NOT NULL,
    message           TEXT NOT NULL,
    ingredient_name   TEXT,
    line_id           TEXT,
    suggested_fix     TEXT,
    duplicate_indices TEXT,
    PRIMARY KEY(recipe_id, position),
    FOREIGN KEY(recipe_id) REFERENCES recipe(id) ON DELETE CASCADE
);

CREATE TABLE IF NOT EXISTS menu_item(
    id        TEXT PRIMARY KEY,
    name      TEXT NOT NULL,
    category  TEXT,
    pos_id    TEXT,
    recipe_id TEXT,
    FOREIGN KEY(recipe_id) REFERENCES recipe(id) ON DELETE SET NULL
);

CREATE INDEX IF NOT EXISTS idx_recipe_status ON recipe(status);
CREATE INDEX IF NOT EXISTS idx_recipe_ingredient_recipe ON recipe_ingredient(recipe_id);
CREATE INDEX IF NOT EXISTS idx_menu_item_recipe ON menu_item(recipe_id);
"""


def create_schema(conn: sqlite3.Connection) -> None:
    """Create the database schema.

    Args:
        conn: SQLite database connection
    """
    conn.executescript(DDL)
    conn.execute("PRAGMA foreign_keys = ON")
