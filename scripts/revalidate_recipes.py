#!/usr/bin/env python3
"""
Re-check every saved recipe against the current inventory.

Loading a recipe clears references to deleted inventory items and recomputes
its issues and status; this script writes the refreshed recipes back so the
stored status and issue rows are current. Optionally exports all open issues
to CSV for review.
"""

import argparse
import logging
import sqlite3

from tqdm.auto import tqdm

from walkin_utils.database import (
    InventoryRepository,
    RecipeRepository,
    create_schema,
    get_connection,
    get_recipe_issue_data,
)
from walkin_utils.recipes import RecipeValidationError

logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def revalidate_all(conn: sqlite3.Connection) -> dict:
    """Reload and re-save every recipe.

    Returns:
        Counts of recipes per resulting status, plus "failed" for recipes that
        could not be saved back.
    """
    repository = RecipeRepository(conn)
    known_item_ids = InventoryRepository(conn).item_ids()
    recipe_ids = [row[0] for row in conn.execute("SELECT id FROM recipe ORDER BY name")]

    counts = {}
    for recipe_id in tqdm(recipe_ids, desc="Revalidating recipes"):
        recipe = repository.load_recipe(recipe_id, known_item_ids)
        try:
            repository.save_recipe(recipe)
        except RecipeValidationError as e:
            logger.error(f"⚠ Recipe '{recipe.name}' ({recipe_id}) is invalid: {e}")
            counts["failed"] = counts.get("failed", 0) + 1
            continue
        counts[recipe.status] = counts.get(recipe.status, 0) + 1
    return counts


def main():
    """Main function to revalidate stored recipes."""
    parser = argparse.ArgumentParser(
        description="Recompute issues and status of all saved recipes"
    )
    parser.add_argument(
        "--db-path",
        type=str,
        default="data/walkin.db",
        help="Path to the database file",
    )
    parser.add_argument(
        "--report",
        type=str,
        default=None,
        help="Write open issues to this CSV file",
    )
    args = parser.parse_args()

    conn = get_connection(args.db_path)
    try:
        create_schema(conn)
        counts = revalidate_all(conn)
    finally:
        conn.close()

    print("Revalidation complete:")
    for status, count in sorted(counts.items()):
        print(f"  - {status}: {count}")

    if args.report:
        issues_df = get_recipe_issue_data(args.db_path)
        issues_df.to_csv(args.report, index=False)
        print(f"Wrote {len(issues_df)} issues to {args.report}")


if __name__ == "__main__":
    main()
