#!/usr/bin/env python3
"""
Link saved recipes to point-of-sale menu items.

Each recipe without a menu item is matched by name against the unlinked menu
items; when nothing matches well enough a new "Uncategorized" menu item is
created for it. With --create-only, matching is skipped and every recipe
without a menu item gets a new one.
"""

import argparse
import logging

from tqdm.auto import tqdm

from walkin_utils.database import (
    MenuCatalog,
    RecipeRepository,
    create_schema,
    get_connection,
)
from walkin_utils.menu import link_saved_recipe, sync_recipes_to_menu

logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def main():
    """Main function to link recipes to menu items."""
    parser = argparse.ArgumentParser(description="Link saved recipes to menu items")
    parser.add_argument(
        "--db-path",
        type=str,
        default="data/walkin.db",
        help="Path to the database file",
    )
    parser.add_argument(
        "--create-only",
        action="store_true",
        help="Create a menu item for every unlinked recipe without name matching",
    )
    args = parser.parse_args()

    conn = get_connection(args.db_path)
    try:
        create_schema(conn)
        catalog = MenuCatalog(conn)
        recipes = [r for r in RecipeRepository(conn).list_recipes() if r.menu_item_id is None]
        if not recipes:
            print("All recipes are linked to menu items. Exiting.")
            return

        if args.create_only:
            created = sync_recipes_to_menu(recipes, catalog)
            print(f"Created {len(created)} menu items for {len(recipes)} recipes")
            return

        linked = created = failed = 0
        for recipe in tqdm(recipes, desc="Linking recipes"):
            outcome = link_saved_recipe(recipe, catalog)
            if not outcome.linked:
                failed += 1
            elif outcome.result.is_new:
                created += 1
            else:
                linked += 1
    finally:
        conn.close()

    print("Menu sync complete:")
    print(f"  - Linked to existing menu items: {linked}")
    print(f"  - New menu items created: {created}")
    print(f"  - Failed: {failed}")


if __name__ == "__main__":
    main()
