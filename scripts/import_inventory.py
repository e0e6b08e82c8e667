#!/usr/bin/env python3
"""
Load an inventory CSV export into the database.

Items are matched by id: existing items are updated in place, new ones are
added. Items missing from the file are left alone unless --prune is given.
"""

import argparse
import logging

from walkin_utils.database import InventoryRepository, create_schema, get_connection
from walkin_utils.ingredients import load_inventory_csv

logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def main():
    """Main function to import inventory items."""
    parser = argparse.ArgumentParser(description="Import inventory items from CSV")
    parser.add_argument("csv_file", type=str, help="Inventory CSV export")
    parser.add_argument(
        "--db-path",
        type=str,
        default="data/walkin.db",
        help="Path to the database file",
    )
    parser.add_argument(
        "--prune",
        action="store_true",
        help="Delete stored items that are not in the CSV file",
    )
    args = parser.parse_args()

    items = load_inventory_csv(args.csv_file)
    if not items:
        print("No inventory items found. Exiting.")
        return

    conn = get_connection(args.db_path)
    try:
        create_schema(conn)
        inventory = InventoryRepository(conn)
        count = inventory.add_items(items)

        pruned = 0
        if args.prune:
            keep = {item.id for item in items}
            for item_id in sorted(inventory.item_ids() - keep):
                inventory.delete_item(item_id)
                pruned += 1
            if pruned:
                logger.info(
                    f"Deleted {pruned} items; recipes using them are flagged when next loaded"
                )
        active = len(inventory.list_items())
    finally:
        conn.close()

    print("Inventory import complete:")
    print(f"  - Items imported: {count}")
    print(f"  - Active items: {active}")
    if args.prune:
        print(f"  - Items deleted: {pruned}")


if __name__ == "__main__":
    main()
