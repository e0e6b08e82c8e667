"""SQLite-backed storage for inventory, recipes and menu items."""

import datetime
import json
import logging
import sqlite3
from typing import Collection, Iterable, List, Optional, Set

from walkin_utils.ingredients.models import IngredientLine, InventoryItem
from walkin_utils.menu.models import MenuItem, NewMenuItemDraft
from walkin_utils.recipes.models import (
    TERMINAL_STATUSES,
    Issue,
    Recipe,
    RecipeSource,
)
from walkin_utils.recipes.scoring import refresh_after_load
from walkin_utils.recipes.validation import validate_recipe

from .utils import transaction

logger = logging.getLogger(__name__)


def _dump_acknowledged(groups: Collection[frozenset]) -> Optional[str]:
    if not groups:
        return None
    return json.dumps(sorted(sorted(group) for group in groups))


def _load_acknowledged(value: Optional[str]) -> Set[frozenset]:
    if not value:
        return set()
    return {frozenset(group) for group in json.loads(value)}


class InventoryRepository:
    """Read and maintain the merchant's inventory master list."""

    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn

    def _related(self, table: str, column: str) -> dict:
        related = {}
        for item_id, value in self.conn.execute(
            f"SELECT item_id, {column} FROM {table} ORDER BY rowid"
        ):
            related.setdefault(item_id, []).append(value)
        return related

    def list_items(self, active_only: bool = True) -> List[InventoryItem]:
        query = "SELECT id, name, unit, is_active FROM inventory_item"
        if active_only:
            query += " WHERE is_active = 1"
        query += " ORDER BY name ASC"

        aliases = self._related("inventory_alias", "alias")
        units = self._related("inventory_unit", "unit")
        return [
            InventoryItem(
                id=item_id,
                name=name,
                unit=unit,
                aliases=tuple(aliases.get(item_id, ())),
                supported_units=tuple(units.get(item_id, ())),
                is_active=bool(is_active),
            )
            for item_id, name, unit, is_active in self.conn.execute(query)
        ]

    def item_ids(self) -> Set[str]:
        """Ids of every stored item, active or not."""
        return {row[0] for row in self.conn.execute("SELECT id FROM inventory_item")}

    def _write_item(self, cur: sqlite3.Cursor, item: InventoryItem) -> None:
        cur.execute(
            """
            INSERT INTO inventory_item (id, name, unit, is_active) VALUES (?, ?, ?, ?)
            ON CONFLICT(id) DO UPDATE SET
                name = excluded.name,
                unit = excluded.unit,
                is_active = excluded.is_active
            """,
            (item.id, item.name, item.unit, int(item.is_active)),
        )
        cur.execute("DELETE FROM inventory_alias WHERE item_id = ?", (item.id,))
        cur.execute("DELETE FROM inventory_unit WHERE item_id = ?", (item.id,))
        cur.executemany(
            "INSERT OR IGNORE INTO inventory_alias (item_id, alias) VALUES (?, ?)",
            [(item.id, alias) for alias in item.aliases],
        )
        cur.executemany(
            "INSERT OR IGNORE INTO inventory_unit (item_id, unit) VALUES (?, ?)",
            [(item.id, unit) for unit in item.supported_units],
        )

    def add_item(self, item: InventoryItem) -> None:
        """Insert an item, or replace the stored one with the same id."""
        with transaction(self.conn) as cur:
            self._write_item(cur, item)

    def add_items(self, items: Iterable[InventoryItem]) -> int:
        count = 0
        with transaction(self.conn) as cur:
            for item in items:
                self._write_item(cur, item)
                count += 1
        return count

    def delete_item(self, item_id: str) -> bool:
        """Delete an item. Recipes referencing it are repaired when next loaded."""
        with transaction(self.conn) as cur:
            cur.execute("DELETE FROM inventory_item WHERE id = ?", (item_id,))
            return cur.rowcount > 0


class MenuCatalog:
    """Point-of-sale menu items and their recipe links."""

    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn

    def _query(self, where: str = "", params: tuple = ()) -> List[MenuItem]:
        rows = self.conn.execute(
            f"SELECT id, name, category, pos_id, recipe_id FROM menu_item {where} "
            "ORDER BY rowid",
            params,
        )
        return [MenuItem(*row) for row in rows]

    def list_menu_items(self) -> List[MenuItem]:
        return self._query()

    def list_unlinked_menu_items(self) -> List[MenuItem]:
        return self._query("WHERE recipe_id IS NULL")

    def add_menu_item(self, item: MenuItem) -> None:
        with transaction(self.conn) as cur:
            cur.execute(
                "INSERT INTO menu_item (id, name, category, pos_id, recipe_id) "
                "VALUES (?, ?, ?, ?, ?)",
                (item.id, item.name, item.category, item.pos_id, item.recipe_id),
            )

    def create_menu_item(self, draft: NewMenuItemDraft) -> None:
        self.add_menu_item(
            MenuItem(
                id=draft.id,
                name=draft.name,
                category=draft.category,
                pos_id=draft.pos_id,
                recipe_id=draft.recipe_id,
            )
        )

    def link_menu_item(self, menu_item_id: str, recipe_id: str) -> None:
        """Point a menu item at a recipe.

        Raises:
            LookupError: If the menu item does not exist.
        """
        with transaction(self.conn) as cur:
            cur.execute(
                "UPDATE menu_item SET recipe_id = ? WHERE id = ?",
                (recipe_id, menu_item_id),
            )
            if cur.rowcount == 0:
                raise LookupError(f"No menu item with id {menu_item_id}")


class RecipeRepository:
    """Transactional storage of recipes with their ingredient lines and issues."""

    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn

    def save_recipe(self, recipe: Recipe) -> None:
        """Validate and store a recipe, replacing any stored version.

        The recipe row, its ingredient rows and its issue rows are written in a
        single transaction.

        Raises:
            RecipeValidationError: If the recipe is incomplete; nothing is written.
            sqlite3.Error: If the write fails; the transaction is rolled back.
        """
        validate_recipe(recipe)

        with transaction(self.conn) as cur:
            cur.execute(
                """
                INSERT INTO recipe (
                    id, name, status, confidence, source_type, source_uri,
                    source_content, source_file_name, acknowledged_duplicates,
                    created_at, last_updated
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    name = excluded.name,
                    status = excluded.status,
                    confidence = excluded.confidence,
                    source_type = excluded.source_type,
                    source_uri = excluded.source_uri,
                    source_content = excluded.source_content,
                    source_file_name = excluded.source_file_name,
                    acknowledged_duplicates = excluded.acknowledged_duplicates,
                    last_updated = excluded.last_updated
                """,
                (
                    recipe.id,
                    recipe.name.strip(),
                    recipe.status,
                    recipe.confidence,
                    recipe.source.type,
                    recipe.source.uri,
                    recipe.source.content,
                    recipe.source.file_name,
                    _dump_acknowledged(recipe.acknowledged_duplicates),
                    recipe.created_at.isoformat(),
                    recipe.last_updated.isoformat(),
                ),
            )
            cur.execute("DELETE FROM recipe_ingredient WHERE recipe_id = ?", (recipe.id,))
            cur.execute("DELETE FROM recipe_issue WHERE recipe_id = ?", (recipe.id,))

            cur.executemany(
                """
                INSERT INTO recipe_ingredient (
                    id, recipe_id, position, name, quantity, unit, original_unit,
                    unit_unclear, inventory_ref, is_new, confidence
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                [
                    (
                        line.line_id,
                        recipe.id,
                        position,
                        line.name,
                        line.quantity,
                        line.unit,
                        line.original_unit,
                        int(line.unit_unclear),
                        line.inventory_ref,
                        int(line.is_new),
                        line.confidence,
                    )
                    for position, line in enumerate(recipe.ingredients)
                ],
            )

            cur.executemany(
                """
                INSERT INTO recipe_issue (
                    recipe_id, position, kind, message, ingredient_name, line_id,
                    suggested_fix, duplicate_indices
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                [
                    (
                        recipe.id,
                        position,
                        issue.kind,
                        issue.message,
                        issue.ingredient_name,
                        issue.line_id,
                        issue.suggested_fix,
                        json.dumps(list(issue.duplicate_indices))
                        if issue.duplicate_indices is not None
                        else None,
                    )
                    for position, issue in enumerate(recipe.issues)
                ],
            )

        logger.info(
            f"Saved recipe '{recipe.name}' ({recipe.id}): {len(recipe.ingredients)} "
            f"ingredients, {len(recipe.issues)} issues, status {recipe.status}"
        )

    def load_recipe(
        self, recipe_id: str, known_item_ids: Optional[Collection[str]] = None
    ) -> Optional[Recipe]:
        """Load a recipe and bring it up to date with the current inventory.

        References to inventory items that no longer exist are cleared, then
        issues and score are recomputed before the recipe is returned.

        Args:
            recipe_id: Recipe to load.
            known_item_ids: Ids of existing inventory items. Read from the
                inventory tables when omitted.

        Returns:
            The recipe, or None if there is no recipe with that id.
        """
        row = self.conn.execute(
            """
            SELECT id, name, status, confidence, source_type, source_uri,
                   source_content, source_file_name, acknowledged_duplicates,
                   created_at, last_updated
            FROM recipe WHERE id = ?
            """,
            (recipe_id,),
        ).fetchone()
        if row is None:
            return None

        if known_item_ids is None:
            known_item_ids = InventoryRepository(self.conn).item_ids()
        recipe = self._build_recipe(row)
        return refresh_after_load(recipe, known_item_ids)

    def _build_recipe(self, row: tuple) -> Recipe:
        (
            recipe_id,
            name,
            status,
            confidence,
            source_type,
            source_uri,
            source_content,
            source_file_name,
            acknowledged,
            created_at,
            last_updated,
        ) = row
        created = datetime.datetime.fromisoformat(created_at)

        ingredients = [
            IngredientLine(
                name=ing_name,
                quantity=quantity,
                unit=unit,
                original_unit=original_unit,
                unit_unclear=bool(unit_unclear),
                inventory_ref=inventory_ref,
                is_new=bool(is_new),
                confidence=ing_confidence or "low",
                line_id=line_id,
            )
            for (
                line_id,
                ing_name,
                quantity,
                unit,
                original_unit,
                unit_unclear,
                inventory_ref,
                is_new,
                ing_confidence,
            ) in self.conn.execute(
                """
                SELECT id, name, quantity, unit, original_unit, unit_unclear,
                       inventory_ref, is_new, confidence
                FROM recipe_ingredient WHERE recipe_id = ? ORDER BY position
                """,
                (recipe_id,),
            )
        ]

        issues = [
            Issue(
                kind=kind,
                message=message,
                ingredient_name=ingredient_name,
                suggested_fix=suggested_fix,
                duplicate_indices=tuple(json.loads(indices)) if indices else None,
                line_id=line_id,
            )
            for kind, message, ingredient_name, line_id, suggested_fix, indices in self.conn.execute(
                """
                SELECT kind, message, ingredient_name, line_id, suggested_fix,
                       duplicate_indices
                FROM recipe_issue WHERE recipe_id = ? ORDER BY position
                """,
                (recipe_id,),
            )
        ]

        menu_row = self.conn.execute(
            "SELECT id FROM menu_item WHERE recipe_id = ? ORDER BY rowid LIMIT 1",
            (recipe_id,),
        ).fetchone()

        return Recipe(
            id=recipe_id,
            name=name,
            source=RecipeSource(
                type=source_type,
                uri=source_uri,
                content=source_content,
                file_name=source_file_name,
                uploaded_at=created,
            ),
            ingredients=ingredients,
            issues=issues,
            status=status,
            confidence=confidence,
            status_override=status if status in TERMINAL_STATUSES else None,
            acknowledged_duplicates=_load_acknowledged(acknowledged),
            menu_item_id=menu_row[0] if menu_row else None,
            created_at=created,
            last_updated=datetime.datetime.fromisoformat(last_updated),
        )

    def list_recipes(self, status: Optional[str] = None) -> List[Recipe]:
        """Load every recipe, most recently updated first, optionally filtered by status.

        The status filter applies to the status after load-time repair.
        """
        known_item_ids = InventoryRepository(self.conn).item_ids()
        recipe_ids = [
            row[0]
            for row in self.conn.execute(
                "SELECT id FROM recipe ORDER BY last_updated DESC"
            ).fetchall()
        ]
        recipes = [self.load_recipe(recipe_id, known_item_ids) for recipe_id in recipe_ids]
        if status is not None:
            recipes = [recipe for recipe in recipes if recipe.status == status]
        return recipes

    def delete_recipe(self, recipe_id: str) -> bool:
        """Delete a recipe together with its ingredient lines and issues."""
        with transaction(self.conn) as cur:
            cur.execute("DELETE FROM recipe WHERE id = ?", (recipe_id,))
            deleted = cur.rowcount > 0
        if deleted:
            logger.info(f"Deleted recipe {recipe_id}")
        return deleted
