"""User edits to a recipe's ingredient list.

Every operation mutates the recipe in place, then reconciles its issues and
rescores it before returning, so the recipe is consistent before the next read.
"""

import math
import uuid
from typing import Iterable, Optional

from walkin_utils.ingredients.models import IngredientLine, InventoryItem

from .merging import (
    FORCE_MERGE,
    KEEP_SEPARATE,
    RESOLUTIONS,
    MergeResult,
    force_merge,
    keep_separate,
    merge_duplicates,
)
from .models import HIGH, LOW, TERMINAL_STATUSES, Recipe
from .scoring import refresh


def _line_at(recipe: Recipe, position: int) -> IngredientLine:
    if position < 0 or position >= len(recipe.ingredients):
        raise IndexError(
            f"Recipe {recipe.id} has no ingredient at position {position}"
        )
    return recipe.ingredients[position]


def _check_quantity(quantity: float) -> None:
    if not math.isfinite(quantity):
        raise ValueError(f"Quantity must be a finite number: {quantity}")
    if quantity < 0:
        raise ValueError(f"Quantity cannot be negative: {quantity}")


def add_ingredient(recipe: Recipe, line: Optional[IngredientLine] = None) -> Recipe:
    """Append a line (a blank one by default) to the end of the recipe."""
    if line is None:
        line = IngredientLine(name="", quantity=0.0, unit="each")
    _check_quantity(line.quantity)
    recipe.ingredients.append(line)
    return refresh(recipe)


def remove_ingredient(recipe: Recipe, position: int) -> Recipe:
    _line_at(recipe, position)
    del recipe.ingredients[position]
    return refresh(recipe)


def update_ingredient(
    recipe: Recipe,
    position: int,
    name: Optional[str] = None,
    quantity: Optional[float] = None,
    unit: Optional[str] = None,
) -> Recipe:
    """Edit a line's name, quantity or unit.

    Renaming a line unlinks it from its inventory item. Choosing a unit marks
    the unit as no longer unclear.
    """
    line = _line_at(recipe, position)
    if quantity is not None:
        _check_quantity(quantity)
    if name is not None and name != line.name:
        line.name = name
        line.inventory_ref = None
        line.is_new = True
        line.confidence = LOW
    if quantity is not None:
        line.quantity = quantity
    if unit is not None:
        line.unit = unit
        line.unit_unclear = False
    return refresh(recipe)


def accept_match(recipe: Recipe, position: int, item: InventoryItem) -> Recipe:
    """Link a line to an inventory item, taking over the item's name and unit."""
    line = _line_at(recipe, position)
    line.name = item.name
    line.unit = item.unit
    line.inventory_ref = item.id
    line.is_new = False
    line.confidence = HIGH
    line.unit_unclear = False
    return refresh(recipe)


def quick_add(
    recipe: Recipe,
    position: int,
    inventory,
    name: Optional[str] = None,
    unit: Optional[str] = None,
    aliases: Iterable[str] = (),
    item_id: Optional[str] = None,
) -> InventoryItem:
    """Create an inventory item for a line and link the line to it.

    Args:
        recipe: Recipe to edit.
        position: Line to create the item from.
        inventory: Anything with an ``add_item(item)`` method, such as an
            InventoryRepository.
        name: Item name, defaulting to the line's name.
        unit: Item unit, defaulting to the line's unit.
        aliases: Extra names the item should match on. Blank entries are dropped.
        item_id: Id for the new item. A random ``ing_`` id is used when omitted.

    Returns:
        The stored InventoryItem. The line is linked only after the item has
        been stored, so a failed insert leaves the recipe unchanged.

    Raises:
        ValueError: If the name or unit is blank.
    """
    line = _line_at(recipe, position)
    name = (line.name if name is None else name).strip()
    unit = ((line.unit or "") if unit is None else unit).strip()
    if not name:
        raise ValueError("Ingredient name is required")
    if not unit:
        raise ValueError("Unit is required")

    item = InventoryItem(
        id=item_id or f"ing_{uuid.uuid4().hex}",
        name=name,
        unit=unit,
        aliases=tuple(alias.strip() for alias in aliases if alias.strip()),
    )
    inventory.add_item(item)
    accept_match(recipe, position, item)
    return item


def clear_match(recipe: Recipe, position: int) -> Recipe:
    line = _line_at(recipe, position)
    line.inventory_ref = None
    line.is_new = True
    line.confidence = LOW
    return refresh(recipe)


def merge_duplicate_group(
    recipe: Recipe, positions, resolution: Optional[str] = None
) -> MergeResult:
    """Resolve a duplicate group on a recipe.

    Args:
        recipe: Recipe to edit.
        positions: The group's current positions (an issue's ``duplicate_indices``).
        resolution: None to merge only if all units agree, or one of
            ``"keep_separate"`` / ``"force_merge"`` once the caller has decided.

    Returns:
        The MergeResult. The recipe is left untouched when a unit decision is
        still required.
    """
    if resolution is None:
        result = merge_duplicates(
            recipe.ingredients, positions, recipe.issues, recipe.acknowledged_duplicates
        )
    elif resolution == KEEP_SEPARATE:
        result = keep_separate(
            recipe.ingredients, positions, recipe.issues, recipe.acknowledged_duplicates
        )
    elif resolution == FORCE_MERGE:
        result = force_merge(
            recipe.ingredients, positions, recipe.issues, recipe.acknowledged_duplicates
        )
    else:
        raise ValueError(f"Unknown resolution {resolution!r}, expected one of {RESOLUTIONS}")

    if result.requires_unit_decision:
        return result

    recipe.ingredients = result.ingredients
    recipe.issues = result.issues
    recipe.acknowledged_duplicates = result.acknowledged_duplicates
    refresh(recipe)
    result.issues = list(recipe.issues)
    result.acknowledged_duplicates = set(recipe.acknowledged_duplicates)
    return result


def set_status_override(recipe: Recipe, status: Optional[str]) -> Recipe:
    """Pin the recipe to draft / import_failed, or pass None to release it."""
    if status is not None and status not in TERMINAL_STATUSES:
        raise ValueError(f"Only {TERMINAL_STATUSES} can be set directly, got {status!r}")
    recipe.status_override = status
    return refresh(recipe)
