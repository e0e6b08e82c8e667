"""Confidence and readiness scoring for recipes."""

import dataclasses
import logging
from typing import Collection, Optional, Sequence

from walkin_utils.ingredients.models import IngredientLine

from .issues import find_duplicate_groups, group_line_ids, reconcile_issues
from .models import (
    HIGH,
    LOW,
    MEDIUM,
    NEEDS_REVIEW,
    READY_TO_IMPORT,
    TERMINAL_STATUSES,
    Recipe,
)

logger = logging.getLogger(__name__)

HIGH_MATCH_RATE = 0.9
MEDIUM_MATCH_RATE = 0.7


@dataclasses.dataclass(frozen=True)
class RecipeScore:
    confidence: str
    status: str
    match_rate: float
    unmatched: int
    total: int


def score_ingredients(ingredients: Sequence[IngredientLine]) -> RecipeScore:
    """Derive confidence and implied status from how many lines are matched.

    Examples:
        10 lines, 0 unmatched -> high / ready_to_import
        10 lines, 2 unmatched -> medium / needs_review
        10 lines, 4 unmatched -> low / needs_review
    """
    total = len(ingredients)
    unmatched = sum(1 for line in ingredients if line.inventory_ref is None)
    match_rate = 0.0 if total == 0 else (total - unmatched) / total

    if match_rate >= HIGH_MATCH_RATE and unmatched == 0:
        confidence = HIGH
    elif match_rate >= MEDIUM_MATCH_RATE:
        confidence = MEDIUM
    else:
        confidence = LOW

    status = READY_TO_IMPORT if unmatched == 0 and total > 0 else NEEDS_REVIEW
    return RecipeScore(confidence, status, match_rate, unmatched, total)


def apply_score(recipe: Recipe) -> RecipeScore:
    """Set a recipe's confidence and status from its ingredient list.

    A caller-supplied terminal status (draft, import_failed) in
    ``recipe.status_override`` takes precedence over the implied status.
    """
    if recipe.status_override is not None and recipe.status_override not in TERMINAL_STATUSES:
        raise ValueError(f"Not a terminal status: {recipe.status_override!r}")
    score = score_ingredients(recipe.ingredients)
    recipe.confidence = score.confidence
    recipe.status = recipe.status_override or score.status
    return score


def repair_dangling_references(
    recipe: Recipe, known_item_ids: Collection[str]
) -> int:
    """Unlink lines whose inventory item no longer exists.

    Returns:
        Number of lines repaired.
    """
    repaired = 0
    for line in recipe.ingredients:
        if line.inventory_ref is not None and line.inventory_ref not in known_item_ids:
            logger.debug(
                f"Recipe {recipe.id}: inventory item {line.inventory_ref} "
                f"for '{line.name}' no longer exists, unlinking"
            )
            line.inventory_ref = None
            line.is_new = True
            line.confidence = LOW
            repaired += 1
    return repaired


def prune_acknowledgements(recipe: Recipe) -> None:
    """Keep only acknowledgements that still match a duplicate group exactly.

    Once a group's membership changes in any way, its duplicate issue is raised
    again, even if the lines later come back together.
    """
    current_groups = {
        group_line_ids(recipe.ingredients, positions)
        for positions in find_duplicate_groups(recipe.ingredients).values()
    }
    recipe.acknowledged_duplicates = {
        group for group in recipe.acknowledged_duplicates if group in current_groups
    }


def refresh(recipe: Recipe, touch: bool = True) -> Recipe:
    """Bring a recipe's issues, confidence and status in line with its ingredients."""
    prune_acknowledgements(recipe)
    recipe.issues = reconcile_issues(
        recipe.ingredients, recipe.issues, recipe.acknowledged_duplicates
    )
    apply_score(recipe)
    if touch:
        recipe.touch()
    return recipe


def refresh_after_load(
    recipe: Recipe, known_item_ids: Optional[Collection[str]] = None
) -> Recipe:
    """Read-time consistency repair for a recipe coming out of storage.

    Inventory items may have been deleted since the recipe was saved, so
    references are checked against ``known_item_ids`` (when given) before
    issues and score are recomputed.
    """
    if known_item_ids is not None:
        repair_dangling_references(recipe, set(known_item_ids))
    return refresh(recipe, touch=False)
