"""Resolution of duplicate ingredient groups."""

import dataclasses
import logging
from typing import Collection, FrozenSet, List, Optional, Sequence, Set, Tuple

from walkin_utils.ingredients.models import IngredientLine
from walkin_utils.ingredients.normalization import normalize_name

from .issues import group_line_ids, reconcile_issues
from .models import Issue

logger = logging.getLogger(__name__)

KEEP_SEPARATE = "keep_separate"
FORCE_MERGE = "force_merge"
RESOLUTIONS = (KEEP_SEPARATE, FORCE_MERGE)


@dataclasses.dataclass
class MergeResult:
    """Outcome of resolving a duplicate group.

    When ``requires_unit_decision`` is True nothing was changed and the caller
    must choose between ``keep_separate`` and ``force_merge``.
    """

    ingredients: List[IngredientLine]
    issues: List[Issue]
    requires_unit_decision: bool
    acknowledged_duplicates: Set[FrozenSet[str]]
    merged_quantity: Optional[float] = None


def _check_group(ingredients: Sequence[IngredientLine], positions: Sequence[int]) -> List[int]:
    if len(positions) < 2:
        raise ValueError("A duplicate group needs at least two positions")
    ordered = sorted(set(positions))
    if len(ordered) != len(positions):
        raise ValueError(f"Repeated positions in duplicate group: {list(positions)}")
    for position in ordered:
        if position < 0 or position >= len(ingredients):
            raise IndexError(f"Ingredient position {position} out of range")
    names = {normalize_name(ingredients[p].name) for p in ordered}
    if len(names) != 1:
        raise ValueError(
            f"Positions {ordered} do not name the same ingredient; "
            "they are probably stale"
        )
    return ordered


def _collapse(
    ingredients: Sequence[IngredientLine], ordered: List[int]
) -> Tuple[List[IngredientLine], float]:
    """Sum quantities into the lowest position and delete the others."""
    updated = list(ingredients)
    total = sum(updated[p].quantity for p in ordered)
    first = ordered[0]
    updated[first] = dataclasses.replace(updated[first], quantity=total)
    # Delete from the end so earlier positions stay valid
    for position in sorted(ordered[1:], reverse=True):
        del updated[position]
    return updated, total


def merge_duplicates(
    ingredients: Sequence[IngredientLine],
    positions: Sequence[int],
    issues: Sequence[Issue] = (),
    acknowledged_duplicates: Collection[FrozenSet[str]] = (),
) -> MergeResult:
    """Merge a duplicate group when all of its members use the same unit.

    Args:
        ingredients: Current ingredient lines.
        positions: Positions of the group's members in ``ingredients``.
        issues: Current issue list, reconciled against the merged lines.
        acknowledged_duplicates: Groups the user chose to keep separate.

    Returns:
        A MergeResult. If the units differ, the lines are returned unchanged
        with ``requires_unit_decision`` set.

    Raises:
        ValueError: If fewer than two positions are given, or the positions
            do not all name the same ingredient.
        IndexError: If a position is out of range.
    """
    ordered = _check_group(ingredients, positions)
    units = {ingredients[p].unit for p in ordered}
    if len(units) > 1:
        logger.debug(f"Not merging '{ingredients[ordered[0]].name}': units differ {sorted(units)}")
        return MergeResult(
            ingredients=list(ingredients),
            issues=list(issues),
            requires_unit_decision=True,
            acknowledged_duplicates=set(acknowledged_duplicates),
        )
    return force_merge(ingredients, ordered, issues, acknowledged_duplicates)


def force_merge(
    ingredients: Sequence[IngredientLine],
    positions: Sequence[int],
    issues: Sequence[Issue] = (),
    acknowledged_duplicates: Collection[FrozenSet[str]] = (),
) -> MergeResult:
    """Merge a duplicate group under the first member's unit.

    Quantities are added as raw numbers without unit conversion, so
    "8 oz" + "1 cup" becomes "9 oz".
    """
    ordered = _check_group(ingredients, positions)
    merged, total = _collapse(ingredients, ordered)
    acknowledged = set(acknowledged_duplicates)
    logger.debug(
        f"Merged {len(ordered)} entries of '{merged[ordered[0]].name}' "
        f"into {total:g} {merged[ordered[0]].unit}"
    )
    return MergeResult(
        ingredients=merged,
        issues=reconcile_issues(merged, issues, acknowledged),
        requires_unit_decision=False,
        acknowledged_duplicates=acknowledged,
        merged_quantity=total,
    )


def keep_separate(
    ingredients: Sequence[IngredientLine],
    positions: Sequence[int],
    issues: Sequence[Issue] = (),
    acknowledged_duplicates: Collection[FrozenSet[str]] = (),
) -> MergeResult:
    """Leave a duplicate group as it is and stop reporting it.

    The group's membership is recorded as acknowledged; the issue comes back
    only if a line joins or leaves the group.
    """
    ordered = _check_group(ingredients, positions)
    acknowledged = set(acknowledged_duplicates)
    acknowledged.add(group_line_ids(ingredients, ordered))
    return MergeResult(
        ingredients=list(ingredients),
        issues=reconcile_issues(ingredients, issues, acknowledged),
        requires_unit_decision=False,
        acknowledged_duplicates=acknowledged,
    )
