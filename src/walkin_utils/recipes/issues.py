"""Recalculation of a recipe's issue list from its current ingredient state.

``reconcile_issues`` runs after every change to the ingredient list. Issues
that still apply are carried forward (duplicate issues get fresh positions),
resolved ones are dropped, and issues are raised for any unmatched line,
unclear unit or duplicate group that does not have one yet.
"""

import dataclasses
import logging
from typing import Collection, Dict, FrozenSet, List, Optional, Sequence

from walkin_utils.ingredients.models import IngredientLine
from walkin_utils.ingredients.normalization import normalize_name

from .models import (
    DUPLICATE_INGREDIENT,
    IMPORT_FAILED,
    INGREDIENT_NOT_FOUND,
    MISSING_DATA,
    SIMILAR_INGREDIENT,
    UNIT_UNCLEAR,
    Issue,
)

logger = logging.getLogger(__name__)

# Kinds that are carried forward as-is and never re-derived here
PASS_THROUGH_KINDS = (MISSING_DATA, IMPORT_FAILED)

# Kinds that exist at most once per line
DERIVED_KINDS = (INGREDIENT_NOT_FOUND, UNIT_UNCLEAR, SIMILAR_INGREDIENT)


def find_duplicate_groups(ingredients: Sequence[IngredientLine]) -> Dict[str, List[int]]:
    """Group line positions by normalized name, keeping groups of two or more.

    Blank names are ignored. Groups are ordered by the position of their first
    member.

    Examples:
        >>> lines = [IngredientLine("Sugar"), IngredientLine("Milk"), IngredientLine(" sugar")]
        >>> find_duplicate_groups(lines)
        {'sugar': [0, 2]}
    """
    positions: Dict[str, List[int]] = {}
    for index, line in enumerate(ingredients):
        key = normalize_name(line.name)
        if not key:
            continue
        positions.setdefault(key, []).append(index)
    return {key: group for key, group in positions.items() if len(group) > 1}


def group_line_ids(
    ingredients: Sequence[IngredientLine], positions: Sequence[int]
) -> FrozenSet[str]:
    return frozenset(ingredients[i].line_id for i in positions)


def _format_quantity(quantity: float) -> str:
    return f"{quantity:g}"


def duplicate_issue(ingredients: Sequence[IngredientLine], positions: Sequence[int]) -> Issue:
    name = ingredients[positions[0]].name
    amounts = ", ".join(
        f"{_format_quantity(ingredients[i].quantity)} {ingredients[i].unit}".strip()
        for i in positions
    )
    return Issue(
        kind=DUPLICATE_INGREDIENT,
        message=f'"{name}" appears {len(positions)} times ({amounts})',
        ingredient_name=name,
        suggested_fix="Merge quantities or keep separate entries",
        duplicate_indices=tuple(positions),
    )


def not_found_issue(line: IngredientLine) -> Issue:
    return Issue(
        kind=INGREDIENT_NOT_FOUND,
        message=f'"{line.name}" is not linked to your inventory',
        ingredient_name=line.name,
        suggested_fix=(
            f'Select a matching ingredient from inventory or add "{line.name}" as new'
        ),
        line_id=line.line_id,
    )


def unit_unclear_issue(line: IngredientLine) -> Issue:
    return Issue(
        kind=UNIT_UNCLEAR,
        message=f'Unit unclear for "{line.name}": "{line.original_unit or line.unit}"',
        ingredient_name=line.name,
        suggested_fix=f'Verify the correct unit for "{line.name}"',
        line_id=line.line_id,
    )


def _correlated_line(
    issue: Issue,
    ingredients: Sequence[IngredientLine],
    lines_by_id: Dict[str, IngredientLine],
) -> Optional[IngredientLine]:
    """Find the line an issue is about, or None if it is gone or was renamed."""
    if issue.line_id is not None:
        line = lines_by_id.get(issue.line_id)
        if line is None:
            return None
        if issue.ingredient_name is not None and line.name != issue.ingredient_name:
            return None
        return line

    # Issues from import sources may only carry a name
    if issue.ingredient_name is None:
        return None
    for line in ingredients:
        if line.name == issue.ingredient_name:
            return line
    return None


def _still_applies(issue: Issue, line: IngredientLine) -> bool:
    if issue.kind in (INGREDIENT_NOT_FOUND, SIMILAR_INGREDIENT):
        return line.inventory_ref is None
    if issue.kind == UNIT_UNCLEAR:
        return line.unit_unclear
    return True


def reconcile_issues(
    ingredients: Sequence[IngredientLine],
    previous_issues: Sequence[Issue],
    acknowledged_duplicates: Collection[FrozenSet[str]] = (),
) -> List[Issue]:
    """Recompute the issue list for the current ingredient list.

    Args:
        ingredients: The recipe's ingredient lines, in order.
        previous_issues: The issue list before the change.
        acknowledged_duplicates: Duplicate groups (as sets of line ids) the
            user chose to keep separate; no duplicate issue is raised for a
            group with exactly that membership.

    Returns:
        Issues carried forward from ``previous_issues`` in their original
        order, followed by newly raised issues. Reconciling the result again
        against the same ingredients returns an equal list.
    """
    groups = find_duplicate_groups(ingredients)
    lines_by_id = {line.line_id: line for line in ingredients}

    kept: List[Issue] = []
    raised = set()
    for issue in previous_issues:
        if issue.kind == DUPLICATE_INGREDIENT:
            positions = groups.pop(normalize_name(issue.ingredient_name or ""), None)
            if positions is None:
                continue
            if group_line_ids(ingredients, positions) in acknowledged_duplicates:
                continue
            kept.append(dataclasses.replace(issue, duplicate_indices=tuple(positions)))
            continue

        line = _correlated_line(issue, ingredients, lines_by_id)
        if line is None:
            # Recipe-level issues are not tied to any line
            if (
                issue.kind in PASS_THROUGH_KINDS
                and issue.line_id is None
                and issue.ingredient_name is None
            ):
                kept.append(issue)
            continue

        if not _still_applies(issue, line):
            continue
        if issue.kind in DERIVED_KINDS:
            if (issue.kind, line.line_id) in raised:
                continue
            raised.add((issue.kind, line.line_id))
        kept.append(dataclasses.replace(issue, line_id=line.line_id))

    new_issues: List[Issue] = []
    for line in ingredients:
        if line.inventory_ref is None and line.name.strip():
            if (INGREDIENT_NOT_FOUND, line.line_id) not in raised:
                new_issues.append(not_found_issue(line))
                raised.add((INGREDIENT_NOT_FOUND, line.line_id))
        if line.unit_unclear:
            if (UNIT_UNCLEAR, line.line_id) not in raised:
                new_issues.append(unit_unclear_issue(line))
                raised.add((UNIT_UNCLEAR, line.line_id))

    for positions in groups.values():
        if group_line_ids(ingredients, positions) in acknowledged_duplicates:
            continue
        new_issues.append(duplicate_issue(ingredients, positions))

    logger.debug(
        f"Reconciled {len(ingredients)} lines: kept {len(kept)} of "
        f"{len(previous_issues)} issues, raised {len(new_issues)}"
    )
    return kept + new_issues
