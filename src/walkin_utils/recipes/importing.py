"""Assembly of a new recipe from the output of an import source."""

import logging
import uuid
from typing import Iterable, List, Optional, Sequence, Tuple, Union

from walkin_utils.ingredients.matching import (
    find_automatic_match,
    rank_inventory_matches,
)
from walkin_utils.ingredients.models import IngredientLine, InventoryItem, ParsedLine
from walkin_utils.ingredients.normalization import is_recognized_unit, normalize_unit
from walkin_utils.ingredients.parsing import parse_ingredient_line

from .models import (
    IMPORT_FAILED,
    SIMILAR_INGREDIENT,
    STATUS_IMPORT_FAILED,
    Issue,
    Recipe,
    RecipeSource,
)
from .scoring import refresh
from .validation import missing_data_issues

logger = logging.getLogger(__name__)


def _similar_issue(line: IngredientLine, suggestions: List[str]) -> Issue:
    return Issue(
        kind=SIMILAR_INGREDIENT,
        message=f'"{line.name}" not found. Similar: {", ".join(suggestions)}',
        ingredient_name=line.name,
        suggested_fix="Link to existing ingredient or create new one",
        line_id=line.line_id,
    )


def build_line(
    parsed: ParsedLine, inventory: Sequence[InventoryItem]
) -> Tuple[IngredientLine, Optional[Issue]]:
    """Turn one parsed ingredient into a recipe line, auto-linking it if possible.

    Returns:
        The line, and a similar_ingredient issue when the line could not be
        linked but the inventory has close candidates.
    """
    raw_unit = (parsed.unit or "").strip()
    line = IngredientLine(
        name=parsed.name.strip(),
        quantity=parsed.quantity if parsed.quantity is not None else 0.0,
        unit=normalize_unit(raw_unit) if raw_unit else "",
        original_unit=raw_unit or None,
        unit_unclear=not is_recognized_unit(raw_unit),
    )

    match = find_automatic_match(line.name, inventory)
    if match is not None:
        logger.debug(
            f"Linked '{line.name}' to '{match.item.name}' "
            f"(score {match.score:.2f}, {match.confidence})"
        )
        line.name = match.item.name
        line.inventory_ref = match.item.id
        line.is_new = False
        line.confidence = match.confidence
        if not line.unit:
            line.unit = match.item.unit
            line.unit_unclear = False
        return line, None

    suggestions = [m.item.name for m in rank_inventory_matches(line.name, inventory)]
    if suggestions:
        return line, _similar_issue(line, suggestions)
    return line, None


def build_recipe(
    name: Optional[str],
    parsed_lines: Iterable[Union[ParsedLine, str]],
    inventory: Iterable[InventoryItem],
    source: RecipeSource,
    recipe_id: Optional[str] = None,
) -> Recipe:
    """Build a reconciled, scored recipe from imported ingredient data.

    Args:
        name: Recipe name as extracted by the import source.
        parsed_lines: Parsed ingredients, or raw manual-entry lines such as
            "2 cups sugar" which are parsed here.
        inventory: Inventory snapshot to match against.
        source: Where the recipe came from.
        recipe_id: Identifier to use; one is generated when omitted.

    Returns:
        A new Recipe. A recipe without any ingredients is marked import_failed.
    """
    inventory = list(inventory)
    recipe = Recipe(
        id=recipe_id or f"recipe_{uuid.uuid4().hex}",
        name=(name or "").strip(),
        source=source,
    )

    similar_issues = []
    for parsed in parsed_lines:
        if isinstance(parsed, str):
            if not parsed.strip():
                continue
            parsed = parse_ingredient_line(parsed)
        line, issue = build_line(parsed, inventory)
        recipe.ingredients.append(line)
        if issue is not None:
            similar_issues.append(issue)

    issues = missing_data_issues(recipe) + similar_issues
    if not recipe.ingredients:
        recipe.status_override = STATUS_IMPORT_FAILED
        issues.append(
            Issue(
                kind=IMPORT_FAILED,
                message="No ingredients were found in the imported recipe",
                suggested_fix="Check the source and import it again, or add ingredients by hand",
            )
        )
    recipe.issues = issues

    refresh(recipe, touch=False)
    logger.info(
        f"Imported recipe '{recipe.name}' with {len(recipe.ingredients)} ingredients: "
        f"{recipe.status}, {recipe.confidence} confidence, {len(recipe.issues)} issues"
    )
    return recipe
