"""Validation of recipes before they are saved."""

import math
from typing import List

from .models import MISSING_DATA, Issue, Recipe


class RecipeValidationError(ValueError):
    """Raised when a recipe is not complete enough to be saved."""

    def __init__(self, problems: List[str]):
        self.problems = list(problems)
        super().__init__("; ".join(self.problems))


def _valid_quantity(quantity) -> bool:
    return (
        isinstance(quantity, (int, float))
        and not isinstance(quantity, bool)
        and not math.isnan(quantity)
        and quantity > 0
    )


def find_validation_problems(recipe: Recipe) -> List[str]:
    problems = []
    if not recipe.name or not recipe.name.strip():
        problems.append("Recipe name is required")
    if not recipe.ingredients:
        problems.append("At least one ingredient is required")
    for position, line in enumerate(recipe.ingredients):
        label = line.name.strip() or f"ingredient #{position + 1}"
        if not line.name.strip():
            problems.append(f"Ingredient name is missing for {label}")
        if not _valid_quantity(line.quantity):
            problems.append(f"Invalid quantity for {label}: {line.quantity}")
    return problems


def validate_recipe(recipe: Recipe) -> None:
    """Reject recipes with a missing name, no ingredients or a non-positive quantity.

    Raises:
        RecipeValidationError: Listing every problem found.
    """
    problems = find_validation_problems(recipe)
    if problems:
        raise RecipeValidationError(problems)


def missing_data_issues(recipe: Recipe) -> List[Issue]:
    """Issues for incomplete data found when a recipe is first imported."""
    issues = []
    if not recipe.name or not recipe.name.strip():
        issues.append(Issue(kind=MISSING_DATA, message="Recipe name is missing"))
    for line in recipe.ingredients:
        if not line.name.strip():
            continue
        if not _valid_quantity(line.quantity):
            issues.append(
                Issue(
                    kind=MISSING_DATA,
                    message=f"Invalid quantity for {line.name}",
                    ingredient_name=line.name,
                    suggested_fix=f'Enter the amount of "{line.name}" used',
                    line_id=line.line_id,
                )
            )
    return issues
