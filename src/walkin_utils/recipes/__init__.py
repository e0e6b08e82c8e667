"""Recipe consistency: issue reconciliation, duplicate merging and scoring."""

from .editing import (
    accept_match,
    add_ingredient,
    clear_match,
    merge_duplicate_group,
    quick_add,
    remove_ingredient,
    set_status_override,
    update_ingredient,
)
from .importing import build_recipe
from .issues import find_duplicate_groups, reconcile_issues
from .merging import (
    FORCE_MERGE,
    KEEP_SEPARATE,
    MergeResult,
    force_merge,
    keep_separate,
    merge_duplicates,
)
from .models import Issue, Recipe, RecipeSource
from .scoring import (
    RecipeScore,
    apply_score,
    refresh,
    refresh_after_load,
    repair_dangling_references,
    score_ingredients,
)
from .validation import RecipeValidationError, validate_recipe

__all__ = [
    "Issue",
    "Recipe",
    "RecipeSource",
    "find_duplicate_groups",
    "reconcile_issues",
    "FORCE_MERGE",
    "KEEP_SEPARATE",
    "MergeResult",
    "force_merge",
    "keep_separate",
    "merge_duplicates",
    "RecipeScore",
    "apply_score",
    "refresh",
    "refresh_after_load",
    "repair_dangling_references",
    "score_ingredients",
    "RecipeValidationError",
    "validate_recipe",
    "accept_match",
    "add_ingredient",
    "clear_match",
    "merge_duplicate_group",
    "quick_add",
    "remove_ingredient",
    "set_status_override",
    "update_ingredient",
    "build_recipe",
]
