import dataclasses
import datetime
from typing import FrozenSet, List, Optional, Set, Tuple

from walkin_utils.ingredients.models import IngredientLine

# Issue kinds
UNIT_UNCLEAR = "unit_unclear"
INGREDIENT_NOT_FOUND = "ingredient_not_found"
SIMILAR_INGREDIENT = "similar_ingredient"
MISSING_DATA = "missing_data"
IMPORT_FAILED = "import_failed"
DUPLICATE_INGREDIENT = "duplicate_ingredient"

ISSUE_KINDS = (
    UNIT_UNCLEAR,
    INGREDIENT_NOT_FOUND,
    SIMILAR_INGREDIENT,
    MISSING_DATA,
    IMPORT_FAILED,
    DUPLICATE_INGREDIENT,
)

# Recipe statuses
READY_TO_IMPORT = "ready_to_import"
NEEDS_REVIEW = "needs_review"
STATUS_IMPORT_FAILED = "import_failed"
DRAFT = "draft"

RECIPE_STATUSES = (READY_TO_IMPORT, NEEDS_REVIEW, STATUS_IMPORT_FAILED, DRAFT)
TERMINAL_STATUSES = (DRAFT, STATUS_IMPORT_FAILED)

# Confidence levels
HIGH = "high"
MEDIUM = "medium"
LOW = "low"

CONFIDENCE_LEVELS = (HIGH, MEDIUM, LOW)

SOURCE_TYPES = ("photo", "pdf", "excel", "text")


def _now() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


@dataclasses.dataclass(frozen=True)
class Issue:
    """A data-quality problem found on a recipe.

    Ingredient-scoped issues point at their line through ``line_id``;
    ``ingredient_name`` is the line's name when the issue was raised and is
    used for display. ``duplicate_indices`` is only meaningful for the
    ingredient list it was computed from.
    """

    kind: str
    message: str
    ingredient_name: Optional[str] = None
    suggested_fix: Optional[str] = None
    duplicate_indices: Optional[Tuple[int, ...]] = None
    line_id: Optional[str] = None


@dataclasses.dataclass
class RecipeSource:
    type: str  # 'photo', 'pdf', 'excel', 'text'
    uri: Optional[str] = None
    content: Optional[str] = None
    file_name: Optional[str] = None
    uploaded_at: datetime.datetime = dataclasses.field(default_factory=_now)


@dataclasses.dataclass
class Recipe:
    """Aggregate root: a recipe, its ordered ingredient lines and its issues."""

    id: str
    name: str
    source: RecipeSource
    ingredients: List[IngredientLine] = dataclasses.field(default_factory=list)
    issues: List[Issue] = dataclasses.field(default_factory=list)
    status: str = NEEDS_REVIEW
    confidence: str = LOW
    status_override: Optional[str] = None
    acknowledged_duplicates: Set[FrozenSet[str]] = dataclasses.field(
        default_factory=set
    )
    menu_item_id: Optional[str] = None
    created_at: datetime.datetime = dataclasses.field(default_factory=_now)
    last_updated: datetime.datetime = dataclasses.field(default_factory=_now)

    def touch(self) -> None:
        self.last_updated = _now()

    def unmatched_lines(self) -> List[IngredientLine]:
        return [line for line in self.ingredients if line.inventory_ref is None]

    def issues_of_kind(self, kind: str) -> List[Issue]:
        return [issue for issue in self.issues if issue.kind == kind]

    @property
    def is_exportable(self) -> bool:
        return self.status == READY_TO_IMPORT
