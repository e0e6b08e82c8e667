import dataclasses
from typing import Optional

DEFAULT_MENU_CATEGORY = "Uncategorized"


@dataclasses.dataclass
class MenuItem:
    id: str
    name: str
    category: Optional[str] = None
    pos_id: Optional[str] = None
    recipe_id: Optional[str] = None

    @property
    def has_recipe(self) -> bool:
        return self.recipe_id is not None


@dataclasses.dataclass
class NewMenuItemDraft:
    """A menu item to create, already linked to its recipe."""

    id: str
    name: str
    recipe_id: str
    pos_id: str
    category: str = DEFAULT_MENU_CATEGORY


@dataclasses.dataclass
class LinkResult:
    """Either an existing menu item to link (with its name score) or a draft to create."""

    menu_item_id: Optional[str] = None
    score: float = 0.0
    draft: Optional[NewMenuItemDraft] = None

    @property
    def is_new(self) -> bool:
        return self.draft is not None


@dataclasses.dataclass
class LinkOutcome:
    """What happened when linking was attempted after a save."""

    recipe_id: str
    linked: bool
    result: Optional[LinkResult] = None
    error: Optional[BaseException] = None
