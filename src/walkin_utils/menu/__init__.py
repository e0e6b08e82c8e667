"""Menu item linking for saved recipes."""

from .linking import (
    LINK_THRESHOLD,
    find_menu_item_match,
    link_recipe,
    link_saved_recipe,
    linked_menu_item,
    name_similarity,
    save_recipe_and_link,
    sync_recipes_to_menu,
)
from .models import (
    DEFAULT_MENU_CATEGORY,
    LinkOutcome,
    LinkResult,
    MenuItem,
    NewMenuItemDraft,
)

__all__ = [
    "LINK_THRESHOLD",
    "find_menu_item_match",
    "link_recipe",
    "link_saved_recipe",
    "linked_menu_item",
    "name_similarity",
    "save_recipe_and_link",
    "sync_recipes_to_menu",
    "DEFAULT_MENU_CATEGORY",
    "LinkOutcome",
    "LinkResult",
    "MenuItem",
    "NewMenuItemDraft",
]
