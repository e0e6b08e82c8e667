"""
Linking saved recipes to point-of-sale menu items.

Linking is a follow-up to a committed save, never part of it: the recipe is
saved first, then a menu item is linked (or created) on a best-effort basis.
A linking failure is logged and reported back to the caller, and the saved
recipe stays as it is.
"""

import logging
from typing import Iterable, List, Optional, Tuple

from walkin_utils.recipes.models import Recipe

from .models import LinkOutcome, LinkResult, MenuItem, NewMenuItemDraft

logger = logging.getLogger(__name__)

LINK_THRESHOLD = 0.7
EXACT_SCORE = 1.0
CONTAINMENT_SCORE = 0.9


def name_similarity(a: str, b: str) -> float:
    """Similarity of two dish names in [0, 1].

    Exact (case-insensitive) match scores 1.0, containment either way 0.9,
    otherwise the share of words in ``a`` that equal or overlap a word in
    ``b``, over the longer word count.

    Examples:
        >>> name_similarity("Chocolate Chip Cookie", "chocolate chip cookie")
        1.0
        >>> name_similarity("Cookie", "Chocolate Chip Cookie")
        0.9
        >>> name_similarity("Iced Vanilla Latte", "Hot Vanilla Latte")
        0.6666666666666666
    """
    s1 = a.lower().strip()
    s2 = b.lower().strip()
    if not s1 or not s2:
        return 0.0

    if s1 == s2:
        return EXACT_SCORE

    if s1 in s2 or s2 in s1:
        return CONTAINMENT_SCORE

    words1 = s1.split()
    words2 = s2.split()
    match_count = 0
    for word1 in words1:
        for word2 in words2:
            if word1 == word2 or word1 in word2 or word2 in word1:
                match_count += 1
                break

    return match_count / max(len(words1), len(words2))


def find_menu_item_match(
    recipe_name: str,
    candidates: Iterable[MenuItem],
    threshold: float = LINK_THRESHOLD,
) -> Optional[Tuple[MenuItem, float]]:
    """Best-scoring unlinked menu item for a recipe name, if it clears the threshold.

    Items already linked to a recipe are skipped. On equal scores the earlier
    candidate wins.
    """
    best = None
    for item in candidates:
        if item.recipe_id:
            continue
        score = name_similarity(recipe_name, item.name)
        if score > threshold and (best is None or score > best[1]):
            best = (item, score)
    return best


def new_menu_item_draft(recipe: Recipe) -> NewMenuItemDraft:
    return NewMenuItemDraft(
        id=f"menu_{recipe.id}",
        name=recipe.name,
        recipe_id=recipe.id,
        pos_id=f"pos_{recipe.id}",
    )


def link_recipe(
    recipe: Recipe,
    candidates: Iterable[MenuItem],
    threshold: float = LINK_THRESHOLD,
) -> LinkResult:
    """Decide which menu item a recipe belongs to.

    Returns:
        A LinkResult naming the matched menu item, or carrying a draft for a
        new "Uncategorized" menu item when nothing matches well enough.
    """
    match = find_menu_item_match(recipe.name, candidates, threshold=threshold)
    if match is None:
        return LinkResult(draft=new_menu_item_draft(recipe))
    item, score = match
    return LinkResult(menu_item_id=item.id, score=score)


def linked_menu_item(recipe: Recipe, menu_items: Iterable[MenuItem]) -> Optional[MenuItem]:
    """The menu item already linked to this recipe, if any."""
    for item in menu_items:
        if item.recipe_id == recipe.id:
            return item
    return None


def link_saved_recipe(recipe: Recipe, catalog, threshold: float = LINK_THRESHOLD) -> LinkOutcome:
    """Link an already saved recipe to a menu item through the catalog.

    A recipe that already has a menu item keeps it and nothing is written.
    Never raises: failures are logged and returned in the outcome.
    """
    try:
        existing = linked_menu_item(recipe, catalog.list_menu_items())
        if existing is not None:
            recipe.menu_item_id = existing.id
            logger.debug(f"Recipe '{recipe.name}' already linked to menu item {existing.id}")
            return LinkOutcome(
                recipe_id=recipe.id,
                linked=True,
                result=LinkResult(menu_item_id=existing.id),
            )

        result = link_recipe(recipe, catalog.list_unlinked_menu_items(), threshold=threshold)
        if result.draft is not None:
            catalog.create_menu_item(result.draft)
            recipe.menu_item_id = result.draft.id
            logger.info(
                f"Created menu item {result.draft.id} for recipe '{recipe.name}'"
            )
        else:
            catalog.link_menu_item(result.menu_item_id, recipe.id)
            recipe.menu_item_id = result.menu_item_id
            logger.info(
                f"Linked recipe '{recipe.name}' to menu item {result.menu_item_id} "
                f"({round(result.score * 100)}% match)"
            )
    except Exception as e:
        logger.exception(f"Recipe {recipe.id} saved but failed to link to a menu item: {e}")
        return LinkOutcome(recipe_id=recipe.id, linked=False, error=e)
    return LinkOutcome(recipe_id=recipe.id, linked=True, result=result)


def save_recipe_and_link(repository, catalog, recipe: Recipe) -> LinkOutcome:
    """Save a recipe, then link it to a menu item.

    The save is atomic and its errors propagate. Linking only starts once the
    save has committed, and its failure does not undo the save.
    """
    repository.save_recipe(recipe)
    return link_saved_recipe(recipe, catalog)


def sync_recipes_to_menu(recipes: Iterable[Recipe], catalog) -> List[NewMenuItemDraft]:
    """Create a menu item for every recipe that no menu item is linked to.

    Returns:
        Drafts that were created successfully. Failures are logged and skipped.
    """
    linked_recipe_ids = {
        item.recipe_id for item in catalog.list_menu_items() if item.recipe_id
    }
    created = []
    for recipe in recipes:
        if recipe.id in linked_recipe_ids:
            continue
        draft = new_menu_item_draft(recipe)
        try:
            catalog.create_menu_item(draft)
        except Exception as e:
            logger.error(f"Failed to create menu item for '{recipe.name}': {e}")
            continue
        recipe.menu_item_id = draft.id
        created.append(draft)
        logger.info(f"Created menu item for recipe: {recipe.name}")
    return created
