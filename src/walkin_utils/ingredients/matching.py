"""
Fuzzy matching of free-text ingredient names against the inventory.

Two entry points share one pairwise score:
- rank_inventory_matches: interactive suggestions (score >= 0.4, top 5)
- find_automatic_match: import-time auto-linking (score >= 0.7, tiered confidence)

The pairwise score is edit-distance similarity, boosted to 0.7 when either
string contains the other. Comparison is case-insensitive and otherwise
literal (no punctuation stripping).
"""

from typing import Iterable, List, Optional

from walkin_utils.ingredients.models import InventoryItem, InventoryMatch

SUGGESTION_THRESHOLD = 0.4
AUTO_MATCH_THRESHOLD = 0.7
SUBSTRING_BOOST = 0.7
MAX_SUGGESTIONS = 5
MIN_QUERY_LENGTH = 2

# Confidence tiers for automatic matches, checked in order
CONFIDENCE_TIERS = [
    (0.95, "high"),
    (0.8, "medium"),
]


def levenshtein_distance(a: str, b: str) -> int:
    """Number of single-character insertions, deletions or substitutions turning a into b."""
    if len(a) < len(b):
        a, b = b, a
    previous = list(range(len(b) + 1))
    for i, char_a in enumerate(a, start=1):
        current = [i]
        for j, char_b in enumerate(b, start=1):
            if char_a == char_b:
                current.append(previous[j - 1])
            else:
                current.append(1 + min(previous[j], current[j - 1], previous[j - 1]))
        previous = current
    return previous[-1]


def edit_similarity(a: str, b: str) -> float:
    """Case-insensitive edit-distance similarity in [0, 1]."""
    a, b = a.lower(), b.lower()
    max_len = max(len(a), len(b))
    if max_len == 0:
        return 1.0
    return (max_len - levenshtein_distance(a, b)) / max_len


def pairwise_score(a: str, b: str, substring_boost: float = SUBSTRING_BOOST) -> float:
    score = edit_similarity(a, b)
    folded_a, folded_b = a.lower(), b.lower()
    if folded_a and folded_b and (folded_a in folded_b or folded_b in folded_a):
        score = max(score, substring_boost)
    return score


def score_item(name: str, item: InventoryItem) -> float:
    """Best score of a name against an item's name and all of its aliases."""
    score = pairwise_score(name, item.name)
    for alias in item.aliases:
        score = max(score, pairwise_score(name, alias))
    return score


def rank_inventory_matches(
    name: str,
    inventory: Iterable[InventoryItem],
    min_score: float = SUGGESTION_THRESHOLD,
    limit: Optional[int] = MAX_SUGGESTIONS,
) -> List[InventoryMatch]:
    """Rank inventory items by similarity to a free-text ingredient name.

    Inactive items are skipped. Ties keep inventory order.

    Args:
        name: Ingredient name as typed or imported.
        inventory: Inventory snapshot to search.
        min_score: Lowest score to keep.
        limit: Maximum number of results, or None for all of them.

    Returns:
        Matches ordered by descending score. Empty if ``name`` is shorter than
        two characters.

    Examples:
        >>> flour = InventoryItem("ing_2", "All-Purpose Flour", "lb")
        >>> rank_inventory_matches("Flour", [flour])[0].score
        0.7
    """
    if not name or len(name) < MIN_QUERY_LENGTH:
        return []

    matches = []
    for item in inventory:
        if not item.is_active:
            continue
        score = score_item(name, item)
        if score >= min_score:
            matches.append(InventoryMatch(item, score))

    # sorted() is stable, so equal scores stay in inventory order
    matches = sorted(matches, key=lambda m: m.score, reverse=True)
    if limit is not None:
        matches = matches[:limit]
    return matches


def match_confidence(score: float) -> str:
    for threshold, level in CONFIDENCE_TIERS:
        if score >= threshold:
            return level
    return "low"


def find_automatic_match(
    name: str,
    inventory: Iterable[InventoryItem],
    min_score: float = AUTO_MATCH_THRESHOLD,
) -> Optional[InventoryMatch]:
    """Pick the inventory item an imported ingredient should be linked to, if any.

    Uses the same scoring as the interactive ranking with a stricter
    acceptance threshold, and attaches a confidence tier to the result.
    """
    matches = rank_inventory_matches(name, inventory, min_score=min_score, limit=1)
    if not matches:
        return None
    best = matches[0]
    best.confidence = match_confidence(best.score)
    return best
