"""Ingredient parsing, normalization and inventory matching utilities."""

from .inventory import load_inventory_csv
from .matching import (
    AUTO_MATCH_THRESHOLD,
    SUGGESTION_THRESHOLD,
    edit_similarity,
    find_automatic_match,
    levenshtein_distance,
    match_confidence,
    pairwise_score,
    rank_inventory_matches,
)
from .models import IngredientLine, InventoryItem, InventoryMatch, ParsedLine
from .normalization import is_recognized_unit, normalize_name, normalize_unit
from .parsing import clean_ingredient_name, parse_ingredient_line

__all__ = [
    "IngredientLine",
    "InventoryItem",
    "InventoryMatch",
    "ParsedLine",
    "AUTO_MATCH_THRESHOLD",
    "SUGGESTION_THRESHOLD",
    "edit_similarity",
    "find_automatic_match",
    "levenshtein_distance",
    "match_confidence",
    "pairwise_score",
    "rank_inventory_matches",
    "is_recognized_unit",
    "normalize_name",
    "normalize_unit",
    "clean_ingredient_name",
    "parse_ingredient_line",
    "load_inventory_csv",
]
