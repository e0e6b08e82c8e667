"""Ingredient name and unit normalization utilities."""

import re
from typing import List

# Canonical unit tokens and the spellings that map onto them
UNIT_MAP = {
    # Volume
    "oz": ["oz", "oz.", "ounce", "ounces", "fl oz", "fl. oz."],
    "tbsp": [
        "tbsp",
        "tbsp.",
        "tablespoon",
        "tablespoons",
        "tbs",
        "tbl",
    ],
    "tsp": ["tsp", "tsp.", "teaspoon", "teaspoons"],
    "cup": ["cup", "cups", "c"],
    "pint": ["pint", "pints", "pt", "pt."],
    "quart": ["quart", "quarts", "qt", "qt."],
    "gallon": ["gallon", "gallons", "gal", "gal."],
    "ml": ["ml", "ml.", "milliliter", "milliliters", "millilitre", "millilitres"],
    "l": ["l", "l.", "liter", "liters", "litre", "litres"],
    # Weight
    "lb": ["lb", "lb.", "lbs", "lbs.", "pound", "pounds"],
    "g": ["g", "g.", "gram", "grams", "gr"],
    # Count
    "each": ["each", "ea", "ea.", "piece", "pieces", "pc", "pcs", "whole"],
}

# Create reverse mapping for lookup
UNIT_LOOKUP = {v: k for k, vs in UNIT_MAP.items() for v in vs}


def normalize_name(name: str) -> str:
    """Normalize an ingredient name for equality comparison.

    Only trims and lowercases, so "Sugar " and "sugar" compare equal while
    "Sugar, white" and "Sugar" do not.

    Examples:
        >>> normalize_name("  Brown Sugar ")
        'brown sugar'
    """
    return name.strip().lower()


def split_words(text: str) -> List[str]:
    return normalize_name(text).split()


def normalize_unit(unit: str) -> str:
    """Normalize unit names to their canonical token.

    Args:
        unit: Raw unit string

    Returns:
        Canonical unit token, or the lowercased input if it is not recognized

    Examples:
        >>> normalize_unit("Tablespoons")
        'tbsp'
        >>> normalize_unit("pinch")
        'pinch'
    """
    unit = re.sub(r"\s+", " ", unit.strip().lower())
    return UNIT_LOOKUP.get(unit, UNIT_LOOKUP.get(unit.strip("."), unit))


def is_recognized_unit(unit: str) -> bool:
    """Check whether a unit token maps onto one of the canonical units."""
    if not unit or not unit.strip():
        return False
    return normalize_unit(unit) in UNIT_MAP
