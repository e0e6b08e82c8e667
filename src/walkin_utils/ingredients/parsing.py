"""Parsing of manually entered ingredient lines."""

import re
from typing import Optional, Tuple

from walkin_utils.ingredients.models import ParsedLine
from walkin_utils.ingredients.normalization import UNIT_LOOKUP, normalize_unit
from walkin_utils.ingredients.number_utils import (
    parse_decimal,
    parse_fraction,
    parse_quantity,
    parse_whole,
)

# Unicode fraction mappings
UNICODE_FRAC = {"¼": " .25", "½": " .5", "¾": " .75", "⅓": " .333", "⅔": " .667"}


def parse_ingredient_line(text: str) -> ParsedLine:
    """Parse one line of manually entered recipe text.

    Args:
        text: Raw line such as "1 1/2 cups all-purpose flour" or "2 lb butter, softened".

    Returns:
        A ParsedLine. ``quantity`` is None when the line has no leading amount,
        and ``unit`` is None when no known unit follows the amount.

    Examples:
        >>> parse_ingredient_line("2 cups sugar")
        ParsedLine(name='sugar', quantity=2.0, unit='cup')
        >>> parse_ingredient_line("Salt")
        ParsedLine(name='Salt', quantity=None, unit=None)
    """
    original_text = text.strip()
    amount, rest = _parse_amount(original_text)
    unit, rest = _parse_unit(rest)
    name = clean_ingredient_name(rest)

    # If cleaning results in an empty string, fall back to the original text
    if not name:
        name = original_text
    return ParsedLine(name=name, quantity=amount, unit=unit)


def _parse_amount(text: str) -> Tuple[Optional[float], str]:
    """Parse amount from the start of an ingredient string.

    Returns:
        A tuple of the parsed amount (or None) and the remaining text.
    """
    # Convert unicode fractions to decimal equivalents
    text = "".join(UNICODE_FRAC.get(c, c) for c in text)

    words = text.split()
    if not words:
        return None, ""

    try:
        for parser in [_parse_number_range, _parse_mixed_number, _parse_simple_number]:
            amount, consumed_words = parser(words)
            if amount is not None:
                return amount, " ".join(words[consumed_words:])
    except (ValueError, ZeroDivisionError):
        pass

    return None, " ".join(words)


def _parse_number_range(words: list) -> Tuple[Optional[float], int]:
    """Parse number ranges like '2 to 3' or '2-3' as their midpoint."""
    if len(words) >= 3 and words[1].lower() == "to":
        low, high = parse_decimal(words[0]), parse_decimal(words[2])
        if low is not None and high is not None:
            return (low + high) / 2, 3

    bounds = words[0].split("-")
    if len(bounds) == 2:
        low, high = parse_decimal(bounds[0]), parse_decimal(bounds[1])
        if low is not None and high is not None:
            return (low + high) / 2, 1

    return None, 0


def _parse_mixed_number(words: list) -> Tuple[Optional[float], int]:
    """Parse mixed numbers like '1 1/2' or '1 .5'."""
    if len(words) < 2:
        return None, 0
    whole = parse_whole(words[0])
    if whole is None:
        return None, 0

    part = parse_fraction(words[1])
    if part is None:
        part = parse_decimal(words[1])
        if part is not None and not 0 < part < 1:
            part = None
    if part is None:
        return None, 0
    return whole + part, 2


def _parse_simple_number(words: list) -> Tuple[Optional[float], int]:
    """Parse simple numbers like '1/2', '2.5', or '3'."""
    value = parse_quantity(words[0])
    if value is None:
        return None, 0
    return value, 1


def _parse_unit(text: str) -> Tuple[Optional[str], str]:
    """Parse a unit (one or two words, e.g. "fl oz") from the start of text."""
    words = text.split()
    if not words:
        return None, text

    for width in (2, 1):
        if len(words) < width:
            continue
        candidate = " ".join(words[:width]).lower()
        if candidate in UNIT_LOOKUP or candidate.strip(".") in UNIT_LOOKUP:
            return normalize_unit(candidate), " ".join(words[width:])

    return None, text


def clean_ingredient_name(name: str) -> str:
    """Clean up ingredient names by removing parenthetical notes and stray punctuation.

    Examples:
        >>> clean_ingredient_name("whole milk (cold)")
        'whole milk'
        >>> clean_ingredient_name("  butter ,  ")
        'butter'
    """
    name = re.sub(r"\s*\([^)]*\)", "", name)
    name = re.sub(r"\s+", " ", name)
    name = name.strip().strip(",").strip()
    if name.lower().startswith("of "):
        name = name[3:]
    return name
