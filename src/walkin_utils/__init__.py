"""Walk-In Utils - Utilities for reconciling recipes with point-of-sale inventory."""

__version__ = "0.1.0"

from . import database, ingredients, menu, recipes

__all__ = ["database", "ingredients", "menu", "recipes"]
