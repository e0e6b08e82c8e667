"""SQLite storage for inventory, recipes and menu items."""

from .repositories import InventoryRepository, MenuCatalog, RecipeRepository
from .schema import DDL, create_schema
from .utils import get_connection, get_recipe_issue_data, transaction

__all__ = [
    "DDL",
    "create_schema",
    "get_connection",
    "get_recipe_issue_data",
    "transaction",
    "InventoryRepository",
    "MenuCatalog",
    "RecipeRepository",
]
