import pytest

from walkin_utils.ingredients.models import InventoryItem, ParsedLine
from walkin_utils.recipes.importing import build_line, build_recipe
from walkin_utils.recipes.models import (
    DUPLICATE_INGREDIENT,
    IMPORT_FAILED,
    INGREDIENT_NOT_FOUND,
    MISSING_DATA,
    NEEDS_REVIEW,
    READY_TO_IMPORT,
    SIMILAR_INGREDIENT,
    STATUS_IMPORT_FAILED,
    UNIT_UNCLEAR,
    RecipeSource,
)


@pytest.fixture
def inventory():
    return [
        InventoryItem("ing_1", "Granulated Sugar", "lb", aliases=("sugar",)),
        InventoryItem("ing_2", "All-Purpose Flour", "lb"),
        InventoryItem("ing_3", "Whole Milk", "gallon"),
        InventoryItem("ing_4", "Butter", "lb"),
        InventoryItem("ing_5", "Vanilla Extract", "oz"),
    ]


@pytest.fixture
def source():
    return RecipeSource(type="text", content="manual entry")


def kinds(recipe):
    return sorted(issue.kind for issue in recipe.issues)


def test_build_line_auto_match(inventory):
    line, issue = build_line(ParsedLine("butter", 2.0, "cups"), inventory)

    assert issue is None
    assert line.name == "Butter"
    assert line.inventory_ref == "ing_4"
    assert not line.is_new
    assert line.confidence == "high"
    assert line.unit == "cup"
    assert line.original_unit == "cups"
    assert not line.unit_unclear


def test_build_line_takes_item_unit_when_missing(inventory):
    line, _ = build_line(ParsedLine("Whole Milk", 1.0, None), inventory)
    assert line.unit == "gallon"
    assert not line.unit_unclear


def test_build_line_similar_suggestions(inventory):
    line, issue = build_line(ParsedLine("Vanilla Syrup", 1.0, "tsp"), inventory)

    assert line.inventory_ref is None
    assert line.is_new
    assert issue.kind == SIMILAR_INGREDIENT
    assert issue.line_id == line.line_id
    assert "Vanilla Extract" in issue.message


def test_build_line_no_candidates(inventory):
    line, issue = build_line(ParsedLine("Xanthan Gum", 1.0, "tsp"), inventory)
    assert line.inventory_ref is None
    assert issue is None


def test_build_line_unknown_unit(inventory):
    line, _ = build_line(ParsedLine("Cinnamon", 1.0, "pinch"), inventory)
    assert line.unit == "pinch"
    assert line.unit_unclear


def test_build_recipe_ready(inventory, source):
    recipe = build_recipe(
        "  Pancakes ",
        [
            ParsedLine("sugar", 2.0, "tbsp"),
            ParsedLine("All-Purpose Flour", 1.5, "cup"),
            ParsedLine("Whole Milk", 1.0, "cup"),
        ],
        inventory,
        source,
        recipe_id="recipe_42",
    )

    assert recipe.id == "recipe_42"
    assert recipe.name == "Pancakes"
    assert recipe.issues == []
    assert recipe.status == READY_TO_IMPORT
    assert recipe.confidence == "high"
    assert recipe.is_exportable
    assert recipe.ingredients[0].name == "Granulated Sugar"


def test_build_recipe_from_text_lines(inventory, source):
    recipe = build_recipe(
        "Cookies",
        ["2 cups all-purpose flour", "", "1 cup butter", "1 tsp vanilla syrup", "2 eggs", "1 cup Butter"],
        inventory,
        source,
    )

    assert recipe.id.startswith("recipe_")
    assert [line.name for line in recipe.ingredients] == [
        "All-Purpose Flour",
        "Butter",
        "vanilla syrup",
        "eggs",
        "Butter",
    ]
    assert recipe.status == NEEDS_REVIEW
    assert kinds(recipe) == [
        DUPLICATE_INGREDIENT,
        INGREDIENT_NOT_FOUND,
        INGREDIENT_NOT_FOUND,
        SIMILAR_INGREDIENT,
        UNIT_UNCLEAR,
    ]
    duplicate = recipe.issues_of_kind(DUPLICATE_INGREDIENT)[0]
    assert duplicate.duplicate_indices == (1, 4)


def test_build_recipe_without_ingredients(inventory, source):
    recipe = build_recipe("Mystery", [], inventory, source)

    assert recipe.status == STATUS_IMPORT_FAILED
    assert recipe.status_override == STATUS_IMPORT_FAILED
    assert kinds(recipe) == [IMPORT_FAILED]


def test_build_recipe_missing_data(inventory, source):
    recipe = build_recipe("", [ParsedLine("Butter", None, "cup")], inventory, source)

    missing = recipe.issues_of_kind(MISSING_DATA)
    assert [issue.message for issue in missing] == [
        "Recipe name is missing",
        "Invalid quantity for Butter",
    ]
    assert missing[1].line_id == recipe.ingredients[0].line_id
    assert recipe.ingredients[0].quantity == 0.0


def test_build_recipe_logs_summary(inventory, source, caplog):
    with caplog.at_level("INFO", logger="walkin_utils.recipes.importing"):
        build_recipe("Toast", [ParsedLine("Butter", 1.0, "tbsp")], inventory, source)
    assert "Imported recipe 'Toast' with 1 ingredients" in caplog.text
