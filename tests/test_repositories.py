import sqlite3

import pytest

from walkin_utils.database import (
    InventoryRepository,
    MenuCatalog,
    RecipeRepository,
    create_schema,
    get_connection,
    get_recipe_issue_data,
)
from walkin_utils.ingredients.models import IngredientLine, InventoryItem
from walkin_utils.menu.linking import save_recipe_and_link
from walkin_utils.menu.models import MenuItem
from walkin_utils.recipes.editing import merge_duplicate_group, quick_add
from walkin_utils.recipes.importing import build_recipe
from walkin_utils.recipes.models import (
    DRAFT,
    DUPLICATE_INGREDIENT,
    INGREDIENT_NOT_FOUND,
    NEEDS_REVIEW,
    READY_TO_IMPORT,
    Issue,
    RecipeSource,
)
from walkin_utils.recipes.scoring import refresh
from walkin_utils.recipes.validation import RecipeValidationError

INVENTORY = [
    InventoryItem("ing_1", "Granulated Sugar", "lb", aliases=("sugar",), supported_units=("lb", "cup")),
    InventoryItem("ing_2", "All-Purpose Flour", "lb"),
    InventoryItem("ing_3", "Whole Milk", "gallon"),
    InventoryItem("ing_4", "Butter", "lb", is_active=False),
]


@pytest.fixture
def db_path(tmp_path):
    return tmp_path / "walkin.db"


@pytest.fixture
def temp_db(db_path):
    conn = get_connection(db_path)
    create_schema(conn)
    InventoryRepository(conn).add_items(INVENTORY)
    yield conn
    conn.close()


@pytest.fixture
def repository(temp_db):
    return RecipeRepository(temp_db)


@pytest.fixture
def recipe():
    return build_recipe(
        "Pancakes",
        ["2 tbsp sugar", "1 1/2 cups all-purpose flour", "1 cup whole milk", "1 tsp vanilla"],
        INVENTORY,
        RecipeSource(type="text", content="pasted text", file_name="pancakes.txt"),
        recipe_id="recipe_1",
    )


def count_rows(conn, table):
    return conn.execute(f"SELECT COUNT(*) FROM {table}").fetchone()[0]


def test_inventory_round_trip(temp_db):
    inventory = InventoryRepository(temp_db)

    active = inventory.list_items()
    assert [item.id for item in active] == ["ing_2", "ing_1", "ing_3"]
    sugar = active[1]
    assert sugar.aliases == ("sugar",)
    assert sugar.supported_units == ("lb", "cup")

    everything = inventory.list_items(active_only=False)
    assert {item.id for item in everything} == {"ing_1", "ing_2", "ing_3", "ing_4"}
    assert inventory.item_ids() == {"ing_1", "ing_2", "ing_3", "ing_4"}


def test_add_item_replaces_aliases(temp_db):
    inventory = InventoryRepository(temp_db)
    inventory.add_item(InventoryItem("ing_1", "Cane Sugar", "lb", aliases=("white sugar",)))

    sugar = [item for item in inventory.list_items() if item.id == "ing_1"][0]
    assert sugar.name == "Cane Sugar"
    assert sugar.aliases == ("white sugar",)
    assert sugar.supported_units == ()


def test_save_and_load_recipe(repository, recipe):
    repository.save_recipe(recipe)
    loaded = repository.load_recipe("recipe_1")

    assert loaded.name == "Pancakes"
    assert loaded.source.file_name == "pancakes.txt"
    assert [line.line_id for line in loaded.ingredients] == [
        line.line_id for line in recipe.ingredients
    ]
    assert [line.name for line in loaded.ingredients] == [
        "Granulated Sugar",
        "All-Purpose Flour",
        "Whole Milk",
        "vanilla",
    ]
    assert loaded.ingredients[1].quantity == 1.5
    assert loaded.issues == recipe.issues
    assert loaded.status == NEEDS_REVIEW
    assert loaded.confidence == recipe.confidence
    assert loaded.created_at == recipe.created_at


def test_is_new_flag_survives_reload(repository, recipe):
    recipe.ingredients[0].is_new = True
    recipe.ingredients[3].is_new = False
    repository.save_recipe(recipe)

    loaded = repository.load_recipe("recipe_1")
    assert [line.is_new for line in loaded.ingredients] == [True, False, False, False]


def test_quick_add_persists_item_and_link(temp_db, repository, recipe):
    inventory = InventoryRepository(temp_db)

    item = quick_add(recipe, 3, inventory, name="Vanilla Extract", unit="oz", item_id="ing_5")
    repository.save_recipe(recipe)

    assert "ing_5" in inventory.item_ids()
    loaded = repository.load_recipe("recipe_1", known_item_ids=inventory.item_ids())
    assert loaded.ingredients[3].inventory_ref == item.id
    assert loaded.ingredients[3].name == "Vanilla Extract"
    assert loaded.issues_of_kind(INGREDIENT_NOT_FOUND) == []


def test_load_missing_recipe(repository):
    assert repository.load_recipe("nope") is None


def test_save_replaces_previous_version(repository, recipe, temp_db):
    repository.save_recipe(recipe)
    recipe.ingredients.pop()
    recipe.issues = []
    repository.save_recipe(recipe)

    assert count_rows(temp_db, "recipe") == 1
    assert count_rows(temp_db, "recipe_ingredient") == 3
    assert repository.load_recipe("recipe_1").status == READY_TO_IMPORT


def test_save_rejects_invalid_recipe(repository, recipe, temp_db):
    recipe.ingredients[0].quantity = 0
    recipe.name = " "

    with pytest.raises(RecipeValidationError) as excinfo:
        repository.save_recipe(recipe)

    assert len(excinfo.value.problems) == 2
    assert count_rows(temp_db, "recipe") == 0


def test_failed_save_rolls_back(repository, recipe, temp_db, mocker):
    repository.save_recipe(recipe)

    recipe.name = "Fluffy Pancakes"
    recipe.issues.append(
        Issue(
            kind=DUPLICATE_INGREDIENT,
            message='"Sugar" appears 2 times',
            ingredient_name="Sugar",
            duplicate_indices=(0, 1),
        )
    )
    # Issue rows are written after the recipe and ingredient rows
    mocker.patch(
        "walkin_utils.database.repositories.json.dumps",
        side_effect=TypeError("not serializable"),
    )
    with pytest.raises(TypeError):
        repository.save_recipe(recipe)

    assert count_rows(temp_db, "recipe_issue") == 1
    assert count_rows(temp_db, "recipe_ingredient") == 4
    assert repository.load_recipe("recipe_1").name == "Pancakes"


def test_ingredient_row_failure_rolls_back_recipe_row(repository, recipe, temp_db):
    repository.save_recipe(recipe)

    recipe.name = "Fluffy Pancakes"
    # Two lines with the same id violate the primary key on the ingredient rows
    recipe.ingredients.append(IngredientLine("Salt", 1, "tsp", line_id=recipe.ingredients[0].line_id))
    with pytest.raises(sqlite3.IntegrityError):
        repository.save_recipe(recipe)

    assert repository.load_recipe("recipe_1").name == "Pancakes"
    assert count_rows(temp_db, "recipe_ingredient") == 4


def test_load_repairs_deleted_inventory_item(repository, recipe, temp_db):
    recipe.ingredients[3] = IngredientLine(
        "Butter", 1, "tbsp", inventory_ref="ing_4", is_new=False
    )
    recipe.issues = []
    repository.save_recipe(recipe)
    assert repository.load_recipe("recipe_1").status == READY_TO_IMPORT

    InventoryRepository(temp_db).delete_item("ing_4")
    loaded = repository.load_recipe("recipe_1")

    butter = loaded.ingredients[3]
    assert butter.inventory_ref is None
    assert butter.is_new
    assert butter.confidence == "low"
    assert loaded.status == NEEDS_REVIEW
    assert [issue.kind for issue in loaded.issues] == [INGREDIENT_NOT_FOUND]


def test_terminal_status_survives_reload(repository, recipe):
    recipe.status_override = DRAFT
    recipe.status = DRAFT
    repository.save_recipe(recipe)

    loaded = repository.load_recipe("recipe_1")
    assert loaded.status == DRAFT
    assert loaded.status_override == DRAFT


def test_acknowledged_duplicates_survive_reload(repository, recipe):
    recipe.ingredients.append(IngredientLine("Whole Milk", 8, "oz", inventory_ref="ing_3"))
    merge_duplicate_group(recipe, [2, 4], resolution="keep_separate")
    repository.save_recipe(recipe)

    loaded = repository.load_recipe("recipe_1")
    assert loaded.acknowledged_duplicates == recipe.acknowledged_duplicates
    assert loaded.issues_of_kind(DUPLICATE_INGREDIENT) == []


def test_list_recipes(repository, recipe):
    repository.save_recipe(recipe)
    other = build_recipe("Flour Paste", ["1 cup flour"], INVENTORY, RecipeSource(type="text"))
    repository.save_recipe(other)

    assert {r.id for r in repository.list_recipes()} == {"recipe_1", other.id}
    assert [r.id for r in repository.list_recipes(status=READY_TO_IMPORT)] == [other.id]


def test_delete_recipe_cascades(repository, recipe, temp_db):
    repository.save_recipe(recipe)
    catalog = MenuCatalog(temp_db)
    catalog.add_menu_item(MenuItem("menu_1", "Pancakes", recipe_id="recipe_1"))

    assert repository.delete_recipe("recipe_1")
    assert not repository.delete_recipe("recipe_1")
    assert count_rows(temp_db, "recipe_ingredient") == 0
    assert count_rows(temp_db, "recipe_issue") == 0
    assert catalog.list_unlinked_menu_items()[0].id == "menu_1"


def test_menu_catalog(temp_db, repository, recipe):
    repository.save_recipe(recipe)
    catalog = MenuCatalog(temp_db)
    catalog.add_menu_item(MenuItem("menu_1", "Pancake Stack", category="Breakfast"))

    catalog.link_menu_item("menu_1", "recipe_1")

    assert catalog.list_unlinked_menu_items() == []
    assert catalog.list_menu_items()[0].recipe_id == "recipe_1"
    assert repository.load_recipe("recipe_1").menu_item_id == "menu_1"
    with pytest.raises(LookupError):
        catalog.link_menu_item("menu_404", "recipe_1")


def test_save_recipe_and_link(temp_db, repository, recipe):
    catalog = MenuCatalog(temp_db)
    catalog.add_menu_item(MenuItem("menu_1", "Waffles"))

    outcome = save_recipe_and_link(repository, catalog, recipe)

    assert outcome.linked
    assert outcome.result.is_new
    items = {item.id: item for item in catalog.list_menu_items()}
    assert items["menu_recipe_1"].recipe_id == "recipe_1"
    assert items["menu_recipe_1"].category == "Uncategorized"
    assert items["menu_1"].recipe_id is None


def test_resave_keeps_single_menu_link(temp_db, repository, recipe):
    catalog = MenuCatalog(temp_db)
    catalog.add_menu_item(MenuItem("menu_1", "Pancakes"))

    first = save_recipe_and_link(repository, catalog, recipe)
    recipe.ingredients[0].quantity = 3
    second = save_recipe_and_link(repository, catalog, recipe)

    assert first.result.menu_item_id == "menu_1"
    assert second.linked
    assert second.result.menu_item_id == "menu_1"
    assert not second.result.is_new
    rows = temp_db.execute("SELECT id, recipe_id FROM menu_item ORDER BY id").fetchall()
    assert rows == [("menu_1", "recipe_1")]
    assert repository.load_recipe("recipe_1").menu_item_id == "menu_1"


def test_get_recipe_issue_data(db_path, repository, recipe):
    recipe.ingredients.append(IngredientLine("vanilla", 2, "tsp"))
    refresh(recipe)
    repository.save_recipe(recipe)

    df = get_recipe_issue_data(db_path)

    assert set(df["recipe_id"]) == {"recipe_1"}
    assert list(df["kind"]).count(INGREDIENT_NOT_FOUND) == 2
    duplicates = df[df["kind"] == DUPLICATE_INGREDIENT]
    assert list(duplicates["duplicate_indices"]) == [[3, 4]]
    assert df.loc[df["kind"] == INGREDIENT_NOT_FOUND, "duplicate_indices"].isna().all()
