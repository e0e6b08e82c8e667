import pytest

from walkin_utils.ingredients.inventory import load_inventory_csv


@pytest.fixture
def inventory_csv(tmp_path):
    csv_path = tmp_path / "inventory.csv"
    csv_path.write_text(
        "id,name,unit,aliases,supported_units,is_active\n"
        "ing_1,Granulated Sugar,lb,white sugar;sugar,lb;cup,true\n"
        "ing_2,All-Purpose Flour,lb,,,\n"
        "ing_3,Whole Milk,gallon,milk,gallon; cup ,no\n"
        ",Nameless Row,lb,,,\n"
    )
    return str(csv_path)


def test_load_inventory_csv(inventory_csv):
    items = load_inventory_csv(inventory_csv)

    assert [item.id for item in items] == ["ing_1", "ing_2", "ing_3"]

    sugar = items[0]
    assert sugar.name == "Granulated Sugar"
    assert sugar.unit == "lb"
    assert sugar.aliases == ("white sugar", "sugar")
    assert sugar.supported_units == ("lb", "cup")
    assert sugar.is_active

    flour = items[1]
    assert flour.aliases == ()
    assert flour.supported_units == ()
    assert flour.is_active

    milk = items[2]
    assert milk.supported_units == ("gallon", "cup")
    assert not milk.is_active


def test_load_inventory_csv_minimal_columns(tmp_path):
    csv_path = tmp_path / "inventory.csv"
    csv_path.write_text("id,name,unit\n101,Butter,lb\n")

    items = load_inventory_csv(str(csv_path))

    assert len(items) == 1
    assert items[0].id == "101"
    assert items[0].aliases == ()
    assert items[0].is_active


def test_load_inventory_csv_missing_column(tmp_path):
    csv_path = tmp_path / "inventory.csv"
    csv_path.write_text("id,name\ning_1,Sugar\n")

    with pytest.raises(ValueError, match="unit"):
        load_inventory_csv(str(csv_path))


def test_load_inventory_csv_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_inventory_csv(str(tmp_path / "missing.csv"))
