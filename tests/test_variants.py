import pytest

from app.domain.products.schemas import VariantGroup, VariantOption
from app.domain.products.variants import (
    VariantGenerationError,
    combination_key,
    generate_combinations,
    remove_group,
    remove_option,
)


@pytest.fixture
def groups():
    """Size (S, M) by colour (Red, Blue)."""
    return [
        VariantGroup(
            id="size",
            name="Size",
            type="size",
            options=[VariantOption(id="s", name="S", value="S"), VariantOption(id="m", name="M", value="M")],
        ),
        VariantGroup(
            id="color",
            name="Color",
            type="color",
            options=[
                VariantOption(id="red", name="Red", value="Red", color_hex="#FF0000"),
                VariantOption(id="blue", name="Blue", value="Blue", color_hex="#0000ff"),
            ],
        ),
    ]


def test_generates_cartesian_product(groups):
    combinations = generate_combinations("tshirt", groups, 19.9)

    assert [c.sku for c in combinations] == [
        "tshirt-s-red",
        "tshirt-s-blue",
        "tshirt-m-red",
        "tshirt-m-blue",
    ]
    assert combinations[0].display_name == "S - Red"
    assert combinations[0].group_combinations == [
        {"group_id": "size", "option_id": "s"},
        {"group_id": "color", "option_id": "red"},
    ]
    assert all(c.price == 19.9 and c.stock == 0 and c.is_active for c in combinations)
    assert len({c.id for c in combinations}) == 4


def test_groups_without_options_are_skipped(groups):
    groups.append(VariantGroup(id="empty", name="Material"))

    assert len(generate_combinations("tshirt", groups, 10)) == 4


def test_requires_groups():
    with pytest.raises(VariantGenerationError):
        generate_combinations("tshirt", [], 10)


def test_requires_options():
    with pytest.raises(VariantGenerationError):
        generate_combinations("tshirt", [VariantGroup(id="empty", name="Material")], 10)


def test_existing_combinations_are_left_out(groups):
    existing = [[{"group_id": "color", "option_id": "red"}, {"group_id": "size", "option_id": "s"}]]

    combinations = generate_combinations("tshirt", groups, 10, existing=existing)

    assert "tshirt-s-red" not in [c.sku for c in combinations]
    assert len(combinations) == 3


def test_combination_key_ignores_order():
    a = [{"group_id": "size", "option_id": "s"}, {"group_id": "color", "option_id": "red"}]

    assert combination_key(a) == combination_key(list(reversed(a)))


def test_remove_option_drops_its_combinations(groups):
    combinations = generate_combinations("tshirt", groups, 10)

    updated, kept = remove_option(groups, combinations, "color", "red")

    assert [o.id for o in updated[1].options] == ["blue"]
    assert [c.sku for c in kept] == ["tshirt-s-blue", "tshirt-m-blue"]


def test_remove_group_drops_its_combinations(groups):
    combinations = generate_combinations("tshirt", groups, 10)

    updated, kept = remove_group(groups, combinations, "size")

    assert [g.id for g in updated] == ["color"]
    assert kept == []


def test_color_hex_is_validated():
    with pytest.raises(ValueError):
        VariantOption(name="Red", value="red", color_hex="red")


def test_colliding_skus_get_a_suffix():
    groups = [
        VariantGroup(
            id="size",
            name="Size",
            options=[VariantOption(id="ab", name="A-B", value="a-b"), VariantOption(id="a", name="A", value="a")],
        ),
        VariantGroup(
            id="color",
            name="Color",
            options=[VariantOption(id="c", name="C", value="c"), VariantOption(id="bc", name="B-C", value="b-c")],
        ),
    ]

    skus = [c.sku for c in generate_combinations("tshirt", groups, 10)]

    assert skus == ["tshirt-a-b-c", "tshirt-a-b-b-c", "tshirt-a-c", "tshirt-a-b-c-2"]
