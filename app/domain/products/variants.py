"""
Variant combination generator

Builds every combination of the options of a product's variant groups (sizes, colours...)
so each one can carry its own SKU, stock and price.
"""

import itertools
import uuid
from dataclasses import dataclass
from typing import Iterable, Sequence

from .schemas import VariantGroup


class VariantGenerationError(ValueError):
    pass


@dataclass
class VariantCombination:
    id: str
    group_combinations: list[dict]  # [{"group_id": ..., "option_id": ...}]
    sku: str
    stock: int
    price: float
    is_active: bool
    display_name: str


def combination_key(group_combinations: Iterable[dict]) -> str:
    """Order-independent identity of a combination"""
    return "|".join(sorted(f"{gc['group_id']}:{gc['option_id']}" for gc in group_combinations))


def unique_sku(sku: str, taken: set[str]) -> str:
    """
    Option values may contain dashes, so two combinations can join to the same SKU
    ("a-b" + "c" and "a" + "b-c"). Later ones get a numeric suffix.
    """
    candidate = sku
    suffix = 2
    while candidate in taken:
        candidate = f"{sku}-{suffix}"
        suffix += 1
    taken.add(candidate)
    return candidate


def generate_combinations(
    product_key: str,
    groups: Sequence[VariantGroup],
    base_price: float,
    existing: Iterable[Iterable[dict]] = (),
) -> list[VariantCombination]:
    """
    Cartesian product of the group options, first group varying slowest.

    Groups without options are skipped. Combinations already present in ``existing``
    (lists of group/option pairs) are left out.
    """
    if not groups:
        raise VariantGenerationError("You need at least one group with options")

    groups_with_options = [g for g in groups if g.options]
    if not groups_with_options:
        raise VariantGenerationError("Groups need to have options")

    existing_keys = {combination_key(gc) for gc in existing}
    combinations = []
    seen_skus: set[str] = set()

    for options in itertools.product(*(g.options for g in groups_with_options)):
        group_combinations = [
            {"group_id": group.id, "option_id": option.id}
            for group, option in zip(groups_with_options, options)
        ]
        if combination_key(group_combinations) in existing_keys:
            continue

        sku_parts = [product_key] + [option.value.lower() for option in options]
        sku = unique_sku("-".join(part for part in sku_parts if part), seen_skus)
        combinations.append(
            VariantCombination(
                id=uuid.uuid4().hex,
                group_combinations=group_combinations,
                sku=sku,
                stock=0,
                price=base_price,
                is_active=True,
                display_name=" - ".join(option.name for option in options),
            )
        )

    return combinations


def remove_option(
    groups: Sequence[VariantGroup], combinations: Sequence, group_id: str, option_id: str
) -> tuple[list[VariantGroup], list]:
    """Drop an option and every combination using it"""
    updated = [
        g.model_copy(update={"options": [o for o in g.options if o.id != option_id]})
        if g.id == group_id
        else g
        for g in groups
    ]
    kept = [
        c
        for c in combinations
        if not any(gc["option_id"] == option_id for gc in _pairs(c))
    ]
    return updated, kept


def remove_group(
    groups: Sequence[VariantGroup], combinations: Sequence, group_id: str
) -> tuple[list[VariantGroup], list]:
    """Drop a group and every combination using any of its options"""
    updated = [g for g in groups if g.id != group_id]
    kept = [c for c in combinations if not any(gc["group_id"] == group_id for gc in _pairs(c))]
    return updated, kept


def _pairs(combination) -> list[dict]:
    # Works for generated combinations and stored ProductVariant rows
    return combination.group_combinations or []
