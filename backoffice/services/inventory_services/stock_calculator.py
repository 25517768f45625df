# backoffice/services/inventory_services/stock_calculator.py
import math
from dataclasses import dataclass
from typing import Hashable, Iterable, Mapping

from backoffice.utils.decimal_utils import as_number


@dataclass(frozen=True)
class RecipeLine:
    ingredient_id: Hashable
    quantity_required: float


def theoretical_stock(recipe_lines: Iterable[RecipeLine], stock_by_ingredient: Mapping) -> int:
    """
    How many units of a product can be made from the ingredient stock on hand.

    The scarcest ingredient decides. An empty recipe yields 0 rather than an
    unbounded number, and any missing ingredient floors the result to 0.
    """
    portions = []
    for line in recipe_lines:
        required = as_number(line.quantity_required)
        if required <= 0:
            continue
        available = as_number(stock_by_ingredient.get(line.ingredient_id))
        if available <= 0:
            return 0
        portions.append(available / required)

    if not portions:
        return 0
    return int(math.floor(min(portions)))


def recipe_cost(recipe_lines: Iterable[RecipeLine], unit_cost_by_ingredient: Mapping) -> float:
    return sum((
        as_number(unit_cost_by_ingredient.get(line.ingredient_id)) * as_number(line.quantity_required)
        for line in recipe_lines
    ), 0.0)
