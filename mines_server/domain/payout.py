"""Payout multiplier for a number of safely opened cells."""

from decimal import ROUND_HALF_UP, Context, Decimal

HOUSE_EDGE = 0.98
MULTIPLIER_QUANTUM = Decimal("0.000001")
# At or above 1e21 six-decimal rounding no longer applies; the value is kept as is.
UNROUNDED_THRESHOLD = 1e21
ROUNDING_CONTEXT = Context(prec=64, rounding=ROUND_HALF_UP)


def round_multiplier(value: float) -> float:
    """Round half-up to six decimals on the exact binary value of the float."""
    if abs(value) >= UNROUNDED_THRESHOLD:
        return value
    return float(Decimal(value).quantize(MULTIPLIER_QUANTUM, context=ROUNDING_CONTEXT))


def survival_probability(total_cells: int, bomb_count: int, safe_opened: int) -> float:
    """Probability of opening safe_opened cells in a row without hitting a bomb."""
    survival = 1.0
    for i in range(safe_opened):
        remaining_safe = (total_cells - bomb_count) - i
        remaining_cells = total_cells - i
        if remaining_cells <= 0:
            return 0.0
        survival *= remaining_safe / remaining_cells
    return survival


def compute_multiplier(total_cells: int, bomb_count: int, safe_opened: int) -> float:
    """Fair-odds multiplier discounted by the house edge.

    Args:
        total_cells (int): Number of cells on the grid
        bomb_count (int): Number of bombs on the grid
        safe_opened (int): Safe cells opened so far

    Returns:
        float: 1 when nothing is opened, 0 when the draw is impossible,
            HOUSE_EDGE / survival rounded to six decimals otherwise
    """
    if safe_opened <= 0:
        return 1.0
    survival = survival_probability(total_cells, bomb_count, safe_opened)
    if survival <= 0:
        return 0.0
    return round_multiplier(HOUSE_EDGE / survival)


def multiplier_table(total_cells: int, bomb_count: int) -> list[float]:
    """Multipliers for 0..(total_cells - bomb_count) safe cells."""
    return [
        compute_multiplier(total_cells, bomb_count, k)
        for k in range(total_cells - bomb_count + 1)
    ]
