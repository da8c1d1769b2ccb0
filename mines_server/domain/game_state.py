"""Game lifecycle rules: Active -> Lost | Cashed.

Functions here validate first and mutate last, so a rejected call leaves the
game untouched. Persisting the mutated game is the caller's job.
"""

from mines_server.domain.payout import compute_multiplier
from mines_server.exceptions import (
    CellAlreadyOpenedError,
    GameAlreadyFinishedError,
    InvalidIndexError,
    InvalidParametersError,
)
from mines_server.models.dc_models import GameResultModel
from mines_server.models.schema_models import GameSchema


def validate_game_parameters(
    size, bomb_count, client_seed, bet: float = 0.0, max_grid_size: int | None = None
) -> int:
    """Check start parameters and return the number of cells on the grid.

    Raises:
        InvalidParametersError: size is not a positive integer (or exceeds max_grid_size),
            bomb_count is outside [1, size*size - 1], client_seed is empty, or bet is negative
    """
    if isinstance(size, bool) or not isinstance(size, int) or size <= 0:
        raise InvalidParametersError("invalid size")
    if max_grid_size is not None and size > max_grid_size:
        raise InvalidParametersError(f"size must not exceed {max_grid_size}")
    total_cells = size * size
    if isinstance(bomb_count, bool) or not isinstance(bomb_count, int):
        raise InvalidParametersError("invalid bombs count")
    if bomb_count < 1 or bomb_count >= total_cells:
        raise InvalidParametersError("invalid bombs count")
    if not isinstance(client_seed, str) or not client_seed:
        raise InvalidParametersError("missing client seed")
    if bet is None or bet < 0:
        raise InvalidParametersError("invalid bet")
    return total_cells


def ensure_active(game: GameSchema) -> None:
    if game.finished:
        raise GameAlreadyFinishedError(game.game_id)


def safe_cells(game: GameSchema) -> int:
    return game.total_cells - game.bomb_count


def current_multiplier(game: GameSchema) -> float:
    if game.result == GameResultModel.lost:
        return 0.0
    return compute_multiplier(game.total_cells, game.bomb_count, len(game.opened_cells))


def open_cell(game: GameSchema, index) -> tuple[bool, float]:
    """Reveal one cell.

    Args:
        game (GameSchema): Active game, mutated in place on success
        index (int): Cell to reveal

    Returns:
        tuple[bool, float]: Whether the cell holds a bomb and the multiplier after the reveal
    """
    ensure_active(game)
    if isinstance(index, bool) or not isinstance(index, int) or not 0 <= index < game.total_cells:
        raise InvalidIndexError(index, game.total_cells)
    if index in game.opened_cells:
        raise CellAlreadyOpenedError(index)

    # Stays open after the last safe cell; settling needs an explicit cashout.
    game.opened_cells = [*game.opened_cells, index]
    if index in game.bomb_positions:
        game.finished = True
        game.result = GameResultModel.lost
        return True, 0.0
    return False, current_multiplier(game)


def cash_out(game: GameSchema) -> float:
    """Settle an active game at the multiplier for its opened cells."""
    ensure_active(game)
    multiplier = current_multiplier(game)
    game.finished = True
    game.result = GameResultModel.cashed
    game.payout_multiplier = multiplier
    return multiplier
