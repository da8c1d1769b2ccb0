"""Errors raised by the Mines engine.

The router is the only place that turns these into HTTP responses.
"""


class MinesError(Exception):
    """Base class for every engine error."""


class InvalidParametersError(MinesError, ValueError):
    """Grid size, bomb count, client seed or bet rejected at game start."""


class GameNotFoundError(MinesError):
    def __init__(self, game_id):
        super().__init__(f"game not found: {game_id}")
        self.game_id = game_id


class GameAlreadyFinishedError(MinesError):
    def __init__(self, game_id):
        super().__init__(f"game already finished: {game_id}")
        self.game_id = game_id


class InvalidIndexError(MinesError):
    def __init__(self, index, total_cells: int):
        super().__init__(f"invalid index {index}, expected 0 <= index < {total_cells}")
        self.index = index
        self.total_cells = total_cells


class CellAlreadyOpenedError(MinesError):
    def __init__(self, index: int):
        super().__init__(f"cell already opened: {index}")
        self.index = index


class GameStoreError(MinesError):
    """The persistence layer failed; the request must not be reported as done."""


class ConcurrentUpdateError(GameStoreError):
    """The record changed since it was read."""
