import hashlib

from mines_server.models.dc_models import (
    CashoutResponseModel,
    GameResultModel,
    GameSummaryModel,
    RevealResponseModel,
    StartGameResponseModel,
    VerifyModel,
)
from mines_server.models.schema_models import GameSchema


def server_seed_hash(server_seed: str) -> str:
    """SHA-256 of the server seed, safe to publish before the game ends."""
    return hashlib.sha256(server_seed.encode("utf-8")).hexdigest()


class DataConverter:
    """This class is used to convert stored games into the shapes sent to clients."""

    def __init__(self, hide_seed_until_finished: bool = False):
        self.hide_seed_until_finished = hide_seed_until_finished

    def convert_game_to_start_response(self, game: GameSchema) -> StartGameResponseModel:
        return StartGameResponseModel(
            game_id=game.game_id,
            server_seed_public=None if self.hide_seed_until_finished else game.server_seed,
            server_seed_hash=server_seed_hash(game.server_seed),
            nonce=game.nonce,
        )

    def convert_game_to_reveal_response(
        self, game: GameSchema, is_bomb: bool, multiplier: float
    ) -> RevealResponseModel:
        """Convert a game after a reveal to the response for the client

        Args:
            game (GameSchema): The game after the reveal was applied
            is_bomb (bool): Whether the revealed cell was a bomb
            multiplier (float): Multiplier after the reveal, 0 on a bomb

        Returns:
            RevealResponseModel: Bomb positions are only included once the game is lost
        """
        return RevealResponseModel(
            is_bomb=is_bomb,
            opened_cells=list(game.opened_cells),
            multiplier=multiplier,
            finished=game.finished,
            result=game.result,
            bomb_positions=list(game.bomb_positions) if game.result == GameResultModel.lost else None,
        )

    def convert_game_to_cashout_response(self, game: GameSchema) -> CashoutResponseModel:
        return CashoutResponseModel(
            payout_multiplier=game.payout_multiplier,
            opened_cells=list(game.opened_cells),
        )

    def convert_game_to_summary(self, game: GameSchema) -> GameSummaryModel:
        return GameSummaryModel(
            game_id=game.game_id,
            created_at=game.created_at,
            size=game.size,
            bomb_count=game.bomb_count,
            bet=game.bet,
            result=game.result,
            nonce=game.nonce,
        )

    def convert_game_to_verify(self, game: GameSchema) -> VerifyModel:
        """Convert a game to its full disclosure record

        Args:
            game (GameSchema): Stored game

        Returns:
            VerifyModel: Everything needed to recompute the layout and payout.
                With hide_seed_until_finished, the server seed and bomb
                positions of an unfinished game are withheld.
        """
        withhold = self.hide_seed_until_finished and not game.finished
        return VerifyModel(
            game_id=game.game_id,
            created_at=game.created_at,
            size=game.size,
            bomb_count=game.bomb_count,
            total_cells=game.total_cells,
            client_seed=game.client_seed,
            server_seed=None if withhold else game.server_seed,
            server_seed_hash=server_seed_hash(game.server_seed),
            nonce=game.nonce,
            bomb_positions=None if withhold else list(game.bomb_positions),
            opened_cells=list(game.opened_cells),
            finished=game.finished,
            result=game.result,
            payout_multiplier=game.payout_multiplier,
            bet=game.bet,
        )
