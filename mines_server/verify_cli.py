"""Recompute a finished game from its disclosed seeds, without the server.

    mines-verify --server-seed S --client-seed C --nonce 1 --size 5 --bombs 3 --opened 4 7
"""

import argparse
import json
import sys

from mines_server.converter import server_seed_hash
from mines_server.domain.fair_rng import commitment_digest, fold_seed, generate_bomb_positions
from mines_server.domain.game_state import validate_game_parameters
from mines_server.domain.payout import compute_multiplier, multiplier_table
from mines_server.exceptions import (
    CellAlreadyOpenedError,
    InvalidIndexError,
    InvalidParametersError,
    MinesError,
)


def get_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Verify a provably-fair Mines game")
    parser.add_argument("--server-seed", type=str, help="Disclosed server seed", required=True)
    parser.add_argument("--client-seed", type=str, help="Client seed", required=True)
    parser.add_argument("--nonce", type=int, help="Game nonce", required=True)
    parser.add_argument("--size", type=int, help="Grid side length", required=True)
    parser.add_argument("--bombs", type=int, help="Bomb count", required=True)
    parser.add_argument(
        "--opened", type=int, nargs="*", default=None, help="Opened cells, in reveal order"
    )
    return parser


def verify(server_seed: str, client_seed: str, nonce: int, size: int, bombs: int, opened=None) -> dict:
    """Rebuild the layout and, when opened cells are given, the game outcome

    Returns:
        dict: digest, folded seed, bomb positions and either the full
            multiplier table or the outcome of the opened cells

    Raises:
        InvalidParametersError, InvalidIndexError, CellAlreadyOpenedError:
            when the parameters or the opened cells could not come from a real game
    """
    total_cells = validate_game_parameters(size, bombs, client_seed)
    digest = commitment_digest(server_seed, client_seed, nonce)
    bomb_positions = generate_bomb_positions(server_seed, client_seed, nonce, total_cells, bombs)
    report = {
        "server_seed_hash": server_seed_hash(server_seed),
        "hmac_sha512": digest,
        "folded_seed": fold_seed(digest),
        "total_cells": total_cells,
        "bomb_positions": bomb_positions,
    }
    if opened is None:
        report["multipliers"] = multiplier_table(total_cells, bombs)
        return report

    safe_opened = 0
    hit_bomb = False
    seen = set()
    for index in opened:
        if hit_bomb:
            raise InvalidParametersError("opened cells continue after a bomb")
        if not 0 <= index < total_cells:
            raise InvalidIndexError(index, total_cells)
        if index in seen:
            raise CellAlreadyOpenedError(index)
        seen.add(index)
        if index in bomb_positions:
            hit_bomb = True
        else:
            safe_opened += 1
    report["opened_cells"] = list(opened)
    report["hit_bomb"] = hit_bomb
    report["multiplier"] = 0.0 if hit_bomb else compute_multiplier(total_cells, bombs, safe_opened)
    return report


def main(argv=None) -> int:
    args = get_parser().parse_args(argv)
    try:
        report = verify(
            args.server_seed, args.client_seed, args.nonce, args.size, args.bombs, args.opened
        )
    except MinesError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2
    print(json.dumps(report, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
