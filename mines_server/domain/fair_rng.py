"""Seed mixing and bomb layout.

A game layout is a pure function of (server_seed, client_seed, nonce, total_cells, bomb_count):

    digest  = HMAC-SHA512(key=server_seed, msg=f"{client_seed}:{nonce}")
    seed    = XOR of the first four 8-hex-digit chunks of digest
    stream  = 32-bit mixing generator seeded with seed
    layout  = first bomb_count cells of a Fisher-Yates shuffle driven by stream, sorted

Every step works on unsigned 32-bit integers so that any third party
reimplementing it gets the same cells.
"""

import hashlib
import hmac
import math
from typing import List

UINT32_MASK = 0xFFFFFFFF
ZERO_SEED_SUBSTITUTE = 0x9E3779B9
STREAM_INCREMENT = 0x6D2B79F5
STREAM_RESOLUTION = 1000000

FOLD_HEX_CHARS = 32
FOLD_CHUNK = 8


def commitment_digest(server_seed: str, client_seed: str, nonce: int) -> str:
    """Return the hex HMAC-SHA512 of f"{client_seed}:{nonce}" keyed by server_seed."""
    message = f"{client_seed}:{nonce}".encode("utf-8")
    return hmac.new(server_seed.encode("utf-8"), message, hashlib.sha512).hexdigest()


def fold_seed(hex_digest: str) -> int:
    """Fold the head of a hex digest into a non-zero 32-bit seed.

    Args:
        hex_digest (str): Hex string, normally an HMAC digest

    Returns:
        int: XOR of the 8-character chunks within the first 32 characters
    """
    seed = 0
    for i in range(0, min(FOLD_HEX_CHARS, len(hex_digest)), FOLD_CHUNK):
        chunk = hex_digest[i:i + FOLD_CHUNK].ljust(FOLD_CHUNK, "0")
        try:
            part = int(chunk, 16)
        except ValueError:
            part = 0
        seed ^= part
    seed &= UINT32_MASK
    if seed == 0:
        seed = ZERO_SEED_SUBSTITUTE
    return seed


class FairRandom:
    """Fast deterministic stream of floats in [0, 1) with six decimal digits.

    Not suitable for anything but shuffling; unpredictability comes from the
    HMAC commitment used to seed it.
    """

    def __init__(self, seed: int):
        self.state = seed & UINT32_MASK

    def next_state(self) -> int:
        s = self.state
        mixed = ((s ^ (s >> 15)) * (s | 1)) & UINT32_MASK
        self.state = (mixed + STREAM_INCREMENT) & UINT32_MASK
        return self.state

    def random(self) -> float:
        return (self.next_state() % STREAM_RESOLUTION) / STREAM_RESOLUTION

    @classmethod
    def from_seeds(cls, server_seed: str, client_seed: str, nonce: int) -> "FairRandom":
        return cls(fold_seed(commitment_digest(server_seed, client_seed, nonce)))


def shuffle_cells(rnd: FairRandom, total_cells: int) -> List[int]:
    """Fisher-Yates shuffle of range(total_cells), last index down to 1."""
    cells = list(range(total_cells))
    for i in range(total_cells - 1, 0, -1):
        j = math.floor(rnd.random() * (i + 1))
        cells[i], cells[j] = cells[j], cells[i]
    return cells


def generate_bomb_positions(
    server_seed: str,
    client_seed: str,
    nonce: int,
    total_cells: int,
    bomb_count: int,
) -> List[int]:
    """Commit the bomb layout of a game.

    Args:
        server_seed (str): Seed derived from the public entropy source
        client_seed (str): Seed chosen by the player
        nonce (int): Sequence position of the game
        total_cells (int): Number of cells on the grid
        bomb_count (int): Number of bombs to place

    Returns:
        List[int]: bomb_count distinct cell indices, ascending
    """
    if total_cells <= 0:
        raise ValueError("total_cells must be positive")
    if bomb_count < 0 or bomb_count > total_cells:
        raise ValueError("bomb_count must be between 0 and total_cells")

    rnd = FairRandom.from_seeds(server_seed, client_seed, nonce)
    cells = shuffle_cells(rnd, total_cells)
    return sorted(cells[:bomb_count])
