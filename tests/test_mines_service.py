import asyncio
import hashlib
import unittest
import uuid

from mines_server.domain.fair_rng import generate_bomb_positions
from mines_server.domain.payout import compute_multiplier
from mines_server.exceptions import (
    CellAlreadyOpenedError,
    GameAlreadyFinishedError,
    GameNotFoundError,
    InvalidIndexError,
    InvalidParametersError,
)
from mines_server.models.dc_models import GameResultModel
from mines_server.services.game_store import InMemoryGameStore
from tests.helpers import SlowGameStore, make_engine


class TestStartGame(unittest.IsolatedAsyncioTestCase):
    async def test_start_returns_seed_hash_and_nonce(self):
        engine = make_engine()
        started = await engine.start_game(4, 3, "abc", bet=10)
        self.assertEqual(started.server_seed_public, "seed123")
        self.assertEqual(started.server_seed_hash, hashlib.sha256(b"seed123").hexdigest())
        self.assertEqual(started.nonce, 1)

    async def test_fixed_seeds_give_stable_layout(self):
        expected = [3, 9, 10]
        self.assertEqual(generate_bomb_positions("seed123", "abc", 1, 16, 3), expected)
        for _ in range(3):
            engine = make_engine()
            started = await engine.start_game(4, 3, "abc")
            verified = await engine.verify_game(started.game_id)
            self.assertEqual(verified.bomb_positions, expected)
            self.assertEqual(len(verified.bomb_positions), 3)

    async def test_nonce_strictly_increases(self):
        engine = make_engine()
        nonces = [(await engine.start_game(3, 1, "abc")).nonce for _ in range(5)]
        self.assertEqual(nonces, [1, 2, 3, 4, 5])

    async def test_concurrent_starts_get_distinct_nonces(self):
        engine = make_engine(store=SlowGameStore())
        results = await asyncio.gather(*(engine.start_game(3, 1, f"c{i}") for i in range(8)))
        self.assertEqual(sorted(r.nonce for r in results), list(range(1, 9)))

    async def test_invalid_parameters_have_no_side_effects(self):
        store = InMemoryGameStore()
        engine = make_engine(store=store, max_grid_size=10)
        for args in ((0, 1, "abc"), (4, 0, "abc"), (4, 16, "abc"), (4, 3, ""), (11, 3, "abc")):
            with self.subTest(args=args):
                with self.assertRaises(InvalidParametersError):
                    await engine.start_game(*args)
        self.assertEqual(store.games, {})
        self.assertEqual((await engine.start_game(4, 3, "abc")).nonce, 1)


class TestRevealAndCashout(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        self.engine = make_engine()
        started = await self.engine.start_game(4, 3, "abc")
        self.game_id = started.game_id
        self.bombs = (await self.engine.verify_game(self.game_id)).bomb_positions
        self.safe = [i for i in range(16) if i not in self.bombs]

    async def test_no_double_reveal(self):
        first = await self.engine.reveal_cell(self.game_id, self.safe[0])
        self.assertFalse(first.is_bomb)
        self.assertEqual(first.opened_cells, [self.safe[0]])
        self.assertEqual(first.multiplier, compute_multiplier(16, 3, 1))
        self.assertIsNone(first.bomb_positions)
        with self.assertRaises(CellAlreadyOpenedError):
            await self.engine.reveal_cell(self.game_id, self.safe[0])
        verified = await self.engine.verify_game(self.game_id)
        self.assertEqual(verified.opened_cells, [self.safe[0]])

    async def test_reveal_bomb_loses(self):
        await self.engine.reveal_cell(self.game_id, self.safe[0])
        lost = await self.engine.reveal_cell(self.game_id, self.bombs[0])
        self.assertTrue(lost.is_bomb)
        self.assertEqual(lost.multiplier, 0)
        self.assertTrue(lost.finished)
        self.assertEqual(lost.result, GameResultModel.lost)
        self.assertEqual(lost.bomb_positions, self.bombs)
        with self.assertRaises(GameAlreadyFinishedError):
            await self.engine.reveal_cell(self.game_id, self.safe[1])
        with self.assertRaises(GameAlreadyFinishedError):
            await self.engine.cashout(self.game_id)

    async def test_terminal_record_never_changes(self):
        await self.engine.reveal_cell(self.game_id, self.safe[0])
        await self.engine.cashout(self.game_id)
        before = await self.engine.verify_game(self.game_id)
        for call in (
            self.engine.reveal_cell(self.game_id, self.safe[1]),
            self.engine.reveal_cell(self.game_id, self.bombs[0]),
            self.engine.cashout(self.game_id),
        ):
            with self.assertRaises(GameAlreadyFinishedError):
                await call
        self.assertEqual(await self.engine.verify_game(self.game_id), before)

    async def test_clear_board_then_cashout(self):
        for index in self.safe:
            response = await self.engine.reveal_cell(self.game_id, index)
            self.assertFalse(response.finished)
        cashed = await self.engine.cashout(self.game_id)
        self.assertEqual(cashed.payout_multiplier, compute_multiplier(16, 3, 13))
        verified = await self.engine.verify_game(self.game_id)
        self.assertEqual(verified.result, GameResultModel.cashed)
        self.assertEqual(verified.payout_multiplier, cashed.payout_multiplier)

    async def test_invalid_index(self):
        for index in (-1, 16):
            with self.assertRaises(InvalidIndexError):
                await self.engine.reveal_cell(self.game_id, index)
        self.assertEqual((await self.engine.verify_game(self.game_id)).opened_cells, [])

    async def test_unknown_game(self):
        missing = uuid.uuid4()
        with self.assertRaises(GameNotFoundError):
            await self.engine.reveal_cell(missing, 0)
        with self.assertRaises(GameNotFoundError):
            await self.engine.cashout(missing)
        with self.assertRaises(GameNotFoundError):
            await self.engine.verify_game(missing)

    async def test_finished_game_lock_is_released(self):
        await self.engine.cashout(self.game_id)
        self.assertEqual(self.engine.lock_manager.active_count(), 0)

    async def test_dense_board_can_be_cleared(self):
        started = await self.engine.start_game(10, 50, "abc")
        bombs = (await self.engine.verify_game(started.game_id)).bomb_positions
        safe = [i for i in range(100) if i not in bombs]
        for count, index in enumerate(safe, start=1):
            response = await self.engine.reveal_cell(started.game_id, index)
            self.assertEqual(response.multiplier, compute_multiplier(100, 50, count))
        cashed = await self.engine.cashout(started.game_id)
        self.assertEqual(cashed.payout_multiplier, compute_multiplier(100, 50, 50))
        self.assertEqual(len(cashed.opened_cells), 50)


class TestConcurrentReveals(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        self.engine = make_engine(store=SlowGameStore())
        self.game_id = (await self.engine.start_game(5, 2, "abc")).game_id
        bombs = (await self.engine.verify_game(self.game_id)).bomb_positions
        self.safe = [i for i in range(25) if i not in bombs]

    async def test_same_cell_opened_once(self):
        results = await asyncio.gather(
            *(self.engine.reveal_cell(self.game_id, self.safe[0]) for _ in range(6)),
            return_exceptions=True,
        )
        successes = [r for r in results if not isinstance(r, Exception)]
        failures = [r for r in results if isinstance(r, Exception)]
        self.assertEqual(len(successes), 1)
        self.assertTrue(all(isinstance(f, CellAlreadyOpenedError) for f in failures))
        self.assertEqual((await self.engine.verify_game(self.game_id)).opened_cells, [self.safe[0]])

    async def test_distinct_cells_all_opened(self):
        cells = self.safe[:5]
        await asyncio.gather(*(self.engine.reveal_cell(self.game_id, i) for i in cells))
        opened = (await self.engine.verify_game(self.game_id)).opened_cells
        self.assertEqual(sorted(opened), sorted(cells))

    async def test_double_cashout_settles_once(self):
        results = await asyncio.gather(
            self.engine.cashout(self.game_id),
            self.engine.cashout(self.game_id),
            return_exceptions=True,
        )
        self.assertEqual(sum(isinstance(r, GameAlreadyFinishedError) for r in results), 1)


class TestHistoryAndVerify(unittest.IsolatedAsyncioTestCase):
    async def test_history_most_recent_first(self):
        engine = make_engine(history_limit=3)
        for i in range(5):
            await engine.start_game(3, 1, "abc", bet=i)
        history = await engine.get_history()
        self.assertEqual([g.nonce for g in history], [5, 4, 3])
        self.assertEqual(history[0].bet, 4.0)
        self.assertEqual([g.nonce for g in await engine.get_history(1)], [5])
        self.assertEqual(len(await engine.get_history(50)), 3)

    async def test_verify_discloses_active_game_by_default(self):
        engine = make_engine()
        game_id = (await engine.start_game(3, 2, "abc")).game_id
        verified = await engine.verify_game(game_id)
        self.assertEqual(verified.server_seed, "seed123")
        self.assertEqual(verified.bomb_positions, generate_bomb_positions("seed123", "abc", 1, 9, 2))
        self.assertFalse(verified.finished)
        self.assertIsNone(verified.result)

    async def test_hidden_seed_until_finished(self):
        engine = make_engine(hide_seed_until_finished=True)
        started = await engine.start_game(3, 2, "abc")
        self.assertIsNone(started.server_seed_public)
        self.assertEqual(started.server_seed_hash, hashlib.sha256(b"seed123").hexdigest())
        hidden = await engine.verify_game(started.game_id)
        self.assertIsNone(hidden.server_seed)
        self.assertIsNone(hidden.bomb_positions)
        await engine.cashout(started.game_id)
        disclosed = await engine.verify_game(started.game_id)
        self.assertEqual(disclosed.server_seed, "seed123")
        self.assertEqual(len(disclosed.bomb_positions), 2)


if __name__ == "__main__":
    unittest.main()
