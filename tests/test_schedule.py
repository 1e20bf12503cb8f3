"""Unit tests for the Schedule query and mutation surface."""

import unittest

from round_robin.models import Competitor, Game, Schedule


def make_schedule(num_games=7, games_per_full_round=3):
    """Schedule of distinct games cycling over four competitors"""
    players = [Competitor(f"P{i}") for i in range(1, 5)]
    games = [
        Game(players[i % 4], players[(i + 1) % 4]) for i in range(num_games)
    ]
    return Schedule(games, games_per_full_round), players


class TestScheduleQueries(unittest.TestCase):
    """Test lookups by position and by round"""

    def setUp(self):
        self.schedule, self.players = make_schedule()

    def test_game_at(self):
        """Test in-range and out-of-range lookups"""
        self.assertIs(self.schedule.game_at(0), self.schedule.games[0])
        self.assertIs(self.schedule.game_at(6), self.schedule.games[6])
        self.assertIsNone(self.schedule.game_at(7))
        self.assertIsNone(self.schedule.game_at(-1))

    def test_games_in_round(self):
        """Test round slicing, including the partial round and beyond the end"""
        self.assertEqual(self.schedule.games_in_round(0), self.schedule.games[0:3])
        self.assertEqual(self.schedule.games_in_round(1), self.schedule.games[3:6])
        self.assertEqual(self.schedule.games_in_round(2), self.schedule.games[6:7])
        self.assertEqual(self.schedule.games_in_round(3), [])
        self.assertEqual(self.schedule.games_in_round(-1), [])

    def test_num_rounds(self):
        """Test ceil(total / games per full round)"""
        self.assertEqual(self.schedule.num_rounds(), 3)
        self.assertEqual(make_schedule(6, 3)[0].num_rounds(), 2)
        self.assertEqual(make_schedule(0, 3)[0].num_rounds(), 0)

    def test_round_of(self):
        self.assertEqual(self.schedule.round_of(0), 0)
        self.assertEqual(self.schedule.round_of(5), 1)
        self.assertEqual(self.schedule.round_of(6), 2)
        self.assertIsNone(self.schedule.round_of(7))

    def test_games_in_round_returns_copy(self):
        """Test that mutating a returned round leaves the schedule alone"""
        self.schedule.games_in_round(0).clear()
        self.assertEqual(len(self.schedule), 7)

    def test_invalid_round_size(self):
        with self.assertRaises(ValueError):
            Schedule([], 0)


class TestMoveGame(unittest.TestCase):
    """Test reordering semantics: the target index is counted before removal"""

    def setUp(self):
        self.schedule, _ = make_schedule(5, 3)
        self.original = list(self.schedule.games)

    def order(self, *indices):
        return [self.original[i] for i in indices]

    def test_move_forward(self):
        self.schedule.move_game(0, 3)
        self.assertEqual(self.schedule.games, self.order(1, 2, 0, 3, 4))

    def test_move_backward(self):
        self.schedule.move_game(3, 1)
        self.assertEqual(self.schedule.games, self.order(0, 3, 1, 2, 4))

    def test_move_to_end(self):
        self.schedule.move_game(1, 5)
        self.assertEqual(self.schedule.games, self.order(0, 2, 3, 4, 1))

    def test_move_to_own_position_is_noop(self):
        """Test both the same index and the slot just after it"""
        self.schedule.move_game(2, 2)
        self.assertEqual(self.schedule.games, self.original)
        self.schedule.move_game(2, 3)
        self.assertEqual(self.schedule.games, self.original)

    def test_moves_are_reversible(self):
        self.schedule.move_game(0, 4)
        self.schedule.move_game(3, 0)
        self.assertEqual(self.schedule.games, self.original)

    def test_move_from_out_of_range(self):
        with self.assertRaises(IndexError):
            self.schedule.move_game(5, 0)
        self.assertEqual(self.schedule.games, self.original)

    def test_move_to_out_of_range(self):
        """Test that a bad target leaves the order untouched"""
        with self.assertRaises(IndexError):
            self.schedule.move_game(1, -1)
        with self.assertRaises(IndexError):
            self.schedule.move_game(1, 6)
        self.assertEqual(self.schedule.games, self.original)
        self.assertEqual(len(self.schedule), 5)


class TestScheduleBookkeeping(unittest.TestCase):
    """Test played flags, results, renaming and clearing"""

    def setUp(self):
        self.schedule, self.players = make_schedule(4, 3)

    def test_mark_played_is_idempotent(self):
        self.schedule.mark_played(1)
        self.schedule.mark_played(1)
        self.assertTrue(self.schedule.games[1].played)
        self.assertEqual(self.schedule.num_games_remaining(), 3)

    def test_mark_played_out_of_range(self):
        with self.assertRaises(IndexError):
            self.schedule.mark_played(10)

    def test_next_game(self):
        """Test that the next game is the first unplayed one in schedule order"""
        self.assertIs(self.schedule.next_game(), self.schedule.games[0])
        self.schedule.mark_played(0)
        self.schedule.mark_played(2)
        self.assertEqual(self.schedule.next_game_index(), 1)
        for index in range(4):
            self.schedule.mark_played(index)
        self.assertIsNone(self.schedule.next_game())
        self.assertEqual(self.schedule.num_games_remaining(), 0)

    def test_record_result(self):
        """Test that a result updates both competitors and marks the game played"""
        game = self.schedule.record_result(0, 21, 15)
        self.assertTrue(game.played)
        winner, loser = game.competitor_a, game.competitor_b

        self.assertEqual(winner.wins, 1)
        self.assertEqual(winner.games_played, 1)
        self.assertEqual(winner.ratio, 1.4)
        self.assertEqual(loser.wins, 0)
        self.assertEqual(loser.games_played, 1)
        self.assertEqual(loser.ratio, 0.71)

    def test_record_result_rejects_ties_and_replays(self):
        with self.assertRaises(ValueError):
            self.schedule.record_result(0, 11, 11)
        self.assertFalse(self.schedule.games[0].played)

        self.schedule.record_result(0, 11, 5)
        with self.assertRaises(ValueError):
            self.schedule.record_result(0, 11, 5)

    def test_rename_cascades_by_identity(self):
        """Test that only the renamed competitor's slots change, even with duplicate names"""
        twin = self.players[2]
        twin.name = self.players[0].name  # Two competitors called "P1"
        self.schedule.rename_competitor(twin)
        before = [(g.name_a, g.name_b) for g in self.schedule.games]

        updated = self.schedule.rename_competitor(self.players[0], "Alice")

        expected_slots = sum(1 for g in self.schedule.games if g.involves(self.players[0]))
        self.assertEqual(updated, expected_slots)
        for game, (name_a, name_b) in zip(self.schedule.games, before):
            self.assertEqual(
                game.name_a, "Alice" if game.competitor_a is self.players[0] else name_a
            )
            self.assertEqual(
                game.name_b, "Alice" if game.competitor_b is self.players[0] else name_b
            )
        self.assertEqual(twin.name, "P1")
        self.assertIn("Alice VS", str(self.schedule.games[0]))

    def test_clear(self):
        self.assertFalse(self.schedule.is_empty())
        self.schedule.clear()
        self.assertTrue(self.schedule.is_empty())
        self.assertEqual(self.schedule.num_rounds(), 0)
        self.assertIsNone(self.schedule.game_at(0))
        self.assertIsNone(self.schedule.next_game())


class TestModels(unittest.TestCase):
    """Test basic model behaviour"""

    def test_game_rejects_self_pairing(self):
        player = Competitor("Solo")
        with self.assertRaises(ValueError):
            Game(player, player)

    def test_competitor_identity(self):
        """Test that two competitors with the same name are different competitors"""
        self.assertNotEqual(Competitor("Sam"), Competitor("Sam"))

    def test_ratio_with_no_rallies_lost(self):
        player = Competitor("Ace")
        player.record_result(21, 0)
        self.assertEqual(player.ratio, 21.0)
        self.assertEqual(Competitor("New").ratio, 0.0)
