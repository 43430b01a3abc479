"""Tests for the bot's move selection."""

import random

import pytest

from game.ai import DIFFICULTIES, choose_move, normalize_difficulty, strategic_move
from game.logic import GameState


class FixedRoll(random.Random):
    """Random whose `random()` always returns the same roll."""

    def __init__(self, roll, seed=0):
        super().__init__(seed)
        self.roll = roll

    def random(self):
        return self.roll


def _game_on_board(cells, board=4, player=0):
    game = GameState()
    game.boards[board] = list(cells)
    game.active_board = board
    game.current_player = player
    return game


def test_difficulty_table():
    assert DIFFICULTIES == {'easy': 0.5, 'medium': 0.75, 'hard': 0.95, 'impossible': 1.0}
    assert normalize_difficulty('nightmare') == 'easy'


def test_no_move_when_game_is_over():
    game = GameState()
    game.winner = "X"
    assert choose_move(game, 'impossible') is None


@pytest.mark.parametrize("seed", range(10))
def test_impossible_takes_the_win(seed):
    game = _game_on_board(["X", "X", None,
                           None, None, None,
                           None, "O", "O"])
    assert choose_move(game, 'impossible', rng=random.Random(seed)) == (4, 2)


@pytest.mark.parametrize("seed", range(10))
def test_win_beats_block(seed):
    game = _game_on_board(["O", "O", None,
                           None, None, None,
                           "X", "X", None])
    assert choose_move(game, 'impossible', rng=random.Random(seed)) == (4, 8)


def test_blocks_opponent_line():
    game = _game_on_board(["O", "O", None,
                           None, None, None,
                           None, "X", None])
    assert choose_move(game, 'impossible', rng=random.Random(1)) == (4, 2)


def test_bot_plays_for_whoever_is_to_move():
    game = _game_on_board(["O", "O", None,
                           None, None, None,
                           "X", None, None], player=1)
    assert choose_move(game, 'impossible', rng=random.Random(1)) == (4, 2)


def test_prefers_center_on_empty_board():
    game = GameState()
    for seed in range(10):
        b, c = choose_move(game, 'impossible', rng=random.Random(seed))
        assert c == 4


def test_prefers_corner_when_center_taken():
    game = _game_on_board([None, None, None,
                           None, "O", None,
                           None, None, None], board=0)
    for seed in range(10):
        assert choose_move(game, 'impossible', rng=random.Random(seed)) in {(0, 0), (0, 2), (0, 6), (0, 8)}


def test_impossible_looks_for_forks_before_center():
    game = _game_on_board(["X", None, None,
                           None, None, "X",
                           None, "O", None], board=0)
    picks = {choose_move(game, 'impossible', rng=random.Random(seed)) for seed in range(60)}
    assert picks <= {(0, 2), (0, 3), (0, 4), (0, 8)}
    assert (0, 3) in picks


def test_lower_tiers_skip_forks():
    game = _game_on_board(["X", None, None,
                           None, None, "X",
                           None, "O", None], board=0)
    moves = game.valid_moves()
    for seed in range(10):
        assert strategic_move(game, moves, top_tier=False, rng=random.Random(seed)) == (0, 4)


def test_top_tier_avoids_handing_opponent_two_in_a_row():
    game = _game_on_board(["O", None, None,
                           None, None, None,
                           None, None, None], board=0)
    moves = [(0, 1), (0, 5)]
    for seed in range(10):
        assert strategic_move(game, moves, top_tier=True, rng=random.Random(seed)) == (0, 5)


def test_top_tier_judges_the_board_being_played():
    game = GameState()
    game.boards[1][0] = "O"
    game.boards[1][1] = "O"
    picks = {strategic_move(game, [(0, 1), (0, 3)], top_tier=True, rng=random.Random(s)) for s in range(30)}
    assert picks == {(0, 1), (0, 3)}


def test_top_tier_falls_back_when_every_move_hands_over_a_line():
    game = _game_on_board(["O", None, None,
                           None, None, None,
                           None, None, None], board=0)
    picks = {strategic_move(game, [(0, 1), (0, 3)], top_tier=True, rng=random.Random(s)) for s in range(30)}
    assert picks == {(0, 1), (0, 3)}


def test_good_roll_plays_strategically():
    game = _game_on_board(["X", "X", None,
                           None, None, None,
                           None, None, None])
    assert choose_move(game, 'easy', rng=FixedRoll(0.1)) == (4, 2)


def test_bad_roll_plays_randomly_but_legally():
    game = GameState()
    picks = {choose_move(game, 'easy', rng=FixedRoll(0.9, seed=s)) for s in range(20)}
    assert all(move in game.valid_moves() for move in picks)


def test_impossible_ignores_the_roll():
    game = _game_on_board(["X", "X", None,
                           None, None, None,
                           None, None, None])
    assert choose_move(game, 'impossible', rng=FixedRoll(0.99)) == (4, 2)
