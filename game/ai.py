"""Bot for Ultimate Tic Tac Toe: easy / medium / hard / impossible.

DIFFICULTY
──────────
Each level is a probability of playing the strategic move on a given turn;
otherwise the bot plays a uniformly random legal move. `impossible` always
plays strategically and unlocks the fork and "don't feed the opponent" rules.

STRATEGIC RANKING (first non-empty set wins, ties broken at random)
───────────────────────────────────────────────────────────────────
1. Win the sub-board being played.
2. Block the opponent from winning it.
3. (impossible) Fork: two open two-in-a-rows at once.
4. Center cell.
5. Corner cell.
6. (impossible) Avoid cells that would give the opponent an open two-in-a-row
   had they taken the cell themselves.
7. Anything left.

This is a greedy heuristic, not a search. The order above is what makes the
levels feel different, so keep it.
"""
import random
from .board import CENTER, CORNERS, open_lines, sub_board_winner


# ── Difficulty table ──────────────────────────────────────────────────────────
DIFFICULTIES = {
    'easy':       0.5,
    'medium':     0.75,
    'hard':       0.95,
    'impossible': 1.0,
}
TOP_TIER           = 'impossible'
DEFAULT_DIFFICULTY = 'easy'

def normalize_difficulty(difficulty):
    return difficulty if difficulty in DIFFICULTIES else DEFAULT_DIFFICULTY


# ── Move tests ────────────────────────────────────────────────────────────────
def _completes_line(game, b, c, mark):
    cells = game.boards[b][:]; cells[c] = mark
    return sub_board_winner(cells) == mark

def _is_fork(game, b, c, mark):
    cells = game.boards[b][:]; cells[c] = mark
    return open_lines(cells, mark) >= 2

def _feeds_opponent(game, b, c, opp):
    """Would the opponent holding this cell give them two in a line with the third empty?"""
    cells = game.boards[b][:]; cells[c] = opp
    return open_lines(cells, opp) > 0


# ── Strategy ──────────────────────────────────────────────────────────────────
def strategic_move(game, moves, top_tier=False, rng=random):
    mark = game.current_mark
    opp  = game.mark_of(1 - game.current_player)

    ranked = [
        lambda: [m for m in moves if _completes_line(game, *m, mark)],
        lambda: [m for m in moves if _completes_line(game, *m, opp)],
        lambda: [m for m in moves if _is_fork(game, *m, mark)] if top_tier else [],
        lambda: [m for m in moves if m[1] == CENTER],
        lambda: [m for m in moves if m[1] in CORNERS],
    ]
    for candidates in ranked:
        picks = candidates()
        if picks: return rng.choice(picks)

    if top_tier:
        safe = [m for m in moves if not _feeds_opponent(game, *m, opp)]
        if safe: moves = safe
    return rng.choice(moves)


# ── Public API ────────────────────────────────────────────────────────────────
def choose_move(game, difficulty=DEFAULT_DIFFICULTY, rng=None):
    """Pick a move for the player to move. None only when no move is legal."""
    rng = rng or random
    valid = game.valid_moves()
    if not valid: return None
    difficulty = normalize_difficulty(difficulty)
    top_tier = difficulty == TOP_TIER
    if top_tier or rng.random() < DIFFICULTIES[difficulty]:
        return strategic_move(game, valid, top_tier=top_tier, rng=rng)
    return rng.choice(valid)
