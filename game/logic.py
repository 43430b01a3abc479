from enum import Enum
from typing import NamedTuple, Optional

from .board import is_full, winning_line

MARKS = ("X", "O")
TIE   = "tie"


class MoveError(Enum):
    """Why a move was rejected. Value is (wire code, message)."""
    INVALID_MOVE      = ("invalid-move",      "Board and cell must be numbers from 0 to 8")
    GAME_OVER         = ("game-over",         "The game is already over")
    BOARD_ALREADY_WON = ("board-already-won", "That board has already been won")
    WRONG_BOARD       = ("wrong-board",       "You must play in the highlighted board!")
    CELL_OCCUPIED     = ("cell-occupied",     "That cell is already taken")
    NOT_YOUR_TURN     = ("not-your-turn",     "It is not your turn")
    GAME_NOT_STARTED  = ("game-not-started",  "Waiting for another player to join")

    @property
    def code(self): return self.value[0]

    @property
    def message(self): return self.value[1]


class MoveResult(NamedTuple):
    error: Optional[MoveError] = None

    @property
    def ok(self): return self.error is None

    def __bool__(self): return self.ok

    def to_ack(self):
        if self.ok: return {"success": True}
        return {"success": False, "error": self.error.code, "message": self.error.message}


ACCEPTED = MoveResult()


def _is_index(value):
    return isinstance(value, int) and not isinstance(value, bool) and 0 <= value < 9


class GameState:
    """Authoritative state of one Ultimate Tic-Tac-Toe game.

    Player 0 plays X and moves first, player 1 plays O. `active_board` is the
    sub-board the next mover must play in, or None for free choice.
    """

    def __init__(self):
        self.boards = [[None]*9 for _ in range(9)]
        self.board_winners = [None]*9
        self.board_win_lines = [None]*9      # which 3 cells won each sub-board
        self.current_player = 0
        self.active_board = None
        self.winner = None                   # "X", "O" or "tie"
        self.winning_combination = None      # which 3 sub-boards won the game
        self.last_move = None                # [board, cell]
        self.move_history = []               # [{board, cell, player}, ...]

    @staticmethod
    def mark_of(player): return MARKS[player]

    @property
    def current_mark(self): return MARKS[self.current_player]

    def is_open(self, b):
        """A sub-board accepts moves while it is neither won nor full."""
        return self.board_winners[b] is None and not is_full(self.boards[b])

    def check_move(self, b, c):
        """Return the first rule the move breaks, ignoring turn ownership."""
        if not _is_index(b) or not _is_index(c): return MoveError.INVALID_MOVE
        if self.winner is not None: return MoveError.GAME_OVER
        if self.board_winners[b] is not None: return MoveError.BOARD_ALREADY_WON
        if self.active_board is not None and b != self.active_board: return MoveError.WRONG_BOARD
        if self.boards[b][c] is not None: return MoveError.CELL_OCCUPIED
        return None

    def can_play(self, b, c):
        return self.check_move(b, c) is None

    def make_move(self, b, c, player=None):
        """Apply a move for `player` (defaults to whoever is to move).

        Rejections leave the state untouched and are returned, not raised.
        """
        error = self.check_move(b, c)
        if error is None and player is not None and player != self.current_player:
            error = MoveError.NOT_YOUR_TURN
        if error is not None:
            return MoveResult(error)

        mark = self.current_mark
        self.boards[b][c] = mark
        self.last_move = [b, c]
        self.move_history.append({"board": b, "cell": c, "player": mark})

        line = winning_line(self.boards[b])
        if line:
            self.board_winners[b] = mark
            self.board_win_lines[b] = list(line)

        # The cell just played names the sub-board the opponent is sent to.
        self.active_board = c if self.is_open(c) else None

        self._update_winner()
        self.current_player = 1 - self.current_player
        return ACCEPTED

    def _update_winner(self):
        line = winning_line(self.board_winners)
        if line:
            self.winner = self.board_winners[line[0]]
            self.winning_combination = list(line)
        elif not any(self.is_open(b) for b in range(9)):
            self.winner = TIE

    def valid_moves(self):
        if self.winner is not None: return []
        boards_to_check = range(9) if self.active_board is None else [self.active_board]
        moves = []
        for b in boards_to_check:
            if self.board_winners[b]: continue
            for c in range(9):
                if self.boards[b][c] is None: moves.append((b, c))
        return moves

    def state(self):
        return {
            "board": [list(cells) for cells in self.boards],
            "boardWinners": list(self.board_winners),
            "boardWinLines": [list(l) if l else None for l in self.board_win_lines],
            "currentPlayer": self.current_player,
            "nextBoard": self.active_board,
            "winner": self.winner,
            "winningCombination": self.winning_combination,
            "lastMove": self.last_move,
            "moveHistory": [dict(m) for m in self.move_history],
        }
