"""Local play: hot-seat and versus-bot games that never touch a session.

Turn ownership is implicit. In a bot game the human may only move while it is
not the bot's turn, and the bot moves through `bot_move`, usually called from
a delayed `BotTurn`.
"""
from .ai import choose_move, normalize_difficulty
from .logic import TIE, GameState, MoveError, MoveResult

LOCAL, BOT = 'local', 'bot'
BOT_NAME   = 'AI Bot'


class LocalMatch:
    def __init__(self, mode=LOCAL, difficulty=None, player_names=None, bot_player=1, rng=None):
        self.mode         = BOT if mode == BOT else LOCAL
        self.difficulty   = normalize_difficulty(difficulty)
        self.bot_player   = bot_player if self.is_bot_game else None
        names = list(player_names or ['Player 1', 'Player 2'])
        if self.is_bot_game:
            names[self.bot_player] = BOT_NAME
        self.player_names = names
        self.rng          = rng
        self.game         = GameState()
        self.pending      = None            # BotTurn waiting to fire, if any

    @property
    def is_bot_game(self): return self.mode == BOT

    @property
    def is_bot_turn(self):
        return self.is_bot_game and self.game.winner is None and self.game.current_player == self.bot_player

    def play(self, b, c):
        """Human move. Rejected while the bot is to move."""
        if self.is_bot_turn and self.game.check_move(b, c) is None:
            return MoveResult(MoveError.NOT_YOUR_TURN)
        return self.game.make_move(b, c)

    def bot_move(self):
        """Let the bot play. Returns the move made, or None when it is not the bot's turn."""
        if not self.is_bot_turn: return None
        move = choose_move(self.game, self.difficulty, rng=self.rng)
        if move is None: return None
        self.game.make_move(*move, player=self.bot_player)
        return move

    def schedule(self, turn):
        """Replace the pending bot turn with `turn` and start it."""
        self.cancel_pending()
        self.pending = turn
        turn.start()
        return turn

    def cancel_pending(self):
        if self.pending: self.pending.cancel()
        self.pending = None

    def reset(self):
        self.cancel_pending()
        self.game = GameState()

    def winner_name(self):
        w = self.game.winner
        if w is None or w == TIE: return None
        return self.player_names[0 if w == GameState.mark_of(0) else 1]

    def state(self):
        s = self.game.state()
        s["mode"]        = self.mode
        s["difficulty"]  = self.difficulty if self.is_bot_game else None
        s["playerNames"] = list(self.player_names)
        s["botPlayer"]   = self.bot_player
        return s
