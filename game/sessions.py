"""Networked rooms: who is in a room, whose turn it is, and the room lifecycle.

    waiting ──2nd player joins──▶ playing ──winner──▶ finished
       ▲                             │
       └──── a player disconnects ───┘        (room destroyed at 0 players)

The first player in join order plays X and moves first. Each session owns a
lock that the server holds while it mutates that session; the registry lock
only guards the room map.
"""
import random
import string
import threading

from .logic import GameState, MoveError, MoveResult

WAITING, PLAYING, FINISHED = 'waiting', 'playing', 'finished'
MAX_PLAYERS = 2


class SessionError(Exception):
    code = 'session-error'

    def __init__(self, room_id, message):
        self.room_id = room_id
        super().__init__(message)

    def to_ack(self):
        return {'success': False, 'error': self.code, 'message': str(self)}

class RoomFullError(SessionError):
    code = 'room-full'

    def __init__(self, room_id):
        super().__init__(room_id, 'Room is full')

class RoomNotFoundError(SessionError):
    code = 'room-not-found'

    def __init__(self, room_id):
        super().__init__(room_id, f"Room '{room_id}' does not exist")

class AlreadyInGameError(SessionError):
    code = 'already-in-game'

    def __init__(self, room_id):
        super().__init__(room_id, 'You are already in another game.')


class Session:
    def __init__(self, room_id):
        self.room_id = room_id
        self.players = []
        self.status  = WAITING
        self.game    = None
        self.lock    = threading.RLock()

    def __len__(self): return len(self.players)

    @property
    def is_full(self): return len(self.players) >= MAX_PLAYERS

    def player_index(self, sid):
        return self.players.index(sid) if sid in self.players else None

    def add_player(self, sid):
        """Add `sid`. Returns True when this join fills the room."""
        if sid in self.players: return False
        if self.is_full: raise RoomFullError(self.room_id)
        self.players.append(sid)
        return self.is_full

    def remove_player(self, sid):
        """Drop `sid` and fall back to waiting. Returns the players left."""
        if sid in self.players:
            self.players.remove(sid)
            self.status = WAITING
        return len(self.players)

    def start(self):
        self.game   = GameState()
        self.status = PLAYING
        return self.game

    def make_move(self, sid, b, c):
        if self.status == FINISHED:
            return MoveResult(MoveError.GAME_OVER)
        if self.status != PLAYING or self.game is None:
            return MoveResult(MoveError.GAME_NOT_STARTED)
        player = self.player_index(sid)
        if player is None:
            return MoveResult(MoveError.NOT_YOUR_TURN)
        result = self.game.make_move(b, c, player=player)
        if result and self.game.winner is not None:
            self.status = FINISHED
        return result

    def summary(self):
        return {
            'roomId':      self.room_id,
            'status':      self.status,
            'playerCount': len(self.players),
            'state':       self.game.state() if self.game else None,
        }


def new_room_id(k=8):
    return ''.join(random.choices(string.ascii_lowercase + string.digits, k=k))


class SessionRegistry:
    def __init__(self, auto_create=True):
        self.auto_create = auto_create
        self._sessions = {}
        self._lock = threading.Lock()

    def __len__(self): return len(self._sessions)

    def __contains__(self, room_id): return room_id in self._sessions

    def get(self, room_id):
        return self._sessions.get(room_id)

    def require(self, room_id):
        session = self.get(room_id)
        if session is None: raise RoomNotFoundError(room_id)
        return session

    def _room_of(self, sid):
        return next((s for s in self._sessions.values() if sid in s.players), None)

    def _refuse_second_room(self, sid, room_id):
        current = self._room_of(sid) if sid is not None else None
        if current is not None and current.room_id != room_id:
            raise AlreadyInGameError(current.room_id)

    def create(self, room_id=None, sid=None):
        """Allocate a room. With `sid`, refuse when that client already sits in another room."""
        with self._lock:
            self._refuse_second_room(sid, room_id)
            if room_id is None:
                room_id = new_room_id()
                while room_id in self._sessions: room_id = new_room_id()
            elif room_id in self._sessions:
                return self._sessions[room_id]
            session = self._sessions[room_id] = Session(room_id)
            return session

    def join(self, room_id, sid):
        """Add `sid` to `room_id`, creating the room when allowed.

        Returns (session, started) where `started` is True when the join
        filled the room and a fresh game began.
        """
        with self._lock:
            self._refuse_second_room(sid, room_id)
            session = self._sessions.get(room_id)
            if session is None:
                if not self.auto_create: raise RoomNotFoundError(room_id)
                session = self._sessions[room_id] = Session(room_id)
        with session.lock:
            started = session.add_player(sid)
            if started: session.start()
        return session, started

    def find_by_player(self, sid):
        with self._lock:
            return self._room_of(sid)

    def leave(self, sid):
        """Remove `sid` from its room. Returns (session, players_left) or (None, 0)."""
        session = self.find_by_player(sid)
        if session is None: return None, 0
        with session.lock:
            left = session.remove_player(sid)
        if left == 0: self.remove(session.room_id)
        return session, left

    def remove(self, room_id):
        with self._lock:
            return self._sessions.pop(room_id, None)

    def clear(self):
        with self._lock:
            self._sessions.clear()
