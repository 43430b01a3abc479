import os

ASYNC_MODE = os.environ.get('SOCKETIO_ASYNC_MODE', 'gevent')
if ASYNC_MODE == 'gevent':
    from gevent import monkey
    monkey.patch_all()

import logging
from flask import Flask, abort, jsonify, request
from flask_socketio import SocketIO, join_room, emit
from game.ai import DIFFICULTIES, normalize_difficulty
from game.local import BOT, LocalMatch
from game.logic import MARKS, MoveError, MoveResult
from game.scheduler import BotTurn
from game.sessions import SessionError, SessionRegistry


def _env_bool(name, default):
    raw = os.environ.get(name)
    if raw is None: return default
    return raw.strip().lower() in ('1', 'true', 'yes', 'on')

app = Flask(__name__)
app.config['SECRET_KEY']           = os.environ.get('SECRET_KEY', 'a_secret_key')
app.config['BOT_MOVE_DELAY']       = float(os.environ.get('BOT_MOVE_DELAY', 0.8))
app.config['BOT_FIRST_MOVE_DELAY'] = float(os.environ.get('BOT_FIRST_MOVE_DELAY', 1.0))
app.config['DEFAULT_DIFFICULTY']   = normalize_difficulty(os.environ.get('DEFAULT_DIFFICULTY', 'easy'))
app.config['AUTO_CREATE_ROOMS']    = _env_bool('AUTO_CREATE_ROOMS', True)
app.logger.setLevel(getattr(logging, os.environ.get('LOG_LEVEL', 'INFO').upper(), logging.INFO))

socketio = SocketIO(app, async_mode=ASYNC_MODE)

registry      = SessionRegistry(auto_create=app.config['AUTO_CREATE_ROOMS'])
local_matches = {}   # sid -> LocalMatch


# ── Routes ───────────────────────────────────────────────────────────────────
@app.route('/')
def index():
    return jsonify({'game': 'ultimate-tic-tac-toe', 'rooms': len(registry),
                    'difficulties': list(DIFFICULTIES)})

@app.route('/room/<room_id>')
def room(room_id):
    session = registry.get(room_id)
    if session is None: abort(404)
    with session.lock:
        return jsonify(session.summary())


# ── Helpers ───────────────────────────────────────────────────────────────────
def _parse_move(data):
    """Pull (board, cell) out of a move payload; None when malformed."""
    if not isinstance(data, dict): return None
    b, c = data.get('boardIndex'), data.get('cellIndex')
    if isinstance(b, str) and b.isdigit(): b = int(b)
    if isinstance(c, str) and c.isdigit(): c = int(c)
    return b, c

def _broadcast_update(session):
    socketio.emit('game-update', session.game.state(), to=session.room_id)
    if session.game.winner is not None:
        socketio.emit('game-over', {'winner': session.game.winner,
                                    'winningCombination': session.game.winning_combination},
                      to=session.room_id)
        app.logger.info("Game over in room %s: %s", session.room_id, session.game.winner)

def _start_game(session):
    for idx, sid in enumerate(session.players):
        socketio.emit('game-started', {'players': list(session.players),
                                       'isYourTurn': idx == session.game.current_player,
                                       'symbol': MARKS[idx]}, to=sid)
    socketio.emit('game-update', session.game.state(), to=session.room_id)
    app.logger.info("Game started in room %s", session.room_id)


# ── SocketIO Events: rooms ────────────────────────────────────────────────────
@socketio.on('connect')
def connect(auth=None):
    app.logger.info("User connected: %s", request.sid)

@socketio.on('create-room')
def create_room(data=None):
    try:
        session = registry.create(sid=request.sid)
    except SessionError as e:
        app.logger.info("Create refused for %s: %s", request.sid, e)
        return e.to_ack()
    registry.join(session.room_id, request.sid)
    join_room(session.room_id)
    app.logger.info("Room created: %s", session.room_id)
    return {'success': True, 'roomId': session.room_id}

@socketio.on('join-room')
def join(room_id):
    if not isinstance(room_id, str) or not room_id:
        return {'success': False, 'error': 'invalid-room', 'message': 'Room id is required'}
    try:
        session, started = registry.join(room_id, request.sid)
    except SessionError as e:
        app.logger.info("Join refused for %s in room %s: %s", request.sid, room_id, e)
        return e.to_ack()
    join_room(room_id)
    app.logger.info("Player joined room: %s (%d/2 players)", room_id, len(session))
    if started:
        with session.lock:
            _start_game(session)
    return {'success': True, 'playerCount': len(session)}

@socketio.on('make-move')
def make_move(data):
    room_id = data.get('roomId') if isinstance(data, dict) else None
    session = registry.get(room_id) if isinstance(room_id, str) else None
    if session is None:
        return {'success': False, 'error': 'room-not-found', 'message': 'Room does not exist'}
    move = _parse_move(data)
    with session.lock:
        result = session.make_move(request.sid, *move) if move else MoveResult(MoveError.INVALID_MOVE)
        if result:
            _broadcast_update(session)
        else:
            app.logger.debug("Rejected move from %s in room %s: %s", request.sid, room_id, result.error.code)
    return result.to_ack()

@socketio.on('disconnect')
def disconnect(*args):
    sid = request.sid
    app.logger.info("User disconnected: %s", sid)
    match = local_matches.pop(sid, None)
    if match: match.cancel_pending()
    session, left = registry.leave(sid)
    if session is None: return
    if left == 0:
        app.logger.info("Room closed: %s", session.room_id)
        return
    for remaining in session.players:
        emit('player-disconnected', {'playerCount': left}, to=remaining)


# ── SocketIO Events: local and bot games ──────────────────────────────────────
def _local_update(sid, match):
    socketio.emit('game-update', match.state(), to=sid)
    if match.game.winner is not None:
        socketio.emit('game-over', {'winner': match.game.winner,
                                    'winnerName': match.winner_name(),
                                    'winningCombination': match.game.winning_combination}, to=sid)

def _schedule_bot(sid, match, delay):
    if not match.is_bot_turn: return None
    game = match.game
    def run():
        if match.bot_move():
            _local_update(sid, match)
    turn = BotTurn(game, delay, run, socketio.start_background_task, socketio.sleep,
                   is_current=lambda: local_matches.get(sid) is match and match.game is game)
    return match.schedule(turn)

@socketio.on('start-local-game')
def start_local_game(data=None):
    data = data or {}
    sid  = request.sid
    old  = local_matches.pop(sid, None)
    if old: old.cancel_pending()
    mode = data.get('mode', 'local')
    names = [data.get('player1Name') or 'Player 1', data.get('player2Name') or 'Player 2']
    match = LocalMatch(mode=mode, difficulty=data.get('difficulty', app.config['DEFAULT_DIFFICULTY']),
                       player_names=names, bot_player=0 if data.get('botFirst') else 1)
    local_matches[sid] = match
    app.logger.info("Local %s game started for %s", match.mode, sid)
    _local_update(sid, match)
    if match.mode == BOT:
        _schedule_bot(sid, match, app.config['BOT_FIRST_MOVE_DELAY'])
    return {'success': True}

@socketio.on('local-move')
def local_move(data):
    match = local_matches.get(request.sid)
    if match is None:
        return MoveResult(MoveError.GAME_NOT_STARTED).to_ack()
    move = _parse_move(data)
    result = match.play(*move) if move else MoveResult(MoveError.INVALID_MOVE)
    if result:
        _local_update(request.sid, match)
        _schedule_bot(request.sid, match, app.config['BOT_MOVE_DELAY'])
    return result.to_ack()

@socketio.on('new-local-game')
def new_local_game(data=None):
    match = local_matches.get(request.sid)
    if match is None:
        return MoveResult(MoveError.GAME_NOT_STARTED).to_ack()
    match.reset()
    _local_update(request.sid, match)
    if match.mode == BOT:
        _schedule_bot(request.sid, match, app.config['BOT_FIRST_MOVE_DELAY'])
    return {'success': True}


if __name__ == "__main__":
    socketio.run(app, host='0.0.0.0', port=int(os.environ.get('PORT', 3000)))
