import time


class BotTurn:
    """A bot move scheduled `delay` seconds from now for one specific game.

    `start_task` spawns a background task and `sleep` pauses it; the server
    passes `socketio.start_background_task` and `socketio.sleep` so the wait
    cooperates with gevent. `is_current` tells whether the game the turn was
    scheduled for is still the one being played.
    """

    def __init__(self, game, delay, run, start_task, sleep=time.sleep, is_current=None):
        self.game       = game
        self.delay      = delay
        self.run        = run
        self.start_task = start_task
        self.sleep      = sleep
        self.is_current = is_current or (lambda: True)
        self.cancelled  = False

    @property
    def stale(self):
        return self.cancelled or self.game.winner is not None or not self.is_current()

    def start(self):
        return self.start_task(self._wait_and_run)

    def cancel(self):
        self.cancelled = True

    def _wait_and_run(self):
        if self.delay > 0:
            self.sleep(self.delay)
        if self.stale:
            return
        self.run()
