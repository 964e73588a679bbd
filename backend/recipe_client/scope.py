import threading


class TimerScope:
    """
    Owns delayed callbacks (notice auto-clear, post-submit navigation).
    close() cancels every timer that has not fired; afterwards nothing new is scheduled.
    """

    def __init__(self):
        self._timers: list[threading.Timer] = []
        self._lock = threading.Lock()
        self.closed = False

    def call_later(self, delay: float, fn, *args):
        with self._lock:
            if self.closed:
                return None
            timer = threading.Timer(delay, fn, args=args)
            timer.daemon = True
            self._timers = [t for t in self._timers if t.is_alive()]
            self._timers.append(timer)
        timer.start()
        return timer

    def cancel(self, timer):
        if timer is not None:
            timer.cancel()

    @property
    def pending(self) -> int:
        with self._lock:
            return sum(1 for t in self._timers if t.is_alive())

    def close(self):
        with self._lock:
            self.closed = True
            timers, self._timers = self._timers, []
        for t in timers:
            t.cancel()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()


class Notice:
    """A transient message that clears itself after `duration` seconds."""

    def __init__(self, scope: TimerScope):
        self.scope = scope
        self.message = ""
        self._timer = None

    def show(self, message: str, duration: float | None = None):
        self.scope.cancel(self._timer)
        self.message = message
        self._timer = self.scope.call_later(duration, self.clear) if duration else None

    def clear(self):
        self.scope.cancel(self._timer)
        self._timer = None
        self.message = ""
