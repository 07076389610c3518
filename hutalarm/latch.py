from __future__ import annotations

import threading


class AlarmLatch:
    """One-shot alarm flag.

    Starts unset and can be set exactly once; there is no way back. try_fire() is
    the only synchronization point if polling is ever spread over several threads.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._set = False

    def try_fire(self) -> bool:
        with self._lock:
            if self._set:
                return False
            self._set = True
            return True

    def is_set(self) -> bool:
        return self._set
