"""
Synchronous observer signals.

A Signal keeps its listeners in registration order and delivers every
emission to all of them before emit() returns. The listener list is
copied at the start of each pass, so subscribing or unsubscribing from
inside a callback only takes effect on the next emission. A listener
that raises is logged and skipped; the rest still receive the event.
"""

import logging
from typing import Any, Callable, List

logger = logging.getLogger(__name__)

Listener = Callable[..., Any]


class Signal:

    def __init__(self, name: str):
        self.name = name
        self._listeners: List[Listener] = []

    def connect(self, callback: Listener) -> Callable[[], None]:
        """
        Register a listener.

        Returns:
            A function that removes the listener; calling it twice is harmless
        """
        self._listeners.append(callback)

        def disconnect() -> None:
            self.disconnect(callback)

        return disconnect

    def disconnect(self, callback: Listener) -> None:
        try:
            self._listeners.remove(callback)
        except ValueError:
            pass

    def emit(self, *args, **kwargs) -> int:
        """
        Deliver to every listener registered when the pass starts.

        Returns:
            Number of listeners that raised
        """
        failures = 0
        for callback in list(self._listeners):
            try:
                callback(*args, **kwargs)
            except Exception:
                failures += 1
                logger.exception("Listener %r failed on signal %r", callback, self.name)
        return failures

    def __len__(self) -> int:
        return len(self._listeners)

    def __repr__(self) -> str:
        return f"Signal(name={self.name!r}, listeners={len(self._listeners)})"
