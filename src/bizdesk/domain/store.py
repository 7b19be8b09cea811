"""Reducer-backed state container.

A ``Store`` is created per session and handed to the services that need it;
there is no process-wide instance.
"""

import logging
from typing import Any, Callable, Generic, TypeVar

logger = logging.getLogger(__name__)

S = TypeVar("S")
A = TypeVar("A")


class Store(Generic[S, A]):
    """Holds a state value and replaces it through a pure reducer."""

    def __init__(self, reducer: Callable[[S, A], S], initial_state: S):
        """Initialize store.

        Args:
            reducer: Pure function ``(state, action) -> new state``
            initial_state: Starting state
        """
        self._reducer = reducer
        self._state = initial_state
        self._listeners: list[Callable[[S], Any]] = []

    @property
    def state(self) -> S:
        """Current state."""
        return self._state

    def dispatch(self, action: A) -> S:
        """Apply an action and notify subscribers.

        Returns:
            The new state
        """
        self._state = self._reducer(self._state, action)
        logger.debug("Dispatched %s", getattr(action, "type", action))
        for listener in list(self._listeners):
            listener(self._state)
        return self._state

    def subscribe(self, listener: Callable[[S], Any]) -> Callable[[], None]:
        """Register a listener called with the new state after each dispatch.

        Returns:
            Function that removes the listener
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe
