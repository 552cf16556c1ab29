from __future__ import annotations

from threading import Lock
from typing import Callable, Tuple

from models.form import FormState


class FormStore:
    """In-memory holder of the current form revision.

    The store is the single source of truth; every write replaces the whole
    state value and bumps the revision.
    """

    def __init__(self, initial: FormState) -> None:
        self._state = initial
        self._revision = 0
        self._lock = Lock()

    @property
    def revision(self) -> int:
        with self._lock:
            return self._revision

    def get(self) -> Tuple[FormState, int]:
        with self._lock:
            return self._state, self._revision

    def update(self, transition: Callable[[FormState], FormState]) -> Tuple[FormState, int]:
        """Apply ``transition`` atomically and return the new state and revision."""
        with self._lock:
            updated = transition(self._state)
            self._state = updated
            self._revision += 1
            return updated, self._revision
