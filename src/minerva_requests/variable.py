"""Deferred variables used to relate requests inside one batch."""

from __future__ import annotations

import itertools
import uuid
from typing import Callable, Optional


IdFactory = Callable[[], str]


def new_variable_id() -> str:
    """Process-wide default generator for placeholder ids."""

    return str(uuid.uuid4())


def sequential_ids(prefix: str = "var") -> IdFactory:
    """Build a deterministic id factory: ``prefix-1``, ``prefix-2``, ..."""

    counter = itertools.count(1)

    def _next() -> str:
        return f"{prefix}-{next(counter)}"

    return _next


class RequestVariable:
    """Placeholder for an entity that the service has not created yet.

    The value starts as a generated id; once a caller supplies a value it
    is marked explicit and the service will not be asked to bind it.
    """

    def __init__(
        self,
        value: Optional[str] = None,
        *,
        id_factory: Optional[IdFactory] = None,
    ) -> None:
        factory = id_factory or new_variable_id
        self._value = factory()
        self._explicit = False
        self.set(value)

    @property
    def value(self) -> str:
        return self._value

    @property
    def is_explicit(self) -> bool:
        return self._explicit

    def set(self, value: Optional[str]) -> str:
        # Empty values leave the current binding in place.
        if value:
            self._value = value
            self._explicit = True
        return self._value

    def __repr__(self) -> str:
        return f"RequestVariable(value={self._value!r}, explicit={self._explicit})"
