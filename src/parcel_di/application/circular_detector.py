"""Application layer - Re-entrant member resolution detection."""

import threading
from contextlib import contextmanager
from typing import Iterator, List

from parcel_di.domain import CircularDependencyError


class CircularDependencyDetector:
    """Detects container members read while their own factory is still running.

    Member factories run lazily, on first read. A factory that reads its own
    member, directly or through other factories, would otherwise recurse
    forever. Names being resolved are tracked per thread.

    Attributes:
        _local: Thread-local holder of the resolution stack.
    """

    def __init__(self) -> None:
        self._local = threading.local()

    def _stack(self) -> List[str]:
        stack = getattr(self._local, "names", None)
        if stack is None:
            stack = self._local.names = []
        return stack

    def push(self, name: str) -> None:
        """Record that ``name`` is being resolved.

        Args:
            name: The member whose factory is about to run.

        Raises:
            CircularDependencyError: If ``name`` is already being resolved.
                The chain starts at its first occurrence.

        Example:
            >>> detector = CircularDependencyDetector()
            >>> detector.push("Mailer")
            >>> detector.push("Templates")
            >>> detector.push("Mailer")  # Raises CircularDependencyError
        """
        stack = self._stack()
        if name in stack:
            raise CircularDependencyError(stack[stack.index(name) :] + [name])
        stack.append(name)

    def pop(self) -> None:
        """Forget the most recently pushed name."""
        stack = self._stack()
        if stack:
            stack.pop()

    @contextmanager
    def guard(self, name: str) -> Iterator[None]:
        """Track ``name`` for the duration of a ``with`` block.

        Example:
            >>> with detector.guard("Mailer"):
            ...     delivery = factory(container)
        """
        self.push(name)
        try:
            yield
        finally:
            self.pop()

    def resolving(self) -> List[str]:
        """Return a copy of the names currently being resolved."""
        return list(self._stack())

    def clear(self) -> None:
        """Drop every tracked name, e.g. after a test aborted mid-resolution."""
        self._stack().clear()
