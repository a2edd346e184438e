"""Application layer - Delivery-location marking.

A source constructor marked as a delivery location declares that its first
positional parameter is the container. Marks are kept out-of-band in a
registry of weak references, so nothing is written onto the marked class and
the lookup is by identity, never by subclass relationship.
"""

import logging
import weakref
from typing import Any, Callable, Dict, Optional, TypeVar

from parcel_di.domain import ContainerPlacement

logger = logging.getLogger(__name__)

S = TypeVar("S", bound=Callable[..., Any])


def _weakly_trackable(source: Any) -> bool:
    try:
        weakref.ref(source)
        hash(source)
    except TypeError:
        return False
    return True


class MarkerRegistry:
    """Identity-keyed set of sources that expect the container first.

    Attributes:
        _marked: Weak references to the marked sources.
        _pinned: Marked sources that cannot be weakly referenced, keyed by id.
    """

    def __init__(self) -> None:
        """Initialize an empty registry."""
        self._marked: "weakref.WeakSet[Any]" = weakref.WeakSet()
        self._pinned: Dict[int, Any] = {}

    def mark(self, source: Any) -> None:
        """Mark ``source`` as a delivery location."""
        if _weakly_trackable(source):
            self._marked.add(source)
        else:
            self._pinned[id(source)] = source
        logger.debug("Marked %r as delivery location", source)

    def unmark(self, source: Any) -> None:
        """Remove the mark from ``source`` if present."""
        if _weakly_trackable(source):
            self._marked.discard(source)
        else:
            self._pinned.pop(id(source), None)

    def is_marked(self, source: Any) -> bool:
        """Tell whether ``source`` itself carries the mark.

        Subclasses of a marked class are not considered marked.
        """
        if _weakly_trackable(source):
            return source in self._marked
        return self._pinned.get(id(source)) is source

    def placement_of(self, source: Any) -> ContainerPlacement:
        """Return the container placement implied by the mark."""
        if self.is_marked(source):
            return ContainerPlacement.NEEDS_CONTAINER
        return ContainerPlacement.STANDALONE


default_registry = MarkerRegistry()


def delivery_location(source: Optional[S] = None, *, registry: Optional[MarkerRegistry] = None) -> Any:
    """Mark a constructor as receiving the container as its first argument.

    Usable bare (``@delivery_location``) or with arguments
    (``@delivery_location(registry=...)``).

    Args:
        source: The class or callable to mark.
        registry: Registry to record the mark in, the process-wide one by default.

    Returns:
        The source itself, unchanged.

    Example:
        >>> @delivery_location
        ... class Mailer:
        ...     def __init__(self, container, sender):
        ...         self.templates = container.Templates()
        ...         self.sender = sender
    """
    target = registry or default_registry

    def decorator(inner: S) -> S:
        target.mark(inner)
        return inner

    if source is None:
        return decorator
    return decorator(source)


def is_delivery_location(source: Any, registry: Optional[MarkerRegistry] = None) -> bool:
    """Tell whether ``source`` is marked as a delivery location."""
    return (registry or default_registry).is_marked(source)


def unmark_delivery_location(source: Any, registry: Optional[MarkerRegistry] = None) -> None:
    """Remove the delivery-location mark from ``source``."""
    (registry or default_registry).unmark(source)
