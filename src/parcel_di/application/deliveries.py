"""Application layer - Regular and cached deliveries."""

import logging
from typing import Any, Callable, Optional, Tuple

from parcel_di.application.instance_cache import InstanceCache
from parcel_di.application.lifetime_parser import parse_lifetime
from parcel_di.application.marker import MarkerRegistry, default_registry
from parcel_di.domain import UNBOUNDED, ContainerPlacement, IDelivery, IInstanceCache, LifetimeMs

logger = logging.getLogger(__name__)


class Delivery(IDelivery):
    """Shared configuration of a delivery: what to build and with which leading arguments.

    Attributes:
        _source: The underlying constructor.
        _prepared_arguments: Positional arguments prepended to every construction.
        _placement: Explicit container placement, or None to consult the marker registry.
        _registry: Registry holding delivery-location marks.
    """

    def __init__(
        self,
        source: Callable[..., Any],
        *prepared_arguments: Any,
        placement: Optional[ContainerPlacement] = None,
        registry: Optional[MarkerRegistry] = None,
    ) -> None:
        """Initialize the delivery.

        Args:
            source: The class or callable to construct.
            *prepared_arguments: Arguments placed before the call-site arguments.
            placement: Whether the container is injected; by default this is read
                from the delivery-location mark of ``source`` at each construction.
            registry: Registry holding delivery-location marks.

        Raises:
            TypeError: If ``source`` is not callable.
        """
        if not callable(source):
            raise TypeError(f"Delivery source must be callable, got {type(source).__name__}")
        self._source = source
        self._prepared_arguments: Tuple[Any, ...] = tuple(prepared_arguments)
        self._placement = ContainerPlacement(placement) if placement is not None else None
        self._registry = registry or default_registry

    @property
    def source(self) -> Callable[..., Any]:
        return self._source

    @property
    def prepared_arguments(self) -> Tuple[Any, ...]:
        return self._prepared_arguments

    @property
    def placement(self) -> ContainerPlacement:
        if self._placement is not None:
            return self._placement
        return self._registry.placement_of(self._source)

    def resolve_arguments(self, container: Any, args: Tuple[Any, ...]) -> Tuple[Any, ...]:
        """Build the positional arguments passed to ``source``.

        Args:
            container: The runtime container.
            args: Call-site positional arguments.

        Returns:
            ``(container, *prepared, *args)`` when the source needs the container,
            otherwise ``(*prepared, *args)``.
        """
        if self.placement is ContainerPlacement.NEEDS_CONTAINER:
            return (container, *self._prepared_arguments, *args)
        return (*self._prepared_arguments, *args)

    def construct(self, container: Any, *args: Any, **kwargs: Any) -> Any:
        """Call ``source`` with the resolved arguments."""
        return self._source(*self.resolve_arguments(container, args), **kwargs)

    def __repr__(self) -> str:
        name = getattr(self._source, "__qualname__", repr(self._source))
        return f"{type(self).__name__}({name}, prepared={len(self._prepared_arguments)})"


class RegularDelivery(Delivery):
    """Delivery that constructs a new instance on every open.

    Example:
        >>> delivery = RegularDelivery(Greeter, "Hello")
        >>> delivery.open(container, "world") is delivery.open(container, "world")
        False
    """

    def open(self, container: Any, *args: Any, **kwargs: Any) -> Any:
        """Construct a fresh instance.

        Args:
            container: The runtime container, passed on only to marked sources.
            *args: Call-site positional arguments, placed after the prepared ones.
            **kwargs: Call-site keyword arguments.

        Returns:
            The new instance.
        """
        return self.construct(container, *args, **kwargs)


class CachedDelivery(Delivery):
    """Delivery that reuses instances built from the same resolved arguments.

    Entries live in an ``InstanceCache`` bucket keyed by the source constructor,
    so every cached delivery over the same source and cache shares them, however
    it was configured. The cache key is ``(container, *prepared, *args)`` plus
    keyword arguments, compared position by position by identity.

    Attributes:
        _lifetime: Milliseconds an entry survives without access, or UNBOUNDED.
        _cache: The instance cache entries are stored in.

    Example:
        >>> cache = InstanceCache()
        >>> sessions = CachedDelivery(Session, "db-url", lifetime="5m", cache=cache)
        >>> sessions.open(container) is sessions.open(container)
        True
    """

    def __init__(
        self,
        source: Callable[..., Any],
        *prepared_arguments: Any,
        lifetime: Any = UNBOUNDED,
        placement: Optional[ContainerPlacement] = None,
        cache: Optional[IInstanceCache] = None,
        registry: Optional[MarkerRegistry] = None,
    ) -> None:
        """Initialize the cached delivery.

        Args:
            source: The class or callable to construct.
            *prepared_arguments: Arguments placed before the call-site arguments.
            lifetime: Lifetime accepted by ``parse_lifetime``, UNBOUNDED by default.
            placement: Explicit container placement.
            cache: Instance cache to use, ``InstanceCache.shared()`` by default.
            registry: Registry holding delivery-location marks.

        Raises:
            InvalidLifetimeFormat: If ``lifetime`` cannot be parsed.
            InvalidLifetime: If ``lifetime`` is negative.
        """
        super().__init__(source, *prepared_arguments, placement=placement, registry=registry)
        self._lifetime: LifetimeMs = parse_lifetime(lifetime)
        self._cache: IInstanceCache = cache if cache is not None else InstanceCache.shared()
        self._cache.ensure_bucket(source)

    @property
    def lifetime(self) -> LifetimeMs:
        return self._lifetime

    @property
    def cache(self) -> IInstanceCache:
        return self._cache

    def open(self, container: Any, *args: Any, **kwargs: Any) -> Any:
        """Return the cached instance for these arguments, constructing it on a miss.

        A hit restarts the entry's expiry countdown when the lifetime is bounded.

        Args:
            container: The runtime container; always part of the cache key.
            *args: Call-site positional arguments.
            **kwargs: Call-site keyword arguments.

        Returns:
            The cached or newly constructed instance.
        """
        key = (container, *self._prepared_arguments, *args)

        entry = self._cache.lookup(self._source, key, kwargs, self._lifetime)
        if entry is not None:
            return entry.instance

        instance = self.construct(container, *args, **kwargs)
        self._cache.store(self._source, key, kwargs, instance, self._lifetime)
        logger.debug("Cached new instance of %r with lifetime %s", self._source, self._lifetime)
        return instance
