"""Application layer - Carrier and the read-only container it builds."""

import inspect
import logging
from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional, Union

from parcel_di.application.circular_detector import CircularDependencyDetector
from parcel_di.domain import (
    ContainerPlacement,
    IDelivery,
    InvalidDeliveryError,
    MemberMetadata,
    Provider,
)

logger = logging.getLogger(__name__)

ProviderLike = Union[Provider, Mapping[str, Callable[[Any], IDelivery]]]

_POSITIONAL_KINDS = (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)


class ConstructorHandle:
    """Constructor-shaped handle for one container member.

    Calling the handle does not run the source constructor directly: the call
    is routed through the member's delivery, which decides whether to build a
    new instance, reuse a cached one, and whether to inject the container.
    ``isinstance`` and ``issubclass`` checks against the handle are answered by
    the source type.

    Attributes:
        _metadata: Resolution metadata of the member, including its delivery.
        _container: The container instances are built for.
    """

    def __init__(self, metadata: MemberMetadata, container: "Container") -> None:
        """Initialize the handle.

        Args:
            metadata: Resolution metadata of the member.
            container: The container passed to the delivery on every construction.
        """
        self._metadata = metadata
        self._container = container
        source = metadata.delivery.source
        self.__name__ = getattr(source, "__name__", metadata.name)
        self.__qualname__ = getattr(source, "__qualname__", self.__name__)
        self.__module__ = getattr(source, "__module__", __name__)
        self.__doc__ = getattr(source, "__doc__", None)

    @property
    def name(self) -> str:
        return self._metadata.name

    @property
    def delivery(self) -> IDelivery:
        return self._metadata.delivery

    @property
    def source(self) -> Callable[..., Any]:
        return self._metadata.delivery.source

    @property
    def __signature__(self) -> Optional[inspect.Signature]:
        """Signature of the source minus the injected container and prepared arguments."""
        try:
            signature = inspect.signature(self.source)
        except (TypeError, ValueError):
            return None

        skip = len(self.delivery.prepared_arguments)
        if self.delivery.placement is ContainerPlacement.NEEDS_CONTAINER:
            skip += 1

        parameters = list(signature.parameters.values())
        remaining = []
        for parameter in parameters:
            if skip and parameter.kind in _POSITIONAL_KINDS:
                skip -= 1
                continue
            remaining.append(parameter)
        return signature.replace(parameters=remaining)

    def create(self, *args: Any, **kwargs: Any) -> Any:
        """Build (or fetch) an instance through the member's delivery.

        Args:
            *args: Positional arguments placed after the prepared ones.
            **kwargs: Keyword arguments forwarded to the source.

        Returns:
            The instance produced by the delivery.
        """
        instance = self._metadata.delivery.open(self._container, *args, **kwargs)
        self._metadata.construction_count += 1
        return instance

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        return self.create(*args, **kwargs)

    def __instancecheck__(self, instance: Any) -> bool:
        source = self.source
        return isinstance(source, type) and isinstance(instance, source)

    def __subclasscheck__(self, subclass: Any) -> bool:
        source = self.source
        return isinstance(source, type) and isinstance(subclass, type) and issubclass(subclass, source)

    def __repr__(self) -> str:
        return f"<ConstructorHandle {self.name!r} -> {self.__qualname__} via {self.delivery!r}>"


class Container:
    """Read-only view over a carrier's members.

    Reading a provider member returns its ``ConstructorHandle``; reading a
    plain value returns the value; reading an unknown name returns None.
    Writes and deletes are ignored. Any member name reads through, including
    underscore-prefixed ones; the container keeps its own state in a dunder slot.

    Example:
        >>> container = Carrier({"Clock": lambda c: CachedDelivery(SystemClock)}).container
        >>> clock = container.Clock()
        >>> isinstance(clock, SystemClock)
        True
    """

    __slots__ = ("__parcel_carrier__",)

    def __init__(self, carrier: "Carrier") -> None:
        object.__setattr__(self, "__parcel_carrier__", carrier)

    def __getattr__(self, name: str) -> Any:
        carrier: Carrier = object.__getattribute__(self, "__parcel_carrier__")
        if name.startswith("__") and name.endswith("__") and not carrier.knows(name):
            raise AttributeError(name)
        return carrier.read(name)

    def __getitem__(self, name: str) -> Any:
        return self.__parcel_carrier__.read(name)

    def __setattr__(self, name: str, value: Any) -> None:
        self.__parcel_carrier__.write(name, value)

    def __delattr__(self, name: str) -> None:
        self.__parcel_carrier__.write(name, None)

    def __setitem__(self, name: str, value: Any) -> None:
        self.__parcel_carrier__.write(name, value)

    def __delitem__(self, name: str) -> None:
        self.__parcel_carrier__.write(name, None)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.__parcel_carrier__.has(name)

    def __iter__(self) -> Iterator[str]:
        return iter(self.__parcel_carrier__.names())

    def __len__(self) -> int:
        return len(self.__parcel_carrier__.names())

    def __dir__(self) -> List[str]:
        return sorted(set(self.__parcel_carrier__.names()) | set(self.__parcel_carrier__.provider.values))

    def __copy__(self) -> "Container":
        return self

    def __deepcopy__(self, memo: Dict[int, Any]) -> "Container":
        return self

    def __repr__(self) -> str:
        return f"<Container members={self.__parcel_carrier__.names()!r}>"


class Carrier:
    """Builds a container from a provider and resolves its members lazily.

    A member's factory runs the first time the member is read, with the
    container itself as argument. The returned delivery is memoized, so later
    reads return the same handle. Factories only declare deliveries; instances
    are built when a handle is called, which lets members refer to each other
    through the container without ordering constraints.

    Attributes:
        _provider: The provider the container is built from.
        _detector: Detects members read while their own factory runs.
        _members: Metadata of resolved members, by name.
        _handles: Handles of resolved members, by name.
        _container: The container exposed to consumers.
    """

    def __init__(self, provider: ProviderLike, *, detector: Optional[CircularDependencyDetector] = None) -> None:
        """Initialize the carrier.

        Args:
            provider: A ``Provider`` or a plain mapping of member name to factory.
            detector: Detector for re-entrant factories, a fresh one by default.
        """
        if not isinstance(provider, Provider):
            provider = Provider(factories=dict(provider))
        self._provider = provider
        self._detector = detector or CircularDependencyDetector()
        self._members: Dict[str, MemberMetadata] = {}
        self._handles: Dict[str, ConstructorHandle] = {}
        self._container = Container(self)

    @property
    def container(self) -> Container:
        return self._container

    @property
    def provider(self) -> Provider:
        return self._provider

    def names(self) -> List[str]:
        """Return the provider member names."""
        return list(self._provider.factories)

    def has(self, name: str) -> bool:
        """Tell whether ``name`` is a provider member."""
        return name in self._provider.factories

    def knows(self, name: str) -> bool:
        """Tell whether ``name`` is a provider member or a plain value."""
        return name in self._provider.factories or name in self._provider.values

    def read(self, name: str) -> Any:
        """Return the handle for a provider member, or the plain value at ``name``.

        Args:
            name: The member name.

        Returns:
            A ``ConstructorHandle`` for provider members, the value for plain
            members, None otherwise.

        Raises:
            CircularDependencyError: If the member's factory reads the member itself.
            InvalidDeliveryError: If the factory does not return a delivery.
        """
        handle = self._handles.get(name)
        if handle is not None:
            return handle

        factory = self._provider.factories.get(name)
        if factory is None:
            return self._provider.values.get(name)

        return self._resolve(name, factory)

    def write(self, name: str, value: Any) -> bool:
        """Reject a write to the container.

        Returns:
            Always False.
        """
        logger.debug("Ignored write to container member %r", name)
        return False

    def metadata(self, name: str) -> Optional[MemberMetadata]:
        """Return the metadata of a resolved member, None if it was never read."""
        return self._members.get(name)

    def resolved_names(self) -> List[str]:
        """Return the names of the members resolved so far."""
        return list(self._members)

    def _resolve(self, name: str, factory: Callable[[Any], IDelivery]) -> ConstructorHandle:
        """Run the member's factory and wrap its delivery in a handle."""
        with self._detector.guard(name):
            delivery = factory(self._container)

        if not isinstance(delivery, IDelivery):
            raise InvalidDeliveryError(name, delivery)

        metadata = MemberMetadata(name=name, delivery=delivery)
        handle = ConstructorHandle(metadata, self._container)
        self._members[name] = metadata
        self._handles[name] = handle
        logger.debug("Resolved container member %r to %r", name, delivery)
        return handle


def build_container(provider: ProviderLike, **options: Any) -> Container:
    """Build a container from ``provider``.

    Args:
        provider: A ``Provider`` or a plain mapping of member name to factory.
        **options: Keyword arguments forwarded to ``Carrier``.

    Returns:
        The carrier's container.
    """
    return Carrier(provider, **options).container
