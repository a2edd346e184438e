from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Optional, Tuple, Union

from parcel_di.domain.enums import ContainerPlacement, Expiry

if TYPE_CHECKING:
    from parcel_di.domain.models import CacheEntry

LifetimeMs = Union[int, float, Expiry]


class IDelivery(ABC):
    """Abstract recipe for producing instances of a source constructor."""

    @property
    @abstractmethod
    def source(self) -> Callable[..., Any]:
        """The underlying constructible type or callable."""

    @property
    @abstractmethod
    def prepared_arguments(self) -> Tuple[Any, ...]:
        """Fixed leading arguments prepended to every construction."""

    @property
    @abstractmethod
    def placement(self) -> ContainerPlacement:
        """Whether the container is injected as the first argument."""

    @abstractmethod
    def open(self, container: Any, *args: Any, **kwargs: Any) -> Any:
        """Produce an instance for the given container and call-site arguments.

        Args:
            container: The runtime container the instance is built for.
            *args: Trailing positional arguments supplied by the caller.
            **kwargs: Keyword arguments supplied by the caller.

        Returns:
            An object produced by calling ``source``.
        """


class IInstanceCache(ABC):
    """Abstract interface for the constructor-keyed instance store."""

    @abstractmethod
    def ensure_bucket(self, source: Any) -> None:
        """Create the bucket for ``source`` unless it already exists."""

    @abstractmethod
    def lookup(
        self,
        source: Any,
        key: Tuple[Any, ...],
        keywords: Dict[str, Any],
        lifetime: LifetimeMs,
    ) -> Optional["CacheEntry"]:
        """Return the live entry matching ``key``, refreshing it when ``lifetime`` is bounded.

        Args:
            source: The constructor whose bucket is searched.
            key: Resolved positional argument sequence.
            keywords: Resolved keyword arguments.
            lifetime: Lifetime of the requesting delivery, in milliseconds.
        """

    @abstractmethod
    def store(
        self,
        source: Any,
        key: Tuple[Any, ...],
        keywords: Dict[str, Any],
        instance: Any,
        lifetime: LifetimeMs,
    ) -> "CacheEntry":
        """Store a freshly constructed instance under ``key``."""

    @abstractmethod
    def entries(self, source: Any) -> List["CacheEntry"]:
        """Return a snapshot of the live entries for ``source``."""

    @abstractmethod
    def purge_expired(self) -> int:
        """Remove every expired entry and return how many were removed."""

    @abstractmethod
    def clear(self, source: Optional[Any] = None) -> None:
        """Drop cached entries, for one source or for all of them."""
