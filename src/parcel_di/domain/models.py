from typing import Any, Callable, Dict, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field

from parcel_di.domain.enums import Expiry
from parcel_di.domain.interfaces import IDelivery


class Provider(BaseModel):
    """Declarative mapping of container member names to delivery factories.

    Attributes:
        factories: Member name to factory; each factory receives the container and returns a delivery.
        values: Plain members returned as-is when read from the container.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    factories: Dict[str, Callable[[Any], IDelivery]] = Field(
        default_factory=dict, description="Factories producing a delivery for each member name."
    )
    values: Dict[str, Any] = Field(
        default_factory=dict, description="Plain values passed through unchanged."
    )


class CacheEntry(BaseModel):
    """One cached instance and the argument sequence it was built from.

    Attributes:
        key: Resolved positional arguments, container first.
        keywords: Resolved keyword arguments.
        instance: The cached instance.
        lifetime: Lifetime used when the entry was last stored or refreshed.
        expires_at: Clock reading after which the entry is stale, ``None`` when unbounded.
        hits: Number of lookups served by this entry.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    key: Tuple[Any, ...] = Field(..., description="Resolved positional argument sequence.")
    keywords: Dict[str, Any] = Field(default_factory=dict, description="Resolved keyword arguments.")
    instance: Any = Field(..., description="The cached instance.")
    lifetime: Union[float, Expiry] = Field(..., description="Lifetime in milliseconds or UNBOUNDED.")
    expires_at: Optional[float] = Field(default=None, description="Expiry deadline on the cache clock.")
    hits: int = Field(default=0, description="Number of cache hits served.")

    def is_expired(self, now: float) -> bool:
        """Tell whether the entry's deadline has passed.

        Args:
            now: Current reading of the cache clock.
        """
        return self.expires_at is not None and now >= self.expires_at


class MemberMetadata(BaseModel):
    """Tracks a resolved container member.

    Attributes:
        name: The provider member name.
        delivery: Delivery returned by the member's factory.
        construction_count: Number of times the member has been constructed through the container.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    name: str = Field(..., description="The provider member name.")
    delivery: IDelivery = Field(..., description="Delivery returned by the member's factory.")
    construction_count: int = Field(default=0, description="Number of constructions through the container.")
