"""
parcel-di: Lazy dependency-injection carrier with regular and cached deliveries.

Public API exports for the parcel-di package.
"""

# Application exports
from parcel_di.application.carrier import Carrier, ConstructorHandle, Container, build_container
from parcel_di.application.deliveries import CachedDelivery, RegularDelivery
from parcel_di.application.instance_cache import InstanceCache
from parcel_di.application.lifetime_parser import parse_lifetime
from parcel_di.application.marker import delivery_location, is_delivery_location

# Domain exports
from parcel_di.domain.enums import UNBOUNDED, ContainerPlacement
from parcel_di.domain.exceptions import (
    CircularDependencyError,
    DIException,
    InvalidDeliveryError,
    InvalidLifetime,
    InvalidLifetimeFormat,
    LifetimeError,
)
from parcel_di.domain.models import Provider

__version__ = "0.1.0"

__all__ = [
    # Carrier
    "Carrier",
    "Container",
    "ConstructorHandle",
    "build_container",
    "Provider",
    # Deliveries
    "RegularDelivery",
    "CachedDelivery",
    "InstanceCache",
    "parse_lifetime",
    "UNBOUNDED",
    # Delivery location
    "delivery_location",
    "is_delivery_location",
    "ContainerPlacement",
    # Exceptions
    "DIException",
    "CircularDependencyError",
    "InvalidDeliveryError",
    "LifetimeError",
    "InvalidLifetimeFormat",
    "InvalidLifetime",
]
