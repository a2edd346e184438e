"""
Application layer - Use cases and orchestration.

This layer contains the deliveries, the instance cache and the carrier that
assembles containers. It depends only on the Domain layer.
"""

from .carrier import Carrier, ConstructorHandle, Container, build_container
from .circular_detector import CircularDependencyDetector
from .deliveries import CachedDelivery, Delivery, RegularDelivery
from .instance_cache import InstanceCache, keys_match, same_value
from .lifetime_parser import UNIT_MILLISECONDS, is_bounded, parse_lifetime
from .marker import (
    MarkerRegistry,
    default_registry,
    delivery_location,
    is_delivery_location,
    unmark_delivery_location,
)

__all__ = [
    "Carrier",
    "Container",
    "ConstructorHandle",
    "build_container",
    "CircularDependencyDetector",
    "Delivery",
    "RegularDelivery",
    "CachedDelivery",
    "InstanceCache",
    "same_value",
    "keys_match",
    "parse_lifetime",
    "is_bounded",
    "UNIT_MILLISECONDS",
    "MarkerRegistry",
    "default_registry",
    "delivery_location",
    "is_delivery_location",
    "unmark_delivery_location",
]
