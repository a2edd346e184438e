"""
Domain layer - Core business logic and models.

This layer contains the enums, exceptions, interfaces and value objects of the
delivery runtime. It has no dependencies on other layers.
"""

from .enums import UNBOUNDED, ContainerPlacement, Expiry
from .exceptions import (
    CircularDependencyError,
    DIException,
    InvalidDeliveryError,
    InvalidLifetime,
    InvalidLifetimeFormat,
    LifetimeError,
)
from .interfaces import IDelivery, IInstanceCache, LifetimeMs
from .models import CacheEntry, MemberMetadata, Provider

__all__ = [
    # Enums
    "ContainerPlacement",
    "Expiry",
    "UNBOUNDED",
    # Exceptions
    "DIException",
    "CircularDependencyError",
    "InvalidDeliveryError",
    "LifetimeError",
    "InvalidLifetimeFormat",
    "InvalidLifetime",
    # Interfaces
    "IDelivery",
    "IInstanceCache",
    "LifetimeMs",
    # Models
    "Provider",
    "CacheEntry",
    "MemberMetadata",
]
