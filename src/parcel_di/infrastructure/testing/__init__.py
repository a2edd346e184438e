"""
Testing utilities module.

Provides helpers and utilities for testing applications using parcel-di.
"""

from .utilities import FakeClock, TestCarrier, create_mock_container

__all__ = [
    "TestCarrier",
    "create_mock_container",
    "FakeClock",
]
