"""Integration tests for edge cases and unusual scenarios."""

import pytest

from parcel_di import (
    CachedDelivery,
    CircularDependencyError,
    ContainerPlacement,
    InstanceCache,
    InvalidDeliveryError,
    InvalidLifetimeFormat,
    RegularDelivery,
    build_container,
    delivery_location,
)
from parcel_di.infrastructure.testing import FakeClock


class TestFactoryFailures:
    """Test scenarios where factories misbehave."""

    def test_factory_exception_propagates(self):
        """Test that errors raised by factories reach the reader unchanged."""

        def factory(c):
            raise KeyError("missing setting")

        container = build_container({"Broken": factory})

        with pytest.raises(KeyError, match="missing setting"):
            container.Broken

    def test_invalid_lifetime_surfaces_on_read(self):
        """Test that lifetime errors fail when the member is first read."""
        container = build_container({"Broken": lambda c: CachedDelivery(dict, lifetime="soon")})

        with pytest.raises(InvalidLifetimeFormat):
            container.Broken

    def test_factory_returning_class(self):
        """Test that returning a class instead of a delivery is rejected."""
        container = build_container({"Broken": lambda c: dict})

        with pytest.raises(InvalidDeliveryError):
            container.Broken

    def test_cycle_does_not_poison_other_members(self):
        """Test that members outside a cycle still resolve after it is detected."""
        container = build_container(
            {
                "Loop": lambda c: RegularDelivery(list, c.Loop),
                "Fine": lambda c: RegularDelivery(dict),
            }
        )

        with pytest.raises(CircularDependencyError):
            container.Loop

        assert container.Fine() == {}


class TestConstructionEdgeCases:
    """Test construction scenarios beyond the common path."""

    def test_source_exception_propagates(self):
        """Test that constructor errors are not wrapped."""

        class Strict:
            def __init__(self, value):
                if value < 0:
                    raise ValueError("negative")

        container = build_container({"Strict": lambda c: RegularDelivery(Strict)})

        with pytest.raises(ValueError, match="negative"):
            container.Strict(-1)

    def test_wrong_arity_raises_type_error(self):
        """Test that too many arguments fail like a direct call would."""

        class NoArgs:
            pass

        container = build_container({"NoArgs": lambda c: RegularDelivery(NoArgs, "extra")})

        with pytest.raises(TypeError):
            container.NoArgs()

    def test_marked_subclass_needs_own_mark(self):
        """Test that marking a base class does not mark subclasses."""

        @delivery_location
        class Base:
            def __init__(self, container):
                self.container = container

        class Child(Base):
            def __init__(self, *args):
                self.args = args

        container = build_container({"Child": lambda c: RegularDelivery(Child, "x")})

        assert container.Child().args == ("x",)

    def test_explicit_placement_for_unmarked_source(self):
        """Test injecting the container into a third-party type without marking it."""
        container = build_container(
            {"Names": lambda c: RegularDelivery(list, placement=ContainerPlacement.NEEDS_CONTAINER)}
        )

        assert container.Names() == ["Names"]

    def test_zero_lifetime_expires_immediately(self):
        """Test that a zero lifetime never serves a cached instance."""
        clock = FakeClock()
        cache = InstanceCache(clock=clock)
        container = build_container({"Token": lambda c: CachedDelivery(object, lifetime=0, cache=cache)})

        assert container.Token() is not container.Token()

    def test_none_and_scalars_in_keys(self):
        """Test that None and equal scalars hit the cache."""
        cache = InstanceCache()

        class Query:
            def __init__(self, *parts):
                self.parts = parts

        container = build_container({"Query": lambda c: CachedDelivery(Query, cache=cache)})

        first = container.Query(None, 1, "a", 2.5)

        assert container.Query(None, 1, "a", 2.5) is first
        assert container.Query(None, True, "a", 2.5) is not first


class TestContainerShape:
    """Test the container as a Python object."""

    def test_members_named_like_builtins(self):
        """Test that member names are not restricted by Container methods."""
        container = build_container(
            {
                "get": lambda c: RegularDelivery(dict),
                "items": lambda c: RegularDelivery(list),
            }
        )

        assert container.get() == {}
        assert container.items() == []

    def test_hashable_and_identity_compared(self):
        """Test that containers can be dictionary keys."""
        left = build_container({})
        right = build_container({})

        assert {left: 1, right: 2}[left] == 1
        assert left != right
