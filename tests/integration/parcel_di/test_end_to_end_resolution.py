"""Integration tests for complete container resolution scenarios."""

from parcel_di import (
    UNBOUNDED,
    CachedDelivery,
    Carrier,
    InstanceCache,
    Provider,
    RegularDelivery,
    build_container,
    delivery_location,
)
from parcel_di.infrastructure.testing import FakeClock


class Settings:
    def __init__(self, environment):
        self.environment = environment


class Database:
    def __init__(self, settings_type):
        self.settings = settings_type("production")


@delivery_location
class UserRepository:
    def __init__(self, container, table):
        self.database = container.Database()
        self.table = table


@delivery_location
class UserService:
    def __init__(self, container, audit=False):
        self.repository = container.UserRepository()
        self.audit = audit
        self.container = container


class TestApplicationGraph:
    """Test a realistic provider graph end to end."""

    def make_provider(self, cache):
        return Provider(
            factories={
                "Settings": lambda c: CachedDelivery(Settings, cache=cache),
                "Database": lambda c: CachedDelivery(Database, c.Settings, cache=cache),
                "UserRepository": lambda c: CachedDelivery(UserRepository, "users", lifetime="10m", cache=cache),
                "UserService": lambda c: RegularDelivery(UserService),
            },
            values={"app_name": "accounts"},
        )

    def test_service_graph(self):
        """Test that a service built from the container gets a fully wired graph."""
        container = build_container(self.make_provider(InstanceCache()))

        service = container.UserService(audit=True)

        assert isinstance(service, UserService)
        assert service.audit is True
        assert service.container is container
        assert service.repository.table == "users"
        assert service.repository.database.settings.environment == "production"
        assert container.app_name == "accounts"

    def test_services_share_cached_dependencies(self):
        """Test that regular members are fresh while cached members are shared."""
        container = build_container(self.make_provider(InstanceCache()))

        first = container.UserService()
        second = container.UserService()

        assert first is not second
        assert first.repository is second.repository
        assert first.repository.database is container.Database()

    def test_containers_do_not_share_instances(self):
        """Test that the container is part of every cache key."""
        cache = InstanceCache()
        left = build_container(self.make_provider(cache))
        right = build_container(self.make_provider(cache))

        assert left.Database() is not right.Database()
        assert left.Database() is left.Database()

    def test_lazy_resolution(self):
        """Test that only the members actually used are resolved."""
        carrier = Carrier(self.make_provider(InstanceCache()))

        carrier.container.Database()

        assert sorted(carrier.resolved_names()) == ["Database", "Settings"]

    def test_repository_expires_but_database_stays(self):
        """Test mixing bounded and unbounded lifetimes over the same cache."""
        clock = FakeClock()
        container = build_container(self.make_provider(InstanceCache(clock=clock)))

        repository = container.UserRepository()
        clock.advance(10 * 60 * 1000 + 1)
        refreshed = container.UserRepository()

        assert refreshed is not repository
        assert refreshed.database is repository.database


class TestCachedDeliverySharing:
    """Test cache sharing between members targeting the same source."""

    def test_members_with_compatible_arguments_converge(self):
        """Test that two members resolving to the same arguments share one instance."""
        cache = InstanceCache()
        container = build_container(
            {
                "Primary": lambda c: CachedDelivery(Settings, "primary", cache=cache),
                "Named": lambda c: CachedDelivery(Settings, lifetime="1h", cache=cache),
            }
        )

        assert container.Primary() is container.Named("primary")
        assert container.Named("replica") is not container.Primary()

    def test_unbounded_literal(self):
        """Test that 'unbounded' and UNBOUNDED configure the same lifetime."""
        assert CachedDelivery(Settings, lifetime="unbounded", cache=InstanceCache()).lifetime is UNBOUNDED
