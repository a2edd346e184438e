from enum import Enum


class ContainerPlacement(str, Enum):
    """Defines whether a source constructor receives the container.

    Attributes:
        NEEDS_CONTAINER: The container is passed as the first positional argument.
        STANDALONE: The container is not passed at all.
    """

    NEEDS_CONTAINER = "needs_container"
    STANDALONE = "standalone"

    def __str__(self) -> str:
        return self.value


class Expiry(str, Enum):
    """Sentinel lifetimes that are not a number of milliseconds.

    Attributes:
        UNBOUNDED: Cached instances never expire.
    """

    UNBOUNDED = "unbounded"

    def __str__(self) -> str:
        return self.value


UNBOUNDED = Expiry.UNBOUNDED
