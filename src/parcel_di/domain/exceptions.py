from typing import Any, List


class DIException(Exception):
    """Base exception for DI-related errors."""


class CircularDependencyError(DIException):
    """Raised when a container member is read while its own factory is running.

    Attributes:
        dependency_chain: Member names involved in the re-entrant resolution.
    """

    def __init__(self, dependency_chain: List[str]) -> None:
        self.dependency_chain = dependency_chain
        message = f"Circular dependency detected: {' -> '.join(dependency_chain)}"
        super().__init__(message)


class InvalidDeliveryError(DIException, TypeError):
    """Raised when a provider factory returns something that is not a delivery.

    Attributes:
        name: The provider member whose factory misbehaved.
        value: The value the factory returned.
    """

    def __init__(self, name: str, value: Any) -> None:
        self.name = name
        self.value = value
        super().__init__(f"Provider '{name}' returned {type(value).__name__}, expected a delivery")


class LifetimeError(DIException):
    """Raised for invalid lifetime configurations.

    This occurs when:
    - A lifetime string does not follow the ``<integer><unit>`` format.
    - A numeric lifetime is negative or not a number.
    """


class InvalidLifetimeFormat(LifetimeError, ValueError):
    """Raised when a lifetime value cannot be parsed.

    Attributes:
        value: The rejected lifetime value.
    """

    def __init__(self, value: Any) -> None:
        self.value = value
        super().__init__(
            f"Invalid lifetime format: {value!r}. "
            "Expected '<integer><s|m|h|d>', milliseconds or 'unbounded'"
        )


class InvalidLifetime(LifetimeError, ValueError):
    """Raised when a numeric lifetime is out of range.

    Attributes:
        value: The rejected lifetime value.
    """

    def __init__(self, value: Any) -> None:
        self.value = value
        super().__init__(f"Invalid lifetime: {value!r}. Lifetime must be a non-negative number")
