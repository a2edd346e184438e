from typing import Any, Awaitable, Callable

from fastapi import FastAPI, Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from parcel_di.application import Container


def create_fastapi_dependency(container: Container, name: str, *args: Any, **kwargs: Any) -> Callable[[], Any]:
    """Create a FastAPI Depends() callable that constructs a container member.

    Each call goes through the member's delivery, so caching follows the
    delivery configured by the provider (regular or cached).

    Args:
        container: The container to construct from.
        name: The member name.
        *args: Call-site positional arguments passed to the member.
        **kwargs: Call-site keyword arguments passed to the member.

    Returns:
        A callable that FastAPI can use with Depends().

    Raises:
        LookupError: If ``name`` is not a provider member of the container.

    Example:
        >>> container = build_container({
        ...     "UserRepository": lambda c: CachedDelivery(UserRepository, c),
        ... })
        >>>
        >>> get_user_repo = create_fastapi_dependency(container, "UserRepository")
        >>>
        >>> @app.get("/users")
        >>> async def list_users(repo: UserRepository = Depends(get_user_repo)):
        ...     return await repo.get_all()
    """
    if name not in container:
        raise LookupError(f"Container has no provider member named '{name}'")

    def dependency() -> Any:
        """Construct the member from the container."""
        return container[name](*args, **kwargs)

    return dependency


def create_request_dependency(name: str, *args: Any, **kwargs: Any) -> Callable[[Request], Any]:
    """Create a FastAPI dependency that constructs from the request's container.

    Requires the ContainerMiddleware to be installed.

    Args:
        name: The member name.
        *args: Call-site positional arguments passed to the member.
        **kwargs: Call-site keyword arguments passed to the member.

    Returns:
        A callable that constructs the member from ``request.state.container``.

    Example:
        >>> app.add_middleware(ContainerMiddleware, container=container)
        >>>
        >>> get_request_context = create_request_dependency("RequestContext")
        >>>
        >>> @app.get("/process")
        >>> async def process_request(ctx: RequestContext = Depends(get_request_context)):
        ...     return {"request_id": ctx.request_id}
    """

    def request_dependency(request: Request) -> Any:
        """Construct from the request's container."""
        if not hasattr(request.state, "container"):
            raise RuntimeError(
                "Request does not have a DI container. Did you forget to add ContainerMiddleware?"
            )
        container: Container = request.state.container
        if name not in container:
            raise LookupError(f"Container has no provider member named '{name}'")
        return container[name](*args, **kwargs)

    return request_dependency


class ContainerMiddleware(BaseHTTPMiddleware):
    """Middleware that exposes a container on every request.

    The container is accessible via `request.state.container`. Containers are
    read-only, so the same one is shared by all requests; per-request instances
    come from regular deliveries, shared ones from cached deliveries.

    Attributes:
        container: The container attached to each request.

    Example:
        >>> container = build_container(provider)
        >>>
        >>> app = FastAPI()
        >>> app.add_middleware(ContainerMiddleware, container=container)
        >>>
        >>> @app.get("/")
        >>> async def root(request: Request):
        ...     mailer = request.state.container.Mailer()
        ...     return {"message": "Hello"}
    """

    def __init__(self, app: FastAPI, container: Container):
        """Initialize the middleware with a container.

        Args:
            app: The FastAPI/Starlette application.
            container: The container to attach to requests.
        """
        super().__init__(app)
        self.container = container

    async def dispatch(self, request: Request, call_next: Callable[[Request], Awaitable[Response]]) -> Response:
        """Attach the container to the request and execute the endpoint.

        Args:
            request: The incoming HTTP request.
            call_next: The next middleware or endpoint handler.

        Returns:
            The response from the endpoint.
        """
        request.state.container = self.container
        return await call_next(request)
