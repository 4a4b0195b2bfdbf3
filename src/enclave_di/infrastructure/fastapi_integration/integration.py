from typing import Any, Awaitable, Callable

from fastapi import FastAPI, Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from enclave_di.domain import IContainer, Key, KeyLike


def create_fastapi_dependency(container: IContainer, key: KeyLike) -> Callable[[], Any]:
    """Create a FastAPI Depends() callable that resolves a key from the container.

    The resolved instance lifetime follows the binding in the container. Keys
    exposed by private modules resolve like any other key.

    Args:
        container: The DI container to resolve dependencies from.
        key: The key or type to resolve when the dependency is called.

    Returns:
        A callable that FastAPI can use with Depends().

    Example:
        >>> container = create_container(PaymentsModule())
        >>> get_gateway = create_fastapi_dependency(container, PaymentGateway)
        >>>
        >>> @app.post("/charges")
        >>> async def charge(gateway: PaymentGateway = Depends(get_gateway)):
        ...     return await gateway.charge()
    """
    resolved_key = Key.of(key)

    def dependency() -> Any:
        return container.resolve(resolved_key)

    return dependency


def create_scoped_dependency(key: KeyLike) -> Callable[[Request], Any]:
    """Create a FastAPI dependency that resolves from the request-scoped container.

    Requires the ScopedContainerMiddleware to be installed.

    Example:
        >>> app.add_middleware(ScopedContainerMiddleware, container=container)
        >>>
        >>> get_request_context = create_scoped_dependency(RequestContext)
        >>>
        >>> @app.get("/process")
        >>> async def process_request(ctx: RequestContext = Depends(get_request_context)):
        ...     return {"request_id": ctx.request_id}
    """
    resolved_key = Key.of(key)

    def scoped_dependency(request: Request) -> Any:
        if not hasattr(request.state, "di_container"):
            raise RuntimeError(
                "Request does not have a scoped DI container. Did you forget to add ScopedContainerMiddleware?"
            )
        scoped_container: IContainer = request.state.di_container
        return scoped_container.resolve(resolved_key)

    return scoped_dependency


class ScopedContainerMiddleware(BaseHTTPMiddleware):
    """Middleware that creates a scoped DI container for each request.

    The scoped container is accessible via `request.state.di_container` and
    its scoped instances are dropped when the response is produced.

    Attributes:
        container: The parent DI container to create scopes from.
    """

    def __init__(self, app: FastAPI, container: IContainer):
        super().__init__(app)
        self.container = container

    async def dispatch(self, request: Request, call_next: Callable[[Request], Awaitable[Response]]) -> Response:
        scoped_container = self.container.create_scope()
        request.state.di_container = scoped_container

        try:
            return await call_next(request)
        finally:
            scoped_container.clear()
