from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Awaitable, Callable, Type, TypeVar, Union

from fastapi import FastAPI, Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from grove_di.domain import IApplicationContext

T = TypeVar("T")

STATE_ATTRIBUTE = "application_context"


def create_fastapi_dependency(context: IApplicationContext, bean: Union[str, Type[T]]) -> Callable[[], T]:
    """Create a FastAPI Depends() callable that returns a bean from the context.

    Beans are singletons, so every call returns the same instance.

    Args:
        context: The started application context.
        bean: The bean name or type to look up.

    Returns:
        A callable that FastAPI can use with Depends().

    Example:
        >>> context = ApplicationContext([UserRepository, UserService], PropertyResolver())
        >>> get_user_service = create_fastapi_dependency(context, UserService)
        >>>
        >>> @app.get("/users")
        >>> async def list_users(service: UserService = Depends(get_user_service)):
        ...     return service.list_users()
    """

    def dependency() -> T:
        """Look the bean up in the context."""
        return context.get_bean(bean)

    return dependency


def create_request_dependency(bean: Union[str, Type[T]]) -> Callable[[Request], T]:
    """Create a FastAPI dependency that looks the bean up in the request's context.

    Requires the ApplicationContextMiddleware to be installed.

    Args:
        bean: The bean name or type to look up.

    Returns:
        A callable that resolves from ``request.state.application_context``.

    Example:
        >>> app.add_middleware(ApplicationContextMiddleware, context=context)
        >>>
        >>> get_user_service = create_request_dependency(UserService)
        >>>
        >>> @app.get("/users")
        >>> async def list_users(service: UserService = Depends(get_user_service)):
        ...     return service.list_users()
    """

    def request_dependency(request: Request) -> T:
        """Look the bean up in the context attached to the request."""
        context = getattr(request.state, STATE_ATTRIBUTE, None)
        if context is None:
            raise RuntimeError(
                "Request does not have an application context. Did you forget to add ApplicationContextMiddleware?"
            )
        return context.get_bean(bean)

    return request_dependency


class ApplicationContextMiddleware(BaseHTTPMiddleware):
    """Middleware that exposes the application context on every request.

    The context is accessible via `request.state.application_context`.

    Attributes:
        context: The started application context.

    Example:
        >>> app = FastAPI()
        >>> app.add_middleware(ApplicationContextMiddleware, context=context)
        >>>
        >>> @app.get("/")
        >>> async def root(request: Request):
        ...     service = request.state.application_context.get_bean(UserService)
        ...     return {"users": service.list_users()}
    """

    def __init__(self, app: FastAPI, context: IApplicationContext):
        """Initialize the middleware with the application context.

        Args:
            app: The FastAPI/Starlette application.
            context: The started application context.
        """
        super().__init__(app)
        self.context = context

    async def dispatch(self, request: Request, call_next: Callable[[Request], Awaitable[Response]]) -> Response:
        """Attach the context to the request and execute the endpoint.

        Args:
            request: The incoming HTTP request.
            call_next: The next middleware or endpoint handler.

        Returns:
            The response from the endpoint.
        """
        setattr(request.state, STATE_ATTRIBUTE, self.context)
        return await call_next(request)


def context_lifespan(context: IApplicationContext) -> Callable[[FastAPI], Any]:
    """Create a FastAPI lifespan that closes the context on shutdown.

    Args:
        context: The started application context.

    Returns:
        A lifespan callable for ``FastAPI(lifespan=...)``.

    Example:
        >>> context = ApplicationContext.from_config_class(AppConfiguration, PropertyResolver(), ComponentScanner())
        >>> app = FastAPI(lifespan=context_lifespan(context))
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        app.state.application_context = context
        try:
            yield
        finally:
            context.close()

    return lifespan
