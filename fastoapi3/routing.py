"""Route groups that document what they register.

A ``RouterGroup`` mirrors FastAPI's route registration while recording each
route into the engine's ``SchemaDocument``. Prefix and middleware composition
is left to FastAPI: every group owns an ``APIRouter`` and hands each new route
up to its parent with ``include_router``, so the route reaches the
application as soon as it is registered.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
import logging
from typing import Any

from fastapi import APIRouter, Depends
from fastapi.params import Depends as DependsParam
from fastapi.routing import APIRoute

from fastoapi3.openapi.document import OperationOption, SchemaDocument
from fastoapi3.openapi.paths import normalize_prefix, to_route_path

logger = logging.getLogger(__name__)

Handler = Callable[..., Any]
Middleware = Handler | DependsParam
Options = Sequence[OperationOption]


def as_dependencies(middleware: Sequence[Middleware]) -> list[DependsParam]:
    """Wrap plain callables into ``Depends`` so FastAPI runs them in order."""
    return [m if isinstance(m, DependsParam) else Depends(m) for m in middleware]


class RouterGroup:
    """A set of routes sharing a path prefix and middleware."""

    def __init__(
        self,
        router: APIRouter,
        document: SchemaDocument,
        parent: RouterGroup | None = None,
        base_path: str = "",
    ) -> None:
        self._router = router
        self._document = document
        self._parent = parent
        self._base_path = base_path

    @property
    def router(self) -> APIRouter:
        """The underlying ``APIRouter``."""
        return self._router

    @property
    def base_path(self) -> str:
        """Absolute path prefix of this group."""
        return self._base_path

    def group(self, relative_path: str, *middleware: Middleware) -> RouterGroup:
        """Create a child group.

        Routes of the child are prefixed with ``relative_path`` and run
        ``middleware`` after this group's own middleware.
        """
        prefix = normalize_prefix(relative_path)
        router = APIRouter(prefix=prefix, dependencies=as_dependencies(middleware))
        return RouterGroup(router, self._document, parent=self, base_path=self._base_path + prefix)

    def handle(
        self,
        http_method: str,
        relative_path: str,
        *handlers: Handler,
        options: Options = (),
    ) -> RouterGroup:
        """Register a route and document it.

        The last handler is the endpoint; the ones before it run as route
        middleware. Raising ``HTTPException`` from a middleware aborts the
        request.
        """
        if not handlers:
            raise ValueError("there must be at least one handler")

        *middleware, endpoint = handlers
        method = http_method.upper()
        path = to_route_path(relative_path)
        if not path and not self._router.prefix:
            path = "/"

        full_path = self._base_path + path
        operation = self._document.build_operation(method, full_path, options, endpoint=endpoint)

        self._router.add_api_route(
            path,
            endpoint,
            methods=[method],
            dependencies=as_dependencies(middleware),
        )
        if self._parent is not None:
            self._parent._adopt(self._router.routes[-1])

        if operation is not None:
            self._document.store(method, full_path, operation)
        logger.debug("Registered %s %s", method, full_path)
        return self

    def get(self, relative_path: str, *handlers: Handler, options: Options = ()) -> RouterGroup:
        """Register a GET route."""
        return self.handle("GET", relative_path, *handlers, options=options)

    def post(self, relative_path: str, *handlers: Handler, options: Options = ()) -> RouterGroup:
        """Register a POST route."""
        return self.handle("POST", relative_path, *handlers, options=options)

    def put(self, relative_path: str, *handlers: Handler, options: Options = ()) -> RouterGroup:
        """Register a PUT route."""
        return self.handle("PUT", relative_path, *handlers, options=options)

    def patch(self, relative_path: str, *handlers: Handler, options: Options = ()) -> RouterGroup:
        """Register a PATCH route."""
        return self.handle("PATCH", relative_path, *handlers, options=options)

    def delete(self, relative_path: str, *handlers: Handler, options: Options = ()) -> RouterGroup:
        """Register a DELETE route."""
        return self.handle("DELETE", relative_path, *handlers, options=options)

    def head(self, relative_path: str, *handlers: Handler, options: Options = ()) -> RouterGroup:
        """Register a HEAD route."""
        return self.handle("HEAD", relative_path, *handlers, options=options)

    def options(self, relative_path: str, *handlers: Handler, options: Options = ()) -> RouterGroup:
        """Register an OPTIONS route."""
        return self.handle("OPTIONS", relative_path, *handlers, options=options)

    def _adopt(self, route: APIRoute) -> None:
        """Include a route registered by a child group, then pass it upward."""
        # the carrier router has no lifespan; keep ours from being wrapped per route
        lifespan = self._router.lifespan_context
        self._router.include_router(APIRouter(routes=[route]))
        self._router.lifespan_context = lifespan
        if self._parent is not None:
            self._parent._adopt(self._router.routes[-1])
