"""FastAPI engine that serves its own OpenAPI document.

``Engine`` wraps a ``FastAPI`` application. Routes registered through it (or
through its groups) are documented in a ``SchemaDocument``; the first time the
engine starts serving it freezes the document and adds two endpoints: the raw
JSON schema and a Redoc page rendering it.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Mapping, Sequence
import glob
import logging
from pathlib import Path
import socket
import threading
import time
from typing import Any

from fastapi import FastAPI, Request, Response
from fastapi.openapi.models import Info, OpenAPI
from fastapi.responses import HTMLResponse, JSONResponse
from fastapi.routing import APIRoute
from fastapi.templating import Jinja2Templates
from jinja2 import DictLoader, Environment, select_autoescape
from pydantic import BaseModel
from starlette.types import Receive, Scope, Send

from fastoapi3 import server
from fastoapi3.core import Settings, configure_logging, get_settings
from fastoapi3.openapi.document import SchemaDocument, default_info
from fastoapi3.routing import Middleware, RouterGroup, as_dependencies
from fastoapi3.ui.redoc import RedocRenderer, RedocUIOptions, encode_options

logger = logging.getLogger(__name__)
access_logger = logging.getLogger("fastoapi3.access")

ExceptionHandler = Callable[[Request, Exception], Awaitable[Response] | Response]


class RouteInfo(BaseModel):
    """A registered route."""

    method: str
    path: str
    handler: str


class Engine(RouterGroup):
    """Route group bound to a FastAPI application and its OpenAPI document."""

    def __init__(self, app: FastAPI | None = None, settings: Settings | None = None) -> None:
        settings = settings or get_settings()
        self._app = app or FastAPI(openapi_url=None, docs_url=None, redoc_url=None)
        super().__init__(
            self._app.router,
            SchemaDocument(default_info(settings.title, settings.version)),
        )

        self._schema_path = settings.schema_path
        self._schema_ui_path = settings.schema_ui_path
        self._schema_middleware: list[Middleware] = []
        self._schema_ui_options: RedocUIOptions | None = None
        self._disable_schema = settings.disable_schema
        self._port = settings.port

        self._renderer = RedocRenderer()
        self._templates: Jinja2Templates | None = None
        self._func_map: dict[str, Callable[..., Any]] = {}
        self._trusted_proxies: list[str] | None = None

        self._setup_lock = threading.Lock()
        self._setup_done = False

    # -- accessors ---------------------------------------------------------

    @property
    def app(self) -> FastAPI:
        """The underlying FastAPI application.

        Routes added to it directly are served but never documented, and
        serving it directly skips the schema endpoints.
        """
        return self._app

    @property
    def schema(self) -> OpenAPI:
        """The OpenAPI document."""
        return self._document.get_document()

    @property
    def document(self) -> SchemaDocument:
        """Holder of the OpenAPI document."""
        return self._document

    @property
    def schema_path(self) -> str:
        return self._schema_path

    @property
    def schema_ui_path(self) -> str:
        return self._schema_ui_path

    @property
    def started(self) -> bool:
        """Whether a start entry point has run."""
        return self._setup_done

    def get_document(self) -> OpenAPI:
        """Return the OpenAPI document for inspection or changes."""
        return self._document.get_document()

    def set_info(self, info: Info) -> None:
        """Set the ``info`` block of the document."""
        self._document.set_info(info)

    # -- schema configuration ----------------------------------------------

    def disable_schema_handler(self) -> None:
        """Do not serve the schema or its UI. Enabled by default."""
        self._disable_schema = True

    def set_schema_path(self, path: str) -> None:
        """Set where the JSON schema is served. Defaults to ``/openapi.json``."""
        self._schema_path = path

    def set_schema_ui_path(self, path: str) -> None:
        """Set where the documentation UI is served. Defaults to ``/openapi``."""
        self._schema_ui_path = path

    def set_schema_ui_options(self, options: RedocUIOptions) -> None:
        """Set the Redoc options used by the UI endpoint."""
        self._schema_ui_options = options

    def schema_middleware(self, *middleware: Middleware) -> None:
        """Set middleware run before both schema endpoints."""
        self._schema_middleware = list(middleware)

    def setup_schema(self) -> None:
        """Freeze the document and add the schema endpoints.

        Runs once; every start entry point calls it.
        """
        if self._setup_done:
            return
        with self._setup_lock:
            if self._setup_done:
                return

            if self._disable_schema:
                self._setup_done = True
                self._document.freeze()
                logger.info("OpenAPI schema handler disabled")
                return

            # both handlers must build before anything is registered
            schema_endpoint = self.schema_handler()
            ui_endpoint = self.schema_ui_handler(self._schema_ui_options)
            self._setup_done = True
            self._document.freeze()

            dependencies = as_dependencies(self._schema_middleware)
            self._app.add_api_route(
                self._schema_path,
                schema_endpoint,
                methods=["GET"],
                dependencies=dependencies,
                include_in_schema=False,
            )
            self._app.add_api_route(
                self._schema_ui_path,
                ui_endpoint,
                methods=["GET"],
                dependencies=dependencies,
                include_in_schema=False,
            )
            logger.info(
                "Serving OpenAPI schema at %s and documentation at %s",
                self._schema_path,
                self._schema_ui_path,
            )

    def schema_handler(self) -> Callable[[], Awaitable[Response]]:
        """Endpoint returning the document as JSON. Usable on any route."""

        async def openapi_schema() -> Response:
            try:
                content = self._document.to_dict()
            except (TypeError, ValueError):
                logger.exception("Failed to serialize OpenAPI document")
                return JSONResponse(
                    {"detail": "Failed to serialize OpenAPI document"}, status_code=500
                )
            return JSONResponse(content)

        return openapi_schema

    def schema_ui_handler(
        self, options: RedocUIOptions | None = None
    ) -> Callable[[], Awaitable[Response]]:
        """Endpoint returning the Redoc page. Options are encoded once, here."""
        encoded = encode_options(options)

        async def openapi_ui() -> Response:
            return HTMLResponse(self._renderer.render(self._schema_path, encoded))

        return openapi_ui

    # -- delegation to FastAPI ---------------------------------------------

    def use(self, *middleware: Middleware) -> None:
        """Add middleware to every route registered afterwards."""
        self._app.router.dependencies.extend(as_dependencies(middleware))

    def no_route(self, handler: ExceptionHandler) -> None:
        """Handle requests matching no route."""
        self._app.add_exception_handler(404, handler)

    def no_method(self, handler: ExceptionHandler) -> None:
        """Handle requests whose method a matched path does not allow."""
        self._app.add_exception_handler(405, handler)

    def routes(self) -> list[RouteInfo]:
        """List the application's routes, one entry per method."""
        infos = []
        for route in self._app.routes:
            if not isinstance(route, APIRoute):
                continue
            handler = f"{route.endpoint.__module__}.{route.endpoint.__qualname__}"
            for method in sorted(route.methods):
                infos.append(RouteInfo(method=method, path=route.path, handler=handler))
        return infos

    def set_func_map(self, funcs: Mapping[str, Callable[..., Any]]) -> None:
        """Functions made available to templates loaded afterwards."""
        self._func_map = dict(funcs)

    def set_html_template(self, env: Environment) -> None:
        """Use a prepared Jinja2 environment for HTML rendering."""
        self._templates = Jinja2Templates(env=env)

    def load_html_files(self, *files: str | Path) -> None:
        """Load templates from files, each named by its file name."""
        sources = {Path(f).name: Path(f).read_text(encoding="utf-8") for f in files}
        env = Environment(loader=DictLoader(sources), autoescape=select_autoescape())
        env.globals.update(self._func_map)
        env.filters.update(self._func_map)
        self.set_html_template(env)

    def load_html_glob(self, pattern: str) -> None:
        """Load the templates matching a glob pattern."""
        files = sorted(glob.glob(pattern))
        if not files:
            raise ValueError(f"pattern matches no files: {pattern!r}")
        self.load_html_files(*files)

    @property
    def templates(self) -> Jinja2Templates:
        """Templates loaded with ``load_html_*`` or ``set_html_template``."""
        if self._templates is None:
            raise RuntimeError("no HTML templates loaded")
        return self._templates

    def set_trusted_proxies(self, trusted_proxies: Sequence[str]) -> None:
        """Only trust forwarded headers from these addresses or networks."""
        self._trusted_proxies = server.validate_trusted_proxies(trusted_proxies)

    # -- start entry points ------------------------------------------------

    def run(self, *addr: str) -> None:
        """Serve HTTP on ``addr`` (``host:port``), ``:$PORT`` or ``:8080``."""
        self.setup_schema()
        host, port = server.resolve_address(addr, self._port)
        server.serve(self, host=host, port=port, **self._server_options())

    def run_tls(self, addr: str, cert_file: str, key_file: str) -> None:
        """Serve HTTPS on ``addr``."""
        self.setup_schema()
        host, port = server.resolve_address([addr], self._port)
        server.serve(
            self,
            host=host,
            port=port,
            ssl_certfile=cert_file,
            ssl_keyfile=key_file,
            **self._server_options(),
        )

    def run_unix(self, file: str) -> None:
        """Serve HTTP on a unix socket."""
        self.setup_schema()
        server.serve(self, uds=file, **self._server_options())

    def run_fd(self, fd: int) -> None:
        """Serve HTTP on an inherited file descriptor."""
        self.setup_schema()
        server.serve(self, fd=fd, **self._server_options())

    def run_listener(self, listener: socket.socket) -> None:
        """Serve HTTP on an already bound socket."""
        self.setup_schema()
        server.serve_listener(self, listener, **self._server_options())

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        self.setup_schema()
        await self._app(scope, receive, send)

    def _server_options(self) -> dict[str, Any]:
        return server.proxy_options(self._trusted_proxies)


def new(**fastapi_kwargs: Any) -> Engine:
    """Create an engine around a bare FastAPI application."""
    for key in ("openapi_url", "docs_url", "redoc_url"):
        fastapi_kwargs.setdefault(key, None)
    return Engine(FastAPI(**fastapi_kwargs))


def default(**fastapi_kwargs: Any) -> Engine:
    """Create an engine with logging configured and an access log."""
    configure_logging()
    engine = new(**fastapi_kwargs)

    @engine.app.middleware("http")
    async def log_requests(request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        access_logger.info(
            "%s %s %d %.1fms",
            request.method,
            request.url.path,
            response.status_code,
            (time.perf_counter() - started) * 1000,
        )
        return response

    return engine
