"""Serving delegates.

Thin helpers between the engine's ``run*`` methods and uvicorn: address
resolution, trusted proxy validation and the uvicorn calls themselves.
"""

from __future__ import annotations

from collections.abc import Sequence
import ipaddress
import logging
import socket
from typing import Any

import uvicorn

from fastoapi3.constants import DEFAULT_HOST, DEFAULT_PORT

logger = logging.getLogger(__name__)


def resolve_address(addr: Sequence[str], port: int | None = None) -> tuple[str, int]:
    """Resolve ``host:port`` the way the engine's ``run`` accepts it.

    No address means ``:$PORT`` (``port``) or ``:8080``. An empty host listens
    on all interfaces.
    """
    if len(addr) > 1:
        raise ValueError("too many parameters")
    if not addr:
        resolved = port or DEFAULT_PORT
        logger.debug("Environment variable PORT is undefined. Using port :%d by default", resolved)
        return DEFAULT_HOST, resolved

    host, sep, raw_port = addr[0].rpartition(":")
    if not sep:
        host, raw_port = addr[0], str(DEFAULT_PORT)
    try:
        parsed_port = int(raw_port)
    except ValueError as e:
        raise ValueError(f"invalid port in address {addr[0]!r}") from e
    return host.strip("[]") or DEFAULT_HOST, parsed_port


def validate_trusted_proxies(proxies: Sequence[str]) -> list[str]:
    """Check every entry is an IP address or a CIDR network."""
    validated = []
    for proxy in proxies:
        try:
            if "/" in proxy:
                ipaddress.ip_network(proxy, strict=False)
            else:
                ipaddress.ip_address(proxy)
        except ValueError as e:
            raise ValueError(f"invalid trusted proxy {proxy!r}") from e
        validated.append(proxy)
    return validated


def proxy_options(trusted_proxies: Sequence[str] | None) -> dict[str, Any]:
    """uvicorn options for forwarded headers."""
    if trusted_proxies is None:
        return {}
    if not trusted_proxies:
        return {"proxy_headers": False}
    return {"proxy_headers": True, "forwarded_allow_ips": ",".join(trusted_proxies)}


def serve(app: Any, **options: Any) -> None:
    """Run ``app`` with uvicorn until it stops."""
    logger.info("Starting server with %s", _describe(options))
    uvicorn.run(app, **options)


def serve_listener(app: Any, listener: socket.socket, **options: Any) -> None:
    """Run ``app`` on an already bound socket."""
    logger.info("Starting server on listener %s", listener.getsockname())
    server = uvicorn.Server(uvicorn.Config(app, **options))
    server.run(sockets=[listener])


def _describe(options: dict[str, Any]) -> str:
    if "uds" in options:
        return f"unix socket {options['uds']}"
    if "fd" in options:
        return f"file descriptor {options['fd']}"
    scheme = "https" if "ssl_certfile" in options else "http"
    return f"{scheme}://{options.get('host')}:{options.get('port')}"
