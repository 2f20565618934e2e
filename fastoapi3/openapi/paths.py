"""Path template helpers.

Routes may be written in FastAPI brace syntax (``/pets/{pet_id}``, optionally
with a Starlette convertor such as ``{rest:path}``) or with colon and star
segments (``/pets/:pet_id``, ``/files/*rest``). Routing gets Starlette syntax,
the OpenAPI document gets plain ``{name}`` placeholders.
"""

from __future__ import annotations

import re

_COLON_PARAM = re.compile(r"(?<=/):(\w+)")
_STAR_PARAM = re.compile(r"(?<=/)\*(\w+)")
_CONVERTOR_PARAM = re.compile(r"\{(\w+):\w+\}")
_BRACE_PARAM = re.compile(r"\{(\w+)(?::\w+)?\}")


def to_route_path(path: str) -> str:
    """Translate colon/star segments into Starlette route syntax."""
    path = _COLON_PARAM.sub(r"{\1}", path)
    return _STAR_PARAM.sub(r"{\1:path}", path)


def to_openapi_path(path: str) -> str:
    """Normalize any accepted path syntax into an OpenAPI path template."""
    path = to_route_path(path)
    path = _CONVERTOR_PARAM.sub(r"{\1}", path)
    return path or "/"


def path_parameters(path: str) -> list[str]:
    """Return parameter names in order of appearance."""
    return _BRACE_PARAM.findall(to_route_path(path))


def normalize_prefix(prefix: str) -> str:
    """Make a group prefix acceptable to ``APIRouter``.

    Prefixes start with a slash and never end with one; the root prefix is
    the empty string.
    """
    prefix = to_route_path(prefix.strip())
    if not prefix or prefix == "/":
        return ""
    if not prefix.startswith("/"):
        prefix = f"/{prefix}"
    return prefix.rstrip("/")
