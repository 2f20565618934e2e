"""OpenAPI 3 documents and a Redoc page for FastAPI route registrations."""

from fastoapi3.constants import (
    DEFAULT_SCHEMA_PATH,
    DEFAULT_SCHEMA_UI_PATH,
    DEFAULT_SCHEMA_VERSION,
)
from fastoapi3.engine import Engine, RouteInfo, default, new
from fastoapi3.exceptions import DocumentFrozenError, OpenAPIEngineError, SchemaUIError
from fastoapi3.openapi import operations
from fastoapi3.openapi.document import OperationOption, SchemaDocument, new_info
from fastoapi3.routing import RouterGroup
from fastoapi3.ui.redoc import RedocUIOptions

__all__ = [
    "DEFAULT_SCHEMA_PATH",
    "DEFAULT_SCHEMA_UI_PATH",
    "DEFAULT_SCHEMA_VERSION",
    "DocumentFrozenError",
    "Engine",
    "OpenAPIEngineError",
    "OperationOption",
    "RedocUIOptions",
    "RouteInfo",
    "RouterGroup",
    "SchemaDocument",
    "SchemaUIError",
    "default",
    "new",
    "new_info",
    "operations",
]
