"""OpenAPI document accumulation."""

from fastoapi3.openapi import operations
from fastoapi3.openapi.document import OperationOption, SchemaDocument, default_info, new_info
from fastoapi3.openapi.paths import to_openapi_path, to_route_path

__all__ = [
    "OperationOption",
    "SchemaDocument",
    "default_info",
    "new_info",
    "operations",
    "to_openapi_path",
    "to_route_path",
]
