"""OpenAPI 3.0 document holder.

Owns the single mutable ``OpenAPI`` object of an engine. Route groups record
one operation per (path template, method) into it while routes are being
registered; once the engine starts serving the document is frozen.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
import inspect
import logging
import os
import sys
from typing import Any

from fastapi.encoders import jsonable_encoder
from fastapi.openapi.models import (
    Components,
    Info,
    OpenAPI,
    Operation,
    Parameter,
    ParameterInType,
    PathItem,
    Schema,
)
from pydantic import BaseModel

from fastoapi3.constants import DEFAULT_INFO_VERSION, DEFAULT_SCHEMA_VERSION, OPENAPI_METHODS
from fastoapi3.exceptions import DocumentFrozenError
from fastoapi3.openapi.paths import path_parameters, to_openapi_path

logger = logging.getLogger(__name__)

REF_TEMPLATE = "#/components/schemas/{model}"
DEFAULT_RESPONSES = {"200": {"description": "Successful Response"}}

OperationOption = Callable[[Operation, "SchemaDocument"], None]


def new_info(title: str, version: str) -> Info:
    """Build an ``Info`` block."""
    return Info(title=title, version=version)


def default_info(title: str | None = None, version: str = DEFAULT_INFO_VERSION) -> Info:
    """Info named after the running executable unless a title is given."""
    if not title:
        title = os.path.basename(sys.argv[0]) or "API"
    return new_info(title, version)


class SchemaDocument:
    """Mutable OpenAPI document shared by an engine and its route groups."""

    def __init__(self, info: Info | None = None) -> None:
        self._document = OpenAPI(
            openapi=DEFAULT_SCHEMA_VERSION,
            info=info or default_info(),
            paths={},
        )
        self._frozen = False

    @property
    def frozen(self) -> bool:
        """Whether the owning engine has started serving."""
        return self._frozen

    def freeze(self) -> None:
        """Make the document read-only. Idempotent."""
        self._frozen = True

    def get_document(self) -> OpenAPI:
        """Return the live document.

        Callers changing it directly bypass every check made here.
        """
        return self._document

    def set_info(self, info: Info) -> None:
        """Replace the document's info block."""
        self.ensure_mutable("info")
        self._document.info = info

    def record(
        self,
        method: str,
        path: str,
        options: Iterable[OperationOption] = (),
        endpoint: Callable[..., Any] | None = None,
    ) -> Operation | None:
        """Record the operation for a registered route.

        A later call for the same template and method replaces the earlier
        operation. Returns ``None`` for methods OpenAPI cannot describe.
        """
        operation = self.build_operation(method, path, options, endpoint)
        if operation is not None:
            self.store(method, path, operation)
        return operation

    def build_operation(
        self,
        method: str,
        path: str,
        options: Iterable[OperationOption] = (),
        endpoint: Callable[..., Any] | None = None,
    ) -> Operation | None:
        """Build the operation for a route without storing it.

        Options may still register component schemas.
        """
        template = to_openapi_path(path)
        self.ensure_mutable(template)

        method_key = method.lower()
        if method_key not in OPENAPI_METHODS:
            logger.warning("Skipping %s %s: method not representable in OpenAPI", method, template)
            return None

        operation = Operation()
        for option in options:
            option(operation, self)

        if endpoint is not None:
            self._describe_from_endpoint(operation, endpoint)
        self._add_path_parameters(operation, template)
        if not operation.responses:
            operation.responses = {
                status: dict(response) for status, response in DEFAULT_RESPONSES.items()
            }
        return operation

    def store(self, method: str, path: str, operation: Operation) -> None:
        """Put a built operation at its template and method."""
        template = to_openapi_path(path)
        self.ensure_mutable(template)
        method_key = method.lower()

        paths = self._document.paths
        if paths is None:
            paths = self._document.paths = {}
        item = paths.get(template)
        if item is None:
            item = paths[template] = PathItem()
        elif getattr(item, method_key) is not None:
            logger.debug("Replacing operation %s %s", method.upper(), template)
        setattr(item, method_key, operation)

        logger.debug("Recorded operation %s %s", method.upper(), template)

    def get_operation(self, method: str, path: str) -> Operation | None:
        """Look up a recorded operation."""
        item = (self._document.paths or {}).get(to_openapi_path(path))
        if item is None:
            return None
        return getattr(item, method.lower(), None)

    def register_model(self, model: type[BaseModel]) -> dict[str, str]:
        """Add a pydantic model to ``components.schemas`` and return its ``$ref``."""
        schema = model.model_json_schema(ref_template=REF_TEMPLATE)
        definitions = schema.pop("$defs", {})

        components = self._document.components
        if components is None:
            components = self._document.components = Components()
        if components.schemas is None:
            components.schemas = {}

        for name, definition in definitions.items():
            components.schemas[name] = Schema.model_validate(definition)
        components.schemas[model.__name__] = Schema.model_validate(schema)

        return {"$ref": REF_TEMPLATE.format(model=model.__name__)}

    def to_dict(self) -> dict[str, Any]:
        """Convert the document to JSON-compatible data."""
        return jsonable_encoder(self._document, by_alias=True, exclude_none=True)

    def ensure_mutable(self, path: str) -> None:
        """Raise ``DocumentFrozenError`` once the engine is serving."""
        if self._frozen:
            raise DocumentFrozenError(
                "OpenAPI document is read-only once the engine is serving", path
            )

    @staticmethod
    def _describe_from_endpoint(operation: Operation, endpoint: Callable[..., Any]) -> None:
        """Fill summary and description from the endpoint unless already set."""
        name = getattr(endpoint, "__name__", "")
        if operation.summary is None and name and name != "<lambda>":
            operation.summary = name.replace("_", " ").title()
        if operation.description is None:
            doc = inspect.getdoc(endpoint)
            if doc:
                operation.description = doc

    @staticmethod
    def _add_path_parameters(operation: Operation, template: str) -> None:
        """Declare every template parameter the options did not declare."""
        parameters = list(operation.parameters or [])
        declared = {
            getattr(p, "name", None)
            for p in parameters
            if getattr(p, "in_", None) == ParameterInType.path
        }
        for name in path_parameters(template):
            if name in declared:
                continue
            parameters.append(
                Parameter.model_validate(
                    {"name": name, "in": "path", "required": True, "schema": {"type": "string"}}
                )
            )
        if parameters:
            operation.parameters = parameters
