"""Operation options applied when a route is registered.

Each builder returns an ``OperationOption``: a callable receiving the fresh
``Operation`` and the owning ``SchemaDocument``. Options run in the order
given, so a later option wins over an earlier one touching the same field.
"""

from __future__ import annotations

from typing import Any

from fastapi.openapi.models import (
    ExternalDocumentation,
    MediaType,
    Operation,
    Parameter,
    RequestBody,
    Response,
)
from pydantic import BaseModel

from fastoapi3.openapi.document import OperationOption, SchemaDocument

JSON_CONTENT_TYPE = "application/json"

SchemaSource = type[BaseModel] | dict[str, Any]


def _resolve_schema(source: SchemaSource, document: SchemaDocument) -> dict[str, Any]:
    """Turn a pydantic model or a raw JSON schema into a schema or ``$ref``."""
    if isinstance(source, type) and issubclass(source, BaseModel):
        return document.register_model(source)
    return dict(source)


def _media(
    source: SchemaSource, document: SchemaDocument, content_type: str
) -> dict[str, MediaType]:
    return {
        content_type: MediaType.model_validate({"schema": _resolve_schema(source, document)}),
    }


def summary(text: str) -> OperationOption:
    """Set the operation summary."""

    def apply(operation: Operation, document: SchemaDocument) -> None:
        operation.summary = text

    return apply


def description(text: str) -> OperationOption:
    """Set the operation description."""

    def apply(operation: Operation, document: SchemaDocument) -> None:
        operation.description = text

    return apply


def operation_id(value: str) -> OperationOption:
    """Set the operation id."""

    def apply(operation: Operation, document: SchemaDocument) -> None:
        operation.operationId = value

    return apply


def tags(*names: str) -> OperationOption:
    """Append tags, skipping ones already present."""

    def apply(operation: Operation, document: SchemaDocument) -> None:
        current = list(operation.tags or [])
        current.extend(name for name in names if name not in current)
        operation.tags = current

    return apply


def deprecated(flag: bool = True) -> OperationOption:
    """Mark the operation as deprecated."""

    def apply(operation: Operation, document: SchemaDocument) -> None:
        operation.deprecated = flag

    return apply


def external_docs(url: str, text: str | None = None) -> OperationOption:
    """Link external documentation."""

    def apply(operation: Operation, document: SchemaDocument) -> None:
        operation.externalDocs = ExternalDocumentation(url=url, description=text)

    return apply


def parameter(
    name: str,
    location: str = "query",
    schema: SchemaSource | None = None,
    required: bool | None = None,
    text: str | None = None,
) -> OperationOption:
    """Declare a parameter.

    Path parameters are always required; a parameter with the same name and
    location replaces the earlier declaration.
    """

    def apply(operation: Operation, document: SchemaDocument) -> None:
        data: dict[str, Any] = {
            "name": name,
            "in": location,
            "schema": _resolve_schema(schema, document) if schema else {"type": "string"},
        }
        if location == "path":
            data["required"] = True
        elif required is not None:
            data["required"] = required
        if text is not None:
            data["description"] = text
        new = Parameter.model_validate(data)

        parameters = [
            p
            for p in operation.parameters or []
            if not (getattr(p, "name", None) == new.name and getattr(p, "in_", None) == new.in_)
        ]
        parameters.append(new)
        operation.parameters = parameters

    return apply


def request_body(
    source: SchemaSource,
    content_type: str = JSON_CONTENT_TYPE,
    required: bool = True,
    text: str | None = None,
) -> OperationOption:
    """Describe the request body with a pydantic model or a JSON schema."""

    def apply(operation: Operation, document: SchemaDocument) -> None:
        operation.requestBody = RequestBody(
            content=_media(source, document, content_type),
            required=required,
            description=text,
        )

    return apply


def response(
    status_code: int | str,
    text: str = "Successful Response",
    model: SchemaSource | None = None,
    content_type: str = JSON_CONTENT_TYPE,
) -> OperationOption:
    """Describe the response for one status code."""

    def apply(operation: Operation, document: SchemaDocument) -> None:
        content = _media(model, document, content_type) if model is not None else None
        responses = dict(operation.responses or {})
        responses[str(status_code)] = Response(description=text, content=content)
        operation.responses = responses

    return apply


def security(scheme: str, *scopes: str) -> OperationOption:
    """Require a security scheme declared in ``components.securitySchemes``."""

    def apply(operation: Operation, document: SchemaDocument) -> None:
        requirements = list(operation.security or [])
        requirements.append({scheme: list(scopes)})
        operation.security = requirements

    return apply


def models(
    request: type[BaseModel] | None = None,
    response_model: type[BaseModel] | None = None,
    status_code: int = 200,
) -> OperationOption:
    """Describe an operation by its request and response types."""

    def apply(operation: Operation, document: SchemaDocument) -> None:
        if request is not None:
            request_body(request)(operation, document)
        if response_model is not None:
            response(status_code, model=response_model)(operation, document)

    return apply


__all__ = [
    "OperationOption",
    "deprecated",
    "description",
    "external_docs",
    "models",
    "operation_id",
    "parameter",
    "request_body",
    "response",
    "security",
    "summary",
    "tags",
]
