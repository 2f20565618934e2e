"""Errors raised by the OpenAPI engine."""

from __future__ import annotations


class OpenAPIEngineError(Exception):
    """Base class for all engine errors."""

    def __init__(self, message: str, path: str | None = None) -> None:
        self.path = path
        self.message = message
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        if self.path:
            return f"{self.path}: {self.message}"
        return self.message


class DocumentFrozenError(OpenAPIEngineError):
    """Raised when the document is changed after the engine started serving."""


class SchemaUIError(OpenAPIEngineError):
    """Raised when documentation UI options cannot be encoded."""
