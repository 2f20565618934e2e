"""Defaults shared by the engine, the document holder and the UI renderer."""

# Only OpenAPI 3.0.0 documents are produced.
DEFAULT_SCHEMA_VERSION = "3.0.0"
DEFAULT_SCHEMA_PATH = "/openapi.json"
DEFAULT_SCHEMA_UI_PATH = "/openapi"
DEFAULT_INFO_VERSION = "1.0.0"

DEFAULT_PORT = 8080
DEFAULT_HOST = "0.0.0.0"  # noqa: S104

# HTTP methods a PathItem can hold
OPENAPI_METHODS = ("get", "put", "post", "delete", "options", "head", "patch", "trace")
