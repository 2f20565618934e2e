"""Embedded documentation UI."""

from fastoapi3.ui.redoc import RedocRenderer, RedocUIOptions, encode_options

__all__ = ["RedocRenderer", "RedocUIOptions", "encode_options"]
