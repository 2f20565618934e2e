"""Redoc documentation page.

The page is a static Jinja2 template with two slots: the URL the viewer
fetches the schema from, and the JSON options object passed to
``Redoc.init``. See https://redocly.com/docs/api-reference-docs/configuration/functionality/
for the meaning of each option.
"""

from __future__ import annotations

import logging
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, Template
from jinja2.utils import htmlsafe_json_dumps
from markupsafe import Markup
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from fastoapi3.exceptions import SchemaUIError

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).parent / "templates"
TEMPLATE_NAME = "redoc.html.j2"


class RedocUIOptions(BaseModel):
    """Display options of the Redoc viewer.

    Unset fields are left out of the encoded options so Redoc applies its own
    defaults.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")

    disable_search: bool | None = None
    min_character_length_to_init_search: int | None = Field(default=None, ge=0)
    expand_default_server_variables: bool | None = None
    expand_responses: str | None = None
    expand_single_schema_field: bool | None = None
    hide_download_button: bool | None = None
    hide_hostname: bool | None = None
    hide_loading: bool | None = None
    hide_request_payload_sample: bool | None = None
    hide_schema_pattern: bool | None = None
    hide_one_of_description: bool | None = None
    hide_schema_titles: bool | None = None
    hide_single_request_sample_tab: bool | None = None
    show_object_schema_examples: bool | None = None
    html_template: str | None = None
    max_displayed_enum_values: int | None = Field(default=None, ge=0)
    menu_toggle: bool | None = None
    native_scrollbars: bool | None = None
    only_required_in_samples: bool | None = None
    path_in_middle_panel: bool | None = None
    payload_sample_idx: int | None = Field(default=None, ge=0)
    required_props_first: bool | None = None
    show_webhook_verbose: bool | None = None
    hide_security_section: bool | None = None
    simple_one_of_type_label: bool | None = None
    sort_props_alphabetically: bool | None = None
    untrusted_definition: bool | None = None


def default_options() -> RedocUIOptions:
    """Options used when none are configured."""
    return RedocUIOptions(hide_download_button=True)


def encode_options(options: RedocUIOptions | None = None) -> Markup:
    """Encode options as compact JSON safe to embed in a script block."""
    if options is None:
        options = default_options()
    try:
        data = options.model_dump(by_alias=True, exclude_none=True)
        return htmlsafe_json_dumps(data, separators=(",", ":"))
    except (TypeError, ValueError) as e:
        logger.exception("Failed to encode documentation UI options")
        raise SchemaUIError(f"Cannot encode UI options: {e}") from e


class RedocRenderer:
    """Render the Redoc page for a schema URL."""

    def __init__(self, templates_dir: Path = TEMPLATES_DIR) -> None:
        env = Environment(
            loader=FileSystemLoader(str(templates_dir)),
            autoescape=True,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.template: Template = env.get_template(TEMPLATE_NAME)

    def render(self, schema_path: str, options: Markup) -> str:
        """Fill the template slots."""
        return self.template.render(schema_path=schema_path, options=options)
