"""Tests for the Redoc documentation page."""

import json

from pydantic import ValidationError
import pytest

from fastoapi3.ui.redoc import RedocRenderer, RedocUIOptions, encode_options


def test_default_options_hide_download_button() -> None:
    assert encode_options() == '{"hideDownloadButton":true}'


def test_options_use_camel_case_and_skip_unset() -> None:
    options = RedocUIOptions(
        disable_search=True,
        min_character_length_to_init_search=5,
        expand_responses="200,201",
        menu_toggle=False,
    )

    assert json.loads(encode_options(options)) == {
        "disableSearch": True,
        "minCharacterLengthToInitSearch": 5,
        "expandResponses": "200,201",
        "menuToggle": False,
    }


def test_options_accept_camel_case_names() -> None:
    options = RedocUIOptions.model_validate({"hideHostname": True, "payloadSampleIdx": 1})

    assert options.hide_hostname is True
    assert options.payload_sample_idx == 1


def test_unknown_option_is_rejected() -> None:
    with pytest.raises(ValidationError):
        RedocUIOptions(hide_everything=True)


def test_negative_counts_are_rejected() -> None:
    with pytest.raises(ValidationError):
        RedocUIOptions(max_displayed_enum_values=-1)


def test_encoded_options_are_safe_inside_script() -> None:
    encoded = encode_options(RedocUIOptions(html_template="</script><script>alert(1)"))

    assert "</script>" not in encoded
    assert json.loads(encoded) == {"htmlTemplate": "</script><script>alert(1)"}


def test_render_fills_both_slots() -> None:
    page = RedocRenderer().render("/openapi.json", encode_options())

    assert page.startswith("<!DOCTYPE html>")
    assert '"/openapi.json"' in page
    assert '{"hideDownloadButton":true}' in page
    assert "redoc.standalone.js" in page


def test_render_uses_given_schema_path() -> None:
    page = RedocRenderer().render("/docs/v2/schema.json", encode_options())

    assert "/docs/v2/schema.json" in page
    assert "/openapi.json" not in page
