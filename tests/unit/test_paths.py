"""Tests for path template helpers."""

import pytest

from fastoapi3.openapi.paths import (
    normalize_prefix,
    path_parameters,
    to_openapi_path,
    to_route_path,
)


@pytest.mark.parametrize(
    ("path", "expected"),
    [
        ("/pets", "/pets"),
        ("/pets/{pet_id}", "/pets/{pet_id}"),
        ("/pets/:pet_id", "/pets/{pet_id}"),
        ("/static/*filepath", "/static/{filepath:path}"),
        ("/owners/:owner_id/pets/:pet_id", "/owners/{owner_id}/pets/{pet_id}"),
        ("/clock/at:noon", "/clock/at:noon"),
    ],
)
def test_to_route_path(path: str, expected: str) -> None:
    assert to_route_path(path) == expected


@pytest.mark.parametrize(
    ("path", "expected"),
    [
        ("/pets/:pet_id", "/pets/{pet_id}"),
        ("/static/*filepath", "/static/{filepath}"),
        ("/items/{item_id:int}", "/items/{item_id}"),
        ("/files/{rest:path}", "/files/{rest}"),
        ("", "/"),
    ],
)
def test_to_openapi_path(path: str, expected: str) -> None:
    assert to_openapi_path(path) == expected


def test_path_parameters_in_order() -> None:
    assert path_parameters("/a/{x}/b/:y/*z") == ["x", "y", "z"]
    assert path_parameters("/items/{item_id:int}") == ["item_id"]
    assert path_parameters("/pets") == []


@pytest.mark.parametrize(
    ("prefix", "expected"),
    [
        ("", ""),
        ("/", ""),
        ("v1", "/v1"),
        ("/v1/", "/v1"),
        ("/api/v1", "/api/v1"),
        ("/owners/:owner_id", "/owners/{owner_id}"),
    ],
)
def test_normalize_prefix(prefix: str, expected: str) -> None:
    assert normalize_prefix(prefix) == expected
