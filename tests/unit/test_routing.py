"""Route groups: registration, nesting, middleware and documentation."""

from __future__ import annotations

from collections.abc import Callable

from fastapi import HTTPException, status
from fastapi.testclient import TestClient
from pydantic import ValidationError
import pytest

from fastoapi3 import DocumentFrozenError, Engine
from fastoapi3.openapi import operations as op


def recorder(calls: list[str], name: str) -> Callable[[], None]:
    def middleware() -> None:
        calls.append(name)

    return middleware


def ping() -> dict[str, str]:
    return {"status": "ok"}


def get_pet(pet_id: int) -> dict[str, int]:
    """Fetch a single pet."""
    return {"id": pet_id}


def test_root_route_is_served_and_documented(engine: Engine, client: TestClient) -> None:
    engine.get("/ping", ping, options=[op.tags("health")])

    response = client.get("/ping")

    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {"status": "ok"}
    assert engine.document.get_operation("GET", "/ping").tags == ["health"]


def test_nested_groups_compose_prefixes(engine: Engine, client: TestClient) -> None:
    api = engine.group("/api")
    v1 = api.group("v1/")
    v1.get("/pets/{pet_id}", get_pet)

    assert api.base_path == "/api"
    assert v1.base_path == "/api/v1"

    response = client.get("/api/v1/pets/7")
    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {"id": 7}
    assert client.get("/v1/pets/7").status_code == status.HTTP_404_NOT_FOUND

    paths = client.get("/openapi.json").json()["paths"]
    assert list(paths) == ["/api/v1/pets/{pet_id}"]
    assert paths["/api/v1/pets/{pet_id}"]["get"]["summary"] == "Get Pet"


def test_middleware_runs_parent_first(engine: Engine, client: TestClient) -> None:
    calls: list[str] = []

    def handler() -> dict[str, bool]:
        calls.append("handler")
        return {"ok": True}

    engine.use(recorder(calls, "engine"))
    api = engine.group("/api", recorder(calls, "api"))
    v1 = api.group("/v1", recorder(calls, "v1"))
    v1.get("/pets", recorder(calls, "route"), handler)

    response = client.get("/api/v1/pets")

    assert response.status_code == status.HTTP_200_OK
    assert calls == ["engine", "api", "v1", "route", "handler"]


def test_middleware_can_abort(engine: Engine, client: TestClient) -> None:
    calls: list[str] = []

    def require_token() -> None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing token")

    def handler() -> dict[str, bool]:
        calls.append("handler")
        return {"ok": True}

    engine.group("/admin", require_token).get("/stats", handler)

    response = client.get("/admin/stats")

    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json() == {"detail": "Missing token"}
    assert calls == []


def test_registration_is_chainable(engine: Engine, client: TestClient) -> None:
    def create_pet() -> dict[str, str]:
        return {"created": "yes"}

    pets = engine.group("/pets")
    assert pets.get("", ping).post("", create_pet) is pets

    assert client.get("/pets").json() == {"status": "ok"}
    assert client.post("/pets").json() == {"created": "yes"}
    assert set(engine.schema.paths["/pets"].model_dump(exclude_none=True)) == {"get", "post"}


def test_colon_and_star_parameters(engine: Engine, client: TestClient) -> None:
    def greet(name: str) -> dict[str, str]:
        return {"hello": name}

    def serve_file(filepath: str) -> dict[str, str]:
        return {"file": filepath}

    engine.get("/users/:name", greet)
    engine.group("/static").get("/*filepath", serve_file)

    assert client.get("/users/bob").json() == {"hello": "bob"}
    assert client.get("/static/css/site.css").json() == {"file": "css/site.css"}

    paths = client.get("/openapi.json").json()["paths"]
    assert set(paths) == {"/users/{name}", "/static/{filepath}"}


def test_handle_with_custom_method(engine: Engine, client: TestClient) -> None:
    def purge() -> dict[str, bool]:
        return {"purged": True}

    engine.handle("purge", "/cache", purge)

    assert client.request("PURGE", "/cache").json() == {"purged": True}
    assert "/cache" not in client.get("/openapi.json").json()["paths"]


def test_handle_requires_a_handler(engine: Engine) -> None:
    with pytest.raises(ValueError, match="at least one handler"):
        engine.handle("GET", "/nothing")


def test_routes_are_visible_before_start(engine: Engine) -> None:
    engine.group("/api").group("/v1").get("/pets/{pet_id}", get_pet)

    assert [(r.method, r.path) for r in engine.routes()] == [("GET", "/api/v1/pets/{pet_id}")]
    assert not engine.started


def test_registration_after_start_is_rejected(engine: Engine, client: TestClient) -> None:
    api = engine.group("/api")
    api.get("/ping", ping)
    client.get("/api/ping")

    with pytest.raises(DocumentFrozenError):
        api.get("/late", ping)
    with pytest.raises(DocumentFrozenError):
        engine.get("/late", ping)

    assert client.get("/api/late").status_code == status.HTTP_404_NOT_FOUND
    assert "/api/late" not in client.get("/openapi.json").json()["paths"]


def test_failing_option_registers_nothing(engine: Engine, client: TestClient) -> None:
    with pytest.raises(ValidationError):
        engine.get("/search", ping, options=[op.parameter("q", "bogus")])

    assert client.get("/search").status_code == status.HTTP_404_NOT_FOUND
    assert client.get("/openapi.json").json()["paths"] == {}
    assert "/search" not in [r.path for r in engine.routes()]
