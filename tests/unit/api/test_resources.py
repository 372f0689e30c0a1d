"""Unit tests for the resource router helpers."""

import pytest
from fastapi.routing import APIRoute

from autorest.api.routes.entities import CAR_RESOURCE, CAT_RESOURCE
from autorest.api.routes.resources import create_resource_router, parse_sort
from autorest.core.exceptions import ValidationError


@pytest.mark.unit
class TestParseSort:
    @pytest.mark.parametrize(
        ("values", "expected"),
        [
            ([], []),
            (["name"], [("name", False)]),
            (["name,asc"], [("name", False)]),
            (["name,DESC"], [("name", True)]),
            (["make,model,desc"], [("make", True), ("model", True)]),
            (["year,desc", "make"], [("year", True), ("make", False)]),
        ],
    )
    def test_parse(self, values: list[str], expected: list[tuple[str, bool]]) -> None:
        assert parse_sort(values) == expected

    @pytest.mark.parametrize("value", ["desc", ",", ""])
    def test_missing_property(self, value: str) -> None:
        with pytest.raises(ValidationError, match="Invalid sort parameter"):
            parse_sort([value])


@pytest.mark.unit
class TestResourceDefinition:
    def test_fields_follow_create_schema(self) -> None:
        assert CAT_RESOURCE.fields == ("name",)
        assert CAR_RESOURCE.fields == ("make", "model", "year", "color")

    def test_required_fields(self) -> None:
        assert CAR_RESOURCE.required_fields == {"make", "model", "year"}

    def test_search_lookup(self) -> None:
        query = CAR_RESOURCE.search("findByMakeIgnoringCase")

        assert query is not None
        assert query.parameters == ("make",)
        assert CAR_RESOURCE.search("findByColor") is None
        assert CAT_RESOURCE.search("findByMakeIgnoringCase") is None


@pytest.mark.unit
class TestCreateResourceRouter:
    @staticmethod
    def _routes(router: object) -> set[tuple[str, str]]:
        return {
            (method, route.path)
            for route in router.routes  # type: ignore[attr-defined]
            if isinstance(route, APIRoute)
            for method in route.methods
        }

    def test_paged_resource_routes(self) -> None:
        routes = self._routes(create_resource_router(CAT_RESOURCE))

        assert routes == {
            ("GET", "/cats"),
            ("POST", "/cats"),
            ("GET", "/cats/{entity_id:int}"),
            ("PUT", "/cats/{entity_id:int}"),
            ("PATCH", "/cats/{entity_id:int}"),
            ("DELETE", "/cats/{entity_id:int}"),
        }

    def test_search_routes_only_when_declared(self) -> None:
        routes = self._routes(create_resource_router(CAR_RESOURCE))

        assert ("GET", "/cars/search") in routes
        assert ("GET", "/cars/search/{query_name}") in routes
