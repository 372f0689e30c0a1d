"""Integration tests for the actuator endpoints."""

import pytest
import pytest_check
from httpx import AsyncClient
from pytest_mock import MockerFixture


@pytest.mark.integration
class TestHealth:
    async def test_up(self, client: AsyncClient) -> None:
        response = await client.get("/actuator/health")

        assert response.status_code == 200
        assert response.json() == {
            "status": "UP",
            "components": {"db": {"status": "UP", "details": {"database": "sqlite"}}},
        }

    async def test_down(self, client: AsyncClient, mocker: MockerFixture) -> None:
        mocker.patch(
            "autorest.api.routes.actuator.check_database_connection",
            mocker.AsyncMock(return_value=(False, "connection refused")),
        )

        response = await client.get("/actuator/health")

        assert response.status_code == 503
        body = response.json()
        assert body["status"] == "DOWN"
        assert body["components"]["db"]["details"]["error"] == "connection refused"


@pytest.mark.integration
class TestInfo:
    async def test_reports_app_and_schema(self, client: AsyncClient) -> None:
        response = await client.get("/actuator/info")

        body = response.json()
        pytest_check.equal(body["app"]["name"], "Autorest")
        pytest_check.equal(body["app"]["title"], "Autorest test suite")
        pytest_check.is_none(body["profile"])
        pytest_check.equal(body["database"]["backend"], "sqlite")
        pytest_check.equal(body["database"]["revision"], "0001")
        pytest_check.equal(body["database"]["head"], "0001")


@pytest.mark.integration
class TestMetrics:
    async def test_names(self, client: AsyncClient) -> None:
        response = await client.get("/actuator/metrics")

        assert response.json() == {
            "names": ["http.server.errors", "http.server.requests", "process.uptime"]
        }

    async def test_requests_are_counted(self, client: AsyncClient) -> None:
        await client.get("/cats")
        await client.get("/cats/999")

        response = await client.get("/actuator/metrics/http.server.requests")

        body = response.json()
        counts = {m["statistic"]: m["value"] for m in body["measurements"]}
        # The metrics request itself is recorded after its response is built
        assert counts["COUNT"] == 2
        assert body["availableTags"] == [{"tag": "status", "values": ["200", "404"]}]

    async def test_server_errors_are_counted(
        self, client: AsyncClient, mocker: MockerFixture
    ) -> None:
        mocker.patch(
            "autorest.domain.cats.repository.CatRepository.get_page",
            side_effect=RuntimeError("database exploded"),
        )

        assert (await client.get("/cats")).status_code == 500

        response = await client.get("/actuator/metrics/http.server.errors")
        assert response.json()["measurements"] == [{"statistic": "COUNT", "value": 1}]

    async def test_unknown_metric(self, client: AsyncClient) -> None:
        response = await client.get("/actuator/metrics/jvm.memory.used")

        assert response.status_code == 404
        assert response.json()["error_code"] == "NOT_FOUND"


@pytest.mark.integration
class TestIndexes:
    async def test_root_links(self, client: AsyncClient) -> None:
        response = await client.get("/")

        assert response.headers["content-type"] == "application/hal+json"
        assert response.json()["_links"] == {
            "cats": {"href": "http://test/cats{?page,size,sort}", "templated": True},
            "cars": {"href": "http://test/cars"},
            "actuator": {"href": "http://test/actuator"},
        }

    async def test_actuator_links(self, client: AsyncClient) -> None:
        links = (await client.get("/actuator")).json()["_links"]

        assert links["health"] == {"href": "http://test/actuator/health"}
