"""Integration tests for the ``/cars`` resource and its search query."""

import pytest
import pytest_check
from httpx import AsyncClient

from autorest.domain.cars import Car, CarRepository
from tests.integration.conftest import SessionFactory

CARS = [
    {"make": "Honda", "model": "Civic", "year": 1997, "color": "red"},
    {"make": "honda", "model": "Accord", "year": 2003, "color": "blue"},
    {"make": "Toyota", "model": "Corolla", "year": 2010, "color": None},
]


@pytest.fixture
async def saved_cars(db_session: SessionFactory) -> list[int]:
    async with db_session() as session:
        repository = CarRepository(session)
        cars = [await repository.create(Car(**data)) for data in CARS]
        return [car.id for car in cars]


@pytest.mark.integration
class TestCarCollection:
    async def test_lists_every_car_without_paging(
        self, client: AsyncClient, saved_cars: list[int]
    ) -> None:
        response = await client.get("/cars")

        assert response.status_code == 200
        assert response.headers["content-type"] == "application/hal+json"
        body = response.json()
        pytest_check.is_not_in("page", body)
        pytest_check.equal([car["id"] for car in body["_embedded"]["cars"]], saved_cars)
        pytest_check.equal(body["_links"]["search"]["href"], "http://test/cars/search")

    async def test_item_fields(self, client: AsyncClient, saved_cars: list[int]) -> None:
        response = await client.get(f"/cars/{saved_cars[2]}")

        body = response.json()
        assert {key: body[key] for key in ("make", "model", "year", "color")} == CARS[2]

    async def test_create_without_color(self, client: AsyncClient) -> None:
        response = await client.post(
            "/cars", json={"make": "Ford", "model": "Focus", "year": 2015}
        )

        assert response.status_code == 201
        assert response.json()["color"] is None

    async def test_create_requires_year(self, client: AsyncClient) -> None:
        response = await client.post("/cars", json={"make": "Ford", "model": "Focus"})

        assert response.status_code == 422
        assert "year" in response.json()["details"]["validation_errors"]

    @pytest.mark.parametrize("year", [2**63, 3_000_000_000, -3_000_000_000])
    async def test_create_rejects_year_outside_integer_column(
        self, client: AsyncClient, year: int
    ) -> None:
        response = await client.post(
            "/cars", json={"make": "A", "model": "B", "year": year}
        )

        assert response.status_code == 422
        assert "year" in response.json()["details"]["validation_errors"]

    async def test_patch_rejects_year_outside_integer_column(
        self, client: AsyncClient, saved_cars: list[int]
    ) -> None:
        response = await client.patch(f"/cars/{saved_cars[0]}", json={"year": 2**63})

        assert response.status_code == 422

    async def test_replace_clears_omitted_color(
        self, client: AsyncClient, saved_cars: list[int]
    ) -> None:
        response = await client.put(
            f"/cars/{saved_cars[0]}",
            json={"make": "Honda", "model": "Civic", "year": 1998},
        )

        assert response.status_code == 200
        assert response.json()["year"] == 1998
        assert response.json()["color"] is None

    async def test_patch_keeps_other_fields(
        self, client: AsyncClient, saved_cars: list[int]
    ) -> None:
        response = await client.patch(f"/cars/{saved_cars[0]}", json={"color": "green"})

        body = response.json()
        assert (body["make"], body["model"], body["year"], body["color"]) == (
            "Honda",
            "Civic",
            1997,
            "green",
        )


@pytest.mark.integration
class TestCarSearch:
    async def test_search_index(self, client: AsyncClient) -> None:
        response = await client.get("/cars/search")

        assert response.status_code == 200
        assert response.json()["_links"]["findByMakeIgnoringCase"] == {
            "href": "http://test/cars/search/findByMakeIgnoringCase{?make}",
            "templated": True,
        }

    @pytest.mark.parametrize("make", ["honda", "HONDA", "Honda", "hOnDa"])
    async def test_find_by_make_ignoring_case(
        self, client: AsyncClient, saved_cars: list[int], make: str
    ) -> None:
        response = await client.get(
            "/cars/search/findByMakeIgnoringCase", params={"make": make}
        )

        assert response.status_code == 200
        cars = response.json()["_embedded"]["cars"]
        assert [car["model"] for car in cars] == ["Civic", "Accord"]

    async def test_no_match(self, client: AsyncClient, saved_cars: list[int]) -> None:
        response = await client.get(
            "/cars/search/findByMakeIgnoringCase", params={"make": "Fiat"}
        )

        assert response.json()["_embedded"] == {"cars": []}

    async def test_missing_parameter(self, client: AsyncClient) -> None:
        response = await client.get("/cars/search/findByMakeIgnoringCase")

        assert response.status_code == 400
        assert response.json()["details"] == {"missing": ["make"]}

    async def test_unknown_query(self, client: AsyncClient) -> None:
        response = await client.get("/cars/search/findByColor", params={"color": "red"})

        assert response.status_code == 404


@pytest.mark.integration
class TestCarRepository:
    async def test_find_by_make_ignoring_case(
        self, db_session: SessionFactory, saved_cars: list[int]
    ) -> None:
        async with db_session() as session:
            cars = await CarRepository(session).find_by_make_ignoring_case("HONDA")

        assert [str(car) for car in cars] == ["Honda Civic 1997 red", "honda Accord 2003 blue"]

    async def test_filter_by(self, db_session: SessionFactory, saved_cars: list[int]) -> None:
        async with db_session() as session:
            cars = await CarRepository(session).filter_by(make="Toyota", year=2010)

        assert [car.model for car in cars] == ["Corolla"]

    async def test_count_and_exists(
        self, db_session: SessionFactory, saved_cars: list[int]
    ) -> None:
        async with db_session() as session:
            repository = CarRepository(session)

            assert await repository.count() == 3
            assert await repository.exists(saved_cars[0])
            assert not await repository.exists(999)

    async def test_timestamps_filled_by_database(
        self, db_session: SessionFactory, saved_cars: list[int]
    ) -> None:
        async with db_session() as session:
            car = await CarRepository(session).get_by_id(saved_cars[0])

        assert car is not None
        assert car.created_at is not None
        assert car.updated_at is not None
