"""Unit tests for the entity models."""

import pytest

from autorest.domain.cars import Car
from autorest.domain.cats import Cat
from autorest.infrastructure.database.base import Base


@pytest.mark.unit
class TestModels:
    def test_car_string_form(self) -> None:
        car = Car(make="Honda", model="Civic", year=1997, color="red")

        assert str(car) == "Honda Civic 1997 red"

    def test_car_string_form_without_color(self) -> None:
        assert str(Car(make="Honda", model="Jazz", year=2004)) == "Honda Jazz 2004 None"

    def test_repr(self) -> None:
        assert repr(Cat(id=3, name="Tom")) == "<Cat(id=3, name='Tom')>"

    def test_tables_registered(self) -> None:
        assert {"cat", "car"} <= set(Base.metadata.tables)

    def test_car_columns(self) -> None:
        columns = Car.__table__.columns

        assert columns["make"].type.length == 255
        assert columns["color"].type.length == 64
        assert columns["color"].nullable
        assert not columns["year"].nullable
        assert columns["make"].index
