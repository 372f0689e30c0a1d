"""Car entity."""

from autorest.domain.cars.models import Car
from autorest.domain.cars.repository import CarRepository

__all__ = ["Car", "CarRepository"]
