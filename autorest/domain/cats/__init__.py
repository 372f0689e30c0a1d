"""Cat entity."""

from autorest.domain.cats.models import Cat
from autorest.domain.cats.repository import CatRepository

__all__ = ["Cat", "CatRepository"]
