"""All ORM models, imported together so ``Base.metadata`` knows every table."""

from autorest.domain.cars.models import Car
from autorest.domain.cats.models import Cat

__all__ = ["Car", "Cat"]
