"""Resources exposed by the application.

Cats are a paged collection. Cars are listed in full and offer a
case-insensitive search by make.
"""

from collections.abc import Mapping

from autorest.api.routes.resources import ResourceDefinition, SearchQuery
from autorest.api.schemas.cars import CarCreate, CarPatch
from autorest.api.schemas.cats import CatCreate, CatPatch
from autorest.domain.cars import Car, CarRepository
from autorest.domain.cats import Cat, CatRepository


async def _find_by_make_ignoring_case(
    repository: CarRepository, arguments: Mapping[str, str]
) -> list[Car]:
    return await repository.find_by_make_ignoring_case(arguments["make"])


CAT_RESOURCE = ResourceDefinition(
    collection="cats",
    item_rel="cat",
    model=Cat,
    repository=CatRepository,
    create_schema=CatCreate,
    patch_schema=CatPatch,
    paged=True,
)

CAR_RESOURCE = ResourceDefinition(
    collection="cars",
    item_rel="car",
    model=Car,
    repository=CarRepository,
    create_schema=CarCreate,
    patch_schema=CarPatch,
    paged=False,
    searches=(
        SearchQuery(
            name="findByMakeIgnoringCase",
            parameters=("make",),
            run=_find_by_make_ignoring_case,
        ),
    ),
)

RESOURCES: tuple[ResourceDefinition, ...] = (CAT_RESOURCE, CAR_RESOURCE)
