"""CRUD routes exposing a repository as a HAL resource.

A ``ResourceDefinition`` names a collection, the ORM model and repository
behind it, the bodies accepted on writes and the search queries it offers.
``create_resource_router`` turns one definition into these routes:

- ``GET /{collection}``: every item, or one page of items for paged resources
- ``POST /{collection}``: create an item (201 with ``Location``)
- ``GET|PUT|PATCH|DELETE /{collection}/{id}``: item access, 404 when missing
- ``GET /{collection}/search``: links to the declared search queries
- ``GET /{collection}/search/{query}``: run one declared search query

Responses are ``application/hal+json``.

``PUT`` replaces an existing item and never creates one: a missing id is a
404, so items are only created through ``POST`` and their ids are always
assigned by the database. Path ids and page numbers are bounded by the
column types so oversized values fail validation instead of reaching the
driver.
"""

from collections.abc import Awaitable, Callable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Annotated, Any

from fastapi import APIRouter, Depends, Path, Query, Request, Response, status
from loguru import logger
from pydantic import BaseModel as Schema
from sqlalchemy.ext.asyncio import AsyncSession

from autorest.api.constants import MAX_ENTITY_ID, MAX_PAGE_NUMBER, SEARCH_PATH
from autorest.api.utils.hal import (
    Links,
    base_url,
    link,
    page_links,
    page_metadata,
    with_query,
)
from autorest.api.utils.responses import HALJSONResponse
from autorest.core.config import get_settings
from autorest.core.exceptions import NotFoundError, ValidationError
from autorest.infrastructure.database.base import BaseModel
from autorest.infrastructure.database.dependencies import DatabaseSession
from autorest.infrastructure.database.repository import BaseRepository, SortOrder

type SearchRunner = Callable[[Any, Mapping[str, str]], Awaitable[Sequence[BaseModel]]]
EntityId = Annotated[int, Path(le=MAX_ENTITY_ID)]


@dataclass(frozen=True)
class SearchQuery:
    """A named query exposed under ``/{collection}/search/{name}``.

    Attributes:
        name: Path segment of the query, e.g. ``findByMakeIgnoringCase``.
        parameters: Required query string parameters.
        run: Coroutine receiving the repository and the parameter values.
    """

    name: str
    parameters: tuple[str, ...]
    run: SearchRunner


@dataclass(frozen=True)
class ResourceDefinition:
    """Everything needed to expose one entity as a collection resource."""

    collection: str
    item_rel: str
    model: type[BaseModel]
    repository: Callable[[AsyncSession], BaseRepository[Any]]
    create_schema: type[Schema]
    patch_schema: type[Schema]
    paged: bool = True
    searches: tuple[SearchQuery, ...] = field(default_factory=tuple)

    @property
    def fields(self) -> tuple[str, ...]:
        """Entity fields rendered in item bodies besides ``id``."""
        return tuple(self.create_schema.model_fields)

    @property
    def required_fields(self) -> frozenset[str]:
        return frozenset(
            name
            for name, info in self.create_schema.model_fields.items()
            if info.is_required()
        )

    def search(self, name: str) -> SearchQuery | None:
        return next((query for query in self.searches if query.name == name), None)


def parse_sort(values: Sequence[str]) -> list[SortOrder]:
    """Parse ``sort`` parameters of the form ``field[,field...][,asc|desc]``.

    Args:
        values: Raw ``sort`` query parameter values.

    Returns:
        list[SortOrder]: ``(field, descending)`` pairs in request order.

    Raises:
        ValidationError: If a parameter has no property name.
    """
    orders: list[SortOrder] = []
    for value in values:
        parts = [part.strip() for part in value.split(",") if part.strip()]
        descending = False
        if parts and parts[-1].lower() in {"asc", "desc"}:
            descending = parts.pop().lower() == "desc"
        if not parts:
            msg = f"Invalid sort parameter '{value}'"
            raise ValidationError(msg, context={"sort": value})
        orders.extend((part, descending) for part in parts)
    return orders


def collection_href(request: Request, definition: ResourceDefinition) -> str:
    return f"{base_url(request)}/{definition.collection}"


def collection_template(request: Request, definition: ResourceDefinition) -> dict[str, Any]:
    """Templated link advertising the collection and its paging parameters."""
    href = collection_href(request, definition)
    if definition.paged:
        return link(f"{href}{{?page,size,sort}}", templated=True)
    return link(href)


def render_item(
    request: Request, definition: ResourceDefinition, entity: BaseModel
) -> dict[str, Any]:
    """Render one entity as a HAL item."""
    href = f"{collection_href(request, definition)}/{entity.id}"
    body: dict[str, Any] = {"id": entity.id}
    body.update({name: getattr(entity, name) for name in definition.fields})
    body["_links"] = {"self": link(href), definition.item_rel: link(href)}
    return body


def render_items(
    request: Request,
    definition: ResourceDefinition,
    entities: Sequence[BaseModel],
    links: Links,
) -> dict[str, Any]:
    return {
        "_embedded": {
            definition.collection: [
                render_item(request, definition, entity) for entity in entities
            ]
        },
        "_links": links,
    }


def search_links(request: Request, definition: ResourceDefinition) -> Links:
    search_href = f"{collection_href(request, definition)}/{SEARCH_PATH}"
    links: Links = {}
    for query in definition.searches:
        template = "{?" + ",".join(query.parameters) + "}" if query.parameters else ""
        links[query.name] = link(
            f"{search_href}/{query.name}{template}", templated=bool(template)
        )
    links["self"] = link(search_href)
    return links


def create_resource_router(definition: ResourceDefinition) -> APIRouter:
    """Build the router exposing ``definition`` under ``/{collection}``.

    Args:
        definition: The resource to expose.

    Returns:
        APIRouter: Router to include in the application.
    """
    router = APIRouter(
        prefix=f"/{definition.collection}",
        tags=[definition.collection],
        default_response_class=HALJSONResponse,
    )
    model_name = definition.model.__name__

    def get_repository(db: DatabaseSession) -> BaseRepository[Any]:
        return definition.repository(db)

    Repository = Annotated[BaseRepository[Any], Depends(get_repository)]  # noqa: N806

    def not_found(entity_id: int) -> NotFoundError:
        msg = f"{model_name} with ID {entity_id} not found"
        return NotFoundError(msg, context={"entity": model_name, "id": entity_id})

    if definition.paged:

        @router.get("", summary=f"List {definition.collection} page by page")
        async def list_page(
            request: Request,
            repository: Repository,
            page: Annotated[int, Query(ge=0, le=MAX_PAGE_NUMBER)] = 0,
            size: Annotated[int | None, Query(ge=1)] = None,
            sort: Annotated[list[str] | None, Query()] = None,
        ) -> HALJSONResponse:
            pagination = get_settings().pagination_config
            page_size = min(size or pagination.default_page_size, pagination.max_page_size)
            sort_values = sort or []

            items, total = await repository.get_page(
                page, page_size, parse_sort(sort_values)
            )
            metadata = page_metadata(page_size, total, page)

            body = render_items(
                request,
                definition,
                items,
                page_links(collection_href(request, definition), metadata, sort_values),
            )
            if definition.searches:
                body["_links"]["search"] = link(
                    f"{collection_href(request, definition)}/{SEARCH_PATH}"
                )
            body["page"] = metadata
            return HALJSONResponse(body)

    else:

        @router.get("", summary=f"List all {definition.collection}")
        async def list_all(request: Request, repository: Repository) -> HALJSONResponse:
            items = await repository.get_all(limit=None)
            links: Links = {"self": link(collection_href(request, definition))}
            if definition.searches:
                links["search"] = link(
                    f"{collection_href(request, definition)}/{SEARCH_PATH}"
                )
            return HALJSONResponse(render_items(request, definition, items, links))

    @router.post("", status_code=status.HTTP_201_CREATED)
    async def create_item(
        request: Request,
        repository: Repository,
        payload: definition.create_schema,  # type: ignore[name-defined]
    ) -> HALJSONResponse:
        entity = await repository.create(definition.model(**payload.model_dump()))
        body = render_item(request, definition, entity)
        return HALJSONResponse(
            body,
            status_code=status.HTTP_201_CREATED,
            headers={"Location": body["_links"]["self"]["href"]},
        )

    if definition.searches:

        @router.get(f"/{SEARCH_PATH}", summary=f"Search queries of {definition.collection}")
        async def list_searches(request: Request) -> HALJSONResponse:
            return HALJSONResponse({"_links": search_links(request, definition)})

        @router.get(f"/{SEARCH_PATH}/{{query_name}}")
        async def run_search(
            request: Request, query_name: str, repository: Repository
        ) -> HALJSONResponse:
            query = definition.search(query_name)
            if query is None:
                msg = f"No search query '{query_name}' on {definition.collection}"
                raise NotFoundError(msg, context={"query": query_name})

            missing = [name for name in query.parameters if name not in request.query_params]
            if missing:
                msg = f"Missing search parameters: {', '.join(missing)}"
                raise ValidationError(msg, context={"missing": missing})

            arguments = {name: request.query_params[name] for name in query.parameters}
            items = await query.run(repository, arguments)
            logger.debug("Search {} returned {} items", query_name, len(items))

            self_href = with_query(
                f"{collection_href(request, definition)}/{SEARCH_PATH}/{query_name}",
                arguments.items(),
            )
            return HALJSONResponse(
                render_items(request, definition, items, {"self": link(self_href)})
            )

    @router.get("/{entity_id:int}")
    async def read_item(
        request: Request, entity_id: EntityId, repository: Repository
    ) -> HALJSONResponse:
        entity = await repository.get_by_id(entity_id)
        if entity is None:
            raise not_found(entity_id)
        return HALJSONResponse(render_item(request, definition, entity))

    @router.put("/{entity_id:int}")
    async def replace_item(
        request: Request,
        entity_id: EntityId,
        repository: Repository,
        payload: definition.create_schema,  # type: ignore[name-defined]
    ) -> HALJSONResponse:
        entity = await repository.update(entity_id, payload.model_dump())
        if entity is None:
            raise not_found(entity_id)
        return HALJSONResponse(render_item(request, definition, entity))

    @router.patch("/{entity_id:int}")
    async def patch_item(
        request: Request,
        entity_id: EntityId,
        repository: Repository,
        payload: definition.patch_schema,  # type: ignore[name-defined]
    ) -> HALJSONResponse:
        changes = payload.model_dump(exclude_unset=True)
        nulled = sorted(
            name
            for name, value in changes.items()
            if value is None and name in definition.required_fields
        )
        if nulled:
            msg = f"Fields may not be null: {', '.join(nulled)}"
            raise ValidationError(msg, context={"fields": nulled})

        entity = await repository.update(entity_id, changes)
        if entity is None:
            raise not_found(entity_id)
        return HALJSONResponse(render_item(request, definition, entity))

    @router.delete("/{entity_id:int}", status_code=status.HTTP_204_NO_CONTENT)
    async def delete_item(entity_id: EntityId, repository: Repository) -> Response:
        if not await repository.delete(entity_id):
            raise not_found(entity_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    return router
