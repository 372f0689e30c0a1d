"""HAL index listing every exposed collection."""

from collections.abc import Sequence

from fastapi import APIRouter, Request

from autorest.api.routes.resources import ResourceDefinition, collection_template
from autorest.api.utils.hal import Links, base_url, link
from autorest.api.utils.responses import HALJSONResponse


def create_root_router(resources: Sequence[ResourceDefinition]) -> APIRouter:
    """Build the router serving ``GET /``."""
    router = APIRouter(tags=["root"])

    @router.get("/", response_class=HALJSONResponse)
    async def index(request: Request) -> HALJSONResponse:
        links: Links = {
            resource.collection: collection_template(request, resource)
            for resource in resources
        }
        links["actuator"] = link(f"{base_url(request)}/actuator")
        return HALJSONResponse({"_links": links})

    return router
