"""Plain-text endpoints reporting selected configuration properties.

Each endpoint answers ``Config property '<name>' has value >>><value><<<``.
"""

from typing import Annotated

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse
from sqlalchemy.engine import make_url

from autorest.core.config import Settings, get_settings

NO_PROFILES = "No profiles set."

router = APIRouter(prefix="/config", tags=["config"], default_response_class=PlainTextResponse)

AppSettings = Annotated[Settings, Depends(get_settings)]


def describe(name: str, value: object) -> str:
    return f"Config property '{name}' has value >>>{value}<<<"


@router.get("/app-title")
async def app_title(settings: AppSettings) -> PlainTextResponse:
    return PlainTextResponse(describe("app_title", settings.app_title))


@router.get("/active-profile")
async def active_profile(settings: AppSettings) -> PlainTextResponse:
    return PlainTextResponse(
        describe("active_profile", settings.active_profile or NO_PROFILES)
    )


@router.get("/datasource-url")
async def datasource_url(settings: AppSettings) -> PlainTextResponse:
    """Report the database URL with any password masked."""
    url = make_url(settings.database_config.url).render_as_string(hide_password=True)
    return PlainTextResponse(describe("database_url", url))
