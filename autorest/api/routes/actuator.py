"""Operational endpoints under ``/actuator``.

- ``/actuator/health``: ``UP`` when the database answers, otherwise ``DOWN``
  with status 503
- ``/actuator/info``: application metadata and schema revision
- ``/actuator/metrics``: names of the available metrics
- ``/actuator/metrics/{name}``: measurements of one metric
"""

from typing import Annotated, Any, cast

from alembic.util import CommandError
from fastapi import APIRouter, Depends, Request, status
from loguru import logger
from sqlalchemy.exc import SQLAlchemyError

from autorest.api.utils.hal import Links, base_url, link
from autorest.api.utils.responses import ORJSONResponse
from autorest.core.config import Settings, get_settings
from autorest.core.exceptions import NotFoundError
from autorest.core.metrics import HTTP_SERVER_REQUESTS, get_metrics
from autorest.infrastructure.database.migrations import current_revision, head_revision
from autorest.infrastructure.database.session import (
    check_database_connection,
    get_engine,
)

STATUS_UP = "UP"
STATUS_DOWN = "DOWN"

router = APIRouter(prefix="/actuator", tags=["actuator"])

AppSettings = Annotated[Settings, Depends(get_settings)]


@router.get("")
async def actuator_index(request: Request) -> dict[str, Links]:
    """Links to every actuator endpoint."""
    href = f"{base_url(request)}/actuator"
    return {
        "_links": {
            "self": link(href),
            "health": link(f"{href}/health"),
            "info": link(f"{href}/info"),
            "metrics": link(f"{href}/metrics"),
            "metrics-requiredMetricName": link(
                f"{href}/metrics/{{requiredMetricName}}", templated=True
            ),
        }
    }


@router.get("/health")
async def health(settings: AppSettings) -> ORJSONResponse:
    """Report overall health, derived from database connectivity.

    Returns:
        ORJSONResponse: 200 with ``UP`` or 503 with ``DOWN``.
    """
    is_healthy, error_msg = await check_database_connection()

    db_component: dict[str, Any] = {
        "status": STATUS_UP if is_healthy else STATUS_DOWN,
        "details": {"database": settings.database_config.backend},
    }

    if is_healthy:
        pool = get_engine().pool
        logger.bind(
            metric_type="db.pool.health",
            pool_status=cast("Any", pool).status(),
        ).debug("Database pool health check")
    else:
        logger.warning("Database health check failed: {}", error_msg)
        db_component["details"]["error"] = error_msg

    overall = db_component["status"]
    return ORJSONResponse(
        {"status": overall, "components": {"db": db_component}},
        status_code=(
            status.HTTP_200_OK
            if overall == STATUS_UP
            else status.HTTP_503_SERVICE_UNAVAILABLE
        ),
    )


@router.get("/info")
async def info(settings: AppSettings) -> dict[str, Any]:
    """Application metadata together with the database schema revision."""
    try:
        revision = await current_revision()
    except (SQLAlchemyError, OSError) as e:
        logger.warning("Could not read the schema revision: {}", e)
        revision = None

    try:
        head = head_revision()
    except CommandError as e:
        logger.warning("Could not read the migration scripts: {}", e)
        head = None

    return {
        "app": {
            "name": settings.app_name,
            "version": settings.app_version,
            "title": settings.app_title,
            "environment": settings.environment,
        },
        "profile": settings.active_profile,
        "database": {
            "backend": settings.database_config.backend,
            "revision": revision,
            "head": head,
        },
    }


@router.get("/metrics")
async def metric_names() -> dict[str, list[str]]:
    return {"names": get_metrics().names()}


@router.get("/metrics/{name}")
async def metric(name: str) -> dict[str, Any]:
    """Measurements of one metric.

    Raises:
        NotFoundError: If no metric has that name.
    """
    metrics = get_metrics()
    measurements = metrics.measurements(name)
    if measurements is None:
        msg = f"No metric named '{name}'"
        raise NotFoundError(msg, context={"metric": name})

    body: dict[str, Any] = {"name": name, "measurements": measurements}
    if name == HTTP_SERVER_REQUESTS:
        body["availableTags"] = [
            {"tag": "status", "values": list(metrics.status_counts())}
        ]
    return body
