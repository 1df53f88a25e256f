from fastapi import APIRouter
from fastapi import Depends
from fastapi import HTTPException
from fastapi import Query
from loguru import logger

from contributions_api.api.dependencies import get_cache
from contributions_api.api.dependencies import get_calendar_client
from contributions_api.api.schemas.contributions import ErrorResponse
from contributions_api.api.schemas.contributions import FlatContributionsResponse
from contributions_api.api.schemas.contributions import NestedContributionsResponse
from contributions_api.cache import ResultCache
from contributions_api.errors import ContributionsError
from contributions_api.errors import InputError
from contributions_api.errors import UserNotFoundError
from contributions_api.github_api import GitHubCalendarClient
from contributions_api.query import cache_key
from contributions_api.query import resolve_query
from contributions_api.services.contributions_service import (
    fetch_contributions_for_query,
)
from contributions_api.services.contributions_service import shape_response


router = APIRouter()


@router.get("/")
async def root() -> dict[str, str]:
    """Return a basic service description."""

    return {
        "message": "GitHub contributions API",
        "contributions": "/v4/{username}?y={year|all|last}&format=nested",
    }


@router.get("/health/live")
def health_live() -> dict[str, str]:
    """Return liveness probe response for health checks."""

    return {"status": "ok"}


@router.get(
    "/v4/{username}",
    response_model=FlatContributionsResponse | NestedContributionsResponse,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
async def get_contributions(
    username: str,
    y: list[str] | None = Query(default=None),
    format: str | None = Query(default=None),
    cache: ResultCache = Depends(get_cache),
    client: GitHubCalendarClient = Depends(get_calendar_client),
) -> dict[str, object]:
    """Return the contribution history of a GitHub user for the selected years."""

    try:
        query = resolve_query(y or [], format)
    except InputError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    key = cache_key(username, query)
    aggregated = cache.get(key)
    if aggregated is None:
        try:
            aggregated = await fetch_contributions_for_query(username, query, client)
        except UserNotFoundError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc
        except ContributionsError as exc:
            logger.opt(exception=exc).error(
                "Fetching contributions of {} failed", username
            )
            raise HTTPException(
                status_code=500,
                detail=f"Unable to fetch contribution data of '{username}': {exc}.",
            ) from exc
        cache.put(key, aggregated)

    return shape_response(aggregated, query.format)
