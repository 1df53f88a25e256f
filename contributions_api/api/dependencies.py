from fastapi import Depends
from fastapi import Request

from contributions_api.cache import ResultCache
from contributions_api.github_api import GitHubCalendarClient
from contributions_api.settings import Settings


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_cache(request: Request) -> ResultCache:
    return request.app.state.cache


def get_calendar_client(
    settings: Settings = Depends(get_settings),
) -> GitHubCalendarClient:
    return GitHubCalendarClient.from_settings(settings)
