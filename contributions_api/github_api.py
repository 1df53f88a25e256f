import asyncio
from collections.abc import Iterable

import httpx
from loguru import logger

from contributions_api.errors import RetrievalError
from contributions_api.errors import UserNotFoundError
from contributions_api.models import YearResult
from contributions_api.parser import parse_calendar
from contributions_api.parser import parse_year_links
from contributions_api.settings import Settings


class GitHubCalendarClient:
    """Retrieves contribution calendar pages from github.com.

    Use as an async context manager; one HTTP connection pool is shared by
    every retrieval issued inside the block.
    """

    def __init__(
        self,
        base_url: str = "https://github.com",
        timeout: float = 10.0,
        user_agent: str = "github-contributions-api",
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.user_agent = user_agent
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @classmethod
    def from_settings(
        cls, settings: Settings, transport: httpx.AsyncBaseTransport | None = None
    ) -> "GitHubCalendarClient":
        return cls(
            base_url=settings.github_base_url,
            timeout=settings.request_timeout_seconds,
            user_agent=settings.user_agent,
            transport=transport,
        )

    async def __aenter__(self) -> "GitHubCalendarClient":
        self._client = httpx.AsyncClient(
            timeout=httpx.Timeout(self.timeout),
            follow_redirects=True,
            headers={
                "User-Agent": self.user_agent,
                "Accept": "text/html",
                "X-Requested-With": "XMLHttpRequest",
            },
            transport=self._transport,
        )
        return self

    async def __aexit__(self, *_) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    async def _get(
        self, url: str, params: dict[str, str], username: str, page: str
    ) -> str:
        if self._client is None:
            raise RuntimeError("GitHubCalendarClient used outside of 'async with'")

        try:
            response = await self._client.get(url, params=params)
        except httpx.HTTPError as exc:
            raise RetrievalError(f"Request for the {page} failed") from exc

        if response.status_code == 404:
            raise UserNotFoundError(username)
        if response.is_error:
            raise RetrievalError(
                f"Request for the {page} returned status {response.status_code}"
            )
        return response.text

    async def fetch_available_years(self, username: str) -> list[int]:
        """Discover which years have a contribution calendar for the user.

        Raises:
            UserNotFoundError: If the profile does not exist or lists no years.
        """

        markup = await self._get(
            f"{self.base_url}/{username}",
            params={
                "action": "show",
                "controller": "profiles",
                "tab": "contributions",
                "user_id": username,
            },
            username=username,
            page="profile page",
        )
        years = parse_year_links(markup)
        if not years:
            raise UserNotFoundError(username)

        logger.debug("Discovered contribution years for {}: {}", username, years)
        return years

    async def fetch_year(self, username: str, year: int) -> YearResult:
        """Retrieve and parse the contribution calendar of a single year."""

        markup = await self._get(
            f"{self.base_url}/users/{username}/contributions",
            params={"from": f"{year}-01-01", "to": f"{year}-12-31"},
            username=username,
            page=f"{year} calendar",
        )
        logger.debug("Retrieved {} calendar for {}", year, username)
        return parse_calendar(markup, year)

    async def fetch_years(
        self, username: str, years: Iterable[int]
    ) -> list[YearResult]:
        """Retrieve several years concurrently.

        The first failing year cancels the remaining retrievals and its
        exception propagates; no partial result is returned.
        """

        tasks = [
            asyncio.ensure_future(self.fetch_year(username, year))
            for year in sorted(set(years))
        ]
        try:
            return list(await asyncio.gather(*tasks))
        except BaseException:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise
