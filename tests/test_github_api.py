import asyncio
from datetime import date

import httpx
import pytest

from calendar_pages import FakeGitHub
from calendar_pages import calendar_page
from contributions_api.errors import ParseError
from contributions_api.errors import RetrievalError
from contributions_api.errors import UserNotFoundError
from contributions_api.github_api import GitHubCalendarClient


CALENDARS = {
    2021: {date(2021, 1, 1): 1, date(2021, 1, 2): 0},
    2022: {date(2022, 1, 1): 3},
    2023: {date(2023, 7, 4): 2},
}


async def _discover(client: GitHubCalendarClient, username: str) -> list[int]:
    async with client:
        return await client.fetch_available_years(username)


async def _fetch_years(client: GitHubCalendarClient, years: list[int]):
    async with client:
        return await client.fetch_years("octocat", years)


def test_fetch_available_years_sends_profile_request() -> None:
    github = FakeGitHub(CALENDARS)
    client = GitHubCalendarClient(
        base_url="https://github.example/",
        user_agent="contributions-test",
        transport=github.transport(),
    )

    years = asyncio.run(_discover(client, "octocat"))

    assert years == [2021, 2022, 2023]
    request = github.requests[0]
    assert request.url.host == "github.example"
    assert request.url.path == "/octocat"
    assert request.url.params["tab"] == "contributions"
    assert request.headers["User-Agent"] == "contributions-test"
    assert request.headers["X-Requested-With"] == "XMLHttpRequest"


def test_fetch_available_years_raises_user_not_found_on_404() -> None:
    client = GitHubCalendarClient(
        transport=FakeGitHub({}, missing_user=True).transport()
    )

    with pytest.raises(UserNotFoundError) as exc_info:
        asyncio.run(_discover(client, "ghost"))

    assert exc_info.value.username == "ghost"


def test_fetch_available_years_raises_user_not_found_without_years() -> None:
    client = GitHubCalendarClient(transport=FakeGitHub({}).transport())

    with pytest.raises(UserNotFoundError):
        asyncio.run(_discover(client, "newcomer"))


def test_fetch_available_years_wraps_server_errors() -> None:
    transport = httpx.MockTransport(lambda request: httpx.Response(503))
    client = GitHubCalendarClient(transport=transport)

    with pytest.raises(RetrievalError, match="returned status 503"):
        asyncio.run(_discover(client, "octocat"))


def test_fetch_available_years_wraps_transport_errors() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectTimeout("timed out", request=request)

    client = GitHubCalendarClient(transport=httpx.MockTransport(handler))

    with pytest.raises(RetrievalError) as exc_info:
        asyncio.run(_discover(client, "octocat"))

    assert isinstance(exc_info.value.__cause__, httpx.ConnectTimeout)


def test_fetch_years_requests_each_year_once_and_orders_results() -> None:
    github = FakeGitHub(CALENDARS)
    client = GitHubCalendarClient(transport=github.transport())

    results = asyncio.run(_fetch_years(client, [2023, 2021, 2023]))

    assert [result.year for result in results] == [2021, 2023]
    assert sorted(github.year_requests) == [2021, 2023]
    year_request = github.requests[0]
    assert year_request.url.path == "/users/octocat/contributions"
    assert year_request.url.params["to"].endswith("-12-31")


def test_fetch_years_fails_whole_request_when_one_year_fails() -> None:
    github = FakeGitHub(CALENDARS, failing_years={2022: 502})
    client = GitHubCalendarClient(transport=github.transport())

    with pytest.raises(RetrievalError, match="2022 calendar"):
        asyncio.run(_fetch_years(client, [2021, 2022, 2023]))


def test_fetch_years_propagates_parse_errors() -> None:
    broken = calendar_page(2021, CALENDARS[2021], stated_total=99)
    github = FakeGitHub(CALENDARS, pages={2021: broken})
    client = GitHubCalendarClient(transport=github.transport())

    with pytest.raises(ParseError):
        asyncio.run(_fetch_years(client, [2021, 2022]))


def test_client_requires_async_context() -> None:
    client = GitHubCalendarClient(transport=FakeGitHub(CALENDARS).transport())

    with pytest.raises(RuntimeError, match="async with"):
        asyncio.run(client.fetch_year("octocat", 2021))
