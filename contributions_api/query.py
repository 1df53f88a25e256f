import re
from collections.abc import Sequence

from contributions_api.errors import InputError
from contributions_api.models import ResolvedQuery

ALL_TOKEN = "all"
LAST_TOKEN = "last"
NESTED_FORMAT = "nested"

_YEAR_PATTERN = re.compile(r"[0-9]+")


def resolve_query(tokens: Sequence[str], format: str | None = None) -> ResolvedQuery:
    """Turn raw `y` selector tokens and the `format` flag into a ResolvedQuery.

    Raises:
        InputError: If the format is not `nested` or a token is neither an
            integer year nor one of `all` and `last`.
    """

    if format and format != NESTED_FORMAT:
        raise InputError("Query parameter 'format' must be 'nested' or undefined")

    keywords = {ALL_TOKEN, LAST_TOKEN}
    if any(
        not _YEAR_PATTERN.fullmatch(token) and token not in keywords
        for token in tokens
    ):
        raise InputError("Query parameter 'y' must be an integer, 'all' or 'last'")

    years = [int(token) for token in tokens if _YEAR_PATTERN.fullmatch(token)]
    return ResolvedQuery(
        years=tuple(years),
        fetch_all=not tokens or ALL_TOKEN in tokens,
        last_year=LAST_TOKEN in tokens,
        format="nested" if format == NESTED_FORMAT else "flat",
    )


def cache_key(username: str, query: ResolvedQuery) -> str:
    """Build the cache key for a username and its resolved query."""

    return f"{username.lower()}-{query.model_dump_json()}"
