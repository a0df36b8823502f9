from __future__ import annotations

from typing import Callable
from urllib.parse import parse_qs

import httpx
import pytest

from src.client.home_page import HomePageFetcher, create_transaction
from src.exceptions import ExtractionError, NetworkError

from conftest import EXPECTED_ANIMATION_KEY, HOME_PAGE_HTML, ONDEMAND_SCRIPT


ONDEMAND_ROUTE = "abs.twimg.com/responsive-web/client-web/ondemand.s.2f0364da.js"
MIGRATE_TOKEN_URL = "https://twitter.com/x/migrate?tok=abc123"

REFRESH_PAGE = f"""
<html><head>
  <meta http-equiv="refresh" content="0; url = {MIGRATE_TOKEN_URL}" />
</head></html>
"""
MIGRATION_FORM_PAGE = """
<html><body>
  <form name="f" action="https://x.com/x/migrate" method="post">
    <input type="hidden" name="tok" value="abc123" />
    <input type="hidden" name="data" value="xyz" />
    <input type="submit" />
  </form>
</body></html>
"""


def _client(
    routes: dict[tuple[str, str], httpx.Response | Exception],
    seen: list[httpx.Request],
) -> httpx.Client:
    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        key = (request.method, f"{request.url.host}{request.url.path}")
        outcome = routes[key]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    return httpx.Client(transport=httpx.MockTransport(handler))


def _logger(lines: list[str]) -> Callable[[str], None]:
    return lines.append


def test_create_transaction_without_migration() -> None:
    seen: list[httpx.Request] = []
    client = _client(
        {
            ("GET", "x.com/"): httpx.Response(200, text=HOME_PAGE_HTML),
            ("GET", ONDEMAND_ROUTE): httpx.Response(200, text=ONDEMAND_SCRIPT),
        },
        seen,
    )
    lines: list[str] = []

    tx = create_transaction(client=client, logger=_logger(lines))

    assert tx.animation_key == EXPECTED_ANIMATION_KEY
    assert [request.method for request in seen] == ["GET", "GET"]
    assert seen[1].headers["referer"] == "https://x.com/"
    assert any(line.startswith("[事务]") for line in lines)


def test_fetch_home_page_follows_refresh_and_migration_form() -> None:
    seen: list[httpx.Request] = []
    client = _client(
        {
            ("GET", "x.com/"): httpx.Response(200, text=REFRESH_PAGE),
            ("GET", "twitter.com/x/migrate"): httpx.Response(200, text=MIGRATION_FORM_PAGE),
            ("POST", "x.com/x/migrate"): httpx.Response(200, text=HOME_PAGE_HTML),
        },
        seen,
    )

    with HomePageFetcher(client=client) as fetcher:
        document = fetcher.fetch_home_page()

    assert document.meta_content("twitter-site-verification") is not None
    assert str(seen[1].url) == MIGRATE_TOKEN_URL
    assert seen[2].method == "POST"
    assert parse_qs(seen[2].content.decode()) == {"tok": ["abc123"], "data": ["xyz"]}


def test_fetch_home_page_submits_get_form_as_query() -> None:
    seen: list[httpx.Request] = []
    client = _client(
        {
            ("GET", "x.com/"): httpx.Response(
                200, text=MIGRATION_FORM_PAGE.replace('method="post"', 'method="get"')
            ),
            ("GET", "x.com/x/migrate"): httpx.Response(200, text=HOME_PAGE_HTML),
        },
        seen,
    )

    with HomePageFetcher(client=client) as fetcher:
        fetcher.fetch_home_page()

    assert seen[1].method == "GET"
    assert dict(seen[1].url.params) == {"tok": "abc123", "data": "xyz"}


def test_http_error_status_raises_network_error() -> None:
    seen: list[httpx.Request] = []
    client = _client({("GET", "x.com/"): httpx.Response(503, text="down")}, seen)
    lines: list[str] = []

    with pytest.raises(NetworkError):
        create_transaction(client=client, logger=_logger(lines))

    assert len(seen) == 1
    assert any("503" in line for line in lines)


def test_transport_error_raises_network_error_without_retry() -> None:
    seen: list[httpx.Request] = []
    client = _client({("GET", "x.com/"): httpx.ConnectError("boom")}, seen)

    with pytest.raises(NetworkError) as exc_info:
        create_transaction(client=client)

    assert len(seen) == 1
    assert isinstance(exc_info.value.__cause__, httpx.ConnectError)


def test_missing_ondemand_hash_raises_extraction_error() -> None:
    seen: list[httpx.Request] = []
    page = HOME_PAGE_HTML.replace("ondemand.s", "somethingelse")
    client = _client({("GET", "x.com/"): httpx.Response(200, text=page)}, seen)

    with pytest.raises(ExtractionError):
        create_transaction(client=client)


def test_fetcher_does_not_close_injected_client() -> None:
    client = _client({}, [])

    with HomePageFetcher(client=client):
        pass

    assert client.is_closed is False
