"""Fetch the X home page and on-demand script needed for transaction ids."""

from __future__ import annotations

import re
from typing import Callable

import httpx

from src.config import (
    DEFAULT_ACCEPT_LANGUAGE,
    DEFAULT_HOME_URL,
    DEFAULT_MIGRATE_URL,
    DEFAULT_TIMEOUT_SECONDS,
    DEFAULT_USER_AGENT,
)
from src.exceptions import ExtractionError, NetworkError
from src.transaction.extraction import extract_ondemand_file_url
from src.transaction.markup import SoupDocument, parse_home_page_html
from src.transaction.x_transaction import RandomByteSource, XClientTransaction


MIGRATION_REGEX = re.compile(
    r"https?://(?:www\.)?(?:twitter|x)\.com(?:/x)?/migrate[/?]tok=[a-zA-Z0-9%\-_]+"
)


class HomePageFetcher:
    """Single-shot loader for the home page and on-demand script.

    Failures are raised as NetworkError and never retried.
    """

    def __init__(
        self,
        *,
        client: httpx.Client | None = None,
        home_url: str = DEFAULT_HOME_URL,
        migrate_url: str = DEFAULT_MIGRATE_URL,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        logger: Callable[[str], None] | None = None,
    ) -> None:
        self.home_url = home_url
        self.migrate_url = migrate_url
        self._logger = logger
        self._owns_client = client is None
        self._client = client or httpx.Client(
            timeout=timeout_seconds,
            follow_redirects=True,
            headers={
                "user-agent": DEFAULT_USER_AGENT,
                "accept-language": DEFAULT_ACCEPT_LANGUAGE,
                "accept": "text/html,*/*",
            },
        )

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> HomePageFetcher:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def fetch_home_page(self) -> SoupDocument:
        self._log(f"[首页] 请求 {self.home_url}")
        document = parse_home_page_html(self._send("GET", self.home_url))

        migration_url = _find_migration_url(document)
        if migration_url:
            self._log(f"[首页] 跟随迁移跳转 {migration_url}")
            document = parse_home_page_html(self._send("GET", migration_url))

        form = document.select_one("form[name='f']") or document.select_one(
            f"form[action='{self.migrate_url}']"
        )
        if form is not None:
            action = str(form.get("action") or self.migrate_url)
            method = str(form.get("method") or "POST").upper()
            data = {
                str(field.get("name")): str(field.get("value") or "")
                for field in form.find_all("input")
                if field.get("name")
            }
            self._log(f"[首页] 提交迁移表单 method={method} fields={len(data)}")
            if method == "GET":
                html = self._send("GET", action, params=data)
            else:
                html = self._send("POST", action, data=data)
            document = parse_home_page_html(html)
        return document

    def fetch_ondemand_script(self, home_page: SoupDocument) -> str:
        ondemand_url = extract_ondemand_file_url(home_page)
        if not ondemand_url:
            raise ExtractionError("Couldn't get on-demand file hash from home page.")
        self._log(f"[脚本] 请求 {ondemand_url}")
        return self._send(
            "GET",
            ondemand_url,
            headers={"accept": "*/*", "referer": f"{self.home_url}/"},
        )

    def _send(
        self,
        method: str,
        url: str,
        *,
        params: dict[str, str] | None = None,
        data: dict[str, str] | None = None,
        headers: dict[str, str] | None = None,
    ) -> str:
        try:
            response = self._client.request(method, url, params=params, data=data, headers=headers)
        except httpx.HTTPError as exc:
            self._log(f"[网络] 请求异常 url={url} 异常={exc}")
            raise NetworkError(f"Request to {url} failed: {exc}") from exc
        if response.status_code >= 400:
            self._log(f"[网络] 请求失败 url={url} 状态码={response.status_code}")
            raise NetworkError(f"Request to {url} failed with status {response.status_code}")
        return response.text

    def _log(self, message: str) -> None:
        if self._logger is not None:
            self._logger(message)


def create_transaction(
    *,
    client: httpx.Client | None = None,
    logger: Callable[[str], None] | None = None,
    random_byte: RandomByteSource | None = None,
) -> XClientTransaction:
    """Fetch page data and build a ready transaction context."""
    with HomePageFetcher(client=client, logger=logger) as fetcher:
        home_page = fetcher.fetch_home_page()
        ondemand_script = fetcher.fetch_ondemand_script(home_page)

    transaction = XClientTransaction(
        home_page=home_page,
        ondemand_script=ondemand_script,
        random_byte=random_byte,
    )
    if logger is not None:
        logger(f"[事务] 事务上下文构建成功 {transaction.describe()}")
    return transaction


def _find_migration_url(document: SoupDocument) -> str | None:
    refresh = document.select_one("meta[http-equiv='refresh']")
    if refresh is not None:
        match = MIGRATION_REGEX.search(str(refresh))
        if match:
            return match.group(0)
    match = MIGRATION_REGEX.search(document.source())
    if match:
        return match.group(0)
    return None
