# services/crawler.py

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from urllib.parse import urlparse

import requests

from services.errors import FetchError, InvalidUrlError

logger = logging.getLogger(__name__)

DEFAULT_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/120.0.0.0 Safari/537.36"
    ),
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "ko-KR,ko;q=0.9,en;q=0.8",
}


@dataclass(frozen=True)
class FetchedHtml:
    url: str
    html: str
    status_code: int
    load_time_ms: int


def normalize_url(url: str) -> str:
    """
    スキーム無しの URL（example.com）に https:// を補う。
    http / https 以外やホスト名が無いものは InvalidUrlError。
    """
    url = (url or "").strip()
    if not url:
        raise InvalidUrlError("URL is empty")
    if "://" not in url:
        url = "https://" + url

    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise InvalidUrlError(f"Invalid URL format: {url}")
    return url


def extract_domain(url: str) -> str:
    """ホスト名から先頭の www. を除いたもの。"""
    host = urlparse(url).hostname or ""
    return host[4:] if host.startswith("www.") else host


def fetch_html(url: str, timeout: float = 30.0) -> FetchedHtml:
    """
    単純な GET だけのクロール。
    リトライは入れていない（1回失敗したら呼び出し側で判断する）。
    通信エラー・タイムアウト・非2xx はすべて FetchError に変換する。
    """
    url = normalize_url(url)
    started = time.monotonic()

    logger.info("[crawler] GET %s timeout=%s", url, timeout)
    try:
        resp = requests.get(url, headers=DEFAULT_HEADERS, timeout=timeout)
    except requests.Timeout as e:
        raise FetchError(f"Timed out after {timeout}s fetching {url}") from e
    except requests.RequestException as e:
        raise FetchError(f"Could not reach {url}: {e}") from e

    try:
        resp.raise_for_status()
    except requests.HTTPError as e:
        logger.error("[crawler] Non-2xx status: url=%s status=%s", url, resp.status_code)
        raise FetchError(f"{url} returned HTTP {resp.status_code}") from e

    load_time_ms = int((time.monotonic() - started) * 1000)
    logger.info(
        "[crawler] done url=%s status=%s length=%s load_time_ms=%s",
        url,
        resp.status_code,
        len(resp.text),
        load_time_ms,
    )
    return FetchedHtml(
        url=url,
        html=resp.text,
        status_code=resp.status_code,
        load_time_ms=load_time_ms,
    )
