# agents/content_fetcher.py

from __future__ import annotations

import logging

from app.config import Settings
from models.page_models import FetchStats, PageContent
from services.crawler import fetch_html
from services.html_parser import parse_html

logger = logging.getLogger(__name__)


class ContentFetcher:
    """
    URL → PageContent。
      crawler.fetch_html() → html_parser.parse_html()
    の2段。失敗時は FetchError をそのまま投げる（フォールバックは呼び出し側で判断）。
    """

    def __init__(self, settings: Settings) -> None:
        self.timeout = settings.fetch_timeout_seconds

    def fetch(self, url: str) -> PageContent:
        logger.info("[content_fetcher] fetch start url=%s", url)

        fetched = fetch_html(url, timeout=self.timeout)
        page = parse_html(
            fetched.url,
            fetched.html,
            fetch_stats=FetchStats(
                status_code=fetched.status_code,
                size=len(fetched.html),
                load_time_ms=fetched.load_time_ms,
            ),
        )

        logger.info(
            "[content_fetcher] fetch done url=%s title=%r words=%s",
            page.url,
            page.title[:50],
            len(page.raw_text.split()),
        )
        return page
