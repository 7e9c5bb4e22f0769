# app/workflow.py
from __future__ import annotations

import logging
from typing import List, Optional

from pydantic import BaseModel, Field

from agents.competitor_finder import CompetitorFinder
from agents.content_analyzer import ContentAnalyzer
from agents.content_fetcher import ContentFetcher
from models.competitor_models import CompetitorResult
from models.keyword_models import ContentAnalysis
from models.page_models import PageContent

logger = logging.getLogger(__name__)


class PipelineState(BaseModel):
    """
    1リクエスト分の直列パイプラインの状態。
    各ステップの出力と進捗メッセージを持つ（永続化はしない）。
    """

    url: str
    page: Optional[PageContent] = None
    analysis: Optional[ContentAnalysis] = None
    competitors: Optional[CompetitorResult] = None
    progress_messages: List[str] = Field(default_factory=list)
    current_step: Optional[str] = None


def _log_progress(state: PipelineState, step: str, message: str) -> None:
    """進捗メッセージを state に積み、同じ内容をログにも出す。"""
    line = f"[{step}] {message}"
    state.progress_messages.append(line)
    state.current_step = step
    logger.info(line)


def run_keyword_pipeline(
    url: str,
    fetcher: ContentFetcher,
    analyzer: ContentAnalyzer,
) -> PipelineState:
    """
    fetch → analyze（AI / フォールバック）の直列ワークフロー。
    fetch の FetchError はそのまま呼び出し元へ、AI 側の失敗は analyzer 内で吸収される。
    """
    state = PipelineState(url=url)

    _log_progress(state, "fetch", f"start: {url}")
    state.page = fetcher.fetch(url)
    _log_progress(state, "fetch", f"done: title={state.page.title[:50]!r}")

    _log_progress(state, "analyze", "start: keyword analysis")
    state.analysis = analyzer.analyze(state.page)
    _log_progress(
        state,
        "analyze",
        f"done: source={state.analysis.source} keywords={len(state.analysis.keywords)}",
    )
    return state


def run_competitor_pipeline(
    url: str,
    finder: CompetitorFinder,
    radius_meters: int,
    max_results: int,
) -> PipelineState:
    """競合検索のワークフロー。SearchError はそのまま呼び出し元へ。"""
    state = PipelineState(url=url)

    _log_progress(
        state,
        "competitors",
        f"start: radius={radius_meters}m max_results={max_results}",
    )
    state.competitors = finder.find_competitors(url, radius_meters, max_results)
    _log_progress(
        state,
        "competitors",
        f"done: found={len(state.competitors.competitors)} query={state.competitors.query}",
    )
    return state
