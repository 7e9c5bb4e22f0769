# agents/response_assembler.py
#
# 各コンポーネントの結果を HTTP 境界のレスポンス形式に詰め替えるだけの純粋関数群。
# 名前や place_id などの値は加工せずにそのまま渡す。

from __future__ import annotations

from typing import List

from models.competitor_models import Competitor, CompetitorResult
from models.keyword_models import ContentAnalysis
from models.page_models import PageContent
from models.response_models import (
    AiAnalysisSummary,
    AiAnalysisTestResponse,
    CompetitorAnalysisResponse,
    ErrorResponse,
    HeadingCounts,
    PlacesProbeResponse,
    SampleKeyword,
    ScrapingTestResponse,
)

# サンプルとして返すキーワード数
SAMPLE_KEYWORDS = 5


def assemble_competitor_response(result: CompetitorResult) -> CompetitorAnalysisResponse:
    return CompetitorAnalysisResponse(
        success=True,
        data=result,
        message=(
            f"Found {len(result.competitors)} competitors "
            f"within {result.search_radius_meters}m radius"
        ),
    )


def assemble_ai_analysis(page: PageContent, analysis: ContentAnalysis) -> AiAnalysisTestResponse:
    samples = [
        SampleKeyword(
            keyword=k.keyword,
            relevance=k.relevance,
            category=k.category,
            search_volume=k.estimated_search_volume,
        )
        for k in analysis.keywords[:SAMPLE_KEYWORDS]
    ]
    return AiAnalysisTestResponse(
        success=True,
        url=page.url,
        title=page.title,
        description=page.description,
        scraped_keywords=len(page.raw_keyword_candidates),
        ai_analysis=AiAnalysisSummary(
            keywords_found=len(analysis.keywords),
            primary_keywords=len(analysis.suggestions.primary),
            secondary_keywords=len(analysis.suggestions.secondary),
            long_tail_keywords=len(analysis.suggestions.long_tail),
            industry_detected=analysis.industry,
            source=analysis.source,
            sample_keywords=samples,
        ),
    )


def assemble_scraping_test(page: PageContent) -> ScrapingTestResponse:
    stats = page.fetch_stats
    return ScrapingTestResponse(
        success=True,
        url=page.url,
        domain=page.domain,
        title=page.title,
        description=page.description,
        keyword_count=len(page.raw_keyword_candidates),
        headings_count=HeadingCounts(
            h1=len(page.headings.h1),
            h2=len(page.headings.h2),
            h3=len(page.headings.h3),
        ),
        content_length=len(page.raw_text),
        image_count=page.image_count,
        link_count=page.link_count,
        seo_score=page.seo_score,
        load_time=stats.load_time_ms if stats else None,
        status=stats.status_code if stats else None,
    )


def assemble_places_probe(
    status: str,
    query: str,
    total_results: int,
    competitors: List[Competitor],
) -> PlacesProbeResponse:
    return PlacesProbeResponse(
        success=True,
        status=status,
        query=query,
        total_results=total_results,
        competitors=competitors,
        message="Google Places API is working correctly!",
    )


def error_payload(message: str, exc: BaseException | None = None) -> ErrorResponse:
    """失敗時の共通エンベロープ。details には元の例外メッセージをそのまま入れる。"""
    return ErrorResponse(
        success=False,
        error=message,
        details=str(exc) if exc is not None else None,
    )
