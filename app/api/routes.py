# app/api/routes.py
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from agents.competitor_finder import CompetitorFinder, map_competitors
from agents.content_analyzer import ContentAnalyzer
from agents.content_fetcher import ContentFetcher
from agents.response_assembler import (
    assemble_ai_analysis,
    assemble_competitor_response,
    assemble_places_probe,
    assemble_scraping_test,
    error_payload,
)
from app.config import Settings, get_settings
from app.workflow import run_competitor_pipeline, run_keyword_pipeline
from models.competitor_models import GeoPoint
from models.response_models import (
    AiAnalysisTestResponse,
    CompetitorAnalysisRequest,
    CompetitorAnalysisResponse,
    ConnectionTestResponse,
    CredentialStatusResponse,
    PlacesProbeResponse,
    ScrapingTestResponse,
    UrlRequest,
)
from services.errors import FetchError, InvalidUrlError, SearchError
from services.places_client import PlacesClient

logger = logging.getLogger(__name__)

router = APIRouter()

# Places API 疎通確認用の固定クエリ（江南駅周辺の美容外科）
PROBE_QUERY = "강남 성형외과"
PROBE_LOCATION = GeoPoint(lat=37.4979, lng=127.0276)
PROBE_RADIUS = 3000
PROBE_MAX_RESULTS = 5


# --------- 依存コンポーネント ---------
# テストでは app.dependency_overrides で差し替える


def get_content_fetcher(settings: Settings = Depends(get_settings)) -> ContentFetcher:
    return ContentFetcher(settings)


def get_content_analyzer(settings: Settings = Depends(get_settings)) -> ContentAnalyzer:
    return ContentAnalyzer(settings)


def get_places_client(settings: Settings = Depends(get_settings)) -> PlacesClient:
    return PlacesClient(settings)


def get_competitor_finder(
    places: PlacesClient = Depends(get_places_client),
    fetcher: ContentFetcher = Depends(get_content_fetcher),
    analyzer: ContentAnalyzer = Depends(get_content_analyzer),
) -> CompetitorFinder:
    return CompetitorFinder(places, fetcher=fetcher, analyzer=analyzer)


# --------- エラー整形 ---------


def _error_response(message: str, exc: Exception, status_code: int) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=error_payload(message, exc).model_dump(by_alias=True),
    )


def _fetch_failure(message: str, exc: FetchError) -> JSONResponse:
    status_code = 400 if isinstance(exc, InvalidUrlError) else 502
    return _error_response(message, exc, status_code)


# --------- エンドポイント ---------


@router.post("/competitors/analyze", response_model=CompetitorAnalysisResponse)
def api_analyze_competitors(
    payload: CompetitorAnalysisRequest,
    finder: CompetitorFinder = Depends(get_competitor_finder),
    settings: Settings = Depends(get_settings),
):
    """
    対象 URL 周辺の競合事業者を Places 検索で探す。
    Places の失敗は空リストにせず、エラーとして返す。
    """
    radius = payload.radius if payload.radius is not None else settings.default_search_radius
    max_results = (
        payload.max_results if payload.max_results is not None else settings.default_max_results
    )
    logger.info(
        "[api.competitors] target_url=%s radius=%s max_results=%s",
        payload.target_url,
        radius,
        max_results,
    )
    try:
        state = run_competitor_pipeline(
            payload.target_url,
            finder,
            radius_meters=radius,
            max_results=max_results,
        )
    except InvalidUrlError as e:
        return _fetch_failure("Failed to analyze competitors", e)
    except SearchError as e:
        logger.error("[api.competitors] search failed: %s", e)
        return _error_response("Failed to analyze competitors", e, 502)

    return assemble_competitor_response(state.competitors)


@router.post("/test-ai-analysis", response_model=AiAnalysisTestResponse)
def api_test_ai_analysis(
    payload: UrlRequest,
    fetcher: ContentFetcher = Depends(get_content_fetcher),
    analyzer: ContentAnalyzer = Depends(get_content_analyzer),
):
    """
    ページ取得 → キーワード分析をまとめて実行する確認用 API。
    API キーが無い場合はフォールバック抽出の結果になる。
    """
    logger.info("[api.test-ai-analysis] url=%s", payload.url)
    try:
        state = run_keyword_pipeline(payload.url, fetcher, analyzer)
    except FetchError as e:
        logger.error("[api.test-ai-analysis] fetch failed: %s", e)
        return _fetch_failure("AI analysis test failed", e)

    return assemble_ai_analysis(state.page, state.analysis)


@router.post("/test-scraping", response_model=ScrapingTestResponse)
def api_test_scraping(
    payload: UrlRequest,
    fetcher: ContentFetcher = Depends(get_content_fetcher),
):
    """ページ取得とパースだけを行い、構造のサマリを返す。"""
    logger.info("[api.test-scraping] url=%s", payload.url)
    try:
        page = fetcher.fetch(payload.url)
    except FetchError as e:
        logger.error("[api.test-scraping] fetch failed: %s", e)
        return _fetch_failure("Scraping test failed", e)

    return assemble_scraping_test(page)


@router.post("/test-places-api", response_model=PlacesProbeResponse)
def api_test_places(places: PlacesClient = Depends(get_places_client)):
    """固定クエリで Places Text Search を1回呼び、先頭5件を返す。"""
    logger.info("[api.test-places-api] probe query=%s", PROBE_QUERY)
    try:
        response = places.text_search(PROBE_QUERY, location=PROBE_LOCATION, radius=PROBE_RADIUS)
    except SearchError as e:
        logger.error("[api.test-places-api] probe failed: %s", e)
        return _error_response("Places API request failed", e, 502)

    return assemble_places_probe(
        status=response.status,
        query=PROBE_QUERY,
        total_results=len(response.results),
        competitors=map_competitors(response.results, PROBE_MAX_RESULTS),
    )


@router.get("/test-places-api", response_model=CredentialStatusResponse)
def api_places_status(settings: Settings = Depends(get_settings)) -> CredentialStatusResponse:
    return CredentialStatusResponse(
        message="Google Places API Test - use POST to run the probe",
        api_key="Set" if settings.google_places_api_key else "Missing",
    )


@router.post("/test-google-ai", response_model=ConnectionTestResponse)
def api_test_google_ai(
    analyzer: ContentAnalyzer = Depends(get_content_analyzer),
) -> ConnectionTestResponse:
    result = analyzer.test_connection()
    logger.info("[api.test-google-ai] success=%s", result["success"])
    return ConnectionTestResponse(**result)


@router.get("/test-google-ai", response_model=CredentialStatusResponse)
def api_google_ai_status(settings: Settings = Depends(get_settings)) -> CredentialStatusResponse:
    return CredentialStatusResponse(
        message="Google AI API Key Status",
        api_key="Set" if settings.google_ai_api_key else "Missing",
    )
