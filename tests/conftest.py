# tests/conftest.py
from __future__ import annotations

from types import SimpleNamespace
from typing import Any, Dict, List, Optional

import pytest
import requests

from app.config import Settings
from models.competitor_models import GeoPoint
from models.page_models import HeadingSet, PageContent
from services.errors import FetchError, SearchError
from services.places_client import PlacesSearchResponse


def make_settings(**overrides: Any) -> Settings:
    """.env も環境変数の API キーも読まないテスト用 Settings。"""
    values: Dict[str, Any] = {
        "google_ai_api_key": None,
        "google_places_api_key": None,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def clinic_page() -> PageContent:
    return PageContent(
        url="https://clinic.example/",
        domain="clinic.example",
        title="루비 클리닉 - 강남 피부과",
        description="강남역 피부 클리닉",
        raw_text="피부 관리 전문 클리닉 입니다. 레이저 시술 예약 가능. 피부 상담 환영",
        headings=HeadingSet(h1=["피부 클리닉"], h2=["레이저 시술", "상담 예약"], h3=[]),
        raw_keyword_candidates=["피부", "클리닉", "레이저"],
        business_name="루비 클리닉",
        addresses=["서울 강남구 테헤란로 1"],
    )


@pytest.fixture
def empty_page() -> PageContent:
    return PageContent(url="https://example.com/", domain="example.com", title="Example Domain")


# ------------------------------------------------------------
# 生成モデルのフェイク
# ------------------------------------------------------------


class FakeCompletions:
    def __init__(self, content: Optional[str] = None, error: Optional[Exception] = None) -> None:
        self.content = content
        self.error = error
        self.calls: List[Dict[str, Any]] = []

    def create(self, **kwargs: Any) -> Any:
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)], usage=None)


class FakeLLMClient:
    """OpenAI クライアントの chat.completions.create だけを真似る。"""

    def __init__(self, content: Optional[str] = None, error: Optional[Exception] = None) -> None:
        self.completions = FakeCompletions(content=content, error=error)
        self.chat = SimpleNamespace(completions=self.completions)


# ------------------------------------------------------------
# Places / Fetcher のフェイク
# ------------------------------------------------------------


# FakePlaces のジオコーディング結果の既定値（None を渡すと「見つからない」）
GANGNAM = GeoPoint(lat=37.5, lng=127.0)


class FakePlaces:
    def __init__(
        self,
        results: Optional[List[Dict[str, Any]]] = None,
        configured: bool = True,
        error: Optional[SearchError] = None,
        geocode_result: Optional[GeoPoint] = GANGNAM,
    ) -> None:
        self.results = results or []
        self._configured = configured
        self.error = error
        self.geocode_result = geocode_result
        self.search_calls: List[Dict[str, Any]] = []
        self.geocode_calls: List[str] = []

    @property
    def configured(self) -> bool:
        return self._configured

    def require_key(self) -> str:
        if not self._configured:
            raise SearchError("Google Places API key not configured")
        return "test-key"

    def geocode(self, address: str) -> Optional[GeoPoint]:
        self.require_key()
        self.geocode_calls.append(address)
        return self.geocode_result

    def text_search(self, query, location=None, radius=None) -> PlacesSearchResponse:
        self.require_key()
        self.search_calls.append({"query": query, "location": location, "radius": radius})
        if self.error is not None:
            raise self.error
        return PlacesSearchResponse(status="OK", results=list(self.results))


class FakeFetcher:
    def __init__(self, page: Optional[PageContent] = None, error: Optional[FetchError] = None) -> None:
        self.page = page
        self.error = error
        self.calls: List[str] = []

    def fetch(self, url: str) -> PageContent:
        self.calls.append(url)
        if self.error is not None:
            raise self.error
        return self.page


def make_places(n: int) -> List[Dict[str, Any]]:
    return [
        {
            "name": f"클리닉 {i}",
            "place_id": f"place-{i}",
            "rating": 4.0 + i / 10,
            "user_ratings_total": 10 * i,
            "formatted_address": f"서울 강남구 {i}",
            "types": ["doctor", "health", "doctor"],
            "geometry": {"location": {"lat": 37.5 + i / 1000, "lng": 127.0}},
        }
        for i in range(n)
    ]


class FakeResponse:
    """requests.Response の代わり（必要な属性だけ）。"""

    def __init__(self, status_code: int = 200, text: str = "", json_data: Any = None) -> None:
        self.status_code = status_code
        self.text = text
        self._json = json_data

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 400

    def json(self) -> Any:
        if self._json is None:
            raise ValueError("no json")
        return self._json

    def raise_for_status(self) -> None:
        if not self.ok:
            raise requests.HTTPError(f"{self.status_code} Error")
