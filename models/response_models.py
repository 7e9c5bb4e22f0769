# models/response_models.py
#
# HTTP 境界で使う Request / Response モデル。
# JSON のキーは camelCase（ダッシュボード側の既存フォーマットに合わせる）。

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from models.competitor_models import Competitor, CompetitorResult
from models.keyword_models import AnalysisSource, KeywordCategory
from models.page_models import SeoScore


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# --------- Request ---------


class CompetitorAnalysisRequest(_CamelModel):
    target_url: str = Field(..., min_length=1)
    # 省略時は Settings の default_search_radius / default_max_results を使う
    radius: Optional[int] = Field(None, gt=0)
    max_results: Optional[int] = Field(None, ge=0, le=60)


class UrlRequest(_CamelModel):
    url: str = Field(..., min_length=1)


# --------- 共通 ---------


class ErrorResponse(_CamelModel):
    success: bool = False
    error: str
    details: Optional[str] = None


# --------- 競合分析 ---------


class CompetitorAnalysisResponse(_CamelModel):
    success: bool = True
    data: CompetitorResult
    message: str


# --------- AI 分析テスト ---------


class SampleKeyword(_CamelModel):
    keyword: str
    relevance: float
    category: KeywordCategory
    search_volume: Optional[int] = None


class AiAnalysisSummary(_CamelModel):
    keywords_found: int
    primary_keywords: int
    secondary_keywords: int
    long_tail_keywords: int
    industry_detected: str
    source: AnalysisSource
    sample_keywords: List[SampleKeyword] = Field(default_factory=list)


class AiAnalysisTestResponse(_CamelModel):
    success: bool = True
    url: str
    title: str
    description: str
    scraped_keywords: int
    ai_analysis: AiAnalysisSummary


# --------- スクレイピングテスト ---------


class HeadingCounts(_CamelModel):
    h1: int
    h2: int
    h3: int


class ScrapingTestResponse(_CamelModel):
    success: bool = True
    url: str
    domain: str
    title: str
    description: str
    keyword_count: int
    headings_count: HeadingCounts
    content_length: int
    image_count: int
    link_count: int
    seo_score: SeoScore
    load_time: Optional[int] = None
    status: Optional[int] = None


# --------- Places API 疎通確認 ---------


class PlacesProbeResponse(_CamelModel):
    success: bool = True
    status: str
    query: str
    total_results: int
    competitors: List[Competitor] = Field(default_factory=list)
    message: str


# --------- 認証情報ステータス / 接続テスト ---------


class CredentialStatusResponse(_CamelModel):
    message: str
    api_key: str  # "Set" / "Missing"


class ConnectionTestResponse(_CamelModel):
    success: bool
    message: str
    details: Optional[str] = None
