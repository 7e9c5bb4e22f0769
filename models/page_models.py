# models/page_models.py

from __future__ import annotations

from typing import Dict, List

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class HeadingSet(BaseModel):
    """見出しテキストをレベル別に保持する（h1〜h3）。"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    h1: List[str] = Field(default_factory=list)
    h2: List[str] = Field(default_factory=list)
    h3: List[str] = Field(default_factory=list)

    def all(self) -> List[str]:
        return [*self.h1, *self.h2, *self.h3]


class SeoScore(BaseModel):
    """
    ページ単位の簡易 SEO スコア（0〜100）。
    title / description / 見出し数 / キーワード候補数 / 画像 alt 率 から算出する。
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    title: int = 0
    description: int = 0
    headings: int = 0
    keywords: int = 0
    images: int = 0
    overall: int = 0


class FetchStats(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    status_code: int
    size: int
    load_time_ms: int


class PageContent(BaseModel):
    """
    1ページ分の取得結果。
    ContentFetcher が生成し、以降は変更しない（frozen）。

    - raw_text: body の可視テキストのみ（<title> は含めない）
    - raw_keyword_candidates: meta keywords・見出し・本文・画像 alt から拾った候補
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    url: str
    domain: str = ""
    title: str = ""
    description: str = ""
    raw_text: str = ""
    headings: HeadingSet = Field(default_factory=HeadingSet)
    raw_keyword_candidates: List[str] = Field(default_factory=list)
    meta_tags: Dict[str, str] = Field(default_factory=dict)

    # 競合検索の中心点を決めるための事業者情報（JSON-LD / og:site_name / <address>）
    business_name: str = ""
    addresses: List[str] = Field(default_factory=list)

    image_count: int = 0
    link_count: int = 0
    seo_score: SeoScore = Field(default_factory=SeoScore)
    fetch_stats: FetchStats | None = None
