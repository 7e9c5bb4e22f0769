# models/keyword_models.py

from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


# -----------------------------------------
# キーワード分類
# -----------------------------------------
KeywordCategory = Literal[
    "primary",    # 事業の中心となるキーワード
    "secondary",  # サービス・特徴などの補助キーワード
    "longTail",   # 具体的なフレーズ・地域名付きなど
]

# -----------------------------------------
# 検索意図
# -----------------------------------------
SearchIntent = Literal[
    "informational",
    "navigational",
    "transactional",
    "commercial",
]

AnalysisSource = Literal["ai", "fallback"]


def clamp_relevance(value: object) -> float:
    """relevance を 0〜1 に丸める（数値化できない場合は 0）。"""
    try:
        v = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return 0.0
    if v != v:  # NaN
        return 0.0
    return max(0.0, min(1.0, v))


# -----------------------------------------
# キーワード1件
# -----------------------------------------
class KeywordRecord(BaseModel):
    """キーワード分析の最小単位。

    Attributes:
        keyword (str): キーワード文字列（前後空白を除去、空文字は不可）。
        relevance (float): 関連度。生成時に 0〜1 へ丸める。
        category (KeywordCategory): primary / secondary / longTail。
        estimated_search_volume (int | None): 推定月間検索数（不明なら None）。
        search_intent (SearchIntent | None): 推定検索意図。
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    keyword: str = Field(..., min_length=1)
    relevance: float = 0.0
    category: KeywordCategory = "secondary"
    estimated_search_volume: Optional[int] = Field(None, ge=0)
    search_intent: Optional[SearchIntent] = None

    @field_validator("keyword", mode="before")
    @classmethod
    def _strip_keyword(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip()
        return value

    @field_validator("relevance", mode="before")
    @classmethod
    def _clamp_relevance(cls, value: object) -> float:
        return clamp_relevance(value)


def dedupe_keywords(records: List[KeywordRecord]) -> List[KeywordRecord]:
    """大文字小文字を無視して重複キーワードを除く（先勝ち、順序は維持）。"""
    seen: set[str] = set()
    result: List[KeywordRecord] = []
    for rec in records:
        key = rec.keyword.casefold()
        if key in seen:
            continue
        seen.add(key)
        result.append(rec)
    return result


# -----------------------------------------
# カテゴリ別の提案
# -----------------------------------------
class KeywordSuggestions(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    primary: List[KeywordRecord] = Field(default_factory=list)
    secondary: List[KeywordRecord] = Field(default_factory=list)
    long_tail: List[KeywordRecord] = Field(default_factory=list)

    @staticmethod
    def from_keywords(keywords: List[KeywordRecord]) -> "KeywordSuggestions":
        """キーワード一覧を category 別に振り分ける。"""
        groups: dict[str, List[KeywordRecord]] = {"primary": [], "secondary": [], "longTail": []}
        for rec in keywords:
            groups[rec.category].append(rec)
        return KeywordSuggestions(
            primary=groups["primary"],
            secondary=groups["secondary"],
            long_tail=groups["longTail"],
        )


# -----------------------------------------
# 1ページ分の分析結果
# -----------------------------------------
class ContentAnalysis(BaseModel):
    """1ページ分のキーワード分析結果。

    Attributes:
        industry (str): 推定業種（フォールバック時は "unknown"）。
        source (AnalysisSource): "ai" か "fallback"。
        keywords (List[KeywordRecord]): 重複除去済みのキーワード一覧。
        suggestions (KeywordSuggestions): category 別の提案。
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    industry: str = "unknown"
    source: AnalysisSource = "fallback"
    keywords: List[KeywordRecord] = Field(default_factory=list)
    suggestions: KeywordSuggestions = Field(default_factory=KeywordSuggestions)

    @field_validator("keywords", mode="after")
    @classmethod
    def _dedupe(cls, value: List[KeywordRecord]) -> List[KeywordRecord]:
        return dedupe_keywords(value)
