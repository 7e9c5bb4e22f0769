# models/competitor_models.py

from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel


class GeoPoint(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    lat: float
    lng: float

    def as_param(self) -> str:
        """Places API の location パラメータ形式（"lat,lng"）。"""
        return f"{self.lat},{self.lng}"


class CenterLocation(GeoPoint):
    # どの文字列をジオコーディングして得た中心点か
    address: str = ""


class Competitor(BaseModel):
    """
    Places 検索で見つかった周辺の競合事業者1件。
    external_id は Google の place_id。
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    name: str = Field(..., min_length=1)
    external_id: str = Field(..., min_length=1)
    rating: Optional[float] = None
    review_count: Optional[int] = None
    address: str = ""
    categories: List[str] = Field(default_factory=list)
    location: Optional[GeoPoint] = None

    @field_validator("categories", mode="after")
    @classmethod
    def _unique_categories(cls, value: List[str]) -> List[str]:
        # 集合として扱うが、API の並び順は残す
        return list(dict.fromkeys(value))


ThreatLevel = Literal["low", "medium", "high"]


class CompetitorInsight(BaseModel):
    """
    対象サイトのキーワードと競合1件の比較結果。

    Attributes:
        external_id (str): 比較した競合の place_id。
        name (str): 競合の名称。
        common_keywords (int): 対象サイトと共通する語の数。
        unique_keywords (int): 競合側にだけある語の数。
        opportunity_score (float): 0-100。
        threat_level (ThreatLevel): "low" / "medium" / "high"。
        keyword_overlap (List[str]): 共通する語（最大10件）。
        gap_keywords (List[str]): 競合にだけある語（最大10件）。
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    external_id: str
    name: str
    common_keywords: int = Field(0, ge=0)
    unique_keywords: int = Field(0, ge=0)
    opportunity_score: float = Field(0.0, ge=0.0, le=100.0)
    threat_level: ThreatLevel = "low"
    keyword_overlap: List[str] = Field(default_factory=list)
    gap_keywords: List[str] = Field(default_factory=list)


class CompetitorResult(BaseModel):
    """1回の競合検索リクエストの結果。"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    target_url: str
    search_radius_meters: int = Field(..., gt=0)
    max_results: int = Field(..., ge=0)
    query: str = ""
    center_location: Optional[CenterLocation] = None
    competitors: List[Competitor] = Field(default_factory=list)
    # 対象サイトのキーワード分析が取れた場合のみ埋まる
    analysis: List[CompetitorInsight] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_cap(self) -> "CompetitorResult":
        if len(self.competitors) > self.max_results:
            raise ValueError(
                f"competitors ({len(self.competitors)}) exceeds max_results ({self.max_results})"
            )
        return self
