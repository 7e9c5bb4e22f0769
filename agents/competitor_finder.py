# agents/competitor_finder.py

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from agents.business_profile import infer_business_type, search_query_for
from agents.competitor_insights import analyze_competitors
from agents.content_analyzer import ContentAnalyzer
from agents.content_fetcher import ContentFetcher
from models.competitor_models import (
    CenterLocation,
    Competitor,
    CompetitorInsight,
    CompetitorResult,
    GeoPoint,
)
from models.page_models import PageContent
from services.crawler import extract_domain, normalize_url
from services.errors import FetchError, SearchError
from services.places_client import PlacesClient

logger = logging.getLogger(__name__)

# ジオコーディングを試す文字列の上限（住所 + 事業者名）
MAX_GEOCODE_CANDIDATES = 3


@dataclass(frozen=True)
class SearchTarget:
    """対象サイトから導いた Places 検索条件。"""

    query: str
    business_type: str
    center: CenterLocation
    # 取得できなかった場合は None（ドメイン名だけで中心点を決めたとき）
    page: Optional[PageContent] = None


# ============================================================
# Places 結果 → Competitor
# ============================================================

def to_competitor(place: Dict[str, Any]) -> Optional[Competitor]:
    """
    Places の結果1件を Competitor に変換する。
    name / place_id が無いものは None（呼び出し側で捨てる）。
    """
    if not isinstance(place, dict):
        return None
    name = place.get("name")
    place_id = place.get("place_id")
    if not isinstance(name, str) or not name.strip():
        return None
    if not isinstance(place_id, str) or not place_id.strip():
        return None

    location = None
    loc = (place.get("geometry") or {}).get("location") or {}
    if "lat" in loc and "lng" in loc:
        try:
            location = GeoPoint(lat=float(loc["lat"]), lng=float(loc["lng"]))
        except (TypeError, ValueError):
            location = None

    rating = place.get("rating")
    reviews = place.get("user_ratings_total")
    return Competitor(
        name=name,
        external_id=place_id,
        rating=float(rating) if isinstance(rating, (int, float)) else None,
        review_count=int(reviews) if isinstance(reviews, int) else None,
        address=place.get("formatted_address") or place.get("vicinity") or "",
        categories=[t for t in place.get("types") or [] if isinstance(t, str)],
        location=location,
    )


def map_competitors(places: List[Dict[str, Any]], max_results: int) -> List[Competitor]:
    """順序を保ったまま変換し、不正データと重複 place_id を除いて max_results 件で打ち切る。"""
    competitors: List[Competitor] = []
    seen: set[str] = set()
    for place in places:
        if len(competitors) >= max_results:
            break
        competitor = to_competitor(place)
        if competitor is None:
            logger.debug("[competitor_finder] drop malformed place: %r", place)
            continue
        if competitor.external_id in seen:
            continue
        seen.add(competitor.external_id)
        competitors.append(competitor)
    return competitors


# ============================================================
# メイン
# ============================================================

class CompetitorFinder:
    """
    対象 URL の周辺にある競合事業者を Places Text Search で探す。

    検索条件の決め方:
      1) 対象ページを取得（失敗してもドメイン名だけで続行）
      2) 本文から業種を推定 → 業種ごとのクエリ語
      3) ページ上の住所、次に事業者名をジオコーディング（最大 MAX_GEOCODE_CANDIDATES 回）
      4) 中心点が決まらなければ SearchError（位置指定なしの全国検索はしない）

    analyzer を渡した場合は、対象ページのキーワード分析と各競合を比較した結果も付ける。
    """

    def __init__(
        self,
        places: PlacesClient,
        fetcher: Optional[ContentFetcher] = None,
        analyzer: Optional[ContentAnalyzer] = None,
    ) -> None:
        self.places = places
        self.fetcher = fetcher
        self.analyzer = analyzer

    def _fetch_target(self, target_url: str) -> Optional[PageContent]:
        if self.fetcher is None:
            return None
        try:
            return self.fetcher.fetch(target_url)
        except FetchError as e:
            logger.warning("[competitor_finder] target fetch failed, using domain only: %s", e)
            return None

    @staticmethod
    def geocode_candidates(page: PageContent) -> List[str]:
        """住所を優先し、最後に事業者名（無ければドメイン）。重複を除いて上限で切る。"""
        name = page.business_name or page.domain
        addresses = page.addresses[: MAX_GEOCODE_CANDIDATES - 1]
        candidates = [c for c in dict.fromkeys([*addresses, name]) if c]
        return candidates[:MAX_GEOCODE_CANDIDATES]

    def derive_search_target(self, target_url: str) -> SearchTarget:
        fetched = self._fetch_target(target_url)
        page = fetched or PageContent(url=target_url, domain=extract_domain(target_url))

        business_type = infer_business_type(page)
        query = search_query_for(business_type)

        center: Optional[CenterLocation] = None
        for candidate in self.geocode_candidates(page):
            point = self.places.geocode(candidate)
            if point is not None:
                center = CenterLocation(lat=point.lat, lng=point.lng, address=candidate)
                break

        if center is None:
            logger.error("[competitor_finder] no location for url=%s", target_url)
            raise SearchError("Could not determine business location from target URL")

        logger.info(
            "[competitor_finder] search target url=%s business_type=%s query=%s center=%s",
            target_url,
            business_type,
            query,
            center.as_param(),
        )
        return SearchTarget(query=query, business_type=business_type, center=center, page=fetched)

    def _insights(
        self,
        page: Optional[PageContent],
        competitors: List[Competitor],
    ) -> List[CompetitorInsight]:
        if self.analyzer is None or page is None or not competitors:
            return []
        # analyze は失敗時もフォールバック結果を返すので例外は来ない
        return analyze_competitors(competitors, self.analyzer.analyze(page))

    def find_competitors(
        self,
        target_url: str,
        radius_meters: int = 3000,
        max_results: int = 15,
    ) -> CompetitorResult:
        if radius_meters <= 0:
            raise ValueError("radius_meters must be positive")
        if max_results < 0:
            raise ValueError("max_results must not be negative")

        # キー未設定ならページ取得より前に SearchError
        self.places.require_key()

        target_url = normalize_url(target_url)
        target = self.derive_search_target(target_url)

        response = self.places.text_search(
            target.query,
            location=target.center,
            radius=radius_meters,
        )
        competitors = map_competitors(response.results, max_results)

        logger.info(
            "[competitor_finder] done url=%s raw=%s competitors=%s",
            target_url,
            len(response.results),
            len(competitors),
        )
        return CompetitorResult(
            target_url=target_url,
            search_radius_meters=radius_meters,
            max_results=max_results,
            query=target.query,
            center_location=target.center,
            competitors=competitors,
            analysis=self._insights(target.page, competitors),
        )
