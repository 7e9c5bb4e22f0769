# agents/competitor_insights.py
#
# 対象サイトのキーワード分析と、Places で見つかった競合の名称・業種タイプを突き合わせる。
# 競合サイト自体は取得しない（Places の結果に含まれる情報だけで比較する）。

from __future__ import annotations

import logging
from typing import List, Set

from models.competitor_models import Competitor, CompetitorInsight, ThreatLevel
from models.keyword_models import ContentAnalysis
from services.html_parser import extract_terms

logger = logging.getLogger(__name__)

# 一覧に載せる語の最大数
MAX_LISTED_TERMS = 10

# どの施設にも付く Places のタイプは比較に使わない
GENERIC_PLACE_TYPES = frozenset({"point_of_interest", "establishment"})

# 脅威度のしきい値
HIGH_THREAT_COMMON = 3
HIGH_THREAT_RATING = 4.0
MEDIUM_THREAT_RATING = 3.5


def target_terms(analysis: ContentAnalysis) -> Set[str]:
    """キーワードそのものと、キーワードを分割した語の両方を比較対象にする。"""
    terms: Set[str] = set()
    for record in analysis.keywords:
        terms.add(record.keyword.casefold())
        terms.update(extract_terms(record.keyword))
    return terms


def competitor_terms(competitor: Competitor) -> List[str]:
    """名称と Places のタイプ（beauty_salon → beauty, salon）から語を取り出す。出現順・重複なし。"""
    types = [t.replace("_", " ") for t in competitor.categories if t not in GENERIC_PLACE_TYPES]
    terms = [
        *extract_terms(competitor.name),
        *(term for t in types for term in extract_terms(t)),
    ]
    return list(dict.fromkeys(terms))


def _threat_level(common: int, rating: float) -> ThreatLevel:
    if common >= HIGH_THREAT_COMMON and rating > HIGH_THREAT_RATING:
        return "high"
    if common > 0 or rating > MEDIUM_THREAT_RATING:
        return "medium"
    return "low"


def analyze_competitor(competitor: Competitor, targets: Set[str]) -> CompetitorInsight:
    terms = competitor_terms(competitor)
    overlap = [t for t in terms if t in targets]
    gaps = [t for t in terms if t not in targets]
    rating = competitor.rating or 0.0

    return CompetitorInsight(
        external_id=competitor.external_id,
        name=competitor.name,
        common_keywords=len(overlap),
        unique_keywords=len(gaps),
        opportunity_score=min(100.0, len(gaps) * 2 + rating * 10),
        threat_level=_threat_level(len(overlap), rating),
        keyword_overlap=overlap[:MAX_LISTED_TERMS],
        gap_keywords=gaps[:MAX_LISTED_TERMS],
    )


def analyze_competitors(
    competitors: List[Competitor],
    analysis: ContentAnalysis,
) -> List[CompetitorInsight]:
    """競合ごとに共通語・ギャップ語・機会スコア・脅威度を出す。競合の並び順は保つ。"""
    targets = target_terms(analysis)
    insights = [analyze_competitor(c, targets) for c in competitors]
    logger.info(
        "[competitor_insights] target_terms=%s competitors=%s high_threat=%s",
        len(targets),
        len(insights),
        sum(1 for i in insights if i.threat_level == "high"),
    )
    return insights
