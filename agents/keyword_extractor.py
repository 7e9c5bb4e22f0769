# agents/keyword_extractor.py

from __future__ import annotations

import logging
import re
from typing import Dict, List, Optional

from models.keyword_models import KeywordRecord
from models.page_models import PageContent
from services.html_parser import extract_terms

logger = logging.getLogger(__name__)

# ============================================================
# スコアリングパラメータ
# ============================================================

# 出現位置ごとの重み（見出しは本文より重い）
POSITION_WEIGHTS: Dict[str, float] = {
    "h1": 3.0,
    "h2": 2.0,
    "h3": 1.5,
    "body": 1.0,
}

# 順位 → category の境界
PRIMARY_LIMIT = 3
SECONDARY_LIMIT = 10

DEFAULT_MAX_KEYWORDS = 45

_HANGUL_RE = re.compile(r"[가-힣]")

_INTENT_PATTERNS = {
    "transactional": ("구매", "예약", "신청", "주문", "결제", "buy", "order", "book", "purchase"),
    "commercial": ("가격", "비용", "요금", "할인", "비교", "price", "cost", "cheap", "discount"),
    "navigational": ("사이트", "홈페이지", "로그인", "website", "site", "login", "official"),
}


# ============================================================
# 推定ユーティリティ
# ============================================================

def estimate_search_volume(keyword: str) -> int:
    """
    文字数と文字種だけで決める月間検索数の目安（乱数なし）。
    短い・ハングルを含む語ほど多めに見積もる。
    """
    volume = 1000.0
    if _HANGUL_RE.search(keyword):
        volume *= 1.5
    if len(keyword) <= 5:
        volume *= 2
    elif len(keyword) > 10:
        volume *= 0.5
    return int(max(100, min(50000, volume)))


def infer_search_intent(keyword: str) -> str:
    lower = keyword.lower()
    for intent, patterns in _INTENT_PATTERNS.items():
        if any(p in lower for p in patterns):
            return intent
    return "informational"


def _category_for_rank(rank: int) -> str:
    if rank < PRIMARY_LIMIT:
        return "primary"
    if rank < SECONDARY_LIMIT:
        return "secondary"
    return "longTail"


# ============================================================
# メイン
# ============================================================

class KeywordExtractor:
    """
    AI を使わない決定的なキーワード抽出。

    - 見出し（h1〜h3）と本文 raw_text だけをトークン化する
    - 出現回数 × 出現位置の重み でスコアを付ける
    - スコア降順、同点は初出順（見出し → 本文）
    - 入力が空なら空リストを返す（例外は出さない）
    """

    def __init__(self, max_keywords: int = DEFAULT_MAX_KEYWORDS) -> None:
        self.max_keywords = max_keywords

    def extract(self, page: PageContent, limit: Optional[int] = None) -> List[KeywordRecord]:
        limit = self.max_keywords if limit is None else limit

        sources = [
            *(("h1", h) for h in page.headings.h1),
            *(("h2", h) for h in page.headings.h2),
            *(("h3", h) for h in page.headings.h3),
            ("body", page.raw_text),
        ]

        # dict は挿入順を保つので、初出順の情報も兼ねる
        scores: Dict[str, float] = {}
        for position, text in sources:
            weight = POSITION_WEIGHTS[position]
            for term in extract_terms(text):
                scores[term] = scores.get(term, 0.0) + weight

        if not scores or limit <= 0:
            return []

        first_seen = {term: i for i, term in enumerate(scores)}
        ranked = sorted(scores, key=lambda t: (-scores[t], first_seen[t]))[:limit]
        best = scores[ranked[0]]

        records = [
            KeywordRecord(
                keyword=term,
                relevance=round(scores[term] / best, 4),
                category=_category_for_rank(rank),
                estimated_search_volume=estimate_search_volume(term),
                search_intent=infer_search_intent(term),
            )
            for rank, term in enumerate(ranked)
        ]

        logger.info(
            "[keyword_extractor] url=%s terms=%s returned=%s",
            page.url,
            len(scores),
            len(records),
        )
        return records
