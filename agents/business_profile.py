# agents/business_profile.py
#
# ページ本文から業種をざっくり推定する（辞書マッチのみ）。
# AI プロンプトへのヒントと、競合検索クエリの決定に使う。

from __future__ import annotations

from typing import Dict, List

from models.page_models import PageContent

# 業種 → 判定語（ハングル / 英語）
BUSINESS_TYPE_TERMS: Dict[str, List[str]] = {
    "medical": ["병원", "의원", "클리닉", "치과", "한의원", "의료", "진료", "치료", "성형외과",
                "hospital", "clinic", "medical", "dental", "doctor"],
    "beauty": ["미용", "뷰티", "피부", "네일", "헤어", "화장품", "beauty", "salon", "cosmetic", "spa"],
    "restaurant": ["음식", "레스토랑", "카페", "식당", "요리", "맛집", "메뉴",
                   "restaurant", "cafe", "menu", "food"],
    "education": ["교육", "학원", "수업", "강의", "학습", "education", "academy", "school", "course"],
    "fitness": ["헬스", "운동", "피트니스", "요가", "필라테스", "체육", "fitness", "gym", "yoga", "pilates"],
    "automotive": ["정비", "세차", "자동차", "카센터", "car repair", "auto", "garage"],
    "retail": ["쇼핑", "판매", "상품", "제품", "스토어", "매장", "shop", "store"],
}

# 業種 → Places 検索に使うクエリ語
SEARCH_QUERIES: Dict[str, str] = {
    "medical": "병원",
    "beauty": "미용실",
    "restaurant": "음식점",
    "education": "학원",
    "fitness": "헬스장",
    "automotive": "카센터",
    "retail": "매장",
    "general": "업체",
}

INDUSTRY_LABELS: Dict[str, str] = {
    "medical": "Medical",
    "beauty": "Beauty",
    "restaurant": "Restaurant",
    "education": "Education",
    "fitness": "Fitness",
    "automotive": "Automotive",
    "retail": "Retail",
    "general": "General Business",
}


def infer_business_type(page: PageContent) -> str:
    """
    title / description / 見出し / 本文 / ドメインを対象に判定語を探す。
    最初にマッチした業種を返し、どれにも当たらなければ "general"。
    """
    haystack = " ".join(
        [page.domain, page.title, page.description, *page.headings.all(), page.raw_text[:5000]]
    ).lower()
    for business_type, terms in BUSINESS_TYPE_TERMS.items():
        if any(term in haystack for term in terms):
            return business_type
    return "general"


def search_query_for(business_type: str) -> str:
    return SEARCH_QUERIES.get(business_type, SEARCH_QUERIES["general"])


def industry_label(business_type: str) -> str:
    return INDUSTRY_LABELS.get(business_type, INDUSTRY_LABELS["general"])
