# services/model_output.py
#
# 生成モデルの自由文応答から ContentAnalysis を組み立てる。
# 例外を投げずに ParseResult（成功 / 失敗理由）を返す。

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from models.keyword_models import (
    ContentAnalysis,
    KeywordRecord,
    KeywordSuggestions,
    dedupe_keywords,
)

logger = logging.getLogger(__name__)

# AI の結果として採用するキーワードの上限
MAX_AI_KEYWORDS = 50

_CATEGORY_ALIASES = {
    "primary": "primary",
    "secondary": "secondary",
    "longtail": "longTail",
    "long-tail": "longTail",
    "long_tail": "longTail",
    "long tail": "longTail",
}

_INTENTS = ("informational", "navigational", "transactional", "commercial")


@dataclass(frozen=True)
class ParseResult:
    """構造パースの結果。ok なら analysis、そうでなければ reason が入る。"""

    analysis: Optional[ContentAnalysis] = None
    reason: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.analysis is not None

    @staticmethod
    def success(analysis: ContentAnalysis) -> "ParseResult":
        return ParseResult(analysis=analysis)

    @staticmethod
    def failure(reason: str) -> "ParseResult":
        return ParseResult(reason=reason)


# ============================================================
# JSON 部分の切り出し
# ============================================================

def find_json_object(text: str) -> Optional[str]:
    """
    最初に現れる、括弧の対応が取れた {...} を返す。
    JSON 文字列リテラル内の括弧やエスケープは数えない。
    """
    if not text:
        return None

    start = text.find("{")
    while start != -1:
        depth = 0
        in_string = False
        escaped = False
        for i in range(start, len(text)):
            ch = text[i]
            if in_string:
                if escaped:
                    escaped = False
                elif ch == "\\":
                    escaped = True
                elif ch == '"':
                    in_string = False
                continue
            if ch == '"':
                in_string = True
            elif ch == "{":
                depth += 1
            elif ch == "}":
                depth -= 1
                if depth == 0:
                    return text[start : i + 1]
        # この "{" からは閉じられなかった → 次の "{" を試す
        start = text.find("{", start + 1)
    return None


# ============================================================
# 正規化ユーティリティ
# ============================================================

def _normalize_relevance(value: Any) -> float:
    """0〜100 で返ってきた relevance を 0〜1 に揃える。"""
    try:
        v = float(value)
    except (TypeError, ValueError):
        return 0.5
    if v > 1.0:
        v = v / 100.0
    return v


def _normalize_category(value: Any, default: str = "secondary") -> str:
    if not isinstance(value, str):
        return default
    return _CATEGORY_ALIASES.get(value.strip().lower(), default)


def _normalize_volume(value: Any) -> Optional[int]:
    try:
        v = int(float(value))
    except (TypeError, ValueError):
        return None
    return max(0, v)


def _normalize_intent(value: Any) -> Optional[str]:
    if isinstance(value, str) and value.strip().lower() in _INTENTS:
        return value.strip().lower()
    return None


def _to_keyword_record(raw: Any) -> Optional[KeywordRecord]:
    if not isinstance(raw, dict):
        return None
    keyword = raw.get("keyword")
    if not isinstance(keyword, str) or not keyword.strip():
        return None
    try:
        return KeywordRecord(
            keyword=keyword,
            relevance=_normalize_relevance(raw.get("relevance")),
            category=_normalize_category(raw.get("category")),
            estimated_search_volume=_normalize_volume(raw.get("estimatedSearchVolume")),
            search_intent=_normalize_intent(raw.get("searchIntent")),
        )
    except ValidationError:
        return None


def _suggestion_bucket(
    raw_list: Any,
    category: str,
    by_keyword: Dict[str, KeywordRecord],
) -> List[KeywordRecord]:
    """
    suggestions の各リストを KeywordRecord に揃える。
    文字列で返ってきた場合は keywords 側の同名レコードを使い、無ければ新規に作る。
    """
    if not isinstance(raw_list, list):
        return []
    records: List[KeywordRecord] = []
    for item in raw_list:
        if isinstance(item, str):
            text = item.strip()
            if not text:
                continue
            rec = by_keyword.get(text.casefold()) or KeywordRecord(
                keyword=text, relevance=0.5, category=category
            )
        else:
            rec = _to_keyword_record(item)
            if rec is None:
                continue
        if rec.category != category:
            rec = rec.model_copy(update={"category": category})
        records.append(rec)
    return dedupe_keywords(records)


def _extract_industry(data: Dict[str, Any]) -> Optional[str]:
    for holder in (data.get("contentAnalysis"), data):
        if isinstance(holder, dict):
            industry = holder.get("industry")
            if isinstance(industry, str) and industry.strip():
                return industry.strip()
    return None


# ============================================================
# メイン
# ============================================================

def parse_model_response(text: str, default_industry: str = "unknown") -> ParseResult:
    """
    モデル応答テキストを ContentAnalysis に変換する。

    - 最初の {...} を JSON として読み込む
    - keywords 配列から有効なもの（keyword が空でない）だけを採用
    - 有効なキーワードが1件も無ければ失敗
    - suggestions が無い場合は keywords を category 別に振り分ける
    """
    span = find_json_object(text)
    if span is None:
        return ParseResult.failure("no balanced JSON object in model response")

    try:
        data = json.loads(span)
    except ValueError as e:
        return ParseResult.failure(f"invalid JSON: {e}")

    if not isinstance(data, dict):
        return ParseResult.failure("top-level JSON value is not an object")

    raw_keywords = data.get("keywords")
    if not isinstance(raw_keywords, list):
        return ParseResult.failure("'keywords' is missing or not an array")

    keywords = dedupe_keywords(
        [rec for rec in (_to_keyword_record(k) for k in raw_keywords) if rec is not None]
    )[:MAX_AI_KEYWORDS]
    if not keywords:
        return ParseResult.failure("no valid keywords in model response")

    raw_suggestions = data.get("suggestions")
    if isinstance(raw_suggestions, dict):
        by_keyword = {rec.keyword.casefold(): rec for rec in keywords}
        suggestions = KeywordSuggestions(
            primary=_suggestion_bucket(raw_suggestions.get("primary"), "primary", by_keyword),
            secondary=_suggestion_bucket(raw_suggestions.get("secondary"), "secondary", by_keyword),
            long_tail=_suggestion_bucket(raw_suggestions.get("longTail"), "longTail", by_keyword),
        )
    else:
        suggestions = KeywordSuggestions.from_keywords(keywords)

    analysis = ContentAnalysis(
        industry=_extract_industry(data) or default_industry,
        source="ai",
        keywords=keywords,
        suggestions=suggestions,
    )
    return ParseResult.success(analysis)
