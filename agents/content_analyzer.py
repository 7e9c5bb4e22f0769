# agents/content_analyzer.py

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Optional

from agents.business_profile import industry_label, infer_business_type
from agents.keyword_extractor import KeywordExtractor
from app.config import Settings
from models.keyword_models import ContentAnalysis, KeywordSuggestions
from models.page_models import PageContent
from services.errors import AnalysisError
from services.llm_client import build_llm_client, generate_text
from services.model_output import parse_model_response

logger = logging.getLogger(__name__)

# ============================================================
# プロンプトパラメータ
# ============================================================

# プロンプトに埋め込む本文の最大文字数
MAX_CONTENT_SAMPLE = 1500
# h2 は多くなりがちなので先頭だけ
MAX_H2_IN_PROMPT = 5

UNKNOWN_INDUSTRY = "unknown"

PROMPT_TEMPLATE = """
Analyze this website content and provide SEO keyword recommendations
optimized for search behavior in the "{language}" locale.

Website information:
- URL: {url}
- Domain: {domain}
- Title: {title}
- Description: {description}
- Business type hint: {business_type}

Content:
- H1 headings: {h1}
- H2 headings: {h2}
- Content sample: {content}
- Meta tags: {meta_tags}

Return 40-50 keywords:
- primary (8-10): high volume, directly related to the main business
- secondary (15-20): supporting topics, services, features
- longTail (15-20): specific phrases, local terms, questions

For each keyword give relevance (0-100), estimated monthly search volume and
search intent (informational / navigational / transactional / commercial).

Respond with JSON only, using exactly this shape:
{{
  "keywords": [
    {{
      "keyword": "string",
      "relevance": 95,
      "category": "primary | secondary | longTail",
      "searchIntent": "transactional",
      "estimatedSearchVolume": 12000
    }}
  ],
  "suggestions": {{
    "primary": ["string"],
    "secondary": ["string"],
    "longTail": ["string"]
  }},
  "contentAnalysis": {{
    "topic": "string",
    "industry": "string"
  }}
}}
""".strip()


def build_prompt(page: PageContent, language: str = "ko") -> str:
    return PROMPT_TEMPLATE.format(
        language=language,
        url=page.url,
        domain=page.domain,
        title=page.title,
        description=page.description,
        business_type=industry_label(infer_business_type(page)),
        h1=", ".join(page.headings.h1),
        h2=", ".join(page.headings.h2[:MAX_H2_IN_PROMPT]),
        content=page.raw_text[:MAX_CONTENT_SAMPLE],
        meta_tags=json.dumps(page.meta_tags, ensure_ascii=False),
    )


class ContentAnalyzer:
    """
    PageContent → ContentAnalysis。

    優先順位:
    1. GOOGLE_AI_API_KEY が設定されていれば生成モデルを1回だけ呼ぶ
    2. キー未設定・呼び出し失敗・応答が解析できない場合は
       KeywordExtractor の結果をそのまま使う（industry="unknown"）
    """

    def __init__(
        self,
        settings: Settings,
        extractor: Optional[KeywordExtractor] = None,
        client: Any = None,
    ) -> None:
        self.model = settings.google_ai_model
        self.language = settings.search_language
        self.min_keywords = settings.ai_min_keywords
        self.extractor = extractor or KeywordExtractor(settings.fallback_max_keywords)
        self.client = client if client is not None else build_llm_client(settings)

    @property
    def has_model(self) -> bool:
        return self.client is not None

    # ------------------------------
    # フォールバック
    # ------------------------------
    def fallback(self, page: PageContent) -> ContentAnalysis:
        keywords = self.extractor.extract(page)
        return ContentAnalysis(
            industry=UNKNOWN_INDUSTRY,
            source="fallback",
            keywords=keywords,
            suggestions=KeywordSuggestions.from_keywords(keywords),
        )

    # ------------------------------
    # AI 分析
    # ------------------------------
    def _analyze_with_model(self, page: PageContent) -> ContentAnalysis:
        prompt = build_prompt(page, language=self.language)
        text = generate_text(self.client, self.model, prompt)

        parsed = parse_model_response(
            text, default_industry=industry_label(infer_business_type(page))
        )
        if not parsed.ok:
            logger.error(
                "[content_analyzer] parse error url=%s reason=%s content=%r",
                page.url,
                parsed.reason,
                text[:2000],
            )
            raise AnalysisError(f"Unparseable model response: {parsed.reason}")

        analysis = parsed.analysis
        if len(analysis.keywords) < self.min_keywords:
            # キーワードが少ない場合は本文から補う（重複は ContentAnalysis 側で除去）
            extra = self.extractor.extract(page)
            merged = ContentAnalysis(keywords=[*analysis.keywords, *extra]).keywords
            added = KeywordSuggestions.from_keywords(merged[len(analysis.keywords):])
            current = analysis.suggestions
            analysis = analysis.model_copy(
                update={
                    "keywords": merged,
                    "suggestions": KeywordSuggestions(
                        primary=[*current.primary, *added.primary],
                        secondary=[*current.secondary, *added.secondary],
                        long_tail=[*current.long_tail, *added.long_tail],
                    ),
                }
            )
        return analysis

    def analyze(self, page: PageContent) -> ContentAnalysis:
        logger.info(
            "[content_analyzer] analyze called url=%s has_model=%s",
            page.url,
            self.has_model,
        )

        if not self.has_model:
            logger.info("[content_analyzer] mode=FALLBACK (no GOOGLE_AI_API_KEY)")
            return self.fallback(page)

        try:
            logger.info("[content_analyzer] mode=AI model=%s", self.model)
            analysis = self._analyze_with_model(page)
        except AnalysisError as e:
            logger.warning("[content_analyzer] AI error, fallback used: %s", e)
            return self.fallback(page)

        logger.info(
            "[content_analyzer] AI analysis success url=%s keywords=%d industry=%s",
            page.url,
            len(analysis.keywords),
            analysis.industry,
        )
        return analysis

    # ------------------------------
    # 疎通確認
    # ------------------------------
    def test_connection(self) -> Dict[str, Any]:
        """固定の短いプロンプトを送って応答が返るか確認する。例外は投げない。"""
        if not self.has_model:
            return {
                "success": False,
                "message": "Google AI not initialized - missing API key",
            }
        try:
            text = generate_text(
                self.client,
                self.model,
                'Test connection - respond with "OK"',
                temperature=0.0,
                max_tokens=16,
            )
        except AnalysisError as e:
            return {
                "success": False,
                "message": "Google AI connection failed",
                "details": str(e),
            }
        return {
            "success": True,
            "message": "Google AI connection successful",
            "details": text[:100],
        }
