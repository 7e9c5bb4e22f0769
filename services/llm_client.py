# services/llm_client.py

from __future__ import annotations

import logging

from openai import APIError, APITimeoutError, OpenAI

from app.config import Settings
from services.errors import AnalysisError

logger = logging.getLogger(__name__)


def build_llm_client(settings: Settings) -> OpenAI | None:
    """
    Gemini（OpenAI 互換エンドポイント）用のクライアントを生成する。
    API キー未設定なら None を返す（呼び出し側でフォールバックする）。
    リトライは行わない（max_retries=0）。
    """
    if not settings.google_ai_api_key:
        return None
    return OpenAI(
        api_key=settings.google_ai_api_key,
        base_url=settings.google_ai_base_url,
        timeout=settings.ai_timeout_seconds,
        max_retries=0,
    )


def generate_text(
    client: OpenAI,
    model: str,
    prompt: str,
    temperature: float = 0.7,
    max_tokens: int = 4096,
) -> str:
    """
    プロンプトを1回だけ送ってテキスト応答を返す。
    失敗・タイムアウト・空応答はすべて AnalysisError。
    """
    try:
        response = client.chat.completions.create(
            model=model,
            messages=[{"role": "user", "content": prompt}],
            temperature=temperature,
            max_tokens=max_tokens,
        )
    except APITimeoutError as e:
        raise AnalysisError(f"Model call timed out: {e}") from e
    except APIError as e:
        raise AnalysisError(f"Model call failed: {e}") from e

    usage = getattr(response, "usage", None)
    logger.info(
        "[llm_client] response received model=%s total_tokens=%s",
        model,
        getattr(usage, "total_tokens", None) if usage else None,
    )

    if not response.choices:
        raise AnalysisError("Model returned no choices")
    content = response.choices[0].message.content
    if not content:
        raise AnalysisError("Model returned empty content")
    return content
