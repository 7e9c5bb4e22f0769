# app/config.py

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    アプリ全体で使う設定クラス。
    .env から環境変数を読み込み、属性として参照できるようにする。
    各コンポーネントにはコンストラクタ経由でこのオブジェクトを渡す。
    """

    # ---------- Google Generative AI (Gemini) ----------
    # GOOGLE_AI_API_KEY=... を .env に書く想定
    # 未設定の場合はキーワード分析がフォールバック（非AI）になる
    google_ai_api_key: str | None = None

    # モデル名を変えたい場合は .env に GOOGLE_AI_MODEL=gemini-1.5-pro などと書く
    google_ai_model: str = "gemini-1.5-flash"

    # Gemini の OpenAI 互換エンドポイント
    google_ai_base_url: str = "https://generativelanguage.googleapis.com/v1beta/openai/"

    # ---------- Google Places ----------
    # GOOGLE_PLACES_API_KEY=...
    # 未設定の場合は競合検索が SearchError になる
    google_places_api_key: str | None = None

    # Places / Geocoding に渡す言語
    search_language: str = "ko"

    # ---------- タイムアウト（秒） ----------
    fetch_timeout_seconds: float = 30.0
    ai_timeout_seconds: float = 60.0
    search_timeout_seconds: float = 10.0

    # ---------- キーワード分析 ----------
    # フォールバック抽出で返す最大件数
    fallback_max_keywords: int = 45
    # AI の結果がこの件数未満ならフォールバック抽出で補完する
    ai_min_keywords: int = 30

    # ---------- 競合検索のデフォルト ----------
    default_search_radius: int = 3000
    default_max_results: int = 15

    # ---------- ログ ----------
    log_level: str = "INFO"

    # ---------- Pydantic Settings 設定 ----------
    model_config = SettingsConfigDict(
        env_file=".env",            # .env を読む
        env_file_encoding="utf-8",
        extra="ignore",             # 定義外の環境変数があっても無視（エラーにしない）
    )


@lru_cache
def get_settings() -> Settings:
    """Settings をプロセス内で1回だけ生成するためのヘルパ。"""
    return Settings()
