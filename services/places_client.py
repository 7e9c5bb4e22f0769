# services/places_client.py
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import requests

from app.config import Settings
from models.competitor_models import GeoPoint
from services.errors import SearchError

logger = logging.getLogger(__name__)

PLACES_TEXT_SEARCH_URL = "https://maps.googleapis.com/maps/api/place/textsearch/json"
GEOCODE_URL = "https://maps.googleapis.com/maps/api/geocode/json"


@dataclass(frozen=True)
class PlacesSearchResponse:
    status: str
    results: List[Dict[str, Any]] = field(default_factory=list)


class PlacesClient:
    """
    Google Places Text Search / Geocoding API の薄いラッパ。
    1メソッド = 1リクエスト、リトライなし。
    """

    def __init__(self, settings: Settings) -> None:
        self.api_key = settings.google_places_api_key
        self.language = settings.search_language
        self.timeout = settings.search_timeout_seconds

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    def require_key(self) -> str:
        if not self.api_key:
            logger.warning("[places] GOOGLE_PLACES_API_KEY is not set")
            raise SearchError("Google Places API key not configured")
        return self.api_key

    def text_search(
        self,
        query: str,
        location: Optional[GeoPoint] = None,
        radius: Optional[int] = None,
    ) -> PlacesSearchResponse:
        """
        Text Search を1回呼ぶ。

        - status=OK → results をそのまま返す
        - status=ZERO_RESULTS → 空リスト
        - それ以外のステータス・HTTP エラー・タイムアウト → SearchError
        radius は location と組でしか意味を持たないので、単独指定は ValueError。
        """
        if radius is not None and location is None:
            raise ValueError("radius requires a location")

        params: Dict[str, Any] = {
            "query": query,
            "key": self.require_key(),
            "language": self.language,
        }
        if location is not None:
            params["location"] = location.as_param()
            if radius is not None:
                params["radius"] = radius

        logger.info(
            "[places] text search start: query=%s location=%s radius=%s",
            query,
            params.get("location"),
            params.get("radius"),
        )

        try:
            resp = requests.get(PLACES_TEXT_SEARCH_URL, params=params, timeout=self.timeout)
        except requests.Timeout as e:
            raise SearchError(f"Places search timed out after {self.timeout}s") from e
        except requests.RequestException as e:
            raise SearchError(f"Places search request failed: {e}") from e

        if not resp.ok:
            logger.error(
                "[places] Non-200 status: %s body=%s",
                resp.status_code,
                resp.text[:2000],
            )
            raise SearchError(f"Places API returned HTTP {resp.status_code}")

        try:
            data = resp.json()
        except ValueError as e:
            raise SearchError("Places API returned a non-JSON body") from e

        status = data.get("status", "UNKNOWN")
        if status == "ZERO_RESULTS":
            logger.info("[places] zero results: query=%s", query)
            return PlacesSearchResponse(status=status, results=[])
        if status != "OK":
            message = data.get("error_message") or "Places API request failed"
            logger.error("[places] status=%s error=%s", status, message)
            raise SearchError(f"Places API status {status}: {message}")

        results = data.get("results") or []
        logger.info("[places] parsed results count=%s", len(results))
        return PlacesSearchResponse(status=status, results=list(results))

    def geocode(self, address: str) -> Optional[GeoPoint]:
        """
        住所・事業者名を緯度経度に変換する。
        見つからない・失敗した場合は None（中心点なしで検索を続けるため）。
        """
        key = self.require_key()
        if not address:
            return None

        try:
            resp = requests.get(
                GEOCODE_URL,
                params={"address": address, "key": key, "language": self.language},
                timeout=self.timeout,
            )
            resp.raise_for_status()
            data = resp.json()
        except (requests.RequestException, ValueError) as e:
            logger.warning("[places] geocode failed: address=%s error=%s", address, e)
            return None

        results = data.get("results") or []
        if data.get("status") != "OK" or not results:
            logger.info("[places] geocode no result: address=%s status=%s", address, data.get("status"))
            return None

        loc = (results[0].get("geometry") or {}).get("location") or {}
        try:
            return GeoPoint(lat=float(loc["lat"]), lng=float(loc["lng"]))
        except (KeyError, TypeError, ValueError):
            return None
