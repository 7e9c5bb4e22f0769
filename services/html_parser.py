# services/html_parser.py

from __future__ import annotations

import json
import logging
import re
from typing import Dict, Iterable, List

from bs4 import BeautifulSoup

from models.page_models import FetchStats, HeadingSet, PageContent, SeoScore
from services.crawler import extract_domain
from services.errors import FetchError

logger = logging.getLogger(__name__)

# キーワード候補の最大件数
MAX_KEYWORD_CANDIDATES = 50

# ハングル2文字以上 / 英字3文字以上
_TERM_RE = re.compile(r"[가-힣]{2,}|[A-Za-z]{3,}")

STOP_WORDS = frozenset(
    {
        "and", "or", "but", "the", "a", "an", "is", "are", "was", "were",
        "have", "has", "had", "for", "with", "this", "that", "from", "you",
        "your", "our", "not", "can", "all", "more", "use", "any",
        "그리고", "또는", "하지만", "그런데", "이것", "저것",
        "입니다", "있습니다", "없습니다", "통해", "위해",
    }
)


# ============================================================
# トークン化
# ============================================================

def extract_terms(text: str) -> List[str]:
    """
    テキストからキーワード候補になる語を出現順に取り出す。
    英字は小文字化し、ストップワードは除く。重複は残す（頻度計算に使うため）。
    """
    if not text:
        return []
    terms: List[str] = []
    for m in _TERM_RE.finditer(text):
        term = m.group(0).lower()
        if term in STOP_WORDS:
            continue
        terms.append(term)
    return terms


def _unique(values: Iterable[str]) -> List[str]:
    return list(dict.fromkeys(v for v in values if v))


# ============================================================
# 各要素の抽出
# ============================================================

def _extract_headings(soup: BeautifulSoup) -> HeadingSet:
    def texts(tag_name: str) -> List[str]:
        return [t for t in (h.get_text(strip=True) for h in soup.find_all(tag_name)) if t]

    return HeadingSet(h1=texts("h1"), h2=texts("h2"), h3=texts("h3"))


def _extract_meta_tags(soup: BeautifulSoup) -> Dict[str, str]:
    tags: Dict[str, str] = {}
    for meta in soup.find_all("meta"):
        name = meta.get("name") or meta.get("property") or meta.get("http-equiv")
        content = meta.get("content")
        if name and content:
            tags[name.lower()] = content.strip()
    return tags


def _iter_json_ld(soup: BeautifulSoup) -> Iterable[dict]:
    for tag in soup.find_all("script", attrs={"type": re.compile(r"application/ld\+json", re.I)}):
        try:
            data = json.loads(tag.string or "")
        except ValueError:
            continue
        stack = [data]
        while stack:
            obj = stack.pop()
            if isinstance(obj, dict):
                yield obj
                stack.extend(obj.values())
            elif isinstance(obj, list):
                stack.extend(obj)


def _format_address(value: object) -> str:
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, dict):
        parts = [
            value.get("streetAddress"),
            value.get("addressLocality"),
            value.get("addressRegion"),
            value.get("postalCode"),
            value.get("addressCountry") if isinstance(value.get("addressCountry"), str) else None,
        ]
        return " ".join(str(p).strip() for p in parts if p)
    return ""


def _extract_business_info(soup: BeautifulSoup, meta_tags: Dict[str, str]) -> tuple[str, List[str]]:
    """JSON-LD / og:site_name / <address> から事業者名と住所候補を拾う。"""
    name = ""
    addresses: List[str] = []

    for obj in _iter_json_ld(soup):
        if "address" in obj:
            addr = _format_address(obj["address"])
            if addr:
                addresses.append(addr)
            if not name and isinstance(obj.get("name"), str):
                name = obj["name"].strip()

    for tag in soup.find_all("address"):
        text = re.sub(r"\s+", " ", tag.get_text(" ", strip=True))
        if text:
            addresses.append(text)

    if not name:
        name = meta_tags.get("og:site_name", "")

    return name, _unique(addresses)


def _extract_main_text(soup: BeautifulSoup) -> str:
    """
    script/style 等を除去して body の本文テキストを抽出する。
    <title> と h1-h3 は含めない（見出しは headings 側で重み付けして数えるため）。
    """
    body = soup.body or soup
    for tag in body(["script", "style", "noscript", "template", "h1", "h2", "h3"]):
        tag.decompose()
    text = body.get_text(separator=" ", strip=True)
    return re.sub(r"\s+", " ", text).strip()


def _extract_keyword_candidates(
    soup: BeautifulSoup,
    meta_tags: Dict[str, str],
    title: str,
    description: str,
    headings: HeadingSet,
    main_text: str,
) -> List[str]:
    meta_keywords = [k.strip() for k in meta_tags.get("keywords", "").split(",")]
    alt_texts = [img.get("alt", "") for img in soup.find_all("img")]

    candidates = [
        *meta_keywords,
        *extract_terms(title),
        *extract_terms(description),
        *(t for h in headings.all() for t in extract_terms(h)),
        *extract_terms(main_text),
        *(t for alt in alt_texts for t in extract_terms(alt)),
    ]
    return _unique(candidates)[:MAX_KEYWORD_CANDIDATES]


# ============================================================
# SEO スコア
# ============================================================

def calculate_seo_score(
    title: str,
    description: str,
    headings: HeadingSet,
    keyword_count: int,
    image_count: int,
    images_with_alt: int,
) -> SeoScore:
    title_score = 0
    if title:
        title_score = 100 if 30 <= len(title) <= 60 else 70

    description_score = 0
    if description:
        description_score = 100 if 120 <= len(description) <= 160 else 70

    headings_score = min(100, len(headings.all()) * 20)
    keywords_score = min(100, keyword_count * 2)
    images_score = round(images_with_alt / image_count * 100) if image_count else 50

    overall = round(
        (title_score + description_score + headings_score + keywords_score + images_score) / 5
    )
    return SeoScore(
        title=title_score,
        description=description_score,
        headings=headings_score,
        keywords=keywords_score,
        images=images_score,
        overall=overall,
    )


# ============================================================
# メイン
# ============================================================

def parse_html(
    url: str,
    html: str,
    fetch_stats: FetchStats | None = None,
) -> PageContent:
    """
    HTML文字列を解析して PageContent を生成する。
    ※ ここではネットワークアクセスは行わない（fetch_html で取得済み前提）
    空のレスポンスやタグを1つも含まないものは FetchError。
    """
    if not html or not html.strip():
        raise FetchError(f"Empty response body from {url}")

    soup = BeautifulSoup(html, "html.parser")
    if soup.find() is None:
        raise FetchError(f"Response from {url} is not HTML markup")

    title = soup.title.get_text(strip=True) if soup.title else ""
    meta_tags = _extract_meta_tags(soup)
    description = meta_tags.get("description") or meta_tags.get("og:description", "")

    headings = _extract_headings(soup)
    business_name, addresses = _extract_business_info(soup, meta_tags)

    images = soup.find_all("img")
    images_with_alt = sum(1 for img in images if img.get("alt"))
    link_count = len(soup.find_all("a", href=True))

    # 本文抽出は soup を破壊的に変更するので最後に行う
    main_text = _extract_main_text(soup)
    candidates = _extract_keyword_candidates(
        soup, meta_tags, title, description, headings, main_text
    )

    seo_score = calculate_seo_score(
        title=title,
        description=description,
        headings=headings,
        keyword_count=len(candidates),
        image_count=len(images),
        images_with_alt=images_with_alt,
    )

    logger.info(
        "[html_parser] parsed url=%s title=%r candidates=%s text_length=%s",
        url,
        title[:50],
        len(candidates),
        len(main_text),
    )

    return PageContent(
        url=url,
        domain=extract_domain(url),
        title=title,
        description=description,
        raw_text=main_text,
        headings=headings,
        raw_keyword_candidates=candidates,
        meta_tags=meta_tags,
        business_name=business_name or title,
        addresses=addresses,
        image_count=len(images),
        link_count=link_count,
        seo_score=seo_score,
        fetch_stats=fetch_stats,
    )
