# tests/test_keyword_extractor.py
from agents.keyword_extractor import (
    KeywordExtractor,
    estimate_search_volume,
    infer_search_intent,
)
from models.page_models import HeadingSet, PageContent
from services.html_parser import parse_html


def test_empty_page_returns_empty_list(empty_page):
    assert KeywordExtractor().extract(empty_page) == []


def test_title_alone_is_not_tokenized():
    page = PageContent(url="https://example.com/", title="Example Domain", raw_keyword_candidates=[])
    assert KeywordExtractor().extract(page) == []


def test_scores_by_frequency_and_heading_weight(clinic_page):
    records = KeywordExtractor().extract(clinic_page)
    keywords = [r.keyword for r in records]

    # 피부: h1(3) + body 2回(2) = 5 / 클리닉: h1(3) + body(1) = 4
    assert keywords[:2] == ["피부", "클리닉"]
    # 同点(3) は初出順: h2 の並び
    assert keywords[2:6] == ["레이저", "시술", "상담", "예약"]
    # 本文だけの語（各1点）は最後、出現順
    assert keywords[6:] == ["관리", "전문", "가능", "환영"]


def test_relevance_is_relative_to_best_score(clinic_page):
    records = KeywordExtractor().extract(clinic_page)
    assert records[0].relevance == 1.0
    assert records[1].relevance == 0.8
    assert all(0.0 <= r.relevance <= 1.0 for r in records)


def test_categories_follow_rank(clinic_page):
    records = KeywordExtractor().extract(clinic_page)
    assert [r.category for r in records[:3]] == ["primary"] * 3
    assert {r.category for r in records[3:10]} == {"secondary"}


def test_long_tail_after_rank_ten():
    words = " ".join(f"word{chr(97 + i)}" for i in range(15))
    page = PageContent(url="https://x.example/", raw_text=words)
    records = KeywordExtractor().extract(page)
    assert len(records) == 15
    assert records[10].category == "longTail"


def test_stop_words_are_dropped():
    page = PageContent(url="https://x.example/", raw_text="the and with 그리고 입니다 service")
    assert [r.keyword for r in KeywordExtractor().extract(page)] == ["service"]


def test_limit_and_determinism(clinic_page):
    extractor = KeywordExtractor(max_keywords=3)
    first = extractor.extract(clinic_page)
    second = extractor.extract(clinic_page)
    assert len(first) == 3
    assert first == second


def test_english_terms_are_lowercased_and_unique():
    page = PageContent(
        url="https://x.example/",
        headings=HeadingSet(h1=["Dental Clinic"]),
        raw_text="dental CLINIC Dental",
    )
    keywords = [r.keyword for r in KeywordExtractor().extract(page)]
    assert keywords == ["dental", "clinic"]


def test_search_volume_estimate_is_deterministic():
    assert estimate_search_volume("피부") == 3000
    assert estimate_search_volume("consultation") == 500
    assert estimate_search_volume("피부") == estimate_search_volume("피부")


def test_search_intent_patterns():
    assert infer_search_intent("피부 예약") == "transactional"
    assert infer_search_intent("price list") == "commercial"
    assert infer_search_intent("official site") == "navigational"
    assert infer_search_intent("피부") == "informational"


def test_parsed_heading_terms_keep_their_heading_weight():
    html = "<html><body><h1>alpha</h1><p>beta beta</p></body></html>"
    page = parse_html("https://example.com/", html)

    records = KeywordExtractor().extract(page)

    # alpha は h1 の 3.0 だけ、beta は本文 1.0 x 2
    assert [(r.keyword, r.relevance) for r in records] == [("alpha", 1.0), ("beta", 0.6667)]
