# tests/test_response_assembler.py
from agents.response_assembler import (
    assemble_ai_analysis,
    assemble_competitor_response,
    assemble_places_probe,
    assemble_scraping_test,
    error_payload,
)
from models.competitor_models import Competitor, CompetitorResult
from models.keyword_models import ContentAnalysis, KeywordRecord, KeywordSuggestions
from services.errors import SearchError


def _result(n):
    return CompetitorResult(
        target_url="https://clinic.example",
        search_radius_meters=1500,
        max_results=10,
        competitors=[Competitor(name=f"n{i}", external_id=f"id{i}") for i in range(n)],
    )


def test_competitor_envelope():
    body = assemble_competitor_response(_result(3)).model_dump(by_alias=True, mode="json")

    assert body["success"] is True
    assert body["message"] == "Found 3 competitors within 1500m radius"
    assert body["data"]["targetUrl"] == "https://clinic.example"
    assert [c["externalId"] for c in body["data"]["competitors"]] == ["id0", "id1", "id2"]


def test_empty_competitor_result_is_still_success():
    body = assemble_competitor_response(_result(0)).model_dump(by_alias=True)
    assert body["success"] is True
    assert body["data"]["competitors"] == []


def test_ai_analysis_summary_counts(clinic_page):
    keywords = [
        KeywordRecord(keyword=f"k{i}", relevance=1 - i / 10, category="primary" if i < 2 else "longTail")
        for i in range(7)
    ]
    analysis = ContentAnalysis(
        industry="Dermatology",
        source="ai",
        keywords=keywords,
        suggestions=KeywordSuggestions.from_keywords(keywords),
    )

    body = assemble_ai_analysis(clinic_page, analysis).model_dump(by_alias=True)

    summary = body["aiAnalysis"]
    assert summary["keywordsFound"] == 7
    assert summary["primaryKeywords"] == 2
    assert summary["secondaryKeywords"] == 0
    assert summary["longTailKeywords"] == 5
    assert summary["industryDetected"] == "Dermatology"
    assert [s["keyword"] for s in summary["sampleKeywords"]] == ["k0", "k1", "k2", "k3", "k4"]


def test_scraping_test_without_stats(empty_page):
    body = assemble_scraping_test(empty_page).model_dump(by_alias=True)
    assert body["loadTime"] is None
    assert body["status"] is None
    assert body["contentLength"] == 0


def test_places_probe_message():
    response = assemble_places_probe("OK", "q", 12, [Competitor(name="a", external_id="b")])
    assert response.message == "Google Places API is working correctly!"
    assert response.total_results == 12


def test_error_payload_keeps_message():
    body = error_payload("Failed to analyze competitors", SearchError("boom")).model_dump(by_alias=True)
    assert body == {"success": False, "error": "Failed to analyze competitors", "details": "boom"}


def test_error_payload_without_exception():
    assert error_payload("x").details is None
