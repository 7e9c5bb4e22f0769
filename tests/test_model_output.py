# tests/test_model_output.py
import json

from services.model_output import find_json_object, parse_model_response


def test_find_json_object_skips_prose():
    text = 'Sure! Here it is:\n```json\n{"a": {"b": 1}}\n```\nThanks {not json}'
    assert find_json_object(text) == '{"a": {"b": 1}}'


def test_find_json_object_ignores_braces_in_strings():
    text = 'x {"k": "a } tricky { value", "n": "\\"}"} trailing }'
    span = find_json_object(text)
    assert json.loads(span) == {"k": "a } tricky { value", "n": '"}'}


def test_find_json_object_without_balanced_braces():
    assert find_json_object("no json here") is None
    assert find_json_object("{ unclosed") is None
    assert find_json_object("") is None


def test_unbalanced_prefix_then_valid_object():
    assert find_json_object('{ broken {"ok": true}') == '{"ok": true}'
    assert find_json_object('} {"ok": true}') == '{"ok": true}'


def _model_json(**extra):
    data = {
        "keywords": [
            {"keyword": "강남 피부과", "relevance": 95, "category": "primary",
             "searchIntent": "transactional", "estimatedSearchVolume": 12000},
            {"keyword": "레이저 토닝", "relevance": 0.6, "category": "long-tail"},
            {"keyword": "  ", "relevance": 50},
            {"relevance": 40},
            {"keyword": "강남 피부과", "relevance": 10},
            {"keyword": "피부 관리", "relevance": 250, "category": "weird",
             "estimatedSearchVolume": "n/a"},
        ],
        "contentAnalysis": {"industry": "Medical"},
    }
    data.update(extra)
    return "Here is the analysis:\n" + json.dumps(data, ensure_ascii=False)


def test_parse_valid_response():
    result = parse_model_response(_model_json())
    assert result.ok
    analysis = result.analysis

    assert analysis.industry == "Medical"
    assert analysis.source == "ai"
    assert [k.keyword for k in analysis.keywords] == ["강남 피부과", "레이저 토닝", "피부 관리"]

    first, second, third = analysis.keywords
    assert first.relevance == 0.95
    assert first.search_intent == "transactional"
    assert first.estimated_search_volume == 12000
    assert second.category == "longTail"
    assert second.relevance == 0.6
    assert third.relevance == 1.0
    assert third.category == "secondary"
    assert third.estimated_search_volume is None


def test_suggestions_grouped_from_keywords_when_missing():
    analysis = parse_model_response(_model_json()).analysis
    assert [k.keyword for k in analysis.suggestions.primary] == ["강남 피부과"]
    assert [k.keyword for k in analysis.suggestions.long_tail] == ["레이저 토닝"]


def test_suggestion_strings_reuse_keyword_records():
    text = _model_json(suggestions={"primary": ["강남 피부과", "새 키워드"], "longTail": "oops"})
    analysis = parse_model_response(text).analysis

    primary = analysis.suggestions.primary
    assert [k.keyword for k in primary] == ["강남 피부과", "새 키워드"]
    assert primary[0].relevance == 0.95
    assert primary[1].category == "primary"
    assert analysis.suggestions.long_tail == []


def test_default_industry_when_model_omits_it():
    text = json.dumps({"keywords": [{"keyword": "abc"}]})
    analysis = parse_model_response(text, default_industry="Beauty").analysis
    assert analysis.industry == "Beauty"


def test_failures_are_tagged_not_raised():
    assert parse_model_response("I cannot help with that").reason.startswith("no balanced")
    assert not parse_model_response("{'single': 'quotes'}").ok
    assert "keywords" in parse_model_response('{"items": []}').reason
    assert parse_model_response('{"keywords": [{"keyword": ""}]}').reason == (
        "no valid keywords in model response"
    )
