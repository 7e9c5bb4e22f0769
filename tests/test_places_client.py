# tests/test_places_client.py
import pytest
import requests

from conftest import FakeResponse, make_places, make_settings
from models.competitor_models import GeoPoint
from services import places_client
from services.errors import SearchError
from services.places_client import PlacesClient


@pytest.fixture
def client():
    return PlacesClient(make_settings(google_places_api_key="places-key", search_timeout_seconds=4))


def _patch_get(monkeypatch, response=None, error=None):
    calls = []

    def fake_get(url, params=None, timeout=None):
        calls.append({"url": url, "params": params, "timeout": timeout})
        if error is not None:
            raise error
        return response

    monkeypatch.setattr(places_client.requests, "get", fake_get)
    return calls


def test_missing_key_raises_search_error(settings):
    with pytest.raises(SearchError, match="not configured"):
        PlacesClient(settings).text_search("병원")


def test_text_search_ok(monkeypatch, client):
    calls = _patch_get(monkeypatch, FakeResponse(200, json_data={"status": "OK", "results": make_places(3)}))

    response = client.text_search("병원", location=GeoPoint(lat=37.5, lng=127.0), radius=3000)

    assert response.status == "OK"
    assert len(response.results) == 3
    params = calls[0]["params"]
    assert params["query"] == "병원"
    assert params["location"] == "37.5,127.0"
    assert params["radius"] == 3000
    assert params["language"] == "ko"
    assert calls[0]["timeout"] == 4


def test_text_search_without_location_sends_no_bias(monkeypatch, client):
    calls = _patch_get(monkeypatch, FakeResponse(200, json_data={"status": "OK", "results": []}))
    client.text_search("병원")
    assert "location" not in calls[0]["params"]
    assert "radius" not in calls[0]["params"]


def test_radius_without_location_is_rejected(monkeypatch, client):
    calls = _patch_get(monkeypatch, FakeResponse(200, json_data={"status": "OK", "results": []}))
    with pytest.raises(ValueError):
        client.text_search("병원", radius=3000)
    assert calls == []


def test_zero_results_is_empty_not_error(monkeypatch, client):
    _patch_get(monkeypatch, FakeResponse(200, json_data={"status": "ZERO_RESULTS", "results": []}))
    assert client.text_search("병원").results == []


def test_non_ok_status_raises(monkeypatch, client):
    _patch_get(
        monkeypatch,
        FakeResponse(200, json_data={"status": "REQUEST_DENIED", "error_message": "bad key"}),
    )
    with pytest.raises(SearchError, match="REQUEST_DENIED: bad key"):
        client.text_search("병원")


def test_http_error_raises(monkeypatch, client):
    _patch_get(monkeypatch, FakeResponse(500, text="boom"))
    with pytest.raises(SearchError, match="HTTP 500"):
        client.text_search("병원")


def test_timeout_raises_search_error(monkeypatch, client):
    _patch_get(monkeypatch, error=requests.Timeout("slow"))
    with pytest.raises(SearchError, match="timed out"):
        client.text_search("병원")


def test_geocode_returns_point(monkeypatch, client):
    _patch_get(
        monkeypatch,
        FakeResponse(
            200,
            json_data={"status": "OK", "results": [{"geometry": {"location": {"lat": 37.1, "lng": 127.2}}}]},
        ),
    )
    assert client.geocode("서울 강남구") == GeoPoint(lat=37.1, lng=127.2)


def test_geocode_failure_returns_none(monkeypatch, client):
    _patch_get(monkeypatch, error=requests.ConnectionError("down"))
    assert client.geocode("서울 강남구") is None


def test_geocode_no_result_returns_none(monkeypatch, client):
    _patch_get(monkeypatch, FakeResponse(200, json_data={"status": "ZERO_RESULTS", "results": []}))
    assert client.geocode("nowhere") is None
