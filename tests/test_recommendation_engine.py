import json
from types import SimpleNamespace

import pytest

from prompts import build_recommendation_prompt
from recommendation_engine import (
    FALLBACK_RECOMMENDATIONS,
    GeminiRecommendationProvider,
    RecommendationProvider,
    fallback_recommendations,
)


class FakeModels:
    def __init__(self, text=None, error=None):
        self.text = text
        self.error = error
        self.calls = []

    def generate_content(self, model, contents, config=None):
        self.calls.append({"model": model, "contents": contents, "config": config})
        if self.error:
            raise self.error
        return SimpleNamespace(text=self.text)


def gemini(text=None, error=None):
    models = FakeModels(text, error)
    provider = GeminiRecommendationProvider(model="test-model", timeout=5,
                                            client=SimpleNamespace(models=models))
    return provider, models


class TestStaticRecommendations:
    def test_static_provider(self):
        result = RecommendationProvider().recommend("water_security", "danger", {})
        assert result == FALLBACK_RECOMMENDATIONS["water_security"]["danger"]

    def test_returns_copy(self):
        result = fallback_recommendations("air_quality", "danger")
        result["immediate"].append("mutated")
        assert "mutated" not in FALLBACK_RECOMMENDATIONS["air_quality"]["danger"]["immediate"]

    def test_unknown_severity_uses_danger(self):
        assert fallback_recommendations("green_space", "info") == FALLBACK_RECOMMENDATIONS["green_space"]["danger"]

    def test_danger_payloads(self):
        assert FALLBACK_RECOMMENDATIONS["air_quality"]["danger"]["immediate"] == [
            "Limit outdoor activities", "Close windows", "Use air purifiers"]
        assert set(FALLBACK_RECOMMENDATIONS["water_security"]["danger"]) == {
            "conservation", "infrastructure", "emergency"}
        assert set(FALLBACK_RECOMMENDATIONS["green_space"]["danger"]) == {"planning", "community", "policy"}


class TestGeminiRecommendations:
    def test_valid_json(self):
        payload = {"immediate": ["a"], "short_term": ["b"], "long_term": ["c"]}
        provider, models = gemini(text=json.dumps(payload))
        assert provider.recommend("air_quality", "danger", {"aqi": 180}) == payload

        call = models.calls[0]
        assert call["model"] == "test-model"
        assert "AQI: 180" in call["contents"]
        assert call["config"].response_mime_type == "application/json"

    def test_fenced_json(self):
        payload = {"planning": ["p"], "community": ["c"], "policy": ["x"]}
        provider, _ = gemini(text="```json\n" + json.dumps(payload) + "\n```")
        assert provider.recommend("green_space", "warning", {}) == payload

    def test_invalid_json_falls_back(self):
        provider, _ = gemini(text="not json at all")
        assert provider.recommend("air_quality", "danger", {}) == FALLBACK_RECOMMENDATIONS["air_quality"]["danger"]

    def test_api_error_falls_back(self):
        provider, _ = gemini(error=TimeoutError("deadline exceeded"))
        result = provider.recommend("water_security", "warning", {})
        assert result == FALLBACK_RECOMMENDATIONS["water_security"]["warning"]

    def test_non_object_falls_back(self):
        provider, _ = gemini(text=json.dumps(["just", "a", "list"]))
        assert provider.recommend("green_space", "danger", {}) == FALLBACK_RECOMMENDATIONS["green_space"]["danger"]

    def test_empty_response_falls_back(self):
        provider, _ = gemini(text=None)
        assert provider.recommend("air_quality", "warning", {}) == FALLBACK_RECOMMENDATIONS["air_quality"]["warning"]

    def test_missing_keys_filled(self):
        provider, _ = gemini(text=json.dumps({"immediate": ["stay inside"], "short_term": []}))
        result = provider.recommend("air_quality", "danger", {})
        assert result["immediate"] == ["stay inside"]
        assert result["short_term"] == FALLBACK_RECOMMENDATIONS["air_quality"]["danger"]["short_term"]
        assert result["long_term"] == FALLBACK_RECOMMENDATIONS["air_quality"]["danger"]["long_term"]


class TestPrompts:
    def test_missing_metrics_rendered_as_na(self):
        system_prompt, prompt = build_recommendation_prompt("water_security", "danger", {"water_stress_level": 88})
        assert "water resource" in system_prompt
        assert "Water stress level: 88%" in prompt
        assert "Groundwater level: N/A" in prompt
        assert "Severity: danger" in prompt

    def test_unknown_category(self):
        with pytest.raises(KeyError):
            build_recommendation_prompt("noise", "danger", {})
