"""
Recommendation Engine Module
Attaches action recommendations to environmental alerts. The static table is
the default and the fallback; Gemini output is best effort.
"""

import copy
import json
import logging

from google import genai
from google.genai import types

from config import Config
from prompts import build_recommendation_prompt

# Static recommendations per category and severity
FALLBACK_RECOMMENDATIONS = {
    "air_quality": {
        "warning": {
            "immediate": ["Limit prolonged outdoor exertion", "Keep windows closed during peak traffic hours"],
            "short_term": ["Monitor air quality daily", "Check local air quality forecasts before outdoor plans"],
            "long_term": ["Support clean air initiatives", "Reduce vehicle emissions"],
        },
        "danger": {
            "immediate": ["Limit outdoor activities", "Close windows", "Use air purifiers"],
            "short_term": ["Monitor air quality daily", "Report to environmental authorities"],
            "long_term": ["Support clean air initiatives", "Reduce vehicle emissions"],
        },
    },
    "water_security": {
        "warning": {
            "conservation": ["Reduce water usage", "Fix leaks promptly"],
            "infrastructure": ["Audit distribution losses", "Plan water storage upgrades"],
            "emergency": ["Review drought contingency plans"],
        },
        "danger": {
            "conservation": ["Reduce water usage", "Fix leaks promptly", "Install water-efficient fixtures"],
            "infrastructure": ["Improve water storage", "Upgrade distribution systems"],
            "emergency": ["Prepare water reserves", "Monitor supply levels"],
        },
    },
    "green_space": {
        "warning": {
            "planning": ["Increase park space", "Create green corridors"],
            "community": ["Plant street trees", "Start community gardens"],
            "policy": ["Protect existing green space"],
        },
        "danger": {
            "planning": ["Increase park space", "Create green corridors", "Mandate green building standards"],
            "community": ["Start community gardens", "Plant street trees", "Create green roofs"],
            "policy": ["Protect existing green space", "Require environmental impact assessments"],
        },
    },
}


def fallback_recommendations(category, severity):
    """Copy of the static payload; unknown severities use the danger entry."""
    by_severity = FALLBACK_RECOMMENDATIONS[category]
    return copy.deepcopy(by_severity.get(severity, by_severity["danger"]))


def _strip_code_fences(text):
    text = text.strip()
    if text.startswith("```"):
        text = text.split("```")[1]
        if text.startswith("json"):
            text = text[4:]
    return text.strip()


class RecommendationProvider:
    """Static recommendations. Never raises and needs no network."""

    name = "static"

    def recommend(self, category, severity, metrics):
        """
        Args:
            category (str): air_quality | water_security | green_space
            severity (str): warning | danger
            metrics (dict): reading values shown to the model

        Returns:
            dict: recommendation lists keyed by the category's schema fields
        """
        return fallback_recommendations(category, severity)


class GeminiRecommendationProvider(RecommendationProvider):
    """Gemini-generated recommendations with the static table as fallback."""

    name = "gemini"

    def __init__(self, api_key=None, model=None, timeout=None, client=None):
        self.model = model or Config.GEMINI_MODEL
        timeout = timeout or Config.RECOMMENDATION_TIMEOUT
        if client is None:
            client = genai.Client(
                api_key=api_key or Config.GEMINI_API_KEY,
                http_options=types.HttpOptions(timeout=int(timeout * 1000)),
            )
        self.client = client

    def recommend(self, category, severity, metrics):
        fallback = fallback_recommendations(category, severity)
        system_prompt, prompt = build_recommendation_prompt(category, severity, metrics)

        try:
            response = self.client.models.generate_content(
                model=self.model,
                contents=prompt,
                config=types.GenerateContentConfig(
                    system_instruction=system_prompt,
                    temperature=Config.TEMPERATURE,
                    response_mime_type="application/json",
                ),
            )
            result = json.loads(_strip_code_fences(response.text or ""))
        except json.JSONDecodeError:
            logging.error(f"Gemini returned invalid JSON for {category} recommendations")
            return fallback
        except Exception as e:
            logging.error(f"Gemini API error generating {category} recommendations: {e}")
            return fallback

        if not isinstance(result, dict):
            logging.error(f"Gemini returned a non-object payload for {category} recommendations")
            return fallback

        for key, value in fallback.items():
            if not result.get(key):
                result[key] = value
        return result


def build_recommendation_provider():
    """Gemini when an API key is configured, static otherwise."""
    if not Config.GEMINI_API_KEY:
        logging.warning("GEMINI_API_KEY not found; using static alert recommendations")
        return RecommendationProvider()
    try:
        provider = GeminiRecommendationProvider()
        logging.info(f"Gemini recommendations enabled: {provider.model}")
        return provider
    except Exception as e:
        logging.error(f"Error initializing Gemini client: {e}")
        return RecommendationProvider()
