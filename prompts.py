"""
Prompts Module
This module contains the prompt templates used to request alert
recommendations from the language model. Each category asks for a fixed
JSON schema so responses can be merged with the static fallback.
"""

AIR_QUALITY_SYSTEM_PROMPT = (
    "You are an environmental policy expert specializing in air quality management. "
    "Provide practical, evidence-based recommendations."
)

AIR_QUALITY_PROMPT = """
Generate actionable recommendations for air quality management.

Current conditions:
- AQI: {aqi}
- PM2.5: {pm25}
- Ozone: {ozone}
- NO2: {no2}
- Severity: {severity}

Return ONLY valid JSON, no markdown, with these keys (each a list of short strings):
{{
    "immediate": ["actions for the next 24 hours"],
    "short_term": ["actions for the next week"],
    "long_term": ["strategic improvements"]
}}

Focus on practical measures for local government and residents.
"""

WATER_SECURITY_SYSTEM_PROMPT = (
    "You are a water resource management expert. "
    "Provide practical, sustainable water management recommendations."
)

WATER_SECURITY_PROMPT = """
Generate actionable recommendations for water security management.

Current conditions:
- Water stress level: {water_stress_level}%
- Groundwater level: {groundwater_level}
- Flood risk: {flood_risk}%
- Severity: {severity}

Return ONLY valid JSON, no markdown, with these keys (each a list of short strings):
{{
    "conservation": ["water saving measures"],
    "infrastructure": ["system improvements needed"],
    "emergency": ["preparedness actions"]
}}

Focus on practical measures for utilities and residents.
"""

GREEN_SPACE_SYSTEM_PROMPT = (
    "You are an urban planning expert specializing in green infrastructure. "
    "Provide practical, sustainable recommendations."
)

GREEN_SPACE_PROMPT = """
Generate actionable recommendations for green space development.

Current conditions:
- NDVI: {ndvi}
- Vegetation coverage: {vegetation_coverage}%
- Green space type: {green_space_type}
- Severity: {severity}

Return ONLY valid JSON, no markdown, with these keys (each a list of short strings):
{{
    "planning": ["urban planning improvements"],
    "community": ["community-driven initiatives"],
    "policy": ["regulatory measures needed"]
}}

Focus on practical measures for city planners and residents.
"""

PROMPTS = {
    "air_quality": (AIR_QUALITY_SYSTEM_PROMPT, AIR_QUALITY_PROMPT,
                    ("aqi", "pm25", "ozone", "no2")),
    "water_security": (WATER_SECURITY_SYSTEM_PROMPT, WATER_SECURITY_PROMPT,
                       ("water_stress_level", "groundwater_level", "flood_risk")),
    "green_space": (GREEN_SPACE_SYSTEM_PROMPT, GREEN_SPACE_PROMPT,
                    ("ndvi", "vegetation_coverage", "green_space_type")),
}


def build_recommendation_prompt(category, severity, metrics):
    """
    Fill the category template.

    Returns:
        tuple: (system_instruction, prompt)
    """
    system_prompt, template, fields = PROMPTS[category]
    values = {name: metrics.get(name) if metrics.get(name) is not None else "N/A" for name in fields}
    return system_prompt, template.format(severity=severity, **values)
