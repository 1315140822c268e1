"""Function-calling descriptors for third-party LLM platforms.

OpenAI Actions consume an OpenAPI document; Gemini consumes a list of
function declarations. Both are built from the same parameter schema so the
platforms always describe the same input.
"""

from __future__ import annotations

from . import __version__
from .core.scoring import INDUSTRY_MODIFIERS, STAGE_WEIGHTS

CONSULTATION_PARAMETERS: dict = {
    "type": "object",
    "properties": {
        "company_name": {
            "type": "string",
            "description": "Company name; together with industry and stage it identifies the business for 30-day caching",
        },
        "client_name": {"type": "string", "description": "Name of the person receiving the consultation"},
        "industry": {
            "type": "string",
            "description": "Industry sector. Recognized values: " + ", ".join(INDUSTRY_MODIFIERS),
        },
        "business_stage": {
            "type": "string",
            "enum": list(STAGE_WEIGHTS),
            "description": "Current business development stage",
        },
        "challenge_text": {"type": "string", "description": "The go-to-market challenge, in your own words"},
        "company_description": {"type": "string", "description": "What the company does"},
        "team_size": {"type": "integer", "description": "Go-to-market team headcount"},
        "monthly_budget": {"type": "string", "description": "Monthly GTM budget, e.g. '5000', '$5,000' or '$5k'"},
        "website_url": {"type": "string", "description": "Company website"},
        "linkedin_url": {"type": "string", "description": "Company LinkedIn page"},
        "twitter_url": {"type": "string", "description": "Company Twitter/X profile"},
    },
    "required": ["company_name", "challenge_text"],
}

_ROADMAP_PARAMETERS: dict = {
    "type": "object",
    "properties": {
        **CONSULTATION_PARAMETERS["properties"],
        "primary_focus": {"type": "string", "enum": ["E", "P", "I", "C"], "description": "Override the primary focus"},
        "secondary_focus": {"type": "string", "enum": ["E", "P", "I", "C"], "description": "Override the secondary focus"},
        "timeframe": {"type": "string", "enum": ["30-day", "60-day", "90-day", "180-day"]},
        "priorities": {
            "type": "array",
            "items": {"type": "string"},
            "description": "Business priorities, e.g. lead generation, customer retention, product adoption",
        },
    },
}

_JSON_OBJECT = {"application/json": {"schema": {"type": "object"}}}


def _post(operation_id: str, summary: str, parameters: dict) -> dict:
    return {
        "post": {
            "operationId": operation_id,
            "summary": summary,
            "requestBody": {"required": True, "content": {"application/json": {"schema": parameters}}},
            "responses": {
                "200": {"description": summary, "content": _JSON_OBJECT},
                "400": {"description": "Body is not a JSON object"},
            },
        }
    }


def openai_actions_schema(base_url: str) -> dict:
    """OpenAPI 3.1 document for an OpenAI custom GPT action."""
    return {
        "openapi": "3.1.0",
        "info": {
            "title": "GTM Alpha EPIC Consultation",
            "description": "Go-to-market strategy analysis using the EPIC framework: scores, focus, recommendations and a phased roadmap.",
            "version": __version__,
        },
        "servers": [{"url": base_url.rstrip("/")}],
        "paths": {
            "/api/analyze": _post("gtm_consultation", "Full EPIC consultation", CONSULTATION_PARAMETERS),
            "/api/epic-scores": _post("epic_scores", "EPIC scores and focus only", CONSULTATION_PARAMETERS),
            "/api/roadmap": _post("gtm_roadmap", "Capacity-sized GTM roadmap", _ROADMAP_PARAMETERS),
        },
    }


def gemini_functions() -> list[dict]:
    """Gemini function declarations."""
    return [
        {
            "name": "gtm_consultation",
            "description": "Get a go-to-market consultation: EPIC scores, strategic focus, recommendations and roadmap",
            "parameters": CONSULTATION_PARAMETERS,
        },
        {
            "name": "gtm_roadmap",
            "description": "Get a GTM roadmap sized to team and budget capacity",
            "parameters": _ROADMAP_PARAMETERS,
        },
    ]
