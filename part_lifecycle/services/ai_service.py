"""
AI Service - Looks up product link, lifecycle and datasheet for one part
through the OpenAI Responses API with web search enabled
"""
import json
import os
import re
from typing import Any, Dict, Optional, Protocol

import structlog
from openai import OpenAI

from .. import config
from ..models import EnrichmentResult

logger = structlog.get_logger(__name__)


class EnrichmentClient(Protocol):
    def enrich(self, part: str, website: str) -> EnrichmentResult:
        ...


def build_prompt(part: str, website: str) -> str:
    return config.ENRICHMENT_PROMPT.format(part=part, website=website)


def parse_json_from_response(response_text: str) -> Optional[Dict[str, Any]]:
    """
    Parse JSON from AI response text

    Args:
        response_text: Raw response text from AI

    Returns:
        Parsed JSON dictionary or None if parsing fails
    """
    if not response_text:
        return None

    # Strategy 1: Look for JSON in markdown code blocks
    json_match = re.search(r'```(?:json)?\s*(\{[\s\S]*?\})\s*```', response_text, re.DOTALL)
    if json_match:
        try:
            return json.loads(json_match.group(1))
        except json.JSONDecodeError:
            pass

    # Strategy 2: First balanced {...} object, for answers that wrap the
    # link/lifecycle/datasheet object in prose
    start_idx = response_text.find('{')
    if start_idx != -1:
        brace_count = 0
        end_idx = start_idx
        for i in range(start_idx, len(response_text)):
            if response_text[i] == '{':
                brace_count += 1
            elif response_text[i] == '}':
                brace_count -= 1
                if brace_count == 0:
                    end_idx = i + 1
                    break

        if end_idx > start_idx:
            try:
                return json.loads(response_text[start_idx:end_idx])
            except json.JSONDecodeError:
                pass

    # Strategy 3: Try parsing the entire message
    try:
        parsed = json.loads(response_text)
    except json.JSONDecodeError:
        return None
    return parsed if isinstance(parsed, dict) else None


def parse_enrichment_response(response_text: str) -> EnrichmentResult:
    """
    Raises:
        ValueError: if the text holds no usable three-field object
    """
    parsed_json = parse_json_from_response(response_text)
    if parsed_json is None:
        raise ValueError("Failed to parse JSON from response")
    return EnrichmentResult.from_dict(parsed_json)


class AIService:
    def __init__(self, client: Optional[OpenAI] = None, model: str = None):
        """Initialize OpenAI client"""
        if client is None:
            api_key = os.getenv("OPENAI_API_KEY")
            if not api_key:
                raise RuntimeError("OPENAI_API_KEY is not set")
            client = OpenAI(api_key=api_key)
        self.client = client
        self.model = model or config.OPENAI_MODEL

    def enrich(self, part: str, website: str) -> EnrichmentResult:
        """
        Look up one part on one website

        Never raises: any failure is logged and returned as an all
        "Not found" result carrying the error.

        Args:
            part: Part number
            website: Website the model should search

        Returns:
            EnrichmentResult for the part
        """
        try:
            resp = self.client.responses.create(
                model=self.model,
                instructions=config.ENRICHMENT_INSTRUCTIONS,
                input=build_prompt(part, website),
                tools=[{"type": "web_search"}],  # built-in web search tool
                text={
                    "format": {
                        "type": "json_schema",
                        "name": "part_lookup",
                        "schema": config.ENRICHMENT_SCHEMA,
                        "strict": True,
                    }
                },
                max_output_tokens=config.OPENAI_MAX_OUTPUT_TOKENS,
                temperature=config.OPENAI_TEMPERATURE,
            )

            response_text = (resp.output_text or "").strip()
            if not response_text:
                raise ValueError("No response from AI")

            return parse_enrichment_response(response_text)

        except Exception as e:
            logger.warning("enrichment_failed", backend="openai", part=part, website=website, error=str(e))
            return EnrichmentResult.not_found(error=str(e))


def build_enrichment_client(backend: str = None) -> EnrichmentClient:
    """
    Create the enrichment client selected by ENRICHMENT_BACKEND

    Raises:
        RuntimeError: if the backend is unknown or its credentials are missing
    """
    backend = (backend or config.ENRICHMENT_BACKEND).lower()
    if backend == 'openai':
        return AIService()
    if backend == 'azure':
        from .azure_ai_service import AzureAIService
        return AzureAIService()
    raise RuntimeError(f"Unknown ENRICHMENT_BACKEND: {backend}")
