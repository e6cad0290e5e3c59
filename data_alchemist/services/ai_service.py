"""
Generative-language client
==========================

Thin async wrapper over the OpenAI-compatible chat-completions endpoint of the
Gemini API. Every public helper is best-effort: when the service is not
configured or a call fails, it falls back to local logic and reports where the
answer came from.
"""

from __future__ import annotations

import json
import re
from typing import Any, Dict, List, Literal, Optional, Sequence, Tuple

import openai
import structlog
from openai import AsyncOpenAI

from ..config import AppSettings, get_settings
from ..models import Correction, Rule, ValidationIssue
from .corrections import Collections, corrections_from_payload, fallback_corrections
from .rule_builder import custom_rule, parse_rule_text, rule_from_payload
from .search import substring_search


logger = structlog.get_logger(__name__)

SearchSource = Literal["ai", "local"]

_FENCE = re.compile(r"```(?:json)?", re.IGNORECASE)
_ARRAY = re.compile(r"\[[\s\S]*\]")
_OBJECT = re.compile(r"\{[\s\S]*\}")
_RETRYABLE = (
    openai.APIConnectionError,
    openai.APITimeoutError,
    openai.RateLimitError,
    openai.InternalServerError,
)


class AIServiceError(Exception):
    """Raised when the generative-language call fails."""


class AINotConfiguredError(AIServiceError):
    """Raised when no API key is configured."""


SEARCH_PROMPT = """
Search this data based on the query: "{query}"

Data: {data}

Return matching items as JSON array. Look for:
- Text matches in names, categories, skills
- Numeric comparisons (>, <, =)
- Skill requirements
- Phase preferences
- Priority levels
- Duration values

Query examples:
- "tasks with duration > 2"
- "workers with coding skills"
- "clients with priority 5"
- "high priority clients"
- "short duration tasks"

Return only the matching items as a JSON array. If no matches found, return empty array [].
"""

RULE_PROMPT = """
Convert this business rule description to a structured rule:
"{description}"

Return JSON with:
{{
  "type": "coRun|loadLimit|phaseWindow|slotRestriction",
  "name": "rule name",
  "description": "clear description",
  "config": {{}}
}}

Examples:
- "Tasks T1 and T2 should run together" -> coRun rule, config {{"tasks": ["T1", "T2"]}}
- "GroupA workers max 2 tasks per phase" -> loadLimit rule, config {{"workerGroup": "GroupA", "maxSlotsPerPhase": 2}}
"""

CORRECTIONS_PROMPT = """
Suggest corrections for these data errors. Analyze ALL errors and provide fixes for each one:
{errors}

Return JSON array with corrections for ALL errors. Each correction should have:
{{
  "entityId": "ID",
  "field": "field name",
  "currentValue": "current value",
  "suggestedValue": "suggested fix",
  "reason": "why this fix"
}}

Error Type Guidelines:
- Duplicate IDs: Suggest unique alternatives (e.g., C1 -> C1_updated)
- Invalid Priority/Qualification: Suggest values between 1-5
- Unknown Task IDs: Suggest removing invalid IDs or valid alternatives
- Invalid Duration: Suggest positive numbers
- Missing Skills: Suggest common skills or empty array
- Invalid Arrays: Suggest proper array format

Important:
- Provide fixes for ALL {count} errors, not just some
- Each error must have exactly one correction
- Return exactly {count} corrections
- Make suggestions practical and actionable
"""


def strip_code_fences(text: str) -> str:
    return _FENCE.sub("", text).strip()


def parse_json_array(text: str) -> List[Any]:
    """Parse a JSON array from a model reply, tolerating surrounding prose."""
    cleaned = strip_code_fences(text)
    try:
        parsed = json.loads(cleaned)
    except json.JSONDecodeError:
        m = _ARRAY.search(cleaned)
        if not m:
            raise ValueError("No valid JSON array found in response")
        parsed = json.loads(m.group(0))
    if not isinstance(parsed, list):
        raise ValueError("Response is not an array")
    return parsed


def parse_json_object(text: str) -> Dict[str, Any]:
    cleaned = strip_code_fences(text)
    try:
        parsed = json.loads(cleaned)
    except json.JSONDecodeError:
        m = _OBJECT.search(cleaned)
        if not m:
            raise ValueError("No valid JSON object found in response")
        parsed = json.loads(m.group(0))
    if not isinstance(parsed, dict):
        raise ValueError("Response is not an object")
    return parsed


class AIService:
    """Client for search, rule conversion and correction suggestions."""

    def __init__(self, settings: Optional[AppSettings] = None, client: Optional[Any] = None) -> None:
        self._settings = settings or get_settings()
        self._client = client

    @property
    def configured(self) -> bool:
        return self._client is not None or bool(self._settings.ai_api_key)

    def api_key_status(self) -> str:
        return "valid" if self.configured else "missing"

    def _get_client(self) -> Any:
        if self._client is None:
            if not self._settings.ai_api_key:
                raise AINotConfiguredError("Gemini API key not found. Set GEMINI_API_KEY in your .env file")
            self._client = AsyncOpenAI(
                api_key=self._settings.ai_api_key,
                base_url=self._settings.ai_base_url,
                timeout=self._settings.ai_timeout_seconds,
                max_retries=0,
            )
        return self._client

    async def generate_content(self, prompt: str) -> str:
        """Send one prompt and return the reply text."""

        client = self._get_client()
        attempts = self._settings.ai_max_retries + 1
        last_err: Optional[Exception] = None
        for attempt in range(attempts):
            try:
                resp = await client.chat.completions.create(
                    model=self._settings.ai_model,
                    messages=[{"role": "user", "content": prompt}],
                )
            except _RETRYABLE as exc:
                last_err = exc
                logger.warning("ai_request_retry", attempt=attempt + 1, error=str(exc))
                continue
            except Exception as exc:  # noqa: BLE001
                raise AIServiceError(f"API request failed: {exc}") from exc

            choices = getattr(resp, "choices", None) or []
            content = choices[0].message.content if choices else None
            if not content:
                raise AIServiceError("No content in API response")
            return content
        raise AIServiceError(f"API request failed after {attempts} attempts: {last_err}") from last_err

    async def search_data(
        self,
        query: str,
        records: Sequence[Dict[str, Any]],
    ) -> Tuple[List[Dict[str, Any]], SearchSource]:
        """Natural-language search, falling back to substring matching."""

        limit = self._settings.search_result_limit
        if not query.strip() or not records:
            return [], "local"

        sample = list(records[: self._settings.ai_prompt_record_limit])
        prompt = SEARCH_PROMPT.format(query=query, data=json.dumps(sample, default=str))
        try:
            reply = await self.generate_content(prompt)
            results = parse_json_array(reply)
        except (AIServiceError, ValueError) as exc:
            logger.warning("ai_search_fallback", query=query, error=str(exc))
            return substring_search(query, records, limit), "local"

        results = [r for r in results if isinstance(r, dict)]
        logger.info("ai_search_completed", query=query, results=len(results))
        return results[:limit], "ai"

    async def convert_to_rule(self, description: str) -> Rule:
        """Turn a plain-English rule description into a structured Rule."""

        try:
            reply = await self.generate_content(RULE_PROMPT.format(description=description))
            return rule_from_payload(parse_json_object(reply), description)
        except (AIServiceError, ValueError) as exc:
            logger.warning("ai_rule_fallback", error=str(exc))
        return parse_rule_text(description) or custom_rule(description)

    async def suggest_corrections(
        self,
        issues: Sequence[ValidationIssue],
        collections: Optional[Collections] = None,
    ) -> Tuple[List[Correction], SearchSource]:
        """Propose one fix per issue."""

        if not issues:
            return [], "local"

        payload = [
            {
                "id": i.id,
                "type": i.type,
                "entityId": i.entity_id,
                "field": i.field,
                "message": i.message,
                "suggestion": i.suggestion,
            }
            for i in issues
        ]
        prompt = CORRECTIONS_PROMPT.format(errors=json.dumps(payload), count=len(issues))
        try:
            reply = await self.generate_content(prompt)
            corrections = corrections_from_payload(parse_json_array(reply), issues)
        except (AIServiceError, ValueError) as exc:
            logger.warning("ai_corrections_fallback", error=str(exc))
            return fallback_corrections(issues, collections), "local"

        logger.info("ai_corrections_generated", fixes=len(corrections), issues=len(issues))
        return corrections, "ai"
