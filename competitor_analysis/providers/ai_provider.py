"""AI estimator providers (Mistral, Gemini) and their JSON repair."""

from __future__ import annotations

import json
import logging
import re
from abc import abstractmethod
from typing import Any, Optional

from pydantic import ValidationError

from competitor_analysis.errors import AdapterFailure, MalformedPayload
from competitor_analysis.models.enums import DataSource
from competitor_analysis.models.record import PartialRecord
from competitor_analysis.prompts.company_profile import format_profile_prompt

from .base import ProviderBase
from .parsing import parse_percent

logger = logging.getLogger(__name__)

_CODE_FENCE = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)
_TRAILING_COMMA = re.compile(r",\s*([}\]])")
_DESCRIPTION = re.compile(r'"description"\s*:\s*"((?:[^"\\]|\\.)*)"')


def parse_ai_json(content: str, provider: str = "AI") -> dict[str, Any]:
    """Parse model output into a dict, repairing common defects.

    Repairs, in order: strip markdown code fences, cut to the outermost
    braces (drops prose around the object), remove trailing commas. If
    the result still fails to parse, salvage the description string
    alone. Raises MalformedPayload when nothing usable remains.
    """
    text = _CODE_FENCE.sub("", content.strip())
    start, end = text.find("{"), text.rfind("}")
    if start != -1 and end > start:
        candidate = _TRAILING_COMMA.sub(r"\1", text[start : end + 1])
        try:
            parsed = json.loads(candidate)
            if isinstance(parsed, dict):
                return parsed
        except json.JSONDecodeError:
            pass

    match = _DESCRIPTION.search(text)
    if match:
        logger.warning(f"{provider} returned malformed JSON; kept description only")
        return {"description": json.loads(f'"{match.group(1)}"')}
    raise MalformedPayload(provider, "response is not parseable JSON")


_TEXT_KEYS = ("stockSymbol", "stock_symbol")


def _coerce_numbers(section: dict[str, Any]) -> dict[str, Any]:
    """Models often answer "15%" or "$200 billion" where a bare number was asked for."""
    return {
        key: parse_percent(value) if isinstance(value, str) and key not in _TEXT_KEYS else value
        for key, value in section.items()
    }


def profile_to_partial(payload: dict[str, Any]) -> PartialRecord:
    """Validate an AI profile payload, dropping sections that fail validation."""
    cleaned = {k: v for k, v in payload.items() if v is not None and k != "scales"}
    if isinstance(cleaned.get("founded"), (int, float)):
        cleaned["founded"] = str(int(cleaned["founded"]))
    for section in ("financials", "customerMetrics", "customer_metrics"):
        if isinstance(cleaned.get(section), dict):
            cleaned[section] = _coerce_numbers(cleaned[section])
    try:
        return PartialRecord.model_validate(cleaned)
    except ValidationError as e:
        logger.warning(f"AI profile failed validation ({e.error_count()} errors); keeping valid sections")

    partial = PartialRecord()
    for key, value in cleaned.items():
        try:
            section = PartialRecord.model_validate({key: value})
        except ValidationError:
            continue
        for name in section.model_fields_set:
            setattr(partial, name, getattr(section, name))
    return partial


class AIProvider(ProviderBase):
    """Estimator that asks a language model for a JSON company profile.

    Money figures come back in billions and user counts in millions; the
    merger's unit normalization scales them.
    """

    is_estimator = True

    @abstractmethod
    async def complete(self, prompt: str) -> str:
        """Send the prompt and return the raw text content of the reply."""
        ...

    async def fetch(
        self, company_name: str, symbol: Optional[str], website: Optional[str] = None
    ) -> Optional[PartialRecord]:
        content = await self.complete(format_profile_prompt(company_name))
        if not content:
            return None
        payload = parse_ai_json(content, self.label)
        logger.info(f"{self.label} returned a profile for '{company_name}'")
        return profile_to_partial(payload)


class MistralProvider(AIProvider):
    source = DataSource.MISTRAL

    @property
    def enabled(self) -> bool:
        return bool(self._settings.mistral_api_key)

    async def complete(self, prompt: str) -> str:
        resp = await self._client.post(
            self._settings.mistral_base_url,
            headers={"Authorization": f"Bearer {self._settings.mistral_api_key}"},
            json={
                "model": self._settings.mistral_model,
                "messages": [{"role": "user", "content": prompt}],
                "temperature": 0.2,
                "response_format": {"type": "json_object"},
            },
        )
        if resp.status_code != 200:
            raise AdapterFailure(self.label, f"HTTP {resp.status_code}: {resp.text[:200]}")
        data = resp.json()
        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as e:
            raise MalformedPayload(self.label, "unexpected response format") from e
        if isinstance(content, dict):
            return json.dumps(content)
        return content


class GeminiProvider(AIProvider):
    source = DataSource.GEMINI

    @property
    def enabled(self) -> bool:
        return bool(self._settings.gemini_api_key)

    async def complete(self, prompt: str) -> str:
        url = (
            f"{self._settings.gemini_base_url.rstrip('/')}/"
            f"{self._settings.gemini_model}:generateContent"
        )
        resp = await self._client.post(
            url,
            params={"key": self._settings.gemini_api_key},
            json={
                "contents": [{"parts": [{"text": prompt}]}],
                "generationConfig": {
                    "temperature": 0.2,
                    "responseMimeType": "application/json",
                },
            },
        )
        if resp.status_code != 200:
            raise AdapterFailure(self.label, f"HTTP {resp.status_code}: {resp.text[:200]}")
        data = resp.json()
        try:
            parts = data["candidates"][0]["content"]["parts"]
        except (KeyError, IndexError, TypeError) as e:
            raise MalformedPayload(self.label, "unexpected response format") from e
        return "".join(p.get("text", "") for p in parts)
