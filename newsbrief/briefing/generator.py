"""
Briefing generation through Gemini with Google Search grounding.

Each call builds its own client because the API key belongs to the user
whose briefing is being generated. One request per call: no retries and no
caching. The upstream model is not deterministic, so callers must not rely
on identical output for identical input.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from newsbrief.briefing.errors import GenerationFailure
from newsbrief.briefing.prompts import build_briefing_prompt
from newsbrief.infrastructure.settings import GEMINI_MODEL, GEMINI_TEMPERATURE, GEMINI_TIMEOUT_MS
from newsbrief.observability.logging import get_logger
from newsbrief.observability.telemetry import counter, log_event, time_block
from newsbrief.storage.models import BriefingConfig

logger = get_logger(__name__)

FALLBACK_MESSAGE = "Failed to generate the news briefing."

_FENCE_RE = re.compile(r"^\s*```(?:html)?\s*\n?(.*?)\n?\s*```\s*$", re.DOTALL | re.IGNORECASE)


@dataclass(frozen=True)
class BriefingResult:
    """Outcome of one generation request. Transient, never persisted."""

    html: str
    ok: bool
    reason: str | None = None


def _default_client_factory(api_key: str) -> Any:
    return genai.Client(
        api_key=api_key,
        http_options=types.HttpOptions(timeout=GEMINI_TIMEOUT_MS),
    )


def extract_text(response: Any) -> str | None:
    """
    Text of the first candidate, or None when the response shape is incomplete.

    Grounded answers can arrive split over several parts; the text parts of
    the first candidate are concatenated in order.
    """
    try:
        parts = response.candidates[0].content.parts
        texts = [part.text for part in parts if getattr(part, "text", None)]
    except (AttributeError, IndexError, KeyError, TypeError):
        return None
    text = "".join(texts).strip()
    return text or None


def strip_code_fence(text: str) -> str:
    """Remove a ```html ... ``` wrapper the model sometimes adds around HTML."""
    match = _FENCE_RE.match(text)
    return match.group(1).strip() if match else text


class BriefingGenerator:
    """Builds the briefing prompt from a config and asks Gemini for HTML."""

    def __init__(
        self,
        model: str = GEMINI_MODEL,
        temperature: float = GEMINI_TEMPERATURE,
        client_factory: Callable[[str], Any] | None = None,
    ):
        self.model = model
        self.temperature = temperature
        self._client_factory = client_factory or _default_client_factory

    def request(self, config: BriefingConfig) -> BriefingResult:
        """
        Send one generation request.

        Returns:
            BriefingResult; ok=False with FALLBACK_MESSAGE as html when the
            response is missing the expected fields (content-level failure)

        Raises:
            GenerationFailure: kind="transport" on network, HTTP or API errors
        """
        prompt = build_briefing_prompt(config.keywords, config.sources)
        client = self._client_factory(config.api_key.get_secret_value())
        grounding_tool = types.Tool(google_search=types.GoogleSearch())
        gen_config = types.GenerateContentConfig(
            tools=[grounding_tool],
            temperature=self.temperature,
        )

        try:
            with time_block("briefing.generate.latency"):
                response = client.models.generate_content(
                    model=self.model,
                    contents=prompt,
                    config=gen_config,
                )
        except genai_errors.APIError as e:
            counter("briefing.generate.transport_errors")
            logger.warning("Gemini API error: code=%s status=%s", e.code, e.status)
            raise GenerationFailure(
                f"Gemini request failed ({e.code} {e.status or ''})".strip(),
                kind=GenerationFailure.TRANSPORT,
            ) from e
        except Exception as e:
            counter("briefing.generate.transport_errors")
            logger.warning("Gemini request failed: %s", type(e).__name__)
            raise GenerationFailure(
                f"Gemini request failed: {type(e).__name__}",
                kind=GenerationFailure.TRANSPORT,
            ) from e

        text = extract_text(response)
        if text is None:
            counter("briefing.generate.empty_responses")
            log_event("briefing.generate.empty", model=self.model)
            return BriefingResult(html=FALLBACK_MESSAGE, ok=False, reason="response had no text")

        return BriefingResult(html=strip_code_fence(text), ok=True)

    def generate(self, config: BriefingConfig) -> str:
        """
        Generate the briefing HTML for a config.

        Raises:
            GenerationFailure: transport errors, or kind="content" when the
            response had no usable text
        """
        result = self.request(config)
        if not result.ok:
            raise GenerationFailure(
                f"{FALLBACK_MESSAGE} ({result.reason})",
                kind=GenerationFailure.CONTENT,
            )
        return result.html
