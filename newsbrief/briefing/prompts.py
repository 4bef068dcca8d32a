"""Prompt construction for the news briefing request."""

from __future__ import annotations

from newsbrief.config import (
    BRIEFING_HEADLINE_COUNT,
    BRIEFING_INDUSTRY,
    BRIEFING_LANGUAGE,
    PROMPT_ITEM_MAX_CHARS,
)
from newsbrief.utils.redaction import sanitize_for_prompt

GENERIC_TOPICS = "the most important general news of the day"
GENERIC_SOURCES = "any reputable news outlet"

BRIEFING_PROMPT_TEMPLATE = """Search today's major news based on the keywords and sources below and write a briefing.
Keywords: {keywords}
Sources: {sources}

Format:
1. Top {headline_count} headlines
2. Detailed news (a summary for each item, with a link to its source)
3. Implications for the {industry} industry

Write the briefing in {language} and output it as HTML only.
"""


def _join(items: list[str]) -> str:
    cleaned = [sanitize_for_prompt(item, max_length=PROMPT_ITEM_MAX_CHARS) for item in items]
    return ", ".join(item for item in cleaned if item)


def build_briefing_prompt(
    keywords: list[str],
    sources: list[str],
    headline_count: int = BRIEFING_HEADLINE_COUNT,
    language: str = BRIEFING_LANGUAGE,
    industry: str = BRIEFING_INDUSTRY,
) -> str:
    """
    Build the generation instruction for one briefing.

    Keywords and sources are joined with ", " in the order the user saved
    them. Empty lists fall back to a generic instruction.
    """
    return BRIEFING_PROMPT_TEMPLATE.format(
        keywords=_join(keywords) or GENERIC_TOPICS,
        sources=_join(sources) or GENERIC_SOURCES,
        headline_count=headline_count,
        industry=industry,
        language=language,
    )
