"""
Sentiment Analyzer
==================

Scores a post's bullishness with an OpenAI chat model.

score() never raises: a missing API key, a failed request or an
unparseable reply all yield ScoreResult.neutral().
"""

import json
import logging
import math
import re
from typing import Optional

from openai import AsyncOpenAI

from ..config import config
from ..models import ScoreResult

logger = logging.getLogger(__name__)

DEFAULT_SUBJECT = "the project"

SYSTEM_PROMPT = (
    "You are a crypto sentiment analyst. Rate how bullish a post is about a "
    "specific project.\n"
    "Respond ONLY with valid JSON in this exact format:\n"
    '{"score": 0.0-1.0, "reasoning": "brief explanation", "isBullish": true/false}\n'
    "\n"
    "Score guide:\n"
    "- 0.0-0.3: bearish or negative\n"
    "- 0.3-0.5: neutral or uncertain\n"
    "- 0.5-0.7: mildly bullish\n"
    "- 0.7-0.9: bullish\n"
    "- 0.9-1.0: extremely bullish (calls to buy, major announcements)"
)

_JSON_OBJECT = re.compile(r"\{[\s\S]*\}")


def _get_openai_client(api_key: Optional[str]) -> Optional[AsyncOpenAI]:
    """Build a client only when an API key is available."""
    if not api_key:
        return None
    return AsyncOpenAI(api_key=api_key)


def parse_score_reply(content: str) -> Optional[ScoreResult]:
    """
    Parse the model reply into a ScoreResult.

    Returns:
        ScoreResult with the score clamped to [0, 1], or None if the reply
        holds no JSON object or its score is not a finite number
    """
    match = _JSON_OBJECT.search(content or "")
    if not match:
        return None

    try:
        data = json.loads(match.group(0))
    except ValueError:
        return None
    if not isinstance(data, dict):
        return None

    raw_score = data.get("score")
    if isinstance(raw_score, bool):
        return None
    try:
        score = float(raw_score)
    except (TypeError, ValueError):
        return None
    if math.isnan(score):
        return None

    return ScoreResult(
        score=max(0.0, min(1.0, score)),
        rationale=str(data.get("reasoning") or ""),
    )


class SentimentAnalyzer:
    """Bullishness scorer backed by the OpenAI chat completions API."""

    def __init__(
        self,
        client: AsyncOpenAI = None,
        model: str = None,
        api_key: str = None,
        temperature: float = 0.3,
        max_tokens: int = 150,
    ):
        self.model = model or config.openai_model
        self.temperature = temperature
        self.max_tokens = max_tokens
        if client is None:
            client = _get_openai_client(api_key if api_key is not None else config.openai_api_key)
        self._client = client

    @property
    def available(self) -> bool:
        return self._client is not None

    async def score(self, text: str, subject_hint: Optional[str] = None) -> ScoreResult:
        """
        Score a post's bullishness.

        Args:
            text: Post content
            subject_hint: Project or keyword the post is about

        Returns:
            ScoreResult; degraded neutral result on any upstream failure
        """
        if self._client is None:
            logger.debug("No OpenAI API key configured, returning neutral score")
            return ScoreResult.neutral()

        subject = subject_hint or DEFAULT_SUBJECT
        user_prompt = (
            f"Analyze this post's sentiment about {subject}:\n\n"
            f"\"{text}\"\n\n"
            "Is this post bullish or bearish? Return JSON only."
        )

        try:
            response = await self._client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": user_prompt},
                ],
                temperature=self.temperature,
                max_tokens=self.max_tokens,
            )
            content = (response.choices[0].message.content or "").strip()
        except Exception as e:
            logger.warning(f"Sentiment request failed: {e}")
            return ScoreResult.neutral()

        result = parse_score_reply(content)
        if result is None:
            logger.warning(f"Unparseable sentiment reply: {content[:120]!r}")
            return ScoreResult.neutral()
        return result

    async def close(self):
        if self._client is not None and hasattr(self._client, "close"):
            await self._client.close()
