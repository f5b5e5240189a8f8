"""
Tests for the OpenAI-backed sentiment analyzer, using a stub client.
"""

import json
from types import SimpleNamespace

import pytest

from signal_monitor.models import DEGRADED_RATIONALE, NEUTRAL_SCORE
from signal_monitor.sentiment.analyzer import SentimentAnalyzer, parse_score_reply


class StubCompletions:
    def __init__(self, content=None, error=None):
        self.content = content
        self.error = error
        self.kwargs = None

    async def create(self, **kwargs):
        self.kwargs = kwargs
        if self.error:
            raise self.error
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def stub_client(content=None, error=None):
    completions = StubCompletions(content, error)
    return SimpleNamespace(chat=SimpleNamespace(completions=completions)), completions


@pytest.mark.asyncio
async def test_score_parses_json_reply():
    client, completions = stub_client(
        'Sure: {"score": 0.92, "reasoning": "Calls to buy", "isBullish": true}'
    )
    analyzer = SentimentAnalyzer(client=client, model="gpt-4o-mini")

    result = await analyzer.score("$PENGU is sending", "$PENGU")

    assert result.score == 0.92
    assert result.rationale == "Calls to buy"
    assert result.degraded is False
    assert completions.kwargs["model"] == "gpt-4o-mini"
    assert completions.kwargs["temperature"] == 0.3
    assert completions.kwargs["max_tokens"] == 150
    assert "$PENGU" in completions.kwargs["messages"][1]["content"]


@pytest.mark.asyncio
async def test_default_subject_hint():
    client, completions = stub_client('{"score": 0.4, "reasoning": "meh"}')
    await SentimentAnalyzer(client=client).score("hello")
    assert "the project" in completions.kwargs["messages"][1]["content"]


@pytest.mark.parametrize("raw,expected", [(1.7, 1.0), (-0.3, 0.0), ("0.6", 0.6)])
def test_score_clamped(raw, expected):
    result = parse_score_reply(json.dumps({"score": raw, "reasoning": "x"}))
    assert result.score == expected


@pytest.mark.parametrize("reply", [
    "I cannot help with that",
    '{"score": "very bullish", "reasoning": "x"}',
    '{"reasoning": "no score"}',
    '{"score": true}',
    "{broken json",
    "",
])
def test_unparseable_replies(reply):
    assert parse_score_reply(reply) is None


@pytest.mark.asyncio
async def test_upstream_error_degrades_to_neutral():
    client, _ = stub_client(error=RuntimeError("connection reset"))
    result = await SentimentAnalyzer(client=client).score("text")
    assert result.score == NEUTRAL_SCORE
    assert result.rationale == DEGRADED_RATIONALE
    assert result.degraded is True


@pytest.mark.asyncio
async def test_garbage_reply_degrades_to_neutral():
    client, _ = stub_client("no json here")
    result = await SentimentAnalyzer(client=client).score("text")
    assert result.degraded is True
    assert result.score == NEUTRAL_SCORE


@pytest.mark.asyncio
async def test_missing_api_key_degrades_to_neutral():
    analyzer = SentimentAnalyzer(api_key="")
    assert analyzer.available is False
    result = await analyzer.score("text")
    assert result.degraded is True
