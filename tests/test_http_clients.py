"""Tests for the OpenAI narrative adapter."""

import asyncio

import pytest

from nutrition_insights.adapters.openai_narrative_client import OpenAINarrativeClient


class _FakeResponses:
    def __init__(self, output_text: str) -> None:
        self.output_text = output_text
        self.last_payload: dict[str, object] | None = None

    async def create(self, **kwargs):  # type: ignore[no-untyped-def]
        self.last_payload = kwargs
        return type("Resp", (), {"output_text": self.output_text})()


class _FakeOpenAI:
    def __init__(self, output_text: str = "Nice work this week.") -> None:
        self.responses = _FakeResponses(output_text)
        self.closed = False

    async def close(self) -> None:
        self.closed = True


def test_openai_narrative_client_plain_text() -> None:
    fake = _FakeOpenAI()
    client = OpenAINarrativeClient(client=fake)

    result = asyncio.run(
        client.generate(
            model="gpt-5.2",
            store=False,
            instructions="You are a nutrition insight assistant.",
            message="Generate a weekly recap.",
        )
    )

    assert result == "Nice work this week."
    payload = fake.responses.last_payload
    assert payload is not None
    assert payload["instructions"] == "You are a nutrition insight assistant."
    assert payload["input"] == "Generate a weekly recap."
    assert "text" not in payload


def test_openai_narrative_client_structured_output() -> None:
    fake = _FakeOpenAI('{"insights": []}')
    client = OpenAINarrativeClient(client=fake)

    asyncio.run(
        client.generate(
            model="gpt-5.2",
            store=True,
            instructions="instructions",
            message="message",
            schema={"type": "object"},
        )
    )

    payload = fake.responses.last_payload
    assert payload is not None
    assert payload["store"] is True
    text_format = payload["text"]["format"]  # type: ignore[index]
    assert text_format["type"] == "json_schema"
    assert text_format["schema"] == {"type": "object"}


def test_openai_narrative_client_empty_output_raises() -> None:
    client = OpenAINarrativeClient(client=_FakeOpenAI(""))

    with pytest.raises(RuntimeError, match="empty response"):
        asyncio.run(
            client.generate(
                model="gpt-5.2", store=False, instructions="i", message="m"
            )
        )


def test_openai_narrative_client_close() -> None:
    fake = _FakeOpenAI()

    asyncio.run(OpenAINarrativeClient(client=fake).close())

    assert fake.closed is True
