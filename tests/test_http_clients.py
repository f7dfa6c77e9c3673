"""Tests for the OpenAI adapter."""

import asyncio
import json

import pytest

from nutri_ledger.adapters.openai_vision_client import OpenAIVisionClient
from nutri_ledger.domain.errors import AnalysisFailure


class _FakeResponses:
    def __init__(self, output_text: str) -> None:
        self.output_text = output_text
        self.last_payload: dict[str, object] | None = None

    async def create(self, **kwargs):  # type: ignore[no-untyped-def]
        self.last_payload = kwargs
        return type("Resp", (), {"output_text": self.output_text})()


class _FakeOpenAI:
    def __init__(self, output_text: str = json.dumps({"met": 7.0})) -> None:
        self.responses = _FakeResponses(output_text)
        self.closed = False

    async def close(self) -> None:
        self.closed = True


def test_openai_vision_client_parses_output() -> None:
    fake = _FakeOpenAI()
    client = OpenAIVisionClient(client=fake)  # type: ignore[arg-type]

    result = asyncio.run(
        client.extract(
            model="gpt-5.2",
            reasoning_effort="high",
            store=False,
            prompt="MET for running",
            schema={"type": "object"},
            schema_name="met_estimate",
        )
    )

    assert result == {"met": 7.0}
    payload = fake.responses.last_payload
    assert payload is not None
    assert payload["reasoning"] == {"effort": "high"}
    assert payload["text"]["format"]["name"] == "met_estimate"  # type: ignore[index]
    content = payload["input"][0]["content"]  # type: ignore[index]
    assert [part["type"] for part in content] == ["input_text"]


def test_openai_vision_client_sends_image() -> None:
    fake = _FakeOpenAI(json.dumps({"title": "x"}))
    client = OpenAIVisionClient(client=fake)  # type: ignore[arg-type]

    asyncio.run(
        client.extract(
            model="gpt-5.2",
            reasoning_effort=None,
            store=False,
            prompt="Analyze",
            schema={"type": "object"},
            schema_name="meal_analysis",
            image_data_url="data:image/jpeg;base64,ZmFrZQ==",
        )
    )

    payload = fake.responses.last_payload
    assert payload is not None
    assert "reasoning" not in payload
    content = payload["input"][0]["content"]  # type: ignore[index]
    assert content[1] == {
        "type": "input_image",
        "image_url": "data:image/jpeg;base64,ZmFrZQ==",
    }


@pytest.mark.parametrize("output_text", ["", "not json"])
def test_openai_vision_client_rejects_unusable_output(output_text: str) -> None:
    client = OpenAIVisionClient(client=_FakeOpenAI(output_text))  # type: ignore[arg-type]

    with pytest.raises(AnalysisFailure):
        asyncio.run(
            client.extract(
                model="gpt-5.2",
                reasoning_effort=None,
                store=False,
                prompt="Analyze",
                schema={"type": "object"},
                schema_name="meal_analysis",
            )
        )


def test_openai_vision_client_close() -> None:
    fake = _FakeOpenAI()
    client = OpenAIVisionClient(client=fake)  # type: ignore[arg-type]

    asyncio.run(client.close())

    assert fake.closed
