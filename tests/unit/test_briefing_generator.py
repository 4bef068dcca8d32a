"""Unit tests for BriefingGenerator (Gemini client mocked)"""

from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
from google.genai import errors as genai_errors

from newsbrief.briefing.errors import GenerationFailure
from newsbrief.briefing.generator import (
    FALLBACK_MESSAGE,
    BriefingGenerator,
    extract_text,
    strip_code_fence,
)
from newsbrief.observability.telemetry import get_counter


def make_response(*texts):
    parts = [SimpleNamespace(text=text) for text in texts]
    return SimpleNamespace(candidates=[SimpleNamespace(content=SimpleNamespace(parts=parts))])


@pytest.fixture
def client():
    return MagicMock()


@pytest.fixture
def generator(client):
    return BriefingGenerator(model="gemini-test", client_factory=MagicMock(return_value=client))


def test_generate_returns_html(generator, client, complete_config):
    client.models.generate_content.return_value = make_response("<h1>Today</h1>")

    assert generator.generate(complete_config) == "<h1>Today</h1>"


def test_request_uses_user_key_model_and_search_tool(client, complete_config):
    factory = MagicMock(return_value=client)
    client.models.generate_content.return_value = make_response("<p>ok</p>")
    generator = BriefingGenerator(model="gemini-test", client_factory=factory)

    generator.generate(complete_config)

    factory.assert_called_once_with("AIzaTestKey-0001")
    call = client.models.generate_content.call_args
    assert call.kwargs["model"] == "gemini-test"
    assert "smart farming, food prices" in call.kwargs["contents"]
    assert "Reuters, https://www.nongmin.com" in call.kwargs["contents"]
    tools = call.kwargs["config"].tools
    assert len(tools) == 1
    assert tools[0].google_search is not None


def test_one_request_per_call(generator, client, complete_config):
    client.models.generate_content.return_value = make_response("<p>ok</p>")

    generator.generate(complete_config)

    assert client.models.generate_content.call_count == 1


def test_text_parts_are_concatenated(generator, client, complete_config):
    client.models.generate_content.return_value = make_response("<h1>A</h1>", "<p>B</p>")

    assert generator.generate(complete_config) == "<h1>A</h1><p>B</p>"


def test_code_fence_is_stripped(generator, client, complete_config):
    client.models.generate_content.return_value = make_response("```html\n<h1>Today</h1>\n```")

    assert generator.generate(complete_config) == "<h1>Today</h1>"


@pytest.mark.parametrize(
    "response",
    [
        SimpleNamespace(candidates=[]),
        SimpleNamespace(candidates=None),
        SimpleNamespace(candidates=[SimpleNamespace(content=None)]),
        SimpleNamespace(candidates=[SimpleNamespace(content=SimpleNamespace(parts=[]))]),
        make_response(""),
        SimpleNamespace(),
    ],
)
def test_missing_fields_yield_fallback_result(generator, client, complete_config, response):
    client.models.generate_content.return_value = response

    result = generator.request(complete_config)

    assert result.ok is False
    assert result.html == FALLBACK_MESSAGE
    assert get_counter("briefing.generate.empty_responses") == 1


def test_content_failure_is_distinguishable(generator, client, complete_config):
    client.models.generate_content.return_value = SimpleNamespace(candidates=[])

    with pytest.raises(GenerationFailure) as exc_info:
        generator.generate(complete_config)

    assert exc_info.value.kind == GenerationFailure.CONTENT
    assert exc_info.value.stage == "generate"


def test_api_error_is_transport_failure(generator, client, complete_config):
    client.models.generate_content.side_effect = genai_errors.ClientError(
        400,
        {"error": {"code": 400, "message": "API key not valid", "status": "INVALID_ARGUMENT"}},
    )

    with pytest.raises(GenerationFailure) as exc_info:
        generator.generate(complete_config)

    assert exc_info.value.kind == GenerationFailure.TRANSPORT
    assert "400" in exc_info.value.message
    assert "AIzaTestKey-0001" not in exc_info.value.message
    assert get_counter("briefing.generate.transport_errors") == 1


def test_network_error_is_transport_failure(generator, client, complete_config):
    client.models.generate_content.side_effect = ConnectionError("connection reset")

    with pytest.raises(GenerationFailure) as exc_info:
        generator.generate(complete_config)

    assert exc_info.value.kind == GenerationFailure.TRANSPORT
    assert isinstance(exc_info.value.__cause__, ConnectionError)


def test_extract_text_ignores_non_text_parts():
    response = make_response("<p>x</p>")
    response.candidates[0].content.parts.append(SimpleNamespace(text=None))

    assert extract_text(response) == "<p>x</p>"


def test_strip_code_fence_leaves_plain_html():
    assert strip_code_fence("<h1>x</h1>") == "<h1>x</h1>"
    assert strip_code_fence("```\n<p>y</p>\n```") == "<p>y</p>"
