"""Unit tests for provider adapters and usage extraction."""

from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest
from langchain_core.messages import AIMessage, HumanMessage, SystemMessage

from roundtable.providers import AdapterRegistry, ModelProvider, PromptPayload, TokenUsage
from roundtable.providers.adapters import AnthropicAdapter, GeminiAdapter, OpenAIAdapter
from roundtable.providers.adapters.openai_adapter import is_reasoning_model
from roundtable.providers.base import REFERENCE_DOCUMENT_HEADER, content_to_text


def _prompt(context="Shared board") -> PromptPayload:
    return PromptPayload(system="You are Alice.", user="Topic: X", cacheable_context=context)


def test_registry_maps_each_provider():
    assert isinstance(AdapterRegistry.get(ModelProvider.OPENAI), OpenAIAdapter)
    assert isinstance(AdapterRegistry.get(ModelProvider.ANTHROPIC), AnthropicAdapter)
    assert isinstance(AdapterRegistry.get(ModelProvider.GOOGLE), GeminiAdapter)
    assert set(AdapterRegistry.list_providers()) == set(ModelProvider)


def test_openai_puts_reference_document_first():
    messages = OpenAIAdapter().build_messages(_prompt())

    assert [type(m) for m in messages] == [SystemMessage, SystemMessage, HumanMessage]
    assert messages[0].content.startswith(REFERENCE_DOCUMENT_HEADER)
    assert "Shared board" in messages[0].content
    assert messages[1].content == "You are Alice."


def test_openai_without_context_sends_two_messages():
    messages = OpenAIAdapter().build_messages(_prompt(context=None))

    assert [type(m) for m in messages] == [SystemMessage, HumanMessage]


def test_anthropic_marks_reference_block_cacheable():
    messages = AnthropicAdapter().build_messages(_prompt())

    blocks = messages[0].content
    assert isinstance(blocks, list)
    assert blocks[0]["cache_control"] == {"type": "ephemeral"}
    assert "Shared board" in blocks[0]["text"]
    assert blocks[1]["text"] == "You are Alice."
    assert "cache_control" not in blocks[1]
    assert isinstance(messages[1], HumanMessage)


def test_gemini_primes_with_reference_exchange():
    messages = GeminiAdapter().build_messages(_prompt())

    assert [type(m) for m in messages] == [SystemMessage, HumanMessage, AIMessage, HumanMessage]
    assert "Shared board" in messages[1].content
    assert messages[-1].content == "Topic: X"


@pytest.mark.parametrize(
    "model,expected",
    [("o1-mini", True), ("o3-mini", True), ("gpt-5", True), ("gpt-5-mini", True), ("gpt-4o", False)],
)
def test_reasoning_model_detection(model, expected):
    assert is_reasoning_model(model) is expected


def test_content_to_text_handles_blocks():
    content = [{"type": "thinking", "thinking": "hmm"}, {"type": "text", "text": "Hello"}, " world"]
    assert content_to_text(content) == "Hello world"
    assert content_to_text("plain") == "plain"
    assert content_to_text(None) == ""


def test_usage_extracted_with_cache_details():
    message = SimpleNamespace(
        usage_metadata={
            "input_tokens": 120,
            "output_tokens": 30,
            "total_tokens": 150,
            "input_token_details": {"cache_read": 100, "cache_creation": 0},
        },
        response_metadata={},
    )

    usage = TokenUsage.extract_from_message(message)

    assert usage.prompt_tokens == 120
    assert usage.completion_tokens == 30
    assert usage.cache_read_tokens == 100
    assert usage.cache_creation_tokens == 0


def test_usage_combine_skips_missing():
    combined = TokenUsage.combine([
        TokenUsage(prompt_tokens=1, completion_tokens=2, total_tokens=3),
        None,
        TokenUsage(prompt_tokens=4, completion_tokens=5, total_tokens=9, cache_read_tokens=2),
    ])

    assert combined.prompt_tokens == 5
    assert combined.total_tokens == 12
    assert combined.cache_read_tokens == 2
    assert TokenUsage.combine([None]) is None


@pytest.mark.asyncio
async def test_base_invoke_normalizes_response():
    reply = AIMessage(
        content=[{"type": "text", "text": "Answer"}],
        usage_metadata={"input_tokens": 5, "output_tokens": 2, "total_tokens": 7},
        response_metadata={"stop_reason": "end_turn"},
    )
    llm = SimpleNamespace(ainvoke=AsyncMock(return_value=reply))

    response = await AnthropicAdapter().invoke(llm, [HumanMessage(content="hi")])

    assert response.content == "Answer"
    assert response.usage.total_tokens == 7
    assert response.finish_reason == "end_turn"
