"""AnalysisClient backend tests"""
import pytest
from unittest.mock import AsyncMock, MagicMock, patch

INSTRUCTION = "Return JSON only."


def claude_response(text: str) -> MagicMock:
    response = MagicMock()
    response.content = [MagicMock(type="text", text=text)]
    return response


def openai_response(text: str | None) -> MagicMock:
    choice = MagicMock()
    choice.message.content = text
    response = MagicMock()
    response.choices = [choice]
    return response


# ── ClaudeAnalysisClient ──────────────────────────────────────────────────────


async def test_claude_analyze_sends_image_with_mime_type():
    from exam_tutor.vision.claude import ClaudeAnalysisClient

    client = ClaudeAnalysisClient(api_key="test-key")

    with patch("exam_tutor.vision.claude.AsyncAnthropic") as mock_cls:
        mock_anthropic = AsyncMock()
        mock_anthropic.messages.create = AsyncMock(return_value=claude_response("{}"))
        mock_cls.return_value = mock_anthropic

        await client.analyze(b"fake-image-bytes", "image/png", INSTRUCTION)

    mock_anthropic.messages.create.assert_called_once()
    call_kwargs = mock_anthropic.messages.create.call_args.kwargs
    content = call_kwargs["messages"][0]["content"]
    image_blocks = [b for b in content if b["type"] == "image"]
    assert image_blocks[0]["source"]["media_type"] == "image/png"


async def test_claude_analyze_sends_instruction_as_system_prompt():
    from exam_tutor.vision.claude import ClaudeAnalysisClient

    client = ClaudeAnalysisClient(api_key="test-key", model="claude-test")

    with patch("exam_tutor.vision.claude.AsyncAnthropic") as mock_cls:
        mock_anthropic = AsyncMock()
        mock_anthropic.messages.create = AsyncMock(return_value=claude_response("{}"))
        mock_cls.return_value = mock_anthropic

        await client.analyze(b"bytes", "image/jpeg", INSTRUCTION)

    call_kwargs = mock_anthropic.messages.create.call_args.kwargs
    assert call_kwargs["system"] == INSTRUCTION
    assert call_kwargs["model"] == "claude-test"


async def test_claude_analyze_returns_stripped_text():
    from exam_tutor.vision.claude import ClaudeAnalysisClient

    client = ClaudeAnalysisClient(api_key="test-key")

    with patch("exam_tutor.vision.claude.AsyncAnthropic") as mock_cls:
        mock_anthropic = AsyncMock()
        mock_anthropic.messages.create = AsyncMock(return_value=claude_response("  {\"a\": 1} \n"))
        mock_cls.return_value = mock_anthropic

        result = await client.analyze(b"bytes", "image/png", INSTRUCTION)

    assert result == "{\"a\": 1}"


async def test_claude_analyze_uses_query_when_provided():
    from exam_tutor.vision.claude import ClaudeAnalysisClient
    from exam_tutor.constants import MSG_DEFAULT_QUERY

    client = ClaudeAnalysisClient(api_key="test-key")

    with patch("exam_tutor.vision.claude.AsyncAnthropic") as mock_cls:
        mock_anthropic = AsyncMock()
        mock_anthropic.messages.create = AsyncMock(return_value=claude_response("{}"))
        mock_cls.return_value = mock_anthropic

        await client.analyze(b"bytes", "image/png", INSTRUCTION, "Why is option B wrong?")
        await client.analyze(b"bytes", "image/png", INSTRUCTION)

    first, second = mock_anthropic.messages.create.call_args_list
    text_of = lambda call: [b for b in call.kwargs["messages"][0]["content"] if b["type"] == "text"][0]["text"]
    assert text_of(first) == "Why is option B wrong?"
    assert text_of(second) == MSG_DEFAULT_QUERY


async def test_claude_analyze_raises_on_api_error():
    from exam_tutor.vision.claude import ClaudeAnalysisClient

    client = ClaudeAnalysisClient(api_key="test-key")

    with patch("exam_tutor.vision.claude.AsyncAnthropic") as mock_cls:
        mock_anthropic = AsyncMock()
        mock_anthropic.messages.create = AsyncMock(side_effect=RuntimeError("API down"))
        mock_cls.return_value = mock_anthropic

        with pytest.raises(RuntimeError):
            await client.analyze(b"bytes", "image/png", INSTRUCTION)


# ── OpenAIAnalysisClient ──────────────────────────────────────────────────────


async def test_openai_analyze_sends_data_url_and_system_message():
    from exam_tutor.vision.openai import OpenAIAnalysisClient

    client = OpenAIAnalysisClient(api_key="test-key")

    with patch("exam_tutor.vision.openai.AsyncOpenAI") as mock_cls:
        mock_openai = AsyncMock()
        mock_openai.chat.completions.create = AsyncMock(return_value=openai_response("{}"))
        mock_cls.return_value = mock_openai

        await client.analyze(b"fake-image-bytes", "image/webp", INSTRUCTION)

    mock_openai.chat.completions.create.assert_called_once()
    messages = mock_openai.chat.completions.create.call_args.kwargs["messages"]
    assert messages[0] == {"role": "system", "content": INSTRUCTION}
    image_blocks = [b for b in messages[1]["content"] if b["type"] == "image_url"]
    assert image_blocks[0]["image_url"]["url"].startswith("data:image/webp;base64,")


async def test_openai_analyze_returns_stripped_text():
    from exam_tutor.vision.openai import OpenAIAnalysisClient

    client = OpenAIAnalysisClient(api_key="test-key")

    with patch("exam_tutor.vision.openai.AsyncOpenAI") as mock_cls:
        mock_openai = AsyncMock()
        mock_openai.chat.completions.create = AsyncMock(return_value=openai_response("  {} \n"))
        mock_cls.return_value = mock_openai

        result = await client.analyze(b"bytes", "image/png", INSTRUCTION)

    assert result == "{}"


async def test_openai_analyze_empty_content_returns_empty_string():
    from exam_tutor.vision.openai import OpenAIAnalysisClient

    client = OpenAIAnalysisClient(api_key="test-key")

    with patch("exam_tutor.vision.openai.AsyncOpenAI") as mock_cls:
        mock_openai = AsyncMock()
        mock_openai.chat.completions.create = AsyncMock(return_value=openai_response(None))
        mock_cls.return_value = mock_openai

        result = await client.analyze(b"bytes", "image/png", INSTRUCTION)

    assert result == ""


async def test_openai_analyze_raises_on_api_error():
    from exam_tutor.vision.openai import OpenAIAnalysisClient

    client = OpenAIAnalysisClient(api_key="test-key")

    with patch("exam_tutor.vision.openai.AsyncOpenAI") as mock_cls:
        mock_openai = AsyncMock()
        mock_openai.chat.completions.create = AsyncMock(side_effect=RuntimeError("API down"))
        mock_cls.return_value = mock_openai

        with pytest.raises(RuntimeError):
            await client.analyze(b"bytes", "image/png", INSTRUCTION)
