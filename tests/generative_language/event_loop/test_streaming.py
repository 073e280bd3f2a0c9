import json

import pytest

from generative_language.event_loop.streaming import StreamAssembler, StreamState, assemble_stream
from generative_language.types.content import Content, FunctionCallPart, TextPart
from generative_language.types.exceptions import (
    DecodeError,
    EmptyContentError,
    PromptBlockedError,
    ResponseStoppedEarlyError,
)
from generative_language.types.json import JSONNumber
from generative_language.types.response import FinishReason, UsageMetadata


def fragment(*parts, finish_reason=None, usage=None):
    candidate = {"content": {"role": "model", "parts": list(parts)}}
    if finish_reason is not None:
        candidate["finishReason"] = finish_reason
    payload = {"candidates": [candidate]}
    if usage is not None:
        payload["usageMetadata"] = usage
    return json.dumps(payload).encode()


@pytest.fixture
def hello_lines():
    return [
        fragment({"text": "Hello, "}, usage={"promptTokenCount": 2}),
        fragment({"text": "world"}),
        fragment({"text": "!"}),
        fragment(finish_reason="STOP", usage={"promptTokenCount": 2, "candidatesTokenCount": 3, "totalTokenCount": 5}),
    ]


@pytest.fixture
def committed():
    return []


@pytest.mark.asyncio
async def test_assemble_stream_text(hello_lines, committed, agenerator, alist):
    assembler = StreamAssembler()

    tru_fragments = await alist(assemble_stream(agenerator(hello_lines), committed.append, assembler))

    assert len(tru_fragments) == 4
    assert [f.text for f in tru_fragments[:3]] == ["Hello, ", "world", "!"]
    assert committed == [Content("model", (TextPart("Hello, world!"),))]
    assert assembler.state == StreamState.COMPLETED
    assert assembler.usage_metadata == UsageMetadata(2, 3, 5)


@pytest.mark.asyncio
async def test_assemble_stream_decode_failure_commits_nothing(committed, agenerator, alist):
    lines = [fragment({"text": "a"}), fragment({"text": "b"}), b"{broken", fragment({"text": "d"}), fragment()]
    assembler = StreamAssembler()
    received = []

    with pytest.raises(DecodeError):
        async for item in assemble_stream(agenerator(lines), committed.append, assembler):
            received.append(item)

    assert len(received) == 2
    assert committed == []
    assert assembler.state == StreamState.FAILED


@pytest.mark.asyncio
async def test_assemble_stream_empty_content(committed, agenerator, alist):
    lines = [fragment({"text": "a"}), json.dumps({"candidates": [{"content": {}}]}).encode()]

    with pytest.raises(EmptyContentError):
        await alist(assemble_stream(agenerator(lines), committed.append))

    assert committed == []


@pytest.mark.asyncio
async def test_assemble_stream_abandoned_commits_nothing(hello_lines, committed, agenerator):
    stream = assemble_stream(agenerator(hello_lines), committed.append)

    async for _ in stream:
        break
    await stream.aclose()

    assert committed == []


@pytest.mark.asyncio
async def test_assemble_stream_closes_source(hello_lines, committed, alist):
    closed = []

    async def source():
        try:
            for line in hello_lines:
                yield line
        finally:
            closed.append(True)

    stream = assemble_stream(source(), committed.append)
    async for _ in stream:
        break
    await stream.aclose()

    assert closed == [True]


@pytest.mark.asyncio
async def test_assemble_stream_stopped_early(committed, agenerator, alist):
    lines = [fragment({"text": "Once upon"}), fragment({"text": " a time"}, finish_reason="MAX_TOKENS")]

    with pytest.raises(ResponseStoppedEarlyError) as exc_info:
        await alist(assemble_stream(agenerator(lines), committed.append))

    assert exc_info.value.reason == FinishReason.MAX_TOKENS
    assert exc_info.value.response.text == "Once upon a time"
    assert committed == []


@pytest.mark.asyncio
async def test_assemble_stream_prompt_blocked(committed, agenerator, alist):
    lines = [json.dumps({"promptFeedback": {"blockReason": "SAFETY"}}).encode()]

    with pytest.raises(PromptBlockedError):
        await alist(assemble_stream(agenerator(lines), committed.append))

    assert committed == []


@pytest.mark.asyncio
async def test_assemble_stream_empty(committed, agenerator, alist):
    with pytest.raises(DecodeError, match="without any response"):
        await alist(assemble_stream(agenerator([]), committed.append))

    assert committed == []


def test_merge_keeps_non_text_parts_whole():
    assembler = StreamAssembler()

    assembler.feed(fragment({"text": "Let me "}, {"text": "add."}))
    assembler.feed(fragment({"functionCall": {"name": "sum", "args": {"x": 1}}}))
    assembler.feed(fragment({"text": "Done"}, finish_reason="STOP"))

    tru_content = assembler.finish()
    exp_content = Content(
        "model",
        (TextPart("Let me add."), FunctionCallPart("sum", {"x": JSONNumber(1)}), TextPart("Done")),
    )

    assert tru_content == exp_content


def test_usage_metadata_only_after_completion():
    assembler = StreamAssembler()

    assembler.feed(fragment({"text": "a"}, usage={"promptTokenCount": 1}))

    assert assembler.state == StreamState.RECEIVING
    assert assembler.usage_metadata is None


def test_feed_malformed_usage_fails_stream():
    assembler = StreamAssembler()

    with pytest.raises(DecodeError, match="promptTokenCount"):
        assembler.feed(fragment({"text": "a"}, usage={"promptTokenCount": "abc"}))

    assert assembler.state == StreamState.FAILED


def test_feed_after_failure():
    assembler = StreamAssembler()

    with pytest.raises(DecodeError):
        assembler.feed(b"nope")

    with pytest.raises(ValueError, match="cannot feed a finished stream"):
        assembler.feed(fragment({"text": "a"}))
