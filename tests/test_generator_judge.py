"""Tests for Generator and Judge over the stub provider."""

from pathlib import Path

import pytest

from llm_refine.errors import ProtocolError
from llm_refine.provider import StubLLMProvider
from llm_refine.refine.generator import Generator
from llm_refine.refine.judge import Judge
from llm_refine.refine.prompts import REVERSE
from llm_refine.refine.transcripts import TranscriptStore


@pytest.mark.asyncio
async def test_generate_returns_reply_verbatim():
    provider = StubLLMProvider(["  fn main() {}\n"])
    result = await Generator(provider, max_tokens=64).generate("make main")
    assert result == "  fn main() {}\n"
    request = provider.requests[0]
    assert request.messages[0].content == "make main"
    assert request.max_tokens == 64
    assert request.temperature == 0.7


@pytest.mark.asyncio
async def test_generate_empty_reply_is_protocol_error():
    with pytest.raises(ProtocolError, match="empty generation"):
        await Generator(StubLLMProvider(["  \n"])).generate("p")


@pytest.mark.asyncio
async def test_generate_saves_transcripts(tmp_path: Path):
    store = TranscriptStore(tmp_path, tag="t")
    await Generator(StubLLMProvider(["out"]), transcripts=store).generate("in")
    assert (tmp_path / "t-gen.txt").read_text() == "in"
    assert (tmp_path / "t-gen-resp.txt").read_text() == "out"


@pytest.mark.asyncio
async def test_judge_returns_raw_reply_with_small_token_limit():
    provider = StubLLMProvider([" First result is better.\n"])
    judge = Judge(provider)
    reply = await judge.compare("spec", "one", "two")
    assert reply == " First result is better.\n"
    request = provider.requests[0]
    assert request.max_tokens == 100
    assert request.temperature == 0.1
    assert "<first-result>\none\n</first-result>" in request.messages[0].content


@pytest.mark.asyncio
async def test_judge_passes_diagnostics():
    provider = StubLLMProvider(["x"])
    await Judge(provider).compare("spec", "one", "two", ["e1"], [])
    assert "<first-compile-errors>\ne1\n</first-compile-errors>" in provider.requests[0].messages[0].content


@pytest.mark.asyncio
async def test_judge_reverse_prompts(tmp_path: Path):
    provider = StubLLMProvider(["The second spec is better."])
    store = TranscriptStore(tmp_path, tag="t")
    judge = Judge(provider, prompts=REVERSE, transcripts=store)
    await judge.compare("impl", "spec1", "spec2")
    assert judge.prompts is REVERSE
    assert "<first-specification>" in (tmp_path / "t-eval.txt").read_text()
    assert (tmp_path / "t-eval-resp.txt").read_text() == "The second spec is better."


def test_transcript_default_tag(tmp_path: Path):
    store = TranscriptStore(tmp_path)
    assert store.path_for("gen").name.startswith("llm-req-")
