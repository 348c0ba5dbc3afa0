from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from pathlib import Path

import pytest

from audiodigest.config import PipelineSettings
from audiodigest.exceptions import ConversionError, ProviderError
from audiodigest.providers.asr.base import ASRProvider
from audiodigest.providers.audio.base import AudioProvider
from audiodigest.providers.llm.base import LLMProvider, Message
from audiodigest.storage.artifact_store import LocalArtifactStore


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch, tmp_path) -> None:
    for key in (
        "AUDIODIGEST_AI_API_KEY",
        "AUDIODIGEST_CHUNK_MAX_CHARS",
        "AUDIODIGEST_CONCURRENT_RUNS",
        "AUDIODIGEST_BASE_DIR",
    ):
        monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture()
def settings() -> PipelineSettings:
    return PipelineSettings(ai_api_key="sk-test", chunk_max_chars=40)


@pytest.fixture()
def store() -> LocalArtifactStore:
    return LocalArtifactStore()


@dataclass
class FakeAudioProvider(AudioProvider):
    calls: list[tuple[str, str]] = field(default_factory=list)
    events: list[str] = field(default_factory=list)
    fail: bool = False
    block: asyncio.Event | None = None

    async def convert_to_mp3(self, input_path: str, output_path: str) -> str:
        self.calls.append((input_path, output_path))
        self.events.append(f"convert:{Path(input_path).name}->{Path(output_path).name}")
        Path(output_path).write_bytes(b"partial-mp3")
        if self.block is not None:
            await self.block.wait()
        if self.fail:
            raise ConversionError("ffmpeg failed (code=1): boom", returncode=1, stderr="boom")
        Path(output_path).write_bytes(b"mp3")
        return output_path


@dataclass
class FakeASRProvider(ASRProvider):
    text: str = "1\n00:00:01,000 --> 00:00:02,000\nhello\n"
    calls: list[tuple[str, str, str | None]] = field(default_factory=list)
    events: list[str] = field(default_factory=list)
    write_output: bool = True
    output_format: str = "srt"

    async def transcribe(self, audio_path: str, output_base: str, language: str | None = None) -> str:
        self.calls.append((audio_path, output_base, language))
        out = Path(f"{output_base}.{self.output_format}")
        self.events.append(f"transcribe:{Path(audio_path).name}->{out.name}")
        if self.write_output:
            out.write_text(self.text, encoding="utf-8")
        return str(out)


@dataclass
class FakeLLMProvider(LLMProvider):
    responses: list[str] | None = None
    fail_at: int | None = None
    calls: list[list[Message]] = field(default_factory=list)
    temperatures: list[float] = field(default_factory=list)
    events: list[str] = field(default_factory=list)
    closed: int = 0

    async def complete(
        self,
        messages: list[Message],
        temperature: float = 0.3,
    ) -> str:
        index = len(self.calls)
        self.calls.append(list(messages))
        self.temperatures.append(temperature)
        self.events.append(f"llm:{index}")
        if self.fail_at is not None and index == self.fail_at:
            raise ProviderError("openai", "HTTP 500 Internal Server Error")
        if self.responses is not None:
            return self.responses[index]
        return f"00:00:0{index} --- part {index}"

    async def close(self) -> None:
        self.closed += 1


@dataclass
class Fakes:
    audio: FakeAudioProvider
    asr: FakeASRProvider
    llm: FakeLLMProvider
    events: list[str]


@pytest.fixture()
def fakes(monkeypatch) -> Fakes:
    events: list[str] = []
    audio = FakeAudioProvider(events=events)
    asr = FakeASRProvider(events=events)
    llm = FakeLLMProvider(events=events)
    monkeypatch.setattr("audiodigest.stages.convert.get_audio_provider", lambda _s: audio)
    monkeypatch.setattr("audiodigest.stages.transcribe.get_asr_provider", lambda _s: asr)
    monkeypatch.setattr("audiodigest.stages.summarize.get_llm_provider", lambda _s: llm)
    return Fakes(audio=audio, asr=asr, llm=llm, events=events)
