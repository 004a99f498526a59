#!/usr/bin/env python3
"""
Configuration settings for the Wake Word Assistant using Pydantic.
"""

import os
from typing import Literal, Optional
from pydantic import BaseModel, Field, computed_field, ConfigDict, field_validator, model_validator

# Sample rates accepted by webrtcvad
WEBRTC_SAMPLE_RATES = (8000, 16000, 32000, 48000)


class Config(BaseModel):
    """
    Configuration class for the Wake Word Assistant using Pydantic for validation.

    Defaults follow the whisper.cpp assistant example: 16 kHz capture, a 10 s
    capture ring, 2 s poll windows, wake word 'test', 1 s of silence to end an
    utterance and qwen2.5 on a local Ollama server.
    """

    model_config = ConfigDict(
        extra='forbid',  # Don't allow extra fields
        validate_assignment=True,  # Validate on assignment
        frozen=False,
    )

    # Audio Configuration
    sample_rate: int = Field(
        default=16000,
        description="Audio sample rate in Hz",
        ge=8000,
        le=48000
    )

    capture_id: int = Field(
        default=-1,
        description="Capture device ID (-1 = system default)",
        ge=-1
    )

    length_ms: int = Field(
        default=10000,
        description="Capacity of the capture ring buffer (ms)",
        ge=1000,
        le=60000
    )

    window_ms: int = Field(
        default=2000,
        description="Audio window fetched and analysed on every poll cycle (ms)",
        ge=100,
        le=30000
    )

    step_ms: int = Field(
        default=3000,
        description="Longest time a poll cycle waits for fresh audio (ms)",
        ge=10,
        le=30000
    )

    # Voice Activity Detection
    vad_backend: Literal["energy", "webrtc"] = Field(
        default="energy",
        description="Speech detector implementation"
    )

    vad_last_ms: int = Field(
        default=1000,
        description="Trailing window inspected by the speech detector (ms)",
        ge=10,
        le=30000
    )

    vad_thold: float = Field(
        default=0.6,
        description="Speech threshold (energy ratio, or voiced-frame fraction for webrtc)",
        ge=0.0,
        le=10.0
    )

    freq_thold: float = Field(
        default=100.0,
        description="High-pass cutoff frequency in Hz (0 disables the filter)",
        ge=0.0
    )

    vad_energy_floor: float = Field(
        default=0.001,
        description="Mean absolute amplitude the trailing window must exceed",
        ge=0.0
    )

    vad_aggressiveness: int = Field(
        default=2,
        description="webrtcvad aggressiveness (0-3, higher = more aggressive)",
        ge=0,
        le=3
    )

    # Speech-to-Text Configuration
    model: str = Field(
        default="base.en",
        description="faster-whisper model name or path"
    )

    whisper_compute: Literal["auto", "cpu", "cuda"] = Field(
        default="auto",
        description="Compute device for Whisper model"
    )

    threads: int = Field(
        default_factory=lambda: min(4, os.cpu_count() or 1),
        description="Number of CPU threads used by the transcription engine",
        ge=1,
        le=256
    )

    language: str = Field(
        default="en",
        description="Spoken language"
    )

    max_tokens: int = Field(
        default=32,
        description="Maximum number of tokens per audio chunk (0 = unlimited)",
        ge=0
    )

    audio_ctx: int = Field(
        default=0,
        description="Audio context size in 20 ms encoder frames (0 = all)",
        ge=0,
        le=1500
    )

    # Conversation
    wake_word: str = Field(
        default="test",
        description="Case-sensitive substring that wakes the assistant"
    )

    silence_ms: int = Field(
        default=1000,
        description="Silence after the last speech that ends an utterance (ms)",
        ge=0
    )

    keep_wake_remainder: bool = Field(
        default=False,
        description="Keep the text following the wake word in the activating segment"
    )

    overlap_min_chars: int = Field(
        default=0,
        description="Trim repeated text shared by consecutive segments (0 disables)",
        ge=0
    )

    # LLM Configuration
    ollama_host: str = Field(
        default="http://localhost:11434",
        description="Base URL of the Ollama server"
    )

    ollama_model: str = Field(
        default="qwen2.5",
        description="Ollama model name used for replies"
    )

    reply_max_tokens: Optional[int] = Field(
        default=None,
        description="Maximum tokens per reply (None = server default)",
        ge=1
    )

    sync_dispatch: bool = Field(
        default=False,
        description="Block the poll loop while a reply is generated"
    )

    # Runtime Configuration
    verbose: bool = Field(
        default=False,
        description="Print detector diagnostics"
    )

    @computed_field
    @property
    def window_samples(self) -> int:
        """Number of samples fetched per poll cycle."""
        return int(self.sample_rate * self.window_ms / 1000)

    @computed_field
    @property
    def silence_threshold_s(self) -> float:
        """Silence threshold in seconds."""
        return self.silence_ms / 1000.0

    @field_validator('wake_word')
    @classmethod
    def validate_wake_word(cls, v):
        """Ensure the wake word is not blank."""
        if not v.strip():
            raise ValueError("wake_word cannot be empty")
        return v

    @model_validator(mode='after')
    def validate_windows(self):
        if self.window_ms > self.length_ms:
            raise ValueError("window_ms cannot exceed length_ms")
        if self.vad_backend == "energy" and self.vad_last_ms >= self.window_ms:
            raise ValueError("vad_last_ms must be shorter than window_ms for the energy detector")
        if self.vad_backend == "webrtc" and self.sample_rate not in WEBRTC_SAMPLE_RATES:
            raise ValueError(f"webrtc backend needs a sample rate in {WEBRTC_SAMPLE_RATES}")
        return self

    def model_dump_config(self) -> dict:
        """Return configuration as a dictionary, including computed fields."""
        data = self.model_dump()
        data.update({
            'window_samples': self.window_samples,
            'silence_threshold_s': self.silence_threshold_s,
        })
        return data


# Default configuration instance
default_config = Config()
