#!/usr/bin/env python3
"""
Command line entry point for the Wake Word Assistant.
"""

import argparse
import asyncio
import signal
import sys
from typing import List, Optional

from pydantic import ValidationError

from .config import Config
from .core import WakeWordAssistant
from .errors import AssistantError

# argparse dest -> Config field
OPTION_FIELDS = {
    "threads": "threads",
    "step": "step_ms",
    "length": "length_ms",
    "window": "window_ms",
    "capture": "capture_id",
    "max_tokens": "max_tokens",
    "audio_ctx": "audio_ctx",
    "vad_thold": "vad_thold",
    "freq_thold": "freq_thold",
    "language": "language",
    "model": "model",
    "wake_word": "wake_word",
    "silence_ms": "silence_ms",
    "ollama_model": "ollama_model",
    "ollama_host": "ollama_host",
    "reply_max_tokens": "reply_max_tokens",
    "vad_backend": "vad_backend",
    "overlap_min_chars": "overlap_min_chars",
}

FLAG_FIELDS = ("sync_dispatch", "keep_wake_remainder", "verbose")


def build_parser() -> argparse.ArgumentParser:
    d = Config()
    p = argparse.ArgumentParser(
        prog="wake-word-assistant",
        description="Voice assistant with wake word detection and Ollama replies.",
    )
    p.add_argument("-t", "--threads", type=int, help=f"number of threads to use during computation [{d.threads}]")
    p.add_argument("--step", type=int, help=f"longest wait for fresh audio per cycle in ms [{d.step_ms}]")
    p.add_argument("--length", type=int, help=f"audio buffer length in ms [{d.length_ms}]")
    p.add_argument("--window", type=int, help=f"audio window analysed per cycle in ms [{d.window_ms}]")
    p.add_argument("-c", "--capture", type=int, help=f"capture device ID [{d.capture_id}]")
    p.add_argument("-mt", "--max-tokens", type=int, help=f"maximum number of tokens per audio chunk [{d.max_tokens}]")
    p.add_argument("-ac", "--audio-ctx", type=int, help=f"audio context size (0 - all) [{d.audio_ctx}]")
    p.add_argument("-vth", "--vad-thold", type=float, help=f"voice activity detection threshold [{d.vad_thold}]")
    p.add_argument("-fth", "--freq-thold", type=float, help=f"high-pass frequency cutoff [{d.freq_thold}]")
    p.add_argument("-l", "--language", help=f"spoken language [{d.language}]")
    p.add_argument("-m", "--model", help=f"faster-whisper model name or path [{d.model}]")
    p.add_argument("-w", "--wake-word", help=f"wake word [{d.wake_word}]")
    p.add_argument("--silence-ms", type=int, help=f"silence that ends an utterance in ms [{d.silence_ms}]")
    p.add_argument("--ollama-model", help=f"Ollama model for replies [{d.ollama_model}]")
    p.add_argument("--ollama-host", help=f"Ollama server URL [{d.ollama_host}]")
    p.add_argument("--reply-max-tokens", type=int, help="maximum tokens per reply [server default]")
    p.add_argument("--vad-backend", choices=["energy", "webrtc"], help=f"speech detector [{d.vad_backend}]")
    p.add_argument("--overlap-min-chars", type=int,
                   help=f"trim text repeated across segments, 0 = off [{d.overlap_min_chars}]")
    p.add_argument("--sync-dispatch", action="store_true", default=None,
                   help="block audio polling while the reply is generated")
    p.add_argument("--keep-wake-remainder", action="store_true", default=None,
                   help="keep the words spoken after the wake word in the same segment")
    p.add_argument("-v", "--verbose", action="store_true", default=None, help="print detector diagnostics")
    return p


def config_from_args(args: argparse.Namespace) -> Config:
    """Build a Config from the options actually given on the command line."""
    overrides = {}
    for dest, field in OPTION_FIELDS.items():
        value = getattr(args, dest)
        if value is not None:
            overrides[field] = value
    for field in FLAG_FIELDS:
        if getattr(args, field):
            overrides[field] = True
    return Config(**overrides)


async def _run(assistant: WakeWordAssistant):
    loop = asyncio.get_running_loop()
    try:
        loop.add_signal_handler(signal.SIGINT, assistant.stop)
        loop.add_signal_handler(signal.SIGTERM, assistant.stop)
    except NotImplementedError:
        pass  # Windows: Ctrl+C surfaces as KeyboardInterrupt instead
    await assistant.run()


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        config = config_from_args(args)
    except ValidationError as e:
        print(f"error: invalid configuration\n{e}", file=sys.stderr)
        return 1

    assistant = WakeWordAssistant(config)
    try:
        asyncio.run(_run(assistant))
    except AssistantError as e:
        print(f"[Init Error] {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\nExiting…")
    return 0


if __name__ == '__main__':
    sys.exit(main())
