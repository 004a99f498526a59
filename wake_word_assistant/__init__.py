#!/usr/bin/env python3
"""
Wake Word Assistant Module
==========================

A streaming voice front end: the microphone is polled continuously, speech is
transcribed, and once the wake word is heard everything said until the speaker
falls silent is sent to an Ollama model as one prompt.

Features
--------
1. Microphone capture @ 16 kHz mono into a bounded ring buffer (sounddevice).
2. Speech detection on the trailing second of each window (high-pass energy
   detector, or webrtcvad).
3. Speech-to-Text via faster-whisper on every window that contains speech.
4. Case-sensitive wake word gating and utterance accumulation across windows.
5. Utterance dispatch to Ollama's generate endpoint on a worker task, so the
   microphone keeps being polled while the reply is generated.
6. Clean shutdown on Ctrl+C.

Quick Start
-----------
```python
from wake_word_assistant import WakeWordAssistant, Config
import asyncio

async def main():
    assistant = WakeWordAssistant(Config(wake_word="assistant"))
    await assistant.run()

if __name__ == '__main__':
    asyncio.run(main())
```
"""

from .core import WakeWordAssistant
from .config import Config
from .audio import AudioSource
from .detection import SpeechDetector, WebRTCSpeechDetector, WhisperTranscriber, create_detector, vad_simple
from .errors import AssistantError, AudioInitError, TranscriberInitError
from .llm import ReplyClient, collect_response
from .session import Session, Mode, Event, EventKind

__version__ = "1.0.0"
__all__ = [
    'WakeWordAssistant',
    'Config',
    'AudioSource',
    'SpeechDetector',
    'WebRTCSpeechDetector',
    'WhisperTranscriber',
    'create_detector',
    'vad_simple',
    'AssistantError',
    'AudioInitError',
    'TranscriberInitError',
    'ReplyClient',
    'collect_response',
    'Session',
    'Mode',
    'Event',
    'EventKind',
]
