#!/usr/bin/env python3
"""
Core wake word assistant implementation.
"""

import asyncio
import sys
import time
from typing import Callable, Optional

from .config import default_config, Config
from .audio import AudioSource
from .detection import create_detector, WhisperTranscriber
from .llm import ReplyClient
from .session import Session, EventKind


class WakeWordAssistant:
    """
    Poll loop tying microphone, speech detector, transcriber and reply client
    to the conversation session.

    Every cycle fetches a fixed audio window. If the detector hears speech the
    window is transcribed and fed to the session; otherwise the session checks
    whether the utterance is finished and, if so, hands it to the reply worker.
    """

    def __init__(self, config: Optional[Config] = None, source=None, detector=None,
                 transcriber=None, reply_client=None, clock: Callable[[], float] = time.monotonic):
        """Initialize the assistant; collaborators not given are built in initialize()."""
        self.config = config or default_config
        self.source = source
        self.detector = detector
        self.transcriber = transcriber
        self.reply_client = reply_client
        self.clock = clock
        self.session = Session.from_config(self.config, clock())
        self.dispatched = 0
        self._pending = 0
        self._running = False
        self._replies: Optional[asyncio.Queue] = None
        self._reply_task: Optional[asyncio.Task] = None

    def initialize(self):
        """Open the microphone and load the models. Errors here are fatal."""
        print("Booting wake word assistant…", flush=True)
        if self.source is None:
            self.source = AudioSource(self.config)
            self.source.open()
        if self.detector is None:
            self.detector = create_detector(self.config)
        if self.transcriber is None:
            self.transcriber = WhisperTranscriber(self.config)
        if self.reply_client is None:
            self.reply_client = ReplyClient(self.config)
        self.source.resume()

    def stop(self):
        """Ask the loop to exit at the top of its next cycle."""
        self._running = False

    async def step(self):
        """Run one poll cycle."""
        audio = await asyncio.to_thread(self.source.get, self.config.window_ms, self.config.step_ms)
        now = self.clock()

        if await asyncio.to_thread(self.detector.is_speech, audio):
            self.session.heard(now)
            try:
                segments = await asyncio.to_thread(self.transcriber.transcribe, audio)
            except Exception as e:
                print(f"[STT Error] {e}", file=sys.stderr)
                return
            self._print_events(self.session.feed_all(segments))
            return

        utterance = self.session.idle(now)
        if utterance is not None:
            await self._finalize(utterance)

    def _print_events(self, events):
        for event in events:
            if event.kind is EventKind.ACTIVATED:
                print("\n[Assistant activated]", flush=True)
            else:
                print(event.text, end='', flush=True)

    async def _finalize(self, utterance: str):
        print(f"\n[Processing: {utterance}]", flush=True)
        self.dispatched += 1
        if self.config.sync_dispatch or self._replies is None:
            await self._answer(utterance)
        else:
            self._pending += 1
            await self._replies.put(utterance)
        print(f"[Waiting for wake word '{self.config.wake_word}']", flush=True)

    async def _answer(self, utterance: str):
        try:
            response = await asyncio.to_thread(self.reply_client.reply, utterance)
        except Exception as e:
            print(f"[Reply Error] {e}", file=sys.stderr)
            return
        print(f"\n[Assistant]: {response}\n", flush=True)

    async def _reply_consumer(self, q: 'asyncio.Queue[Optional[str]]'):
        """Consumer task answering utterances in dispatch order."""
        while True:
            utterance = await q.get()
            if utterance is None:
                break
            await self._answer(utterance)
            self._pending -= 1

    async def run(self):
        """Run the main assistant loop until stop() is called."""
        try:
            self.initialize()
            self._replies = asyncio.Queue()
            self._reply_task = asyncio.create_task(self._reply_consumer(self._replies))
            self._running = True
            print(f"[System started - waiting for wake word '{self.config.wake_word}']", flush=True)

            while self._running:
                await self.step()
        finally:
            await self.cleanup()

    async def cleanup(self):
        """Let queued replies finish, then release the microphone."""
        if self._reply_task is not None:
            if self._pending:
                print(f"[Finishing pending replies: {self._pending}]", flush=True)
            await self._replies.put(None)
            await self._reply_task
            self._reply_task = None
        if self.source is not None:
            self.source.close()


async def main(config: Optional[Config] = None):
    """Main entry point for running the assistant."""
    assistant = WakeWordAssistant(config)
    await assistant.run()
