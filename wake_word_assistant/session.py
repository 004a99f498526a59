#!/usr/bin/env python3
"""
Conversation state machine for the Wake Word Assistant.

The session is dormant until a transcribed segment contains the wake word.
While listening, segments are concatenated into the utterance; once no speech
has been detected for longer than the silence threshold the utterance is
handed back for dispatch and the session goes dormant again.

All state lives on one ``Session`` object that only the poll loop touches.
"""

from enum import Enum
from typing import List, NamedTuple, Optional


class Mode(Enum):
    DORMANT = "dormant"
    LISTENING = "listening"


class EventKind(Enum):
    ACTIVATED = "activated"
    TEXT = "text"


class Event(NamedTuple):
    kind: EventKind
    text: str = ""


def trim_overlap(previous: str, segment: str, min_chars: int) -> str:
    """Drop the longest prefix of ``segment`` that ``previous`` already ends with.

    Overlaps shorter than ``min_chars`` are kept; ``min_chars`` of 0 disables
    trimming.
    """
    if min_chars <= 0:
        return segment
    for size in range(min(len(previous), len(segment)), min_chars - 1, -1):
        if previous.endswith(segment[:size]):
            return segment[size:]
    return segment


class Session:
    """Dormant/listening state, the utterance buffer and the silence clock."""

    def __init__(self, wake_word: str, silence_threshold: float, now: float,
                 keep_wake_remainder: bool = False, overlap_min_chars: int = 0):
        self.wake_word = wake_word
        self.silence_threshold = silence_threshold
        self.keep_wake_remainder = keep_wake_remainder
        self.overlap_min_chars = overlap_min_chars
        self.mode = Mode.DORMANT
        self.utterance = ""
        self.last_speech_time = now

    @classmethod
    def from_config(cls, config, now: float) -> 'Session':
        return cls(
            wake_word=config.wake_word,
            silence_threshold=config.silence_threshold_s,
            now=now,
            keep_wake_remainder=config.keep_wake_remainder,
            overlap_min_chars=config.overlap_min_chars,
        )

    @property
    def listening(self) -> bool:
        return self.mode is Mode.LISTENING

    def heard(self, now: float):
        """Record that the speech detector fired at ``now``."""
        self.last_speech_time = now

    def feed(self, segment: str) -> List[Event]:
        """Process one transcribed segment."""
        if self.mode is Mode.DORMANT:
            index = segment.find(self.wake_word)
            if index < 0:
                return []
            self.mode = Mode.LISTENING
            self.utterance = ""
            events = [Event(EventKind.ACTIVATED)]
            if self.keep_wake_remainder:
                remainder = segment[index + len(self.wake_word):]
                if remainder.strip():
                    events.extend(self._append(remainder))
            return events
        return self._append(segment)

    def feed_all(self, segments) -> List[Event]:
        events = []
        for segment in segments:
            events.extend(self.feed(segment))
        return events

    def _append(self, segment: str) -> List[Event]:
        text = trim_overlap(self.utterance, segment, self.overlap_min_chars)
        if not text:
            return []
        self.utterance += text
        return [Event(EventKind.TEXT, text)]

    def idle_for(self, now: float) -> float:
        return now - self.last_speech_time

    def idle(self, now: float) -> Optional[str]:
        """Handle a cycle without speech.

        Returns the finished utterance when it must be dispatched, else None.
        The session is dormant with an empty buffer afterwards.
        """
        if self.mode is not Mode.LISTENING or not self.utterance:
            return None
        if self.idle_for(now) <= self.silence_threshold:
            return None
        utterance = self.utterance
        self.utterance = ""
        self.mode = Mode.DORMANT
        return utterance
