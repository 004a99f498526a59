#!/usr/bin/env python3
"""
Microphone capture for the Wake Word Assistant.

A sounddevice InputStream callback (PortAudio's thread) writes into a fixed
size ring buffer; the poll loop reads copies of the most recent window.
"""

import sys
import threading
import time
from typing import Optional

import numpy as np

from .config import default_config
from .errors import AudioInitError


class AudioSource:
    """Continuous mono float32 capture into a bounded ring buffer.

    Audio older than ``length_ms`` is overwritten. That is the only
    backpressure policy: if the poll loop stalls longer than the ring holds,
    the oldest samples are lost.
    """

    def __init__(self, config=None):
        self.config = config or default_config
        self.sample_rate = self.config.sample_rate
        self.capacity = int(self.sample_rate * self.config.length_ms / 1000)
        self._buffer = np.zeros(self.capacity, dtype=np.float32)
        self._pos = 0  # next write index
        self._len = 0  # valid samples in the ring
        self._fresh = 0  # samples written since the last get()
        self._cond = threading.Condition()
        self._running = False
        self.overflow_count = 0
        self.stream = None

    def open(self):
        """Open the capture device. Raises AudioInitError on failure."""
        try:
            import sounddevice as sd
        except OSError as e:  # PortAudio library missing
            raise AudioInitError(f"sounddevice unavailable: {e}") from e

        device = None if self.config.capture_id < 0 else self.config.capture_id
        try:
            self.stream = sd.InputStream(
                samplerate=self.sample_rate,
                device=device,
                channels=1,
                dtype='float32',
                callback=self._callback,
            )
        except (sd.PortAudioError, ValueError) as e:
            raise AudioInitError(f"failed to open capture device {self.config.capture_id}: {e}") from e

    def resume(self):
        """Start (or restart) capturing."""
        if self.stream is None:
            raise AudioInitError("audio source is not open")
        if not self._running:
            self.stream.start()
            self._running = True

    def pause(self):
        """Stop capturing; buffered audio is kept."""
        if self.stream is not None and self._running:
            self.stream.stop()
        self._running = False

    def clear(self):
        """Discard everything captured so far."""
        with self._cond:
            self._pos = 0
            self._len = 0
            self._fresh = 0

    def close(self):
        self.pause()
        if self.stream is not None:
            self.stream.close()
            self.stream = None

    def _callback(self, indata, frames, time_info, status):
        if status and getattr(status, 'input_overflow', False):
            self.overflow_count += 1  # tolerated; the frames are still usable
            if self.config.verbose:
                print(f"[Audio] input overflow ({self.overflow_count})", file=sys.stderr)
        samples = np.asarray(indata, dtype=np.float32)
        if samples.ndim == 2:
            samples = samples[:, 0]
        self.write(samples)

    def write(self, samples: np.ndarray):
        """Append samples to the ring, overwriting the oldest ones."""
        n = len(samples)
        if n == 0:
            return
        with self._cond:
            cap = self.capacity
            if n >= cap:
                self._buffer[:] = samples[-cap:]
                self._pos = 0
            else:
                end = self._pos + n
                if end <= cap:
                    self._buffer[self._pos:end] = samples
                else:
                    first = cap - self._pos
                    self._buffer[self._pos:] = samples[:first]
                    self._buffer[:n - first] = samples[first:]
                self._pos = end % cap
            self._len = min(self._len + n, cap)
            self._fresh += n
            self._cond.notify_all()

    def get(self, window_ms: int, max_wait_ms: Optional[int] = None) -> np.ndarray:
        """Return a copy of the most recent ``window_ms`` of audio.

        Blocks until ``window_ms`` of audio has arrived since the previous call
        or ``max_wait_ms`` has elapsed, whichever comes first. The result may be
        shorter than requested right after start-up.
        """
        want = min(int(self.sample_rate * window_ms / 1000), self.capacity)
        deadline = None if max_wait_ms is None else time.monotonic() + max_wait_ms / 1000.0
        with self._cond:
            while self._fresh < want:
                if deadline is None:
                    self._cond.wait()
                    continue
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    break
                self._cond.wait(remaining)
            n = min(want, self._len)
            self._fresh = 0
            if n == 0:
                return np.zeros(0, dtype=np.float32)
            idx = np.arange(self._pos - n, self._pos) % self.capacity
            return self._buffer[idx]
