#!/usr/bin/env python3
"""
Speech detection and transcription for the Wake Word Assistant.
"""

from typing import List

import numpy as np
from scipy import signal

from .config import default_config
from .errors import TranscriberInitError

# Whisper encoder frames are 20 ms each (1500 frames = 30 s)
AUDIO_CTX_FRAME_MS = 20
WEBRTC_FRAME_MS = 30


def high_pass_filter(data: np.ndarray, cutoff: float, sample_rate: int) -> np.ndarray:
    """First-order RC high-pass filter. Returns a new array; the first sample passes through."""
    out = np.asarray(data, dtype=np.float32).copy()
    if len(out) < 2:
        return out
    rc = 1.0 / (2.0 * np.pi * cutoff)
    dt = 1.0 / sample_rate
    alpha = rc / (rc + dt)
    # y[i] = alpha * (y[i-1] + x[i] - x[i-1]) with y[0] = x[0] leaves zero filter state
    out[1:] = signal.lfilter([alpha, -alpha], [1.0, -alpha], out[1:].astype(np.float64))
    return out


def vad_simple(audio: np.ndarray, sample_rate: int, last_ms: int, vad_thold: float,
               freq_thold: float, verbose: bool = False, energy_floor: float = 0.0) -> bool:
    """Return True when the trailing ``last_ms`` holds speech.

    Speech means the mean absolute amplitude of the trailing window is above
    ``vad_thold`` times that of the whole buffer, and above ``energy_floor``.
    A buffer no longer than the trailing window is treated as silence.
    """
    n_samples = len(audio)
    n_samples_last = int(sample_rate * last_ms / 1000)
    if n_samples_last <= 0 or n_samples_last >= n_samples:
        return False

    if freq_thold > 0.0:
        audio = high_pass_filter(audio, freq_thold, sample_rate)

    magnitude = np.abs(audio)
    energy_all = float(magnitude.mean())
    energy_last = float(magnitude[-n_samples_last:].mean())

    if verbose:
        print(f"[VAD] energy_all: {energy_all:.6f}, energy_last: {energy_last:.6f}, "
              f"vad_thold: {vad_thold:.3f}, freq_thold: {freq_thold:.1f}", flush=True)

    return energy_last > vad_thold * energy_all and energy_last > energy_floor


class SpeechDetector:
    """Energy based speech detector over the trailing part of a poll window."""

    def __init__(self, config=None):
        self.config = config or default_config

    def is_speech(self, audio: np.ndarray) -> bool:
        c = self.config
        return vad_simple(audio, c.sample_rate, c.vad_last_ms, c.vad_thold,
                          c.freq_thold, c.verbose, c.vad_energy_floor)


class WebRTCSpeechDetector(SpeechDetector):
    """WebRTC VAD voting over 30 ms frames of the trailing window.

    The window counts as speech when the voiced fraction reaches ``vad_thold``.
    """

    def __init__(self, config=None, aggressiveness=None):
        super().__init__(config)
        import webrtcvad
        if aggressiveness is None:
            aggressiveness = self.config.vad_aggressiveness
        self.vad = webrtcvad.Vad(aggressiveness)

    def is_speech(self, audio: np.ndarray) -> bool:
        c = self.config
        n_last = int(c.sample_rate * c.vad_last_ms / 1000)
        frame_samples = int(c.sample_rate * WEBRTC_FRAME_MS / 1000)
        tail = audio[-n_last:]
        if c.freq_thold > 0.0:
            tail = high_pass_filter(tail, c.freq_thold, c.sample_rate)
        n_frames = len(tail) // frame_samples
        if n_frames == 0:
            return False
        pcm = (np.clip(tail, -1.0, 1.0) * 32767).astype(np.int16)
        voiced = 0
        for i in range(n_frames):
            frame = pcm[i * frame_samples:(i + 1) * frame_samples].tobytes()
            if self.vad.is_speech(frame, c.sample_rate):
                voiced += 1
        ratio = voiced / n_frames
        if c.verbose:
            print(f"[VAD] voiced frames: {voiced}/{n_frames}", flush=True)
        return ratio >= c.vad_thold


def create_detector(config=None) -> SpeechDetector:
    """Build the speech detector selected by ``config.vad_backend``."""
    config = config or default_config
    if config.vad_backend == "webrtc":
        return WebRTCSpeechDetector(config)
    return SpeechDetector(config)


class WhisperTranscriber:
    """faster-whisper wrapper returning the raw text of each segment."""

    def __init__(self, config=None, model=None):
        self.config = config or default_config
        if model is None:
            model = self._load_model()
        self.model = model

    def _load_model(self):
        try:
            from faster_whisper import WhisperModel
        except ImportError as e:
            raise TranscriberInitError(f"faster-whisper is not installed: {e}") from e
        device, compute_type = self._select_device(self.config.whisper_compute)
        try:
            return WhisperModel(
                self.config.model,
                device=device,
                compute_type=compute_type,
                cpu_threads=self.config.threads,
            )
        except (RuntimeError, ValueError, OSError) as e:
            raise TranscriberInitError(f"failed to load model '{self.config.model}': {e}") from e

    def _select_device(self, compute: str):
        if compute == 'cuda':
            return 'cuda', 'float16'
        if compute == 'cpu':
            return 'cpu', 'int8'
        return 'auto', 'default'

    def prepare(self, audio: np.ndarray) -> np.ndarray:
        """Limit the audio to the configured encoder context."""
        if audio.dtype != np.float32:
            audio = audio.astype(np.float32)
        if self.config.audio_ctx > 0:
            n = int(self.config.sample_rate * self.config.audio_ctx * AUDIO_CTX_FRAME_MS / 1000)
            audio = audio[:n]
        return audio

    def transcribe(self, audio: np.ndarray) -> List[str]:
        options = dict(
            language=self.config.language,
            beam_size=1,
            vad_filter=False,
            without_timestamps=True,
            condition_on_previous_text=False,
        )
        if self.config.max_tokens > 0:
            options['max_new_tokens'] = self.config.max_tokens
        segments, _info = self.model.transcribe(self.prepare(audio), **options)
        # segments is a lazy generator; decoding happens here
        return [seg.text for seg in segments]
