#!/usr/bin/env python3
"""
Tests for speech detection and the faster-whisper wrapper.
"""

from types import SimpleNamespace

import numpy as np
import pytest

from wake_word_assistant.config import Config
from wake_word_assistant.detection import (
    SpeechDetector,
    WhisperTranscriber,
    create_detector,
    high_pass_filter,
    vad_simple,
)

SR = 16000


def tone(seconds, amplitude, freq=440.0):
    t = np.arange(int(SR * seconds)) / SR
    return (amplitude * np.sin(2 * np.pi * freq * t)).astype(np.float32)


def test_high_pass_filter_removes_dc():
    data = np.full(SR, 0.5, dtype=np.float32)
    out = high_pass_filter(data, 100.0, SR)
    assert out[0] == pytest.approx(0.5)
    assert abs(out[-1]) < 1e-3
    assert data[-1] == 0.5  # input untouched


def test_high_pass_filter_keeps_speech_band():
    data = tone(0.5, 0.5, freq=1000.0)
    out = high_pass_filter(data, 100.0, SR)
    assert np.abs(out[SR // 10:]).mean() > 0.8 * np.abs(data[SR // 10:]).mean()


def test_high_pass_filter_follows_rc_recurrence():
    rng = np.random.default_rng(3)
    data = rng.normal(0.0, 0.2, 400).astype(np.float32)
    rc = 1.0 / (2.0 * np.pi * 100.0)
    alpha = rc / (rc + 1.0 / SR)
    expected = [float(data[0])]
    for i in range(1, len(data)):
        expected.append(alpha * (expected[-1] + float(data[i]) - float(data[i - 1])))

    out = high_pass_filter(data, 100.0, SR)
    assert out.dtype == np.float32
    np.testing.assert_allclose(out, expected, rtol=1e-4, atol=1e-6)


def test_high_pass_filter_short_input():
    assert len(high_pass_filter(np.zeros(0, dtype=np.float32), 100.0, SR)) == 0
    assert high_pass_filter(np.array([0.3], dtype=np.float32), 100.0, SR)[0] == pytest.approx(0.3)


def test_vad_silence_is_not_speech():
    assert vad_simple(np.zeros(2 * SR, dtype=np.float32), SR, 1000, 0.6, 100.0) is False


def test_vad_loud_tail_is_speech():
    audio = np.concatenate([tone(1.0, 0.01), tone(1.0, 0.3)])
    assert vad_simple(audio, SR, 1000, 0.6, 100.0) is True


def test_vad_loud_head_quiet_tail_is_not_speech():
    audio = np.concatenate([tone(1.0, 0.3), tone(1.0, 0.01)])
    assert vad_simple(audio, SR, 1000, 0.6, 100.0) is False


def test_vad_short_buffer_is_not_speech():
    audio = tone(0.5, 0.3)
    assert vad_simple(audio, SR, 1000, 0.6, 100.0) is False
    assert vad_simple(tone(1.0, 0.3), SR, 1000, 0.6, 100.0) is False


def test_vad_energy_floor_rejects_steady_noise():
    rng = np.random.default_rng(0)
    noise = (rng.standard_normal(2 * SR) * 0.0002).astype(np.float32)
    assert vad_simple(noise, SR, 1000, 0.6, 0.0, energy_floor=0.0) is True
    assert vad_simple(noise, SR, 1000, 0.6, 0.0, energy_floor=0.001) is False


def test_vad_verbose_prints(capsys):
    audio = np.concatenate([tone(1.0, 0.01), tone(1.0, 0.3)])
    vad_simple(audio, SR, 1000, 0.6, 100.0, verbose=True)
    assert "energy_all" in capsys.readouterr().out


def test_speech_detector_uses_config():
    audio = np.concatenate([tone(1.5, 0.05), tone(0.5, 0.3)])
    assert SpeechDetector(Config(vad_last_ms=500)).is_speech(audio) is True
    assert SpeechDetector(Config(vad_last_ms=500, vad_thold=9.0)).is_speech(audio) is False


def test_create_detector_energy_backend():
    detector = create_detector(Config())
    assert type(detector) is SpeechDetector


def test_webrtc_detector():
    pytest.importorskip("webrtcvad")
    from wake_word_assistant.detection import WebRTCSpeechDetector

    detector = create_detector(Config(vad_backend="webrtc"))
    assert isinstance(detector, WebRTCSpeechDetector)
    assert detector.is_speech(np.zeros(2 * SR, dtype=np.float32)) is False


class FakeWhisper:
    def __init__(self, texts):
        self.texts = texts
        self.calls = []

    def transcribe(self, audio, **options):
        self.calls.append((audio, options))
        segments = (SimpleNamespace(text=t) for t in self.texts)
        return segments, SimpleNamespace(language="en")


def test_transcriber_returns_segment_text_in_order():
    model = FakeWhisper([" hey assistant", " what is", " the time"])
    stt = WhisperTranscriber(Config(), model=model)
    assert stt.transcribe(tone(2.0, 0.1)) == [" hey assistant", " what is", " the time"]


def test_transcriber_options():
    model = FakeWhisper([])
    WhisperTranscriber(Config(language="de", max_tokens=16), model=model).transcribe(tone(1.0, 0.1))
    options = model.calls[0][1]
    assert options["language"] == "de"
    assert options["max_new_tokens"] == 16
    assert options["condition_on_previous_text"] is False

    model = FakeWhisper([])
    WhisperTranscriber(Config(max_tokens=0), model=model).transcribe(tone(1.0, 0.1))
    assert "max_new_tokens" not in model.calls[0][1]


def test_transcriber_audio_ctx_limits_audio():
    model = FakeWhisper([])
    stt = WhisperTranscriber(Config(audio_ctx=50), model=model)
    stt.transcribe(tone(2.0, 0.1))
    audio = model.calls[0][0]
    assert len(audio) == SR  # 50 frames * 20 ms
    assert audio.dtype == np.float32


def test_transcriber_full_audio_by_default():
    model = FakeWhisper([])
    stt = WhisperTranscriber(Config(), model=model)
    stt.transcribe(tone(2.0, 0.1).astype(np.float64))
    audio = model.calls[0][0]
    assert len(audio) == 2 * SR
    assert audio.dtype == np.float32


def test_transcriber_errors_propagate():
    class Broken:
        def transcribe(self, audio, **options):
            raise RuntimeError("decoder failed")

    with pytest.raises(RuntimeError):
        WhisperTranscriber(Config(), model=Broken()).transcribe(tone(1.0, 0.1))


def test_select_device():
    stt = WhisperTranscriber(Config(), model=FakeWhisper([]))
    assert stt._select_device('cuda') == ('cuda', 'float16')
    assert stt._select_device('cpu') == ('cpu', 'int8')
    assert stt._select_device('auto') == ('auto', 'default')
