from types import SimpleNamespace

import numpy as np
import pytest

from recitation.asr import pcm16_to_float32, transcribe_pcm


class FakeModel:
    def __init__(self, texts):
        self.texts = texts
        self.calls = []

    def transcribe(self, audio, **kwargs):
        self.calls.append((audio, kwargs))
        segments = (SimpleNamespace(text=t) for t in self.texts)
        return segments, SimpleNamespace(language="ar")


def test_pcm16_to_float32():
    audio = pcm16_to_float32(b"\x00\x80\x00\x00\xff\x7f")

    assert audio.dtype == np.float32
    assert audio.tolist() == pytest.approx([-1.0, 0.0, 32767 / 32768])


def test_pcm16_drops_trailing_odd_byte():
    assert pcm16_to_float32(b"\x00\x00\x01").size == 1
    assert pcm16_to_float32(b"\x01").size == 0


def test_transcribe_joins_segments():
    model = FakeModel([" بسم الله ", "الرحمن الرحيم "])

    text = transcribe_pcm(b"\x00\x00" * 160, model=model)

    assert text == "بسم الله الرحمن الرحيم"
    audio, kwargs = model.calls[0]
    assert audio.size == 160
    assert kwargs["language"] == "ar"
    assert kwargs["beam_size"] == 1


def test_transcribe_empty_audio_skips_model():
    model = FakeModel(["x"])

    assert transcribe_pcm(b"", model=model) == ""
    assert model.calls == []
