"""
ASR adaptörü: PCM16 segmenti faster-whisper ile metne çevirir
"""

from typing import Optional
import logging

import numpy as np
from faster_whisper import WhisperModel

from recitation.config import (
    WHISPER_COMPUTE_TYPE,
    WHISPER_CPU_THREADS,
    WHISPER_DEVICE,
    WHISPER_MODEL_LIVE,
)

logger = logging.getLogger(__name__)

_model_live: Optional[WhisperModel] = None


def get_model_live() -> WhisperModel:
    """Live takip için küçük model (lazy load, ilk çalıştırmada indirilir)"""
    global _model_live
    if _model_live is None:
        logger.info(f"Live Whisper modeli yükleniyor ({WHISPER_MODEL_LIVE})...")
        _model_live = WhisperModel(
            WHISPER_MODEL_LIVE,
            device=WHISPER_DEVICE,
            compute_type=WHISPER_COMPUTE_TYPE,
            cpu_threads=WHISPER_CPU_THREADS,
        )
        logger.info("✓ Live Whisper modeli yüklendi")
    return _model_live


def pcm16_to_float32(pcm_bytes: bytes) -> np.ndarray:
    """PCM16 mono byte dizisini [-1, 1] aralığında float32 diziye çevirir"""
    usable = len(pcm_bytes) - (len(pcm_bytes) % 2)
    samples = np.frombuffer(pcm_bytes[:usable], dtype=np.int16)
    return samples.astype(np.float32) / 32768.0


def transcribe_pcm(pcm_bytes: bytes, model: Optional[WhisperModel] = None) -> str:
    """
    Tek bir konuşma segmentini yazıya döker (16kHz mono PCM16 beklenir)

    Returns:
        Ham transcript (normalize edilmemiş), boş ses için ""
    """
    audio = pcm16_to_float32(pcm_bytes)
    if audio.size == 0:
        return ""

    model = model or get_model_live()
    segments, info = model.transcribe(
        audio,
        language="ar",
        beam_size=1,                       # Greedy decoding
        best_of=1,
        temperature=0.0,
        condition_on_previous_text=False,
        vad_filter=False,
    )

    transcript = " ".join(segment.text.strip() for segment in segments).strip()
    logger.debug(f"ASR: {transcript[:50]}")
    return transcript
