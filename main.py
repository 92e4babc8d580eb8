from fastapi import FastAPI, HTTPException, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from typing import Optional, Set
import asyncio
import json
import logging

from recitation.arabic_norm import normalize_ar
from recitation.asr import transcribe_pcm
from recitation.config import DEFAULT_TOP_K, LOG_LEVEL, QURAN_PATH, SAMPLE_RATE
from recitation.corpus import Corpus, load_corpus
from recitation.errors import CorpusLoadError, UnknownChapterError
from recitation.search import search_quran
from recitation.session import RecitationSession

logging.basicConfig(level=LOG_LEVEL)
logger = logging.getLogger(__name__)

app = FastAPI(title="Quran Recitation Tracker")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

QURAN_MISSING = "Quran text not found. Run: python scripts/fetch_quran_text.py"

# Global corpus (lazy load)
_corpus: Optional[Corpus] = None
_live_connection_active = False  # Tek bağlantı desteği
max_buffer_seconds = 30


def get_corpus() -> Optional[Corpus]:
    """Corpus'u lazy load eder; yüklenemezse None"""
    global _corpus
    if _corpus is None:
        try:
            _corpus = load_corpus(QURAN_PATH)
        except CorpusLoadError as e:
            logger.warning(f"Kuran yüklenemedi: {e}")
            return None
    return _corpus


def require_corpus() -> Corpus:
    corpus = get_corpus()
    if corpus is None:
        raise HTTPException(status_code=400, detail=QURAN_MISSING)
    return corpus


def check_surah_no(corpus: Corpus, surah_no: int) -> None:
    if surah_no < 1 or surah_no > corpus.surah_count:
        raise HTTPException(
            status_code=400,
            detail=f"Surah number must be between 1 and {corpus.surah_count}"
        )


@app.get("/")
async def root():
    """Root endpoint: helpful message and pointer to docs."""
    return JSONResponse({"ok": True, "message": "Quran Recitation Tracker - see /docs and /health"})


@app.get("/health")
async def health():
    """Health check endpoint"""
    corpus = get_corpus()
    return {
        "ok": True,
        "quran_loaded": corpus is not None,
        "verse_count": len(corpus) if corpus is not None else 0
    }


@app.get("/quran/meta")
async def quran_meta():
    """Kuran sure meta bilgilerini döndürür"""
    corpus = require_corpus()
    return {"surahs": corpus.get_surah_meta()}


@app.get("/quran/surah/{surah_no}")
async def quran_surah(surah_no: int):
    """Belirli bir surenin ayetlerini döndürür"""
    corpus = require_corpus()
    check_surah_no(corpus, surah_no)

    ayahs = corpus.get_surah_ayahs(surah_no)
    if not ayahs:
        raise HTTPException(status_code=404, detail=f"Surah {surah_no} not found")

    surah_info = next((s for s in corpus.get_surah_meta() if s["surah_no"] == surah_no), None)

    return {
        "surah_no": surah_no,
        "name_ar": surah_info["name_ar"] if surah_info else "",
        "name_tr": surah_info["name_tr"] if surah_info else "",
        "ayahs": ayahs
    }


@app.get("/quran/context")
async def quran_context(surah_no: int, ayah_no: int, before: int = 2, after: int = 10):
    """Belirli bir ayetin etrafındaki ayetleri döndürür"""
    corpus = require_corpus()
    check_surah_no(corpus, surah_no)

    items = corpus.get_context(surah_no, ayah_no, before, after)
    if not items:
        raise HTTPException(status_code=404, detail=f"Ayah {surah_no}:{ayah_no} not found")

    return {
        "surah_no": surah_no,
        "ayah_no": ayah_no,
        "items": items
    }


@app.get("/search")
async def search(text: str, surah_no: Optional[int] = None, top_k: int = DEFAULT_TOP_K):
    """Transcript metnini Kuran'da arar (konum takibi olmadan, ham sıralama)"""
    corpus = require_corpus()

    query = normalize_ar(text)
    try:
        results = search_quran(corpus, query, restrict_surah=surah_no, top_k=top_k)
    except UnknownChapterError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return {
        "query": query,
        "results": [c.to_dict() for c in results]
    }


def build_update(session: RecitationSession, before: tuple) -> dict:
    position = session.position
    return {
        "type": "update",
        "position": position.to_dict() if position.is_set else None,
        "changed": (position.surah, position.ayah) != before,
        "transcript": session.last_transcript,
        "query": session.last_query,
        "candidates": [c.to_dict() for c in session.last_candidates[:3]]
    }


async def send_safe(websocket: WebSocket, payload: dict) -> None:
    """Client koptuysa gönderimi sessizce bırakır"""
    try:
        await websocket.send_json(payload)
    except (WebSocketDisconnect, RuntimeError) as e:
        logger.info(f"Mesaj gönderilemedi: {e}")


async def run_segment(websocket: WebSocket, session: RecitationSession, text: str = None, pcm: bytes = None):
    """Tek segmenti kapıdan geçirir ve sonucu client'a gönderir"""
    position = session.position
    before = (position.surah, position.ayah)
    queued = session.busy

    try:
        if pcm is not None:
            await session.submit_audio(pcm)
        else:
            await session.submit(text)
    except Exception as e:
        logger.error(f"Segment işleme hatası: {e}", exc_info=True)
        await send_safe(websocket, {"type": "error", "message": f"Processing error: {str(e)}"})
        return

    # Sonucu çalışan döngü gönderir; reset ile atılan segment için güncelleme yok
    if queued or session.last_segment_dropped:
        return
    await send_safe(websocket, build_update(session, before))


@app.websocket("/ws/live")
async def websocket_live(websocket: WebSocket):
    """
    WebSocket live tracking endpoint

    Client ya hazır transcript ({"type": "text"}) ya da PCM16 ses parçaları
    + {"type": "segment_end"} gönderir; server konum güncellemesi döner.
    Bir segment işlenirken gelen yenisi beklemeye alınır (en fazla bir tane).
    """
    global _live_connection_active

    # Tek bağlantı kontrolü
    if _live_connection_active:
        await websocket.close(code=1008, reason="Another connection is active")
        return

    await websocket.accept()
    _live_connection_active = True

    tasks: Set[asyncio.Task] = set()

    try:
        corpus = get_corpus()
        if corpus is None:
            await websocket.send_json({"type": "error", "message": QURAN_MISSING})
            return

        session = RecitationSession(corpus, transcriber=transcribe_pcm)
        sample_rate = SAMPLE_RATE
        buffer = bytearray()

        def dispatch(text: str = None, pcm: bytes = None):
            task = asyncio.ensure_future(run_segment(websocket, session, text=text, pcm=pcm))
            tasks.add(task)
            task.add_done_callback(tasks.discard)

        while True:
            message = await websocket.receive()

            if message.get("type") == "websocket.disconnect":
                break

            if message.get("text") is not None:
                try:
                    data = json.loads(message["text"])
                except ValueError:
                    await websocket.send_json({"type": "error", "message": "Invalid JSON message"})
                    continue
                if not isinstance(data, dict):
                    await websocket.send_json({"type": "error", "message": "Message must be a JSON object"})
                    continue
                kind = data.get("type")

                if kind == "start":
                    try:
                        requested_rate = int(data.get("sample_rate", SAMPLE_RATE))
                    except (TypeError, ValueError):
                        requested_rate = 0
                    if requested_rate <= 0:
                        await websocket.send_json({"type": "error", "message": "Invalid sample_rate"})
                        continue

                    sample_rate = requested_rate
                    if sample_rate != SAMPLE_RATE:
                        logger.warning(f"Beklenmeyen sample rate: {sample_rate}")
                    await websocket.send_json({"type": "status", "state": "ready"})

                elif kind == "stop":
                    break

                elif kind == "reset":
                    session.reset()
                    buffer.clear()
                    await websocket.send_json({"type": "status", "state": "reset"})

                elif kind == "text":
                    dispatch(text=data.get("text", ""))

                elif kind == "segment_end":
                    pcm = bytes(buffer)
                    buffer.clear()
                    dispatch(pcm=pcm)

                else:
                    await websocket.send_json({"type": "error", "message": f"Unknown message type: {kind}"})

            elif message.get("bytes") is not None:
                buffer.extend(message["bytes"])

                # Buffer overflow kontrolü (int16 = 2 bytes)
                max_bytes = max_buffer_seconds * sample_rate * 2
                if len(buffer) > max_bytes:
                    del buffer[:len(buffer) - max_bytes]

    except WebSocketDisconnect:
        pass
    except Exception as e:
        logger.error(f"WebSocket hatası: {e}", exc_info=True)
    finally:
        _live_connection_active = False

        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

        try:
            await websocket.close()
        except (RuntimeError, WebSocketDisconnect):
            pass
