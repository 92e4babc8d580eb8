"""
Oturum sürücüsü: transcript segmentlerini arama -> konum takibi döngüsüne besler
"""

import asyncio
from functools import partial
from typing import Callable, List, Optional
import logging

from recitation.arabic_norm import normalize_ar, token_count
from recitation.config import ACCEPT_THRESHOLD, DEFAULT_TOP_K, MIN_QUERY_TOKENS
from recitation.corpus import Corpus
from recitation.disambiguator import PositionTracker, TrackedPosition
from recitation.search import ScoredCandidate, search_quran

logger = logging.getLogger(__name__)

Transcriber = Callable[[bytes], str]


class RecitationSession:
    """
    Bir okuma oturumu: tek corpus, tek PositionTracker.

    process_text() / process_audio() senkron tek döngüdür. submit() ve
    submit_audio() aynı anda en fazla bir döngü çalıştırır; bu sırada gelen
    segmentler tek kişilik bekleme yuvasına yazılır (yenisi eskisinin yerine
    geçer).
    """

    def __init__(
        self,
        corpus: Corpus,
        transcriber: Optional[Transcriber] = None,
        top_k: int = DEFAULT_TOP_K,
        restrict_to_surah: bool = True,
    ):
        self.corpus = corpus
        self.tracker = PositionTracker(corpus)
        self.transcriber = transcriber
        self.top_k = top_k
        self.restrict_to_surah = restrict_to_surah

        self.last_transcript = ""
        self.last_query = ""
        self.last_candidates: List[ScoredCandidate] = []

        self._in_flight = False
        self._pending: Optional[Callable[[], Optional[TrackedPosition]]] = None
        self._reset_deferred = False
        # Son işlenen segmentin sonucu reset yüzünden atıldı mı
        self.last_segment_dropped = False

    @property
    def position(self) -> TrackedPosition:
        return self.tracker.position

    @property
    def busy(self) -> bool:
        return self._in_flight

    def reset(self) -> None:
        """
        Takibi sıfırlar ve bekleyen segmenti atar

        Bir segment işlenirken çağrılırsa sıfırlama o segment bitene kadar
        ertelenir ve segmentin sonucu atılır; konum hiçbir zaman iki yerden
        aynı anda değişmez.
        """
        self._pending = None
        if self._in_flight:
            self._reset_deferred = True
            return
        self._clear()

    def _clear(self) -> None:
        self.tracker.reset()
        self.last_transcript = ""
        self.last_query = ""
        self.last_candidates = []

    def process_text(self, text: str) -> Optional[TrackedPosition]:
        """
        Bir segmentin transcript'ini işler

        Takip edilen sure içinde aranır; oradaki hiçbir aday kabul eşiğini
        geçemiyorsa (ham skor <= eşik) tüm corpus'ta tekrar aranır ki sure
        değişimi sayaçları başka sureleri görebilsin.

        Returns:
            Yeni konum veya None (güncelleme yok)
        """
        self.last_transcript = text or ""
        query = normalize_ar(text)
        self.last_query = query

        if token_count(query) < MIN_QUERY_TOKENS:
            self.last_candidates = []
            return None

        restrict = None
        if self.restrict_to_surah and self.tracker.is_tracking:
            restrict = self.tracker.position.surah

        candidates = search_quran(self.corpus, query, restrict_surah=restrict, top_k=self.top_k)
        update = self.tracker.advance(candidates)

        if update is None and restrict is not None and not any(
            c.score > ACCEPT_THRESHOLD for c in candidates
        ):
            candidates = search_quran(self.corpus, query, top_k=self.top_k)
            update = self.tracker.advance(candidates)

        self.last_candidates = candidates
        return update

    def process_audio(self, pcm_bytes: bytes) -> Optional[TrackedPosition]:
        """Ses segmentini yazıya döker ve process_text ile işler"""
        if self.transcriber is None:
            raise RuntimeError("Bu oturum için transcriber tanımlı değil")
        return self.process_text(self.transcriber(pcm_bytes))

    async def submit(self, text: str) -> Optional[TrackedPosition]:
        return await self._admit(partial(self.process_text, text))

    async def submit_audio(self, pcm_bytes: bytes) -> Optional[TrackedPosition]:
        return await self._admit(partial(self.process_audio, pcm_bytes))

    async def _admit(self, job: Callable[[], Optional[TrackedPosition]]) -> Optional[TrackedPosition]:
        """
        Tek kişilik kapı

        Bir döngü çalışırken çağrılırsa iş bekleme yuvasına yazılır ve None
        döner; çalışan döngü bitince yuvadaki son iş işlenir. Bekletilen
        reset, çalışan iş bittiğinde uygulanır ve o işin sonucu atılır
        (last_segment_dropped).

        Returns:
            Bu çağrının çalıştırdığı işlerden gelen son konum güncellemesi
        """
        if self._in_flight:
            if self._pending is not None:
                logger.debug("Bekleyen segment yenisiyle değiştirildi")
            self._pending = job
            return None

        self._in_flight = True
        self.last_segment_dropped = False
        latest: Optional[TrackedPosition] = None
        try:
            while job is not None:
                update = await asyncio.to_thread(job)
                self.last_segment_dropped = self._reset_deferred
                if self._reset_deferred:
                    # Reset öncesi kabul edilen segment: sonucu atılır
                    self._reset_deferred = False
                    self._clear()
                    latest = None
                elif update is not None:
                    latest = update
                job, self._pending = self._pending, None
        finally:
            self._in_flight = False
            if self._reset_deferred:
                self._reset_deferred = False
                self._clear()

        return latest
