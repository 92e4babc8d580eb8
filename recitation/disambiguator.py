"""
Pozisyon takibi: sıralanmış adaylardan okunan (sure, ayet) konumunu günceller

Durumlar: UNSET (henüz konum yok) ve TRACKING(surah, ayah). Konum sadece
advance() ile değişir; sure değişimi histerezis ile, geri kayma ise hiç
kabul edilmez.
"""

from dataclasses import dataclass, field, replace
from typing import Dict, List, Optional, Sequence, Tuple
import logging

from recitation.config import (
    ACCEPT_THRESHOLD,
    LOOKAHEAD_THRESHOLD,
    MAX_SURAH_PENALTY,
    POSITION_NORMALIZER,
    SURAH_DISTANCE_SCALE,
    SURAH_SWITCH_HITS,
)
from recitation.corpus import Corpus
from recitation.errors import InvariantViolationError, UnknownChapterError
from recitation.search import ScoredCandidate

logger = logging.getLogger(__name__)


@dataclass
class TrackedPosition:
    """surah == 0 ise henüz hiçbir konum onaylanmadı"""
    surah: int = 0
    ayah: int = 0
    switch_counters: Dict[int, int] = field(default_factory=dict)

    @property
    def is_set(self) -> bool:
        return self.surah != 0

    def copy(self) -> "TrackedPosition":
        return replace(self, switch_counters=dict(self.switch_counters))

    def to_dict(self) -> Dict:
        return {"surah_no": self.surah, "ayah_no": self.ayah}


class PositionTracker:
    """Tek oturumluk konum takipçisi (tek thread, aynı anda tek advance çağrısı)"""

    def __init__(self, corpus: Corpus):
        self.corpus = corpus
        self._state = TrackedPosition()

    @property
    def position(self) -> TrackedPosition:
        return self._state.copy()

    @property
    def is_tracking(self) -> bool:
        return self._state.is_set

    def reset(self) -> None:
        """UNSET durumuna döner, sayaçlar temizlenir"""
        self._state = TrackedPosition()

    def rerank(self, candidates: Sequence[ScoredCandidate]) -> List[Tuple[ScoredCandidate, float]]:
        """
        Adayları mevcut konuma uzaklık cezasıyla yeniden skorlar

        Sure cezası: min(10 * |Δsure| / 144, 0.5)
        Ayet cezası: |ayet - (mevcut + 1)| / ayet_sayısı / 144  (beklenen konum bir sonraki ayet)

        Returns:
            [(aday, düzeltilmiş skor)], skora göre azalan (stabil)
        """
        surah, ayah = self._state.surah, self._state.ayah
        adjusted = []

        for cand in candidates:
            surah_penalty = min(
                SURAH_DISTANCE_SCALE * abs(cand.surah - surah) / POSITION_NORMALIZER,
                MAX_SURAH_PENALTY,
            )
            ayah_penalty = (
                abs(cand.ayah - (ayah + 1))
                / self.corpus.ayah_count(cand.surah)
                / POSITION_NORMALIZER
            )
            adjusted.append((cand, cand.score - surah_penalty - ayah_penalty))

        adjusted.sort(key=lambda pair: pair[1], reverse=True)
        return adjusted

    def advance(self, candidates: Sequence[ScoredCandidate]) -> Optional[TrackedPosition]:
        """
        Bir segmentin adaylarını işler

        Args:
            candidates: search_quran çıktısı (skora göre sıralı)

        Returns:
            Yeni konum (değişmediyse de) veya None (bu segmentte güncelleme yok)

        Raises:
            InvariantViolationError: Corpus'ta olmayan sure/ayet içeren aday
        """
        self._check_candidates(candidates)

        if not candidates:
            return None

        state = self._state

        if not state.is_set:
            top = candidates[0]
            logger.info(f"Konum bulundu: {top.surah}:{top.ayah} (score={top.score:.3f})")
            return self._move_to(state, top)

        survivors = [
            pair for pair in self.rerank(candidates)
            if pair[1] > ACCEPT_THRESHOLD
        ]
        if not survivors:
            return None

        top, top_score = survivors[0]

        if top.surah != state.surah:
            hits = state.switch_counters.get(top.surah, 0) + 1
            state.switch_counters[top.surah] = hits

            if hits < SURAH_SWITCH_HITS:
                logger.debug(
                    f"Sure değişimi bekletiliyor: {state.surah} -> {top.surah} "
                    f"({hits}/{SURAH_SWITCH_HITS})"
                )
                return None

            state.switch_counters[top.surah] = 0
            logger.info(
                f"Sure değişti: {state.surah}:{state.ayah} -> {top.surah}:{top.ayah} "
                f"(score={top_score:.3f})"
            )
            return self._move_to(state, top)

        chosen = top
        if len(survivors) > 1:
            second, second_score = survivors[1]
            if (
                second_score >= LOOKAHEAD_THRESHOLD
                and second.surah == state.surah
                and second.ayah == state.ayah + 1
            ):
                chosen = second

        if chosen.surah == state.surah and chosen.ayah == state.ayah - 1:
            logger.debug(f"Geri kayma yok sayıldı: {chosen.surah}:{chosen.ayah}")
            return None

        if (chosen.surah, chosen.ayah) != (state.surah, state.ayah):
            logger.info(f"Ayet: {state.surah}:{state.ayah} -> {chosen.surah}:{chosen.ayah}")

        return self._move_to(state, chosen)

    def _move_to(self, state: TrackedPosition, cand: ScoredCandidate) -> TrackedPosition:
        state.surah = cand.surah
        state.ayah = cand.ayah
        return state.copy()

    def _check_candidates(self, candidates: Sequence[ScoredCandidate]) -> None:
        for cand in candidates:
            try:
                ayah_count = self.corpus.ayah_count(cand.surah)
            except UnknownChapterError as e:
                raise InvariantViolationError(f"Geçersiz aday: {cand.surah}:{cand.ayah}: {e}") from e

            if not 1 <= cand.ayah <= ayah_count:
                raise InvariantViolationError(
                    f"Geçersiz aday: {cand.surah}:{cand.ayah} (sure {ayah_count} ayet)"
                )
