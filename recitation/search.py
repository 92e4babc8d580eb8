"""
Aday sıralama: sorgu parçasını corpus'taki her ayet penceresine göre skorlar
"""

from dataclasses import dataclass
from typing import Dict, List, Optional

from recitation.config import DEFAULT_TOP_K
from recitation.corpus import Corpus
from recitation.matcher import phrase_match_score


@dataclass(frozen=True)
class ScoredCandidate:
    surah: int
    ayah: int
    text: str
    score: float

    def to_dict(self) -> Dict:
        return {
            "surah_no": self.surah,
            "ayah_no": self.ayah,
            "text_ar": self.text,
            "score": round(self.score, 4),
        }


def combine_verses(corpus: Corpus, index: int) -> str:
    """Ayet + ayırıcı + sonraki ayet (corpus sırasına göre)"""
    return corpus.match_window(index)


def search_quran(
    corpus: Corpus,
    query: str,
    restrict_surah: Optional[int] = None,
    top_k: int = DEFAULT_TOP_K,
) -> List[ScoredCandidate]:
    """
    Sorguya en çok benzeyen ayetleri döndürür

    Her ayet, kendisi ve corpus'taki bir sonraki ayetten oluşan pencereyle
    skorlanır; okuma çoğu zaman ayet sınırını geçer.

    Args:
        corpus: Yüklü corpus
        query: Normalize edilmiş transcript
        restrict_surah: Sadece bu surenin ayetleri (None = tüm corpus)
        top_k: En fazla kaç aday

    Returns:
        Skora göre azalan (eşitlikte corpus sırası) ScoredCandidate listesi

    Raises:
        UnknownChapterError: restrict_surah corpus'ta yok
    """
    if len(corpus) == 0 or not query or not query.strip() or top_k <= 0:
        return []

    if restrict_surah is None:
        start, end = 0, len(corpus)
    else:
        start, end = corpus.surah_range(restrict_surah)

    verses = corpus.verses
    scored = []
    for idx in range(start, end):
        score = phrase_match_score(query, combine_verses(corpus, idx))
        if score > 0:
            verse = verses[idx]
            scored.append(ScoredCandidate(verse.surah, verse.ayah, verse.text, score))

    # sort stabil: eşit skorda önceki ayet önde kalır
    scored.sort(key=lambda c: c.score, reverse=True)

    return scored[:top_k]
