import pytest

from recitation.arabic_norm import normalize_ar
from recitation.corpus import Corpus
from recitation.errors import UnknownChapterError
from recitation.search import combine_verses, search_quran


def keys(results):
    return [(r.surah, r.ayah) for r in results]


def test_combine_verses(sample_corpus):
    assert combine_verses(sample_corpus, 0) == "بسم الله الرحمن الرحيم الحمد لله رب العالمين"


def test_combine_verses_last_verse(sample_corpus):
    last = sample_corpus.verses[-1]

    assert combine_verses(sample_corpus, 4) == normalize_ar(last.text) + " "


def test_results_sorted_by_score(sample_corpus):
    results = search_quran(sample_corpus, "الرحمن الرحيم")

    assert len(results) > 0
    assert all(results[0].score >= r.score for r in results)
    assert [r.score for r in results] == sorted((r.score for r in results), reverse=True)
    # En kısa pencere (1:3 + 2:1) en yüksek skor
    assert keys(results) == [(1, 3), (1, 2), (1, 1)]


def test_window_spans_verse_boundary(sample_corpus):
    results = search_quran(sample_corpus, "الرحيم الحمد لله")

    assert keys(results)[0] == (1, 1)
    assert results[0].score > 1
    assert results[0].text == "بسم الله الرحمن الرحيم"


def test_filters_by_surah(sample_corpus):
    results = search_quran(sample_corpus, "الرحمن", 1)

    assert results
    assert all(r.surah == 1 for r in results)

    results = search_quran(sample_corpus, "ذلك الكتاب", restrict_surah=2)
    assert keys(results) == [(2, 2), (2, 1)]


def test_restricted_window_uses_corpus_order(sample_corpus):
    # 1:3 penceresi sonraki surenin ilk ayetini de içerir
    results = search_quran(sample_corpus, "الرحيم الم", restrict_surah=1)

    assert keys(results)[0] == (1, 3)
    assert results[0].score > 1


def test_respects_top_k(sample_corpus):
    assert len(search_quran(sample_corpus, "الله", top_k=2)) <= 2
    assert search_quran(sample_corpus, "الله", top_k=0) == []


def test_empty_corpus():
    assert search_quran(Corpus.from_verses([]), "الحمد لله") == []
    assert search_quran(Corpus.from_verses([]), "الحمد لله", restrict_surah=1) == []


def test_empty_query(sample_corpus):
    assert search_quran(sample_corpus, "") == []
    assert search_quran(sample_corpus, "   ") == []


def test_drops_zero_scores(sample_corpus):
    results = search_quran(sample_corpus, "ذلك الكتاب")

    assert all(r.score > 0 for r in results)
    assert set(keys(results)) == {(2, 1), (2, 2)}


def test_ties_keep_corpus_order():
    corpus = Corpus.from_verses([
        {"surah": 1, "ayah": 1, "text": "p q"},
        {"surah": 1, "ayah": 2, "text": "r s"},
        {"surah": 1, "ayah": 3, "text": "p q"},
    ], normalize=False)

    results = search_quran(corpus, "p q")

    assert results[1].score == results[2].score
    assert keys(results) == [(1, 3), (1, 1), (1, 2)]


def test_unknown_restrict_surah(sample_corpus):
    with pytest.raises(UnknownChapterError):
        search_quran(sample_corpus, "الرحمن", restrict_surah=9)
