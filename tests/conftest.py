import pytest

from recitation.corpus import Corpus, Verse

SAMPLE_VERSES = [
    {"surah": 1, "ayah": 1, "text": "بسم الله الرحمن الرحيم"},
    {"surah": 1, "ayah": 2, "text": "الحمد لله رب العالمين"},
    {"surah": 1, "ayah": 3, "text": "الرحمن الرحيم"},
    {"surah": 2, "ayah": 1, "text": "الم"},
    {"surah": 2, "ayah": 2, "text": "ذلك الكتاب لا ريب فيه هدى للمتقين"},
]


@pytest.fixture
def sample_verses():
    return [dict(v) for v in SAMPLE_VERSES]


@pytest.fixture
def sample_corpus(sample_verses) -> Corpus:
    """İki sure, beş ayet"""
    return Corpus.from_verses(sample_verses)


@pytest.fixture
def tracking_corpus() -> Corpus:
    """Sure 1: 7 ayet, sure 2: 5 ayet, sure 3: 3 ayet (metin önemsiz)"""
    sizes = {1: 7, 2: 5, 3: 3}
    verses = [
        Verse(surah, ayah, f"s{surah}a{ayah}")
        for surah, count in sizes.items()
        for ayah in range(1, count + 1)
    ]
    return Corpus.from_verses(verses, normalize=False)


@pytest.fixture
def quran_file(tmp_path):
    path = tmp_path / "quran_tanzil.txt"
    path.write_text(
        "".join(f"{v['surah']}|{v['ayah']}|{v['text']}\n" for v in SAMPLE_VERSES),
        encoding="utf-8",
    )
    return path
