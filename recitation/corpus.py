"""
Kuran metnini yükler ve sure/ayet bazında salt-okunur erişim sağlar
"""

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple, Union
import logging

from recitation.arabic_norm import normalize_ar
from recitation.config import WINDOW_SEPARATOR
from recitation.errors import CorpusLoadError, NotFoundError, UnknownChapterError

logger = logging.getLogger(__name__)

# Sure meta: (surah_no, name_ar, name_tr)
SURAH_NAMES = [
    (1, "الفاتحة", "Fatiha"), (2, "البقرة", "Bakara"), (3, "آل عمران", "Al-i İmran"),
    (4, "النساء", "Nisa"), (5, "المائدة", "Maide"), (6, "الأنعام", "En'am"),
    (7, "الأعراف", "A'raf"), (8, "الأنفال", "Enfal"), (9, "التوبة", "Tevbe"),
    (10, "يونس", "Yunus"), (11, "هود", "Hud"), (12, "يوسف", "Yusuf"),
    (13, "الرعد", "Ra'd"), (14, "إبراهيم", "İbrahim"), (15, "الحجر", "Hicr"),
    (16, "النحل", "Nahl"), (17, "الإسراء", "İsra"), (18, "الكهف", "Kehf"),
    (19, "مريم", "Meryem"), (20, "طه", "Taha"), (21, "الأنبياء", "Enbiya"),
    (22, "الحج", "Hac"), (23, "المؤمنون", "Mü'minun"), (24, "النور", "Nur"),
    (25, "الفرقان", "Furkan"), (26, "الشعراء", "Şuara"), (27, "النمل", "Neml"),
    (28, "القصص", "Kasas"), (29, "العنكبوت", "Ankebut"), (30, "الروم", "Rum"),
    (31, "لقمان", "Lokman"), (32, "السجدة", "Secde"), (33, "الأحزاب", "Ahzab"),
    (34, "سبأ", "Sebe"), (35, "فاطر", "Fatır"), (36, "يس", "Yasin"),
    (37, "الصافات", "Saffat"), (38, "ص", "Sad"), (39, "الزمر", "Zümer"),
    (40, "غافر", "Gafir"), (41, "فصلت", "Fussilet"), (42, "الشورى", "Şura"),
    (43, "الزخرف", "Zuhruf"), (44, "الدخان", "Duhan"), (45, "الجاثية", "Casiye"),
    (46, "الأحقاف", "Ahkaf"), (47, "محمد", "Muhammed"), (48, "الفتح", "Fetih"),
    (49, "الحجرات", "Hucurat"), (50, "ق", "Kaf"), (51, "الذاريات", "Zariyat"),
    (52, "الطور", "Tur"), (53, "النجم", "Necm"), (54, "القمر", "Kamer"),
    (55, "الرحمن", "Rahman"), (56, "الواقعة", "Vakıa"), (57, "الحديد", "Hadid"),
    (58, "المجادلة", "Mücadele"), (59, "الحشر", "Haşr"), (60, "الممتحنة", "Mümtehine"),
    (61, "الصف", "Saff"), (62, "الجمعة", "Cuma"), (63, "المنافقون", "Münafikun"),
    (64, "التغابن", "Teğabun"), (65, "الطلاق", "Talak"), (66, "التحريم", "Tahrim"),
    (67, "الملك", "Mülk"), (68, "القلم", "Kalem"), (69, "الحاقة", "Hakka"),
    (70, "المعارج", "Mearic"), (71, "نوح", "Nuh"), (72, "الجن", "Cin"),
    (73, "المزمل", "Müzzemmil"), (74, "المدثر", "Müddessir"), (75, "القيامة", "Kıyame"),
    (76, "الإنسان", "İnsan"), (77, "المرسلات", "Mürselat"), (78, "النبأ", "Nebe"),
    (79, "النازعات", "Naziat"), (80, "عبس", "Abese"), (81, "التكوير", "Tekvir"),
    (82, "الانفطار", "İnfitar"), (83, "المطففين", "Mutaffifin"), (84, "الانشقاق", "İnşikak"),
    (85, "البروج", "Buruc"), (86, "الطارق", "Tarık"), (87, "الأعلى", "A'la"),
    (88, "الغاشية", "Gaşiye"), (89, "الفجر", "Fecr"), (90, "البلد", "Beled"),
    (91, "الشمس", "Şems"), (92, "الليل", "Leyl"), (93, "الضحى", "Duha"),
    (94, "الشرح", "İnşirah"), (95, "التين", "Tin"), (96, "العلق", "Alak"),
    (97, "القدر", "Kadir"), (98, "البينة", "Beyyine"), (99, "الزلزلة", "Zilzal"),
    (100, "العاديات", "Adiyat"), (101, "القارعة", "Karia"), (102, "التكاثر", "Tekasür"),
    (103, "العصر", "Asr"), (104, "الهمزة", "Hümeze"), (105, "الفيل", "Fil"),
    (106, "قريش", "Kureyş"), (107, "الماعون", "Maun"), (108, "الكوثر", "Kevser"),
    (109, "الكافرون", "Kafirun"), (110, "النصر", "Nasr"), (111, "المسد", "Tebbet"),
    (112, "الإخلاص", "İhlas"), (113, "الفلق", "Felak"), (114, "الناس", "Nas"),
]


@dataclass(frozen=True)
class Verse:
    """Tek ayet: (surah, ayah) anahtarı ve metni"""
    surah: int
    ayah: int
    text: str


class Corpus:
    """
    Sıralı, değiştirilemez ayet koleksiyonu.

    Ayetler corpus sırasında tutulur; her sure kendi [start, end) index
    aralığına sahiptir. Eşleştirme pencereleri (ayet + sonraki ayet,
    normalize edilmiş) yükleme sırasında bir kez hesaplanır.
    """

    def __init__(self, verses: List[Verse], normalize: bool = True):
        self._verses: Tuple[Verse, ...] = tuple(verses)
        self._ranges: Dict[int, Tuple[int, int]] = {}
        self._index: Dict[Tuple[int, int], int] = {}

        for idx, verse in enumerate(self._verses):
            start, _ = self._ranges.get(verse.surah, (idx, idx))
            self._ranges[verse.surah] = (start, idx + 1)
            self._index[(verse.surah, verse.ayah)] = idx

        texts = [normalize_ar(v.text) if normalize else v.text for v in self._verses]
        self._windows: Tuple[str, ...] = tuple(
            f"{text}{WINDOW_SEPARATOR}{texts[idx + 1] if idx + 1 < len(texts) else ''}"
            for idx, text in enumerate(texts)
        )

    @classmethod
    def from_verses(cls, verses: Iterable[Union[Verse, Dict]], normalize: bool = True) -> "Corpus":
        """
        Bellekteki ayetlerden corpus oluşturur (dict veya Verse kabul eder)

        Raises:
            CorpusLoadError: Bozuk kayıt ya da eksik/sırasız numaralama
        """
        parsed = []
        for position, item in enumerate(verses, 1):
            parsed.append(_coerce_verse(item, f"record {position}"))

        _validate_order(parsed)
        return cls(parsed, normalize=normalize)

    def __len__(self) -> int:
        return len(self._verses)

    @property
    def verses(self) -> Tuple[Verse, ...]:
        return self._verses

    @property
    def surah_numbers(self) -> List[int]:
        return sorted(self._ranges)

    @property
    def surah_count(self) -> int:
        return len(self._ranges)

    def surah_range(self, surah_no: int) -> Tuple[int, int]:
        """Surenin corpus içindeki [start, end) index aralığı"""
        if surah_no not in self._ranges:
            raise UnknownChapterError(surah_no, self.surah_count)
        return self._ranges[surah_no]

    def ayah_count(self, surah_no: int) -> int:
        """
        Surenin ayet sayısı

        Raises:
            UnknownChapterError: surah_no [1, N] dışında
        """
        start, end = self.surah_range(surah_no)
        return end - start

    def index_of(self, surah_no: int, ayah_no: int) -> int:
        try:
            return self._index[(surah_no, ayah_no)]
        except KeyError:
            raise NotFoundError(surah_no, ayah_no) from None

    def get_verse(self, surah_no: int, ayah_no: int) -> Verse:
        """
        Raises:
            NotFoundError: Ayet corpus'ta yok
        """
        return self._verses[self.index_of(surah_no, ayah_no)]

    def match_window(self, index: int) -> str:
        """Ayet metni + ayırıcı + sonraki ayet (son ayette boş)"""
        return self._windows[index]

    def get_surah_ayahs(self, surah_no: int) -> List[Dict]:
        """Belirli bir surenin ayetlerini döndürür"""
        if surah_no not in self._ranges:
            return []

        start, end = self._ranges[surah_no]
        return [
            {"ayah_no": v.ayah, "text_ar": v.text}
            for v in self._verses[start:end]
        ]

    def get_context(self, surah_no: int, ayah_no: int, before: int = 2, after: int = 10) -> List[Dict]:
        """Belirli bir ayetin etrafındaki ayetleri döndürür (sure sınırında kesilir)"""
        if (surah_no, ayah_no) not in self._index:
            return []

        start, end = self._ranges[surah_no]
        current_idx = self._index[(surah_no, ayah_no)]

        lo = max(start, current_idx - max(before, 0))
        hi = min(end, current_idx + max(after, 0) + 1)

        return [
            {"surah_no": v.surah, "ayah_no": v.ayah, "text_ar": v.text}
            for v in self._verses[lo:hi]
        ]

    def get_surah_meta(self) -> List[Dict]:
        """Tüm surelerin meta bilgilerini döndürür"""
        return [
            {
                "surah_no": surah_no,
                "name_ar": name_ar,
                "name_tr": name_tr,
                "ayah_count": self.ayah_count(surah_no) if surah_no in self._ranges else 0,
            }
            for surah_no, name_ar, name_tr in SURAH_NAMES
        ]


def load_corpus(quran_path: Union[str, Path]) -> Corpus:
    """
    Kuran metnini dosyadan yükler

    Desteklenen formatlar:
        - .json: [{"surah": int, "ayah": int, "text": str}, ...]
        - diğer: "surah|ayah|text" (her satır bir ayet)

    Raises:
        CorpusLoadError: Dosya yok, okunamıyor, bozuk veya eksik
    """
    path = Path(quran_path)

    if not path.exists():
        raise CorpusLoadError(f"Kuran dosyası bulunamadı: {path}")

    try:
        raw = path.read_text(encoding="utf-8-sig")
    except (OSError, UnicodeDecodeError) as e:
        raise CorpusLoadError(f"Kuran dosyası okunamadı: {path}: {e}") from e

    if path.suffix.lower() == ".json":
        verses = _parse_json(raw)
    else:
        verses = _parse_lines(raw)

    if not verses:
        raise CorpusLoadError(f"Hiç ayet bulunamadı: {path}")

    _validate_order(verses)
    corpus = Corpus(verses)

    logger.info(f"✓ {len(corpus)} ayet yüklendi ({corpus.surah_count} sure)")
    return corpus


def _parse_lines(raw: str) -> List[Verse]:
    verses = []
    for line_num, line in enumerate(raw.splitlines(), 1):
        line = line.strip()
        if not line:
            continue

        parts = line.split("|", 2)
        if len(parts) != 3:
            raise CorpusLoadError(f"Satır {line_num} geçersiz format: {line[:50]}")

        verses.append(_coerce_verse(
            {"surah": parts[0], "ayah": parts[1], "text": parts[2]},
            f"Satır {line_num}",
        ))
    return verses


def _parse_json(raw: str) -> List[Verse]:
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise CorpusLoadError(f"JSON parse hatası: {e}") from e

    if not isinstance(data, list):
        raise CorpusLoadError("JSON kök elemanı ayet listesi olmalı")

    return [_coerce_verse(item, f"Kayıt {i}") for i, item in enumerate(data, 1)]


def _coerce_verse(item: Union[Verse, Dict], where: str) -> Verse:
    if isinstance(item, Verse):
        surah, ayah, text = item.surah, item.ayah, item.text
    elif isinstance(item, dict):
        try:
            surah, ayah, text = item["surah"], item["ayah"], item["text"]
        except KeyError as e:
            raise CorpusLoadError(f"{where}: eksik alan {e}") from e
    else:
        raise CorpusLoadError(f"{where}: ayet kaydı değil: {item!r}")

    try:
        surah = int(surah)
        ayah = int(ayah)
    except (TypeError, ValueError) as e:
        raise CorpusLoadError(f"{where}: parse hatası: {e}") from e

    if not isinstance(text, str) or not text.strip():
        raise CorpusLoadError(f"{where}: boş ayet metni")

    return Verse(surah=surah, ayah=ayah, text=text.strip())


def _validate_order(verses: List[Verse]) -> None:
    """Sureler 1..N, her surenin ayetleri 1..n sırasıyla gelmeli"""
    expected: Optional[Tuple[int, int]] = None

    for verse in verses:
        if expected is None:
            ok = verse.surah == 1 and verse.ayah == 1
        else:
            same_surah = verse.surah == expected[0] and verse.ayah == expected[1] + 1
            next_surah = verse.surah == expected[0] + 1 and verse.ayah == 1
            ok = same_surah or next_surah

        if not ok:
            after = f"{expected[0]}:{expected[1]}" if expected else "başlangıç"
            raise CorpusLoadError(
                f"Eksik veya sırasız ayet: {verse.surah}:{verse.ayah} ({after} sonrası)"
            )
        expected = (verse.surah, verse.ayah)
