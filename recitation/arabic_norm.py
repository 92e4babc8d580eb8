"""
Arapça metin normalizasyonu: transcript ve Kuran metni aynı forma getirilir
"""

import re
import unicodedata

# Hareke, şedde, sükun, hemze işaretleri (NFD sonrası), üstün elif ve Kuran durak işaretleri
_DIACRITICS_RE = re.compile(r'[\u0610-\u061A\u064B-\u065F\u0670\u06D6-\u06ED]')

# Arapça noktalama (virgül, noktalı virgül, soru işareti, yüzde/ayırıcılar, nokta)
# harf aralığının içinde kaldığı için ayrıca boşluğa çevrilir
_ARABIC_PUNCT_RE = re.compile(r'[\u060C\u061B\u061F\u066A-\u066D\u06D4]')

# Arapça harfler, rakamlar ve boşluk dışındaki her şey
_NON_ARABIC_RE = re.compile(r'[^\u0600-\u06FF\u0750-\u077F\u08A0-\u08FF\uFB50-\uFDFF\uFE70-\uFEFF\s0-9]')

_WHITESPACE_RE = re.compile(r'\s+')

_LETTER_MAP = str.maketrans({
    '\u0671': '\u0627',  # vasla elif -> elif (NFD ile ayrışmaz)
    '\u0629': '\u0647',  # ta marbuta -> he
    '\u0649': '\u064A',  # elif maksura -> ye
    '\u0640': None,      # tatweel
})


def normalize_ar(text: str) -> str:
    """
    Arapça metni karşılaştırılabilir forma getirir:
    - NFD ile hemzeli harfler (أ إ آ ؤ ئ) taban harf + işarete ayrılır, işaretler atılır
    - Hareke/diakritik ve tatweel kaldırılır
    - ٱ->ا, ة->ه, ى->ي
    - Noktalama ve Arapça olmayan karakterler atılır
    - Boşluklar tek boşluğa indirilir
    """
    if not text:
        return ""

    text = unicodedata.normalize("NFD", text)
    text = _DIACRITICS_RE.sub('', text)
    text = text.translate(_LETTER_MAP)
    text = _ARABIC_PUNCT_RE.sub(' ', text)
    text = _NON_ARABIC_RE.sub('', text)

    return _WHITESPACE_RE.sub(' ', text).strip()


def token_count(text: str) -> int:
    """Boşlukla ayrılmış kelime sayısı"""
    return len(text.split()) if text else 0
