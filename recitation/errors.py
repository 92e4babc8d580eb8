"""
Hata tipleri
"""


class RecitationError(Exception):
    """Tüm takip hatalarının tabanı"""


class CorpusLoadError(RecitationError):
    """Kuran metni yüklenemedi (dosya yok, bozuk veya eksik)"""


class UnknownChapterError(RecitationError, LookupError):
    """Sure numarası [1, N] aralığında değil"""

    def __init__(self, surah_no: int, surah_count: int):
        super().__init__(f"Surah {surah_no} not in range [1, {surah_count}]")
        self.surah_no = surah_no


class NotFoundError(RecitationError, LookupError):
    """İstenen ayet corpus'ta yok"""

    def __init__(self, surah_no: int, ayah_no: int):
        super().__init__(f"Ayah {surah_no}:{ayah_no} not found")
        self.surah_no = surah_no
        self.ayah_no = ayah_no


class InvariantViolationError(RecitationError):
    """Takipçiye bozuk aday verildi (programlama hatası)"""
