"""
Ayar dosyası: skor ağırlıkları, takip eşikleri ve çalışma zamanı ayarları
"""

import os
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parent.parent

# ==============================================================================
# Çalışma zamanı (env ile değiştirilebilir)
# ==============================================================================

QURAN_PATH = os.getenv("QURAN_PATH", str(PROJECT_ROOT / "quran" / "quran_tanzil.txt"))

WHISPER_MODEL_LIVE = os.getenv("WHISPER_MODEL_LIVE", "tiny")   # Live için küçük model
WHISPER_DEVICE = os.getenv("WHISPER_DEVICE", "cpu")
WHISPER_COMPUTE_TYPE = os.getenv("WHISPER_COMPUTE_TYPE", "int8")
WHISPER_CPU_THREADS = int(os.getenv("WHISPER_CPU_THREADS", "4"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

SAMPLE_RATE = 16000

# ==============================================================================
# Lexical eşleştirme
# ==============================================================================

TOKEN_COVERAGE_WEIGHT = 0.7   # Eşleşen kelime oranı ağırlığı (baskın terim)
CONSECUTIVE_BONUS = 0.2       # Ardışık kelime eşleşmesi başına bonus (üst sınır yok)
LENGTH_RATIO_WEIGHT = 0.1     # Sorgu/pencere uzunluk oranı ağırlığı

# ==============================================================================
# Aday sıralama
# ==============================================================================

DEFAULT_TOP_K = 10
WINDOW_SEPARATOR = " "        # Ayet + sonraki ayet penceresi ayırıcısı
MIN_QUERY_TOKENS = 3          # Daha kısa parçalar aranmaz (yanlış pozitif)

# ==============================================================================
# Pozisyon takibi
# ==============================================================================

SURAH_DISTANCE_SCALE = 10     # Sure farkı cezası çarpanı
POSITION_NORMALIZER = 144     # Sabit normalizasyon böleni
MAX_SURAH_PENALTY = 0.5       # Uzak sure cezası bu değeri geçmez
ACCEPT_THRESHOLD = 0.85       # Bu skorun altındaki (veya eşit) adaylar atılır
SURAH_SWITCH_HITS = 5         # Sure değişimi için gereken tespit sayısı
LOOKAHEAD_THRESHOLD = 0.9     # Sonraki ayeti tercih etmek için minimum skor
