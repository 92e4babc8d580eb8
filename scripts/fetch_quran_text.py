"""
Harekesiz Kuran metnini indirir ve corpus dosyasına yazar.
Format: "surah|ayah|text" (her satır bir ayet)
"""

import os
import sys
from pathlib import Path

import requests

# Proje root dizinini bul
PROJECT_ROOT = Path(__file__).resolve().parent.parent
QURAN_PATH = os.getenv("QURAN_PATH", str(PROJECT_ROOT / "quran" / "quran_tanzil.txt"))

# Sure listesi: [{id, verses: [{id, text}]}]
QURAN_JSON_URL = "https://raw.githubusercontent.com/amrayn/quran-text/main/quran-no-tashkeel.json"


def parse_chapters(chapters: list) -> list:
    """API yanıtını (surah, ayah, text) listesine çevirir"""
    rows = []
    for chapter in chapters:
        surah_num = int(chapter.get("id", 0))
        for verse in chapter.get("verses", []):
            ayah_num = int(verse.get("id", 0))
            text = verse.get("text", "").strip().lstrip('\ufeff')

            if surah_num > 0 and ayah_num > 0 and text:
                rows.append((surah_num, ayah_num, text))
    return rows


def download_quran(output_path: str = QURAN_PATH) -> bool:
    """Kuran metnini indirir ve kaydeder"""
    print("Kuran metni indiriliyor...")

    try:
        response = requests.get(QURAN_JSON_URL, timeout=30)
        response.raise_for_status()
        chapters = response.json()

        if not isinstance(chapters, list):
            raise ValueError("API yanıtı beklenen formatta değil (sure listesi bekleniyordu)")

        rows = parse_chapters(chapters)
        if not rows:
            raise ValueError("Hiç ayet bulunamadı")

        output = Path(output_path)
        output.parent.mkdir(parents=True, exist_ok=True)
        with open(output, "w", encoding="utf-8") as f:
            for surah_num, ayah_num, text in rows:
                f.write(f"{surah_num}|{ayah_num}|{text}\n")

        print(f"✓ Kuran metni başarıyla indirildi: {output}")
        print(f"✓ Toplam {len(rows)} ayet kaydedildi")
        return True

    except requests.RequestException as e:
        print(f"✗ İndirme hatası: {e}")
        print("\nAlternatif: Manuel olarak corpus dosyasını oluşturun.")
        print("Format: Her satır 'surah|ayah|text' şeklinde olmalı.")
        return False
    except (ValueError, OSError) as e:
        print(f"✗ Hata: {e}")
        return False


if __name__ == "__main__":
    success = download_quran()
    sys.exit(0 if success else 1)
