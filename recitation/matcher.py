"""
Lexical phrase eşleştirme: normalize edilmiş sorgu parçasını bir metin penceresine göre skorlar
"""

from recitation.config import (
    CONSECUTIVE_BONUS,
    LENGTH_RATIO_WEIGHT,
    TOKEN_COVERAGE_WEIGHT,
)


def phrase_match_score(query: str, window: str) -> float:
    """
    Sorgunun pencereyle ne kadar örtüştüğünü skorlar (saf fonksiyon)

    - Pencere sorguyu aynen içeriyorsa: 1 + len(query) / len(window)  (> 1)
    - Aksi halde kelime örtüşmesi: her sorgu kelimesi için, birinin diğerini
      içerdiği ilk pencere kelimesi aranır. Bir önceki eşleşmenin hemen
      ardından gelen eşleşmeler CONSECUTIVE_BONUS kazandırır.

    Args:
        query: Normalize edilmiş transcript parçası
        window: Normalize edilmiş pencere metni

    Returns:
        float >= 0 (0 = eşleşme yok)
    """
    query_words = query.split()
    if not query_words or not window:
        return 0.0

    if query in window:
        return 1 + len(query) / len(window)

    window_words = window.split()
    matched_words = 0
    consecutive_bonus = 0.0
    last_match_idx = -2

    for q_word in query_words:
        idx = next(
            (i for i, w_word in enumerate(window_words) if w_word in q_word or q_word in w_word),
            -1,
        )
        if idx == -1:
            continue

        matched_words += 1
        if idx == last_match_idx + 1:
            consecutive_bonus += CONSECUTIVE_BONUS
        last_match_idx = idx

    if matched_words == 0:
        return 0.0

    word_score = matched_words / len(query_words)
    length_ratio = min(1.0, len(query) / len(window))

    return word_score * TOKEN_COVERAGE_WEIGHT + consecutive_bonus + length_ratio * LENGTH_RATIO_WEIGHT
