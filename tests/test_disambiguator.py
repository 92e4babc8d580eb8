import pytest

from recitation.config import SURAH_SWITCH_HITS
from recitation.corpus import Corpus, Verse
from recitation.disambiguator import PositionTracker, TrackedPosition
from recitation.errors import InvariantViolationError
from recitation.search import ScoredCandidate


def cand(surah, ayah, score):
    return ScoredCandidate(surah, ayah, f"s{surah}a{ayah}", score)


def at(tracker):
    pos = tracker.position
    return (pos.surah, pos.ayah)


@pytest.fixture
def tracker(tracking_corpus):
    return PositionTracker(tracking_corpus)


@pytest.fixture
def tracking_1_5(tracker):
    tracker.advance([cand(1, 5, 1.2)])
    return tracker


def test_starts_unset(tracker):
    assert not tracker.is_tracking
    assert tracker.position == TrackedPosition(0, 0, {})


def test_bootstrap_accepts_top_candidate(tracker):
    update = tracker.advance([cand(2, 3, 0.3), cand(1, 1, 0.2)])

    assert (update.surah, update.ayah) == (2, 3)
    assert tracker.is_tracking
    assert at(tracker) == (2, 3)


def test_bootstrap_without_candidates(tracker):
    assert tracker.advance([]) is None
    assert not tracker.is_tracking


def test_no_candidates_while_tracking(tracking_1_5):
    assert tracking_1_5.advance([]) is None
    assert at(tracking_1_5) == (1, 5)


def test_low_scores_are_rejected(tracking_1_5):
    assert tracking_1_5.advance([cand(1, 6, 0.85), cand(1, 7, 0.6)]) is None
    assert at(tracking_1_5) == (1, 5)


def test_moves_forward(tracking_1_5):
    update = tracking_1_5.advance([cand(1, 6, 1.1)])

    assert (update.surah, update.ayah) == (1, 6)
    assert at(tracking_1_5) == (1, 6)


def test_same_position_is_kept(tracking_1_5):
    update = tracking_1_5.advance([cand(1, 5, 1.1)])

    assert (update.surah, update.ayah) == (1, 5)


def test_distance_penalty_prefers_next_ayah(tracking_1_5):
    # Ham skorlar eşit: beklenen konuma (1:6) yakın olan kazanır
    update = tracking_1_5.advance([cand(1, 1, 1.0), cand(1, 6, 1.0)])

    assert (update.surah, update.ayah) == (1, 6)


def test_rerank_penalties(tracking_1_5):
    ranked = tracking_1_5.rerank([cand(1, 1, 1.0), cand(2, 3, 1.0), cand(3, 1, 1.0)])
    scores = {(c.surah, c.ayah): s for c, s in ranked}

    assert scores[(1, 1)] == pytest.approx(1.0 - 5 / 7 / 144)
    assert scores[(2, 3)] == pytest.approx(1.0 - 10 / 144 - 3 / 5 / 144)
    assert scores[(3, 1)] == pytest.approx(1.0 - 20 / 144 - 5 / 3 / 144)


def test_surah_penalty_is_capped():
    corpus = Corpus.from_verses([Verse(s, 1, f"s{s}") for s in range(1, 11)], normalize=False)
    tracker = PositionTracker(corpus)
    tracker.advance([cand(1, 1, 1.0)])

    ranked = {c.surah: s for c, s in tracker.rerank([cand(3, 1, 1.0), cand(10, 1, 1.0)])}

    assert ranked[3] == pytest.approx(1.0 - 20 / 144 - 1 / 144)
    assert ranked[10] == pytest.approx(1.0 - 0.5 - 1 / 144)


def test_surah_switch_needs_five_hits(tracking_1_5):
    for hits in range(1, SURAH_SWITCH_HITS):
        assert tracking_1_5.advance([cand(2, 3, 1.5)]) is None
        assert tracking_1_5.position.surah == 1
        assert tracking_1_5.position.switch_counters[2] == hits

    update = tracking_1_5.advance([cand(2, 3, 1.5)])

    assert (update.surah, update.ayah) == (2, 3)
    assert update.switch_counters[2] == 0


def test_switch_counter_survives_interruptions(tracking_1_5):
    for _ in range(SURAH_SWITCH_HITS - 1):
        tracking_1_5.advance([cand(2, 3, 1.5)])

    # Araya mevcut sureden bir eşleşme girer, sayaç sıfırlanmaz
    tracking_1_5.advance([cand(1, 6, 1.2)])
    assert at(tracking_1_5) == (1, 6)
    assert tracking_1_5.position.switch_counters[2] == SURAH_SWITCH_HITS - 1

    update = tracking_1_5.advance([cand(2, 3, 1.5)])
    assert (update.surah, update.ayah) == (2, 3)


def test_counters_are_per_surah(tracking_1_5):
    for _ in range(3):
        tracking_1_5.advance([cand(2, 3, 1.5)])
        tracking_1_5.advance([cand(3, 1, 1.5)])

    assert tracking_1_5.position.switch_counters == {2: 3, 3: 3}
    assert at(tracking_1_5) == (1, 5)


def test_lookahead_prefers_next_ayah(tracking_1_5):
    update = tracking_1_5.advance([cand(1, 5, 0.95), cand(1, 6, 0.92)])

    assert (update.surah, update.ayah) == (1, 6)


def test_lookahead_needs_high_score(tracking_1_5):
    update = tracking_1_5.advance([cand(1, 5, 0.95), cand(1, 6, 0.88)])

    assert (update.surah, update.ayah) == (1, 5)


def test_lookahead_only_for_next_ayah(tracking_1_5):
    update = tracking_1_5.advance([cand(1, 5, 0.99), cand(1, 7, 0.98)])

    assert (update.surah, update.ayah) == (1, 5)


@pytest.mark.parametrize("score", [0.9, 1.5, 2.0])
def test_backward_flicker_is_suppressed(tracking_1_5, score):
    assert tracking_1_5.advance([cand(1, 4, score)]) is None
    assert at(tracking_1_5) == (1, 5)


def test_larger_backward_jump_is_allowed(tracking_1_5):
    update = tracking_1_5.advance([cand(1, 2, 1.5)])

    assert (update.surah, update.ayah) == (1, 2)


@pytest.mark.parametrize("bad", [
    cand(1, 0, 1.0),
    cand(1, -2, 1.0),
    cand(1, 8, 1.0),
    cand(0, 1, 1.0),
    cand(9, 1, 1.0),
])
def test_malformed_candidates_fail_fast(tracker, tracking_corpus, bad):
    with pytest.raises(InvariantViolationError):
        tracker.advance([bad])

    tracked = PositionTracker(tracking_corpus)
    tracked.advance([cand(1, 5, 1.2)])
    with pytest.raises(InvariantViolationError):
        tracked.advance([cand(1, 6, 1.2), bad])
    assert at(tracked) == (1, 5)


def test_reset(tracking_1_5):
    tracking_1_5.advance([cand(2, 3, 1.5)])
    tracking_1_5.reset()

    assert not tracking_1_5.is_tracking
    assert tracking_1_5.position.switch_counters == {}


def test_returned_position_is_a_snapshot(tracking_1_5):
    update = tracking_1_5.advance([cand(1, 6, 1.2)])
    update.ayah = 99
    update.switch_counters[3] = 7

    assert at(tracking_1_5) == (1, 6)
    assert 3 not in tracking_1_5.position.switch_counters
