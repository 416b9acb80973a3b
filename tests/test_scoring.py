import pytest

from orbit_score.core.scoring import effective_mad, graduated_case_score, mad_score


# -------------------------------------------------
# MAD score
# -------------------------------------------------

@pytest.mark.parametrize("value", [-1000, 0, 3.5, 1e6])
def test_empty_cohort_is_neutral(value):
    assert mad_score(value, [], True) == 50
    assert mad_score(value, [], False) == 50


def test_single_peer_ratio_scaling():
    assert mad_score(100, [50], True) == 100
    assert mad_score(25, [50], True) == 10
    assert mad_score(25, [50], False) == 100
    assert mad_score(60, [50], True) == 70


def test_single_zero_peer_is_neutral():
    assert mad_score(10, [0], True) == 50


def test_value_at_median_is_neutral():
    peers = [3.0, 7.0, 9.0, 20.0, 41.0]
    assert mad_score(9.0, peers, True) == 50
    assert mad_score(9.0, peers, False) == 50


def test_worked_cohort():
    peers = [10, 12, 14, 16, 18]
    assert effective_mad(peers) == 2
    assert mad_score(16, peers, True) == 67
    assert mad_score(16, peers, False) == 33


def test_mad_floor_applies_to_tight_cohorts():
    # MAD 0, median 100 -> effective MAD 5
    peers = [100, 100, 100, 101]
    assert effective_mad(peers) == 5
    assert mad_score(105, peers, True) == 67


def test_three_mads_clamps():
    peers = [10, 12, 14, 16, 18]
    assert mad_score(20, peers, True) == 100
    assert mad_score(100, peers, True) == 100
    assert mad_score(-100, peers, True) == 10


def test_zero_median_falls_back_to_range():
    peers = [0, 0, 10]
    assert mad_score(5, peers, True) == 50
    assert mad_score(10, peers, True) == 100
    assert mad_score(10, peers, False) == 10


def test_identical_zero_peers_is_neutral():
    assert mad_score(0, [0, 0, 0], False) == 50
    assert mad_score(7, [0, 0, 0], True) == 50


# -------------------------------------------------
# Graduated decay
# -------------------------------------------------

def test_decay_boundaries():
    assert graduated_case_score(0, 30) == 1.0
    assert graduated_case_score(-5, 30) == 1.0
    assert graduated_case_score(30, 30) == 0.0
    assert graduated_case_score(45, 30) == 0.0
    assert graduated_case_score(15, 30) == 0.5
