import numpy as np
import pytest

from unitscreen.coincidence import (
    coincidence_mask,
    coincidence_mask_from_cutoff,
    coincidence_matrix,
    flag_coincident_units,
)
from unitscreen.errors import EmptyInputError


def _spikes_with_duplicate(seed=0, bins=2000, units=8):
    rng = np.random.RandomState(seed)
    spikes = rng.poisson(0.3, size=(bins, units))
    # unit 5 is a copy of unit 2 (shunt)
    spikes[:, 5] = spikes[:, 2]
    return spikes


def test_three_unit_example():
    S = np.array([[1, 1, 0], [2, 2, 0], [0, 0, 5], [3, 3, 1]])
    coinc = coincidence_matrix(S)
    # both positive and equal in 3 of 4 bins
    assert coinc[0, 1] == coinc[1, 0] == 75.0
    assert coinc[0, 2] == coinc[1, 2] == 0.0
    bad = coincidence_mask_from_cutoff(S, 50)
    assert bad.tolist() == [True, True, False]


def test_symmetric_with_zero_diagonal():
    coinc = coincidence_matrix(_spikes_with_duplicate())
    assert np.array_equal(coinc, coinc.T)
    assert np.all(np.diag(coinc) == 0)
    assert np.all((coinc >= 0) & (coinc <= 100))


def test_requires_exact_equality():
    # always co-active but never the same count
    S = np.array([[1, 2], [2, 1], [3, 4], [1, 2]])
    assert coincidence_matrix(S)[0, 1] == 0.0


def test_single_unit_never_flagged():
    S = np.array([[1], [1], [2]])
    assert coincidence_mask_from_cutoff(S, 0).tolist() == [False]


def test_silent_partner_never_flagged():
    S = np.array([[1, 0], [2, 0], [1, 0]])
    assert not coincidence_mask_from_cutoff(S, 0).any()


def test_duplicate_units_are_flagged():
    bad = coincidence_mask(_spikes_with_duplicate(), 99.5)
    assert bad[2] and bad[5]
    assert bad.sum() == 2


def test_needs_symmetric_significance():
    significant = np.array([[False, True], [False, False]])
    assert flag_coincident_units(significant).tolist() == [False, False]
    assert flag_coincident_units(significant | significant.T).tolist() == [True, True]


def test_diagonal_is_ignored():
    assert not flag_coincident_units(np.eye(3, dtype=bool)).any()


def test_flag_count_non_increasing_with_percentile():
    spikes = _spikes_with_duplicate(seed=3, bins=300, units=20)
    counts = [coincidence_mask(spikes, p).sum() for p in (50, 90, 95, 99, 99.5, 100)]
    assert all(a >= b for a, b in zip(counts, counts[1:]))


def test_empty_input():
    with pytest.raises(EmptyInputError):
        coincidence_matrix(np.empty((0, 3)))
