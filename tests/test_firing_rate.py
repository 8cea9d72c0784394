import numpy as np
import pytest

from unitscreen.errors import ConfigurationError, EmptyInputError
from unitscreen.firing_rate import firing_rate_mask, mean_rates


def test_rate_threshold():
    rates = np.array([[0.5, 2.0, 1.0], [0.5, 2.0, 1.0]])
    assert firing_rate_mask(rates, min_rate=1).tolist() == [True, False, False]


def test_counts_converted_with_bin_size():
    counts = np.array([[0, 1], [1, 1], [0, 1], [0, 1]])
    rates = mean_rates(counts, bin_size=0.01, counts_to_rate=True)
    np.testing.assert_allclose(rates, [25.0, 100.0])
    assert firing_rate_mask(counts, 50, 0.01, counts_to_rate=True).tolist() == [True, False]
    # without conversion the counts are compared directly
    assert firing_rate_mask(counts, 0.5).tolist() == [True, False]


def test_zero_minimum_flags_nothing():
    assert not firing_rate_mask(np.zeros((5, 4)), 0).any()


def test_empty_input():
    with pytest.raises(EmptyInputError):
        mean_rates(np.empty((0, 2)))


def test_bad_bin_size():
    with pytest.raises(ConfigurationError):
        mean_rates(np.ones((2, 2)), bin_size=0, counts_to_rate=True)
