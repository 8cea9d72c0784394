import numpy as np
import pytest

from unitscreen.errors import ConfigurationError
from unitscreen.reference_distribution import (
    REFERENCE_DISTRIBUTION,
    cutoff_index,
    cutoff_value,
)


def test_table_shape_and_order():
    assert REFERENCE_DISTRIBUTION.shape == (1001,)
    assert REFERENCE_DISTRIBUTION[0] == 0.0
    assert np.all(np.diff(REFERENCE_DISTRIBUTION) >= 0)


def test_table_is_read_only():
    with pytest.raises(ValueError):
        REFERENCE_DISTRIBUTION[0] = 1.0


def test_cutoff_index():
    assert cutoff_index(99.5) == 995
    assert cutoff_index(100) == 1000
    assert cutoff_index(50) == 500
    assert cutoff_index(0.05) == 0


def test_cutoff_value_known_entries():
    assert cutoff_value(99.5) == pytest.approx(19.2620)
    assert cutoff_value(99) == pytest.approx(13.5133)
    assert cutoff_value(100) == REFERENCE_DISTRIBUTION[-1]
    assert cutoff_value(100) == pytest.approx(54.9793)


@pytest.mark.parametrize("p", [0, -1, 100.01, float("nan")])
def test_cutoff_out_of_range(p):
    with pytest.raises(ConfigurationError):
        cutoff_value(p)


def test_cutoff_value_custom_table():
    table = np.linspace(0, 100, 11)
    assert cutoff_value(0.5, table) == 50.0
    with pytest.raises(ConfigurationError):
        cutoff_value(99.5, table)
