import numpy as np
import pandas as pd
import pytest

from unitscreen.errors import ConfigurationError, DataShapeError
from unitscreen.trial_data import (
    ArrayData,
    Trial,
    bin_size_of,
    get_arrays_with_field,
    parse_window,
    select_trials,
    trial_window,
    trim_trials,
    validate_array,
)


def _trial(n_bins=10, n_units=3, result="R", go=4, bin_size=0.01):
    spikes = np.arange(n_bins * n_units).reshape(n_bins, n_units)
    return Trial(
        bin_size=bin_size,
        arrays={"M1": ArrayData(spikes=spikes)},
        idx={"idx_go_cue": go},
        meta={"result": result},
    )


def test_default_unit_guide():
    data = ArrayData(spikes=np.zeros((5, 3)))
    assert list(data.unit_guide.columns) == ["channel", "unit"]
    assert len(data.unit_guide) == 3
    assert data.n_units == 3


def test_unit_guide_from_array():
    data = ArrayData(spikes=np.zeros((5, 2)), unit_guide=np.array([[1, 1], [4, 2]]))
    assert isinstance(data.unit_guide, pd.DataFrame)
    assert data.unit_guide["channel"].tolist() == [1, 4]


def test_keep_units_preserves_order():
    data = ArrayData(spikes=np.arange(12).reshape(3, 4))
    kept = data.keep_units(np.array([0, 2, 3]))
    assert kept.spikes.tolist() == [[0, 2, 3], [4, 6, 7], [8, 10, 11]]
    assert kept.unit_guide["channel"].tolist() == [1, 3, 4]
    assert kept.unit_guide.index.tolist() == [0, 1, 2]


def test_get_arrays_with_field():
    t = _trial()
    t.arrays["PMd"] = ArrayData(spikes=np.zeros((10, 2)))
    assert get_arrays_with_field([t], "spikes") == ["M1", "PMd"]
    assert get_arrays_with_field([], "spikes") == []


def test_select_trials_forms():
    trials = [_trial(result=r) for r in ["R", "A", "R", "F"]]
    assert select_trials(trials) == [0, 1, 2, 3]
    assert select_trials(trials, [3, 1]) == [3, 1]
    assert select_trials(trials, np.array([True, False, False, True])) == [0, 3]
    assert select_trials(trials, {"result": "R"}) == [0, 2]
    assert select_trials(trials, {"result": ["A", "F"]}) == [1, 3]
    assert select_trials(trials, lambda t: t.meta["result"] != "R") == [1, 3]


@pytest.mark.parametrize(
    "selection",
    [
        [],
        [4],
        [-1],
        [0.7, 2.9],
        ["0", "1"],
        np.array([True, False]),
        {"result": "X"},
        {"epoch": "BL"},
    ],
)
def test_select_trials_invalid(selection):
    trials = [_trial() for _ in range(4)]
    with pytest.raises(ConfigurationError):
        select_trials(trials, selection)


def test_trial_window_inclusive_and_clipped():
    t = _trial(n_bins=10, go=4)
    assert trial_window(t, ("start", 2), ("idx_go_cue", 3)) == slice(2, 8)
    assert trial_window(t, "idx_go_cue", ("idx_go_cue", 50)) == slice(4, 10)
    assert trial_window(t, ("start", 0), "end") == slice(0, 10)


def test_trial_window_nan_landmark_is_empty():
    t = _trial(go=np.nan)
    s = trial_window(t, "idx_go_cue", ("idx_go_cue", 2))
    assert t.arrays["M1"].spikes[s].shape[0] == 0


def test_trial_window_unknown_landmark():
    with pytest.raises(ConfigurationError):
        trial_window(_trial(), "idx_movement_on", "end")


def test_trim_trials_does_not_modify():
    trials = [_trial(n_bins=10), _trial(n_bins=8)]
    mats = trim_trials(trials, "M1", ("idx_go_cue", 0), ("idx_go_cue", 1))
    assert [m.shape for m in mats] == [(2, 3), (2, 3)]
    assert trials[0].arrays["M1"].spikes.shape == (10, 3)
    assert trim_trials(trials, "M1")[1].shape == (8, 3)


def test_validate_array():
    trials = [_trial(), _trial()]
    assert validate_array(trials, "M1") == 3
    with pytest.raises(ConfigurationError):
        validate_array(trials, "PMd")


def test_validate_array_shape_errors():
    ragged = [_trial(n_units=3), _trial(n_units=4)]
    with pytest.raises(DataShapeError):
        validate_array(ragged, "M1")

    mismatched = [_trial()]
    mismatched[0].arrays["M1"].unit_guide = mismatched[0].arrays["M1"].unit_guide.iloc[:2]
    with pytest.raises(DataShapeError):
        validate_array(mismatched, "M1")

    missing = [_trial(), _trial()]
    missing[1].arrays = {}
    with pytest.raises(DataShapeError):
        validate_array(missing, "M1")


def test_bin_size_of():
    assert bin_size_of([_trial(), _trial()]) == 0.01
    with pytest.raises(ConfigurationError):
        bin_size_of([_trial(bin_size=0.01), _trial(bin_size=0.02)])


def test_select_trials_accepts_whole_floats():
    trials = [_trial() for _ in range(4)]
    assert select_trials(trials, [1.0, 3.0]) == [1, 3]


@pytest.mark.parametrize(
    "spec", [("idx_go_cue",), ("idx_go_cue", 2.5), (5, 0), 5, ("idx_go_cue", 1, 2)]
)
def test_parse_window_rejects_malformed(spec):
    with pytest.raises(ConfigurationError):
        parse_window(spec)


def test_parse_window_forms():
    assert parse_window("idx_go_cue") == ("idx_go_cue", 0)
    assert parse_window(["idx_go_cue", 3]) == ("idx_go_cue", 3)
