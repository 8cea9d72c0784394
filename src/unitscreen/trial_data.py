"""Trial dataclasses and the helpers the screening core needs from them.

A dataset is a plain ``list[Trial]``. Each trial keeps one `ArrayData` record
per recording array, so code never has to build ``"<array>_spikes"`` style
field names.

Functions
---------
- get_arrays_with_field(trials, field): discover arrays that carry `field`
- select_trials(trials, selection): resolve indices/mask/predicate/meta filter
- trial_window(trial, start, end): evaluation window of one trial as a slice
- trim_trials(trials, array, start, end): windowed spike matrices of one array
- validate_array(trials, array): alignment checks, returns the unit count
- bin_size_of(trials): the shared bin size
"""
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple, Union
import logging

import numpy as np
import pandas as pd

from .errors import ConfigurationError, DataShapeError

logger = logging.getLogger(__name__)

UNIT_GUIDE_COLUMNS = ("channel", "unit")

WindowSpec = Union[str, Tuple[str, int]]
TrialSelection = Union[
    None, Sequence[int], np.ndarray, Callable[["Trial"], bool], Mapping[str, Any]
]


def _as_unit_guide(guide) -> pd.DataFrame:
    if isinstance(guide, pd.DataFrame):
        return guide
    arr = np.atleast_2d(np.asarray(guide))
    if arr.size == 0:
        return pd.DataFrame(columns=list(UNIT_GUIDE_COLUMNS))
    if arr.shape[1] == len(UNIT_GUIDE_COLUMNS):
        return pd.DataFrame(arr, columns=list(UNIT_GUIDE_COLUMNS))
    return pd.DataFrame(arr)


@dataclass
class ArrayData:
    """Spikes (bins x units) and the unit guide (one row per unit) of one array."""

    spikes: np.ndarray
    unit_guide: Optional[pd.DataFrame] = None

    def __post_init__(self):
        self.spikes = np.asarray(self.spikes)
        if self.unit_guide is None:
            n_units = self.spikes.shape[1] if self.spikes.ndim == 2 else 0
            self.unit_guide = pd.DataFrame(
                {"channel": np.arange(1, n_units + 1), "unit": np.ones(n_units, dtype=int)}
            )
        else:
            self.unit_guide = _as_unit_guide(self.unit_guide)

    @property
    def n_units(self) -> int:
        return int(self.spikes.shape[1]) if self.spikes.ndim == 2 else 0

    def keep_units(self, keep: np.ndarray) -> "ArrayData":
        """New record holding only the units at positions `keep` (order preserved)."""
        return ArrayData(
            spikes=self.spikes[:, keep],
            unit_guide=self.unit_guide.iloc[keep].reset_index(drop=True),
        )


@dataclass
class Trial:
    bin_size: float
    arrays: Dict[str, ArrayData] = field(default_factory=dict)
    idx: Dict[str, float] = field(default_factory=dict)
    meta: Dict[str, Any] = field(default_factory=dict)

    @property
    def n_bins(self) -> int:
        for a in self.arrays.values():
            return int(a.spikes.shape[0])
        return 0


def get_arrays_with_field(trials: List[Trial], field: str = "spikes") -> List[str]:
    """Names of the arrays in the first trial whose `field` is set."""
    if not trials:
        return []
    return [
        name
        for name, data in trials[0].arrays.items()
        if getattr(data, field, None) is not None
    ]


def _matches(value, wanted) -> bool:
    if isinstance(wanted, (list, tuple, set, np.ndarray)):
        return any(_matches(value, w) for w in wanted)
    try:
        return bool(value == wanted)
    except ValueError:
        return bool(np.array_equal(value, wanted))


def select_trials(trials: List[Trial], selection: TrialSelection = None) -> List[int]:
    """Resolve a trial selection to a list of trial indices.

    `selection` may be None (all trials), integer indices, a boolean mask, a
    predicate ``f(trial) -> bool`` or a mapping of meta fields to a value (or a
    list of accepted values) that every selected trial must match.
    """
    n = len(trials)
    if selection is None:
        out = list(range(n))
    elif callable(selection):
        out = [i for i, t in enumerate(trials) if selection(t)]
    elif isinstance(selection, Mapping):
        for key in selection:
            if not any(key in t.meta for t in trials):
                raise ConfigurationError(f"unknown trial meta field {key!r}")
        out = [
            i
            for i, t in enumerate(trials)
            if all(k in t.meta and _matches(t.meta[k], v) for k, v in selection.items())
        ]
    else:
        arr = np.asarray(selection)
        if arr.dtype == bool:
            if arr.shape != (n,):
                raise ConfigurationError(
                    f"boolean trial mask has length {arr.size}, expected {n}"
                )
            out = np.flatnonzero(arr).tolist()
        else:
            arr = arr.flatten()
            if arr.size and (
                arr.dtype.kind not in "iuf" or np.any(arr != np.round(arr))
            ):
                raise ConfigurationError(
                    f"trial indices must be integers, got {arr.tolist()}"
                )
            arr = arr.astype(int)
            bad = arr[(arr < 0) | (arr >= n)]
            if bad.size:
                raise ConfigurationError(
                    f"trial indices out of range for {n} trials: {bad.tolist()}"
                )
            out = arr.tolist()
    if not out:
        raise ConfigurationError("trial selection is empty")
    return out


def parse_window(spec: WindowSpec) -> Tuple[str, int]:
    """Split a window end into ``(landmark, bins_after)``; a bare name means 0."""
    if isinstance(spec, str):
        return spec, 0
    if (
        isinstance(spec, (tuple, list))
        and len(spec) == 2
        and isinstance(spec[0], str)
        and isinstance(spec[1], (int, np.integer))
        and not isinstance(spec[1], bool)
    ):
        return spec[0], int(spec[1])
    raise ConfigurationError(
        f"window end must be a landmark name or (landmark, bins_after), got {spec!r}"
    )


def _landmark(trial: Trial, name: str, n_bins: int) -> float:
    if name == "start":
        return 0
    if name == "end":
        return n_bins - 1
    if name not in trial.idx:
        raise ConfigurationError(f"unknown trial landmark {name!r}")
    return trial.idx[name]


def trial_window(
    trial: Trial, start: WindowSpec, end: WindowSpec, n_bins: Optional[int] = None
) -> slice:
    """Bins from ``idx[start] + offset`` to ``idx[end] + offset`` (inclusive).

    The window is clipped to `n_bins` (default: the trial length). A NaN
    landmark gives an empty slice.
    """
    if n_bins is None:
        n_bins = trial.n_bins
    s_name, s_off = parse_window(start)
    e_name, e_off = parse_window(end)
    s = _landmark(trial, s_name, n_bins)
    e = _landmark(trial, e_name, n_bins)
    if s is None or e is None or np.isnan(s) or np.isnan(e):
        logger.warning(
            "Trial landmark %s or %s is NaN; trial contributes no bins",
            s_name,
            e_name,
        )
        return slice(0, 0)
    lo = max(int(s) + s_off, 0)
    hi = min(int(e) + e_off + 1, n_bins)
    return slice(lo, max(lo, hi))


def trim_trials(
    trials: List[Trial],
    array: str,
    start: Optional[WindowSpec] = None,
    end: Optional[WindowSpec] = None,
) -> List[np.ndarray]:
    """Spike matrices of `array`, restricted to the window when one is given.

    Trials are not modified; the returned matrices are views.
    """
    if start is None and end is None:
        return [t.arrays[array].spikes for t in trials]
    start = "start" if start is None else start
    end = "end" if end is None else end
    out = []
    for t in trials:
        spikes = t.arrays[array].spikes
        out.append(spikes[trial_window(t, start, end, n_bins=spikes.shape[0])])
    return out


def validate_array(trials: List[Trial], array: str) -> int:
    """Check the alignment invariants of `array` and return its unit count."""
    if not any(array in t.arrays for t in trials):
        raise ConfigurationError("array not found in trial data", array=array)
    n_units = None
    for i, t in enumerate(trials):
        if array not in t.arrays:
            raise DataShapeError(f"missing from trial {i}", array=array)
        data = t.arrays[array]
        if data.spikes.ndim != 2:
            raise DataShapeError(
                f"spikes in trial {i} must be 2-D (bins x units), got shape "
                f"{data.spikes.shape}",
                array=array,
            )
        if data.spikes.shape[1] != len(data.unit_guide):
            raise DataShapeError(
                f"trial {i} has {data.spikes.shape[1]} spike columns but "
                f"{len(data.unit_guide)} unit guide rows",
                array=array,
            )
        if n_units is None:
            n_units = data.spikes.shape[1]
        elif data.spikes.shape[1] != n_units:
            raise DataShapeError(
                f"trial {i} has {data.spikes.shape[1]} units, trial 0 has {n_units}",
                array=array,
            )
    return int(n_units)


def bin_size_of(trials: List[Trial]) -> float:
    """Return the bin size shared by `trials`."""
    sizes = np.array([float(t.bin_size) for t in trials])
    if sizes.size == 0:
        raise ConfigurationError("no trials to take a bin size from")
    if not np.allclose(sizes, sizes[0]):
        raise ConfigurationError(
            f"inconsistent bin sizes across trials: {sorted(set(sizes.tolist()))}"
        )
    return float(sizes[0])
