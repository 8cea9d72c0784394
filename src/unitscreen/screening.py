"""Remove bad units from every array of a trial collection.

A unit is bad if it fires in lock-step with another unit (shunt or duplicate,
see `coincidence`) or if its mean rate over the evaluation window is below a
minimum (see `firing_rate`). Statistics are computed on the selected (and
optionally windowed) trials, but units are removed from every trial.

Functions
---------
- screen_and_prune(trials, config): run both screeners per array and prune
- remove_bad_units(trials, config=None, **options): same, returns (trials, bad_units)
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional
import logging

import numpy as np

from .coincidence import coincidence_matrix, flag_coincident_units, significant_pairs
from .config import ScreenConfig
from .errors import ConfigurationError, ScreeningError
from .firing_rate import mean_rates
from .reference_distribution import cutoff_value
from .trial_data import (
    Trial,
    bin_size_of,
    get_arrays_with_field,
    select_trials,
    trim_trials,
    validate_array,
)

logger = logging.getLogger(__name__)


@dataclass
class ArrayScreen:
    """Per-array intermediate results, kept for QC."""

    n_units: int
    coincidence: Optional[np.ndarray] = None
    coincidence_bad: Optional[np.ndarray] = None
    rates: Optional[np.ndarray] = None
    rate_bad: Optional[np.ndarray] = None
    bad: Optional[np.ndarray] = None


@dataclass
class ScreenResult:
    trials: List[Trial]
    config: ScreenConfig
    bad_units: Dict[str, List[int]] = field(default_factory=dict)
    errors: Dict[str, ScreeningError] = field(default_factory=dict)
    screens: Dict[str, ArrayScreen] = field(default_factory=dict)
    cutoff_val: Optional[float] = None
    bin_size: Optional[float] = None

    @property
    def n_removed(self) -> Dict[str, int]:
        return {a: len(idx) for a, idx in self.bad_units.items()}

    @property
    def ok(self) -> bool:
        return not self.errors

    def raise_for_errors(self):
        for err in self.errors.values():
            raise err


def evaluation_spikes(
    trials: List[Trial], array: str, use: List[int], window=None
) -> np.ndarray:
    """Concatenate the (windowed) spikes of the selected trials in trial order."""
    subset = [trials[i] for i in use]
    if window is None:
        mats = trim_trials(subset, array)
    else:
        mats = trim_trials(subset, array, window[0], window[1])
    n_units = subset[0].arrays[array].spikes.shape[1]
    if not mats:
        return np.empty((0, n_units))
    return np.concatenate(mats, axis=0)


def screen_array(
    trials: List[Trial],
    array: str,
    config: ScreenConfig,
    use: List[int],
    bin_size: float,
    cutoff_val: Optional[float] = None,
) -> ArrayScreen:
    """Compute the bad-unit mask of one array without touching the trials."""
    n_units = validate_array(trials, array)
    screen = ArrayScreen(n_units=n_units, bad=np.zeros(n_units, dtype=bool))
    if not (config.check_coincidence or config.check_firing_rate):
        return screen

    spikes = evaluation_spikes(trials, array, use, config.rate_window)
    if config.check_coincidence:
        screen.coincidence = coincidence_matrix(spikes)
        screen.coincidence_bad = flag_coincident_units(
            significant_pairs(screen.coincidence, cutoff_val)
        )
        screen.bad |= screen.coincidence_bad
    if config.check_firing_rate:
        screen.rates = mean_rates(spikes, bin_size, config.counts_to_rate)
        screen.rate_bad = screen.rates < config.min_firing_rate
        screen.bad |= screen.rate_bad
    return screen


def prune_units(trials: List[Trial], array: str, bad: np.ndarray) -> List[int]:
    """Drop the units flagged in `bad` from `array` in every trial.

    Returns the sorted indices of the removed units. Trials are left as they
    are when nothing is flagged.
    """
    bad = np.asarray(bad, dtype=bool)
    removed = np.flatnonzero(bad)
    if removed.size == 0:
        return []
    keep = np.flatnonzero(~bad)
    for t in trials:
        t.arrays[array] = t.arrays[array].keep_units(keep)
    return removed.tolist()


def screen_and_prune(
    trials: List[Trial], config: Optional[ScreenConfig] = None
) -> ScreenResult:
    """Screen every array and remove its bad units from all trials in place.

    Option problems that concern the whole call (empty trial selection,
    inconsistent bin sizes, bad percentile) raise `ConfigurationError` before
    anything is modified. Problems with a single array are logged and stored
    in `ScreenResult.errors`; that array is left untouched and the others are
    still processed.
    """
    config = ScreenConfig() if config is None else config
    if not trials:
        raise ConfigurationError("no trials to screen")
    use = select_trials(trials, config.use_trials)
    bin_size = bin_size_of([trials[i] for i in use])
    cutoff_val = (
        cutoff_value(config.percentile_cutoff) if config.check_coincidence else None
    )

    arrays = (
        list(config.arrays)
        if config.arrays
        else get_arrays_with_field(trials, "spikes")
    )
    result = ScreenResult(
        trials=trials, config=config, cutoff_val=cutoff_val, bin_size=bin_size
    )
    for array in arrays:
        try:
            screen = screen_array(trials, array, config, use, bin_size, cutoff_val)
        except ScreeningError as err:
            if err.array is None:
                err = type(err)(str(err), array=array)
            logger.error("Skipping array: %s", err)
            result.errors[array] = err
            continue
        result.screens[array] = screen
        result.bad_units[array] = prune_units(trials, array, screen.bad)
        logger.info("%s: found %d bad units.", array, len(result.bad_units[array]))
    return result


def remove_bad_units(trials: List[Trial], config: Optional[ScreenConfig] = None, **options):
    """Convenience wrapper returning ``(trials, {array: removed_indices})``.

    Keyword options override fields of `config`. Raises the first per-array
    error, after the other arrays have been processed.
    """
    config = ScreenConfig() if config is None else config
    if options:
        config = config.replace(**options)
    result = screen_and_prune(trials, config)
    result.raise_for_errors()
    return result.trials, result.bad_units
