"""Minimum firing rate check."""

from typing import Optional

import numpy as np

from .errors import ConfigurationError, EmptyInputError


def mean_rates(
    spikes: np.ndarray, bin_size: Optional[float] = None, counts_to_rate: bool = False
) -> np.ndarray:
    """Column-wise mean of `spikes` (bins x units).

    If `counts_to_rate` is set the entries are spike counts and are divided by
    `bin_size` first; otherwise they are taken to be rates already.
    """
    spikes = np.asarray(spikes, dtype=float)
    if spikes.ndim != 2:
        raise ValueError(f"spikes must be 2-D (bins x units), got shape {spikes.shape}")
    if spikes.shape[0] == 0:
        raise EmptyInputError("no time bins to compute firing rates from")
    if counts_to_rate:
        if bin_size is None or not bin_size > 0:
            raise ConfigurationError(
                f"bin size must be positive to convert counts to rates, got {bin_size!r}"
            )
        spikes = spikes / float(bin_size)
    return spikes.mean(axis=0)


def firing_rate_mask(
    spikes: np.ndarray,
    min_rate: float = 0.0,
    bin_size: Optional[float] = None,
    counts_to_rate: bool = False,
) -> np.ndarray:
    """True for units whose mean rate is below `min_rate`."""
    return mean_rates(spikes, bin_size, counts_to_rate) < min_rate
