"""Shunt / duplicate-channel detection from synchronous spiking.

Two channels that carry the same electrical signal (a shunt, or a unit sorted
twice) produce identical spike counts in the same bins. For every pair of
units we count the bins in which both fired and their counts were exactly
equal, as a percentage of all bins, and compare it against a cutoff drawn from
the empirical null distribution in `reference_distribution`.

Functions
---------
- coincidence_matrix(spikes): units x units coincidence percentages
- significant_pairs(coinc, cutoff_val): boolean matrix of coinc > cutoff_val
- flag_coincident_units(significant): units with a symmetric significant partner
- coincidence_mask(spikes, percentile_cutoff): the full screener
"""

from typing import Optional

import numpy as np

from .errors import EmptyInputError
from .reference_distribution import cutoff_value


def coincidence_matrix(spikes: np.ndarray) -> np.ndarray:
    """Percentage of bins in which units i and j fired with exactly equal counts.

    spikes: bins x units count matrix (all selected trials concatenated).
    Returns a units x units float array; the diagonal is 0.
    """
    spikes = np.asarray(spikes)
    if spikes.ndim != 2:
        raise ValueError(f"spikes must be 2-D (bins x units), got shape {spikes.shape}")
    n_bins, n_units = spikes.shape
    if n_bins == 0:
        raise EmptyInputError("no time bins to compute coincidence from")

    fired = spikes > 0
    coinc = np.zeros((n_units, n_units), dtype=float)
    for i in range(n_units):
        # equality with a positive count implies the partner fired too
        same = fired[:, [i]] & (spikes == spikes[:, [i]])
        coinc[i] = same.sum(axis=0)
    np.fill_diagonal(coinc, 0.0)
    return 100.0 * coinc / n_bins


def significant_pairs(coinc: np.ndarray, cutoff_val: float) -> np.ndarray:
    return np.asarray(coinc) > cutoff_val


def flag_coincident_units(significant: np.ndarray) -> np.ndarray:
    """Unit i is bad if significant[i, j] and significant[j, i] for some j != i."""
    significant = np.asarray(significant, dtype=bool)
    both = significant & significant.T
    np.fill_diagonal(both, False)
    return both.any(axis=1)


def coincidence_mask_from_cutoff(spikes: np.ndarray, cutoff_val: float) -> np.ndarray:
    coinc = coincidence_matrix(spikes)
    return flag_coincident_units(significant_pairs(coinc, cutoff_val))


def coincidence_mask(
    spikes: np.ndarray, percentile_cutoff: float = 99.5, table: Optional[np.ndarray] = None
) -> np.ndarray:
    """Boolean mask over units flagged as shunted or duplicated.

    The cutoff is the reference distribution value at `percentile_cutoff`.
    """
    return coincidence_mask_from_cutoff(spikes, cutoff_value(percentile_cutoff, table))
