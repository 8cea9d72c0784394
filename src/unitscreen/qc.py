"""QC outputs for a screening run.

Functions
---------
- screen_summary(result): JSON-serializable per-array summary
- run_qc(result, outdir): writes the JSON summary and a couple of PNG plots
- cache_statistics(result, h5_path): stores coincidence matrices, rates and masks in HDF5
"""

from pathlib import Path
from typing import Any, Dict
import json

import h5py
import matplotlib
import numpy as np

matplotlib.use("Agg")
import matplotlib.pyplot as plt

from .screening import ScreenResult


def screen_summary(result: ScreenResult) -> Dict[str, Any]:
    cfg = result.config
    arrays = {}
    for array, screen in result.screens.items():
        arrays[array] = {
            "n_units_before": int(screen.n_units),
            "n_removed": len(result.bad_units[array]),
            "removed_units": [int(u) for u in result.bad_units[array]],
            "n_coincidence_bad": int(screen.coincidence_bad.sum())
            if screen.coincidence_bad is not None
            else None,
            "n_rate_bad": int(screen.rate_bad.sum())
            if screen.rate_bad is not None
            else None,
        }
    return {
        "n_trials": len(result.trials),
        "bin_size": result.bin_size,
        "check_coincidence": cfg.check_coincidence,
        "percentile_cutoff": cfg.percentile_cutoff,
        "cutoff_value": result.cutoff_val,
        "check_firing_rate": cfg.check_firing_rate,
        "min_firing_rate": cfg.min_firing_rate,
        "counts_to_rate": cfg.counts_to_rate,
        "arrays": arrays,
        "errors": {a: str(e) for a, e in result.errors.items()},
    }


def _plot_coincidence(array, coinc, cutoff_val, bad, path):
    plt.figure(figsize=(6, 5))
    plt.imshow(coinc, cmap="viridis", interpolation="nearest")
    plt.colorbar(label="Coincident bins (%)")
    flagged = np.flatnonzero(bad)
    if flagged.size:
        plt.scatter(flagged, flagged, s=12, c="r", marker="x", label="flagged")
        plt.legend(loc="upper right")
    plt.xlabel("Unit")
    plt.ylabel("Unit")
    plt.title(f"{array}: coincidence (cutoff {cutoff_val:.3g}%)")
    plt.tight_layout()
    plt.savefig(path, dpi=120)
    plt.close()


def _plot_rates(array, rates, min_rate, path):
    plt.figure(figsize=(6, 4))
    plt.hist(rates, bins=50)
    plt.axvline(min_rate, color="r", linestyle="--", label="minimum")
    plt.xlabel("Mean firing rate")
    plt.ylabel("Number of units")
    plt.title(f"{array}: unit mean rate distribution")
    plt.legend()
    plt.tight_layout()
    plt.savefig(path, dpi=120)
    plt.close()


def run_qc(result: ScreenResult, outdir: str):
    out = Path(outdir)
    out.mkdir(parents=True, exist_ok=True)

    summary = screen_summary(result)
    with (out / "screen_summary.json").open("w") as f:
        json.dump(summary, f, indent=2)

    plots = []
    for array, screen in result.screens.items():
        if screen.coincidence is not None:
            p = out / f"{array}_coincidence.png"
            _plot_coincidence(
                array, screen.coincidence, result.cutoff_val, screen.coincidence_bad, p
            )
            plots.append(str(p))
        if screen.rates is not None:
            p = out / f"{array}_rate_hist.png"
            _plot_rates(array, screen.rates, result.config.min_firing_rate, p)
            plots.append(str(p))

    return {
        "summary_path": str(out / "screen_summary.json"),
        "plots": plots,
    }


def cache_statistics(result: ScreenResult, out_h5_path: str):
    """Save per-array screening statistics to HDF5 and return the path written."""
    path = Path(out_h5_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with h5py.File(str(path), "w") as h5:
        meta = h5.create_group("meta")
        meta.attrs["percentile_cutoff"] = float(result.config.percentile_cutoff)
        meta.attrs["min_firing_rate"] = float(result.config.min_firing_rate)
        if result.cutoff_val is not None:
            meta.attrs["cutoff_value"] = float(result.cutoff_val)
        if result.bin_size is not None:
            meta.attrs["bin_size"] = float(result.bin_size)
        data_grp = h5.create_group("data")
        for array, screen in result.screens.items():
            grp = data_grp.create_group(array)
            grp.attrs["n_units"] = int(screen.n_units)
            grp.create_dataset("bad", data=screen.bad)
            grp.create_dataset(
                "removed_units", data=np.asarray(result.bad_units[array], dtype=int)
            )
            if screen.coincidence is not None:
                grp.create_dataset("coincidence", data=screen.coincidence)
                grp.create_dataset("coincidence_bad", data=screen.coincidence_bad)
            if screen.rates is not None:
                grp.create_dataset("rates", data=screen.rates)
                grp.create_dataset("rate_bad", data=screen.rate_bad)
    return str(path)
