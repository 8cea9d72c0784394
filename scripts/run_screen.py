"""Screen a trial data file for shunted/duplicate and low-firing units.

Example:
    python scripts/run_screen.py data/Chewie_CO_2016-10-14.mat --check-coincidence \
        --min-fr 1 --calc-fr --out data/Chewie_CO_2016-10-14_clean.mat --qc-dir qc/
"""
from pathlib import Path
import argparse
import logging
import sys

from unitscreen.config import ScreenConfig
from unitscreen.errors import ScreeningError
from unitscreen.io import load_trial_data, save_trial_data
from unitscreen.qc import cache_statistics, run_qc
from unitscreen.screening import screen_and_prune


def parse_args(argv=None):
    p = argparse.ArgumentParser(
        description="Remove shunted/duplicate and low-firing units from trial data"
    )
    p.add_argument("data", type=Path, help="TrialData .mat file or pickled trials")
    p.add_argument("--config", type=Path, default=None, help="YAML file of screening options")
    p.add_argument("--arrays", nargs="+", default=None, help="Arrays to screen (default: all)")
    p.add_argument(
        "--check-coincidence",
        action="store_true",
        default=None,
        help="Look for units that fire in lock-step with another unit",
    )
    p.add_argument("--percentile-cutoff", type=float, default=None)
    p.add_argument(
        "--no-rate-check",
        dest="check_firing_rate",
        action="store_false",
        default=None,
        help="Skip the minimum firing rate check",
    )
    p.add_argument("--min-fr", dest="min_firing_rate", type=float, default=None)
    p.add_argument(
        "--calc-fr",
        dest="counts_to_rate",
        action="store_true",
        default=None,
        help="Divide spike counts by bin size before the rate check",
    )
    p.add_argument("--out", type=Path, default=None, help="Where to save the pruned trials")
    p.add_argument("--qc-dir", type=Path, default=None, help="Write QC summary and plots here")
    return p.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")

    options = {
        "arrays": args.arrays,
        "check_coincidence": args.check_coincidence,
        "percentile_cutoff": args.percentile_cutoff,
        "check_firing_rate": args.check_firing_rate,
        "min_firing_rate": args.min_firing_rate,
        "counts_to_rate": args.counts_to_rate,
    }
    options = {k: v for k, v in options.items() if v is not None}
    try:
        config = ScreenConfig.from_yaml(args.config) if args.config else ScreenConfig()
        config = config.replace(**options)
        trials = load_trial_data(str(args.data))
        result = screen_and_prune(trials, config)
    except ScreeningError as err:
        logging.error("%s", err)
        return 2

    for array, removed in result.bad_units.items():
        logging.info("%s: removed units %s", array, removed)
    if args.out is not None:
        save_trial_data(result.trials, str(args.out))
        logging.info("Saved pruned trials to %s", args.out)
    if args.qc_dir is not None:
        res = run_qc(result, str(args.qc_dir))
        cache_statistics(result, str(args.qc_dir / "screen_stats.h5"))
        logging.info("Wrote QC summary to %s", res["summary_path"])
    return 0 if result.ok else 1


if __name__ == "__main__":
    sys.exit(main())
