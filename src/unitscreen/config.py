"""Options for `screening.screen_and_prune`.

Defaults follow the lab's long-standing behaviour: only the firing-rate check
runs, with a minimum of 0 (i.e. nothing is removed) unless asked otherwise.
"""

from dataclasses import dataclass, fields, replace as _replace
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import numpy as np
import yaml

from .errors import ConfigurationError
from .trial_data import TrialSelection, WindowSpec, parse_window


@dataclass(frozen=True)
class ScreenConfig:
    # None: every array that has spikes
    arrays: Optional[Tuple[str, ...]] = None
    check_coincidence: bool = False
    percentile_cutoff: float = 99.5
    check_firing_rate: bool = True
    min_firing_rate: float = 0.0
    # ((landmark, bins_after), (landmark, bins_after)); statistics only
    rate_window: Optional[Tuple[WindowSpec, WindowSpec]] = None
    use_trials: TrialSelection = None
    # divide counts by bin size before comparing with min_firing_rate
    counts_to_rate: bool = False

    def __post_init__(self):
        if isinstance(self.arrays, str):
            object.__setattr__(self, "arrays", (self.arrays,))
        elif self.arrays is not None:
            object.__setattr__(self, "arrays", tuple(self.arrays))
        p = float(self.percentile_cutoff)
        if not np.isfinite(p) or p <= 0 or p > 100:
            raise ConfigurationError(
                f"percentile_cutoff must be in (0, 100], got {self.percentile_cutoff!r}"
            )
        if not float(self.min_firing_rate) >= 0:
            raise ConfigurationError(
                f"min_firing_rate must be >= 0, got {self.min_firing_rate!r}"
            )
        if self.rate_window is not None:
            window = tuple(self.rate_window)
            if len(window) != 2:
                raise ConfigurationError(
                    f"rate_window needs a start and an end, got {self.rate_window!r}"
                )
            for w in window:
                parse_window(w)
            object.__setattr__(
                self,
                "rate_window",
                tuple(w if isinstance(w, str) else tuple(w) for w in window),
            )

    def replace(self, **changes) -> "ScreenConfig":
        return _replace(self, **changes)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "ScreenConfig":
        """Build a config from a mapping; None values keep the default."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(d) - known)
        if unknown:
            raise ConfigurationError(f"unknown screening options: {unknown}")
        return cls(**{k: v for k, v in d.items() if v is not None})

    @classmethod
    def from_yaml(cls, path) -> "ScreenConfig":
        cfg = yaml.safe_load(Path(path).read_text()) or {}
        if not isinstance(cfg, dict):
            raise ConfigurationError(f"{path}: expected a mapping of options")
        return cls.from_dict(cfg)
