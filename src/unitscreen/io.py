"""I/O helpers for trial collections.

MATLAB TrialData files store one struct per trial with fields such as
``bin_size``, ``M1_spikes``, ``M1_unit_guide``, ``idx_go_cue`` and free-form
metadata (``result``, ``epoch``, ...). `load_trial_data` turns such a file into
a ``list[Trial]``; this is the only place where the ``<array>_spikes`` field
naming appears. Pickled ``list[Trial]`` objects are supported as well.
"""
from pathlib import Path
from typing import Any, Dict, List, Optional
import pickle

import numpy as np
import scipy.io

from .trial_data import ArrayData, Trial

SPIKES_SUFFIX = "_spikes"
GUIDE_SUFFIX = "_unit_guide"
IDX_PREFIX = "idx_"
DEFAULT_VARIABLE = "trial_data"


def mat_struct_to_dict(obj: Any):
    """Convert a MATLAB struct (or struct array) loaded with scipy.

    Struct arrays become lists and structs become dicts of their raw field
    values; numeric arrays are returned unchanged.
    """
    if isinstance(obj, np.ndarray):
        if obj.dtype == "O":
            return [mat_struct_to_dict(o) for o in obj.flatten()]
        return obj
    elif hasattr(obj, "_fieldnames"):
        return {f: getattr(obj, f) for f in obj._fieldnames}
    return obj


def _scalar(value):
    """Unwrap the (1, 1) arrays and 1-element strings loadmat produces."""
    if isinstance(value, np.ndarray):
        if value.dtype.kind == "U":
            return str(value.flatten()[0]) if value.size else ""
        if value.size == 1:
            return value.flatten()[0].item()
        if value.size == 0:
            return None
    return value


def _landmark(value) -> float:
    v = _scalar(value)
    if v is None or isinstance(v, np.ndarray):
        # empty or multi-valued landmarks are not usable as window bounds
        return float("nan")
    return float(v) - 1  # MATLAB bins are 1-based


def _trial_from_fields(fields: Dict[str, Any]) -> Trial:
    arrays = {}
    for name, value in fields.items():
        if name.endswith(SPIKES_SUFFIX):
            array = name[: -len(SPIKES_SUFFIX)]
            spikes = np.atleast_2d(np.asarray(value))
            guide = fields.get(array + GUIDE_SUFFIX)
            if guide is not None:
                guide = np.atleast_2d(np.asarray(guide))
                if guide.size == 0:
                    guide = np.empty((0, 2))
            arrays[array] = ArrayData(spikes=spikes, unit_guide=guide)

    idx = {}
    meta = {}
    for name, value in fields.items():
        if name.endswith(SPIKES_SUFFIX) or name.endswith(GUIDE_SUFFIX) or name == "bin_size":
            continue
        if name.startswith(IDX_PREFIX):
            idx[name] = _landmark(value)
        else:
            meta[name] = _scalar(value)

    return Trial(
        bin_size=float(_scalar(fields["bin_size"])),
        arrays=arrays,
        idx=idx,
        meta=meta,
    )


def load_mat_trial_data(mat_path: str, variable: Optional[str] = None) -> List[Trial]:
    data = scipy.io.loadmat(mat_path, struct_as_record=False, squeeze_me=False)
    if variable is None:
        variable = DEFAULT_VARIABLE if DEFAULT_VARIABLE in data else None
    if variable is None:
        keys = [k for k in data if not k.startswith("__")]
        if not keys:
            raise ValueError(f"{mat_path}: no variables found")
        variable = keys[0]
    structs = mat_struct_to_dict(data[variable])
    if isinstance(structs, dict):
        structs = [structs]
    return [_trial_from_fields(mat_struct_to_dict(s)) for s in structs]


def _trial_to_fields(trial: Trial) -> Dict[str, Any]:
    out = {"bin_size": float(trial.bin_size)}
    for k, v in trial.meta.items():
        out[k] = "" if v is None else v
    for k, v in trial.idx.items():
        out[k] = v + 1 if np.isfinite(v) else np.nan
    for array, data in trial.arrays.items():
        out[array + SPIKES_SUFFIX] = np.asarray(data.spikes)
        out[array + GUIDE_SUFFIX] = data.unit_guide.to_numpy()
    return out


def save_mat_trial_data(trials: List[Trial], mat_path: str, variable: str = DEFAULT_VARIABLE):
    rows = [_trial_to_fields(t) for t in trials]
    names = list(rows[0].keys()) if rows else []
    for i, r in enumerate(rows):
        if list(r.keys()) != names:
            raise ValueError(f"trial {i} has different fields than trial 0")
    struct = np.zeros((1, len(rows)), dtype=[(n, object) for n in names])
    for i, r in enumerate(rows):
        for n in names:
            struct[n][0, i] = r[n]
    scipy.io.savemat(mat_path, {variable: struct})


def load_trial_data(path: str) -> List[Trial]:
    """Load trials from a ``.mat`` TrialData file or a pickled ``list[Trial]``."""
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Trial data file not found: {path}")
    if p.suffix == ".mat":
        return load_mat_trial_data(str(p))
    with p.open("rb") as f:
        obj = pickle.load(f)
    if isinstance(obj, Trial):
        obj = [obj]
    if not isinstance(obj, list) or not all(isinstance(t, Trial) for t in obj):
        raise ValueError(f"{path}: expected a pickled list of Trial objects")
    return obj


def save_trial_data(trials: List[Trial], path: str):
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    if p.suffix == ".mat":
        save_mat_trial_data(trials, str(p))
        return
    with p.open("wb") as f:
        pickle.dump(trials, f)
