"""unitscreen package

Removes shunted/duplicated and low-firing units from every recording array
of a trial collection.
"""

from .errors import ScreeningError, ConfigurationError, DataShapeError, EmptyInputError
from .trial_data import ArrayData, Trial
from .config import ScreenConfig
from .screening import ScreenResult, screen_and_prune, remove_bad_units

__all__ = [
    "ArrayData",
    "Trial",
    "ScreenConfig",
    "ScreenResult",
    "screen_and_prune",
    "remove_bad_units",
    "ScreeningError",
    "ConfigurationError",
    "DataShapeError",
    "EmptyInputError",
]
