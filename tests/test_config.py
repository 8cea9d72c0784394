import pytest

from unitscreen.config import ScreenConfig
from unitscreen.errors import ConfigurationError


def test_defaults():
    cfg = ScreenConfig()
    assert cfg.arrays is None
    assert cfg.check_coincidence is False
    assert cfg.percentile_cutoff == 99.5
    assert cfg.check_firing_rate is True
    assert cfg.min_firing_rate == 0
    assert cfg.rate_window is None
    assert cfg.use_trials is None
    assert cfg.counts_to_rate is False


def test_single_array_name():
    assert ScreenConfig(arrays="M1").arrays == ("M1",)


@pytest.mark.parametrize("p", [0, -5, 100.5])
def test_percentile_validated(p):
    with pytest.raises(ConfigurationError):
        ScreenConfig(percentile_cutoff=p)


def test_percentile_100_allowed():
    assert ScreenConfig(percentile_cutoff=100).percentile_cutoff == 100


def test_negative_min_rate():
    with pytest.raises(ConfigurationError):
        ScreenConfig(min_firing_rate=-1)


def test_rate_window_needs_two_ends():
    with pytest.raises(ConfigurationError):
        ScreenConfig(rate_window=[["idx_go_cue", 0]])


def test_from_dict():
    cfg = ScreenConfig.from_dict({"check_coincidence": True, "min_firing_rate": None})
    assert cfg.check_coincidence is True
    assert cfg.min_firing_rate == 0
    with pytest.raises(ConfigurationError):
        ScreenConfig.from_dict({"do_shunt_check": True})


def test_from_yaml(tmp_path):
    p = tmp_path / "screen.yml"
    p.write_text(
        "arrays: [M1, PMd]\n"
        "check_coincidence: true\n"
        "min_firing_rate: 2\n"
        "rate_window: [[idx_go_cue, 0], [idx_go_cue, 30]]\n"
        "use_trials: {result: R}\n"
    )
    cfg = ScreenConfig.from_yaml(p)
    assert cfg.arrays == ("M1", "PMd")
    assert cfg.rate_window == (("idx_go_cue", 0), ("idx_go_cue", 30))
    assert cfg.use_trials == {"result": "R"}
    assert cfg.replace(min_firing_rate=0).min_firing_rate == 0


@pytest.mark.parametrize(
    "window",
    [
        ("idx_go_cue", 5),
        (("idx_go_cue",), ("idx_go_cue", 5)),
        (("idx_go_cue", 0), ("idx_go_cue", "5")),
    ],
)
def test_malformed_rate_window(window):
    with pytest.raises(ConfigurationError):
        ScreenConfig(rate_window=window)
