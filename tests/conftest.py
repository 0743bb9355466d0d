import numpy as np
import pytest

from slide_drive import SlideConfig


@pytest.fixture
def horizontal_cfg():
    return SlideConfig.horizontal()


@pytest.fixture
def vertical_cfg():
    return SlideConfig.vertical()


@pytest.fixture
def rng():
    return np.random.default_rng(1234)


@pytest.fixture
def quiet_search_kwargs():
    """Small, in-process search settings that finish in a few seconds."""
    return dict(trials=6, sims_per_trial=3, seed=42, workers=1, verbose=False, show_progress=False)
