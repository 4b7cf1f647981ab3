import numpy as np
import pytest

from tests.helpers import ramp_signal


@pytest.fixture(autouse=True)
def _seed_numpy_rng():
    """Ensure deterministic noise generation for reproducible tests."""
    np.random.seed(0)


@pytest.fixture
def track_a():
    """86 frames, tone rising 3 bins per frame: 85 global peaks (the last frame is never
    promoted) and 84 unique (1, f, f+3) probes."""
    return ramp_signal(86, start_bin=20, step=3, name="track_a")


@pytest.fixture
def track_b():
    """60 frames, tone rising 2 bins per frame: 58 (1, f, f+2) and 57 (2, f, f+4) probes."""
    return ramp_signal(60, start_bin=30, step=2, name="track_b")
