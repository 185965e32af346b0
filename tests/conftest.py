"""Pytest configuration and fixtures"""

import numpy as np
import pytest
from hypothesis import settings, Verbosity

# Register Hypothesis profiles
settings.register_profile("ci", max_examples=100, verbosity=Verbosity.verbose, deadline=None)
settings.register_profile("dev", max_examples=20, verbosity=Verbosity.normal, deadline=None)
settings.register_profile("debug", max_examples=10, verbosity=Verbosity.verbose, deadline=None)

# Use CI profile by default
settings.load_profile("ci")


@pytest.fixture
def make_sine():
    """Factory for pure tones: make_sine(frequency, duration, sample_rate, amplitude)"""
    def _make_sine(frequency=150.0, duration=1.0, sample_rate=16000, amplitude=0.5):
        t = np.arange(int(duration * sample_rate)) / sample_rate
        return amplitude * np.sin(2 * np.pi * frequency * t)
    return _make_sine
