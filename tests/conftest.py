"""Shared fixtures for SoundScope tests."""

import numpy as np
import pytest

from soundscope.core.models import (
    AudioBuffer,
    AudioCategory,
    AudioFeatures,
    ClassificationResult,
    FrequencyBands,
)

SAMPLE_RATE = 44100


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def sine_wave(frequency: float = 440.0, duration: float = 1.0,
              amplitude: float = 0.5, sample_rate: int = SAMPLE_RATE) -> np.ndarray:
    t = np.arange(int(duration * sample_rate)) / sample_rate
    return (amplitude * np.sin(2 * np.pi * frequency * t)).astype(np.float32)


def _make_features(**overrides) -> AudioFeatures:
    """AudioFeatures with neutral defaults; override any field by name."""
    values = dict(
        spectral_centroid=1500.0,
        spectral_rolloff=3000.0,
        spectral_flatness=0.3,
        zero_crossing_rate=0.05,
        rms_energy=0.1,
        dominant_frequencies=(440.0,),
        frequency_bands=FrequencyBands(low=10.0, mid=80.0, high=10.0),
        pitch=440.0,
        tempo=100.0,
        sample_rate=SAMPLE_RATE,
        duration=1.0,
    )
    values.update(overrides)
    return AudioFeatures(**values)


def _make_vote(label: str, confidence: float, category=AudioCategory.OTHER,
               description: str = "test vote", source: str = "test") -> ClassificationResult:
    return ClassificationResult(
        label=label,
        confidence=confidence,
        category=category,
        description=description,
        source=source,
    )


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def sine_buffer():
    """1 s, 440 Hz mono sine at half amplitude."""
    return AudioBuffer.from_array(sine_wave(), SAMPLE_RATE)


@pytest.fixture
def silent_buffer():
    """2 s of digital silence."""
    return AudioBuffer.from_array(np.zeros(2 * SAMPLE_RATE, dtype=np.float32), SAMPLE_RATE)


@pytest.fixture
def noise_buffer():
    """1 s of seeded uniform white noise."""
    rng = np.random.default_rng(42)
    return AudioBuffer.from_array(
        rng.uniform(-0.5, 0.5, SAMPLE_RATE).astype(np.float32), SAMPLE_RATE
    )


@pytest.fixture
def make_features():
    """Factory for AudioFeatures with neutral defaults."""
    return _make_features


@pytest.fixture
def make_vote():
    """Factory for ClassificationResult votes."""
    return _make_vote
