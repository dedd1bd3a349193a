"""
Spectral feature extraction for SoundScope.

Turns a decoded AudioBuffer into a fixed-size AudioFeatures vector of
spectral and temporal statistics. Only channel 0 is analysed.
"""

import asyncio
import logging
import math
import time
from concurrent.futures import Executor
from typing import Optional, Tuple

import librosa
import numpy as np

from soundscope.core.models import AudioBuffer, AudioFeatures, FrequencyBands, FrequencySpectrum
from soundscope.utils.errors import AnalysisTimeoutError, DecodeError, FeatureExtractionError


DEFAULT_FFT_SIZE: int = 2048
DEFAULT_ROLLOFF_THRESHOLD: float = 0.85
DEFAULT_EXTRACTION_TIMEOUT: float = 10.0  # seconds
WARM_UP_SAMPLE_RATE: int = 22050

LOW_BAND_LIMIT: float = 250.0  # Hz
HIGH_BAND_LIMIT: float = 4000.0  # Hz
PITCH_BAND: Tuple[float, float] = (80.0, 800.0)  # Hz, exclusive
TEMPO_RANGE: Tuple[float, float] = (60.0, 200.0)  # BPM
NUM_DOMINANT_FREQUENCIES: int = 5
MAGNITUDE_FLOOR: float = 1e-10

logger = logging.getLogger(__name__)


class SpectralFeatureExtractor:
    """
    Feature extraction over an averaged, Hann-windowed STFT.

    Stateless after construction; ``extract`` may run concurrently on
    different buffers.
    """

    def __init__(
        self,
        fft_size: int = DEFAULT_FFT_SIZE,
        rolloff_threshold: float = DEFAULT_ROLLOFF_THRESHOLD,
    ):
        if fft_size <= 0 or fft_size & (fft_size - 1):
            raise ValueError(f"fft_size must be a positive power of two, got {fft_size}")
        self.fft_size = fft_size
        self.rolloff_threshold = rolloff_threshold
        self.is_warm = False

    @property
    def name(self) -> str:
        return "spectral"

    def warm_up(self, sample_rate: int = WARM_UP_SAMPLE_RATE) -> None:
        """
        Run one extraction on silence.

        librosa compiles its STFT kernels on first use, which can take
        seconds. Call once while building subsystems, before any timed
        extraction.
        """
        if self.is_warm:
            return
        start_time = time.time()
        self.extract(AudioBuffer.from_array(np.zeros(self.fft_size), sample_rate))
        self.is_warm = True
        logger.info(f"Feature extractor warmed up in {time.time() - start_time:.2f}s")

    def extract(self, buffer: AudioBuffer) -> AudioFeatures:
        """
        Extract all features from an audio buffer.

        Raises:
            DecodeError: If the buffer cannot be interpreted as PCM
            FeatureExtractionError: If a feature computation fails
        """
        start_time = time.time()
        samples = self._channel_data(buffer)
        sample_rate = buffer.sample_rate

        try:
            rms_energy = compute_rms_energy(samples)
            zero_crossing_rate = compute_zero_crossing_rate(samples)
            spectrum = self.compute_spectrum(samples, sample_rate)

            features = AudioFeatures(
                spectral_centroid=spectral_centroid(spectrum),
                spectral_rolloff=spectral_rolloff(spectrum, self.rolloff_threshold),
                spectral_flatness=spectral_flatness(spectrum),
                zero_crossing_rate=zero_crossing_rate,
                rms_energy=rms_energy,
                dominant_frequencies=dominant_frequencies(spectrum),
                frequency_bands=frequency_bands(spectrum),
                pitch=estimate_pitch(spectrum),
                tempo=estimate_tempo(zero_crossing_rate, sample_rate),
                sample_rate=sample_rate,
                duration=len(samples) / sample_rate,
            )
        except Exception as e:
            raise FeatureExtractionError(f"Feature extraction failed: {e}") from e

        logger.debug(f"Features extracted in {time.time() - start_time:.3f}s")
        return features

    async def extract_async(
        self,
        buffer: AudioBuffer,
        timeout: float = DEFAULT_EXTRACTION_TIMEOUT,
        executor: Optional[Executor] = None,
    ) -> AudioFeatures:
        """
        Run ``extract`` on an executor with a bounded wait.

        On timeout the pending future is cancelled and AnalysisTimeoutError
        is raised; no partial feature set is ever returned.
        """
        loop = asyncio.get_running_loop()
        future = loop.run_in_executor(executor, self.extract, buffer)
        try:
            return await asyncio.wait_for(future, timeout=timeout)
        except asyncio.TimeoutError as e:
            raise AnalysisTimeoutError(
                f"Feature extraction exceeded {timeout:.1f}s",
                stage="feature-extraction",
                timeout=timeout
            ) from e

    def compute_spectrum(self, samples: np.ndarray, sample_rate: int) -> FrequencySpectrum:
        """
        Average magnitude spectrum over all STFT frames.

        Bin ``k`` maps to ``k * sample_rate / fft_size``.
        """
        stft = librosa.stft(
            samples.astype(np.float32),
            n_fft=self.fft_size,
            hop_length=self.fft_size // 4,
            window='hann',
            center=True,
        )
        magnitudes = np.abs(stft).mean(axis=1).astype(np.float64)
        frequencies = librosa.fft_frequencies(sr=sample_rate, n_fft=self.fft_size)
        return FrequencySpectrum(frequencies=frequencies, magnitudes=magnitudes)

    @staticmethod
    def _channel_data(buffer: AudioBuffer) -> np.ndarray:
        """Return channel 0 as float64, rejecting anything that is not float PCM."""
        if buffer.sample_rate is None or buffer.sample_rate <= 0:
            raise DecodeError(f"Invalid sample rate: {buffer.sample_rate}")

        samples = np.asarray(buffer.samples)
        if samples.ndim not in (1, 2):
            raise DecodeError(f"Expected 1 or 2 dimensional samples, got {samples.ndim}")
        if not np.issubdtype(samples.dtype, np.floating):
            raise DecodeError(f"Expected floating point samples, got {samples.dtype}")

        if samples.ndim == 2:
            if samples.shape[0] == 0:
                raise DecodeError("Audio buffer has no channels")
            samples = samples[0]

        if samples.size == 0:
            raise DecodeError("Audio buffer contains no samples")
        if not np.all(np.isfinite(samples)):
            raise DecodeError("Audio buffer contains non-finite samples")

        return samples.astype(np.float64)


# Time-domain features

def compute_rms_energy(samples: np.ndarray) -> float:
    """Root-mean-square amplitude."""
    if samples.size == 0:
        return 0.0
    return float(np.sqrt(np.mean(np.square(samples))))


def compute_zero_crossing_rate(samples: np.ndarray) -> float:
    """Fraction of adjacent pairs where one sample is negative and the other is not."""
    if samples.size < 2:
        return 0.0
    negative = samples < 0
    crossings = np.count_nonzero(negative[1:] != negative[:-1])
    return crossings / (samples.size - 1)


# Spectral features

def spectral_centroid(spectrum: FrequencySpectrum) -> float:
    """Magnitude-weighted mean frequency, 0 for an empty or silent spectrum."""
    total = spectrum.total_magnitude
    if total <= 0:
        return 0.0
    return float(np.sum(spectrum.frequencies * spectrum.magnitudes) / total)


def spectral_rolloff(spectrum: FrequencySpectrum, threshold: float = DEFAULT_ROLLOFF_THRESHOLD) -> float:
    """
    Lowest bin frequency where cumulative magnitude reaches ``threshold`` of the total.

    Returns the highest bin frequency when the threshold is never reached.
    """
    if len(spectrum) == 0:
        return 0.0
    cumulative = np.cumsum(spectrum.magnitudes)
    reached = np.nonzero(cumulative >= threshold * cumulative[-1])[0]
    if reached.size == 0:
        return float(spectrum.frequencies[-1])
    return float(spectrum.frequencies[reached[0]])


def spectral_flatness(spectrum: FrequencySpectrum) -> float:
    """Geometric over arithmetic mean of magnitudes; near 1 is noise-like, near 0 tonal."""
    if len(spectrum) == 0 or spectrum.total_magnitude <= 0:
        return 0.0
    floored = np.maximum(spectrum.magnitudes, MAGNITUDE_FLOOR)
    geometric_mean = np.exp(np.mean(np.log(floored)))
    return float(min(1.0, geometric_mean / np.mean(floored)))


def frequency_bands(spectrum: FrequencySpectrum) -> FrequencyBands:
    """Sum magnitudes into low (<250 Hz), mid (250-4000 Hz) and high (>=4000 Hz) bands."""
    freqs = spectrum.frequencies
    mags = spectrum.magnitudes
    low_mask = freqs < LOW_BAND_LIMIT
    high_mask = freqs >= HIGH_BAND_LIMIT
    mid_mask = ~(low_mask | high_mask)
    return FrequencyBands(
        low=float(np.sum(mags[low_mask])),
        mid=float(np.sum(mags[mid_mask])),
        high=float(np.sum(mags[high_mask])),
    )


def dominant_frequencies(
    spectrum: FrequencySpectrum, count: int = NUM_DOMINANT_FREQUENCIES
) -> Tuple[float, ...]:
    """Frequencies of the ``count`` strongest bins, strongest first."""
    order = np.argsort(-spectrum.magnitudes, kind='stable')[:count]
    return tuple(float(f) for f in spectrum.frequencies[order])


def estimate_pitch(spectrum: FrequencySpectrum) -> float:
    """
    Naive pitch: strongest bin strictly inside the 80-800 Hz band.

    Returns 0.0 when no bin in the band has positive magnitude.
    """
    low, high = PITCH_BAND
    in_band = np.nonzero((spectrum.frequencies > low) & (spectrum.frequencies < high))[0]
    if in_band.size == 0:
        return 0.0
    band_mags = spectrum.magnitudes[in_band]
    peak = int(np.argmax(band_mags))
    if band_mags[peak] <= 0:
        return 0.0
    return float(spectrum.frequencies[in_band[peak]])


def estimate_tempo(zero_crossing_rate: float, sample_rate: int) -> float:
    """
    Placeholder tempo from the zero-crossing rate, clamped to [60, 200] BPM.

    A linear transform of ZCR with no beat tracking behind it; treat the
    value as a coarse activity indicator rather than a real tempo.
    """
    estimated = zero_crossing_rate * sample_rate * 60.0 / (2.0 * math.pi)
    low, high = TEMPO_RANGE
    return float(max(low, min(high, estimated)))


def create_feature_extractor(config: Optional[dict] = None) -> SpectralFeatureExtractor:
    """Factory function building the extractor from the ``features`` config section."""
    config = config or {}
    return SpectralFeatureExtractor(
        fft_size=config.get('fft_size', DEFAULT_FFT_SIZE),
        rolloff_threshold=config.get('rolloff_threshold', DEFAULT_ROLLOFF_THRESHOLD),
    )
