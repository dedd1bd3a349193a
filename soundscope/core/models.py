"""
Core data models for SoundScope.

Immutable value objects flowing through the recognition pipeline:
decoded buffers, spectra, feature vectors, classifier votes, and the
final fused recognition result.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, FrozenSet, List, Optional, Tuple

import numpy as np


class AudioCategory(str, Enum):
    """Fixed category enumeration for classifier votes."""
    MUSIC = "music"
    SPEECH = "speech"
    ENVIRONMENTAL = "environmental"
    ANIMAL = "animal"
    VEHICLE = "vehicle"
    OTHER = "other"


class AudioType(str, Enum):
    """Coarse content type of a whole recording."""
    MUSIC = "music"
    SPEECH = "speech"
    ENVIRONMENTAL = "environmental"
    MIXED = "mixed"
    UNKNOWN = "unknown"


class RecognitionStage(str, Enum):
    """Stages a recognition call moves through, in order."""
    INITIALIZING = "initializing"
    FEATURE_EXTRACTION = "feature-extraction"
    CLASSIFICATION = "classification"
    FUSION = "fusion"
    COMPLETE = "complete"


class Sentiment(str, Enum):
    POSITIVE = "positive"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"


@dataclass(frozen=True, eq=False)
class AudioBuffer:
    """
    Decoded PCM audio.

    ``samples`` is a read-only float array shaped (channels, frames).
    Use ``from_array`` to build one from 1-D or 2-D data.
    """

    samples: np.ndarray
    sample_rate: int

    @classmethod
    def from_array(cls, data: Any, sample_rate: int) -> "AudioBuffer":
        """Copy ``data`` into an immutable (channels, frames) buffer."""
        samples = np.array(data, dtype=np.float32, copy=True)
        if samples.ndim == 1:
            samples = samples.reshape(1, -1)
        samples.setflags(write=False)
        return cls(samples=samples, sample_rate=int(sample_rate))

    @property
    def channels(self) -> int:
        if self.samples.ndim < 2:
            return 1
        return self.samples.shape[0]

    @property
    def frames(self) -> int:
        return self.samples.shape[-1] if self.samples.ndim else 0

    @property
    def duration(self) -> float:
        """Duration in seconds."""
        if self.sample_rate <= 0:
            return 0.0
        return self.frames / self.sample_rate

    def channel(self, index: int = 0) -> np.ndarray:
        """Return the samples of one channel."""
        if self.samples.ndim == 1:
            if index != 0:
                raise IndexError(f"Channel {index} out of range for mono buffer")
            return self.samples
        return self.samples[index]


@dataclass(frozen=True, eq=False)
class FrequencySpectrum:
    """Parallel frequency/magnitude arrays derived once per analysis."""

    frequencies: np.ndarray  # Hz, strictly increasing
    magnitudes: np.ndarray  # non-negative

    def __post_init__(self) -> None:
        if len(self.frequencies) != len(self.magnitudes):
            raise ValueError(
                f"Spectrum length mismatch: {len(self.frequencies)} frequencies, "
                f"{len(self.magnitudes)} magnitudes"
            )
        if len(self.frequencies) > 1 and not np.all(np.diff(self.frequencies) > 0):
            raise ValueError("Spectrum frequencies must be strictly increasing")
        if np.any(self.magnitudes < 0):
            raise ValueError("Spectrum magnitudes must be non-negative")

    def __len__(self) -> int:
        return len(self.frequencies)

    @property
    def total_magnitude(self) -> float:
        return float(np.sum(self.magnitudes))


@dataclass(frozen=True)
class FrequencyBands:
    """Magnitude energy summed into low (<250 Hz), mid, and high (>4 kHz) bands."""

    low: float
    mid: float
    high: float

    @property
    def total(self) -> float:
        return self.low + self.mid + self.high

    def percentages(self) -> Tuple[float, float, float]:
        """Share of each band in percent; all zero when there is no energy."""
        total = self.total
        if total <= 0:
            return (0.0, 0.0, 0.0)
        return (
            self.low / total * 100.0,
            self.mid / total * 100.0,
            self.high / total * 100.0,
        )

    def to_dict(self) -> Dict[str, float]:
        return {'low': self.low, 'mid': self.mid, 'high': self.high}


@dataclass(frozen=True)
class AudioFeatures:
    """Feature vector extracted once per recognition call. Read-only."""

    spectral_centroid: float
    spectral_rolloff: float
    spectral_flatness: float
    zero_crossing_rate: float
    rms_energy: float
    dominant_frequencies: Tuple[float, ...]
    frequency_bands: FrequencyBands
    pitch: float  # Hz, 0.0 if undetected
    tempo: float  # BPM, clamped to [60, 200]
    sample_rate: int = 0
    duration: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'spectral_centroid': self.spectral_centroid,
            'spectral_rolloff': self.spectral_rolloff,
            'spectral_flatness': self.spectral_flatness,
            'zero_crossing_rate': self.zero_crossing_rate,
            'rms_energy': self.rms_energy,
            'dominant_frequencies': list(self.dominant_frequencies),
            'frequency_bands': self.frequency_bands.to_dict(),
            'pitch': self.pitch,
            'tempo': self.tempo,
            'sample_rate': self.sample_rate,
            'duration': self.duration,
        }


@dataclass(frozen=True)
class ClassificationResult:
    """A single classifier vote."""

    label: str
    confidence: float  # [0.0, 1.0]
    category: AudioCategory
    description: str
    tags: Tuple[str, ...] = ()
    source: str = ""

    def __post_init__(self) -> None:
        validate_confidence(self.confidence)
        object.__setattr__(self, 'category', AudioCategory(self.category))
        object.__setattr__(self, 'tags', tuple(self.tags))

    def to_dict(self) -> Dict[str, Any]:
        return {
            'label': self.label,
            'confidence': self.confidence,
            'category': self.category.value,
            'description': self.description,
            'tags': list(self.tags),
            'source': self.source,
        }


@dataclass(frozen=True)
class ClassificationAnalysis:
    """Ranked merge of all classifier votes."""

    primary: ClassificationResult
    secondary: Tuple[ClassificationResult, ...]
    overall_confidence: float
    detected_categories: FrozenSet[AudioCategory]
    audio_type: AudioType
    is_fallback: bool = False

    def __post_init__(self) -> None:
        validate_confidence(self.overall_confidence)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'primary': self.primary.to_dict(),
            'secondary': [result.to_dict() for result in self.secondary],
            'overall_confidence': self.overall_confidence,
            'detected_categories': sorted(c.value for c in self.detected_categories),
            'audio_type': self.audio_type.value,
            'is_fallback': self.is_fallback,
        }


@dataclass(frozen=True)
class RecognitionProgress:
    """Transient progress event emitted at each stage transition."""

    stage: RecognitionStage
    progress: int  # [0, 100]
    message: str

    def __post_init__(self) -> None:
        if not (0 <= self.progress <= 100):
            raise ValueError(f"Progress must be in [0, 100], got {self.progress}")


@dataclass(frozen=True)
class TranscriptSegment:
    """One result from a speech-to-text capability."""

    text: str
    confidence: float
    is_final: bool = True
    language: Optional[str] = None  # reported by the transcriber, if known

    def __post_init__(self) -> None:
        validate_confidence(self.confidence)


@dataclass
class SpeechAnalysis:
    """Transcript plus the text-level insights derived from it."""

    transcription: str
    confidence: float  # [0.0, 1.0]
    language: str
    word_count: int
    duration: float  # seconds
    keywords: List[str] = field(default_factory=list)
    sentiment: Optional[Sentiment] = None

    def __post_init__(self) -> None:
        validate_confidence(self.confidence)

    @property
    def contains_speech(self) -> bool:
        return bool(self.transcription.strip())

    def to_dict(self) -> Dict[str, Any]:
        return {
            'transcription': self.transcription,
            'confidence': self.confidence,
            'language': self.language,
            'word_count': self.word_count,
            'duration': self.duration,
            'keywords': self.keywords,
            'sentiment': self.sentiment.value if self.sentiment else None,
        }


@dataclass
class AIRecognitionResult:
    """Terminal fused recognition value handed back to the caller."""

    primary_recognition: str
    confidence: float
    audio_type: AudioType
    detected_content: List[str]
    analysis_time: float  # milliseconds
    timestamp: datetime

    transcription: Optional[str] = None
    language: Optional[str] = None
    sentiment: Optional[Sentiment] = None

    classification: Optional[ClassificationAnalysis] = None
    features: Optional[AudioFeatures] = None
    speech_analysis: Optional[SpeechAnalysis] = None
    model_result: Optional[ClassificationResult] = None

    def __post_init__(self) -> None:
        validate_confidence(self.confidence)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            'primary_recognition': self.primary_recognition,
            'confidence': self.confidence,
            'audio_type': self.audio_type.value,
            'detected_content': list(self.detected_content),
            'analysis_time': self.analysis_time,
            'timestamp': self.timestamp.isoformat(),
            'transcription': self.transcription,
            'language': self.language,
            'sentiment': self.sentiment.value if self.sentiment else None,
            'classification': self.classification.to_dict() if self.classification else None,
            'features': self.features.to_dict() if self.features else None,
            'speech_analysis': self.speech_analysis.to_dict() if self.speech_analysis else None,
            'model_result': self.model_result.to_dict() if self.model_result else None,
        }

    def to_json(self, indent: int = 2) -> str:
        """Export as JSON string."""
        return json.dumps(self.to_dict(), indent=indent, default=str)

    def get_summary(self) -> str:
        """Get multi-line human-readable summary."""
        lines = [
            "Primary Recognition:",
            f"  {self.primary_recognition}",
            f"  Confidence: {self.confidence * 100:.1f}%",
            f"  Audio Type: {self.audio_type.value}",
        ]

        if self.speech_analysis and self.speech_analysis.contains_speech:
            lines.append("Speech Analysis:")
            lines.append(f"  Transcription: \"{self.speech_analysis.transcription}\"")
            lines.append(f"  Language: {self.speech_analysis.language}")
            lines.append(f"  Word Count: {self.speech_analysis.word_count}")
            if self.speech_analysis.sentiment:
                lines.append(f"  Sentiment: {self.speech_analysis.sentiment.value}")

        if self.classification:
            primary = self.classification.primary
            lines.append("Audio Classification:")
            lines.append(f"  Type: {primary.label}")
            lines.append(f"  Category: {primary.category.value}")
            lines.append(
                f"  Overall Confidence: {self.classification.overall_confidence * 100:.1f}%"
            )

        if self.features:
            lines.append("Audio Features:")
            if self.features.pitch > 0:
                lines.append(f"  Pitch: {self.features.pitch:.0f} Hz")
            lines.append(f"  Tempo: {self.features.tempo:.0f} BPM")
            lines.append(f"  Energy: {self.features.rms_energy * 100:.1f}%")

        lines.append(f"Analysis completed in {self.analysis_time:.0f}ms")
        lines.append(f"Timestamp: {self.timestamp.isoformat()}")
        return "\n".join(lines)


# Validation helpers

def validate_confidence(confidence: float) -> None:
    """Validate confidence score is in valid range."""
    if not (0.0 <= confidence <= 1.0):
        raise ValueError(f"Confidence must be in [0.0, 1.0], got {confidence}")
