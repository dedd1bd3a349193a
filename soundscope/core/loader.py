"""
Audio loader for SoundScope.

Decodes PCM containers (WAV, AIFF, FLAC, OGG) from files or raw bytes
into immutable AudioBuffer instances at their native sample rate.
"""

import io
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, Optional, Set

import numpy as np
import soundfile as sf

from soundscope.core.models import AudioBuffer
from soundscope.utils.errors import DecodeError, FileTooLargeError, UnsupportedFormatError


SUPPORTED_FORMATS: Set[str] = {'.wav', '.aif', '.aiff', '.flac', '.ogg'}

MAX_FILE_SIZE: int = 52428800  # 50 MB

logger = logging.getLogger(__name__)


class AudioLoader:
    """
    Decodes audio into AudioBuffer instances.

    Stateless after construction; safe to share between threads.
    """

    def __init__(
        self,
        max_file_size: int = MAX_FILE_SIZE,
        supported_formats: Optional[Iterable[str]] = None,
    ):
        """
        Initialize loader with configuration.

        Args:
            max_file_size: Maximum input size in bytes
            supported_formats: File suffixes accepted by ``load``
        """
        self.max_file_size = max_file_size
        self.supported_suffixes: Set[str] = {
            suffix.lower() for suffix in (supported_formats or SUPPORTED_FORMATS)
        }

    def load(self, file_path: Path) -> AudioBuffer:
        """
        Load an audio file.

        Raises:
            FileNotFoundError: File doesn't exist
            UnsupportedFormatError: Suffix not supported
            FileTooLargeError: File exceeds size limit
            DecodeError: Content is not decodable PCM
        """
        file_path = Path(file_path)
        self._validate_file(file_path)
        return self._decode(str(file_path), source=str(file_path))

    def decode(self, data: bytes, source: str = "<bytes>") -> AudioBuffer:
        """
        Decode raw container bytes.

        Raises:
            FileTooLargeError: Input exceeds size limit
            DecodeError: Input is empty or not decodable PCM
        """
        if not data:
            raise DecodeError("Audio data is empty", source=source)
        if len(data) > self.max_file_size:
            raise FileTooLargeError(
                f"Audio data too large: {len(data) / 1024 / 1024:.1f} MB. "
                f"Maximum: {self.max_file_size / 1024 / 1024:.1f} MB",
                file_size=len(data),
                max_size=self.max_file_size
            )
        return self._decode(io.BytesIO(data), source=source)

    def _validate_file(self, file_path: Path) -> None:
        """Validate file exists, has supported format, and is within size limit."""
        if not file_path.exists():
            raise FileNotFoundError(f"Audio file not found: {file_path}")

        suffix = file_path.suffix.lower()
        if suffix not in self.supported_suffixes:
            raise UnsupportedFormatError(
                f"Format {suffix} not supported. "
                f"Supported formats: {', '.join(sorted(self.supported_suffixes))}",
                format=suffix
            )

        file_size = file_path.stat().st_size
        if file_size > self.max_file_size:
            raise FileTooLargeError(
                f"File too large: {file_size / 1024 / 1024:.1f} MB. "
                f"Maximum: {self.max_file_size / 1024 / 1024:.1f} MB",
                file_size=file_size,
                max_size=self.max_file_size
            )

    def _decode(self, target: Any, source: str) -> AudioBuffer:
        try:
            # always_2d gives (frames, channels)
            audio_data, sample_rate = sf.read(target, dtype='float32', always_2d=True)
        except (RuntimeError, TypeError, ValueError) as e:
            # soundfile.LibsndfileError subclasses RuntimeError
            raise DecodeError(f"Failed to decode audio from {source}: {e}", source=source) from e

        audio_data = self._validate_audio_data(audio_data.T, source)

        logger.info(
            f"Decoded audio: {sample_rate} Hz, {audio_data.shape[0]} ch, "
            f"{audio_data.shape[1]} frames"
        )
        return AudioBuffer.from_array(audio_data, sample_rate)

    def _validate_audio_data(self, audio_data: np.ndarray, source: str) -> np.ndarray:
        """Validate audio data integrity and normalise clipping."""
        if audio_data.size == 0:
            raise DecodeError(f"Audio contains no samples: {source}", source=source)

        if not np.all(np.isfinite(audio_data)):
            raise DecodeError(f"Audio contains non-finite samples: {source}", source=source)

        rms = np.sqrt(np.mean(audio_data ** 2))
        if rms < 1e-6:
            logger.warning(f"Audio appears to be silent: {source}")

        max_abs = np.max(np.abs(audio_data))
        if max_abs > 1.0:
            logger.warning(
                f"Audio contains clipping (max: {max_abs:.2f}), normalizing: {source}"
            )
            audio_data = audio_data / max_abs

        return audio_data


def create_audio_loader(config: Optional[Dict[str, Any]] = None) -> AudioLoader:
    """
    Factory function to create AudioLoader from the ``audio`` config section.
    """
    if config is None:
        config = {}

    return AudioLoader(
        max_file_size=config.get('max_file_size', MAX_FILE_SIZE),
        supported_formats=config.get('supported_formats', SUPPORTED_FORMATS),
    )
