"""
Whisper-based transcriber.

Uses OpenAI Whisper (optional ``speech`` extra) for speech-to-text.
"""

import logging
from typing import Any, Dict, List, Optional

import numpy as np

from soundscope.core.models import AudioBuffer, TranscriptSegment
from soundscope.utils.errors import ModelLoadError, TranscriptionFailure

WHISPER_SAMPLE_RATE = 16000

# Whisper hallucinates these on silence and music
FALSE_POSITIVES = frozenset({
    "",
    "thank you for watching!",
    "thanks for watching!",
    "you",
    "thank you",
    "thank you.",
    "thanks.",
})


class WhisperTranscriber:
    """
    Transcriber backed by OpenAI Whisper.

    The model is loaded lazily on first use.
    """

    def __init__(
        self,
        model_size: str = "base",
        language: Optional[str] = None,
        device: Optional[str] = None
    ):
        """
        Initialize Whisper transcriber.

        Args:
            model_size: Whisper model size ('tiny', 'base', 'small', 'medium', 'large')
            language: Language code (e.g., 'en', 'es'). None = auto-detect.
            device: Device to use ('cpu', 'cuda'). None = auto-detect.
        """
        self.model_size = model_size
        self.language = language
        self.device = device
        self._model = None
        self.logger = logging.getLogger(__name__)

    @property
    def name(self) -> str:
        return f"whisper-{self.model_size}"

    @property
    def model(self):
        """Lazy-load Whisper model."""
        if self._model is None:
            self._model = self._load_model()
        return self._model

    def _load_model(self):
        try:
            import whisper
        except ImportError as e:
            raise ModelLoadError(
                "whisper package required for speech recognition. "
                "Install with: pip install soundscope[speech]",
                model_name="whisper"
            ) from e

        try:
            self.logger.info(f"Loading Whisper model: {self.model_size}")
            model = whisper.load_model(self.model_size, device=self.device)
            self.logger.info("Whisper model loaded successfully")
            return model
        except Exception as e:
            raise ModelLoadError(
                f"Failed to load Whisper model: {e}",
                model_name=self.name
            ) from e

    def transcribe(self, buffer: AudioBuffer) -> List[TranscriptSegment]:
        """
        Transcribe a buffer into final segments.

        Raises:
            ModelLoadError: If Whisper is unavailable
            TranscriptionFailure: If transcription fails
        """
        model = self.model
        audio = prepare_audio(buffer)

        try:
            result = model.transcribe(
                audio,
                language=self.language,
                task="transcribe",
                verbose=False
            )
        except Exception as e:
            self.logger.error(f"Whisper transcription failed: {e}")
            raise TranscriptionFailure(
                f"Whisper transcription failed: {e}", original_error=e
            ) from e

        language = self._language_name(result.get("language") or self.language)
        segments = segments_from_result(result, language=language)
        self.logger.debug(f"Whisper produced {len(segments)} segments ({language or 'unknown language'})")
        return segments

    @staticmethod
    def _language_name(code: Optional[str]) -> Optional[str]:
        """Map a Whisper language code ('it') to its name ('Italian')."""
        if not code:
            return None
        from whisper.tokenizer import LANGUAGES
        return LANGUAGES.get(code.lower(), code).title()


def segments_from_result(
    result: Dict[str, Any],
    language: Optional[str] = None,
) -> List[TranscriptSegment]:
    """
    Convert a Whisper result dict into transcript segments.

    Every segment carries ``language``, or the code Whisper detected when
    no name is given.
    """
    language = language or result.get("language")
    segments = []
    for segment in result.get("segments", []):
        text = segment.get("text", "").strip()
        if text.lower() in FALSE_POSITIVES:
            continue
        no_speech = float(segment.get("no_speech_prob", 0.0))
        segments.append(TranscriptSegment(
            text=text,
            confidence=min(1.0, max(0.0, 1.0 - no_speech)),
            is_final=True,
            language=language,
        ))
    return segments


def prepare_audio(buffer: AudioBuffer) -> np.ndarray:
    """
    Mix down to mono float32 at 16 kHz, normalised to [-1, 1].
    """
    if buffer.channels == 1:
        mono = buffer.channel(0)
    else:
        mono = np.mean(buffer.samples, axis=0)

    if buffer.sample_rate != WHISPER_SAMPLE_RATE:
        import librosa
        mono = librosa.resample(
            np.asarray(mono, dtype=np.float32),
            orig_sr=buffer.sample_rate,
            target_sr=WHISPER_SAMPLE_RATE
        )

    mono = np.asarray(mono, dtype=np.float32)
    peak = np.max(np.abs(mono)) if mono.size else 0.0
    if peak > 1.0:
        mono = mono / peak
    return mono


def create_whisper_transcriber(config: Dict[str, Any]) -> Optional[WhisperTranscriber]:
    """
    Factory function to create Whisper transcriber.

    Args:
        config: Configuration dict with 'speech' section

    Returns:
        WhisperTranscriber instance or None if disabled
    """
    speech_config = config.get("speech", {})

    if not speech_config.get("enabled", False):
        return None

    return WhisperTranscriber(
        model_size=speech_config.get("model_size", "base"),
        language=speech_config.get("language"),
        device=speech_config.get("device"),
    )
