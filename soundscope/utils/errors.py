"""
Custom exceptions for the SoundScope recognition pipeline.

Fatal errors (decode, timeout, unavailable) abort a recognition call.
Recoverable errors (classifier, transcription) are absorbed by the
orchestrator and only reduce the completeness of the result.
"""

from typing import Any, Optional


class AudioRecognitionError(Exception):
    """Base exception for all recognition errors."""

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} (Details: {self.details})"
        return self.message


class DecodeError(AudioRecognitionError):
    """Raised when audio data cannot be interpreted as PCM."""

    def __init__(self, message: str, source: Optional[str] = None):
        super().__init__(message, details={"source": source} if source else None)
        self.source = source


class UnsupportedFormatError(DecodeError):
    """Raised when an audio container format is not supported."""

    def __init__(self, message: str, format: Optional[str] = None):
        super().__init__(message)
        self.format = format
        self.details = {"format": format}


class FileTooLargeError(DecodeError):
    """Raised when audio input exceeds the size limit."""

    def __init__(
        self,
        message: str,
        file_size: Optional[int] = None,
        max_size: Optional[int] = None,
    ):
        super().__init__(message)
        self.file_size = file_size
        self.max_size = max_size
        self.details = {"file_size": file_size, "max_size": max_size}


class AnalysisTimeoutError(AudioRecognitionError):
    """Raised when a bounded step (extraction, readiness wait) runs too long."""

    def __init__(self, message: str, stage: Optional[str] = None, timeout: Optional[float] = None):
        super().__init__(message, details={"stage": stage, "timeout": timeout})
        self.stage = stage
        self.timeout = timeout


class ServiceUnavailableError(AudioRecognitionError):
    """Raised when recognition subsystems never became ready."""

    def __init__(self, message: str, waited: Optional[float] = None):
        super().__init__(message, details={"waited": waited})
        self.waited = waited


class FeatureExtractionError(AudioRecognitionError):
    """Raised when feature extraction fails for a reason other than decoding."""

    def __init__(self, message: str, feature_name: Optional[str] = None):
        super().__init__(message, details={"feature_name": feature_name})
        self.feature_name = feature_name


class ClassifierFailure(AudioRecognitionError):
    """Raised when a single classifier throws. Recovered by the orchestrator."""

    def __init__(
        self,
        message: str,
        classifier_name: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ):
        super().__init__(message)
        self.classifier_name = classifier_name
        self.original_error = original_error
        self.details = {
            "classifier_name": classifier_name,
            "original_error": str(original_error) if original_error else None,
        }


class TranscriptionFailure(AudioRecognitionError):
    """Raised when the speech-to-text step fails. Recovered by the orchestrator."""

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        super().__init__(message)
        self.original_error = original_error
        self.details = {
            "original_error": str(original_error) if original_error else None,
        }


class ConfigurationError(AudioRecognitionError):
    """Raised when configuration is invalid or missing."""

    def __init__(self, message: str, config_key: Optional[str] = None):
        super().__init__(message)
        self.config_key = config_key
        self.details = {"config_key": config_key}


class ModelLoadError(AudioRecognitionError):
    """Raised when an optional speech model cannot be loaded."""

    def __init__(self, message: str, model_name: Optional[str] = None):
        super().__init__(message)
        self.model_name = model_name
        self.details = {"model_name": model_name}
