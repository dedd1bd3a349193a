"""
Utility modules for configuration, logging, and error handling.
"""

from soundscope.utils.errors import (
    AudioRecognitionError,
    DecodeError,
    UnsupportedFormatError,
    FileTooLargeError,
    AnalysisTimeoutError,
    ServiceUnavailableError,
    FeatureExtractionError,
    ClassifierFailure,
    TranscriptionFailure,
    ConfigurationError,
    ModelLoadError,
)
from soundscope.utils.logging import get_logger, setup_logging, JSONFormatter
from soundscope.utils.config import ConfigManager, load_config, get_default_config

__all__ = [
    "AudioRecognitionError",
    "DecodeError",
    "UnsupportedFormatError",
    "FileTooLargeError",
    "AnalysisTimeoutError",
    "ServiceUnavailableError",
    "FeatureExtractionError",
    "ClassifierFailure",
    "TranscriptionFailure",
    "ConfigurationError",
    "ModelLoadError",
    "get_logger",
    "setup_logging",
    "JSONFormatter",
    "ConfigManager",
    "load_config",
    "get_default_config",
]
