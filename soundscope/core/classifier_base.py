"""
Classifier interface for SoundScope.

Defines the contract shared by every heuristic voter using Protocol
(structural subtyping) plus an optional template-method base class.
"""

import logging
import time
from abc import abstractmethod
from typing import Optional, Protocol

from soundscope.core.models import AudioFeatures, ClassificationResult
from soundscope.utils.errors import ClassifierFailure


class Classifier(Protocol):
    """
    Protocol for all classifiers.

    A classifier maps a read-only AudioFeatures snapshot to at most one
    vote. It returns None when its preconditions do not hold, so an
    inapplicable guess never reaches the aggregator.
    """

    @property
    def name(self) -> str:
        """Classifier name (e.g., 'spectral_shape')."""
        ...

    @property
    def version(self) -> str:
        """Classifier version for result tracking."""
        ...

    def classify(self, features: AudioFeatures) -> Optional[ClassificationResult]:
        """
        Classify a feature vector.

        Raises:
            ClassifierFailure: If classification throws
        """
        ...


class BaseClassifier:
    """
    Optional base class providing timing, logging and error wrapping.

    Uses Template Method pattern - classify() provides the template,
    subclasses implement _classify_impl().
    """

    def __init__(self, name: str, version: str):
        self._name = name
        self._version = version
        self.logger = logging.getLogger(f"classifier.{name}")

    @property
    def name(self) -> str:
        return self._name

    @property
    def version(self) -> str:
        return self._version

    def classify(self, features: AudioFeatures) -> Optional[ClassificationResult]:
        """Template method with timing and error handling."""
        start_time = time.time()

        try:
            result = self._classify_impl(features)
        except ClassifierFailure:
            raise
        except Exception as e:
            self.logger.error(f"Classification failed: {e}")
            raise ClassifierFailure(
                f"{self.name} classification failed: {e}",
                classifier_name=self.name,
                original_error=e
            ) from e

        elapsed = time.time() - start_time
        if result is None:
            self.logger.debug(f"No vote (preconditions not met) in {elapsed:.4f}s")
        else:
            self.logger.debug(
                f"Voted '{result.label}' ({result.confidence:.2f}) in {elapsed:.4f}s"
            )
        return result

    def _result(
        self,
        label: str,
        confidence: float,
        category: str,
        description: str,
        tags: tuple = (),
    ) -> ClassificationResult:
        """Build a vote stamped with this classifier's name."""
        return ClassificationResult(
            label=label,
            confidence=round(confidence, 4),
            category=category,
            description=description,
            tags=tags,
            source=self.name,
        )

    @abstractmethod
    def _classify_impl(self, features: AudioFeatures) -> Optional[ClassificationResult]:
        """Subclasses implement the decision tree."""
        raise NotImplementedError
