"""
Recognition orchestrator for SoundScope.

Main coordinator: waits for the subsystems to be ready, extracts features,
runs every classifier (and optional transcription) in parallel, aggregates
the votes and fuses them into one AIRecognitionResult.
"""

import asyncio
import logging
import time
import uuid
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple

from soundscope.classifiers import create_classifiers, create_model_classifier
from soundscope.core.aggregator import ClassificationAggregator
from soundscope.core.classifier_base import Classifier
from soundscope.core.features import SpectralFeatureExtractor, create_feature_extractor
from soundscope.core.fusion import fuse
from soundscope.core.loader import AudioLoader, create_audio_loader
from soundscope.core.models import (
    AIRecognitionResult,
    AudioBuffer,
    AudioFeatures,
    ClassificationResult,
    RecognitionProgress,
    RecognitionStage,
    SpeechAnalysis,
)
from soundscope.speech.transcriber import Transcriber, analyze_transcript
from soundscope.speech.whisper_transcriber import create_whisper_transcriber
from soundscope.utils.errors import ServiceUnavailableError
from soundscope.utils.logging import LoggerAdapter, create_logger_with_context

ProgressCallback = Callable[[RecognitionProgress], None]

TRANSCRIPTION_STEP = "speech recognition"


class OrchestratorState(str, Enum):
    UNINITIALIZED = "uninitialized"
    INITIALIZING = "initializing"
    READY = "ready"
    RUNNING = "running"
    DONE = "done"
    FAILED = "failed"


@dataclass
class RecognitionSubsystems:
    """Everything a recognition call needs, built once."""

    extractor: SpectralFeatureExtractor
    classifiers: List[Classifier] = field(default_factory=list)
    model_classifier: Optional[Classifier] = None
    transcriber: Optional[Transcriber] = None


class RecognitionOrchestrator:
    """
    Async recognition pipeline.

    Design:
    - Dependency Injection: subsystems are passed in, or built lazily by a
      factory that runs once on the executor
    - Parallel Execution: classifiers and transcription run concurrently,
      each with its own timeout
    - Error Handling: decode, extraction and readiness failures are fatal;
      classifier and transcription failures degrade the result
    """

    def __init__(
        self,
        subsystems: Optional[RecognitionSubsystems] = None,
        subsystem_factory: Optional[Callable[[], RecognitionSubsystems]] = None,
        loader: Optional[AudioLoader] = None,
        aggregator: Optional[ClassificationAggregator] = None,
        readiness_timeout: float = 5.0,
        extraction_timeout: float = 10.0,
        classifier_timeout: float = 5.0,
        transcription_timeout: float = 30.0,
        confidence_boost: bool = False,
        max_workers: int = 4,
    ):
        """
        Initialize orchestrator.

        Args:
            subsystems: Ready-made subsystems
            subsystem_factory: Callable building the subsystems on first use
            loader: AudioLoader used by recognize_bytes
            aggregator: ClassificationAggregator instance
            readiness_timeout: Max seconds to wait for initialization
            extraction_timeout: Max seconds for feature extraction
            classifier_timeout: Max seconds per classifier
            transcription_timeout: Max seconds for transcription
            confidence_boost: Enable the speech/primary confidence boost
            max_workers: Executor size
        """
        if (subsystems is None) == (subsystem_factory is None):
            raise ValueError("Provide exactly one of subsystems or subsystem_factory")

        self.loader = loader or AudioLoader()
        self.aggregator = aggregator or ClassificationAggregator()
        self.readiness_timeout = readiness_timeout
        self.extraction_timeout = extraction_timeout
        self.classifier_timeout = classifier_timeout
        self.transcription_timeout = transcription_timeout
        self.confidence_boost = confidence_boost
        self.executor = ThreadPoolExecutor(max_workers=max_workers)
        self.logger = logging.getLogger(__name__)

        self._subsystems = subsystems
        self._factory = subsystem_factory
        self._init_task: Optional[asyncio.Task] = None
        self._init_error: Optional[BaseException] = None
        self._active_calls = 0
        self._state = (
            OrchestratorState.READY if subsystems is not None
            else OrchestratorState.UNINITIALIZED
        )

    @property
    def state(self) -> OrchestratorState:
        return self._state

    def is_ready(self) -> bool:
        """True once the subsystems exist."""
        return self._subsystems is not None

    def get_service_status(self) -> Dict[str, Any]:
        """Report lifecycle state and which capabilities are available."""
        subsystems = self._subsystems
        return {
            'state': self._state.value,
            'ready': subsystems is not None,
            'feature_extraction': subsystems is not None,
            'classifiers': [c.name for c in subsystems.classifiers] if subsystems else [],
            'sound_event': bool(subsystems and subsystems.model_classifier is not None),
            'speech_recognition': bool(subsystems and subsystems.transcriber is not None),
            'last_error': str(self._init_error) if self._init_error else None,
        }

    async def initialize(self) -> None:
        """
        Build the subsystems if needed.

        Concurrent callers share one initialization. Cancelling a caller
        does not cancel the initialization itself. After a failure the
        next call starts a fresh attempt.
        """
        if self._subsystems is not None:
            return
        if self._init_task is None or self._init_task.done():
            self._init_task = asyncio.get_running_loop().create_task(self._build_subsystems())
            self._init_task.add_done_callback(_consume_exception)
        await asyncio.shield(self._init_task)

    async def _build_subsystems(self) -> None:
        self._state = OrchestratorState.INITIALIZING
        self.logger.info("Initializing recognition subsystems")
        loop = asyncio.get_running_loop()
        try:
            subsystems = await loop.run_in_executor(self.executor, self._factory)
        except Exception as e:
            self._init_error = e
            self._state = OrchestratorState.FAILED
            self.logger.error(f"Subsystem initialization failed: {e}")
            raise

        self._subsystems = subsystems
        self._init_error = None
        self._state = OrchestratorState.READY
        self.logger.info(
            f"Recognition subsystems ready: {len(subsystems.classifiers)} classifiers, "
            f"sound events {'on' if subsystems.model_classifier else 'off'}, "
            f"speech {'on' if subsystems.transcriber else 'off'}"
        )

    async def _wait_until_ready(self) -> RecognitionSubsystems:
        if self._subsystems is not None:
            return self._subsystems

        try:
            await asyncio.wait_for(self.initialize(), timeout=self.readiness_timeout)
        except asyncio.TimeoutError as e:
            raise ServiceUnavailableError(
                f"Recognition services not ready after {self.readiness_timeout:.1f}s",
                waited=self.readiness_timeout
            ) from e
        except Exception as e:
            raise ServiceUnavailableError(
                f"Recognition services failed to initialize: {e}"
            ) from e

        return self._subsystems

    async def recognize(
        self,
        buffer: AudioBuffer,
        on_progress: Optional[ProgressCallback] = None,
    ) -> AIRecognitionResult:
        """
        Run the full recognition pipeline on a decoded buffer.

        Args:
            buffer: Decoded audio
            on_progress: Called synchronously at each stage transition

        Returns:
            AIRecognitionResult

        Raises:
            ServiceUnavailableError: Subsystems not ready in time
            DecodeError: Buffer is not valid PCM
            AnalysisTimeoutError: Feature extraction timed out
            FeatureExtractionError: Feature extraction failed
        """
        start_time = time.time()
        log = create_logger_with_context(__name__, {"call_id": uuid.uuid4().hex[:8]})
        self._active_calls += 1
        failed = True
        try:
            result = await self._recognize(buffer, on_progress, start_time, log)
            failed = False
        except Exception as e:
            log.error(f"Recognition failed: {type(e).__name__}: {e}")
            raise
        finally:
            self._active_calls -= 1
            # Calls still running keep the state at RUNNING
            if self._active_calls == 0:
                self._state = OrchestratorState.FAILED if failed else OrchestratorState.DONE

        return result

    async def _recognize(
        self,
        buffer: AudioBuffer,
        on_progress: Optional[ProgressCallback],
        start_time: float,
        log: LoggerAdapter,
    ) -> AIRecognitionResult:
        def emit(stage: RecognitionStage, progress: int, message: str) -> None:
            log.debug(f"[{progress:3d}%] {stage.value}: {message}")
            if on_progress is not None:
                on_progress(RecognitionProgress(stage=stage, progress=progress, message=message))

        emit(RecognitionStage.INITIALIZING, 10, "Initializing recognition services...")
        subsystems = await self._wait_until_ready()
        self._state = OrchestratorState.RUNNING

        emit(RecognitionStage.FEATURE_EXTRACTION, 30, "Extracting spectral features...")
        features = await subsystems.extractor.extract_async(
            buffer, timeout=self.extraction_timeout, executor=self.executor
        )

        emit(RecognitionStage.CLASSIFICATION, 60, "Classifying audio content...")
        votes, model_result, speech, degradations = await self._run_parallel(
            subsystems, buffer, features, log
        )
        classification = self.aggregator.aggregate(votes)

        emit(RecognitionStage.FUSION, 90, "Combining recognition results...")
        outcome = fuse(
            classification,
            features,
            speech=speech,
            model_result=model_result,
            degradations=degradations,
            confidence_boost=self.confidence_boost,
        )

        has_speech = speech is not None
        result = AIRecognitionResult(
            primary_recognition=outcome.primary_recognition,
            confidence=outcome.confidence,
            audio_type=outcome.audio_type,
            detected_content=outcome.detected_content,
            analysis_time=(time.time() - start_time) * 1000.0,
            timestamp=datetime.now(timezone.utc),
            transcription=speech.transcription if has_speech else None,
            language=speech.language if has_speech else None,
            sentiment=speech.sentiment if has_speech else None,
            classification=classification,
            features=features,
            speech_analysis=speech,
            model_result=model_result,
        )

        emit(RecognitionStage.COMPLETE, 100, "Recognition complete")
        log.info(
            f"Recognized '{result.primary_recognition}' "
            f"({result.confidence:.2f}, {result.audio_type.value}) "
            f"in {result.analysis_time:.0f}ms"
        )
        return result

    async def _run_parallel(
        self,
        subsystems: RecognitionSubsystems,
        buffer: AudioBuffer,
        features: AudioFeatures,
        log: LoggerAdapter,
    ) -> Tuple[
        List[Optional[ClassificationResult]],
        Optional[ClassificationResult],
        Optional[SpeechAnalysis],
        List[Tuple[str, str]],
    ]:
        """
        Run classifiers, the sound-event classifier and transcription together.

        Returns:
            Tuple: (heuristic votes, sound-event vote, speech analysis, degradations)
        """
        loop = asyncio.get_running_loop()
        steps: List[Tuple[str, float]] = []
        awaitables: List[Awaitable[Any]] = []

        def submit(name: str, timeout: float, fn: Callable, arg: Any) -> None:
            steps.append((name, timeout))
            awaitables.append(
                asyncio.wait_for(loop.run_in_executor(self.executor, fn, arg), timeout=timeout)
            )

        for classifier in subsystems.classifiers:
            submit(classifier.name, self.classifier_timeout, classifier.classify, features)
        if subsystems.model_classifier is not None:
            submit(
                subsystems.model_classifier.name, self.classifier_timeout,
                subsystems.model_classifier.classify, features,
            )
        if subsystems.transcriber is not None:
            submit(
                TRANSCRIPTION_STEP, self.transcription_timeout,
                subsystems.transcriber.transcribe, buffer,
            )

        outcomes = await asyncio.gather(*awaitables, return_exceptions=True)

        degradations: List[Tuple[str, str]] = []
        resolved: List[Any] = []
        for (name, timeout), outcome in zip(steps, outcomes):
            if isinstance(outcome, asyncio.TimeoutError):
                reason = f"timed out after {timeout:.1f}s"
            elif isinstance(outcome, Exception):
                reason = getattr(outcome, 'message', None) or str(outcome) or type(outcome).__name__
            else:
                resolved.append(outcome)
                continue
            log.warning(f"{name} unavailable: {reason}", extra={"step": name})
            degradations.append((name, reason))
            resolved.append(None)

        n_classifiers = len(subsystems.classifiers)
        votes = resolved[:n_classifiers]
        rest = resolved[n_classifiers:]

        model_result = None
        if subsystems.model_classifier is not None:
            model_result = rest.pop(0)

        speech = None
        if subsystems.transcriber is not None:
            segments = rest.pop(0)
            if segments is not None:
                speech = analyze_transcript(segments, buffer.duration)

        return votes, model_result, speech, degradations

    async def recognize_bytes(
        self,
        data: bytes,
        on_progress: Optional[ProgressCallback] = None,
    ) -> AIRecognitionResult:
        """
        Decode container bytes and recognize them.

        Raises:
            DecodeError: If the bytes cannot be decoded
        """
        loop = asyncio.get_running_loop()
        buffer = await loop.run_in_executor(self.executor, self.loader.decode, data)
        return await self.recognize(buffer, on_progress)

    def close(self, wait: bool = True) -> None:
        """
        Shutdown thread pool.

        Args:
            wait: Block until running steps finish. With False, queued steps
                  are cancelled and steps already running (e.g. a timed-out
                  transcription) finish in the background.
        """
        self.logger.info("Shutting down recognition orchestrator")
        self.executor.shutdown(wait=wait, cancel_futures=not wait)

    def __enter__(self) -> "RecognitionOrchestrator":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    async def __aenter__(self) -> "RecognitionOrchestrator":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        # Never block the event loop on worker threads
        self.close(wait=False)


def _consume_exception(task: "asyncio.Task") -> None:
    # Callers may have stopped waiting; the error is kept in _init_error
    if not task.cancelled():
        task.exception()


def create_recognition_orchestrator(config: Dict[str, Any]) -> RecognitionOrchestrator:
    """
    Factory function to create fully configured orchestrator.

    Subsystems are built lazily on the executor the first time a
    recognition call (or ``initialize``) needs them.

    Args:
        config: Configuration dict

    Returns:
        RecognitionOrchestrator: Configured orchestrator
    """
    logger = logging.getLogger(__name__)

    def build_subsystems() -> RecognitionSubsystems:
        transcriber = None
        try:
            transcriber = create_whisper_transcriber(config)
        except Exception as e:
            logger.warning(f"Failed to create speech transcriber: {e}. Speech recognition disabled.")

        extractor = create_feature_extractor(config.get('features', {}))
        extractor.warm_up()

        return RecognitionSubsystems(
            extractor=extractor,
            classifiers=create_classifiers(config),
            model_classifier=create_model_classifier(config),
            transcriber=transcriber,
        )

    recognition = config.get('recognition', {})
    return RecognitionOrchestrator(
        subsystem_factory=build_subsystems,
        loader=create_audio_loader(config.get('audio', {})),
        readiness_timeout=recognition.get('readiness_timeout', 5.0),
        extraction_timeout=recognition.get('extraction_timeout', 10.0),
        classifier_timeout=recognition.get('classifier_timeout', 5.0),
        transcription_timeout=recognition.get('transcription_timeout', 30.0),
        confidence_boost=config.get('fusion', {}).get('confidence_boost', False),
        max_workers=recognition.get('max_workers', 4),
    )
