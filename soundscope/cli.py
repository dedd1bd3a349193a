"""
SoundScope - audio recognition CLI.

Example usage:
    soundscope path/to/audio.wav
    soundscope --output result.json path/to/audio.wav
    soundscope --config config/config.yaml a.wav b.flac
    soundscope --status
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Dict, List, Optional

from soundscope import __version__
from soundscope.core.models import AIRecognitionResult, RecognitionProgress
from soundscope.core.orchestrator import RecognitionOrchestrator, create_recognition_orchestrator
from soundscope.utils.config import load_config
from soundscope.utils.errors import AudioRecognitionError
from soundscope.utils.logging import setup_logging


def print_progress(progress: RecognitionProgress) -> None:
    print(f"  [{progress.progress:3d}%] {progress.message}")


def print_result(file_path: Path, result: AIRecognitionResult) -> None:
    """Print recognition results for a single file to console."""
    print("\n" + "=" * 60)
    print("SOUNDSCOPE RECOGNITION RESULTS")
    print("=" * 60)
    print(f"File: {file_path.name}")
    print("-" * 60)
    print(result.get_summary())
    print("-" * 60)

    if result.detected_content:
        print("\nDetected Content:")
        for item in result.detected_content:
            print(f"  - {item}")


def print_status(status: Dict) -> None:
    print("\nService Status:")
    for key, value in status.items():
        if isinstance(value, list):
            value = ", ".join(value) or "none"
        print(f"  {key}: {value}")


async def recognize_files(
    orchestrator: RecognitionOrchestrator,
    files: List[Path],
    verbose: bool = False,
) -> Dict[Path, Optional[AIRecognitionResult]]:
    """
    Recognize each file in turn.

    Returns:
        Dict mapping each path to its result, or None on failure
    """
    results: Dict[Path, Optional[AIRecognitionResult]] = {}
    loop = asyncio.get_running_loop()

    for audio_file in files:
        print(f"\nRecognizing: {audio_file}")
        try:
            buffer = await loop.run_in_executor(
                orchestrator.executor, orchestrator.loader.load, audio_file
            )
            result = await orchestrator.recognize(buffer, on_progress=print_progress)
        except (AudioRecognitionError, OSError) as e:
            print(f"Error during recognition: {e}")
            if verbose:
                import traceback
                traceback.print_exc()
            results[audio_file] = None
            continue

        print_result(audio_file, result)
        results[audio_file] = result

    return results


def write_json(results: Dict[Path, Optional[AIRecognitionResult]], output: Path) -> None:
    successful = {path: r for path, r in results.items() if r is not None}
    if len(results) == 1 and successful:
        payload = next(iter(successful.values())).to_dict()
    else:
        payload = {str(path): r.to_dict() for path, r in successful.items()}

    with open(output, 'w') as f:
        json.dump(payload, f, indent=2, default=str)
    print(f"\nJSON results saved to: {output}")


async def run(args: argparse.Namespace, config: dict) -> int:
    """Run the CLI against an orchestrator; returns the exit code."""
    async with create_recognition_orchestrator(config) as orchestrator:
        # Model loading and warm-up may outlast the readiness timeout
        try:
            await orchestrator.initialize()
        except Exception as e:
            print(f"Initialization failed: {e}")

        if args.status:
            print_status(orchestrator.get_service_status())
        if not orchestrator.is_ready():
            return 1
        if not args.inputs:
            return 0

        results = await recognize_files(orchestrator, args.inputs, args.verbose)

        if args.output and any(r is not None for r in results.values()):
            write_json(results, args.output)

        failed = [path for path, r in results.items() if r is None]
        if failed:
            print(f"\n{len(failed)} of {len(results)} file(s) failed")
            return 1
        return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for SoundScope recognition."""
    parser = argparse.ArgumentParser(
        prog="soundscope",
        description="Recognize the content of short audio recordings",
    )
    parser.add_argument(
        "inputs",
        type=Path,
        nargs="*",
        help="Audio file(s) to recognize"
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to configuration file"
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Path to save JSON output"
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose output"
    )
    parser.add_argument(
        "--status",
        action="store_true",
        help="Initialize services and print which capabilities are available"
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"soundscope {__version__}"
    )

    args = parser.parse_args(argv)
    if not args.inputs and not args.status:
        parser.error("at least one audio file is required")

    try:
        config = load_config(str(args.config) if args.config else None)
    except (AudioRecognitionError, OSError) as e:
        print(f"Error loading configuration: {e}")
        return 1

    logging_config = config.get("logging", {})
    setup_logging(
        level="DEBUG" if args.verbose else logging_config.get("level", "INFO"),
        log_format=logging_config.get("format", "text"),
        log_file=logging_config.get("file"),
        colored=True,
        console_enabled=True
    )

    missing = [path for path in args.inputs if not path.exists()]
    if missing:
        for path in missing:
            print(f"Error: Audio file not found: {path}")
        return 1

    try:
        return asyncio.run(run(args, config))
    except KeyboardInterrupt:
        print("\n\nInterrupted by user.")
        return 1


if __name__ == "__main__":
    sys.exit(main())
