"""Main Application Entry Point

Wires the WAV decoder, feature extractor and confidence classifier together
and exposes the two calls used by the surrounding web application:

    extract_audio_features(wav_bytes) -> AudioFeatures
    calculate_confidence_category(features, metrics) -> ConfidenceCategory

Feature extraction follows a fallback policy: any decoding or extraction
failure is logged and replaced by the neutral feature set, so a corrupt or
very short recording still gets a classification. Callers that want the
failure use try_extract_audio_features() and inspect the ExtractionResult.
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Optional

import numpy as np

from speech_confidence.input.wav_decoder import WaveformDecoder
from speech_confidence.input.wav_encoder import encode_wav
from speech_confidence.analysis.acoustic import FeatureExtractor
from speech_confidence.analysis.confidence import (
    ConfidenceClassifier,
    calculate_confidence_category
)
from speech_confidence.models.features import AudioFeatures, SpeechMetrics
from speech_confidence.models.results import ExtractionResult, AnalysisReport
from speech_confidence.config.config_loader import Config, config as default_config


logger = logging.getLogger(__name__)


def read_wav_file(path) -> bytes:
    """Load a recording from disk; the analysis core itself does no I/O"""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Recording not found: {path}")
    return path.read_bytes()


class ConfidenceEngine:
    """Runs one recording through decoding, extraction and classification.

    Attributes:
        decoder: WAV decoder
        extractor: Acoustic feature extractor
        classifier: Rubric classifier
        fallback_features: Features substituted when extraction fails
    """

    def __init__(self, cfg: Optional[Config] = None):
        """Initialize all components from one configuration."""
        cfg = cfg or default_config
        self.decoder = WaveformDecoder(min_samples=cfg.get('decoder.min_samples', 1000))
        self.extractor = FeatureExtractor(cfg)
        self.classifier = ConfidenceClassifier()
        self.fallback_features = AudioFeatures.neutral(cfg.get('fallback', {}))

    def try_extract(self, wav_bytes: bytes) -> ExtractionResult:
        """Decode and extract, capturing any failure in the result."""
        try:
            buffer = self.decoder.decode(wav_bytes)
        except Exception as e:
            logger.warning(f"Could not decode recording: {e}")
            return ExtractionResult(error=e)
        return self.extractor.try_extract(buffer)

    def extract_features(self, wav_bytes: bytes) -> AudioFeatures:
        """Decode and extract; falls back to neutral features on any failure."""
        return self.try_extract(wav_bytes).unwrap_or_default(self.fallback_features)

    def analyze(self, wav_bytes: bytes, metrics: SpeechMetrics) -> AnalysisReport:
        """Full pipeline for one recording.

        Args:
            wav_bytes: WAV file contents
            metrics: Transcript metrics for the same recording

        Returns:
            AnalysisReport; ``used_fallback`` is set when the neutral
            features stood in for a failed extraction
        """
        result = self.try_extract(wav_bytes)
        features = result.unwrap_or_default(self.fallback_features)
        assessment = self.classifier.assess(features, metrics)

        logger.info(f"Recording classified as {assessment.category.value} "
                    f"(score={assessment.score}, fallback={not result.ok})")

        return AnalysisReport(
            features=features,
            assessment=assessment,
            used_fallback=not result.ok,
            error=None if result.ok else f"{type(result.error).__name__}: {result.error}"
        )


_default_engine: Optional[ConfidenceEngine] = None


def _engine() -> ConfidenceEngine:
    """Shared engine built from the default configuration.

    Raises:
        ValueError: If the configuration is invalid
    """
    global _default_engine
    if _default_engine is None:
        default_config.validate()
        _default_engine = ConfidenceEngine(default_config)
    return _default_engine


def try_extract_audio_features(wav_bytes: bytes) -> ExtractionResult:
    """Extract features from WAV bytes without hiding failures"""
    return _engine().try_extract(wav_bytes)


def extract_audio_features(wav_bytes: bytes) -> AudioFeatures:
    """Extract features from WAV bytes; never raises for bad recordings.

    Returns the neutral feature set when the recording cannot be decoded or
    analyzed. An invalid default configuration raises ValueError on first
    use instead.
    """
    return _engine().extract_features(wav_bytes)


def synthesize_tone(frequency: float, duration: float = 2.0, sample_rate: int = 16000,
                    amplitude: float = 0.5) -> bytes:
    """16-bit mono WAV of a pure tone, for checking an installation"""
    t = np.arange(int(duration * sample_rate)) / sample_rate
    return encode_wav(amplitude * np.sin(2 * np.pi * frequency * t), sample_rate)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='speech-confidence',
        description='Extract acoustic features from a WAV recording and classify speaker confidence.'
    )
    parser.add_argument('recording', nargs='?', help='Path to a WAV file')
    parser.add_argument('--tone', type=float, metavar='HZ',
                        help='Analyze a synthesized 2 s tone instead of a file')
    parser.add_argument('--wpm', type=float, help='Rate of speech in words per minute')
    parser.add_argument('--fillers', type=int, default=0, help='Filler word count (default: 0)')
    parser.add_argument('--fluency', type=float, default=5.0, help='Fluency score 1-10 (default: 5)')
    parser.add_argument('--duration', type=float, default=0.0, help='Speaking duration in minutes')
    parser.add_argument('--config', help='Path to a YAML config file')
    parser.add_argument('--json', action='store_true', help='Print machine-readable output')
    parser.add_argument('--log-level', default=None, help='Logging level (default from config)')
    return parser


def main(argv=None) -> int:
    """Command line entry point.

    Features are always printed; classification runs only when --wpm is given.
    """
    args = build_parser().parse_args(argv)

    try:
        cfg = Config(args.config) if args.config else default_config
        cfg.validate()
    except (FileNotFoundError, ValueError) as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2

    logging.basicConfig(
        level=(args.log_level or cfg.get('logging.level', 'INFO')).upper(),
        format=cfg.get('logging.format'),
        handlers=[logging.StreamHandler(sys.stderr)]
    )

    if args.tone is not None:
        wav_bytes = synthesize_tone(args.tone)
    elif args.recording:
        try:
            wav_bytes = read_wav_file(args.recording)
        except FileNotFoundError as e:
            logger.error(str(e))
            return 1
    else:
        build_parser().print_usage(sys.stderr)
        return 2

    engine = ConfidenceEngine(cfg)

    if args.wpm is None:
        result = engine.try_extract(wav_bytes)
        features = result.unwrap_or_default(engine.fallback_features)
        output = {'audioFeatures': features.to_dict(), 'usedFallback': not result.ok}
        if args.json:
            print(json.dumps(output, indent=2))
        else:
            for key, value in output['audioFeatures'].items():
                print(f"{key:>14}: {value:.4f}")
            if not result.ok:
                print(f"(neutral fallback: {result.error})")
        return 0

    metrics = SpeechMetrics(
        rate_of_speech=args.wpm,
        filler_word_count=args.fillers,
        fluency_score=args.fluency,
        duration_minutes=args.duration
    )
    report = engine.analyze(wav_bytes, metrics)

    if args.json:
        print(json.dumps(report.to_dict(), indent=2))
    else:
        for key, value in report.features.to_dict().items():
            print(f"{key:>14}: {value:.4f}")
        for name, delta in report.assessment.contributions:
            print(f"{name:>16}: {delta:+g}")
        print(f"{'score':>16}: {report.assessment.score:g}")
        print(f"{'category':>16}: {report.category.value}")
        if report.used_fallback:
            print(f"(neutral fallback: {report.error})")
    return 0


__all__ = [
    'ConfidenceEngine',
    'read_wav_file',
    'extract_audio_features',
    'try_extract_audio_features',
    'calculate_confidence_category',
    'main',
]


if __name__ == "__main__":
    sys.exit(main())
