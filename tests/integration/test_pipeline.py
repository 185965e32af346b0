"""
Integration tests for the end-to-end confidence pipeline.

WAV bytes -> decoder -> feature extractor -> classifier, including the
neutral fallback for unusable recordings and the command line entry point.
"""

import json

import numpy as np
import pytest

from speech_confidence import (
    ConfidenceEngine,
    extract_audio_features,
    try_extract_audio_features,
    calculate_confidence_category,
    AudioFeatures,
    SpeechMetrics,
    ConfidenceCategory,
    FormatError,
    InsufficientDataError,
    encode_wav
)
from speech_confidence.config.config_loader import Config
import speech_confidence.main as engine_module
from speech_confidence.main import main, read_wav_file


@pytest.fixture
def engine():
    return ConfidenceEngine(Config(config_path=None))


@pytest.fixture
def tone_wav(make_sine):
    """Two seconds of a steady 150 Hz tone at half scale"""
    return encode_wav(make_sine(150.0, 2.0, 16000, 0.5), 16000)


@pytest.fixture
def good_metrics():
    return SpeechMetrics(rate_of_speech=140, filler_word_count=2, fluency_score=8,
                         duration_minutes=0.5)


def test_extract_audio_features_from_tone(tone_wav):
    features = extract_audio_features(tone_wav)

    assert features.average_pitch == pytest.approx(150.0, abs=5.0)
    assert features.volume == pytest.approx(0.5 / np.sqrt(2), rel=1e-2)
    assert features.consistency > 0.9
    assert features != AudioFeatures.neutral()


def test_tone_with_good_metrics(engine, tone_wav, good_metrics):
    """A flat tone loses the pitch points but the delivery metrics carry it"""
    report = engine.analyze(tone_wav, good_metrics)

    names = [name for name, _ in report.assessment.contributions]
    assert 'pitch_flat' in names
    assert 'volume_adequate' in names
    assert report.assessment.score == 6
    assert report.category == ConfidenceCategory.CONFIDENT
    assert report.used_fallback is False
    assert report.error is None


def test_garbage_input_falls_back_to_neutral_features():
    garbage = np.random.default_rng(5).bytes(2048)

    features = extract_audio_features(garbage)

    assert features == AudioFeatures.neutral()


def test_try_extract_exposes_decoder_errors(make_sine):
    result = try_extract_audio_features(b'not a wav file at all')
    assert not result.ok
    assert isinstance(result.error, FormatError)

    short = encode_wav(make_sine(150.0, 0.01, 16000), 16000)
    result = try_extract_audio_features(short)
    assert isinstance(result.error, InsufficientDataError)


def test_fallback_report_is_flagged(engine, good_metrics):
    report = engine.analyze(b'RIFF\x00\x00\x00\x00WAVE', good_metrics)

    assert report.used_fallback is True
    assert report.error.startswith('FormatError')
    assert report.features == AudioFeatures.neutral()
    assert report.category in tuple(ConfidenceCategory)


def test_fallback_features_come_from_config(tmp_path, good_metrics):
    config_file = tmp_path / "config.yaml"
    config_file.write_text("fallback:\n  volume: 0.01\n")
    engine = ConfidenceEngine(Config(str(config_file)))

    report = engine.analyze(b'', good_metrics)

    assert report.features.volume == 0.01
    assert report.features.average_pitch == 150.0


def test_silent_recording(engine, good_metrics):
    silent = encode_wav(np.zeros(16000), 16000)

    features = engine.extract_features(silent)

    assert features.volume == 0.0
    assert features.energy == 0.0
    assert features.average_pitch == 0.0
    assert 'pitch_unnatural' in [name for name, _ in engine.classifier.assess(features, good_metrics).contributions]


def test_hesitant_delivery(engine, make_sine):
    """Very quiet tone plus poor transcript metrics"""
    quiet = encode_wav(make_sine(150.0, 2.0, 16000, 0.02), 16000)
    metrics = SpeechMetrics(rate_of_speech=60, filler_word_count=12, fluency_score=3)

    report = engine.analyze(quiet, metrics)

    assert report.category == ConfidenceCategory.HESITANT


def test_public_functions_compose(tone_wav, good_metrics):
    category = calculate_confidence_category(extract_audio_features(tone_wav), good_metrics)
    assert category == ConfidenceCategory.CONFIDENT


def test_read_wav_file(tmp_path, tone_wav):
    path = tmp_path / "recording.wav"
    path.write_bytes(tone_wav)

    assert read_wav_file(path) == tone_wav
    with pytest.raises(FileNotFoundError):
        read_wav_file(tmp_path / "missing.wav")


class TestCommandLine:
    """Tests for the speech-confidence entry point"""

    def test_tone_features_json(self, capsys):
        assert main(['--tone', '150', '--json']) == 0

        output = json.loads(capsys.readouterr().out)
        assert output['usedFallback'] is False
        assert output['audioFeatures']['averagePitch'] == pytest.approx(150.0, abs=5.0)

    def test_classify_file(self, tmp_path, tone_wav, capsys):
        path = tmp_path / "recording.wav"
        path.write_bytes(tone_wav)

        code = main([str(path), '--wpm', '140', '--fillers', '2', '--fluency', '8', '--json'])

        assert code == 0
        output = json.loads(capsys.readouterr().out)
        assert output['confidenceCategory'] == 'confident'
        assert output['confidenceScore'] == 6

    def test_text_output(self, tmp_path, tone_wav, capsys):
        path = tmp_path / "recording.wav"
        path.write_bytes(tone_wav)

        assert main([str(path), '--wpm', '60', '--fillers', '12', '--fluency', '3']) == 0

        out = capsys.readouterr().out
        assert 'category' in out
        assert 'averagePitch' in out

    def test_missing_file(self, tmp_path):
        assert main([str(tmp_path / "nope.wav")]) == 1

    def test_no_input(self):
        assert main([]) == 2

    def test_bad_config(self, tmp_path):
        assert main(['--tone', '150', '--config', str(tmp_path / "missing.yaml")]) == 2


def test_invalid_default_config_fails_on_first_use(tmp_path, monkeypatch, tone_wav):
    """A bad working-directory config is reported as ValueError, not an assertion"""
    config_file = tmp_path / "config.yaml"
    config_file.write_text("fallback:\n  consistency: 2\n")
    monkeypatch.setattr(engine_module, 'default_config', Config(str(config_file)))
    monkeypatch.setattr(engine_module, '_default_engine', None)

    with pytest.raises(ValueError, match="fallback.consistency"):
        extract_audio_features(tone_wav)
