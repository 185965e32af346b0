"""Data models for extracted acoustic features and transcript metrics"""

import math
from dataclasses import dataclass, fields
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class AudioFeatures:
    """Acoustic features extracted from a recording

    Attributes:
        volume: RMS amplitude over the whole buffer, roughly [0, 1]
        average_pitch: Mean F0 in Hz across voiced frames, 0 if none
        pitch_variance: Population standard deviation of per-frame pitch (Hz)
        pitch_range: Max minus min per-frame pitch (Hz), 0 if none
        energy: Mean absolute amplitude over the whole buffer
        consistency: Loudness steadiness over time in [0, 1]
    """
    volume: float
    average_pitch: float
    pitch_variance: float
    pitch_range: float
    energy: float
    consistency: float

    # snake_case field -> key used by the feedback composer
    WIRE_KEYS = {
        'volume': 'volume',
        'average_pitch': 'averagePitch',
        'pitch_variance': 'pitchVariance',
        'pitch_range': 'pitchRange',
        'energy': 'energy',
        'consistency': 'consistency',
    }

    def __post_init__(self):
        """Validate that every feature is a finite number"""
        for f in fields(self):
            value = getattr(self, f.name)
            assert math.isfinite(value), f"{f.name} must be finite, got {value}"
        assert 0.0 <= self.consistency <= 1.0, "Consistency must be in [0, 1]"

    @classmethod
    def neutral(cls, overrides: Optional[Dict[str, float]] = None) -> "AudioFeatures":
        """Neutral feature set returned when extraction fails.

        Args:
            overrides: Optional field values replacing the built-in defaults
                       (the ``fallback`` config section uses this)
        """
        values = {
            'volume': 0.5,
            'pitch_variance': 50.0,
            'energy': 0.5,
            'consistency': 0.5,
            'average_pitch': 150.0,
            'pitch_range': 100.0,
        }
        if overrides:
            values.update({k: float(v) for k, v in overrides.items() if k in values})
        return cls(**values)

    def to_dict(self) -> Dict[str, float]:
        """Serialize with camelCase keys"""
        return {wire: getattr(self, name) for name, wire in self.WIRE_KEYS.items()}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AudioFeatures":
        """Build from a dict with camelCase or snake_case keys"""
        values = {}
        for name, wire in cls.WIRE_KEYS.items():
            if wire in data:
                values[name] = float(data[wire])
            elif name in data:
                values[name] = float(data[name])
            else:
                raise KeyError(f"Missing audio feature: {wire}")
        return cls(**values)


@dataclass(frozen=True)
class SpeechMetrics:
    """Transcript-derived metrics supplied by the transcript analysis step

    Attributes:
        rate_of_speech: Words per minute
        filler_word_count: Number of filler words in the transcript
        fluency_score: Fluency rating from 1 to 10
        duration_minutes: Speaking duration in minutes
    """
    rate_of_speech: float
    filler_word_count: int
    fluency_score: float
    duration_minutes: float = 0.0

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SpeechMetrics":
        """Build from the camelCase form used by the transcript analyzer"""
        return cls(
            rate_of_speech=float(data.get('rateOfSpeech', data.get('rate_of_speech', 0.0))),
            filler_word_count=int(data.get('fillerWordCount', data.get('filler_word_count', 0))),
            fluency_score=float(data.get('fluencyScore', data.get('fluency_score', 0.0))),
            duration_minutes=float(data.get('durationMinutes', data.get('duration_minutes', 0.0))),
        )
