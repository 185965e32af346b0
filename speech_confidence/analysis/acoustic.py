"""Acoustic Feature Extraction

This module turns a decoded PCM buffer into the scalar descriptors used by the
confidence classifier: loudness (RMS volume and mean absolute energy), loudness
consistency over time, and pitch statistics from a frame-based autocorrelation
pitch tracker.

Pitch tracking per frame:
    1. First-order pre-emphasis y[n] = x[n] - a * x[n-1] over the whole signal
    2. Hamming window, then normalization by the frame's own RMS
    3. Autocorrelation for lags up to sr / min_hz, each lag divided by its
       overlap length
    4. Strict local maxima between sr / max_hz and sr / min_hz; frames whose
       best peak is below the voicing threshold are treated as unvoiced,
       otherwise the shortest lag within octave_tolerance of the best wins
    5. pitch = sr / lag, kept only inside [min_hz, max_hz]
"""

import logging
from typing import Optional

import numpy as np
from numpy.lib.stride_tricks import sliding_window_view

from speech_confidence.models.frames import PcmBuffer
from speech_confidence.models.features import AudioFeatures
from speech_confidence.models.results import ExtractionResult
from speech_confidence.config.config_loader import Config, config as default_config


logger = logging.getLogger(__name__)


class AudioProcessingError(Exception):
    """Exception raised for errors during feature extraction"""
    pass


def _frames(samples: np.ndarray, frame_length: int, hop_length: int) -> np.ndarray:
    """Overlapping frames as a (n_frames, frame_length) view; empty if none fit"""
    if len(samples) < frame_length:
        return np.empty((0, frame_length), dtype=samples.dtype)
    return sliding_window_view(samples, frame_length)[::hop_length]


def rms(samples: np.ndarray) -> float:
    """Root-mean-square amplitude"""
    return float(np.sqrt(np.mean(np.square(samples))))


class FeatureExtractor:
    """Extracts AudioFeatures from decoded PCM buffers.

    Stateless apart from configuration, so one instance can serve concurrent
    requests.

    Attributes:
        frame_length: Pitch analysis window in samples
        hop_length: Pitch analysis hop in samples
        pre_emphasis: Pre-emphasis coefficient
        voicing_threshold: Minimum autocorrelation peak for a voiced frame
        min_hz: Lowest accepted pitch
        max_hz: Highest accepted pitch
        octave_tolerance: Shortest-period preference; a local maximum at least
                          this fraction of the best peak wins if its lag is
                          shorter. 1.0 selects the plain maximum.
        consistency_frame_length: Loudness consistency window in samples
        consistency_hop_length: Loudness consistency hop in samples
        consistency_scale: Multiplier applied to per-frame RMS deviation
        neutral_consistency: Consistency reported when no full frame fits
    """

    def __init__(self, cfg: Optional[Config] = None):
        """Initialize the extractor from configuration."""
        cfg = cfg or default_config
        self.frame_length = int(cfg.get('pitch.frame_length', 4096))
        self.hop_length = int(cfg.get('pitch.hop_length', 2048))
        self.pre_emphasis = float(cfg.get('pitch.pre_emphasis', 0.97))
        self.voicing_threshold = float(cfg.get('pitch.voicing_threshold', 0.01))
        self.min_hz = float(cfg.get('pitch.min_hz', 50.0))
        self.max_hz = float(cfg.get('pitch.max_hz', 400.0))
        self.octave_tolerance = float(cfg.get('pitch.octave_tolerance', 0.9))

        self.consistency_frame_length = int(cfg.get('consistency.frame_length', 4096))
        self.consistency_hop_length = int(cfg.get('consistency.hop_length', 2048))
        self.consistency_scale = float(cfg.get('consistency.scale', 5.0))
        self.neutral_consistency = float(cfg.get('consistency.neutral', 0.5))

        self._window = np.hamming(self.frame_length)

    def extract(self, buffer: PcmBuffer) -> AudioFeatures:
        """Compute all acoustic features for a buffer.

        Args:
            buffer: Decoded PCM samples

        Returns:
            AudioFeatures with every field finite

        Raises:
            AudioProcessingError: If the buffer is empty or any feature
                                  computation fails
        """
        try:
            samples = np.asarray(buffer.samples, dtype=np.float64)
            if samples.size == 0:
                raise AudioProcessingError("Cannot extract features from an empty buffer")

            pitches = self.extract_pitches(samples, buffer.sample_rate)
            if pitches.size > 0:
                average_pitch = float(np.mean(pitches))
                pitch_variance = float(np.std(pitches))
                pitch_range = float(np.ptp(pitches))
            else:
                average_pitch = pitch_variance = pitch_range = 0.0

            features = AudioFeatures(
                volume=rms(samples),
                average_pitch=average_pitch,
                pitch_variance=pitch_variance,
                pitch_range=pitch_range,
                energy=float(np.mean(np.abs(samples))),
                consistency=self.consistency(samples)
            )
        except AudioProcessingError:
            raise
        except Exception as e:
            logger.debug(f"Feature extraction failed: {e}")
            raise AudioProcessingError(f"Failed to extract acoustic features: {e}") from e

        logger.debug(
            f"Extracted features from {len(samples)} samples: "
            f"{pitches.size} voiced frames, {features}"
        )
        return features

    def try_extract(self, buffer: PcmBuffer) -> ExtractionResult:
        """Extract features, capturing any failure in the result."""
        try:
            return ExtractionResult(features=self.extract(buffer))
        except Exception as e:
            logger.warning(f"Audio feature extraction failed: {e}", exc_info=True)
            return ExtractionResult(error=e)

    def consistency(self, samples: np.ndarray) -> float:
        """Loudness steadiness: 1 - scale * std of per-frame RMS, clamped to [0, 1].

        Returns the neutral value when no full frame fits.
        """
        frames = _frames(samples, self.consistency_frame_length, self.consistency_hop_length)
        if len(frames) == 0:
            return self.neutral_consistency

        frame_rms = np.sqrt(np.mean(np.square(frames), axis=1))
        deviation = float(np.std(frame_rms))
        return float(min(1.0, max(0.0, 1.0 - deviation * self.consistency_scale)))

    def extract_pitches(self, samples: np.ndarray, sample_rate: int) -> np.ndarray:
        """Per-frame pitch estimates in Hz for voiced frames.

        Args:
            samples: Mono samples
            sample_rate: Sample rate in Hz

        Returns:
            1D array of accepted pitches; empty for silence or buffers
            shorter than one frame
        """
        samples = np.asarray(samples, dtype=np.float64)
        emphasized = self.apply_pre_emphasis(samples)

        pitches = []
        for frame in _frames(emphasized, self.frame_length, self.hop_length):
            normalized = self._normalize_window(frame * self._window)
            pitch = self._autocorrelation_pitch(normalized, sample_rate)
            if pitch is not None and self.min_hz <= pitch <= self.max_hz:
                pitches.append(pitch)

        return np.asarray(pitches, dtype=np.float64)

    def apply_pre_emphasis(self, samples: np.ndarray) -> np.ndarray:
        """y[0] = x[0], y[n] = x[n] - a * x[n-1]"""
        result = np.empty_like(samples)
        if samples.size == 0:
            return result
        result[0] = samples[0]
        result[1:] = samples[1:] - self.pre_emphasis * samples[:-1]
        return result

    @staticmethod
    def _normalize_window(frame: np.ndarray) -> np.ndarray:
        frame_rms = rms(frame)
        if frame_rms == 0:
            return frame
        return frame / frame_rms

    @staticmethod
    def autocorrelation(frame: np.ndarray, max_lag: int) -> np.ndarray:
        """Autocorrelation for lags 0..max_lag, each divided by its overlap length.

        Computed through a zero-padded FFT, which gives the same linear
        (non-circular) sums as the direct dot products.
        """
        n = len(frame)
        max_lag = min(max_lag, n - 1)
        n_fft = 1 << int(np.ceil(np.log2(2 * n)))
        spectrum = np.fft.rfft(frame, n_fft)
        full = np.fft.irfft(spectrum * np.conj(spectrum), n_fft)[:max_lag + 1]
        return full / (n - np.arange(max_lag + 1))

    def _autocorrelation_pitch(self, frame: np.ndarray, sample_rate: int) -> Optional[float]:
        """Pitch of one windowed, normalized frame, or None if unvoiced."""
        min_lag = max(1, int(sample_rate // self.max_hz))
        max_lag = min(int(sample_rate // self.min_hz), len(frame) - 2)
        if max_lag <= min_lag:
            return None

        autocorr = self.autocorrelation(frame, max_lag)

        # Candidate lags need both neighbours, so the last lag is excluded
        lags = np.arange(min_lag, max_lag)
        values = autocorr[lags]
        is_peak = (values > autocorr[lags - 1]) & (values > autocorr[lags + 1]) & (values > 0)
        if not np.any(is_peak):
            return None

        peak_lags = lags[is_peak]
        peak_values = values[is_peak]
        best = float(peak_values.max())
        if best < self.voicing_threshold:
            return None

        # Overlap normalization lets later periods of a steady tone edge out
        # the first; prefer the shortest lag that is nearly as strong
        chosen = peak_lags[peak_values >= self.octave_tolerance * best][0]
        return sample_rate / float(chosen)
