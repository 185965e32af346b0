"""Data model for decoded PCM audio"""

from dataclasses import dataclass
import numpy as np


@dataclass(frozen=True)
class PcmBuffer:
    """Decoded PCM samples from a single audio channel

    Attributes:
        samples: Normalized samples in [-1, 1] as a read-only numpy array
        sample_rate: Sample rate in Hz (e.g., 16000)
        bits_per_sample: Bit depth of the source encoding (8, 16 or 32)
        num_channels: Channel count of the source; only the first is kept
    """
    samples: np.ndarray  # first channel only
    sample_rate: int     # e.g., 16000 Hz
    bits_per_sample: int = 16
    num_channels: int = 1

    def __post_init__(self):
        """Validate buffer data and freeze the sample array.

        Raises:
            AssertionError: If any validation check fails
        """
        assert isinstance(self.samples, np.ndarray), "Samples must be numpy array"
        assert self.samples.ndim == 1, "Samples must be 1D array"
        assert self.sample_rate > 0, "Sample rate must be positive"
        assert self.num_channels > 0, "Channel count must be positive"
        # Freeze a view so the caller's own array stays writable
        object.__setattr__(self, 'samples', self.samples.view())
        self.samples.flags.writeable = False

    @property
    def duration(self) -> float:
        """Buffer duration in seconds"""
        return len(self.samples) / self.sample_rate

    def __len__(self) -> int:
        return len(self.samples)
