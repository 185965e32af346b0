"""Canonical RIFF/WAVE writer for synthetic recordings"""

import struct

import numpy as np

from speech_confidence.input.wav_decoder import (
    SUPPORTED_BIT_DEPTHS,
    WAVE_FORMAT_IEEE_FLOAT,
    WAVE_FORMAT_PCM,
    UnsupportedFormatError,
)


def encode_wav(samples: np.ndarray, sample_rate: int, bits_per_sample: int = 16,
               num_channels: int = 1) -> bytes:
    """Encode float samples in [-1, 1] as a WAV file with a 44-byte header.

    Args:
        samples: 1D array (written to every channel) or (frames, channels) array
        sample_rate: Sample rate in Hz
        bits_per_sample: 8, 16 or 32 (32-bit is written as IEEE float)
        num_channels: Channel count when ``samples`` is 1D

    Returns:
        Complete WAV file contents
    """
    if bits_per_sample not in SUPPORTED_BIT_DEPTHS:
        raise UnsupportedFormatError(f"Unsupported bit depth: {bits_per_sample}")

    samples = np.asarray(samples, dtype=np.float64)
    if samples.ndim == 1:
        samples = np.repeat(samples[:, None], num_channels, axis=1)
    num_channels = samples.shape[1]
    clipped = np.clip(samples, -1.0, 1.0)

    if bits_per_sample == 16:
        payload = np.round(clipped * 32767.0).astype('<i2').tobytes()
        format_tag = WAVE_FORMAT_PCM
    elif bits_per_sample == 8:
        payload = np.round(clipped * 127.0 + 128.0).astype(np.uint8).tobytes()
        format_tag = WAVE_FORMAT_PCM
    else:
        payload = clipped.astype('<f4').tobytes()
        format_tag = WAVE_FORMAT_IEEE_FLOAT

    # Odd payloads get a pad byte counted in the RIFF size but not the data size
    pad = b'\x00' if len(payload) % 2 else b''
    block_align = num_channels * bits_per_sample // 8
    header = struct.pack(
        '<4sI4s4sIHHIIHH4sI',
        b'RIFF', 36 + len(payload) + len(pad), b'WAVE',
        b'fmt ', 16, format_tag, num_channels, sample_rate,
        sample_rate * block_align, block_align, bits_per_sample,
        b'data', len(payload)
    )
    return header + payload + pad
