"""WAV input decoding"""

from speech_confidence.input.wav_decoder import (
    WaveformDecoder,
    decode_wav,
    WavDecodeError,
    FormatError,
    UnsupportedFormatError,
    InsufficientDataError
)
from speech_confidence.input.wav_encoder import encode_wav

__all__ = [
    'WaveformDecoder',
    'decode_wav',
    'encode_wav',
    'WavDecodeError',
    'FormatError',
    'UnsupportedFormatError',
    'InsufficientDataError',
]
