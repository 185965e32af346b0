"""RIFF/WAVE decoding into normalized PCM sample buffers

Parses the container by walking its chunks rather than assuming the canonical
44-byte header, so files carrying LIST/fact/bext chunks ahead of the payload
decode correctly. Only the first channel is kept.
"""

import logging
import struct
from dataclasses import dataclass
from typing import Optional, Tuple, Union

import numpy as np

from speech_confidence.models.frames import PcmBuffer
from speech_confidence.config.config_loader import config


logger = logging.getLogger(__name__)

RIFF_HEADER = struct.Struct('<4sI4s')
CHUNK_HEADER = struct.Struct('<4sI')
FMT_BODY = struct.Struct('<HHIIHH')

WAVE_FORMAT_PCM = 0x0001
WAVE_FORMAT_IEEE_FLOAT = 0x0003
WAVE_FORMAT_EXTENSIBLE = 0xFFFE

SUPPORTED_BIT_DEPTHS = (8, 16, 32)

BytesLike = Union[bytes, bytearray, memoryview]


class WavDecodeError(Exception):
    """Base exception for WAV decoding failures"""
    pass


class FormatError(WavDecodeError):
    """Input is not a valid RIFF/WAVE container"""
    pass


class UnsupportedFormatError(WavDecodeError):
    """Bit depth other than 8, 16 or 32"""
    pass


class InsufficientDataError(WavDecodeError):
    """Too few samples for meaningful analysis"""
    pass


@dataclass(frozen=True)
class WavFormat:
    """Fields of the ``fmt `` chunk"""
    format_tag: int
    num_channels: int
    sample_rate: int
    byte_rate: int
    block_align: int
    bits_per_sample: int

    @property
    def bytes_per_sample(self) -> int:
        return self.bits_per_sample // 8

    @property
    def frame_stride(self) -> int:
        return self.bytes_per_sample * self.num_channels


class WaveformDecoder:
    """Decodes RIFF/WAVE byte buffers into PcmBuffer instances.

    The decoder is stateless apart from its configuration and may be shared
    across threads.

    Attributes:
        min_samples: Minimum number of decoded samples; shorter clips raise
                     InsufficientDataError
    """

    def __init__(self, min_samples: Optional[int] = None):
        if min_samples is None:
            min_samples = config.get('decoder.min_samples', 1000)
        self.min_samples = int(min_samples)

    def decode(self, data: BytesLike) -> PcmBuffer:
        """Decode a WAV file held in memory.

        Args:
            data: Complete RIFF/WAVE file contents

        Returns:
            PcmBuffer with first-channel samples normalized to [-1, 1]

        Raises:
            FormatError: Missing RIFF/WAVE markers, missing or malformed
                         ``fmt `` chunk, missing ``data`` chunk or empty payload
            UnsupportedFormatError: Bit depth other than 8, 16 or 32
            InsufficientDataError: Fewer than ``min_samples`` samples
        """
        if isinstance(data, memoryview):
            data = data.tobytes()
        if not isinstance(data, (bytes, bytearray)):
            raise FormatError(f"Expected bytes, got {type(data).__name__}")

        self._check_header(data)
        fmt, data_offset, data_size = self._locate_chunks(data)
        self._check_format(fmt)

        available = len(data) - data_offset
        if data_size > available:
            logger.debug(f"data chunk declares {data_size} bytes, {available} present; clamping")
            data_size = available

        n_frames = data_size // fmt.frame_stride
        logger.debug(
            f"WAV info: {fmt.sample_rate}Hz, {fmt.bits_per_sample}bit, "
            f"{fmt.num_channels}ch, {data_size} bytes, {n_frames} frames"
        )

        if n_frames < self.min_samples:
            raise InsufficientDataError(
                f"Only {n_frames} samples decoded, at least {self.min_samples} required"
            )

        samples = self._decode_first_channel(data, data_offset, n_frames, fmt)
        return PcmBuffer(
            samples=samples,
            sample_rate=fmt.sample_rate,
            bits_per_sample=fmt.bits_per_sample,
            num_channels=fmt.num_channels
        )

    def _check_header(self, data: bytes) -> None:
        if len(data) < RIFF_HEADER.size:
            raise FormatError(f"Buffer too short for a RIFF header ({len(data)} bytes)")
        riff, _, wave = RIFF_HEADER.unpack_from(data, 0)
        if riff != b'RIFF':
            raise FormatError("Missing RIFF marker")
        if wave != b'WAVE':
            raise FormatError("Missing WAVE marker")

    def _locate_chunks(self, data: bytes) -> Tuple[WavFormat, int, int]:
        """Find the ``fmt `` chunk and the ``data`` payload.

        Returns:
            (format, payload offset, declared payload size)
        """
        fmt: Optional[WavFormat] = None
        data_chunk: Optional[Tuple[int, int]] = None

        offset = RIFF_HEADER.size
        while offset + CHUNK_HEADER.size <= len(data):
            chunk_id, size = CHUNK_HEADER.unpack_from(data, offset)
            body = offset + CHUNK_HEADER.size
            if chunk_id == b'fmt ' and fmt is None:
                fmt = self._parse_fmt(data, body, size)
            elif chunk_id == b'data' and data_chunk is None:
                data_chunk = (body, size)
            if fmt is not None and data_chunk is not None:
                break
            # Chunks are word aligned
            offset = body + size + (size & 1)

        # A corrupt chunk size can derail the walk; fall back to a raw scan
        if fmt is None:
            pos = data.find(b'fmt ', RIFF_HEADER.size)
            if pos == -1 or pos + CHUNK_HEADER.size > len(data):
                raise FormatError("No fmt chunk found")
            _, size = CHUNK_HEADER.unpack_from(data, pos)
            fmt = self._parse_fmt(data, pos + CHUNK_HEADER.size, size)

        if data_chunk is None:
            pos = data.find(b'data', RIFF_HEADER.size)
            if pos == -1 or pos + CHUNK_HEADER.size > len(data):
                raise FormatError("No data chunk found")
            _, size = CHUNK_HEADER.unpack_from(data, pos)
            data_chunk = (pos + CHUNK_HEADER.size, size)

        data_offset, data_size = data_chunk
        if data_size == 0:
            raise FormatError("data chunk is empty")
        return fmt, data_offset, data_size

    def _parse_fmt(self, data: bytes, body: int, size: int) -> WavFormat:
        if size < FMT_BODY.size or body + FMT_BODY.size > len(data):
            raise FormatError(f"fmt chunk too short ({size} bytes)")
        return WavFormat(*FMT_BODY.unpack_from(data, body))

    def _check_format(self, fmt: WavFormat) -> None:
        if fmt.num_channels == 0:
            raise FormatError("fmt chunk declares zero channels")
        if fmt.sample_rate == 0:
            raise FormatError("fmt chunk declares a zero sample rate")
        if fmt.bits_per_sample not in SUPPORTED_BIT_DEPTHS:
            raise UnsupportedFormatError(
                f"Unsupported bit depth: {fmt.bits_per_sample} "
                f"(supported: {', '.join(map(str, SUPPORTED_BIT_DEPTHS))})"
            )
        if fmt.format_tag == WAVE_FORMAT_IEEE_FLOAT and fmt.bits_per_sample != 32:
            raise UnsupportedFormatError(f"Unsupported float width: {fmt.bits_per_sample} bits")
        if fmt.format_tag not in (WAVE_FORMAT_PCM, WAVE_FORMAT_IEEE_FLOAT, WAVE_FORMAT_EXTENSIBLE):
            logger.warning(f"Unknown WAV format tag 0x{fmt.format_tag:04x}, decoding as PCM")

    def _decode_first_channel(self, data: bytes, offset: int, n_frames: int,
                              fmt: WavFormat) -> np.ndarray:
        """Decode the first channel through a strided view of the payload."""
        dtype = {8: np.uint8, 16: np.dtype('<i2'), 32: np.dtype('<f4')}[fmt.bits_per_sample]
        raw = np.ndarray(
            shape=(n_frames,),
            dtype=dtype,
            buffer=data,
            offset=offset,
            strides=(fmt.frame_stride,)
        )

        if fmt.bits_per_sample == 16:
            samples = raw.astype(np.float64) / 32768.0
        elif fmt.bits_per_sample == 8:
            samples = (raw.astype(np.float64) - 128.0) / 128.0
        else:
            samples = raw.astype(np.float64)
            if not np.all(np.isfinite(samples)):
                raise FormatError("Float payload contains NaN or infinite samples")

        return samples


def decode_wav(data: BytesLike, min_samples: Optional[int] = None) -> PcmBuffer:
    """Decode a WAV byte buffer with a default-configured WaveformDecoder"""
    return WaveformDecoder(min_samples=min_samples).decode(data)
