"""Compressed stream: compression parameters bound to a bit stream."""

from __future__ import annotations

import math
from typing import NamedTuple

from .bitstream import WORD_BITS, WORD_BYTES, BitStream
from .field import Field
from .scalar import ZfpType, traits_for, type_precision

VERSION = 0x0050
"""Library version number (0.5.0)."""

MIN_BITS = 0
MAX_BITS = 4171
MAX_PREC = 64
MIN_EXP = -1074

MAGIC_BITS = 32
MODE_SHORT_BITS = 12
MODE_LONG_BITS = 64
HEADER_BITS = 148
MODE_SHORT_MAX = (1 << MODE_SHORT_BITS) - 2


class StreamParams(NamedTuple):
    """All compression parameters of a stream."""

    minbits: int
    maxbits: int
    maxprec: int
    minexp: int


class ZfpStream:
    """Compression parameters together with the bit stream they apply to."""

    def __init__(self, bit_stream: BitStream | None = None):
        self.bit_stream = bit_stream
        self.minbits = MIN_BITS
        self.maxbits = MAX_BITS
        self.maxprec = MAX_PREC
        self.minexp = MIN_EXP

    def _stream(self) -> BitStream:
        if self.bit_stream is None:
            raise ValueError("no bit stream is associated with this stream")
        return self.bit_stream

    def mode(self) -> int:
        """Compact 12- or 64-bit encoding of all parameters."""
        if (
            self.minbits == self.maxbits
            and 1 <= self.maxbits <= 2048
            and self.maxprec >= MAX_PREC
            and self.minexp <= MIN_EXP
        ):
            return self.maxbits - 1
        if (
            self.minbits <= MIN_BITS
            and self.maxbits >= MAX_BITS
            and 1 <= self.maxprec <= 128
            and self.minexp <= MIN_EXP
        ):
            return self.maxprec + 2047
        if (
            self.minbits <= MIN_BITS
            and self.maxbits >= MAX_BITS
            and self.maxprec >= MAX_PREC
            and -1074 <= self.minexp <= 843
        ):
            return self.minexp + 3251

        minbits = max(1, min(self.minbits, 0x8000)) - 1
        maxbits = max(1, min(self.maxbits, 0x8000)) - 1
        maxprec = max(1, min(self.maxprec, 0x0080)) - 1
        minexp = max(0, min(self.minexp + 16495, 0x7FFF))
        mode = minexp
        mode = (mode << 7) + maxprec
        mode = (mode << 15) + maxbits
        mode = (mode << 15) + minbits
        mode = (mode << 12) + 0xFFF
        return mode

    def params(self) -> StreamParams:
        """Current compression parameters."""
        return StreamParams(self.minbits, self.maxbits, self.maxprec, self.minexp)

    def compressed_size(self) -> int:
        """Byte size of the compressed stream, valid after flushing."""
        return self._stream().size()

    def maximum_size(self, field: Field) -> int:
        """Conservative bound on compressed bytes for ``field``, header included."""
        dims = field.dimensionality()
        if not dims or field.zfp_type is ZfpType.NONE:
            return 0
        blocks = 1
        for n in (field.nx, field.ny, field.nz):
            blocks *= (max(n, 1) + 3) // 4
        values = 1 << (2 * dims)
        maxbits = 1 + traits_for(field.zfp_type).ebits
        maxbits += values - 1 + values * min(self.maxprec, type_precision(field.zfp_type))
        maxbits = min(maxbits, self.maxbits)
        maxbits = max(maxbits, self.minbits)
        bits = HEADER_BITS + blocks * maxbits
        return (bits + WORD_BITS - 1) // WORD_BITS * WORD_BYTES

    def set_rate(self, rate: float, zfp_type, dims: int, wra: bool = False) -> float:
        """Fixed-rate mode; returns the actual rate in bits per scalar."""
        if rate < 0:
            raise ValueError(f"rate must be non-negative, got {rate}")
        kind = ZfpType(zfp_type)
        n = 1 << (2 * dims)
        bits = math.floor(n * rate + 0.5)
        if kind in (ZfpType.FLOAT, ZfpType.DOUBLE):
            bits = max(bits, 1 + traits_for(kind).ebits)
        if wra:
            bits = (bits + WORD_BITS - 1) // WORD_BITS * WORD_BITS
        self.minbits = bits
        self.maxbits = bits
        self.maxprec = type_precision(kind)
        self.minexp = MIN_EXP
        return bits / n

    def set_precision(self, precision: int, zfp_type) -> int:
        """Fixed-precision mode; returns the actual precision."""
        maxprec = type_precision(zfp_type)
        self.minbits = MIN_BITS
        self.maxbits = MAX_BITS
        self.maxprec = min(maxprec, precision) if precision else maxprec
        self.minexp = MIN_EXP
        return self.maxprec

    def set_accuracy(self, tolerance: float, zfp_type) -> float:
        """Fixed-accuracy mode; returns the actual error tolerance."""
        emin = MIN_EXP
        if tolerance > 0:
            emin = math.frexp(tolerance)[1] - 1
        self.minbits = MIN_BITS
        self.maxbits = MAX_BITS
        self.maxprec = type_precision(zfp_type)
        self.minexp = emin
        return math.ldexp(1.0, emin) if tolerance > 0 else 0.0

    def set_mode(self, mode: int) -> None:
        """Set all parameters from their 12- or 64-bit encoding."""
        if not 0 <= mode < 1 << MODE_LONG_BITS:
            raise ValueError(f"mode must fit in {MODE_LONG_BITS} bits")
        if mode <= MODE_SHORT_MAX:
            if mode < 2048:
                self.minbits = self.maxbits = mode + 1
                self.maxprec = MAX_PREC
                self.minexp = MIN_EXP
            elif mode < 2176:
                self.minbits = MIN_BITS
                self.maxbits = MAX_BITS
                self.maxprec = mode - 2047
                self.minexp = MIN_EXP
            else:
                self.minbits = MIN_BITS
                self.maxbits = MAX_BITS
                self.maxprec = MAX_PREC
                self.minexp = mode - 3251
            return
        mode >>= 12
        self.minbits = (mode & 0x7FFF) + 1
        mode >>= 15
        self.maxbits = (mode & 0x7FFF) + 1
        mode >>= 15
        self.maxprec = (mode & 0x007F) + 1
        mode >>= 7
        self.minexp = (mode & 0x7FFF) - 16495

    def set_params(self, minbits: int, maxbits: int, maxprec: int, minexp: int) -> None:
        """Set all parameters directly."""
        if minbits > maxbits:
            raise ValueError(f"minbits {minbits} exceeds maxbits {maxbits}")
        if not 0 < maxprec <= MAX_PREC:
            raise ValueError(f"maxprec must be between 1 and {MAX_PREC}, got {maxprec}")
        self.minbits = minbits
        self.maxbits = maxbits
        self.maxprec = maxprec
        self.minexp = minexp

    def flush(self) -> None:
        """Flush buffered bits; call after the last encode."""
        self._stream().flush()

    def align(self) -> None:
        """Align the bit stream on the next word boundary when decoding."""
        self._stream().align()

    def rewind(self) -> None:
        """Rewind the bit stream to its beginning."""
        self._stream().rewind()