"""Scalar types and their per-type coding traits."""

from __future__ import annotations

import enum
import math
import struct
from dataclasses import dataclass


class ZfpType(enum.IntEnum):
    """Scalar type of an uncompressed array."""

    NONE = 0
    INT32 = 1
    INT64 = 2
    FLOAT = 3
    DOUBLE = 4


def _to_float32(value: float) -> float:
    try:
        return struct.unpack("<f", struct.pack("<f", value))[0]
    except OverflowError:
        return math.copysign(math.inf, value)


@dataclass(frozen=True)
class ScalarTraits:
    """Bit widths, exponent layout and negabinary mask of a scalar type."""

    zfp_type: ZfpType
    bits: int
    ebits: int
    nbmask: int

    @property
    def ebias(self) -> int:
        """Exponent bias; zero for integer types."""
        return (1 << (self.ebits - 1)) - 1 if self.ebits else 0

    @property
    def is_float(self) -> bool:
        return self.ebits > 0

    @property
    def uint_mask(self) -> int:
        """All-ones mask of the matching unsigned integer width."""
        return (1 << self.bits) - 1

    def round(self, value):
        """Convert ``value`` to the nearest value of this scalar type."""
        if self.zfp_type is ZfpType.FLOAT:
            return _to_float32(float(value))
        if self.zfp_type is ZfpType.DOUBLE:
            return float(value)
        return self.wrap_int(int(value))

    def wrap_int(self, value: int) -> int:
        """Wrap ``value`` to a two's-complement signed integer of this width."""
        value &= self.uint_mask
        if value >> (self.bits - 1):
            value -= 1 << self.bits
        return value


_MASK32 = 0xAAAAAAAA
_MASK64 = 0xAAAAAAAAAAAAAAAA

_TRAITS = {
    ZfpType.INT32: ScalarTraits(ZfpType.INT32, 32, 0, _MASK32),
    ZfpType.INT64: ScalarTraits(ZfpType.INT64, 64, 0, _MASK64),
    ZfpType.FLOAT: ScalarTraits(ZfpType.FLOAT, 32, 8, _MASK32),
    ZfpType.DOUBLE: ScalarTraits(ZfpType.DOUBLE, 64, 11, _MASK64),
}


def type_precision(zfp_type) -> int:
    """Number of bits in a scalar of ``zfp_type``; 0 for unknown types."""
    try:
        traits = _TRAITS.get(ZfpType(zfp_type))
    except ValueError:
        return 0
    return traits.bits if traits else 0


def traits_for(zfp_type) -> ScalarTraits:
    """Traits of ``zfp_type``; raises ValueError for none or unknown types."""
    kind = ZfpType(zfp_type)
    try:
        return _TRAITS[kind]
    except KeyError:
        raise ValueError(f"no scalar traits for {kind.name}") from None