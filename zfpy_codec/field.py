"""Description of an uncompressed array: scalar type, sizes and strides."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .scalar import ZfpType, type_precision

META_BITS = 52
"""Number of bits in the compact encoding of field metadata."""

_SIZE_BITS = {1: 48, 2: 24, 3: 16}


@dataclass
class Field:
    """An uncompressed array of up to three dimensions.

    Sizes of zero mark unused dimensions; strides of zero mean the array is
    stored contiguously as ``data[nz][ny][nx]``.
    """

    data: Any = None
    zfp_type: ZfpType = ZfpType.NONE
    nx: int = 0
    ny: int = 0
    nz: int = 0
    sx: int = 0
    sy: int = 0
    sz: int = 0

    def __post_init__(self) -> None:
        self.zfp_type = ZfpType(self.zfp_type)

    def precision(self) -> int:
        """Bits per scalar of the field's type."""
        return type_precision(self.zfp_type)

    def dimensionality(self) -> int:
        """Number of dimensions (0 to 3)."""
        if not self.nx:
            return 0
        if not self.ny:
            return 1
        if not self.nz:
            return 2
        return 3

    def size(self) -> int:
        """Total number of scalars in the field."""
        return max(self.nx, 1) * max(self.ny, 1) * max(self.nz, 1)

    def strides(self) -> tuple[int, ...]:
        """Stride in scalars for each used dimension, defaults filled in."""
        full = (
            self.sx or 1,
            self.sy or self.nx,
            self.sz or self.nx * self.ny,
        )
        return full[: self.dimensionality()]

    def is_strided(self) -> bool:
        """True if any stride has been set explicitly."""
        return bool(self.sx or self.sy or self.sz)

    def metadata(self) -> int:
        """Compact 52-bit encoding of scalar type and dimensions."""
        dims = self.dimensionality()
        if not dims:
            raise ValueError("field has no dimensions")
        if self.zfp_type is ZfpType.NONE:
            raise ValueError("field has no scalar type")
        width = _SIZE_BITS[dims]
        meta = 0
        for n in reversed((self.nx, self.ny, self.nz)[:dims]):
            if not 1 <= n <= 1 << width:
                raise ValueError(
                    f"size {n} does not fit in {width} bits for a {dims}D field"
                )
            meta = (meta << width) + n - 1
        meta = (meta << 2) + dims - 1
        meta = (meta << 2) + int(self.zfp_type) - 1
        return meta

    def set_type(self, zfp_type) -> ZfpType:
        """Set the scalar type and return it; NONE is rejected."""
        kind = ZfpType(zfp_type)
        if kind is ZfpType.NONE:
            raise ValueError("scalar type must not be NONE")
        self.zfp_type = kind
        return kind

    def set_size(self, nx: int, ny: int = 0, nz: int = 0) -> None:
        """Set the sizes; omitted dimensions become unused."""
        self.nx, self.ny, self.nz = nx, ny, nz

    def set_stride(self, sx: int, sy: int = 0, sz: int = 0) -> None:
        """Set the strides in scalars; omitted strides are reset to zero."""
        self.sx, self.sy, self.sz = sx, sy, sz

    def set_metadata(self, meta: int) -> None:
        """Set scalar type and sizes from a 52-bit encoding; strides are reset."""
        if not 0 <= meta < 1 << META_BITS:
            raise ValueError(f"metadata must fit in {META_BITS} bits")
        zfp_type = ZfpType((meta & 0x3) + 1)
        meta >>= 2
        dims = (meta & 0x3) + 1
        meta >>= 2
        if dims not in _SIZE_BITS:
            raise ValueError(f"unsupported dimensionality {dims}")
        width = _SIZE_BITS[dims]
        mask = (1 << width) - 1
        sizes = []
        for _ in range(dims):
            sizes.append((meta & mask) + 1)
            meta >>= width
        sizes.extend([0] * (3 - dims))
        self.zfp_type = zfp_type
        self.nx, self.ny, self.nz = sizes
        self.sx = self.sy = self.sz = 0


def field_1d(data, zfp_type, nx: int) -> Field:
    """Field describing ``data[nx]``."""
    return Field(data, zfp_type, nx)


def field_2d(data, zfp_type, nx: int, ny: int) -> Field:
    """Field describing ``data[ny][nx]``."""
    return Field(data, zfp_type, nx, ny)


def field_3d(data, zfp_type, nx: int, ny: int, nz: int) -> Field:
    """Field describing ``data[nz][ny][nx]``."""
    return Field(data, zfp_type, nx, ny, nz)