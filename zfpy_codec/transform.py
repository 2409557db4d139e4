"""Decorrelating block transform, coefficient ordering and negabinary mapping."""

from __future__ import annotations

from typing import Callable, MutableSequence

_SUPPORTED_BITS = (32, 64)

_PERM_2_COORDS = (
    (0, 0),
    (1, 0), (0, 1),
    (1, 1),
    (2, 0), (0, 2),
    (2, 1), (1, 2),
    (3, 0), (0, 3),
    (2, 2),
    (3, 1), (1, 3),
    (3, 2), (2, 3),
    (3, 3),
)

_PERM_3_COORDS = (
    (0, 0, 0),
    (1, 0, 0), (0, 1, 0), (0, 0, 1),
    (0, 1, 1), (1, 0, 1), (1, 1, 0),
    (2, 0, 0), (0, 2, 0), (0, 0, 2),
    (1, 1, 1),
    (2, 1, 0), (2, 0, 1), (0, 2, 1), (1, 2, 0), (1, 0, 2), (0, 1, 2),
    (3, 0, 0), (0, 3, 0), (0, 0, 3),
    (2, 1, 1), (1, 2, 1), (1, 1, 2),
    (0, 2, 2), (2, 0, 2), (2, 2, 0),
    (3, 1, 0), (3, 0, 1), (0, 3, 1), (1, 3, 0), (1, 0, 3), (0, 1, 3),
    (1, 2, 2), (2, 1, 2), (2, 2, 1),
    (3, 1, 1), (1, 3, 1), (1, 1, 3),
    (3, 2, 0), (3, 0, 2), (0, 3, 2), (2, 3, 0), (2, 0, 3), (0, 2, 3),
    (2, 2, 2),
    (3, 2, 1), (3, 1, 2), (1, 3, 2), (2, 3, 1), (2, 1, 3), (1, 2, 3),
    (0, 3, 3), (3, 0, 3), (3, 3, 0),
    (3, 2, 2), (2, 3, 2), (2, 2, 3),
    (1, 3, 3), (3, 1, 3), (3, 3, 1),
    (2, 3, 3), (3, 2, 3), (3, 3, 2),
    (3, 3, 3),
)


def _index(coords) -> int:
    return sum(c << (2 * axis) for axis, c in enumerate(coords))


_PERMUTATIONS = {
    1: (0, 1, 2, 3),
    2: tuple(_index(c) for c in _PERM_2_COORDS),
    3: tuple(_index(c) for c in _PERM_3_COORDS),
}


def _check_dims(dims: int) -> None:
    if dims not in (1, 2, 3):
        raise ValueError(f"dimensionality must be 1, 2 or 3, got {dims}")


def _check_bits(bits: int) -> None:
    if bits not in _SUPPORTED_BITS:
        raise ValueError(f"integer width must be 32 or 64 bits, got {bits}")


def _wrapper(bits: int) -> Callable[[int], int]:
    _check_bits(bits)
    mask = (1 << bits) - 1
    sign = 1 << (bits - 1)
    full = 1 << bits

    def wrap(value: int) -> int:
        value &= mask
        return value - full if value & sign else value

    return wrap


def permutation(dims: int) -> tuple[int, ...]:
    """Order of block coefficients by polynomial degree, then by frequency."""
    _check_dims(dims)
    return _PERMUTATIONS[dims]


def precision(maxexp: int, maxprec: int, minexp: int, dims: int) -> int:
    """Maximum number of bit planes to encode for a block."""
    _check_dims(dims)
    return min(maxprec, max(0, maxexp - minexp + 2 * dims + 2))


def _lift_slice(start: int, stride: int) -> slice:
    return slice(start, start + 3 * stride + 1, stride)


def fwd_lift(block: MutableSequence[int], start: int, stride: int, bits: int) -> None:
    """Forward lifting transform of the 4-vector at ``start`` with ``stride``, in place."""
    wrap = _wrapper(bits)
    where = _lift_slice(start, stride)
    x, y, z, w = block[where]
    x = wrap(x + w) >> 1
    w = wrap(w - x)
    z = wrap(z + y) >> 1
    y = wrap(y - z)
    x = wrap(x + z) >> 1
    z = wrap(z - x)
    w = wrap(w + y) >> 1
    y = wrap(y - w)
    w = wrap(w + (y >> 1))
    y = wrap(y - (w >> 1))
    block[where] = [x, y, z, w]


def inv_lift(block: MutableSequence[int], start: int, stride: int, bits: int) -> None:
    """Inverse lifting transform of the 4-vector at ``start`` with ``stride``, in place."""
    wrap = _wrapper(bits)
    where = _lift_slice(start, stride)
    x, y, z, w = block[where]
    y = wrap(y + (w >> 1))
    w = wrap(w - (y >> 1))
    y = wrap(y + w)
    w = wrap(wrap(w << 1) - y)
    z = wrap(z + x)
    x = wrap(wrap(x << 1) - z)
    y = wrap(y + z)
    z = wrap(wrap(z << 1) - y)
    w = wrap(w + x)
    x = wrap(wrap(x << 1) - w)
    block[where] = [x, y, z, w]


def _line_starts(dims: int, axis: int) -> list[int]:
    step = 1 << (2 * axis)
    return [i for i in range(1 << (2 * dims)) if (i // step) % 4 == 0]


def _check_block(block, dims: int) -> None:
    _check_dims(dims)
    if len(block) != 1 << (2 * dims):
        raise ValueError(
            f"a {dims}D block holds {1 << (2 * dims)} values, got {len(block)}"
        )


def fwd_xform(block: MutableSequence[int], dims: int, bits: int) -> None:
    """Forward decorrelating transform of a 4^dims block, along x, then y, then z."""
    _check_block(block, dims)
    for axis in range(dims):
        stride = 1 << (2 * axis)
        for start in _line_starts(dims, axis):
            fwd_lift(block, start, stride, bits)


def inv_xform(block: MutableSequence[int], dims: int, bits: int) -> None:
    """Inverse decorrelating transform of a 4^dims block, undoing :func:`fwd_xform`."""
    _check_block(block, dims)
    for axis in reversed(range(dims)):
        stride = 1 << (2 * axis)
        for start in _line_starts(dims, axis):
            inv_lift(block, start, stride, bits)


def _nbmask(bits: int) -> int:
    return ((1 << bits) - 1) // 3 << 1


def int2uint(x: int, bits: int) -> int:
    """Map a two's-complement signed integer to its negabinary unsigned form."""
    _check_bits(bits)
    mask = (1 << bits) - 1
    nbmask = _nbmask(bits)
    return (((x & mask) + nbmask) & mask) ^ nbmask


def uint2int(x: int, bits: int) -> int:
    """Map a negabinary unsigned integer back to a two's-complement signed one."""
    wrap = _wrapper(bits)
    nbmask = _nbmask(bits)
    return wrap((x ^ nbmask) - nbmask)