"""Block decoder: read embedded coefficients and invert the block transform."""

from __future__ import annotations

import itertools
import math
from typing import MutableSequence, NamedTuple, Sequence

from .bitstream import BitStream
from .scalar import traits_for
from .stream import ZfpStream
from .transform import inv_xform, permutation, precision, uint2int


class DecodedInts(NamedTuple):
    """Unsigned integers decoded from a bit stream and the bits consumed."""

    values: list[int]
    bits: int


class DecodedBlock(NamedTuple):
    """A decoded block of 4^d scalars and the bits it occupied."""

    values: list
    bits: int


def _bit_stream(zfp: ZfpStream) -> BitStream:
    if zfp.bit_stream is None:
        raise ValueError("no bit stream is associated with this stream")
    return zfp.bit_stream


def _check_dims(dims: int) -> None:
    if dims not in (1, 2, 3):
        raise ValueError(f"dimensionality must be 1, 2 or 3, got {dims}")


def decode_ints(
    bit_stream: BitStream, maxbits: int, maxprec: int, size: int, intprec: int
) -> DecodedInts:
    """Decode ``size`` embedded-coded unsigned integers, one bit plane at a time."""
    if not 0 <= size <= 64:
        raise ValueError(f"at most 64 integers can be coded together, got {size}")
    kmin = intprec - maxprec if intprec > maxprec else 0
    bits = maxbits
    data = [0] * size
    n = 0
    for k in range(intprec - 1, kmin - 1, -1):
        if not bits:
            break
        # the first n bits of the plane were sent verbatim
        m = min(n, bits)
        bits -= m
        x = bit_stream.read_bits(m)
        # unary run-length decode the remainder of the plane
        while n < size and bits:
            bits -= 1
            if not bit_stream.read_bit():
                break
            while n < size - 1 and bits:
                bits -= 1
                if bit_stream.read_bit():
                    break
                n += 1
            x += 1 << n
            n += 1
        # deposit the bit plane
        i = 0
        while x:
            data[i] += (x & 1) << k
            x >>= 1
            i += 1
    return DecodedInts(data, maxbits - bits)


def _decode_coefficients(
    bit_stream: BitStream,
    minbits: int,
    maxbits: int,
    maxprec: int,
    dims: int,
    intbits: int,
) -> DecodedBlock:
    size = 1 << (2 * dims)
    ublock, used = decode_ints(bit_stream, max(maxbits, 0), maxprec, size, intbits)
    if used < minbits:
        bit_stream.skip(minbits - used)
        used = minbits
    iblock = [0] * size
    for index, value in zip(permutation(dims), ublock):
        iblock[index] = uint2int(value, intbits)
    inv_xform(iblock, dims, intbits)
    return DecodedBlock(iblock, used)


def decode_int_block(zfp: ZfpStream, zfp_type, dims: int) -> DecodedBlock:
    """Decode a contiguous block of 4^dims integers."""
    traits = traits_for(zfp_type)
    if traits.is_float:
        raise ValueError(f"{traits.zfp_type.name} is not an integer type")
    _check_dims(dims)
    return _decode_coefficients(
        _bit_stream(zfp), zfp.minbits, zfp.maxbits, zfp.maxprec, dims, traits.bits
    )


def decode_block(zfp: ZfpStream, zfp_type, dims: int) -> DecodedBlock:
    """Decode a contiguous block of 4^dims scalars."""
    traits = traits_for(zfp_type)
    if not traits.is_float:
        return decode_int_block(zfp, zfp_type, dims)
    _check_dims(dims)
    bit_stream = _bit_stream(zfp)
    size = 1 << (2 * dims)
    if bit_stream.read_bit():
        ebits = traits.ebits + 1
        emax = bit_stream.read_bits(ebits - 1) - traits.ebias
        maxprec = precision(emax, zfp.maxprec, zfp.minexp, dims)
        iblock, used = _decode_coefficients(
            bit_stream,
            zfp.minbits - ebits,
            zfp.maxbits - ebits,
            maxprec,
            dims,
            traits.bits,
        )
        scale = traits.round(math.ldexp(1.0, emax - (traits.bits - 2)))
        values = [traits.round(traits.round(i) * scale) for i in iblock]
        return DecodedBlock(values, ebits + used)
    zero = traits.round(0)
    values = [zero] * size
    if zfp.minbits > 1:
        bit_stream.skip(zfp.minbits - 1)
        return DecodedBlock(values, zfp.minbits)
    return DecodedBlock(values, 1)


def _scatter(
    block: Sequence,
    data: MutableSequence,
    offset: int,
    shape: Sequence[int],
    strides: Sequence[int],
) -> None:
    for reversed_coords in itertools.product(*(range(n) for n in reversed(shape))):
        coords = reversed_coords[::-1]
        index = offset + sum(c * s for c, s in zip(coords, strides))
        if index < 0:
            raise IndexError(f"strided access reaches negative index {index}")
        data[index] = block[sum(c << (2 * axis) for axis, c in enumerate(coords))]


def _check_strides(strides: Sequence[int]) -> int:
    dims = len(strides)
    if dims not in (1, 2, 3):
        raise ValueError(f"expected 1 to 3 strides, got {dims}")
    return dims


def decode_block_strided(
    zfp: ZfpStream,
    data: MutableSequence,
    offset: int,
    zfp_type,
    strides: Sequence[int],
) -> int:
    """Decode a full block into ``data`` starting at ``offset``; return bits read."""
    dims = _check_strides(strides)
    values, used = decode_block(zfp, zfp_type, dims)
    _scatter(values, data, offset, (4,) * dims, strides)
    return used


def decode_partial_block_strided(
    zfp: ZfpStream,
    data: MutableSequence,
    offset: int,
    zfp_type,
    shape: Sequence[int],
    strides: Sequence[int],
) -> int:
    """Decode a block and store only its leading ``shape`` part; return bits read."""
    dims = _check_strides(strides)
    if len(shape) != dims:
        raise ValueError(f"shape has {len(shape)} sizes but there are {dims} strides")
    if not all(1 <= n <= 4 for n in shape):
        raise ValueError(f"block sizes must be between 1 and 4, got {tuple(shape)}")
    values, used = decode_block(zfp, zfp_type, dims)
    _scatter(values, data, offset, shape, strides)
    return used