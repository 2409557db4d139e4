"""Block encoder: transform, order and embed-code blocks of 4^d scalars."""

from __future__ import annotations

import itertools
import math
from typing import Sequence

from .bitstream import BitStream
from .scalar import ScalarTraits, traits_for
from .stream import ZfpStream
from .transform import fwd_xform, int2uint, permutation, precision


def _bit_stream(zfp: ZfpStream) -> BitStream:
    if zfp.bit_stream is None:
        raise ValueError("no bit stream is associated with this stream")
    return zfp.bit_stream


def _check_block(block, dims: int) -> None:
    if dims not in (1, 2, 3):
        raise ValueError(f"dimensionality must be 1, 2 or 3, got {dims}")
    if len(block) != 1 << (2 * dims):
        raise ValueError(
            f"a {dims}D block holds {1 << (2 * dims)} values, got {len(block)}"
        )


def encode_ints(
    bit_stream: BitStream,
    maxbits: int,
    maxprec: int,
    data: Sequence[int],
    intprec: int,
) -> int:
    """Embed-code unsigned integers one bit plane at a time; return bits written."""
    size = len(data)
    if size > 64:
        raise ValueError(f"at most 64 integers can be coded together, got {size}")
    kmin = intprec - maxprec if intprec > maxprec else 0
    bits = maxbits
    n = 0
    for k in range(intprec - 1, kmin - 1, -1):
        if not bits:
            break
        # extract bit plane k
        x = 0
        for i, value in enumerate(data):
            x += ((value >> k) & 1) << i
        # emit the first n bits verbatim
        m = min(n, bits)
        bits -= m
        x = bit_stream.write_bits(x, m)
        # unary run-length code the remainder of the plane
        while n < size and bits:
            bits -= 1
            if not bit_stream.write_bit(1 if x else 0):
                break
            while n < size - 1 and bits:
                bits -= 1
                if bit_stream.write_bit(x & 1):
                    break
                x >>= 1
                n += 1
            x >>= 1
            n += 1
    return maxbits - bits


def _encode_coefficients(
    bit_stream: BitStream,
    minbits: int,
    maxbits: int,
    maxprec: int,
    iblock: list[int],
    dims: int,
    intbits: int,
) -> int:
    fwd_xform(iblock, dims, intbits)
    ublock = [int2uint(iblock[i], intbits) for i in permutation(dims)]
    used = encode_ints(bit_stream, max(maxbits, 0), maxprec, ublock, intbits)
    if used < minbits:
        bit_stream.pad(minbits - used)
        used = minbits
    return used


def encode_int_block(zfp: ZfpStream, block: Sequence[int], zfp_type, dims: int) -> int:
    """Encode a contiguous block of 4^dims integers; return bits written."""
    traits = traits_for(zfp_type)
    if traits.is_float:
        raise ValueError(f"{traits.zfp_type.name} is not an integer type")
    _check_block(block, dims)
    iblock = [traits.wrap_int(int(v)) for v in block]
    return _encode_coefficients(
        _bit_stream(zfp), zfp.minbits, zfp.maxbits, zfp.maxprec, iblock, dims, traits.bits
    )


def _exponent_block(values: Sequence[float], traits: ScalarTraits) -> int:
    largest = 0.0
    for value in values:
        magnitude = abs(value)
        if largest < magnitude:
            largest = magnitude
    if largest > 0:
        return max(math.frexp(largest)[1], 1 - traits.ebias)
    return -traits.ebias


def encode_block(zfp: ZfpStream, block: Sequence, zfp_type, dims: int) -> int:
    """Encode a contiguous block of 4^dims scalars; return bits written."""
    traits = traits_for(zfp_type)
    if not traits.is_float:
        return encode_int_block(zfp, block, zfp_type, dims)
    _check_block(block, dims)
    values = [traits.round(v) for v in block]
    if not all(math.isfinite(v) for v in values):
        raise ValueError("cannot encode non-finite values")
    bit_stream = _bit_stream(zfp)
    emax = _exponent_block(values, traits)
    maxprec = precision(emax, zfp.maxprec, zfp.minexp, dims)
    e = emax + traits.ebias if maxprec else 0
    if e:
        ebits = traits.ebits + 1
        # common exponent; the low bit flags a nonzero block
        bit_stream.write_bits(2 * e + 1, ebits)
        shift = traits.bits - 2 - emax
        iblock = [traits.wrap_int(int(math.ldexp(v, shift))) for v in values]
        return ebits + _encode_coefficients(
            bit_stream,
            zfp.minbits - ebits,
            zfp.maxbits - ebits,
            maxprec,
            iblock,
            dims,
            traits.bits,
        )
    bit_stream.write_bit(0)
    if zfp.minbits > 1:
        bit_stream.pad(zfp.minbits - 1)
        return zfp.minbits
    return 1


def _gather(data: Sequence, offset: int, shape: Sequence[int], strides: Sequence[int]) -> list:
    block = [0] * (1 << (2 * len(shape)))
    for reversed_coords in itertools.product(*(range(n) for n in reversed(shape))):
        coords = reversed_coords[::-1]
        index = offset + sum(c * s for c, s in zip(coords, strides))
        if index < 0:
            raise IndexError(f"strided access reaches negative index {index}")
        block[sum(c << (2 * axis) for axis, c in enumerate(coords))] = data[index]
    return block


def _pad_line(block: list, start: int, n: int, stride: int) -> None:
    if n == 0:
        block[start] = 0
    if n <= 1:
        block[start + stride] = block[start]
    if n <= 2:
        block[start + 2 * stride] = block[start + stride]
    if n <= 3:
        block[start + 3 * stride] = block[start]


def _pad_partial(block: list, shape: Sequence[int]) -> None:
    dims = len(shape)
    for axis, n in enumerate(shape):
        others = [b for b in range(dims) if b != axis]
        ranges = [range(4) if b < axis else range(shape[b]) for b in others]
        for coords in itertools.product(*ranges):
            start = sum(c << (2 * b) for b, c in zip(others, coords))
            _pad_line(block, start, n, 1 << (2 * axis))


def _check_strides(strides: Sequence[int]) -> int:
    dims = len(strides)
    if dims not in (1, 2, 3):
        raise ValueError(f"expected 1 to 3 strides, got {dims}")
    return dims


def encode_block_strided(
    zfp: ZfpStream, data: Sequence, offset: int, zfp_type, strides: Sequence[int]
) -> int:
    """Encode the full block starting at ``data[offset]`` with the given strides."""
    dims = _check_strides(strides)
    block = _gather(data, offset, (4,) * dims, strides)
    return encode_block(zfp, block, zfp_type, dims)


def encode_partial_block_strided(
    zfp: ZfpStream,
    data: Sequence,
    offset: int,
    zfp_type,
    shape: Sequence[int],
    strides: Sequence[int],
) -> int:
    """Encode a block of ``shape`` (each size 1 to 4), padded to a full block."""
    dims = _check_strides(strides)
    if len(shape) != dims:
        raise ValueError(f"shape has {len(shape)} sizes but there are {dims} strides")
    if not all(1 <= n <= 4 for n in shape):
        raise ValueError(f"block sizes must be between 1 and 4, got {tuple(shape)}")
    block = _gather(data, offset, shape, strides)
    _pad_partial(block, shape)
    return encode_block(zfp, block, zfp_type, dims)