# zfpy_codec

A pure-Python block coder for lossy compression of floating-point (and
integer) data. Values are coded in blocks of 4, 4×4 or 4×4×4: each block is
brought to a common exponent, decorrelated with a lifting transform, and
written bit plane by bit plane into a compact bit stream. How much is kept
is set on the stream:

- **fixed rate** – a set number of compressed bits per value, so every block
  takes the same space;
- **fixed precision** – a set number of bit planes per block;
- **fixed accuracy** – an absolute error tolerance;
- **expert mode** – minimum and maximum bits per block, maximum precision and
  minimum exponent set one by one.

There are no dependencies outside the standard library.

## Installation

```
pip install zfpy_codec
```

## Coding a single block

```python
from zfpy_codec.bitstream import BitStream
from zfpy_codec.decode import decode_block
from zfpy_codec.encode import encode_block
from zfpy_codec.scalar import ZfpType
from zfpy_codec.stream import ZfpStream

block = [0.5 * i for i in range(16)]          # one 4x4 block, x fastest

zfp = ZfpStream(BitStream(bytearray(256)))
zfp.set_accuracy(1e-3, ZfpType.DOUBLE)

bits_written = encode_block(zfp, block, ZfpType.DOUBLE, 2)
zfp.flush()                                   # write out buffered bits

zfp.rewind()
restored, bits_read = decode_block(zfp, ZfpType.DOUBLE, 2)
```

`encode_block` returns the number of bits it wrote; `decode_block` returns a
`DecodedBlock` named tuple of the values and the bits consumed. For
`ZfpType.FLOAT` the values are rounded to single precision. For
`ZfpType.INT32` and `ZfpType.INT64` the same calls code integer blocks
(`encode_int_block` and `decode_int_block` do this directly).

## Coding an array block by block

`encode_block_strided` and `decode_block_strided` gather a full block from a
flat sequence, starting at an offset with a stride per dimension.
`encode_partial_block_strided` takes a smaller block (each size 1 to 4) and
pads it to a full one; `decode_partial_block_strided` stores back only that
part.

```python
from zfpy_codec.bitstream import BitStream
from zfpy_codec.decode import decode_block_strided, decode_partial_block_strided
from zfpy_codec.encode import encode_block_strided, encode_partial_block_strided
from zfpy_codec.field import field_1d
from zfpy_codec.scalar import ZfpType
from zfpy_codec.stream import ZfpStream

double = ZfpType.DOUBLE
values = [float(i) * 0.25 for i in range(10)]

sizing = ZfpStream()
sizing.set_precision(32, double)
buffer = bytearray(sizing.maximum_size(field_1d(values, double, len(values))))

zfp = ZfpStream(BitStream(buffer))
zfp.set_precision(32, double)
for x in range(0, len(values), 4):
    n = min(4, len(values) - x)
    if n == 4:
        encode_block_strided(zfp, values, x, double, (1,))
    else:
        encode_partial_block_strided(zfp, values, x, double, (n,), (1,))
zfp.flush()

restored = [0.0] * len(values)
zfp.rewind()
for x in range(0, len(values), 4):
    n = min(4, len(values) - x)
    if n == 4:
        decode_block_strided(zfp, restored, x, double, (1,))
    else:
        decode_partial_block_strided(zfp, restored, x, double, (n,), (1,))
```

In two and three dimensions pass two or three strides (and sizes); block
values are laid out with x varying fastest.

## Choosing a mode

```python
zfp.set_rate(8.0, double, 3, False)    # 8 bits per value in 3D blocks; returns the actual rate
zfp.set_precision(32, double)          # keep 32 bit planes; returns the actual precision
zfp.set_accuracy(1e-6, double)         # returns the power of two actually used as tolerance
zfp.set_params(0, 4171, 64, -1074)     # expert mode; ValueError on bad parameters
```

`ZfpStream.mode()` returns a compact 12- or 64-bit encoding of the current
parameters and `ZfpStream.set_mode()` restores them from it;
`ZfpStream.params()` returns them as a named tuple.
`ZfpStream.maximum_size(field)` gives a conservative byte bound for a whole
`Field`, and `ZfpStream.compressed_size()` the bytes written so far once
flushed.

## The pieces

- `zfpy_codec.bitstream.BitStream` reads and writes 0 to 64 bits at a time in
  little-endian 64-bit words, least significant bit first, over a buffer you
  supply. Reading past the end raises `EOFError`, writing past it
  `OverflowError`.
- `zfpy_codec.scalar` holds `ZfpType`, the per-type `ScalarTraits`,
  `type_precision` and `traits_for`.
- `zfpy_codec.field.Field` describes an array: scalar type, sizes and
  strides, with a 52-bit `metadata()` encoding and `set_metadata()` to read
  it back. `field_1d`, `field_2d` and `field_3d` build one.
- `zfpy_codec.stream.ZfpStream` holds the compression parameters and the bit
  stream they apply to.
- `zfpy_codec.transform` has the lifting transforms (`fwd_xform`,
  `inv_xform`), the negabinary mapping (`int2uint`, `uint2int`), the
  coefficient orderings (`permutation`) and `precision`.
- `zfpy_codec.encode` and `zfpy_codec.decode` code single blocks, and
  `encode_ints` / `decode_ints` the embedded bit-plane coding itself.

## What the package does not do

It codes blocks, not whole arrays: there is no single call that walks a
`Field` and compresses or decompresses all of it, so the loop over blocks is
yours, as above. Nor does it write or read a stream header: to make a stream
self-describing, store `Field.metadata()` and `ZfpStream.mode()` yourself
(for instance with `BitStream.write_bits`) and restore them with
`Field.set_metadata()` and `ZfpStream.set_mode()`. There are no helpers for
widening 8- or 16-bit integer data to 32 bits, and no command-line tool.

## Running the tests

```
pip install "zfpy_codec[test]"
pytest
```