"""In-memory bit stream that reads and writes between 0 and 64 bits at a time."""

from __future__ import annotations

WORD_BITS = 64
"""Granularity of stream I/O in bits."""

WORD_BYTES = WORD_BITS // 8
_WORD_MASK = (1 << WORD_BITS) - 1


class BitStream:
    """Bit stream over a caller-supplied buffer of 64-bit words.

    Bits go least significant first into little-endian words. Finish writing
    with :meth:`flush`, then :meth:`rewind` or :meth:`rseek` to read back.
    """

    def __init__(self, buffer):
        self._view = memoryview(buffer).cast("B")
        self._end = len(self._view) // WORD_BYTES
        self._mask = -1
        self._delta = 0
        self._ptr = 0
        self._buffer = 0
        self._bits = 0

    @property
    def buffer(self) -> memoryview:
        """The whole underlying byte buffer."""
        return self._view

    def getvalue(self) -> bytes:
        """Bytes from the start of the stream up to the current word."""
        return bytes(self._view[: self.size()])

    def size(self) -> int:
        """Current byte size of the stream (meaningful once flushed)."""
        return WORD_BYTES * self._ptr

    def capacity(self) -> int:
        """Byte capacity of the stream in whole words."""
        return WORD_BYTES * self._end

    def delta(self) -> int:
        """Number of blocks skipped between consecutive blocks."""
        if self._mask < 0:
            return 0
        return self._delta // (self._mask + 1)

    # word access -------------------------------------------------------

    def _advance(self) -> None:
        self._ptr += 1
        if not (self._ptr & self._mask):
            self._ptr += self._delta

    def _peek_word(self, index: int) -> int:
        start = index * WORD_BYTES
        return int.from_bytes(self._view[start : start + WORD_BYTES], "little")

    def _read_word(self) -> int:
        if not 0 <= self._ptr < self._end:
            raise EOFError(f"read past end of bit stream at word {self._ptr}")
        word = self._peek_word(self._ptr)
        self._advance()
        return word

    def _write_word(self, word: int) -> None:
        if self._view.readonly:
            raise TypeError("bit stream buffer is read-only")
        if not 0 <= self._ptr < self._end:
            raise OverflowError(f"write past end of bit stream at word {self._ptr}")
        start = self._ptr * WORD_BYTES
        self._view[start : start + WORD_BYTES] = (word & _WORD_MASK).to_bytes(
            WORD_BYTES, "little"
        )
        self._advance()

    @staticmethod
    def _check_count(n: int) -> None:
        if not 0 <= n <= 64:
            raise ValueError(f"bit count must be between 0 and 64, got {n}")

    @staticmethod
    def _check_offset(offset: int) -> None:
        if offset < 0:
            raise ValueError(f"bit offset must be non-negative, got {offset}")

    # bit I/O -----------------------------------------------------------

    def read_bit(self) -> int:
        """Read a single bit (0 or 1)."""
        if not self._bits:
            self._buffer = self._read_word()
            self._bits = WORD_BITS
        self._bits -= 1
        bit = self._buffer & 1
        self._buffer >>= 1
        return bit

    def write_bit(self, bit: int) -> int:
        """Write a single bit, which must be 0 or 1, and return it."""
        if bit not in (0, 1):
            raise ValueError(f"bit must be 0 or 1, got {bit!r}")
        self._buffer += bit << self._bits
        self._bits += 1
        if self._bits == WORD_BITS:
            self._write_word(self._buffer)
            self._buffer = 0
            self._bits = 0
        return bit

    def read_bits(self, n: int) -> int:
        """Read ``n`` bits (0 <= n <= 64), least significant first."""
        self._check_count(n)
        value = self._buffer
        if self._bits < n:
            word = self._read_word()
            value += word << self._bits
            bits = self._bits + WORD_BITS - n
            self._buffer = word >> (WORD_BITS - bits) if bits else 0
            self._bits = bits
        else:
            self._bits -= n
            self._buffer >>= n
        return value & ((1 << n) - 1)

    def write_bits(self, value: int, n: int) -> int:
        """Write the ``n`` low bits of ``value`` and return the bits not written."""
        self._check_count(n)
        value &= _WORD_MASK
        buffer = self._buffer + (value << self._bits)
        bits = self._bits + n
        if bits >= WORD_BITS:
            bits -= WORD_BITS
            self._write_word(buffer)
            buffer = value >> (n - bits)
        self._buffer = buffer & ((1 << bits) - 1)
        self._bits = bits
        return value >> n

    # positioning -------------------------------------------------------

    def rtell(self) -> int:
        """Bit offset of the next bit to be read."""
        return WORD_BITS * self._ptr - self._bits

    def wtell(self) -> int:
        """Bit offset of the next bit to be written."""
        return WORD_BITS * self._ptr + self._bits

    def rewind(self) -> None:
        """Position the stream at its beginning for reading or writing."""
        self._ptr = 0
        self._buffer = 0
        self._bits = 0

    def rseek(self, offset: int) -> None:
        """Position the stream for reading at bit ``offset``."""
        self._check_offset(offset)
        n = offset % WORD_BITS
        self._ptr = offset // WORD_BITS
        if n:
            self._buffer = self._read_word() >> n
            self._bits = WORD_BITS - n
        else:
            self._buffer = 0
            self._bits = 0

    def wseek(self, offset: int) -> None:
        """Position the stream for writing at bit ``offset``, keeping earlier bits."""
        self._check_offset(offset)
        n = offset % WORD_BITS
        ptr = offset // WORD_BITS
        if n:
            if ptr >= self._end:
                raise ValueError(f"bit offset {offset} lies beyond the stream")
            self._buffer = self._peek_word(ptr) & ((1 << n) - 1)
            self._bits = n
        else:
            self._buffer = 0
            self._bits = 0
        self._ptr = ptr

    def skip(self, n: int) -> None:
        """Skip over the next ``n`` bits."""
        if n < 0:
            raise ValueError(f"cannot skip a negative number of bits: {n}")
        self.rseek(self.rtell() + n)

    def pad(self, n: int) -> None:
        """Append ``n`` zero bits."""
        if n < 0:
            raise ValueError(f"cannot pad a negative number of bits: {n}")
        bits = self._bits + n
        while bits >= WORD_BITS:
            self._write_word(self._buffer)
            self._buffer = 0
            bits -= WORD_BITS
        self._bits = bits

    def align(self) -> None:
        """Skip to the next word boundary when reading."""
        if self._bits:
            self.skip(self._bits)

    def flush(self) -> None:
        """Write out buffered bits, zero-padding to the next word boundary."""
        if self._bits:
            self.pad(WORD_BITS - self._bits)

    def set_stride(self, block: int, delta: int) -> None:
        """Set block size in words (a power of two) and spacing in blocks."""
        if block < 0 or block & (block - 1):
            raise ValueError(f"block size must be a power of two, got {block}")
        self._mask = block - 1
        self._delta = delta * block