# filename: huffman_bits.py
"""
Bit-level I/O over in-memory byte strings.

Bits are packed most-significant-bit first. The writer collects codes as
'0'/'1' strings and converts them to bytes in one pass; the reader pulls
bits straight from the underlying bytes.
"""


class BitWriter:
    """Accumulates bits and hands them back as bytes, zero-padded at the end."""

    def __init__(self):
        self.chunks = []
        self.n_bits = 0

    def write(self, value, num_bits):
        """Write the low 'num_bits' bits of 'value'. Example: write(5, 4) -> 0101"""
        if num_bits <= 0:
            return
        if value < 0 or value >> num_bits:
            raise ValueError(f"{value} does not fit in {num_bits} bits")
        self.chunks.append(format(value, f"0{num_bits}b"))
        self.n_bits += num_bits

    def write_bits(self, bits):
        """Write a code given as a string of '0'/'1' characters."""
        self.chunks.append(bits)
        self.n_bits += len(bits)

    def write_bytes(self, data):
        # Only valid on a byte boundary
        if self.n_bits % 8:
            raise ValueError("write_bytes needs a byte-aligned writer")
        for byte in data:
            self.write(byte, 8)

    def align(self):
        """Pad with zero bits up to the next byte boundary."""
        remainder = self.n_bits % 8
        if remainder:
            self.write(0, 8 - remainder)

    def getvalue(self):
        """Return all written bits as bytes, padding the last partial byte."""
        self.align()
        if not self.n_bits:
            return b""
        bits = "".join(self.chunks)
        # Collapse so repeated calls stay cheap
        self.chunks = [bits]
        return int(bits, 2).to_bytes(self.n_bits // 8, "big")


class BitReader:
    """
    Yields bits from a byte string in the order BitWriter stored them.

    read() and read_bit() return None once the input is exhausted instead of
    raising, so callers can turn end-of-data into their own error.
    """

    def __init__(self, data):
        self.data = memoryview(data).tobytes()
        self.total_bits = len(self.data) * 8
        self.pos = 0

    @property
    def bits_remaining(self):
        return self.total_bits - self.pos

    def read_bit(self):
        if self.pos >= self.total_bits:
            return None
        byte = self.data[self.pos >> 3]
        bit = (byte >> (7 - (self.pos & 7))) & 1
        self.pos += 1
        return bit

    def read(self, num_bits):
        """Read 'num_bits' bits as an unsigned integer. Returns None at EOF."""
        if self.pos + num_bits > self.total_bits:
            return None
        if num_bits <= 0:
            return 0
        start = self.pos >> 3
        end = (self.pos + num_bits + 7) >> 3
        chunk = int.from_bytes(self.data[start:end], "big")
        # drop the bits past the requested window, then mask off earlier ones
        chunk >>= end * 8 - (self.pos + num_bits)
        self.pos += num_bits
        return chunk & ((1 << num_bits) - 1)

    def read_bytes(self, count):
        """Read 'count' whole bytes. Returns None if fewer are left."""
        if self.pos % 8:
            raise ValueError("read_bytes needs a byte-aligned reader")
        start = self.pos // 8
        if self.pos + count * 8 > self.total_bits:
            return None
        self.pos += count * 8
        return self.data[start:start + count]

    def align(self):
        """Skip the padding bits up to the next byte boundary."""
        remainder = self.pos % 8
        if remainder:
            self.pos = min(self.pos + 8 - remainder, self.total_bits)
