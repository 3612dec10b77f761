# filename: huffman_service.py

import logging

from huffman_bits import BitReader, BitWriter
from huffman_container import ContainerInfo, read_header, write_header
from huffman_core import HuffmanLogic
from huffman_errors import (
    MalformedContainerError,
    TruncatedBitstreamError,
    UnreachableSymbolError,
)

logger = logging.getLogger(__name__)


class HuffmanService:
    def __init__(self):
        self.logic = HuffmanLogic()

    def compress(self, data):
        """Encode bytes-like 'data' into a self-describing container. Other types raise TypeError."""
        # memoryview rejects ints and other non-buffer input with TypeError
        data = memoryview(data).tobytes()
        frequencies = self.logic.count_frequencies(data)
        tree = self.logic.build_tree(frequencies)

        writer = BitWriter()
        write_header(writer, tree, len(data))
        if not tree:
            return writer.getvalue()

        codes = self.logic.generate_codes(tree)
        header_bits = writer.n_bits

        # One join over the whole input instead of a write per symbol
        writer.write_bits("".join([codes[byte] for byte in data]))
        container = writer.getvalue()

        logger.debug(
            "compressed %d bytes: %d symbols, header %d bytes, container %d bytes",
            len(data), len(codes), header_bits // 8, len(container),
        )
        return container

    def decompress(self, blob):
        """
        Rebuild the tree from the header, then walk it one bit at a time
        until the stored number of symbols has been emitted.
        """
        reader = BitReader(blob)
        header = read_header(reader)
        expected = header.original_length

        out = bytearray()
        if header.tree:
            root = header.tree.root
            read_bit = reader.read_bit
            while len(out) < expected:
                node = root
                while not node.is_leaf:
                    bit = read_bit()
                    if bit is None:
                        logger.error(
                            "payload exhausted after %d of %d symbols", len(out), expected
                        )
                        raise TruncatedBitstreamError(len(out), expected)
                    node = node.right if bit else node.left
                    if node is None:
                        logger.error("bit %d leads to an empty branch", bit)
                        raise UnreachableSymbolError(
                            f"branch {bit} is empty at symbol {len(out)}"
                        )
                out.append(node.symbol)

        if reader.bits_remaining >= 8:
            logger.warning(
                "%d unused bytes after the last symbol", reader.bits_remaining // 8
            )
            raise MalformedContainerError(
                f"{reader.bits_remaining // 8} trailing bytes after the payload"
            )
        return bytes(out)

    def inspect(self, blob):
        reader = BitReader(blob)
        header = read_header(reader)
        codes = self.logic.generate_codes(header.tree)
        return ContainerInfo(
            original_length=header.original_length,
            distinct_symbols=len(codes),
            header_size=header.header_size,
            payload_size=len(blob) - header.header_size,
            codes=codes,
            max_code_length=max(map(len, codes.values())) if codes else None,
        )


_service = HuffmanService()


def compress(data):
    return _service.compress(data)


def decompress(blob):
    return _service.decompress(blob)


def inspect(blob):
    return _service.inspect(blob)
