# filename: huffman_container.py
"""
Container layout, big-endian and MSB-first throughout:

    presence bit      1 = tree follows, 0 = empty input
    tree shape        pre-order markers and 8-bit leaf symbols (if present)
    zero padding      up to the next byte boundary
    original length   64-bit unsigned integer
    payload           codes of every input byte, zero-padded to a byte
"""

import logging
import struct
from dataclasses import dataclass, field
from typing import Dict, Optional

from huffman_bits import BitReader, BitWriter
from huffman_core import HuffmanTree
from huffman_errors import MalformedContainerError

logger = logging.getLogger(__name__)

LENGTH_FORMAT = ">Q"
LENGTH_SIZE = struct.calcsize(LENGTH_FORMAT)
MAX_LENGTH = (1 << 64) - 1


@dataclass
class ContainerHeader:
    tree: HuffmanTree
    original_length: int
    header_size: int = 0


@dataclass
class ContainerInfo:
    """Summary of a container, read without decoding the payload."""

    original_length: int
    distinct_symbols: int
    header_size: int
    payload_size: int
    codes: Dict[int, str] = field(default_factory=dict)
    max_code_length: Optional[int] = None

    @property
    def container_size(self) -> int:
        return self.header_size + self.payload_size

    @property
    def ratio(self) -> float:
        return self.container_size / max(1, self.original_length)


def write_header(writer: BitWriter, tree: HuffmanTree, original_length: int) -> None:
    if not 0 <= original_length <= MAX_LENGTH:
        raise ValueError(f"length {original_length} does not fit the length field")
    if tree:
        writer.write(1, 1)
        tree.serialize(writer)
    else:
        writer.write(0, 1)
    writer.align()
    writer.write_bytes(struct.pack(LENGTH_FORMAT, original_length))


def read_header(reader: BitReader) -> ContainerHeader:
    """Parse the tree and length fields, leaving 'reader' at the payload."""
    present = reader.read_bit()
    if present is None:
        logger.error("container is empty")
        raise MalformedContainerError("container is empty")

    tree = HuffmanTree.deserialize(reader) if present else HuffmanTree(None)
    reader.align()

    raw_length = reader.read_bytes(LENGTH_SIZE)
    if raw_length is None:
        logger.error("length field missing after the tree section")
        raise MalformedContainerError("length field is missing or short")
    (original_length,) = struct.unpack(LENGTH_FORMAT, raw_length)

    if not tree and original_length:
        logger.error("empty tree paired with length %d", original_length)
        raise MalformedContainerError(
            f"empty tree cannot encode {original_length} bytes"
        )
    return ContainerHeader(tree, original_length, reader.pos // 8)
