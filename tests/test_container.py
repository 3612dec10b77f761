import os
import sys
import struct
import pytest

REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if REPO_ROOT not in sys.path:
	sys.path.insert(0, REPO_ROOT)

from huffman_bits import BitReader, BitWriter
from huffman_container import LENGTH_SIZE, read_header, write_header
from huffman_core import HuffmanTree
from huffman_errors import (
	CorruptContainerError,
	MalformedContainerError,
	TruncatedBitstreamError,
	UnreachableSymbolError,
)
from huffman_service import compress, decompress


def test_header_roundtrip():
	tree = HuffmanTree.build({1: 4, 2: 1, 3: 1})
	writer = BitWriter()
	write_header(writer, tree, 6)
	blob = writer.getvalue()

	reader = BitReader(blob)
	header = read_header(reader)
	assert header.original_length == 6
	assert header.header_size == len(blob)
	assert sorted(leaf.symbol for leaf in header.tree.leaves()) == [1, 2, 3]
	assert reader.bits_remaining == 0


def test_empty_header_is_zero_marker_and_zero_length():
	writer = BitWriter()
	write_header(writer, HuffmanTree(None), 0)
	blob = writer.getvalue()
	assert blob == b'\x00' + struct.pack('>Q', 0)
	header = read_header(BitReader(blob))
	assert not header.tree
	assert header.original_length == 0


def test_length_must_fit_64_bits():
	with pytest.raises(ValueError):
		write_header(BitWriter(), HuffmanTree(None), 1 << 64)


def test_errors_share_a_base():
	for cls in (MalformedContainerError, TruncatedBitstreamError, UnreachableSymbolError):
		assert issubclass(cls, CorruptContainerError)
	assert issubclass(CorruptContainerError, ValueError)


def test_empty_blob_is_malformed():
	with pytest.raises(MalformedContainerError):
		decompress(b'')


def test_tree_without_length_is_malformed():
	blob = compress(b'Hello')
	with pytest.raises(MalformedContainerError):
		decompress(blob[:5 + LENGTH_SIZE - 1])


def test_tree_cut_short_is_malformed():
	with pytest.raises(MalformedContainerError):
		decompress(b'\x94\x8b')


def test_empty_tree_with_nonzero_length_is_malformed():
	with pytest.raises(MalformedContainerError):
		decompress(b'\x00' + struct.pack('>Q', 3))


def test_trailing_bytes_are_malformed():
	with pytest.raises(MalformedContainerError):
		decompress(compress(b'Hello') + b'\x00')
	with pytest.raises(MalformedContainerError):
		decompress(compress(b'') + b'\x00')


def test_missing_payload_is_truncated():
	blob = compress(b'Hello')
	with pytest.raises(TruncatedBitstreamError) as excinfo:
		decompress(blob[:-2])
	assert excinfo.value.decoded == 0
	assert excinfo.value.expected == 5


def test_inflated_length_is_truncated():
	blob = bytearray(compress(b'Hello'))
	blob[5:13] = struct.pack('>Q', 9)
	with pytest.raises(TruncatedBitstreamError) as excinfo:
		decompress(bytes(blob))
	assert excinfo.value.decoded == 8


def test_single_symbol_tree_rejects_right_branch():
	blob = bytearray(compress(b'AAA'))
	# payload 001... : the third symbol takes the empty right branch
	blob[-1] = 0b00100000
	with pytest.raises(UnreachableSymbolError):
		decompress(bytes(blob))


def test_padding_bits_are_ignored():
	blob = bytearray(compress(b'Hello'))
	# payload is 0001111110, the low six bits of the last byte are padding
	blob[-1] |= 0b00111111
	assert decompress(bytes(blob)) == b'Hello'
