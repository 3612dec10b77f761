import os
import sys
import random
import pytest

REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if REPO_ROOT not in sys.path:
	sys.path.insert(0, REPO_ROOT)

from huffman_bits import BitReader, BitWriter
from huffman_core import HuffmanLogic, HuffmanTree, count_frequencies
from huffman_errors import MalformedContainerError


@pytest.fixture
def logic():
	return HuffmanLogic()


def _codes_for(logic, data):
	return logic.generate_codes(logic.build_tree(logic.count_frequencies(data)))


def _roundtrip_tree(tree):
	writer = BitWriter()
	tree.serialize(writer)
	return HuffmanTree.deserialize(BitReader(writer.getvalue()))


def test_count_frequencies_keeps_first_seen_order():
	freqs = count_frequencies(b'abracadabra')
	assert freqs == {97: 5, 98: 2, 114: 2, 99: 1, 100: 1}
	assert list(freqs) == [97, 98, 114, 99, 100]
	assert sum(freqs.values()) == 11


def test_count_frequencies_empty():
	assert count_frequencies(b'') == {}


def test_empty_table_builds_empty_tree(logic):
	tree = logic.build_tree({})
	assert not tree
	assert tree.root is None
	assert logic.generate_codes(tree) == {}


def test_zero_counts_are_ignored(logic):
	tree = logic.build_tree({65: 0, 66: 3})
	assert logic.generate_codes(tree) == {66: '0'}


def test_hello_codes(logic):
	codes = _codes_for(logic, b'Hello')
	assert codes == {ord('H'): '00', ord('e'): '01', ord('o'): '10', ord('l'): '11'}
	assert ''.join(codes[b] for b in b'Hello') == '0001111110'


def test_tie_break_first_removed_is_left(logic):
	codes = _codes_for(logic, b'ba')
	assert codes == {ord('a'): '0', ord('b'): '1'}


def test_single_symbol_gets_one_bit(logic):
	tree = logic.build_tree(count_frequencies(b'A' * 10000))
	assert tree.root.left.symbol == ord('A')
	assert tree.root.right is None
	assert tree.root.freq == 10000
	assert tree.depth() == 1
	assert logic.generate_codes(tree) == {ord('A'): '0'}


def test_internal_weight_is_sum_of_leaves(logic):
	data = b'mississippi river'
	tree = logic.build_tree(count_frequencies(data))
	assert tree.root.freq == len(data)
	assert sorted(leaf.symbol for leaf in tree.leaves()) == sorted(set(data))


@pytest.mark.parametrize("seed", [1, 2, 3, 4])
def test_codes_are_prefix_free(logic, seed):
	rng = random.Random(seed)
	data = bytes(rng.choice(b'aaaaabbbccdefgh\x00\xff') for _ in range(2000))
	codes = list(_codes_for(logic, data).values())
	for i, a in enumerate(codes):
		for j, b in enumerate(codes):
			if i != j:
				assert not b.startswith(a)


@pytest.mark.parametrize("seed", [5, 6, 7])
def test_rarer_symbols_never_get_shorter_codes(logic, seed):
	rng = random.Random(seed)
	data = bytes(min(255, int(rng.expovariate(0.15))) for _ in range(5000))
	freqs = count_frequencies(data)
	codes = logic.generate_codes(logic.build_tree(freqs))
	for s1, f1 in freqs.items():
		for s2, f2 in freqs.items():
			if f1 < f2:
				assert len(codes[s1]) >= len(codes[s2])


def test_every_symbol_has_a_code(logic):
	data = bytes(range(256)) + b'zz'
	codes = _codes_for(logic, data)
	assert set(codes) == set(range(256))
	assert all(codes.values())


def test_serialize_hello_shape(logic):
	tree = logic.build_tree(count_frequencies(b'Hello'))
	writer = BitWriter()
	tree.serialize(writer)
	assert writer.n_bits == 39
	assert ''.join(writer.chunks) == (
		'0' + '0' + '1' + '01001000' + '1' + '01100101'
		+ '0' + '1' + '01101111' + '1' + '01101100'
	)


def test_serialize_single_symbol_is_lone_leaf(logic):
	tree = logic.build_tree({0x41: 3})
	writer = BitWriter()
	tree.serialize(writer)
	assert ''.join(writer.chunks) == '1' + '01000001'


def test_deserialize_restores_codes(logic):
	data = b'deserialize me, please, deserialize me'
	tree = logic.build_tree(count_frequencies(data))
	restored = _roundtrip_tree(tree)
	assert logic.generate_codes(restored) == logic.generate_codes(tree)


def test_deserialize_single_symbol_shape(logic):
	restored = _roundtrip_tree(logic.build_tree({7: 1}))
	assert restored.root.left.symbol == 7
	assert restored.root.right is None
	assert logic.generate_codes(restored) == {7: '0'}


def test_serialize_empty_tree_raises():
	with pytest.raises(ValueError):
		HuffmanTree(None).serialize(BitWriter())


def test_deserialize_truncated_shape():
	# internal node, then a leaf marker with only 6 symbol bits left
	with pytest.raises(MalformedContainerError):
		HuffmanTree.deserialize(BitReader(bytes([0b01010000])))


def test_deserialize_duplicate_leaf():
	writer = BitWriter()
	writer.write(0, 1)
	writer.write(1, 1)
	writer.write(65, 8)
	writer.write(1, 1)
	writer.write(65, 8)
	with pytest.raises(MalformedContainerError):
		HuffmanTree.deserialize(BitReader(writer.getvalue()))


def test_deserialize_rejects_runaway_depth():
	with pytest.raises(MalformedContainerError):
		HuffmanTree.deserialize(BitReader(b'\x00' * 40))
