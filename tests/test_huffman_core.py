import math
import random

import pytest

import huffman_core as hc
from huffman_errors import CorruptArchiveError, EmptyInputError


def _logic():
	return hc.HuffmanLogic()


def _is_prefix_free(codes):
	values = sorted(codes.values())
	return all(not b.startswith(a) for a, b in zip(values, values[1:]))


def test_iter_symbols_pairs_bytes_high_first():
	assert list(hc.iter_symbols(b'\x41\x42\x43\x44')) == [0x4142, 0x4344]


def test_iter_symbols_odd_length_adds_filler():
	assert list(hc.iter_symbols(b'\x41\x42\x43\x44\x45')) == [0x4142, 0x4344, 0x4500]
	assert list(hc.iter_symbols(b'\x7f')) == [0x7f00]
	assert list(hc.iter_symbols(b'')) == []


def test_frequencies_count_blocks():
	data = bytes(random.getrandbits(8) for _ in range(1001))
	freqs = _logic().frequencies(data)
	assert sum(freqs.values()) == math.ceil(len(data) / 2)


def test_frequencies_are_immutable():
	freqs = _logic().frequencies(b'AABB')
	with pytest.raises(TypeError):
		freqs[0x4141] = 10


def test_frequencies_of_empty_input_is_empty():
	assert dict(_logic().frequencies(b'')) == {}


def test_build_tree_empty_table_raises():
	with pytest.raises(EmptyInputError):
		_logic().build_tree({})


def test_build_tree_single_symbol_root_is_leaf():
	tree = _logic().build_tree({0x4141: 7})
	assert len(tree) == 1
	assert tree.is_leaf(tree.root)
	assert tree.node(tree.root) == hc.HuffmanNode(0x4141, 7, hc.NO_CHILD, hc.NO_CHILD)


def test_build_tree_breaks_ties_by_insertion_order():
	tree = _logic().build_tree({0x4343: 1, 0x4141: 2, 0x4242: 1})
	root = tree.node(tree.root)
	assert root.freq == 4
	# lowest symbol among the equal-frequency leaves is extracted first
	left = tree.node(root.left)
	right = tree.node(root.right)
	assert left.symbol == 0x4141
	assert right.symbol is None
	assert tree.node(right.left).symbol == 0x4242
	assert tree.node(right.right).symbol == 0x4343


def test_build_tree_ignores_table_order():
	items = [(symbol, random.randint(1, 5)) for symbol in random.sample(range(1 << 16), 200)]
	forward = _logic().build_tree(dict(items))
	backward = _logic().build_tree(dict(reversed(items)))
	assert forward.symbols == backward.symbols
	assert forward.lefts == backward.lefts
	assert forward.rights == backward.rights


def test_generate_codes_single_symbol_gets_one_bit():
	logic = _logic()
	codes = logic.generate_codes(logic.build_tree({0x0041: 3}))
	assert dict(codes) == {0x0041: '0'}


def test_generate_codes_known_shape():
	logic = _logic()
	codes = logic.generate_codes(logic.build_tree({0x4141: 2, 0x4242: 1, 0x4343: 1}))
	assert dict(codes) == {0x4141: '0', 0x4242: '10', 0x4343: '11'}


def test_generate_codes_are_prefix_free():
	logic = _logic()
	freqs = logic.frequencies(bytes(random.getrandbits(8) for _ in range(4096)))
	codes = logic.generate_codes(logic.build_tree(freqs))
	assert set(codes) == set(freqs)
	assert _is_prefix_free(codes)


def test_generate_codes_handles_deep_trees():
	# Fibonacci weights give a maximally skewed tree
	fib = [1, 1]
	while len(fib) < 40:
		fib.append(fib[-1] + fib[-2])
	logic = _logic()
	codes = logic.generate_codes(logic.build_tree(dict(enumerate(fib))))
	assert max(len(code) for code in codes.values()) == 39
	assert _is_prefix_free(codes)


def test_pack_bits_msb_first_zero_padded():
	logic = _logic()
	assert logic.pack_bits(['0', '10', '0', '11']) == b'\x4c'
	assert logic.pack_bits(['1']) == b'\x80'
	assert logic.pack_bits(['11111111', '1']) == b'\xff\x80'
	assert logic.pack_bits([]) == b''


def test_pack_bits_keeps_leading_zero_bytes():
	assert _logic().pack_bits(['0' * 17]) == b'\x00\x00\x00'


def test_iter_bits_msb_first():
	assert list(hc.iter_bits(b'\xa0')) == [1, 0, 1, 0, 0, 0, 0, 0]


def test_decode_symbols_stops_before_padding():
	freqs = {0x4141: 2, 0x4242: 1, 0x4343: 1}
	assert _logic().decode_symbols(freqs, b'\x4c', 8) == b'AABBAACC'


def test_decode_symbols_odd_length():
	assert _logic().decode_symbols({0x4100: 1}, b'\x00', 1) == b'A'


def test_decode_symbols_exhausted_bitstream():
	freqs = {0x4141: 2, 0x4242: 1, 0x4343: 1}
	with pytest.raises(CorruptArchiveError):
		_logic().decode_symbols(freqs, b'', 8)


def test_decode_symbols_single_leaf_rejects_one_bit():
	with pytest.raises(CorruptArchiveError):
		_logic().decode_symbols({0x4141: 2}, b'\x80', 4)


def test_decode_symbols_zero_length_requires_empty_table():
	assert _logic().decode_symbols({}, b'', 0) == b''
	with pytest.raises(CorruptArchiveError):
		_logic().decode_symbols({0x4141: 1}, b'', 0)


def test_decode_symbols_rejects_short_payload_before_allocating():
	with pytest.raises(CorruptArchiveError):
		_logic().decode_symbols({0x4141: 2**30}, b'\x00', 2**31 - 1)
