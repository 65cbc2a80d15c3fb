# filename: huffman_core.py

import heapq
import struct
from collections import Counter, namedtuple
from types import MappingProxyType

from huffman_errors import CorruptArchiveError, EmptyInputError

BITS_IN_BYTE = 8
BYTE_MASK = 0xFF
NO_CHILD = -1

HuffmanNode = namedtuple("HuffmanNode", ["symbol", "freq", "left", "right"])


def iter_symbols(data):
    """Yield the 16-bit symbols of ``data``: each byte pair, high byte first.

    An odd trailing byte is paired with a zero filler byte.
    """
    even = len(data) - len(data) % 2
    for (symbol,) in struct.iter_unpack(">H", data[:even]):
        yield symbol
    if even != len(data):
        yield data[-1] << BITS_IN_BYTE


def iter_bits(buffer):
    for byte in buffer:
        for shift in range(BITS_IN_BYTE - 1, -1, -1):
            yield (byte >> shift) & 1


class HuffmanTree:
    """Huffman tree kept in an arena.

    Node ``i`` is described by the ``i``-th entry of ``symbols``, ``freqs``,
    ``lefts`` and ``rights``. Children are referenced by index, leaves have
    ``NO_CHILD`` on both sides and a non-None symbol.
    """

    def __init__(self):
        self.symbols = []
        self.freqs = []
        self.lefts = []
        self.rights = []
        self.root = NO_CHILD

    def __len__(self):
        return len(self.freqs)

    def add_node(self, freq, symbol=None, left=NO_CHILD, right=NO_CHILD):
        self.symbols.append(symbol)
        self.freqs.append(freq)
        self.lefts.append(left)
        self.rights.append(right)
        return len(self.freqs) - 1

    def is_leaf(self, index):
        return self.symbols[index] is not None

    def node(self, index):
        return HuffmanNode(
            self.symbols[index], self.freqs[index], self.lefts[index], self.rights[index]
        )


class HuffmanLogic:
    def frequencies(self, data):
        # Frequency analysis over byte pairs, frozen once built
        return MappingProxyType(dict(Counter(iter_symbols(data))))

    def build_tree(self, freqs):
        if not freqs:
            raise EmptyInputError("cannot build a Huffman tree from an empty frequency table")

        tree = HuffmanTree()
        # Leaves go in by ascending symbol, so the tree never depends on the
        # iteration order of the table. The arena index is the insertion
        # sequence and breaks frequency ties.
        priority_queue = []
        for symbol in sorted(freqs):
            index = tree.add_node(freqs[symbol], symbol=symbol)
            priority_queue.append((freqs[symbol], index))
        heapq.heapify(priority_queue)

        # Iteratively merge nodes; first extracted becomes the left child
        while len(priority_queue) > 1:
            left_freq, left = heapq.heappop(priority_queue)
            right_freq, right = heapq.heappop(priority_queue)
            merged_freq = left_freq + right_freq
            merged = tree.add_node(merged_freq, left=left, right=right)
            heapq.heappush(priority_queue, (merged_freq, merged))

        tree.root = priority_queue[0][1]
        return tree

    def generate_codes(self, tree):
        if tree.is_leaf(tree.root):
            # A lone symbol still needs one bit per occurrence
            return MappingProxyType({tree.symbols[tree.root]: "0"})

        codes = {}
        stack = [(tree.root, "")]
        while stack:
            index, code = stack.pop()
            if tree.is_leaf(index):
                codes[tree.symbols[index]] = code
                continue
            stack.append((tree.rights[index], code + "1"))
            stack.append((tree.lefts[index], code + "0"))
        return MappingProxyType(codes)

    def pack_bits(self, codes):
        encoded_str = "".join(codes)
        if not encoded_str:
            return b""
        encoded_str += "0" * (-len(encoded_str) % BITS_IN_BYTE)
        return int(encoded_str, 2).to_bytes(len(encoded_str) // BITS_IN_BYTE, byteorder="big")

    def encode_symbols(self, data, codes):
        return self.pack_bits(codes[symbol] for symbol in iter_symbols(data))

    def decode_symbols(self, freqs, compressed, original_length):
        if original_length == 0:
            if freqs:
                raise CorruptArchiveError("frequency table is not empty for a zero-length payload")
            return b""
        if not freqs:
            raise CorruptArchiveError(f"empty frequency table for {original_length} bytes of output")
        # Each symbol needs at least one bit; check before allocating the output
        if len(compressed) * BITS_IN_BYTE < (original_length + 1) // 2:
            raise CorruptArchiveError(
                f"{len(compressed)} payload bytes cannot hold {original_length} bytes of output"
            )

        tree = self.build_tree(freqs)
        root = tree.root
        root_is_leaf = tree.is_leaf(root)
        symbols, lefts, rights = tree.symbols, tree.lefts, tree.rights

        output = bytearray(original_length)
        offset = 0
        current = root
        for bit in iter_bits(compressed):
            if root_is_leaf:
                current = root if bit == 0 else NO_CHILD
            else:
                current = rights[current] if bit else lefts[current]
            if current == NO_CHILD:
                raise CorruptArchiveError(f"bitstream leaves the Huffman tree at output byte {offset}")

            symbol = symbols[current]
            if symbol is None:
                continue

            output[offset] = symbol >> BITS_IN_BYTE
            offset += 1
            # The low byte of the last symbol is filler for odd lengths
            if offset < original_length:
                output[offset] = symbol & BYTE_MASK
                offset += 1
            if offset >= original_length:
                return bytes(output)
            current = root

        raise CorruptArchiveError(
            f"bitstream exhausted after {offset} of {original_length} bytes"
        )
