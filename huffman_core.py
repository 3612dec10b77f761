# filename: huffman_core.py

import heapq
import logging
from collections import Counter

from huffman_errors import MalformedContainerError

logger = logging.getLogger(__name__)

SYMBOL_BITS = 8
LEAF_MARKER = 1
INTERNAL_MARKER = 0
# 256 leaves can be at most 255 edges deep
MAX_DEPTH = 255


class HuffmanNode:
    """Leaf when 'symbol' is set, otherwise an internal node owning left/right."""

    def __init__(self, symbol, freq, left=None, right=None):
        self.symbol = symbol
        self.freq = freq
        self.left = left
        self.right = right

    @property
    def is_leaf(self):
        return self.symbol is not None

    def __repr__(self):
        if self.is_leaf:
            return f"HuffmanNode(symbol={self.symbol}, freq={self.freq})"
        return f"HuffmanNode(freq={self.freq}, left={self.left!r}, right={self.right!r})"


def count_frequencies(data):
    """One pass over 'data'; the Counter keeps first-seen order of the symbols."""
    return Counter(data)


def _wrap_single_leaf(leaf):
    # A lone leaf has no path from the root, so hang it off the left branch
    # and leave the right branch empty. Its code becomes "0".
    return HuffmanNode(None, leaf.freq, left=leaf, right=None)


class HuffmanTree:
    """
    Prefix-code tree over byte symbols.

    Branch convention: 0 selects the left child, 1 the right child.
    An empty tree (root None) stands for empty input.
    """

    def __init__(self, root=None):
        self.root = root

    def __bool__(self):
        return self.root is not None

    @classmethod
    def build(cls, frequencies):
        """
        Greedy merge of the two lightest nodes until one root is left.

        Queue entries are (freq, order, node). Leaves take their order from
        ascending symbol value, merged nodes from a counter continuing after
        the last leaf, so equal frequencies always merge the same way. The
        first node removed becomes the left child.
        """
        symbols = sorted(s for s, f in frequencies.items() if f > 0)
        if not symbols:
            return cls(None)

        priority_queue = [
            (frequencies[symbol], order, HuffmanNode(symbol, frequencies[symbol]))
            for order, symbol in enumerate(symbols)
        ]
        heapq.heapify(priority_queue)
        next_order = len(priority_queue)

        if len(priority_queue) == 1:
            return cls(_wrap_single_leaf(priority_queue[0][2]))

        while len(priority_queue) > 1:
            left_freq, _, left = heapq.heappop(priority_queue)
            right_freq, _, right = heapq.heappop(priority_queue)
            merged = HuffmanNode(None, left_freq + right_freq, left=left, right=right)
            heapq.heappush(priority_queue, (merged.freq, next_order, merged))
            next_order += 1

        tree = cls(priority_queue[0][2])
        logger.debug(
            "built tree: %d symbols, total weight %d", len(symbols), tree.root.freq
        )
        return tree

    def leaves(self):
        """Leaves in pre-order (left before right)."""
        stack = [self.root] if self.root is not None else []
        while stack:
            node = stack.pop()
            if node.is_leaf:
                yield node
                continue
            if node.right is not None:
                stack.append(node.right)
            if node.left is not None:
                stack.append(node.left)

    def depth(self):
        def walk(node):
            if node is None or node.is_leaf:
                return 0
            return 1 + max(walk(node.left), walk(node.right))

        return walk(self.root)

    def serialize(self, writer):
        """
        Write the shape in pre-order: 0 for an internal node followed by its
        left and right subtrees, 1 for a leaf followed by its 8-bit symbol.
        The single-symbol shape is written as its lone leaf.
        """
        root = self.root
        if root is None:
            raise ValueError("cannot serialize an empty tree")
        if not root.is_leaf and root.right is None:
            root = root.left

        def walk(node):
            if node.is_leaf:
                writer.write(LEAF_MARKER, 1)
                writer.write(node.symbol, SYMBOL_BITS)
                return
            writer.write(INTERNAL_MARKER, 1)
            walk(node.left)
            walk(node.right)

        walk(root)

    @classmethod
    def deserialize(cls, reader):
        """Inverse of serialize(). Frequencies are not stored, so they read back as 0."""

        seen = set()

        def walk(depth):
            if depth > MAX_DEPTH:
                logger.error("tree deeper than %d levels", MAX_DEPTH)
                raise MalformedContainerError("tree section is too deep")
            marker = reader.read_bit()
            if marker is None:
                logger.error("tree section ended before the shape was complete")
                raise MalformedContainerError("tree section is truncated")
            if marker == LEAF_MARKER:
                symbol = reader.read(SYMBOL_BITS)
                if symbol is None:
                    logger.error("tree section ended inside a leaf symbol")
                    raise MalformedContainerError("tree leaf symbol is truncated")
                if symbol in seen:
                    logger.error("symbol %d appears in two leaves", symbol)
                    raise MalformedContainerError(f"duplicate leaf for symbol {symbol}")
                seen.add(symbol)
                return HuffmanNode(symbol, 0)
            left = walk(depth + 1)
            right = walk(depth + 1)
            return HuffmanNode(None, 0, left=left, right=right)

        root = walk(0)
        if root.is_leaf:
            root = _wrap_single_leaf(root)
        return cls(root)


class HuffmanLogic:
    def count_frequencies(self, data):
        return count_frequencies(data)

    def build_tree(self, frequencies):
        return HuffmanTree.build(frequencies)

    def generate_codes(self, tree):
        """Map every leaf symbol to its root-to-leaf path as a '0'/'1' string."""
        codes = {}
        if not tree:
            return codes

        def walk(node, current_code):
            if node is None:
                return
            if node.is_leaf:
                codes[node.symbol] = current_code
                return
            walk(node.left, current_code + "0")
            walk(node.right, current_code + "1")

        walk(tree.root, "")
        return codes
