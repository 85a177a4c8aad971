import heapq
from dataclasses import dataclass
from functools import cached_property
from collections.abc import Sequence as SequenceABC
from typing import Dict, Iterable, List, Optional, Sequence, Tuple, Union

from bitstream import EncodedStream, pack_bits

Symbol = Union[str, int] # single character for text input, byte value for bytes input


# Errors

class HuffmanError(Exception):
    """Base class for every failure raised by the codec."""

class EmptyAlphabetError(HuffmanError, ValueError):
    pass

class MalformedTreeError(HuffmanError, ValueError):
    pass

class UnknownSymbolError(HuffmanError, KeyError):
    def __init__(self, symbol):
        super().__init__(symbol)
        self.symbol = symbol

    def __str__(self):
        return f"symbol {self.symbol!r} has no entry in the code table"

class TruncatedStreamError(HuffmanError, ValueError):
    pass

class CorruptStreamError(HuffmanError, ValueError):
    pass


# Tree

@dataclass(frozen=True, eq=False)
class HuffmanNode: # Node for Huffman tree
    frequency: int
    symbol: Optional[Symbol] = None # set on leaves only
    left: Optional["HuffmanNode"] = None
    right: Optional["HuffmanNode"] = None
    synthetic: bool = False # sibling added under a single-symbol alphabet

    @property
    def is_leaf(self) -> bool:
        return self.left is None and self.right is None


@dataclass(frozen=True, eq=False)
class HuffmanTree:
    root: HuffmanNode

    @cached_property
    def _codes(self) -> Dict[Symbol, str]:
        return generate_huffman_codes(self.root)

    def code_table(self) -> Dict[Symbol, str]:
        return dict(self._codes)

    @property
    def symbols(self) -> List[Symbol]:
        return sorted(self._codes)

    @cached_property
    def kind(self) -> str:
        """'text' when the leaves hold characters, 'bytes' when they hold byte values."""
        return symbol_kind(self._codes)


def symbol_kind(symbols: Iterable[Symbol]) -> str:
    kinds = set()
    for s in symbols:
        if isinstance(s, str) and len(s) == 1:
            kinds.add("text")
        elif isinstance(s, int) and not isinstance(s, bool) and 0 <= s <= 255:
            kinds.add("bytes")
        else:
            raise TypeError(f"unsupported symbol {s!r}: expected a character or a byte value")
    if len(kinds) > 1:
        raise TypeError("cannot mix characters and byte values in one alphabet")
    return kinds.pop() if kinds else "text"


def build_frequency_table(symbols: Iterable[Symbol]) -> Dict[Symbol, int]:
    frequency_table: Dict[Symbol, int] = {}
    for s in symbols:
        frequency_table[s] = frequency_table.get(s, 0) + 1
    return frequency_table


def build_huffman_tree(frequency_table: Dict[Symbol, int]) -> HuffmanTree:
    """
    Build the Huffman tree for a frequency table.

    Ties on frequency are broken by a sequence number: leaves are numbered in
    ascending symbol order, each merged node takes the next number. The first
    node popped becomes the left child (bit 0), the second the right child
    (bit 1). Equal tables therefore always give the same tree.

    A single-symbol table gets a synthetic zero-frequency right sibling so the
    symbol still has the one-bit code "0".
    """
    if not frequency_table:
        raise EmptyAlphabetError("cannot build a Huffman tree from an empty frequency table")
    symbol_kind(frequency_table)
    for symbol, frequency in frequency_table.items():
        if not isinstance(frequency, int) or isinstance(frequency, bool) or frequency < 0:
            raise ValueError(f"frequency for {symbol!r} must be a non-negative int, got {frequency!r}")

    priority_queue: List[Tuple[int, int, HuffmanNode]] = [
        (frequency_table[s], seq, HuffmanNode(frequency_table[s], symbol=s))
        for seq, s in enumerate(sorted(frequency_table))
    ]
    heapq.heapify(priority_queue)

    if len(priority_queue) == 1:
        _, _, leaf = priority_queue[0]
        sibling = HuffmanNode(0, synthetic=True)
        return HuffmanTree(HuffmanNode(leaf.frequency, left=leaf, right=sibling))

    seq = len(priority_queue)
    while len(priority_queue) > 1:
        left_freq, _, left = heapq.heappop(priority_queue)
        right_freq, _, right = heapq.heappop(priority_queue)
        merged_node = HuffmanNode(left_freq + right_freq, left=left, right=right)
        heapq.heappush(priority_queue, (merged_node.frequency, seq, merged_node))
        seq += 1

    return HuffmanTree(priority_queue[0][2])


def generate_huffman_codes(root: HuffmanNode) -> Dict[Symbol, str]:
    """Map every leaf symbol to its root-to-leaf path ('0' left, '1' right)."""
    codes: Dict[Symbol, str] = {}
    # iterative walk so deep (skewed) trees don't hit the recursion limit
    stack = [(root, "")]
    while stack:
        node, current_code = stack.pop()
        if node.is_leaf:
            if not node.synthetic:
                codes[node.symbol] = current_code
            continue
        if node.left is None or node.right is None:
            raise MalformedTreeError(f"node at path {current_code or '<root>'!r} has exactly one child")
        stack.append((node.right, current_code + "1"))
        stack.append((node.left, current_code + "0"))
    return codes


def weighted_code_length(frequency_table: Dict[Symbol, int], code_table: Dict[Symbol, str]) -> int:
    """Total encoded bits: sum of frequency * code length."""
    try:
        return sum(frequency * len(code_table[s]) for s, frequency in frequency_table.items())
    except KeyError as exc:
        raise UnknownSymbolError(exc.args[0]) from None


# Encode / decode

def huffman_encode(symbols: Iterable[Symbol], code_table: Dict[Symbol, str]) -> str:
    parts = []
    for s in symbols:
        code = code_table.get(s)
        if code is None:
            raise UnknownSymbolError(s)
        parts.append(code)
    return "".join(parts)


def huffman_decode(bits: Iterable[str], root: HuffmanNode) -> List[Symbol]:
    """
    Walk the tree bit by bit, emitting a symbol at every leaf.

    Raises CorruptStreamError on a missing child, a synthetic leaf or a
    character other than '0'/'1', and TruncatedStreamError when the bits
    end in the middle of a code.
    """
    decoded: List[Symbol] = []
    node = root
    position = 0
    for position, bit in enumerate(bits, start=1):
        if bit == "0":
            node = node.left
        elif bit == "1":
            node = node.right
        else:
            raise CorruptStreamError(f"invalid bit {bit!r} at position {position}")

        if node is None:
            raise CorruptStreamError(f"bit {position} leads to a missing child")
        if node.is_leaf:
            if node.synthetic:
                raise CorruptStreamError(f"bit {position} leads to an unused code")
            decoded.append(node.symbol)
            node = root

    if node is not root:
        raise TruncatedStreamError(f"stream ends in the middle of a code after {position} bits")
    return decoded


def encode(symbols: Union[str, bytes, bytearray, Sequence[Symbol]]) -> Tuple[EncodedStream, Optional[HuffmanTree]]:
    """
    Compress a text or byte string.

    Any other sequence of characters or byte values is accepted too; it
    decodes back as the equivalent str or bytes. Returns the packed stream
    and the tree needed to decode it. Empty input gives an empty stream and
    no tree; the stream still records whether the input was text or bytes.
    """
    if isinstance(symbols, (bytes, bytearray)):
        symbols, kind = bytes(symbols), "bytes"
    elif isinstance(symbols, str):
        kind = "text"
    elif isinstance(symbols, SequenceABC):
        kind = symbol_kind(symbols)
    else:
        raise TypeError(f"expected str, bytes or a sequence of symbols, got {type(symbols).__name__}")

    frequency_table = build_frequency_table(symbols)
    if not frequency_table:
        return EncodedStream.empty(kind), None

    tree = build_huffman_tree(frequency_table)
    bits = huffman_encode(symbols, tree.code_table())
    return pack_bits(bits, symbol_count=len(symbols), kind=kind), tree


def decode(stream: EncodedStream, tree: Optional[HuffmanTree]) -> Union[str, bytes]:
    """
    Invert encode().

    When the stream carries a symbol count, a short result is reported as
    TruncatedStreamError even if the bits happen to end on a code boundary.
    """
    kind = tree.kind if tree is not None else (stream.kind or "text")
    if len(stream) == 0:
        if stream.symbol_count:
            raise TruncatedStreamError(f"stream is empty but should hold {stream.symbol_count} symbols")
        return b"" if kind == "bytes" else ""
    if tree is None:
        raise ValueError("a Huffman tree is required to decode a non-empty stream")

    decoded = huffman_decode(stream.iter_bits(), tree.root)
    if stream.symbol_count is not None and len(decoded) != stream.symbol_count:
        if len(decoded) < stream.symbol_count:
            raise TruncatedStreamError(
                f"decoded {len(decoded)} of {stream.symbol_count} symbols before the stream ended"
            )
        raise CorruptStreamError(f"decoded {len(decoded)} symbols, expected {stream.symbol_count}")
    if kind == "bytes":
        return bytes(decoded)
    return "".join(decoded)


def tree_from_code_table(code_table: Dict[Symbol, str]) -> HuffmanTree:
    """
    Rebuild a decoding tree from a code table.

    Codes are inserted bit by bit into a trie, so the cost is linear in the
    total code length. The table must describe a complete prefix code; the
    only exception is the single-symbol table {s: "0"}, which gets the same
    synthetic sibling as build_huffman_tree. Frequencies are not recoverable
    and are left at 0.
    """
    if not code_table:
        raise MalformedTreeError("cannot rebuild a tree from an empty code table")
    symbol_kind(code_table)

    if len(code_table) == 1:
        (symbol, code), = code_table.items()
        if code != "0":
            raise MalformedTreeError(f"single-symbol code table must use code '0', got {code!r}")
        return HuffmanTree(HuffmanNode(0, left=HuffmanNode(0, symbol=symbol), right=HuffmanNode(0, synthetic=True)))

    # internal nodes are dicts keyed by bit, leaves are HuffmanNode
    trie: dict = {}
    for symbol, code in code_table.items():
        if not code or set(code) - {"0", "1"}:
            raise MalformedTreeError(f"invalid code {code!r} for symbol {symbol!r}")
        node = trie
        for depth, bit in enumerate(code[:-1], start=1):
            child = node.setdefault(bit, {})
            if not isinstance(child, dict):
                raise MalformedTreeError(f"code {code!r} for {symbol!r} runs through the leaf at {code[:depth]!r}")
            node = child
        if code[-1] in node:
            raise MalformedTreeError(f"code {code!r} for {symbol!r} is shared or prefixes another code")
        node[code[-1]] = HuffmanNode(0, symbol=symbol)

    # post-order so both children are frozen before their parent
    built: Dict[str, HuffmanNode] = {}
    stack = [(trie, "", False)]
    while stack:
        node, prefix, expanded = stack.pop()
        if not expanded:
            stack.append((node, prefix, True))
            for bit in "01":
                child = node.get(bit)
                if isinstance(child, dict):
                    stack.append((child, prefix + bit, False))
            continue

        children = []
        for bit in "01":
            child = node.get(bit)
            if child is None:
                raise MalformedTreeError(f"code table is not a complete prefix code at {prefix or '<root>'!r}")
            children.append(built.pop(prefix + bit) if isinstance(child, dict) else child)
        built[prefix] = HuffmanNode(0, left=children[0], right=children[1])

    return HuffmanTree(built[""])
