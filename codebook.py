"""
Code table persistence and display.

Text form written by dump_code_table:

    huffman-codebook text
    97 1
    98 0

The header names the symbol kind ("text" or "bytes"); each following line is
the symbol ordinal (code point or byte value) and its code, in ascending
ordinal order, so equal tables always serialize to the same text.

The .huf container is that text plus the packed stream:

    magic b"HUFF" | kind (1 byte) | codebook length (uint32 BE) | codebook
    | bit length (uint64 BE) | symbol count (uint64 BE, all ones if unknown)
    | packed bits
"""

import struct
from typing import Dict, Optional, Tuple

from bitstream import EncodedStream
from huffman import (
    HuffmanError,
    HuffmanTree,
    MalformedTreeError,
    Symbol,
    symbol_kind,
    tree_from_code_table,
)

HEADER = "huffman-codebook"
MAGIC = b"HUFF"
KIND_CODES = {"text": 0, "bytes": 1}
_PREFIX = struct.Struct(">4sBI")
_STREAM_HEADER = struct.Struct(">QQ")
_UNKNOWN_COUNT = 0xFFFFFFFFFFFFFFFF


class CodebookFormatError(HuffmanError, ValueError):
    pass


def _ordinal(symbol: Symbol) -> int:
    return ord(symbol) if isinstance(symbol, str) else symbol


def dump_code_table(code_table: Dict[Symbol, str]) -> str:
    kind = symbol_kind(code_table)
    lines = [f"{HEADER} {kind}"]
    for symbol in sorted(code_table, key=_ordinal):
        lines.append(f"{_ordinal(symbol)} {code_table[symbol]}")
    return "\n".join(lines) + "\n"


def load_code_table(text: str) -> Dict[Symbol, str]:
    lines = text.splitlines()
    if not lines:
        raise CodebookFormatError("codebook is empty")

    header = lines[0].split()
    if len(header) != 2 or header[0] != HEADER or header[1] not in KIND_CODES:
        raise CodebookFormatError(f"bad codebook header: {lines[0]!r}")
    kind = header[1]

    code_table: Dict[Symbol, str] = {}
    for lineno, line in enumerate(lines[1:], start=2):
        if not line.strip():
            continue
        fields = line.split()
        well_formed = (
            len(fields) == 2
            and fields[0].isascii() and fields[0].isdigit()
            and not set(fields[1]) - {"0", "1"}
        )
        if not well_formed:
            raise CodebookFormatError(f"line {lineno}: expected '<ordinal> <code>', got {line!r}")

        ordinal = int(fields[0])
        if kind == "bytes":
            if ordinal > 255:
                raise CodebookFormatError(f"line {lineno}: byte value {ordinal} out of range")
            symbol: Symbol = ordinal
        else:
            if ordinal > 0x10FFFF or 0xD800 <= ordinal <= 0xDFFF:
                raise CodebookFormatError(f"line {lineno}: code point {ordinal} is not a valid character")
            symbol = chr(ordinal)

        if symbol in code_table:
            raise CodebookFormatError(f"line {lineno}: duplicate symbol {symbol!r}")
        code_table[symbol] = fields[1]
    return code_table


def format_code_table(code_table: Dict[Symbol, str]) -> str:
    """Human-readable "Symbol: code" listing, one symbol per line."""
    lines = ["Huffman Dictionary:"]
    for symbol in sorted(code_table, key=_ordinal):
        lines.append(f"{symbol!r}: {code_table[symbol]}")
    return "\n".join(lines) + "\n"


def write_container(stream: EncodedStream, tree: Optional[HuffmanTree], kind: Optional[str] = None) -> bytes:
    """The tree's kind wins; without a tree, kind falls back to the stream's, then "text"."""
    if tree is not None:
        kind = tree.kind
        codebook = dump_code_table(tree.code_table()).encode("ascii")
    else:
        kind = kind or stream.kind or "text"
        codebook = b""
    if kind not in KIND_CODES:
        raise ValueError(f"kind must be one of {sorted(KIND_CODES)}, got {kind!r}")

    symbol_count = _UNKNOWN_COUNT if stream.symbol_count is None else stream.symbol_count
    return b"".join([
        _PREFIX.pack(MAGIC, KIND_CODES[kind], len(codebook)),
        codebook,
        _STREAM_HEADER.pack(stream.bit_length, symbol_count),
        stream.data,
    ])


def read_container(blob: bytes) -> Tuple[EncodedStream, Optional[HuffmanTree], str]:
    """Returns (stream, tree, kind); tree is None for an encoded empty input."""
    if len(blob) < _PREFIX.size:
        raise CodebookFormatError("container is too short")
    magic, kind_code, codebook_len = _PREFIX.unpack_from(blob, 0)
    if magic != MAGIC:
        raise CodebookFormatError(f"bad magic {magic!r}")
    kinds = {v: k for k, v in KIND_CODES.items()}
    if kind_code not in kinds:
        raise CodebookFormatError(f"unknown symbol kind {kind_code}")
    kind = kinds[kind_code]

    offset = _PREFIX.size
    codebook = blob[offset:offset + codebook_len]
    if len(codebook) != codebook_len:
        raise CodebookFormatError("codebook is cut short")
    offset += codebook_len

    if len(blob) < offset + _STREAM_HEADER.size:
        raise CodebookFormatError("stream header is cut short")
    bit_length, symbol_count = _STREAM_HEADER.unpack_from(blob, offset)
    offset += _STREAM_HEADER.size

    data = blob[offset:]
    if len(data) != (bit_length + 7) // 8:
        raise CodebookFormatError(
            f"payload holds {len(data)} bytes, header announces {bit_length} bits"
        )
    stream = EncodedStream(data, bit_length, None if symbol_count == _UNKNOWN_COUNT else symbol_count, kind)

    if not codebook:
        if bit_length:
            raise CodebookFormatError("payload present but no codebook")
        return stream, None, kind

    try:
        code_table = load_code_table(codebook.decode("ascii"))
    except UnicodeDecodeError as exc:
        raise CodebookFormatError(f"codebook is not ASCII: {exc}") from None
    if code_table and symbol_kind(code_table) != kind:
        raise CodebookFormatError("codebook kind does not match the container header")
    try:
        tree = tree_from_code_table(code_table)
    except MalformedTreeError as exc:
        raise CodebookFormatError(f"codebook does not describe a prefix code: {exc}") from None
    return stream, tree, kind
