import lzma
import zlib
from typing import Dict

from codebook import write_container
from huffman import encode

COMPARATORS = ("zlib", "lzma")


def zlib_size(data: bytes, level: int = 9) -> int:
    return len(zlib.compress(data, level))


def lzma_size(data: bytes, level: int = 9) -> int:
    return len(lzma.compress(data, preset=level))


def compressed_sizes(data: bytes, level: int = 9) -> Dict[str, int]:
    """
    Byte sizes of the same raw input under Huffman and the general-purpose
    compressors. "huffman" counts the packed code bits only; "huffman_with_table"
    is the full .huf container, codebook included.
    """
    stream, tree = encode(data)
    return {
        "original": len(data),
        "huffman": stream.byte_size,
        "huffman_with_table": len(write_container(stream, tree)),
        "zlib": zlib_size(data, level),
        "lzma": lzma_size(data, level),
    }


def format_comparison(sizes: Dict[str, int]) -> str:
    original = sizes["original"]
    lines = [f"{'method':<20}{'bytes':>12}{'ratio':>10}"]
    for method, size in sizes.items():
        ratio = size / max(1, original)
        lines.append(f"{method:<20}{size:>12}{ratio:>10.3f}")
    return "\n".join(lines) + "\n"
