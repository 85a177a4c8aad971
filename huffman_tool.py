"""
Command line front end for the Huffman codec.

How to run:
  python huffman_tool.py encode notes.txt -o notes.huf --dict notes_dict.txt
  python huffman_tool.py decode notes.huf -o notes_out.txt
  python huffman_tool.py codes notes.txt
  python huffman_tool.py compare notes.txt --level 6
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, Optional, Union

from codebook import format_code_table, read_container, write_container
from comparison import compressed_sizes, format_comparison
from huffman import HuffmanError, build_frequency_table, build_huffman_tree, decode, encode


def read_input(path: Path, as_bytes: bool) -> Union[str, bytes]:
    if as_bytes:
        return path.read_bytes()
    # newline="" keeps \r\n intact so the text round-trips exactly
    with path.open("r", encoding="utf-8", newline="") as f:
        return f.read()


def write_output(path: Path, data: Union[str, bytes]) -> None:
    if isinstance(data, bytes):
        path.write_bytes(data)
        return
    with path.open("w", encoding="utf-8", newline="") as f:
        f.write(data)


def cmd_encode(args: argparse.Namespace) -> int:
    data = read_input(Path(args.input), args.bytes)
    stream, tree = encode(data)

    out_path = Path(args.output)
    out_path.write_bytes(write_container(stream, tree))

    if args.dict:
        table = tree.code_table() if tree is not None else {}
        Path(args.dict).write_text(format_code_table(table), encoding="utf-8")
    if args.show:
        print(stream.to01())

    print(f"Encoded {len(data)} symbols into {len(stream)} bits ({stream.byte_size} bytes, {stream.pad_bits} pad bits)")
    print(f"Wrote {out_path}")
    return 0


def cmd_decode(args: argparse.Namespace) -> int:
    stream, tree, _ = read_container(Path(args.input).read_bytes())
    decoded = decode(stream, tree)

    out_path = Path(args.output)
    write_output(out_path, decoded)
    print(f"Decoded {len(decoded)} symbols")
    print(f"Wrote {out_path}")
    return 0


def cmd_codes(args: argparse.Namespace) -> int:
    data = read_input(Path(args.input), args.bytes)
    frequency_table = build_frequency_table(data)
    tree = build_huffman_tree(frequency_table)
    print(format_code_table(tree.code_table()), end="")
    return 0


def cmd_compare(args: argparse.Namespace) -> int:
    data = Path(args.input).read_bytes()
    sizes = compressed_sizes(data, level=args.level)
    print(format_comparison(sizes), end="")

    stream, tree = encode(data)
    ok = decode(stream, tree) == data
    print(f"Round trip: {'ok' if ok else 'MISMATCH'}")
    return 0 if ok else 1


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="huffman-tool", description="Huffman encode/decode files")
    sub = ap.add_subparsers(dest="command", required=True)

    p = sub.add_parser("encode", help="Encode a file into a .huf container")
    p.add_argument("input", type=str, help="File to encode")
    p.add_argument("-o", "--output", type=str, required=True, help="Container path to write")
    p.add_argument("--bytes", action="store_true", help="Treat the input as raw bytes instead of UTF-8 text")
    p.add_argument("--dict", type=str, default=None, help="Also write the Huffman dictionary listing here")
    p.add_argument("--show", action="store_true", help="Print the encoded bit string")
    p.set_defaults(func=cmd_encode)

    p = sub.add_parser("decode", help="Decode a .huf container")
    p.add_argument("input", type=str, help="Container to decode")
    p.add_argument("-o", "--output", type=str, required=True, help="File to write the recovered input to")
    p.set_defaults(func=cmd_decode)

    p = sub.add_parser("codes", help="Print the Huffman dictionary for a file")
    p.add_argument("input", type=str, help="File to analyze")
    p.add_argument("--bytes", action="store_true", help="Treat the input as raw bytes instead of UTF-8 text")
    p.set_defaults(func=cmd_codes)

    p = sub.add_parser("compare", help="Compare Huffman output size with zlib and lzma")
    p.add_argument("input", type=str, help="File to compress")
    p.add_argument("--level", type=int, default=9, choices=range(0, 10), metavar="0-9",
                   help="Compression level for zlib/lzma")
    p.set_defaults(func=cmd_compare)

    return ap


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        return args.func(args)
    except (HuffmanError, OSError, UnicodeError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
