from dataclasses import dataclass
from typing import Iterator, Optional

KINDS = ("text", "bytes")


@dataclass(frozen=True)
class EncodedStream:
    """
    Huffman output packed MSB-first into bytes.

    bit_length is the number of code bits; the remaining pad_bits of the last
    byte are zero and never decoded. symbol_count, when known, lets the decoder
    notice a stream that was cut exactly on a code boundary. kind ("text" or
    "bytes") records what the input was, so an empty stream still decodes to
    the right type without a tree.
    """
    data: bytes
    bit_length: int
    symbol_count: Optional[int] = None
    kind: Optional[str] = None

    def __post_init__(self):
        if self.bit_length < 0:
            raise ValueError(f"bit_length must be non-negative, got {self.bit_length}")
        if len(self.data) != (self.bit_length + 7) // 8:
            raise ValueError(
                f"{self.bit_length} bits need {(self.bit_length + 7) // 8} bytes, got {len(self.data)}"
            )
        if self.symbol_count is not None and self.symbol_count < 0:
            raise ValueError(f"symbol_count must be non-negative, got {self.symbol_count}")
        if self.kind is not None and self.kind not in KINDS:
            raise ValueError(f"kind must be one of {KINDS}, got {self.kind!r}")

    @classmethod
    def empty(cls, kind: Optional[str] = None) -> "EncodedStream":
        return cls(b"", 0, 0, kind)

    @classmethod
    def from01(cls, bits: str, symbol_count: Optional[int] = None, kind: Optional[str] = None) -> "EncodedStream":
        return pack_bits(bits, symbol_count=symbol_count, kind=kind)

    def __len__(self) -> int:
        return self.bit_length

    @property
    def pad_bits(self) -> int:
        return len(self.data) * 8 - self.bit_length

    @property
    def byte_size(self) -> int:
        return len(self.data)

    def iter_bits(self) -> Iterator[str]:
        return unpack_bits(self.data, self.pad_bits)

    def to01(self) -> str:
        return "".join(self.iter_bits())

    def prefix(self, bit_length: int) -> "EncodedStream":
        """First bit_length bits of the stream, keeping symbol_count and kind."""
        if not 0 <= bit_length <= self.bit_length:
            raise ValueError(f"prefix length must be within 0..{self.bit_length}, got {bit_length}")
        return pack_bits(self.to01()[:bit_length], symbol_count=self.symbol_count, kind=self.kind)


def pack_bits(bits: str, symbol_count: Optional[int] = None, kind: Optional[str] = None) -> EncodedStream:
    """
    Pack a '0'/'1' string into bytes, zero-padding the last byte.
    """
    out = bytearray()
    acc = 0
    acc_bits = 0

    for position, ch in enumerate(bits):
        if ch not in "01":
            raise ValueError(f"invalid bit {ch!r} at position {position}")
        acc = (acc << 1) | (ch == "1")
        acc_bits += 1
        if acc_bits == 8:
            out.append(acc)
            acc = 0
            acc_bits = 0

    if acc_bits != 0:
        out.append(acc << (8 - acc_bits))

    return EncodedStream(bytes(out), len(bits), symbol_count, kind)


def unpack_bits(data: bytes, pad_bits: int) -> Iterator[str]:
    if not 0 <= pad_bits <= 7:
        raise ValueError(f"pad_bits must be within 0..7, got {pad_bits}")
    total_bits = len(data) * 8 - pad_bits
    if total_bits < 0:
        raise ValueError("pad_bits exceed the available data")

    bit_index = 0
    for byte in data:
        for i in range(7, -1, -1):
            if bit_index >= total_bits:
                return
            yield "1" if (byte >> i) & 1 else "0"
            bit_index += 1
