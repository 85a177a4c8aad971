from comparison import compressed_sizes, format_comparison, lzma_size, zlib_size


def test_compressed_sizes_keys_and_huffman_size():
    data = b"abc" * 100
    sizes = compressed_sizes(data)
    assert list(sizes) == ["original", "huffman", "huffman_with_table", "zlib", "lzma"]
    assert sizes["original"] == 300
    # c -> "0", a -> "10", b -> "11": 500 bits
    assert sizes["huffman"] == 63
    assert sizes["huffman_with_table"] > sizes["huffman"]
    assert sizes["zlib"] == zlib_size(data)
    assert sizes["lzma"] == lzma_size(data)


def test_compressed_sizes_empty_input():
    sizes = compressed_sizes(b"")
    assert sizes["original"] == 0
    assert sizes["huffman"] == 0


def test_format_comparison():
    report = format_comparison({"original": 100, "huffman": 50, "zlib": 25})
    lines = report.splitlines()
    assert lines[0].split() == ["method", "bytes", "ratio"]
    assert lines[2].split() == ["huffman", "50", "0.500"]
    assert lines[3].split() == ["zlib", "25", "0.250"]
