import pytest

from codebook import read_container
from huffman_tool import main


@pytest.fixture
def text_file(tmp_path):
    path = tmp_path / "input.txt"
    path.write_bytes("héllo wörld\r\nsecond line\n".encode("utf-8"))
    return path


def test_encode_decode_text_round_trip(tmp_path, text_file, capsys):
    huf = tmp_path / "input.huf"
    out = tmp_path / "output.txt"

    assert main(["encode", str(text_file), "-o", str(huf)]) == 0
    assert "Wrote" in capsys.readouterr().out
    _, _, kind = read_container(huf.read_bytes())
    assert kind == "text"

    assert main(["decode", str(huf), "-o", str(out)]) == 0
    assert out.read_bytes() == text_file.read_bytes()


def test_encode_decode_bytes_round_trip(tmp_path):
    src = tmp_path / "blob.bin"
    src.write_bytes(bytes(range(256)) + b"\x00" * 100)
    huf = tmp_path / "blob.huf"
    out = tmp_path / "blob.out"

    assert main(["encode", str(src), "-o", str(huf), "--bytes"]) == 0
    assert main(["decode", str(huf), "-o", str(out)]) == 0
    assert out.read_bytes() == src.read_bytes()


def test_encode_show_and_dict(tmp_path, capsys):
    src = tmp_path / "aab.txt"
    src.write_text("aab", encoding="utf-8")
    listing = tmp_path / "dict.txt"

    assert main(["encode", str(src), "-o", str(tmp_path / "aab.huf"), "--show", "--dict", str(listing)]) == 0
    assert capsys.readouterr().out.splitlines()[0] == "110"
    assert listing.read_text(encoding="utf-8") == "Huffman Dictionary:\n'a': 1\n'b': 0\n"


def test_empty_file_round_trip(tmp_path):
    src = tmp_path / "empty.bin"
    src.write_bytes(b"")
    huf = tmp_path / "empty.huf"
    out = tmp_path / "empty.out"

    assert main(["encode", str(src), "-o", str(huf), "--bytes"]) == 0
    assert main(["decode", str(huf), "-o", str(out)]) == 0
    assert out.read_bytes() == b""


def test_codes_command(text_file, capsys):
    assert main(["codes", str(text_file)]) == 0
    out = capsys.readouterr().out
    assert out.startswith("Huffman Dictionary:\n")
    assert "'\\r': " in out


def test_codes_on_empty_file_fails(tmp_path, capsys):
    src = tmp_path / "empty.txt"
    src.write_text("", encoding="utf-8")
    assert main(["codes", str(src)]) == 1
    assert capsys.readouterr().err.startswith("error:")


def test_compare_command(text_file, capsys):
    assert main(["compare", str(text_file), "--level", "6"]) == 0
    out = capsys.readouterr().out
    for method in ("original", "huffman", "zlib", "lzma"):
        assert method in out
    assert "Round trip: ok" in out


def test_decode_garbage_fails(tmp_path, capsys):
    bad = tmp_path / "bad.huf"
    bad.write_bytes(b"not a container at all")
    assert main(["decode", str(bad), "-o", str(tmp_path / "x")]) == 1
    assert "bad magic" in capsys.readouterr().err


def test_compare_on_empty_file(tmp_path, capsys):
    src = tmp_path / "empty.bin"
    src.write_bytes(b"")
    assert main(["compare", str(src)]) == 0
    assert "Round trip: ok" in capsys.readouterr().out


def test_decode_surrogate_codebook_fails_cleanly(tmp_path, capsys):
    codebook = b"huffman-codebook text\n55296 0\n56000 1\n"
    bad = tmp_path / "surrogate.huf"
    bad.write_bytes(b"HUFF" + bytes([0]) + len(codebook).to_bytes(4, "big") + codebook + bytes(16))
    assert main(["decode", str(bad), "-o", str(tmp_path / "x")]) == 1
    assert capsys.readouterr().err.startswith("error:")


def test_missing_input_fails(tmp_path, capsys):
    assert main(["codes", str(tmp_path / "nope.txt")]) == 1
    assert capsys.readouterr().err.startswith("error:")


def test_usage_error_exits_2():
    with pytest.raises(SystemExit) as excinfo:
        main(["encode"])
    assert excinfo.value.code == 2
