"""
Benchmark: Huffman vs general-purpose compressors (zlib, lzma)

Runs repeated experiments over synthetic datasets (and optionally real files)
and reports compression ratio, build/encode/decode time and round-trip
correctness for each pipeline.

Outputs (in --outdir):
  - metrics.csv     (raw row per run per pipeline)
  - summary.csv     (grouped mean/stdev)
  - *.png           (charts)

How to run:
  python experiments.py --outdir results --runs 5
  python experiments.py --outdir results --runs 3 --exp1_size_kb 256 --exp2_max_mb 4
  python experiments.py --outdir results --no_exp1 --no_exp2 --files notes.txt,image.bmp
"""

from __future__ import annotations

import argparse
import csv
import lzma
import math
import random
import statistics
import sys
import time
import zlib
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Callable, Dict, List, Sequence, Tuple

import matplotlib.pyplot as plt

from huffman import (
    build_frequency_table,
    build_huffman_tree,
    decode,
    huffman_encode,
    weighted_code_length,
)
from bitstream import pack_bits

PIPELINES = ("huffman", "zlib", "lzma")


# Utilities

def now_ns() -> int:
    return time.perf_counter_ns()

def ns_to_ms(ns: int) -> float:
    return ns / 1_000_000.0

def safe_mkdir(p: Path) -> None:
    p.mkdir(parents=True, exist_ok=True)

def shannon_entropy(frequency_table: Dict[int, int]) -> float:
    """Bits per symbol; the lower bound for any prefix code's average length."""
    total = sum(frequency_table.values())
    if total == 0:
        return 0.0
    return -sum((f / total) * math.log2(f / total) for f in frequency_table.values() if f)


# Synthetic dataset generators

def _sample_cdf(rng: random.Random, cdf: Sequence[float], size: int) -> List[int]:
    # binary search per draw; cdf must end at ~1.0
    out = []
    for _ in range(size):
        r = rng.random()
        lo, hi = 0, len(cdf) - 1
        while lo < hi:
            mid = (lo + hi) // 2
            if r <= cdf[mid]:
                hi = mid
            else:
                lo = mid + 1
        out.append(lo)
    return out

def _cdf(weights: Sequence[float]) -> List[float]:
    total = sum(weights)
    acc = 0.0
    cdf = []
    for w in weights:
        acc += w / total
        cdf.append(acc)
    return cdf

def gen_uniform(size: int, alphabet: int = 256, seed: int = 0) -> bytes:
    rng = random.Random(seed)
    return bytes(rng.randrange(0, alphabet) for _ in range(size))

def gen_repetitive(size: int, dominant: int = ord('A'), dom_frac: float = 0.90, seed: int = 0) -> bytes:
    rng = random.Random(seed)
    others = [i for i in range(256) if i != dominant]
    return bytes(dominant if rng.random() < dom_frac else rng.choice(others) for _ in range(size))

def gen_zipf_like(size: int, alphabet: int = 128, s: float = 1.2, seed: int = 0) -> bytes:
    rng = random.Random(seed)
    cdf = _cdf([1.0 / ((i + 1) ** s) for i in range(alphabet)])
    return bytes(_sample_cdf(rng, cdf, size))

ENGLISH_CHARS = " etaoinshrdlcumwfgypbvkjxqETAOINSHRDLCUMWFGYPBVKJXQ\n"

def _english_weight(ch: str) -> float:
    if ch == ' ':
        return 13.0
    if ch == '\n':
        return 1.5
    if ch.lower() in "etaoinshrdlu":
        return 6.0
    if ch.lower() in "cmfwgypbvk":
        return 2.5
    return 1.2

def gen_english_like(size: int, seed: int = 0) -> bytes:
    rng = random.Random(seed)
    cdf = _cdf([_english_weight(ch) for ch in ENGLISH_CHARS])
    return bytes(ord(ENGLISH_CHARS[i]) for i in _sample_cdf(rng, cdf, size))

def gen_single_symbol(size: int, symbol: int = ord('a')) -> bytes:
    return bytes([symbol]) * size

GENERATOR_REGISTRY: Dict[str, Callable[[int, int], bytes]] = {
    "uniform256": lambda size, seed: gen_uniform(size, alphabet=256, seed=seed),
    "uniform128": lambda size, seed: gen_uniform(size, alphabet=128, seed=seed),
    "zipf128": lambda size, seed: gen_zipf_like(size, alphabet=128, s=1.2, seed=seed),
    "zipf64": lambda size, seed: gen_zipf_like(size, alphabet=64, s=1.2, seed=seed),
    "repetitive90": lambda size, seed: gen_repetitive(size, dominant=ord('A'), dom_frac=0.90, seed=seed),
    "repetitive99": lambda size, seed: gen_repetitive(size, dominant=ord('A'), dom_frac=0.99, seed=seed),
    "english_like": lambda size, seed: gen_english_like(size, seed=seed),
    "single_symbol": lambda size, seed: gen_single_symbol(size),
}

def generate_dataset(name: str, size_bytes: int, seed: int) -> Tuple[str, bytes]:
    fn = GENERATOR_REGISTRY.get(name)
    if fn is None:
        raise ValueError(f"unknown generator {name!r}; choose from {', '.join(sorted(GENERATOR_REGISTRY))}")
    return name, fn(size_bytes, seed)


# Experiment runner

@dataclass
class MetricRow:
    exp_name: str
    dataset_name: str
    file_size_bytes: int
    run_id: int
    pipeline: str  # "huffman", "zlib" or "lzma"
    unique_symbols: int

    build_tree_ms: float
    encode_ms: float
    decode_ms: float
    total_ms: float

    compressed_bytes: int
    pad_bits: int
    compression_ratio: float

    avg_code_length: float  # bits per input symbol
    entropy_bits: float
    correctness_ok: int  # 1 or 0


def _run_huffman(data: bytes) -> Tuple[float, float, float, int, int, float, bool]:
    t0 = now_ns()
    ft = build_frequency_table(data)
    tree = build_huffman_tree(ft)
    code_map = tree.code_table()
    t1 = now_ns()

    stream = pack_bits(huffman_encode(data, code_map), symbol_count=len(data))
    t2 = now_ns()

    decoded = decode(stream, tree)
    t3 = now_ns()

    avg_len = weighted_code_length(ft, code_map) / len(data)
    return (ns_to_ms(t1 - t0), ns_to_ms(t2 - t1), ns_to_ms(t3 - t2),
            stream.byte_size, stream.pad_bits, avg_len, decoded == data)


def _run_general(data: bytes, pipeline: str, level: int) -> Tuple[float, float, float, int, int, float, bool]:
    if pipeline == "zlib":
        compress, decompress = (lambda d: zlib.compress(d, level)), zlib.decompress
    elif pipeline == "lzma":
        compress, decompress = (lambda d: lzma.compress(d, preset=level)), lzma.decompress
    else:
        raise ValueError(f"pipeline must be one of {PIPELINES}, got {pipeline!r}")

    t0 = now_ns()
    packed = compress(data)
    t1 = now_ns()
    decoded = decompress(packed)
    t2 = now_ns()
    return 0.0, ns_to_ms(t1 - t0), ns_to_ms(t2 - t1), len(packed), 0, len(packed) * 8 / len(data), decoded == data


def run_one(data: bytes, pipeline: str, level: int = 9) -> MetricRow:
    if not data:
        raise ValueError("cannot benchmark an empty dataset")

    if pipeline == "huffman":
        result = _run_huffman(data)
    else:
        result = _run_general(data, pipeline, level)
    build_ms, encode_ms, decode_ms, comp_bytes, pad_bits, avg_len, ok = result

    ft = build_frequency_table(data)
    return MetricRow(
        exp_name="",
        dataset_name="",
        file_size_bytes=len(data),
        run_id=0,
        pipeline=pipeline,
        unique_symbols=len(ft),
        build_tree_ms=build_ms,
        encode_ms=encode_ms,
        decode_ms=decode_ms,
        total_ms=build_ms + encode_ms + decode_ms,
        compressed_bytes=comp_bytes,
        pad_bits=pad_bits,
        compression_ratio=comp_bytes / len(data),
        avg_code_length=avg_len,
        entropy_bits=shannon_entropy(ft),
        correctness_ok=1 if ok else 0,
    )


def write_csv(path: Path, rows: List[MetricRow]) -> None:
    names = [f.name for f in fields(MetricRow)]
    with path.open("w", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=names)
        w.writeheader()
        for r in rows:
            w.writerow({k: getattr(r, k) for k in names})


SUMMARY_METRICS = ("compression_ratio", "encode_ms", "decode_ms", "build_tree_ms", "total_ms", "avg_code_length")

def mean_stdev(vals: List[float]) -> Tuple[float, float]:
    if len(vals) == 1:
        return vals[0], 0.0
    return statistics.mean(vals), statistics.stdev(vals)

def group_summary(rows: List[MetricRow], out_path: Path) -> None:
    """
    Group by exp_name, dataset_name, file_size_bytes, pipeline and compute mean/stdev
    """
    key_to: Dict[Tuple[str, str, int, str], List[MetricRow]] = {}
    for r in rows:
        key = (r.exp_name, r.dataset_name, r.file_size_bytes, r.pipeline)
        key_to.setdefault(key, []).append(r)

    summary_fields = ["exp_name", "dataset_name", "file_size_bytes", "pipeline", "n_runs"]
    for m in SUMMARY_METRICS:
        summary_fields += [f"{m}_mean", f"{m}_stdev"]
    summary_fields.append("correctness_ok_rate")

    with out_path.open("w", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=summary_fields)
        w.writeheader()
        for key, items in sorted(key_to.items()):
            exp_name, dataset_name, size_b, pipeline = key
            out = {
                "exp_name": exp_name,
                "dataset_name": dataset_name,
                "file_size_bytes": size_b,
                "pipeline": pipeline,
                "n_runs": len(items),
                "correctness_ok_rate": sum(x.correctness_ok for x in items) / len(items),
            }
            for m in SUMMARY_METRICS:
                out[f"{m}_mean"], out[f"{m}_stdev"] = mean_stdev([getattr(x, m) for x in items])
            w.writerow(out)


# Plotting

def _line_chart(x, series: Dict[str, List[float]], outfile: Path, title: str, ylabel: str,
                xlabel: str = "", xticks: List[str] = None) -> None:
    plt.figure()
    for label, y in series.items():
        plt.plot(x, y, marker="o", label=label)
    if xticks is not None:
        plt.xticks(x, xticks, rotation=20, ha="right")
    if xlabel:
        plt.xlabel(xlabel)
    plt.ylabel(ylabel)
    plt.title(title)
    plt.legend()
    plt.tight_layout()
    plt.savefig(outfile, dpi=200)
    plt.close()


def plot_experiment_1(rows: List[MetricRow], outdir: Path) -> None:
    exp_rows = [r for r in rows if r.exp_name == "exp1_distribution"]
    if not exp_rows:
        return

    datasets = sorted(set(r.dataset_name for r in exp_rows))

    def mean_for(dataset: str, pipeline: str, field: str) -> float:
        vals = [getattr(r, field) for r in exp_rows if r.dataset_name == dataset and r.pipeline == pipeline]
        return statistics.mean(vals) if vals else float("nan")

    x = list(range(len(datasets)))
    _line_chart(x, {p: [mean_for(d, p, "compression_ratio") for d in datasets] for p in PIPELINES},
                outdir / "exp1_compression_ratio.png",
                "Experiment 1: Compression Ratio by Distribution",
                "Compressed Bytes / Original Bytes", xticks=datasets)
    _line_chart(x, {p: [mean_for(d, p, "encode_ms") for d in datasets] for p in PIPELINES},
                outdir / "exp1_encode_time.png",
                "Experiment 1: Encode Time by Distribution",
                "Encode Time (ms)", xticks=datasets)
    _line_chart(x, {
                    "huffman avg code length": [mean_for(d, "huffman", "avg_code_length") for d in datasets],
                    "entropy": [mean_for(d, "huffman", "entropy_bits") for d in datasets],
                },
                outdir / "exp1_code_length_vs_entropy.png",
                "Experiment 1: Huffman Code Length vs Entropy",
                "Bits per Symbol", xticks=datasets)


def plot_experiment_2(rows: List[MetricRow], outdir: Path) -> None:
    exp_rows = [r for r in rows if r.exp_name == "exp2_size_scaling"]
    if not exp_rows:
        return

    for dist in sorted(set(r.dataset_name for r in exp_rows)):
        dist_rows = [r for r in exp_rows if r.dataset_name == dist]
        sizes = sorted(set(r.file_size_bytes for r in dist_rows))

        def mean_size(size: int, pipeline: str, field: str) -> float:
            vals = [getattr(r, field) for r in dist_rows if r.file_size_bytes == size and r.pipeline == pipeline]
            return statistics.mean(vals) if vals else float("nan")

        _line_chart(sizes, {p: [mean_size(s, p, "encode_ms") for s in sizes] for p in PIPELINES},
                    outdir / f"exp2_encode_time_{dist}.png",
                    f"Experiment 2: Encode Time vs Size ({dist})",
                    "Encode Time (ms)", xlabel="File Size (bytes)")
        _line_chart(sizes, {p: [mean_size(s, p, "compression_ratio") for s in sizes] for p in PIPELINES},
                    outdir / f"exp2_compression_ratio_{dist}.png",
                    f"Experiment 2: Compression Ratio vs Size ({dist})",
                    "Compressed Bytes / Original Bytes", xlabel="File Size (bytes)")
        _line_chart(sizes, {p: [mean_size(s, p, "total_ms") for s in sizes] for p in PIPELINES},
                    outdir / f"exp2_total_time_{dist}.png",
                    f"Experiment 2: Total Runtime vs Size ({dist})",
                    "Total Time (ms) (build + encode + decode)", xlabel="File Size (bytes)")


def plot_experiment_3(rows: List[MetricRow], outdir: Path) -> None:
    exp_rows = [r for r in rows if r.exp_name == "exp3_files"]
    if not exp_rows:
        return

    names = sorted(set(r.dataset_name for r in exp_rows))
    width = 0.8 / len(PIPELINES)

    plt.figure()
    for i, p in enumerate(PIPELINES):
        y = []
        for n in names:
            vals = [r.compression_ratio for r in exp_rows if r.dataset_name == n and r.pipeline == p]
            y.append(statistics.mean(vals) if vals else float("nan"))
        plt.bar([j + i * width for j in range(len(names))], y, width=width, label=p)
    plt.xticks([j + width for j in range(len(names))], names, rotation=20, ha="right")
    plt.ylabel("Compressed Bytes / Original Bytes")
    plt.title("Experiment 3: Compression Ratio per File")
    plt.legend()
    plt.tight_layout()
    plt.savefig(outdir / "exp3_compression_ratio.png", dpi=200)
    plt.close()


# Main

def parse_csv_list(s: str) -> List[str]:
    return [x.strip() for x in s.split(",") if x.strip()]

def run_all(data: bytes, exp_name: str, dataset_name: str, run_id: int, level: int) -> List[MetricRow]:
    rows = []
    for pipeline in PIPELINES:
        row = run_one(data, pipeline, level=level)
        row.exp_name = exp_name
        row.dataset_name = dataset_name
        row.run_id = run_id
        rows.append(row)
    return rows

def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="huffman-experiments")
    ap.add_argument("--outdir", type=str, default="results", help="Output directory for CSV and plots")
    ap.add_argument("--runs", type=int, default=5, help="Repetitions per configuration (>=3 recommended for timing)")
    ap.add_argument("--seed", type=int, default=123, help="Base random seed")
    ap.add_argument("--level", type=int, default=9, help="zlib/lzma compression level (0-9)")
    ap.add_argument("--no_plots", action="store_true", help="Only write the CSV files")

    # Experiment toggles
    ap.add_argument("--no_exp1", action="store_true", help="Disable experiment 1 (distribution)")
    ap.add_argument("--no_exp2", action="store_true", help="Disable experiment 2 (size scaling)")

    # Experiment 1 controls
    ap.add_argument("--exp1_size_kb", type=int, default=512, help="Experiment 1 fixed file size in KB")
    ap.add_argument("--exp1_generators", type=str, default="uniform256,zipf128,repetitive90,english_like",
                    help="Comma-separated dataset generator names for experiment 1")

    # Experiment 2 controls
    ap.add_argument("--exp2_min_kb", type=int, default=4, help="Experiment 2 min size in KB (power-of-two growth)")
    ap.add_argument("--exp2_max_mb", type=int, default=8, help="Experiment 2 max size in MB (power-of-two growth)")
    ap.add_argument("--exp2_generators", type=str, default="uniform256,zipf128,repetitive90",
                    help="Comma-separated dataset generator names for experiment 2")

    # Experiment 3: real files
    ap.add_argument("--files", type=str, default="", help="Comma-separated file paths for experiment 3")
    return ap

def main(argv: List[str] = None) -> int:
    args = build_parser().parse_args(argv)
    if not 0 <= args.level <= 9:
        print(f"error: --level must be within 0..9, got {args.level}", file=sys.stderr)
        return 2

    outdir = Path(args.outdir)
    safe_mkdir(outdir)

    rows: List[MetricRow] = []
    try:
        # Experiment 1: distributions (fixed size)
        if not args.no_exp1:
            fixed_size = max(1, args.exp1_size_kb) * 1024
            for gen_name in parse_csv_list(args.exp1_generators):
                for run_id in range(1, args.runs + 1):
                    dataset_name, data = generate_dataset(gen_name, fixed_size, args.seed + run_id)
                    rows += run_all(data, "exp1_distribution", dataset_name, run_id, args.level)

        # Experiment 2: size scaling (multiple sizes, powers of 2)
        if not args.no_exp2:
            min_bytes = max(1, args.exp2_min_kb) * 1024
            max_bytes = max(1, args.exp2_max_mb) * 1024 * 1024

            sizes: List[int] = []
            s = min_bytes
            while s <= max_bytes:
                sizes.append(s)
                s *= 2

            for gen_name in parse_csv_list(args.exp2_generators):
                for size_b in sizes:
                    for run_id in range(1, args.runs + 1):
                        dataset_name, data = generate_dataset(gen_name, size_b, args.seed + 10_000 + size_b + run_id)
                        rows += run_all(data, "exp2_size_scaling", dataset_name, run_id, args.level)

        # Experiment 3: user-supplied files
        for file_name in parse_csv_list(args.files):
            path = Path(file_name)
            data = path.read_bytes()
            if not data:
                print(f"Skipping empty file {path}")
                continue
            for run_id in range(1, args.runs + 1):
                rows += run_all(data, "exp3_files", path.name, run_id, args.level)
    except (ValueError, OSError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    # Write raw and summary
    metrics_csv = outdir / "metrics.csv"
    summary_csv = outdir / "summary.csv"
    write_csv(metrics_csv, rows)
    group_summary(rows, summary_csv)

    if not args.no_plots:
        plot_experiment_1(rows, outdir)
        plot_experiment_2(rows, outdir)
        plot_experiment_3(rows, outdir)

    ok_rate = sum(r.correctness_ok for r in rows) / max(1, len(rows))
    print(f"Wrote {len(rows)} rows to {metrics_csv}")
    print(f"Wrote grouped summary to {summary_csv}")
    print(f"Correctness rate across all runs: {ok_rate:.3f}")
    if not args.no_plots:
        print("Charts saved in:", outdir.resolve())
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
