#!/usr/bin/env python3
"""
Benchmark script: recognition accuracy and latency under degraded queries.

Every song in the folder is indexed, then re-queried as short clips with
optional white noise.

Usage:
    python scripts/benchmark.py --test_dir ~/datasets/songs --n_test 50
"""

import argparse
import json
import random
import sys
import time
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

sys.path.insert(0, str(Path(__file__).parent.parent))

import numpy as np

from probefinder.audio import cut_audio, inject_noise, load_signal
from probefinder.config import AUDIO_PATTERN, ProbeConfig
from probefinder.errors import ProbeFinderError
from probefinder.log import setup_logging
from probefinder.recognizer import ProbeRecognizer


@dataclass
class TestCondition:
    name: str
    clip_length_sec: float
    snr_db: Optional[float] = None


@dataclass
class BenchmarkResults:
    approach: str
    n_db_songs: int
    n_queries: int
    index_time_ms: float
    conditions: Dict[str, dict] = field(default_factory=dict)


# Test conditions to evaluate
TEST_CONDITIONS = [
    TestCondition("clean_10s", clip_length_sec=10.0),
    TestCondition("clean_5s", clip_length_sec=5.0),
    TestCondition("clean_3s", clip_length_sec=3.0),
    TestCondition("snr_10db", clip_length_sec=10.0, snr_db=10.0),
    TestCondition("snr_5db", clip_length_sec=10.0, snr_db=5.0),
    TestCondition("snr_0db", clip_length_sec=10.0, snr_db=0.0),
]


def run_benchmark(
    recognizer: ProbeRecognizer,
    test_files: List[Path],
    conditions: List[TestCondition],
    index_time_ms: float,
    seed: int = 42,
) -> BenchmarkResults:
    results = BenchmarkResults(
        approach=recognizer.name,
        n_db_songs=recognizer.num_indexed_songs,
        n_queries=len(test_files),
        index_time_ms=index_time_ms,
    )

    for condition in conditions:
        correct = 0
        total = 0
        query_times = []

        for test_file in test_files:
            expected = test_file.stem
            total += 1
            try:
                signal = cut_audio(load_signal(test_file), condition.clip_length_sec, seed=seed)
                if condition.snr_db is not None:
                    signal = inject_noise(signal, condition.snr_db, seed=seed)

                start = time.time()
                song, _, _ = recognizer.recognize_signal(signal)
                query_times.append((time.time() - start) * 1000)
            except (ProbeFinderError, RuntimeError) as e:
                print(f"    Error {test_file.name}: {e}")
                continue

            if song == expected:
                correct += 1

        accuracy = correct / total * 100 if total > 0 else 0
        avg_time = float(np.mean(query_times)) if query_times else 0.0

        results.conditions[condition.name] = {
            "accuracy": accuracy,
            "avg_query_time_ms": avg_time,
            "correct": correct,
            "total": total,
        }

        print(f"  {condition.name}: {accuracy:.1f}% ({correct}/{total}), {avg_time:.1f}ms/query")

    return results


def main():
    parser = argparse.ArgumentParser(description='Benchmark probe fingerprinting')
    parser.add_argument('--test_dir', type=str, required=True,
                        help='Directory with audio files to index and query')
    parser.add_argument('--pattern', type=str, default=AUDIO_PATTERN)
    parser.add_argument('--n_test', type=int, default=50,
                        help='Number of test queries')
    parser.add_argument('--time_offset', type=int, default=10)
    parser.add_argument('--freq_offset', type=int, default=5)
    parser.add_argument('--selectivity', type=int, default=0,
                        help='Selectivity steps (positive = fewer, more selective probes)')
    parser.add_argument('--n_jobs', type=int, default=None,
                        help='Parallel jobs for frame spectra')
    parser.add_argument('--output', type=str, default='benchmark_results.json')
    parser.add_argument('--seed', type=int, default=42)
    args = parser.parse_args()

    setup_logging()
    random.seed(args.seed)

    test_dir = Path(args.test_dir).expanduser()
    print(f"Test: {test_dir}")

    recognizer = ProbeRecognizer(
        probe_config=ProbeConfig(args.time_offset, args.freq_offset).stepped(args.selectivity),
        n_jobs=args.n_jobs,
    )

    print("\n=== Indexing ===")
    start = time.time()
    recognizer.index_folder(test_dir, args.pattern)
    index_time = (time.time() - start) * 1000
    print(f"Indexed {recognizer.num_indexed_songs} songs in {index_time:.1f}ms")

    test_files = [p for p in sorted(test_dir.glob(args.pattern))
                  if recognizer.catalog.find(p.stem) is not None]
    random.shuffle(test_files)
    test_files = test_files[:args.n_test]
    print(f"Test files: {len(test_files)}")

    print("\n=== Probe Benchmark ===")
    results = run_benchmark(recognizer, test_files, TEST_CONDITIONS, index_time, seed=args.seed)

    with open(args.output, 'w') as f:
        json.dump(asdict(results), f, indent=2)
    print(f"\nSaved to {args.output}")


if __name__ == '__main__':
    main()
