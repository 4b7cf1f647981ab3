#!/usr/bin/env python3
"""
Song recognition CLI.

The index lives in memory, so every run indexes the catalog folder first.

Usage:
    python scripts/recognize.py --catalog ~/music --query clip.wav
    python scripts/recognize.py --catalog ~/music --query a.wav b.wav --clip-length 10 --snr 5
"""

import argparse
import logging
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from probefinder.config import AUDIO_PATTERN, FREQ_OFFSET, TIME_OFFSET, ProbeConfig
from probefinder.errors import ProbeFinderError
from probefinder.log import log_match, setup_logging
from probefinder.recognizer import ProbeRecognizer


def main():
    parser = argparse.ArgumentParser(description='ProbeFinder - Song Recognition')
    parser.add_argument('--catalog', '-c', type=str, required=True,
                        help='Folder of songs to index before matching')
    parser.add_argument('--query', '-q', type=str, nargs='+', required=True,
                        help='Path(s) to query audio files')
    parser.add_argument('--pattern', type=str, default=AUDIO_PATTERN,
                        help=f'Glob pattern for catalog files (default: {AUDIO_PATTERN})')
    parser.add_argument('--clip-length', type=float, default=None,
                        help='Clip length in seconds (for testing with shorter clips)')
    parser.add_argument('--snr', type=float, default=None,
                        help='SNR in dB for noise injection (for testing robustness)')
    parser.add_argument('--time-offset', type=int, default=TIME_OFFSET,
                        help='Probe target zone width in frames')
    parser.add_argument('--freq-offset', type=int, default=FREQ_OFFSET,
                        help='Probe target zone height in bins')
    parser.add_argument('--selectivity', type=int, default=0,
                        help='Selectivity steps from the offsets above: positive shrinks the '
                             'target zone (fewer probes), negative widens it')
    parser.add_argument('--min-match-rate', type=float, default=0.0,
                        help='Report matches below this rate as no match')
    parser.add_argument('--debug', action='store_true', help='Log per-step timings')

    args = parser.parse_args()
    log = setup_logging(logging.DEBUG if args.debug else logging.INFO)

    catalog = Path(args.catalog).expanduser()
    if not catalog.is_dir():
        log.error("Catalog folder not found: %s", catalog)
        sys.exit(1)

    recognizer = ProbeRecognizer(
        probe_config=ProbeConfig(args.time_offset, args.freq_offset).stepped(args.selectivity),
        min_match_rate=args.min_match_rate,
    )
    recognizer.index_folder(catalog, args.pattern)
    print(f"Database: {recognizer.num_indexed_songs} songs indexed")

    for query in args.query:
        query_path = Path(query).expanduser()
        if not query_path.exists():
            print(f"Error: Query file not found: {query_path}")
            continue

        print(f"\nRecognizing: {query_path.name}")
        try:
            song_name, match_rate, metadata = recognizer.recognize(
                query_path,
                clip_length_sec=args.clip_length,
                snr_db=args.snr,
                debug=args.debug,
            )
        except (ProbeFinderError, RuntimeError) as e:
            print(f"✗ Could not process {query_path.name}: {e}")
            continue

        log_match(song_name, match_rate, metadata["best_song_votes"], metadata["offset_seconds"])


if __name__ == '__main__':
    main()
